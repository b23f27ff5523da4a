"""REST query-string parsing.

Decodes nested bracket and dot notation into dictionaries and lists,
splitting comma separated values at any depth:

    where[Heading][eq]=News      -> {"where": {"Heading": {"eq": "News"}}}
    where.Heading.eq=News        -> same as above
    where[Heading][in]=a,b       -> {"where": {"Heading": {"in": ["a", "b"]}}}
    ids[]=a&ids[]=b              -> {"ids": ["a", "b"]}
    orderBy[_ranking]=RELEVANCE  -> {"orderBy": {"_ranking": "RELEVANCE"}}

and then picks the known parameters into a RestQueryParams.
"""

import logging
from typing import Any

import qs_codec

from graphrest.core.entities.auth_context import AUTH_MODES
from graphrest.core.entities.query_spec import MAX_DEPTH, MIN_DEPTH, ExpandMode
from graphrest.core.entities.rest_params import RestQueryParams
from graphrest.core.errors import BadRequestError

logger = logging.getLogger(__name__)

# Parameters read as lists of strings
LIST_PARAMS = frozenset({"ids", "locale", "fields", "fragments"})

MAX_NESTING = 10

DECODE_OPTIONS = qs_codec.DecodeOptions(
    allow_dots=True,
    comma=True,
    depth=MAX_NESTING,
)


def decode_query_string(query_string: str) -> dict[str, Any]:
    """Decode a query string into nested dictionaries and lists.

    Args:
        query_string: Raw query string without the leading ``?``.

    Returns:
        The decoded parameters.
    """
    return qs_codec.decode(query_string, DECODE_OPTIONS)


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _string_list(value: Any) -> list[str]:
    if isinstance(value, dict):
        return []
    if isinstance(value, list):
        return [item for element in value for item in _string_list(element)]
    item = str(value).strip()
    return [item] if item else []


def _integer(name: str, value: Any) -> int:
    try:
        return int(str(_first(value)))
    except ValueError as e:
        raise BadRequestError(f"Query parameter '{name}' must be an integer") from e


def _boolean(value: Any) -> bool:
    return str(_first(value)).lower() == "true"


def parse_query_string(query_string: str) -> RestQueryParams:
    """Parse a request query string into REST parameters.

    Unknown parameters are ignored. ``expand``, ``depth`` and ``mode``
    are dropped when their value is outside the accepted set.

    Args:
        query_string: Raw query string without the leading ``?``.

    Returns:
        The parsed RestQueryParams.

    Raises:
        BadRequestError: If ``limit`` or ``skip`` is not an integer.
    """
    parsed = decode_query_string(query_string)
    params = RestQueryParams()

    # Pagination
    if parsed.get("limit"):
        params.limit = _integer("limit", parsed["limit"])
    if parsed.get("skip"):
        params.skip = _integer("skip", parsed["skip"])
    if parsed.get("cursor"):
        params.cursor = str(_first(parsed["cursor"]))

    # Filtering and sorting
    if isinstance(parsed.get("where"), dict):
        params.where = parsed["where"]
    if isinstance(parsed.get("orderBy"), dict):
        params.order_by = parsed["orderBy"]

    for name in LIST_PARAMS:
        if parsed.get(name):
            values = _string_list(parsed[name])
            if values:
                setattr(params, name, values)

    if parsed.get("track"):
        params.track = str(_first(parsed["track"]))
    if "usePinned" in parsed:
        params.use_pinned = _boolean(parsed["usePinned"])
    if parsed.get("variation"):
        params.variation = str(_first(parsed["variation"]))

    if parsed.get("expand"):
        params.expand = ExpandMode.parse(str(_first(parsed["expand"])))
        if params.expand is None:
            logger.debug("Ignoring unknown expand mode: %s", parsed["expand"])

    if "depth" in parsed:
        try:
            depth = int(str(_first(parsed["depth"])))
        except ValueError:
            depth = None
        if depth is not None and MIN_DEPTH <= depth <= MAX_DEPTH:
            params.depth = depth

    # Preview support
    mode = _first(parsed.get("mode"))
    if mode in AUTH_MODES:
        params.mode = mode
    token = _first(parsed.get("previewToken")) or _first(parsed.get("preview_token"))
    if token:
        params.preview_token = str(token)
    if "useStoredQueries" in parsed:
        params.use_stored_queries = _boolean(parsed["useStoredQueries"])

    return params
