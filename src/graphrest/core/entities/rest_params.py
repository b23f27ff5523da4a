"""Parsed REST query parameters."""

from dataclasses import dataclass, field
from typing import Any

from graphrest.core.entities.auth_context import AuthMode
from graphrest.core.entities.query_spec import ExpandMode


@dataclass
class RestQueryParams:
    """REST query-string vocabulary after parsing.

    Every member is optional; absent parameters stay None.
    """

    # Pagination
    limit: int | None = None
    skip: int | None = None
    cursor: str | None = None

    # Filtering and sorting, passed through opaquely
    where: dict[str, Any] | None = None
    order_by: dict[str, Any] | None = None

    ids: list[str] | None = None
    locale: list[str] | None = None

    track: str | None = None
    use_pinned: bool | None = None
    variation: str | None = None

    # Field selection
    fields: list[str] = field(default_factory=list)
    fragments: list[str] = field(default_factory=list)
    expand: ExpandMode | None = None
    depth: int | None = None

    # Preview support
    mode: AuthMode | None = None
    preview_token: str | None = None
    use_stored_queries: bool | None = None
