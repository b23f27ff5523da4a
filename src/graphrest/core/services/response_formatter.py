"""Reshapes GraphQL responses into the REST envelope."""

from typing import Any

from graphrest.core.errors import NotFoundError, classify_error
from graphrest.core.interfaces.executor import GraphQLResponse

ENVELOPE_KEYS: tuple[str, ...] = (
    "items",
    "item",
    "total",
    "cursor",
    "facets",
    "autocomplete",
)


def format_graphql_response(
    response: GraphQLResponse,
    content_type: str,
    execution_time_ms: int,
) -> dict[str, Any]:
    """Format a GraphQL response as a REST response body.

    Args:
        response: The upstream GraphQL response.
        content_type: Root query field holding the envelope.
        execution_time_ms: Elapsed request time in milliseconds.

    Returns:
        The REST body with the envelope members present upstream and
        ``meta`` (contentType, executionTime).

    Raises:
        GatewayError: Classified from the first upstream GraphQL error.
        NotFoundError: If no data came back for the content type.
    """
    errors = response.get("errors")
    if errors:
        raise classify_error(errors[0].get("message") or "GraphQL query failed")

    data = (response.get("data") or {}).get(content_type)
    if not data:
        raise NotFoundError(f"No data returned for content type: {content_type}")

    body: dict[str, Any] = {
        key: data[key] for key in ENVELOPE_KEYS if key in data
    }
    body["meta"] = {
        "contentType": content_type,
        "executionTime": execution_time_ms,
    }
    return body
