"""Transforms parsed REST parameters into GraphQL variables."""

from typing import Any

from graphrest.core.entities.rest_params import RestQueryParams


def to_graphql_variables(params: RestQueryParams) -> dict[str, Any]:
    """Build the GraphQL variables for a content query.

    Filters and sort orders are passed through untouched. Empty strings
    and empty lists are treated as absent.

    Args:
        params: Parsed REST parameters.

    Returns:
        Variables keyed by their GraphQL names.
    """
    variables: dict[str, Any] = {}

    # Pagination
    if params.limit is not None:
        variables["limit"] = params.limit
    if params.skip is not None:
        variables["skip"] = params.skip
    if params.cursor:
        variables["cursor"] = params.cursor

    if params.ids:
        variables["ids"] = list(params.ids)
    if params.where:
        variables["where"] = params.where
    if params.order_by:
        variables["orderBy"] = params.order_by
    if params.locale:
        variables["locale"] = list(params.locale)

    if params.track:
        variables["track"] = params.track
    if params.use_pinned is not None:
        variables["usePinned"] = params.use_pinned
    if params.variation:
        variables["variation"] = params.variation

    return variables
