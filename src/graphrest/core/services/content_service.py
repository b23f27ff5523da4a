"""Content service - runs one REST content request end to end."""

import dataclasses
import json
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from graphrest.core.entities.auth_context import AuthContext
from graphrest.core.entities.rest_params import RestQueryParams
from graphrest.core.errors import BadRequestError, NotFoundError
from graphrest.core.interfaces.executor import GraphQLResponse, IGraphQLExecutor
from graphrest.core.services.query_assembler import (
    BASE_ITEM_FIELDS,
    CONTENT_ROOT_TYPE,
    QueryAssembler,
)
from graphrest.core.services.response_formatter import format_graphql_response
from graphrest.core.services.variables import to_graphql_variables

logger = logging.getLogger(__name__)

SCHEMA_PING_QUERY = "{ __schema { queryType { name } } }"


class ContentService:
    """Assembles, executes and formats content queries.

    Composes the query assembler with the upstream executor. Errors are
    raised as GatewayError subclasses for the HTTP layer to render.
    """

    def __init__(
        self,
        assembler: QueryAssembler,
        executor: IGraphQLExecutor,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        """Initialize the content service.

        Args:
            assembler: Builds GraphQL documents.
            executor: Runs documents against the upstream API.
            clock: Clock used to measure execution time.
        """
        self._assembler = assembler
        self._executor = executor
        self._clock = clock

    async def list_content(
        self,
        content_type: str,
        params: RestQueryParams,
        auth: AuthContext | None = None,
    ) -> dict[str, Any]:
        """List items of a content type.

        Args:
            content_type: The content type, e.g. ``ArticlePage``.
            params: Parsed REST parameters.
            auth: Upstream authentication context.

        Returns:
            The REST response body.
        """
        start = self._clock()
        variables = to_graphql_variables(params)
        document = await self._assembler.assemble(
            content_type,
            variables,
            fields=params.fields,
            fragments=params.fragments,
            expand=params.expand,
            depth=params.depth or 0,
        )
        response = await self._execute(document, variables, auth)
        return format_graphql_response(response, content_type, self._elapsed_ms(start))

    async def get_content_by_id(
        self,
        content_type: str,
        content_id: str,
        params: RestQueryParams,
        auth: AuthContext | None = None,
    ) -> dict[str, Any]:
        """Get a single item of a content type by id.

        Raises:
            NotFoundError: If no item has the id.
        """
        fields = params.fields
        if fields:
            fields = list(dict.fromkeys([*BASE_ITEM_FIELDS, *fields]))
        params = dataclasses.replace(params, ids=[content_id], fields=fields)

        body = await self.list_content(content_type, params, auth)
        items = body.get("items") or []
        if not items:
            raise NotFoundError(f"{content_type} with id '{content_id}' not found")

        body["item"] = items[0]
        return body

    async def get_content_by_path(
        self,
        url: str | None,
        base: str | None,
        params: RestQueryParams,
        auth: AuthContext | None = None,
    ) -> dict[str, Any]:
        """Resolve a content item by its URL path.

        Both the path with and without a trailing slash are matched
        against the default and hierarchical URLs.

        Raises:
            BadRequestError: If ``url`` is missing.
            NotFoundError: If no content lives at the path.
        """
        if not url:
            raise BadRequestError("Missing required query parameter: url")

        start = self._clock()
        url_no_slash = url[:-1] if url.endswith("/") else url
        url_with_slash = url if url.endswith("/") else f"{url}/"

        document = await self._assembler.assemble_content_by_path(
            fields=params.fields,
            expand=params.expand,
            depth=params.depth or 0,
        )
        variables = {"base": base or "", "url": url_with_slash, "urlNoSlash": url_no_slash}
        response = await self._execute(document, variables, auth)

        body = format_graphql_response(
            response, CONTENT_ROOT_TYPE, self._elapsed_ms(start)
        )
        if not body.get("item"):
            raise NotFoundError(f"No content found for path: {url}")
        return body

    async def execute_raw(
        self,
        query: Any,
        variables: Mapping[str, Any] | None = None,
    ) -> tuple[int, dict[str, Any]]:
        """Pass a raw GraphQL document through to the upstream.

        Returns:
            Tuple of HTTP status and body. GraphQL errors are returned
            with status 400 alongside any partial data.

        Raises:
            BadRequestError: If ``query`` is missing or not a string.
        """
        if not query or not isinstance(query, str):
            raise BadRequestError('Missing or invalid "query" field in request body')

        start = self._clock()
        response = await self._execute(query, dict(variables or {}), None)
        if response.get("errors"):
            return 400, {"errors": response["errors"], "data": response.get("data")}

        return 200, {
            "data": response.get("data"),
            "meta": {"executionTime": self._elapsed_ms(start)},
        }

    async def ping(self) -> dict[str, Any] | None:
        """Run a minimal schema query to check upstream connectivity.

        Returns:
            The response data.
        """
        response = await self._executor.execute(SCHEMA_PING_QUERY, {})
        return response.get("data")

    async def _execute(
        self,
        document: str,
        variables: Mapping[str, Any],
        auth: AuthContext | None,
    ) -> GraphQLResponse:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("GraphQL Query:\n%s", document)
            logger.debug("GraphQL Variables: %s", json.dumps(variables, indent=2))
        return await self._executor.execute(document, variables, auth)

    def _elapsed_ms(self, start: float) -> int:
        return int((self._clock() - start) * 1000)
