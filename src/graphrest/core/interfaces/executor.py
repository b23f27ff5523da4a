"""Upstream GraphQL executor interface."""

from collections.abc import Mapping
from typing import Any, Protocol, TypedDict

from graphrest.core.entities.auth_context import AuthContext


class GraphQLErrorPayload(TypedDict, total=False):
    """One entry of a GraphQL ``errors`` list."""

    message: str
    locations: list[dict[str, int]]
    path: list[str | int]
    extensions: dict[str, Any]


class GraphQLResponse(TypedDict, total=False):
    """Raw GraphQL response: ``data``, ``errors`` or both."""

    data: dict[str, Any] | None
    errors: list[GraphQLErrorPayload]


class IGraphQLExecutor(Protocol):
    """Contract for executing documents against the upstream GraphQL API.

    Implementations own the wire transport. GraphQL-level errors are
    returned in the response; transport failures are raised.
    """

    async def execute(
        self,
        document: str,
        variables: Mapping[str, Any] | None = None,
        auth: AuthContext | None = None,
    ) -> GraphQLResponse:
        """Execute a GraphQL document.

        Args:
            document: The GraphQL document text.
            variables: Variable values for the operation.
            auth: How to authenticate; None uses the default endpoint.

        Returns:
            The GraphQL response with ``data`` and/or ``errors``.

        Raises:
            GatewayTimeoutError: If the upstream timed out.
            ServiceUnavailableError: If the upstream could not be reached.
            GatewayError: For any other transport failure.
        """
        ...
