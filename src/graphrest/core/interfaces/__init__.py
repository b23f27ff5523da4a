"""Core interfaces (Protocol classes) for graphrest."""

from graphrest.core.interfaces.executor import (
    GraphQLErrorPayload,
    GraphQLResponse,
    IGraphQLExecutor,
)

__all__ = [
    "GraphQLErrorPayload",
    "GraphQLResponse",
    "IGraphQLExecutor",
]
