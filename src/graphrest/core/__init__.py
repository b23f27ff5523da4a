"""Core domain layer for graphrest."""

from graphrest.core.entities import (
    AuthContext,
    GatewayConfig,
    QuerySpec,
    RestQueryParams,
    TypeShape,
)
from graphrest.core.errors import GatewayError, classify_error
from graphrest.core.interfaces import IGraphQLExecutor
from graphrest.core.services import (
    ContentService,
    FieldSelectionSynthesizer,
    FragmentRegistry,
    QueryAssembler,
    ResponseCache,
    SchemaIntrospectionCache,
)

__all__ = [
    # Entities
    "AuthContext",
    "GatewayConfig",
    "QuerySpec",
    "RestQueryParams",
    "TypeShape",
    # Errors
    "GatewayError",
    "classify_error",
    # Interfaces
    "IGraphQLExecutor",
    # Services
    "ContentService",
    "FieldSelectionSynthesizer",
    "FragmentRegistry",
    "QueryAssembler",
    "ResponseCache",
    "SchemaIntrospectionCache",
]
