"""Domain entities for graphrest."""

from graphrest.core.entities.auth_context import AUTH_MODES, AuthContext, AuthMode
from graphrest.core.entities.cache_entry import CacheEntry
from graphrest.core.entities.cache_key import CacheKey
from graphrest.core.entities.fragment import FragmentDefinition
from graphrest.core.entities.gateway_config import GatewayConfig
from graphrest.core.entities.query_spec import (
    MAX_DEPTH,
    MIN_DEPTH,
    VARIABLE_NAMES,
    Envelope,
    ExpandMode,
    JSONValue,
    QuerySpec,
    SelectionStrategy,
)
from graphrest.core.entities.rest_params import RestQueryParams
from graphrest.core.entities.type_shape import FieldDescriptor, FieldKind, TypeShape

__all__ = [
    "AUTH_MODES",
    "AuthContext",
    "AuthMode",
    "CacheEntry",
    "CacheKey",
    "FragmentDefinition",
    "GatewayConfig",
    "MAX_DEPTH",
    "MIN_DEPTH",
    "VARIABLE_NAMES",
    "Envelope",
    "ExpandMode",
    "JSONValue",
    "QuerySpec",
    "SelectionStrategy",
    "RestQueryParams",
    "FieldDescriptor",
    "FieldKind",
    "TypeShape",
]
