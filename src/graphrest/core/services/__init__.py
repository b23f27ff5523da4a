"""Domain services for graphrest."""

from graphrest.core.services.content_service import ContentService
from graphrest.core.services.field_synthesizer import FieldSelectionSynthesizer
from graphrest.core.services.fragment_registry import FRAGMENTS, FragmentRegistry
from graphrest.core.services.introspection import SchemaIntrospectionCache
from graphrest.core.services.query_assembler import QueryAssembler
from graphrest.core.services.response_cache import CacheHit, ResponseCache
from graphrest.core.services.response_formatter import format_graphql_response
from graphrest.core.services.variables import to_graphql_variables

__all__ = [
    # Query building
    "SchemaIntrospectionCache",
    "FieldSelectionSynthesizer",
    "FragmentRegistry",
    "FRAGMENTS",
    "QueryAssembler",
    # Request handling
    "ContentService",
    "format_graphql_response",
    "to_graphql_variables",
    # Response caching
    "ResponseCache",
    "CacheHit",
]
