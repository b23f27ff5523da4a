"""graphrest - REST endpoints over a GraphQL content API.

Translates REST query-string conventions into GraphQL documents,
executes them against one upstream content API, and reshapes the
result into a REST envelope. Field selections can be auto-expanded
from schema introspection, polymorphic content areas are covered by a
fragment catalog, and successful GET responses are cached briefly.

Example:
    from graphrest import GatewayConfig, create_app

    config = GatewayConfig(
        graph_gateway="https://cg.optimizely.com",
        single_key="<single key>",
    )
    app = create_app(config)

    # GET /api/published/ArticlePage?limit=5&expand=auto&depth=1
    # GET /api/published/ArticlePage?where[Heading][eq]=News
    # GET /api/published/LandingPage?fragments=Hero,Card

Assembling a document without the HTTP layer:
    from graphrest import (
        FieldSelectionSynthesizer,
        FragmentRegistry,
        HttpGraphQLExecutor,
        QueryAssembler,
        SchemaIntrospectionCache,
    )

    executor = HttpGraphQLExecutor(config)
    synthesizer = FieldSelectionSynthesizer(SchemaIntrospectionCache(executor))
    assembler = QueryAssembler(synthesizer, FragmentRegistry())
    document = await assembler.assemble("ArticlePage", {"limit": 5}, expand="auto")
"""

from graphrest.adapters.fastapi import create_app
from graphrest.core.entities import (
    AuthContext,
    CacheEntry,
    CacheKey,
    Envelope,
    ExpandMode,
    FragmentDefinition,
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
from graphrest.infrastructure import HttpGraphQLExecutor, JsonSerializer, parse_query_string

__version__ = "0.1.0"

__all__ = [
    # Entities
    "AuthContext",
    "CacheEntry",
    "CacheKey",
    "Envelope",
    "ExpandMode",
    "FragmentDefinition",
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
    # Infrastructure
    "HttpGraphQLExecutor",
    "JsonSerializer",
    "parse_query_string",
    # Application
    "create_app",
]
