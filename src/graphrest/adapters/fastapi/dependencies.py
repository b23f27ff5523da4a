"""FastAPI dependencies resolving per-app services from ``app.state``."""

from fastapi import Request

from graphrest.core.entities.gateway_config import GatewayConfig
from graphrest.core.entities.rest_params import RestQueryParams
from graphrest.core.services.content_service import ContentService
from graphrest.core.services.introspection import SchemaIntrospectionCache
from graphrest.core.services.response_cache import ResponseCache
from graphrest.infrastructure.query_params import parse_query_string


def get_config(request: Request) -> GatewayConfig:
    return request.app.state.config


def get_content_service(request: Request) -> ContentService:
    return request.app.state.content_service


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache


def get_introspection(request: Request) -> SchemaIntrospectionCache:
    return request.app.state.introspection


def get_rest_params(request: Request) -> RestQueryParams:
    """Parse the request query string into REST parameters."""
    return parse_query_string(request.url.query)
