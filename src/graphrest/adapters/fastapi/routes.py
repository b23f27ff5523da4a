"""HTTP routes of the gateway."""

import json
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from graphrest.adapters.fastapi.auth import legacy_auth, preview_auth, published_auth
from graphrest.adapters.fastapi.dependencies import (
    get_config,
    get_content_service,
    get_introspection,
    get_response_cache,
    get_rest_params,
)
from graphrest.core.entities.auth_context import AuthContext
from graphrest.core.entities.gateway_config import GatewayConfig
from graphrest.core.entities.rest_params import RestQueryParams
from graphrest.core.errors import BadRequestError, GatewayError
from graphrest.core.services.content_service import ContentService
from graphrest.core.services.introspection import SchemaIntrospectionCache
from graphrest.core.services.response_cache import ResponseCache

logger = logging.getLogger(__name__)

SERVICE_NAME = "REST API Wrapper"

DEPRECATION_HEADERS = {
    "X-API-Deprecated": "true",
    "X-API-Deprecation-Message": "Use /api/published or /api/preview routes instead",
}


def _mark_response(response: Response, auth: AuthContext, deprecated: bool) -> None:
    if deprecated:
        response.headers.update(DEPRECATION_HEADERS)
    else:
        response.headers["X-Content-Mode"] = auth.mode
        response.headers["X-Auth-Method"] = auth.auth_method


def build_content_router(
    prefix: str,
    authenticate: Callable[..., Awaitable[AuthContext]],
    tags: list[str],
    deprecated: bool = False,
) -> APIRouter:
    """Build the content routes for one route family.

    Args:
        prefix: Path prefix, e.g. ``/api/published``.
        authenticate: Dependency resolving the AuthContext.
        tags: OpenAPI tags.
        deprecated: Whether responses carry the deprecation headers
            instead of the mode headers.

    Returns:
        Router with ``/contentByPath``, ``/{content_type}`` and
        ``/{content_type}/{content_id}``.
    """
    router = APIRouter(prefix=prefix, tags=tags, deprecated=deprecated)

    @router.get("/contentByPath")
    async def content_by_path(
        response: Response,
        url: str | None = None,
        base: str | None = None,
        auth: AuthContext = Depends(authenticate),
        params: RestQueryParams = Depends(get_rest_params),
        service: ContentService = Depends(get_content_service),
    ) -> dict[str, Any]:
        body = await service.get_content_by_path(url, base, params, auth)
        _mark_response(response, auth, deprecated)
        return body

    @router.get("/{content_type}")
    async def content_list(
        content_type: str,
        response: Response,
        auth: AuthContext = Depends(authenticate),
        params: RestQueryParams = Depends(get_rest_params),
        service: ContentService = Depends(get_content_service),
    ) -> dict[str, Any]:
        body = await service.list_content(content_type, params, auth)
        _mark_response(response, auth, deprecated)
        return body

    @router.get("/{content_type}/{content_id}")
    async def content_item(
        content_type: str,
        content_id: str,
        response: Response,
        auth: AuthContext = Depends(authenticate),
        params: RestQueryParams = Depends(get_rest_params),
        service: ContentService = Depends(get_content_service),
    ) -> dict[str, Any]:
        body = await service.get_content_by_id(content_type, content_id, params, auth)
        _mark_response(response, auth, deprecated)
        return body

    return router


published_router = build_content_router("/api/published", published_auth, tags=["published"])
preview_router = build_content_router("/api/preview", preview_auth, tags=["preview"])
legacy_router = build_content_router("/api", legacy_auth, tags=["legacy"], deprecated=True)


root_router = APIRouter()


@root_router.get("/")
async def index() -> dict[str, Any]:
    return {
        "message": "GraphQL REST API Wrapper",
        "version": "2.0.0",
        "endpoints": {
            "health": "/health",
            "preview": "/api/preview/:contentType",
            "published": "/api/published/:contentType",
            "graphql": "POST /graphql (raw GraphQL passthrough)",
            "legacy": "/api/:contentType (deprecated)",
            "cache": "/cache/stats",
        },
    }


health_router = APIRouter(prefix="/health", tags=["health"])


@health_router.get("")
async def health(config: GatewayConfig = Depends(get_config)) -> dict[str, Any]:
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "graphql": {"endpoint": config.endpoint},
    }


@health_router.get("/test")
async def health_test(
    config: GatewayConfig = Depends(get_config),
    service: ContentService = Depends(get_content_service),
) -> JSONResponse:
    """Check connectivity by running a minimal schema query upstream."""
    try:
        data = await service.ping()
    except GatewayError as e:
        logger.error("GraphQL connection test failed: %s", e)
        return JSONResponse(
            {
                "status": "GraphQL connection failed",
                "endpoint": config.endpoint,
                "error": e.message,
            },
            status_code=503,
        )
    return JSONResponse(
        {
            "status": "GraphQL connection successful",
            "endpoint": config.endpoint,
            "response": data,
        }
    )


graphql_router = APIRouter(prefix="/graphql", tags=["graphql"])


@graphql_router.post("")
async def graphql_passthrough(
    request: Request,
    service: ContentService = Depends(get_content_service),
) -> JSONResponse:
    """Execute a raw GraphQL document upstream."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise BadRequestError("Request body must be valid JSON") from e
    if not isinstance(body, dict):
        raise BadRequestError('Missing or invalid "query" field in request body')

    status_code, payload = await service.execute_raw(body.get("query"), body.get("variables"))
    return JSONResponse(payload, status_code=status_code)


@graphql_router.get("")
async def graphql_info() -> dict[str, Any]:
    return {
        "message": "GraphQL Passthrough Endpoint",
        "usage": {
            "method": "POST",
            "contentType": "application/json",
            "body": {
                "query": "string (required) - GraphQL query",
                "variables": "object (optional) - GraphQL variables",
            },
            "example": {
                "query": "query { ArticlePage(limit: 5) { items { _id Heading } } }",
                "variables": {},
            },
        },
    }


cache_router = APIRouter(prefix="/cache", tags=["cache"])


@cache_router.get("/stats")
async def cache_stats(
    response_cache: ResponseCache = Depends(get_response_cache),
    introspection: SchemaIntrospectionCache = Depends(get_introspection),
) -> dict[str, Any]:
    return {
        "responseCache": {**response_cache.stats, "ttl": response_cache.ttl_seconds},
        "introspection": {
            "size": len(introspection),
            "fetches": introspection.fetch_count,
        },
    }


@cache_router.post("/clear")
async def cache_clear(
    response_cache: ResponseCache = Depends(get_response_cache),
    introspection: SchemaIntrospectionCache = Depends(get_introspection),
) -> dict[str, str]:
    """Clear the response cache and the introspection cache."""
    response_cache.clear()
    introspection.clear()
    logger.info("Caches cleared")
    return {"status": "cleared"}
