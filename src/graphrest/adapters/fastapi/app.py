"""FastAPI application factory and process entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from dotenv import find_dotenv, load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from graphrest.adapters.fastapi.middleware import ResponseCacheMiddleware
from graphrest.adapters.fastapi.routes import (
    cache_router,
    graphql_router,
    health_router,
    legacy_router,
    preview_router,
    published_router,
    root_router,
)
from graphrest.core.entities.gateway_config import GatewayConfig
from graphrest.core.errors import GatewayError, classify_error
from graphrest.core.interfaces.executor import IGraphQLExecutor
from graphrest.core.services.content_service import ContentService
from graphrest.core.services.field_synthesizer import FieldSelectionSynthesizer
from graphrest.core.services.fragment_registry import FragmentRegistry
from graphrest.core.services.introspection import SchemaIntrospectionCache
from graphrest.core.services.query_assembler import QueryAssembler
from graphrest.core.services.response_cache import ResponseCache
from graphrest.infrastructure.http_executor import HttpGraphQLExecutor

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the gateway process."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def load_environment() -> bool:
    """Load a ``.env`` file from the working directory into the environment.

    Variables already set in the process environment take precedence.

    Returns:
        True if a file was found and loaded.
    """
    return load_dotenv(find_dotenv(usecwd=True))


async def handle_gateway_error(request: Request, exc: Exception) -> JSONResponse:
    """Render a GatewayError as its JSON error body."""
    error = exc if isinstance(exc, GatewayError) else classify_error(str(exc))
    config: GatewayConfig = request.app.state.config

    if error.status_code >= 500:
        logger.error("%s on %s: %s", error.error_type, request.url.path, error.message)
    else:
        logger.info("%s on %s: %s", error.error_type, request.url.path, error.message)

    return JSONResponse(error.to_dict(include_details=config.debug), status_code=error.status_code)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Classify an unexpected exception by its message and render it."""
    logger.exception("Unhandled error on %s", request.url.path)
    return await handle_gateway_error(request, classify_error(str(exc)))


def create_app(
    config: GatewayConfig | None = None,
    executor: IGraphQLExecutor | None = None,
) -> FastAPI:
    """Create the gateway application.

    Services are built per application and stored on ``app.state``.

    Args:
        config: Gateway configuration; read from the environment (and
                a ``.env`` file in the working directory) when not given.
        executor: Upstream executor; an HttpGraphQLExecutor owned by the
            app is created when not given.

    Returns:
        The configured FastAPI application.
    """
    if config is None:
        load_environment()
        config = GatewayConfig.from_env()
    configure_logging(config.log_level)

    owned_executor: HttpGraphQLExecutor | None = None
    if executor is None:
        owned_executor = HttpGraphQLExecutor(config)
        executor = owned_executor

    introspection = SchemaIntrospectionCache(
        executor,
        ttl=config.introspection_ttl,
        maxsize=config.introspection_max_entries,
    )
    assembler = QueryAssembler(FieldSelectionSynthesizer(introspection), FragmentRegistry())
    response_cache = ResponseCache(
        ttl=config.response_cache_ttl,
        sweep_interval=config.response_cache_sweep_interval,
        maxsize=config.response_cache_max_entries,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info("GraphQL endpoint: %s", config.endpoint)
        response_cache.start()
        try:
            yield
        finally:
            await response_cache.stop()
            if owned_executor is not None:
                await owned_executor.aclose()

    app = FastAPI(
        title="graphrest",
        description="REST endpoints over a GraphQL content API",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.introspection = introspection
    app.state.response_cache = response_cache
    app.state.content_service = ContentService(assembler, executor)

    app.add_middleware(ResponseCacheMiddleware, cache=response_cache)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GatewayError, handle_gateway_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    # Preview and published before legacy so /api/{content_type} cannot shadow them
    app.include_router(root_router)
    app.include_router(health_router)
    app.include_router(published_router)
    app.include_router(preview_router)
    app.include_router(legacy_router)
    app.include_router(graphql_router)
    app.include_router(cache_router)

    return app


def main() -> None:
    """Run the gateway with uvicorn."""
    load_environment()
    config = GatewayConfig.from_env()
    app = create_app(config)
    uvicorn.run(app, host="0.0.0.0", port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
