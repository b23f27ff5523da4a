"""FastAPI adapter for graphrest."""

from graphrest.adapters.fastapi.app import configure_logging, create_app, main
from graphrest.adapters.fastapi.middleware import ResponseCacheMiddleware

__all__ = [
    "create_app",
    "configure_logging",
    "main",
    "ResponseCacheMiddleware",
]
