"""Response cache middleware for the REST routes."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from graphrest.core.services.response_cache import ResponseCache
from graphrest.infrastructure.serializers.json import JsonSerializer, SerializationError

logger = logging.getLogger(__name__)

# Response headers recomputed on replay rather than stored
_UNSTORED_HEADERS = frozenset(
    {"content-length", "content-type", "cache-control", "x-cache", "x-cache-age"}
)

# Query parameters carrying a preview credential
CREDENTIAL_PARAMS = ("previewToken", "preview_token")


def carries_credentials(request: Request) -> bool:
    """Check if a request authenticates as a particular caller."""
    if "authorization" in request.headers:
        return True
    return any(request.query_params.get(name) for name in CREDENTIAL_PARAMS)


class ResponseCacheMiddleware(BaseHTTPMiddleware):
    """Serves and stores GET responses under a path prefix.

    A fresh entry is replayed with ``X-Cache: HIT``. Otherwise the
    request runs and a 2xx JSON body is stored and marked with
    ``X-Cache: MISS``. Bodies that are not JSON are passed through
    uncached.

    Requests with an Authorization header or a preview token bypass the
    cache in both directions.
    """

    def __init__(
        self,
        app: ASGIApp,
        cache: ResponseCache,
        serializer: JsonSerializer | None = None,
        path_prefix: str = "/api/",
    ) -> None:
        super().__init__(app)
        self._cache = cache
        self._serializer = serializer or JsonSerializer()
        self._path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method != "GET" or not request.url.path.startswith(self._path_prefix):
            return await call_next(request)
        if carries_credentials(request):
            logger.debug("Bypassing response cache for credentialed request")
            return await call_next(request)

        url = str(request.url)
        hit = self._cache.lookup(request.method, url)
        if hit is not None:
            logger.debug("Response cache hit for %s (age %ds)", url, hit.age)
            return Response(
                content=self._serializer.serialize(hit.payload),
                media_type=self._serializer.media_type,
                headers=hit.headers,
            )

        response = await call_next(request)
        if not 200 <= response.status_code < 300:
            return response

        body = await _read_body(response)
        replay = Response(
            content=body,
            status_code=response.status_code,
            headers=dict(response.headers),
        )

        try:
            payload = self._serializer.deserialize(body)
        except SerializationError as e:
            logger.warning("Could not cache response for %s: %s", url, e)
            return replay

        headers = {
            name: value
            for name, value in response.headers.items()
            if name.lower() not in _UNSTORED_HEADERS
        }
        self._cache.store(request.method, url, payload, headers, response.status_code)
        replay.headers.update(self._cache.miss_headers())
        return replay


async def _read_body(response: Response) -> bytes:
    body = b""
    body_iterator = getattr(response, "body_iterator", None)
    if body_iterator is not None:
        async for chunk in body_iterator:
            body += chunk.encode() if isinstance(chunk, str) else chunk
    elif hasattr(response, "body"):
        body = bytes(response.body)
    return body
