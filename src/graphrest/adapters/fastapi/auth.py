"""Authentication-mode detection for the content routes.

Each route family resolves an AuthContext through one of these
dependencies:

- published: always public with the single key
- preview: Bearer token, previewToken parameter, Basic auth, then the
  external preview default, in that order
- legacy: mode and preview token taken from the query string
"""

import logging

from fastapi import Depends, Request

from graphrest.adapters.fastapi.dependencies import get_config, get_rest_params
from graphrest.core.entities.auth_context import AuthContext
from graphrest.core.entities.gateway_config import GatewayConfig
from graphrest.core.entities.rest_params import RestQueryParams
from graphrest.core.errors import ConfigurationError, UnauthorizedError

logger = logging.getLogger(__name__)

SUPPORTED_PREVIEW_METHODS = [
    "Authorization: Bearer <token> (from CMS editor)",
    "Authorization: Basic <base64> (external preview)",
    "?previewToken=<token> (query parameter)",
]


async def published_auth(
    config: GatewayConfig = Depends(get_config),
    params: RestQueryParams = Depends(get_rest_params),
) -> AuthContext:
    """Resolve published routes to public mode.

    Any supplied Authorization header or preview token is ignored.

    Raises:
        ConfigurationError: If the gateway or single key is missing.
    """
    if not (config.graph_gateway and config.single_key):
        raise ConfigurationError(
            "Published API requires OPTIMIZELY_GRAPH_SINGLE_KEY and "
            "OPTIMIZELY_GRAPH_GATEWAY to be configured"
        )
    return AuthContext.public(use_stored_queries=bool(params.use_stored_queries))


async def preview_auth(
    request: Request,
    config: GatewayConfig = Depends(get_config),
    params: RestQueryParams = Depends(get_rest_params),
) -> AuthContext:
    """Detect how a preview request authenticates.

    Raises:
        UnauthorizedError: If no usable credentials were supplied.
    """
    authorization = request.headers.get("Authorization", "")
    stored = bool(params.use_stored_queries)

    if authorization.startswith("Bearer "):
        return AuthContext(
            mode="edit",
            preview_token=authorization[len("Bearer ") :],
            auth_method="bearer-token",
            use_stored_queries=stored,
        )

    if params.preview_token:
        return AuthContext(
            mode="edit",
            preview_token=params.preview_token,
            auth_method="query-param-token",
            use_stored_queries=stored,
        )

    if authorization.startswith("Basic "):
        if not config.external_preview_configured:
            raise UnauthorizedError("External preview is not enabled or not configured")
        return AuthContext(mode="ext_preview", auth_method="basic-auth", use_stored_queries=stored)

    if config.external_preview_configured:
        return AuthContext(
            mode="ext_preview",
            auth_method="ext-preview-default",
            use_stored_queries=stored,
        )

    raise UnauthorizedError(
        "Preview access requires authentication. "
        "Provide Authorization header or previewToken parameter.",
        details={"supportedMethods": SUPPORTED_PREVIEW_METHODS},
    )


async def legacy_auth(
    params: RestQueryParams = Depends(get_rest_params),
) -> AuthContext:
    """Resolve legacy routes from the ``mode`` and ``previewToken`` parameters."""
    logger.warning(
        "DEPRECATED: Legacy /api routes are deprecated. "
        "Use /api/published or /api/preview instead."
    )
    return AuthContext(
        mode=params.mode or "public",
        preview_token=params.preview_token,
        auth_method="query-param" if params.mode else "single-key",
        use_stored_queries=bool(params.use_stored_queries),
    )
