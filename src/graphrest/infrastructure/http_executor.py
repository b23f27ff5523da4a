"""HTTP GraphQL executor backed by httpx."""

import base64
import logging
import time
from collections.abc import Mapping
from typing import Any

import httpx

from graphrest.core.entities.auth_context import AuthContext
from graphrest.core.entities.gateway_config import GatewayConfig
from graphrest.core.errors import (
    GatewayTimeoutError,
    InternalServerError,
    ServiceUnavailableError,
)
from graphrest.core.interfaces.executor import GraphQLResponse

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class HttpGraphQLExecutor:
    """Executes GraphQL documents against the upstream over HTTP.

    The endpoint and headers are chosen per request from the auth
    context: preview tokens and external preview go to the gateway
    content endpoint with an Authorization header, public requests use
    the single key in the URL, and without a gateway the configured
    endpoint is used.

    Example:
        executor = HttpGraphQLExecutor(GatewayConfig.from_env())
        response = await executor.execute("{ ArticlePage { total } }")
        await executor.aclose()
    """

    def __init__(
        self,
        config: GatewayConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            config: Gateway configuration.
            client: Optional preconfigured client; one is created when
                not given.
        """
        self._config = config
        self._client = client or httpx.AsyncClient(
            timeout=config.request_timeout.total_seconds()
        )

    def resolve_target(self, auth: AuthContext | None = None) -> tuple[str, dict[str, str]]:
        """Choose the endpoint and headers for an auth context.

        Args:
            auth: Authentication context; None means public.

        Returns:
            Tuple of endpoint URL and request headers.
        """
        config = self._config
        auth = auth or AuthContext.public()
        gateway = config.graph_gateway

        if not gateway:
            return config.endpoint, config.default_headers()

        content_endpoint = f"{gateway}/content/v2"
        if auth.use_stored_queries:
            content_endpoint = f"{content_endpoint}?stored=true"

        if auth.mode == "edit" and auth.preview_token:
            headers = {
                "Authorization": f"Bearer {auth.preview_token}",
                "Content-Type": JSON_CONTENT_TYPE,
            }
        elif auth.mode == "ext_preview" and config.external_preview_configured:
            credentials = base64.b64encode(
                f"{config.app_key}:{config.secret}".encode()
            ).decode("ascii")
            headers = {
                "Authorization": f"Basic {credentials}",
                "Content-Type": JSON_CONTENT_TYPE,
            }
        elif config.single_key:
            return (
                f"{gateway}/content/v2?auth={config.single_key}",
                {"Content-Type": JSON_CONTENT_TYPE},
            )
        else:
            return config.endpoint, config.default_headers()

        if auth.use_stored_queries:
            headers["cg-stored-query"] = "template"
        return content_endpoint, headers

    async def execute(
        self,
        document: str,
        variables: Mapping[str, Any] | None = None,
        auth: AuthContext | None = None,
    ) -> GraphQLResponse:
        """Execute a GraphQL document against the upstream.

        Args:
            document: The GraphQL document text.
            variables: Variable values for the operation.
            auth: Authentication context.

        Returns:
            The GraphQL response. Responses carrying ``errors`` are
            returned, not raised.

        Raises:
            GatewayTimeoutError: If the request timed out.
            ServiceUnavailableError: If the upstream could not be reached.
            InternalServerError: For other transport failures or a
                response that is not a GraphQL JSON body.
        """
        endpoint, headers = self.resolve_target(auth)
        payload = {"query": document, "variables": dict(variables or {})}
        mode = f" [{auth.mode} mode]" if auth else ""

        start = time.perf_counter()
        try:
            response = await self._client.post(endpoint, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            logger.error("GraphQL request timed out%s: %s", mode, e)
            raise GatewayTimeoutError(f"GraphQL request failed: timeout ({e})") from e
        except (httpx.ConnectError, httpx.NetworkError) as e:
            logger.error("GraphQL upstream unreachable%s: %s", mode, e)
            raise ServiceUnavailableError(f"GraphQL request failed: fetch failed ({e})") from e
        except httpx.HTTPError as e:
            logger.error("GraphQL request failed%s: %s", mode, e)
            raise InternalServerError(f"GraphQL request failed: {e}") from e
        finally:
            elapsed = int((time.perf_counter() - start) * 1000)
            logger.debug("GraphQL query executed in %dms%s", elapsed, mode)

        try:
            body = response.json()
        except ValueError as e:
            raise InternalServerError(
                f"GraphQL request failed: invalid JSON response (status {response.status_code})"
            ) from e

        if not isinstance(body, dict):
            raise InternalServerError("GraphQL request failed: unexpected response body")

        if body.get("errors"):
            logger.warning("GraphQL errors: %s", body["errors"])
            return {"errors": body["errors"], "data": body.get("data")}

        if not response.is_success:
            raise InternalServerError(
                f"GraphQL request failed: upstream returned status {response.status_code}"
            )

        return {"data": body.get("data")}

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
