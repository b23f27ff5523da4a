"""Gateway configuration entity."""

import os
from dataclasses import dataclass, field
from datetime import timedelta

DEFAULT_GRAPHQL_ENDPOINT = "http://localhost:4000/graphql"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() == "true"


def _env_seconds(name: str, default: float) -> timedelta:
    value = os.getenv(name)
    return timedelta(seconds=float(value) if value else default)


@dataclass
class GatewayConfig:
    """Gateway configuration.

    Holds the upstream GraphQL connection settings, the credentials used
    by each authentication mode, and the tuning knobs of the response
    cache and the schema introspection cache.

    Upstream endpoint resolution:
        When both ``graph_gateway`` and ``single_key`` are set the content
        endpoint of the gateway is used, authenticated by the single key.
        Otherwise requests go to ``graphql_endpoint``.
    """

    graph_gateway: str | None = None
    single_key: str | None = None
    app_key: str | None = None
    secret: str | None = None
    api_key: str | None = None
    graphql_endpoint: str = DEFAULT_GRAPHQL_ENDPOINT
    external_preview_enabled: bool = False

    # Upstream transport
    request_timeout: timedelta = field(default_factory=lambda: timedelta(seconds=30))

    # Response cache
    response_cache_ttl: timedelta = field(default_factory=lambda: timedelta(seconds=120))
    response_cache_sweep_interval: timedelta = field(
        default_factory=lambda: timedelta(seconds=60)
    )
    response_cache_max_entries: int = 10000

    # Schema introspection cache
    introspection_ttl: timedelta = field(default_factory=lambda: timedelta(hours=24))
    introspection_max_entries: int = 1024

    debug: bool = False
    log_level: str = "INFO"
    port: int = 3000

    @property
    def endpoint(self) -> str:
        """Return the default upstream endpoint."""
        if self.graph_gateway and self.single_key:
            return f"{self.graph_gateway}/content/v2?auth={self.single_key}"
        return self.graphql_endpoint

    @property
    def external_preview_configured(self) -> bool:
        """Check if external preview (basic auth) can be used."""
        return bool(self.external_preview_enabled and self.app_key and self.secret)

    def default_headers(self) -> dict[str, str]:
        """Build the headers sent with requests to the default endpoint.

        Returns:
            Header mapping including any configured API credentials.
        """
        headers = {"Content-Type": "application/json"}
        if self.app_key:
            headers["X-Graph-App-Key"] = self.app_key
        if self.secret:
            headers["X-Graph-Secret"] = self.secret
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        """Create a configuration from environment variables.

        Returns:
            A new GatewayConfig populated from the process environment.
        """
        return cls(
            graph_gateway=os.getenv("OPTIMIZELY_GRAPH_GATEWAY"),
            single_key=os.getenv("OPTIMIZELY_GRAPH_SINGLE_KEY"),
            app_key=os.getenv("OPTIMIZELY_GRAPH_APP_KEY"),
            secret=os.getenv("OPTIMIZELY_GRAPH_SECRET"),
            api_key=os.getenv("GRAPHQL_API_KEY"),
            graphql_endpoint=os.getenv("GRAPHQL_ENDPOINT", DEFAULT_GRAPHQL_ENDPOINT),
            external_preview_enabled=_env_bool("EXTERNAL_PREVIEW_ENABLED"),
            request_timeout=_env_seconds("GRAPHQL_TIMEOUT", 30),
            response_cache_ttl=_env_seconds("RESPONSE_CACHE_TTL", 120),
            response_cache_sweep_interval=_env_seconds(
                "RESPONSE_CACHE_SWEEP_INTERVAL", 60
            ),
            response_cache_max_entries=int(
                os.getenv("RESPONSE_CACHE_MAX_ENTRIES", "10000")
            ),
            introspection_ttl=_env_seconds("INTROSPECTION_TTL", 24 * 60 * 60),
            debug=_env_bool("DEBUG"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            port=int(os.getenv("PORT", "3000")),
        )
