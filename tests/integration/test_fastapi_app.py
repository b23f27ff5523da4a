"""Integration tests for the FastAPI gateway application."""

import os

import pytest
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from fastapi.testclient import TestClient

from graphrest.adapters.fastapi.app import create_app
from graphrest.adapters.fastapi.auth import SUPPORTED_PREVIEW_METHODS
from graphrest.adapters.fastapi.middleware import ResponseCacheMiddleware
from graphrest.adapters.fastapi.routes import DEPRECATION_HEADERS
from graphrest.core.entities.gateway_config import GatewayConfig
from graphrest.core.errors import ServiceUnavailableError
from graphrest.core.services.response_cache import ResponseCache

GATEWAY = "https://cg.example.com"

ARTICLES = {
    "data": {
        "ArticlePage": {
            "items": [{"_id": "a1", "Heading": "News"}],
            "total": 1,
        }
    }
}


@pytest.fixture
def config() -> GatewayConfig:
    """Create a gateway configuration for testing."""
    return GatewayConfig(graph_gateway=GATEWAY, single_key="k1")


@pytest.fixture
def client(config, executor):
    """Test client over an app wired to the stub executor."""
    executor.response = ARTICLES
    with TestClient(create_app(config, executor=executor)) as test_client:
        yield test_client


class TestPublishedRoutes:
    """Tests for /api/published."""

    def test_list(self, client, executor) -> None:
        """Test listing a content type returns the envelope and mode headers."""
        response = client.get("/api/published/ArticlePage?limit=1&fields=_id,Heading")

        assert response.status_code == 200
        body = response.json()
        assert body["items"] == [{"_id": "a1", "Heading": "News"}]
        assert body["total"] == 1
        assert body["meta"]["contentType"] == "ArticlePage"
        assert response.headers["X-Content-Mode"] == "public"
        assert response.headers["X-Auth-Method"] == "single-key"
        _, variables, auth = executor.calls[-1]
        assert variables == {"limit": 1}
        assert auth.mode == "public"

    def test_authorization_ignored(self, client, executor) -> None:
        """Test credentials sent to published routes are ignored."""
        client.get("/api/published/ArticlePage", headers={"Authorization": "Bearer tok"})

        _, _, auth = executor.calls[-1]
        assert auth.mode == "public"
        assert auth.preview_token is None

    def test_by_id(self, client, executor) -> None:
        """Test fetching one item by id."""
        response = client.get("/api/published/ArticlePage/a1")

        assert response.status_code == 200
        assert response.json()["item"] == {"_id": "a1", "Heading": "News"}
        _, variables, _ = executor.calls[-1]
        assert variables == {"ids": ["a1"]}

    def test_by_id_not_found(self, client, executor) -> None:
        """Test a missing id gives a 404 error body."""
        executor.response = {"data": {"ArticlePage": {"items": [], "total": 0}}}

        response = client.get("/api/published/ArticlePage/missing")

        assert response.status_code == 404
        assert response.json() == {
            "error": "NotFound",
            "message": "ArticlePage with id 'missing' not found",
            "statusCode": 404,
        }

    def test_invalid_content_type(self, client, executor) -> None:
        """Test an unknown content type gives a 400."""
        executor.response = {
            "errors": [{"message": 'Cannot query field "Nope" on type "Query".'}]
        }

        response = client.get("/api/published/Nope")

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidContentType"

    def test_upstream_unreachable(self, client, executor) -> None:
        """Test an unreachable upstream gives a 503."""
        executor.error = ServiceUnavailableError("GraphQL request failed: fetch failed")

        response = client.get("/api/published/ArticlePage")

        assert response.status_code == 503
        assert response.json()["error"] == "ServiceUnavailable"

    def test_content_by_path(self, client, executor) -> None:
        """Test resolving content by URL path."""
        executor.response = {"data": {"_Content": {"item": {"_id": "p1"}}}}

        response = client.get("/api/published/contentByPath?url=/en/news")

        assert response.status_code == 200
        assert response.json()["item"] == {"_id": "p1"}
        _, variables, _ = executor.calls[-1]
        assert variables == {"base": "", "url": "/en/news/", "urlNoSlash": "/en/news"}

    def test_content_by_path_requires_url(self, client) -> None:
        """Test contentByPath without url gives a 400."""
        response = client.get("/api/published/contentByPath")

        assert response.status_code == 400
        assert response.json()["message"] == "Missing required query parameter: url"

    def test_invalid_limit(self, client) -> None:
        """Test a non-integer limit gives a 400."""
        response = client.get("/api/published/ArticlePage?limit=many")

        assert response.status_code == 400
        assert response.json()["error"] == "BadRequest"

    def test_requires_configuration(self, executor) -> None:
        """Test published routes need the gateway and single key."""
        with TestClient(create_app(GatewayConfig(), executor=executor)) as client:
            response = client.get("/api/published/ArticlePage")

        assert response.status_code == 500
        assert response.json()["error"] == "Configuration Error"
        assert executor.calls == []


class TestPreviewRoutes:
    """Tests for /api/preview."""

    def test_requires_credentials(self, client, executor) -> None:
        """Test preview without credentials gives a 401 listing methods."""
        response = client.get("/api/preview/ArticlePage")

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "Unauthorized"
        assert body["details"] == {"supportedMethods": SUPPORTED_PREVIEW_METHODS}
        assert executor.calls == []

    def test_bearer_token(self, client, executor) -> None:
        """Test a Bearer token selects edit mode."""
        response = client.get(
            "/api/preview/ArticlePage", headers={"Authorization": "Bearer tok"}
        )

        assert response.status_code == 200
        assert response.headers["X-Content-Mode"] == "edit"
        assert response.headers["X-Auth-Method"] == "bearer-token"
        _, _, auth = executor.calls[-1]
        assert auth.preview_token == "tok"

    def test_preview_token_parameter(self, client, executor) -> None:
        """Test the previewToken parameter selects edit mode."""
        response = client.get("/api/preview/ArticlePage?previewToken=tok")

        assert response.headers["X-Auth-Method"] == "query-param-token"
        _, _, auth = executor.calls[-1]
        assert (auth.mode, auth.preview_token) == ("edit", "tok")

    def test_basic_auth_requires_external_preview(self, client) -> None:
        """Test Basic auth is rejected when external preview is off."""
        response = client.get(
            "/api/preview/ArticlePage", headers={"Authorization": "Basic YTpz"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "External preview is not enabled or not configured"

    def test_external_preview_default(self, executor) -> None:
        """Test Basic auth and the external preview default."""
        config = GatewayConfig(
            graph_gateway=GATEWAY,
            single_key="k1",
            app_key="a",
            secret="s",
            external_preview_enabled=True,
        )
        executor.response = ARTICLES

        with TestClient(create_app(config, executor=executor)) as client:
            basic = client.get(
                "/api/preview/ArticlePage", headers={"Authorization": "Basic YTpz"}
            )
            default = client.get("/api/preview/ArticlePage/a1")

        assert basic.headers["X-Auth-Method"] == "basic-auth"
        assert default.headers["X-Auth-Method"] == "ext-preview-default"
        assert default.headers["X-Content-Mode"] == "ext_preview"


class TestLegacyRoutes:
    """Tests for the deprecated /api routes."""

    def test_deprecation_headers(self, client, executor) -> None:
        """Test legacy responses carry the deprecation headers."""
        response = client.get("/api/ArticlePage")

        assert response.status_code == 200
        for name, value in DEPRECATION_HEADERS.items():
            assert response.headers[name] == value
        assert "X-Content-Mode" not in response.headers
        _, _, auth = executor.calls[-1]
        assert auth.mode == "public"

    def test_mode_from_query(self, client, executor) -> None:
        """Test legacy routes read mode and token from the query."""
        client.get("/api/ArticlePage/a1?mode=edit&previewToken=tok")

        _, _, auth = executor.calls[-1]
        assert (auth.mode, auth.preview_token, auth.auth_method) == ("edit", "tok", "query-param")

    def test_published_routes_not_shadowed(self, client) -> None:
        """Test published paths are not served by legacy routes."""
        response = client.get("/api/published/ArticlePage")

        assert "X-API-Deprecated" not in response.headers


class TestResponseCaching:
    """Tests for the response cache middleware."""

    def test_miss_then_hit(self, client, executor) -> None:
        """Test a repeated request is served from the cache."""
        first = client.get("/api/published/ArticlePage?limit=1")
        second = client.get("/api/published/ArticlePage?limit=1")

        assert first.headers["X-Cache"] == "MISS"
        assert first.headers["Cache-Control"] == "public, max-age=120"
        assert second.headers["X-Cache"] == "HIT"
        assert "X-Cache-Age" in second.headers
        assert second.headers["X-Content-Mode"] == "public"
        assert second.json() == first.json()
        assert len(executor.documents) == 1

    def test_distinct_urls(self, client, executor) -> None:
        """Test different URLs are cached separately."""
        client.get("/api/published/ArticlePage?limit=1")
        response = client.get("/api/published/ArticlePage?limit=2")

        assert response.headers["X-Cache"] == "MISS"
        assert len(executor.documents) == 2

    def test_errors_not_cached(self, client, executor) -> None:
        """Test error responses are not stored."""
        executor.response = {"data": {"ArticlePage": None}}
        client.get("/api/published/ArticlePage")
        executor.response = ARTICLES

        response = client.get("/api/published/ArticlePage")

        assert response.status_code == 200
        assert response.headers["X-Cache"] == "MISS"

    def test_non_api_routes_not_cached(self, client) -> None:
        """Test routes outside /api/ bypass the cache."""
        client.get("/health")
        response = client.get("/health")

        assert "X-Cache" not in response.headers

    def test_unparseable_body_not_cached(self) -> None:
        """Test a 2xx body that is not JSON is returned as-is and not stored."""
        cache = ResponseCache()
        app = FastAPI()
        app.add_middleware(ResponseCacheMiddleware, cache=cache)

        @app.get("/api/text")
        async def text() -> PlainTextResponse:
            return PlainTextResponse("not json")

        client = TestClient(app)
        first = client.get("/api/text")
        second = client.get("/api/text")

        assert first.status_code == 200
        assert first.text == "not json"
        assert "X-Cache" not in first.headers
        assert "X-Cache" not in second.headers
        assert len(cache) == 0

    def test_bearer_requests_bypass_cache(self, client, executor) -> None:
        """Test a preview response fetched with a token is never replayed."""
        authorized = client.get(
            "/api/preview/ArticlePage", headers={"Authorization": "Bearer tok"}
        )
        anonymous = client.get("/api/preview/ArticlePage")

        assert authorized.status_code == 200
        assert "X-Cache" not in authorized.headers
        assert anonymous.status_code == 401
        assert client.get("/cache/stats").json()["responseCache"]["size"] == 0

    def test_preview_token_requests_bypass_cache(self, client, executor) -> None:
        """Test requests carrying previewToken always reach the upstream."""
        client.get("/api/preview/ArticlePage?previewToken=tok")
        response = client.get("/api/preview/ArticlePage?previewToken=tok")

        assert "X-Cache" not in response.headers
        assert len(executor.documents) == 2

    def test_stats_and_clear(self, client) -> None:
        """Test cache statistics and clearing."""
        client.get("/api/published/ArticlePage")
        client.get("/api/published/ArticlePage")

        stats = client.get("/cache/stats").json()
        assert stats["responseCache"] == {
            "hits": 1,
            "misses": 1,
            "total": 2,
            "size": 1,
            "ttl": 120,
        }
        assert stats["introspection"] == {"size": 0, "fetches": 0}

        assert client.post("/cache/clear").json() == {"status": "cleared"}
        assert client.get("/cache/stats").json()["responseCache"]["size"] == 0


class TestGraphQLPassthrough:
    """Tests for /graphql."""

    def test_execute(self, client, executor) -> None:
        """Test a raw document is executed upstream."""
        executor.response = {"data": {"ArticlePage": {"total": 3}}}

        response = client.post(
            "/graphql", json={"query": "{ ArticlePage { total } }", "variables": {"a": 1}}
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"ArticlePage": {"total": 3}}
        assert executor.calls[-1][:2] == ("{ ArticlePage { total } }", {"a": 1})

    def test_graphql_errors(self, client, executor) -> None:
        """Test upstream GraphQL errors are returned with a 400."""
        executor.response = {"errors": [{"message": "Syntax Error"}], "data": None}

        response = client.post("/graphql", json={"query": "{"})

        assert response.status_code == 400
        assert response.json() == {"errors": [{"message": "Syntax Error"}], "data": None}

    @pytest.mark.parametrize(
        "body",
        [b"not json", b"[1, 2]", b'{"variables": {}}'],
    )
    def test_invalid_body(self, client, body) -> None:
        """Test malformed request bodies give a 400."""
        response = client.post(
            "/graphql", content=body, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "BadRequest"

    def test_usage(self, client) -> None:
        """Test GET /graphql describes the endpoint."""
        assert client.get("/graphql").json()["usage"]["method"] == "POST"


class TestHealth:
    """Tests for the health endpoints."""

    def test_health(self, client, config) -> None:
        """Test the health endpoint reports the upstream endpoint."""
        body = client.get("/health").json()

        assert body["status"] == "ok"
        assert body["graphql"] == {"endpoint": config.endpoint}

    def test_connection(self, client, executor) -> None:
        """Test a successful upstream connection check."""
        executor.response = {"data": {"__schema": {"queryType": {"name": "Query"}}}}

        response = client.get("/health/test")

        assert response.status_code == 200
        assert response.json()["response"] == {"__schema": {"queryType": {"name": "Query"}}}

    def test_connection_failed(self, client, executor) -> None:
        """Test a failed upstream connection check gives a 503."""
        executor.error = ServiceUnavailableError("GraphQL request failed: fetch failed")

        response = client.get("/health/test")

        assert response.status_code == 503
        assert response.json()["status"] == "GraphQL connection failed"

    def test_index(self, client) -> None:
        """Test the service index lists the route families."""
        assert "published" in client.get("/").json()["endpoints"]


class TestAppFactory:
    """Tests for create_app configuration loading."""

    def test_reads_dotenv_file(self, tmp_path, monkeypatch, executor) -> None:
        """Test settings are read from a .env file in the working directory."""
        (tmp_path / ".env").write_text(
            f"OPTIMIZELY_GRAPH_GATEWAY={GATEWAY}\nOPTIMIZELY_GRAPH_SINGLE_KEY=from-file\n"
        )
        environ = {
            name: value
            for name, value in os.environ.items()
            if not name.startswith(("OPTIMIZELY_GRAPH_", "GRAPHQL_"))
        }
        monkeypatch.setattr(os, "environ", environ)
        monkeypatch.chdir(tmp_path)

        app = create_app(executor=executor)

        assert app.state.config.single_key == "from-file"
        assert app.state.config.endpoint == f"{GATEWAY}/content/v2?auth=from-file"

    def test_process_environment_wins(self, tmp_path, monkeypatch, executor) -> None:
        """Test variables already in the environment are not overridden."""
        (tmp_path / ".env").write_text("OPTIMIZELY_GRAPH_SINGLE_KEY=from-file\n")
        monkeypatch.setattr(os, "environ", {"OPTIMIZELY_GRAPH_SINGLE_KEY": "from-env"})
        monkeypatch.chdir(tmp_path)

        app = create_app(executor=executor)

        assert app.state.config.single_key == "from-env"
