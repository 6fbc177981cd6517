"""Tests for application wiring.

Health check, /api catch-all, static app shell, security headers, CORS,
rate limiting and the persistence failure handler.
"""

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from clubhub.core import config
from clubhub.core.context import ServerContext
from clubhub.main import create_app
from tests.conftest import ALICE_TOKEN, TEST_DATABASE_URL


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestHealth:
    """GET /health."""

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestApiCatchAll:
    """Unknown /api paths answer 404 for every method."""

    @pytest.mark.parametrize("method", ["GET", "POST", "PUT", "PATCH", "DELETE"])
    async def test_unknown_api_path(self, client, method):
        response = await client.request(method, "/api/does/not/exist")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    async def test_wrong_method_on_known_path(self, client):
        response = await client.delete("/api/site/chess")

        assert response.status_code == 404

    async def test_api_paths_never_serve_app_shell(self, client, settings):
        settings.static_dir.mkdir(parents=True)
        (settings.static_dir / "index.html").write_text("<html>editor</html>")

        response = await client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("application/json")


class TestAppShell:
    """Every non-API path serves the editor's index.html."""

    async def test_missing_bundle_is_404(self, client):
        response = await client.get("/chess/edit")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    async def test_any_path_serves_index(self, client, settings):
        settings.static_dir.mkdir(parents=True)
        (settings.static_dir / "index.html").write_text("<html>editor</html>")

        response = await client.get("/chess/edit")

        assert response.status_code == 200
        assert response.text == "<html>editor</html>"
        assert response.headers["x-frame-options"] == "SAMEORIGIN"

    async def test_assets_are_served(
        self, settings, session_factory, identity_verifier, tmp_path: Path
    ):
        static_dir = tmp_path / "bundle"
        (static_dir / "assets").mkdir(parents=True)
        (static_dir / "assets" / "app.js").write_text("console.log('hi')")
        app = create_app(
            ServerContext(
                settings=settings.model_copy(update={"static_dir": static_dir}),
                session_factory=session_factory,
                identity_verifier=identity_verifier,
            )
        )

        async with _client(app) as ac:
            response = await ac.get("/assets/app.js")

        assert response.status_code == 200
        assert response.text == "console.log('hi')"


class TestSecurityHeaders:
    """Headers added by SecurityHeadersMiddleware."""

    async def test_api_responses_are_not_cached(self, client):
        response = await client.get("/api/site_exists/chess")

        assert response.headers["cache-control"] == "no-store, max-age=0"
        assert response.headers["content-security-policy"].startswith(
            "default-src 'none'"
        )
        assert response.headers["x-content-type-options"] == "nosniff"

    async def test_error_responses_get_headers_too(self, client):
        response = await client.get("/api/site/nowhere")

        assert response.status_code == 404
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["cache-control"] == "no-store, max-age=0"

    async def test_non_api_responses_deny_framing(self, client):
        response = await client.get("/health")

        assert response.headers["x-frame-options"] == "SAMEORIGIN"
        assert "content-security-policy" not in response.headers


class TestCors:
    """CORS allows the configured origins with credentials."""

    async def test_preflight_from_allowed_origin(self, client, settings):
        origin = settings.allowed_origins[0]

        response = await client.options(
            "/api/site/chess",
            headers={
                "Origin": origin,
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == origin
        assert response.headers["access-control-allow-credentials"] == "true"

    async def test_preflight_from_unknown_origin(self, client):
        response = await client.options(
            "/api/site/chess",
            headers={
                "Origin": "https://evil.example",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert "access-control-allow-origin" not in response.headers


@pytest.fixture
def limited_app(settings, session_factory, identity_verifier):
    """App whose context turns rate limiting on."""
    return create_app(
        ServerContext(
            settings=settings.model_copy(update={"rate_limit_enabled": True}),
            session_factory=session_factory,
            identity_verifier=identity_verifier,
        )
    )


class TestRateLimiting:
    """Site and user creation are limited per client IP."""

    async def test_newsite_limit_spans_urls(self, limited_app, monkeypatch):
        monkeypatch.setattr(config.settings, "rate_limit_newsite", "2/hour")

        async with _client(limited_app) as ac:
            for url in ("one", "two"):
                response = await ac.post(
                    f"/api/newsite/{url}", json={"siteName": url}
                )
                assert response.status_code == 200

            response = await ac.post("/api/newsite/three", json={"siteName": "x"})

        assert response.status_code == 429
        assert response.json()["error"]["code"] == "RATE_LIMITED"
        assert "retry-after" in response.headers

    async def test_limit_is_per_real_ip(self, limited_app, monkeypatch):
        monkeypatch.setattr(config.settings, "rate_limit_newsite", "1/hour")

        async with _client(limited_app) as ac:
            first = await ac.post(
                "/api/newsite/one",
                json={"siteName": "one"},
                headers={"X-Real-IP": "10.0.0.1"},
            )
            second = await ac.post(
                "/api/newsite/two",
                json={"siteName": "two"},
                headers={"X-Real-IP": "10.0.0.2"},
            )
            third = await ac.post(
                "/api/newsite/three",
                json={"siteName": "three"},
                headers={"X-Real-IP": "10.0.0.1"},
            )

        assert first.status_code == 200
        assert second.status_code == 200
        assert third.status_code == 429

    async def test_newuser_limit_returns_429(
        self, limited_app, settings, monkeypatch
    ):
        monkeypatch.setattr(config.settings, "rate_limit_newuser", "1/hour")

        async with AsyncClient(
            transport=ASGITransport(app=limited_app),
            base_url="http://test",
            cookies={settings.auth_cookie_name: ALICE_TOKEN},
        ) as ac:
            first = await ac.post("/api/newuser")
            second = await ac.post("/api/newuser")

        assert first.json() is True
        assert second.status_code == 429

    async def test_endpoints_count_separately(
        self, limited_app, settings, monkeypatch
    ):
        monkeypatch.setattr(config.settings, "rate_limit_newsite", "1/hour")
        monkeypatch.setattr(config.settings, "rate_limit_newuser", "1/hour")

        async with AsyncClient(
            transport=ASGITransport(app=limited_app),
            base_url="http://test",
            cookies={settings.auth_cookie_name: ALICE_TOKEN},
        ) as ac:
            site = await ac.post("/api/newsite/one", json={"siteName": "one"})
            user = await ac.post("/api/newuser")

        assert site.status_code == 200
        assert user.status_code == 200

    async def test_disabled_in_context_never_limits(self, client, monkeypatch):
        monkeypatch.setattr(config.settings, "rate_limit_newsite", "1/hour")

        for url in ("one", "two", "three"):
            response = await client.post(
                f"/api/newsite/{url}", json={"siteName": url}
            )
            assert response.status_code == 200

    async def test_setting_is_per_app(self, client, limited_app, monkeypatch):
        monkeypatch.setattr(config.settings, "rate_limit_newsite", "1/hour")

        async with _client(limited_app) as ac:
            assert (
                await ac.post("/api/newsite/one", json={"siteName": "one"})
            ).status_code == 200
            assert (
                await ac.post("/api/newsite/two", json={"siteName": "two"})
            ).status_code == 429

        # Same process and client address, but this app has limits off
        response = await client.post("/api/newsite/three", json={"siteName": "x"})
        assert response.status_code == 200


class TestPersistenceFailure:
    """Database errors become a generic 500."""

    async def test_database_error_is_upstream_failure(
        self, settings, identity_verifier
    ):
        # No tables: every query fails
        engine = create_async_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        app = create_app(
            ServerContext(
                settings=settings,
                session_factory=async_sessionmaker(
                    engine, class_=AsyncSession, expire_on_commit=False
                ),
                identity_verifier=identity_verifier,
            )
        )

        async with _client(app) as ac:
            response = await ac.get("/api/site/chess")

        await engine.dispose()
        assert response.status_code == 500
        assert response.json()["error"] == {
            "code": "UPSTREAM_FAILURE",
            "message": "Site storage is unavailable",
            "details": None,
        }
