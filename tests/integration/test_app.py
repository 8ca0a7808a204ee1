"""Application wiring: health probes, error rendering, middleware and startup."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from rada.config import get_settings
from rada.database import build_engine
from rada.main import create_app, lifespan


class TestHealth:
    """Health, readiness and version endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_readiness(self, client: AsyncClient) -> None:
        """Database and schema ok; Redis not configured in tests."""
        response = await client.get("/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"] == {"database": "ok", "schema": "ok", "redis": "disabled"}

    @pytest.mark.asyncio
    async def test_version(self, client: AsyncClient) -> None:
        response = await client.get("/version")
        assert response.status_code == 200
        assert response.json()["version"] == "0.1.0"


class TestErrorRendering:
    """Errors become JSON with a detail message."""

    @pytest.mark.asyncio
    async def test_unhandled_error_is_generic_500(self, engine) -> None:
        app = create_app()

        @app.get("/boom")
        async def boom():
            raise RuntimeError("secret connection string")

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/boom")

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}
        assert "secret" not in response.text

    @pytest.mark.asyncio
    async def test_unknown_route_404_json(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/nowhere")
        assert response.status_code == 404
        assert "detail" in response.json()


class TestMiddleware:
    """Request id and rate limiting."""

    @pytest.mark.asyncio
    async def test_request_id_generated(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert len(response.headers["X-Request-Id"]) == 36

    @pytest.mark.asyncio
    async def test_request_id_propagated(self, client: AsyncClient) -> None:
        response = await client.get("/health", headers={"X-Request-Id": "abc-123"})
        assert response.headers["X-Request-Id"] == "abc-123"

    @pytest.mark.asyncio
    async def test_rate_limit_exceeded(self, client: AsyncClient) -> None:
        """With a Redis counter over the limit, requests get 429."""
        pipe = MagicMock()
        pipe.execute = AsyncMock(return_value=[10_000, True])
        redis = MagicMock()
        redis.pipeline.return_value = pipe

        with patch("rada.middleware.rate_limit.get_redis", return_value=redis):
            limited = await client.get("/version")
            exempt = await client.get("/health")

        assert limited.status_code == 429
        assert limited.headers["X-RateLimit-Remaining"] == "0"
        assert exempt.status_code == 200

    @pytest.mark.asyncio
    async def test_rate_limit_headers(self, client: AsyncClient) -> None:
        pipe = MagicMock()
        pipe.execute = AsyncMock(return_value=[3, True])
        redis = MagicMock()
        redis.pipeline.return_value = pipe

        with patch("rada.middleware.rate_limit.get_redis", return_value=redis):
            response = await client.get("/version")

        assert response.status_code == 200
        assert response.headers["X-RateLimit-Remaining"] == str(get_settings().rate_limit_requests - 3)

    @pytest.mark.asyncio
    async def test_rotating_forwarded_for_still_limited(self, monkeypatch) -> None:
        """One peer varying X-Forwarded-For shares a single counter."""
        monkeypatch.setenv("RADA_RATE_LIMIT_REQUESTS", "5")
        get_settings.cache_clear()
        counts: dict[str, int] = {}

        class CountingPipeline:
            def __init__(self) -> None:
                self.key = ""

            def incr(self, key: str) -> None:
                self.key = key

            def expire(self, key: str, seconds: int) -> None:
                pass

            async def execute(self) -> list:
                counts[self.key] = counts.get(self.key, 0) + 1
                return [counts[self.key], True]

        redis = MagicMock()
        redis.pipeline.side_effect = CountingPipeline

        app = create_app()
        transport = ASGITransport(app=app)
        with (
            patch("rada.middleware.rate_limit.get_redis", return_value=redis),
            patch("rada.middleware.rate_limit.time.time", return_value=1_800_000_000.0),
        ):
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                statuses = [
                    (await ac.get("/version", headers={"X-Forwarded-For": f"10.0.0.{i}"})).status_code
                    for i in range(8)
                ]

        assert statuses == [200] * 5 + [429] * 3
        assert len(counts) == 1


class TestLifespan:
    """Startup: connectivity check, reconciliation, badge seeding."""

    @pytest.mark.asyncio
    async def test_startup_builds_schema(self, test_settings) -> None:
        app = create_app()
        async with lifespan(app):
            pass

        engine = build_engine(test_settings.database_url)
        async with engine.connect() as conn:
            tables = set(await conn.run_sync(lambda c: inspect(c).get_table_names()))
        await engine.dispose()
        assert {"users", "xp_transactions", "badges", "user_badges", "quizzes", "user_quiz_attempts"} <= tables

    @pytest.mark.asyncio
    async def test_unreachable_database_aborts_startup(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("RADA_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'rada.db'}")
        get_settings.cache_clear()
        app = create_app()

        with pytest.raises(SQLAlchemyError):
            async with lifespan(app):
                pass
