"""Unit tests for the fixed-window rate limiter and its stores."""

from unittest.mock import MagicMock

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from src.cw_gateway.middleware.rate_limit import (
    InMemoryRateLimitStore,
    RateLimitMiddleware,
    RedisRateLimitStore,
    build_rate_limit_store,
    client_ip,
)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestInMemoryStore:
    async def test_counts_within_window(self) -> None:
        clock = FakeClock()
        store = InMemoryRateLimitStore(clock=clock)

        assert await store.hit("k", 60) == (1, 1060.0)
        assert await store.hit("k", 60) == (2, 1060.0)
        assert (await store.hit("other", 60))[0] == 1

    async def test_window_resets(self) -> None:
        clock = FakeClock()
        store = InMemoryRateLimitStore(clock=clock)
        await store.hit("k", 60)
        await store.hit("k", 60)

        clock.now += 60
        count, reset_at = await store.hit("k", 60)

        assert count == 1
        assert reset_at == 1120.0

    async def test_expired_entries_are_swept(self) -> None:
        clock = FakeClock()
        store = InMemoryRateLimitStore(sweep_interval=300, clock=clock)
        for i in range(50):
            await store.hit(f"ip-{i}", 60)
        assert len(store) == 50

        clock.now += 301
        await store.hit("fresh", 60)

        assert len(store) == 1


def test_build_store_selects_backend() -> None:
    assert isinstance(
        build_rate_limit_store(Settings(JWT_SECRET="x", RATE_LIMIT_BACKEND="memory")),
        InMemoryRateLimitStore,
    )
    assert isinstance(
        build_rate_limit_store(Settings(JWT_SECRET="x", RATE_LIMIT_BACKEND="redis")),
        RedisRateLimitStore,
    )


def test_client_ip_prefers_forwarded_for() -> None:
    request = MagicMock()
    request.headers = {"X-Forwarded-For": "203.0.113.9, 10.0.0.1"}
    assert client_ip(request) == "203.0.113.9"


def _app(max_requests: int) -> FastAPI:
    app = FastAPI()
    app.add_middleware(
        RateLimitMiddleware,
        store=InMemoryRateLimitStore(),
        max_requests=max_requests,
        window_seconds=60,
    )

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"ok": "yes"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


class TestMiddleware:
    async def test_returns_429_envelope_after_limit(self) -> None:
        transport = ASGITransport(app=_app(max_requests=2))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            first = await client.get("/ping")
            second = await client.get("/ping")
            third = await client.get("/ping")

        assert first.status_code == 200
        assert first.headers["X-RateLimit-Remaining"] == "1"
        assert second.headers["X-RateLimit-Remaining"] == "0"
        assert third.status_code == 429
        body = third.json()
        assert body["code"] == 9001
        assert body["data"] is None
        assert int(third.headers["Retry-After"]) >= 1

    async def test_health_is_exempt(self) -> None:
        transport = ASGITransport(app=_app(max_requests=1))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            for _ in range(3):
                assert (await client.get("/health")).status_code == 200
