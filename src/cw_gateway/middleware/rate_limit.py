"""Fixed-window rate limiting with an injected counter store.

Two stores implement RateLimitStore:
  - RedisRateLimitStore: INCR + EXPIRE, shared across workers.
  - InMemoryRateLimitStore: per-process dict, for single-worker deployments and
    when Redis is unavailable. Entries live for one window; expired keys are swept at
    most once per `sweep_interval` so memory stays bounded by active clients.

The store is chosen once at construction (`build_rate_limit_store`), never swapped
at runtime. Key pattern: "ratelimit:{client_ip}".
"""

import math
import time
from collections.abc import Callable
from typing import Protocol

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from config.settings import Settings
from src.cw_common.errors import RateLimitError
from src.cw_common.redis_client import get_redis
from src.cw_common.response import error_response


class RateLimitStore(Protocol):
    async def hit(self, key: str, window_seconds: int) -> tuple[int, float]:
        """Count one request against `key`. Returns (count_in_window, window_reset_epoch)."""
        ...


class InMemoryRateLimitStore:
    def __init__(
        self,
        sweep_interval: float = 300.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._entries: dict[str, tuple[int, float]] = {}
        self._sweep_interval = sweep_interval
        self._clock = clock
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._entries)

    async def hit(self, key: str, window_seconds: int) -> tuple[int, float]:
        now = self._clock()
        self._sweep(now)
        count, reset_at = self._entries.get(key, (0, 0.0))
        if reset_at <= now:
            count, reset_at = 0, now + window_seconds
        count += 1
        self._entries[key] = (count, reset_at)
        return count, reset_at

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self._sweep_interval:
            return
        self._last_sweep = now
        expired = [k for k, (_, reset_at) in self._entries.items() if reset_at <= now]
        for k in expired:
            del self._entries[k]


class RedisRateLimitStore:
    async def hit(self, key: str, window_seconds: int) -> tuple[int, float]:
        redis = await get_redis()
        count = int(await redis.incr(key))
        if count == 1:
            await redis.expire(key, window_seconds)
        ttl = int(await redis.ttl(key))
        return count, time.time() + max(ttl, 0)


def build_rate_limit_store(settings: Settings) -> RateLimitStore:
    if settings.RATE_LIMIT_BACKEND == "redis":
        return RedisRateLimitStore()
    return InMemoryRateLimitStore()


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        store: RateLimitStore,
        max_requests: int = 100,
        window_seconds: int = 60,
    ) -> None:
        super().__init__(app)
        self._store = store
        self._max_requests = max_requests
        self._window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path == "/health":
            return await call_next(request)

        count, reset_at = await self._store.hit(
            f"ratelimit:{client_ip(request)}", self._window_seconds
        )
        if count > self._max_requests:
            err = RateLimitError()
            retry_after = max(1, math.ceil(reset_at - time.time()))
            body = error_response(err.code, err.message)
            body.request_id = getattr(request.state, "request_id", body.request_id)
            return JSONResponse(
                status_code=err.http_status,
                content=body.model_dump(),
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(self._max_requests),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(math.ceil(reset_at)),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self._max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self._max_requests - count))
        return response
