"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.cw_admin.api.router import router as admin_router
from src.cw_common.database import engine
from src.cw_common.errors import AppError, InternalError
from src.cw_common.notifications import dispatcher
from src.cw_common.redis_client import close_redis, get_redis
from src.cw_common.response import error_response
from src.cw_gateway.api.router import router as internal_router
from src.cw_gateway.middleware.rate_limit import RateLimitMiddleware, build_rate_limit_store
from src.cw_gateway.middleware.request_log import RequestLogMiddleware
from src.cw_pool.api.router import router as pool_router
from src.cw_referral.api.router import router as referral_router
from src.cw_staking.api.router import router as staking_router
from src.cw_wallet.api.router import router as wallet_router
from src.cw_yield.api.router import router as yield_router

logger = logging.getLogger(__name__)


def _uses_redis() -> bool:
    return "redis" in (settings.RATE_LIMIT_BACKEND, settings.NOTIFICATION_BACKEND)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB (+ Redis when configured). Shutdown: flush notifications, dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    if _uses_redis():
        await (await get_redis()).ping()
    yield
    # Shutdown
    await dispatcher.drain()
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# Added last = outermost: every response, 429s included, gets a request_id
app.add_middleware(
    RateLimitMiddleware,
    store=build_rate_limit_store(settings),
    max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    err = InternalError()
    resp = error_response(err.code, err.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(status_code=err.http_status, content=resp.model_dump())


app.include_router(internal_router, prefix="/api/v1")
app.include_router(wallet_router, prefix="/api/v1")
app.include_router(pool_router, prefix="/api/v1")
app.include_router(staking_router, prefix="/api/v1")
app.include_router(referral_router, prefix="/api/v1")
app.include_router(yield_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
