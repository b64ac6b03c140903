"""cw_yield REST API: simulated display rates (never used for payouts)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.database import get_db_session
from src.cw_common.enums import BotTier
from src.cw_common.response import ApiResponse, success_response
from src.cw_gateway.auth.dependencies import CurrentUser, get_current_user
from src.cw_yield.application.service import YieldApplicationService

router = APIRouter(prefix="/yield", tags=["yield"])

_service = YieldApplicationService()


@router.get("/tiers")
async def list_tiers(request: Request) -> ApiResponse:
    resp = success_response([t.model_dump(mode="json") for t in _service.list_tiers()])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/current")
async def get_current(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_current(db, current_user.user_id)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/history")
async def get_history(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    tier: BotTier | None = Query(None, description="Defaults to the tier of the caller's stake"),
    hours: int = Query(24, ge=1, le=168, description="Number of hourly samples"),
) -> ApiResponse:
    data = await _service.get_history(db, current_user.user_id, tier, hours)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
