"""cw_referral REST API: the caller's own network, volume and commissions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.database import get_db_session
from src.cw_common.enums import CommissionStatus
from src.cw_common.response import ApiResponse, success_response
from src.cw_gateway.auth.dependencies import CurrentUser, get_current_user
from src.cw_referral.application.service import ReferralApplicationService

router = APIRouter(prefix="/referrals", tags=["referrals"])

_service = ReferralApplicationService()


@router.get("/network")
async def get_network(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    direct_only: bool = Query(False, description="Only level-1 referrals"),
) -> ApiResponse:
    if direct_only:
        data = await _service.get_direct_referrals(db, current_user.user_id)
    else:
        data = await _service.get_network(db, current_user.user_id)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/volume")
async def get_volume(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_volume(db, current_user.user_id)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/stats")
async def get_stats(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_stats(db, current_user.user_id)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/commissions")
async def list_commissions(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: CommissionStatus | None = Query(None, description="Filter by commission status"),
) -> ApiResponse:
    data = await _service.list_commissions(db, current_user.user_id, status)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
