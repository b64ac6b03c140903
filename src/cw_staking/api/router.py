"""cw_staking REST API: all endpoints require JWT authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.database import get_db_session
from src.cw_common.enums import StakeStatus
from src.cw_common.response import ApiResponse, success_response
from src.cw_gateway.auth.dependencies import CurrentUser, get_current_user
from src.cw_staking.application.schemas import CreateStakeRequest
from src.cw_staking.application.service import StakingApplicationService

router = APIRouter(prefix="/stakes", tags=["stakes"])

_service = StakingApplicationService()


@router.post("")
async def create_stake(
    body: CreateStakeRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_stake(db, current_user.user_id, body.pool_id, body.amount)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_stakes(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: StakeStatus | None = Query(None, description="Filter by stake status"),
) -> ApiResponse:
    data = await _service.list_stakes(db, current_user.user_id, status)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/summary")
async def get_summary(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_summary(db, current_user.user_id)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{stake_id}/unstake")
async def unstake(
    stake_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.unstake(db, current_user.user_id, stake_id)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
