"""cw_pool REST API: public pool catalog (no auth)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.database import get_db_session
from src.cw_common.enums import PoolStatus
from src.cw_common.response import ApiResponse, success_response
from src.cw_pool.application.service import PoolApplicationService

router = APIRouter(prefix="/pools", tags=["pools"])

_service = PoolApplicationService()


@router.get("")
async def list_pools(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: PoolStatus | None = Query(PoolStatus.ACTIVE, description="Filter by pool status"),
) -> ApiResponse:
    data = await _service.list_pools(db, status)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{pool_id}")
async def get_pool(
    pool_id: int,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_pool(db, pool_id)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
