"""Admin REST API. Every endpoint requires role=admin."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_admin.application.service import AdminService
from src.cw_common.database import get_db_session
from src.cw_common.response import ApiResponse, success_response
from src.cw_gateway.auth.dependencies import CurrentUser, require_admin
from src.cw_pool.application.schemas import CreatePoolRequest, SetPoolStatusRequest
from src.cw_wallet.application.schemas import AdminDepositRequest

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()

AdminUser = Annotated[CurrentUser, Depends(require_admin)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


class RejectRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


def _wrap(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/deposits")
async def credit_deposit(
    body: AdminDepositRequest, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.credit_deposit(
        db, admin.user_id, body.user_id, body.amount, body.description
    )
    return _wrap(request, data.model_dump(mode="json"))


@router.post("/deposits/{transaction_id}/approve")
async def approve_deposit(
    transaction_id: int, _admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.approve_deposit(db, transaction_id)
    return _wrap(request, data.model_dump(mode="json"))


@router.post("/deposits/{transaction_id}/reject")
async def reject_deposit(
    transaction_id: int, body: RejectRequest, _admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.reject_deposit(db, transaction_id, body.reason)
    return _wrap(request, data.model_dump(mode="json"))


@router.post("/withdrawals/{transaction_id}/approve")
async def approve_withdrawal(
    transaction_id: int, _admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.approve_withdrawal(db, transaction_id)
    return _wrap(request, data.model_dump(mode="json"))


@router.post("/withdrawals/{transaction_id}/reject")
async def reject_withdrawal(
    transaction_id: int, body: RejectRequest, _admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.reject_withdrawal(db, transaction_id, body.reason)
    return _wrap(request, data.model_dump(mode="json"))


@router.post("/pools")
async def create_pool(
    body: CreatePoolRequest, _admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.create_pool(db, body)
    return _wrap(request, data.model_dump(mode="json"))


@router.post("/pools/{pool_id}/status")
async def set_pool_status(
    pool_id: int, body: SetPoolStatusRequest, _admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.set_pool_status(db, pool_id, body.status)
    return _wrap(request, data.model_dump(mode="json"))


@router.post("/stakes/payouts")
async def run_roi_payouts(_admin: AdminUser, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.run_roi_payouts(db)
    return _wrap(request, data.model_dump(mode="json"))


@router.post("/stakes/{stake_id}/payout")
async def pay_stake_roi(
    stake_id: int, _admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.pay_stake_roi(db, stake_id)
    return _wrap(request, data.model_dump(mode="json"))


@router.post("/commissions/{commission_id}/pay")
async def pay_commission(
    commission_id: int, _admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.pay_commission(db, commission_id)
    return _wrap(request, data.model_dump(mode="json"))


@router.post("/commissions/{commission_id}/cancel")
async def cancel_commission(
    commission_id: int, _admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.cancel_commission(db, commission_id)
    return _wrap(request, data.model_dump(mode="json"))


@router.post("/referrers/{referrer_id}/commissions/pay")
async def pay_pending_commissions(
    referrer_id: int, _admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.pay_pending_commissions(db, referrer_id)
    return _wrap(request, data.model_dump(mode="json"))


@router.get("/invariants")
async def verify_invariants(_admin: AdminUser, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.verify_all_invariants(db)
    return _wrap(request, data)
