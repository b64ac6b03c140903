"""Internal API for trusted collaborators (auth service, payment webhook).

Callers authenticate with a service token carrying role=admin. request_id is read
from request.state (injected by RequestLogMiddleware).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.database import get_db_session
from src.cw_common.response import ApiResponse, success_response
from src.cw_gateway.auth.dependencies import CurrentUser, require_admin
from src.cw_gateway.user.schemas import RegisterUserRequest
from src.cw_gateway.user.service import UserOnboardingService
from src.cw_wallet.application.schemas import PaymentConfirmationRequest
from src.cw_wallet.application.service import WalletApplicationService

router = APIRouter(prefix="/internal", tags=["internal"])
_onboarding = UserOnboardingService()
_wallet = WalletApplicationService()


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


@router.post("/users", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def register_user(
    request: Request,
    body: RegisterUserRequest,
    _caller: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _onboarding.register(db, body.user_id, body.referrer_id, body.currency)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = _get_request_id(request)
    resp.message = "User registered successfully"
    return resp


@router.post("/payments/confirmations", response_model=ApiResponse)
async def confirm_payment(
    request: Request,
    body: PaymentConfirmationRequest,
    _caller: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    """Signature-verified provider event, forwarded by the webhook collaborator."""
    data = await _wallet.settle_payment_confirmation(
        db, body.order_id, body.payment_status, body.actually_paid, body.payment_id
    )
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = _get_request_id(request)
    return resp
