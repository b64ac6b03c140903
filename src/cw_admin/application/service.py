"""AdminService: operator write paths.

Every balance change goes through the Wallet Ledger / Staking / Commission services;
nothing here writes balances directly.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_admin.domain.invariants import verify_ledger_invariants
from src.cw_common.enums import PoolStatus, TransactionStatus
from src.cw_pool.application.schemas import CreatePoolRequest, PoolResponse
from src.cw_pool.application.service import PoolApplicationService
from src.cw_referral.application.commission import CommissionEngine
from src.cw_referral.application.schemas import CommissionBatchResponse, CommissionResponse
from src.cw_staking.application.schemas import RoiBatchResponse, RoiPayoutResponse
from src.cw_staking.application.service import StakingApplicationService
from src.cw_wallet.application.schemas import LedgerMutationResponse, TransactionItem
from src.cw_wallet.application.service import WalletApplicationService

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        wallet: WalletApplicationService | None = None,
        pools: PoolApplicationService | None = None,
        staking: StakingApplicationService | None = None,
        commissions: CommissionEngine | None = None,
    ) -> None:
        self._wallet = wallet or WalletApplicationService()
        self._pools = pools or PoolApplicationService()
        self._staking = staking or StakingApplicationService()
        self._commissions = commissions or CommissionEngine()

    # --- wallet ---

    async def credit_deposit(
        self,
        db: AsyncSession,
        admin_id: int,
        user_id: int,
        amount: Decimal,
        description: str | None = None,
    ) -> LedgerMutationResponse:
        logger.info("Admin %s credits deposit %s to user %s", admin_id, amount, user_id)
        return await self._wallet.deposit(
            db,
            user_id,
            amount,
            status=TransactionStatus.COMPLETED,
            description=description or "Admin deposit",
            metadata={"credited_by": admin_id},
        )

    async def approve_deposit(self, db: AsyncSession, transaction_id: int) -> LedgerMutationResponse:
        return await self._wallet.approve_deposit(db, transaction_id)

    async def reject_deposit(
        self, db: AsyncSession, transaction_id: int, reason: str | None
    ) -> TransactionItem:
        return await self._wallet.reject_deposit(db, transaction_id, reason)

    async def approve_withdrawal(
        self, db: AsyncSession, transaction_id: int
    ) -> LedgerMutationResponse:
        return await self._wallet.approve_withdrawal(db, transaction_id)

    async def reject_withdrawal(
        self, db: AsyncSession, transaction_id: int, reason: str | None
    ) -> LedgerMutationResponse:
        return await self._wallet.reject_withdrawal(db, transaction_id, reason)

    # --- pools & stakes ---

    async def create_pool(self, db: AsyncSession, req: CreatePoolRequest) -> PoolResponse:
        return await self._pools.create_pool(db, req)

    async def set_pool_status(
        self, db: AsyncSession, pool_id: int, status: PoolStatus
    ) -> PoolResponse:
        return await self._pools.set_pool_status(db, pool_id, status)

    async def run_roi_payouts(self, db: AsyncSession) -> RoiBatchResponse:
        return await self._staking.process_all_roi_payouts(db)

    async def pay_stake_roi(self, db: AsyncSession, stake_id: int) -> RoiPayoutResponse:
        return await self._staking.process_roi_payout(db, stake_id)

    # --- commissions ---

    async def pay_commission(self, db: AsyncSession, commission_id: int) -> CommissionResponse:
        return await self._commissions.pay_commission(db, commission_id)

    async def pay_pending_commissions(
        self, db: AsyncSession, referrer_id: int
    ) -> CommissionBatchResponse:
        return await self._commissions.pay_pending_commissions(db, referrer_id)

    async def cancel_commission(self, db: AsyncSession, commission_id: int) -> CommissionResponse:
        return await self._commissions.cancel_commission(db, commission_id)

    # --- health ---

    async def verify_all_invariants(self, db: AsyncSession) -> dict[str, object]:
        violations = await verify_ledger_invariants(db)
        return {"ok": len(violations) == 0, "violations": violations}
