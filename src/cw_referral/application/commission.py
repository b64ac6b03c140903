"""CommissionEngine: accrues and pays multi-level referral commissions.

`record_commissions` runs inside the CALLER's unit of work (the deposit or stake that
triggered it), so a commission row can never exist without its source transaction.
Payout is a separate, explicit step: `pay_commission` flips pending → paid and credits
the referrer in one store transaction.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.database import unit_of_work
from src.cw_common.enums import (
    CommissionStatus,
    NotificationType,
    TransactionStatus,
    TransactionType,
)
from src.cw_common.errors import AlreadyProcessedError, CommissionNotFoundError
from src.cw_common.money import ZERO, money_to_display, quantize_money
from src.cw_common.notifications import NotificationDispatcher, dispatcher
from src.cw_referral.application.schemas import CommissionBatchResponse, CommissionResponse
from src.cw_referral.domain.constants import commission_rate_for
from src.cw_referral.domain.models import ReferralCommission
from src.cw_referral.domain.repository import ReferralRepositoryProtocol
from src.cw_referral.infrastructure.persistence import ReferralRepository
from src.cw_wallet.domain.models import BalanceDelta
from src.cw_wallet.domain.repository import WalletRepositoryProtocol
from src.cw_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class CommissionEngine:
    def __init__(
        self,
        referral_repo: ReferralRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
        notifier: NotificationDispatcher | None = None,
    ) -> None:
        self._referrals: ReferralRepositoryProtocol = referral_repo or ReferralRepository()
        self._wallets: WalletRepositoryProtocol = wallet_repo or WalletRepository()
        self._notifier = notifier or dispatcher

    async def record_commissions(
        self,
        db: AsyncSession,
        referred_id: int,
        source_transaction_id: int,
        amount: Decimal,
    ) -> list[ReferralCommission]:
        """Insert one pending commission per upline edge. Caller owns the transaction."""
        upline = await self._referrals.get_upline(db, referred_id)
        created: list[ReferralCommission] = []
        for edge in upline:
            rate = commission_rate_for(edge.level)
            value = quantize_money(amount * rate)
            if value <= ZERO:
                continue
            commission = await self._referrals.insert_commission(
                db, edge.referrer_id, referred_id, edge.level, source_transaction_id, value, rate
            )
            if commission is not None:
                created.append(commission)
        if created:
            logger.info(
                "Accrued %d commissions for tx=%s referred=%s",
                len(created), source_transaction_id, referred_id,
            )
        return created

    async def pay_commission(self, db: AsyncSession, commission_id: int) -> CommissionResponse:
        async with unit_of_work(db):
            commission = await self._referrals.get_commission(db, commission_id, for_update=True)
            if commission is None:
                raise CommissionNotFoundError(commission_id)
            if not commission.is_pending:
                raise AlreadyProcessedError("Commission", commission_id, commission.status)
            paid = await self._referrals.transition_commission(
                db, commission_id, CommissionStatus.PAID.value
            )
            if paid is None:
                raise AlreadyProcessedError("Commission", commission_id, "processed")
            await self._wallets.apply_delta(
                db, paid.referrer_id, BalanceDelta(available=paid.amount)
            )
            await self._wallets.insert_transaction(
                db,
                paid.referrer_id,
                TransactionType.REFERRAL_COMMISSION.value,
                paid.amount,
                TransactionStatus.COMPLETED.value,
                f"Level {paid.level} referral commission",
                {
                    "commission_id": paid.id,
                    "referred_id": paid.referred_id,
                    "level": paid.level,
                    "source_transaction_id": paid.source_transaction_id,
                },
            )

        self._notifier.dispatch(
            paid.referrer_id,
            NotificationType.REFERRAL.value,
            "Referral commission paid",
            f"{money_to_display(paid.amount)} level {paid.level} commission credited.",
            {"commission_id": paid.id},
        )
        return CommissionResponse.from_commission(paid)

    async def pay_pending_commissions(
        self, db: AsyncSession, referrer_id: int
    ) -> CommissionBatchResponse:
        """Pay every pending commission of `referrer_id`, each in its own store transaction."""
        pending = await self._referrals.list_commissions(
            db, referrer_id, CommissionStatus.PENDING.value
        )
        count = 0
        total = ZERO
        for commission in pending:
            try:
                paid = await self.pay_commission(db, commission.id)
            except AlreadyProcessedError:
                # Paid or cancelled concurrently since the listing
                logger.info("Commission %s no longer pending, skipped", commission.id)
                continue
            count += 1
            total += paid.amount
        return CommissionBatchResponse(
            paid=count, total_paid=total, total_paid_display=money_to_display(total)
        )

    async def cancel_commission(self, db: AsyncSession, commission_id: int) -> CommissionResponse:
        async with unit_of_work(db):
            commission = await self._referrals.get_commission(db, commission_id, for_update=True)
            if commission is None:
                raise CommissionNotFoundError(commission_id)
            if not commission.is_pending:
                raise AlreadyProcessedError("Commission", commission_id, commission.status)
            cancelled = await self._referrals.transition_commission(
                db, commission_id, CommissionStatus.CANCELLED.value
            )
            if cancelled is None:
                raise AlreadyProcessedError("Commission", commission_id, "processed")
        logger.info("Commission %s cancelled", commission_id)
        return CommissionResponse.from_commission(cancelled)
