"""StakingApplicationService: stake lifecycle against the Pool Registry and Wallet Ledger.

create_stake, in ONE store transaction:
  1. available → locked          (conditional wallet UPDATE; InsufficientBalance)
  2. pool.current_staked += amt  (conditional pool UPDATE; CapacityExceeded)
  3. INSERT pool_stakes
  4. INSERT pool_stake transaction (completed)
  5. referral commissions on the staked amount
A failed guard at step 2 rolls back step 1, which is the refund.

ROI payouts use the pool's configured band midpoint, never the display simulator.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.database import unit_of_work
from src.cw_common.datetime_utils import utc_now
from src.cw_common.enums import NotificationType, StakeStatus, TransactionStatus, TransactionType
from src.cw_common.errors import (
    CapacityExceededError,
    InternalError,
    PoolInactiveError,
    PoolNotFoundError,
    StakeLockedError,
    StakeNotActiveError,
    StakeNotFoundError,
)
from src.cw_common.money import ZERO, money_to_display, validate_amount
from src.cw_common.notifications import NotificationDispatcher, dispatcher
from src.cw_pool.domain.models import Pool
from src.cw_pool.domain.repository import PoolRepositoryProtocol
from src.cw_pool.infrastructure.persistence import PoolRepository
from src.cw_referral.application.commission import CommissionEngine
from src.cw_staking.application.schemas import (
    RoiBatchResponse,
    RoiPayoutResponse,
    StakeListResponse,
    StakeResponse,
    StakeSummaryResponse,
)
from src.cw_staking.domain.repository import StakeRepositoryProtocol
from src.cw_staking.domain.rules import (
    calculate_roi_payout,
    check_pool_active,
    check_stake_limits,
    daily_roi,
    unlock_time,
)
from src.cw_staking.infrastructure.persistence import StakeRepository
from src.cw_wallet.domain.models import BalanceDelta
from src.cw_wallet.domain.repository import WalletRepositoryProtocol
from src.cw_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class StakingApplicationService:
    def __init__(
        self,
        stake_repo: StakeRepositoryProtocol | None = None,
        pool_repo: PoolRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
        commissions: CommissionEngine | None = None,
        notifier: NotificationDispatcher | None = None,
    ) -> None:
        self._stakes: StakeRepositoryProtocol = stake_repo or StakeRepository()
        self._pools: PoolRepositoryProtocol = pool_repo or PoolRepository()
        self._wallets: WalletRepositoryProtocol = wallet_repo or WalletRepository()
        self._commissions = commissions or CommissionEngine(wallet_repo=self._wallets)
        self._notifier = notifier or dispatcher

    async def create_stake(
        self,
        db: AsyncSession,
        user_id: int,
        pool_id: int,
        amount: Decimal,
        now: datetime | None = None,
    ) -> StakeResponse:
        amount = validate_amount(amount)
        now = now or utc_now()

        pool = await self._require_pool(db, pool_id)
        check_pool_active(pool)
        check_stake_limits(pool, amount)

        async with unit_of_work(db):
            await self._wallets.apply_delta(
                db, user_id, BalanceDelta(available=-amount, locked=amount)
            )
            reserved = await self._pools.reserve_capacity(db, pool_id, amount)
            if reserved is None:
                await self._raise_reserve_failure(db, pool_id)
            stake = await self._stakes.insert_stake(
                db, user_id, pool_id, amount, now, unlock_time(now, pool.lock_period_days)
            )
            tx = await self._wallets.insert_transaction(
                db,
                user_id,
                TransactionType.POOL_STAKE.value,
                amount,
                TransactionStatus.COMPLETED.value,
                f"Stake in {pool.name}",
                {"pool_id": pool_id, "stake_id": stake.id},
            )
            await self._commissions.record_commissions(db, user_id, tx.id, amount)

        self._notifier.dispatch(
            user_id,
            NotificationType.STAKE.value,
            "Stake created",
            f"You staked {money_to_display(amount)} in {pool.name}.",
            {"stake_id": stake.id, "pool_id": pool_id},
        )
        return StakeResponse.from_stake(stake)

    async def process_roi_payout(self, db: AsyncSession, stake_id: int) -> RoiPayoutResponse:
        """Pay one day of ROI on an active stake: amount × (roi_min + roi_max) / 2."""
        async with unit_of_work(db):
            stake = await self._stakes.get_stake(db, stake_id, for_update=True)
            if stake is None:
                raise StakeNotFoundError(stake_id)
            if not stake.is_active:
                raise StakeNotActiveError(stake_id, stake.status)
            pool = await self._require_pool(db, stake.pool_id)
            rate = daily_roi(pool)
            payout = calculate_roi_payout(pool, stake.amount)
            if payout <= ZERO:
                return RoiPayoutResponse(
                    stake_id=stake_id,
                    payout=ZERO,
                    daily_roi=rate,
                    total_earned=stake.total_earned,
                    transaction_id=None,
                )

            updated = await self._stakes.add_earnings(db, stake_id, payout)
            if updated is None:
                raise StakeNotActiveError(stake_id, "not active")
            await self._wallets.apply_delta(db, stake.user_id, BalanceDelta(available=payout))
            tx = await self._wallets.insert_transaction(
                db,
                stake.user_id,
                TransactionType.ROI_PAYOUT.value,
                payout,
                TransactionStatus.COMPLETED.value,
                f"Daily ROI from {pool.name}",
                {"stake_id": stake_id, "pool_id": pool.id, "daily_roi": str(rate)},
            )

        self._notifier.dispatch(
            stake.user_id,
            NotificationType.YIELD.value,
            "ROI payout",
            f"{money_to_display(payout)} earned from {pool.name}.",
            {"stake_id": stake_id, "transaction_id": tx.id},
        )
        return RoiPayoutResponse(
            stake_id=stake_id,
            payout=payout,
            daily_roi=rate,
            total_earned=updated.total_earned,
            transaction_id=tx.id,
        )

    async def process_all_roi_payouts(self, db: AsyncSession) -> RoiBatchResponse:
        """Scheduler entry point. Each stake is paid in its own store transaction."""
        stake_ids = await self._stakes.list_active_stake_ids(db)
        processed = failed = 0
        total_paid = ZERO
        for stake_id in stake_ids:
            try:
                result = await self.process_roi_payout(db, stake_id)
            except Exception:
                failed += 1
                logger.exception("ROI payout skipped for stake %s", stake_id)
                continue
            processed += 1
            total_paid += result.payout

        logger.info(
            "ROI batch done: processed=%d failed=%d total_paid=%s",
            processed, failed, total_paid,
        )
        return RoiBatchResponse(processed=processed, failed=failed, total_paid=total_paid)

    async def unstake(
        self,
        db: AsyncSession,
        user_id: int,
        stake_id: int,
        now: datetime | None = None,
    ) -> StakeResponse:
        now = now or utc_now()
        async with unit_of_work(db):
            stake = await self._stakes.get_stake(db, stake_id, for_update=True)
            if stake is None or stake.user_id != user_id:
                raise StakeNotFoundError(stake_id)
            if not stake.is_active:
                raise StakeNotActiveError(stake_id, stake.status)
            if not stake.is_unlocked(now):
                raise StakeLockedError(stake_id, stake.unstake_available_at.isoformat())

            unstaked = await self._stakes.mark_unstaked(db, stake_id, now)
            if unstaked is None:
                raise StakeNotActiveError(stake_id, "not active")
            await self._wallets.apply_delta(
                db, user_id, BalanceDelta(locked=-stake.amount, available=stake.amount)
            )
            released = await self._pools.release_capacity(db, stake.pool_id, stake.amount)
            if released is None:
                logger.error(
                    "Pool %s current_staked below stake %s amount %s",
                    stake.pool_id, stake_id, stake.amount,
                )
                raise InternalError(f"Pool {stake.pool_id} capacity bookkeeping is inconsistent")
            await self._wallets.insert_transaction(
                db,
                user_id,
                TransactionType.POOL_UNSTAKE.value,
                stake.amount,
                TransactionStatus.COMPLETED.value,
                "Unstake",
                {"pool_id": stake.pool_id, "stake_id": stake_id},
            )

        self._notifier.dispatch(
            user_id,
            NotificationType.UNSTAKE.value,
            "Stake released",
            f"{money_to_display(stake.amount)} returned to your available balance.",
            {"stake_id": stake_id},
        )
        return StakeResponse.from_stake(unstaked)

    async def list_stakes(
        self, db: AsyncSession, user_id: int, status: StakeStatus | None = None
    ) -> StakeListResponse:
        stakes = await self._stakes.list_stakes(db, user_id, status.value if status else None)
        return StakeListResponse(stakes=[StakeResponse.from_stake(s) for s in stakes])

    async def get_summary(self, db: AsyncSession, user_id: int) -> StakeSummaryResponse:
        summary = await self._stakes.get_summary(db, user_id)
        return StakeSummaryResponse.from_summary(summary)

    async def _require_pool(self, db: AsyncSession, pool_id: int) -> Pool:
        pool = await self._pools.get_pool(db, pool_id)
        if pool is None:
            raise PoolNotFoundError(pool_id)
        return pool

    async def _raise_reserve_failure(self, db: AsyncSession, pool_id: int) -> None:
        # The guard failed: re-read only to pick the error, the write already did not happen
        pool = await self._require_pool(db, pool_id)
        if not pool.is_active:
            raise PoolInactiveError(pool_id)
        raise CapacityExceededError(pool_id, pool.remaining_capacity)
