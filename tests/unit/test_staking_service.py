"""Unit tests for StakingApplicationService using mock repositories."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.cw_common.errors import (
    BelowMinimumStakeError,
    CapacityExceededError,
    InsufficientBalanceError,
    InternalError,
    InvalidAmountError,
    PoolInactiveError,
    PoolNotFoundError,
    StakeLockedError,
    StakeNotActiveError,
    StakeNotFoundError,
)
from src.cw_pool.domain.models import Pool
from src.cw_staking.application.service import StakingApplicationService
from src.cw_staking.domain.models import PoolStake, StakeSummary
from src.cw_wallet.domain.models import BalanceDelta, Transaction

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _make_pool(**kwargs) -> Pool:
    defaults = dict(
        id=1, name="Anchor Pool", bot_tier="anchor",
        min_stake=Decimal("100"), max_stake=None,
        total_capacity=Decimal("100000"), current_staked=Decimal("0"),
        roi_min=Decimal("0.008"), roi_max=Decimal("0.0096"),
        lock_period_days=40, status="active",
    )
    defaults.update(kwargs)
    return Pool(**defaults)


def _make_stake(**kwargs) -> PoolStake:
    defaults = dict(
        id=10, user_id=1, pool_id=1, amount=Decimal("1000"), status="active",
        staked_at=NOW, unstake_available_at=NOW + timedelta(days=40),
        unstaked_at=None, total_earned=Decimal("0"),
    )
    defaults.update(kwargs)
    return PoolStake(**defaults)


def _make_tx(tx_id: int = 500, tx_type: str = "pool_stake", amount: str = "1000") -> Transaction:
    return Transaction(
        id=tx_id, user_id=1, type=tx_type, amount=Decimal(amount),
        status="completed", created_at=NOW, completed_at=NOW,
    )


class _Deps:
    def __init__(self) -> None:
        self.stakes = AsyncMock()
        self.pools = AsyncMock()
        self.wallets = AsyncMock()
        self.commissions = AsyncMock()
        self.notifier = MagicMock()
        self.svc = StakingApplicationService(
            stake_repo=self.stakes,
            pool_repo=self.pools,
            wallet_repo=self.wallets,
            commissions=self.commissions,
            notifier=self.notifier,
        )


@pytest.fixture
def deps() -> _Deps:
    return _Deps()


class TestCreateStake:
    async def test_happy_path_moves_available_to_locked(self, deps: _Deps) -> None:
        deps.pools.get_pool.return_value = _make_pool()
        deps.pools.reserve_capacity.return_value = _make_pool(current_staked=Decimal("1000"))
        deps.stakes.insert_stake.return_value = _make_stake()
        deps.wallets.insert_transaction.return_value = _make_tx()
        db = AsyncMock()

        result = await deps.svc.create_stake(db, 1, 1, Decimal("1000"), now=NOW)

        assert result.id == 10
        assert result.status == "active"
        deps.wallets.apply_delta.assert_awaited_once_with(
            db, 1, BalanceDelta(available=Decimal("-1000"), locked=Decimal("1000"))
        )
        deps.pools.reserve_capacity.assert_awaited_once_with(db, 1, Decimal("1000"))
        deps.stakes.insert_stake.assert_awaited_once_with(
            db, 1, 1, Decimal("1000"), NOW, NOW + timedelta(days=40)
        )
        assert deps.wallets.insert_transaction.await_args.args[2] == "pool_stake"
        deps.commissions.record_commissions.assert_awaited_once_with(db, 1, 500, Decimal("1000"))
        db.commit.assert_awaited_once()
        deps.notifier.dispatch.assert_called_once()

    async def test_amount_equal_to_min_stake_succeeds(self, deps: _Deps) -> None:
        deps.pools.get_pool.return_value = _make_pool()
        deps.pools.reserve_capacity.return_value = _make_pool()
        deps.stakes.insert_stake.return_value = _make_stake(amount=Decimal("100"))
        deps.wallets.insert_transaction.return_value = _make_tx(amount="100")

        result = await deps.svc.create_stake(AsyncMock(), 1, 1, Decimal("100"), now=NOW)

        assert result.amount == Decimal("100")

    async def test_below_min_stake_fails_without_writes(self, deps: _Deps) -> None:
        deps.pools.get_pool.return_value = _make_pool()
        db = AsyncMock()

        with pytest.raises(BelowMinimumStakeError):
            await deps.svc.create_stake(db, 1, 1, Decimal("99.99"), now=NOW)

        deps.wallets.apply_delta.assert_not_awaited()
        db.commit.assert_not_awaited()

    async def test_amount_below_ledger_precision_rejected_before_pool_lookup(
        self, deps: _Deps
    ) -> None:
        db = AsyncMock()

        with pytest.raises(InvalidAmountError):
            await deps.svc.create_stake(db, 1, 1, Decimal("0.000000001"), now=NOW)

        deps.pools.get_pool.assert_not_awaited()
        deps.wallets.apply_delta.assert_not_awaited()
        db.commit.assert_not_awaited()

    async def test_inactive_pool(self, deps: _Deps) -> None:
        deps.pools.get_pool.return_value = _make_pool(status="paused")

        with pytest.raises(PoolInactiveError):
            await deps.svc.create_stake(AsyncMock(), 1, 1, Decimal("500"), now=NOW)

        deps.wallets.apply_delta.assert_not_awaited()

    async def test_unknown_pool(self, deps: _Deps) -> None:
        deps.pools.get_pool.return_value = None

        with pytest.raises(PoolNotFoundError):
            await deps.svc.create_stake(AsyncMock(), 1, 99, Decimal("500"), now=NOW)

    async def test_insufficient_balance_rolls_back(self, deps: _Deps) -> None:
        deps.pools.get_pool.return_value = _make_pool()
        deps.wallets.apply_delta.side_effect = InsufficientBalanceError(
            "available", Decimal("1000"), Decimal("10")
        )
        db = AsyncMock()

        with pytest.raises(InsufficientBalanceError):
            await deps.svc.create_stake(db, 1, 1, Decimal("1000"), now=NOW)

        deps.pools.reserve_capacity.assert_not_awaited()
        db.rollback.assert_awaited_once()

    async def test_capacity_race_rolls_back_wallet_lock(self, deps: _Deps) -> None:
        # Pre-check saw room; another stake filled the pool before our conditional UPDATE
        deps.pools.get_pool.side_effect = [
            _make_pool(),
            _make_pool(current_staked=Decimal("99900")),
        ]
        deps.pools.reserve_capacity.return_value = None
        db = AsyncMock()

        with pytest.raises(CapacityExceededError):
            await deps.svc.create_stake(db, 1, 1, Decimal("1000"), now=NOW)

        deps.stakes.insert_stake.assert_not_awaited()
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()
        deps.notifier.dispatch.assert_not_called()

    async def test_pool_paused_during_reserve(self, deps: _Deps) -> None:
        deps.pools.get_pool.side_effect = [_make_pool(), _make_pool(status="paused")]
        deps.pools.reserve_capacity.return_value = None

        with pytest.raises(PoolInactiveError):
            await deps.svc.create_stake(AsyncMock(), 1, 1, Decimal("1000"), now=NOW)


class TestRoiPayout:
    async def test_payout_for_1000_at_anchor_band(self, deps: _Deps) -> None:
        deps.stakes.get_stake.return_value = _make_stake()
        deps.pools.get_pool.return_value = _make_pool()
        deps.stakes.add_earnings.return_value = _make_stake(total_earned=Decimal("8.80"))
        deps.wallets.insert_transaction.return_value = _make_tx(501, "roi_payout", "8.80")
        db = AsyncMock()

        result = await deps.svc.process_roi_payout(db, 10)

        assert result.payout == Decimal("8.80")
        assert result.daily_roi == Decimal("0.0088")
        assert result.total_earned == Decimal("8.80")
        assert result.transaction_id == 501
        deps.stakes.add_earnings.assert_awaited_once_with(db, 10, Decimal("8.80"))
        deps.wallets.apply_delta.assert_awaited_once_with(
            db, 1, BalanceDelta(available=Decimal("8.80"))
        )
        assert deps.wallets.insert_transaction.await_args.args[2] == "roi_payout"
        db.commit.assert_awaited_once()

    async def test_zero_payout_writes_nothing(self, deps: _Deps) -> None:
        deps.stakes.get_stake.return_value = _make_stake()
        deps.pools.get_pool.return_value = _make_pool(roi_min=Decimal("0"), roi_max=Decimal("0"))

        result = await deps.svc.process_roi_payout(AsyncMock(), 10)

        assert result.payout == Decimal("0")
        assert result.transaction_id is None
        deps.stakes.add_earnings.assert_not_awaited()
        deps.wallets.apply_delta.assert_not_awaited()

    async def test_missing_stake(self, deps: _Deps) -> None:
        deps.stakes.get_stake.return_value = None
        with pytest.raises(StakeNotFoundError):
            await deps.svc.process_roi_payout(AsyncMock(), 10)

    async def test_unstaked_stake_not_paid(self, deps: _Deps) -> None:
        deps.stakes.get_stake.return_value = _make_stake(status="unstaked")
        with pytest.raises(StakeNotActiveError):
            await deps.svc.process_roi_payout(AsyncMock(), 10)
        deps.wallets.apply_delta.assert_not_awaited()

    async def test_batch_counts_failures_and_continues(self, deps: _Deps) -> None:
        deps.stakes.list_active_stake_ids.return_value = [10, 11, 12]
        deps.stakes.get_stake.side_effect = [
            _make_stake(id=10),
            None,
            _make_stake(id=12),
        ]
        deps.pools.get_pool.return_value = _make_pool()
        deps.stakes.add_earnings.return_value = _make_stake(total_earned=Decimal("8.80"))
        deps.wallets.insert_transaction.return_value = _make_tx(501, "roi_payout", "8.80")

        result = await deps.svc.process_all_roi_payouts(AsyncMock())

        assert result.processed == 2
        assert result.failed == 1
        assert result.total_paid == Decimal("17.60")


class TestUnstake:
    async def test_unstake_after_lock(self, deps: _Deps) -> None:
        later = NOW + timedelta(days=41)
        deps.stakes.get_stake.return_value = _make_stake()
        deps.stakes.mark_unstaked.return_value = _make_stake(status="unstaked", unstaked_at=later)
        deps.pools.release_capacity.return_value = _make_pool()
        db = AsyncMock()

        result = await deps.svc.unstake(db, 1, 10, now=later)

        assert result.status == "unstaked"
        deps.wallets.apply_delta.assert_awaited_once_with(
            db, 1, BalanceDelta(locked=Decimal("-1000"), available=Decimal("1000"))
        )
        deps.pools.release_capacity.assert_awaited_once_with(db, 1, Decimal("1000"))
        assert deps.wallets.insert_transaction.await_args.args[2] == "pool_unstake"
        db.commit.assert_awaited_once()

    async def test_locked_stake(self, deps: _Deps) -> None:
        deps.stakes.get_stake.return_value = _make_stake()
        db = AsyncMock()

        with pytest.raises(StakeLockedError):
            await deps.svc.unstake(db, 1, 10, now=NOW + timedelta(days=39))

        deps.stakes.mark_unstaked.assert_not_awaited()
        deps.wallets.apply_delta.assert_not_awaited()

    async def test_foreign_stake_is_not_found(self, deps: _Deps) -> None:
        deps.stakes.get_stake.return_value = _make_stake(user_id=2)
        with pytest.raises(StakeNotFoundError):
            await deps.svc.unstake(AsyncMock(), 1, 10, now=NOW + timedelta(days=50))

    async def test_already_unstaked(self, deps: _Deps) -> None:
        deps.stakes.get_stake.return_value = _make_stake(status="unstaked")
        with pytest.raises(StakeNotActiveError):
            await deps.svc.unstake(AsyncMock(), 1, 10, now=NOW + timedelta(days=50))

    async def test_release_underflow_rolls_back(self, deps: _Deps) -> None:
        deps.stakes.get_stake.return_value = _make_stake()
        deps.stakes.mark_unstaked.return_value = _make_stake(status="unstaked")
        deps.pools.release_capacity.return_value = None
        db = AsyncMock()

        with pytest.raises(InternalError):
            await deps.svc.unstake(db, 1, 10, now=NOW + timedelta(days=50))

        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()


class TestReads:
    async def test_summary(self, deps: _Deps) -> None:
        deps.stakes.get_summary.return_value = StakeSummary(
            active_count=2, total_staked=Decimal("5000"), total_earned=Decimal("44")
        )

        result = await deps.svc.get_summary(AsyncMock(), 1)

        assert result.active_count == 2
        assert result.total_staked_display == "$5,000.00"

    async def test_list_all_statuses(self, deps: _Deps) -> None:
        deps.stakes.list_stakes.return_value = [_make_stake(), _make_stake(id=11)]
        db = AsyncMock()

        result = await deps.svc.list_stakes(db, 1)

        deps.stakes.list_stakes.assert_awaited_once_with(db, 1, None)
        assert len(result.stakes) == 2
