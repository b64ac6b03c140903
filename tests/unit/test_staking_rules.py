"""Unit tests for pure staking rules."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from src.cw_common.errors import (
    AboveMaximumStakeError,
    BelowMinimumStakeError,
    CapacityExceededError,
    InvalidPoolConfigError,
    PoolInactiveError,
)
from src.cw_pool.domain.models import Pool
from src.cw_staking.domain.models import PoolStake
from src.cw_staking.domain.rules import (
    calculate_roi_payout,
    check_pool_active,
    check_stake_limits,
    daily_roi,
    unlock_time,
)


def _make_pool(**kwargs) -> Pool:
    defaults = dict(
        id=1, name="Anchor Pool", bot_tier="anchor",
        min_stake=Decimal("100"), max_stake=Decimal("5000"),
        total_capacity=Decimal("10000"), current_staked=Decimal("0"),
        roi_min=Decimal("0.008"), roi_max=Decimal("0.0096"),
        lock_period_days=40, status="active",
    )
    defaults.update(kwargs)
    return Pool(**defaults)


class TestStakeLimits:
    def test_amount_equal_to_minimum_passes(self) -> None:
        check_stake_limits(_make_pool(), Decimal("100"))

    def test_one_cent_below_minimum_fails(self) -> None:
        with pytest.raises(BelowMinimumStakeError):
            check_stake_limits(_make_pool(), Decimal("99.99"))

    def test_amount_equal_to_maximum_passes(self) -> None:
        check_stake_limits(_make_pool(), Decimal("5000"))

    def test_above_maximum_fails(self) -> None:
        with pytest.raises(AboveMaximumStakeError):
            check_stake_limits(_make_pool(), Decimal("5000.01"))

    def test_no_maximum(self) -> None:
        check_stake_limits(_make_pool(max_stake=None, total_capacity=None), Decimal("1000000"))

    def test_capacity_exceeded(self) -> None:
        pool = _make_pool(current_staked=Decimal("9950"))
        with pytest.raises(CapacityExceededError):
            check_stake_limits(pool, Decimal("100"))

    def test_exactly_fills_capacity(self) -> None:
        check_stake_limits(_make_pool(current_staked=Decimal("9900")), Decimal("100"))

    def test_minimum_checked_before_capacity(self) -> None:
        pool = _make_pool(current_staked=Decimal("10000"))
        with pytest.raises(BelowMinimumStakeError):
            check_stake_limits(pool, Decimal("50"))

    def test_inactive_pool(self) -> None:
        with pytest.raises(PoolInactiveError):
            check_pool_active(_make_pool(status="closed"))


class TestRoi:
    def test_daily_roi_is_band_midpoint(self) -> None:
        assert daily_roi(_make_pool()) == Decimal("0.0088")

    def test_payout_for_1000(self) -> None:
        assert calculate_roi_payout(_make_pool(), Decimal("1000")) == Decimal("8.80")

    def test_payout_truncates_to_ledger_precision(self) -> None:
        payout = calculate_roi_payout(_make_pool(), Decimal("0.123456789"))
        assert payout == Decimal("0.00108641")

    def test_zero_band_pays_nothing(self) -> None:
        pool = _make_pool(roi_min=Decimal("0"), roi_max=Decimal("0"))
        assert calculate_roi_payout(pool, Decimal("1000")) == Decimal("0")

    def test_invalid_band_raises(self) -> None:
        pool = _make_pool(roi_min=Decimal("0.01"), roi_max=Decimal("0.005"))
        with pytest.raises(InvalidPoolConfigError):
            daily_roi(pool)


class TestLock:
    def test_unlock_time(self) -> None:
        staked = datetime(2026, 1, 1, tzinfo=UTC)
        assert unlock_time(staked, 40) == datetime(2026, 2, 10, tzinfo=UTC)

    def test_is_unlocked_at_boundary(self) -> None:
        staked = datetime(2026, 1, 1, tzinfo=UTC)
        stake = PoolStake(
            id=1, user_id=1, pool_id=1, amount=Decimal("100"), status="active",
            staked_at=staked, unstake_available_at=unlock_time(staked, 40),
        )
        assert not stake.is_unlocked(stake.unstake_available_at - timedelta(seconds=1))
        assert stake.is_unlocked(stake.unstake_available_at)
