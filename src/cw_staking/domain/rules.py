"""Pure staking rules. Checked in this order: pool active, min, max, capacity."""

from datetime import datetime, timedelta
from decimal import Decimal

from src.cw_common.errors import (
    AboveMaximumStakeError,
    BelowMinimumStakeError,
    CapacityExceededError,
    PoolInactiveError,
)
from src.cw_common.money import quantize_money
from src.cw_pool.domain.models import Pool
from src.cw_pool.domain.rules import check_roi_band


def check_pool_active(pool: Pool) -> None:
    if not pool.is_active:
        raise PoolInactiveError(pool.id)


def check_stake_limits(pool: Pool, amount: Decimal) -> None:
    if amount < pool.min_stake:
        raise BelowMinimumStakeError(pool.min_stake)
    if pool.max_stake is not None and amount > pool.max_stake:
        raise AboveMaximumStakeError(pool.max_stake)
    remaining = pool.remaining_capacity
    if remaining is not None and amount > remaining:
        raise CapacityExceededError(pool.id, remaining)


def daily_roi(pool: Pool) -> Decimal:
    """Midpoint of the pool's daily ROI band. Raises InvalidPoolConfigError on a bad band."""
    check_roi_band(pool.roi_min, pool.roi_max)
    return (pool.roi_min + pool.roi_max) / 2


def calculate_roi_payout(pool: Pool, amount: Decimal) -> Decimal:
    return quantize_money(amount * daily_roi(pool))


def unlock_time(staked_at: datetime, lock_period_days: int) -> datetime:
    return staked_at + timedelta(days=lock_period_days)
