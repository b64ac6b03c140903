"""Domain models for cw_staking: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class PoolStake:
    id: int
    user_id: int
    pool_id: int
    amount: Decimal
    status: str                      # StakeStatus value
    staked_at: datetime
    unstake_available_at: datetime   # staked_at + pool.lock_period_days
    unstaked_at: datetime | None = None
    total_earned: Decimal = Decimal("0")

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def is_unlocked(self, now: datetime) -> bool:
        return now >= self.unstake_available_at


@dataclass
class StakeSummary:
    active_count: int
    total_staked: Decimal
    total_earned: Decimal
