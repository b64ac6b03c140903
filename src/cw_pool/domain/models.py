"""Domain models for cw_pool: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Pool:
    id: int
    name: str
    bot_tier: str                    # BotTier value
    min_stake: Decimal
    max_stake: Decimal | None        # None = no per-stake ceiling
    total_capacity: Decimal | None   # None = unbounded pool
    current_staked: Decimal
    roi_min: Decimal                 # daily fraction, e.g. 0.008 = 0.8%
    roi_max: Decimal
    lock_period_days: int
    status: str                      # PoolStatus value
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def remaining_capacity(self) -> Decimal | None:
        if self.total_capacity is None:
            return None
        return max(self.total_capacity - self.current_staked, Decimal("0"))
