"""Pydantic schemas for cw_pool API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.cw_common.enums import BotTier, PoolStatus
from src.cw_common.money import money_to_display
from src.cw_pool.domain.models import Pool


class CreatePoolRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    bot_tier: BotTier
    min_stake: Decimal = Field(..., gt=0)
    max_stake: Decimal | None = Field(None, gt=0)
    total_capacity: Decimal | None = Field(None, gt=0)
    roi_min: Decimal = Field(..., ge=0, description="Daily ROI fraction, 0.008 = 0.8%")
    roi_max: Decimal = Field(..., ge=0)
    lock_period_days: int = Field(..., ge=0, le=3650)


class SetPoolStatusRequest(BaseModel):
    status: PoolStatus


class PoolResponse(BaseModel):
    id: int
    name: str
    bot_tier: str
    min_stake: Decimal
    min_stake_display: str
    max_stake: Decimal | None
    total_capacity: Decimal | None
    current_staked: Decimal
    remaining_capacity: Decimal | None
    roi_min: Decimal
    roi_max: Decimal
    daily_roi_range_display: str
    lock_period_days: int
    status: str

    @classmethod
    def from_pool(cls, pool: Pool) -> "PoolResponse":
        return cls(
            id=pool.id,
            name=pool.name,
            bot_tier=pool.bot_tier,
            min_stake=pool.min_stake,
            min_stake_display=money_to_display(pool.min_stake),
            max_stake=pool.max_stake,
            total_capacity=pool.total_capacity,
            current_staked=pool.current_staked,
            remaining_capacity=pool.remaining_capacity,
            roi_min=pool.roi_min,
            roi_max=pool.roi_max,
            daily_roi_range_display=f"{pool.roi_min * 100:.2f}% - {pool.roi_max * 100:.2f}%",
            lock_period_days=pool.lock_period_days,
            status=pool.status,
        )


class PoolListResponse(BaseModel):
    pools: list[PoolResponse]
