"""Pydantic schemas for cw_staking API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.cw_common.money import money_to_display
from src.cw_staking.domain.models import PoolStake, StakeSummary


class CreateStakeRequest(BaseModel):
    pool_id: int = Field(..., gt=0)
    amount: Decimal = Field(..., gt=0, max_digits=20, decimal_places=8)


class StakeResponse(BaseModel):
    id: int
    pool_id: int
    amount: Decimal
    amount_display: str
    status: str
    staked_at: str
    unstake_available_at: str
    unstaked_at: str | None
    total_earned: Decimal
    total_earned_display: str

    @classmethod
    def from_stake(cls, stake: PoolStake) -> "StakeResponse":
        return cls(
            id=stake.id,
            pool_id=stake.pool_id,
            amount=stake.amount,
            amount_display=money_to_display(stake.amount),
            status=stake.status,
            staked_at=stake.staked_at.isoformat(),
            unstake_available_at=stake.unstake_available_at.isoformat(),
            unstaked_at=stake.unstaked_at.isoformat() if stake.unstaked_at else None,
            total_earned=stake.total_earned,
            total_earned_display=money_to_display(stake.total_earned),
        )


class StakeListResponse(BaseModel):
    stakes: list[StakeResponse]


class StakeSummaryResponse(BaseModel):
    active_count: int
    total_staked: Decimal
    total_staked_display: str
    total_earned: Decimal
    total_earned_display: str

    @classmethod
    def from_summary(cls, summary: StakeSummary) -> "StakeSummaryResponse":
        return cls(
            active_count=summary.active_count,
            total_staked=summary.total_staked,
            total_staked_display=money_to_display(summary.total_staked),
            total_earned=summary.total_earned,
            total_earned_display=money_to_display(summary.total_earned),
        )


class RoiPayoutResponse(BaseModel):
    stake_id: int
    payout: Decimal
    daily_roi: Decimal
    total_earned: Decimal
    transaction_id: int | None


class RoiBatchResponse(BaseModel):
    processed: int
    failed: int
    total_paid: Decimal
