"""Pydantic schemas for cw_yield API. All figures are display-only."""

from decimal import Decimal

from pydantic import BaseModel

from src.cw_common.money import money_to_display
from src.cw_yield.domain.simulator import CurrentEarnings, RoiSample
from src.cw_yield.domain.tiers import TierConfig


class TierResponse(BaseModel):
    tier: str
    name: str
    minimum_stake: Decimal
    daily_roi_min_percent: float
    daily_roi_max_percent: float
    trading_hours_per_day: int
    trading_days_per_week: int
    capital_lock_days: int

    @classmethod
    def from_config(cls, config: TierConfig) -> "TierResponse":
        return cls(
            tier=config.tier.value,
            name=config.name,
            minimum_stake=config.minimum_stake,
            daily_roi_min_percent=round(config.daily_roi_min * 100, 4),
            daily_roi_max_percent=round(config.daily_roi_max * 100, 4),
            trading_hours_per_day=config.trading_hours_per_day,
            trading_days_per_week=config.trading_days_per_week,
            capital_lock_days=config.capital_lock_days,
        )


class CurrentYieldResponse(BaseModel):
    tier: str
    staked_amount: Decimal
    staked_amount_display: str
    current_hourly_earning: Decimal
    projected_daily_earning: Decimal
    projected_daily_earning_display: str
    actual_daily_earning: Decimal
    actual_daily_earning_display: str
    current_rate_percent: float
    actual_daily_rate_percent: float
    rate_multiplier: float
    market_sentiment: str
    volatility: str
    display_rate: str

    @classmethod
    def from_earnings(cls, e: CurrentEarnings) -> "CurrentYieldResponse":
        return cls(
            tier=e.tier.value,
            staked_amount=e.staked_amount,
            staked_amount_display=money_to_display(e.staked_amount),
            current_hourly_earning=e.current_hourly_earning,
            projected_daily_earning=e.projected_daily_earning,
            projected_daily_earning_display=money_to_display(e.projected_daily_earning),
            actual_daily_earning=e.actual_daily_earning,
            actual_daily_earning_display=money_to_display(e.actual_daily_earning),
            current_rate_percent=e.current_rate_percent,
            actual_daily_rate_percent=e.actual_daily_rate_percent,
            rate_multiplier=e.rate_multiplier,
            market_sentiment=e.market_sentiment.value,
            volatility=e.volatility.value,
            display_rate=e.display_rate,
        )


class RoiSampleItem(BaseModel):
    timestamp: str
    hourly_rate: float
    rate_percent: float

    @classmethod
    def from_sample(cls, s: RoiSample) -> "RoiSampleItem":
        return cls(
            timestamp=s.timestamp.isoformat(),
            hourly_rate=s.hourly_rate,
            rate_percent=s.rate_percent,
        )


class RoiHistoryResponse(BaseModel):
    tier: str
    hours: int
    samples: list[RoiSampleItem]
