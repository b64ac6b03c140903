"""Bot tier catalog: the single source of truth for tier ROI bands and stake thresholds."""

from dataclasses import dataclass
from decimal import Decimal

from src.cw_common.enums import BotTier
from src.cw_common.errors import InvalidTierError


@dataclass(frozen=True)
class TierConfig:
    tier: BotTier
    name: str
    minimum_stake: Decimal
    daily_roi_min: float             # fraction, 0.008 = 0.8%
    daily_roi_max: float
    capital_lock_days: int
    trading_hours_per_day: int = 8
    trading_days_per_week: int = 6
    roi_withdrawal_hours: int = 24
    investment_duration_days: int = 365

    @property
    def hourly_roi_min(self) -> float:
        return self.daily_roi_min / self.trading_hours_per_day

    @property
    def hourly_roi_max(self) -> float:
        return self.daily_roi_max / self.trading_hours_per_day


BOT_TIERS: dict[BotTier, TierConfig] = {
    BotTier.ANCHOR: TierConfig(
        tier=BotTier.ANCHOR,
        name="Anchor",
        minimum_stake=Decimal("100"),
        daily_roi_min=0.008,
        daily_roi_max=0.0096,
        capital_lock_days=40,
    ),
    BotTier.VECTOR: TierConfig(
        tier=BotTier.VECTOR,
        name="Vector",
        minimum_stake=Decimal("4000"),
        daily_roi_min=0.0096,
        daily_roi_max=0.0112,
        capital_lock_days=45,
    ),
    BotTier.KINETIC: TierConfig(
        tier=BotTier.KINETIC,
        name="Kinetic",
        minimum_stake=Decimal("25000"),
        daily_roi_min=0.0112,
        daily_roi_max=0.0128,
        capital_lock_days=65,
    ),
    BotTier.HORIZON: TierConfig(
        tier=BotTier.HORIZON,
        name="Horizon",
        minimum_stake=Decimal("50000"),
        daily_roi_min=0.018,        # fixed rate
        daily_roi_max=0.018,
        capital_lock_days=85,
    ),
}


def get_tier_config(tier: str | BotTier) -> TierConfig:
    try:
        return BOT_TIERS[BotTier(tier)]
    except ValueError:
        raise InvalidTierError(str(tier)) from None


def tier_for_stake(staked_amount: Decimal) -> BotTier:
    """Highest tier whose minimum is met. Below every minimum maps to the lowest tier."""
    qualifying = [c for c in BOT_TIERS.values() if staked_amount >= c.minimum_stake]
    if not qualifying:
        return BotTier.ANCHOR
    return max(qualifying, key=lambda c: c.minimum_stake).tier
