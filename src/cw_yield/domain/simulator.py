"""Deterministic yield simulator (display only).

For a (user, tier, moment) triple the output is fully reproducible:

  actual_daily_rate  fixed per user per UTC day, p ∈ [0,1) from the base seed
                     selects a point in [daily_roi_min, daily_roi_max]
  rate_multiplier    1 + 0.5 · wave · (1 − 0.5 · day_progress²), where wave is
                     0.30·macro + 0.25·hourly + 0.35·minute_noise + 0.10·micro

The mean-reversion term only damps the oscillation toward the end of the day; the
time-integral of the instantaneous rate is NOT guaranteed to equal
actual_daily_rate. Real payouts never read these figures (see
cw_staking.domain.rules.calculate_roi_payout).
"""

import math
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from src.cw_common.datetime_utils import day_of_year, utc_now
from src.cw_common.enums import BotTier, MarketSentiment, Volatility
from src.cw_common.money import quantize_money
from src.cw_yield.domain.prng import generate_seed, seeded_unit
from src.cw_yield.domain.tiers import get_tier_config, tier_for_stake

MAX_DEVIATION = 0.5
SENTIMENT_THRESHOLD = 0.15
HIGH_VOLATILITY = 0.35
MEDIUM_VOLATILITY = 0.15

_WEIGHTS = (0.30, 0.25, 0.35, 0.10)  # macro, hourly, minute noise, micro jitter


@dataclass(frozen=True)
class DynamicRoi:
    current_hourly_rate: float
    current_daily_projection: float
    actual_daily_rate: float
    base_hourly_rate: float
    rate_multiplier: float
    market_sentiment: MarketSentiment
    volatility: Volatility


@dataclass(frozen=True)
class CurrentEarnings:
    tier: BotTier
    staked_amount: Decimal
    current_hourly_earning: Decimal
    projected_daily_earning: Decimal
    actual_daily_earning: Decimal
    current_rate_percent: float
    actual_daily_rate_percent: float
    rate_multiplier: float
    market_sentiment: MarketSentiment
    volatility: Volatility
    display_rate: str                # e.g. "+1.25%"


@dataclass(frozen=True)
class RoiSample:
    timestamp: datetime
    hourly_rate: float
    rate_percent: float


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def _sentiment(wave: float) -> MarketSentiment:
    if wave > SENTIMENT_THRESHOLD:
        return MarketSentiment.BULLISH
    if wave < -SENTIMENT_THRESHOLD:
        return MarketSentiment.BEARISH
    return MarketSentiment.NEUTRAL


def _volatility(wave: float) -> Volatility:
    score = abs(wave)
    if score > HIGH_VOLATILITY:
        return Volatility.HIGH
    if score > MEDIUM_VOLATILITY:
        return Volatility.MEDIUM
    return Volatility.LOW


def calculate_dynamic_roi(
    user_id: int, tier: str | BotTier, moment: datetime | None = None
) -> DynamicRoi:
    config = get_tier_config(tier)
    moment = _as_utc(moment or utc_now())

    doy = day_of_year(moment)
    hour, minute, second = moment.hour, moment.minute, moment.second
    day_progress = (hour * 3600 + minute * 60 + second) / 86400

    base_seed = generate_seed(user_id, doy, 0)
    hour_seed = generate_seed(user_id, doy, hour)
    minute_seed = generate_seed(user_id, doy * 24 + hour, minute)

    position = seeded_unit(base_seed)
    actual_daily_rate = config.daily_roi_min + position * (
        config.daily_roi_max - config.daily_roi_min
    )
    base_hourly_rate = actual_daily_rate / config.trading_hours_per_day

    macro = math.sin(day_progress * 2 * math.pi + position * 2 * math.pi)
    hourly = math.sin(day_progress * 6 * math.pi + seeded_unit(hour_seed) * math.pi)
    minute_noise = (seeded_unit(minute_seed) - 0.5) * 2
    micro = math.sin(second * 0.5) * 0.1

    w_macro, w_hourly, w_minute, w_micro = _WEIGHTS
    wave = macro * w_macro + hourly * w_hourly + minute_noise * w_minute + micro * w_micro

    reversion = day_progress**2 * 0.5
    rate_multiplier = 1 + wave * (1 - reversion) * MAX_DEVIATION
    current_hourly_rate = base_hourly_rate * rate_multiplier

    return DynamicRoi(
        current_hourly_rate=current_hourly_rate,
        current_daily_projection=current_hourly_rate * config.trading_hours_per_day,
        actual_daily_rate=actual_daily_rate,
        base_hourly_rate=base_hourly_rate,
        rate_multiplier=rate_multiplier,
        market_sentiment=_sentiment(wave),
        volatility=_volatility(wave),
    )


def _earning(amount: Decimal, rate: float) -> Decimal:
    return quantize_money(amount * Decimal(repr(rate)))


def calculate_current_earnings(
    user_id: int, staked_amount: Decimal, moment: datetime | None = None
) -> CurrentEarnings:
    tier = tier_for_stake(staked_amount)
    roi = calculate_dynamic_roi(user_id, tier, moment)

    current_rate_percent = roi.current_daily_projection * 100
    sign = "+" if roi.rate_multiplier >= 1 else ""
    return CurrentEarnings(
        tier=tier,
        staked_amount=staked_amount,
        current_hourly_earning=_earning(staked_amount, roi.current_hourly_rate),
        projected_daily_earning=_earning(staked_amount, roi.current_daily_projection),
        actual_daily_earning=_earning(staked_amount, roi.actual_daily_rate),
        current_rate_percent=current_rate_percent,
        actual_daily_rate_percent=roi.actual_daily_rate * 100,
        rate_multiplier=roi.rate_multiplier,
        market_sentiment=roi.market_sentiment,
        volatility=roi.volatility,
        display_rate=f"{sign}{current_rate_percent:.2f}%",
    )


class RoiHistory:
    """Hourly samples ending at `now`, oldest first.

    Lazy and restartable: each iteration recomputes from (user, tier, now), and `now`
    is fixed at construction, so every pass yields the same samples.
    """

    def __init__(
        self, user_id: int, tier: str | BotTier, hours: int, now: datetime | None = None
    ) -> None:
        if hours < 0:
            raise ValueError("hours must be >= 0")
        get_tier_config(tier)  # fail fast on an unknown tier
        self.user_id = user_id
        self.tier = tier
        self.hours = hours
        self.now = _as_utc(now or utc_now())

    def __len__(self) -> int:
        return self.hours

    def __iter__(self) -> Iterator[RoiSample]:
        for offset in range(self.hours - 1, -1, -1):
            moment = self.now - timedelta(hours=offset)
            roi = calculate_dynamic_roi(self.user_id, self.tier, moment)
            yield RoiSample(
                timestamp=moment,
                hourly_rate=roi.current_hourly_rate,
                rate_percent=roi.current_daily_projection * 100,
            )


def generate_roi_history(
    user_id: int, tier: str | BotTier, hours: int = 24, now: datetime | None = None
) -> RoiHistory:
    return RoiHistory(user_id, tier, hours, now)
