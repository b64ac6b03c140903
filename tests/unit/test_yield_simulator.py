"""Unit tests for the yield simulator and tier catalog."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.cw_common.enums import BotTier, MarketSentiment, Volatility
from src.cw_common.errors import InvalidTierError
from src.cw_common.money import quantize_money
from src.cw_staking.domain.models import StakeSummary
from src.cw_yield.application.service import YieldApplicationService
from src.cw_yield.domain.simulator import (
    RoiHistory,
    calculate_current_earnings,
    calculate_dynamic_roi,
    generate_roi_history,
)
from src.cw_yield.domain.tiers import BOT_TIERS, get_tier_config, tier_for_stake

T = datetime(2026, 5, 17, 14, 23, 41, tzinfo=UTC)


class TestTiers:
    def test_catalog(self) -> None:
        assert list(BOT_TIERS) == [BotTier.ANCHOR, BotTier.VECTOR, BotTier.KINETIC, BotTier.HORIZON]
        vector = get_tier_config("vector")
        assert vector.minimum_stake == Decimal("4000")
        assert vector.daily_roi_min == 0.0096
        assert vector.daily_roi_max == 0.0112
        assert vector.hourly_roi_max == pytest.approx(0.0014)

    def test_unknown_tier(self) -> None:
        with pytest.raises(InvalidTierError):
            get_tier_config("gold")

    @pytest.mark.parametrize(
        ("amount", "tier"),
        [
            ("0", BotTier.ANCHOR),
            ("50", BotTier.ANCHOR),
            ("3999.99", BotTier.ANCHOR),
            ("4000", BotTier.VECTOR),
            ("25000", BotTier.KINETIC),
            ("49999.99", BotTier.KINETIC),
            ("50000", BotTier.HORIZON),
            ("1000000", BotTier.HORIZON),
        ],
    )
    def test_tier_for_stake(self, amount: str, tier: BotTier) -> None:
        assert tier_for_stake(Decimal(amount)) is tier


class TestDynamicRoi:
    def test_identical_arguments_identical_output(self) -> None:
        assert calculate_dynamic_roi(7, "vector", T) == calculate_dynamic_roi(7, "vector", T)

    def test_naive_moment_treated_as_utc(self) -> None:
        naive = T.replace(tzinfo=None)
        assert calculate_dynamic_roi(7, "vector", naive) == calculate_dynamic_roi(7, "vector", T)

    def test_daily_rate_fixed_for_the_day_and_within_band(self) -> None:
        morning = calculate_dynamic_roi(7, "vector", T.replace(hour=1))
        evening = calculate_dynamic_roi(7, "vector", T.replace(hour=22))
        assert morning.actual_daily_rate == evening.actual_daily_rate
        assert 0.0096 <= morning.actual_daily_rate <= 0.0112
        assert morning.base_hourly_rate == pytest.approx(morning.actual_daily_rate / 8)

    def test_fixed_rate_tier(self) -> None:
        roi = calculate_dynamic_roi(7, BotTier.HORIZON, T)
        assert roi.actual_daily_rate == pytest.approx(0.018)

    def test_multiplier_bounded(self) -> None:
        for minutes in range(0, 24 * 60, 17):
            moment = T.replace(hour=0, minute=0) + timedelta(minutes=minutes)
            roi = calculate_dynamic_roi(3, "anchor", moment)
            assert 0.5 <= roi.rate_multiplier <= 1.5
            assert roi.current_hourly_rate == pytest.approx(roi.base_hourly_rate * roi.rate_multiplier)
            assert isinstance(roi.market_sentiment, MarketSentiment)
            assert isinstance(roi.volatility, Volatility)

    def test_users_are_independent(self) -> None:
        rates = {calculate_dynamic_roi(u, "kinetic", T).actual_daily_rate for u in range(1, 20)}
        assert len(rates) > 1


class TestCurrentEarnings:
    def test_deterministic(self) -> None:
        a = calculate_current_earnings(7, Decimal("5000"), T)
        b = calculate_current_earnings(7, Decimal("5000"), T)
        assert a == b
        assert a.tier is BotTier.VECTOR

    def test_display_sign_follows_multiplier(self) -> None:
        for hour in range(24):
            e = calculate_current_earnings(11, Decimal("1000"), T.replace(hour=hour))
            assert e.display_rate.endswith("%")
            assert e.display_rate.startswith("+") == (e.rate_multiplier >= 1)

    def test_actual_daily_earning(self) -> None:
        e = calculate_current_earnings(7, Decimal("5000"), T)
        roi = calculate_dynamic_roi(7, "vector", T)
        assert e.actual_daily_earning == quantize_money(
            Decimal("5000") * Decimal(repr(roi.actual_daily_rate))
        )


class TestRoiHistory:
    def test_length_order_and_end(self) -> None:
        history = generate_roi_history(7, "vector", 24, now=T)
        samples = list(history)
        assert len(history) == 24
        assert len(samples) == 24
        assert samples[-1].timestamp == T
        assert samples[0].timestamp == T - timedelta(hours=23)
        assert all(a.timestamp < b.timestamp for a, b in zip(samples, samples[1:]))

    def test_reiterable(self) -> None:
        history = RoiHistory(7, "vector", 12, now=T)
        assert list(history) == list(history)

    def test_zero_hours(self) -> None:
        assert list(RoiHistory(7, "anchor", 0, now=T)) == []

    def test_negative_hours_rejected(self) -> None:
        with pytest.raises(ValueError):
            RoiHistory(7, "anchor", -1, now=T)

    def test_unknown_tier_fails_fast(self) -> None:
        with pytest.raises(InvalidTierError):
            RoiHistory(7, "gold", 5, now=T)


class TestYieldService:
    async def test_current_uses_staked_total(self) -> None:
        repo = AsyncMock()
        repo.get_summary.return_value = StakeSummary(1, Decimal("30000"), Decimal("0"))
        svc = YieldApplicationService(stake_repo=repo)

        result = await svc.get_current(AsyncMock(), 7, T)

        assert result.tier == "kinetic"
        assert result.staked_amount == Decimal("30000")

    async def test_history_defaults_to_stake_tier(self) -> None:
        repo = AsyncMock()
        repo.get_summary.return_value = StakeSummary(1, Decimal("4000"), Decimal("0"))
        svc = YieldApplicationService(stake_repo=repo)

        result = await svc.get_history(AsyncMock(), 7, None, 6, now=T)

        assert result.tier == "vector"
        assert result.hours == 6
        assert len(result.samples) == 6

    async def test_history_explicit_tier_skips_lookup(self) -> None:
        repo = AsyncMock()
        svc = YieldApplicationService(stake_repo=repo)

        result = await svc.get_history(AsyncMock(), 7, BotTier.HORIZON, 3, now=T)

        assert result.tier == "horizon"
        repo.get_summary.assert_not_awaited()

    def test_list_tiers(self) -> None:
        tiers = YieldApplicationService(stake_repo=AsyncMock()).list_tiers()
        assert [t.tier for t in tiers] == ["anchor", "vector", "kinetic", "horizon"]
        assert tiers[0].daily_roi_min_percent == 0.8
