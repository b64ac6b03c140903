"""YieldApplicationService: feeds the simulator with the caller's staked total."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.enums import BotTier
from src.cw_staking.domain.repository import StakeRepositoryProtocol
from src.cw_staking.infrastructure.persistence import StakeRepository
from src.cw_yield.application.schemas import (
    CurrentYieldResponse,
    RoiHistoryResponse,
    RoiSampleItem,
    TierResponse,
)
from src.cw_yield.domain.simulator import calculate_current_earnings, generate_roi_history
from src.cw_yield.domain.tiers import BOT_TIERS, get_tier_config, tier_for_stake


class YieldApplicationService:
    def __init__(self, stake_repo: StakeRepositoryProtocol | None = None) -> None:
        self._stakes: StakeRepositoryProtocol = stake_repo or StakeRepository()

    def list_tiers(self) -> list[TierResponse]:
        return [TierResponse.from_config(c) for c in BOT_TIERS.values()]

    async def get_current(
        self, db: AsyncSession, user_id: int, moment: datetime | None = None
    ) -> CurrentYieldResponse:
        summary = await self._stakes.get_summary(db, user_id)
        earnings = calculate_current_earnings(user_id, summary.total_staked, moment)
        return CurrentYieldResponse.from_earnings(earnings)

    async def get_history(
        self,
        db: AsyncSession,
        user_id: int,
        tier: BotTier | None,
        hours: int,
        now: datetime | None = None,
    ) -> RoiHistoryResponse:
        if tier is None:
            summary = await self._stakes.get_summary(db, user_id)
            tier = tier_for_stake(summary.total_staked)
        config = get_tier_config(tier)
        history = generate_roi_history(user_id, config.tier, hours, now)
        return RoiHistoryResponse(
            tier=config.tier.value,
            hours=len(history),
            samples=[RoiSampleItem.from_sample(s) for s in history],
        )
