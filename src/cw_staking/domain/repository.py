"""Repository Protocol for pool stakes."""

from datetime import datetime
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_staking.domain.models import PoolStake, StakeSummary


class StakeRepositoryProtocol(Protocol):
    async def insert_stake(
        self,
        db: AsyncSession,
        user_id: int,
        pool_id: int,
        amount: Decimal,
        staked_at: datetime,
        unstake_available_at: datetime,
    ) -> PoolStake: ...

    async def get_stake(
        self, db: AsyncSession, stake_id: int, for_update: bool = False
    ) -> PoolStake | None: ...

    async def list_stakes(
        self, db: AsyncSession, user_id: int, status: str | None
    ) -> list[PoolStake]: ...

    async def list_active_stake_ids(self, db: AsyncSession) -> list[int]: ...

    async def add_earnings(
        self, db: AsyncSession, stake_id: int, payout: Decimal
    ) -> PoolStake | None:
        """total_earned += payout, only while active. None if the stake is not active."""
        ...

    async def mark_unstaked(
        self, db: AsyncSession, stake_id: int, unstaked_at: datetime
    ) -> PoolStake | None:
        """active → unstaked. None if the stake was not active (lost the race)."""
        ...

    async def get_summary(self, db: AsyncSession, user_id: int) -> StakeSummary: ...
