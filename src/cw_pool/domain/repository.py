"""Repository Protocol for the Pool Registry."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_pool.domain.models import Pool


class PoolRepositoryProtocol(Protocol):
    async def get_pool(
        self, db: AsyncSession, pool_id: int, for_update: bool = False
    ) -> Pool | None: ...

    async def list_pools(self, db: AsyncSession, status: str | None) -> list[Pool]: ...

    async def create_pool(
        self,
        db: AsyncSession,
        name: str,
        bot_tier: str,
        min_stake: Decimal,
        max_stake: Decimal | None,
        total_capacity: Decimal | None,
        roi_min: Decimal,
        roi_max: Decimal,
        lock_period_days: int,
    ) -> Pool: ...

    async def set_status(self, db: AsyncSession, pool_id: int, status: str) -> Pool | None: ...

    async def reserve_capacity(
        self, db: AsyncSession, pool_id: int, amount: Decimal
    ) -> Pool | None:
        """Conditional increment of current_staked. None if inactive or over capacity."""
        ...

    async def release_capacity(
        self, db: AsyncSession, pool_id: int, amount: Decimal
    ) -> Pool | None:
        """Conditional decrement of current_staked. None if it would go below zero."""
        ...
