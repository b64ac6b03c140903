"""PoolApplicationService: Pool Registry reads and admin writes.

Capacity bookkeeping (`reserve_capacity` / `release_capacity`) is not exposed here;
only the Staking Manager moves `current_staked`, inside its own unit of work.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.database import unit_of_work
from src.cw_common.enums import PoolStatus
from src.cw_common.errors import PoolNotFoundError
from src.cw_pool.application.schemas import CreatePoolRequest, PoolListResponse, PoolResponse
from src.cw_pool.domain.repository import PoolRepositoryProtocol
from src.cw_pool.domain.rules import validate_pool_config
from src.cw_pool.infrastructure.persistence import PoolRepository

logger = logging.getLogger(__name__)


class PoolApplicationService:
    def __init__(self, repo: PoolRepositoryProtocol | None = None) -> None:
        self._repo: PoolRepositoryProtocol = repo or PoolRepository()

    async def get_pool(self, db: AsyncSession, pool_id: int) -> PoolResponse:
        pool = await self._repo.get_pool(db, pool_id)
        if pool is None:
            raise PoolNotFoundError(pool_id)
        return PoolResponse.from_pool(pool)

    async def list_pools(
        self, db: AsyncSession, status: PoolStatus | None = PoolStatus.ACTIVE
    ) -> PoolListResponse:
        pools = await self._repo.list_pools(db, status.value if status else None)
        return PoolListResponse(pools=[PoolResponse.from_pool(p) for p in pools])

    async def create_pool(self, db: AsyncSession, req: CreatePoolRequest) -> PoolResponse:
        validate_pool_config(
            req.min_stake,
            req.max_stake,
            req.total_capacity,
            req.roi_min,
            req.roi_max,
            req.lock_period_days,
        )
        async with unit_of_work(db):
            pool = await self._repo.create_pool(
                db,
                req.name,
                req.bot_tier.value,
                req.min_stake,
                req.max_stake,
                req.total_capacity,
                req.roi_min,
                req.roi_max,
                req.lock_period_days,
            )
        logger.info("Pool created: id=%s tier=%s", pool.id, pool.bot_tier)
        return PoolResponse.from_pool(pool)

    async def set_pool_status(
        self, db: AsyncSession, pool_id: int, status: PoolStatus
    ) -> PoolResponse:
        async with unit_of_work(db):
            pool = await self._repo.set_status(db, pool_id, status.value)
            if pool is None:
                raise PoolNotFoundError(pool_id)
        logger.info("Pool %s status -> %s", pool_id, status.value)
        return PoolResponse.from_pool(pool)
