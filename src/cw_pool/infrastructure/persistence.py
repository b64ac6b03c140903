"""PoolRepository: raw SQL for the Pool Registry.

`current_staked` is only ever moved by a conditional UPDATE so that concurrent stakes
into the same pool can never push it past `total_capacity`.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.errors import InternalError
from src.cw_pool.domain.models import Pool

_POOL_COLUMNS = (
    "id, name, bot_tier, min_stake, max_stake, total_capacity, current_staked, "
    "roi_min, roi_max, lock_period_days, status, created_at, updated_at"
)

_GET_POOL_SQL = text(f"SELECT {_POOL_COLUMNS} FROM pools WHERE id = :id")

_GET_POOL_FOR_UPDATE_SQL = text(f"SELECT {_POOL_COLUMNS} FROM pools WHERE id = :id FOR UPDATE")

_LIST_POOLS_SQL = text(f"""
    SELECT {_POOL_COLUMNS}
    FROM pools
    WHERE (CAST(:status AS VARCHAR) IS NULL OR status = CAST(:status AS VARCHAR))
    ORDER BY min_stake ASC, id ASC
""")

_INSERT_POOL_SQL = text(f"""
    INSERT INTO pools
        (name, bot_tier, min_stake, max_stake, total_capacity, current_staked,
         roi_min, roi_max, lock_period_days, status)
    VALUES
        (:name, :bot_tier, :min_stake, :max_stake, :total_capacity, 0,
         :roi_min, :roi_max, :lock_period_days, 'active')
    RETURNING {_POOL_COLUMNS}
""")

_SET_STATUS_SQL = text(f"""
    UPDATE pools SET status = :status, updated_at = NOW()
    WHERE id = :id
    RETURNING {_POOL_COLUMNS}
""")

_RESERVE_CAPACITY_SQL = text(f"""
    UPDATE pools
    SET current_staked = current_staked + CAST(:amount AS NUMERIC), updated_at = NOW()
    WHERE id = :id
      AND status = 'active'
      AND (total_capacity IS NULL
           OR current_staked + CAST(:amount AS NUMERIC) <= total_capacity)
    RETURNING {_POOL_COLUMNS}
""")

_RELEASE_CAPACITY_SQL = text(f"""
    UPDATE pools
    SET current_staked = current_staked - CAST(:amount AS NUMERIC), updated_at = NOW()
    WHERE id = :id AND current_staked >= CAST(:amount AS NUMERIC)
    RETURNING {_POOL_COLUMNS}
""")


def _row_to_pool(row: object) -> Pool:
    return Pool(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        bot_tier=row.bot_tier,  # type: ignore[attr-defined]
        min_stake=row.min_stake,  # type: ignore[attr-defined]
        max_stake=row.max_stake,  # type: ignore[attr-defined]
        total_capacity=row.total_capacity,  # type: ignore[attr-defined]
        current_staked=row.current_staked,  # type: ignore[attr-defined]
        roi_min=row.roi_min,  # type: ignore[attr-defined]
        roi_max=row.roi_max,  # type: ignore[attr-defined]
        lock_period_days=row.lock_period_days,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class PoolRepository:
    async def get_pool(
        self, db: AsyncSession, pool_id: int, for_update: bool = False
    ) -> Pool | None:
        sql = _GET_POOL_FOR_UPDATE_SQL if for_update else _GET_POOL_SQL
        row = (await db.execute(sql, {"id": pool_id})).fetchone()
        return _row_to_pool(row) if row else None

    async def list_pools(self, db: AsyncSession, status: str | None) -> list[Pool]:
        result = await db.execute(_LIST_POOLS_SQL, {"status": status})
        return [_row_to_pool(row) for row in result.fetchall()]

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
    ) -> Pool:
        result = await db.execute(
            _INSERT_POOL_SQL,
            {
                "name": name,
                "bot_tier": bot_tier,
                "min_stake": min_stake,
                "max_stake": max_stake,
                "total_capacity": total_capacity,
                "roi_min": roi_min,
                "roi_max": roi_max,
                "lock_period_days": lock_period_days,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Pool insert returned no rows: this should never happen")
        return _row_to_pool(row)

    async def set_status(self, db: AsyncSession, pool_id: int, status: str) -> Pool | None:
        row = (await db.execute(_SET_STATUS_SQL, {"id": pool_id, "status": status})).fetchone()
        return _row_to_pool(row) if row else None

    async def reserve_capacity(
        self, db: AsyncSession, pool_id: int, amount: Decimal
    ) -> Pool | None:
        result = await db.execute(_RESERVE_CAPACITY_SQL, {"id": pool_id, "amount": amount})
        row = result.fetchone()
        return _row_to_pool(row) if row else None

    async def release_capacity(
        self, db: AsyncSession, pool_id: int, amount: Decimal
    ) -> Pool | None:
        result = await db.execute(_RELEASE_CAPACITY_SQL, {"id": pool_id, "amount": amount})
        row = result.fetchone()
        return _row_to_pool(row) if row else None
