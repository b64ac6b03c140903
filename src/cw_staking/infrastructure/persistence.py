"""StakeRepository: raw SQL for pool_stakes.

Status changes and earnings increments are guarded by `WHERE status = 'active'`, so a
stake that was unstaked concurrently never receives another payout.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.errors import InternalError
from src.cw_staking.domain.models import PoolStake, StakeSummary

_STAKE_COLUMNS = (
    "id, user_id, pool_id, amount, status, staked_at, unstake_available_at, "
    "unstaked_at, total_earned"
)

_INSERT_STAKE_SQL = text(f"""
    INSERT INTO pool_stakes
        (user_id, pool_id, amount, status, staked_at, unstake_available_at, total_earned)
    VALUES
        (:user_id, :pool_id, :amount, 'active', :staked_at, :unstake_available_at, 0)
    RETURNING {_STAKE_COLUMNS}
""")

_GET_STAKE_SQL = text(f"SELECT {_STAKE_COLUMNS} FROM pool_stakes WHERE id = :id")

_GET_STAKE_FOR_UPDATE_SQL = text(
    f"SELECT {_STAKE_COLUMNS} FROM pool_stakes WHERE id = :id FOR UPDATE"
)

_LIST_STAKES_SQL = text(f"""
    SELECT {_STAKE_COLUMNS}
    FROM pool_stakes
    WHERE user_id = :user_id
      AND (CAST(:status AS VARCHAR) IS NULL OR status = CAST(:status AS VARCHAR))
    ORDER BY staked_at DESC, id DESC
""")

_LIST_ACTIVE_IDS_SQL = text("SELECT id FROM pool_stakes WHERE status = 'active' ORDER BY id")

_ADD_EARNINGS_SQL = text(f"""
    UPDATE pool_stakes
    SET total_earned = total_earned + CAST(:payout AS NUMERIC)
    WHERE id = :id AND status = 'active'
    RETURNING {_STAKE_COLUMNS}
""")

_MARK_UNSTAKED_SQL = text(f"""
    UPDATE pool_stakes
    SET status = 'unstaked', unstaked_at = :unstaked_at
    WHERE id = :id AND status = 'active'
    RETURNING {_STAKE_COLUMNS}
""")

_SUMMARY_SQL = text("""
    SELECT
        COUNT(*) FILTER (WHERE status = 'active')                    AS active_count,
        COALESCE(SUM(amount) FILTER (WHERE status = 'active'), 0)    AS total_staked,
        COALESCE(SUM(total_earned), 0)                               AS total_earned
    FROM pool_stakes
    WHERE user_id = :user_id
""")


def _row_to_stake(row: object) -> PoolStake:
    return PoolStake(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        pool_id=row.pool_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        staked_at=row.staked_at,  # type: ignore[attr-defined]
        unstake_available_at=row.unstake_available_at,  # type: ignore[attr-defined]
        unstaked_at=row.unstaked_at,  # type: ignore[attr-defined]
        total_earned=row.total_earned,  # type: ignore[attr-defined]
    )


class StakeRepository:
    async def insert_stake(
        self,
        db: AsyncSession,
        user_id: int,
        pool_id: int,
        amount: Decimal,
        staked_at: datetime,
        unstake_available_at: datetime,
    ) -> PoolStake:
        result = await db.execute(
            _INSERT_STAKE_SQL,
            {
                "user_id": user_id,
                "pool_id": pool_id,
                "amount": amount,
                "staked_at": staked_at,
                "unstake_available_at": unstake_available_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Stake insert returned no rows: this should never happen")
        return _row_to_stake(row)

    async def get_stake(
        self, db: AsyncSession, stake_id: int, for_update: bool = False
    ) -> PoolStake | None:
        sql = _GET_STAKE_FOR_UPDATE_SQL if for_update else _GET_STAKE_SQL
        row = (await db.execute(sql, {"id": stake_id})).fetchone()
        return _row_to_stake(row) if row else None

    async def list_stakes(
        self, db: AsyncSession, user_id: int, status: str | None
    ) -> list[PoolStake]:
        result = await db.execute(_LIST_STAKES_SQL, {"user_id": user_id, "status": status})
        return [_row_to_stake(row) for row in result.fetchall()]

    async def list_active_stake_ids(self, db: AsyncSession) -> list[int]:
        result = await db.execute(_LIST_ACTIVE_IDS_SQL)
        return [row.id for row in result.fetchall()]

    async def add_earnings(
        self, db: AsyncSession, stake_id: int, payout: Decimal
    ) -> PoolStake | None:
        row = (await db.execute(_ADD_EARNINGS_SQL, {"id": stake_id, "payout": payout})).fetchone()
        return _row_to_stake(row) if row else None

    async def mark_unstaked(
        self, db: AsyncSession, stake_id: int, unstaked_at: datetime
    ) -> PoolStake | None:
        result = await db.execute(
            _MARK_UNSTAKED_SQL, {"id": stake_id, "unstaked_at": unstaked_at}
        )
        row = result.fetchone()
        return _row_to_stake(row) if row else None

    async def get_summary(self, db: AsyncSession, user_id: int) -> StakeSummary:
        row = (await db.execute(_SUMMARY_SQL, {"user_id": user_id})).fetchone()
        return StakeSummary(
            active_count=row.active_count,  # type: ignore[union-attr]
            total_staked=row.total_staked,  # type: ignore[union-attr]
            total_earned=row.total_earned,  # type: ignore[union-attr]
        )
