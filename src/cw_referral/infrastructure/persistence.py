"""ReferralRepository: raw SQL for the referral graph and commission rows.

Volume queries aggregate over the whole downline in ONE statement (CTE + set
membership); there is no per-member query loop.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_referral.domain.constants import MAX_REFERRAL_DEPTH
from src.cw_referral.domain.models import CommissionTotals, Referral, ReferralCommission

# ---------------------------------------------------------------------------
# SQL: referral edges (immutable once inserted)
# ---------------------------------------------------------------------------

_INSERT_EDGE_SQL = text("""
    INSERT INTO referrals (referrer_id, referred_id, level)
    VALUES (:referrer_id, :referred_id, :level)
    ON CONFLICT DO NOTHING
    RETURNING referrer_id
""")

_GET_UPLINE_SQL = text("""
    SELECT referrer_id, referred_id, level, created_at
    FROM referrals
    WHERE referred_id = :user_id
    ORDER BY level ASC
""")

_LIST_DOWNLINE_SQL = text("""
    SELECT referrer_id, referred_id, level, created_at
    FROM referrals
    WHERE referrer_id = :referrer_id
      AND (CAST(:level AS INTEGER) IS NULL OR level = CAST(:level AS INTEGER))
    ORDER BY level ASC, created_at DESC
""")

_PARTNER_VOLUME_SQL = text("""
    WITH network AS (
        SELECT referred_id FROM referrals WHERE referrer_id = :referrer_id
    ),
    deposits AS (
        SELECT COALESCE(SUM(amount), 0) AS total
        FROM transactions
        WHERE type = 'deposit' AND status = 'completed'
          AND user_id IN (SELECT referred_id FROM network)
    ),
    stakes AS (
        SELECT COALESCE(SUM(amount), 0) AS total
        FROM pool_stakes
        WHERE status = 'active'
          AND user_id IN (SELECT referred_id FROM network)
    )
    SELECT (SELECT total FROM deposits) + (SELECT total FROM stakes) AS total_volume
""")

_VOLUME_BY_LEVEL_SQL = text("""
    WITH network AS (
        SELECT referred_id, level FROM referrals WHERE referrer_id = :referrer_id
    ),
    deposits AS (
        SELECT user_id, SUM(amount) AS total
        FROM transactions
        WHERE type = 'deposit' AND status = 'completed'
          AND user_id IN (SELECT referred_id FROM network)
        GROUP BY user_id
    ),
    stakes AS (
        SELECT user_id, SUM(amount) AS total
        FROM pool_stakes
        WHERE status = 'active'
          AND user_id IN (SELECT referred_id FROM network)
        GROUP BY user_id
    )
    SELECT n.level,
           COALESCE(SUM(COALESCE(d.total, 0) + COALESCE(s.total, 0)), 0) AS total
    FROM network n
    LEFT JOIN deposits d ON d.user_id = n.referred_id
    LEFT JOIN stakes s ON s.user_id = n.referred_id
    GROUP BY n.level
""")

# ---------------------------------------------------------------------------
# SQL: commissions
# ---------------------------------------------------------------------------

_COMMISSION_COLUMNS = (
    "id, referrer_id, referred_id, level, source_transaction_id, amount, "
    "commission_rate, status, created_at, paid_at"
)

_INSERT_COMMISSION_SQL = text(f"""
    INSERT INTO referral_commissions
        (referrer_id, referred_id, level, source_transaction_id, amount, commission_rate, status)
    VALUES
        (:referrer_id, :referred_id, :level, :source_transaction_id, :amount,
         :commission_rate, 'pending')
    ON CONFLICT (referrer_id, source_transaction_id) DO NOTHING
    RETURNING {_COMMISSION_COLUMNS}
""")

_GET_COMMISSION_SQL = text(
    f"SELECT {_COMMISSION_COLUMNS} FROM referral_commissions WHERE id = :id"
)

_GET_COMMISSION_FOR_UPDATE_SQL = text(
    f"SELECT {_COMMISSION_COLUMNS} FROM referral_commissions WHERE id = :id FOR UPDATE"
)

_TRANSITION_COMMISSION_SQL = text(f"""
    UPDATE referral_commissions
    SET status = CAST(:new_status AS VARCHAR),
        paid_at = CASE WHEN CAST(:new_status AS VARCHAR) = 'paid' THEN NOW() ELSE paid_at END
    WHERE id = :id AND status = 'pending'
    RETURNING {_COMMISSION_COLUMNS}
""")

_LIST_COMMISSIONS_SQL = text(f"""
    SELECT {_COMMISSION_COLUMNS}
    FROM referral_commissions
    WHERE referrer_id = :referrer_id
      AND (CAST(:status AS VARCHAR) IS NULL OR status = CAST(:status AS VARCHAR))
    ORDER BY id ASC
""")

_COMMISSION_TOTALS_SQL = text("""
    SELECT
        COALESCE(SUM(amount) FILTER (WHERE status = 'paid'), 0)    AS paid,
        COALESCE(SUM(amount) FILTER (WHERE status = 'pending'), 0) AS pending
    FROM referral_commissions
    WHERE referrer_id = :referrer_id
""")


def _row_to_referral(row: object) -> Referral:
    return Referral(
        referrer_id=row.referrer_id,  # type: ignore[attr-defined]
        referred_id=row.referred_id,  # type: ignore[attr-defined]
        level=row.level,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_commission(row: object) -> ReferralCommission:
    return ReferralCommission(
        id=row.id,  # type: ignore[attr-defined]
        referrer_id=row.referrer_id,  # type: ignore[attr-defined]
        referred_id=row.referred_id,  # type: ignore[attr-defined]
        level=row.level,  # type: ignore[attr-defined]
        source_transaction_id=row.source_transaction_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        commission_rate=row.commission_rate,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        paid_at=row.paid_at,  # type: ignore[attr-defined]
    )


class ReferralRepository:
    async def insert_edge(
        self, db: AsyncSession, referrer_id: int, referred_id: int, level: int
    ) -> bool:
        result = await db.execute(
            _INSERT_EDGE_SQL,
            {"referrer_id": referrer_id, "referred_id": referred_id, "level": level},
        )
        return result.fetchone() is not None

    async def get_upline(self, db: AsyncSession, user_id: int) -> list[Referral]:
        result = await db.execute(_GET_UPLINE_SQL, {"user_id": user_id})
        return [_row_to_referral(row) for row in result.fetchall()]

    async def list_downline(
        self, db: AsyncSession, referrer_id: int, level: int | None
    ) -> list[Referral]:
        result = await db.execute(
            _LIST_DOWNLINE_SQL, {"referrer_id": referrer_id, "level": level}
        )
        return [_row_to_referral(row) for row in result.fetchall()]

    async def get_partner_volume(self, db: AsyncSession, referrer_id: int) -> Decimal:
        result = await db.execute(_PARTNER_VOLUME_SQL, {"referrer_id": referrer_id})
        return Decimal(result.scalar_one() or 0)

    async def get_volume_by_level(
        self, db: AsyncSession, referrer_id: int
    ) -> dict[int, Decimal]:
        result = await db.execute(_VOLUME_BY_LEVEL_SQL, {"referrer_id": referrer_id})
        # Zero-fill so every level 1..5 is present
        volumes = {level: Decimal("0") for level in range(1, MAX_REFERRAL_DEPTH + 1)}
        for row in result.fetchall():
            volumes[row.level] = Decimal(row.total)
        return volumes

    async def insert_commission(
        self,
        db: AsyncSession,
        referrer_id: int,
        referred_id: int,
        level: int,
        source_transaction_id: int,
        amount: Decimal,
        commission_rate: Decimal,
    ) -> ReferralCommission | None:
        result = await db.execute(
            _INSERT_COMMISSION_SQL,
            {
                "referrer_id": referrer_id,
                "referred_id": referred_id,
                "level": level,
                "source_transaction_id": source_transaction_id,
                "amount": amount,
                "commission_rate": commission_rate,
            },
        )
        row = result.fetchone()
        return _row_to_commission(row) if row else None

    async def get_commission(
        self, db: AsyncSession, commission_id: int, for_update: bool = False
    ) -> ReferralCommission | None:
        sql = _GET_COMMISSION_FOR_UPDATE_SQL if for_update else _GET_COMMISSION_SQL
        row = (await db.execute(sql, {"id": commission_id})).fetchone()
        return _row_to_commission(row) if row else None

    async def transition_commission(
        self, db: AsyncSession, commission_id: int, new_status: str
    ) -> ReferralCommission | None:
        result = await db.execute(
            _TRANSITION_COMMISSION_SQL, {"id": commission_id, "new_status": new_status}
        )
        row = result.fetchone()
        return _row_to_commission(row) if row else None

    async def list_commissions(
        self, db: AsyncSession, referrer_id: int, status: str | None
    ) -> list[ReferralCommission]:
        result = await db.execute(
            _LIST_COMMISSIONS_SQL, {"referrer_id": referrer_id, "status": status}
        )
        return [_row_to_commission(row) for row in result.fetchall()]

    async def get_commission_totals(
        self, db: AsyncSession, referrer_id: int
    ) -> CommissionTotals:
        row = (await db.execute(_COMMISSION_TOTALS_SQL, {"referrer_id": referrer_id})).fetchone()
        return CommissionTotals(
            paid=Decimal(row.paid),  # type: ignore[union-attr]
            pending=Decimal(row.pending),  # type: ignore[union-attr]
        )
