"""Ledger-wide invariant checks. Read-only; returns violations, never repairs."""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_NEGATIVE_WALLETS_SQL = text("""
    SELECT user_id, available_balance, locked_balance, pending_balance
    FROM wallets
    WHERE available_balance < 0 OR locked_balance < 0 OR pending_balance < 0
""")

_POOL_CAPACITY_SQL = text("""
    SELECT id, current_staked, total_capacity
    FROM pools
    WHERE current_staked < 0
       OR (total_capacity IS NOT NULL AND current_staked > total_capacity)
""")

# Pool bookkeeping must equal the sum of its active stakes
_POOL_STAKE_DRIFT_SQL = text("""
    SELECT p.id, p.current_staked, COALESCE(s.total, 0) AS staked
    FROM pools p
    LEFT JOIN (
        SELECT pool_id, SUM(amount) AS total
        FROM pool_stakes WHERE status = 'active'
        GROUP BY pool_id
    ) s ON s.pool_id = p.id
    WHERE p.current_staked <> COALESCE(s.total, 0)
""")

# locked_balance is only ever moved by stake / unstake
_LOCKED_DRIFT_SQL = text("""
    SELECT w.user_id, w.locked_balance, COALESCE(s.total, 0) AS staked
    FROM wallets w
    LEFT JOIN (
        SELECT user_id, SUM(amount) AS total
        FROM pool_stakes WHERE status = 'active'
        GROUP BY user_id
    ) s ON s.user_id = w.user_id
    WHERE w.locked_balance <> COALESCE(s.total, 0)
""")

# pending_balance is only ever moved by withdrawal requests
_PENDING_DRIFT_SQL = text("""
    SELECT w.user_id, w.pending_balance, COALESCE(t.total, 0) AS requested
    FROM wallets w
    LEFT JOIN (
        SELECT user_id, SUM(amount) AS total
        FROM transactions WHERE type = 'withdraw' AND status = 'pending'
        GROUP BY user_id
    ) t ON t.user_id = w.user_id
    WHERE w.pending_balance <> COALESCE(t.total, 0)
""")


async def verify_ledger_invariants(db: AsyncSession) -> list[str]:
    """Returns one human-readable string per violation (empty list = healthy)."""
    violations: list[str] = []

    for row in (await db.execute(_NEGATIVE_WALLETS_SQL)).fetchall():
        violations.append(
            f"Wallet {row.user_id} has a negative balance: available={row.available_balance} "
            f"locked={row.locked_balance} pending={row.pending_balance}"
        )
    for row in (await db.execute(_POOL_CAPACITY_SQL)).fetchall():
        violations.append(
            f"Pool {row.id} current_staked={row.current_staked} "
            f"outside [0, {row.total_capacity}]"
        )
    for row in (await db.execute(_POOL_STAKE_DRIFT_SQL)).fetchall():
        violations.append(
            f"Pool {row.id} current_staked={row.current_staked} != active stakes {row.staked}"
        )
    for row in (await db.execute(_LOCKED_DRIFT_SQL)).fetchall():
        violations.append(
            f"Wallet {row.user_id} locked_balance={row.locked_balance} "
            f"!= active stakes {row.staked}"
        )
    for row in (await db.execute(_PENDING_DRIFT_SQL)).fetchall():
        violations.append(
            f"Wallet {row.user_id} pending_balance={row.pending_balance} "
            f"!= pending withdrawals {row.requested}"
        )

    for msg in violations:
        logger.error("Ledger invariant violated: %s", msg)
    return violations
