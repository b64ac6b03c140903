"""WalletRepository: concrete implementation of WalletRepositoryProtocol.

All balance-mutating operations are a single conditional PostgreSQL
UPDATE ... WHERE <resulting balances> >= 0 RETURNING. A result of 0 rows means the
guard failed (insufficient funds) or the wallet does not exist; the follow-up
SELECT only decides which error to raise, it never decides whether to write.

Transaction ownership: the CALLER (application service) commits or rolls back
via `unit_of_work(db)`.
"""

import json
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.errors import InsufficientBalanceError, InternalError, WalletNotFoundError
from src.cw_wallet.domain.models import BalanceDelta, Transaction, Wallet

# ---------------------------------------------------------------------------
# SQL: wallets
# ---------------------------------------------------------------------------

_WALLET_COLUMNS = "user_id, available_balance, locked_balance, pending_balance, currency, updated_at"

_CREATE_WALLET_SQL = text(f"""
    INSERT INTO wallets (user_id, available_balance, locked_balance, pending_balance, currency)
    VALUES (:user_id, 0, 0, 0, :currency)
    ON CONFLICT (user_id) DO UPDATE SET user_id = EXCLUDED.user_id
    RETURNING {_WALLET_COLUMNS}
""")

_GET_WALLET_SQL = text(f"""
    SELECT {_WALLET_COLUMNS}
    FROM wallets
    WHERE user_id = :user_id
""")

_APPLY_DELTA_SQL = text(f"""
    UPDATE wallets
    SET available_balance = available_balance + CAST(:d_available AS NUMERIC),
        locked_balance    = locked_balance    + CAST(:d_locked AS NUMERIC),
        pending_balance   = pending_balance   + CAST(:d_pending AS NUMERIC),
        updated_at = NOW()
    WHERE user_id = :user_id
      AND available_balance + CAST(:d_available AS NUMERIC) >= 0
      AND locked_balance    + CAST(:d_locked AS NUMERIC)    >= 0
      AND pending_balance   + CAST(:d_pending AS NUMERIC)   >= 0
    RETURNING {_WALLET_COLUMNS}
""")

# ---------------------------------------------------------------------------
# SQL: transactions (append-only; only pending → terminal status updates)
# ---------------------------------------------------------------------------

_TX_COLUMNS = "id, user_id, type, amount, status, description, metadata, created_at, completed_at"

_INSERT_TX_SQL = text(f"""
    INSERT INTO transactions
        (user_id, type, amount, status, description, metadata, completed_at)
    VALUES
        (:user_id, :type, :amount, CAST(:status AS VARCHAR), :description,
         CAST(:metadata AS JSONB),
         CASE WHEN CAST(:status AS VARCHAR) = 'completed' THEN NOW() ELSE NULL END)
    RETURNING {_TX_COLUMNS}
""")

_GET_TX_SQL = text(f"SELECT {_TX_COLUMNS} FROM transactions WHERE id = :id")

_GET_TX_FOR_UPDATE_SQL = text(f"SELECT {_TX_COLUMNS} FROM transactions WHERE id = :id FOR UPDATE")

_TRANSITION_TX_SQL = text(f"""
    UPDATE transactions
    SET status = CAST(:new_status AS VARCHAR),
        metadata = COALESCE(metadata, '{{}}'::jsonb) || CAST(:metadata AS JSONB),
        completed_at = CASE
            WHEN CAST(:new_status AS VARCHAR) = 'completed' THEN NOW()
            ELSE completed_at
        END
    WHERE id = :id AND status = 'pending'
    RETURNING {_TX_COLUMNS}
""")

_LIST_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < CAST(:cursor_id AS BIGINT))
      AND (CAST(:type AS VARCHAR) IS NULL OR type = CAST(:type AS VARCHAR))
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_wallet(row: object) -> Wallet:
    return Wallet(
        user_id=row.user_id,  # type: ignore[attr-defined]
        available_balance=row.available_balance,  # type: ignore[attr-defined]
        locked_balance=row.locked_balance,  # type: ignore[attr-defined]
        pending_balance=row.pending_balance,  # type: ignore[attr-defined]
        currency=row.currency,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _load_metadata(raw: object) -> dict[str, Any]:
    # asyncpg hands JSONB back as text unless a codec is registered
    if raw is None:
        return {}
    if isinstance(raw, str):
        return dict(json.loads(raw))
    return dict(raw)  # type: ignore[call-overload]


def _row_to_transaction(row: object) -> Transaction:
    return Transaction(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        type=row.type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        metadata=_load_metadata(row.metadata),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        completed_at=row.completed_at,  # type: ignore[attr-defined]
    )


class WalletRepository:
    """Concrete repository: every write is atomic at the SQL level."""

    async def create_wallet(
        self, db: AsyncSession, user_id: int, currency: str
    ) -> Wallet:
        # Idempotent: re-registering returns the existing wallet untouched
        result = await db.execute(
            _CREATE_WALLET_SQL, {"user_id": user_id, "currency": currency}
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Wallet upsert returned no rows: this should never happen")
        return _row_to_wallet(row)

    async def get_wallet(self, db: AsyncSession, user_id: int) -> Wallet | None:
        result = await db.execute(_GET_WALLET_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_wallet(row) if row else None

    async def apply_delta(
        self, db: AsyncSession, user_id: int, delta: BalanceDelta
    ) -> Wallet:
        result = await db.execute(
            _APPLY_DELTA_SQL,
            {
                "user_id": user_id,
                "d_available": delta.available,
                "d_locked": delta.locked,
                "d_pending": delta.pending,
            },
        )
        row = result.fetchone()
        if row is not None:
            return _row_to_wallet(row)

        wallet = await self.get_wallet(db, user_id)
        if wallet is None:
            raise WalletNotFoundError(user_id)
        field = delta.debited_field()
        raise InsufficientBalanceError(
            field,
            delta.debited_amount(),
            getattr(wallet, f"{field}_balance"),
        )

    async def insert_transaction(
        self,
        db: AsyncSession,
        user_id: int,
        tx_type: str,
        amount: Decimal,
        status: str,
        description: str | None,
        metadata: dict[str, Any] | None,
    ) -> Transaction:
        result = await db.execute(
            _INSERT_TX_SQL,
            {
                "user_id": user_id,
                "type": tx_type,
                "amount": amount,
                "status": status,
                "description": description,
                "metadata": json.dumps(metadata or {}, default=str),
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Transaction insert returned no rows: this should never happen")
        return _row_to_transaction(row)

    async def get_transaction(
        self, db: AsyncSession, transaction_id: int, for_update: bool = False
    ) -> Transaction | None:
        sql = _GET_TX_FOR_UPDATE_SQL if for_update else _GET_TX_SQL
        result = await db.execute(sql, {"id": transaction_id})
        row = result.fetchone()
        return _row_to_transaction(row) if row else None

    async def transition_transaction(
        self,
        db: AsyncSession,
        transaction_id: int,
        new_status: str,
        metadata: dict[str, Any] | None = None,
    ) -> Transaction | None:
        """pending → new_status. Returns None if the row was not pending (lost the race)."""
        result = await db.execute(
            _TRANSITION_TX_SQL,
            {
                "id": transaction_id,
                "new_status": new_status,
                "metadata": json.dumps(metadata or {}, default=str),
            },
        )
        row = result.fetchone()
        return _row_to_transaction(row) if row else None

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: int,
        cursor_id: int | None,
        limit: int,
        tx_type: str | None,
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_TX_SQL,
            {
                "user_id": user_id,
                "cursor_id": cursor_id,
                "type": tx_type,
                "limit": limit,
            },
        )
        return [_row_to_transaction(row) for row in result.fetchall()]
