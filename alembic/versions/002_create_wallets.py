"""002: create wallets table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE wallets (
            user_id             BIGINT          PRIMARY KEY,
            available_balance   NUMERIC(20, 8)  NOT NULL DEFAULT 0,
            locked_balance      NUMERIC(20, 8)  NOT NULL DEFAULT 0,
            pending_balance     NUMERIC(20, 8)  NOT NULL DEFAULT 0,
            currency            VARCHAR(10)     NOT NULL DEFAULT 'USD',
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_wallets_available_gte_0 CHECK (available_balance >= 0),
            CONSTRAINT ck_wallets_locked_gte_0    CHECK (locked_balance >= 0),
            CONSTRAINT ck_wallets_pending_gte_0   CHECK (pending_balance >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_wallets_updated_at
            BEFORE UPDATE ON wallets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE wallets IS 'One wallet per user; balances never negative, never deleted';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS wallets CASCADE;")
