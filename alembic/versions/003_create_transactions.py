"""003: create transactions table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE transactions (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         BIGINT          NOT NULL REFERENCES wallets (user_id),
            type            VARCHAR(30)     NOT NULL,
            amount          NUMERIC(20, 8)  NOT NULL,
            status          VARCHAR(20)     NOT NULL DEFAULT 'pending',
            description     TEXT,
            metadata        JSONB           NOT NULL DEFAULT '{}'::jsonb,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            completed_at    TIMESTAMPTZ,
            CONSTRAINT ck_transactions_type CHECK (
                type IN (
                    'deposit', 'withdraw',
                    'trade_profit', 'trade_loss',
                    'pool_stake', 'pool_unstake',
                    'roi_payout', 'referral_commission'
                )
            ),
            CONSTRAINT ck_transactions_status CHECK (
                status IN ('pending', 'completed', 'failed', 'cancelled')
            ),
            CONSTRAINT ck_transactions_amount_gt_0 CHECK (amount > 0)
        );
    """)
    op.execute("CREATE INDEX idx_transactions_user_id ON transactions (user_id, id DESC);")
    op.execute("CREATE INDEX idx_transactions_type_status ON transactions (type, status);")
    op.execute("COMMENT ON TABLE transactions IS 'Append-only; only pending -> terminal status changes';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
