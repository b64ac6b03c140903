"""005: create pool_stakes table

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE pool_stakes (
            id                      BIGSERIAL       PRIMARY KEY,
            user_id                 BIGINT          NOT NULL REFERENCES wallets (user_id),
            pool_id                 BIGINT          NOT NULL REFERENCES pools (id),
            amount                  NUMERIC(20, 8)  NOT NULL,
            status                  VARCHAR(20)     NOT NULL DEFAULT 'active',
            staked_at               TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            unstake_available_at    TIMESTAMPTZ     NOT NULL,
            unstaked_at             TIMESTAMPTZ,
            total_earned            NUMERIC(20, 8)  NOT NULL DEFAULT 0,
            CONSTRAINT ck_pool_stakes_status CHECK (status IN ('active', 'unstaked', 'matured')),
            CONSTRAINT ck_pool_stakes_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_pool_stakes_earned_gte_0 CHECK (total_earned >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_pool_stakes_user_id ON pool_stakes (user_id, status);")
    op.execute("CREATE INDEX idx_pool_stakes_pool_id ON pool_stakes (pool_id);")
    op.execute("""
        CREATE INDEX idx_pool_stakes_active
        ON pool_stakes (id)
        WHERE status = 'active';
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS pool_stakes CASCADE;")
