"""004: create pools table

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE pools (
            id                  BIGSERIAL       PRIMARY KEY,
            name                VARCHAR(100)    NOT NULL,
            bot_tier            VARCHAR(20)     NOT NULL,
            min_stake           NUMERIC(20, 8)  NOT NULL,
            max_stake           NUMERIC(20, 8),
            total_capacity      NUMERIC(20, 8),
            current_staked      NUMERIC(20, 8)  NOT NULL DEFAULT 0,
            roi_min             NUMERIC(10, 6)  NOT NULL,
            roi_max             NUMERIC(10, 6)  NOT NULL,
            lock_period_days    INTEGER         NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'active',
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_pools_tier CHECK (bot_tier IN ('anchor', 'vector', 'kinetic', 'horizon')),
            CONSTRAINT ck_pools_status CHECK (status IN ('active', 'paused', 'closed')),
            CONSTRAINT ck_pools_min_stake_gt_0 CHECK (min_stake > 0),
            CONSTRAINT ck_pools_max_gte_min CHECK (max_stake IS NULL OR max_stake >= min_stake),
            CONSTRAINT ck_pools_roi_band CHECK (roi_min >= 0 AND roi_min <= roi_max),
            CONSTRAINT ck_pools_current_gte_0 CHECK (current_staked >= 0),
            CONSTRAINT ck_pools_capacity CHECK (
                total_capacity IS NULL OR current_staked <= total_capacity
            ),
            CONSTRAINT ck_pools_lock_gte_0 CHECK (lock_period_days >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_pools_updated_at
            BEFORE UPDATE ON pools
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("CREATE INDEX idx_pools_status ON pools (status);")
    op.execute("CREATE INDEX idx_pools_bot_tier ON pools (bot_tier);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS pools CASCADE;")
