"""006: create referrals table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE referrals (
            id              BIGSERIAL       PRIMARY KEY,
            referrer_id     BIGINT          NOT NULL REFERENCES wallets (user_id),
            referred_id     BIGINT          NOT NULL REFERENCES wallets (user_id),
            level           INTEGER         NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_referrals_pair        UNIQUE (referrer_id, referred_id),
            CONSTRAINT uq_referrals_level       UNIQUE (referred_id, level),
            CONSTRAINT ck_referrals_level       CHECK (level BETWEEN 1 AND 5),
            CONSTRAINT ck_referrals_not_self    CHECK (referrer_id <> referred_id)
        );
    """)
    op.execute("CREATE INDEX idx_referrals_referrer_id ON referrals (referrer_id, level);")
    op.execute("COMMENT ON TABLE referrals IS 'Immutable upline edges, written once at registration';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS referrals CASCADE;")
