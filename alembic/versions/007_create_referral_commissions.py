"""007: create referral_commissions table

Revision ID: 007
Revises: 006
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE referral_commissions (
            id                      BIGSERIAL       PRIMARY KEY,
            referrer_id             BIGINT          NOT NULL REFERENCES wallets (user_id),
            referred_id             BIGINT          NOT NULL REFERENCES wallets (user_id),
            level                   INTEGER         NOT NULL,
            source_transaction_id   BIGINT          REFERENCES transactions (id),
            amount                  NUMERIC(20, 8)  NOT NULL,
            commission_rate         NUMERIC(6, 4)   NOT NULL,
            status                  VARCHAR(20)     NOT NULL DEFAULT 'pending',
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            paid_at                 TIMESTAMPTZ,
            CONSTRAINT uq_commissions_source    UNIQUE (referrer_id, source_transaction_id),
            CONSTRAINT ck_commissions_level     CHECK (level BETWEEN 1 AND 5),
            CONSTRAINT ck_commissions_status    CHECK (status IN ('pending', 'paid', 'cancelled')),
            CONSTRAINT ck_commissions_amount    CHECK (amount > 0)
        );
    """)
    op.execute("CREATE INDEX idx_commissions_referrer ON referral_commissions (referrer_id, status);")
    op.execute("CREATE INDEX idx_commissions_referred ON referral_commissions (referred_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS referral_commissions CASCADE;")
