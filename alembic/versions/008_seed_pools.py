"""008: seed one active pool per bot tier

Revision ID: 008
Revises: 007
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        INSERT INTO pools (
            name, bot_tier, min_stake, max_stake, total_capacity,
            roi_min, roi_max, lock_period_days, status
        ) VALUES
            ('Anchor Pool',  'anchor',  100,   3999.99,  NULL, 0.008000, 0.009600, 40, 'active'),
            ('Vector Pool',  'vector',  4000,  24999.99, NULL, 0.009600, 0.011200, 45, 'active'),
            ('Kinetic Pool', 'kinetic', 25000, 49999.99, NULL, 0.011200, 0.012800, 65, 'active'),
            ('Horizon Pool', 'horizon', 50000, NULL,     NULL, 0.018000, 0.018000, 85, 'active');
    """)


def downgrade() -> None:
    op.execute(
        "DELETE FROM pools WHERE name IN "
        "('Anchor Pool', 'Vector Pool', 'Kinetic Pool', 'Horizon Pool') AND current_staked = 0;"
    )
