"""ORM models, raw-SQL column lists and migrations must describe the same tables."""

from pathlib import Path

import pytest

from src.cw_pool.infrastructure import persistence as pool_persistence
from src.cw_pool.infrastructure.db_models import PoolORM
from src.cw_referral.infrastructure import persistence as referral_persistence
from src.cw_referral.infrastructure.db_models import ReferralCommissionORM, ReferralORM
from src.cw_staking.infrastructure import persistence as stake_persistence
from src.cw_staking.infrastructure.db_models import PoolStakeORM
from src.cw_wallet.infrastructure import persistence as wallet_persistence
from src.cw_wallet.infrastructure.db_models import TransactionORM, WalletORM

_VERSIONS = Path(__file__).resolve().parents[2] / "alembic" / "versions"


def _columns(orm: type) -> set[str]:
    return {c.name for c in orm.__table__.columns}  # type: ignore[attr-defined]


def _split(column_list: str) -> set[str]:
    return {c.strip() for c in column_list.split(",")}


@pytest.mark.parametrize(
    ("orm", "column_list"),
    [
        (WalletORM, wallet_persistence._WALLET_COLUMNS),
        (TransactionORM, wallet_persistence._TX_COLUMNS),
        (PoolORM, pool_persistence._POOL_COLUMNS),
        (PoolStakeORM, stake_persistence._STAKE_COLUMNS),
        (ReferralCommissionORM, referral_persistence._COMMISSION_COLUMNS),
    ],
)
def test_selected_columns_exist_on_orm(orm: type, column_list: str) -> None:
    assert _split(column_list) <= _columns(orm)


@pytest.mark.parametrize(
    ("orm", "migration"),
    [
        (WalletORM, "002_create_wallets.py"),
        (TransactionORM, "003_create_transactions.py"),
        (PoolORM, "004_create_pools.py"),
        (PoolStakeORM, "005_create_pool_stakes.py"),
        (ReferralORM, "006_create_referrals.py"),
        (ReferralCommissionORM, "007_create_referral_commissions.py"),
    ],
)
def test_orm_columns_created_by_migration(orm: type, migration: str) -> None:
    sql = (_VERSIONS / migration).read_text()
    assert f"CREATE TABLE {orm.__tablename__} (" in sql  # type: ignore[attr-defined]
    for name in _columns(orm):
        assert f" {name} " in sql, f"{orm.__name__}.{name} missing from {migration}"


def test_migration_chain_is_linear() -> None:
    files = sorted(p.name for p in _VERSIONS.glob("[0-9][0-9][0-9]_*.py"))
    assert files[0].startswith("001_")
    for prev, cur in zip(files, files[1:]):
        text = (_VERSIONS / cur).read_text()
        assert f'down_revision: Union[str, None] = "{prev[:3]}"' in text
