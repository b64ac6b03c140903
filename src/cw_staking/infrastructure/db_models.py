"""SQLAlchemy ORM model for pool_stakes. Maps to the Alembic-created table."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.cw_common.database import Base


class PoolStakeORM(Base):
    __tablename__ = "pool_stakes"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    pool_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(20, 8), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    staked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    unstake_available_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    unstaked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    total_earned: Mapped[Decimal] = mapped_column(Numeric(20, 8), nullable=False, default=0)
