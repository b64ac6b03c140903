"""SQLAlchemy ORM model for pools. Maps to the Alembic-created table."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.cw_common.database import Base


class PoolORM(Base):
    __tablename__ = "pools"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    bot_tier: Mapped[str] = mapped_column(String(20), nullable=False)
    min_stake: Mapped[Decimal] = mapped_column(Numeric(20, 8), nullable=False)
    max_stake: Mapped[Decimal | None] = mapped_column(Numeric(20, 8), nullable=True)
    total_capacity: Mapped[Decimal | None] = mapped_column(Numeric(20, 8), nullable=True)
    current_staked: Mapped[Decimal] = mapped_column(Numeric(20, 8), nullable=False, default=0)
    roi_min: Mapped[Decimal] = mapped_column(Numeric(10, 6), nullable=False)
    roi_max: Mapped[Decimal] = mapped_column(Numeric(10, 6), nullable=False)
    lock_period_days: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
