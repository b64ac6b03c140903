"""Domain models for cw_wallet: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any


@dataclass
class Wallet:
    user_id: int
    available_balance: Decimal
    locked_balance: Decimal
    pending_balance: Decimal
    currency: str
    updated_at: datetime

    @property
    def total_balance(self) -> Decimal:
        return self.available_balance + self.locked_balance + self.pending_balance


@dataclass
class Transaction:
    id: int                          # BIGSERIAL
    user_id: int
    type: str                        # TransactionType value
    amount: Decimal                  # always positive; direction is implied by type
    status: str                      # TransactionStatus value
    description: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"


@dataclass(frozen=True)
class BalanceDelta:
    """Coupled change to the three wallet buckets, applied as ONE conditional write."""

    available: Decimal = Decimal("0")
    locked: Decimal = Decimal("0")
    pending: Decimal = Decimal("0")

    def is_zero(self) -> bool:
        return not (self.available or self.locked or self.pending)

    def debited_field(self) -> str:
        """Name of the first bucket this delta draws down (for error messages)."""
        if self.available < 0:
            return "available"
        if self.locked < 0:
            return "locked"
        if self.pending < 0:
            return "pending"
        return "available"

    def debited_amount(self) -> Decimal:
        return -min(self.available, self.locked, self.pending, Decimal("0"))
