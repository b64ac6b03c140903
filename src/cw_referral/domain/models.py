"""Domain models for cw_referral: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class Referral:
    """Upline edge: `referrer_id` is `level` hops above `referred_id`."""

    referrer_id: int
    referred_id: int
    level: int                       # 1..MAX_REFERRAL_DEPTH
    created_at: datetime | None = None


@dataclass
class ReferralCommission:
    id: int
    referrer_id: int
    referred_id: int
    level: int
    source_transaction_id: int | None
    amount: Decimal
    commission_rate: Decimal
    status: str                      # CommissionStatus value
    created_at: datetime | None = None
    paid_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"


@dataclass
class CommissionTotals:
    paid: Decimal
    pending: Decimal
