"""Pydantic schemas for cw_referral API."""

from decimal import Decimal

from pydantic import BaseModel

from src.cw_common.money import money_to_display
from src.cw_referral.domain.models import Referral, ReferralCommission


class ReferralMember(BaseModel):
    user_id: int
    level: int
    joined_at: str | None

    @classmethod
    def from_referral(cls, edge: Referral) -> "ReferralMember":
        return cls(
            user_id=edge.referred_id,
            level=edge.level,
            joined_at=edge.created_at.isoformat() if edge.created_at else None,
        )


class NetworkResponse(BaseModel):
    members: list[ReferralMember]
    total: int
    count_by_level: dict[int, int]


class LevelVolume(BaseModel):
    level: int
    volume: Decimal
    volume_display: str


class VolumeResponse(BaseModel):
    total_volume: Decimal
    total_volume_display: str
    by_level: list[LevelVolume]


class ReferralStatsResponse(BaseModel):
    total_referrals: int
    direct_referrals: int
    total_volume: Decimal
    total_volume_display: str
    commissions_paid: Decimal
    commissions_paid_display: str
    commissions_pending: Decimal
    commissions_pending_display: str


class CommissionResponse(BaseModel):
    id: int
    referred_id: int
    level: int
    source_transaction_id: int | None
    amount: Decimal
    amount_display: str
    commission_rate: Decimal
    status: str
    created_at: str | None
    paid_at: str | None

    @classmethod
    def from_commission(cls, c: ReferralCommission) -> "CommissionResponse":
        return cls(
            id=c.id,
            referred_id=c.referred_id,
            level=c.level,
            source_transaction_id=c.source_transaction_id,
            amount=c.amount,
            amount_display=money_to_display(c.amount),
            commission_rate=c.commission_rate,
            status=c.status,
            created_at=c.created_at.isoformat() if c.created_at else None,
            paid_at=c.paid_at.isoformat() if c.paid_at else None,
        )


class CommissionListResponse(BaseModel):
    commissions: list[CommissionResponse]


class CommissionBatchResponse(BaseModel):
    paid: int
    total_paid: Decimal
    total_paid_display: str
