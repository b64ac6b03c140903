"""Repository Protocol for referral edges and commissions."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_referral.domain.models import CommissionTotals, Referral, ReferralCommission


class ReferralRepositoryProtocol(Protocol):
    # --- edges ---

    async def insert_edge(
        self, db: AsyncSession, referrer_id: int, referred_id: int, level: int
    ) -> bool:
        """Insert one upline edge. False if it already existed (ON CONFLICT DO NOTHING)."""
        ...

    async def get_upline(self, db: AsyncSession, user_id: int) -> list[Referral]: ...

    async def list_downline(
        self, db: AsyncSession, referrer_id: int, level: int | None
    ) -> list[Referral]: ...

    async def get_partner_volume(self, db: AsyncSession, referrer_id: int) -> Decimal: ...

    async def get_volume_by_level(
        self, db: AsyncSession, referrer_id: int
    ) -> dict[int, Decimal]: ...

    # --- commissions ---

    async def insert_commission(
        self,
        db: AsyncSession,
        referrer_id: int,
        referred_id: int,
        level: int,
        source_transaction_id: int,
        amount: Decimal,
        commission_rate: Decimal,
    ) -> ReferralCommission | None:
        """None if a commission for (referrer, source transaction) already exists."""
        ...

    async def get_commission(
        self, db: AsyncSession, commission_id: int, for_update: bool = False
    ) -> ReferralCommission | None: ...

    async def transition_commission(
        self, db: AsyncSession, commission_id: int, new_status: str
    ) -> ReferralCommission | None:
        """pending → new_status. None if the commission was not pending."""
        ...

    async def list_commissions(
        self, db: AsyncSession, referrer_id: int, status: str | None
    ) -> list[ReferralCommission]: ...

    async def get_commission_totals(
        self, db: AsyncSession, referrer_id: int
    ) -> CommissionTotals: ...
