"""ReferralApplicationService: chain construction and read-side queries."""

from collections import Counter

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.enums import CommissionStatus
from src.cw_common.money import money_to_display
from src.cw_referral.application.schemas import (
    CommissionListResponse,
    CommissionResponse,
    LevelVolume,
    NetworkResponse,
    ReferralMember,
    ReferralStatsResponse,
    VolumeResponse,
)
from src.cw_referral.domain.chain import plan_upline_edges
from src.cw_referral.domain.models import Referral
from src.cw_referral.domain.repository import ReferralRepositoryProtocol
from src.cw_referral.infrastructure.persistence import ReferralRepository


class ReferralApplicationService:
    def __init__(self, repo: ReferralRepositoryProtocol | None = None) -> None:
        self._repo: ReferralRepositoryProtocol = repo or ReferralRepository()

    async def build_chain(
        self, db: AsyncSession, referrer_id: int, new_user_id: int
    ) -> list[Referral]:
        """Materialize the new user's upline (levels 1..5). Caller owns the transaction."""
        referrer_upline = await self._repo.get_upline(db, referrer_id)
        inserted: list[Referral] = []
        for ancestor_id, level in plan_upline_edges(referrer_id, new_user_id, referrer_upline):
            if await self._repo.insert_edge(db, ancestor_id, new_user_id, level):
                inserted.append(Referral(ancestor_id, new_user_id, level))
        return inserted

    async def get_network(self, db: AsyncSession, referrer_id: int) -> NetworkResponse:
        edges = await self._repo.list_downline(db, referrer_id, None)
        return self._network(edges)

    async def get_direct_referrals(self, db: AsyncSession, referrer_id: int) -> NetworkResponse:
        edges = await self._repo.list_downline(db, referrer_id, 1)
        return self._network(edges)

    async def get_volume(self, db: AsyncSession, referrer_id: int) -> VolumeResponse:
        by_level = await self._repo.get_volume_by_level(db, referrer_id)
        total = await self._repo.get_partner_volume(db, referrer_id)
        return VolumeResponse(
            total_volume=total,
            total_volume_display=money_to_display(total),
            by_level=[
                LevelVolume(level=lvl, volume=vol, volume_display=money_to_display(vol))
                for lvl, vol in sorted(by_level.items())
            ],
        )

    async def get_stats(self, db: AsyncSession, referrer_id: int) -> ReferralStatsResponse:
        edges = await self._repo.list_downline(db, referrer_id, None)
        volume = await self._repo.get_partner_volume(db, referrer_id)
        totals = await self._repo.get_commission_totals(db, referrer_id)
        return ReferralStatsResponse(
            total_referrals=len(edges),
            direct_referrals=sum(1 for e in edges if e.level == 1),
            total_volume=volume,
            total_volume_display=money_to_display(volume),
            commissions_paid=totals.paid,
            commissions_paid_display=money_to_display(totals.paid),
            commissions_pending=totals.pending,
            commissions_pending_display=money_to_display(totals.pending),
        )

    async def list_commissions(
        self, db: AsyncSession, referrer_id: int, status: CommissionStatus | None = None
    ) -> CommissionListResponse:
        rows = await self._repo.list_commissions(db, referrer_id, status.value if status else None)
        return CommissionListResponse(
            commissions=[CommissionResponse.from_commission(c) for c in rows]
        )

    @staticmethod
    def _network(edges: list[Referral]) -> NetworkResponse:
        counts = Counter(e.level for e in edges)
        return NetworkResponse(
            members=[ReferralMember.from_referral(e) for e in edges],
            total=len(edges),
            count_by_level=dict(sorted(counts.items())),
        )
