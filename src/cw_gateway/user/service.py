"""UserOnboardingService: the core's half of user registration.

The auth service owns credentials and user rows. Once it has created a user it calls
`register`, which creates the zero-balance wallet and materializes the referral
upline in ONE store transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cw_common.database import unit_of_work
from src.cw_common.enums import NotificationType
from src.cw_common.errors import SelfReferralError, WalletNotFoundError
from src.cw_common.notifications import NotificationDispatcher, dispatcher
from src.cw_gateway.user.schemas import RegisterUserResponse, UplineEdge
from src.cw_referral.application.service import ReferralApplicationService
from src.cw_referral.domain.models import Referral
from src.cw_wallet.domain.repository import WalletRepositoryProtocol
from src.cw_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class UserOnboardingService:
    def __init__(
        self,
        wallet_repo: WalletRepositoryProtocol | None = None,
        referrals: ReferralApplicationService | None = None,
        notifier: NotificationDispatcher | None = None,
    ) -> None:
        self._wallets: WalletRepositoryProtocol = wallet_repo or WalletRepository()
        self._referrals = referrals or ReferralApplicationService()
        self._notifier = notifier or dispatcher

    async def register(
        self,
        db: AsyncSession,
        user_id: int,
        referrer_id: int | None = None,
        currency: str | None = None,
    ) -> RegisterUserResponse:
        if referrer_id is not None and referrer_id == user_id:
            raise SelfReferralError()
        currency = currency or settings.DEFAULT_CURRENCY

        async with unit_of_work(db):
            wallet = await self._wallets.create_wallet(db, user_id, currency)
            edges: list[Referral] = []
            if referrer_id is not None:
                if await self._wallets.get_wallet(db, referrer_id) is None:
                    raise WalletNotFoundError(referrer_id)
                edges = await self._referrals.build_chain(db, referrer_id, user_id)

        logger.info(
            "User onboarded: user=%s referrer=%s upline=%d", user_id, referrer_id, len(edges)
        )
        if referrer_id is not None and edges:
            self._notifier.dispatch(
                referrer_id,
                NotificationType.REFERRAL.value,
                "New referral",
                "A new member joined with your referral link.",
                {"referred_id": user_id},
            )
        return RegisterUserResponse(
            user_id=user_id,
            currency=wallet.currency,
            referrer_id=referrer_id,
            upline=[UplineEdge(referrer_id=e.referrer_id, level=e.level) for e in edges],
        )
