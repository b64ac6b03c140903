"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock (or in-memory fake) that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_wallet.domain.models import BalanceDelta, Transaction, Wallet


class WalletRepositoryProtocol(Protocol):
    async def create_wallet(
        self, db: AsyncSession, user_id: int, currency: str
    ) -> Wallet: ...

    async def get_wallet(self, db: AsyncSession, user_id: int) -> Wallet | None: ...

    async def apply_delta(
        self, db: AsyncSession, user_id: int, delta: BalanceDelta
    ) -> Wallet: ...

    async def insert_transaction(
        self,
        db: AsyncSession,
        user_id: int,
        tx_type: str,
        amount: Decimal,
        status: str,
        description: str | None,
        metadata: dict[str, Any] | None,
    ) -> Transaction: ...

    async def get_transaction(
        self, db: AsyncSession, transaction_id: int, for_update: bool = False
    ) -> Transaction | None: ...

    async def transition_transaction(
        self,
        db: AsyncSession,
        transaction_id: int,
        new_status: str,
        metadata: dict[str, Any] | None = None,
    ) -> Transaction | None: ...

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: int,
        cursor_id: int | None,
        limit: int,
        tx_type: str | None,
    ) -> list[Transaction]: ...
