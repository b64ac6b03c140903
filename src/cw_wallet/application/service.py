"""WalletApplicationService: the Wallet Ledger's public operations.

Every mutating operation runs inside `unit_of_work(db)`: the transaction row insert,
the conditional balance write and any commission rows either all commit or all roll
back. Notifications are dispatched only after the commit succeeded.
"""

import logging
import re
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cw_common.database import unit_of_work
from src.cw_common.enums import BalanceField, NotificationType, TransactionStatus, TransactionType
from src.cw_common.errors import (
    AlreadyProcessedError,
    InvalidTransactionStatusError,
    TransactionNotFoundError,
    WalletNotFoundError,
    WrongTransactionTypeError,
)
from src.cw_common.money import money_to_display, validate_amount
from src.cw_common.notifications import NotificationDispatcher, dispatcher
from src.cw_referral.application.commission import CommissionEngine
from src.cw_wallet.application.schemas import (
    LedgerMutationResponse,
    PaymentConfirmationResponse,
    TransactionItem,
    TransactionListResponse,
    WalletResponse,
    cursor_decode,
    cursor_encode,
)
from src.cw_wallet.domain.models import BalanceDelta, Transaction, Wallet
from src.cw_wallet.domain.repository import WalletRepositoryProtocol
from src.cw_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)

_ORDER_ID_RE = re.compile(r"^user_(\d+)_tx_(\d+)$")

# Payment-provider status → internal transaction status
_PROVIDER_STATUS_MAP = {
    "finished": TransactionStatus.COMPLETED,
    "failed": TransactionStatus.FAILED,
    "refunded": TransactionStatus.FAILED,
    "expired": TransactionStatus.FAILED,
}


def map_payment_status(payment_status: str) -> TransactionStatus:
    """Anything the provider reports other than a terminal status stays pending."""
    return _PROVIDER_STATUS_MAP.get(payment_status.lower(), TransactionStatus.PENDING)


def parse_order_id(order_id: str) -> tuple[int, int]:
    """'user_42_tx_1001' -> (42, 1001). Raises TransactionNotFoundError if malformed."""
    match = _ORDER_ID_RE.match(order_id.strip())
    if match is None:
        raise TransactionNotFoundError(order_id)
    return int(match.group(1)), int(match.group(2))


def field_delta(field: BalanceField, amount: Decimal) -> BalanceDelta:
    if field is BalanceField.AVAILABLE:
        return BalanceDelta(available=amount)
    if field is BalanceField.LOCKED:
        return BalanceDelta(locked=amount)
    return BalanceDelta(pending=amount)


class WalletApplicationService:
    def __init__(
        self,
        repo: WalletRepositoryProtocol | None = None,
        commissions: CommissionEngine | None = None,
        notifier: NotificationDispatcher | None = None,
    ) -> None:
        self._repo: WalletRepositoryProtocol = repo or WalletRepository()
        self._commissions = commissions or CommissionEngine(wallet_repo=self._repo)
        self._notifier = notifier or dispatcher

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_wallet(self, db: AsyncSession, user_id: int) -> WalletResponse:
        wallet = await self._repo.get_wallet(db, user_id)
        if wallet is None:
            raise WalletNotFoundError(user_id)
        return WalletResponse.from_wallet(wallet)

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: int,
        cursor: str | None,
        limit: int,
        tx_type: str | None,
    ) -> TransactionListResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        rows = await self._repo.list_transactions(db, user_id, cursor_id, limit + 1, tx_type)
        has_more = len(rows) > limit
        page = rows[:limit]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return TransactionListResponse(
            items=[TransactionItem.from_transaction(tx) for tx in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    # ------------------------------------------------------------------
    # Balance primitives
    # ------------------------------------------------------------------

    async def credit(
        self,
        db: AsyncSession,
        user_id: int,
        field: BalanceField,
        amount: Decimal,
        tx_type: TransactionType = TransactionType.TRADE_PROFIT,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> LedgerMutationResponse:
        amount = validate_amount(amount)
        return await self._adjust(
            db, user_id, field_delta(field, amount), amount, tx_type, description, metadata
        )

    async def debit(
        self,
        db: AsyncSession,
        user_id: int,
        field: BalanceField,
        amount: Decimal,
        tx_type: TransactionType = TransactionType.TRADE_LOSS,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> LedgerMutationResponse:
        """Raises InsufficientBalanceError if `field` would go negative."""
        amount = validate_amount(amount)
        return await self._adjust(
            db, user_id, field_delta(field, -amount), amount, tx_type, description, metadata
        )

    async def _adjust(
        self,
        db: AsyncSession,
        user_id: int,
        delta: BalanceDelta,
        amount: Decimal,
        tx_type: TransactionType,
        description: str | None,
        metadata: dict[str, Any] | None,
    ) -> LedgerMutationResponse:
        # The completed row and the balance write commit or roll back together
        async with unit_of_work(db):
            tx = await self._repo.insert_transaction(
                db,
                user_id,
                tx_type.value,
                amount,
                TransactionStatus.COMPLETED.value,
                description or tx_type.value.replace("_", " ").capitalize(),
                metadata,
            )
            wallet = await self._repo.apply_delta(db, user_id, delta)
        return LedgerMutationResponse.from_result(wallet, tx)

    # ------------------------------------------------------------------
    # Deposits
    # ------------------------------------------------------------------

    async def deposit(
        self,
        db: AsyncSession,
        user_id: int,
        amount: Decimal,
        status: TransactionStatus = TransactionStatus.COMPLETED,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> LedgerMutationResponse:
        """Record a deposit. Only a completed deposit touches the wallet.

        A pending deposit waits for `approve_deposit` (admin) or a payment confirmation.
        """
        if status not in (TransactionStatus.PENDING, TransactionStatus.COMPLETED):
            raise InvalidTransactionStatusError(
                status.value, [TransactionStatus.PENDING.value, TransactionStatus.COMPLETED.value]
            )
        amount = validate_amount(amount, settings.MAX_DEPOSIT_AMOUNT)

        async with unit_of_work(db):
            wallet = await self._require_wallet(db, user_id)
            tx = await self._repo.insert_transaction(
                db,
                user_id,
                TransactionType.DEPOSIT.value,
                amount,
                status.value,
                description or "Deposit",
                metadata,
            )
            if status is TransactionStatus.COMPLETED:
                wallet = await self._repo.apply_delta(db, user_id, BalanceDelta(available=amount))
                await self._commissions.record_commissions(db, user_id, tx.id, amount)

        if status is TransactionStatus.COMPLETED:
            self._notify_deposit(user_id, tx)
        return LedgerMutationResponse.from_result(wallet, tx)

    async def approve_deposit(
        self, db: AsyncSession, transaction_id: int
    ) -> LedgerMutationResponse:
        async with unit_of_work(db):
            wallet, tx = await self._complete_deposit(db, transaction_id, metadata=None)
        self._notify_deposit(tx.user_id, tx)
        return LedgerMutationResponse.from_result(wallet, tx)

    async def reject_deposit(
        self, db: AsyncSession, transaction_id: int, reason: str | None = None
    ) -> TransactionItem:
        async with unit_of_work(db):
            pending = await self._load_pending(db, transaction_id, TransactionType.DEPOSIT)
            tx = await self._transition(
                db, pending, TransactionStatus.FAILED, {"reason": reason or "rejected"}
            )
        return TransactionItem.from_transaction(tx)

    async def settle_payment_confirmation(
        self,
        db: AsyncSession,
        order_id: str,
        payment_status: str,
        actually_paid: Decimal | None = None,
        payment_id: str | None = None,
    ) -> PaymentConfirmationResponse:
        """Apply a verified payment-provider event to its pending deposit.

        Provider retries are safe: only a pending transaction is ever acted on; a replay
        raises AlreadyProcessedError and credits nothing.
        """
        user_id, transaction_id = parse_order_id(order_id)
        internal_status = map_payment_status(payment_status)
        provider_meta: dict[str, Any] = {
            "payment_id": payment_id,
            "payment_status": payment_status,
            "actually_paid": str(actually_paid) if actually_paid is not None else None,
        }

        async with unit_of_work(db):
            tx = await self._repo.get_transaction(db, transaction_id, for_update=True)
            if tx is None or tx.user_id != user_id:
                raise TransactionNotFoundError(order_id)
            if tx.type != TransactionType.DEPOSIT.value:
                raise WrongTransactionTypeError(transaction_id, TransactionType.DEPOSIT.value, tx.type)
            if not tx.is_pending:
                logger.info(
                    "Payment confirmation replay ignored: tx=%s status=%s provider=%s",
                    transaction_id, tx.status, payment_status,
                )
                raise AlreadyProcessedError("Transaction", transaction_id, tx.status)

            if internal_status is TransactionStatus.PENDING:
                return PaymentConfirmationResponse(
                    transaction_id=transaction_id, status=tx.status, credited=False
                )
            if internal_status is TransactionStatus.FAILED:
                failed = await self._transition(db, tx, TransactionStatus.FAILED, provider_meta)
                return PaymentConfirmationResponse(
                    transaction_id=transaction_id, status=failed.status, credited=False
                )

            _, completed = await self._complete_deposit(db, transaction_id, provider_meta)

        self._notify_deposit(user_id, completed)
        return PaymentConfirmationResponse(
            transaction_id=transaction_id, status=completed.status, credited=True
        )

    # ------------------------------------------------------------------
    # Withdrawals
    # ------------------------------------------------------------------

    async def withdraw(
        self,
        db: AsyncSession,
        user_id: int,
        amount: Decimal,
        metadata: dict[str, Any] | None = None,
    ) -> LedgerMutationResponse:
        """Reserve `amount` for withdrawal: available → pending, plus a pending row.

        The reservation is ONE conditional UPDATE. If it matches zero rows the store
        transaction rolls back, taking the inserted transaction row with it.
        """
        amount = validate_amount(amount)

        async with unit_of_work(db):
            await self._require_wallet(db, user_id)
            tx = await self._repo.insert_transaction(
                db,
                user_id,
                TransactionType.WITHDRAW.value,
                amount,
                TransactionStatus.PENDING.value,
                "Withdrawal request",
                metadata,
            )
            wallet = await self._repo.apply_delta(
                db, user_id, BalanceDelta(available=-amount, pending=amount)
            )

        self._notifier.dispatch(
            user_id,
            NotificationType.WITHDRAWAL.value,
            "Withdrawal requested",
            f"Your withdrawal of {money_to_display(amount)} is awaiting approval.",
            {"transaction_id": tx.id},
        )
        return LedgerMutationResponse.from_result(wallet, tx)

    async def approve_withdrawal(
        self, db: AsyncSession, transaction_id: int
    ) -> LedgerMutationResponse:
        """Funds leave custody: pending_balance -= amount."""
        async with unit_of_work(db):
            pending = await self._load_pending(db, transaction_id, TransactionType.WITHDRAW)
            tx = await self._transition(db, pending, TransactionStatus.COMPLETED, None)
            wallet = await self._repo.apply_delta(
                db, tx.user_id, BalanceDelta(pending=-tx.amount)
            )

        self._notifier.dispatch(
            tx.user_id,
            NotificationType.WITHDRAWAL.value,
            "Withdrawal approved",
            f"Your withdrawal of {money_to_display(tx.amount)} has been sent.",
            {"transaction_id": tx.id},
        )
        return LedgerMutationResponse.from_result(wallet, tx)

    async def reject_withdrawal(
        self, db: AsyncSession, transaction_id: int, reason: str | None = None
    ) -> LedgerMutationResponse:
        """Refund: pending_balance → available_balance, transaction → failed."""
        async with unit_of_work(db):
            pending = await self._load_pending(db, transaction_id, TransactionType.WITHDRAW)
            tx = await self._transition(
                db, pending, TransactionStatus.FAILED, {"reason": reason or "rejected"}
            )
            wallet = await self._repo.apply_delta(
                db, tx.user_id, BalanceDelta(pending=-tx.amount, available=tx.amount)
            )

        self._notifier.dispatch(
            tx.user_id,
            NotificationType.WITHDRAWAL.value,
            "Withdrawal rejected",
            f"Your withdrawal of {money_to_display(tx.amount)} was returned to your balance.",
            {"transaction_id": tx.id, "reason": reason},
        )
        return LedgerMutationResponse.from_result(wallet, tx)

    # ------------------------------------------------------------------
    # Internal helpers (caller owns the unit of work)
    # ------------------------------------------------------------------

    async def _require_wallet(self, db: AsyncSession, user_id: int) -> Wallet:
        wallet = await self._repo.get_wallet(db, user_id)
        if wallet is None:
            raise WalletNotFoundError(user_id)
        return wallet

    async def _load_pending(
        self, db: AsyncSession, transaction_id: int, expected: TransactionType
    ) -> Transaction:
        tx = await self._repo.get_transaction(db, transaction_id, for_update=True)
        if tx is None:
            raise TransactionNotFoundError(transaction_id)
        if tx.type != expected.value:
            raise WrongTransactionTypeError(transaction_id, expected.value, tx.type)
        if not tx.is_pending:
            raise AlreadyProcessedError("Transaction", transaction_id, tx.status)
        return tx

    async def _transition(
        self,
        db: AsyncSession,
        tx: Transaction,
        new_status: TransactionStatus,
        metadata: dict[str, Any] | None,
    ) -> Transaction:
        updated = await self._repo.transition_transaction(db, tx.id, new_status.value, metadata)
        if updated is None:
            # Another request flipped the status between our read and this write
            raise AlreadyProcessedError("Transaction", tx.id, "processed")
        return updated

    async def _complete_deposit(
        self, db: AsyncSession, transaction_id: int, metadata: dict[str, Any] | None
    ) -> tuple[Wallet, Transaction]:
        pending = await self._load_pending(db, transaction_id, TransactionType.DEPOSIT)
        tx = await self._transition(db, pending, TransactionStatus.COMPLETED, metadata)
        wallet = await self._repo.apply_delta(db, tx.user_id, BalanceDelta(available=tx.amount))
        await self._commissions.record_commissions(db, tx.user_id, tx.id, tx.amount)
        return wallet, tx

    def _notify_deposit(self, user_id: int, tx: Transaction) -> None:
        self._notifier.dispatch(
            user_id,
            NotificationType.DEPOSIT.value,
            "Deposit received",
            f"{money_to_display(tx.amount)} has been credited to your wallet.",
            {"transaction_id": tx.id},
        )
