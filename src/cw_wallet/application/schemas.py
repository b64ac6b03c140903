"""Pydantic schemas and cursor utilities for cw_wallet API."""

import base64
import json
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from src.cw_common.money import money_to_display
from src.cw_wallet.domain.models import Transaction, Wallet

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except Exception:
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class DepositRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=20, decimal_places=8, description="Amount in USD")


class WithdrawRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=20, decimal_places=8, description="Amount in USD")


class AdminDepositRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    amount: Decimal = Field(..., gt=0, max_digits=20, decimal_places=8)
    description: str | None = Field(None, max_length=500)


class PaymentConfirmationRequest(BaseModel):
    """Already-verified payment-provider event, forwarded by the webhook collaborator."""

    order_id: str = Field(..., min_length=1, max_length=128)
    payment_status: str = Field(..., min_length=1, max_length=32)
    actually_paid: Decimal | None = None
    payment_id: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class WalletResponse(BaseModel):
    user_id: int
    currency: str
    available_balance: Decimal
    available_balance_display: str
    locked_balance: Decimal
    locked_balance_display: str
    pending_balance: Decimal
    pending_balance_display: str
    total_balance: Decimal
    total_balance_display: str

    @classmethod
    def from_wallet(cls, wallet: Wallet) -> "WalletResponse":
        return cls(
            user_id=wallet.user_id,
            currency=wallet.currency,
            available_balance=wallet.available_balance,
            available_balance_display=money_to_display(wallet.available_balance),
            locked_balance=wallet.locked_balance,
            locked_balance_display=money_to_display(wallet.locked_balance),
            pending_balance=wallet.pending_balance,
            pending_balance_display=money_to_display(wallet.pending_balance),
            total_balance=wallet.total_balance,
            total_balance_display=money_to_display(wallet.total_balance),
        )


class TransactionItem(BaseModel):
    id: int
    type: str
    amount: Decimal
    amount_display: str
    status: str
    description: str | None
    metadata: dict[str, Any]
    created_at: str  # ISO8601 string
    completed_at: str | None

    @classmethod
    def from_transaction(cls, tx: Transaction) -> "TransactionItem":
        return cls(
            id=tx.id,
            type=tx.type,
            amount=tx.amount,
            amount_display=money_to_display(tx.amount),
            status=tx.status,
            description=tx.description,
            metadata=tx.metadata,
            created_at=tx.created_at.isoformat() if tx.created_at else "",
            completed_at=tx.completed_at.isoformat() if tx.completed_at else None,
        )


class LedgerMutationResponse(BaseModel):
    """Result of any operation that writes one transaction and moves balances."""

    transaction: TransactionItem
    wallet: WalletResponse

    @classmethod
    def from_result(cls, wallet: Wallet, tx: Transaction) -> "LedgerMutationResponse":
        return cls(
            transaction=TransactionItem.from_transaction(tx),
            wallet=WalletResponse.from_wallet(wallet),
        )


class TransactionListResponse(BaseModel):
    items: list[TransactionItem]
    next_cursor: str | None
    has_more: bool


class PaymentConfirmationResponse(BaseModel):
    transaction_id: int
    status: str
    credited: bool
