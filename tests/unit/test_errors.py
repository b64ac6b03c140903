"""Unit tests for the error taxonomy."""

from decimal import Decimal

from src.cw_common.errors import (
    AboveMaximumStakeError,
    AlreadyProcessedError,
    AppError,
    BelowMinimumStakeError,
    CapacityExceededError,
    ForbiddenError,
    InsufficientBalanceError,
    InternalError,
    InvalidAmountError,
    InvalidCredentialsError,
    InvalidPoolConfigError,
    InvalidTierError,
    InvalidTransactionStatusError,
    PoolInactiveError,
    PoolNotFoundError,
    RateLimitError,
    SelfReferralError,
    StakeLockedError,
    TransactionNotFoundError,
    WalletNotFoundError,
    WrongTransactionTypeError,
)


def test_all_errors_are_app_errors() -> None:
    errors = [
        InsufficientBalanceError("available", Decimal("60"), Decimal("40")),
        WalletNotFoundError(1),
        InvalidAmountError("x"),
        TransactionNotFoundError(1),
        AlreadyProcessedError("Transaction", 1, "completed"),
        WrongTransactionTypeError(1, "deposit", "withdraw"),
        InvalidTransactionStatusError("failed", ["pending", "completed"]),
        PoolNotFoundError(1),
        PoolInactiveError(1),
        BelowMinimumStakeError(Decimal("100")),
        AboveMaximumStakeError(Decimal("1000")),
        CapacityExceededError(1),
        InvalidPoolConfigError("x"),
        SelfReferralError(),
        InvalidTierError("gold"),
    ]
    for err in errors:
        assert isinstance(err, AppError)
        assert 2000 <= err.code < 7000


def test_error_codes_are_unique() -> None:
    codes = [
        InsufficientBalanceError("available", Decimal("1"), Decimal("0")).code,
        WalletNotFoundError(1).code,
        InvalidAmountError("x").code,
        TransactionNotFoundError(1).code,
        AlreadyProcessedError("Transaction", 1, "completed").code,
        WrongTransactionTypeError(1, "deposit", "withdraw").code,
        InvalidTransactionStatusError("failed", ["pending"]).code,
        PoolNotFoundError(1).code,
        PoolInactiveError(1).code,
        BelowMinimumStakeError(Decimal("1")).code,
        AboveMaximumStakeError(Decimal("1")).code,
        CapacityExceededError(1).code,
        InvalidPoolConfigError("x").code,
        StakeLockedError(1, "2026-01-01").code,
        SelfReferralError().code,
        InvalidTierError("x").code,
        RateLimitError().code,
        InternalError().code,
    ]
    assert len(codes) == len(set(codes))


def test_insufficient_balance_message_names_field() -> None:
    err = InsufficientBalanceError("available", Decimal("60"), Decimal("40"))
    assert err.code == 2001
    assert err.http_status == 422
    assert "available" in err.message
    assert "60" in err.message and "40" in err.message


def test_capacity_exceeded_includes_remaining_when_known() -> None:
    assert "remaining" not in CapacityExceededError(3).message
    assert "25 remaining" in CapacityExceededError(3, Decimal("25")).message


def test_http_statuses() -> None:
    assert InvalidCredentialsError().http_status == 401
    assert ForbiddenError().http_status == 403
    assert WalletNotFoundError(1).http_status == 404
    assert AlreadyProcessedError("Transaction", 1, "completed").http_status == 409
    assert RateLimitError().http_status == 429
    assert InternalError().http_status == 500
