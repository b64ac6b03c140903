"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth
  2xxx: Wallet / ledger
  3xxx: Pool
  4xxx: Stake
  5xxx: Referral
  6xxx: Yield
  9xxx: System
"""

from decimal import Decimal


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


class ForbiddenError(AppError):
    def __init__(self, detail: str = "Admin role required") -> None:
        super().__init__(1006, detail, 403)


# --- 2xxx: Wallet / ledger ---

class InsufficientBalanceError(AppError):
    def __init__(self, field: str, required: Decimal, available: Decimal) -> None:
        super().__init__(
            2001,
            f"Insufficient {field} balance: required {required}, available {available}",
            422,
        )


class WalletNotFoundError(AppError):
    def __init__(self, user_id: int) -> None:
        super().__init__(2002, f"Wallet not found for user {user_id}", 404)


class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2003, f"Invalid amount: {detail}", 422)


class TransactionNotFoundError(AppError):
    def __init__(self, transaction_id: int | str) -> None:
        super().__init__(2004, f"Transaction not found: {transaction_id}", 404)


class AlreadyProcessedError(AppError):
    def __init__(self, entity: str, entity_id: int, status: str) -> None:
        super().__init__(2005, f"{entity} {entity_id} is already {status}", 409)


class WrongTransactionTypeError(AppError):
    def __init__(self, transaction_id: int, expected: str, actual: str) -> None:
        super().__init__(
            2006,
            f"Transaction {transaction_id} is a {actual}, expected {expected}",
            422,
        )


class InvalidTransactionStatusError(AppError):
    def __init__(self, status: str, allowed: list[str]) -> None:
        super().__init__(
            2007,
            f"Transaction status {status} not allowed here, expected one of {allowed}",
            422,
        )


# --- 3xxx: Pool ---

class PoolNotFoundError(AppError):
    def __init__(self, pool_id: int) -> None:
        super().__init__(3001, f"Pool not found: {pool_id}", 404)


class PoolInactiveError(AppError):
    def __init__(self, pool_id: int) -> None:
        super().__init__(3002, f"Pool is not active: {pool_id}", 422)


class BelowMinimumStakeError(AppError):
    def __init__(self, minimum: Decimal) -> None:
        super().__init__(3003, f"Minimum stake is {minimum}", 422)


class AboveMaximumStakeError(AppError):
    def __init__(self, maximum: Decimal) -> None:
        super().__init__(3004, f"Maximum stake is {maximum}", 422)


class CapacityExceededError(AppError):
    def __init__(self, pool_id: int, remaining: Decimal | None = None) -> None:
        detail = f"Insufficient capacity in pool {pool_id}"
        if remaining is not None:
            detail += f": {remaining} remaining"
        super().__init__(3005, detail, 422)


class InvalidPoolConfigError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3006, f"Invalid pool configuration: {detail}", 422)


# --- 4xxx: Stake ---

class StakeNotFoundError(AppError):
    def __init__(self, stake_id: int) -> None:
        super().__init__(4001, f"Stake not found: {stake_id}", 404)


class StakeLockedError(AppError):
    def __init__(self, stake_id: int, available_at: str) -> None:
        super().__init__(
            4002, f"Stake {stake_id} is locked until {available_at}", 422
        )


class StakeNotActiveError(AppError):
    def __init__(self, stake_id: int, status: str) -> None:
        super().__init__(4003, f"Stake {stake_id} is {status}, not active", 422)


# --- 5xxx: Referral ---

class SelfReferralError(AppError):
    def __init__(self) -> None:
        super().__init__(5001, "A user cannot refer themselves", 422)


class CommissionNotFoundError(AppError):
    def __init__(self, commission_id: int) -> None:
        super().__init__(5002, f"Commission not found: {commission_id}", 404)


# --- 6xxx: Yield ---

class InvalidTierError(AppError):
    def __init__(self, tier: str) -> None:
        super().__init__(6001, f"Unknown tier: {tier}", 422)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
