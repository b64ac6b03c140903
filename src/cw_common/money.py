"""Decimal money utilities.

All balances, amounts and rates are Decimal. No float on any path that moves funds.
Ledger amounts are stored as NUMERIC(20, 8).
"""

from decimal import ROUND_DOWN, Decimal

from src.cw_common.errors import InvalidAmountError

MONEY_PLACES = Decimal("0.00000001")
ZERO = Decimal("0")


def quantize_money(value: Decimal) -> Decimal:
    """Truncate to ledger precision (8 dp). Rounds toward zero so the platform never over-credits."""
    return value.quantize(MONEY_PLACES, rounding=ROUND_DOWN)


def money_to_display(value: Decimal) -> str:
    """Convert an amount to a display string: Decimal('1234.5') -> '$1,234.50', -12 -> '-$12.00'."""
    rounded = value.quantize(Decimal("0.01"))
    if rounded < 0:
        return f"-${-rounded:,.2f}"
    return f"${rounded:,.2f}"


def validate_amount(amount: Decimal, maximum: Decimal | None = None) -> Decimal:
    """Truncate to ledger precision, then raise InvalidAmountError unless 0 < amount <= maximum.

    Returns the truncated amount; callers must use it in place of the raw input.
    """
    if not amount.is_finite():
        raise InvalidAmountError(f"{amount} is not a finite number")
    quantized = quantize_money(amount)
    if quantized <= 0:
        raise InvalidAmountError(f"{amount} must be at least {MONEY_PLACES}")
    if maximum is not None and quantized > maximum:
        raise InvalidAmountError(f"{amount} exceeds maximum of {money_to_display(maximum)}")
    return quantized
