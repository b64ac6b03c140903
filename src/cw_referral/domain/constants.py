from decimal import Decimal

MAX_REFERRAL_DEPTH: int = 5

# Share of the downline transaction amount paid to the referrer at each level
COMMISSION_RATES: dict[int, Decimal] = {
    1: Decimal("0.10"),
    2: Decimal("0.05"),
    3: Decimal("0.03"),
    4: Decimal("0.02"),
    5: Decimal("0.01"),
}


def commission_rate_for(level: int) -> Decimal:
    """0 for any level outside the table."""
    return COMMISSION_RATES.get(level, Decimal("0"))
