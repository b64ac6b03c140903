from decimal import Decimal

from src.cw_common.errors import InvalidPoolConfigError


def check_roi_band(roi_min: Decimal, roi_max: Decimal) -> None:
    """Raise InvalidPoolConfigError unless 0 <= roi_min <= roi_max."""
    if not (Decimal("0") <= roi_min <= roi_max):
        raise InvalidPoolConfigError(f"roi band [{roi_min}, {roi_max}] must satisfy 0 <= min <= max")


def validate_pool_config(
    min_stake: Decimal,
    max_stake: Decimal | None,
    total_capacity: Decimal | None,
    roi_min: Decimal,
    roi_max: Decimal,
    lock_period_days: int,
) -> None:
    check_roi_band(roi_min, roi_max)
    if min_stake <= 0:
        raise InvalidPoolConfigError("min_stake must be greater than zero")
    if max_stake is not None and max_stake < min_stake:
        raise InvalidPoolConfigError("max_stake must be >= min_stake")
    if total_capacity is not None and total_capacity <= 0:
        raise InvalidPoolConfigError("total_capacity must be greater than zero")
    if lock_period_days < 0:
        raise InvalidPoolConfigError("lock_period_days must be >= 0")
