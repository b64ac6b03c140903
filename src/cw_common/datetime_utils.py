"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def day_of_year(moment: datetime) -> int:
    """UTC day of year, 1-366."""
    return moment.astimezone(timezone.utc).timetuple().tm_yday
