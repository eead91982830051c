from .dates import as_utc, day_bounds, day_start, local_date, local_today, utcnow
from .money import CENT, ZERO, percentage_of, share_of, to_decimal

__all__ = [
    "CENT",
    "ZERO",
    "as_utc",
    "day_bounds",
    "day_start",
    "local_date",
    "local_today",
    "percentage_of",
    "share_of",
    "to_decimal",
    "utcnow",
]
