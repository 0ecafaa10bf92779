"""
Utility package

Money conversion (minor units) and date handling helpers
"""

from core.utils.dates import (
    days_between,
    now_utc,
    to_date,
    to_iso,
    today_utc,
)
from core.utils.money import (
    format_amount,
    from_minor,
    to_decimal,
    to_minor,
)

__all__ = [
    "days_between",
    "now_utc",
    "to_date",
    "to_iso",
    "today_utc",
    "format_amount",
    "from_minor",
    "to_decimal",
    "to_minor",
]
