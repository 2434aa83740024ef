"""Value comparison shared by selection, sorting and lookups.

Cell values are strings, numbers, booleans or dates. Dates compare by the
instant they denote rather than by object identity or type, so a ``date`` and
a midnight ``datetime`` are equal, and an ISO string sorts with the dates.
"""

from datetime import date, datetime, time, timezone
from typing import Any, Optional


def as_instant(value: Any, parse_strings: bool = True) -> Optional[datetime]:
    """Return ``value`` as a naive UTC datetime, or None if it is not a date."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if parse_strings and isinstance(value, str) and "-" in value:
        try:
            return as_instant(datetime.fromisoformat(value.strip()), parse_strings=False)
        except ValueError:
            return None
    return None


def values_equal(left: Any, right: Any) -> bool:
    """Equality used by selectors: dates by instant, everything else with ``==``."""
    if isinstance(left, date) or isinstance(right, date):
        left_instant, right_instant = as_instant(left), as_instant(right)
        if left_instant is not None and right_instant is not None:
            return left_instant == right_instant
    return left == right


def sort_key(value: Any) -> tuple:
    """Key ordering numbers, then dates, then text, then blanks."""
    if value is None or value == "":
        return (3, "")
    if isinstance(value, (bool, int, float)):
        return (0, float(value))
    instant = as_instant(value)
    if instant is not None:
        return (1, instant)
    return (2, str(value))
