"""Date-only helpers shared by models and the calendar engine.

Schedule dates are calendar days, not instants. A stored value such as
"2025-03-10T00:00:00Z" must mean March 10 for every viewer, so we keep the
calendar date exactly as written and never convert between timezones.
"""

import re
from datetime import date, datetime
from typing import Union

DateLike = Union[date, datetime, str]

_ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")


def normalize_date(value: DateLike) -> date:
    """Reduce a date, datetime or ISO string to its calendar date.

    Args:
        value: `date`, `datetime` (naive or aware) or an ISO-8601 string

    Returns:
        The calendar date as written (time and zone are discarded)

    Raises:
        ValueError: If the value cannot be read as a date
    """
    if isinstance(value, datetime):
        # Aware datetimes keep their own wall-clock date; no astimezone().
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not _ISO_DATE_PREFIX.match(text):
            raise ValueError(f"Invalid date value: {value!r}")
        return date.fromisoformat(text[:10])
    raise ValueError(f"Invalid date value: {value!r}")


def is_business_day(value: date) -> bool:
    """Monday through Friday."""
    return value.weekday() < 5
