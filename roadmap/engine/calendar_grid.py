"""Business-day calendar grid for the roadmap timeline.

The timeline only shows Monday-Friday. Every column / pixel position is an
index into the business-day sequence, never a raw calendar offset, and all
date arithmetic used for dragging and pushing skips weekends.
"""

from bisect import bisect_left, bisect_right
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from roadmap.engine.errors import InvalidDateRangeError
from roadmap.models.constants import CELL_WIDTH, DEFAULT_TIMEFRAME, TIMEFRAMES
from roadmap.models.dates import DateLike, is_business_day, normalize_date


class OutOfRange(str, Enum):
    """Sentinel returned by `CalendarGrid.day_index` for dates outside the window."""
    BEFORE = "before_range"
    AFTER = "after_range"


BEFORE_RANGE = OutOfRange.BEFORE
AFTER_RANGE = OutOfRange.AFTER

DayIndex = Union[int, OutOfRange]


def business_days(start: DateLike, end: DateLike) -> List[date]:
    """Return the ordered business days of the inclusive range [start, end].

    Raises:
        InvalidDateRangeError: If start falls after end
    """
    start_day = normalize_date(start)
    end_day = normalize_date(end)
    if start_day > end_day:
        raise InvalidDateRangeError(
            f"Invalid range: {start_day.isoformat()} is after {end_day.isoformat()}"
        )
    days: List[date] = []
    cur = start_day
    while cur <= end_day:
        if is_business_day(cur):
            days.append(cur)
        cur = cur + timedelta(days=1)
    return days


def add_business_days(value: DateLike, num_days: int) -> date:
    """Move a date forward (or backward for negative values) by business days.

    Weekend days are skipped entirely, so the result of a non-zero move is
    always a weekday. A zero move of a weekend date rolls forward to Monday.
    """
    result = normalize_date(value)
    if num_days == 0:
        while not is_business_day(result):
            result = result + timedelta(days=1)
        return result

    step = timedelta(days=1 if num_days > 0 else -1)
    remaining = abs(num_days)
    while remaining > 0:
        result = result + step
        if is_business_day(result):
            remaining -= 1
    return result


def business_days_between(start: DateLike, end: DateLike) -> int:
    """Count business days in the inclusive range (0 when end is before start)."""
    start_day = normalize_date(start)
    end_day = normalize_date(end)
    if end_day < start_day:
        return 0
    full_weeks, extra = divmod((end_day - start_day).days + 1, 7)
    count = full_weeks * 5
    cur = start_day + timedelta(days=full_weeks * 7)
    for _ in range(extra):
        if is_business_day(cur):
            count += 1
        cur = cur + timedelta(days=1)
    return count


def timeframe_window(timeframe: str, anchor: DateLike) -> Tuple[date, date]:
    """Return the (start, end) calendar window of a timeframe containing anchor."""
    day = normalize_date(anchor)
    if timeframe == "month":
        start = day.replace(day=1)
        return start, start + relativedelta(months=1) - timedelta(days=1)
    if timeframe == "quarter":
        start = date(day.year, 3 * ((day.month - 1) // 3) + 1, 1)
        return start, start + relativedelta(months=3) - timedelta(days=1)
    if timeframe == "half":
        if day.month <= 6:
            return date(day.year, 1, 1), date(day.year, 6, 30)
        return date(day.year, 7, 1), date(day.year, 12, 31)
    if timeframe == "year":
        return date(day.year, 1, 1), date(day.year, 12, 31)
    raise ValueError(f"Unknown timeframe: {timeframe!r} (expected one of {', '.join(TIMEFRAMES)})")


_TIMEFRAME_MONTHS = {"month": 1, "quarter": 3, "half": 6, "year": 12}


def shift_anchor(timeframe: str, anchor: DateLike, steps: int) -> date:
    """Move the anchor date by whole timeframes (negative = previous)."""
    if timeframe not in _TIMEFRAME_MONTHS:
        raise ValueError(f"Unknown timeframe: {timeframe!r}")
    return normalize_date(anchor) + relativedelta(months=_TIMEFRAME_MONTHS[timeframe] * steps)


def period_label(timeframe: str, anchor: DateLike) -> str:
    """Human label for the period shown, e.g. 'Q1 2025'."""
    start, _ = timeframe_window(timeframe, anchor)
    if timeframe == "month":
        return start.strftime("%B %Y")
    if timeframe == "quarter":
        return f"Q{(start.month - 1) // 3 + 1} {start.year}"
    if timeframe == "half":
        return f"{'H1' if start.month < 7 else 'H2'} {start.year}"
    return str(start.year)


class CalendarGrid:
    """Ordered business days of a visible window, with date <-> column mapping."""

    def __init__(self, start: DateLike, end: DateLike):
        self.start = normalize_date(start)
        self.end = normalize_date(end)
        self.days: List[date] = business_days(self.start, self.end)

    @classmethod
    def for_timeframe(cls, timeframe: str = DEFAULT_TIMEFRAME, anchor: Optional[DateLike] = None) -> "CalendarGrid":
        """Build the grid for a timeframe around an explicit anchor date."""
        if anchor is None:
            raise ValueError("anchor date is required")
        start, end = timeframe_window(timeframe, anchor)
        return cls(start, end)

    def __len__(self) -> int:
        return len(self.days)

    def __repr__(self) -> str:
        return f"CalendarGrid({self.start.isoformat()}..{self.end.isoformat()}, {len(self.days)} days)"

    def date_at(self, index: int) -> date:
        """Calendar date of a column."""
        return self.days[index]

    def day_index(self, value: DateLike, edge: str = "start") -> DayIndex:
        """Map a date to a column.

        Args:
            value: Date to locate
            edge: "start" returns the first grid day >= value (range starts);
                "end" returns the last grid day <= value (range ends)

        Returns:
            Column index, or BEFORE_RANGE / AFTER_RANGE when the date falls
            outside the visible window. Callers clamp instead of failing.
        """
        day = normalize_date(value)
        if day < self.start:
            return BEFORE_RANGE
        if day > self.end:
            return AFTER_RANGE
        if edge == "start":
            idx = bisect_left(self.days, day)
            return idx if idx < len(self.days) else AFTER_RANGE
        if edge == "end":
            idx = bisect_right(self.days, day) - 1
            return idx if idx >= 0 else BEFORE_RANGE
        raise ValueError(f"edge must be 'start' or 'end', got {edge!r}")

    def clamp_index(self, index: DayIndex) -> int:
        """Clamp a day index (or sentinel) into the visible columns."""
        if not self.days:
            raise InvalidDateRangeError("Grid has no business days")
        if index is BEFORE_RANGE:
            return 0
        if index is AFTER_RANGE:
            return len(self.days) - 1
        return max(0, min(len(self.days) - 1, index))

    def block_span(self, start: DateLike, end: DateLike) -> Optional[Tuple[int, int]]:
        """Visible (first, last) column of a date range, or None if it is not visible."""
        start_day = normalize_date(start)
        end_day = normalize_date(end)
        if not self.days or end_day < self.days[0] or start_day > self.days[-1]:
            return None
        first = self.clamp_index(self.day_index(start_day, "start"))
        last = self.clamp_index(self.day_index(end_day, "end"))
        # A range that sits on a weekend still occupies one column.
        return first, max(first, last)

    def span_pixels(self, start: DateLike, end: DateLike) -> Optional[Tuple[int, int]]:
        """(left, width) in pixels for a date range, or None if not visible."""
        span = self.block_span(start, end)
        if span is None:
            return None
        first, last = span
        return first * CELL_WIDTH + 2, (last - first + 1) * CELL_WIDTH - 4

    def today_index(self, today: DateLike) -> Optional[int]:
        """Column of `today` when it is a visible business day."""
        day = normalize_date(today)
        idx = bisect_left(self.days, day)
        if idx < len(self.days) and self.days[idx] == day:
            return idx
        return None
