from __future__ import annotations

from datetime import date, datetime, timedelta

from leavedesk.exceptions import InvalidDateRange
from leavedesk.models.enums import CantonCode
from leavedesk.services.holiday import holiday_dates


def as_calendar_date(value: date | datetime) -> date:
    """Drop any time-of-day component; leave dates are compared as calendar days."""
    if isinstance(value, datetime):
        return value.date()
    return value


def ensure_date_range(start: date, end: date, label: str = "period") -> None:
    """Raise InvalidDateRange when ``end`` precedes ``start``."""
    if as_calendar_date(end) < as_calendar_date(start):
        raise InvalidDateRange(f"{label} ends ({end}) before it starts ({start})")


def intervals_overlap(
    a_start: date | datetime,
    a_end: date | datetime,
    b_start: date | datetime,
    b_end: date | datetime,
) -> bool:
    """Inclusive overlap test on calendar dates."""
    return as_calendar_date(a_start) <= as_calendar_date(b_end) and as_calendar_date(b_start) <= as_calendar_date(
        a_end
    )


def count_business_days(start: date, end: date, canton: CantonCode | str = CantonCode.VD) -> int:
    """Count working days in ``[start, end]``.

    Excludes Saturdays, Sundays and the canton's public holidays (looked up
    for each date's own year, so ranges may cross New Year). Returns 0 when
    ``start`` is after ``end``.
    """
    canton = CantonCode(canton)
    first = as_calendar_date(start)
    last = as_calendar_date(end)

    total = 0
    for offset in range((last - first).days + 1):
        current = first + timedelta(days=offset)
        if current.weekday() < 5 and current not in holiday_dates(current.year, canton):
            total += 1
    return total
