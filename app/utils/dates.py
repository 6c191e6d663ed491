"""
Date-window resolution for list filters.

Turns a :class:`~app.models.enums.DateWindow` preset (or an explicit
start / end pair) into a half-open ``[start, end)`` timestamp interval
that repositories apply with ``gte`` / ``lt`` filters.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import NamedTuple, Optional

from app.models.enums import DateWindow

__all__ = ["DateRange", "resolve_date_window"]


class DateRange(NamedTuple):
    """Half-open interval; either bound may be ``None`` (unbounded)."""

    start: Optional[datetime]
    end: Optional[datetime]


def _subtract_month(moment: datetime) -> datetime:
    """Same wall-clock time one calendar month earlier, clamped to month end."""
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = moment.day
    while True:
        try:
            return moment.replace(year=year, month=month, day=day)
        except ValueError:
            day -= 1


def resolve_date_window(
    window: Optional[DateWindow],
    start: Optional[date] = None,
    end: Optional[date] = None,
    now: Optional[datetime] = None,
) -> DateRange:
    """Resolve *window* to a ``DateRange``.

    - ``today`` / ``yesterday``: the whole calendar day.
    - ``week``: the last 7 days up to *now*.
    - ``month``: the last calendar month up to *now*.
    - ``range``: from the start of *start* through the end of *end*
      (both inclusive whole days).  A missing bound stays open.
    - ``None``: unbounded.

    Raises:
        ValueError: If ``range`` is given with *end* before *start*.
    """
    current = now or datetime.now()
    midnight = datetime.combine(current.date(), time.min)

    if window is None:
        return DateRange(None, None)
    if window == DateWindow.TODAY:
        return DateRange(midnight, midnight + timedelta(days=1))
    if window == DateWindow.YESTERDAY:
        return DateRange(midnight - timedelta(days=1), midnight)
    if window == DateWindow.WEEK:
        return DateRange(current - timedelta(days=7), None)
    if window == DateWindow.MONTH:
        return DateRange(_subtract_month(current), None)

    if start is not None and end is not None and end < start:
        raise ValueError("end date must not be before start date")
    return DateRange(
        datetime.combine(start, time.min) if start else None,
        datetime.combine(end + timedelta(days=1), time.min) if end else None,
    )
