"""Calendar windows shared by the summary, statistics and list views.

All windows are closed intervals, ``start <= x <= end``, in naive local time.
Weeks start on Sunday. ``end_of_*`` returns the last representable instant
of the final day.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Window:
    start: Optional[datetime]
    end: Optional[datetime]

    def contains(self, dt: datetime) -> bool:
        if self.start is not None and dt < self.start:
            return False
        if self.end is not None and dt > self.end:
            return False
        return True


ALL_TIME = Window(None, None)


class Period(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    LAST_MONTH = "last-month"
    THREE_MONTHS = "3months"
    CUSTOM = "custom"
    ALL = "all"


def _day(ref: date) -> date:
    return ref.date() if isinstance(ref, datetime) else ref


def start_of_day(ref: date) -> datetime:
    return datetime.combine(_day(ref), time.min)


def end_of_day(ref: date) -> datetime:
    return datetime.combine(_day(ref), time.max)


def start_of_week(ref: datetime) -> datetime:
    # isoweekday: Monday=1 .. Sunday=7, so Sunday maps to offset 0
    offset = ref.isoweekday() % 7
    return start_of_day(ref - timedelta(days=offset))


def end_of_week(ref: datetime) -> datetime:
    return end_of_day(start_of_week(ref) + timedelta(days=6))


def start_of_month(ref: datetime) -> datetime:
    return datetime(ref.year, ref.month, 1)


def end_of_month(ref: datetime) -> datetime:
    last_day = calendar.monthrange(ref.year, ref.month)[1]
    return datetime.combine(date(ref.year, ref.month, last_day), time.max)


def start_of_last_month(ref: datetime) -> datetime:
    return start_of_month(start_of_month(ref) - timedelta(days=1))


def end_of_last_month(ref: datetime) -> datetime:
    return end_of_day(start_of_month(ref) - timedelta(days=1))


def shift_months(ref: datetime, months: int) -> datetime:
    """Move ``ref`` by whole calendar months, clamping the day to the month length."""
    index = ref.year * 12 + (ref.month - 1) + months
    year, month = divmod(index, 12)
    day = min(ref.day, calendar.monthrange(year, month + 1)[1])
    return ref.replace(year=year, month=month + 1, day=day)


def day_window(ref: datetime) -> Window:
    return Window(start_of_day(ref), end_of_day(ref))


def week_window(ref: datetime) -> Window:
    return Window(start_of_week(ref), end_of_week(ref))


def month_window(ref: datetime) -> Window:
    return Window(start_of_month(ref), end_of_month(ref))


def last_month_window(ref: datetime) -> Window:
    return Window(start_of_last_month(ref), end_of_last_month(ref))


def window_for(
    period: Period | str,
    now: datetime,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> Window:
    """Resolve a named period to a closed window relative to ``now``.

    ``start``/``end`` are only read for ``Period.CUSTOM``; either may be
    omitted to leave that side open.
    """
    period = Period(period)
    if period is Period.TODAY:
        return day_window(now)
    if period is Period.WEEK:
        return week_window(now)
    if period is Period.MONTH:
        return month_window(now)
    if period is Period.LAST_MONTH:
        return last_month_window(now)
    if period is Period.THREE_MONTHS:
        return Window(start_of_day(shift_months(now, -3)), end_of_day(now))
    if period is Period.CUSTOM:
        return Window(
            start_of_day(start) if start is not None else None,
            end_of_day(end) if end is not None else None,
        )
    return ALL_TIME
