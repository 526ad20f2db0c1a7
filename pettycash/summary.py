"""Dashboard summary: today, this week and this month at a glance.

Every call recomputes from the snapshot it is given. Percent-change figures
come from the ``compare`` callable passed to ``compute_summary``.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from pettycash.config import TREND_DAYS
from pettycash.domain import ExpenseRecord, PeriodTotal, Summary, WeekTotal
from pettycash.filters import by_window
from pettycash.lazy import iter_expenses
from pettycash.transforms import (
    category_distribution,
    daily_totals,
    payment_distribution,
    total_amount,
)
from pettycash.windows import (
    Period,
    Window,
    day_window,
    end_of_day,
    last_month_window,
    month_window,
    start_of_day,
    week_window,
)

Comparison = Callable[[Sequence[ExpenseRecord], datetime, Period], int]

# values the first dashboard shipped with, before history was compared
PLACEHOLDER_CHANGES = {
    Period.TODAY: -12,
    Period.WEEK: 8,
    Period.MONTH: 15,
}


def in_window(records: Sequence[ExpenseRecord], window: Window) -> tuple[ExpenseRecord, ...]:
    return tuple(iter_expenses(records, by_window(window)))


def window_total(records: Sequence[ExpenseRecord], window: Window) -> int:
    return total_amount(iter_expenses(records, by_window(window)))


def percent_change(current: int, baseline: int, baseline_days: int = 1) -> int:
    """Signed percent of ``current`` against ``baseline`` spread over ``baseline_days``.

    Stays in integers until the final division. A zero baseline yields 0.
    """
    if baseline == 0:
        return 0
    return round((current * baseline_days - baseline) * 100 / baseline)


def historical_change(records: Sequence[ExpenseRecord], now: datetime, period: Period) -> int:
    """Compare against real history.

    today: the average day of the previous TREND_DAYS days.
    week: last week. month: last month.
    """
    period = Period(period)
    if period is Period.TODAY:
        trailing = Window(start_of_day(now - timedelta(days=TREND_DAYS)), end_of_day(now - timedelta(days=1)))
        return percent_change(window_total(records, day_window(now)), window_total(records, trailing), TREND_DAYS)
    if period is Period.WEEK:
        return percent_change(
            window_total(records, week_window(now)),
            window_total(records, week_window(now - timedelta(days=7))),
        )
    if period is Period.MONTH:
        return percent_change(
            window_total(records, month_window(now)),
            window_total(records, last_month_window(now)),
        )
    raise ValueError(f"No comparison baseline for period {period.value!r}")


def placeholder_change(records: Sequence[ExpenseRecord], now: datetime, period: Period) -> int:
    return PLACEHOLDER_CHANGES[Period(period)]


def last_days(now: datetime, days: int = TREND_DAYS):
    today = now.date()
    return [today - timedelta(days=i) for i in range(days - 1, -1, -1)]


def compute_summary(
    records: Sequence[ExpenseRecord],
    now: Optional[datetime] = None,
    compare: Comparison = historical_change,
) -> Summary:
    now = now or datetime.now()
    week_records = in_window(records, week_window(now))

    return Summary(
        today=PeriodTotal(
            total=window_total(records, day_window(now)),
            percent_change=compare(records, now, Period.TODAY),
        ),
        week=WeekTotal(
            total=total_amount(week_records),
            percent_change=compare(records, now, Period.WEEK),
            category_distribution=category_distribution(week_records),
            payment_distribution=payment_distribution(week_records),
        ),
        month=PeriodTotal(
            total=window_total(records, month_window(now)),
            percent_change=compare(records, now, Period.MONTH),
        ),
        daily_totals=daily_totals(records, last_days(now)),
    )
