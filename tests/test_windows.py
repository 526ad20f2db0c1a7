from datetime import date, datetime, timedelta

from pettycash.domain import Category, ExpenseRecord, PaymentMode
from pettycash.filters import by_window
from pettycash.windows import (
    ALL_TIME,
    Period,
    Window,
    end_of_day,
    end_of_last_month,
    end_of_month,
    end_of_week,
    shift_months,
    start_of_day,
    start_of_last_month,
    start_of_month,
    start_of_week,
    window_for,
)

LAST_INSTANT = timedelta(hours=23, minutes=59, seconds=59, microseconds=999999)


def test_day_bounds():
    ref = datetime(2025, 3, 5, 15, 30)
    assert start_of_day(ref) == datetime(2025, 3, 5)
    assert end_of_day(ref) == datetime(2025, 3, 5) + LAST_INSTANT


def test_day_bounds_accept_plain_dates():
    assert start_of_day(date(2025, 3, 5)) == datetime(2025, 3, 5)
    assert end_of_day(date(2025, 3, 5)).date() == date(2025, 3, 5)


def test_week_starts_on_sunday():
    # 2025-03-02 is a Sunday
    assert start_of_week(datetime(2025, 3, 5, 15, 30)) == datetime(2025, 3, 2)
    assert start_of_week(datetime(2025, 3, 2, 8, 0)) == datetime(2025, 3, 2)
    assert start_of_week(datetime(2025, 3, 8, 23, 0)) == datetime(2025, 3, 2)
    assert end_of_week(datetime(2025, 3, 5)) == datetime(2025, 3, 8) + LAST_INSTANT


def test_week_window_contains_ref_and_spans_seven_days():
    base = datetime(2024, 12, 20, 13, 0)
    for i in range(60):
        ref = base + timedelta(days=i, hours=i % 11, minutes=i)
        start, end = start_of_week(ref), end_of_week(ref)
        assert start <= ref <= end
        assert start.weekday() == 6  # Sunday
        assert end - start == timedelta(days=7) - timedelta(microseconds=1)


def test_month_bounds_handle_leap_year():
    ref = datetime(2024, 2, 10, 9)
    assert start_of_month(ref) == datetime(2024, 2, 1)
    assert end_of_month(ref) == datetime(2024, 2, 29) + LAST_INSTANT


def test_last_month_crosses_year_boundary():
    ref = datetime(2025, 1, 15)
    assert start_of_last_month(ref) == datetime(2024, 12, 1)
    assert end_of_last_month(ref) == datetime(2024, 12, 31) + LAST_INSTANT


def test_shift_months_clamps_day():
    assert shift_months(datetime(2025, 5, 31, 10), -3) == datetime(2025, 2, 28, 10)
    assert shift_months(datetime(2024, 5, 31), -3) == datetime(2024, 2, 29)
    assert shift_months(datetime(2025, 1, 15), -1) == datetime(2024, 12, 15)


def test_window_is_closed_on_both_ends():
    w = Window(datetime(2025, 3, 1), datetime(2025, 3, 2))
    assert w.contains(datetime(2025, 3, 1))
    assert w.contains(datetime(2025, 3, 2))
    assert not w.contains(datetime(2025, 3, 2, 0, 0, 1))
    assert ALL_TIME.contains(datetime(1999, 1, 1))


def test_window_for_named_periods():
    now = datetime(2025, 3, 5, 15, 30)
    assert window_for(Period.TODAY, now) == Window(datetime(2025, 3, 5), end_of_day(now))
    assert window_for("week", now).start == datetime(2025, 3, 2)
    assert window_for(Period.MONTH, now).start == datetime(2025, 3, 1)
    assert window_for(Period.LAST_MONTH, now).end == datetime(2025, 2, 28) + LAST_INSTANT
    three = window_for(Period.THREE_MONTHS, now)
    assert three.start == datetime(2024, 12, 5)
    assert three.contains(now.replace(hour=23))
    assert window_for(Period.ALL, now) == ALL_TIME


def test_window_for_custom_range():
    now = datetime(2025, 3, 5)
    w = window_for(Period.CUSTOM, now, date(2025, 1, 10), date(2025, 1, 12))
    assert w.start == datetime(2025, 1, 10)
    assert w.contains(datetime(2025, 1, 12, 22))
    assert not w.contains(datetime(2025, 1, 13))

    open_ended = window_for(Period.CUSTOM, now, start=date(2025, 1, 10))
    assert open_ended.end is None
    assert open_ended.contains(datetime(2030, 1, 1))


def test_by_window_predicate():
    inside = ExpenseRecord(1, 100, "Tea", Category.FOOD, PaymentMode.CASH, datetime(2025, 3, 5, 23, 59))
    outside = ExpenseRecord(2, 100, "Tea", Category.FOOD, PaymentMode.CASH, datetime(2025, 3, 6))
    pred = by_window(window_for(Period.TODAY, datetime(2025, 3, 5, 8)))
    assert pred(inside)
    assert not pred(outside)
    assert by_window(None)(outside)
