from datetime import date, datetime

from pettycash.domain import NO_HIGHEST_EXPENSE, Category, ExpenseRecord, PaymentMode
from pettycash.lazy import iter_expenses, top_expenses
from pettycash.transforms import (
    average_daily,
    category_distribution,
    daily_totals,
    daily_trend,
    payment_distribution,
    period_stats,
    record_from_dict,
    record_to_dict,
    sort_by_date_desc,
    total_amount,
)


def make(id, amount, category, mode, dt, description=None):
    return ExpenseRecord(
        id=id,
        amount=amount,
        description=description or f"expense {id}",
        category=category,
        payment_mode=mode,
        date=dt,
    )


def make_sample():
    return (
        make(1, 500, Category.FOOD, PaymentMode.CASH, datetime(2025, 3, 2, 10, 0)),
        make(2, 1200, Category.TRAVEL, PaymentMode.UPI, datetime(2025, 3, 3, 9, 0)),
        make(3, 1200, Category.FUN, PaymentMode.CASH, datetime(2025, 3, 3, 20, 0)),
        make(4, 300, Category.FOOD, PaymentMode.UPI, datetime(2025, 3, 5, 12, 0)),
    )


def test_total_amount():
    assert total_amount(make_sample()) == 3200
    assert total_amount(()) == 0


def test_category_distribution_is_complete_and_ordered():
    dist = category_distribution(make_sample())
    assert list(dist) == list(Category)
    assert dist == {
        Category.FOOD: 800,
        Category.TRAVEL: 1200,
        Category.FUN: 1200,
        Category.STUDY: 0,
        Category.OTHER: 0,
    }


def test_distributions_sum_to_subset_total():
    records = make_sample()
    for subset in (records, records[:1], records[1:3], ()):
        cats = category_distribution(subset)
        modes = payment_distribution(subset)
        assert len(cats) == 5
        assert len(modes) == 2
        assert sum(cats.values()) == total_amount(subset)
        assert sum(modes.values()) == total_amount(subset)


def test_payment_distribution():
    assert payment_distribution(make_sample()) == {PaymentMode.CASH: 1700, PaymentMode.UPI: 1500}


def test_period_stats():
    stats = period_stats(make_sample())
    assert stats.total_spending == 3200
    # three active days: 3200 / 3
    assert stats.average_daily == 1067
    # tie on 1200 goes to the first record encountered
    assert stats.highest_expense.id == 2
    assert stats.highest_expense.amount == 1200
    assert [r.id for r in stats.top_expenses] == [2, 3, 1, 4]


def test_average_daily_rounds_halves_up():
    half = (
        make(1, 3, Category.FOOD, PaymentMode.CASH, datetime(2025, 3, 1, 9)),
        make(2, 2, Category.FOOD, PaymentMode.CASH, datetime(2025, 3, 2, 9)),
    )
    # 5 / 2 = 2.5
    assert average_daily(half) == 3
    # 13 / 2 = 6.5
    assert average_daily(half + (make(3, 8, Category.FUN, PaymentMode.UPI, datetime(2025, 3, 2, 18)),)) == 7


def test_period_stats_empty_subset():
    stats = period_stats(())
    assert stats.total_spending == 0
    assert stats.average_daily == 0
    assert stats.highest_expense == NO_HIGHEST_EXPENSE
    assert stats.highest_expense.description == "N/A"
    assert stats.top_expenses == ()
    assert set(stats.category_distribution.values()) == {0}
    assert len(stats.category_distribution) == 5


def test_top_expenses_limit_and_stability():
    records = tuple(
        make(i, amt, Category.FOOD, PaymentMode.CASH, datetime(2025, 3, 1))
        for i, amt in enumerate([100, 700, 700, 50, 700, 300, 900], start=1)
    )
    stats = period_stats(records)
    assert [r.id for r in stats.top_expenses] == [7, 2, 3, 5, 6]
    assert list(top_expenses(records, 0)) == []
    assert len(list(top_expenses(records, 50))) == 7


def test_iter_expenses_is_lazy():
    records = make_sample()
    calls = {"n": 0}

    def pred(r):
        calls["n"] += 1
        return r.payment_mode == PaymentMode.CASH

    first = next(iter_expenses(records, pred))
    assert first.id == 1
    assert calls["n"] == 1


def test_daily_totals_zero_fill():
    days = [date(2025, 3, 1), date(2025, 3, 2), date(2025, 3, 3)]
    points = daily_totals(make_sample(), days)
    assert [p.date for p in points] == days
    assert [p.total for p in points] == [0, 500, 2400]


def test_daily_trend_spans_first_to_last_record():
    points = daily_trend(make_sample())
    assert [p.date for p in points] == [date(2025, 3, d) for d in (2, 3, 4, 5)]
    assert [p.total for p in points] == [500, 2400, 0, 300]


def test_daily_trend_empty():
    assert daily_trend(()) == ()


def test_sort_by_date_desc():
    assert [r.id for r in sort_by_date_desc(make_sample())] == [4, 3, 2, 1]


def test_record_codec_keeps_integer_amounts():
    r = make(7, 1250, Category.STUDY, PaymentMode.UPI, datetime(2025, 3, 4, 8, 15, 30, 123000))
    d = record_to_dict(r)
    assert d["amount"] == 1250 and isinstance(d["amount"], int)
    assert d["paymentMode"] == "UPI"
    assert d["date"] == "2025-03-04T08:15:30.123000"
    assert record_from_dict(d) == r
