import math
from datetime import datetime, timedelta

from pettycash.domain import Category, ExpenseRecord, PaymentMode
from pettycash.views import ListQuery, SortKey, filter_records, list_page, paginate, sort_records
from pettycash.windows import Period

NOW = datetime(2025, 3, 5, 18, 0)  # a Wednesday


def make_many(n):
    cats = list(Category)
    return tuple(
        ExpenseRecord(
            id=i,
            amount=100 * (i % 4 + 1),
            description=f"item {i}",
            category=cats[i % len(cats)],
            payment_mode=PaymentMode.CASH if i % 2 else PaymentMode.UPI,
            date=NOW - timedelta(days=i),
        )
        for i in range(1, n + 1)
    )


def test_pages_cover_every_record():
    for n in (0, 1, 9, 10, 11, 23, 40):
        records = make_many(n)
        first = paginate(records, 1)
        pages = [paginate(records, p) for p in range(1, first.total_pages + 1)]
        assert first.total_pages == math.ceil(n / 10)
        assert sum(len(p.items) for p in pages) == n
        assert [r.id for p in pages for r in p.items] == [r.id for r in records]


def test_paginate_slices_and_metadata():
    page = paginate(make_many(23), 3)
    assert [r.id for r in page.items] == [21, 22, 23]
    assert page.page == 3
    assert page.page_size == 10
    assert page.total_count == 23
    assert page.total_pages == 3


def test_paginate_out_of_range():
    assert paginate(make_many(5), 4).items == ()
    assert paginate(make_many(5), 0).page == 1
    empty = paginate((), 1)
    assert empty.items == () and empty.total_pages == 0


def test_sort_by_amount_is_stable():
    amounts = [300, 500, 300, 500, 100]
    records = tuple(
        ExpenseRecord(i, amt, f"e{i}", Category.FOOD, PaymentMode.CASH, NOW)
        for i, amt in enumerate(amounts, start=1)
    )
    assert [r.id for r in sort_records(records, SortKey.AMOUNT_DESC)] == [2, 4, 1, 3, 5]
    assert [r.id for r in sort_records(records, SortKey.AMOUNT_ASC)] == [5, 1, 3, 2, 4]
    assert [r.id for r in sort_records(records, SortKey.DATE_DESC)] == [1, 2, 3, 4, 5]


def test_sort_by_date():
    records = make_many(4)
    assert [r.id for r in sort_records(records, SortKey.DATE_ASC)] == [4, 3, 2, 1]
    assert [r.id for r in sort_records(records, "date-desc")] == [1, 2, 3, 4]


def test_filters_are_conjunctive():
    records = make_many(20)
    query = ListQuery(category=Category.TRAVEL, payment_mode=PaymentMode.UPI)
    result = filter_records(records, query, NOW)
    assert result
    assert all(r.category == Category.TRAVEL and r.payment_mode == PaymentMode.UPI for r in result)
    expected = [r.id for r in records if r.category == Category.TRAVEL and r.payment_mode == PaymentMode.UPI]
    assert [r.id for r in result] == expected


def test_unset_filters_match_everything():
    records = make_many(12)
    assert filter_records(records, ListQuery(), NOW) == records


def test_date_filters_use_calendar_windows():
    records = make_many(40)
    week = filter_records(records, ListQuery(date_filter=Period.WEEK), NOW)
    # Sunday 2 March .. Wednesday 5 March; record i is NOW - i days
    assert [r.id for r in week] == [1, 2, 3]

    month = filter_records(records, ListQuery(date_filter=Period.MONTH), NOW)
    assert [r.id for r in month] == [1, 2, 3, 4]

    today = filter_records(records + (
        ExpenseRecord(99, 10, "tea", Category.FOOD, PaymentMode.CASH, NOW.replace(hour=7)),
    ), ListQuery(date_filter=Period.TODAY), NOW)
    assert [r.id for r in today] == [99]


def test_changing_filters_resets_page():
    query = ListQuery(page=4)
    filtered = query.with_filters(category=Category.FOOD)
    assert filtered.page == 1
    assert filtered.category == Category.FOOD


def test_changing_sort_keeps_page():
    query = ListQuery(page=3).with_sort(SortKey.AMOUNT_ASC)
    assert query.page == 3
    assert query.sort == SortKey.AMOUNT_ASC
    assert query.with_page(0).page == 1


def test_list_page_filters_sorts_and_paginates():
    records = make_many(30)
    query = ListQuery(payment_mode=PaymentMode.CASH, sort=SortKey.AMOUNT_DESC, page=2)
    page = list_page(records, query, NOW)
    cash = [r for r in records if r.payment_mode == PaymentMode.CASH]
    expected = sorted(cash, key=lambda r: r.amount, reverse=True)[10:20]
    assert page.total_count == 15
    assert page.total_pages == 2
    assert [r.id for r in page.items] == [r.id for r in expected]
