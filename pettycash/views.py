import math
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple

from pettycash.config import PAGE_SIZE
from pettycash.domain import Category, ExpenseRecord, Page, PaymentMode
from pettycash.filters import all_of, by_category, by_payment_mode, by_window
from pettycash.functional import pipe
from pettycash.lazy import iter_expenses
from pettycash.windows import Period, window_for


class SortKey(str, Enum):
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    AMOUNT_DESC = "amount-desc"
    AMOUNT_ASC = "amount-asc"


_SORT_SPECS = {
    SortKey.DATE_DESC: (lambda r: r.date, True),
    SortKey.DATE_ASC: (lambda r: r.date, False),
    SortKey.AMOUNT_DESC: (lambda r: r.amount, True),
    SortKey.AMOUNT_ASC: (lambda r: r.amount, False),
}


def sort_records(records: Iterable[ExpenseRecord], key: SortKey) -> Tuple[ExpenseRecord, ...]:
    # sorted() is stable for reverse=True as well
    sort_key, reverse = _SORT_SPECS[SortKey(key)]
    return tuple(sorted(records, key=sort_key, reverse=reverse))


def paginate(records: Sequence[ExpenseRecord], page: int, page_size: int = PAGE_SIZE) -> Page:
    page = max(1, page)
    count = len(records)
    start = (page - 1) * page_size
    return Page(
        items=tuple(records[start:start + page_size]),
        page=page,
        page_size=page_size,
        total_count=count,
        total_pages=math.ceil(count / page_size),
    )


@dataclass(frozen=True)
class ListQuery:
    """State of the expense list: filters, sort order and current page.

    Changing a filter sends the user back to page 1; re-sorting keeps the
    current page.
    """
    date_filter: Period = Period.ALL
    category: Optional[Category] = None
    payment_mode: Optional[PaymentMode] = None
    sort: SortKey = SortKey.DATE_DESC
    page: int = 1
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def with_filters(self, **changes) -> "ListQuery":
        return replace(self, page=1, **changes)

    def with_sort(self, sort: SortKey) -> "ListQuery":
        return replace(self, sort=SortKey(sort))

    def with_page(self, page: int) -> "ListQuery":
        return replace(self, page=max(1, page))


def filter_records(
    records: Iterable[ExpenseRecord], query: ListQuery, now: datetime
) -> Tuple[ExpenseRecord, ...]:
    window = None
    if Period(query.date_filter) is not Period.ALL:
        window = window_for(query.date_filter, now, query.start, query.end)
    pred = all_of(
        by_category(query.category),
        by_payment_mode(query.payment_mode),
        by_window(window),
    )
    return tuple(iter_expenses(records, pred))


def list_page(
    records: Iterable[ExpenseRecord], query: ListQuery, now: Optional[datetime] = None
) -> Page:
    now = now or datetime.now()
    return pipe(
        records,
        lambda rs: filter_records(rs, query, now),
        lambda rs: sort_records(rs, query.sort),
        lambda rs: paginate(rs, query.page),
    )
