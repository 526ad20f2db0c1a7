from operator import attrgetter
from typing import Callable, Optional

from pettycash.domain import Category, ExpenseRecord, PaymentMode
from pettycash.functional import compose
from pettycash.windows import Window

Predicate = Callable[[ExpenseRecord], bool]


def match_all(r: ExpenseRecord) -> bool:
    return True


def by_category(category: Optional[Category]) -> Predicate:
    if category is None:
        return match_all

    def _filter(r: ExpenseRecord) -> bool:
        return r.category == category

    return _filter


def by_payment_mode(mode: Optional[PaymentMode]) -> Predicate:
    if mode is None:
        return match_all

    def _filter(r: ExpenseRecord) -> bool:
        return r.payment_mode == mode

    return _filter


def by_window(window: Optional[Window]) -> Predicate:
    if window is None:
        return match_all
    return compose(window.contains, attrgetter("date"))


def all_of(*preds: Predicate) -> Predicate:
    def _filter(r: ExpenseRecord) -> bool:
        return all(p(r) for p in preds)

    return _filter
