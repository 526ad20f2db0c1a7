import heapq
from typing import Callable, Iterable, Iterator

from pettycash.domain import ExpenseRecord


def iter_expenses(
    records: Iterable[ExpenseRecord], pred: Callable[[ExpenseRecord], bool]
) -> Iterator[ExpenseRecord]:
    for r in records:
        if pred(r):
            yield r


def top_expenses(records: Iterable[ExpenseRecord], k: int) -> Iterator[ExpenseRecord]:
    """Yield the ``k`` largest records by amount.

    Records with equal amounts keep their input order.
    """
    if k <= 0:
        return
    # nlargest keeps at most k items and breaks ties by arrival order
    yield from heapq.nlargest(k, records, key=lambda r: r.amount)
