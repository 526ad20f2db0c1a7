from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from functools import reduce
from typing import Any, Callable, Dict, Iterable, Sequence, Tuple, Type, TypeVar

from pettycash.config import TOP_EXPENSES_LIMIT
from pettycash.domain import (
    NO_HIGHEST_EXPENSE,
    Category,
    DailyPoint,
    ExpenseRecord,
    HighestExpense,
    PaymentMode,
    PeriodStats,
    Summary,
)
from pettycash.lazy import top_expenses

K = TypeVar("K", bound=Enum)


def record_to_dict(r: ExpenseRecord) -> Dict[str, Any]:
    return {
        "id": r.id,
        "amount": int(r.amount),
        "description": r.description,
        "category": r.category.value,
        "paymentMode": r.payment_mode.value,
        "notes": r.notes,
        "date": r.date.isoformat(),
    }


def record_from_dict(d: Dict[str, Any]) -> ExpenseRecord:
    return ExpenseRecord(
        id=int(d["id"]),
        amount=int(d["amount"]),
        description=str(d["description"]),
        category=Category(d["category"]),
        payment_mode=PaymentMode(d["paymentMode"]),
        date=datetime.fromisoformat(d["date"]),
        notes=d.get("notes"),
    )


def sort_by_date_desc(records: Iterable[ExpenseRecord]) -> Tuple[ExpenseRecord, ...]:
    return tuple(sorted(records, key=lambda r: r.date, reverse=True))


def total_amount(records: Iterable[ExpenseRecord]) -> int:
    return reduce(lambda acc, r: acc + r.amount, records, 0)


def distribution(
    records: Iterable[ExpenseRecord],
    key: Callable[[ExpenseRecord], K],
    members: Type[K],
) -> Dict[K, int]:
    """Sum amounts per enum member; every member is present, in declaration order."""
    out: Dict[K, int] = {m: 0 for m in members}
    for r in records:
        out[key(r)] += r.amount
    return out


def category_distribution(records: Iterable[ExpenseRecord]) -> Dict[Category, int]:
    return distribution(records, lambda r: r.category, Category)


def payment_distribution(records: Iterable[ExpenseRecord]) -> Dict[PaymentMode, int]:
    return distribution(records, lambda r: r.payment_mode, PaymentMode)


def daily_totals(records: Iterable[ExpenseRecord], days: Sequence[date]) -> Tuple[DailyPoint, ...]:
    """Zero-filled totals for each day in ``days``; records on other days are ignored."""
    by_day: Dict[date, int] = {d: 0 for d in days}
    for r in records:
        day = r.date.date()
        if day in by_day:
            by_day[day] += r.amount
    return tuple(DailyPoint(date=d, total=by_day[d]) for d in days)


def date_range(first: date, last: date) -> Tuple[date, ...]:
    span = (last - first).days
    return tuple(first + timedelta(days=i) for i in range(span + 1))


def daily_trend(records: Sequence[ExpenseRecord]) -> Tuple[DailyPoint, ...]:
    """Contiguous daily series from the earliest to the latest record day."""
    if not records:
        return ()
    days = [r.date.date() for r in records]
    return daily_totals(records, date_range(min(days), max(days)))


def highest_expense(records: Iterable[ExpenseRecord]) -> HighestExpense:
    best = None
    for r in records:
        # strict comparison keeps the first record on ties
        if best is None or r.amount > best.amount:
            best = r
    return HighestExpense.of(best) if best is not None else NO_HIGHEST_EXPENSE


def average_daily(records: Sequence[ExpenseRecord]) -> int:
    active_days = {r.date.date() for r in records}
    if not active_days:
        return 0
    average = Decimal(total_amount(records)) / len(active_days)
    return int(average.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def period_stats(records: Sequence[ExpenseRecord], top: int = TOP_EXPENSES_LIMIT) -> PeriodStats:
    records = tuple(records)
    return PeriodStats(
        total_spending=total_amount(records),
        average_daily=average_daily(records),
        highest_expense=highest_expense(records),
        category_distribution=category_distribution(records),
        payment_distribution=payment_distribution(records),
        top_expenses=tuple(top_expenses(records, top)),
    )


def _labelled(dist: Dict[Enum, int]) -> Dict[str, int]:
    return {k.value: v for k, v in dist.items()}


def summary_to_dict(s: Summary) -> Dict[str, Any]:
    return {
        "today": {"total": s.today.total, "percentChange": s.today.percent_change},
        "week": {
            "total": s.week.total,
            "percentChange": s.week.percent_change,
            "categoryDistribution": _labelled(s.week.category_distribution),
            "paymentDistribution": _labelled(s.week.payment_distribution),
        },
        "month": {"total": s.month.total, "percentChange": s.month.percent_change},
        "dailyTotals": [{"date": p.date.isoformat(), "total": p.total} for p in s.daily_totals],
    }


def stats_to_dict(stats: PeriodStats) -> Dict[str, Any]:
    h = stats.highest_expense
    return {
        "totalSpending": stats.total_spending,
        "averageDaily": stats.average_daily,
        "highestExpense": {
            "id": h.id,
            "amount": h.amount,
            "description": h.description,
            "date": h.date.isoformat() if h.date else None,
        },
        "categoryDistribution": _labelled(stats.category_distribution),
        "paymentDistribution": _labelled(stats.payment_distribution),
        "topExpenses": [record_to_dict(r) for r in stats.top_expenses],
    }
