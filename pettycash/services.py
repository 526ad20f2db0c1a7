import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple

from pettycash.domain import ExpenseRecord, Page, PeriodStats, Summary
from pettycash.functional import Either, Maybe, Nothing, Some, validate_expense
from pettycash.storage import RecordStore
from pettycash.summary import Comparison, compute_summary, historical_change, in_window
from pettycash.transforms import daily_trend, period_stats, sort_by_date_desc
from pettycash.views import ListQuery, list_page
from pettycash.windows import Period, window_for

logger = logging.getLogger(__name__)


class ExpenseService:
    """Facade over an injected record store and the aggregation functions.

    store: any RecordStore; the service never holds records between calls.
    compare: percent-change strategy handed to compute_summary.
    clock: source of "now" when a caller does not pass one.
    """

    def __init__(
        self,
        store: RecordStore,
        compare: Comparison = historical_change,
        clock=datetime.now,
    ):
        self.store = store
        self.compare = compare
        self.clock = clock

    def _now(self, now: Optional[datetime]) -> datetime:
        return now or self.clock()

    def snapshot(self) -> Tuple[ExpenseRecord, ...]:
        return self.store.list()

    def list_records(self) -> Tuple[ExpenseRecord, ...]:
        return sort_by_date_desc(self.snapshot())

    def get_record(self, record_id: int) -> Maybe[ExpenseRecord]:
        record = self.store.get(record_id)
        return Some(record) if record is not None else Nothing()

    def create_record(self, payload: Mapping[str, Any]) -> Either[dict, ExpenseRecord]:
        result = validate_expense(payload)
        if result.is_left():
            logger.info("Rejected expense: %s", result.get_error()["message"])
        return result.map(self.store.insert)

    def delete_record(self, record_id: int) -> bool:
        return self.store.delete(record_id)

    def summary(self, now: Optional[datetime] = None) -> Summary:
        return compute_summary(self.snapshot(), self._now(now), self.compare)

    def period_records(
        self,
        period: Period | str,
        now: Optional[datetime] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Tuple[ExpenseRecord, ...]:
        window = window_for(period, self._now(now), start, end)
        return in_window(self.list_records(), window)

    def period_stats(
        self,
        period: Period | str,
        now: Optional[datetime] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> PeriodStats:
        return period_stats(self.period_records(period, now, start, end))

    def daily_trend(
        self,
        period: Period | str,
        now: Optional[datetime] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ):
        return daily_trend(self.period_records(period, now, start, end))

    def list_page(self, query: ListQuery, now: Optional[datetime] = None) -> Page:
        return list_page(self.list_records(), query, self._now(now))
