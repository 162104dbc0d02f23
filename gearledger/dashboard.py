from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from gearledger import aggregation
from gearledger.domain.models import LogEntry
from gearledger.state import AppState

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5


@dataclass(frozen=True)
class DashboardSummary:
    as_of: date
    todays_sales: aggregation.Summary
    stock_value: Decimal
    recent_expenses: aggregation.Summary
    recent_expense_days: int
    pending_tasks: int
    recent_activity: Tuple[LogEntry, ...]


def dashboard_summary(state: AppState, now: Optional[datetime] = None,
                      recent_expense_days: int = 7) -> DashboardSummary:
    now = now or state.clock()
    return DashboardSummary(
        as_of=now.date(),
        todays_sales=aggregation.todays_sales(state.service_records, now),
        stock_value=aggregation.stock_value(state.stock_items),
        recent_expenses=aggregation.recent_expenses(state.expenses, now.date(), recent_expense_days),
        recent_expense_days=recent_expense_days,
        pending_tasks=aggregation.pending_tasks_count(state.tasks),
        recent_activity=tuple(state.activity_log.recent(RECENT_ACTIVITY_LIMIT)),
    )


class DashboardView:
    """Keeps a dashboard summary current with the state it watches.

    Any change notification from the state marks the cached summary stale;
    so does the calendar date moving on. The summary is recomputed lazily on
    the next read.
    """

    def __init__(self, state: AppState, recent_expense_days: int = 7) -> None:
        self._state = state
        self._recent_expense_days = recent_expense_days
        self._cached: Optional[DashboardSummary] = None
        self.recomputations = 0
        self._unsubscribe = state.subscribe(self._invalidate)

    def _invalidate(self, key: str) -> None:
        logger.debug("dashboard invalidated by change to %s", key)
        self._cached = None

    def summary(self) -> DashboardSummary:
        now = self._state.clock()
        if self._cached is None or self._cached.as_of != now.date():
            self._cached = dashboard_summary(self._state, now, self._recent_expense_days)
            self.recomputations += 1
        return self._cached

    def sales_series(self, period: str) -> List[aggregation.Bucket]:
        return aggregation.sales_series(self._state.service_records, period, self._state.clock().date())

    def close(self) -> None:
        self._unsubscribe()
