"""Derived dashboard and report figures.

Every function here is pure: it reads the sequences it is given plus an
explicit `now`/`today` (wall clock when omitted) and keeps no state. Sums
are Decimal and are never rounded; rounding happens only when a figure is
formatted for display.
"""
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from gearledger.domain.models import (
    PO_STATUSES,
    Expense,
    PurchaseOrder,
    ServiceRecord,
    StaffMember,
    StockItem,
    Task,
)

ZERO = Decimal("0")

DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"
ANNUALLY = "annually"

# period -> number of buckets in the window
PERIOD_WINDOWS = OrderedDict([(DAILY, 30), (WEEKLY, 12), (MONTHLY, 12), (ANNUALLY, 5)])


@dataclass(frozen=True)
class Summary:
    total: Decimal = ZERO
    count: int = 0


@dataclass(frozen=True)
class Bucket:
    """One point of a bucketed series; `start` and `end` are both inclusive."""

    start: date
    end: date
    label: str
    total: Decimal = ZERO


@dataclass(frozen=True)
class PeriodReport:
    start: Optional[date]
    end: Optional[date]
    sales_total: Decimal
    sales_count: int
    expense_total: Decimal
    expense_count: int

    @property
    def net(self) -> Decimal:
        return self.sales_total - self.expense_total

    @property
    def outcome(self) -> str:
        return "Profit" if self.net >= 0 else "Loss"


@dataclass(frozen=True)
class PayrollSummary:
    headcount: int
    total_salary: Decimal
    total_advance: Decimal

    @property
    def net_payable(self) -> Decimal:
        return self.total_salary - self.total_advance


def _day(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def _today(today: Optional[date]) -> date:
    return _day(today) if today is not None else date.today()


def _summarize(amounts: Iterable[Decimal]) -> Summary:
    total = ZERO
    count = 0
    for amount in amounts:
        total += amount
        count += 1
    return Summary(total=total, count=count)


def in_range(day: date, start: Optional[date], end: Optional[date]) -> bool:
    """Calendar-day membership in [start, end]; a None end is unbounded."""
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


def todays_sales(records: Iterable[ServiceRecord], now: Optional[datetime] = None) -> Summary:
    today = _day(now) if now is not None else date.today()
    return _summarize(r.cost for r in records if r.date.date() == today)


def stock_value(items: Iterable[StockItem]) -> Decimal:
    return sum((item.price * item.quantity_in_stock for item in items), ZERO)


def recent_expenses(expenses: Iterable[Expense], today: Optional[date] = None, days: int = 7) -> Summary:
    """Expenses dated from `days` days before today through today.

    Both ends are inclusive, so an expense dated exactly `days` days ago is
    counted and one dated `days + 1` days ago is not.
    """
    end = _today(today)
    start = end - timedelta(days=days)
    return _summarize(e.amount for e in expenses if in_range(e.date.date(), start, end))


def pending_tasks_count(tasks: Iterable[Task]) -> int:
    return sum(1 for task in tasks if not task.is_completed)


# --- bucketing -------------------------------------------------------------

def week_start(day: date) -> date:
    """Monday of the ISO week containing `day`."""
    return day - timedelta(days=day.weekday())


def month_start(day: date) -> date:
    return day.replace(day=1)


def _shift_months(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def bucket_key(day: date, period: str) -> date:
    """Start date of the period containing `day`."""
    if period == DAILY:
        return day
    if period == WEEKLY:
        return week_start(day)
    if period == MONTHLY:
        return month_start(day)
    if period == ANNUALLY:
        return date(day.year, 1, 1)
    raise ValueError(f"unknown period {period!r}; expected one of {list(PERIOD_WINDOWS)}")


def bucket_label(start: date, period: str) -> str:
    if period == DAILY:
        return start.isoformat()
    if period == WEEKLY:
        year, week, _ = start.isocalendar()
        return f"{year}-W{week:02d}"
    if period == MONTHLY:
        return start.strftime("%Y-%m")
    return str(start.year)


def period_bounds(period: str, today: Optional[date] = None) -> List[Tuple[date, date]]:
    """Inclusive (start, end) of every bucket in the window, oldest first."""
    if period not in PERIOD_WINDOWS:
        raise ValueError(f"unknown period {period!r}; expected one of {list(PERIOD_WINDOWS)}")
    current = _today(today)
    size = PERIOD_WINDOWS[period]
    bounds: List[Tuple[date, date]] = []

    if period == DAILY:
        for back in range(size - 1, -1, -1):
            day = current - timedelta(days=back)
            bounds.append((day, day))
    elif period == WEEKLY:
        this_week = week_start(current)
        for back in range(size - 1, -1, -1):
            start = this_week - timedelta(weeks=back)
            bounds.append((start, start + timedelta(days=6)))
    elif period == MONTHLY:
        this_month = month_start(current)
        for back in range(size - 1, -1, -1):
            start = _shift_months(this_month, -back)
            bounds.append((start, _shift_months(start, 1) - timedelta(days=1)))
    else:
        for back in range(size - 1, -1, -1):
            year = current.year - back
            bounds.append((date(year, 1, 1), date(year, 12, 31)))
    return bounds


def sales_series(records: Iterable[ServiceRecord], period: str, today: Optional[date] = None) -> List[Bucket]:
    """Service-record cost summed per period, one bucket per period in the window.

    Daily covers 30 rolling days ending today; weekly, monthly and annually
    cover the last 12 Monday-start weeks, 12 calendar months and 5 calendar
    years, each ending with the period that contains today. Periods without
    records are zero buckets; records outside the window are ignored.
    """
    bounds = period_bounds(period, today)
    totals: Dict[date, Decimal] = OrderedDict((start, ZERO) for start, _ in bounds)
    for record in records:
        key = bucket_key(record.date.date(), period)
        if key in totals:
            totals[key] += record.cost
    return [
        Bucket(start=start, end=end, label=bucket_label(start, period), total=totals[start])
        for start, end in bounds
    ]


# --- reports ---------------------------------------------------------------

def filter_by_date(entries: Iterable, start: Optional[date] = None, end: Optional[date] = None) -> list:
    """Entries whose `date` falls in the inclusive calendar-day range."""
    start, end = (_day(start) if start else None), (_day(end) if end else None)
    return [e for e in entries if in_range(e.date.date(), start, end)]


def date_range_report(
    records: Iterable[ServiceRecord],
    expenses: Iterable[Expense],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> PeriodReport:
    sales = _summarize(r.cost for r in filter_by_date(records, start, end))
    spent = _summarize(e.amount for e in filter_by_date(expenses, start, end))
    return PeriodReport(
        start=_day(start) if start else None,
        end=_day(end) if end else None,
        sales_total=sales.total,
        sales_count=sales.count,
        expense_total=spent.total,
        expense_count=spent.count,
    )


def expenses_by_category(
    expenses: Iterable[Expense], start: Optional[date] = None, end: Optional[date] = None
) -> Dict[str, Decimal]:
    totals: Dict[str, Decimal] = {}
    for expense in filter_by_date(expenses, start, end):
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
    return dict(sorted(totals.items()))


def staff_payroll(staff: Sequence[StaffMember]) -> PayrollSummary:
    return PayrollSummary(
        headcount=len(staff),
        total_salary=sum((m.salary for m in staff), ZERO),
        total_advance=sum((m.advance_salary for m in staff), ZERO),
    )


def purchase_orders_by_status(orders: Iterable[PurchaseOrder]) -> Dict[str, Summary]:
    grouped: Dict[str, List[Decimal]] = {status: [] for status in PO_STATUSES}
    for order in orders:
        grouped.setdefault(order.status, []).append(order.total_amount)
    return {status: _summarize(amounts) for status, amounts in grouped.items()}
