from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from gearledger import aggregation
from gearledger.domain.models import Expense, PurchaseOrder, ServiceRecord, StaffMember, StockItem, Task

TODAY = date(2024, 3, 15)


def _sale(when: datetime, cost: str) -> ServiceRecord:
    return ServiceRecord(date=when, customer_name="C", contact_no="1", bike_model="M", bike_no="N",
                         service_details="D", service_count=1, cost=Decimal(cost), id=f"s-{when.isoformat()}")


def _expense(when: datetime, amount: str, category: str = "Other") -> Expense:
    return Expense(date=when, category=category, description="d", amount=Decimal(amount))


def test_todays_sales_ignores_time_of_day():
    records = [
        _sale(datetime(2024, 3, 15, 0, 0), "100"),
        _sale(datetime(2024, 3, 15, 23, 59, 59), "250.50"),
        _sale(datetime(2024, 3, 14, 23, 59, 59), "999"),
        _sale(datetime(2024, 3, 16, 0, 0), "999"),
    ]

    summary = aggregation.todays_sales(records, datetime(2024, 3, 15, 8, 0))

    assert summary == aggregation.Summary(total=Decimal("350.50"), count=2)


def test_empty_collections_give_zero_figures():
    assert aggregation.todays_sales([], datetime(2024, 3, 15)) == aggregation.Summary(Decimal("0"), 0)
    assert aggregation.stock_value([]) == Decimal("0")
    assert aggregation.recent_expenses([], TODAY) == aggregation.Summary(Decimal("0"), 0)
    assert aggregation.pending_tasks_count([]) == 0


def test_stock_value_sums_price_times_quantity():
    items = [
        StockItem(name="Oil", quantity_in_stock=3, price=Decimal("450.25")),
        StockItem(name="Helmet", quantity_in_stock=0, price=Decimal("5000")),
        StockItem(name="Plug", quantity_in_stock=7, price=Decimal("0.10")),
    ]
    assert aggregation.stock_value(items) == Decimal("1351.45")


def test_recent_expenses_window_includes_exactly_seven_days_ago():
    expenses = [
        _expense(datetime(2024, 3, 8, 18, 0), "50"),
        _expense(datetime(2024, 3, 7, 9, 0), "70"),
    ]

    summary = aggregation.recent_expenses(expenses, TODAY, days=7)

    assert summary.total == Decimal("50")
    assert summary.count == 1


def test_recent_expenses_excludes_future_dates():
    expenses = [_expense(datetime(2024, 3, 15, 23, 0), "5"), _expense(datetime(2024, 3, 16), "9")]
    assert aggregation.recent_expenses(expenses, TODAY).total == Decimal("5")


def test_pending_tasks_count():
    tasks = [Task(title="a"), Task(title="b", is_completed=True), Task(title="c")]
    assert aggregation.pending_tasks_count(tasks) == 2


def test_sums_are_not_rounded():
    expenses = [_expense(datetime(2024, 3, 15), "0.005"), _expense(datetime(2024, 3, 15), "0.005")]
    assert aggregation.recent_expenses(expenses, TODAY).total == Decimal("0.010")


def test_daily_series_covers_thirty_days_in_order():
    records = [
        _sale(datetime(2024, 3, 15, 9), "10"),
        _sale(datetime(2024, 3, 15, 17), "5"),
        _sale(datetime(2024, 2, 15, 12), "7"),
        _sale(datetime(2024, 2, 14, 12), "1000"),
    ]

    series = aggregation.sales_series(records, aggregation.DAILY, TODAY)

    assert len(series) == 30
    assert series[0].start == date(2024, 2, 15)
    assert series[-1].label == "2024-03-15"
    assert series[0].total == Decimal("7")
    assert series[-1].total == Decimal("15")
    assert sum(b.total for b in series) == Decimal("22")
    assert [b.start for b in series] == sorted(b.start for b in series)


def test_weekly_series_separates_consecutive_mondays():
    records = [_sale(datetime(2024, 1, 1, 10), "100"), _sale(datetime(2024, 1, 8, 10), "40")]

    series = aggregation.sales_series(records, aggregation.WEEKLY, date(2024, 2, 1))
    by_start = {b.start: b for b in series}

    assert len(series) == 12
    assert series[-1].start == date(2024, 1, 29)
    assert by_start[date(2024, 1, 1)].total == Decimal("100")
    assert by_start[date(2024, 1, 8)].total == Decimal("40")
    assert by_start[date(2024, 1, 1)].label == "2024-W01"
    assert by_start[date(2024, 1, 8)].end == date(2024, 1, 14)


def test_weekly_bucket_for_sunday_belongs_to_previous_monday():
    series = aggregation.sales_series([_sale(datetime(2024, 3, 10, 22), "3")], aggregation.WEEKLY, TODAY)
    assert {b.start: b.total for b in series}[date(2024, 3, 4)] == Decimal("3")


def test_monthly_series_uses_calendar_months():
    records = [
        _sale(datetime(2023, 3, 31, 23), "500"),
        _sale(datetime(2023, 4, 1, 0), "11"),
        _sale(datetime(2024, 2, 29, 12), "22"),
    ]

    series = aggregation.sales_series(records, aggregation.MONTHLY, TODAY)

    assert [b.label for b in series][:2] == ["2023-04", "2023-05"]
    assert series[-1].label == "2024-03"
    assert series[0].total == Decimal("11")
    assert series[-2].end == date(2024, 2, 29)
    assert series[-2].total == Decimal("22")
    assert sum(b.total for b in series) == Decimal("33")


def test_annual_series_spans_five_years():
    records = [_sale(datetime(2019, 12, 31), "1"), _sale(datetime(2020, 1, 1), "2"), _sale(datetime(2024, 3, 1), "3")]

    series = aggregation.sales_series(records, aggregation.ANNUALLY, TODAY)

    assert [b.label for b in series] == ["2020", "2021", "2022", "2023", "2024"]
    assert [b.total for b in series] == [Decimal("2"), 0, 0, 0, Decimal("3")]


def test_unknown_period_is_rejected():
    with pytest.raises(ValueError):
        aggregation.sales_series([], "fortnightly", TODAY)


def test_date_range_report_is_inclusive_and_reports_profit():
    records = [_sale(datetime(2024, 3, 1, 8), "1000"), _sale(datetime(2024, 3, 10, 20), "500"),
               _sale(datetime(2024, 3, 11), "9999")]
    expenses = [_expense(datetime(2024, 3, 5), "300"), _expense(datetime(2024, 2, 29), "9999")]

    report = aggregation.date_range_report(records, expenses, date(2024, 3, 1), date(2024, 3, 10))

    assert (report.sales_total, report.sales_count) == (Decimal("1500"), 2)
    assert (report.expense_total, report.expense_count) == (Decimal("300"), 1)
    assert report.net == Decimal("1200")
    assert report.outcome == "Profit"


def test_date_range_report_loss_and_break_even():
    records = [_sale(datetime(2024, 3, 1), "100")]
    loss = aggregation.date_range_report(records, [_expense(datetime(2024, 3, 1), "150")])
    even = aggregation.date_range_report(records, [_expense(datetime(2024, 3, 1), "100")])

    assert loss.outcome == "Loss"
    assert loss.net == Decimal("-50")
    assert even.outcome == "Profit"


def test_expenses_by_category():
    expenses = [
        _expense(datetime(2024, 3, 1), "10", "Rent"),
        _expense(datetime(2024, 3, 2), "2.5", "Utilities"),
        _expense(datetime(2024, 3, 3), "5", "Rent"),
        _expense(datetime(2024, 4, 1), "99", "Marketing"),
    ]

    totals = aggregation.expenses_by_category(expenses, date(2024, 3, 1), date(2024, 3, 31))

    assert totals == {"Rent": Decimal("15"), "Utilities": Decimal("2.5")}
    assert list(totals) == ["Rent", "Utilities"]


def test_staff_payroll():
    staff = [
        StaffMember(name="A", designation="Mechanic", joining_date=datetime(2023, 1, 1), salary=Decimal("20000"),
                    advance_salary=Decimal("2500")),
        StaffMember(name="B", designation="Cashier", joining_date=datetime(2023, 5, 1), salary=Decimal("15000")),
    ]

    payroll = aggregation.staff_payroll(staff)

    assert payroll.headcount == 2
    assert payroll.total_salary == Decimal("35000")
    assert payroll.total_advance == Decimal("2500")
    assert payroll.net_payable == Decimal("32500")


def test_purchase_orders_by_status_lists_every_status():
    orders = [
        PurchaseOrder(po_number="1", supplier="S", order_date=datetime(2024, 3, 1), total_amount=Decimal("100")),
        PurchaseOrder(po_number="2", supplier="S", order_date=datetime(2024, 3, 2), status="Received",
                      total_amount=Decimal("40")),
        PurchaseOrder(po_number="3", supplier="S", order_date=datetime(2024, 3, 3), total_amount=Decimal("60")),
    ]

    grouped = aggregation.purchase_orders_by_status(orders)

    assert list(grouped) == ["Pending", "Ordered", "Shipped", "Received", "Cancelled"]
    assert grouped["Pending"] == aggregation.Summary(Decimal("160"), 2)
    assert grouped["Received"] == aggregation.Summary(Decimal("40"), 1)
    assert grouped["Cancelled"].count == 0
