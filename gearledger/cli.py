from __future__ import annotations

import argparse
import json
import signal
import sys
from dataclasses import replace
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from gearledger import aggregation, formatting
from gearledger.config import Settings
from gearledger.controller import CommandController
from gearledger.dashboard import DashboardSummary
from gearledger.domain.models import LogEntry
from gearledger.logger import BasicLogger
from gearledger.repositories.record_store import json_default
from gearledger.state import COLLECTIONS, AppState


def _handle_sigint(signum, frame) -> None:
    print("\n[INTERRUPTED] GearLedger terminated by user (Ctrl+C).")
    raise SystemExit(130)  # 130 is the conventional exit code for SIGINT


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gearledger",
        description="GearLedger: showroom bookkeeping for services, stock, expenses, staff and orders",
    )
    parser.add_argument("--data-dir", default=None, help="Directory holding the JSON collections.")
    parser.add_argument("--user", default=None, help="Name recorded in the activity log.")

    sub = parser.add_subparsers(dest="command", required=True)
    entities = sorted(COLLECTIONS)

    sub.add_parser("dashboard", help="Today's sales, stock value, recent expenses and pending tasks")

    series_p = sub.add_parser("series", help="Sales totals bucketed by period")
    series_p.add_argument("period", choices=list(aggregation.PERIOD_WINDOWS))

    report_p = sub.add_parser("report", help="Sales, expenses and profit/loss over a date range")
    report_p.add_argument("--from", dest="start", default=None, help="First day (YYYY-MM-DD), inclusive.")
    report_p.add_argument("--to", dest="end", default=None, help="Last day (YYYY-MM-DD), inclusive.")

    log_p = sub.add_parser("log", help="Activity log, newest first")
    log_p.add_argument("--limit", type=int, default=None)

    sub.add_parser("payroll", help="Salary and advance totals across staff")
    sub.add_parser("po-status", help="Purchase order count and value per status")

    list_p = sub.add_parser("list", help="List a collection, newest first")
    list_p.add_argument("entity", choices=entities)

    get_p = sub.add_parser("get", help="Show one record")
    get_p.add_argument("entity", choices=entities)
    get_p.add_argument("id")

    add_p = sub.add_parser("add", help="Create a record from a JSON object")
    add_p.add_argument("entity", choices=entities)
    add_p.add_argument("fields", help='e.g. \'{"date": "2024-05-01", "category": "Rent", ...}\'')

    update_p = sub.add_parser("update", help="Change fields of a record")
    update_p.add_argument("entity", choices=entities)
    update_p.add_argument("id")
    update_p.add_argument("fields")

    delete_p = sub.add_parser("delete", help="Delete a record")
    delete_p.add_argument("entity", choices=entities)
    delete_p.add_argument("id")
    delete_p.add_argument("--yes", action="store_true", help="Skip the confirmation prompt.")

    complete_p = sub.add_parser("complete", help="Mark a task as completed")
    complete_p.add_argument("id")

    return parser


def _json_arg(raw: str) -> Dict[str, Any]:
    try:
        fields = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"fields must be a JSON object: {exc}")
    if not isinstance(fields, dict):
        raise SystemExit("fields must be a JSON object")
    return fields


def _to_command(args: argparse.Namespace) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    if args.user:
        params["user"] = args.user

    if args.command == "dashboard":
        return {"entity": "dashboard"}
    if args.command == "series":
        return {"entity": "series", "params": {"period": args.period}}
    if args.command == "report":
        return {"entity": "report", "params": {"from": args.start, "to": args.end}}
    if args.command == "log":
        return {"entity": "log", "params": {"limit": args.limit}}
    if args.command == "payroll":
        return {"entity": "payroll"}
    if args.command == "po-status":
        return {"entity": "purchase_order_status"}
    if args.command == "list":
        return {"entity": args.entity, "action": "list"}
    if args.command == "get":
        return {"entity": args.entity, "action": "get", "params": {"id": args.id}}
    if args.command == "add":
        params["fields"] = _json_arg(args.fields)
        return {"entity": args.entity, "action": "create", "params": params}
    if args.command == "update":
        params.update(id=args.id, fields=_json_arg(args.fields))
        return {"entity": args.entity, "action": "update", "params": params}
    if args.command == "delete":
        params.update(id=args.id, confirmed=True)
        return {"entity": args.entity, "action": "delete", "params": params}
    if args.command == "complete":
        params["id"] = args.id
        return {"entity": "tasks", "action": "complete", "params": params}
    raise SystemExit(2)


def _confirm_delete(entity: str, record_id: str) -> bool:
    answer = input(f"Are you sure you want to delete {entity} {record_id}? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


# --- rendering -------------------------------------------------------------

def _render_dashboard(summary: DashboardSummary, currency: str) -> List[str]:
    lines = [
        f"Dashboard for {formatting.day(summary.as_of)}",
        f"  Today's Sales:      {formatting.money(summary.todays_sales.total, currency)}"
        f" ({summary.todays_sales.count} services)",
        f"  Total Stock Value:  {formatting.money(summary.stock_value, currency)}",
        f"  Recent Expenses:    {formatting.money(summary.recent_expenses.total, currency)}"
        f" ({summary.recent_expenses.count} in the last {summary.recent_expense_days} days)",
        f"  Pending Tasks:      {summary.pending_tasks}",
        "Recent Activity:",
    ]
    if not summary.recent_activity:
        lines.append("  No recent activity.")
    lines.extend(f"  {_render_log_entry(entry)}" for entry in summary.recent_activity)
    return lines


def _render_log_entry(entry: LogEntry) -> str:
    return f"{formatting.timestamp(entry.timestamp)}  {entry.user}  {entry.action}: {entry.details}"


def _render_report(result: Dict[str, Any], currency: str) -> List[str]:
    report: aggregation.PeriodReport = result["report"]
    start = formatting.day(report.start) if report.start else "beginning"
    end = formatting.day(report.end) if report.end else "latest"
    lines = [
        f"Report {start} .. {end}",
        f"  Sales:     {formatting.money(report.sales_total, currency)} ({report.sales_count} services)",
        f"  Expenses:  {formatting.money(report.expense_total, currency)} ({report.expense_count} entries)",
        f"  {report.outcome}:    {formatting.money(abs(report.net), currency)}",
    ]
    by_category = result["expenses_by_category"]
    if by_category:
        lines.append("Expenses by category:")
        lines.extend(f"  {name:<12} {formatting.money(total, currency)}" for name, total in by_category.items())
    return lines


def _render(command: Dict[str, Any], result: Any, currency: str) -> List[str]:
    entity = command["entity"]
    if entity == "dashboard":
        return _render_dashboard(result, currency)
    if entity == "series":
        return [f"{b.label:<10} {formatting.money(b.total, currency)}" for b in result]
    if entity == "report":
        return _render_report(result, currency)
    if entity == "log":
        return [_render_log_entry(entry) for entry in result] or ["No log entries yet."]
    if entity == "payroll":
        return [
            f"Staff:           {result.headcount}",
            f"Total salary:    {formatting.money(result.total_salary, currency)}",
            f"Advances paid:   {formatting.money(result.total_advance, currency)}",
            f"Net payable:     {formatting.money(result.net_payable, currency)}",
        ]
    if entity == "purchase_order_status":
        return [
            f"{status:<10} {summary.count:>4}  {formatting.money(summary.total, currency)}"
            for status, summary in result.items()
        ]
    if isinstance(result, list):
        payload = [record.to_dict() for record in result]
    else:
        payload = result.to_dict()
    return [json.dumps(payload, indent=2, ensure_ascii=False, default=json_default)]


def main(argv: Optional[List[str]] = None) -> int:
    # Register Ctrl+C handler as early as possible
    signal.signal(signal.SIGINT, _handle_sigint)

    load_dotenv()

    args = _build_parser().parse_args(argv)
    settings = Settings.from_env()
    if args.data_dir:
        settings = replace(settings, data_dir=args.data_dir)

    BasicLogger.from_settings(settings)

    state = AppState.from_settings(settings)
    controller = CommandController(state, settings)

    command = _to_command(args)
    if args.command == "delete" and not args.yes and not _confirm_delete(args.entity, args.id):
        print("Delete cancelled.")
        return 1

    response = controller.handle(command)
    if "error" in response:
        for detail in response["details"]:
            print(f"error ({response['error']}): {detail}", file=sys.stderr)
        return 1

    for line in _render(command, response["result"], settings.currency):
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
