from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional

from gearledger import aggregation
from gearledger.config import Settings
from gearledger.dashboard import dashboard_summary
from gearledger.errors import (
    CommandError,
    DuplicateRecordError,
    GearLedgerError,
    RecordNotFoundError,
    ValidationError,
)
from gearledger.services.entity_services import build_services
from gearledger.state import AppState

logger = logging.getLogger(__name__)

CRUD_ACTIONS = ("create", "list", "get", "update", "delete")
EXTRA_ACTIONS = {
    "purchase_orders": ("add_item", "update_item", "remove_item"),
    "tasks": ("complete", "reopen"),
}
VIEWS = ("dashboard", "series", "report", "log", "payroll", "purchase_order_status")


class CommandController:
    """Translate a command dict into service or aggregation calls.

    Command contract::

        {"entity": <collection or view>, "action": <action>, "params": {...}}

    Views (dashboard, series, report, ...) take no action. Results come back
    as ``{"result": ...}``; failures as ``{"error": kind, "details": ...}``.
    """

    def __init__(self, state: AppState, settings: Optional[Settings] = None) -> None:
        self._state = state
        self._settings = settings or Settings()
        self._services = build_services(state, currency=self._settings.currency)

    def handle(self, command: Dict[str, Any]) -> Dict[str, Any]:
        try:
            entity, action, params = self._parse(command)
            logger.debug("interpreting command", extra={"entity": entity, "action": action})
            if entity in VIEWS:
                result = self._view(entity, params)
            else:
                result = self._crud(entity, action, params)
        except ValidationError as exc:
            logger.info("command rejected: %s", exc)
            return {"error": "validation_error", "details": exc.errors}
        except CommandError as exc:
            logger.info("malformed command: %s", exc)
            return {"error": "validation_error", "details": [str(exc)]}
        except RecordNotFoundError as exc:
            return {"error": "not_found", "details": [str(exc)]}
        except DuplicateRecordError as exc:
            return {"error": "conflict", "details": [str(exc)]}
        except GearLedgerError as exc:
            logger.error("command failed: %s", exc)
            return {"error": "internal_error", "details": [str(exc)]}

        return {"result": result}

    def _parse(self, command: Any):
        if not isinstance(command, dict):
            raise CommandError("command must be an object")
        entity = command.get("entity")
        action = command.get("action")
        params = command.get("params")
        params = {} if params is None else params

        if not isinstance(params, dict):
            raise CommandError("'params' must be an object if provided")
        if entity in VIEWS:
            return entity, action, params
        if not isinstance(entity, str) or entity not in self._services:
            raise CommandError(f"'entity' must be one of {sorted(self._services) + list(VIEWS)}")
        allowed = CRUD_ACTIONS + EXTRA_ACTIONS.get(entity, ())
        if action not in allowed:
            raise CommandError(f"'action' for {entity} must be one of {list(allowed)}")
        return entity, action, params

    @staticmethod
    def _record_id(params: Dict[str, Any]) -> str:
        record_id = params.get("id")
        if not isinstance(record_id, str) or not record_id:
            raise CommandError("params.id is required")
        return record_id

    @staticmethod
    def _item_id(params: Dict[str, Any]) -> str:
        item_id = params.get("item_id")
        if not isinstance(item_id, str) or not item_id:
            raise CommandError("params.item_id is required")
        return item_id

    @staticmethod
    def _fields(params: Dict[str, Any], name: str = "fields") -> Dict[str, Any]:
        fields = params.get(name)
        if not isinstance(fields, dict):
            raise CommandError(f"params.{name} must be an object")
        return fields

    def _crud(self, entity: str, action: str, params: Dict[str, Any]) -> Any:
        svc = self._services[entity]
        user = params.get("user")

        if action == "list":
            return svc.list()
        if action == "get":
            record_id = self._record_id(params)
            record = svc.get(record_id)
            if record is None:
                raise RecordNotFoundError(svc.store.key, record_id)
            return record
        if action == "create":
            return svc.create(self._fields(params), user=user)
        if action == "update":
            return svc.update(self._record_id(params), self._fields(params), user=user)
        if action == "delete":
            if params.get("confirmed") is not True:
                raise CommandError("delete requires params.confirmed = true")
            return svc.delete(self._record_id(params), user=user)

        if action == "add_item":
            return svc.add_item(self._record_id(params), self._fields(params, "item"), user=user)
        if action == "update_item":
            return svc.update_item(
                self._record_id(params), self._item_id(params), self._fields(params, "item"), user=user
            )
        if action == "remove_item":
            return svc.remove_item(self._record_id(params), self._item_id(params), user=user)
        if action in ("complete", "reopen"):
            return svc.set_completed(self._record_id(params), action == "complete", user=user)

        raise CommandError(f"unsupported action {action!r}")

    def _view(self, view: str, params: Dict[str, Any]) -> Any:
        state = self._state
        today = state.clock().date()

        if view == "dashboard":
            return dashboard_summary(state, recent_expense_days=self._settings.recent_expense_days)
        if view == "series":
            period = params.get("period", aggregation.DAILY)
            if period not in aggregation.PERIOD_WINDOWS:
                raise CommandError(f"params.period must be one of {list(aggregation.PERIOD_WINDOWS)}")
            return aggregation.sales_series(state.service_records, period, today)
        if view == "report":
            start, end = _parse_day(params.get("from"), "from"), _parse_day(params.get("to"), "to")
            if start and end and start > end:
                raise CommandError("params.from must not be after params.to")
            return {
                "report": aggregation.date_range_report(state.service_records, state.expenses, start, end),
                "expenses_by_category": aggregation.expenses_by_category(state.expenses, start, end),
            }
        if view == "log":
            limit = params.get("limit")
            entries = state.activity_log.list()
            if limit is None:
                return entries
            if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
                raise CommandError("params.limit must be a non-negative integer")
            return entries[:limit]
        if view == "payroll":
            return aggregation.staff_payroll(state.staff.all())
        if view == "purchase_order_status":
            return aggregation.purchase_orders_by_status(state.purchase_orders)

        raise CommandError(f"unknown view {view!r}")


def _parse_day(value: Any, name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise CommandError(f"params.{name} must be a YYYY-MM-DD date")
