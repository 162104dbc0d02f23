from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from gearledger import formatting
from gearledger.domain import purchase_orders
from gearledger.domain.models import (
    Expense,
    PurchaseOrder,
    ServiceRecord,
    StaffMember,
    StockItem,
    Task,
)
from gearledger.domain.validator import (
    ValidationResult,
    validate_expense,
    validate_purchase_order,
    validate_purchase_order_item,
    validate_service_record,
    validate_staff_member,
    validate_stock_item,
    validate_task,
)
from gearledger.errors import RecordNotFoundError, ValidationError
from gearledger.repositories.record_store import RecordStore
from gearledger.state import AppState

logger = logging.getLogger(__name__)

T = TypeVar("T")

CREATE = "create"
UPDATE = "update"
DELETE = "delete"

Confirm = Callable[[Any], bool]


class EntityService(Generic[T]):
    """CRUD for one collection, with one activity-log entry per mutation.

    Subclasses name their collection and validator and describe an entity
    for the log. Validation errors and missing ids propagate to the caller;
    storage faults are absorbed by the store.
    """

    collection: str = ""
    created_verb: str = "Added"

    def __init__(self, state: AppState, currency: str = formatting.DEFAULT_CURRENCY) -> None:
        self._state = state
        self._currency = currency

    @property
    def store(self) -> RecordStore[T]:
        return self._state.store(self.collection)

    @property
    def label(self) -> str:
        return self.store.entity_cls.label

    def validate(self, candidate: Dict[str, Any]) -> ValidationResult[T]:
        raise NotImplementedError(f"{self.__class__.__name__}.validate() not implemented")

    def details(self, entity: T, operation: str) -> str:
        raise NotImplementedError(f"{self.__class__.__name__}.details() not implemented")

    def money(self, amount) -> str:
        return f"{self._currency} {formatting.plain_amount(amount)}"

    def list(self) -> List[T]:
        return self.store.all()

    def get(self, record_id: str) -> Optional[T]:
        return self.store.get(record_id)

    def create(self, params: Dict[str, Any], user: Optional[str] = None) -> T:
        """Validate and add a new entity; the store always assigns its id."""
        candidate = dict(params or {})
        candidate.pop("id", None)
        entity = self.validate(candidate).unwrap()
        entity = self.store.create(entity)
        self._log(f"{self.created_verb} {self.label}", self.details(entity, CREATE), user)
        return entity

    def update(self, record_id: str, params: Dict[str, Any], user: Optional[str] = None) -> T:
        """Apply `params` over the stored entity; unspecified fields keep their values."""
        existing = self._require(record_id)
        candidate = dict(existing.to_dict())
        candidate.update(params or {})
        candidate["id"] = record_id
        entity = self.validate(candidate).unwrap()
        return self._replace(entity, user)

    def delete(self, record_id: str, confirm: Optional[Confirm] = None, user: Optional[str] = None) -> Optional[T]:
        """Delete after `confirm(entity)` agrees; returns None when declined."""
        existing = self._require(record_id)
        if confirm is not None and not confirm(existing):
            logger.info("delete of %s %s declined", self.label, record_id)
            return None
        removed = self.store.delete(record_id)
        self._log(f"Deleted {self.label}", self.details(removed, DELETE), user)
        return removed

    def _replace(self, entity: T, user: Optional[str]) -> T:
        entity = self.store.update(entity)
        self._log(f"Updated {self.label}", self.details(entity, UPDATE), user)
        return entity

    def _require(self, record_id: str) -> T:
        existing = self.store.get(record_id)
        if existing is None:
            raise RecordNotFoundError(self.store.key, record_id)
        return existing

    def _log(self, action: str, details: str, user: Optional[str]) -> None:
        self._state.activity_log.append(action, details, user=user)


class ServiceRecordService(EntityService[ServiceRecord]):
    collection = "service_records"

    def validate(self, candidate):
        return validate_service_record(candidate)

    def details(self, record: ServiceRecord, operation: str) -> str:
        parts = [
            f"ID: {record.id}",
            f"Cust: {record.customer_name}",
            f"Bike: {record.bike_model} ({record.bike_no})",
        ]
        if operation == CREATE:
            parts.append(f"Date: {formatting.day(record.date)}")
        parts.append(f"Cost: {self.money(record.cost)}")
        return ", ".join(parts)


class StockItemService(EntityService[StockItem]):
    collection = "stock_items"

    def validate(self, candidate):
        return validate_stock_item(candidate)

    def details(self, item: StockItem, operation: str) -> str:
        if operation == DELETE:
            return f"ID: {item.id}, Name: {item.name}, Price: {self.money(item.price)}"
        return (
            f"ID: {item.id}, Name: {item.name}, Qty: {item.quantity_in_stock}, "
            f"Price: {self.money(item.price)}, Category: {item.category or 'N/A'}"
        )


class ExpenseService(EntityService[Expense]):
    collection = "expenses"

    def validate(self, candidate):
        return validate_expense(candidate)

    def details(self, expense: Expense, operation: str) -> str:
        return (
            f"ID: {expense.id}, Desc: {expense.description}, "
            f"Amount: {self.money(expense.amount)}, Category: {expense.category}"
        )


class StaffService(EntityService[StaffMember]):
    collection = "staff"

    def validate(self, candidate):
        return validate_staff_member(candidate)

    def details(self, member: StaffMember, operation: str) -> str:
        parts = [f"ID: {member.id}", f"Name: {member.name}", f"Desig: {member.designation}"]
        if operation == CREATE:
            parts.append(f"Joined: {formatting.day(member.joining_date)}")
        if operation != DELETE:
            parts.append(f"Salary: {self.money(member.salary)}")
        return ", ".join(parts)


class PurchaseOrderService(EntityService[PurchaseOrder]):
    collection = "purchase_orders"
    created_verb = "Created"

    def validate(self, candidate):
        return validate_purchase_order(candidate)

    def details(self, order: PurchaseOrder, operation: str) -> str:
        parts = [f"ID: {order.id}", f"PO#: {order.po_number}", f"Supplier: {order.supplier}"]
        if operation == CREATE:
            parts.append(f"Date: {formatting.day(order.order_date)}")
        if operation != DELETE:
            parts.append(f"Total: {self.money(order.total_amount)}")
        return ", ".join(parts)

    def add_item(self, order_id: str, fields: Dict[str, Any], user: Optional[str] = None) -> PurchaseOrder:
        order = self._require(order_id)
        item = validate_purchase_order_item(fields, len(order.items) + 1).unwrap()
        order = purchase_orders.add_item(order, item.product_name, item.quantity, item.unit_price, item_id=item.id)
        return self._replace(order, user)

    def update_item(self, order_id: str, item_id: str, changes: Dict[str, Any],
                    user: Optional[str] = None) -> PurchaseOrder:
        order = self._require(order_id)
        for position, item in enumerate(order.items, start=1):
            if item.id == item_id:
                candidate = dict(item.to_dict())
                candidate.update(changes or {})
                candidate["id"] = item_id
                checked = validate_purchase_order_item(candidate, position).unwrap()
                order = purchase_orders.update_item(
                    order,
                    item_id,
                    product_name=checked.product_name,
                    quantity=checked.quantity,
                    unit_price=checked.unit_price,
                )
                return self._replace(order, user)
        raise RecordNotFoundError("purchase order items", item_id)

    def remove_item(self, order_id: str, item_id: str, user: Optional[str] = None) -> PurchaseOrder:
        order = self._require(order_id)
        if [item.id for item in order.items] == [item_id]:
            raise ValidationError(["At least one item is required"])
        order = purchase_orders.remove_item(order, item_id)
        return self._replace(order, user)


class TaskService(EntityService[Task]):
    collection = "tasks"

    def validate(self, candidate):
        return validate_task(candidate)

    def details(self, task: Task, operation: str) -> str:
        if operation == DELETE:
            return f"ID: {task.id}, Title: {task.title}"
        return (
            f"ID: {task.id}, Title: {task.title}, Priority: {task.priority}, "
            f"Due: {formatting.day(task.due_date)}, Done: {'Yes' if task.is_completed else 'No'}"
        )

    def set_completed(self, task_id: str, completed: bool = True, user: Optional[str] = None) -> Task:
        return self.update(task_id, {"is_completed": completed}, user=user)


SERVICE_CLASSES = {
    "service_records": ServiceRecordService,
    "stock_items": StockItemService,
    "expenses": ExpenseService,
    "staff": StaffService,
    "purchase_orders": PurchaseOrderService,
    "tasks": TaskService,
}


def build_services(state: AppState, currency: str = formatting.DEFAULT_CURRENCY) -> Dict[str, EntityService]:
    return {name: cls(state, currency=currency) for name, cls in SERVICE_CLASSES.items()}
