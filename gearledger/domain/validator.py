from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, TypeVar

from gearledger.domain.models import (
    EXPENSE_CATEGORIES,
    PO_STATUSES,
    STOCK_CATEGORIES,
    TASK_PRIORITIES,
    Expense,
    PurchaseOrder,
    PurchaseOrderItem,
    ServiceRecord,
    StaffMember,
    StockItem,
    Task,
    parse_datetime,
)
from gearledger.domain.purchase_orders import recompute_totals
from gearledger.errors import ValidationError

T = TypeVar("T")

CENT = Decimal("0.01")
# significant digits a double reproduces exactly
MAX_MONEY_DIGITS = 15


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """Either a typed entity or the list of field errors that prevented it."""

    value: Optional[T] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> T:
        if self.errors:
            raise ValidationError(self.errors)
        return self.value


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class _Fields:
    """Reads typed fields out of a candidate mapping, collecting errors.

    Field names are looked up in snake_case first, then in the camelCase form
    used by the storage layout, so both shapes are accepted.
    """

    def __init__(self, candidate: Dict[str, Any]) -> None:
        self.candidate = candidate if isinstance(candidate, dict) else {}
        self.errors: List[str] = []
        if not isinstance(candidate, dict):
            self.errors.append("input must be an object")

    def raw(self, name: str) -> Any:
        if name in self.candidate:
            return self.candidate[name]
        return self.candidate.get(_camel(name))

    def text(self, name: str, label: str, required: bool = True) -> Optional[str]:
        value = self.raw(name)
        if value is None or (isinstance(value, str) and value.strip() == ""):
            if required:
                self.errors.append(f"{label} is required")
            return None
        if not isinstance(value, str):
            self.errors.append(f"{label} must be text")
            return None
        return value.strip()

    def integer(self, name: str, label: str, minimum: int, default: Optional[int] = None) -> Optional[int]:
        value = self.raw(name)
        if value is None or value == "":
            if default is None:
                self.errors.append(f"{label} is required")
            return default
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            self.errors.append(f"{label} must be a whole number")
            return None
        if isinstance(value, bool) or not number.is_finite() or number != number.to_integral_value():
            self.errors.append(f"{label} must be a whole number")
            return None
        if number < minimum:
            self.errors.append(f"{label} must be at least {minimum}")
            return None
        return int(number)

    def money(self, name: str, label: str, positive: bool = False,
              default: Optional[Decimal] = None) -> Optional[Decimal]:
        value = self.raw(name)
        if value is None or value == "":
            if default is None:
                self.errors.append(f"{label} is required")
            return default
        if isinstance(value, bool):
            self.errors.append(f"{label} must be a number")
            return None
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            self.errors.append(f"{label} must be a number")
            return None
        if not amount.is_finite():
            self.errors.append(f"{label} must be a number")
            return None
        if len(amount.normalize().as_tuple().digits) > MAX_MONEY_DIGITS:
            self.errors.append(f"{label} has too many digits")
            return None
        if amount != amount.quantize(CENT):
            self.errors.append(f"{label} must have at most 2 decimal places")
            return None
        if positive and amount <= 0:
            self.errors.append(f"{label} must be greater than 0")
            return None
        if amount < 0:
            self.errors.append(f"{label} cannot be negative")
            return None
        return amount

    def when(self, name: str, label: str, required: bool = True) -> Optional[datetime]:
        value = self.raw(name)
        if value is None or value == "":
            if required:
                self.errors.append(f"{label} is required")
            return None
        if not isinstance(value, (str, date)):
            self.errors.append(f"{label} must be a date")
            return None
        try:
            return parse_datetime(value)
        except ValueError:
            self.errors.append(f"{label} must be an ISO-8601 date")
            return None

    def choice(self, name: str, label: str, choices: Sequence[str], default: Optional[str] = None,
               required: bool = True) -> Optional[str]:
        value = self.raw(name)
        if value is None or value == "":
            if default is None and required:
                self.errors.append(f"{label} is required")
            return default
        if value not in choices:
            self.errors.append(f"{label} must be one of: {', '.join(choices)}")
            return None
        return value

    def flag(self, name: str, label: str, default: bool = False) -> bool:
        value = self.raw(name)
        if value is None:
            return default
        if not isinstance(value, bool):
            self.errors.append(f"{label} must be true or false")
            return default
        return value

    def identifier(self) -> Optional[str]:
        value = self.candidate.get("id")
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            self.errors.append("id must be a string")
            return None
        return value

    def build(self, factory: Callable[..., T], **values: Any) -> ValidationResult[T]:
        if self.errors:
            return ValidationResult(errors=self.errors)
        return ValidationResult(value=factory(**values))


def validate_service_record(candidate: Dict[str, Any]) -> ValidationResult[ServiceRecord]:
    f = _Fields(candidate)
    values = dict(
        id=f.identifier(),
        date=f.when("date", "Service date"),
        customer_name=f.text("customer_name", "Customer name"),
        contact_no=f.text("contact_no", "Contact number"),
        bike_model=f.text("bike_model", "Bike model"),
        bike_no=f.text("bike_no", "Bike number"),
        service_details=f.text("service_details", "Service details"),
        service_count=f.integer("service_count", "Service count", minimum=1),
        cost=f.money("cost", "Cost"),
    )
    return f.build(ServiceRecord, **values)


def validate_stock_item(candidate: Dict[str, Any]) -> ValidationResult[StockItem]:
    f = _Fields(candidate)
    values = dict(
        id=f.identifier(),
        name=f.text("name", "Item name"),
        category=f.choice("category", "Category", STOCK_CATEGORIES, required=False),
        quantity_in_stock=f.integer("quantity_in_stock", "Quantity", minimum=0),
        price=f.money("price", "Price"),
    )
    return f.build(StockItem, **values)


def validate_expense(candidate: Dict[str, Any]) -> ValidationResult[Expense]:
    f = _Fields(candidate)
    values = dict(
        id=f.identifier(),
        date=f.when("date", "Expense date"),
        category=f.choice("category", "Category", EXPENSE_CATEGORIES),
        description=f.text("description", "Description"),
        amount=f.money("amount", "Amount", positive=True),
    )
    return f.build(Expense, **values)


def validate_staff_member(candidate: Dict[str, Any]) -> ValidationResult[StaffMember]:
    f = _Fields(candidate)
    values = dict(
        id=f.identifier(),
        name=f.text("name", "Staff name"),
        designation=f.text("designation", "Designation"),
        joining_date=f.when("joining_date", "Joining date"),
        salary=f.money("salary", "Salary"),
        advance_salary=f.money("advance_salary", "Advance salary", default=Decimal("0")),
        contact_no=f.text("contact_no", "Contact number", required=False),
        address=f.text("address", "Address", required=False),
    )
    return f.build(StaffMember, **values)


def validate_purchase_order_item(candidate: Dict[str, Any], position: int = 1) -> ValidationResult[PurchaseOrderItem]:
    f = _Fields(candidate)
    prefix = f"Item {position}"
    values = dict(
        id=f.identifier() or uuid.uuid4().hex,
        product_name=f.text("product_name", f"{prefix} product name"),
        quantity=f.integer("quantity", f"{prefix} quantity", minimum=1),
        unit_price=f.money("unit_price", f"{prefix} unit price"),
    )
    return f.build(PurchaseOrderItem, **values)


def validate_purchase_order(candidate: Dict[str, Any]) -> ValidationResult[PurchaseOrder]:
    f = _Fields(candidate)
    values = dict(
        id=f.identifier(),
        po_number=f.text("po_number", "PO number"),
        supplier=f.text("supplier", "Supplier"),
        order_date=f.when("order_date", "Order date"),
        expected_delivery_date=f.when("expected_delivery_date", "Expected delivery date", required=False),
        status=f.choice("status", "Status", PO_STATUSES, default="Pending"),
        notes=f.text("notes", "Notes", required=False),
    )

    raw_items = f.raw("items")
    items: List[PurchaseOrderItem] = []
    if not isinstance(raw_items, list) or not raw_items:
        f.errors.append("At least one item is required")
    else:
        for position, raw_item in enumerate(raw_items, start=1):
            result = validate_purchase_order_item(raw_item, position)
            if result.ok:
                items.append(result.value)
            else:
                f.errors.extend(result.errors)

    result = f.build(PurchaseOrder, items=tuple(items), **values)
    if not result.ok:
        return result
    return ValidationResult(value=recompute_totals(result.value))


def validate_task(candidate: Dict[str, Any]) -> ValidationResult[Task]:
    f = _Fields(candidate)
    values = dict(
        id=f.identifier(),
        title=f.text("title", "Title"),
        description=f.text("description", "Description", required=False),
        priority=f.choice("priority", "Priority", TASK_PRIORITIES, default="Medium"),
        due_date=f.when("due_date", "Due date", required=False),
        is_completed=f.flag("is_completed", "Completed"),
    )
    return f.build(Task, **values)
