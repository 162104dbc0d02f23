from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, ClassVar, Dict, Optional, Tuple

EXPENSE_CATEGORIES = ("Rent", "Utilities", "Supplies", "Salaries", "Marketing", "Maintenance", "Other")
STOCK_CATEGORIES = ("Lubricants", "Spare Parts", "Accessories", "Tools", "Apparel", "Other")
PO_STATUSES = ("Pending", "Ordered", "Shipped", "Received", "Cancelled")
TASK_PRIORITIES = ("Low", "Medium", "High")

DEFAULT_USER = "Admin"


def parse_datetime(value: Any) -> datetime:
    """Re-hydrate a stored date field into a naive local datetime.

    Accepts datetime/date objects and ISO-8601 text, including the `Z` suffix
    and explicit offsets that browser-written data carries.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return datetime.combine(value, time())
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise TypeError(f"cannot read a date from {type(value).__name__}")

    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def parse_optional_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    return parse_datetime(value)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise TypeError(f"not a number: {value!r}")
    # str() first so floats keep their shortest repr instead of binary noise
    return Decimal(str(value))


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class ServiceRecord:
    label: ClassVar[str] = "Service Record"

    date: datetime
    customer_name: str
    contact_no: str
    bike_model: str
    bike_no: str
    service_details: str
    service_count: int
    cost: Decimal
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": format_datetime(self.date),
            "customerName": self.customer_name,
            "contactNo": self.contact_no,
            "bikeModel": self.bike_model,
            "bikeNo": self.bike_no,
            "serviceDetails": self.service_details,
            "serviceCount": self.service_count,
            "cost": self.cost,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceRecord":
        return cls(
            id=data["id"],
            date=parse_datetime(data["date"]),
            customer_name=str(data["customerName"]),
            contact_no=str(data.get("contactNo", "")),
            bike_model=str(data.get("bikeModel", "")),
            bike_no=str(data.get("bikeNo", "")),
            service_details=str(data.get("serviceDetails", "")),
            service_count=int(data.get("serviceCount", 1)),
            cost=to_decimal(data["cost"]),
        )


@dataclass(frozen=True)
class StockItem:
    label: ClassVar[str] = "Stock Item"

    name: str
    quantity_in_stock: int
    price: Decimal
    category: Optional[str] = None
    id: Optional[str] = None

    @property
    def value(self) -> Decimal:
        return self.price * self.quantity_in_stock

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "quantityInStock": self.quantity_in_stock,
            "price": self.price,
        }
        if self.category is not None:
            data["category"] = self.category
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StockItem":
        return cls(
            id=data["id"],
            name=str(data["name"]),
            quantity_in_stock=int(data["quantityInStock"]),
            price=to_decimal(data["price"]),
            category=_optional_str(data.get("category")),
        )


@dataclass(frozen=True)
class Expense:
    label: ClassVar[str] = "Expense"

    date: datetime
    category: str
    description: str
    amount: Decimal
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": format_datetime(self.date),
            "category": self.category,
            "description": self.description,
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        return cls(
            id=data["id"],
            date=parse_datetime(data["date"]),
            category=str(data["category"]),
            description=str(data.get("description", "")),
            amount=to_decimal(data["amount"]),
        )


@dataclass(frozen=True)
class StaffMember:
    label: ClassVar[str] = "Staff Member"

    name: str
    designation: str
    joining_date: datetime
    salary: Decimal
    advance_salary: Decimal = Decimal("0")
    contact_no: Optional[str] = None
    address: Optional[str] = None
    id: Optional[str] = None

    @property
    def net_payable(self) -> Decimal:
        return self.salary - self.advance_salary

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "designation": self.designation,
            "joiningDate": format_datetime(self.joining_date),
            "salary": self.salary,
            "advanceSalary": self.advance_salary,
        }
        if self.contact_no is not None:
            data["contactNo"] = self.contact_no
        if self.address is not None:
            data["address"] = self.address
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StaffMember":
        return cls(
            id=data["id"],
            name=str(data["name"]),
            designation=str(data["designation"]),
            joining_date=parse_datetime(data["joiningDate"]),
            salary=to_decimal(data["salary"]),
            advance_salary=to_decimal(data.get("advanceSalary") or 0),
            contact_no=_optional_str(data.get("contactNo")),
            address=_optional_str(data.get("address")),
        )


@dataclass(frozen=True)
class PurchaseOrderItem:
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal = Decimal("0")
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "productName": self.product_name,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "totalPrice": self.total_price,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PurchaseOrderItem":
        return cls(
            id=_optional_str(data.get("id")) or uuid.uuid4().hex,
            product_name=str(data["productName"]),
            quantity=int(data["quantity"]),
            unit_price=to_decimal(data["unitPrice"]),
            total_price=to_decimal(data.get("totalPrice") or 0),
        )


@dataclass(frozen=True)
class PurchaseOrder:
    label: ClassVar[str] = "Purchase Order"

    po_number: str
    supplier: str
    order_date: datetime
    items: Tuple[PurchaseOrderItem, ...] = ()
    status: str = "Pending"
    expected_delivery_date: Optional[datetime] = None
    notes: Optional[str] = None
    total_amount: Decimal = Decimal("0")
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "poNumber": self.po_number,
            "supplier": self.supplier,
            "orderDate": format_datetime(self.order_date),
            "items": [item.to_dict() for item in self.items],
            "status": self.status,
            "totalAmount": self.total_amount,
        }
        if self.expected_delivery_date is not None:
            data["expectedDeliveryDate"] = format_datetime(self.expected_delivery_date)
        if self.notes is not None:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PurchaseOrder":
        return cls(
            id=data["id"],
            po_number=str(data["poNumber"]),
            supplier=str(data["supplier"]),
            order_date=parse_datetime(data["orderDate"]),
            expected_delivery_date=parse_optional_datetime(data.get("expectedDeliveryDate")),
            items=tuple(PurchaseOrderItem.from_dict(item) for item in data.get("items") or []),
            status=str(data.get("status", "Pending")),
            notes=_optional_str(data.get("notes")),
            total_amount=to_decimal(data.get("totalAmount") or 0),
        )


@dataclass(frozen=True)
class Task:
    label: ClassVar[str] = "Task"

    title: str
    priority: str = "Medium"
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    is_completed: bool = False
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "priority": self.priority,
            "isCompleted": self.is_completed,
        }
        if self.description is not None:
            data["description"] = self.description
        if self.due_date is not None:
            data["dueDate"] = format_datetime(self.due_date)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            id=data["id"],
            title=str(data["title"]),
            priority=str(data.get("priority", "Medium")),
            description=_optional_str(data.get("description")),
            due_date=parse_optional_datetime(data.get("dueDate")),
            is_completed=bool(data.get("isCompleted", False)),
        )


@dataclass(frozen=True)
class LogEntry:
    """One audit trail entry. Never edited after creation."""

    id: str
    timestamp: datetime
    action: str
    details: str
    user: str = field(default=DEFAULT_USER)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": format_datetime(self.timestamp),
            "action": self.action,
            "details": self.details,
            "user": self.user,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        return cls(
            id=str(data["id"]),
            timestamp=parse_datetime(data["timestamp"]),
            action=str(data["action"]),
            details=str(data.get("details", "")),
            user=str(data.get("user") or DEFAULT_USER),
        )
