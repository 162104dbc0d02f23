from gearledger.domain.models import (
    Expense,
    LogEntry,
    PurchaseOrder,
    PurchaseOrderItem,
    ServiceRecord,
    StaffMember,
    StockItem,
    Task,
)

__all__ = [
    "Expense",
    "LogEntry",
    "PurchaseOrder",
    "PurchaseOrderItem",
    "ServiceRecord",
    "StaffMember",
    "StockItem",
    "Task",
]
