from gearledger.services.entity_services import (
    EntityService,
    ExpenseService,
    PurchaseOrderService,
    ServiceRecordService,
    StaffService,
    StockItemService,
    TaskService,
    build_services,
)

__all__ = [
    "EntityService",
    "ExpenseService",
    "PurchaseOrderService",
    "ServiceRecordService",
    "StaffService",
    "StockItemService",
    "TaskService",
    "build_services",
]
