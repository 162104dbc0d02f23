from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List, Type

from gearledger.config import Settings
from gearledger.domain.models import (
    Expense,
    PurchaseOrder,
    ServiceRecord,
    StaffMember,
    StockItem,
    Task,
)
from gearledger.repositories.activity_log import ActivityLog
from gearledger.repositories.record_store import RecordStore
from gearledger.storage.json_storage import FileStorage, KeyValueStorage

logger = logging.getLogger(__name__)

# entity name -> (storage key, entity class); no two stores share a key
COLLECTIONS: Dict[str, tuple] = {
    "service_records": ("gearledger_service_records", ServiceRecord),
    "stock_items": ("gearledger_stock_items", StockItem),
    "expenses": ("gearledger_expenses", Expense),
    "staff": ("gearledger_staff", StaffMember),
    "purchase_orders": ("gearledger_purchase_orders", PurchaseOrder),
    "tasks": ("gearledger_tasks", Task),
}

Listener = Callable[[str], None]


class AppState:
    """Owns every Record Store and the Activity Log for one session.

    Consumers receive the instance explicitly. `subscribe` registers a
    callback invoked with the storage key of whichever collection changed.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        log_capacity: int = 100,
        default_user: str = "Admin",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.storage = storage
        self.clock = clock
        self._listeners: List[Listener] = []
        self._stores: Dict[str, RecordStore] = {
            name: RecordStore(storage, key, entity_cls, on_change=self._notify)
            for name, (key, entity_cls) in COLLECTIONS.items()
        }
        self.activity_log = ActivityLog(
            storage,
            capacity=log_capacity,
            default_user=default_user,
            clock=clock,
            on_change=self._notify,
        )

    @classmethod
    def open(cls, storage: KeyValueStorage, **kwargs) -> "AppState":
        """Build the container and load every collection from storage."""
        state = cls(storage, **kwargs)
        state.load()
        return state

    @classmethod
    def from_settings(cls, settings: Settings, clock: Callable[[], datetime] = datetime.now) -> "AppState":
        return cls.open(
            FileStorage(settings.data_dir),
            log_capacity=settings.log_capacity,
            default_user=settings.default_user,
            clock=clock,
        )

    def load(self) -> None:
        for store in self._stores.values():
            store.load()
        self.activity_log.load()
        logger.debug("state loaded", extra={"counts": {n: len(s) for n, s in self._stores.items()}})

    def store(self, name: str) -> RecordStore:
        try:
            return self._stores[name]
        except KeyError:
            raise KeyError(f"unknown collection {name!r}; expected one of {sorted(self._stores)}")

    def store_for(self, entity_cls: Type) -> RecordStore:
        for name, (_, cls) in COLLECTIONS.items():
            if cls is entity_cls:
                return self._stores[name]
        raise KeyError(f"no collection holds {entity_cls.__name__}")

    @property
    def service_records(self) -> RecordStore[ServiceRecord]:
        return self._stores["service_records"]

    @property
    def stock_items(self) -> RecordStore[StockItem]:
        return self._stores["stock_items"]

    @property
    def expenses(self) -> RecordStore[Expense]:
        return self._stores["expenses"]

    @property
    def staff(self) -> RecordStore[StaffMember]:
        return self._stores["staff"]

    @property
    def purchase_orders(self) -> RecordStore[PurchaseOrder]:
        return self._stores["purchase_orders"]

    @property
    def tasks(self) -> RecordStore[Task]:
        return self._stores["tasks"]

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, key: str) -> None:
        for listener in list(self._listeners):
            listener(key)
