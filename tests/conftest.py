# tests/conftest.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict

import pytest

from gearledger.logger import BasicLogger
from gearledger.state import AppState
from gearledger.storage.json_storage import FileStorage, MemoryStorage

NOW = datetime(2024, 3, 15, 14, 30)


class FakeClock:
    """Callable clock the tests can move forward."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def test_logger() -> logging.Logger:
    return BasicLogger("gearledger", level=logging.DEBUG, log_to_file=False).logger


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def file_storage(tmp_path: Path) -> FileStorage:
    return FileStorage(str(tmp_path / "data"))


@pytest.fixture
def state(memory_storage: MemoryStorage, clock: FakeClock) -> AppState:
    return AppState.open(memory_storage, clock=clock)


def service_fields(**overrides: Any) -> Dict[str, Any]:
    fields = {
        "date": "2024-03-15T10:00:00",
        "customer_name": "Ram Shrestha",
        "contact_no": "9800000000",
        "bike_model": "Pulsar 150",
        "bike_no": "BA 12 PA 3456",
        "service_details": "Full service, chain lube",
        "service_count": 1,
        "cost": "1500.00",
    }
    fields.update(overrides)
    return fields


def expense_fields(**overrides: Any) -> Dict[str, Any]:
    fields = {
        "date": "2024-03-14",
        "category": "Utilities",
        "description": "Electricity bill",
        "amount": "2300.50",
    }
    fields.update(overrides)
    return fields


def purchase_order_fields(**overrides: Any) -> Dict[str, Any]:
    fields = {
        "po_number": "PO-001",
        "supplier": "Himalayan Spares",
        "order_date": "2024-03-10",
        "items": [
            {"product_name": "Chain lube", "quantity": 10, "unit_price": "350"},
            {"product_name": "Brake pads", "quantity": 4, "unit_price": "825.50"},
        ],
    }
    fields.update(overrides)
    return fields
