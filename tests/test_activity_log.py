from __future__ import annotations

import json

from gearledger.repositories.activity_log import LOG_ENTRIES_KEY, ActivityLog
from gearledger.storage.json_storage import MemoryStorage
from tests.conftest import NOW, FakeClock


def _log(storage, **kwargs) -> ActivityLog:
    log = ActivityLog(storage, clock=kwargs.pop("clock", FakeClock()), **kwargs)
    log.load()
    return log


def test_append_records_timestamp_and_default_user(memory_storage):
    log = _log(memory_storage)

    entry = log.append("Added Expense", "ID: 1, Desc: Tea")

    assert entry.timestamp == NOW
    assert entry.user == "Admin"
    assert entry.id
    assert log.list() == [entry]


def test_explicit_user_is_kept(memory_storage):
    entry = _log(memory_storage).append("Deleted Task", "ID: 9, Title: Sweep", user="Sita")
    assert entry.user == "Sita"


def test_entries_are_newest_first(memory_storage):
    clock = FakeClock()
    log = _log(memory_storage, clock=clock)
    first = log.append("A", "first")
    clock.advance(minutes=1)
    second = log.append("B", "second")

    assert log.list() == [second, first]
    assert log.recent(1) == [second]


def test_capacity_keeps_the_newest_hundred(memory_storage):
    log = _log(memory_storage)
    for n in range(105):
        log.append("Added Task", f"task {n}")

    entries = log.list()
    assert len(entries) == 100
    assert entries[0].details == "task 104"
    assert entries[-1].details == "task 5"
    assert len(json.loads(memory_storage.get_item(LOG_ENTRIES_KEY))) == 100


def test_log_survives_reload(memory_storage):
    log = _log(memory_storage)
    log.append("Added Expense", "one")
    log.append("Updated Expense", "two")

    reloaded = _log(memory_storage)

    assert [e.details for e in reloaded.list()] == ["two", "one"]
    assert reloaded.list() == log.list()


def test_oversized_stored_log_is_cut_on_load():
    entries = [
        {"id": str(n), "timestamp": "2024-03-01T10:00:00", "action": "A", "details": str(n), "user": "Admin"}
        for n in range(12)
    ]
    storage = MemoryStorage({LOG_ENTRIES_KEY: json.dumps(entries)})

    log = _log(storage, capacity=10)

    assert [e.id for e in log.list()] == [str(n) for n in range(10)]


def test_corrupt_log_loads_empty():
    log = _log(MemoryStorage({LOG_ENTRIES_KEY: "[{"}))
    assert log.list() == []


def test_write_failure_switches_to_memory_only():
    storage = MemoryStorage(quota_bytes=200)
    log = _log(storage)

    log.append("Added Expense", "x" * 300)
    assert log.persistent is False
    assert storage.get_item(LOG_ENTRIES_KEY) is None

    log.append("Added Expense", "short")
    assert len(log.list()) == 2
    assert storage.get_item(LOG_ENTRIES_KEY) is None


def test_change_callback_fires_after_append(memory_storage):
    seen = []
    log = ActivityLog(memory_storage, clock=FakeClock(), on_change=seen.append)
    log.append("A", "b")
    assert seen == [LOG_ENTRIES_KEY]


def test_deeply_nested_log_loads_empty():
    log = _log(MemoryStorage({LOG_ENTRIES_KEY: "[" * 200000 + "]" * 200000}))
    assert log.list() == []
