from __future__ import annotations

from gearledger.config import Settings
from gearledger.domain.models import Expense, Task
from gearledger.services.entity_services import build_services
from gearledger.state import COLLECTIONS, AppState
from tests.conftest import expense_fields


def test_every_collection_has_its_own_key():
    keys = [key for key, _ in COLLECTIONS.values()]
    assert len(keys) == len(set(keys))


def test_store_lookup(state):
    assert state.store("expenses") is state.expenses
    assert state.store_for(Task) is state.tasks


def test_subscribers_hear_about_each_change(state):
    seen = []
    unsubscribe = state.subscribe(seen.append)

    build_services(state)["expenses"].create(expense_fields())
    assert seen == ["gearledger_expenses", "gearledger_log_entries"]

    unsubscribe()
    build_services(state)["expenses"].create(expense_fields())
    assert len(seen) == 2


def test_state_reopens_from_files(tmp_path, clock):
    settings = Settings(data_dir=str(tmp_path / "data"))
    first = AppState.from_settings(settings, clock=clock)
    expense = build_services(first)["expenses"].create(expense_fields())

    second = AppState.from_settings(settings, clock=clock)

    assert second.expenses.all() == [expense]
    assert isinstance(second.expenses.all()[0], Expense)
    assert [e.action for e in second.activity_log.list()] == ["Added Expense"]
