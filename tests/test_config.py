from __future__ import annotations

import json
import logging

import pytest

from gearledger.config import Settings
from gearledger.logger import BasicLogger, JsonFormatter


def test_defaults():
    settings = Settings.from_env({})

    assert settings == Settings()
    assert settings.log_capacity == 100
    assert settings.recent_expense_days == 7
    assert settings.currency == "NRs."
    assert settings.level == logging.INFO


def test_environment_overrides():
    settings = Settings.from_env({
        "GEARLEDGER_DATA_DIR": "/srv/ledger",
        "GEARLEDGER_LOG_CAPACITY": "250",
        "GEARLEDGER_DEFAULT_USER": "Owner",
        "GEARLEDGER_RECENT_EXPENSE_DAYS": "30",
        "GEARLEDGER_LOG_LEVEL": "debug",
        "GEARLEDGER_LOG_TO_FILE": "Yes",
    })

    assert settings.data_dir == "/srv/ledger"
    assert settings.log_capacity == 250
    assert settings.default_user == "Owner"
    assert settings.recent_expense_days == 30
    assert settings.level == logging.DEBUG
    assert settings.log_to_file is True


@pytest.mark.parametrize("env", [
    {"GEARLEDGER_LOG_CAPACITY": "lots"},
    {"GEARLEDGER_LOG_CAPACITY": "0"},
    {"GEARLEDGER_LOG_LEVEL": "CHATTY"},
    {"GEARLEDGER_DEFAULT_USER": "  "},
])
def test_invalid_values_are_rejected(env):
    with pytest.raises(ValueError):
        Settings.from_env(env)


def test_json_formatter_includes_extra_fields(test_logger):
    record = test_logger.makeRecord(
        test_logger.name, logging.INFO, __file__, 1, "Added %s", ("Expense",), None,
        extra={"log_entry_id": "abc", "user": "Admin"},
    )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Added Expense"
    assert payload["level"] == "INFO"
    assert payload["log_entry_id"] == "abc"
    assert payload["user"] == "Admin"


def test_logger_from_settings_writes_json_lines(tmp_path):
    package_logger = logging.getLogger("gearledger")
    saved = package_logger.handlers[:]
    package_logger.handlers.clear()
    try:
        settings = Settings(log_to_file=True, log_dir=str(tmp_path / "logs"), log_level="DEBUG")
        BasicLogger.from_settings(settings)
        logging.getLogger("gearledger.repositories.activity_log").info(
            "Added Expense: %s", "ID: 1", extra={"log_entry_id": "1", "user": "Admin"}
        )
        for handler in package_logger.handlers:
            handler.flush()

        line = (tmp_path / "logs" / "gearledger.jsonl").read_text(encoding="utf-8").splitlines()[-1]
        payload = json.loads(line)
        assert payload["logger"] == "gearledger.repositories.activity_log"
        assert payload["message"] == "Added Expense: ID: 1"
        assert payload["user"] == "Admin"
    finally:
        for handler in package_logger.handlers:
            handler.close()
        package_logger.handlers[:] = saved
