from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Runtime tunables for a GearLedger session.

    Defaults match a single-shop setup. `from_env` reads overrides from
    the process environment; the CLI loads a `.env` file into the environment
    before calling it.
    """

    data_dir: str = "data"
    log_capacity: int = 100
    default_user: str = "Admin"
    recent_expense_days: int = 7
    currency: str = "NRs."
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_to_file: bool = False

    def __post_init__(self) -> None:
        # Lightweight sanity checks - keep these minimal and deterministic.
        if not isinstance(self.data_dir, str) or not self.data_dir:
            raise ValueError("data_dir must be a non-empty string")
        if not isinstance(self.log_capacity, int) or self.log_capacity <= 0:
            raise ValueError("log_capacity must be a positive integer")
        if not isinstance(self.default_user, str) or not self.default_user.strip():
            raise ValueError("default_user must be a non-empty string")
        if not isinstance(self.recent_expense_days, int) or self.recent_expense_days < 0:
            raise ValueError("recent_expense_days must be a non-negative integer")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"unknown log_level {self.log_level!r}")

    @property
    def level(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        defaults = Settings()

        def _int(name: str, fallback: int) -> int:
            raw = env.get(name)
            if raw is None or raw.strip() == "":
                return fallback
            try:
                return int(raw)
            except ValueError:
                raise ValueError(f"{name} must be an integer, got {raw!r}")

        return Settings(
            data_dir=env.get("GEARLEDGER_DATA_DIR", defaults.data_dir),
            log_capacity=_int("GEARLEDGER_LOG_CAPACITY", defaults.log_capacity),
            default_user=env.get("GEARLEDGER_DEFAULT_USER", defaults.default_user),
            recent_expense_days=_int("GEARLEDGER_RECENT_EXPENSE_DAYS", defaults.recent_expense_days),
            currency=env.get("GEARLEDGER_CURRENCY", defaults.currency),
            log_level=env.get("GEARLEDGER_LOG_LEVEL", defaults.log_level),
            log_dir=env.get("GEARLEDGER_LOG_DIR", defaults.log_dir),
            log_to_file=env.get("GEARLEDGER_LOG_TO_FILE", "").strip().lower() in _TRUE_VALUES,
        )
