from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# attributes every LogRecord carries; anything else arrived through extra={...}
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line: level, logger, message and any `extra` fields.

    Activity-log appends pass `log_entry_id` and `user`, which end up as
    top-level keys of the line.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update((k, v) for k, v in vars(record).items() if k not in _RESERVED)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class BasicLogger:
    """Configure the `gearledger` logger tree once per process.

    Modules log through `logging.getLogger(__name__)`, so configuring the
    package logger covers all of them. Console output is human-readable on
    stderr; with `log_to_file` a rotating JSON-lines file is added.
    """

    def __init__(
        self,
        name: str = "gearledger",
        level: int = logging.INFO,
        log_to_file: bool = False,
        log_dir: str = "logs",
        log_file: str = "gearledger.jsonl",
        max_bytes: int = 5_000_000,
        backup_count: int = 5,
    ):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # already configured by an earlier call in this process
        if self.logger.handlers:
            return

        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        self.logger.addHandler(console)

        if log_to_file:
            path = Path(log_dir)
            path.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                path / log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
            file_handler.setFormatter(JsonFormatter())
            self.logger.addHandler(file_handler)

    @classmethod
    def from_settings(cls, settings) -> "BasicLogger":
        return cls(level=settings.level, log_to_file=settings.log_to_file, log_dir=settings.log_dir)
