from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from gearledger.domain.models import DEFAULT_USER, LogEntry
from gearledger.errors import StorageError
from gearledger.repositories.record_store import dump_collection, new_id, parse_collection
from gearledger.storage.json_storage import KeyValueStorage

logger = logging.getLogger(__name__)

LOG_ENTRIES_KEY = "gearledger_log_entries"
DEFAULT_CAPACITY = 100


class ActivityLog:
    """Newest-first, capacity-bounded audit trail of data mutations.

    Entries are only ever prepended and evicted from the tail; none is
    edited. After the first failed write the log stops persisting and keeps
    working in memory for the rest of the session.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        capacity: int = DEFAULT_CAPACITY,
        default_user: str = DEFAULT_USER,
        clock: Callable[[], datetime] = datetime.now,
        key: str = LOG_ENTRIES_KEY,
        on_change: Optional[Callable[[str], None]] = None,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._storage = storage
        self.capacity = capacity
        self.default_user = default_user
        self._clock = clock
        self.key = key
        self._on_change = on_change
        self._entries: List[LogEntry] = []
        self.persistent = True

    def __len__(self) -> int:
        return len(self._entries)

    def load(self) -> List[LogEntry]:
        try:
            raw = self._storage.get_item(self.key)
        except StorageError as exc:
            logger.error("failed to read activity log, starting empty: %s", exc)
            raw = None

        entries: List[LogEntry] = []
        if raw is not None:
            try:
                data = parse_collection(raw)
            except (ValueError, RecursionError) as exc:
                logger.warning("failed to parse activity log, starting empty: %s", exc)
                data = []
            if not isinstance(data, list):
                logger.warning("activity log is not a JSON array, starting empty")
                data = []
            for item in data:
                try:
                    entries.append(LogEntry.from_dict(item))
                except (KeyError, TypeError, ValueError, AttributeError) as exc:
                    logger.warning("skipping malformed log entry: %r", exc)

        # a log written under a larger capacity is cut down on load
        self._entries = entries[: self.capacity]
        return self.list()

    def append(self, action: str, details: str, user: Optional[str] = None) -> LogEntry:
        entry = LogEntry(
            id=new_id(),
            timestamp=self._clock(),
            action=action,
            details=details,
            user=user or self.default_user,
        )
        self._entries = [entry] + self._entries[: self.capacity - 1]
        self._persist()
        logger.info("%s: %s", action, details, extra={"log_entry_id": entry.id, "user": entry.user})
        if self._on_change is not None:
            self._on_change(self.key)
        return entry

    def list(self) -> List[LogEntry]:
        return list(self._entries)

    def recent(self, limit: int = 5) -> List[LogEntry]:
        return self._entries[: max(limit, 0)]

    def _persist(self) -> None:
        if not self.persistent:
            return
        try:
            self._storage.set_item(self.key, dump_collection(self._entries))
        except StorageError as exc:
            self.persistent = False
            logger.error("activity log write failed, keeping it in memory for this session: %s", exc)
