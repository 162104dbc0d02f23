from __future__ import annotations

import json
import logging
import uuid
from dataclasses import replace
from decimal import Decimal
from typing import Any, Callable, Generic, List, Optional, Type, TypeVar

from gearledger.errors import DuplicateRecordError, RecordNotFoundError, StorageError
from gearledger.storage.json_storage import KeyValueStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")


def json_default(o: Any) -> Any:
    # money goes out as a JSON number when a double holds it exactly,
    # otherwise as its decimal text; both read back through to_decimal
    if isinstance(o, Decimal):
        as_float = float(o)
        if Decimal(repr(as_float)) == o:
            return as_float
        return str(o)
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


def dump_collection(records: List[Any]) -> str:
    return json.dumps([r.to_dict() for r in records], ensure_ascii=False, default=json_default)


def parse_collection(raw: str) -> Any:
    return json.loads(raw, parse_float=Decimal)


def new_id() -> str:
    return uuid.uuid4().hex


class RecordStore(Generic[T]):
    """A named collection of one entity kind persisted as a JSON array.

    The in-memory list is authoritative for the session; it is written back
    in full after every mutation. Storage faults are logged and never raised:
    a corrupt key loads as an empty collection and a failed write leaves the
    in-memory collection as it is.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str,
        entity_cls: Type[T],
        on_change: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._storage = storage
        self.key = key
        self.entity_cls = entity_cls
        self._on_change = on_change
        self._records: List[T] = []
        self._key_existed = False

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(list(self._records))

    def all(self) -> List[T]:
        """Return the collection newest first."""
        return list(self._records)

    def get(self, record_id: str) -> Optional[T]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def load(self) -> List[T]:
        try:
            raw = self._storage.get_item(self.key)
        except StorageError as exc:
            logger.error("failed to read %s, starting empty: %s", self.key, exc)
            self._records = []
            return []

        if raw is None:
            logger.debug("no stored data for %s yet", self.key)
            self._records = []
            return []

        self._key_existed = True
        try:
            data = parse_collection(raw)
        except (ValueError, RecursionError) as exc:
            logger.warning("failed to parse %s from storage, falling back to empty: %s", self.key, exc)
            self._records = []
            return []

        if not isinstance(data, list):
            logger.warning("unexpected data shape for %s; expected a JSON array, got %s",
                           self.key, type(data).__name__)
            self._records = []
            return []

        records: List[T] = []
        for idx, item in enumerate(data):
            if not isinstance(item, dict):
                logger.warning("skipping non-object entry %d in %s", idx, self.key)
                continue
            try:
                records.append(self.entity_cls.from_dict(item))
            except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
                logger.warning("skipping malformed entry %d in %s: %r", idx, self.key, exc)

        self._records = records
        logger.debug("loaded %d records from %s", len(records), self.key)
        return list(records)

    def save(self, records: Optional[List[T]] = None) -> bool:
        """Write the whole collection. Returns False when nothing was written."""
        if records is not None:
            self._records = list(records)

        if not self._records and not self._key_existed:
            # never write an empty placeholder for a key that never held data
            try:
                if not self._storage.has_item(self.key):
                    return False
            except StorageError as exc:
                logger.error("failed to check %s: %s", self.key, exc)
                return False

        try:
            self._storage.set_item(self.key, dump_collection(self._records))
        except StorageError as exc:
            logger.error("failed to persist %s, keeping in-memory state: %s", self.key, exc)
            return False

        self._key_existed = True
        logger.debug("saved %d records to %s", len(self._records), self.key)
        return True

    def create(self, entity: T) -> T:
        if entity.id is None:
            entity = replace(entity, id=new_id())
        elif self.get(entity.id) is not None:
            raise DuplicateRecordError(self.key, entity.id)

        self._records.insert(0, entity)
        self._persist()
        return entity

    def update(self, entity: T) -> T:
        for idx, record in enumerate(self._records):
            if record.id == entity.id:
                self._records[idx] = entity
                self._persist()
                return entity
        raise RecordNotFoundError(self.key, str(entity.id))

    def delete(self, record_id: str) -> T:
        for idx, record in enumerate(self._records):
            if record.id == record_id:
                del self._records[idx]
                self._persist()
                return record
        raise RecordNotFoundError(self.key, record_id)

    def _persist(self) -> None:
        self.save()
        if self._on_change is not None:
            self._on_change(self.key)
