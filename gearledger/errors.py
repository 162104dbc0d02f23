from __future__ import annotations

from typing import List, Optional


class GearLedgerError(Exception):
    """Base class for all errors raised by gearledger."""


class StorageError(GearLedgerError):
    """A key/value storage read or write failed."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class StorageQuotaError(StorageError):
    pass


class ValidationError(GearLedgerError):
    """Input failed field validation.

    `errors` keeps the individual field messages so callers can present them
    one by one; str(exc) joins them.
    """

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class RecordNotFoundError(GearLedgerError):
    def __init__(self, collection: str, record_id: str) -> None:
        super().__init__(f"{collection}: no record with id {record_id}")
        self.collection = collection
        self.record_id = record_id


class DuplicateRecordError(GearLedgerError):
    def __init__(self, collection: str, record_id: str) -> None:
        super().__init__(f"{collection}: record with id {record_id} already exists")
        self.collection = collection
        self.record_id = record_id


class CommandError(GearLedgerError):
    """A controller command was malformed (unknown entity/action, bad params)."""
