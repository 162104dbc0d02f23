from __future__ import annotations

import logging
import os
import re
import tempfile
from typing import Dict, Optional

from gearledger.errors import StorageError, StorageQuotaError

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStorage:
    """Text key/value storage with the surface of the browser's localStorage.

    Subclasses implement `get_item`, `set_item` and `remove_item`; they raise
    StorageError for read/write faults and never for a missing key.
    """

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError(f"{self.__class__.__name__}.get_item() not implemented")

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError(f"{self.__class__.__name__}.set_item() not implemented")

    def remove_item(self, key: str) -> None:
        raise NotImplementedError(f"{self.__class__.__name__}.remove_item() not implemented")

    def has_item(self, key: str) -> bool:
        return self.get_item(key) is not None


class MemoryStorage(KeyValueStorage):
    """Dict-backed storage. `quota_bytes` emulates a full browser store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None, quota_bytes: Optional[int] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._items.items() if k != key)
            if used + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageQuotaError(f"quota of {self.quota_bytes} bytes exceeded", key=key)
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self):
        return list(self._items)


class FileStorage(KeyValueStorage):
    """One `<key>.json` file per key under `data_dir`.

    Writes go to a temporary file in the same directory which then replaces
    the target with os.replace, so a crash mid-write never leaves a
    half-written collection behind.
    """

    def __init__(self, data_dir: str, fsync_after_write: bool = True) -> None:
        self.data_dir = str(data_dir)
        self.fsync_after_write = bool(fsync_after_write)

    def path_for(self, key: str) -> str:
        if not _KEY_RE.match(key):
            raise StorageError(f"invalid storage key {key!r}", key=key)
        return os.path.join(self.data_dir, f"{key}.json")

    def get_item(self, key: str) -> Optional[str]:
        file_path = self.path_for(key)
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            logger.debug("storage key %s has no file at %s", key, file_path)
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"failed to read {file_path}: {exc}", key=key) from exc

    def set_item(self, key: str, value: str) -> None:
        file_path = self.path_for(key)
        tmp_path: Optional[str] = None
        try:
            os.makedirs(self.data_dir, exist_ok=True)

            fd, tmp_path = tempfile.mkstemp(prefix=f"{key}.", suffix=".tmp", dir=self.data_dir)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                if self.fsync_after_write:
                    os.fsync(f.fileno())

            os.replace(tmp_path, file_path)
            tmp_path = None  # ownership transferred; avoid removing below
        except OSError as exc:
            raise StorageError(f"failed to write {file_path}: {exc}", key=key) from exc
        finally:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.warning("could not remove temporary file %s", tmp_path)

    def remove_item(self, key: str) -> None:
        file_path = self.path_for(key)
        try:
            os.remove(file_path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise StorageError(f"failed to remove {file_path}: {exc}", key=key) from exc
