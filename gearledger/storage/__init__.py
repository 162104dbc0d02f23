from gearledger.storage.json_storage import FileStorage, KeyValueStorage, MemoryStorage

__all__ = ["FileStorage", "KeyValueStorage", "MemoryStorage"]
