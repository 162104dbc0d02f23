from gearledger.repositories.activity_log import ActivityLog
from gearledger.repositories.record_store import RecordStore

__all__ = ["ActivityLog", "RecordStore"]
