"""task-records: an in-memory task record store with stable paging."""

from .audit_logger import AuditLogger, get_audit_logger
from .config import ServiceSettings, load_settings
from .errors import ErrorKind, InconsistentIndexError, RecordNotFoundError, RecordStoreError
from .models import DEFAULT_PAGE_SIZE, Record, RecordEntry, StoreSnapshot
from .persistence import load_snapshot, save_snapshot
from .store import RecordStore

__version__ = "0.1.0"
__all__ = [
    "AuditLogger",
    "DEFAULT_PAGE_SIZE",
    "ErrorKind",
    "InconsistentIndexError",
    "Record",
    "RecordEntry",
    "RecordNotFoundError",
    "RecordStore",
    "RecordStoreError",
    "ServiceSettings",
    "StoreSnapshot",
    "get_audit_logger",
    "load_settings",
    "load_snapshot",
    "save_snapshot",
]
