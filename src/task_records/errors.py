"""Error kinds raised by :class:`~task_records.store.RecordStore`."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Discriminator callers can branch on instead of parsing messages."""

    NOT_FOUND = "not_found"
    INCONSISTENT_INDEX = "inconsistent_index"


class RecordStoreError(Exception):
    """Base class for every store failure.

    Parameters
    ----------
    record_id : int
        The id the failing operation referred to.
    message : str, optional
        Human-readable detail.
    """

    kind: ErrorKind = ErrorKind.NOT_FOUND

    def __init__(self, record_id: int, message: str | None = None) -> None:
        self.record_id = record_id
        super().__init__(message or f"record {record_id}: {self.kind.value}")


class RecordNotFoundError(RecordStoreError):
    """The referenced id is not present in the record table."""

    kind = ErrorKind.NOT_FOUND


class InconsistentIndexError(RecordNotFoundError):
    """The order index and the record table disagree about an id.

    Subclasses :class:`RecordNotFoundError` so callers handling "not found"
    also handle this case; ``kind`` keeps the two apart for diagnostics.
    """

    kind = ErrorKind.INCONSISTENT_INDEX
