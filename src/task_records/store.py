"""RecordStore: in-memory task records with stable creation-order paging.

The store keeps two structures for one logical collection:

* a table mapping ``record_id → Record`` for point look-ups, and
* an order index (a list of ids) defining the enumeration order.

Ids come from a counter that starts at ``0`` and advances once per
successful :meth:`RecordStore.create`; an id is never handed out twice,
even after the record it named was deleted.

Each operation runs under a single re-entrant lock so that the table,
the order index and the counter change together when the store is used
from a threaded HTTP server.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Dict, List, Optional

from .audit_logger import get_audit_logger
from .errors import InconsistentIndexError, RecordNotFoundError
from .models import DEFAULT_PAGE_SIZE, Record, RecordEntry, StoreSnapshot

_log = get_audit_logger()


class RecordStore:
    """Create, read, update, delete and paginate task records."""

    def __init__(self) -> None:
        self._table: Dict[int, Record] = {}
        self._order: List[int] = []
        self._next_id = 0
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(
        self,
        name: str,
        description: str,
        *,
        correlation_id: Optional[str] = None,
    ) -> int:
        """Store a new, not-yet-completed record and return its id."""
        with self._lock:
            record_id = self._next_id
            self._next_id += 1
            self._table[record_id] = Record(name=name, description=description)
            self._order.append(record_id)

        _log.log_event(
            "record_created",
            correlation_id=correlation_id,
            record_id=record_id,
        )
        return record_id

    def get(self, record_id: int) -> Record:
        """Return a copy of the record stored under *record_id*.

        Raises
        ------
        RecordNotFoundError
            If no such record exists.
        """
        with self._lock:
            record = self._table.get(record_id)
            if record is None:
                raise RecordNotFoundError(record_id)
            return replace(record)

    def list(self, page: int, page_size: Optional[int] = None) -> List[Record]:
        """Return one page of records in creation order.

        *page* is 1-based; ``0`` is treated as ``1``.  An out-of-range page
        yields an empty list, never an error.
        """
        if page_size is None:
            page_size = DEFAULT_PAGE_SIZE
        page_size = max(page_size, 0)
        start = max(page - 1, 0) * page_size

        with self._lock:
            if start >= len(self._order):
                return []
            end = min(start + page_size, len(self._order))

            records: List[Record] = []
            for record_id in self._order[start:end]:
                record = self._table.get(record_id)
                if record is None:
                    _log.log_event(
                        "index_inconsistency",
                        level=logging.ERROR,
                        operation="list",
                        record_id=record_id,
                        detail="id in order index but missing from table",
                    )
                    continue
                records.append(replace(record))
            return records

    def update(
        self,
        record_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        is_completed: Optional[bool] = None,
        *,
        correlation_id: Optional[str] = None,
    ) -> bool:
        """Overwrite only the fields that are given.

        Raises
        ------
        RecordNotFoundError
            If *record_id* is not in the order index.
        InconsistentIndexError
            If *record_id* is in the order index but not in the table.
        """
        with self._lock:
            if record_id not in self._order:
                raise RecordNotFoundError(record_id)

            record = self._table.get(record_id)
            if record is None:
                _log.log_event(
                    "index_inconsistency",
                    correlation_id=correlation_id,
                    level=logging.ERROR,
                    operation="update",
                    record_id=record_id,
                    detail="id in order index but missing from table",
                )
                raise InconsistentIndexError(
                    record_id, f"record {record_id} not found in the table"
                )

            changed = []
            if name is not None:
                record.name = name
                changed.append("name")
            if description is not None:
                record.description = description
                changed.append("description")
            if is_completed is not None:
                record.is_completed = is_completed
                changed.append("is_completed")

        _log.log_event(
            "record_updated",
            correlation_id=correlation_id,
            record_id=record_id,
            fields=changed,
        )
        return True

    def delete(
        self,
        record_id: int,
        *,
        correlation_id: Optional[str] = None,
    ) -> bool:
        """Remove the record from both the table and the order index.

        Raises
        ------
        RecordNotFoundError
            If *record_id* is not in the table.
        InconsistentIndexError
            If the record was in the table but not in the order index.  The
            table entry is removed regardless, which leaves both structures
            agreeing again.
        """
        with self._lock:
            if self._table.pop(record_id, None) is None:
                raise RecordNotFoundError(record_id)
            try:
                self._order.remove(record_id)
            except ValueError:
                _log.log_event(
                    "index_inconsistency",
                    correlation_id=correlation_id,
                    level=logging.ERROR,
                    operation="delete",
                    record_id=record_id,
                    detail="id in table but missing from order index",
                )
                raise InconsistentIndexError(
                    record_id, f"record {record_id} missing from the order index"
                ) from None

        _log.log_event(
            "record_deleted",
            correlation_id=correlation_id,
            record_id=record_id,
        )
        return True

    # ------------------------------------------------------------------
    # Introspection helpers
    # ------------------------------------------------------------------

    def ids(self) -> List[int]:
        """Return the ids of all records in creation order."""
        with self._lock:
            return list(self._order)

    @property
    def next_id(self) -> int:
        """The id the next :meth:`create` will assign."""
        return self._next_id

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._table

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot(self) -> StoreSnapshot:
        """Capture the full store state, records in creation order."""
        with self._lock:
            entries = [
                RecordEntry(id=record_id, record=replace(self._table[record_id]))
                for record_id in self._order
                if record_id in self._table
            ]
            return StoreSnapshot(next_id=self._next_id, entries=entries)

    @classmethod
    def from_snapshot(cls, snapshot: StoreSnapshot) -> "RecordStore":
        """Build a store holding exactly the state captured in *snapshot*."""
        snapshot.validate()
        store = cls()
        for entry in snapshot.entries:
            store._table[entry.id] = replace(entry.record)
            store._order.append(entry.id)
        store._next_id = snapshot.next_id
        return store
