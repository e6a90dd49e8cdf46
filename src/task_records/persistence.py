"""JSON file snapshots so a store can outlive the process that built it.

The store itself is memory-only; the service entry point calls
:func:`load_snapshot` on start-up and :func:`save_snapshot` on shutdown.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Union

from .audit_logger import get_audit_logger
from .models import StoreSnapshot
from .store import RecordStore

_log = get_audit_logger()


def save_snapshot(store: RecordStore, path: Union[str, Path]) -> StoreSnapshot:
    """Write *store* to *path* as JSON and return the snapshot written.

    The file is written to a temporary sibling first and then moved into
    place, so a crash never leaves a half-written snapshot behind.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    snapshot = store.snapshot()

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=path.name, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(snapshot.to_dict(), fh, ensure_ascii=False, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    _log.log_event(
        "snapshot_saved",
        path=str(path),
        records=len(snapshot.entries),
        next_id=snapshot.next_id,
    )
    return snapshot


def load_snapshot(path: Union[str, Path]) -> RecordStore:
    """Rebuild a store from the JSON file at *path*.

    A missing file yields an empty store.  A file that does not describe a
    valid store raises :class:`ValueError`.
    """
    path = Path(path)
    if not path.exists():
        _log.log_event("snapshot_missing", path=str(path))
        return RecordStore()

    with path.open(encoding="utf-8") as fh:
        try:
            raw = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ValueError(f"snapshot {path} is not valid JSON: {exc}") from exc

    try:
        snapshot = StoreSnapshot.from_dict(raw)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ValueError(f"snapshot {path} is malformed: {exc}") from exc

    store = RecordStore.from_snapshot(snapshot)
    _log.log_event(
        "snapshot_loaded",
        path=str(path),
        records=len(store),
        next_id=store.next_id,
    )
    return store
