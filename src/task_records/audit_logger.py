"""Structured audit logger for record store events.

Provides a thin wrapper around Python's :mod:`logging` module that emits
JSON-structured log records.  Entries may carry a ``correlation_id`` so
that a request can be followed from the HTTP layer into the store:

    request → store operation → response

Usage::

    from task_records.audit_logger import get_audit_logger

    logger = get_audit_logger()
    logger.log_event("record_created", correlation_id="abc", record_id=0)
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

_LOGGER_NAME = "task_records.audit"


class _JsonFormatter(logging.Formatter):
    """Emit each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = getattr(record, "_structured", None)
        if extra:
            payload.update(extra)
        return json.dumps(payload, default=str)


def get_audit_logger(name: str = _LOGGER_NAME) -> "AuditLogger":
    """Return a reusable :class:`AuditLogger` instance.

    The underlying :class:`logging.Logger` is created once; subsequent
    calls with the same *name* return a wrapper around the same logger.
    """
    return AuditLogger(name)


def set_audit_level(level: Union[int, str], name: str = _LOGGER_NAME) -> None:
    """Change the threshold of the audit logger (e.g. ``"WARNING"``)."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    get_audit_logger(name)._logger.setLevel(level)


class AuditLogger:
    """Structured logger for record store audit events.

    Parameters
    ----------
    name : str
        Logger name (passed to :func:`logging.getLogger`).
    """

    def __init__(self, name: str = _LOGGER_NAME) -> None:
        self._logger = logging.getLogger(name)
        # Attach JSON handler only once per logger name.
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(_JsonFormatter())
            self._logger.addHandler(handler)
            self._logger.setLevel(logging.DEBUG)

    def log_event(
        self,
        event: str,
        *,
        correlation_id: Optional[str] = None,
        level: int = logging.INFO,
        **fields: Any,
    ) -> Dict[str, Any]:
        """Emit a structured audit log entry and return the payload dict.

        Parameters
        ----------
        event : str
            Short event name (e.g. ``"record_deleted"``).
        correlation_id : str, optional
            Trace identifier propagated from the caller.
        level : int
            Python logging level (default ``INFO``).
        **fields
            Arbitrary key-value pairs included in the JSON payload.
        """
        structured: Dict[str, Any] = {"event": event}
        if correlation_id is not None:
            structured["correlation_id"] = correlation_id
        structured.update(fields)

        if not self._logger.isEnabledFor(level):
            return structured

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "(audit)",
            0,
            event,
            (),
            None,
        )
        record._structured = structured  # type: ignore[attr-defined]
        self._logger.handle(record)
        return structured
