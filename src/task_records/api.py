"""Minimal REST API over a :class:`~task_records.store.RecordStore`.

Uses the Python standard library (``http.server`` + ``json``).  The server
exposes:

* **POST   /records** — create a record, returns its id.
* **GET    /records?page=&page_size=** — one page of records in creation order.
* **GET    /records/<id>** — a single record.
* **PATCH  /records/<id>** — partial update of name/description/is_completed.
* **DELETE /records/<id>** — delete a record.
* **GET    /health** — liveness probe (always returns 200).

Start with::

    task-records-api --port 8080
"""

from __future__ import annotations

import json
import logging
import uuid
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, unquote, urlsplit

from .audit_logger import get_audit_logger, set_audit_level
from .config import ServiceSettings, load_settings
from .errors import RecordStoreError
from .persistence import load_snapshot, save_snapshot
from .store import RecordStore

_log = get_audit_logger()

# Module-level store (configured on server start).
_store: Optional[RecordStore] = None
# Module-level settings.
_settings: ServiceSettings = ServiceSettings()


def _get_store() -> RecordStore:
    global _store  # noqa: PLW0603
    if _store is None:
        _store = RecordStore()
    return _store


def configure(
    store: RecordStore | None = None,
    settings: ServiceSettings | None = None,
) -> RecordStore:
    """(Re)configure the module-level store and settings."""
    global _store, _settings  # noqa: PLW0603
    _store = store if store is not None else RecordStore()
    if settings is not None:
        _settings = settings
    return _store


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


class _BadRequest(Exception):
    """Raised by request parsing helpers; turned into a 400 response."""


def _parse_record_id(raw: str) -> int:
    # str.isdigit also accepts non-ASCII digits such as "²" that int() rejects
    if not (raw.isascii() and raw.isdigit()):
        raise _BadRequest(f"Invalid record id: {raw!r}")
    return int(raw)


def _parse_query_int(query: Dict[str, list], key: str, default: Optional[int]) -> Optional[int]:
    values = query.get(key)
    if not values:
        return default
    raw = values[-1]
    if not (raw.isascii() and raw.isdigit()):
        raise _BadRequest(f"{key} must be a non-negative integer")
    return int(raw)


def _optional_field(raw: Dict[str, Any], key: str, expected: type) -> Any:
    value = raw.get(key)
    if value is not None and not isinstance(value, expected):
        raise _BadRequest(f"{key} must be of type {expected.__name__}")
    return value


# ------------------------------------------------------------------
# Request handler
# ------------------------------------------------------------------


class _Handler(BaseHTTPRequestHandler):
    """HTTP request handler for the record API."""

    def _send_json(self, status: int, body: Dict[str, Any]) -> None:
        payload = json.dumps(body).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def _send_error_json(self, status: int, message: str, kind: str) -> None:
        self._send_json(status, {"error": message, "kind": kind})

    def _read_body(self) -> bytes:
        length = int(self.headers.get("Content-Length", 0))
        return self.rfile.read(length)

    def _read_json(self) -> Optional[Dict[str, Any]]:
        """Parse request body as a JSON object; send 400 on failure."""
        try:
            raw = json.loads(self._read_body() or b"{}")
        except (json.JSONDecodeError, ValueError):
            self._send_error_json(400, "Invalid JSON", "bad_request")
            return None
        if not isinstance(raw, dict):
            self._send_error_json(400, "JSON body must be an object", "bad_request")
            return None
        return raw

    def _require_fields(self, raw: Dict[str, Any], fields: tuple) -> bool:
        """Validate required fields; send 400 on failure. Return True if ok."""
        missing = [f for f in fields if f not in raw]
        if missing:
            self._send_error_json(
                400, f"Missing fields: {', '.join(missing)}", "bad_request"
            )
            return False
        return True

    def _split_path(self) -> Tuple[str, Dict[str, list]]:
        parts = urlsplit(self.path)
        return unquote(parts.path).rstrip("/") or "/", parse_qs(parts.query)

    @staticmethod
    def _correlation_id(raw: Optional[Dict[str, Any]] = None) -> str:
        cid = (raw or {}).get("correlation_id")
        return cid if isinstance(cid, str) and cid else uuid.uuid4().hex

    # --- POST /records -------------------------------------------------

    def _handle_create(self) -> None:
        raw = self._read_json()
        if raw is None:
            return
        if not self._require_fields(raw, ("name", "description")):
            return
        if not isinstance(raw["name"], str) or not isinstance(raw["description"], str):
            raise _BadRequest("name and description must be strings")

        correlation_id = self._correlation_id(raw)
        record_id = _get_store().create(
            raw["name"], raw["description"], correlation_id=correlation_id
        )
        self._send_json(201, {"id": record_id, "correlation_id": correlation_id})

    # --- GET /records ----------------------------------------------------

    def _handle_list(self, query: Dict[str, list]) -> None:
        page = _parse_query_int(query, "page", 1)
        page_size = _parse_query_int(query, "page_size", _settings.default_page_size)
        page_size = min(page_size, _settings.max_page_size)

        store = _get_store()
        records = store.list(page, page_size)
        self._send_json(200, {
            "page": page,
            "page_size": page_size,
            "records": [r.to_dict() for r in records],
        })

    # --- GET /records/<id> ---------------------------------------------

    def _handle_get(self, record_id: int) -> None:
        record = _get_store().get(record_id)
        body: Dict[str, Any] = {"id": record_id}
        body.update(record.to_dict())
        self._send_json(200, body)

    # --- PATCH /records/<id> -------------------------------------------

    def _handle_update(self, record_id: int) -> None:
        raw = self._read_json()
        if raw is None:
            return

        correlation_id = self._correlation_id(raw)
        updated = _get_store().update(
            record_id,
            name=_optional_field(raw, "name", str),
            description=_optional_field(raw, "description", str),
            is_completed=_optional_field(raw, "is_completed", bool),
            correlation_id=correlation_id,
        )
        self._send_json(200, {"updated": updated, "correlation_id": correlation_id})

    # --- DELETE /records/<id> ------------------------------------------

    def _handle_delete(self, record_id: int) -> None:
        correlation_id = self._correlation_id()
        deleted = _get_store().delete(record_id, correlation_id=correlation_id)
        self._send_json(200, {"deleted": deleted, "correlation_id": correlation_id})

    # --- GET /health ---------------------------------------------------

    def _handle_health(self) -> None:
        self._send_json(200, {"status": "ok", "records": len(_get_store())})

    # --- Routing -------------------------------------------------------

    def _dispatch(self, method: str) -> None:
        path, query = self._split_path()
        try:
            if path == "/health" and method == "GET":
                self._handle_health()
            elif path == "/records":
                if method == "GET":
                    self._handle_list(query)
                elif method == "POST":
                    self._handle_create()
                else:
                    self._send_error_json(405, "Method not allowed", "bad_request")
            elif path.startswith("/records/"):
                record_id = _parse_record_id(path[len("/records/"):])
                handler = {
                    "GET": self._handle_get,
                    "PATCH": self._handle_update,
                    "DELETE": self._handle_delete,
                }.get(method)
                if handler is None:
                    self._send_error_json(405, "Method not allowed", "bad_request")
                else:
                    handler(record_id)
            else:
                self._send_error_json(404, "Not found", "not_found")
        except _BadRequest as exc:
            self._send_error_json(400, str(exc), "bad_request")
        except RecordStoreError as exc:
            self._send_error_json(404, str(exc), exc.kind.value)

    def do_GET(self) -> None:  # noqa: N802
        self._dispatch("GET")

    def do_POST(self) -> None:  # noqa: N802
        self._dispatch("POST")

    def do_PATCH(self) -> None:  # noqa: N802
        self._dispatch("PATCH")

    def do_DELETE(self) -> None:  # noqa: N802
        self._dispatch("DELETE")

    # Route access logs through the audit logger at DEBUG level.
    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        _log.log_event("http_request", level=logging.DEBUG, line=format % args)


def create_server(
    host: str = "0.0.0.0",
    port: int = 8080,
    store: RecordStore | None = None,
    settings: ServiceSettings | None = None,
) -> ThreadingHTTPServer:
    """Create (but do not start) the record HTTP server."""
    configure(store, settings=settings)
    return ThreadingHTTPServer((host, port), _Handler)


# ------------------------------------------------------------------
# CLI entry-point
# ------------------------------------------------------------------


def main() -> None:  # pragma: no cover
    import argparse

    settings = load_settings()

    parser = argparse.ArgumentParser(description="Task record API")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument(
        "--snapshot",
        default=settings.snapshot_path,
        help="JSON file the store is restored from and saved to",
    )
    args = parser.parse_args()

    set_audit_level(settings.log_level)
    store = load_snapshot(args.snapshot) if args.snapshot else RecordStore()

    server = create_server(host=args.host, port=args.port, store=store, settings=settings)
    print(f"Serving on {args.host}:{args.port}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
        if args.snapshot:
            save_snapshot(store, args.snapshot)


if __name__ == "__main__":
    main()
