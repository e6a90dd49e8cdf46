"""Unit tests for the record REST API."""

import json
import threading
from http.client import HTTPConnection

import pytest

from task_records.api import create_server
from task_records.config import ServiceSettings
from task_records.store import RecordStore


@pytest.fixture()
def store():
    return RecordStore()


@pytest.fixture()
def server(store):
    """Start the API on a random free port and tear down after the test."""
    settings = ServiceSettings(default_page_size=10, max_page_size=20)
    srv = create_server(host="127.0.0.1", port=0, store=store, settings=settings)
    _, port = srv.server_address
    t = threading.Thread(target=srv.serve_forever, daemon=True)
    t.start()
    yield port
    srv.shutdown()
    srv.server_close()


def _request(port: int, method: str, path: str, body=None) -> tuple:
    """Helper: send a request and return (status, parsed_body)."""
    conn = HTTPConnection("127.0.0.1", port)
    headers = {}
    payload = None
    if body is not None:
        payload = body if isinstance(body, bytes) else json.dumps(body).encode()
        headers["Content-Type"] = "application/json"
    conn.request(method, path, body=payload, headers=headers)
    resp = conn.getresponse()
    data = json.loads(resp.read())
    status = resp.status
    conn.close()
    return status, data


# ---- POST /records --------------------------------------------------------


def test_create_returns_sequential_ids(server):
    status, body = _request(server, "POST", "/records", {"name": "A", "description": "a"})
    assert status == 201
    assert body["id"] == 0
    assert body["correlation_id"]

    _, body = _request(server, "POST", "/records", {"name": "B", "description": "b"})
    assert body["id"] == 1


def test_create_echoes_correlation_id(server):
    _, body = _request(server, "POST", "/records", {
        "name": "A", "description": "a", "correlation_id": "cid-42",
    })
    assert body["correlation_id"] == "cid-42"


def test_create_missing_fields(server):
    status, body = _request(server, "POST", "/records", {"name": "A"})
    assert status == 400
    assert "Missing fields" in body["error"]
    assert body["kind"] == "bad_request"


def test_create_wrong_types(server):
    status, _ = _request(server, "POST", "/records", {"name": 1, "description": "a"})
    assert status == 400


def test_create_invalid_json(server):
    status, body = _request(server, "POST", "/records", b"not-json")
    assert status == 400
    assert body["error"] == "Invalid JSON"


def test_create_non_object_json(server):
    status, _ = _request(server, "POST", "/records", [1, 2])
    assert status == 400


# ---- GET /records/<id> ----------------------------------------------------


def test_get_record(server):
    _request(server, "POST", "/records", {"name": "A", "description": "a"})
    status, body = _request(server, "GET", "/records/0")
    assert status == 200
    assert body == {"id": 0, "name": "A", "description": "a", "is_completed": False}


def test_get_missing_record(server):
    status, body = _request(server, "GET", "/records/5")
    assert status == 404
    assert body["kind"] == "not_found"


def test_get_invalid_id(server):
    status, _ = _request(server, "GET", "/records/abc")
    assert status == 400
    status, _ = _request(server, "GET", "/records/-1")
    assert status == 400


def test_get_non_ascii_digit_id(server):
    """Superscript digits pass str.isdigit but are not integers."""
    status, body = _request(server, "GET", "/records/%C2%B2")
    assert status == 400
    assert body["kind"] == "bad_request"


# ---- GET /records ---------------------------------------------------------


def test_list_pages(server, store):
    for i in range(25):
        store.create(f"t{i}", "d")

    status, body = _request(server, "GET", "/records?page=3&page_size=10")
    assert status == 200
    assert body["page"] == 3
    assert body["page_size"] == 10
    assert [r["name"] for r in body["records"]] == [f"t{i}" for i in range(20, 25)]

    _, body = _request(server, "GET", "/records?page=4&page_size=10")
    assert body["records"] == []


def test_list_defaults(server, store):
    for i in range(12):
        store.create(f"t{i}", "d")
    _, body = _request(server, "GET", "/records")
    assert body["page"] == 1
    assert len(body["records"]) == 10


def test_list_page_zero_matches_page_one(server, store):
    for i in range(3):
        store.create(f"t{i}", "d")
    _, zero = _request(server, "GET", "/records?page=0&page_size=2")
    _, one = _request(server, "GET", "/records?page=1&page_size=2")
    assert zero["records"] == one["records"]


def test_list_page_size_capped(server, store):
    for i in range(30):
        store.create(f"t{i}", "d")
    _, body = _request(server, "GET", "/records?page_size=500")
    assert body["page_size"] == 20
    assert len(body["records"]) == 20


def test_list_invalid_query(server):
    status, _ = _request(server, "GET", "/records?page=first")
    assert status == 400


def test_list_non_ascii_digit_query(server):
    status, _ = _request(server, "GET", "/records?page=%C2%B2")
    assert status == 400
    status, _ = _request(server, "GET", "/records?page_size=%D9%A3")
    assert status == 400


# ---- PATCH /records/<id> --------------------------------------------------


def test_partial_update(server, store):
    store.create("A", "a")
    status, body = _request(server, "PATCH", "/records/0", {"is_completed": True})
    assert status == 200
    assert body["updated"] is True

    _, record = _request(server, "GET", "/records/0")
    assert record == {"id": 0, "name": "A", "description": "a", "is_completed": True}


def test_update_wrong_type(server, store):
    store.create("A", "a")
    status, _ = _request(server, "PATCH", "/records/0", {"is_completed": "yes"})
    assert status == 400
    assert store.get(0).is_completed is False


def test_update_missing_record(server):
    status, body = _request(server, "PATCH", "/records/9", {"name": "x"})
    assert status == 404
    assert body["kind"] == "not_found"


def test_update_inconsistent_index_reports_kind(server, store):
    store.create("A", "a")
    del store._table[0]
    status, body = _request(server, "PATCH", "/records/0", {"name": "x"})
    assert status == 404
    assert body["kind"] == "inconsistent_index"


# ---- DELETE /records/<id> -------------------------------------------------


def test_delete_record(server, store):
    store.create("A", "a")
    store.create("B", "b")
    status, body = _request(server, "DELETE", "/records/0")
    assert status == 200
    assert body["deleted"] is True

    status, _ = _request(server, "GET", "/records/0")
    assert status == 404
    _, page = _request(server, "GET", "/records")
    assert [r["name"] for r in page["records"]] == ["B"]


def test_delete_missing_record(server):
    status, _ = _request(server, "DELETE", "/records/0")
    assert status == 404


# ---- GET /health ----------------------------------------------------------


def test_health_endpoint(server, store):
    store.create("A", "a")
    status, body = _request(server, "GET", "/health")
    assert status == 200
    assert body == {"status": "ok", "records": 1}


# ---- routing --------------------------------------------------------------


def test_unknown_route(server):
    status, _ = _request(server, "GET", "/unknown")
    assert status == 404


def test_method_not_allowed(server):
    status, _ = _request(server, "DELETE", "/records")
    assert status == 405
    status, _ = _request(server, "POST", "/records/0", {"name": "x"})
    assert status == 405
