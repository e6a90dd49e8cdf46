"""End-to-end quickstart: start the API, then create → list → update → delete.

Runs the HTTP server in a background thread on a free port and talks to it
with :mod:`http.client`.

Usage:
    pip install -e ".[test]"
    python examples/quickstart/run_quickstart.py
"""

import json
import threading
from http.client import HTTPConnection

from task_records import RecordStore
from task_records.api import create_server

# ── 1. Start the server ───────────────────────────────────────────────
store = RecordStore()
server = create_server(host="127.0.0.1", port=0, store=store)
_, PORT = server.server_address
threading.Thread(target=server.serve_forever, daemon=True).start()


def call(method, path, body=None):
    conn = HTTPConnection("127.0.0.1", PORT)
    payload = json.dumps(body).encode() if body is not None else None
    conn.request(method, path, body=payload, headers={"Content-Type": "application/json"})
    resp = conn.getresponse()
    data = json.loads(resp.read())
    conn.close()
    return resp.status, data


print("=" * 60)
print("  task-records · End-to-End Quickstart")
print("=" * 60)

# ── 2. Create records ─────────────────────────────────────────────────
print("\n── Step 1: Create ──\n")
for name, description in [("A", "a"), ("B", "b"), ("C", "c")]:
    status, body = call("POST", "/records", {"name": name, "description": description})
    print(f"  {name}: HTTP {status}, id={body['id']}")

# ── 3. Page through them ──────────────────────────────────────────────
print("\n── Step 2: List (page_size=2) ──\n")
for page in (1, 2, 3):
    _, body = call("GET", f"/records?page={page}&page_size=2")
    print(f"  page {page}: {[r['name'] for r in body['records']]}")

# ── 4. Partial update ─────────────────────────────────────────────────
print("\n── Step 3: Mark B completed ──\n")
call("PATCH", "/records/1", {"is_completed": True})
_, body = call("GET", "/records/1")
print(f"  {body}")

# ── 5. Delete and observe ─────────────────────────────────────────────
print("\n── Step 4: Delete A ──\n")
call("DELETE", "/records/0")
status, body = call("GET", "/records/0")
print(f"  GET /records/0 → HTTP {status} ({body['kind']})")
_, body = call("GET", "/records")
print(f"  remaining: {[r['name'] for r in body['records']]}")

server.shutdown()
print("\n" + "=" * 60)
print("  Done.")
print("=" * 60)
