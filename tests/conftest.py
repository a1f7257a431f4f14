import os
import itertools
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generator, List, Optional

os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")
os.environ.setdefault("MIDTRANS_SERVER_KEY", "SB-Mid-server-test")

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from storefront.app import app as fastapi_app

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/"):
            item.add_marker(pytest.mark.integration)


class _Result:
    def __init__(self, data):
        self.data = data


class _Query:
    """Sous-ensemble du query builder postgrest utilisé par les repositories."""

    def __init__(self, store: "FakeSupabase", table: str):
        self._store = store
        self._table = table
        self._op = "select"
        self._payload: Any = None
        self._on_conflict = ""
        self._filters: List[Callable[[dict], bool]] = []
        self._order: Optional[tuple] = None
        self._limit: Optional[int] = None

    # -- opérations
    def select(self, *columns, **kwargs):
        return self

    def insert(self, payload, **kwargs):
        self._op, self._payload = "insert", payload
        return self

    def upsert(self, payload, on_conflict: str = "", **kwargs):
        self._op, self._payload, self._on_conflict = "upsert", payload, on_conflict
        return self

    def update(self, payload, **kwargs):
        self._op, self._payload = "update", payload
        return self

    def delete(self, **kwargs):
        self._op = "delete"
        return self

    # -- filtres
    def eq(self, column, value):
        self._filters.append(lambda r: r.get(column) == value)
        return self

    def lt(self, column, value):
        self._filters.append(lambda r: r.get(column) is not None and r.get(column) < value)
        return self

    def in_(self, column, values):
        wanted = {str(v) for v in values}
        self._filters.append(lambda r: str(r.get(column)) in wanted)
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _matching(self) -> List[dict]:
        return [r for r in self._store.tables.setdefault(self._table, []) if all(f(r) for f in self._filters)]

    def execute(self):
        self._store.calls.append((self._table, self._op))
        failure = self._store.failures.get((self._table, self._op))
        if failure is not None:
            raise failure
        return getattr(self, f"_exec_{self._op}")()

    def _exec_select(self):
        rows = [dict(r) for r in self._matching()]
        if self._order:
            column, desc = self._order
            rows.sort(key=lambda r: r.get(column) or "", reverse=desc)
        if self._limit is not None:
            rows = rows[: self._limit]
        return _Result(rows)

    def _exec_insert(self):
        payloads = self._payload if isinstance(self._payload, list) else [self._payload]
        created = []
        for p in payloads:
            self._store.check_unique(self._table, p)
            created.append(self._store.add(self._table, p))
        return _Result([dict(r) for r in created])

    def _exec_upsert(self):
        key = self._on_conflict
        existing = next((r for r in self._store.tables.setdefault(self._table, []) if key and r.get(key) == self._payload.get(key)), None)
        if existing is not None:
            existing.update(self._payload)
            return _Result([dict(existing)])
        self._store.check_unique(self._table, self._payload)
        return _Result([dict(self._store.add(self._table, self._payload))])

    def _exec_update(self):
        rows = self._matching()
        for r in rows:
            r.update(self._payload)
        return _Result([dict(r) for r in rows])

    def _exec_delete(self):
        rows = self._matching()
        self._store.tables[self._table] = [r for r in self._store.tables[self._table] if r not in rows]
        return _Result([dict(r) for r in rows])


class FakeSupabase:
    """Client Supabase en mémoire avec contraintes UNIQUE (users.email, orders.midtrans_order_id)."""

    UNIQUE = {"users": ("email",), "orders": ("midtrans_order_id",)}

    def __init__(self):
        self.tables: Dict[str, List[dict]] = {}
        self.calls: List[tuple] = []
        self.failures: Dict[tuple, Exception] = {}
        self._ids = itertools.count(1)

    def table(self, name: str) -> _Query:
        return _Query(self, name)

    def fail(self, table: str, op: str, exc: Optional[Exception] = None) -> None:
        self.failures[(table, op)] = exc or APIError({"message": "store unavailable", "code": "08006"})

    def check_unique(self, table: str, payload: dict) -> None:
        for column in self.UNIQUE.get(table, ()):
            if any(r.get(column) == payload.get(column) for r in self.tables.get(table, [])):
                raise APIError({
                    "message": f'duplicate key value violates unique constraint "{table}_{column}_key"',
                    "code": "23505",
                    "details": f"Key ({column}) already exists.",
                    "hint": None,
                })

    def add(self, table: str, payload: dict) -> dict:
        row = dict(payload)
        row.setdefault("id", f"{table}-{next(self._ids)}")
        row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        self.tables.setdefault(table, []).append(row)
        return row

    def writes(self) -> List[tuple]:
        return [c for c in self.calls if c[1] in ("insert", "upsert", "update", "delete")]


@pytest.fixture
def fake_store(monkeypatch) -> FakeSupabase:
    """Remplace les deux clients Supabase par un store en mémoire, catalogue pré-rempli."""
    store = FakeSupabase()
    store.tables["products"] = [
        {"id": "p-shirt", "name": "Batik Shirt", "price": 50000, "category": "apparel", "created_at": "2024-01-01T00:00:00+00:00"},
        {"id": "p-mug", "name": "Coffee Mug", "price": 30000, "category": "home", "created_at": "2024-02-01T00:00:00+00:00"},
        {"id": "p-tote", "name": "Tote Bag", "price": 15000, "category": "apparel", "created_at": "2024-03-01T00:00:00+00:00"},
    ]
    monkeypatch.setattr("storefront.infra.supabase_client.get_supabase", lambda: store)
    monkeypatch.setattr("storefront.infra.supabase_client.get_service_supabase", lambda: store)
    return store


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str = ""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


@pytest.fixture
def gateway_calls(monkeypatch) -> List[Dict[str, Any]]:
    """Capture les POST vers Midtrans; la réponse est pilotée par gateway_calls.response."""
    calls: List[Dict[str, Any]] = []

    class _Calls(list):
        response: Any = FakeResponse(201, {"token": "tok_abc", "redirect_url": "https://app.sandbox.midtrans.com/snap/v2/vtweb/tok_abc"})

    recorder = _Calls()

    def _fake_post(url, json=None, headers=None, timeout=None, **kwargs):
        recorder.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if isinstance(recorder.response, Exception):
            raise recorder.response
        return recorder.response

    monkeypatch.setattr("storefront.checkout.midtrans_client.requests.post", _fake_post)
    return recorder


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def checkout_payload() -> Dict[str, Any]:
    return {
        "customer": {
            "name": "Budi Santoso",
            "email": "budi@example.com",
            "phone": "+628123456789",
            "address": "Jl. Merdeka 1",
            "city": "Jakarta",
            "postal_code": "10110",
        },
        "items": [
            {"product": {"id": "p-shirt", "name": "Batik Shirt", "price": 50000}, "quantity": 2},
            {"product": {"id": "p-mug", "name": "Coffee Mug", "price": 30000}, "quantity": 1},
        ],
    }


@pytest.fixture(scope="session")
def app():
    return fastapi_app


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
