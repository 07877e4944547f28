"""Shared fixtures: isolated env, in-memory run log and a scriptable backend."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from anvilon.db.engine import reset_for_tests
from anvilon.supabase import SupabaseError, reset_client

_BACKEND_ENV = (
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "NEXT_PUBLIC_SUPABASE_URL",
    "NEXT_PUBLIC_SUPABASE_ANON_KEY",
    "USE_MOCK_SUPABASE",
    "ANVILON_ADMIN_EMAILS",
    "ANVILON_ENV",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    for name in _BACKEND_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ANVILON_DB_PATH", ":memory:")
    reset_client()
    reset_for_tests(drop=True)
    yield
    reset_for_tests(drop=True)
    reset_client()


class FakeQuery:
    def __init__(self, backend: "FakeSupabase", table: str, schema: Optional[str]):
        self.backend = backend
        self.table = table
        self.schema = schema
        self.op = "select"
        self.filters: List[tuple] = []
        self.body: Any = None
        self.single = False
        self.row_limit: Optional[int] = None

    def select(self, columns: str = "*"):
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def neq(self, column, value):
        self.filters.append(("neq", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    def order(self, column, ascending=True):
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def maybe_single(self):
        self.single = True
        return self

    def insert(self, rows):
        self.op, self.body = "insert", rows
        return self

    def upsert(self, rows, on_conflict=None):
        self.op, self.body = "upsert", rows
        return self

    def delete(self):
        self.op = "delete"
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        for kind, column, value in self.filters:
            if kind == "eq" and row.get(column) != value:
                return False
            if kind == "neq" and row.get(column) == value:
                return False
            if kind == "in" and row.get(column) not in value:
                return False
        return True

    def execute(self):
        self.backend.calls.append(self)
        error = self.backend.errors.get((self.table, self.op)) or self.backend.errors.get(self.table)
        if error is not None:
            raise error
        if self.op in ("insert", "upsert"):
            rows = self.body if isinstance(self.body, list) else [self.body]
            self.backend.tables.setdefault(self.table, []).extend(dict(r) for r in rows)
            return _Response(rows)
        if self.op == "delete":
            kept = [r for r in self.backend.tables.get(self.table, []) if not self._matches(r)]
            self.backend.tables[self.table] = kept
            return _Response([])
        rows = [r for r in self.backend.tables.get(self.table, []) if self._matches(r)]
        if self.row_limit is not None:
            rows = rows[: self.row_limit]
        if self.single:
            return _Response(rows[0] if rows else None)
        return _Response(rows)


class _Response:
    def __init__(self, data):
        self.data = data


class FakeAuth:
    def __init__(self):
        self.session = None
        self.signed_up = None
        self.user = None
        self.error = None
        self.calls: List[tuple] = []

    def sign_in_with_password(self, email, password):
        self.calls.append(("sign_in", email, password))
        if self.error is not None:
            raise self.error
        return self.session

    def sign_up(self, email, password):
        self.calls.append(("sign_up", email, password))
        if self.error is not None:
            raise self.error
        return self.signed_up

    def get_user(self, access_token):
        self.calls.append(("get_user", access_token))
        return self.user if access_token else None


class FakeSupabase:
    """In-memory stand-in for the REST client; tables are lists of dicts."""

    is_mock = False

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.errors: Dict[Any, SupabaseError] = {}
        self.calls: List[FakeQuery] = []
        self.auth = FakeAuth()
        self.tokens: List[Optional[str]] = []

    def table(self, name, schema=None):
        return FakeQuery(self, name, schema)

    def for_user(self, access_token):
        self.tokens.append(access_token)
        return self

    def storage_public_url(self, bucket, path):
        if not bucket or not path:
            return ""
        return f"https://cdn.test/{bucket}/{path}"

    def fail(self, table, code="XX000", message="boom", op=None):
        key = (table, op) if op else table
        self.errors[key] = SupabaseError(message, code=code, status=500)

    def queried(self, table) -> List[FakeQuery]:
        return [q for q in self.calls if q.table == table]


@pytest.fixture
def fake_sb():
    return FakeSupabase()
