"""Mock backend client returning empty data for every operation.

Lets the app run (and render its "empty" states) without a database.
"""
from __future__ import annotations

from typing import Any, Iterable, Optional

from anvilon.supabase.client import APIResponse, AuthError, AuthSession, AuthUser, SignUpResult


class MockQueryBuilder:
    def __init__(self, table: str, schema: Optional[str] = None):
        self.table = table
        self.schema = schema
        self._single = False
        self._method = "GET"
        self._has_filter = False

    def select(self, columns: str = "*") -> "MockQueryBuilder":
        return self

    def eq(self, column: str, value: Any) -> "MockQueryBuilder":
        self._has_filter = True
        return self

    def neq(self, column: str, value: Any) -> "MockQueryBuilder":
        self._has_filter = True
        return self

    def in_(self, column: str, values: Iterable[Any]) -> "MockQueryBuilder":
        self._has_filter = True
        return self

    def order(self, column: str, ascending: bool = True) -> "MockQueryBuilder":
        return self

    def limit(self, count: int) -> "MockQueryBuilder":
        return self

    def maybe_single(self) -> "MockQueryBuilder":
        self._single = True
        return self

    def insert(self, rows: Any) -> "MockQueryBuilder":
        self._method = "POST"
        return self

    def upsert(self, rows: Any, on_conflict: Optional[str] = None) -> "MockQueryBuilder":
        self._method = "POST"
        return self

    def delete(self) -> "MockQueryBuilder":
        self._method = "DELETE"
        return self

    def execute(self) -> APIResponse:
        if self._method == "DELETE" and not self._has_filter:
            raise ValueError("delete_requires_filter")
        return APIResponse(data=None if self._single else [], status=200)


class MockAuthClient:
    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        raise AuthError("auth_unavailable")

    def sign_up(self, email: str, password: str) -> SignUpResult:
        raise AuthError("auth_unavailable")

    def get_user(self, access_token: Optional[str]) -> Optional[AuthUser]:
        return None


class MockSupabaseClient:
    is_mock = True

    def __init__(self):
        self.url = ""
        self.auth = MockAuthClient()

    def for_user(self, access_token: Optional[str]) -> "MockSupabaseClient":
        return self

    def table(self, name: str, schema: Optional[str] = None) -> MockQueryBuilder:
        return MockQueryBuilder(name, schema)

    def storage_public_url(self, bucket: Optional[str], path: Optional[str]) -> str:
        return ""


__all__ = ["MockSupabaseClient", "MockQueryBuilder", "MockAuthClient"]
