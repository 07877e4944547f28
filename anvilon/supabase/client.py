"""Hosted backend client (PostgREST tables + GoTrue auth) over `requests`.

Responsibilities:
    * Chainable table queries (`table(...).select(...).eq(...).execute()`)
    * Schema selection through profile headers (public / race / account)
    * Password auth: sign in, sign up, resolve user from an access token

Non-2xx responses raise `SupabaseError` carrying the backend's
code/message/details/hint so callers can log them and decide whether to
fail soft.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests

from anvilon.supabase.public_url import get_public_storage_url
from anvilon.utils.logging import get_logger

LOG = get_logger("anvilon.supabase")

# PostgREST reserved characters inside filter values.
_RESERVED = set(',()"')
MULTIPLE_ROWS_CODE = "PGRST116"


class SupabaseError(Exception):
    """Raised for failed REST calls (HTTP errors, transport errors, bad JSON)."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[str] = None,
        hint: Optional[str] = None,
        status: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.hint = hint
        self.status = status

    def as_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "hint": self.hint,
            "status": self.status,
        }


class AuthError(Exception):
    """Raised by the auth client; `code` is a short snake_case key."""

    def __init__(self, code: str, message: Optional[str] = None):
        super().__init__(code)
        self.code = code
        self.message = message or code


@dataclass
class APIResponse:
    data: Any
    status: int = 200


@dataclass
class AuthUser:
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "AuthUser":
        meta = payload.get("user_metadata")
        return cls(
            id=str(payload.get("id") or ""),
            email=payload.get("email"),
            user_metadata=meta if isinstance(meta, dict) else {},
        )


@dataclass
class AuthSession:
    access_token: str
    refresh_token: Optional[str]
    user: AuthUser


@dataclass
class SignUpResult:
    """New auth user; ``access_token`` is None until the e-mail is confirmed."""

    user: AuthUser
    access_token: Optional[str] = None


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _quote_list_item(value: Any) -> str:
    text = _format_value(value)
    if any(ch in _RESERVED for ch in text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


class QueryBuilder:
    """Single-use request builder for one table."""

    def __init__(self, client: "SupabaseClient", table: str, schema: Optional[str] = None):
        self._client = client
        self._table = table
        self._schema = schema
        self._method = "GET"
        self._params: List[Tuple[str, str]] = []
        self._order: List[str] = []
        self._body: Any = None
        self._prefer: List[str] = []
        self._single = False
        self._has_filter = False

    # -- reads -----------------------------------------------------------
    def select(self, columns: str = "*") -> "QueryBuilder":
        cleaned = ",".join(part.strip() for part in columns.split(",") if part.strip()) or "*"
        self._params.append(("select", cleaned))
        return self

    def eq(self, column: str, value: Any) -> "QueryBuilder":
        if value is None:
            self._params.append((column, "is.null"))
        else:
            self._params.append((column, f"eq.{_format_value(value)}"))
        self._has_filter = True
        return self

    def neq(self, column: str, value: Any) -> "QueryBuilder":
        self._params.append((column, f"neq.{_format_value(value)}"))
        self._has_filter = True
        return self

    def in_(self, column: str, values: Iterable[Any]) -> "QueryBuilder":
        items = ",".join(_quote_list_item(v) for v in values)
        self._params.append((column, f"in.({items})"))
        self._has_filter = True
        return self

    def order(self, column: str, ascending: bool = True) -> "QueryBuilder":
        self._order.append(f"{column}.{'asc' if ascending else 'desc'}")
        return self

    def limit(self, count: int) -> "QueryBuilder":
        self._params.append(("limit", str(int(count))))
        return self

    def maybe_single(self) -> "QueryBuilder":
        self._single = True
        return self

    # -- writes ----------------------------------------------------------
    def insert(self, rows: Any) -> "QueryBuilder":
        self._method = "POST"
        self._body = rows
        self._prefer.append("return=representation")
        return self

    def upsert(self, rows: Any, on_conflict: Optional[str] = None) -> "QueryBuilder":
        self._method = "POST"
        self._body = rows
        self._prefer.extend(["resolution=merge-duplicates", "return=representation"])
        if on_conflict:
            self._params.append(("on_conflict", on_conflict))
        return self

    def delete(self) -> "QueryBuilder":
        self._method = "DELETE"
        self._prefer.append("return=representation")
        return self

    # -- execution -------------------------------------------------------
    def build_params(self) -> List[Tuple[str, str]]:
        params = list(self._params)
        if self._order:
            params.append(("order", ",".join(self._order)))
        return params

    def execute(self) -> APIResponse:
        if self._method == "DELETE" and not self._has_filter:
            raise ValueError("delete_requires_filter")
        headers: Dict[str, str] = {}
        if self._schema:
            profile_header = "Accept-Profile" if self._method == "GET" else "Content-Profile"
            headers[profile_header] = self._schema
        if self._prefer:
            headers["Prefer"] = ",".join(self._prefer)
        status, data = self._client.request(
            self._method,
            f"/rest/v1/{self._table}",
            params=self.build_params(),
            json_body=self._body,
            headers=headers,
        )
        if self._single:
            rows = data if isinstance(data, list) else ([data] if data else [])
            if len(rows) > 1:
                raise SupabaseError(
                    "JSON object requested, multiple (or no) rows returned",
                    code=MULTIPLE_ROWS_CODE,
                    details=f"Results contain {len(rows)} rows",
                    status=406,
                )
            return APIResponse(data=rows[0] if rows else None, status=status)
        return APIResponse(data=data if data is not None else [], status=status)


class AuthClient:
    """Password auth against the hosted auth endpoint."""

    def __init__(self, client: "SupabaseClient"):
        self._client = client

    def _auth_request(self, method: str, path: str, *, json_body: Any = None,
                      params: Optional[List[Tuple[str, str]]] = None,
                      access_token: Optional[str] = None) -> Tuple[int, Any]:
        try:
            return self._client.request(
                method,
                f"/auth/v1/{path}",
                params=params,
                json_body=json_body,
                access_token=access_token,
            )
        except SupabaseError as exc:
            if exc.status is None:
                raise AuthError("network_error", exc.message) from exc
            raise AuthError(exc.code or "auth_failed", exc.message) from exc

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        _, data = self._auth_request(
            "POST",
            "token",
            params=[("grant_type", "password")],
            json_body={"email": email, "password": password},
        )
        if not isinstance(data, dict) or not data.get("access_token") or not isinstance(data.get("user"), dict):
            raise AuthError("invalid_response")
        return AuthSession(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            user=AuthUser.from_payload(data["user"]),
        )

    def sign_up(self, email: str, password: str) -> SignUpResult:
        _, data = self._auth_request("POST", "signup", json_body={"email": email, "password": password})
        if not isinstance(data, dict):
            raise AuthError("invalid_response")
        # Auto-confirm projects answer with a session (flat or under "session"); others with the bare user.
        user_payload = data.get("user") if isinstance(data.get("user"), dict) else data
        user = AuthUser.from_payload(user_payload)
        if not user.id:
            raise AuthError("signup_failed")
        session = data.get("session") if isinstance(data.get("session"), dict) else data
        token = session.get("access_token")
        return SignUpResult(user=user, access_token=token if isinstance(token, str) and token else None)

    def get_user(self, access_token: Optional[str]) -> Optional[AuthUser]:
        if not access_token:
            return None
        try:
            _, data = self._client.request("GET", "/auth/v1/user", access_token=access_token)
        except SupabaseError as exc:
            if exc.status in (401, 403):
                return None
            LOG.warning("get_user failed code=%s message=%s", exc.code, exc.message)
            return None
        if not isinstance(data, dict) or not data.get("id"):
            return None
        return AuthUser.from_payload(data)


class SupabaseClient:
    """REST client bound to one project URL + anon key."""

    is_mock = False

    def __init__(self, url: str, anon_key: str, *, timeout: float = 15.0, access_token: Optional[str] = None):
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.access_token = access_token
        self.auth = AuthClient(self)

    def for_user(self, access_token: Optional[str]) -> "SupabaseClient":
        """Client copy whose requests carry the user's token (row-level security)."""
        if not access_token:
            return self
        return SupabaseClient(self.url, self.anon_key, timeout=self.timeout, access_token=access_token)

    def table(self, name: str, schema: Optional[str] = None) -> QueryBuilder:
        return QueryBuilder(self, name, schema)

    def storage_public_url(self, bucket: Optional[str], path: Optional[str]) -> str:
        return get_public_storage_url(bucket, path, base_url=self.url)

    def _headers(self, access_token: Optional[str]) -> Dict[str, str]:
        bearer = access_token or self.access_token or self.anon_key
        return {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {bearer}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[List[Tuple[str, str]]] = None,
        json_body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        access_token: Optional[str] = None,
    ) -> Tuple[int, Any]:
        merged = self._headers(access_token)
        if headers:
            merged.update(headers)
        url = f"{self.url}{path}"
        try:
            r = requests.request(
                method,
                url,
                params=params or None,
                json=json_body,
                headers=merged,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            LOG.warning("request failed method=%s path=%s error=%s", method, path, exc)
            raise SupabaseError(str(exc), code="network_error") from exc

        data: Any = None
        if r.text:
            try:
                data = r.json()
            except ValueError:
                if r.status_code < 400:
                    raise SupabaseError("invalid_json", code="invalid_json", status=r.status_code)
                data = {"message": r.text}

        if r.status_code >= 400:
            payload = data if isinstance(data, dict) else {}
            message = (
                payload.get("message")
                or payload.get("msg")
                or payload.get("error_description")
                or payload.get("error")
                or f"http_{r.status_code}"
            )
            code = payload.get("code") or payload.get("error_code") or payload.get("error")
            raise SupabaseError(
                str(message),
                code=str(code) if code is not None else None,
                details=payload.get("details"),
                hint=payload.get("hint"),
                status=r.status_code,
            )
        return r.status_code, data


__all__ = [
    "SupabaseError",
    "AuthError",
    "APIResponse",
    "AuthUser",
    "AuthSession",
    "SignUpResult",
    "QueryBuilder",
    "AuthClient",
    "SupabaseClient",
    "MULTIPLE_ROWS_CODE",
]
