"""
In-memory stand-in for the supabase-py client.

Implements the subset of the PostgREST query builder and the GoTrue auth
API that the repositories and services call, and records every call so
tests can assert on what reached the provider.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Callable, Optional


class FakeAuthError(Exception):
    """Shape of ``supabase_auth.errors.AuthApiError``: message plus ``code``."""

    def __init__(self, message: str, code: Optional[str] = None, status: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


class FakeAPIError(Exception):
    """Shape of ``postgrest.exceptions.APIError``."""

    def __init__(self, message: str, code: str = "PGRST000") -> None:
        super().__init__(message)
        self.message = message
        self.code = code


# ---------------------------------------------------------------------------
# PostgREST
# ---------------------------------------------------------------------------


def _equals(stored: Any, wanted: Any) -> bool:
    if isinstance(stored, bool) or isinstance(wanted, bool):
        return str(stored).lower() == str(wanted).lower()
    return stored == wanted or str(stored) == str(wanted)


def _like_regex(pattern: str) -> "re.Pattern[str]":
    """Case-insensitive regex for a LIKE pattern with backslash escapes."""
    parts: list[str] = []
    chars = iter(pattern)
    for char in chars:
        if char == "\\":
            parts.append(re.escape(next(chars, "\\")))
        elif char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


class FakeQuery:
    def __init__(self, client: "FakeSupabase", table: str, op: str, payload: Any = None) -> None:
        self._client = client
        self._table = table
        self._op = op
        self._payload = payload
        self._columns = "*"
        self._count: Optional[str] = None
        self._filters: list[tuple[str, str, Any]] = []
        self._orders: list[tuple[str, bool, Optional[bool]]] = []
        self._range: Optional[tuple[int, int]] = None
        self._single = False
        self._limit: Optional[int] = None

    # -- builder ---------------------------------------------------------

    def select(self, columns: str = "*", count: Optional[str] = None) -> "FakeQuery":
        self._columns = columns
        self._count = count
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(("eq", column, value))
        return self

    def gte(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(("gte", column, value))
        return self

    def lt(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(("lt", column, value))
        return self

    def ilike(self, column: str, pattern: str) -> "FakeQuery":
        self._filters.append(("ilike", column, pattern))
        return self

    def limit(self, count: int) -> "FakeQuery":
        self._limit = count
        return self

    def order(self, column: str, *, desc: bool = False, nullsfirst: Optional[bool] = None) -> "FakeQuery":
        self._orders.append((column, desc, nullsfirst))
        return self

    def range(self, start: int, end: int) -> "FakeQuery":
        self._range = (start, end)
        return self

    def maybe_single(self) -> "FakeQuery":
        self._single = True
        return self

    # -- execution -------------------------------------------------------

    def _matches(self, row: dict) -> bool:
        for kind, column, value in self._filters:
            stored = row.get(column)
            if kind == "eq" and not _equals(stored, value):
                return False
            if kind == "gte" and (stored is None or str(stored) < str(value)):
                return False
            if kind == "lt" and (stored is None or str(stored) >= str(value)):
                return False
            if kind == "ilike" and (stored is None or not _like_regex(value).fullmatch(str(stored))):
                return False
        return True

    def _project(self, row: dict) -> dict:
        if self._columns.strip() == "*":
            return dict(row)
        wanted = [c.strip() for c in self._columns.split(",")]
        return {c: row.get(c) for c in wanted}

    def execute(self) -> Any:
        self._client.calls.append({
            "table": self._table,
            "op": self._op,
            "columns": self._columns,
            "count": self._count,
            "filters": list(self._filters),
            "orders": list(self._orders),
            "range": self._range,
            "payload": self._payload,
        })
        failure = self._client.failures.get((self._table, self._op))
        if failure is not None:
            raise failure

        rows = self._client.tables.setdefault(self._table, [])

        if self._op == "insert":
            new_row = dict(self._payload)
            new_row.setdefault("id", str(uuid.uuid4()))
            new_row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
            rows.append(new_row)
            return SimpleNamespace(data=[dict(new_row)], count=None)

        matched = [row for row in rows if self._matches(row)]

        if self._op == "update":
            for row in matched:
                row.update(self._payload)
            return SimpleNamespace(data=[dict(r) for r in matched], count=None)

        if self._op == "delete":
            for row in matched:
                rows.remove(row)
            return SimpleNamespace(data=[dict(r) for r in matched], count=None)

        for column, desc, nullsfirst in reversed(self._orders):
            present = [r for r in matched if r.get(column) is not None]
            missing = [r for r in matched if r.get(column) is None]
            present.sort(key=lambda r: r.get(column), reverse=desc)
            # PostgREST default: NULLS LAST ascending, NULLS FIRST descending
            nulls_first = nullsfirst if nullsfirst is not None else desc
            matched = missing + present if nulls_first else present + missing

        total = len(matched)
        if self._range is not None:
            start, end = self._range
            matched = matched[start:end + 1]
        if self._limit is not None:
            matched = matched[: self._limit]

        if self._single:
            if not matched:
                return None
            return SimpleNamespace(data=self._project(matched[0]), count=None)
        return SimpleNamespace(
            data=[self._project(r) for r in matched],
            count=total if self._count else None,
        )


class FakeTable:
    def __init__(self, client: "FakeSupabase", name: str) -> None:
        self._client = client
        self._name = name

    def select(self, columns: str = "*", count: Optional[str] = None) -> FakeQuery:
        return FakeQuery(self._client, self._name, "select").select(columns, count=count)

    def insert(self, row: dict) -> FakeQuery:
        return FakeQuery(self._client, self._name, "insert", payload=row)

    def update(self, changes: dict) -> FakeQuery:
        return FakeQuery(self._client, self._name, "update", payload=changes)

    def delete(self) -> FakeQuery:
        return FakeQuery(self._client, self._name, "delete")


# ---------------------------------------------------------------------------
# GoTrue
# ---------------------------------------------------------------------------


def _user_ns(user: dict) -> SimpleNamespace:
    return SimpleNamespace(id=user["id"], email=user["email"], user_metadata={})


class FakeAdminAuth:
    def __init__(self, auth: "FakeAuth") -> None:
        self._auth = auth
        self.created: list[dict] = []
        self.deleted: list[str] = []
        self.signed_out: list[str] = []
        self.create_error: Optional[Exception] = None
        self.delete_error: Optional[Exception] = None

    def create_user(self, attributes: dict) -> SimpleNamespace:
        self.created.append(dict(attributes))
        if self.create_error is not None:
            raise self.create_error
        if attributes["email"] in self._auth.users:
            raise FakeAuthError(
                "A user with this email address has already been registered",
                code="email_exists",
                status=422,
            )
        user = self._auth.register(attributes["email"], attributes["password"])
        return SimpleNamespace(user=_user_ns(user))

    def delete_user(self, user_id: str) -> None:
        self.deleted.append(user_id)
        if self.delete_error is not None:
            raise self.delete_error
        for email, user in list(self._auth.users.items()):
            if user["id"] == user_id:
                del self._auth.users[email]

    def sign_out(self, jwt: str, scope: str = "global") -> None:
        self.signed_out.append(jwt)
        if jwt not in self._auth.tokens:
            raise FakeAuthError("invalid JWT", code="bad_jwt", status=401)
        del self._auth.tokens[jwt]


class FakeAuth:
    def __init__(self) -> None:
        self.users: dict[str, dict] = {}
        self.tokens: dict[str, str] = {}
        self.refresh_tokens: dict[str, str] = {}
        self.sign_in_attempts: list[str] = []
        self.listeners: list[Callable[[str, Any], None]] = []
        self.error: Optional[Exception] = None
        self.admin = FakeAdminAuth(self)

    # -- test helpers ----------------------------------------------------

    def register(self, email: str, password: str, user_id: Optional[str] = None) -> dict:
        user = {"id": user_id or str(uuid.uuid4()), "email": email, "password": password}
        self.users[email] = user
        return user

    def issue_token(self, user_id: str) -> str:
        token = f"access-{uuid.uuid4().hex}"
        self.tokens[token] = user_id
        self.refresh_tokens[f"refresh-{token}"] = user_id
        return token

    def _user_by_id(self, user_id: str) -> dict:
        return next(u for u in self.users.values() if u["id"] == user_id)

    def _emit(self, event: str, session: Any) -> None:
        for listener in list(self.listeners):
            listener(event, session)

    def _session_response(self, user: dict) -> SimpleNamespace:
        token = self.issue_token(user["id"])
        session = SimpleNamespace(
            access_token=token,
            refresh_token=f"refresh-{token}",
            expires_at=2_000_000_000,
            user=_user_ns(user),
        )
        return SimpleNamespace(user=_user_ns(user), session=session)

    # -- GoTrue surface --------------------------------------------------

    def sign_in_with_password(self, credentials: dict) -> SimpleNamespace:
        email = credentials["email"]
        self.sign_in_attempts.append(email)
        if self.error is not None:
            raise self.error
        user = self.users.get(email)
        if user is None or user["password"] != credentials["password"]:
            raise FakeAuthError("Invalid login credentials", code="invalid_credentials")
        response = self._session_response(user)
        self._emit("SIGNED_IN", response.session)
        return response

    def sign_up(self, credentials: dict) -> SimpleNamespace:
        if self.error is not None:
            raise self.error
        if credentials["email"] in self.users:
            raise FakeAuthError("User already registered", code="user_already_exists")
        user = self.register(credentials["email"], credentials["password"])
        return SimpleNamespace(user=_user_ns(user), session=None)

    def get_user(self, jwt: Optional[str] = None) -> Optional[SimpleNamespace]:
        if self.error is not None:
            raise self.error
        user_id = self.tokens.get(jwt or "")
        if user_id is None:
            raise FakeAuthError("invalid JWT: unable to parse or verify signature", code="bad_jwt", status=403)
        return SimpleNamespace(user=_user_ns(self._user_by_id(user_id)))

    def set_session(self, access_token: str, refresh_token: str) -> SimpleNamespace:
        user_id = self.tokens.get(access_token) or self.refresh_tokens.get(refresh_token)
        if user_id is None:
            raise FakeAuthError(
                "Invalid Refresh Token: Refresh Token Not Found",
                code="refresh_token_not_found",
            )
        user = self._user_by_id(user_id)
        session = SimpleNamespace(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=2_000_000_000,
            user=_user_ns(user),
        )
        self._emit("TOKEN_REFRESHED", session)
        return SimpleNamespace(user=_user_ns(user), session=session)

    def on_auth_state_change(self, callback: Callable[[str, Any], None]) -> SimpleNamespace:
        self.listeners.append(callback)
        return SimpleNamespace(unsubscribe=lambda: self.listeners.remove(callback))


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class FakeSupabase:
    """Single fake shared by the service-role and per-flow clients."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict]] = {}
        self.failures: dict[tuple[str, str], Exception] = {}
        self.calls: list[dict] = []
        self.auth = FakeAuth()

    def table(self, name: str) -> FakeTable:
        return FakeTable(self, name)

    def fail(self, table: str, op: str, error: Optional[Exception] = None) -> None:
        """Make every ``op`` on ``table`` raise *error*."""
        self.failures[(table, op)] = error or FakeAPIError("connection refused")

    def calls_for(self, table: str, op: Optional[str] = None) -> list[dict]:
        return [
            c for c in self.calls
            if c["table"] == table and (op is None or c["op"] == op)
        ]
