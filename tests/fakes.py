"""In-memory stand-in for the supabase client used by the API tests.

Covers the query-builder calls the repositories make
(table / select / eq / order / limit / insert / update / upsert / delete /
execute) and the Supabase Auth calls the services make. Filters compare
values as strings, which is how PostgREST receives them.
"""

import itertools
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

from pydantic import BaseModel, Field
from supabase import AuthApiError, PostgrestAPIError

EMBED = re.compile(r"(\w+)\s*\(([^)]*)\)")

# Embedded resource -> foreign key column on the parent table
RELATIONS = {("cart_items", "products"): "product_id"}

TIMESTAMP_COLUMNS = {
    "products": ("created_at", "updated_at"),
    "cart_items": ("added_at",),
}


class FakeAuthApiError(AuthApiError):
    """AuthApiError with a constructor that is stable across supabase releases."""

    def __init__(self, message: str, status: int = 400):
        Exception.__init__(self, message)
        self.message = message
        self.status = status
        self.code = None
        self.name = "AuthApiError"


def api_error(message: str) -> PostgrestAPIError:
    return PostgrestAPIError(
        {"message": message, "code": "PGRST000", "hint": None, "details": None}
    )


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data
        self.count = None


# ---------------------------------------------------------------------------
# Record store
# ---------------------------------------------------------------------------


class FakeStore:
    """Tables, an increasing clock, failure injection and a call log."""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            "products": [],
            "cart_items": [],
            "profiles": [],
        }
        self.failures: Dict[Tuple[str, str], Exception] = {}
        self.empty_results: set = set()
        self.calls: List[Dict[str, Any]] = []
        self._ticks = itertools.count()
        self._epoch = datetime.now(timezone.utc) - timedelta(hours=1)

    def now(self) -> str:
        return (self._epoch + timedelta(seconds=next(self._ticks))).isoformat()

    def fail(self, table: str, op: str, message: str = "database unavailable") -> None:
        self.failures[(table, op)] = api_error(message)

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        stored = dict(row)
        stored.setdefault("id", str(uuid.uuid4()))
        for column in TIMESTAMP_COLUMNS.get(table, ()):
            stored.setdefault(column, self.now())
        self.tables.setdefault(table, []).append(stored)
        return dict(stored)

    def rows(self, table: str, **filters: Any) -> List[Dict[str, Any]]:
        return [
            dict(r)
            for r in self.tables.get(table, [])
            if all(str(r.get(k)) == str(v) for k, v in filters.items())
        ]

    def get(self, table: str, row_id: Any) -> Optional[Dict[str, Any]]:
        found = self.rows(table, id=row_id)
        return found[0] if found else None


class FakeQuery:
    def __init__(self, store: FakeStore, table: str, token: Optional[str]):
        self._store = store
        self._table = table
        self._token = token
        self._op = "select"
        self._columns = "*"
        self._payload: Any = None
        self._on_conflict = "id"
        self._filters: List[Tuple[str, Any]] = []
        self._order: Optional[Tuple[str, bool]] = None
        self._limit: Optional[int] = None

    # ----- builder -----

    def select(self, columns: str = "*", count: Optional[str] = None) -> "FakeQuery":
        self._columns = columns
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self._op, self._payload = "insert", payload
        return self

    def update(self, values: Dict[str, Any]) -> "FakeQuery":
        self._op, self._payload = "update", values
        return self

    def upsert(self, payload: Any, on_conflict: str = "") -> "FakeQuery":
        self._op, self._payload = "upsert", payload
        self._on_conflict = on_conflict or "id"
        return self

    def delete(self) -> "FakeQuery":
        self._op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def limit(self, size: int) -> "FakeQuery":
        self._limit = size
        return self

    # ----- execution -----

    def execute(self) -> FakeResponse:
        self._store.calls.append(
            {
                "table": self._table,
                "op": self._op,
                "token": self._token,
                "payload": self._payload,
                "filters": list(self._filters),
            }
        )
        failure = self._store.failures.get((self._table, self._op))
        if failure is not None:
            raise failure
        if (self._table, self._op) in self._store.empty_results:
            return FakeResponse([])
        return FakeResponse(getattr(self, f"_run_{self._op}")())

    def _table_rows(self) -> List[Dict[str, Any]]:
        return self._store.tables.setdefault(self._table, [])

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(str(row.get(col)) == str(val) for col, val in self._filters)

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        plain = [c.strip() for c in EMBED.sub("", self._columns).split(",") if c.strip()]
        out = dict(row) if "*" in plain else {c: row.get(c) for c in plain}
        for relation, cols in EMBED.findall(self._columns):
            fk = RELATIONS[(self._table, relation)]
            target = next(
                (
                    r
                    for r in self._store.tables.get(relation, [])
                    if str(r.get("id")) == str(row.get(fk))
                ),
                None,
            )
            wanted = [c.strip() for c in cols.split(",") if c.strip()]
            out[relation] = None if target is None else {c: target.get(c) for c in wanted}
        return out

    def _run_select(self) -> List[Dict[str, Any]]:
        rows = [r for r in self._table_rows() if self._matches(r)]
        if self._order:
            column, desc = self._order
            rows.sort(key=lambda r: str(r.get(column) or ""), reverse=desc)
        if self._limit is not None:
            rows = rows[: self._limit]
        return [self._project(r) for r in rows]

    def _run_insert(self) -> List[Dict[str, Any]]:
        payload = self._payload if isinstance(self._payload, list) else [self._payload]
        return [self._store.insert(self._table, row) for row in payload]

    def _run_update(self) -> List[Dict[str, Any]]:
        updated = []
        for row in self._table_rows():
            if self._matches(row):
                row.update(self._payload)
                updated.append(dict(row))
        return updated

    def _run_delete(self) -> List[Dict[str, Any]]:
        rows = self._table_rows()
        removed = [dict(r) for r in rows if self._matches(r)]
        rows[:] = [r for r in rows if not self._matches(r)]
        return removed

    def _run_upsert(self) -> List[Dict[str, Any]]:
        payload = self._payload if isinstance(self._payload, list) else [self._payload]
        out = []
        for incoming in payload:
            key = self._on_conflict
            existing = next(
                (r for r in self._table_rows() if str(r.get(key)) == str(incoming.get(key))),
                None,
            )
            if existing is None:
                out.append(self._store.insert(self._table, incoming))
            else:
                existing.update(incoming)
                out.append(dict(existing))
        return out


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class FakeUser(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: str
    aud: str = "authenticated"
    role: str = "authenticated"
    app_metadata: Dict[str, Any] = Field(default_factory=dict)
    user_metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_sign_in_at: Optional[datetime] = None
    email_confirmed_at: Optional[datetime] = None


class FakeSession(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = 3600
    user: FakeUser


class FakeAuthResponse(BaseModel):
    user: Optional[FakeUser] = None
    session: Optional[FakeSession] = None


class FakeUserResponse(BaseModel):
    user: FakeUser


class FakeOAuthResponse(BaseModel):
    provider: str
    url: str


class FakeAuthAdmin:
    def __init__(self, auth: "FakeAuth"):
        self._auth = auth
        self.sign_outs: List[Tuple[str, str]] = []
        self.metadata_updates: List[Tuple[str, Dict[str, Any]]] = []

    def sign_out(self, jwt: str, scope: str = "global") -> None:
        self._auth.maybe_fail("admin.sign_out")
        user = self._auth.tokens.get(jwt)
        if user is None:
            raise FakeAuthApiError("invalid JWT", 401)
        self.sign_outs.append((jwt, scope))
        for token, owner in list(self._auth.tokens.items()):
            if owner.id == user.id:
                del self._auth.tokens[token]

    def update_user_by_id(self, uid: str, attributes: Dict[str, Any]) -> FakeUserResponse:
        self._auth.maybe_fail("admin.update_user_by_id")
        self.metadata_updates.append((uid, attributes))
        user = self._auth.by_id(uid)
        user.user_metadata.update(attributes.get("user_metadata") or {})
        return FakeUserResponse(user=user)


class FakeAuth:
    def __init__(self) -> None:
        self.users: Dict[str, Tuple[str, FakeUser]] = {}
        self.tokens: Dict[str, FakeUser] = {}
        self.failures: Dict[str, Exception] = {}
        self.sign_ups: List[Dict[str, Any]] = []
        self.otp_requests: List[Dict[str, Any]] = []
        self.oauth_requests: List[Dict[str, Any]] = []
        self.admin = FakeAuthAdmin(self)

    # ----- test helpers -----

    def maybe_fail(self, name: str) -> None:
        if name in self.failures:
            raise self.failures[name]

    def create_user(self, email: str, password: str = "secret123", **metadata: Any) -> FakeUser:
        user = FakeUser(email=email, user_metadata=dict(metadata))
        self.users[email] = (password, user)
        return user

    def issue_token(self, user: FakeUser) -> str:
        token = f"token-{uuid.uuid4().hex}"
        self.tokens[token] = user
        return token

    def by_id(self, uid: str) -> FakeUser:
        return next(user for _, user in self.users.values() if user.id == uid)

    # ----- supabase auth surface -----

    def sign_up(self, credentials: Dict[str, Any]) -> FakeAuthResponse:
        self.maybe_fail("sign_up")
        email = credentials["email"]
        if email in self.users:
            raise FakeAuthApiError("User already registered", 422)
        self.sign_ups.append(credentials)
        metadata = (credentials.get("options") or {}).get("data") or {}
        user = self.create_user(email, credentials["password"], **metadata)
        return FakeAuthResponse(user=user)

    def sign_in_with_password(self, credentials: Dict[str, Any]) -> FakeAuthResponse:
        self.maybe_fail("sign_in_with_password")
        entry = self.users.get(credentials["email"])
        if entry is None or entry[0] != credentials["password"]:
            raise FakeAuthApiError("Invalid login credentials", 400)
        user = entry[1]
        user.last_sign_in_at = datetime.now(timezone.utc)
        token = self.issue_token(user)
        session = FakeSession(access_token=token, refresh_token=f"refresh-{token}", user=user)
        return FakeAuthResponse(user=user, session=session)

    def sign_in_with_otp(self, credentials: Dict[str, Any]) -> FakeAuthResponse:
        self.maybe_fail("sign_in_with_otp")
        self.otp_requests.append(credentials)
        return FakeAuthResponse()

    def sign_in_with_oauth(self, credentials: Dict[str, Any]) -> FakeOAuthResponse:
        self.maybe_fail("sign_in_with_oauth")
        self.oauth_requests.append(credentials)
        query = urlencode(
            {
                "provider": credentials["provider"],
                "redirect_to": credentials["options"]["redirect_to"],
            }
        )
        return FakeOAuthResponse(
            provider=credentials["provider"],
            url=f"https://fake.supabase.co/auth/v1/authorize?{query}",
        )

    def get_user(self, jwt: Optional[str] = None) -> FakeUserResponse:
        user = self.tokens.get(jwt or "")
        if user is None:
            raise FakeAuthApiError("invalid JWT: unable to parse or verify signature", 403)
        return FakeUserResponse(user=user)


class FakeSupabase:
    """The pieces of `supabase.Client` the API touches."""

    def __init__(
        self,
        store: Optional[FakeStore] = None,
        auth: Optional[FakeAuth] = None,
        token: Optional[str] = None,
    ):
        self.store = store or FakeStore()
        self.auth = auth or FakeAuth()
        self.token = token

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self.store, name, self.token)

    from_ = table

    def scoped(self, token: str) -> "FakeSupabase":
        """Same data, acting with a caller's token (like the anon-key client)."""
        return FakeSupabase(self.store, self.auth, token)
