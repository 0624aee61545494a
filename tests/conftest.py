import re
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from wayne_rm.database.supabase_client import get_supabase, get_service_supabase
from wayne_rm.modules.auth.service import clear_auth_cache


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def _as_datetime(value):
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _compare(left, right):
    """-1/0/1, comparing timestamps as datetimes and everything else natively"""
    l_dt, r_dt = _as_datetime(left), _as_datetime(right)
    if isinstance(left, str) and isinstance(right, str) and l_dt and r_dt:
        left, right = l_dt, r_dt
    return (left > right) - (left < right)


def _sort_key(value):
    if isinstance(value, str):
        return _as_datetime(value) or value
    return value


def _ilike(value, pattern):
    """Case-insensitive LIKE: % (or PostgREST's *) and _ are wildcards unless backslash-escaped"""
    if value is None:
        return False
    regex, escaped = "", False
    for ch in pattern:
        if escaped:
            regex += re.escape(ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch in "%*":
            regex += ".*"
        elif ch == "_":
            regex += "."
        else:
            regex += re.escape(ch)
    return re.fullmatch(regex, str(value), re.IGNORECASE | re.DOTALL) is not None


def _split_top_level(expr):
    parts, depth, current = [], 0, ""
    for ch in expr:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append(current)
            current = ""
        else:
            current += ch
    if current:
        parts.append(current)
    return parts


def _or_clause(clause):
    column, op, value = clause.split(".", 2)
    if op == "in":
        values = set(value.strip("()").split(","))
        return lambda row: str(row.get(column)) in values
    if op == "ilike":
        return lambda row: _ilike(row.get(column), value)
    if op == "eq":
        return lambda row: str(row.get(column)) == value
    raise NotImplementedError(op)


class FakeQuery:
    """Chainable subset of the PostgREST query builder used by the services"""

    def __init__(self, db, table):
        self.db = db
        self.table_name = table
        self.mode = "select"
        self.columns = "*"
        self.count_mode = None
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.order_by = []
        self.bounds = None
        self.max_rows = None

    # Operations
    def select(self, columns="*", count=None):
        self.columns = columns
        self.count_mode = count
        return self

    def insert(self, rows):
        self.mode, self.payload = "insert", rows
        return self

    def update(self, values):
        self.mode, self.payload = "update", values
        return self

    def upsert(self, rows, on_conflict="id"):
        self.mode, self.payload, self.on_conflict = "upsert", rows, on_conflict
        return self

    def delete(self):
        self.mode = "delete"
        return self

    # Filters
    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and _compare(row[column], value) >= 0)
        return self

    def lte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and _compare(row[column], value) <= 0)
        return self

    def ilike(self, column, pattern):
        self.filters.append(lambda row: _ilike(row.get(column), pattern))
        return self

    def or_(self, expr):
        clauses = [_or_clause(c) for c in _split_top_level(expr)]
        self.filters.append(lambda row: any(c(row) for c in clauses))
        return self

    def order(self, column, desc=False):
        self.order_by.append((column, desc))
        return self

    def range(self, start, end):
        self.bounds = (start, end)
        return self

    def limit(self, n):
        self.max_rows = n
        return self

    # Execution
    def _matching(self):
        return [row for row in self.db.rows(self.table_name) if all(f(row) for f in self.filters)]

    def _project(self, row):
        if self.columns.strip() == "*":
            return dict(row)
        wanted = [c.strip() for c in self.columns.split(",")]
        return {c: row.get(c) for c in wanted}

    def _with_defaults(self, row):
        row = dict(row)
        row.setdefault("id", str(uuid.uuid4()))
        if self.table_name == "access_logs":
            row.setdefault("timestamp", _now_iso())
        else:
            row.setdefault("created_at", _now_iso())
        return row

    def execute(self):
        self.db.calls.append((self.table_name, self.mode))
        if self.table_name in self.db.fail_tables:
            raise Exception(f"relation \"{self.table_name}\" is unavailable")

        table = self.db.rows(self.table_name)

        if self.mode == "insert":
            rows = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = [self._with_defaults(r) for r in rows]
            table.extend(inserted)
            return SimpleNamespace(data=[dict(r) for r in inserted], count=None)

        if self.mode == "upsert":
            rows = self.payload if isinstance(self.payload, list) else [self.payload]
            saved = []
            for r in rows:
                existing = next((t for t in table if t.get(self.on_conflict) == r.get(self.on_conflict)), None)
                if existing is not None:
                    existing.update(r)
                    saved.append(dict(existing))
                else:
                    new_row = self._with_defaults(r)
                    table.append(new_row)
                    saved.append(dict(new_row))
            return SimpleNamespace(data=saved, count=None)

        if self.mode == "update":
            matched = self._matching()
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=[dict(r) for r in matched], count=None)

        if self.mode == "delete":
            matched = self._matching()
            self.db.tables[self.table_name] = [r for r in table if r not in matched]
            return SimpleNamespace(data=[dict(r) for r in matched], count=None)

        rows = self._matching()
        for column, desc in reversed(self.order_by):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: _sort_key(r[column]), reverse=desc)
            rows = present + missing
        total = len(rows)
        if self.bounds is not None:
            rows = rows[self.bounds[0]:self.bounds[1] + 1]
        if self.max_rows is not None:
            rows = rows[:self.max_rows]
        if self.db.row_cap is not None:
            rows = rows[:self.db.row_cap]
        return SimpleNamespace(
            data=[self._project(r) for r in rows],
            count=total if self.count_mode == "exact" else None
        )


class FakeAdmin:
    def __init__(self, auth):
        self.auth = auth
        self.password_updates = []

    def update_user_by_id(self, user_id, attributes):
        self.password_updates.append((user_id, attributes))
        user = self.auth.users.get(user_id)
        return SimpleNamespace(user=user)

    def list_users(self, page=1, per_page=50):
        users = list(self.auth.users.values())
        start = (page - 1) * per_page
        return users[start:start + per_page]

    def create_user(self, attributes):
        if attributes["email"] in self.auth.fail_create:
            raise Exception("Database error creating new user")
        user = self.auth.add_user(attributes["email"], attributes.get("user_metadata"))
        return SimpleNamespace(user=user)


class FakeAuth:
    def __init__(self):
        self.users = {}
        self.tokens = {}
        self.passwords = {}
        self.reset_requests = []
        self.sign_up_calls = []
        self.fail_create = set()
        self.admin = FakeAdmin(self)

    def add_user(self, email, user_metadata=None, user_id=None):
        user = SimpleNamespace(
            id=user_id or str(uuid.uuid4()),
            email=email,
            user_metadata=user_metadata or {},
            app_metadata={}
        )
        self.users[user.id] = user
        return user

    def issue_token(self, user):
        token = f"token-{user.id}"
        self.tokens[token] = user
        return token

    def _session(self, user):
        return SimpleNamespace(access_token=self.issue_token(user), refresh_token=f"refresh-{user.id}")

    def sign_up(self, credentials):
        self.sign_up_calls.append(credentials)
        email = credentials["email"]
        if any(u.email == email for u in self.users.values()):
            raise Exception("User already registered")
        user = self.add_user(email, credentials["options"]["data"])
        self.passwords[email] = credentials["password"]
        return SimpleNamespace(user=user, session=None)

    def sign_in_with_password(self, credentials):
        email = credentials["email"]
        if self.passwords.get(email) != credentials["password"]:
            raise Exception("Invalid login credentials")
        user = next(u for u in self.users.values() if u.email == email)
        return SimpleNamespace(user=user, session=self._session(user))

    def get_user(self, jwt=None):
        user = self.tokens.get(jwt)
        if user is None:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=user)

    def sign_out(self):
        return None

    def reset_password_for_email(self, email, options=None):
        self.reset_requests.append((email, options))

    def verify_otp(self, params):
        if params["token"] != "123456":
            raise Exception("Token has expired or is invalid")
        user = next((u for u in self.users.values() if u.email == params["email"]), None)
        if user is None:
            user = self.add_user(params["email"])
        return SimpleNamespace(user=user, session=self._session(user))


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, content, file_options=None):
        self.storage.objects[(self.name, path)] = (content, file_options)
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://storage.test/{self.name}/{path}"


class FakeStorage:
    def __init__(self):
        self.objects = {}

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeSupabase:
    """In-memory stand-in for supabase.Client"""

    def __init__(self):
        self.tables = {}
        self.calls = []
        self.fail_tables = set()
        # Server-side max-rows, as PostgREST applies to every response
        self.row_cap = None
        self.auth = FakeAuth()
        self.storage = FakeStorage()

    def rows(self, table):
        return self.tables.setdefault(table, [])

    def table(self, name):
        return FakeQuery(self, name)

    def add(self, table, **row):
        row.setdefault("id", str(uuid.uuid4()))
        if table == "access_logs":
            row.setdefault("timestamp", _now_iso())
        else:
            row.setdefault("created_at", _now_iso())
        self.rows(table).append(row)
        return row

    def add_user(self, role="funcionario", full_name=None, email=None):
        """Auth user + profile row; returns (user_id, auth headers)"""
        user = self.auth.add_user(email or f"{uuid.uuid4().hex[:8]}@wayne.app.br")
        self.add(
            "profiles",
            user_id=user.id,
            full_name=full_name if full_name is not None else f"{role.capitalize()} Test",
            role=role,
            avatar_url=None,
        )
        return user.id, {"Authorization": f"Bearer {self.auth.issue_token(user)}"}


@pytest.fixture(autouse=True)
def _reset_auth_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def app(db):
    from wayne_rm.main import app, limiter

    limiter.reset()
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    yield app
    app.dependency_overrides.clear()
    limiter.reset()


@pytest.fixture
def client(app):
    return TestClient(app)
