import asyncio
import copy
import os
import uuid
from collections import defaultdict

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("SERVICE_ROLE_KEY", "test-service-key")
os.environ.setdefault("ADMIN_PASSWORD", "")

import pytest
from fastapi.testclient import TestClient

from portal.errors import AuthIdentityError, TransportError
from portal.main import create_app
from portal.models.user import AuthIdentity, Session
from portal.remote.base import AdminAuthService, AuthEvent, AuthService, DataService, RemoteClient
from portal.remote.mongo import CASCADES, UNIQUE_KEYS
from portal.security import create_access_token
from portal.storage import LocalStorage
from portal.store import Store


class FakeDataService(DataService):
    """In-memory tables with the same unique keys and cascades as the MongoDB adapter."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = defaultdict(list)
        self.fail: dict[tuple[str, str], TransportError] = {}
        self.calls: list[tuple[str, str]] = []

    def _check(self, op: str, table: str) -> None:
        self.calls.append((op, table))
        error = self.fail.get((op, table))
        if error is not None:
            raise error

    @staticmethod
    def _matches(row: dict, eq: dict | None) -> bool:
        return all(row.get(k) == v for k, v in (eq or {}).items())

    def _conflicts(self, table: str, row: dict, ignore_id: str | None = None) -> bool:
        for keys in UNIQUE_KEYS.get(table, []):
            for other in self.tables[table]:
                if other["id"] != ignore_id and all(other.get(k) == row.get(k) for k in keys):
                    return True
        return False

    async def select(self, table, *, eq=None, in_=None, order=None, descending=False, embed=None, columns=None):
        self._check("select", table)
        rows = [copy.deepcopy(r) for r in self.tables[table] if self._matches(r, eq)]
        if in_:
            field, values = in_
            rows = [r for r in rows if r.get(field) in values]
        if order:
            rows.sort(key=lambda r: r.get(order) or "", reverse=descending)
        if embed:
            for row in rows:
                row[embed.name] = [
                    copy.deepcopy(c) for c in self.tables[embed.table] if c.get(embed.foreign_key) == row["id"]
                ]
        if columns:
            rows = [{c: r.get(c) for c in columns} for r in rows]
        return rows

    async def insert(self, table, rows):
        self._check("insert", table)
        docs = [{**row, "id": row.get("id") or str(uuid.uuid4())} for row in rows]
        for doc in docs:
            if self._conflicts(table, doc):
                raise TransportError(f"Duplicate value violates a unique key on {table}", code="conflict")
        self.tables[table].extend(copy.deepcopy(docs))
        return docs

    async def update(self, table, values, *, eq):
        self._check("update", table)
        changes = {k: v for k, v in values.items() if k != "id"}
        matched = [r for r in self.tables[table] if self._matches(r, eq)]
        for row in matched:
            row.update(changes)
        return [copy.deepcopy(r) for r in matched]

    async def delete(self, table, *, eq):
        self._check("delete", table)
        doomed = [r for r in self.tables[table] if self._matches(r, eq)]
        ids = {r["id"] for r in doomed}
        for child_table, foreign_key in CASCADES.get(table, []):
            self.tables[child_table] = [c for c in self.tables[child_table] if c.get(foreign_key) not in ids]
        self.tables[table] = [r for r in self.tables[table] if r["id"] not in ids]
        return len(doomed)

    async def upsert(self, table, rows, *, on_conflict):
        self._check("upsert", table)
        saved = []
        for row in rows:
            key = {field: row[field] for field in on_conflict}
            existing = next((r for r in self.tables[table] if self._matches(r, key)), None)
            if existing is None:
                existing = {"id": row.get("id") or str(uuid.uuid4())}
                self.tables[table].append(existing)
            existing.update({k: v for k, v in row.items() if k != "id"})
            saved.append(copy.deepcopy(existing))
        return saved


class FakeIdentities:
    def __init__(self):
        self.by_id: dict[str, dict] = {}

    def find_email(self, email: str) -> dict | None:
        return next((i for i in self.by_id.values() if i["email"] == email), None)


class FakeAuth(AuthService):
    def __init__(self, identities: FakeIdentities):
        super().__init__()
        self.identities = identities
        self.sign_in_calls: list[str] = []

    async def sign_in_with_password(self, email, password):
        self.sign_in_calls.append(email)
        identity = self.identities.find_email(email)
        if not identity or identity["password"] != password:
            raise TransportError("Invalid login credentials", code="invalid_credentials")
        self.session = Session(
            access_token=create_access_token(identity["id"], email), user_id=identity["id"], email=email
        )
        await self._emit(AuthEvent.SIGNED_IN, self.session)
        return self.session

    async def sign_out(self):
        self.session = None
        await self._emit(AuthEvent.SIGNED_OUT, None)


class FakeAdmin(AdminAuthService):
    def __init__(self, identities: FakeIdentities, db: FakeDataService):
        self.identities = identities
        self.db = db
        self.created: list[str] = []
        self.updated: list[tuple[str, str | None, str | None]] = []
        self.deleted: list[str] = []
        self.fail_delete: AuthIdentityError | None = None

    async def create_user(self, email, password):
        if self.identities.find_email(email):
            raise AuthIdentityError(
                "A user with this email address has already been registered", code="email_exists"
            )
        identity = {"id": str(uuid.uuid4()), "email": email, "password": password}
        self.identities.by_id[identity["id"]] = identity
        self.created.append(identity["id"])
        return AuthIdentity(id=identity["id"], email=email)

    async def update_user_by_id(self, user_id, email=None, password=None):
        self.updated.append((user_id, email, password))
        identity = self.identities.by_id.get(user_id)
        if identity is None:
            raise AuthIdentityError("User not found", code="not_found")
        if email:
            identity["email"] = email
        if password:
            identity["password"] = password
        return AuthIdentity(id=user_id, email=identity["email"])

    async def delete_user(self, user_id):
        self.deleted.append(user_id)
        if self.fail_delete is not None:
            raise self.fail_delete
        if self.identities.by_id.pop(user_id, None) is None:
            raise AuthIdentityError("User not found", code="not_found")
        self.db.tables["profiles"] = [p for p in self.db.tables["profiles"] if p["id"] != user_id]


def make_remote() -> RemoteClient:
    identities = FakeIdentities()
    db = FakeDataService()
    return RemoteClient(db=db, auth=FakeAuth(identities), admin=FakeAdmin(identities, db))


def add_login(remote: RemoteClient, *, email: str, password: str, username: str, full_name: str, role: str) -> str:
    """Seed an identity plus its profile directly, bypassing provisioning."""
    user_id = str(uuid.uuid4())
    remote.admin.identities.by_id[user_id] = {"id": user_id, "email": email, "password": password}
    remote.db.tables["profiles"].append({"id": user_id, "username": username, "full_name": full_name, "role": role})
    return user_id


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def remote():
    return make_remote()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "storage.json")


@pytest.fixture
def store(storage):
    return Store(storage)


@pytest.fixture
def admin_login(remote):
    from portal.config import settings

    return add_login(
        remote,
        email=settings.admin_email,
        password="principal-pass",
        username=settings.admin_username,
        full_name="Principal",
        role="admin",
    )


@pytest.fixture
def api(remote, storage, admin_login):
    app = create_app(remote=remote, storage=storage)
    with TestClient(app) as client:
        yield client


def login(api: TestClient, username: str, password: str):
    """Sign in and send the issued bearer token on later requests."""
    resp = api.post("/api/auth/login", json={"username": username, "password": password})
    if resp.status_code == 200:
        api.headers["Authorization"] = f"Bearer {resp.json()['access_token']}"
    else:
        api.headers.pop("Authorization", None)
    return resp


def logout(api: TestClient):
    resp = api.post("/api/auth/logout")
    api.headers.pop("Authorization", None)
    return resp
