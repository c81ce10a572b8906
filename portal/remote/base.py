"""Interface of the hosted data store and authentication service.

Domain access functions only talk to a :class:`RemoteClient`; the MongoDB
adapter in :mod:`portal.remote.mongo` is one implementation and the tests
use an in-memory one.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from portal.errors import TransportError
from portal.models.user import AuthIdentity, Session


@dataclass(frozen=True)
class Embed:
    """Join-fetch of child rows: ``rows[name] = table rows where foreign_key == parent id``."""

    name: str
    table: str
    foreign_key: str


class DataService(ABC):
    """Row-level CRUD per named table. Every failure raises TransportError."""

    @abstractmethod
    async def select(
        self,
        table: str,
        *,
        eq: Optional[dict[str, Any]] = None,
        in_: Optional[tuple[str, list]] = None,
        order: Optional[str] = None,
        descending: bool = False,
        embed: Optional[Embed] = None,
        columns: Optional[list[str]] = None,
    ) -> list[dict]:
        ...

    async def select_one(self, table: str, **kwargs) -> dict:
        """Exactly one row; raises TransportError(code="not_found") otherwise."""
        rows = await self.select(table, **kwargs)
        if not rows:
            raise TransportError(f"No row found in {table}", code="not_found")
        if len(rows) > 1:
            raise TransportError(f"Multiple rows found in {table}", code="multiple_rows")
        return rows[0]

    @abstractmethod
    async def insert(self, table: str, rows: list[dict]) -> list[dict]:
        ...

    @abstractmethod
    async def update(self, table: str, values: dict, *, eq: dict[str, Any]) -> list[dict]:
        ...

    @abstractmethod
    async def delete(self, table: str, *, eq: dict[str, Any]) -> int:
        ...

    @abstractmethod
    async def upsert(self, table: str, rows: list[dict], *, on_conflict: tuple[str, ...]) -> list[dict]:
        ...


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


AuthCallback = Callable[[AuthEvent, Optional[Session]], Awaitable[None]]


class Subscription:
    def __init__(self, listeners: list, callback: AuthCallback):
        self._listeners = listeners
        self._callback = callback

    def unsubscribe(self) -> None:
        if self._callback in self._listeners:
            self._listeners.remove(self._callback)


class AuthService(ABC):
    """Password sign-in and auth-state events for the current session."""

    def __init__(self):
        self._listeners: list[AuthCallback] = []
        self.session: Optional[Session] = None

    def on_auth_state_change(self, callback: AuthCallback) -> Subscription:
        self._listeners.append(callback)
        return Subscription(self._listeners, callback)

    async def _emit(self, event: AuthEvent, session: Optional[Session]) -> None:
        for callback in list(self._listeners):
            await callback(event, session)

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> Session:
        ...

    @abstractmethod
    async def sign_out(self) -> None:
        ...


class AdminAuthService(ABC):
    """Elevated channel for managing login identities (needs the service key)."""

    @abstractmethod
    async def create_user(self, email: str, password: str) -> AuthIdentity:
        ...

    @abstractmethod
    async def update_user_by_id(
        self, user_id: str, email: Optional[str] = None, password: Optional[str] = None
    ) -> AuthIdentity:
        ...

    @abstractmethod
    async def delete_user(self, user_id: str) -> None:
        ...


@dataclass
class RemoteClient:
    db: DataService
    auth: AuthService
    admin: AdminAuthService


def first_row(rows: list[dict], table: str) -> dict:
    """The single row returned by a write; TransportError when the target was missing."""
    if not rows:
        raise TransportError(f"No row found in {table}", code="not_found")
    return rows[0]
