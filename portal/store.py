"""Application state: a pure reducer over a closed set of actions, plus the store that owns it.

The store mirrors the remote collections. Callers perform I/O through the
domain access functions first and dispatch only after the call succeeded;
transitions themselves never touch the network.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

import pydantic
from pydantic import BaseModel, Field

from portal.errors import PortalError
from portal.models import (
    Announcement,
    AttendanceRecord,
    Exam,
    Result,
    SchoolEvent,
    Student,
    Teacher,
    TransportRoute,
    User,
)
from portal.remote.base import AuthEvent, RemoteClient, Subscription
from portal.services.announcements import list_announcements
from portal.services.auth import load_user
from portal.services.events import list_events
from portal.services.exams import list_exams
from portal.services.records import list_results
from portal.services.students import list_students
from portal.services.teachers import list_teachers
from portal.services.transport import list_routes
from portal.storage import LocalStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "mmps-app-state"


class ActionType(str, Enum):
    SET_INITIAL_DATA = "SET_INITIAL_DATA"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    ADD_STUDENT = "ADD_STUDENT"
    UPDATE_STUDENT = "UPDATE_STUDENT"
    DELETE_STUDENT = "DELETE_STUDENT"
    ADD_TEACHER = "ADD_TEACHER"
    UPDATE_TEACHER = "UPDATE_TEACHER"
    DELETE_TEACHER = "DELETE_TEACHER"
    ADD_ANNOUNCEMENT = "ADD_ANNOUNCEMENT"
    UPDATE_ANNOUNCEMENT = "UPDATE_ANNOUNCEMENT"
    DELETE_ANNOUNCEMENT = "DELETE_ANNOUNCEMENT"
    ADD_EVENT = "ADD_EVENT"
    UPDATE_EVENT = "UPDATE_EVENT"
    DELETE_EVENT = "DELETE_EVENT"
    ADD_ROUTE = "ADD_ROUTE"
    UPDATE_ROUTE = "UPDATE_ROUTE"
    DELETE_ROUTE = "DELETE_ROUTE"
    ADD_EXAM = "ADD_EXAM"
    UPDATE_EXAM = "UPDATE_EXAM"
    DELETE_EXAM = "DELETE_EXAM"
    SAVE_ATTENDANCE = "SAVE_ATTENDANCE"
    SAVE_RESULTS = "SAVE_RESULTS"


@dataclass(frozen=True)
class Action:
    type: ActionType
    payload: Any = None


class AppState(BaseModel):
    user: Optional[User] = None
    students: list[Student] = Field(default_factory=list)
    teachers: list[Teacher] = Field(default_factory=list)
    announcements: list[Announcement] = Field(default_factory=list)
    events: list[SchoolEvent] = Field(default_factory=list)
    transport_routes: list[TransportRoute] = Field(default_factory=list)
    exams: list[Exam] = Field(default_factory=list)
    results: list[Result] = Field(default_factory=list)
    attendance: dict[str, list[AttendanceRecord]] = Field(default_factory=dict)
    app_ready: bool = False


# collections filled by SET_INITIAL_DATA, with the list call that loads each
LOADERS: tuple[tuple[str, Callable], ...] = (
    ("students", list_students),
    ("teachers", list_teachers),
    ("announcements", list_announcements),
    ("events", list_events),
    ("transport_routes", list_routes),
    ("exams", list_exams),
    ("results", list_results),
)
INITIAL_COLLECTIONS = {name for name, _ in LOADERS} | {"attendance"}

_RECORD_ACTIONS: dict[ActionType, tuple[str, str]] = {
    ActionType.ADD_STUDENT: ("students", "add"),
    ActionType.UPDATE_STUDENT: ("students", "update"),
    ActionType.DELETE_STUDENT: ("students", "delete"),
    ActionType.ADD_TEACHER: ("teachers", "add"),
    ActionType.UPDATE_TEACHER: ("teachers", "update"),
    ActionType.DELETE_TEACHER: ("teachers", "delete"),
    ActionType.ADD_ANNOUNCEMENT: ("announcements", "add"),
    ActionType.UPDATE_ANNOUNCEMENT: ("announcements", "update"),
    ActionType.DELETE_ANNOUNCEMENT: ("announcements", "delete"),
    ActionType.ADD_EVENT: ("events", "add"),
    ActionType.UPDATE_EVENT: ("events", "update"),
    ActionType.DELETE_EVENT: ("events", "delete"),
    ActionType.ADD_ROUTE: ("transport_routes", "add"),
    ActionType.UPDATE_ROUTE: ("transport_routes", "update"),
    ActionType.DELETE_ROUTE: ("transport_routes", "delete"),
    ActionType.ADD_EXAM: ("exams", "add"),
    ActionType.UPDATE_EXAM: ("exams", "update"),
    ActionType.DELETE_EXAM: ("exams", "delete"),
}

# newest first
_PREPENDED = {"announcements", "events"}


def _apply_record_action(items: list, collection: str, op: str, payload: Any) -> list:
    if op == "add":
        return [payload, *items] if collection in _PREPENDED else [*items, payload]
    if op == "update":
        return [payload if item.id == payload.id else item for item in items]
    return [item for item in items if item.id != payload]


def reduce(state: AppState, action: Action) -> AppState:
    """Return the state after `action`; `state` itself is never modified."""
    kind = action.type

    if kind == ActionType.SET_INITIAL_DATA:
        data = action.payload or {}
        changes: dict[str, Any] = {
            name: (dict(value) if name == "attendance" else list(value))
            for name, value in data.items()
            if name in INITIAL_COLLECTIONS
        }
        return state.model_copy(update={**changes, "app_ready": True})

    if kind == ActionType.LOGIN:
        return state.model_copy(update={"user": action.payload})

    if kind == ActionType.LOGOUT:
        return state.model_copy(update={"user": None})

    if kind in _RECORD_ACTIONS:
        collection, op = _RECORD_ACTIONS[kind]
        items = _apply_record_action(getattr(state, collection), collection, op, action.payload)
        return state.model_copy(update={collection: items})

    if kind == ActionType.SAVE_ATTENDANCE:
        date = action.payload["date"]
        records = list(action.payload["records"])
        return state.model_copy(update={"attendance": {**state.attendance, date: records}})

    if kind == ActionType.SAVE_RESULTS:
        incoming = list(action.payload)
        keys = {(r.student_id, r.exam_id) for r in incoming}
        kept = [r for r in state.results if (r.student_id, r.exam_id) not in keys]
        return state.model_copy(update={"results": kept + incoming})

    raise ValueError(f"Unsupported action: {kind}")


def teacher_for_user(state: AppState, user_id: str) -> Optional[Teacher]:
    return next((t for t in state.teachers if t.user_id == user_id), None)


def student_for_user(state: AppState, user_id: str) -> Optional[Student]:
    return next((s for s in state.students if s.user_id == user_id), None)


Listener = Callable[[AppState, Action], None]


class Store:
    """Owns the current AppState; pass it to whoever needs to read or dispatch."""

    def __init__(self, storage: Optional[LocalStorage] = None):
        self.state = AppState()
        self._storage = storage
        self._listeners: list[Listener] = []
        self._auth_subscription: Optional[Subscription] = None

    def dispatch(self, action: Action) -> AppState:
        self.state = reduce(self.state, action)
        if self._storage is not None:
            if action.type == ActionType.LOGIN:
                self._storage.set_item(STORAGE_KEY, {"user": action.payload.to_client(mode="json")})
            elif action.type == ActionType.LOGOUT:
                self._storage.remove_item(STORAGE_KEY)
        for listener in list(self._listeners):
            listener(self.state, action)
        return self.state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def restore_user(self) -> Optional[User]:
        """Log in the persisted identity without asking the auth service.

        The backend session may have expired meanwhile; that only shows on the
        next authenticated call. HTTP routes never read this user: they
        authenticate each request from its bearer token.
        """
        if self._storage is None:
            return None
        stored = self._storage.get_item(STORAGE_KEY)
        if not stored or not stored.get("user"):
            return None
        try:
            user = User.model_validate(stored["user"])
        except pydantic.ValidationError as e:
            logger.warning(f"Discarding unreadable persisted user: {e}")
            self._storage.remove_item(STORAGE_KEY)
            return None
        self.dispatch(Action(ActionType.LOGIN, user))
        return user

    async def initialize(self, client: RemoteClient) -> AppState:
        """Load every collection concurrently and mark the store ready once."""
        outcomes = await asyncio.gather(
            *(loader(client) for _, loader in LOADERS), return_exceptions=True
        )
        data: dict[str, list] = {}
        for (name, _), outcome in zip(LOADERS, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Initial load of {name} failed: {outcome}")
                data[name] = []
            else:
                data[name] = outcome
        return self.dispatch(Action(ActionType.SET_INITIAL_DATA, data))

    def bind_auth(self, client: RemoteClient) -> Subscription:
        """Follow sign-in/sign-out events of the auth service."""

        async def on_auth_change(event: AuthEvent, session) -> None:
            if event == AuthEvent.SIGNED_IN and session is not None:
                try:
                    user = await load_user(client, session.user_id)
                except (PortalError, pydantic.ValidationError) as e:
                    logger.error(f"Signed in as {session.user_id} but profile lookup failed: {e}")
                    return
                self.dispatch(Action(ActionType.LOGIN, user))
            elif event == AuthEvent.SIGNED_OUT:
                self.dispatch(Action(ActionType.LOGOUT))

        self.unbind_auth()
        self._auth_subscription = client.auth.on_auth_state_change(on_auth_change)
        return self._auth_subscription

    def unbind_auth(self) -> None:
        if self._auth_subscription is not None:
            self._auth_subscription.unsubscribe()
            self._auth_subscription = None
