"""Conversion between client records (camelCase) and backend rows (snake_case).

The generic walkers rewrite keys at any depth. Teachers, events and
transport routes additionally need a per-entity reshaping:

* teachers keep eight flat ``can_*`` columns that the client sees as one
  nested ``permissions`` object;
* events keep one ``date_time`` column that the client sees as separate
  ``date`` and ``time`` strings;
* routes embed their ``bus_stops`` rows, which the client sees as ordered
  ``stops`` with ``name`` and ``time``.
"""
from __future__ import annotations

import re
from datetime import datetime
from typing import Any


class _Undefined:
    """Marker for a value that was never set; dropped from backend payloads."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()

_UPPER_RE = re.compile(r"[A-Z]")
_SNAKE_RE = re.compile(r"_([a-z])")


def camel_to_snake(key: str) -> str:
    return _UPPER_RE.sub(lambda m: "_" + m.group(0).lower(), key)


def snake_to_camel(key: str) -> str:
    return _SNAKE_RE.sub(lambda m: m.group(1).upper(), key)


def to_backend_shape(value: Any) -> Any:
    if isinstance(value, list):
        return [to_backend_shape(item) for item in value]
    if isinstance(value, dict):
        return {
            camel_to_snake(key): to_backend_shape(item)
            for key, item in value.items()
            if item is not UNDEFINED
        }
    return value


def to_client_shape(value: Any) -> Any:
    if isinstance(value, list):
        return [to_client_shape(item) for item in value]
    if isinstance(value, dict):
        return {snake_to_camel(key): to_client_shape(item) for key, item in value.items()}
    return value


# --- Teachers ---

# permission field (client, snake_case attribute) -> backend column
TEACHER_PERMISSION_COLUMNS: dict[str, str] = {
    "manage_students": "can_manage_students",
    "manage_teachers": "can_manage_teachers",
    "manage_announcements": "can_manage_announcements",
    "manage_events": "can_manage_events",
    "manage_exams": "can_create_exams",
    "manage_attendance": "can_manage_attendance",
    "view_all_results": "can_view_all_results",
    "full_admin_access": "full_admin_access",
}


def teacher_from_row(row: dict) -> dict:
    """Backend teacher row -> client shape with a complete nested permission set."""
    flat = dict(row)
    permissions = {
        field: bool(flat.pop(column, False))
        for field, column in TEACHER_PERMISSION_COLUMNS.items()
    }
    client = to_client_shape(flat)
    client["permissions"] = to_client_shape(permissions)
    return client


def teacher_to_row(data: dict) -> dict:
    """Client-shape teacher -> backend row with the flat permission columns."""
    payload = dict(data)
    permissions = payload.pop("permissions", None)
    row = to_backend_shape(payload)
    if permissions is not None and permissions is not UNDEFINED:
        flags = to_backend_shape(permissions)
        for field, column in TEACHER_PERMISSION_COLUMNS.items():
            row[column] = bool(flags.get(field, False))
    return row


# --- Events ---

def split_event_datetime(value: str | datetime) -> tuple[str, str]:
    """Return the calendar date (YYYY-MM-DD) and 24-hour time (HH:MM) of a stored value."""
    dt = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    return dt.date().isoformat(), dt.strftime("%H:%M")


def combine_event_datetime(date: str, time: str) -> str:
    """Join a date and HH:MM time into the single value stored by the backend."""
    dt = datetime.strptime(f"{date} {time}", "%Y-%m-%d %H:%M")
    return dt.strftime("%Y-%m-%dT%H:%M:00")


def event_from_row(row: dict) -> dict:
    client = to_client_shape(row)
    stored = client.pop("dateTime", None)
    if stored:
        client["date"], client["time"] = split_event_datetime(stored)
    return client


def event_to_row(data: dict) -> dict:
    payload = {k: v for k, v in data.items() if v is not UNDEFINED}
    date = payload.pop("date", None)
    time = payload.pop("time", None)
    if date and time:
        payload["dateTime"] = combine_event_datetime(date, time)
    elif date or time:
        raise ValueError("Event date and time must be provided together")
    return to_backend_shape(payload)


# --- Transport routes ---

def stops_to_rows(stops: list[dict], route_id: str) -> list[dict]:
    return [
        to_backend_shape({
            "stopName": stop["name"],
            "stopTime": stop["time"],
            "routeId": route_id,
            "position": index,
        })
        for index, stop in enumerate(stops)
    ]


def route_from_row(row: dict) -> dict:
    flat = dict(row)
    stop_rows = sorted(flat.pop("stops", None) or [], key=lambda s: s.get("position", 0))
    client = to_client_shape(flat)
    client["stops"] = [
        {"id": s.get("id"), "name": s.get("stop_name", ""), "time": s.get("stop_time", "")}
        for s in stop_rows
    ]
    return client
