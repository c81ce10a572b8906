from __future__ import annotations

from portal.errors import ValidationError
from portal.models.notice import SchoolEvent, SchoolEventCreate, SchoolEventUpdate
from portal.remote.base import RemoteClient, first_row
from portal.services.mapping import event_from_row, event_to_row

TABLE = "events"


def _event_row(payload: dict) -> dict:
    try:
        return event_to_row(payload)
    except ValueError as e:
        raise ValidationError(f"Invalid event date/time: {e}") from e


async def list_events(client: RemoteClient) -> list[SchoolEvent]:
    rows = await client.db.select(TABLE, order="date_time")
    return [SchoolEvent.model_validate(event_from_row(row)) for row in rows]


async def add_event(client: RemoteClient, data: SchoolEventCreate) -> SchoolEvent:
    rows = await client.db.insert(TABLE, [_event_row(data.to_client())])
    return SchoolEvent.model_validate(event_from_row(first_row(rows, TABLE)))


async def update_event(client: RemoteClient, event_id: str, data: SchoolEventUpdate) -> SchoolEvent:
    rows = await client.db.update(TABLE, _event_row(data.to_client(exclude_unset=True)), eq={"id": event_id})
    return SchoolEvent.model_validate(event_from_row(first_row(rows, TABLE)))


async def delete_event(client: RemoteClient, event_id: str) -> None:
    await client.db.delete(TABLE, eq={"id": event_id})
