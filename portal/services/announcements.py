"""Announcement access and audience helpers."""
from __future__ import annotations

from datetime import date

from portal.models.notice import Announcement, AnnouncementCreate, AnnouncementUpdate
from portal.models.user import Role
from portal.remote.base import RemoteClient, first_row
from portal.services.mapping import to_backend_shape, to_client_shape

TABLE = "announcements"

_AUDIENCE_BY_ROLE = {
    Role.ADMIN: None,
    Role.TEACHER: {"All", "Teachers"},
    Role.STUDENT: {"All", "Students", "Parents"},
}


async def list_announcements(client: RemoteClient) -> list[Announcement]:
    """Most recent first."""
    rows = await client.db.select(TABLE, order="date", descending=True)
    return [Announcement.model_validate(to_client_shape(row)) for row in rows]


async def add_announcement(client: RemoteClient, data: AnnouncementCreate) -> Announcement:
    payload = data.to_client()
    if not payload.get("date"):
        payload["date"] = date.today().isoformat()
    rows = await client.db.insert(TABLE, [to_backend_shape(payload)])
    return Announcement.model_validate(to_client_shape(first_row(rows, TABLE)))


async def update_announcement(client: RemoteClient, announcement_id: str, data: AnnouncementUpdate) -> Announcement:
    rows = await client.db.update(
        TABLE, to_backend_shape(data.to_client(exclude_unset=True)), eq={"id": announcement_id}
    )
    return Announcement.model_validate(to_client_shape(first_row(rows, TABLE)))


async def delete_announcement(client: RemoteClient, announcement_id: str) -> None:
    await client.db.delete(TABLE, eq={"id": announcement_id})


def visible_announcements(announcements: list[Announcement], role: Role | None) -> list[Announcement]:
    """Announcements a role may read; anonymous visitors only see those for everyone."""
    if role is None:
        return [a for a in announcements if a.target_audience == "All"]
    audiences = _AUDIENCE_BY_ROLE[role]
    if audiences is None:
        return list(announcements)
    return [a for a in announcements if a.target_audience in audiences]
