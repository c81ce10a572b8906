"""Teacher records, their logins and permission flags."""
from __future__ import annotations

import logging

from portal.errors import PortalError, ValidationError
from portal.models.teacher import Teacher, TeacherCreate, TeacherUpdate
from portal.models.user import PermissionSet, Role
from portal.remote.base import RemoteClient, first_row
from portal.services.mapping import teacher_from_row, teacher_to_row
from portal.services.provisioning import provision_login

logger = logging.getLogger(__name__)

TABLE = "teachers"


async def list_teachers(client: RemoteClient) -> list[Teacher]:
    rows = await client.db.select(TABLE)
    return [Teacher.model_validate(teacher_from_row(row)) for row in rows]


async def get_teacher_permissions(client: RemoteClient, user_id: str) -> PermissionSet | None:
    """Permissions of the teacher linked to a login, if any."""
    rows = await client.db.select(TABLE, eq={"user_id": user_id})
    if not rows:
        return None
    return Teacher.model_validate(teacher_from_row(rows[0])).permissions


async def add_teacher(client: RemoteClient, data: TeacherCreate) -> Teacher:
    if not data.email or not data.password:
        raise ValidationError("Email and password are required to create a new teacher login.")

    public = data.to_client(exclude={"password"})
    result = await provision_login(
        client,
        email=data.email,
        password=data.password,
        table=TABLE,
        build_row=lambda user_id: teacher_to_row({**public, "userId": user_id}),
        username=data.username,
        full_name=data.full_name,
        role=Role.TEACHER,
    )
    return Teacher.model_validate(teacher_from_row(result.record))


async def update_teacher(client: RemoteClient, teacher: Teacher, data: TeacherUpdate) -> Teacher:
    changes = data.to_client(exclude_unset=True)
    password = changes.pop("password", None)
    email_changed = data.email is not None and data.email != teacher.email
    if password or email_changed:
        if not teacher.user_id:
            raise ValidationError("This teacher has no login to update.")
        await client.admin.update_user_by_id(
            teacher.user_id, email=data.email if email_changed else None, password=password
        )

    rows = await client.db.update(TABLE, teacher_to_row(changes), eq={"id": teacher.id})
    updated = Teacher.model_validate(teacher_from_row(first_row(rows, TABLE)))

    if teacher.user_id and ("username" in changes or "fullName" in changes):
        await client.db.update(
            "profiles",
            {"username": updated.username, "full_name": updated.full_name},
            eq={"id": teacher.user_id},
        )
    return updated


async def delete_teacher(client: RemoteClient, teacher: Teacher) -> None:
    """Delete the record, then its login. A failed login delete leaves an orphaned credential."""
    await client.db.delete(TABLE, eq={"id": teacher.id})
    if teacher.user_id:
        try:
            await client.admin.delete_user(teacher.user_id)
        except PortalError as e:
            logger.error(f"Teacher {teacher.id} deleted but login {teacher.user_id} remains: {e}")
            raise
