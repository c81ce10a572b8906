"""Student records and their logins."""
from __future__ import annotations

import logging

from portal.errors import PortalError, ValidationError
from portal.models.student import Student, StudentCreate, StudentUpdate
from portal.models.user import Role
from portal.remote.base import RemoteClient, first_row
from portal.services.mapping import to_backend_shape, to_client_shape
from portal.services.provisioning import provision_login

logger = logging.getLogger(__name__)

TABLE = "students"


async def list_students(client: RemoteClient) -> list[Student]:
    rows = await client.db.select(TABLE)
    return [Student.model_validate(to_client_shape(row)) for row in rows]


async def add_student(client: RemoteClient, data: StudentCreate) -> Student:
    if not data.email or not data.password:
        raise ValidationError("Email and password are required to create a new student login.")

    public = data.to_client(exclude={"password"})
    result = await provision_login(
        client,
        email=data.email,
        password=data.password,
        table=TABLE,
        build_row=lambda user_id: to_backend_shape({**public, "userId": user_id}),
        username=data.roll_number,
        full_name=data.full_name,
        role=Role.STUDENT,
    )
    return Student.model_validate(to_client_shape(result.record))


async def update_student(client: RemoteClient, student: Student, data: StudentUpdate) -> Student:
    changes = data.to_client(exclude_unset=True)
    password = changes.pop("password", None)
    email_changed = data.email is not None and data.email != student.email
    if password or email_changed:
        if not student.user_id:
            raise ValidationError("This student has no login to update.")
        await client.admin.update_user_by_id(
            student.user_id, email=data.email if email_changed else None, password=password
        )

    rows = await client.db.update(TABLE, to_backend_shape(changes), eq={"id": student.id})
    updated = Student.model_validate(to_client_shape(first_row(rows, TABLE)))

    if student.user_id and ("rollNumber" in changes or "fullName" in changes):
        await client.db.update(
            "profiles",
            {"username": updated.roll_number, "full_name": updated.full_name},
            eq={"id": student.user_id},
        )
    return updated


async def delete_student(client: RemoteClient, student: Student) -> None:
    """Delete the record, then its login. A failed login delete leaves an orphaned credential."""
    await client.db.delete(TABLE, eq={"id": student.id})
    if student.user_id:
        try:
            await client.admin.delete_user(student.user_id)
        except PortalError as e:
            logger.error(f"Student {student.id} deleted but login {student.user_id} remains: {e}")
            raise
