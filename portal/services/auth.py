"""Username login, sign-out and profile lookup."""
from __future__ import annotations

import logging

from portal.config import settings
from portal.errors import InvalidCredentialsError, TransportError
from portal.models.user import Profile, Role, Session, User
from portal.remote.base import RemoteClient
from portal.services.mapping import to_client_shape
from portal.services.teachers import get_teacher_permissions

logger = logging.getLogger(__name__)


async def resolve_login_email(client: RemoteClient, username: str) -> str:
    """Map a login username to the email the auth service expects.

    Checks the principal's alias, then teacher usernames, then student roll
    numbers. Unknown usernames fail with the same error as a bad password.
    """
    username = username.strip()
    if not username:
        raise InvalidCredentialsError()
    if username == settings.admin_username:
        return settings.admin_email

    teachers = await client.db.select("teachers", eq={"username": username}, columns=["email"])
    if teachers and teachers[0].get("email"):
        return teachers[0]["email"]

    students = await client.db.select("students", eq={"roll_number": username}, columns=["email"])
    if students and students[0].get("email"):
        return students[0]["email"]

    raise InvalidCredentialsError()


async def login_user(client: RemoteClient, username: str, password: str) -> Session:
    email = await resolve_login_email(client, username)
    try:
        return await client.auth.sign_in_with_password(email, password)
    except TransportError as e:
        logger.info(f"Sign-in rejected for {username!r}: {e}")
        raise InvalidCredentialsError() from e


async def logout_user(client: RemoteClient) -> None:
    await client.auth.sign_out()


async def get_profile(client: RemoteClient, user_id: str) -> Profile:
    row = await client.db.select_one("profiles", eq={"id": user_id})
    return Profile.model_validate(to_client_shape(row))


async def load_user(client: RemoteClient, user_id: str) -> User:
    """Build the session user from its profile, with permissions for teachers."""
    profile = await get_profile(client, user_id)
    permissions = None
    if profile.role == Role.TEACHER:
        permissions = await get_teacher_permissions(client, user_id)
    return User(
        id=profile.id,
        name=profile.full_name or profile.username,
        role=profile.role,
        username=profile.username,
        permissions=permissions,
    )
