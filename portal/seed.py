"""Seed the principal's login and profile if not present."""
import logging

from portal.config import settings
from portal.errors import AuthIdentityError
from portal.models.user import Role
from portal.remote.base import RemoteClient

logger = logging.getLogger(__name__)

ADMIN_FULL_NAME = "Principal"


async def seed_admin(remote: RemoteClient) -> None:
    if not settings.admin_password:
        return
    existing = await remote.db.select("profiles", eq={"username": settings.admin_username, "role": Role.ADMIN.value})
    if existing:
        return
    try:
        identity = await remote.admin.create_user(settings.admin_email, settings.admin_password)
    except AuthIdentityError as e:
        if e.code != "email_exists":
            raise
        logger.warning(f"Login {settings.admin_email} exists without an admin profile; not seeding")
        return
    await remote.db.insert(
        "profiles",
        [{"id": identity.id, "username": settings.admin_username, "full_name": ADMIN_FULL_NAME, "role": Role.ADMIN.value}],
    )
    logger.info(f"Seeded admin login {settings.admin_email}")
