"""RBAC: Admins, Teachers, Students/Parents."""
from enum import Enum
from typing import Optional

from portal.models.base import ClientModel


class Role(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class PermissionSet(ClientModel):
    """Capabilities an admin can grant to a teacher."""

    manage_students: bool = False
    manage_teachers: bool = False
    manage_announcements: bool = False
    manage_events: bool = False
    manage_exams: bool = False
    manage_attendance: bool = False
    view_all_results: bool = False
    full_admin_access: bool = False


class User(ClientModel):
    """Authenticated identity held in the application state."""

    id: str
    name: str
    role: Role
    username: str
    avatar: Optional[str] = None
    permissions: Optional[PermissionSet] = None


class Profile(ClientModel):
    """Generic profile row keyed by the auth identity id."""

    id: str
    username: str
    full_name: str = ""
    role: Role


class Session(ClientModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class AuthIdentity(ClientModel):
    id: str
    email: str
