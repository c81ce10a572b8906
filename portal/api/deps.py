"""Shared dependencies: store/client access, bearer-token auth, role and permission checks."""
import logging
from typing import Annotated, Optional

import pydantic
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from portal.errors import PortalError
from portal.models.user import Role, User
from portal.remote.base import RemoteClient
from portal.security import decode_access_token
from portal.services.auth import load_user
from portal.store import Store

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_remote(request: Request) -> RemoteClient:
    return request.app.state.remote


StoreDep = Annotated[Store, Depends(get_store)]
RemoteDep = Annotated[RemoteClient, Depends(get_remote)]
Credentials = Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]


async def _user_from_token(token: str, remote: RemoteClient) -> User:
    try:
        payload = decode_access_token(token)
        user_id: str = payload.get("sub")
        if not user_id or payload.get("type") != "access":
            raise HTTPException(status_code=401, detail="Invalid token")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    try:
        return await load_user(remote, user_id)
    except (PortalError, pydantic.ValidationError) as e:
        logger.warning(f"Token for {user_id} has no usable profile: {e}")
        raise HTTPException(status_code=401, detail="User not found")


async def get_current_user(credentials: Credentials, remote: RemoteDep) -> User:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await _user_from_token(credentials.credentials, remote)


async def get_optional_user(credentials: Credentials, remote: RemoteDep) -> User | None:
    """Signed-in user for public routes; a missing or unusable token reads as anonymous."""
    if not credentials:
        return None
    try:
        return await _user_from_token(credentials.credentials, remote)
    except HTTPException:
        return None


def require_roles(*allowed: Role):
    allowed_values = [role.value for role in allowed]

    async def checker(user: Annotated[User, Depends(get_current_user)]):
        if user.role.value not in allowed_values:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return checker


def has_permission(user: User, permission: str) -> bool:
    if user.role == Role.ADMIN:
        return True
    if user.role != Role.TEACHER or not user.permissions:
        return False
    return bool(user.permissions.full_admin_access or getattr(user.permissions, permission, False))


def require_permission(permission: str):
    """Admins always pass; teachers need the flag or full admin access."""

    async def checker(user: Annotated[User, Depends(get_current_user)]):
        if not has_permission(user, permission):
            raise HTTPException(status_code=403, detail=f"Missing {permission} permission")
        return user

    return checker


# Type aliases for route injection
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
AdminOnly = Annotated[User, Depends(require_roles(Role.ADMIN))]
TeacherOrAdmin = Annotated[User, Depends(require_roles(Role.ADMIN, Role.TEACHER))]
CanManageStudents = Annotated[User, Depends(require_permission("manage_students"))]
CanManageTeachers = Annotated[User, Depends(require_permission("manage_teachers"))]
CanManageAnnouncements = Annotated[User, Depends(require_permission("manage_announcements"))]
CanManageEvents = Annotated[User, Depends(require_permission("manage_events"))]
CanManageExams = Annotated[User, Depends(require_permission("manage_exams"))]
CanManageAttendance = Annotated[User, Depends(require_permission("manage_attendance"))]
CanManageTransport = Annotated[User, Depends(require_permission("full_admin_access"))]
