"""MongoDB-backed authentication: password sign-in and identity management."""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from portal.errors import AuthIdentityError, TransportError
from portal.models.user import AuthIdentity, Session
from portal.remote.base import AdminAuthService, AuthEvent, AuthService
from portal.security import create_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)

IDENTITIES = "auth_users"


def _identity(doc: dict) -> AuthIdentity:
    return AuthIdentity(id=doc["id"], email=doc["email"])


class MongoAuthService(AuthService):
    def __init__(self, database: AsyncIOMotorDatabase):
        super().__init__()
        self._db = database

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        try:
            doc = await self._db[IDENTITIES].find_one({"email": email})
        except PyMongoError as e:
            raise TransportError(f"Sign-in failed: {e}") from e
        if not doc or not verify_password(password, doc["hashed_password"]):
            raise TransportError("Invalid login credentials", code="invalid_credentials")
        session = Session(
            access_token=create_access_token(doc["id"], doc["email"]),
            user_id=doc["id"],
            email=doc["email"],
        )
        self.session = session
        await self._emit(AuthEvent.SIGNED_IN, session)
        return session

    async def sign_out(self) -> None:
        self.session = None
        await self._emit(AuthEvent.SIGNED_OUT, None)


class MongoAdminAuthService(AdminAuthService):
    """Identity management; refuses to work without the service-role key."""

    def __init__(self, database: AsyncIOMotorDatabase, service_role_key: str):
        self._db = database
        self._service_role_key = service_role_key

    async def ensure_indexes(self) -> None:
        try:
            await self._db[IDENTITIES].create_index("id", unique=True)
            await self._db[IDENTITIES].create_index("email", unique=True)
        except PyMongoError as e:
            raise TransportError(f"Could not create identity indexes: {e}") from e

    def _require_service_key(self) -> None:
        if not self._service_role_key:
            raise AuthIdentityError("Identity management requires SERVICE_ROLE_KEY", code="forbidden")

    async def create_user(self, email: str, password: str) -> AuthIdentity:
        self._require_service_key()
        doc = {
            "id": str(uuid.uuid4()),
            "email": email,
            "hashed_password": get_password_hash(password),
            "created_at": datetime.utcnow(),
        }
        try:
            await self._db[IDENTITIES].insert_one(doc)
        except DuplicateKeyError as e:
            raise AuthIdentityError(
                "A user with this email address has already been registered", code="email_exists"
            ) from e
        except PyMongoError as e:
            raise AuthIdentityError(f"Could not create login: {e}") from e
        logger.info(f"Created login identity {doc['id']}")
        return _identity(doc)

    async def update_user_by_id(
        self, user_id: str, email: Optional[str] = None, password: Optional[str] = None
    ) -> AuthIdentity:
        self._require_service_key()
        if not user_id:
            raise AuthIdentityError("User ID is required for update.")
        changes: dict = {"updated_at": datetime.utcnow()}
        if email:
            changes["email"] = email
        if password:
            changes["hashed_password"] = get_password_hash(password)
        try:
            doc = await self._db[IDENTITIES].find_one_and_update(
                {"id": user_id}, {"$set": changes}, return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError as e:
            raise AuthIdentityError(
                "A user with this email address has already been registered", code="email_exists"
            ) from e
        except PyMongoError as e:
            raise AuthIdentityError(f"Could not update login: {e}") from e
        if not doc:
            raise AuthIdentityError("User not found", code="not_found")
        return _identity(doc)

    async def delete_user(self, user_id: str) -> None:
        self._require_service_key()
        if not user_id:
            raise AuthIdentityError("User ID is required for delete.")
        try:
            result = await self._db[IDENTITIES].delete_one({"id": user_id})
            # profiles are keyed by the identity id
            await self._db["profiles"].delete_many({"id": user_id})
        except PyMongoError as e:
            raise AuthIdentityError(f"Could not delete login: {e}") from e
        if result.deleted_count == 0:
            raise AuthIdentityError("User not found", code="not_found")
        logger.info(f"Deleted login identity {user_id}")
