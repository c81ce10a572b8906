"""MongoDB connection and remote client wiring."""
from motor.motor_asyncio import AsyncIOMotorClient

from portal.config import settings
from portal.remote.auth import MongoAdminAuthService, MongoAuthService
from portal.remote.base import RemoteClient
from portal.remote.mongo import MongoDataService


_client = None


async def db_startup() -> RemoteClient:
    """Connect to MongoDB, create indexes and build the remote client."""
    global _client
    _client = AsyncIOMotorClient(settings.mongodb_url)
    database = _client[settings.mongodb_db_name]
    data = MongoDataService(database)
    admin = MongoAdminAuthService(database, settings.service_role_key)
    await data.ensure_indexes()
    await admin.ensure_indexes()
    return RemoteClient(db=data, auth=MongoAuthService(database), admin=admin)


async def db_shutdown():
    """Close MongoDB connection."""
    global _client
    if _client:
        _client.close()
        _client = None
