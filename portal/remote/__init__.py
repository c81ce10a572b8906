"""Remote data and authentication service: interface and MongoDB adapter."""
from portal.remote.base import (
    AdminAuthService,
    AuthEvent,
    AuthService,
    DataService,
    Embed,
    RemoteClient,
    Subscription,
    first_row,
)

__all__ = [
    "AdminAuthService",
    "AuthEvent",
    "AuthService",
    "DataService",
    "Embed",
    "RemoteClient",
    "Subscription",
    "first_row",
]
