"""Error taxonomy shared by domain access functions and the API layer."""
from __future__ import annotations


class PortalError(Exception):
    """Base class for all portal errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PortalError):
    """Required input missing; raised before any backend call."""


class TransportError(PortalError):
    """Any failure reported by the remote data or auth service."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code


class InvalidCredentialsError(PortalError):
    def __init__(self, message: str = "Invalid username or password."):
        super().__init__(message)


class AuthIdentityError(TransportError):
    """Failure on the elevated identity-management channel."""
