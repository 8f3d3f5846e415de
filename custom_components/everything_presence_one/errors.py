"""Exceptions raised by the Everything Presence One session core."""

from __future__ import annotations

from .const import ENCRYPTION_EXPECTED_MARKER


class EverythingPresenceOneError(Exception):
    """Base exception for the integration."""


class ValidationError(EverythingPresenceOneError):
    """Raised when an entity or state payload has an unexpected shape."""


class ConnectTimeout(EverythingPresenceOneError):
    """Raised when the session does not initialize in time."""


class TransientSessionError(EverythingPresenceOneError):
    """Raised for session failures that a reconnect may resolve."""


class PermanentMisconfiguration(EverythingPresenceOneError):
    """Raised when the device configuration does not allow a session.

    Reconnecting does not help; the device must be reconfigured.
    """


class MissingEntity(EverythingPresenceOneError, KeyError):
    """Raised when an entity is not present in the registry."""

    def __init__(self, object_id: str) -> None:
        super().__init__(f"Missing entity {object_id}")
        self.object_id = object_id

    def __str__(self) -> str:
        return str(self.args[0])


class ContractViolation(EverythingPresenceOneError, TypeError):
    """Raised when a collaborator lacks a capability the core relies on."""


def is_encryption_mismatch(error: object) -> bool:
    """Return True if the error means the device requires encryption."""
    if isinstance(error, PermanentMisconfiguration):
        return True
    return ENCRYPTION_EXPECTED_MARKER in str(error)
