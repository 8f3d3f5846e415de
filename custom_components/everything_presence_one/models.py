"""Typed models shared by the session core."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from .errors import ContractViolation

type StateValue = float | int | bool
type Unsubscribe = Callable[[], None]


class SessionState(str, Enum):
    """Lifecycle of the device session as reported to the host."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True, slots=True)
class Entity:
    """An entity announced by the device."""

    object_id: str
    key: int
    name: str
    unique_id: str
    type: str
    device_class: str | None = None
    unit: str | None = None
    icon: str = ""
    accuracy_decimals: int | None = None
    force_update: bool = False
    state_class: int | None = None
    disabled_by_default: bool = False
    entity_category: int = 0


@dataclass(frozen=True, slots=True)
class StateEvent:
    """A state update for a single entity."""

    key: int
    value: StateValue
    missing: bool = False


@runtime_checkable
class EntityHandle(Protocol):
    """Live, session-bound handle used to observe and command an entity."""

    def on_state(self, callback: Callable[[Any], None]) -> Unsubscribe:
        """Register a state listener."""

    def set_state(self, value: StateValue) -> Awaitable[None]:
        """Command a new state on the device."""

    def revoke_listeners(self) -> None:
        """Drop every listener registered on this handle."""


class DeviceSession(Protocol):
    """One protocol connection to the device."""

    def on_new_entity(
        self, callback: Callable[[Mapping[str, Any], EntityHandle], None]
    ) -> Unsubscribe:
        """Register a listener for entity announcements."""

    def on_error(self, callback: Callable[[BaseException], None]) -> Unsubscribe:
        """Register a listener for asynchronous session errors."""

    def on_initialized(self, callback: Callable[[], None]) -> Unsubscribe:
        """Register a listener for the initialization handshake."""

    def connect(self) -> None:
        """Start connecting; progress is reported through the listeners."""

    async def disconnect(self) -> None:
        """Close the connection."""

    async def list_entities(self) -> None:
        """Request entity announcements from the device."""


class DeviceHost(Protocol):
    """Host-side sink for capability values, settings and availability."""

    def set_capability_value(self, capability: str, value: StateValue) -> None:
        """Set a user-visible capability value."""

    def set_settings(self, settings: Mapping[str, Any]) -> None:
        """Persist device settings."""

    def set_available(self) -> None:
        """Mark the device as available."""

    def set_unavailable(self, reason: str) -> None:
        """Mark the device as unavailable for the given reason."""


type SessionFactory = Callable[[str, int], DeviceSession]


_HANDLE_CAPABILITIES = ("on_state", "set_state", "revoke_listeners")


@dataclass(frozen=True, slots=True)
class RegistryEntry:
    """A validated entity paired with its live handle."""

    entity: Entity
    handle: EntityHandle = field(repr=False)

    def __post_init__(self) -> None:
        for capability in _HANDLE_CAPABILITIES:
            if not callable(getattr(self.handle, capability, None)):
                raise ContractViolation(
                    f"Expected entity handle for {self.entity.object_id} "
                    f"to provide {capability}()"
                )
