"""Registry of the entities announced during the current session."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
import logging
from typing import Any

from .errors import MissingEntity
from .models import Entity, EntityHandle, RegistryEntry, Unsubscribe
from .schema import decode_entity

_LOGGER = logging.getLogger(__name__)

type StateCallback = Callable[[str, Any], None]


class EntityRegistry:
    """Map object ids to validated entities and their live handles."""

    def __init__(self, on_state: StateCallback) -> None:
        """Initialize the registry with the callback that receives states."""
        self._on_state = on_state
        self._entries: dict[str, RegistryEntry] = {}
        self._unsubscribers: dict[str, Unsubscribe] = {}

    def __contains__(self, object_id: object) -> bool:
        return object_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(list(self._entries.values()))

    def register(
        self, raw: Mapping[str, Any], handle: EntityHandle
    ) -> RegistryEntry | None:
        """Validate an announcement, store it and subscribe to its states.

        Malformed announcements are logged and dropped.
        """
        decoded = decode_entity(raw)
        if not decoded.ok or decoded.value is None:
            _LOGGER.debug(
                "Invalid entity object received, error: %s, entity: %s",
                decoded.error,
                raw,
            )
            return None
        entity = decoded.value
        entry = RegistryEntry(entity=entity, handle=handle)
        previous = self._unsubscribers.pop(entity.object_id, None)
        if previous is not None:
            # Replaced entries must stop dispatching.
            previous()
        self._entries[entity.object_id] = entry
        _LOGGER.debug("Register entity %s: %s", entity.object_id, entity)
        self._unsubscribers[entity.object_id] = handle.on_state(
            lambda state: self._handle_state(entity.object_id, state)
        )
        return entry

    def lookup(self, object_id: str) -> RegistryEntry:
        """Return the entry for an object id."""
        entry = self._entries.get(object_id)
        if entry is None:
            raise MissingEntity(object_id)
        return entry

    def get(self, object_id: str) -> RegistryEntry | None:
        """Return the entry for an object id if present."""
        return self._entries.get(object_id)

    def entities(self) -> list[Entity]:
        """Return the registered entities."""
        return [entry.entity for entry in self._entries.values()]

    def clear(self) -> None:
        """Revoke every entity listener and forget all entries."""
        entries = list(self._entries.values())
        unsubscribers = list(self._unsubscribers.values())
        self._entries.clear()
        self._unsubscribers.clear()
        for unsubscribe in unsubscribers:
            unsubscribe()
        for entry in entries:
            entry.handle.revoke_listeners()

    def _handle_state(self, object_id: str, state: Any) -> None:
        """Forward a state event; failures are isolated to the event."""
        try:
            self._on_state(object_id, state)
        except MissingEntity as err:
            _LOGGER.debug("Failed to handle entity state event: %s", err)
        except Exception:  # noqa: BLE001
            _LOGGER.exception("Unexpected error handling state for %s", object_id)
