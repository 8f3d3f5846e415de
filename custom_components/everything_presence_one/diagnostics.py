"""Diagnostics support for Everything Presence One."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import fields, is_dataclass
import enum
from types import MappingProxyType
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, CONF_PORT
from homeassistant.core import HomeAssistant

from .const import CONF_DEVICE_ID, DATA_COORDINATOR, DATA_HUB, DOMAIN
from .coordinator import EverythingPresenceOneCoordinator
from .hub import EverythingPresenceOneHub


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    data = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    hub: EverythingPresenceOneHub | None = data.get(DATA_HUB) if data else None
    coordinator: EverythingPresenceOneCoordinator | None = (
        data.get(DATA_COORDINATOR) if data else None
    )
    snapshot = coordinator.data if coordinator is not None else None

    return {
        "entry_id": entry.entry_id,
        "host": entry.data.get(CONF_HOST),
        "port": entry.data.get(CONF_PORT),
        "device_id": entry.data.get(CONF_DEVICE_ID),
        "settings": _to_jsonable(entry.options),
        "session_state": _to_jsonable(hub.state) if hub is not None else None,
        "unavailable_reason": hub.unavailable_reason if hub is not None else None,
        "entities": (
            [_to_jsonable(entity) for entity in hub.registry.entities()]
            if hub is not None
            else []
        ),
        "snapshot": _to_jsonable(snapshot),
    }


def _to_jsonable(value: Any) -> Any:
    """Normalize entities and snapshots to JSON-safe types."""
    if value is None:
        return None
    if is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: _to_jsonable(getattr(value, field.name))
            for field in fields(value)
        }
    if isinstance(value, MappingProxyType):
        return {str(key): _to_jsonable(val) for key, val in dict(value).items()}
    if isinstance(value, Mapping):
        return {str(key): _to_jsonable(val) for key, val in value.items()}
    if isinstance(value, list | tuple):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
