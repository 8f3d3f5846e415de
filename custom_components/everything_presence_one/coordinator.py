"""Data coordinator that receives values from the hub."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .const import DOMAIN, LOGGER
from .models import StateValue


@dataclass(frozen=True, slots=True)
class DeviceSnapshot:
    """Latest capability values and availability of the device."""

    capabilities: Mapping[str, StateValue] = field(
        default_factory=lambda: MappingProxyType({})
    )
    available: bool = False
    unavailable_reason: str | None = None


class EverythingPresenceOneCoordinator(DataUpdateCoordinator[DeviceSnapshot]):
    """Hold device values pushed by the hub; settings live in entry options."""

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry) -> None:
        """Initialize the coordinator."""
        super().__init__(hass, LOGGER, name=DOMAIN, config_entry=entry)
        self.data = DeviceSnapshot()

    @property
    def settings(self) -> Mapping[str, Any]:
        """Return the persisted device settings."""
        return self.config_entry.options

    async def _async_update_data(self) -> DeviceSnapshot:
        """Return the current snapshot; values are pushed, never polled."""
        return self.data

    @callback
    def set_capability_value(self, capability: str, value: StateValue) -> None:
        """Store a capability value and notify entities."""
        capabilities = dict(self.data.capabilities)
        capabilities[capability] = value
        self.async_set_updated_data(
            replace(self.data, capabilities=MappingProxyType(capabilities))
        )

    @callback
    def set_settings(self, settings: Mapping[str, Any]) -> None:
        """Persist changed settings into the config entry options."""
        options = self.config_entry.options
        changed = {
            key: value for key, value in settings.items() if options.get(key) != value
        }
        if not changed:
            return
        LOGGER.debug("Updating settings: %s", changed)
        self.hass.config_entries.async_update_entry(
            self.config_entry, options={**options, **changed}
        )
        self.async_update_listeners()

    @callback
    def set_available(self) -> None:
        """Mark the device available."""
        if self.data.available:
            return
        self.async_set_updated_data(
            replace(self.data, available=True, unavailable_reason=None)
        )

    @callback
    def set_unavailable(self, reason: str) -> None:
        """Mark the device unavailable."""
        self.async_set_updated_data(
            replace(self.data, available=False, unavailable_reason=reason)
        )
