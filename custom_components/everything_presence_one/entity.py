"""Shared entity helpers for the Everything Presence One integration."""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity import EntityDescription
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    CONF_DEVICE_ID,
    DOMAIN,
    MANUFACTURER,
    MODEL,
    SETTING_ESP_HOME_VERSION,
    SETTING_PROJECT_VERSION,
)
from .coordinator import EverythingPresenceOneCoordinator
from .hub import EverythingPresenceOneHub


def device_id_for_entry(entry: ConfigEntry) -> str:
    """Return the stable device id of a config entry."""
    return entry.data.get(CONF_DEVICE_ID) or entry.unique_id or entry.entry_id


def device_info_for_entry(entry: ConfigEntry) -> DeviceInfo:
    """Build device info for entities tied to a config entry."""
    return DeviceInfo(
        identifiers={(DOMAIN, device_id_for_entry(entry))},
        manufacturer=MANUFACTURER,
        model=MODEL,
        name=entry.title,
        sw_version=entry.options.get(SETTING_PROJECT_VERSION),
        hw_version=entry.options.get(SETTING_ESP_HOME_VERSION),
    )


def build_unique_id(device_id: str, key: str) -> str:
    """Build a stable unique ID in <device_id>:<key> format."""
    return f"{device_id}:{key}"


class EverythingPresenceOneEntity(
    CoordinatorEntity[EverythingPresenceOneCoordinator]
):
    """Base entity bound to the device coordinator."""

    _attr_has_entity_name = True

    def __init__(
        self,
        coordinator: EverythingPresenceOneCoordinator,
        hub: EverythingPresenceOneHub,
        entry: ConfigEntry,
        description: EntityDescription,
    ) -> None:
        """Initialize the entity."""
        super().__init__(coordinator)
        self._hub = hub
        self.entity_description = description
        self._attr_unique_id = build_unique_id(
            device_id_for_entry(entry), description.key
        )
        self._attr_device_info = device_info_for_entry(entry)

    @property
    def available(self) -> bool:
        """Return if the device is reachable."""
        return self.coordinator.data.available and self._hub.is_connected
