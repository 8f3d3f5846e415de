"""LED toggles exposed as switches."""

from __future__ import annotations

from typing import Any

from homeassistant.components.switch import SwitchEntity, SwitchEntityDescription
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddConfigEntryEntitiesCallback

from .const import DATA_COORDINATOR, DATA_HUB, DOMAIN, Setting
from .coordinator import EverythingPresenceOneCoordinator
from .entity import EverythingPresenceOneEntity
from .errors import MissingEntity
from .hub import EverythingPresenceOneHub

SWITCHES: tuple[SwitchEntityDescription, ...] = (
    SwitchEntityDescription(
        key=Setting.MMWAVE_LED.value,
        name="mmWave LED",
        entity_category=EntityCategory.CONFIG,
        icon="mdi:led-on",
    ),
    SwitchEntityDescription(
        key=Setting.ESP_32_STATUS_LED.value,
        name="ESP32 status LED",
        entity_category=EntityCategory.CONFIG,
        icon="mdi:led-on",
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddConfigEntryEntitiesCallback,
) -> None:
    """Set up Everything Presence One switches from a config entry."""
    data = hass.data[DOMAIN][entry.entry_id]
    hub: EverythingPresenceOneHub = data[DATA_HUB]
    coordinator: EverythingPresenceOneCoordinator = data[DATA_COORDINATOR]
    async_add_entities(
        EverythingPresenceOneSwitch(coordinator, hub, entry, description)
        for description in SWITCHES
    )


class EverythingPresenceOneSwitch(EverythingPresenceOneEntity, SwitchEntity):
    """A boolean device setting."""

    @property
    def is_on(self) -> bool | None:
        value = self.coordinator.settings.get(self.entity_description.key)
        return value if isinstance(value, bool) else None

    @property
    def available(self) -> bool:
        return super().available and self.entity_description.key in self._hub.registry

    async def async_turn_on(self, **kwargs: Any) -> None:
        await self._async_write(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        await self._async_write(False)

    async def _async_write(self, value: bool) -> None:
        key = self.entity_description.key
        try:
            await self._hub.async_write_setting(key, value)
        except MissingEntity as err:
            raise HomeAssistantError(
                f"Setting {key} is not available on the device"
            ) from err
