"""mmWave tuning parameters exposed as numbers."""

from __future__ import annotations

import logging

from homeassistant.components.number import (
    NumberDeviceClass,
    NumberEntity,
    NumberEntityDescription,
    NumberMode,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory, UnitOfLength, UnitOfTime
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddConfigEntryEntitiesCallback

from .const import DATA_COORDINATOR, DATA_HUB, DOMAIN, Setting
from .coordinator import EverythingPresenceOneCoordinator
from .entity import EverythingPresenceOneEntity
from .errors import MissingEntity
from .hub import EverythingPresenceOneHub

_LOGGER = logging.getLogger(__name__)

NUMBERS: tuple[NumberEntityDescription, ...] = (
    NumberEntityDescription(
        key=Setting.MMWAVE_SENSITIVITY.value,
        name="mmWave sensitivity",
        entity_category=EntityCategory.CONFIG,
        native_min_value=0,
        native_max_value=9,
        native_step=1,
        mode=NumberMode.SLIDER,
    ),
    NumberEntityDescription(
        key=Setting.MMWAVE_ON_LATENCY.value,
        name="mmWave on latency",
        entity_category=EntityCategory.CONFIG,
        device_class=NumberDeviceClass.DURATION,
        native_unit_of_measurement=UnitOfTime.SECONDS,
        native_min_value=0,
        native_max_value=60,
        native_step=0.25,
        mode=NumberMode.BOX,
    ),
    NumberEntityDescription(
        key=Setting.MMWAVE_OFF_LATENCY.value,
        name="mmWave off latency",
        entity_category=EntityCategory.CONFIG,
        device_class=NumberDeviceClass.DURATION,
        native_unit_of_measurement=UnitOfTime.SECONDS,
        native_min_value=1,
        native_max_value=600,
        native_step=1,
        mode=NumberMode.BOX,
    ),
    NumberEntityDescription(
        key=Setting.MMWAVE_DISTANCE.value,
        name="mmWave distance",
        entity_category=EntityCategory.CONFIG,
        device_class=NumberDeviceClass.DISTANCE,
        native_unit_of_measurement=UnitOfLength.CENTIMETERS,
        native_min_value=0,
        native_max_value=800,
        native_step=15,
        mode=NumberMode.SLIDER,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddConfigEntryEntitiesCallback,
) -> None:
    """Set up Everything Presence One numbers from a config entry."""
    data = hass.data[DOMAIN][entry.entry_id]
    hub: EverythingPresenceOneHub = data[DATA_HUB]
    coordinator: EverythingPresenceOneCoordinator = data[DATA_COORDINATOR]
    async_add_entities(
        EverythingPresenceOneNumber(coordinator, hub, entry, description)
        for description in NUMBERS
    )


class EverythingPresenceOneNumber(EverythingPresenceOneEntity, NumberEntity):
    """A numeric device setting."""

    @property
    def native_value(self) -> float | None:
        """Return the last value reported by the device."""
        value = self.coordinator.settings.get(self.entity_description.key)
        if isinstance(value, bool) or not isinstance(value, int | float):
            return None
        return value

    @property
    def available(self) -> bool:
        """Return if the device exposes this setting in the current session."""
        return super().available and self.entity_description.key in self._hub.registry

    async def async_set_native_value(self, value: float) -> None:
        """Send the new value to the device."""
        key = self.entity_description.key
        try:
            await self._hub.async_write_setting(key, value)
        except MissingEntity as err:
            raise HomeAssistantError(
                f"Setting {key} is not available on the device"
            ) from err
        _LOGGER.debug("Requested %s = %s", key, value)
