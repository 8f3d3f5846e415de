"""Sensors for the Everything Presence One integration."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import LIGHT_LUX, PERCENTAGE, EntityCategory, UnitOfTemperature
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddConfigEntryEntitiesCallback

from .const import (
    DATA_COORDINATOR,
    DATA_HUB,
    DOMAIN,
    SETTING_ESP_HOME_VERSION,
    SETTING_IP,
    SETTING_PROJECT_VERSION,
    Capability,
)
from .coordinator import EverythingPresenceOneCoordinator
from .entity import EverythingPresenceOneEntity
from .hub import EverythingPresenceOneHub


@dataclass(frozen=True, slots=True, kw_only=True)
class EverythingPresenceOneSensorDescription(SensorEntityDescription):
    """Describe an Everything Presence One sensor."""

    value_fn: Callable[[EverythingPresenceOneCoordinator], Any]
    always_available: bool = False


def _capability(capability: Capability) -> Callable[[EverythingPresenceOneCoordinator], Any]:
    return lambda coordinator: coordinator.data.capabilities.get(capability.value)


def _setting(key: str) -> Callable[[EverythingPresenceOneCoordinator], Any]:
    return lambda coordinator: coordinator.settings.get(key)


SENSORS: tuple[EverythingPresenceOneSensorDescription, ...] = (
    EverythingPresenceOneSensorDescription(
        key=Capability.MEASURE_TEMPERATURE.value,
        name="Temperature",
        device_class=SensorDeviceClass.TEMPERATURE,
        state_class=SensorStateClass.MEASUREMENT,
        native_unit_of_measurement=UnitOfTemperature.CELSIUS,
        value_fn=_capability(Capability.MEASURE_TEMPERATURE),
    ),
    EverythingPresenceOneSensorDescription(
        key=Capability.MEASURE_HUMIDITY.value,
        name="Humidity",
        device_class=SensorDeviceClass.HUMIDITY,
        state_class=SensorStateClass.MEASUREMENT,
        native_unit_of_measurement=PERCENTAGE,
        value_fn=_capability(Capability.MEASURE_HUMIDITY),
    ),
    EverythingPresenceOneSensorDescription(
        key=Capability.MEASURE_LUMINANCE.value,
        name="Illuminance",
        device_class=SensorDeviceClass.ILLUMINANCE,
        state_class=SensorStateClass.MEASUREMENT,
        native_unit_of_measurement=LIGHT_LUX,
        value_fn=_capability(Capability.MEASURE_LUMINANCE),
    ),
    EverythingPresenceOneSensorDescription(
        key=SETTING_IP,
        name="IP address",
        entity_category=EntityCategory.DIAGNOSTIC,
        value_fn=_setting(SETTING_IP),
        always_available=True,
    ),
    EverythingPresenceOneSensorDescription(
        key=SETTING_ESP_HOME_VERSION,
        name="ESPHome version",
        entity_category=EntityCategory.DIAGNOSTIC,
        value_fn=_setting(SETTING_ESP_HOME_VERSION),
        always_available=True,
    ),
    EverythingPresenceOneSensorDescription(
        key=SETTING_PROJECT_VERSION,
        name="Firmware version",
        entity_category=EntityCategory.DIAGNOSTIC,
        value_fn=_setting(SETTING_PROJECT_VERSION),
        always_available=True,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddConfigEntryEntitiesCallback,
) -> None:
    """Set up Everything Presence One sensors from a config entry."""
    data = hass.data[DOMAIN][entry.entry_id]
    hub: EverythingPresenceOneHub = data[DATA_HUB]
    coordinator: EverythingPresenceOneCoordinator = data[DATA_COORDINATOR]
    async_add_entities(
        EverythingPresenceOneSensor(coordinator, hub, entry, description)
        for description in SENSORS
    )


class EverythingPresenceOneSensor(EverythingPresenceOneEntity, SensorEntity):
    """Representation of a device reading or diagnostic value."""

    entity_description: EverythingPresenceOneSensorDescription

    @property
    def native_value(self) -> Any:
        """Return the current value."""
        return self.entity_description.value_fn(self.coordinator)

    @property
    def available(self) -> bool:
        """Diagnostic values stay readable while the device is offline."""
        if self.entity_description.always_available:
            return True
        return super().available
