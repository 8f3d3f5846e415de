"""Motion and occupancy binary sensors for the Everything Presence One."""

from __future__ import annotations

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
    BinarySensorEntityDescription,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddConfigEntryEntitiesCallback

from .const import DATA_COORDINATOR, DATA_HUB, DOMAIN, Capability
from .coordinator import EverythingPresenceOneCoordinator
from .entity import EverythingPresenceOneEntity
from .hub import EverythingPresenceOneHub

BINARY_SENSORS: tuple[BinarySensorEntityDescription, ...] = (
    BinarySensorEntityDescription(
        key=Capability.ALARM_MOTION.value,
        name="Occupancy",
        device_class=BinarySensorDeviceClass.OCCUPANCY,
    ),
    BinarySensorEntityDescription(
        key=Capability.ALARM_MOTION_MMWAVE.value,
        name="mmWave",
        device_class=BinarySensorDeviceClass.OCCUPANCY,
    ),
    BinarySensorEntityDescription(
        key=Capability.ALARM_MOTION_PIR.value,
        name="PIR",
        device_class=BinarySensorDeviceClass.MOTION,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddConfigEntryEntitiesCallback,
) -> None:
    """Set up Everything Presence One binary sensors from a config entry."""
    data = hass.data[DOMAIN][entry.entry_id]
    hub: EverythingPresenceOneHub = data[DATA_HUB]
    coordinator: EverythingPresenceOneCoordinator = data[DATA_COORDINATOR]
    async_add_entities(
        EverythingPresenceOneBinarySensor(coordinator, hub, entry, description)
        for description in BINARY_SENSORS
    )


class EverythingPresenceOneBinarySensor(EverythingPresenceOneEntity, BinarySensorEntity):
    """Representation of a motion capability."""

    @property
    def is_on(self) -> bool | None:
        """Return if motion is detected."""
        value = self.coordinator.data.capabilities.get(self.entity_description.key)
        return value if isinstance(value, bool) else None
