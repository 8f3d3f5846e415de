"""Route entity state events to capabilities and settings."""

from __future__ import annotations

import logging
from typing import Any

from .const import BOOLEAN_SETTINGS, NUMBER_SETTINGS, Capability, Setting
from .models import DeviceHost, Entity, StateValue
from .registry import EntityRegistry
from .schema import read_state

_LOGGER = logging.getLogger(__name__)

# device_class -> (capability, expects a boolean value)
_CAPABILITY_BY_DEVICE_CLASS: dict[str, tuple[Capability, bool]] = {
    "temperature": (Capability.MEASURE_TEMPERATURE, False),
    "humidity": (Capability.MEASURE_HUMIDITY, False),
    "illuminance": (Capability.MEASURE_LUMINANCE, False),
    "motion": (Capability.ALARM_MOTION_PIR, True),
}


def is_number(value: Any) -> bool:
    """Return True for ints and floats, excluding bools."""
    return isinstance(value, int | float) and not isinstance(value, bool)


def matches_type(value: Any, expects_bool: bool) -> bool:
    """Return True if the value has the expected kind."""
    if expects_bool:
        return isinstance(value, bool)
    return is_number(value)


def includes_binary_sensor_mmwave(entity: Entity) -> bool:
    """Return True if the entity is the mmWave occupancy sensor.

    Firmware between 2023.4.2 (1.1.3) and 2023.7.1 (1.1.6) renamed the unique id
    from binary_sensor_mmwave to binary_sensormmwave, both are matched. See
    https://github.com/EverythingSmartHome/everything-presence-one/issues/99
    """
    return (
        "binary_sensor_mmwave" in entity.unique_id
        or "binary_sensormmwave" in entity.unique_id
    )


def includes_binary_sensor_occupancy(entity: Entity) -> bool:
    """Return True if the entity is the combined occupancy sensor.

    Same firmware rename as includes_binary_sensor_mmwave.
    """
    return (
        "binary_sensor_occupancy" in entity.unique_id
        or "binary_sensoroccupancy" in entity.unique_id
    )


def capability_for(entity: Entity) -> tuple[Capability, bool] | None:
    """Return the capability and expected value kind for an entity."""
    if entity.device_class == "occupancy":
        if includes_binary_sensor_mmwave(entity):
            return Capability.ALARM_MOTION_MMWAVE, True
        if includes_binary_sensor_occupancy(entity):
            return Capability.ALARM_MOTION, True
        return None
    if entity.device_class is None:
        return None
    return _CAPABILITY_BY_DEVICE_CLASS.get(entity.device_class)


def setting_for(object_id: str) -> tuple[Setting, bool] | None:
    """Return the setting and expected value kind for an object id."""
    try:
        setting = Setting(object_id)
    except ValueError:
        return None
    if setting in NUMBER_SETTINGS:
        return setting, False
    if setting in BOOLEAN_SETTINGS:
        return setting, True
    return None


class StateDispatcher:
    """Apply state events from registered entities to the host."""

    def __init__(self, registry: EntityRegistry, host: DeviceHost) -> None:
        self._registry = registry
        self._host = host

    def dispatch(self, object_id: str, raw_state: Any) -> None:
        """Handle one state event for an entity.

        Raises MissingEntity if the entity is not registered.
        """
        entity = self._registry.lookup(object_id).entity
        state = read_state(raw_state)
        _LOGGER.debug(
            "State for %s (%s, %s, unit=%s): %s",
            entity.object_id,
            entity.name,
            entity.type,
            entity.unit or "",
            state,
        )
        if state is None:
            return
        if state.missing:
            _LOGGER.debug("Skipping missing state for %s", entity.object_id)
            return

        self._apply_capability(entity, state.value)
        self._apply_setting(entity, state.value)

    def _apply_capability(self, entity: Entity, value: StateValue) -> None:
        target = capability_for(entity)
        if target is None:
            if entity.device_class != "occupancy":
                _LOGGER.debug("Unknown device class: %s", entity.device_class)
            return
        capability, expects_bool = target
        if not matches_type(value, expects_bool):
            return
        _LOGGER.debug("Capability: %s: state event %s", capability, value)
        try:
            self._host.set_capability_value(capability.value, value)
        except Exception:  # noqa: BLE001
            _LOGGER.debug(
                "Failed to set %s capability value", capability, exc_info=True
            )

    def _apply_setting(self, entity: Entity, value: StateValue) -> None:
        target = setting_for(entity.object_id)
        if target is None:
            _LOGGER.debug("Unknown setting: %s", entity.object_id)
            return
        setting, expects_bool = target
        if not matches_type(value, expects_bool):
            return
        _LOGGER.debug("Setting: %s: state event %s", setting, value)
        try:
            self._host.set_settings({setting.value: value})
        except Exception:  # noqa: BLE001
            _LOGGER.debug(
                "Failed to set setting %s to value: %s",
                setting,
                value,
                exc_info=True,
            )
