"""Validation of entity announcements and state payloads.

Example entity announcement as produced by the session:

    {
        "config": {
            "object_id": "illuminance",
            "key": 920262939,
            "name": "Illuminance",
            "unique_id": "everything-presence-one-7083ccsensor_illuminance",
            "icon": "",
            "unit_of_measurement": "lx",
            "accuracy_decimals": 1,
            "force_update": False,
            "device_class": "illuminance",
            "state_class": 1,
            "disabled_by_default": False,
            "entity_category": 0,
        },
        "id": 920262939,
        "name": "Illuminance",
        "type": "Sensor",
    }
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import voluptuous as vol

from .errors import ValidationError
from .models import Entity, StateEvent

T = TypeVar("T")


def _number(value: Any) -> float | int:
    """Accept ints and floats, but not bools."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise vol.Invalid(f"expected a number, got {type(value).__name__}")
    return value


def _integer(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise vol.Invalid(f"expected an integer, got {type(value).__name__}")
    return value


ENTITY_CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required("object_id"): str,
        vol.Required("key"): _integer,
        vol.Required("name"): str,
        vol.Required("unique_id"): str,
        vol.Required("icon"): str,
        vol.Optional("unit_of_measurement"): str,
        vol.Optional("accuracy_decimals"): _integer,
        vol.Optional("force_update"): bool,
        vol.Optional("device_class"): str,
        vol.Optional("state_class"): _integer,
        vol.Optional("last_reset_type"): _integer,
        vol.Required("disabled_by_default"): bool,
        vol.Required("entity_category"): _integer,
    },
    extra=vol.ALLOW_EXTRA,
)

ENTITY_SCHEMA = vol.Schema(
    {
        vol.Required("config"): ENTITY_CONFIG_SCHEMA,
        vol.Required("id"): _integer,
        vol.Required("name"): str,
        vol.Required("type"): str,
    },
    extra=vol.ALLOW_EXTRA,
)


@dataclass(frozen=True, slots=True)
class Decoded(Generic[T]):
    """Outcome of decoding a raw payload: a value or the reason it was rejected."""

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def validate_entity(raw: Any) -> Entity:
    """Validate an entity announcement.

    Raises ValidationError when the payload does not have the expected shape.
    """
    try:
        data = ENTITY_SCHEMA(raw)
    except vol.Invalid as err:
        raise ValidationError(str(err)) from err
    config = data["config"]
    return Entity(
        object_id=config["object_id"],
        key=config["key"],
        name=config["name"],
        unique_id=config["unique_id"],
        type=data["type"],
        device_class=config.get("device_class") or None,
        unit=config.get("unit_of_measurement") or None,
        icon=config["icon"],
        accuracy_decimals=config.get("accuracy_decimals"),
        force_update=config.get("force_update", False),
        state_class=config.get("state_class"),
        disabled_by_default=config["disabled_by_default"],
        entity_category=config["entity_category"],
    )


def decode_entity(raw: Any) -> Decoded[Entity]:
    """Decode an entity announcement without raising."""
    try:
        return Decoded(value=validate_entity(raw))
    except ValidationError as err:
        return Decoded(error=str(err))


def read_state(raw: Any) -> StateEvent | None:
    """Read a state payload with a structural check only.

    State payloads arrive far more often than announcements, so no schema
    pass is made here. Returns None when the payload is not usable.
    """
    if isinstance(raw, Mapping):
        key = raw.get("key")
        value = raw.get("state")
        missing = raw.get("missing_state", False)
    else:
        key = getattr(raw, "key", None)
        value = getattr(raw, "state", None)
        missing = getattr(raw, "missing_state", False)
    if not isinstance(value, int | float):
        return None
    return StateEvent(
        key=key if isinstance(key, int) else 0,
        value=value,
        missing=missing is True,
    )
