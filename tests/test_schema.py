from types import SimpleNamespace

import pytest

from conftest import make_entity, make_state
from custom_components.everything_presence_one.errors import ValidationError
from custom_components.everything_presence_one.schema import (
    decode_entity,
    read_state,
    validate_entity,
)


def test_decode_entity_returns_typed_entity():
    raw = make_entity("illuminance", key=920262939, device_class="illuminance", unit="lx")

    decoded = decode_entity(raw)

    assert decoded.ok
    entity = decoded.value
    assert entity.object_id == "illuminance"
    assert entity.key == 920262939
    assert entity.device_class == "illuminance"
    assert entity.unit == "lx"
    assert entity.type == "Sensor"


def test_decode_entity_keeps_unknown_fields():
    raw = make_entity("temperature", device_class="temperature")
    raw["config"]["something_new"] = 1
    raw["extra"] = True

    assert decode_entity(raw).ok


def test_empty_device_class_and_unit_become_none():
    raw = make_entity("mmwave_led", type_="Switch")
    raw["config"]["device_class"] = ""
    raw["config"]["unit_of_measurement"] = ""

    entity = decode_entity(raw).value

    assert entity.device_class is None
    assert entity.unit is None


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "temperature",
        {},
        {"id": 1, "name": "x", "type": "Sensor"},
    ],
)
def test_decode_entity_reports_malformed_payloads(raw):
    decoded = decode_entity(raw)

    assert not decoded.ok
    assert decoded.value is None
    assert decoded.error


def test_bool_is_not_accepted_as_key():
    raw = make_entity("temperature")
    raw["config"]["key"] = True

    assert not decode_entity(raw).ok


def test_validate_entity_raises_validation_error():
    raw = make_entity("temperature")
    del raw["config"]["object_id"]

    with pytest.raises(ValidationError):
        validate_entity(raw)


def test_read_state_from_mapping():
    state = read_state(make_state(21.5, key=7))

    assert state.key == 7
    assert state.value == 21.5
    assert state.missing is False


def test_read_state_from_object():
    state = read_state(SimpleNamespace(key=3, state=True, missing_state=True))

    assert state.value is True
    assert state.missing is True


def test_read_state_ignores_non_numeric_values():
    assert read_state(make_state("on")) is None
    assert read_state(make_state(None)) is None
    assert read_state(object()) is None
