from dataclasses import dataclass
from enum import IntEnum

import pytest

from custom_components.everything_presence_one.errors import TransientSessionError
from custom_components.everything_presence_one.schema import decode_entity
from custom_components.everything_presence_one.session import (
    EsphomeEntityHandle,
    EsphomeSession,
    entity_payload,
)


class StateClass(IntEnum):
    NONE = 0
    MEASUREMENT = 1


@dataclass
class SensorInfo:
    object_id: str = "temperature"
    key: int = 11
    name: str = "Temperature"
    unique_id: str = "everything-presence-one-7083ccsensor_temperature"
    icon: str = ""
    unit_of_measurement: str = "°C"
    accuracy_decimals: int = 1
    force_update: bool = False
    device_class: str = "temperature"
    state_class: StateClass = StateClass.MEASUREMENT
    disabled_by_default: bool = False
    entity_category: int = 0


@dataclass
class NumberInfo:
    object_id: str = "mmwave_distance"
    key: int = 12
    name: str = "mmWave distance"
    icon: str = ""
    disabled_by_default: bool = False
    entity_category: int = 1


class FakeClient:
    def __init__(self):
        self.calls = []

    def switch_command(self, key, state):
        self.calls.append(("switch", key, state))

    def number_command(self, key, state):
        self.calls.append(("number", key, state))


def test_payload_from_sensor_info_is_valid():
    payload = entity_payload(SensorInfo())

    assert payload["type"] == "Sensor"
    assert payload["id"] == 11
    assert payload["config"]["state_class"] == 1
    entity = decode_entity(payload).value
    assert entity.object_id == "temperature"
    assert entity.device_class == "temperature"
    assert entity.unit == "°C"


def test_payload_without_unique_id():
    payload = entity_payload(NumberInfo())

    assert payload["type"] == "Number"
    assert payload["config"]["unique_id"] == ""
    assert "device_class" not in payload["config"]
    assert decode_entity(payload).ok


@pytest.mark.asyncio
async def test_handle_commands_by_value_type():
    client = FakeClient()
    handle = EsphomeEntityHandle(client, NumberInfo())

    await handle.set_state(True)
    await handle.set_state(315)

    assert client.calls == [("switch", 12, True), ("number", 12, 315.0)]


def test_handle_revokes_listeners():
    handle = EsphomeEntityHandle(FakeClient(), NumberInfo())
    received = []
    unsubscribe = handle.on_state(received.append)

    handle.emit_state({"key": 12, "state": 1.0})
    unsubscribe()
    handle.emit_state({"key": 12, "state": 2.0})
    handle.on_state(received.append)
    handle.revoke_listeners()
    handle.emit_state({"key": 12, "state": 3.0})

    assert received == [{"key": 12, "state": 1.0}]


class BrokenClient:
    async def connect(self, on_stop=None, login=False):
        raise OSError("network unreachable")

    async def disconnect(self):
        pass


@pytest.mark.asyncio
async def test_unexpected_connect_error_is_reported():
    session = EsphomeSession("10.0.0.5", 6053)
    session._client = BrokenClient()
    errors = []
    initialized = []
    session.on_error(errors.append)
    session.on_initialized(lambda: initialized.append(True))

    session.connect()
    await session._connect_task

    assert len(errors) == 1
    assert isinstance(errors[0], TransientSessionError)
    assert "network unreachable" in str(errors[0])
    assert initialized == []

    await session.disconnect()
