import pytest

from conftest import FakeHandle, make_entity
from custom_components.everything_presence_one.errors import MissingEntity
from custom_components.everything_presence_one.registry import EntityRegistry
from custom_components.everything_presence_one.settings import SettingsWriter


def _writer(*object_ids):
    registry = EntityRegistry(lambda object_id, state: None)
    handles = {}
    for key, object_id in enumerate(object_ids, start=1):
        handles[object_id] = FakeHandle()
        registry.register(make_entity(object_id, key=key), handles[object_id])
    return SettingsWriter(registry), handles


@pytest.mark.asyncio
async def test_write_commands_the_handle():
    writer, handles = _writer("mmwave_distance", "esp32_status_led")

    assert await writer.async_write("mmwave_distance", 315.0) is True
    assert await writer.async_write("esp32_status_led", False) is True

    assert handles["mmwave_distance"].commands == [315.0]
    assert handles["esp32_status_led"].commands == [False]


@pytest.mark.asyncio
async def test_write_missing_entity_raises():
    writer, _ = _writer("mmwave_led")

    with pytest.raises(MissingEntity):
        await writer.async_write("mmwave_sensitivity", 3)


@pytest.mark.asyncio
async def test_write_mismatched_type_is_skipped():
    writer, handles = _writer("mmwave_led", "mmwave_on_latency")

    assert await writer.async_write("mmwave_led", 1) is False
    assert await writer.async_write("mmwave_on_latency", True) is False

    assert handles["mmwave_led"].commands == []
    assert handles["mmwave_on_latency"].commands == []


@pytest.mark.asyncio
async def test_write_unknown_key_is_ignored():
    writer, _ = _writer("mmwave_led")

    assert await writer.async_write("ip", "10.0.0.5") is False


@pytest.mark.asyncio
async def test_apply_writes_only_changed_keys():
    writer, handles = _writer("mmwave_led", "mmwave_off_latency", "mmwave_sensitivity")
    new_settings = {
        "mmwave_led": True,
        "mmwave_off_latency": 30.0,
        "mmwave_sensitivity": 5,
    }

    await writer.async_apply(new_settings, ["mmwave_off_latency", "mmwave_led"])

    assert handles["mmwave_off_latency"].commands == [30.0]
    assert handles["mmwave_led"].commands == [True]
    assert handles["mmwave_sensitivity"].commands == []
