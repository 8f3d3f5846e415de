import pytest

from conftest import FakeHandle, make_entity, make_state
from custom_components.everything_presence_one.errors import (
    ContractViolation,
    MissingEntity,
)
from custom_components.everything_presence_one.registry import EntityRegistry


def _registry():
    received = []
    registry = EntityRegistry(lambda object_id, state: received.append((object_id, state)))
    return registry, received


def test_register_stores_entity_and_subscribes():
    registry, received = _registry()
    handle = FakeHandle()

    entry = registry.register(make_entity("temperature", device_class="temperature"), handle)

    assert entry is not None
    assert registry.lookup("temperature").entity.device_class == "temperature"
    assert "temperature" in registry
    handle.emit(make_state(21.5))
    assert received == [("temperature", make_state(21.5))]


def test_malformed_announcement_leaves_registry_unchanged():
    registry, _ = _registry()
    registry.register(make_entity("humidity"), FakeHandle())
    handle = FakeHandle()

    assert registry.register({"config": {"object_id": "broken"}}, handle) is None
    assert registry.register(None, handle) is None

    assert len(registry) == 1
    assert "broken" not in registry
    assert handle.listeners == []


def test_latest_registration_wins():
    registry, _ = _registry()
    first = FakeHandle()
    second = FakeHandle()

    registry.register(make_entity("temperature", key=1), first)
    registry.register(make_entity("temperature", key=2), second)

    entry = registry.lookup("temperature")
    assert entry.entity.key == 2
    assert entry.handle is second
    assert len(registry) == 1


def test_lookup_missing_raises():
    registry, _ = _registry()

    with pytest.raises(MissingEntity) as exc_info:
        registry.lookup("nope")

    assert str(exc_info.value) == "Missing entity nope"
    assert isinstance(exc_info.value, KeyError)
    assert registry.get("nope") is None


def test_clear_revokes_listeners():
    registry, received = _registry()
    handle = FakeHandle()
    registry.register(make_entity("temperature"), handle)

    registry.clear()
    handle.emit(make_state(20.0))

    assert len(registry) == 0
    assert handle.listeners == []
    assert received == []


def test_handle_without_capabilities_is_rejected():
    registry, _ = _registry()

    with pytest.raises(ContractViolation):
        registry.register(make_entity("temperature"), object())

    assert len(registry) == 0


def test_state_callback_errors_are_isolated():
    def _boom(object_id, state):
        raise RuntimeError("boom")

    registry = EntityRegistry(_boom)
    handle = FakeHandle()
    registry.register(make_entity("temperature"), handle)

    handle.emit(make_state(20.0))

    assert "temperature" in registry


def test_replaced_handle_stops_dispatching():
    registry, received = _registry()
    first = FakeHandle()
    second = FakeHandle()
    registry.register(make_entity("mmwave_distance", type_="Number"), first)
    registry.register(make_entity("mmwave_distance", type_="Number"), second)

    first.emit(make_state(3.0))
    registry.clear()
    first.emit(make_state(4.0))
    second.emit(make_state(5.0))

    assert received == []
    assert first.listeners == []
    assert second.listeners == []


def test_reregistering_same_handle_dispatches_once():
    registry, received = _registry()
    handle = FakeHandle()
    registry.register(make_entity("mmwave_distance", type_="Number"), handle)
    registry.register(make_entity("mmwave_distance", type_="Number"), handle)

    handle.emit(make_state(3.0))

    assert received == [("mmwave_distance", make_state(3.0))]
    assert len(handle.listeners) == 1
