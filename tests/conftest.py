import asyncio
from collections.abc import Callable, Mapping
from typing import Any

import pytest


def make_entity(
    object_id: str,
    *,
    key: int = 1,
    device_class: str | None = None,
    unique_id: str | None = None,
    type_: str = "Sensor",
    unit: str | None = None,
) -> dict[str, Any]:
    config: dict[str, Any] = {
        "object_id": object_id,
        "key": key,
        "name": object_id.replace("_", " ").title(),
        "unique_id": unique_id or f"everything-presence-one-7083ccsensor_{object_id}",
        "icon": "",
        "disabled_by_default": False,
        "entity_category": 0,
    }
    if device_class is not None:
        config["device_class"] = device_class
    if unit is not None:
        config["unit_of_measurement"] = unit
    return {"config": config, "id": key, "name": config["name"], "type": type_}


def make_state(value: Any, *, key: int = 1, missing: bool = False) -> dict[str, Any]:
    return {"key": key, "state": value, "missing_state": missing}


class FakeHandle:
    def __init__(self) -> None:
        self.listeners: list[Callable[[Any], None]] = []
        self.commands: list[Any] = []

    def on_state(self, callback):
        self.listeners.append(callback)

        def _remove() -> None:
            if callback in self.listeners:
                self.listeners.remove(callback)

        return _remove

    async def set_state(self, value) -> None:
        self.commands.append(value)

    def revoke_listeners(self) -> None:
        self.listeners.clear()

    def emit(self, state) -> None:
        for listener in list(self.listeners):
            listener(state)


class FakeHost:
    def __init__(self) -> None:
        self.capabilities: dict[str, Any] = {}
        self.settings: dict[str, Any] = {}
        self.available = False
        self.unavailable_reasons: list[str] = []

    def set_capability_value(self, capability: str, value) -> None:
        self.capabilities[capability] = value

    def set_settings(self, settings: Mapping[str, Any]) -> None:
        self.settings.update(settings)

    def set_available(self) -> None:
        self.available = True

    def set_unavailable(self, reason: str) -> None:
        self.available = False
        self.unavailable_reasons.append(reason)


class FakeSession:
    """Session that initializes, fails or stays silent after connect()."""

    def __init__(
        self,
        host: str,
        port: int,
        *,
        initialize: bool = True,
        connect_error: BaseException | None = None,
        error_after_initialize: BaseException | None = None,
        entities: list[tuple[dict[str, Any], FakeHandle]] | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.initialize = initialize
        self.connect_error = connect_error
        self.error_after_initialize = error_after_initialize
        self.entities = entities or []
        self.connected = False
        self.disconnected = False
        self.entity_listeners: list[Callable] = []
        self.error_listeners: list[Callable] = []
        self.initialized_listeners: list[Callable] = []

    @staticmethod
    def _listen(listeners: list, callback) -> Callable[[], None]:
        listeners.append(callback)

        def _remove() -> None:
            if callback in listeners:
                listeners.remove(callback)

        return _remove

    def on_new_entity(self, callback):
        return self._listen(self.entity_listeners, callback)

    def on_error(self, callback):
        return self._listen(self.error_listeners, callback)

    def on_initialized(self, callback):
        return self._listen(self.initialized_listeners, callback)

    def connect(self) -> None:
        self.connected = True
        loop = asyncio.get_running_loop()
        if self.connect_error is not None:
            loop.call_soon(self.fail, self.connect_error)
        elif self.initialize:
            loop.call_soon(self.fire_initialized)
            if self.error_after_initialize is not None:
                loop.call_soon(self.fail, self.error_after_initialize)

    async def disconnect(self) -> None:
        self.disconnected = True
        for _payload, handle in self.entities:
            handle.revoke_listeners()

    async def list_entities(self) -> None:
        for payload, handle in self.entities:
            for listener in list(self.entity_listeners):
                listener(payload, handle)

    def fire_initialized(self) -> None:
        for listener in list(self.initialized_listeners):
            listener()

    def fail(self, error: BaseException) -> None:
        for listener in list(self.error_listeners):
            listener(error)


class FakeHass:
    """The parts of HomeAssistant the hub uses."""

    def __init__(self) -> None:
        self.tasks: list[asyncio.Task] = []

    def async_create_task(self, target, name=None, eager_start=True):
        task = asyncio.get_running_loop().create_task(target)
        self.tasks.append(task)
        return task

    async def async_add_executor_job(self, target, *args):
        return await asyncio.get_running_loop().run_in_executor(None, target, *args)

    async def async_block_till_done(self) -> None:
        while pending := [task for task in self.tasks if not task.done()]:
            await asyncio.gather(*pending, return_exceptions=True)


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def hass() -> FakeHass:
    return FakeHass()
