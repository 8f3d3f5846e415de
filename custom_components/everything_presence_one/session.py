"""ESPHome native API session used by the hub.

Responsibilities:
- Open one APIClient connection and report initialization and failures.
- Announce each listed entity together with a handle bound to this session.
- Route subscribed state updates to the handle of their entity.

Reconnecting is left to the hub.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
import contextlib
from enum import Enum
import logging
from typing import Any

from aioesphomeapi import (
    APIClient,
    APIConnectionError,
    EntityInfo,
    EntityState,
    RequiresEncryptionAPIError,
)

from .const import CLIENT_INFO, ENCRYPTION_EXPECTED_MARKER
from .errors import PermanentMisconfiguration, TransientSessionError
from .models import EntityHandle, StateValue, Unsubscribe

_LOGGER = logging.getLogger(__name__)

_OPTIONAL_CONFIG_FIELDS = (
    "unit_of_measurement",
    "accuracy_decimals",
    "force_update",
    "device_class",
    "state_class",
    "last_reset_type",
)


def _listen[T](listeners: list[T], callback: T) -> Unsubscribe:
    listeners.append(callback)

    def _remove() -> None:
        with contextlib.suppress(ValueError):
            listeners.remove(callback)

    return _remove


def entity_payload(info: EntityInfo) -> dict[str, Any]:
    """Return the announcement payload for an entity info."""
    config: dict[str, Any] = {
        "object_id": info.object_id,
        "key": info.key,
        "name": info.name,
        "unique_id": getattr(info, "unique_id", "") or "",
        "icon": info.icon or "",
        "disabled_by_default": bool(info.disabled_by_default),
        "entity_category": int(info.entity_category or 0),
    }
    for attr in _OPTIONAL_CONFIG_FIELDS:
        value = getattr(info, attr, None)
        if value is None:
            continue
        config[attr] = int(value) if isinstance(value, Enum) else value
    return {
        "config": config,
        "id": info.key,
        "name": info.name,
        "type": type(info).__name__.removesuffix("Info"),
    }


class EsphomeEntityHandle:
    """Handle for one entity of an ESPHome session."""

    def __init__(self, client: APIClient, info: EntityInfo) -> None:
        self._client = client
        self._info = info
        self._listeners: list[Callable[[Any], None]] = []

    @property
    def key(self) -> int:
        return self._info.key

    def on_state(self, callback: Callable[[Any], None]) -> Unsubscribe:
        return _listen(self._listeners, callback)

    async def set_state(self, value: StateValue) -> None:
        """Command the entity; booleans drive switches, numbers drive numbers."""
        if isinstance(value, bool):
            self._client.switch_command(self._info.key, value)
        else:
            self._client.number_command(self._info.key, float(value))

    def revoke_listeners(self) -> None:
        self._listeners.clear()

    def emit_state(self, state: Mapping[str, Any]) -> None:
        for listener in list(self._listeners):
            listener(state)


class EsphomeSession:
    """One ESPHome native API connection."""

    def __init__(
        self,
        host: str,
        port: int,
        *,
        zeroconf_instance: Any | None = None,
    ) -> None:
        """Initialize the session without connecting."""
        self._host = host
        self._port = port
        self._client = APIClient(
            host,
            port,
            "",
            client_info=CLIENT_INFO,
            zeroconf_instance=zeroconf_instance,
        )
        self._entity_listeners: list[Callable[[Mapping[str, Any], EntityHandle], None]] = []
        self._error_listeners: list[Callable[[BaseException], None]] = []
        self._initialized_listeners: list[Callable[[], None]] = []
        self._handles: dict[int, EsphomeEntityHandle] = {}
        self._connect_task: asyncio.Task[None] | None = None
        self._closing = False

    def on_new_entity(
        self, callback: Callable[[Mapping[str, Any], EntityHandle], None]
    ) -> Unsubscribe:
        return _listen(self._entity_listeners, callback)

    def on_error(self, callback: Callable[[BaseException], None]) -> Unsubscribe:
        return _listen(self._error_listeners, callback)

    def on_initialized(self, callback: Callable[[], None]) -> Unsubscribe:
        return _listen(self._initialized_listeners, callback)

    def connect(self) -> None:
        """Start connecting in the background."""
        self._closing = False
        self._connect_task = asyncio.get_running_loop().create_task(
            self._async_connect()
        )

    async def disconnect(self) -> None:
        """Stop connecting or close the connection."""
        self._closing = True
        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._connect_task
        self._connect_task = None
        for handle in self._handles.values():
            handle.revoke_listeners()
        self._handles.clear()
        await self._client.disconnect()

    async def list_entities(self) -> None:
        """Announce every entity, then subscribe to their states."""
        infos, _services = await self._client.list_entities_services()
        for info in infos:
            handle = EsphomeEntityHandle(self._client, info)
            self._handles[info.key] = handle
            payload = entity_payload(info)
            for listener in list(self._entity_listeners):
                listener(payload, handle)
        self._client.subscribe_states(self._on_state)

    async def _async_connect(self) -> None:
        try:
            await self._client.connect(on_stop=self._on_stop, login=True)
        except RequiresEncryptionAPIError as err:
            self._emit_error(
                PermanentMisconfiguration(f"{ENCRYPTION_EXPECTED_MARKER}: {err}")
            )
            return
        except APIConnectionError as err:
            self._emit_error(TransientSessionError(str(err)))
            return
        except Exception as err:  # noqa: BLE001
            _LOGGER.debug(
                "Unexpected error connecting to %s:%s",
                self._host,
                self._port,
                exc_info=True,
            )
            self._emit_error(TransientSessionError(str(err) or type(err).__name__))
            return
        _LOGGER.debug("API session with %s:%s established", self._host, self._port)
        for listener in list(self._initialized_listeners):
            listener()

    async def _on_stop(self, expected_disconnect: bool) -> None:
        if expected_disconnect or self._closing:
            return
        self._emit_error(
            TransientSessionError(f"Connection to {self._host}:{self._port} lost")
        )

    def _on_state(self, state: EntityState) -> None:
        handle = self._handles.get(state.key)
        if handle is None:
            return
        handle.emit_state(
            {
                "key": state.key,
                "state": getattr(state, "state", None),
                "missing_state": bool(getattr(state, "missing_state", False)),
            }
        )

    def _emit_error(self, error: BaseException) -> None:
        for listener in list(self._error_listeners):
            listener(error)
