"""Session lifecycle for a single Everything Presence One."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
import contextlib
from functools import partial
import ipaddress
import logging
import socket
from typing import Any

from homeassistant.core import HomeAssistant, callback

from .const import (
    CONNECT_TIMEOUT,
    RECONNECT_MAX_DELAY,
    SETTING_IP,
    UNAVAILABLE_ENCRYPTED,
    UNAVAILABLE_GENERIC,
    UNAVAILABLE_TIMEOUT,
)
from .dispatcher import StateDispatcher
from .errors import (
    ConnectTimeout,
    PermanentMisconfiguration,
    TransientSessionError,
    is_encryption_mismatch,
)
from .models import (
    DeviceHost,
    DeviceSession,
    EntityHandle,
    SessionFactory,
    SessionState,
    Unsubscribe,
)
from .registry import EntityRegistry
from .settings import SettingsWriter

_LOGGER = logging.getLogger(__name__)


def format_hostname(host: str) -> str:
    """Return a resolvable host name.

    Bare mDNS names are reported without the .local suffix on some networks.
    """
    try:
        ipaddress.ip_address(host)
    except ValueError:
        pass
    else:
        return host
    host = host.rstrip(".")
    if "." in host:
        return host
    return f"{host}.local"


class EverythingPresenceOneHub:
    """Own the device session, its entity registry and reconnection."""

    def __init__(
        self,
        hass: HomeAssistant,
        host: str,
        port: int,
        device: DeviceHost,
        session_factory: SessionFactory,
        *,
        connect_timeout: float = CONNECT_TIMEOUT,
    ) -> None:
        """Initialize the hub."""
        self._hass = hass
        self._host = format_hostname(host)
        self._port = port
        self._device = device
        self._session_factory = session_factory
        self._connect_timeout = connect_timeout
        self._session: DeviceSession | None = None
        self._session_unsubscribers: list[Unsubscribe] = []
        self._initialized: asyncio.Future[None] | None = None
        self._connect_lock = asyncio.Lock()
        self._reconnect_task: asyncio.Task[None] | None = None
        self._reconnect_attempts = 0
        self._reconnect_requested = False
        self._stopping = False
        self._unavailable_logged = False
        self._state = SessionState.DISCONNECTED
        self._unavailable_reason: str | None = None
        self.registry = EntityRegistry(self._handle_entity_state)
        self.dispatcher = StateDispatcher(self.registry, device)
        self.settings_writer = SettingsWriter(self.registry)

    @property
    def host(self) -> str:
        """Return the host name used to connect."""
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def session(self) -> DeviceSession | None:
        """Return the live session, if any."""
        return self._session

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def unavailable_reason(self) -> str | None:
        return self._unavailable_reason

    @property
    def is_connected(self) -> bool:
        return self._state is SessionState.CONNECTED

    async def async_connect(self) -> None:
        """Open a new session, replacing any existing one."""
        self._stopping = False
        try:
            await self._async_connect()
        except ConnectTimeout:
            self._mark_unavailable(UNAVAILABLE_TIMEOUT)
            raise

    async def async_disconnect(self) -> None:
        """Close the session and stop reconnecting."""
        self._stopping = True
        if self._reconnect_task is not None:
            self._reconnect_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reconnect_task
            self._reconnect_task = None
        await self._async_teardown()

    async def async_write_setting(self, key: str, value: Any) -> bool:
        """Send a user-changed setting to the device."""
        return await self.settings_writer.async_write(key, value)

    async def async_apply_settings(
        self, new_settings: Mapping[str, Any], changed_keys: Iterable[str]
    ) -> None:
        """Send every changed setting to the device."""
        await self.settings_writer.async_apply(new_settings, changed_keys)

    async def _async_connect(self) -> None:
        """Tear down the current session, then open and initialize a new one."""
        async with self._connect_lock:
            await self._async_teardown()
            session = self._session_factory(self._host, self._port)
            initialized: asyncio.Future[None] = (
                asyncio.get_running_loop().create_future()
            )
            self._session = session
            self._initialized = initialized
            self._state = SessionState.CONNECTING
            self._session_unsubscribers = [
                session.on_new_entity(self._handle_new_entity),
                session.on_error(partial(self._handle_session_error, session)),
                session.on_initialized(partial(self._handle_initialized, session)),
            ]
            _LOGGER.debug("Connecting to %s:%s", self._host, self._port)
            session.connect()
            try:
                async with asyncio.timeout(self._connect_timeout):
                    await initialized
            except TimeoutError as err:
                _LOGGER.debug(
                    "No initialization from %s:%s within %ss",
                    self._host,
                    self._port,
                    self._connect_timeout,
                )
                await self._async_teardown()
                raise ConnectTimeout(
                    f"Timed out connecting to {self._host}:{self._port}"
                ) from err
            except (PermanentMisconfiguration, TransientSessionError):
                await self._async_teardown()
                raise

    async def _async_teardown(self) -> None:
        """Close the session and revoke every listener bound to it."""
        session = self._session
        self._session = None
        if session is not None:
            _LOGGER.debug("Disconnecting from %s:%s", self._host, self._port)
            # Closing may fail when the transport is already gone.
            try:
                await session.disconnect()
            except Exception as err:  # noqa: BLE001
                _LOGGER.error("Failed to disconnect client: %s", err)
            if self._state is not SessionState.UNAVAILABLE:
                self._state = SessionState.DISCONNECTED
        for unsubscribe in self._session_unsubscribers:
            unsubscribe()
        self._session_unsubscribers = []
        self.registry.clear()
        initialized = self._initialized
        self._initialized = None
        if initialized is not None and not initialized.done():
            initialized.set_exception(
                TransientSessionError("Session closed before initialization")
            )
            with contextlib.suppress(TransientSessionError):
                await initialized

    @callback
    def _handle_new_entity(
        self, raw: Mapping[str, Any], handle: EntityHandle
    ) -> None:
        """Register an entity announced by the session."""
        self.registry.register(raw, handle)

    def _handle_entity_state(self, object_id: str, state: Any) -> None:
        """Dispatch a state event from a registered entity."""
        self.dispatcher.dispatch(object_id, state)

    @callback
    def _handle_initialized(self, session: DeviceSession) -> None:
        """Finish connecting once the session reports it is initialized."""
        initialized = self._initialized
        if session is not self._session or initialized is None:
            return
        if initialized.done():
            return
        _LOGGER.debug("Connected to %s:%s", self._host, self._port)
        self._hass.async_create_task(self._async_list_entities(session))
        self._hass.async_create_task(self._async_update_ip())
        self._mark_available()
        initialized.set_result(None)

    @callback
    def _handle_session_error(
        self, session: DeviceSession, error: BaseException
    ) -> None:
        """Classify an asynchronous session error."""
        if session is not self._session:
            return
        _LOGGER.debug("Session error from %s:%s: %s", self._host, self._port, error)
        initialized = self._initialized
        pending = initialized is not None and not initialized.done()
        if is_encryption_mismatch(error):
            self._mark_unavailable(UNAVAILABLE_ENCRYPTED)
            if pending:
                initialized.set_exception(PermanentMisconfiguration(str(error)))
            return
        if pending:
            # The caller of the pending attempt decides what happens next.
            initialized.set_exception(TransientSessionError(str(error)))
            return
        self._log_unavailable()
        self._schedule_reconnect()

    async def _async_list_entities(self, session: DeviceSession) -> None:
        """Ask the session to announce its entities."""
        try:
            await session.list_entities()
        except Exception as err:  # noqa: BLE001
            _LOGGER.error("Failed to list entities: %s", err)

    async def _async_update_ip(self) -> None:
        """Resolve the host name and store the address for diagnostics."""
        try:
            address = await self._hass.async_add_executor_job(
                socket.gethostbyname, self._host
            )
        except OSError as err:
            _LOGGER.debug("Failed to update ip address in settings: %s", err)
            return
        _LOGGER.debug("Resolved %s to %s", self._host, address)
        try:
            self._device.set_settings({SETTING_IP: address})
        except Exception as err:  # noqa: BLE001
            _LOGGER.debug("Failed to update ip address in settings: %s", err)

    @callback
    def _schedule_reconnect(self) -> None:
        """Start reconnecting unless a reconnect is already running."""
        if self._stopping:
            return
        if self._reconnect_task is not None and not self._reconnect_task.done():
            # The running loop may be about to return on a session that just died.
            self._reconnect_requested = True
            return
        _LOGGER.debug("Creating reconnect task")
        self._reconnect_task = self._hass.async_create_task(
            self._async_reconnect_loop()
        )

    async def _async_reconnect_loop(self) -> None:
        """Reconnect with exponential backoff until connected or stopped."""
        while not self._stopping:
            _LOGGER.debug("Reconnect attempt %s starting", self._reconnect_attempts + 1)
            self._reconnect_requested = False
            try:
                await self._async_connect()
            except PermanentMisconfiguration as err:
                _LOGGER.error("Reconnect aborted: %s", err)
                return
            except Exception as err:  # noqa: BLE001
                _LOGGER.debug("Could not re-connect after error: %s", err)
                self._mark_unavailable(UNAVAILABLE_GENERIC)
            else:
                if not self._reconnect_requested:
                    self._reconnect_attempts = 0
                    return
                _LOGGER.debug("Connection lost again while reconnecting")
                continue
            self._reconnect_attempts += 1
            delay = min(RECONNECT_MAX_DELAY, 2**self._reconnect_attempts)
            _LOGGER.debug(
                "Reconnect attempt %s sleeping for %s seconds",
                self._reconnect_attempts,
                delay,
            )
            await asyncio.sleep(delay)

    def _mark_available(self) -> None:
        self._state = SessionState.CONNECTED
        self._unavailable_reason = None
        if self._unavailable_logged:
            _LOGGER.info("Connection to %s restored", self._host)
            self._unavailable_logged = False
        try:
            self._device.set_available()
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning("Could not set available: %s", err)

    def _mark_unavailable(self, reason: str) -> None:
        self._state = SessionState.UNAVAILABLE
        self._unavailable_reason = reason
        self._log_unavailable()
        _LOGGER.warning("%s is unavailable: %s", self._host, reason)
        try:
            self._device.set_unavailable(reason)
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning("Could not set unavailable: %s", err)

    def _log_unavailable(self) -> None:
        """Log the connection as lost once."""
        if self._unavailable_logged:
            return
        _LOGGER.info("Connection to %s lost", self._host)
        self._unavailable_logged = True
