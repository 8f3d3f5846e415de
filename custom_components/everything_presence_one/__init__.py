"""Set up the Everything Presence One integration."""

from __future__ import annotations

import contextlib
from functools import partial
import logging

from homeassistant.components import zeroconf
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, CONF_PORT, Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryError, ConfigEntryNotReady

from .const import DATA_COORDINATOR, DATA_HUB, DEFAULT_PORT, DOMAIN
from .coordinator import EverythingPresenceOneCoordinator
from .errors import ConnectTimeout, PermanentMisconfiguration, TransientSessionError
from .hub import EverythingPresenceOneHub
from .session import EsphomeSession

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [
    Platform.BINARY_SENSOR,
    Platform.NUMBER,
    Platform.SENSOR,
    Platform.SWITCH,
]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Everything Presence One from a config entry."""
    host = entry.data[CONF_HOST]
    port = entry.data.get(CONF_PORT, DEFAULT_PORT)
    zeroconf_instance = await zeroconf.async_get_instance(hass)

    coordinator = EverythingPresenceOneCoordinator(hass, entry)
    hub = EverythingPresenceOneHub(
        hass,
        host,
        port,
        coordinator,
        partial(EsphomeSession, zeroconf_instance=zeroconf_instance),
    )
    try:
        await hub.async_connect()
    except PermanentMisconfiguration as err:
        await hub.async_disconnect()
        raise ConfigEntryError(str(err)) from err
    except (ConnectTimeout, TransientSessionError) as err:
        _LOGGER.debug("Failed to set up connection to %s:%s: %s", host, port, err)
        with contextlib.suppress(Exception):
            await hub.async_disconnect()
        raise ConfigEntryNotReady(
            "The device did not become ready; check host and port"
        ) from err

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        DATA_HUB: hub,
        DATA_COORDINATOR: coordinator,
    }
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload an Everything Presence One config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    data = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    if data is not None:
        hub: EverythingPresenceOneHub | None = data.get(DATA_HUB)
        if hub is not None:
            await hub.async_disconnect()
    return unload_ok
