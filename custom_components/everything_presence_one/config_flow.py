"""Config flow for the Everything Presence One integration."""

from __future__ import annotations

import logging
from typing import Any

from aioesphomeapi import APIClient, APIConnectionError, RequiresEncryptionAPIError
import voluptuous as vol

from homeassistant.components import zeroconf
from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.const import CONF_HOST, CONF_PORT
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.service_info.zeroconf import ZeroconfServiceInfo

from .const import (
    CLIENT_INFO,
    CONF_DEVICE_ID,
    DATA_HUB,
    DEFAULT_PORT,
    DOMAIN,
    ZEROCONF_NAME_PREFIX,
    Setting,
)
from .discovery import DiscoveryRecord, matches, metadata_updates
from .errors import MissingEntity
from .hub import EverythingPresenceOneHub, format_hostname

_LOGGER = logging.getLogger(__name__)

STEP_USER_DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_HOST): cv.string,
        vol.Optional(CONF_PORT, default=DEFAULT_PORT): cv.port,
    }
)

# Ranges match the number entities.
SETTINGS_SCHEMA = vol.Schema(
    {
        vol.Optional(Setting.MMWAVE_SENSITIVITY.value): vol.All(
            vol.Coerce(int), vol.Range(min=0, max=9)
        ),
        vol.Optional(Setting.MMWAVE_ON_LATENCY.value): vol.All(
            vol.Coerce(float), vol.Range(min=0, max=60)
        ),
        vol.Optional(Setting.MMWAVE_OFF_LATENCY.value): vol.All(
            vol.Coerce(float), vol.Range(min=1, max=600)
        ),
        vol.Optional(Setting.MMWAVE_DISTANCE.value): vol.All(
            vol.Coerce(float), vol.Range(min=0, max=800)
        ),
        vol.Optional(Setting.MMWAVE_LED.value): cv.boolean,
        vol.Optional(Setting.ESP_32_STATUS_LED.value): cv.boolean,
    }
)


def hub_for_entry(
    hass: HomeAssistant, entry_id: str
) -> EverythingPresenceOneHub | None:
    """Return the hub of a loaded config entry."""
    data = hass.data.get(DOMAIN, {}).get(entry_id)
    if data is None:
        return None
    return data.get(DATA_HUB)


class EverythingPresenceOneConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Everything Presence One."""

    VERSION = 1

    def __init__(self) -> None:
        """Initialize the flow."""
        self._record: DiscoveryRecord | None = None

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> OptionsFlow:
        """Return the settings flow."""
        return EverythingPresenceOneOptionsFlow()

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle a manually entered host."""
        errors: dict[str, str] = {}
        if user_input is not None:
            host = user_input[CONF_HOST]
            port = user_input[CONF_PORT]
            device_id: str | None = None
            try:
                device_id = await self._async_fetch_device_name(host, port)
            except RequiresEncryptionAPIError:
                errors["base"] = "encryption_unsupported"
            except APIConnectionError:
                errors["base"] = "cannot_connect"
            if device_id is not None:
                await self.async_set_unique_id(device_id)
                self._abort_if_unique_id_configured(
                    updates={CONF_HOST: host, CONF_PORT: port}
                )
                return self.async_create_entry(
                    title=device_id,
                    data={CONF_HOST: host, CONF_PORT: port, CONF_DEVICE_ID: device_id},
                )

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_DATA_SCHEMA,
            errors=errors,
        )

    async def async_step_zeroconf(
        self, discovery_info: ZeroconfServiceInfo
    ) -> ConfigFlowResult:
        """Handle a device sighting on the network."""
        record = DiscoveryRecord.from_zeroconf(discovery_info)
        if not record.id.startswith(ZEROCONF_NAME_PREFIX):
            return self.async_abort(reason="not_everything_presence_one")

        for entry in self._async_current_entries(include_ignore=False):
            device_id = entry.data.get(CONF_DEVICE_ID) or entry.unique_id
            if device_id is None or not matches(record, device_id):
                continue
            updates = metadata_updates(record, entry.options)
            if updates:
                _LOGGER.debug("Refreshing metadata of %s: %s", device_id, updates)
                self.hass.config_entries.async_update_entry(
                    entry, options={**entry.options, **updates}
                )
            return self.async_abort(reason="already_configured")

        await self.async_set_unique_id(record.id)
        self._abort_if_unique_id_configured()
        self._record = record
        self.context["title_placeholders"] = {"name": record.id}
        return await self.async_step_discovery_confirm()

    async def async_step_discovery_confirm(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Confirm adding a discovered device."""
        record = self._record
        if record is None:
            return self.async_abort(reason="missing_context")
        if user_input is None:
            return self.async_show_form(
                step_id="discovery_confirm",
                description_placeholders={"name": record.id},
            )
        return self.async_create_entry(
            title=record.id,
            data={
                CONF_HOST: record.host or record.address,
                CONF_PORT: record.port or DEFAULT_PORT,
                CONF_DEVICE_ID: record.id,
            },
            options=metadata_updates(record, {}),
        )

    async def _async_fetch_device_name(self, host: str, port: int) -> str:
        """Connect once to read the device name."""
        client = APIClient(
            format_hostname(host),
            port,
            "",
            client_info=CLIENT_INFO,
            zeroconf_instance=await zeroconf.async_get_instance(self.hass),
        )
        try:
            await client.connect(login=True)
            device_info = await client.device_info()
        finally:
            await client.disconnect()
        return device_info.name


class EverythingPresenceOneOptionsFlow(OptionsFlow):
    """Edit the device settings and send the changes to the device."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Show the settings form."""
        options = self.config_entry.options
        errors: dict[str, str] = {}
        if user_input is not None:
            changed = [
                key for key, value in user_input.items() if options.get(key) != value
            ]
            hub = hub_for_entry(self.hass, self.config_entry.entry_id)
            if hub is None:
                errors["base"] = "setting_unavailable"
            else:
                try:
                    await hub.async_apply_settings(user_input, changed)
                except MissingEntity as err:
                    _LOGGER.debug("Could not apply settings: %s", err)
                    errors["base"] = "setting_unavailable"
                else:
                    return self.async_create_entry(data={**options, **user_input})

        return self.async_show_form(
            step_id="init",
            data_schema=self.add_suggested_values_to_schema(
                SETTINGS_SCHEMA, user_input or options
            ),
            errors=errors,
        )
