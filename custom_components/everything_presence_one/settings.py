"""Write user-changed settings back to the device."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
from typing import Any

from .dispatcher import matches_type, setting_for
from .registry import EntityRegistry

_LOGGER = logging.getLogger(__name__)


class SettingsWriter:
    """Command device parameter entities from setting changes."""

    def __init__(self, registry: EntityRegistry) -> None:
        self._registry = registry

    async def async_write(self, key: str, value: Any) -> bool:
        """Send a setting to the device.

        Returns True if the device was commanded. Raises MissingEntity when the
        matching entity is not registered in the current session.
        """
        target = setting_for(key)
        if target is None:
            _LOGGER.debug("Unknown changed setting key: %s", key)
            return False
        setting, expects_bool = target
        entry = self._registry.lookup(setting.value)
        if not matches_type(value, expects_bool):
            _LOGGER.debug(
                "Ignoring setting %s with unexpected value %r", setting, value
            )
            return False
        _LOGGER.debug("Writing setting %s = %s", setting, value)
        await entry.handle.set_state(value)
        return True

    async def async_apply(
        self, new_settings: Mapping[str, Any], changed_keys: Iterable[str]
    ) -> None:
        """Send every changed setting in order."""
        for key in changed_keys:
            await self.async_write(key, new_settings.get(key))
