"""Discovery records and metadata refresh for a configured device."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .const import SETTING_ESP_HOME_VERSION, SETTING_IP, SETTING_PROJECT_VERSION


@dataclass(frozen=True, slots=True)
class DiscoveryRecord:
    """A network sighting of a device."""

    id: str
    address: str | None = None
    host: str | None = None
    port: int | None = None
    txt: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_zeroconf(cls, info: Any) -> DiscoveryRecord:
        """Build a record from a zeroconf service info."""
        name = str(getattr(info, "name", "") or "")
        hostname = getattr(info, "hostname", None)
        host = getattr(info, "host", None)
        properties = getattr(info, "properties", None) or {}
        return cls(
            id=name.split(".", 1)[0],
            address=str(host) if host else None,
            host=str(hostname).rstrip(".") if hostname else None,
            port=getattr(info, "port", None),
            txt=MappingProxyType(dict(properties)),
        )


def matches(record: DiscoveryRecord, device_id: str) -> bool:
    """Return True if the record belongs to the device."""
    return record.id == device_id


def metadata_updates(
    record: DiscoveryRecord, settings: Mapping[str, Any]
) -> dict[str, Any]:
    """Return the diagnostic settings that differ from the record."""
    updates: dict[str, Any] = {}
    if isinstance(record.address, str) and settings.get(SETTING_IP) != record.address:
        updates[SETTING_IP] = record.address
    version = record.txt.get("version")
    if isinstance(version, str) and settings.get(SETTING_ESP_HOME_VERSION) != version:
        updates[SETTING_ESP_HOME_VERSION] = version
    project_version = record.txt.get("project_version")
    if (
        isinstance(project_version, str)
        and settings.get(SETTING_PROJECT_VERSION) != project_version
    ):
        updates[SETTING_PROJECT_VERSION] = project_version
    return updates
