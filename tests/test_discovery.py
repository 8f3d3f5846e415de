from types import SimpleNamespace

from custom_components.everything_presence_one.discovery import (
    DiscoveryRecord,
    matches,
    metadata_updates,
)


def _service_info(**overrides):
    values = {
        "name": "everything-presence-one-7083cc._esphomelib._tcp.local.",
        "hostname": "everything-presence-one-7083cc.local.",
        "host": "192.168.1.40",
        "port": 6053,
        "properties": {"version": "2023.7.1", "project_version": "1.1.6"},
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_from_zeroconf():
    record = DiscoveryRecord.from_zeroconf(_service_info())

    assert record.id == "everything-presence-one-7083cc"
    assert record.address == "192.168.1.40"
    assert record.host == "everything-presence-one-7083cc.local"
    assert record.port == 6053
    assert record.txt["project_version"] == "1.1.6"


def test_matches_by_id():
    record = DiscoveryRecord(id="everything-presence-one-7083cc")

    assert matches(record, "everything-presence-one-7083cc")
    assert not matches(record, "everything-presence-one-000000")


def test_metadata_updates_returns_only_changed_keys():
    record = DiscoveryRecord.from_zeroconf(_service_info())
    settings = {
        "ip": "192.168.1.40",
        "esp_home_version": "2023.4.2",
        "project_version": "1.1.6",
    }

    assert metadata_updates(record, settings) == {"esp_home_version": "2023.7.1"}


def test_metadata_updates_without_changes():
    record = DiscoveryRecord.from_zeroconf(_service_info())
    settings = {
        "ip": "192.168.1.40",
        "esp_home_version": "2023.7.1",
        "project_version": "1.1.6",
    }

    assert metadata_updates(record, settings) == {}


def test_metadata_updates_ignores_absent_fields():
    record = DiscoveryRecord(id="everything-presence-one-7083cc")

    assert metadata_updates(record, {}) == {}
