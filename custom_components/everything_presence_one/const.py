"""Constants for everything_presence_one."""

from enum import StrEnum
from logging import Logger, getLogger

LOGGER: Logger = getLogger(__package__)

DOMAIN = "everything_presence_one"
MANUFACTURER = "Everything Smart Home"
MODEL = "Everything Presence One"

CONF_DEVICE_ID = "device_id"

DEFAULT_PORT = 6053
CLIENT_INFO = "homeassistant"
ZEROCONF_NAME_PREFIX = "everything-presence-one"

DATA_HUB = "hub"
DATA_COORDINATOR = "coordinator"

# Seconds to wait for the session initialization signal.
CONNECT_TIMEOUT = 15.0
RECONNECT_MAX_DELAY = 300

ENCRYPTION_EXPECTED_MARKER = "Bad format: Encryption expected"

UNAVAILABLE_TIMEOUT = "Timed out while connecting to the device"
UNAVAILABLE_GENERIC = "The device could not be reached"
UNAVAILABLE_ENCRYPTED = (
    "The device expects an encrypted connection, which is not supported; "
    "flash firmware without API encryption and add the device again"
)


class Capability(StrEnum):
    """User-visible values reported by the device."""

    MEASURE_TEMPERATURE = "measure_temperature"
    MEASURE_HUMIDITY = "measure_humidity"
    MEASURE_LUMINANCE = "measure_luminance"
    ALARM_MOTION_PIR = "alarm_motion.pir"
    ALARM_MOTION_MMWAVE = "alarm_motion.mmwave"
    ALARM_MOTION = "alarm_motion"


class Setting(StrEnum):
    """Device parameters mirrored into the config entry options."""

    ESP_32_STATUS_LED = "esp32_status_led"
    MMWAVE_LED = "mmwave_led"
    MMWAVE_ON_LATENCY = "mmwave_on_latency"
    MMWAVE_OFF_LATENCY = "mmwave_off_latency"
    MMWAVE_SENSITIVITY = "mmwave_sensitivity"
    MMWAVE_DISTANCE = "mmwave_distance"


NUMBER_SETTINGS: frozenset[Setting] = frozenset(
    {
        Setting.MMWAVE_SENSITIVITY,
        Setting.MMWAVE_ON_LATENCY,
        Setting.MMWAVE_OFF_LATENCY,
        Setting.MMWAVE_DISTANCE,
    }
)
BOOLEAN_SETTINGS: frozenset[Setting] = frozenset(
    {Setting.MMWAVE_LED, Setting.ESP_32_STATUS_LED}
)

SETTING_IP = "ip"
SETTING_ESP_HOME_VERSION = "esp_home_version"
SETTING_PROJECT_VERSION = "project_version"
