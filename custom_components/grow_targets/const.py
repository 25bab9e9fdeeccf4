"""Constants for the Grow Targets integration."""

from datetime import date, timedelta

import voluptuous as vol

DOMAIN = "grow_targets"
STORAGE_VERSION = 1
STORAGE_KEY = f"{DOMAIN}_storage"
PLATFORMS: list[str] = [
    "sensor",
]

DEFAULT_NAME = "Grow Targets"
DEFAULT_UPDATE_INTERVAL = timedelta(minutes=5)

# Config entry keys
CONF_TEMPERATURE_SENSOR = "temperature_sensor"
CONF_HUMIDITY_SENSOR = "humidity_sensor"
CONF_SOIL_MOISTURE_SENSOR = "soil_moisture_sensor"
CONF_CONTROLLER_ENTITY = "controller_entity"

# Stage timeline
DEFAULT_STAGE_DURATION_DAYS = 14

# Stage name aliases used when a profile names a stage differently than the
# schedule does (e.g. "veg" vs "vegetation").
STAGE_ALIASES: dict[str, tuple[str, ...]] = {
    "seedling": ("seedling", "seedlings", "seed"),
    "vegetation": ("veg", "vegetative", "vegetation", "grow"),
    "flowering": ("bloom", "flowering", "flower"),
    "flushing": ("flush", "flushing", "rinse"),
    "drying": ("drying", "dry", "cure"),
}

# Timeline alerts
ALERT_RELEVANCE_DAYS = 3
DEFAULT_ALERT_TYPE = "info"

# VPD
LEAF_TEMP_OFFSET = -2.0
VPD_ADVICE_TARGET = 1.0
VPD_DRY_THRESHOLD = 1.2
TEMPERATURE_TOLERANCE = 1.0
ZONE_OFFLINE = "offline"

# Controller settings keys
SETTING_TARGET_TEMP = "target_temp"
SETTING_TARGET_HUMIDITY = "target_humidity"
SETTING_LIGHT_START_HOUR = "light_start_hour"
SETTING_LIGHT_START_MINUTE = "light_start_minute"
SETTING_LIGHT_END_HOUR = "light_end_hour"
SETTING_LIGHT_END_MINUTE = "light_end_minute"
SETTING_LIGHT_MODE = "light_mode"

CONTROLLER_SETTING_KEYS = (
    SETTING_TARGET_TEMP,
    SETTING_TARGET_HUMIDITY,
    SETTING_LIGHT_START_HOUR,
    SETTING_LIGHT_START_MINUTE,
    SETTING_LIGHT_END_HOUR,
    SETTING_LIGHT_END_MINUTE,
    SETTING_LIGHT_MODE,
)

# Short attribute names some controllers report, mapped to the keys above
CONTROLLER_SETTING_ALIASES: dict[str, str] = {
    "target_hum": SETTING_TARGET_HUMIDITY,
    "light_start_h": SETTING_LIGHT_START_HOUR,
    "light_start_m": SETTING_LIGHT_START_MINUTE,
    "light_end_h": SETTING_LIGHT_END_HOUR,
    "light_end_m": SETTING_LIGHT_END_MINUTE,
}

LIGHT_START_HOUR = 6
LIGHT_START_MINUTE = 0
LIGHT_MODE_AUTOMATIC = "automatic"


# --- Validators ---


def valid_date_or_none(value):
    """Validate that a value is a valid date or None for voluptuous schemas.

    Args:
        value: The value to validate.

    Returns:
        The parsed date object or None.

    Raises:
        vol.Invalid: If the value is not a valid date format.
    """
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).replace("Z", "")[:10])
    except ValueError:
        raise vol.Invalid(
            f"'{value}' is not a valid date or ISO format string"
        ) from None


def valid_environment_targets(value):
    """Validate environment targets given either as a list or a keyed mapping."""
    if isinstance(value, list):
        if not all(isinstance(item, dict) for item in value):
            raise vol.Invalid("environment target list entries must be mappings")
        return value
    if isinstance(value, dict):
        for key, item in value.items():
            entries = item if isinstance(item, list) else [item]
            if not all(isinstance(entry, dict) for entry in entries):
                raise vol.Invalid(
                    f"environment targets for '{key}' must be a mapping or a list of mappings"
                )
        return value
    raise vol.Invalid("environment_targets must be a list or a mapping")
