"""Service schemas for Grow Targets."""

from __future__ import annotations

import voluptuous as vol
from homeassistant.helpers import config_validation as cv

from .const import valid_date_or_none, valid_environment_targets

# Plant services
SET_PLANT_SCHEMA = vol.Schema(
    {
        vol.Optional("plant_id"): cv.string,
        vol.Optional("start_date"): valid_date_or_none,
        vol.Optional("strain"): cv.string,
        vol.Optional("name"): cv.string,
    },
)

REMOVE_PLANT_SCHEMA = vol.Schema(
    {
        vol.Required("plant_id"): cv.string,
    },
)

# Growing profile services
STAGE_SCHEMA = vol.Schema(
    {
        vol.Required("name"): cv.string,
        vol.Optional("duration_days"): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional("weeks"): vol.Any(cv.string, vol.Coerce(float)),
    },
    extra=vol.ALLOW_EXTRA,
)

ALERT_SCHEMA = vol.Schema(
    {
        vol.Required("trigger_stage"): cv.string,
        vol.Optional("day_offset", default=0): vol.All(
            vol.Coerce(int), vol.Range(min=0)
        ),
        vol.Required("message"): cv.string,
        vol.Optional("type"): cv.string,
    },
)

SET_GROWING_PROFILE_SCHEMA = vol.Schema(
    {
        vol.Required("name"): cv.string,
        vol.Required("stages"): vol.All(cv.ensure_list, [STAGE_SCHEMA]),
        vol.Optional("environment_targets"): valid_environment_targets,
        vol.Optional("presets"): valid_environment_targets,
        vol.Optional("timeline_alerts", default=[]): vol.All(
            cv.ensure_list, [ALERT_SCHEMA]
        ),
        vol.Optional("total_days"): vol.All(vol.Coerce(int), vol.Range(min=1)),
    },
)

REMOVE_GROWING_PROFILE_SCHEMA = vol.Schema(
    {
        vol.Required("name"): cv.string,
    },
)

# Target services
OPTIMIZE_SETTINGS_SCHEMA = vol.Schema(
    {
        vol.Required("plant_id"): cv.string,
    },
)

GET_TIMELINE_SCHEMA = vol.Schema(
    {
        vol.Required("plant_id"): cv.string,
    },
)
