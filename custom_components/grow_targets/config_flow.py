"""Configuration flow for the Grow Targets integration.

The initial setup asks for a name and the entities the integration reads:
the temperature and humidity sensors, an optional soil moisture sensor, and an
optional controller entity whose state attributes carry its current settings.
The options flow lets those entities be changed later.
"""

from __future__ import annotations

import logging
from typing import Any

import homeassistant.helpers.config_validation as cv
import voluptuous as vol
from homeassistant import config_entries
from homeassistant.config_entries import ConfigEntry, ConfigFlowResult, OptionsFlow
from homeassistant.core import callback
from homeassistant.helpers import selector

from .const import (
    CONF_CONTROLLER_ENTITY,
    CONF_HUMIDITY_SENSOR,
    CONF_SOIL_MOISTURE_SENSOR,
    CONF_TEMPERATURE_SENSOR,
    DEFAULT_NAME,
    DOMAIN,
)

_LOGGER = logging.getLogger(__name__)


def _sensor_schema(defaults: dict[str, Any]) -> dict[vol.Marker, Any]:
    """Build the entity selector fields, prefilled from ``defaults``."""
    return {
        vol.Required(
            CONF_TEMPERATURE_SENSOR,
            default=defaults.get(CONF_TEMPERATURE_SENSOR, vol.UNDEFINED),
        ): selector.EntitySelector(
            selector.EntitySelectorConfig(
                domain=["sensor", "input_number"], device_class="temperature"
            )
        ),
        vol.Required(
            CONF_HUMIDITY_SENSOR,
            default=defaults.get(CONF_HUMIDITY_SENSOR, vol.UNDEFINED),
        ): selector.EntitySelector(
            selector.EntitySelectorConfig(
                domain=["sensor", "input_number"], device_class="humidity"
            )
        ),
        vol.Optional(
            CONF_SOIL_MOISTURE_SENSOR,
            default=defaults.get(CONF_SOIL_MOISTURE_SENSOR, vol.UNDEFINED),
        ): selector.EntitySelector(
            selector.EntitySelectorConfig(domain=["sensor", "input_number"])
        ),
        vol.Optional(
            CONF_CONTROLLER_ENTITY,
            default=defaults.get(CONF_CONTROLLER_ENTITY, vol.UNDEFINED),
        ): selector.EntitySelector(selector.EntitySelectorConfig()),
    }


STEP_USER_DATA_SCHEMA = vol.Schema(
    {
        vol.Optional("name", default=DEFAULT_NAME): cv.string,
        **_sensor_schema({}),
    }
)


class ConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle the initial configuration flow for Grow Targets."""

    VERSION = 1
    MINOR_VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the first step of the configuration flow.

        Args:
            user_input: The user's input from the form, if any.

        Returns:
            A ConfigFlowResult creating the entry or showing the form.
        """
        await self.async_set_unique_id(DOMAIN)
        self._abort_if_unique_id_configured()

        errors: dict[str, str] = {}
        if user_input is not None:
            if user_input[CONF_TEMPERATURE_SENSOR] == user_input[CONF_HUMIDITY_SENSOR]:
                errors["base"] = "same_sensor"
            else:
                name = user_input.pop("name", DEFAULT_NAME)
                _LOGGER.debug("Creating Grow Targets entry %s: %s", name, user_input)
                return self.async_create_entry(title=name, data=user_input)

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_DATA_SCHEMA,
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> OptionsFlowHandler:
        """Get the options flow for this handler."""
        return OptionsFlowHandler(config_entry)


class OptionsFlowHandler(OptionsFlow):
    """Change the entities a Grow Targets entry reads."""

    def __init__(self, config_entry: ConfigEntry) -> None:
        """Initialize the options flow handler."""
        self._config_entry = config_entry

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Show and store the sensor selection."""
        errors: dict[str, str] = {}
        if user_input is not None:
            if user_input[CONF_TEMPERATURE_SENSOR] == user_input[CONF_HUMIDITY_SENSOR]:
                errors["base"] = "same_sensor"
            else:
                return self.async_create_entry(title="", data=user_input)

        current = {**self._config_entry.data, **self._config_entry.options}
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(_sensor_schema(current)),
            errors=errors,
        )
