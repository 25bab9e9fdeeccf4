"""Grow Targets integration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, cast

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, SupportsResponse
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.typing import ConfigType

from .const import DOMAIN, PLATFORMS
from .coordinator import GrowTargetsCoordinator
from .service_schemas import (
    GET_TIMELINE_SCHEMA,
    OPTIMIZE_SETTINGS_SCHEMA,
    REMOVE_GROWING_PROFILE_SCHEMA,
    REMOVE_PLANT_SCHEMA,
    SET_GROWING_PROFILE_SCHEMA,
    SET_PLANT_SCHEMA,
)
from .services import plant, profile, targets

CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)

_LOGGER = logging.getLogger(__name__)

SERVICES = (
    "set_plant",
    "remove_plant",
    "set_growing_profile",
    "remove_growing_profile",
    "optimize_settings",
    "get_timeline",
)


@dataclass
class GrowTargetsRuntimeData:
    """Runtime data for the Grow Targets integration."""

    coordinator: GrowTargetsCoordinator


type GrowTargetsConfigEntry = ConfigEntry[GrowTargetsRuntimeData]


async def _register_services(
    hass: HomeAssistant, coordinator: GrowTargetsCoordinator
) -> None:
    """Register services for the Grow Targets integration."""
    services = [
        (
            "set_plant",
            partial(plant.handle_set_plant, hass, coordinator),
            SET_PLANT_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            "remove_plant",
            partial(plant.handle_remove_plant, hass, coordinator),
            REMOVE_PLANT_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            "set_growing_profile",
            partial(profile.handle_set_growing_profile, hass, coordinator),
            SET_GROWING_PROFILE_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            "remove_growing_profile",
            partial(profile.handle_remove_growing_profile, hass, coordinator),
            REMOVE_GROWING_PROFILE_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            "optimize_settings",
            partial(targets.handle_optimize_settings, hass, coordinator),
            OPTIMIZE_SETTINGS_SCHEMA,
            SupportsResponse.ONLY,
        ),
        (
            "get_timeline",
            partial(targets.handle_get_timeline, hass, coordinator),
            GET_TIMELINE_SCHEMA,
            SupportsResponse.ONLY,
        ),
    ]

    for service_name, handler, schema, supports_response in services:
        hass.services.async_register(
            DOMAIN,
            service_name,
            cast(Any, handler),
            schema=schema,
            supports_response=supports_response,
        )


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up the Grow Targets component."""
    return True


async def async_setup_entry(hass: HomeAssistant, entry: GrowTargetsConfigEntry) -> bool:
    """Set up Grow Targets from a config entry."""
    _LOGGER.debug("Setting up Grow Targets integration for entry %s", entry.entry_id)

    coordinator = GrowTargetsCoordinator(
        hass,
        config=dict(entry.data),
        options=dict(entry.options),
    )
    await coordinator.async_load()

    entry.runtime_data = GrowTargetsRuntimeData(coordinator=coordinator)

    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    _LOGGER.debug("Registering services for domain %s", DOMAIN)
    await _register_services(hass, coordinator)

    # Populate data before the platforms create their entities
    await coordinator.async_config_entry_first_refresh()

    _LOGGER.debug("Setting up platforms: %s", PLATFORMS)
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    return True


async def async_unload_entry(hass: HomeAssistant, entry: GrowTargetsConfigEntry) -> bool:
    """Unload a config entry."""
    _LOGGER.debug("Unloading config entry %s for Grow Targets", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unload_ok:
        _async_remove_services(hass)
        _LOGGER.info("Unloaded Grow Targets for entry %s", entry.entry_id)
        return True

    _LOGGER.error("Failed to unload platforms for entry %s", entry.entry_id)
    return False


def _async_remove_services(hass: HomeAssistant) -> None:
    """Remove services for the Grow Targets integration."""
    for service in SERVICES:
        hass.services.async_remove(DOMAIN, service)


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle options update."""
    await hass.config_entries.async_reload(entry.entry_id)
