"""Service handlers for plants."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import ServiceValidationError

from ..coordinator import GrowTargetsCoordinator

_LOGGER = logging.getLogger(__name__)


async def handle_set_plant(
    hass: HomeAssistant,
    coordinator: GrowTargetsCoordinator,
    call: ServiceCall,
) -> dict[str, Any]:
    """Handle the set_plant service call.

    Creates a plant, or updates the fields given for an existing one. The
    stored plant is returned to callers that ask for a response.
    """
    strain = call.data.get("strain")
    if strain and coordinator.get_profile(strain) is None:
        _LOGGER.warning(
            "Plant references growing profile '%s', which does not exist yet", strain
        )

    plant = await coordinator.async_set_plant(
        plant_id=call.data.get("plant_id"),
        start_date=call.data.get("start_date"),
        strain=strain,
        name=call.data.get("name"),
    )
    await coordinator.async_refresh()
    return {"plant": plant.to_dict()}


async def handle_remove_plant(
    hass: HomeAssistant,
    coordinator: GrowTargetsCoordinator,
    call: ServiceCall,
) -> None:
    """Handle the remove_plant service call."""
    plant_id = call.data["plant_id"]

    if not await coordinator.async_remove_plant(plant_id):
        error_msg = f"Plant '{plant_id}' not found"
        _LOGGER.error(error_msg)
        raise ServiceValidationError(error_msg)

    await coordinator.async_refresh()
