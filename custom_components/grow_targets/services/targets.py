"""Service handlers that report environment targets."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import ServiceValidationError

from ..coordinator import GrowTargetsCoordinator

_LOGGER = logging.getLogger(__name__)


def _require_plant(coordinator: GrowTargetsCoordinator, plant_id: str) -> None:
    if coordinator.get_plant(plant_id) is None:
        error_msg = f"Plant '{plant_id}' not found"
        _LOGGER.error(error_msg)
        raise ServiceValidationError(error_msg)


async def handle_optimize_settings(
    hass: HomeAssistant,
    coordinator: GrowTargetsCoordinator,
    call: ServiceCall,
) -> dict[str, Any]:
    """Return the controller settings delta that would satisfy a plant's target.

    Nothing is written to the controller; the response carries the delta and
    the merged settings for an automation to deliver.
    """
    plant_id = call.data["plant_id"]
    _require_plant(coordinator, plant_id)

    result = await coordinator.async_optimize_settings(plant_id)
    _LOGGER.debug(
        "Optimization for plant %s: state=%s delta=%s",
        plant_id,
        result["state"],
        result["delta"],
    )
    return result


async def handle_get_timeline(
    hass: HomeAssistant,
    coordinator: GrowTargetsCoordinator,
    call: ServiceCall,
) -> dict[str, Any]:
    """Return the stage timeline and dated alerts of a plant."""
    plant_id = call.data["plant_id"]
    _require_plant(coordinator, plant_id)
    return coordinator.get_timeline(plant_id)
