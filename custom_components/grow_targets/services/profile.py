"""Service handlers for growing profiles."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import ServiceValidationError

from ..coordinator import GrowTargetsCoordinator

_LOGGER = logging.getLogger(__name__)


def _profile_from_call(data: dict[str, Any]) -> dict[str, Any]:
    """Convert service call data into the stored growing profile layout."""
    profile: dict[str, Any] = {
        "stages": [dict(stage) for stage in data["stages"]],
        "timeline_alerts": [dict(alert) for alert in data.get("timeline_alerts", [])],
    }
    for key in ("presets", "environment_targets"):
        if data.get(key) is not None:
            profile[key] = data[key]
    if data.get("total_days"):
        profile["lifecycle_estimates"] = {"total_days": data["total_days"]}
    return profile


async def handle_set_growing_profile(
    hass: HomeAssistant,
    coordinator: GrowTargetsCoordinator,
    call: ServiceCall,
) -> None:
    """Handle the set_growing_profile service call."""
    name = call.data["name"].strip()
    if not name:
        error_msg = "Growing profile name must not be empty"
        _LOGGER.error(error_msg)
        raise ServiceValidationError(error_msg)

    profile = await coordinator.async_set_profile(name, _profile_from_call(call.data))
    if not profile.schedule:
        _LOGGER.warning(
            "Growing profile '%s' has no usable stages; its plants stay unresolved",
            name,
        )
    await coordinator.async_refresh()


async def handle_remove_growing_profile(
    hass: HomeAssistant,
    coordinator: GrowTargetsCoordinator,
    call: ServiceCall,
) -> None:
    """Handle the remove_growing_profile service call."""
    name = call.data["name"]

    if not await coordinator.async_remove_profile(name):
        error_msg = f"Growing profile '{name}' not found"
        _LOGGER.error(error_msg)
        raise ServiceValidationError(error_msg)

    await coordinator.async_refresh()
