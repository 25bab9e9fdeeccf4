"""Storage manager for Grow Targets."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store

from .const import STORAGE_KEY, STORAGE_VERSION
from .models import Plant

if TYPE_CHECKING:
    from .coordinator import GrowTargetsCoordinator

_LOGGER = logging.getLogger(__name__)


class StorageManager:
    """Persists plants and growing profiles in a Home Assistant Store."""

    def __init__(self, coordinator: GrowTargetsCoordinator, hass: HomeAssistant) -> None:
        """Initialize the StorageManager.

        Args:
            coordinator: The GrowTargetsCoordinator instance.
            hass: The Home Assistant instance.
        """
        self.coordinator = coordinator
        self.hass = hass
        self.store = Store(hass, STORAGE_VERSION, STORAGE_KEY)

    async def async_save(self) -> None:
        """Save plants and profiles to persistent storage."""
        await self.store.async_save(
            {
                "plants": {
                    pid: plant.to_dict()
                    for pid, plant in self.coordinator.plants.items()
                },
                "profiles": dict(self.coordinator.profiles),
            }
        )

    async def async_load(self) -> None:
        """Load plants and profiles from persistent storage."""
        data = await self.store.async_load()
        if not data:
            _LOGGER.info("No stored data found, starting fresh")
            return

        self._load_plants(data)
        self._load_profiles(data)
        _LOGGER.debug(
            "Loaded %d plants and %d growing profiles",
            len(self.coordinator.plants),
            len(self.coordinator.profiles),
        )

    def _load_plants(self, data: dict) -> None:
        """Load plants from storage data, skipping entries that cannot be read."""
        self.coordinator.plants = {}
        for pid, pdata in (data.get("plants") or {}).items():
            if not isinstance(pdata, dict):
                _LOGGER.warning("Skipping stored plant %s: not a mapping", pid)
                continue
            try:
                self.coordinator.plants[pid] = Plant.from_dict(
                    {**pdata, "plant_id": pdata.get("plant_id", pid)}
                )
            except TypeError as err:
                _LOGGER.warning("Failed to load plant %s: %s", pid, err)

    def _load_profiles(self, data: dict) -> None:
        """Load raw growing profiles from storage data."""
        self.coordinator.profiles = {
            name: profile
            for name, profile in (data.get("profiles") or {}).items()
            if isinstance(profile, dict)
        }
