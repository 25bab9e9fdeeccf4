"""Data update coordinator for the Grow Targets integration."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator
from homeassistant.util import dt as dt_util

from .alert_projector import project_alert_dates
from .const import (
    CONF_CONTROLLER_ENTITY,
    CONF_HUMIDITY_SENSOR,
    CONF_SOIL_MOISTURE_SENSOR,
    CONF_TEMPERATURE_SENSOR,
    CONTROLLER_SETTING_ALIASES,
    CONTROLLER_SETTING_KEYS,
    DEFAULT_UPDATE_INTERVAL,
)
from .engine import EngineReport, GrowSnapshot, evaluate_snapshot
from .models import GrowingProfile, Plant, SensorReading, VPDResult
from .settings_synthesizer import apply_settings_delta
from .stage_timeline import stage_bounds
from .storage_manager import StorageManager
from .utils import format_date, parse_date_field
from .vpd_diagnostics import compute_vpd

_LOGGER = logging.getLogger(__name__)

UNAVAILABLE_STATES = ("unknown", "unavailable")


class GrowTargetsCoordinator(DataUpdateCoordinator):
    """Evaluates every plant against the live environment.

    Plants and growing profiles are kept in a Home Assistant Store. On every
    refresh the coordinator reads the configured sensors and the controller
    entity once, builds a snapshot per plant from that single reading, and
    runs the target engine over it.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            hass: The Home Assistant instance.
            config: Config entry data with the configured entity ids.
            options: Config entry options; these override ``config``.
        """
        super().__init__(
            hass,
            _LOGGER,
            name="Grow Targets Coordinator",
            update_interval=DEFAULT_UPDATE_INTERVAL,
        )
        self.config: dict[str, Any] = {**(config or {}), **(options or {})}
        self.plants: dict[str, Plant] = {}
        self.profiles: dict[str, dict[str, Any]] = {}
        self.storage_manager = StorageManager(self, hass)

    # =============================================================================
    # PERSISTENCE
    # =============================================================================

    async def async_load(self) -> None:
        """Load plants and profiles from persistent storage."""
        await self.storage_manager.async_load()

    async def async_save(self) -> None:
        """Save plants and profiles to persistent storage."""
        await self.storage_manager.async_save()

    # =============================================================================
    # PLANTS AND PROFILES
    # =============================================================================

    def get_plant(self, plant_id: str) -> Plant | None:
        """Return the plant with ``plant_id``, if any."""
        return self.plants.get(plant_id)

    def _profile_key(self, name: str | None) -> str | None:
        if not name:
            return None
        wanted = name.strip().casefold()
        for key in self.profiles:
            if key.casefold() == wanted:
                return key
        return None

    def get_profile(self, name: str | None) -> GrowingProfile | None:
        """Return the growing profile called ``name`` (case-insensitive)."""
        key = self._profile_key(name)
        if key is None:
            return None
        return GrowingProfile.from_dict(self.profiles[key], name=key)

    async def async_set_plant(
        self,
        plant_id: str | None = None,
        start_date: Any = None,
        strain: str | None = None,
        name: str | None = None,
    ) -> Plant:
        """Create a plant, or update the given fields of an existing one.

        Returns:
            The stored plant.
        """
        updates: dict[str, Any] = {}
        if start_date is not None:
            updates["start_date"] = format_date(start_date)
        if strain is not None:
            updates["strain"] = strain
        if name is not None:
            updates["name"] = name

        existing = self.plants.get(plant_id) if plant_id else None
        if existing is not None:
            plant = replace(existing, **updates)
            _LOGGER.info("Updated plant %s: %s", plant.plant_id, updates)
        else:
            plant = Plant(plant_id=plant_id or str(uuid.uuid4()), **updates)
            _LOGGER.info("Added plant %s (%s)", plant.plant_id, plant.strain)

        self.plants[plant.plant_id] = plant
        await self.async_save()
        return plant

    async def async_remove_plant(self, plant_id: str) -> bool:
        """Remove a plant.

        Returns:
            True if the plant was removed, False if it was not found.
        """
        if plant_id not in self.plants:
            return False
        del self.plants[plant_id]
        await self.async_save()
        _LOGGER.info("Removed plant %s", plant_id)
        return True

    async def async_set_profile(
        self, name: str, data: Mapping[str, Any]
    ) -> GrowingProfile:
        """Store the growing profile ``name``, replacing any profile of that name."""
        key = self._profile_key(name) or name.strip()
        self.profiles[key] = {**data, "name": key}
        await self.async_save()
        profile = GrowingProfile.from_dict(self.profiles[key], name=key)
        _LOGGER.info(
            "Stored growing profile %s with %d stages", key, len(profile.schedule)
        )
        return profile

    async def async_remove_profile(self, name: str) -> bool:
        """Remove a growing profile.

        Returns:
            True if the profile was removed, False if it was not found.
        """
        key = self._profile_key(name)
        if key is None:
            return False
        del self.profiles[key]
        await self.async_save()
        _LOGGER.info("Removed growing profile %s", key)
        return True

    # =============================================================================
    # LIVE STATE
    # =============================================================================

    def _get_sensor_value(self, entity_id: str | None) -> float | None:
        """Return the numeric state of ``entity_id``, or None if it has none."""
        if not entity_id:
            return None
        state = self.hass.states.get(entity_id)
        if state and state.state not in UNAVAILABLE_STATES:
            try:
                return float(state.state)
            except (ValueError, TypeError):
                return None
        return None

    def get_sensor_reading(self) -> SensorReading:
        """Read the configured environment sensors."""
        return SensorReading(
            temperature=self._get_sensor_value(self.config.get(CONF_TEMPERATURE_SENSOR)),
            humidity=self._get_sensor_value(self.config.get(CONF_HUMIDITY_SENSOR)),
            soil_moisture=self._get_sensor_value(
                self.config.get(CONF_SOIL_MOISTURE_SENSOR)
            ),
            observed_at=dt_util.now(),
        )

    def get_controller_settings(self) -> dict[str, Any] | None:
        """Return the controller's current settings from its state attributes.

        Short attribute names (``target_hum``, ``light_start_h``) are reported
        under their full setting key; the full key wins when both are set.
        Returns None when no controller is configured or it is unavailable.
        """
        entity_id = self.config.get(CONF_CONTROLLER_ENTITY)
        if not entity_id:
            return None
        state = self.hass.states.get(entity_id)
        if state is None or state.state in UNAVAILABLE_STATES:
            return None
        settings = {
            key: state.attributes[alias]
            for alias, key in CONTROLLER_SETTING_ALIASES.items()
            if alias in state.attributes
        }
        settings.update(
            (key, state.attributes[key])
            for key in CONTROLLER_SETTING_KEYS
            if key in state.attributes
        )
        return settings

    def build_snapshot(
        self,
        plant_id: str,
        reading: SensorReading | None = None,
        settings: Mapping[str, Any] | None = None,
        now: datetime | None = None,
    ) -> GrowSnapshot:
        """Bundle a plant with its profile and the live state observed with it."""
        plant = self.plants.get(plant_id)
        profile = self.get_profile(plant.strain) if plant else None
        if reading is None:
            reading = self.get_sensor_reading()
        if settings is None:
            settings = self.get_controller_settings()
        return GrowSnapshot(
            plant=plant,
            profile=profile,
            reading=reading,
            settings=settings,
            now=now or dt_util.now(),
        )

    # =============================================================================
    # DATA UPDATE COORDINATOR OVERRIDE
    # =============================================================================

    async def _async_update_data(self) -> dict[str, Any]:
        """Evaluate every plant against one reading of the live state."""
        reading = self.get_sensor_reading()
        settings = self.get_controller_settings()
        now = dt_util.now()

        reports: dict[str, EngineReport] = {}
        stage_changed = False
        for plant_id in list(self.plants):
            report = evaluate_snapshot(
                self.build_snapshot(plant_id, reading, settings, now)
            )
            reports[plant_id] = report
            stage_changed |= self._remember_displayed_stage(plant_id, report)

        if stage_changed:
            await self.async_save()

        vpd: VPDResult = compute_vpd(reading.temperature, reading.humidity)
        return {"vpd": vpd, "plants": reports}

    @staticmethod
    def _stage_name(report: EngineReport) -> str | None:
        return report.stage.stage_name if report.stage else None

    def _remember_displayed_stage(self, plant_id: str, report: EngineReport) -> bool:
        """Keep the display hint in step with the computed stage.

        Returns True if the stored hint changed.
        """
        stage_name = self._stage_name(report)
        plant = self.plants[plant_id]
        if stage_name is None or plant.last_displayed_stage == stage_name:
            return False
        _LOGGER.debug(
            "Plant %s moved from %s to %s",
            plant_id,
            plant.last_displayed_stage,
            stage_name,
        )
        self.plants[plant_id] = replace(plant, last_displayed_stage=stage_name)
        return True

    # =============================================================================
    # SERVICE OPERATIONS
    # =============================================================================

    async def async_optimize_settings(self, plant_id: str) -> dict[str, Any]:
        """Return the settings delta for a plant and the settings it would yield.

        The delta is never applied; delivering it to the controller is left to
        the caller.
        """
        snapshot = self.build_snapshot(plant_id)
        report = evaluate_snapshot(snapshot)
        current = dict(snapshot.settings or {})
        return {
            "plant_id": plant_id,
            "state": str(report.state),
            "matched": report.matched,
            "target": report.target.as_dict() if report.target else None,
            "delta": report.delta,
            "current": current,
            "settings": apply_settings_delta(current, report.delta),
        }

    def get_timeline(self, plant_id: str) -> dict[str, Any]:
        """Return the stage bounds and dated alerts of a plant's schedule."""
        snapshot = self.build_snapshot(plant_id)
        report = evaluate_snapshot(snapshot)
        plant = snapshot.plant
        profile = snapshot.profile
        start = parse_date_field(plant.start_date) if plant else None

        stages: list[dict[str, Any]] = []
        alerts: list[dict[str, Any]] = []
        if profile is not None:
            for name, first_day, end_day in stage_bounds(profile.schedule):
                stages.append(
                    {
                        "stage": name,
                        "start_day": first_day,
                        "end_day": end_day,
                        "start_date": _offset_date(start, first_day),
                        "end_date": _offset_date(start, end_day),
                    }
                )
            for alert_date, alert in project_alert_dates(
                plant.start_date, profile.schedule, profile.alerts
            ):
                alerts.append(
                    {
                        "date": alert_date.isoformat(),
                        "day": alert.absolute_day,
                        "stage": alert.trigger_stage,
                        "message": alert.message,
                        "type": alert.alert_type,
                    }
                )

        return {
            "plant_id": plant_id,
            "strain": plant.strain if plant else None,
            "start_date": format_date(start),
            "current_stage": report.stage.stage_name if report.stage else None,
            "day": report.stage.total_day_of_grow if report.stage else None,
            "progress": report.progress.percentage if report.progress else None,
            "harvest_date": format_date(report.harvest_date),
            "stages": stages,
            "alerts": alerts,
        }


def _offset_date(start: datetime | None, days: int) -> str | None:
    if start is None:
        return None
    return format_date(start + timedelta(days=days))
