"""Sensor platform for Grow Targets.

This file defines the sensor entities of the integration: an entry-level leaf
VPD sensor fed by the configured environment sensors, and for every plant a
stage sensor, a next-alert sensor and a target status sensor.
"""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers import entity_registry as er
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity import Entity
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .alert_projector import is_alert_due_soon
from .const import DOMAIN
from .coordinator import GrowTargetsCoordinator
from .engine import EngineReport
from .models import TargetState, VPDResult

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the Grow Targets sensor platform from a config entry."""
    coordinator: GrowTargetsCoordinator = config_entry.runtime_data.coordinator

    # Track plant entities so we can add/remove dynamically
    plant_entities: dict[str, list[PlantSensorBase]] = {}

    initial_entities: list[Entity] = [
        GrowVpdSensor(coordinator, config_entry.entry_id, config_entry.title)
    ]
    for plant_id in coordinator.plants:
        entities = _create_plant_entities(coordinator, plant_id)
        plant_entities[plant_id] = entities
        initial_entities.extend(entities)

    async_add_entities(initial_entities)
    _LOGGER.debug("Added %d initial entities", len(initial_entities))

    async def _handle_coordinator_update_async() -> None:
        """Add new plant entities and remove missing ones when plants change."""
        await _update_plant_entities(
            hass, coordinator, plant_entities, async_add_entities
        )

    def _listener_callback() -> None:
        """Handle coordinator updates."""
        hass.async_create_task(_handle_coordinator_update_async())

    config_entry.async_on_unload(coordinator.async_add_listener(_listener_callback))


def _create_plant_entities(
    coordinator: GrowTargetsCoordinator, plant_id: str
) -> list[PlantSensorBase]:
    """Create the sensors that describe one plant."""
    return [
        PlantStageSensor(coordinator, plant_id),
        PlantNextAlertSensor(coordinator, plant_id),
        PlantTargetStatusSensor(coordinator, plant_id),
    ]


async def _update_plant_entities(
    hass: HomeAssistant,
    coordinator: GrowTargetsCoordinator,
    plant_entities: dict[str, list[PlantSensorBase]],
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Update plant entities based on coordinator data."""
    # Add new
    new_entities: list[Entity] = []
    for plant_id in coordinator.plants:
        if plant_id not in plant_entities:
            entities = _create_plant_entities(coordinator, plant_id)
            plant_entities[plant_id] = entities
            new_entities.extend(entities)

    if new_entities:
        async_add_entities(new_entities)

    # Remove deleted
    entity_registry = er.async_get(hass)
    removed_plant_ids = set(plant_entities) - set(coordinator.plants)
    for pid in removed_plant_ids:
        for entity in plant_entities.pop(pid):
            if entity.registry_entry:
                entity_registry.async_remove(entity.registry_entry.entity_id)
            await entity.async_remove()
        _LOGGER.debug("Removed entities of plant %s", pid)


class GrowVpdSensor(CoordinatorEntity[GrowTargetsCoordinator], SensorEntity):
    """Leaf VPD of the grow environment.

    The value is None while either environment sensor is offline; the zone
    attribute then reads "offline".
    """

    def __init__(
        self, coordinator: GrowTargetsCoordinator, entry_id: str, title: str
    ) -> None:
        """Initialize the VPD sensor."""
        super().__init__(coordinator)
        self._attr_name = f"{title} VPD"
        self._attr_unique_id = f"{DOMAIN}_{entry_id}_vpd"
        self._attr_state_class = SensorStateClass.MEASUREMENT
        self._attr_native_unit_of_measurement = "kPa"
        self._attr_icon = "mdi:cloud-check-variant"

    @property
    def _result(self) -> VPDResult | None:
        return (self.coordinator.data or {}).get("vpd")

    @property
    def native_value(self) -> float | None:
        """Return the leaf VPD in kPa."""
        result = self._result
        return result.value if result else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the zone and coaching advice."""
        result = self._result
        if result is None:
            return {}
        return {
            "zone": result.zone,
            "advice": result.advice,
            "target_humidity": result.target_humidity,
        }


class PlantSensorBase(CoordinatorEntity[GrowTargetsCoordinator], SensorEntity):
    """Common base for the sensors of one plant."""

    _key: str = ""

    def __init__(self, coordinator: GrowTargetsCoordinator, plant_id: str) -> None:
        """Initialize the plant sensor.

        Args:
            coordinator: The data update coordinator.
            plant_id: The plant this sensor describes.
        """
        super().__init__(coordinator)
        self._plant_id = plant_id
        plant = coordinator.plants.get(plant_id)
        plant_name = (plant.name or plant.strain if plant else None) or plant_id
        self._attr_unique_id = f"{DOMAIN}_{plant_id}_{self._key}"
        self._attr_name = f"{plant_name} {self._key.replace('_', ' ')}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, plant_id)},
            name=plant_name,
            model="Plant",
            manufacturer="Grow Targets",
        )

    @property
    def report(self) -> EngineReport | None:
        """Return the latest engine report for this plant."""
        return (self.coordinator.data or {}).get("plants", {}).get(self._plant_id)

    @property
    def available(self) -> bool:
        """Return True while the plant exists."""
        return super().available and self._plant_id in self.coordinator.plants


class PlantStageSensor(PlantSensorBase):
    """The stage a plant is in, computed from its planting date."""

    _key = "stage"
    _attr_icon = "mdi:sprout"

    @property
    def native_value(self) -> str | None:
        """Return the current stage name."""
        report = self.report
        if report is None or report.stage is None:
            return None
        return report.stage.stage_name

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return timeline details for the plant."""
        report = self.report
        plant = self.coordinator.plants.get(self._plant_id)
        attributes: dict[str, Any] = {
            "plant_id": self._plant_id,
            "strain": plant.strain if plant else None,
            "start_date": plant.start_date if plant else None,
        }
        if report is None:
            return attributes
        if report.stage is not None:
            attributes.update(
                {
                    "stage_index": report.stage.stage_index,
                    "day_in_stage": report.stage.day_in_stage,
                    "total_day_of_grow": report.stage.total_day_of_grow,
                    "stage_duration": report.stage.stage_duration,
                }
            )
        if report.progress is not None:
            attributes["progress"] = report.progress.percentage
            attributes["total_days"] = report.progress.total_days
        if report.harvest_date is not None:
            attributes["harvest_date"] = report.harvest_date.isoformat()
        return attributes


class PlantNextAlertSensor(PlantSensorBase):
    """The next upcoming timeline alert of a plant."""

    _key = "next_alert"
    _attr_icon = "mdi:bell-ring-outline"

    @property
    def native_value(self) -> str | None:
        """Return the message of the next alert."""
        report = self.report
        if report is None or report.next_alert is None:
            return None
        return report.next_alert.message

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return when the next alert fires."""
        report = self.report
        if report is None or report.next_alert is None:
            return {}
        alert = report.next_alert
        return {
            "days_until": alert.days_until,
            "day": alert.absolute_day,
            "type": alert.alert_type,
            "due_soon": is_alert_due_soon(alert),
        }


class PlantTargetStatusSensor(PlantSensorBase):
    """Whether the controller already satisfies the plant's environment target."""

    _key = "target_status"
    _attr_icon = "mdi:thermostat-auto"
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [str(state) for state in TargetState]

    @property
    def native_value(self) -> str:
        """Return the target state."""
        report = self.report
        if report is None:
            return str(TargetState.NO_PLANT)
        return str(report.state)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the resolved target and the settings delta."""
        report = self.report
        if report is None:
            return {}
        return {
            "target": report.target.as_dict() if report.target else None,
            "delta": report.delta,
            "matched": report.matched,
        }
