"""Leaf VPD diagnostic for the live sensor reading."""

from __future__ import annotations

import logging
from typing import Any

from .const import (
    LEAF_TEMP_OFFSET,
    TEMPERATURE_TOLERANCE,
    VPD_ADVICE_TARGET,
    VPD_DRY_THRESHOLD,
    ZONE_OFFLINE,
)
from .models import VPDResult, VPDZone
from .utils import VPDCalculator, coerce_float, round_half_up

_LOGGER = logging.getLogger(__name__)

ZONE_UNCLASSIFIED = "unclassified"

# Ordered policy table; lower bound inclusive, upper bound exclusive.
DEFAULT_VPD_ZONES: tuple[VPDZone, ...] = (
    VPDZone(
        key="under_transpiration",
        lower=None,
        upper=0.4,
        label="Under-transpiration risk",
        advice="Mould risk! Raise the temperature or lower the humidity.",
    ),
    VPDZone(
        key="early_growth",
        lower=0.4,
        upper=0.8,
        label="Early growth",
        advice="Fine for clones and seedlings. Lower the humidity for established plants.",
    ),
    VPDZone(
        key="ideal",
        lower=0.8,
        upper=1.2,
        label="Ideal",
        advice="Ideal conditions for vegetation and flowering. Keep it that way!",
    ),
    VPDZone(
        key="caution",
        lower=1.2,
        upper=1.6,
        label="Caution",
        advice="The air is getting dry. Raise the humidity or lower the temperature.",
    ),
    VPDZone(
        key="high_stress",
        lower=1.6,
        upper=None,
        label="High stress",
        advice="Too dry! Plants are under transpiration stress; raise the humidity now.",
    ),
)


def classify_vpd(
    value: float, zones: tuple[VPDZone, ...] = DEFAULT_VPD_ZONES
) -> VPDZone | None:
    """Return the first zone of ``zones`` containing ``value``."""
    for zone in zones:
        if zone.contains(value):
            return zone
    return None


def _temperature_advice(temperature: float, target_temperature: float) -> str | None:
    difference = temperature - target_temperature
    if difference > TEMPERATURE_TOLERANCE:
        return (
            f"Air is {difference:.1f} °C above the {target_temperature:g} °C target; "
            "lower the heater setpoint or increase ventilation."
        )
    if difference < -TEMPERATURE_TOLERANCE:
        return (
            f"Air is {-difference:.1f} °C below the {target_temperature:g} °C target; "
            "raise the heater setpoint."
        )
    return None


def compute_vpd(
    temperature: Any,
    humidity: Any,
    target_temperature: Any = None,
    *,
    zones: tuple[VPDZone, ...] = DEFAULT_VPD_ZONES,
    leaf_offset: float = LEAF_TEMP_OFFSET,
) -> VPDResult:
    """Compute the leaf VPD for a reading and classify it.

    Args:
        temperature: Air temperature in °C, or None when the sensor is offline.
        humidity: Relative humidity in percent, or None when offline.
        target_temperature: Optional temperature target. When the air is off
            target by more than ``TEMPERATURE_TOLERANCE`` the advice gains a
            corrective action.
        zones: The zone policy table.
        leaf_offset: Leaf temperature relative to air temperature.

    Returns:
        The VPD result. A missing reading, or the all-zero reading a dead
        sensor reports, gives the offline result instead of a number.
    """
    temp = coerce_float(temperature)
    hum = coerce_float(humidity)
    if temp is None or hum is None or (temp == 0 and hum == 0):
        return VPDResult(value=None, zone=ZONE_OFFLINE, advice=None)

    value = VPDCalculator.calculate_vpd_with_lst_offset(temp, hum, leaf_offset)
    zone = classify_vpd(value, zones)
    if zone is None:
        _LOGGER.debug("VPD %.2f kPa is outside every configured zone", value)
        return VPDResult(value=value, zone=ZONE_UNCLASSIFIED, advice=None)

    advice = zone.advice
    target_humidity = None
    if value >= VPD_DRY_THRESHOLD:
        target_humidity = round_half_up(
            VPDCalculator.calculate_target_humidity(temp, VPD_ADVICE_TARGET, leaf_offset)
        )
        advice = f"{advice} Aim for about {target_humidity}% relative humidity."

    target = coerce_float(target_temperature)
    if target is not None and (extra := _temperature_advice(temp, target)):
        advice = f"{advice} {extra}"

    return VPDResult(
        value=value, zone=zone.key, advice=advice, target_humidity=target_humidity
    )
