"""Turn a resolved target into controller settings and check for a match.

The engine never writes to a controller. ``synthesize`` returns the settings
that would have to change, and ``matches`` tells whether the controller's
current settings already satisfy the target.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from .const import (
    LIGHT_MODE_AUTOMATIC,
    LIGHT_START_HOUR,
    LIGHT_START_MINUTE,
    SETTING_LIGHT_END_HOUR,
    SETTING_LIGHT_END_MINUTE,
    SETTING_LIGHT_MODE,
    SETTING_LIGHT_START_HOUR,
    SETTING_LIGHT_START_MINUTE,
    SETTING_TARGET_HUMIDITY,
    SETTING_TARGET_TEMP,
)
from .models import ResolvedTarget
from .utils import coerce_float, round_half_up

_LOGGER = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

TargetInput = ResolvedTarget | Mapping[str, Any] | None


def _target_values(target: TargetInput) -> tuple[Any, Any, Any]:
    """Return ``(temperature, humidity, light_hours)`` from either target form."""
    if target is None:
        return None, None, None
    if isinstance(target, ResolvedTarget):
        return target.temperature, target.humidity, target.light_hours
    if isinstance(target, Mapping):
        return (
            target.get("temperature"),
            target.get("humidity"),
            target.get("light_hours"),
        )
    return None, None, None


def _usable_light_hours(value: Any) -> int | None:
    """Return whole light hours (rounded half up) in (0, 24], or None."""
    hours = coerce_float(value)
    if hours is None:
        return None
    whole = round_half_up(hours)
    if not 0 < whole <= 24:
        _LOGGER.debug("Ignoring light hours outside (0, 24]: %s", value)
        return None
    return whole


def synthesize(target: TargetInput) -> dict[str, Any]:
    """Return the controller settings delta for ``target``.

    Only fields present on the target appear in the delta. Light hours are
    rounded half up to whole hours and become a window that starts at
    ``LIGHT_START_HOUR`` and ends that many hours later (modulo 24), with the
    light mode set to automatic. ``matches`` compares against the same whole
    hours.
    """
    temperature, humidity, light_hours = _target_values(target)
    delta: dict[str, Any] = {}

    if coerce_float(temperature) is not None:
        delta[SETTING_TARGET_TEMP] = temperature
    if coerce_float(humidity) is not None:
        delta[SETTING_TARGET_HUMIDITY] = humidity

    hours = _usable_light_hours(light_hours)
    if hours is not None:
        delta[SETTING_LIGHT_START_HOUR] = LIGHT_START_HOUR
        delta[SETTING_LIGHT_START_MINUTE] = LIGHT_START_MINUTE
        delta[SETTING_LIGHT_END_HOUR] = (LIGHT_START_HOUR + hours) % 24
        delta[SETTING_LIGHT_END_MINUTE] = 0
        delta[SETTING_LIGHT_MODE] = LIGHT_MODE_AUTOMATIC

    return delta


def apply_settings_delta(
    current: Mapping[str, Any] | None, delta: Mapping[str, Any]
) -> dict[str, Any]:
    """Return a copy of ``current`` with the ``delta`` keys replaced."""
    merged = dict(current or {})
    merged.update(delta)
    return merged


def light_window_hours(
    start_hour: float,
    end_hour: float,
    start_minute: float = 0,
    end_minute: float = 0,
) -> float:
    """Return the length of a light window in hours.

    A window that ends before it starts wraps past midnight; a window whose
    start equals its end is on for the full 24 hours.
    """
    start = start_hour * 60 + start_minute
    end = end_hour * 60 + end_minute
    elapsed = (end - start) % MINUTES_PER_DAY
    if elapsed == 0:
        elapsed = MINUTES_PER_DAY
    return elapsed / 60


def _minute(current: Mapping[str, Any], key: str) -> float | None:
    if current.get(key) is None:
        return 0
    return coerce_float(current.get(key))


def _current_light_hours(current: Mapping[str, Any]) -> float | None:
    start_hour = coerce_float(current.get(SETTING_LIGHT_START_HOUR))
    end_hour = coerce_float(current.get(SETTING_LIGHT_END_HOUR))
    start_minute = _minute(current, SETTING_LIGHT_START_MINUTE)
    end_minute = _minute(current, SETTING_LIGHT_END_MINUTE)
    if None in (start_hour, end_hour, start_minute, end_minute):
        return None
    return light_window_hours(start_hour, end_hour, start_minute, end_minute)


def _same_number(current_value: Any, target_value: Any) -> bool:
    current_number = coerce_float(current_value)
    target_number = coerce_float(target_value)
    if current_number is None or target_number is None:
        return False
    return math.isclose(current_number, target_number, abs_tol=1e-9)


def matches(current: Mapping[str, Any] | None, target: TargetInput) -> bool:
    """Return True if ``current`` already satisfies every field of ``target``.

    A target with no comparable field, or no current settings at all, never
    matches; that result means "nothing to compare", not "already optimized".
    Absent or malformed current values count as a mismatch.
    """
    if not isinstance(current, Mapping):
        return False

    temperature, humidity, light_hours = _target_values(target)
    compared = 0

    if coerce_float(temperature) is not None:
        if not _same_number(current.get(SETTING_TARGET_TEMP), temperature):
            return False
        compared += 1

    if coerce_float(humidity) is not None:
        if not _same_number(current.get(SETTING_TARGET_HUMIDITY), humidity):
            return False
        compared += 1

    hours = _usable_light_hours(light_hours)
    if hours is not None:
        window = _current_light_hours(current)
        if window is None or not math.isclose(window, hours, abs_tol=1e-9):
            return False
        compared += 1

    return compared > 0
