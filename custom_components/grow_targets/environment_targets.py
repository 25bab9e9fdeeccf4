"""Resolve per-stage environment targets from a growing profile.

Strain profiles store their environment targets in one of two shapes: an
ordered list of presets aligned with the stage schedule, or a mapping keyed by
stage name whose values are a preset or a list of presets. Both shapes are
normalized once into an ``EnvironmentProfile`` before any lookup happens.

A strain record may carry two such sources: its ``presets`` and its
``environment_targets``. ``resolve_profile_targets`` tries them in that order
for each stage.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .const import STAGE_ALIASES
from .models import (
    EnvironmentPreset,
    EnvironmentProfile,
    GrowingProfile,
    ProfileShape,
    ResolvedTarget,
    Stage,
)
from .utils import round_half_up

_LOGGER = logging.getLogger(__name__)


def normalize_environment_profile(
    raw: Any, schedule: Iterable[Stage] | None = None
) -> EnvironmentProfile:
    """Normalize stored environment targets into an EnvironmentProfile.

    Args:
        raw: A list of presets, a mapping of stage name to preset(s), an
            already normalized profile, or None.
        schedule: Optional stage schedule. A list entry without a stage name
            takes the name of the scheduled stage at the same position.

    Returns:
        The normalized profile. Unusable input gives an empty profile.
    """
    if isinstance(raw, EnvironmentProfile):
        return raw

    if isinstance(raw, Mapping):
        entries: list[EnvironmentPreset] = []
        for key, value in raw.items():
            items = value if isinstance(value, (list, tuple)) else [value]
            for item in items:
                if isinstance(item, Mapping):
                    entries.append(
                        EnvironmentPreset.from_dict({**item, "stage": str(key)})
                    )
        return EnvironmentProfile(shape=ProfileShape.KEYED, entries=tuple(entries))

    if isinstance(raw, (list, tuple)):
        stage_names = [stage.name for stage in schedule] if schedule else []
        entries = []
        for index, item in enumerate(raw):
            if not isinstance(item, Mapping):
                continue
            fallback = stage_names[index] if index < len(stage_names) else None
            entries.append(EnvironmentPreset.from_dict(item, stage=fallback))
        return EnvironmentProfile(shape=ProfileShape.SEQUENCE, entries=tuple(entries))

    if raw is not None:
        _LOGGER.debug("Ignoring environment targets of type %s", type(raw).__name__)
    return EnvironmentProfile()


def _alias_group(stage_key: str) -> tuple[str, ...]:
    for canonical, aliases in STAGE_ALIASES.items():
        if stage_key == canonical or stage_key in aliases:
            return (canonical, *aliases)
    return ()


def find_stage_preset(
    profile: EnvironmentProfile, stage_name: str | None
) -> EnvironmentPreset | None:
    """Return the preset for ``stage_name``, matched case-insensitively.

    An exact name match wins; otherwise a preset whose stage is a known alias
    of the requested one (``veg`` for ``Vegetation``) is used.
    """
    if not stage_name:
        return None
    key = stage_name.strip().casefold()

    for preset in profile.entries:
        if preset.stage.casefold() == key:
            return preset

    group = _alias_group(key)
    if group:
        for preset in profile.entries:
            if preset.stage.casefold() in group:
                _LOGGER.debug(
                    "Using preset '%s' as alias for stage '%s'", preset.stage, stage_name
                )
                return preset
    return None


def _temperature(
    preset: EnvironmentPreset,
) -> tuple[float | None, tuple[float | None, float | None] | None]:
    day, night = preset.temp_day, preset.temp_night
    low, high = preset.temp_min, preset.temp_max

    if day is not None and night is not None:
        temperature = round_half_up((day + night) / 2)
    elif day is not None or night is not None:
        temperature = day if day is not None else night
    elif low is not None and high is not None:
        temperature = round_half_up((low + high) / 2)
    else:
        temperature = low if low is not None else high

    if low is not None or high is not None:
        temperature_range = (low, high)
    elif day is not None and night is not None:
        temperature_range = (min(day, night), max(day, night))
    else:
        temperature_range = None
    return temperature, temperature_range


def _humidity(
    preset: EnvironmentPreset,
) -> tuple[float | None, tuple[float | None, float | None] | None]:
    low, high = preset.humidity_min, preset.humidity_max
    humidity_range = (low, high) if low is not None or high is not None else None

    if preset.humidity is not None:
        return preset.humidity, humidity_range
    if low is not None and high is not None:
        return round_half_up((low + high) / 2), humidity_range
    return (low if low is not None else high), humidity_range


def resolve_targets(
    profile: Any, stage_name: str | None, schedule: Iterable[Stage] | None = None
) -> ResolvedTarget | None:
    """Resolve the recommended environment for a stage.

    Args:
        profile: Environment targets in either storage shape, or a profile
            already normalized by ``normalize_environment_profile``.
        stage_name: The stage to resolve, usually the resolved current stage.
        schedule: Optional schedule used to name unnamed list entries.

    Returns:
        The target with every resolvable field set, or None when the profile
        has no entry for the stage. A partially filled target is valid.
    """
    normalized = normalize_environment_profile(profile, schedule)
    preset = find_stage_preset(normalized, stage_name)
    if preset is None:
        return None

    temperature, temperature_range = _temperature(preset)
    humidity, humidity_range = _humidity(preset)
    light_hours = (
        round_half_up(preset.light_hours) if preset.light_hours is not None else None
    )
    return ResolvedTarget(
        stage=preset.stage,
        temperature=temperature,
        humidity=humidity,
        vpd=preset.vpd_target,
        ppfd=preset.ppfd,
        light_hours=light_hours,
        temperature_range=temperature_range,
        humidity_range=humidity_range,
    )


def resolve_profile_targets(
    profile: GrowingProfile | None, stage_name: str | None
) -> ResolvedTarget | None:
    """Resolve a stage's target from a growing profile.

    The profile's presets are tried first. When they have no entry for the
    stage, the stored ``environment_targets`` are used instead.
    """
    if profile is None:
        return None
    for source in (profile.presets, profile.environment_targets):
        target = resolve_targets(source, stage_name, profile.schedule)
        if target is not None:
            return target
    return None
