"""Data models for the Grow Targets integration.

This file defines the dataclasses that represent the objects the target engine
works on: stage schedules, environment presets, alert definitions, plants,
sensor readings, and the result types produced by the engine modules. Engine
values are frozen so a snapshot can be shared across calculations without
being mutated along the way.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from enum import StrEnum
from typing import Any

from .const import DEFAULT_ALERT_TYPE
from .utils import coerce_float, round_half_up

_LOGGER = logging.getLogger(__name__)

_WEEKS_PATTERN = re.compile(r"(\d+(?:\.\d+)?)(?:\s*-\s*(\d+(?:\.\d+)?))?")


def _first_present(data: Mapping[str, Any], *keys: str) -> Any:
    """Return the value of the first key in ``keys`` that is set in ``data``."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _positive_days(value: Any) -> int | None:
    number = coerce_float(value)
    if number is None or number <= 0:
        return None
    days = round_half_up(number)
    return days if days > 0 else None


def parse_stage_duration(data: Mapping[str, Any]) -> int | None:
    """Return the stage duration in days from any of the supported stored keys.

    Stored strain profiles carry durations as ``duration_days``,
    ``days_duration`` or ``days``, or in weeks as ``weeks_duration`` (a number)
    or ``weeks`` (``"2"`` or a ``"1-2"`` range, whose midpoint is used).
    Returns None when no positive duration can be read.
    """
    for key in ("duration_days", "days_duration", "days"):
        if (days := _positive_days(data.get(key))) is not None:
            return days

    weeks = coerce_float(data.get("weeks_duration"))
    if weeks is not None and weeks > 0:
        return _positive_days(weeks * 7)

    raw_weeks = data.get("weeks")
    if isinstance(raw_weeks, (int, float)) and not isinstance(raw_weeks, bool):
        return _positive_days(raw_weeks * 7)
    if isinstance(raw_weeks, str) and (match := _WEEKS_PATTERN.search(raw_weeks)):
        start = float(match.group(1))
        end = float(match.group(2)) if match.group(2) else start
        return _positive_days((start + end) / 2 * 7)

    return None


@dataclass(frozen=True)
class Stage:
    """A named cultivation phase.

    Attributes:
        name: The stage name as written in the profile (e.g. "Vegetation").
        duration_days: Length of the stage in days, or None when unknown.
    """

    name: str
    duration_days: int | None = None

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> Stage:
        """Create a Stage from a stored stage mapping."""
        name = str(_first_present(data, "name", "stage") or "").strip()
        return Stage(name=name, duration_days=parse_stage_duration(data))


@dataclass(frozen=True)
class StageSchedule:
    """An ordered sequence of stages; order defines the cultivation progression."""

    stages: tuple[Stage, ...] = ()

    def __iter__(self) -> Iterator[Stage]:
        return iter(self.stages)

    def __len__(self) -> int:
        return len(self.stages)

    def __bool__(self) -> bool:
        return bool(self.stages)

    @property
    def names(self) -> list[str]:
        """Return the stage names in schedule order."""
        return [stage.name for stage in self.stages]

    @staticmethod
    def from_list(raw: Any) -> StageSchedule:
        """Build a schedule from stored stage entries.

        Entries may be mappings, Stage instances or bare stage names. Entries
        without a name are skipped, and a name that repeats an earlier one
        (case-insensitively) is dropped so stage names stay unique.
        """
        if isinstance(raw, StageSchedule):
            return raw
        if not isinstance(raw, (list, tuple)):
            return StageSchedule()

        stages: list[Stage] = []
        seen: set[str] = set()
        for item in raw:
            if isinstance(item, Stage):
                stage = item
            elif isinstance(item, Mapping):
                stage = Stage.from_dict(item)
            elif isinstance(item, str):
                stage = Stage(name=item.strip())
            else:
                continue
            if not stage.name:
                continue
            key = stage.name.casefold()
            if key in seen:
                _LOGGER.warning(
                    "Dropping duplicate stage '%s' from schedule", stage.name
                )
                continue
            seen.add(key)
            stages.append(stage)
        return StageSchedule(tuple(stages))


@dataclass(frozen=True)
class EnvironmentPreset:
    """Target bundle for one stage, as stored in a strain profile.

    Every value is optional. Temperature can be given as a day/night pair or
    a min/max range, humidity as a point value or a min/max range.
    """

    stage: str
    temp_day: float | None = None
    temp_night: float | None = None
    temp_min: float | None = None
    temp_max: float | None = None
    humidity: float | None = None
    humidity_min: float | None = None
    humidity_max: float | None = None
    vpd_target: float | None = None
    ppfd: float | None = None
    light_hours: float | None = None

    @staticmethod
    def from_dict(data: Mapping[str, Any], stage: str | None = None) -> EnvironmentPreset:
        """Create a preset from a stored mapping.

        Args:
            data: The stored preset. Short preset keys (``temp``, ``hum``,
                ``light_h``) and controller-style keys (``target_temp``,
                ``target_hum``) are accepted alongside the long ones.
            stage: Stage name to use when the mapping has no ``stage`` key,
                typically the key it was stored under.
        """
        humidity = _first_present(data, "humidity", "hum", "target_hum")
        humidity_min = data.get("humidity_min")
        humidity_max = data.get("humidity_max")
        if isinstance(humidity, Mapping):
            humidity_min = humidity.get("min", humidity_min)
            humidity_max = humidity.get("max", humidity_max)
            humidity = None

        temp_min = data.get("temp_min")
        temp_max = data.get("temp_max")
        temp_range = data.get("temp_range")
        if isinstance(temp_range, Mapping):
            temp_min = temp_range.get("min", temp_min)
            temp_max = temp_range.get("max", temp_max)

        return EnvironmentPreset(
            stage=str(data.get("stage") or stage or "").strip(),
            temp_day=coerce_float(
                _first_present(data, "temp_day", "temp", "target_temp")
            ),
            temp_night=coerce_float(data.get("temp_night")),
            temp_min=coerce_float(temp_min),
            temp_max=coerce_float(temp_max),
            humidity=coerce_float(humidity),
            humidity_min=coerce_float(humidity_min),
            humidity_max=coerce_float(humidity_max),
            vpd_target=coerce_float(data.get("vpd_target")),
            ppfd=coerce_float(data.get("ppfd")),
            light_hours=coerce_float(_first_present(data, "light_hours", "light_h")),
        )


class ProfileShape(StrEnum):
    """Storage shape an environment profile arrived in."""

    SEQUENCE = "sequence"
    KEYED = "keyed"


@dataclass(frozen=True)
class EnvironmentProfile:
    """Environment presets normalized from either storage shape.

    Attributes:
        shape: Whether the stored data was an ordered list or a keyed mapping.
        entries: The presets in stored order.
    """

    shape: ProfileShape = ProfileShape.SEQUENCE
    entries: tuple[EnvironmentPreset, ...] = ()


@dataclass(frozen=True)
class AlertDefinition:
    """A reminder to surface ``day_offset`` days after ``trigger_stage`` starts."""

    trigger_stage: str
    day_offset: int = 0
    message: str = ""
    alert_type: str = DEFAULT_ALERT_TYPE

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> AlertDefinition:
        """Create an AlertDefinition from a stored mapping.

        Negative or unreadable offsets are clamped to 0.
        """
        offset = coerce_float(_first_present(data, "day_offset", "days", "day"))
        return AlertDefinition(
            trigger_stage=str(_first_present(data, "trigger_stage", "stage") or "").strip(),
            day_offset=max(0, int(offset)) if offset is not None else 0,
            message=str(data.get("message") or ""),
            alert_type=str(data.get("type") or DEFAULT_ALERT_TYPE),
        )


@dataclass(frozen=True)
class GrowingProfile:
    """Growing parameters of a strain.

    Both target sources are kept exactly as stored; the target resolver
    normalizes them when it reads them. ``presets`` is consulted first for a
    stage and ``environment_targets`` is the fallback when it has no entry.

    Attributes:
        name: The strain or profile name.
        schedule: The ordered stage schedule.
        environment_targets: Stored targets, a list or a keyed mapping.
        alerts: Timeline alert definitions.
        total_days: Lifecycle estimate overriding the schedule total, if any.
        presets: Per-stage presets, usually keyed by stage, carrying light hours.
    """

    name: str
    schedule: StageSchedule = field(default_factory=StageSchedule)
    environment_targets: Any = None
    alerts: tuple[AlertDefinition, ...] = ()
    total_days: int | None = None
    presets: Any = None

    @staticmethod
    def from_dict(data: Mapping[str, Any], name: str | None = None) -> GrowingProfile:
        """Create a GrowingProfile from stored growing parameters."""
        raw_alerts = _first_present(data, "timeline_alerts", "alerts") or []
        alerts = tuple(
            AlertDefinition.from_dict(item)
            for item in raw_alerts
            if isinstance(item, Mapping)
        )
        lifecycle = data.get("lifecycle_estimates")
        total_days = (
            _positive_days(lifecycle.get("total_days"))
            if isinstance(lifecycle, Mapping)
            else None
        )
        return GrowingProfile(
            name=str(name or data.get("name") or ""),
            schedule=StageSchedule.from_list(data.get("stages")),
            environment_targets=data.get("environment_targets"),
            alerts=alerts,
            total_days=total_days,
            presets=data.get("presets"),
        )


@dataclass(frozen=True)
class Plant:
    """Represents a single plant.

    Attributes:
        plant_id: A unique identifier for the plant.
        start_date: The ISO-formatted planting date.
        strain: Name of the growing profile the plant follows.
        name: A display name for the plant.
        last_displayed_stage: The stage last shown to the user. A display hint
            only; the current stage is always recomputed from start_date.
    """

    plant_id: str
    start_date: str | None = None
    strain: str | None = None
    name: str | None = None
    last_displayed_stage: str | None = None

    def to_dict(self) -> dict:
        """Convert the dataclass instance to a dictionary."""
        return asdict(self)

    @staticmethod
    def from_dict(data: dict) -> Plant:
        """Create a Plant instance from a dictionary.

        Legacy field names are migrated and keys that do not correspond to
        dataclass fields are dropped.
        """
        data = data.copy()  # Don't modify original

        if "current_stage" in data and "last_displayed_stage" not in data:
            data["last_displayed_stage"] = data.pop("current_stage")

        if "strain_name" in data and "strain" not in data:
            data["strain"] = data.pop("strain_name")

        allowed_keys = {f.name for f in fields(Plant)}
        filtered_data = {k: v for k, v in data.items() if k in allowed_keys}

        return Plant(**filtered_data)


@dataclass(frozen=True)
class SensorReading:
    """A live sensor snapshot; any value may be missing."""

    temperature: float | None = None
    humidity: float | None = None
    soil_moisture: float | None = None
    observed_at: datetime | None = None


@dataclass(frozen=True)
class ResolvedStage:
    """The authoritative stage computed from a planting date.

    Attributes:
        stage_name: Name of the current stage as written in the schedule.
        stage_index: Position of the stage in the schedule.
        day_in_stage: Days elapsed since the stage started.
        total_day_of_grow: Days elapsed since planting.
        stage_duration: Length of the current stage in days.
        stage_start_day: Grow day on which the current stage started.
    """

    stage_name: str
    stage_index: int
    day_in_stage: int
    total_day_of_grow: int
    stage_duration: int
    stage_start_day: int


@dataclass(frozen=True)
class ResolvedTarget:
    """Recommended environment for a stage; every value is optional."""

    stage: str
    temperature: float | None = None
    humidity: int | float | None = None
    vpd: float | None = None
    ppfd: float | None = None
    light_hours: int | None = None
    temperature_range: tuple[float | None, float | None] | None = None
    humidity_range: tuple[float | None, float | None] | None = None

    @property
    def is_empty(self) -> bool:
        """Return True when the target carries nothing a controller can be set to."""
        return (
            self.temperature is None
            and self.humidity is None
            and self.light_hours is None
        )

    def as_dict(self) -> dict[str, Any]:
        """Return the set values as a dictionary."""
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class ProjectedAlert:
    """An alert pinned to an absolute grow day."""

    absolute_day: int
    message: str
    alert_type: str = DEFAULT_ALERT_TYPE
    trigger_stage: str = ""
    day_offset: int = 0


@dataclass(frozen=True)
class NextAlert:
    """The nearest upcoming alert relative to the current grow day."""

    days_until: int
    absolute_day: int
    message: str
    alert_type: str = DEFAULT_ALERT_TYPE


@dataclass(frozen=True)
class VPDZone:
    """One row of the VPD policy table.

    ``lower`` is inclusive and ``upper`` exclusive; None means unbounded.
    """

    key: str
    lower: float | None
    upper: float | None
    label: str
    advice: str

    def contains(self, value: float) -> bool:
        """Return True if ``value`` falls inside this zone."""
        if self.lower is not None and value < self.lower:
            return False
        if self.upper is not None and value >= self.upper:
            return False
        return True


@dataclass(frozen=True)
class VPDResult:
    """Outcome of a VPD diagnostic.

    Attributes:
        value: VPD in kPa, or None when offline.
        zone: Key of the matched zone, or "offline".
        advice: Coaching text, or None when offline.
        target_humidity: Humidity that would bring VPD back to the advice
            target, when the air is too dry.
    """

    value: float | None
    zone: str
    advice: str | None = None
    target_humidity: int | None = None

    @property
    def is_offline(self) -> bool:
        """Return True when no live reading was available."""
        return self.value is None


@dataclass(frozen=True)
class GrowProgress:
    """Progress through the full grow cycle."""

    current_day: int
    total_days: int
    percentage: int


class TargetState(StrEnum):
    """Presentation state derived on every evaluation."""

    NO_PLANT = "no_plant"
    NO_TARGET_DATA = "no_target_data"
    MATCHED = "matched"
    NEEDS_OPTIMIZATION = "needs_optimization"
