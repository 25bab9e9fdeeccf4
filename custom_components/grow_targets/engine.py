"""Evaluate one consistent grow snapshot through the target engine.

A ``GrowSnapshot`` bundles everything observed together: the plant, its
growing profile, the live sensor reading, the controller's current settings
and the evaluation instant. ``evaluate_snapshot`` runs the stage, target,
alert, VPD and settings calculations over it and reports the derived
presentation state. Nothing here keeps state between calls.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any

from .alert_projector import next_alert_for_day
from .environment_targets import resolve_profile_targets
from .models import (
    GrowingProfile,
    GrowProgress,
    NextAlert,
    Plant,
    ResolvedStage,
    ResolvedTarget,
    SensorReading,
    TargetState,
    VPDResult,
)
from .settings_synthesizer import matches, synthesize
from .stage_timeline import grow_progress, predict_harvest_date, resolve_stage
from .vpd_diagnostics import compute_vpd


@dataclass(frozen=True)
class GrowSnapshot:
    """Inputs observed together for one evaluation."""

    plant: Plant | None = None
    profile: GrowingProfile | None = None
    reading: SensorReading | None = None
    settings: Mapping[str, Any] | None = None
    now: datetime | None = None


@dataclass(frozen=True)
class EngineReport:
    """Everything the engine derives from one snapshot."""

    plant_id: str | None
    stage: ResolvedStage | None
    target: ResolvedTarget | None
    next_alert: NextAlert | None
    vpd: VPDResult
    state: TargetState
    matched: bool = False
    delta: dict[str, Any] = field(default_factory=dict)
    progress: GrowProgress | None = None
    harvest_date: date | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return the report as plain, JSON-friendly data."""
        data = asdict(self)
        data["state"] = str(self.state)
        data["harvest_date"] = (
            self.harvest_date.isoformat() if self.harvest_date else None
        )
        if self.target is not None:
            data["target"] = self.target.as_dict()
        return data


def target_state(
    plant: Plant | None,
    stage: ResolvedStage | None,
    target: ResolvedTarget | None,
    settings: Mapping[str, Any] | None,
) -> TargetState:
    """Derive the presentation state for a plant.

    ``no_plant`` without a plant, ``no_target_data`` when no stage or no
    usable target could be resolved, otherwise ``matched`` or
    ``needs_optimization`` depending on the controller's current settings.
    """
    if plant is None:
        return TargetState.NO_PLANT
    if stage is None or target is None or target.is_empty:
        return TargetState.NO_TARGET_DATA
    if matches(settings, target):
        return TargetState.MATCHED
    return TargetState.NEEDS_OPTIMIZATION


def evaluate_snapshot(snapshot: GrowSnapshot) -> EngineReport:
    """Run the target engine over ``snapshot``."""
    plant = snapshot.plant
    profile = snapshot.profile
    reading = snapshot.reading or SensorReading()

    stage = None
    target = None
    upcoming = None
    progress = None
    harvest_date = None

    if plant is not None and profile is not None:
        stage = resolve_stage(plant.start_date, profile.schedule, snapshot.now)
        if stage is not None:
            target = resolve_profile_targets(profile, stage.stage_name)
            upcoming = next_alert_for_day(
                stage.total_day_of_grow, profile.schedule, profile.alerts
            )
        progress = grow_progress(
            plant.start_date, profile.schedule, snapshot.now, profile.total_days
        )
        harvest_date = predict_harvest_date(
            plant.start_date, profile.schedule, profile.total_days
        )

    vpd = compute_vpd(
        reading.temperature,
        reading.humidity,
        target.temperature if target is not None else None,
    )

    return EngineReport(
        plant_id=plant.plant_id if plant is not None else None,
        stage=stage,
        target=target,
        next_alert=upcoming,
        vpd=vpd,
        state=target_state(plant, stage, target, snapshot.settings),
        matched=matches(snapshot.settings, target),
        delta=synthesize(target),
        progress=progress,
        harvest_date=harvest_date,
    )
