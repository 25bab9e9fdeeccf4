"""Stage timeline calculations.

Resolves which stage of a schedule a plant is in from its planting date. The
stage is always derived from the planting date and the schedule; nothing here
reads a stored stage. A plant that outgrows its schedule stays in the final
stage instead of progressing past it.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from .const import DEFAULT_STAGE_DURATION_DAYS
from .models import GrowProgress, ResolvedStage, Stage
from .utils import DateInput, calculate_days_since, parse_date_field, round_half_up

__all__ = [
    "stage_duration",
    "stage_bounds",
    "stage_start_day",
    "total_cycle_days",
    "total_day_of_grow",
    "resolve_stage_for_day",
    "resolve_stage",
    "grow_progress",
    "predict_harvest_date",
]


def stage_duration(
    stage: Stage, default_duration: int = DEFAULT_STAGE_DURATION_DAYS
) -> int:
    """Return the duration of ``stage``, falling back to ``default_duration``."""
    if stage.duration_days is None or stage.duration_days <= 0:
        return default_duration
    return stage.duration_days


def stage_bounds(
    schedule: Iterable[Stage], default_duration: int = DEFAULT_STAGE_DURATION_DAYS
) -> list[tuple[str, int, int]]:
    """Return ``(stage, start_day, end_day)`` triples; ``end_day`` is exclusive."""
    bounds: list[tuple[str, int, int]] = []
    elapsed = 0
    for stage in schedule:
        days = stage_duration(stage, default_duration)
        bounds.append((stage.name, elapsed, elapsed + days))
        elapsed += days
    return bounds


def stage_start_day(
    schedule: Iterable[Stage],
    stage_name: str | None,
    default_duration: int = DEFAULT_STAGE_DURATION_DAYS,
) -> int | None:
    """Return the grow day on which ``stage_name`` starts, or None if it is not scheduled."""
    if not stage_name:
        return None
    key = stage_name.strip().casefold()
    for name, start, _ in stage_bounds(schedule, default_duration):
        if name.casefold() == key:
            return start
    return None


def total_cycle_days(
    schedule: Iterable[Stage], default_duration: int = DEFAULT_STAGE_DURATION_DAYS
) -> int:
    """Return the summed duration of all stages in ``schedule``."""
    bounds = stage_bounds(schedule, default_duration)
    return bounds[-1][2] if bounds else 0


def total_day_of_grow(start_date: DateInput, now: DateInput = None) -> int | None:
    """Return whole days since planting, clamped at 0 for future dates.

    Returns None when ``start_date`` is missing or cannot be parsed.
    """
    if parse_date_field(start_date) is None:
        return None
    return max(0, calculate_days_since(start_date, now))


def resolve_stage_for_day(
    day: int,
    schedule: Iterable[Stage],
    default_duration: int = DEFAULT_STAGE_DURATION_DAYS,
) -> ResolvedStage | None:
    """Return the stage a plant is in on grow day ``day``.

    Returns None for an empty schedule.
    """
    bounds = stage_bounds(schedule, default_duration)
    if not bounds:
        return None

    day = max(0, day)
    index = len(bounds) - 1
    for position, (_, _, end) in enumerate(bounds):
        if day < end:
            index = position
            break

    name, start, end = bounds[index]
    return ResolvedStage(
        stage_name=name,
        stage_index=index,
        day_in_stage=day - start,
        total_day_of_grow=day,
        stage_duration=end - start,
        stage_start_day=start,
    )


def resolve_stage(
    start_date: DateInput,
    schedule: Iterable[Stage],
    now: DateInput = None,
    *,
    default_duration: int = DEFAULT_STAGE_DURATION_DAYS,
) -> ResolvedStage | None:
    """Resolve the current stage of a plant planted on ``start_date``.

    Args:
        start_date: The planting date (date, datetime or ISO string).
        schedule: The ordered stages of the growing profile.
        now: The evaluation instant; defaults to the current time.
        default_duration: Duration used for stages without a usable one.

    Returns:
        The resolved stage, or None when there is no planting date or no
        schedule. None means "no stage data available", not an error.
    """
    day = total_day_of_grow(start_date, now)
    if day is None:
        return None
    return resolve_stage_for_day(day, schedule, default_duration)


def grow_progress(
    start_date: DateInput,
    schedule: Iterable[Stage],
    now: DateInput = None,
    total_days: int | None = None,
    *,
    default_duration: int = DEFAULT_STAGE_DURATION_DAYS,
) -> GrowProgress | None:
    """Return progress through the whole cycle, capped at 100 percent.

    ``total_days`` (a lifecycle estimate from the profile) takes precedence
    over the summed stage durations.
    """
    day = total_day_of_grow(start_date, now)
    if day is None:
        return None
    total = total_days if total_days and total_days > 0 else total_cycle_days(
        schedule, default_duration
    )
    if total <= 0:
        return None
    percentage = min(round_half_up(day / total * 100), 100)
    return GrowProgress(current_day=day, total_days=total, percentage=percentage)


def predict_harvest_date(
    start_date: DateInput,
    schedule: Iterable[Stage],
    total_days: int | None = None,
    *,
    default_duration: int = DEFAULT_STAGE_DURATION_DAYS,
) -> date | None:
    """Return the estimated harvest date, or None if it cannot be estimated."""
    start = parse_date_field(start_date)
    if start is None:
        return None
    total = total_days if total_days and total_days > 0 else total_cycle_days(
        schedule, default_duration
    )
    if total <= 0:
        return None
    return start.date() + timedelta(days=total)
