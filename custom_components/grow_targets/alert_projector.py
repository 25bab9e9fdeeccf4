"""Project stage-linked timeline alerts onto absolute grow days."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from typing import Any

from .const import ALERT_RELEVANCE_DAYS, DEFAULT_STAGE_DURATION_DAYS
from .models import AlertDefinition, NextAlert, ProjectedAlert, Stage
from .stage_timeline import stage_bounds, total_day_of_grow
from .utils import DateInput, parse_date_field

_LOGGER = logging.getLogger(__name__)


def _definitions(alerts: Iterable[AlertDefinition | Mapping[str, Any]] | None):
    for alert in alerts or ():
        if isinstance(alert, AlertDefinition):
            yield alert
        elif isinstance(alert, Mapping):
            yield AlertDefinition.from_dict(alert)


def _project(
    schedule: Iterable[Stage],
    alerts: Iterable[AlertDefinition | Mapping[str, Any]] | None,
    default_duration: int,
) -> list[ProjectedAlert]:
    starts: dict[str, int] = {}
    for name, start, _ in stage_bounds(schedule, default_duration):
        starts.setdefault(name.casefold(), start)
    if not starts:
        return []

    projected: list[ProjectedAlert] = []
    for alert in _definitions(alerts):
        start = starts.get(alert.trigger_stage.casefold())
        if start is None:
            _LOGGER.debug(
                "Dropping alert '%s': stage '%s' is not in the schedule",
                alert.message,
                alert.trigger_stage,
            )
            continue
        projected.append(
            ProjectedAlert(
                absolute_day=start + alert.day_offset,
                message=alert.message,
                alert_type=alert.alert_type,
                trigger_stage=alert.trigger_stage,
                day_offset=alert.day_offset,
            )
        )
    # Stable sort: equal days keep definition order
    projected.sort(key=lambda item: item.absolute_day)
    return projected


def project_alerts(
    start_date: DateInput,
    schedule: Iterable[Stage],
    alerts: Iterable[AlertDefinition | Mapping[str, Any]] | None,
    *,
    default_duration: int = DEFAULT_STAGE_DURATION_DAYS,
) -> list[ProjectedAlert]:
    """Pin every alert definition to the grow day it fires on.

    ``absolute_day`` is the start day of the trigger stage plus the alert's
    day offset. Alerts naming a stage that is not scheduled are dropped. The
    result is ordered by day, ties in definition order, and is empty when
    there is no planting date or no schedule.
    """
    if parse_date_field(start_date) is None:
        return []
    return _project(schedule, alerts, default_duration)


def next_alert_for_day(
    total_day: int,
    schedule: Iterable[Stage],
    alerts: Iterable[AlertDefinition | Mapping[str, Any]] | None,
    *,
    default_duration: int = DEFAULT_STAGE_DURATION_DAYS,
) -> NextAlert | None:
    """Return the nearest alert on or after ``total_day``, or None."""
    for alert in _project(schedule, alerts, default_duration):
        if alert.absolute_day >= total_day:
            return NextAlert(
                days_until=alert.absolute_day - total_day,
                absolute_day=alert.absolute_day,
                message=alert.message,
                alert_type=alert.alert_type,
            )
    return None


def next_alert(
    start_date: DateInput,
    schedule: Iterable[Stage],
    alerts: Iterable[AlertDefinition | Mapping[str, Any]] | None,
    now: DateInput = None,
    *,
    default_duration: int = DEFAULT_STAGE_DURATION_DAYS,
) -> NextAlert | None:
    """Return the next upcoming alert for a plant planted on ``start_date``.

    No relevance window is applied here; see ``is_alert_due_soon``.
    """
    day = total_day_of_grow(start_date, now)
    if day is None:
        return None
    return next_alert_for_day(day, schedule, alerts, default_duration=default_duration)


def is_alert_due_soon(
    alert: NextAlert | None, window: int = ALERT_RELEVANCE_DAYS
) -> bool:
    """Return True if ``alert`` falls inside the presentation window."""
    return alert is not None and 0 <= alert.days_until <= window


def project_alert_dates(
    start_date: DateInput,
    schedule: Iterable[Stage],
    alerts: Iterable[AlertDefinition | Mapping[str, Any]] | None,
    *,
    default_duration: int = DEFAULT_STAGE_DURATION_DAYS,
) -> list[tuple[date, ProjectedAlert]]:
    """Return projected alerts paired with the calendar date they fire on."""
    start = parse_date_field(start_date)
    if start is None:
        return []
    return [
        (start.date() + timedelta(days=alert.absolute_day), alert)
        for alert in _project(schedule, alerts, default_duration)
    ]
