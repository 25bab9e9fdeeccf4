"""Tests for the settings synthesizer and match checker."""

import pytest

from custom_components.grow_targets.models import ResolvedTarget
from custom_components.grow_targets.settings_synthesizer import (
    apply_settings_delta,
    light_window_hours,
    matches,
    synthesize,
)

FULL_TARGET = ResolvedTarget(
    stage="Veg", temperature=24, humidity=60, light_hours=18, vpd=1.0
)


def test_synthesize_full_target():
    """Every present field maps to its controller setting."""
    assert synthesize(FULL_TARGET) == {
        "target_temp": 24,
        "target_humidity": 60,
        "light_start_hour": 6,
        "light_start_minute": 0,
        "light_end_hour": 0,
        "light_end_minute": 0,
        "light_mode": "automatic",
    }


def test_synthesize_partial_target():
    """Absent fields are left out of the delta."""
    assert synthesize(ResolvedTarget(stage="Veg", temperature=24)) == {
        "target_temp": 24
    }
    assert synthesize(ResolvedTarget(stage="Veg")) == {}
    assert synthesize(None) == {}


def test_synthesize_light_window_wraps():
    """The light window end wraps around midnight."""
    assert synthesize({"light_hours": 12})["light_end_hour"] == 18
    assert synthesize({"light_hours": 20})["light_end_hour"] == 2
    assert synthesize({"light_hours": 24})["light_end_hour"] == 6


@pytest.mark.parametrize("hours", [0, -2, 25])
def test_synthesize_ignores_impossible_light_hours(hours):
    """Light hours outside (0, 24] produce no light window."""
    assert synthesize({"light_hours": hours, "temperature": 24}) == {
        "target_temp": 24
    }


def test_apply_delta_changes_only_target_fields():
    """Applying a delta touches only the synthesized keys."""
    current = {
        "target_temp": 20,
        "target_humidity": 70,
        "hysteresis": 0.5,
        "fan_speed": 3,
    }
    snapshot = dict(current)

    merged = apply_settings_delta(
        current, synthesize(ResolvedTarget(stage="Veg", temperature=24))
    )

    assert merged == {**snapshot, "target_temp": 24}
    assert current == snapshot
    assert apply_settings_delta(None, {"target_temp": 24}) == {"target_temp": 24}


def test_matches_basic_cases():
    """A present field must have an equal counterpart; an empty target never matches."""
    assert matches({"target_temp": 24}, {"temperature": 24})
    assert not matches({}, {"temperature": 24})
    assert not matches({"target_temp": 24}, {})
    assert not matches({"target_temp": 24}, None)
    assert not matches(None, {"temperature": 24})


def test_matches_after_applying_delta():
    """Settings produced from a target always satisfy it."""
    current = {"target_temp": 19, "fan_speed": 2}
    settings = apply_settings_delta(current, synthesize(FULL_TARGET))

    assert not matches(current, FULL_TARGET)
    assert matches(settings, FULL_TARGET)


def test_matches_numeric_equality():
    """Numbers compare by value, whatever their type."""
    assert matches({"target_temp": "24.0"}, {"temperature": 24})
    assert not matches({"target_temp": 24.5}, {"temperature": 24})
    assert not matches({"target_temp": "warm"}, {"temperature": 24})


def test_matches_every_field():
    """One mismatching field fails the whole match."""
    current = {"target_temp": 24, "target_humidity": 55}
    assert not matches(current, {"temperature": 24, "humidity": 60})


def test_matches_light_window_by_duration():
    """The light window compares as elapsed hours, across midnight."""
    target = {"light_hours": 18}

    assert matches({"light_start_hour": 20, "light_end_hour": 14}, target)
    assert matches(
        {
            "light_start_hour": 5,
            "light_start_minute": 30,
            "light_end_hour": 23,
            "light_end_minute": 30,
        },
        target,
    )
    assert not matches({"light_start_hour": 6, "light_end_hour": 18}, target)
    assert not matches({"light_start_hour": 6}, target)
    assert matches({"light_start_hour": 6, "light_end_hour": 6}, {"light_hours": 24})


@pytest.mark.parametrize("hours,end_hour", [(18.5, 1), (18.4, 0), (11.6, 18)])
def test_fractional_light_hours_round_trip(hours, end_hour):
    """Fractional light hours are rounded the same way by synthesize and matches."""
    target = {"light_hours": hours}
    delta = synthesize(target)

    assert delta["light_end_hour"] == end_hour
    assert matches(apply_settings_delta({}, delta), target)


def test_fractional_light_hours_agree_with_resolved_target():
    """A mapping target and a resolved target with the same hours give one window."""
    assert synthesize({"light_hours": 18.5}) == synthesize(
        ResolvedTarget(stage="Veg", light_hours=19)
    )


def test_matches_ignores_light_mode():
    """Only the window length is compared, not the light mode."""
    current = {"light_start_hour": 6, "light_end_hour": 0, "light_mode": "manual"}
    assert matches(current, {"light_hours": 18})


def test_light_window_hours():
    """Test window lengths, including wraparound and the full day."""
    assert light_window_hours(6, 0) == 18
    assert light_window_hours(6, 18) == 12
    assert light_window_hours(22, 4) == 6
    assert light_window_hours(6, 6) == 24
    assert light_window_hours(6, 18, 30, 0) == 11.5


def test_synthesize_and_matches_are_idempotent():
    """Repeated calls give equal results."""
    assert synthesize(FULL_TARGET) == synthesize(FULL_TARGET)
    assert matches({"target_temp": 24}, FULL_TARGET) == matches(
        {"target_temp": 24}, FULL_TARGET
    )
