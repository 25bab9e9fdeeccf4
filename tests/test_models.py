"""Tests for the Grow Targets data models."""

import logging

import pytest

from custom_components.grow_targets.models import (
    AlertDefinition,
    EnvironmentPreset,
    GrowingProfile,
    Plant,
    ResolvedTarget,
    Stage,
    StageSchedule,
    VPDResult,
    VPDZone,
    parse_stage_duration,
)


@pytest.mark.parametrize(
    "data,expected",
    [
        ({"duration_days": 21}, 21),
        ({"days_duration": "10"}, 10),
        ({"days": 7}, 7),
        ({"weeks_duration": 2}, 14),
        ({"weeks": "3"}, 21),
        ({"weeks": "1-2"}, 11),
        ({"weeks": 4}, 28),
        ({"duration_days": 0}, None),
        ({"duration_days": -3}, None),
        ({"duration_days": "long"}, None),
        ({}, None),
    ],
)
def test_parse_stage_duration(data, expected):
    """Test the stored duration keys, first match wins."""
    assert parse_stage_duration(data) == expected


def test_stage_from_dict():
    """Test that stage names are trimmed and durations parsed."""
    stage = Stage.from_dict({"name": " Vegetation ", "duration_days": 28})
    assert stage == Stage(name="Vegetation", duration_days=28)


def test_schedule_from_list_drops_duplicates(caplog):
    """A repeated stage name is dropped, case-insensitively, with a warning."""
    with caplog.at_level(logging.WARNING):
        schedule = StageSchedule.from_list(
            [
                {"name": "Veg", "duration_days": 14},
                "Flower",
                {"name": "veg", "duration_days": 30},
                {"duration_days": 5},
                42,
            ]
        )

    assert schedule.names == ["Veg", "Flower"]
    assert schedule.stages[0].duration_days == 14
    assert "duplicate stage" in caplog.text


def test_schedule_from_list_rejects_non_lists():
    """Anything that is not a list gives an empty schedule."""
    assert not StageSchedule.from_list(None)
    assert len(StageSchedule.from_list({"name": "Veg"})) == 0


def test_environment_preset_short_keys_and_ranges():
    """Short preset keys and nested ranges are understood."""
    preset = EnvironmentPreset.from_dict(
        {
            "temp": 25,
            "hum": {"min": 50, "max": 60},
            "light_h": 18,
            "temp_range": {"min": 22, "max": 28},
        },
        stage="veg",
    )

    assert preset.stage == "veg"
    assert preset.temp_day == 25
    assert preset.humidity is None
    assert (preset.humidity_min, preset.humidity_max) == (50, 60)
    assert (preset.temp_min, preset.temp_max) == (22, 28)
    assert preset.light_hours == 18


def test_environment_preset_controller_style_keys():
    """Presets written with controller setting names are understood."""
    preset = EnvironmentPreset.from_dict(
        {"target_temp": 24, "target_hum": 60, "light_hours": 18}, stage="vegetative"
    )

    assert preset.temp_day == 24
    assert preset.humidity == 60
    assert preset.light_hours == 18


def test_environment_preset_ignores_garbage():
    """Unreadable values become None instead of raising."""
    preset = EnvironmentPreset.from_dict({"stage": "Veg", "temp_day": "hot", "ppfd": []})
    assert preset.temp_day is None
    assert preset.ppfd is None


def test_alert_definition_from_dict():
    """Test offset aliases, clamping and the default type."""
    alert = AlertDefinition.from_dict({"stage": "Flowering", "days": -4, "message": "x"})
    assert alert.trigger_stage == "Flowering"
    assert alert.day_offset == 0
    assert alert.alert_type == "info"

    typed = AlertDefinition.from_dict(
        {"trigger_stage": "Veg", "day_offset": "3", "message": "Top", "type": "action"}
    )
    assert typed.day_offset == 3
    assert typed.alert_type == "action"


def test_growing_profile_from_dict():
    """Test that a stored profile is read with its lifecycle estimate."""
    profile = GrowingProfile.from_dict(
        {
            "name": "Northern Lights",
            "stages": [{"name": "Veg", "duration_days": 28}, {"name": "Flower"}],
            "presets": [{"stage": "Veg", "temp": 25}],
            "alerts": [{"stage": "Flower", "day": 0, "message": "Switch to 12/12"}],
            "lifecycle_estimates": {"total_days": 90},
        }
    )

    assert profile.name == "Northern Lights"
    assert profile.schedule.names == ["Veg", "Flower"]
    assert profile.presets == [{"stage": "Veg", "temp": 25}]
    assert profile.environment_targets is None
    assert profile.alerts[0].message == "Switch to 12/12"
    assert profile.total_days == 90


def test_plant_from_dict_migrates_legacy_keys():
    """Legacy keys are migrated and unknown keys dropped."""
    plant = Plant.from_dict(
        {
            "plant_id": "p1",
            "start_date": "2024-01-01",
            "current_stage": "veg",
            "strain_name": "OG",
            "row": 3,
        }
    )

    assert plant == Plant(
        plant_id="p1",
        start_date="2024-01-01",
        strain="OG",
        last_displayed_stage="veg",
    )
    assert Plant.from_dict(plant.to_dict()) == plant


def test_resolved_target_helpers():
    """Test `is_empty` and `as_dict`."""
    assert ResolvedTarget(stage="Veg", vpd=1.0).is_empty
    target = ResolvedTarget(stage="Veg", temperature=24)
    assert not target.is_empty
    assert target.as_dict() == {"stage": "Veg", "temperature": 24}


def test_vpd_zone_bounds():
    """Lower bounds are inclusive and upper bounds exclusive."""
    zone = VPDZone(key="ideal", lower=0.8, upper=1.2, label="Ideal", advice="")
    assert zone.contains(0.8)
    assert not zone.contains(1.2)
    assert VPDZone("any", None, None, "", "").contains(-5)


def test_vpd_result_offline():
    """Test the offline flag."""
    assert VPDResult(value=None, zone="offline").is_offline
    assert not VPDResult(value=0.9, zone="ideal").is_offline
