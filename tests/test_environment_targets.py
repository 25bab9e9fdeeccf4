"""Tests for the environment target resolver."""

import pytest

from custom_components.grow_targets.environment_targets import (
    find_stage_preset,
    normalize_environment_profile,
    resolve_profile_targets,
    resolve_targets,
)
from custom_components.grow_targets.models import (
    EnvironmentProfile,
    GrowingProfile,
    ProfileShape,
    ResolvedTarget,
    Stage,
)

VEG = {
    "temp_day": 26,
    "temp_night": 21,
    "humidity": {"min": 60, "max": 65},
    "vpd_target": 1.0,
    "ppfd": 600,
    "light_hours": 18,
}
FLOWER = {"temp_min": 20, "temp_max": 26, "humidity": 45, "light_hours": 12}

SEQUENCE = [{"stage": "Vegetation", **VEG}, {"stage": "Flowering", **FLOWER}]
KEYED = {"Vegetation": VEG, "Flowering": [FLOWER]}


@pytest.mark.parametrize("stage_name", ["Vegetation", "FLOWERING", "flowering"])
def test_both_storage_shapes_resolve_identically(stage_name):
    """A list and an equivalent keyed map give the same target."""
    from_sequence = resolve_targets(SEQUENCE, stage_name)
    from_mapping = resolve_targets(KEYED, stage_name)

    assert from_sequence is not None
    assert from_sequence == from_mapping


def test_day_night_average_and_humidity_midpoint():
    """Temperatures average, humidity ranges collapse to a rounded midpoint."""
    target = resolve_targets(SEQUENCE, "vegetation")

    assert target == ResolvedTarget(
        stage="Vegetation",
        temperature=24,
        humidity=63,
        vpd=1.0,
        ppfd=600,
        light_hours=18,
        temperature_range=(21, 26),
        humidity_range=(60, 65),
    )


def test_min_max_temperature_and_point_humidity():
    """A temperature range collapses to its midpoint; point humidity is kept."""
    target = resolve_targets(SEQUENCE, "Flowering")

    assert target.temperature == 23
    assert target.temperature_range == (20, 26)
    assert target.humidity == 45
    assert target.humidity_range is None
    assert target.light_hours == 12


def test_single_temperature_is_kept_as_is():
    """A lone day temperature is not rounded."""
    target = resolve_targets([{"stage": "Veg", "temp_day": 24.5}], "Veg")
    assert target.temperature == 24.5


def test_partial_resolution():
    """Missing fields stay None without failing the whole resolution."""
    target = resolve_targets({"veg": {"temp": 24}}, "veg")

    assert target.temperature == 24
    assert target.humidity is None
    assert target.light_hours is None
    assert target.vpd is None


def test_entry_without_fields_still_resolves():
    """An entry with no values is a valid, empty target."""
    target = resolve_targets({"Veg": {}}, "Veg")
    assert target is not None
    assert target.is_empty


@pytest.mark.parametrize("profile", [SEQUENCE, KEYED, None, [], {}, "junk"])
def test_unknown_stage_gives_none(profile):
    """Only a missing entry yields None."""
    assert resolve_targets(profile, "Drying") is None


def test_no_stage_name_gives_none():
    """Without a stage there is nothing to look up."""
    assert resolve_targets(SEQUENCE, None) is None


def test_stage_aliases():
    """A preset stored under a common alias matches the scheduled stage name."""
    profile = {"veg": {"temp": 25}, "bloom": {"temp": 22}}

    assert resolve_targets(profile, "Vegetation").temperature == 25
    assert resolve_targets(profile, "Flowering").temperature == 22
    assert resolve_targets(profile, "Vegetative").temperature == 25


def test_exact_match_beats_alias():
    """An exact stage name wins over an alias listed earlier."""
    profile = [{"stage": "veg", "temp": 20}, {"stage": "Vegetation", "temp": 26}]
    assert resolve_targets(profile, "Vegetation").temperature == 26


def test_keyed_shape_normalization():
    """Single mappings are wrapped into one-entry sequences, keyed by stage."""
    profile = normalize_environment_profile({"Veg": {"temp": 25}, "Flower": [{}, {}]})

    assert profile.shape is ProfileShape.KEYED
    assert [entry.stage for entry in profile.entries] == ["Veg", "Flower", "Flower"]


def test_sequence_entries_take_schedule_names():
    """Unnamed list entries are aligned with the stage schedule."""
    schedule = [Stage("Seedling", 7), Stage("Veg", 21)]
    profile = normalize_environment_profile([{"temp": 23}, {"temp": 26}], schedule)

    assert profile.shape is ProfileShape.SEQUENCE
    assert [entry.stage for entry in profile.entries] == ["Seedling", "Veg"]
    assert resolve_targets([{"temp": 23}, {"temp": 26}], "veg", schedule).temperature == 26


def test_normalized_profile_is_reused():
    """An already normalized profile passes through untouched."""
    profile = normalize_environment_profile(SEQUENCE)
    assert normalize_environment_profile(profile) is profile
    assert find_stage_preset(profile, "Flowering").humidity == 45
    assert find_stage_preset(EnvironmentProfile(), "Flowering") is None


TWO_SOURCE_PROFILE = GrowingProfile.from_dict(
    {
        "name": "Blue Dream",
        "stages": [
            {"name": "Vegetation", "duration_days": 30},
            {"name": "Flowering", "duration_days": 60},
        ],
        "presets": {"veg": {"temp": 26, "hum": 60, "light_h": 18}},
        "environment_targets": [
            {"stage": "Flowering", "temp_day": 24, "humidity": 45, "light_hours": 12}
        ],
    }
)


def test_profile_presets_are_tried_first():
    """A stage found in the presets resolves from them, light hours included."""
    target = resolve_profile_targets(TWO_SOURCE_PROFILE, "Vegetation")

    assert target.stage == "veg"
    assert target.temperature == 26
    assert target.humidity == 60
    assert target.light_hours == 18


def test_profile_falls_back_to_environment_targets():
    """A stage missing from the presets resolves from the environment targets."""
    target = resolve_profile_targets(TWO_SOURCE_PROFILE, "Flowering")

    assert target.stage == "Flowering"
    assert target.temperature == 24
    assert target.light_hours == 12


def test_profile_without_matching_source():
    """No source covering the stage, or no profile, gives no target."""
    assert resolve_profile_targets(TWO_SOURCE_PROFILE, "Drying") is None
    assert resolve_profile_targets(None, "Vegetation") is None
