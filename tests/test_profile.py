from dataclasses import FrozenInstanceError, replace
from pathlib import Path

import pytest

from valuation.profile import (
    BusinessModel,
    InputProfile,
    Stage,
    deep_merge,
    load_profile,
    load_profile_config,
    profile_field_names,
    profile_from_dict,
    profile_to_dict,
    validate_profile,
)


def test_deep_merge_keeps_originals():
    base = {"a": {"x": 1}, "b": 1}
    override = {"a": {"y": 2}}
    merged = deep_merge(base, override)
    assert merged == {"a": {"x": 1, "y": 2}, "b": 1}
    assert base == {"a": {"x": 1}, "b": 1}


def test_deep_merge_replaces_lists():
    merged = deep_merge({"cohorts": {"cohort_nrr": [100, 105]}}, {"cohorts": {"cohort_nrr": [120]}})
    assert merged["cohorts"]["cohort_nrr"] == [120]


def test_base_yaml_matches_defaults(profiles_dir: Path):
    assert load_profile("base", profiles_dir) == InputProfile()


def test_shipped_profiles_load(profiles_dir: Path):
    for path in sorted(profiles_dir.glob("*.yaml")):
        profile = load_profile(path.stem, profiles_dir)
        assert validate_profile(profile) == []


def test_override_keeps_unset_fields(profiles_dir: Path):
    profile = load_profile("scale_leader", profiles_dir)
    assert profile.business_model == BusinessModel.VERT
    assert profile.stage == Stage.SCALE
    assert profile.ai_native is True
    assert profile.network_effects is False
    assert profile.cohort_nrr == (112.0, 115.0, 118.0, 120.0, 122.0)
    assert profile.wacc == 12.0  # from base.yaml


def test_load_profile_config_merges_override(tmp_path: Path):
    (tmp_path / "base.yaml").write_text(
        "dcf:\n  wacc: 12\n  terminal_growth: 3\n", encoding="utf-8"
    )
    (tmp_path / "risky.yaml").write_text("dcf:\n  wacc: 18\n", encoding="utf-8")
    merged = load_profile_config("risky", tmp_path)
    assert merged["dcf"]["wacc"] == 18
    assert merged["dcf"]["terminal_growth"] == 3


def test_missing_profile_raises(tmp_path: Path):
    (tmp_path / "base.yaml").write_text("", encoding="utf-8")
    with pytest.raises(FileNotFoundError):
        load_profile_config("missing", tmp_path)


def test_profile_from_dict_coerces_types():
    profile = profile_from_dict({
        "identity": {"business_model": "B2C", "stage": "SEED"},
        "revenue": {"arr_m": 3},
        "modifiers": {"ai_native": True},
        "dcf": {"horizon_years": 7.0},
    })
    assert profile.business_model == BusinessModel.B2C
    assert profile.arr_m == 3.0
    assert isinstance(profile.arr_m, float)
    assert profile.ai_native is True
    assert profile.horizon_years == 7


@pytest.mark.parametrize("config", [
    {"pricing": {"arpa": 1}},
    {"revenue": {"arpa": 1}},
    {"identity": {"business_model": "MARKETPLACE"}},
    {"identity": {"stage": "IPO"}},
    {"revenue": 12},
    {"modifiers": ["ai_native"]},
    {"modifiers": {"ai_native": "false"}},
    {"modifiers": {"network_effects": 1}},
])
def test_profile_from_dict_rejects_invalid(config):
    with pytest.raises(ValueError):
        profile_from_dict(config)


def test_profile_to_dict_inverts_from_dict():
    profile = InputProfile(stage=Stage.MATURE, cohort_nrr=(101.0, 99.0), usage_based_pricing=True)
    assert profile_from_dict(profile_to_dict(profile)) == profile


def test_arr_in_dollars():
    assert InputProfile(arr_m=12.5).arr == 12.5e6


def test_profile_is_immutable():
    with pytest.raises(FrozenInstanceError):
        InputProfile().nrr = 120.0


def test_field_names_cover_sections():
    names = profile_field_names()
    assert "cohort_nrr" in names
    assert "business_model" in names
    assert len(names) == 30


def test_validate_profile_happy_path():
    assert validate_profile(InputProfile()) == []


@pytest.mark.parametrize("overrides,fragment", [
    ({"arr_m": 0.0}, "arr_m"),
    ({"logo_churn": 120.0}, "logo_churn"),
    ({"grr": -1.0}, "grr"),
    ({"nrr": -5.0}, "nrr"),
    ({"gross_margin": 110.0}, "gross_margin"),
    ({"cac": -1.0}, "cac"),
    ({"horizon_years": 0}, "horizon_years"),
    ({"wacc": 3.0}, "terminal_growth"),
    ({"cohort_nrr": (100.0,) * 6}, "cohort_nrr"),
])
def test_validate_profile_catches(overrides, fragment):
    errors = validate_profile(replace(InputProfile(), **overrides))
    assert len(errors) == 1
    assert fragment in errors[0]


def test_empty_section_keeps_defaults():
    assert profile_from_dict({"modifiers": None}) == InputProfile()


def test_quoted_modifier_in_yaml_rejected(tmp_path: Path):
    (tmp_path / "base.yaml").write_text(
        "modifiers:\n  ai_native: \"false\"\n", encoding="utf-8"
    )
    with pytest.raises(ValueError, match="ai_native"):
        load_profile("base", tmp_path)
