"""Input profile definition, YAML loading and validation utilities."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Dict, List, Tuple
import copy

import yaml


class BusinessModel(str, Enum):
    B2B_SMB = "B2B_SMB"
    B2B_MID = "B2B_MID"
    B2B_ENT = "B2B_ENT"
    B2C = "B2C"
    VERT = "VERT"
    TECH_SVC = "TECH_SVC"


class Stage(str, Enum):
    SEED = "SEED"
    EARLY = "EARLY"
    GROWTH = "GROWTH"
    SCALE = "SCALE"
    MATURE = "MATURE"


@dataclass(frozen=True)
class InputProfile:
    """
    Operating metrics for one company.

    Percentages are percent-points (40.0 means 40%). ARR, cash and debt are
    in $M; ARPA and CAC are in $.
    """
    # Identity
    business_model: BusinessModel = BusinessModel.B2B_ENT
    stage: Stage = Stage.GROWTH

    # Revenue
    arr_m: float = 12.0
    arr_growth: float = 40.0
    revenue_mix: float = 88.0  # recurring share of revenue

    # ARR bridge (% of opening ARR)
    new_logo_growth_pct: float = 25.0
    expansion_pct: float = 12.0
    contraction_pct: float = 3.0

    # Retention
    nrr: float = 108.0
    grr: float = 91.0
    logo_churn: float = 7.0  # annual

    # Margins (% of revenue)
    gross_margin: float = 76.0
    ebitda_margin: float = -12.0
    rnd_pct: float = 18.0
    sm_pct: float = 33.0
    ga_pct: float = 12.0

    # Unit economics
    arpa: float = 48000.0
    cac: float = 40000.0

    # Capital structure
    cash_m: float = 22.0
    debt_m: float = 6.0

    # Technology / market modifiers
    ai_native: bool = False
    vertical_focus: bool = False
    network_effects: bool = False
    usage_based_pricing: bool = False
    public_benchmark: bool = False

    # DCF
    horizon_years: int = 5
    margin_expansion_per_year: float = 3.5
    wacc: float = 12.0
    terminal_growth: float = 3.0

    # Optional NRR per cohort vintage (oldest first); empty = stated NRR
    cohort_nrr: Tuple[float, ...] = ()

    @property
    def arr(self) -> float:
        """ARR in $."""
        return self.arr_m * 1e6


# YAML section -> profile fields
PROFILE_SECTIONS: Dict[str, Tuple[str, ...]] = {
    "identity": ("business_model", "stage"),
    "revenue": ("arr_m", "arr_growth", "revenue_mix"),
    "bridge": ("new_logo_growth_pct", "expansion_pct", "contraction_pct"),
    "retention": ("nrr", "grr", "logo_churn"),
    "margins": ("gross_margin", "ebitda_margin", "rnd_pct", "sm_pct", "ga_pct"),
    "unit_economics": ("arpa", "cac"),
    "capital": ("cash_m", "debt_m"),
    "modifiers": (
        "ai_native", "vertical_focus", "network_effects",
        "usage_based_pricing", "public_benchmark",
    ),
    "dcf": ("horizon_years", "margin_expansion_per_year", "wacc", "terminal_growth"),
    "cohorts": ("cohort_nrr",),
}

_BOOL_FIELDS = set(PROFILE_SECTIONS["modifiers"])


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base; lists are replaced, not merged."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def load_yaml_file(path: Path) -> dict:
    """Load a YAML file and return an object (empty dict for empty files)."""
    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_profile_config(profile_id: str, profiles_dir: Path) -> dict:
    """Load base profile config and merge the named override if present."""
    base = load_yaml_file(profiles_dir / "base.yaml")
    if profile_id == "base":
        return base

    override_path = profiles_dir / f"{profile_id}.yaml"
    if not override_path.exists():
        raise FileNotFoundError(f"Profile not found: {override_path}")
    return deep_merge(base, load_yaml_file(override_path))


def profile_from_dict(config: dict) -> InputProfile:
    """
    Build an InputProfile from a sectioned config dict.

    Raises ValueError on unknown sections, unknown fields or enum values.
    Missing fields keep the InputProfile defaults.
    """
    values: Dict[str, object] = {}
    for section, section_values in config.items():
        if section == "description":
            continue
        allowed = PROFILE_SECTIONS.get(section)
        if allowed is None:
            raise ValueError(f"Unknown profile section: {section}")
        if section_values is None:
            continue
        if not isinstance(section_values, dict):
            raise ValueError(f"Section {section} must be a mapping, got {type(section_values).__name__}")
        for key, value in section_values.items():
            if key not in allowed:
                raise ValueError(f"Unknown field in section {section}: {key}")
            values[key] = value

    if "business_model" in values:
        try:
            values["business_model"] = BusinessModel(values["business_model"])
        except ValueError:
            raise ValueError(f"Unknown business model: {values['business_model']}") from None
    if "stage" in values:
        try:
            values["stage"] = Stage(values["stage"])
        except ValueError:
            raise ValueError(f"Unknown stage: {values['stage']}") from None
    if "horizon_years" in values:
        values["horizon_years"] = int(values["horizon_years"])
    if "cohort_nrr" in values:
        values["cohort_nrr"] = tuple(float(v) for v in values["cohort_nrr"] or ())

    for key, value in values.items():
        if key in _BOOL_FIELDS:
            if not isinstance(value, bool):
                raise ValueError(f"Modifier {key} must be true or false, got {value!r}")
        elif key not in ("business_model", "stage", "horizon_years", "cohort_nrr"):
            values[key] = float(value)

    return InputProfile(**values)


def profile_to_dict(profile: InputProfile) -> dict:
    """Sectioned config dict for a profile (inverse of profile_from_dict)."""
    config: Dict[str, dict] = {}
    for section, names in PROFILE_SECTIONS.items():
        config[section] = {}
        for name in names:
            value = getattr(profile, name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            config[section][name] = value
    return config


def load_profile(profile_id: str, profiles_dir: Path) -> InputProfile:
    """Load a named profile (base.yaml plus override) as an InputProfile."""
    return profile_from_dict(load_profile_config(profile_id, profiles_dir))


def validate_profile(profile: InputProfile) -> List[str]:
    """
    Report out-of-domain values.

    The engine still computes a result for every profile; these messages
    describe inputs for which some outputs are sentinels or not meaningful.
    """
    errors: List[str] = []

    if profile.arr_m <= 0:
        errors.append(f"arr_m must be > 0 (got {profile.arr_m})")

    if profile.logo_churn < 0 or profile.logo_churn > 100:
        errors.append(f"logo_churn out of range [0, 100]: {profile.logo_churn}")

    if profile.grr < 0 or profile.grr > 100:
        errors.append(f"grr out of range [0, 100]: {profile.grr}")

    if profile.nrr < 0:
        errors.append(f"nrr must be >= 0 (got {profile.nrr})")

    if profile.gross_margin > 100:
        errors.append(f"gross_margin must be <= 100 (got {profile.gross_margin})")

    if profile.arpa < 0 or profile.cac < 0:
        errors.append(f"arpa and cac must be >= 0 (got {profile.arpa}, {profile.cac})")

    if profile.horizon_years < 1:
        errors.append(f"horizon_years must be >= 1 (got {profile.horizon_years})")

    if profile.wacc <= profile.terminal_growth:
        errors.append(
            f"wacc ({profile.wacc}) must be > terminal_growth ({profile.terminal_growth})"
        )

    if len(profile.cohort_nrr) > 5:
        errors.append(f"cohort_nrr has {len(profile.cohort_nrr)} entries (max 5)")

    return errors


def profile_field_names() -> List[str]:
    """Names of every InputProfile field, in declaration order."""
    return [f.name for f in fields(InputProfile)]
