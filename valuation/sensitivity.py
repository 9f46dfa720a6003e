"""
Sensitivity grids, reverse valuation and value creation levers.

Each grid cell is a full recompute of the valuation with two profile fields
overridden; every other input stays at the profile's value.

Presets:
  growth-nrr     ARR growth x NRR            -> base EV/ARR multiple
  wacc-terminal  WACC x terminal growth      -> DCF EV / ARR
  margins        gross margin x EBITDA margin -> base EV/ARR multiple

Levers re-run the valuation at one improved input and report the change in
the base multiple, ranked by impact.
"""

import logging
from dataclasses import asdict, dataclass, replace
from typing import Callable, Dict, Sequence, Tuple

import pandas as pd

from .engine import ValuationResult, compute_valuation
from .profile import InputProfile, profile_field_names

logger = logging.getLogger(__name__)


METRICS: Dict[str, Callable[[ValuationResult], float]] = {
    "base_multiple": lambda r: r.base_multiple,
    "base_enterprise_value": lambda r: r.multiple.base.enterprise_value,
    "dcf_ev_to_arr": lambda r: r.scenario("dcf").multiple,
    "dcf_enterprise_value": lambda r: r.dcf.enterprise_value,
    "composite_score": lambda r: r.scores.composite,
}


@dataclass(frozen=True)
class GridSpec:
    """Two-way sensitivity grid definition."""
    row_field: str
    row_values: Tuple[float, ...]
    col_field: str
    col_values: Tuple[float, ...]
    metric: str


PRESET_GRIDS: Dict[str, GridSpec] = {
    "growth-nrr": GridSpec(
        "arr_growth", (10, 20, 30, 40, 55, 70, 90, 120),
        "nrr", (85, 90, 95, 100, 108, 115, 120, 130),
        "base_multiple",
    ),
    "wacc-terminal": GridSpec(
        "wacc", (8, 10, 12, 14, 16, 18, 20),
        "terminal_growth", (1.5, 2.0, 2.5, 3.0, 3.5, 4.0, 4.5),
        "dcf_ev_to_arr",
    ),
    "margins": GridSpec(
        "gross_margin", (45, 55, 65, 72, 78, 83, 90),
        "ebitda_margin", (-40, -20, -10, 0, 10, 20, 30),
        "base_multiple",
    ),
}

DEFAULT_TARGET_EVS: Tuple[float, ...] = (25e6, 50e6, 100e6, 250e6, 500e6, 1e9)


def build_sensitivity_grid(
    profile: InputProfile,
    row_field: str,
    row_values: Sequence[float],
    col_field: str,
    col_values: Sequence[float],
    metric: str = "base_multiple"
) -> pd.DataFrame:
    """
    Build a 2D sensitivity table.

    Args:
        profile: Profile holding every non-varied input
        row_field: Profile field varied down the rows
        row_values: Values for row_field
        col_field: Profile field varied across the columns
        col_values: Values for col_field
        metric: Key of METRICS to report per cell

    Returns:
        DataFrame indexed by row values with one column per col value

    Raises:
        ValueError: Unknown field or metric
    """
    known = set(profile_field_names())
    for field_name in (row_field, col_field):
        if field_name not in known:
            raise ValueError(f"Unknown profile field: {field_name}")
    if metric not in METRICS:
        raise ValueError(f"Unknown metric: {metric} (expected one of {sorted(METRICS)})")

    extract = METRICS[metric]
    table = {}
    for col_value in col_values:
        column = []
        for row_value in row_values:
            cell_profile = replace(profile, **{row_field: row_value, col_field: col_value})
            column.append(extract(compute_valuation(cell_profile)))
        table[col_value] = column

    df = pd.DataFrame(table, index=pd.Index(list(row_values), name=row_field))
    df.columns.name = col_field

    logger.info(
        "Built %s x %s grid of %s (%d cells)",
        row_field, col_field, metric, len(row_values) * len(col_values),
    )
    return df


def run_preset_grid(profile: InputProfile, name: str) -> pd.DataFrame:
    """Build one of PRESET_GRIDS."""
    if name not in PRESET_GRIDS:
        raise ValueError(f"Unknown grid: {name} (expected one of {sorted(PRESET_GRIDS)})")
    spec = PRESET_GRIDS[name]
    return build_sensitivity_grid(
        profile, spec.row_field, spec.row_values,
        spec.col_field, spec.col_values, spec.metric,
    )


def reverse_valuation(
    result: ValuationResult,
    target_evs: Sequence[float] = DEFAULT_TARGET_EVS
) -> pd.DataFrame:
    """
    ARR required to justify each target EV at the current base multiple.

    Formula: implied ARR = target EV / base multiple, gap = implied - current
    """
    base_multiple = result.base_multiple
    rows = []
    for target in target_evs:
        implied_arr = target / base_multiple
        gap = implied_arr - result.arr
        rows.append(
            {
                "target_ev": float(target),
                "implied_arr": implied_arr,
                "arr_gap": gap,
                "sufficient": gap <= 0,
            }
        )
    return pd.DataFrame(rows, columns=["target_ev", "implied_arr", "arr_gap", "sufficient"])


@dataclass(frozen=True)
class Lever:
    """One value creation lever."""
    code: str
    action: str
    delta: float     # change in base multiple, 0 when already met
    priority: str    # HIGH, MED, LOW or DONE


def _lever_delta(profile: InputProfile, result: ValuationResult, applies: bool, **overrides) -> float:
    if not applies:
        return 0.0
    return compute_valuation(replace(profile, **overrides)).base_multiple - result.base_multiple


def build_levers(profile: InputProfile, result: ValuationResult) -> Tuple[Lever, ...]:
    """Evaluate the five levers in their fixed order (unranked)."""
    rule_of_40 = result.efficiency.rule_of_40

    if profile.arr_m < 10:
        size_priority = "HIGH"
    elif profile.arr_m < 25:
        size_priority = "MED"
    else:
        size_priority = "DONE"

    return (
        Lever(
            "nrr",
            f"Improve NRR to 115% (from {profile.nrr:.1f}%)",
            _lever_delta(profile, result, profile.nrr < 115, nrr=115.0),
            "HIGH" if profile.nrr < 105 else "MED",
        ),
        Lever(
            "rule_of_40",
            f"Achieve Rule of 40 (current: {rule_of_40:.0f})",
            _lever_delta(
                profile, result, rule_of_40 < 40,
                ebitda_margin=min(0.0, 40 - profile.arr_growth),
            ),
            "HIGH" if rule_of_40 < 20 else "MED",
        ),
        Lever(
            "arr_scale",
            f"Grow ARR to $25M+ (current: ${profile.arr_m:g}M)",
            _lever_delta(profile, result, profile.arr_m < 25, arr_m=25.0),
            size_priority,
        ),
        Lever(
            "logo_churn",
            f"Reduce logo churn below 8% (from {profile.logo_churn:.1f}%)",
            _lever_delta(profile, result, profile.logo_churn > 8, logo_churn=7.0),
            "HIGH" if profile.logo_churn > 15 else "LOW",
        ),
        Lever(
            "gross_margin",
            f"Improve gross margin to 75%+ (from {profile.gross_margin:.1f}%)",
            _lever_delta(profile, result, profile.gross_margin < 75, gross_margin=76.0),
            "HIGH" if profile.gross_margin < 65 else "LOW",
        ),
    )


def value_creation_levers(profile: InputProfile, result: ValuationResult) -> pd.DataFrame:
    """
    Levers ranked by multiple impact.

    Each delta is a full recompute at the improved input minus the current
    base multiple. Ties keep the fixed lever order.

    Args:
        profile: Profile that produced result
        result: Current valuation

    Returns:
        DataFrame with code, action, delta, priority; largest delta first
    """
    levers = build_levers(profile, result)
    df = pd.DataFrame(
        [asdict(lever) for lever in levers],
        columns=["code", "action", "delta", "priority"],
    )
    df = df.sort_values("delta", ascending=False, kind="stable").reset_index(drop=True)
    logger.debug("Ranked %d levers, top %s (%+.2fx)", len(df), df.loc[0, "code"], df.loc[0, "delta"])
    return df
