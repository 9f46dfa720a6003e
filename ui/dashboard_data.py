"""Transform valuation results into tabular dashboard structures."""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Dict, Optional

import pandas as pd

from valuation.engine import ValuationResult


@dataclass
class DashboardSnapshot:
    waterfall: pd.DataFrame
    scenarios: pd.DataFrame
    dcf_schedule: pd.DataFrame
    cohorts: pd.DataFrame
    arr_bridge: pd.DataFrame
    metrics: pd.DataFrame
    scores: pd.DataFrame
    flags: pd.DataFrame


def _optional(value: Optional[float]) -> float:
    return float(value) if value is not None else float("nan")


def _to_waterfall_df(result: ValuationResult) -> pd.DataFrame:
    rows = [
        {"step": i, "label": step.label, "delta": step.delta, "cumulative": step.cumulative}
        for i, step in enumerate(result.waterfall)
    ]
    return pd.DataFrame(rows, columns=["step", "label", "delta", "cumulative"])


def _to_scenarios_df(result: ValuationResult) -> pd.DataFrame:
    return pd.DataFrame(
        [asdict(scenario) for scenario in result.scenarios],
        columns=["name", "multiple", "enterprise_value", "equity_value"],
    ).set_index("name")


def _to_dcf_df(result: ValuationResult) -> pd.DataFrame:
    return pd.DataFrame([asdict(row) for row in result.dcf_rows]).set_index("year")


def _to_cohorts_df(result: ValuationResult) -> pd.DataFrame:
    data = {cohort.label: list(cohort.curve) for cohort in result.cohorts}
    df = pd.DataFrame(data)
    df.index.name = "year"
    return df


def _to_bridge_df(result: ValuationResult) -> pd.DataFrame:
    bridge = result.arr_bridge
    rows = [
        {"component": "Opening ARR", "value": bridge.opening_arr},
        {"component": "New logo", "value": bridge.new_logo_arr},
        {"component": "Expansion", "value": bridge.expansion_arr},
        {"component": "Contraction", "value": -bridge.contraction_arr},
        {"component": "Churn", "value": -bridge.churn_arr},
        {"component": "Closing ARR", "value": bridge.closing_arr},
    ]
    return pd.DataFrame(rows, columns=["component", "value"])


def _to_metrics_df(result: ValuationResult) -> pd.DataFrame:
    ue = result.unit_economics
    eff = result.efficiency
    mult = result.multiple
    rows = [
        ("lifetime_years", ue.lifetime_years),
        ("ltv", ue.ltv),
        ("ltv_cac", ue.ltv_cac),
        ("cac_payback_months", ue.cac_payback_months),
        ("rule_of_40", eff.rule_of_40),
        ("net_new_arr", eff.net_new_arr),
        ("magic_number", eff.magic_number if eff.magic_number_defined else float("nan")),
        ("burn_multiple", eff.burn_multiple if eff.burn_multiple_defined else float("nan")),
        ("sales_efficiency", eff.sales_efficiency if eff.sales_efficiency_defined else float("nan")),
        ("nrr_derived", _optional(result.arr_bridge.nrr_derived)),
        ("ev_ebitda", _optional(mult.ev_ebitda)),
        ("ev_gross_profit", _optional(mult.ev_gross_profit)),
        ("ev_net_new_arr", _optional(mult.ev_net_new_arr)),
        ("dcf_terminal_value", _optional(result.dcf.terminal_value)),
        ("dcf_terminal_value_ebitda", result.dcf.terminal_value_ebitda),
        ("dcf_terminal_share", _optional(result.dcf.terminal_share)),
    ]
    return pd.DataFrame(rows, columns=["metric", "value"]).set_index("metric")


def _to_scores_df(result: ValuationResult) -> pd.DataFrame:
    scores = result.scores
    rows = []
    for name, value in (
        ("retention", scores.retention),
        ("growth", scores.growth),
        ("efficiency", scores.efficiency),
        ("composite", scores.composite),
    ):
        if value >= 72:
            rating = "STRONG"
        elif value >= 48:
            rating = "ADEQUATE"
        else:
            rating = "WEAK"
        rows.append({"score": name, "value": value, "rating": rating})
    return pd.DataFrame(rows, columns=["score", "value", "rating"])


def _to_flags_df(result: ValuationResult) -> pd.DataFrame:
    return pd.DataFrame(
        [asdict(flag) for flag in result.flags],
        columns=["severity", "code", "message"],
    )


def build_snapshot(result: ValuationResult) -> DashboardSnapshot:
    return DashboardSnapshot(
        waterfall=_to_waterfall_df(result),
        scenarios=_to_scenarios_df(result),
        dcf_schedule=_to_dcf_df(result),
        cohorts=_to_cohorts_df(result),
        arr_bridge=_to_bridge_df(result),
        metrics=_to_metrics_df(result),
        scores=_to_scores_df(result),
        flags=_to_flags_df(result),
    )


def compare_results(results: Dict[str, ValuationResult]) -> pd.DataFrame:
    """One row per profile with headline values."""
    rows = []
    for profile_id, result in results.items():
        rows.append(
            {
                "profile": profile_id,
                "arr": result.arr,
                "base_multiple": result.base_multiple,
                "base_ev": result.multiple.base.enterprise_value,
                "dcf_ev": result.dcf.enterprise_value,
                "composite_score": result.scores.composite,
                "flags": sum(1 for flag in result.flags if flag.severity != "CLEAR"),
            }
        )
    return pd.DataFrame(
        rows,
        columns=["profile", "arr", "base_multiple", "base_ev", "dcf_ev", "composite_score", "flags"],
    ).set_index("profile")
