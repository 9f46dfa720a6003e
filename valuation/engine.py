# =============================================================================
# ARR VALUATION ENGINE - ORCHESTRATOR
# =============================================================================
# Runs every calculator against one input profile and assembles the result.
#
# KEY PRINCIPLES:
# - Pure function, no global state, no I/O
# - Deterministic: same profile -> same result
# - Never raises on numeric input; out-of-domain values become warnings
#
# Execution order:
# 1. Unit economics   2. Efficiency   3. ARR bridge
# 4. Multiple build-up   5. DCF   6. Cohorts   7. Scoring   8. Flags
# =============================================================================

import logging
from dataclasses import dataclass
from typing import List, Tuple

from .arr_bridge import ArrBridgeOutput, arr_bridge_engine
from .cohort import Cohort, CohortOutput, cohort_engine
from .dcf import DcfOutput, DcfYearRow, dcf_engine
from .efficiency import EfficiencyOutput, efficiency_engine
from .flags import DiligenceFlag, diligence_flags
from .multiple import AdjustmentStep, MultipleOutput, ScenarioValue, multiple_engine
from .profile import InputProfile
from .scoring import ScoringOutput, scoring_engine
from .tables import NRR_RECONCILIATION_TOLERANCE
from .unit_economics import UnitEconomicsOutput, unit_economics_engine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValuationResult:
    """Complete valuation for one input profile."""
    arr: float  # $
    unit_economics: UnitEconomicsOutput
    efficiency: EfficiencyOutput
    arr_bridge: ArrBridgeOutput
    multiple: MultipleOutput
    dcf: DcfOutput
    cohort: CohortOutput
    scores: ScoringOutput
    flags: Tuple[DiligenceFlag, ...]
    scenarios: Tuple[ScenarioValue, ...]  # bear, base, bull, dcf
    warnings: Tuple[str, ...] = ()

    @property
    def base_multiple(self) -> float:
        return self.multiple.base.multiple

    @property
    def bear_multiple(self) -> float:
        return self.multiple.bear.multiple

    @property
    def bull_multiple(self) -> float:
        return self.multiple.bull.multiple

    @property
    def waterfall(self) -> Tuple[AdjustmentStep, ...]:
        return self.multiple.steps

    @property
    def dcf_rows(self) -> Tuple[DcfYearRow, ...]:
        return self.dcf.rows

    @property
    def cohorts(self) -> Tuple[Cohort, ...]:
        return self.cohort.cohorts

    def scenario(self, name: str) -> ScenarioValue:
        for scenario in self.scenarios:
            if scenario.name == name:
                return scenario
        raise KeyError(name)


def dcf_scenario(dcf: DcfOutput, arr: float, net_debt: float) -> ScenarioValue:
    """DCF enterprise value expressed as a scenario (implied EV/ARR)."""
    return ScenarioValue(
        name="dcf",
        multiple=dcf.enterprise_value / arr if arr != 0 else 0.0,
        enterprise_value=dcf.enterprise_value,
        equity_value=dcf.enterprise_value - net_debt,
    )


def domain_warnings(profile: InputProfile) -> List[str]:
    """Warnings for inputs that no single calculator owns."""
    warnings: List[str] = []
    if profile.arr_m <= 0:
        warnings.append(f"ARR of {profile.arr_m}M is not positive; EV and equity values are not meaningful")
    if profile.horizon_years < 1:
        warnings.append(
            f"horizon_years={profile.horizon_years}; terminal value discounted over a non-positive horizon"
        )
    return warnings


def compute_valuation(
    profile: InputProfile,
    nrr_tolerance: float = NRR_RECONCILIATION_TOLERANCE
) -> ValuationResult:
    """
    Value a company from its operating metrics.

    Args:
        profile: Input profile (never modified)
        nrr_tolerance: Allowed gap (NRR points) between bridge-derived and
            stated NRR before the bridge is marked unreconciled

    Returns:
        ValuationResult with every intermediate value
    """
    unit_economics = unit_economics_engine(profile)
    efficiency = efficiency_engine(profile)
    bridge = arr_bridge_engine(profile, nrr_tolerance)

    multiple = multiple_engine(profile, unit_economics, efficiency)
    dcf = dcf_engine(profile)
    cohort = cohort_engine(profile)
    scores = scoring_engine(profile, unit_economics, efficiency)
    flags = diligence_flags(profile, unit_economics, efficiency, bridge)

    warnings = domain_warnings(profile)
    warnings.extend(bridge.warnings)
    warnings.extend(dcf.warnings)
    warnings.extend(cohort.warnings)
    for warning in warnings:
        logger.debug("Valuation warning: %s", warning)

    arr = profile.arr
    scenarios = (
        multiple.bear,
        multiple.base,
        multiple.bull,
        dcf_scenario(dcf, arr, multiple.net_debt),
    )

    logger.debug(
        "Valued %s/%s ARR=%.1fM: base %.2fx, DCF EV %.0f, composite %.1f",
        profile.business_model.value, profile.stage.value, profile.arr_m,
        multiple.base.multiple, dcf.enterprise_value, scores.composite,
    )

    return ValuationResult(
        arr=arr,
        unit_economics=unit_economics,
        efficiency=efficiency,
        arr_bridge=bridge,
        multiple=multiple,
        dcf=dcf,
        cohort=cohort,
        scores=scores,
        flags=flags,
        scenarios=scenarios,
        warnings=tuple(warnings),
    )
