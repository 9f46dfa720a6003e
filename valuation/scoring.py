# =============================================================================
# ARR VALUATION ENGINE - QUALITY SCORING
# =============================================================================
# Three 0-100 sub-scores from benchmark ladders, plus a weighted composite.
#
# Retention  = 40% NRR + 35% GRR + 25% logo churn
# Growth     = 40% growth vs stage median + 30% Magic Number + 30% burn
# Efficiency = 35% Rule of 40 + 30% GM + 20% LTV:CAC + 15% CAC payback
# Composite  = 35% Retention + 35% Growth + 30% Efficiency
# =============================================================================

from dataclasses import dataclass
from typing import Sequence

from .efficiency import EfficiencyOutput
from .profile import InputProfile
from .tables import (
    Ladder, STAGE_GROWTH_MEDIAN,
    NRR_SCORE, GRR_SCORE, LOGO_CHURN_SCORE, GROWTH_VS_MEDIAN_SCORE,
    MAGIC_NUMBER_SCORE, BURN_MULTIPLE_SCORE, NOT_BURNING_SCORE,
    RULE40_SCORE, GROSS_MARGIN_SCORE, LTV_CAC_SCORE, CAC_PAYBACK_SCORE,
    RETENTION_WEIGHTS, GROWTH_WEIGHTS, EFFICIENCY_WEIGHTS, COMPOSITE_WEIGHTS,
)
from .unit_economics import UnitEconomicsOutput


@dataclass(frozen=True)
class ScoringOutput:
    """Output structure for quality scoring calculator."""
    retention: float
    growth: float
    efficiency: float
    composite: float


def weighted_score(points: Sequence[float], weights: Sequence[float]) -> float:
    """Weighted sum of ladder points, clamped to [0, 100]."""
    total = sum(p * w for p, w in zip(points, weights))
    return max(0.0, min(100.0, total))


def growth_ladder(growth_reference: float) -> Ladder:
    """Growth ladder with bounds scaled to the stage median."""
    return Ladder(
        tuple((growth_reference * factor, points) for factor, points in GROWTH_VS_MEDIAN_SCORE.steps),
        GROWTH_VS_MEDIAN_SCORE.default,
    )


def score_burn_multiple(efficiency: EfficiencyOutput) -> float:
    if not efficiency.burn_multiple_defined:
        return NOT_BURNING_SCORE
    return BURN_MULTIPLE_SCORE.lookup(efficiency.burn_multiple)


def scoring_engine(
    profile: InputProfile,
    unit_economics: UnitEconomicsOutput,
    efficiency: EfficiencyOutput
) -> ScoringOutput:
    retention = weighted_score(
        (
            NRR_SCORE.lookup(profile.nrr),
            GRR_SCORE.lookup(profile.grr),
            LOGO_CHURN_SCORE.lookup(profile.logo_churn),
        ),
        RETENTION_WEIGHTS,
    )

    growth_reference = STAGE_GROWTH_MEDIAN[profile.stage.value]
    growth = weighted_score(
        (
            growth_ladder(growth_reference).lookup(profile.arr_growth),
            MAGIC_NUMBER_SCORE.lookup(efficiency.magic_number),
            score_burn_multiple(efficiency),
        ),
        GROWTH_WEIGHTS,
    )

    efficiency_score = weighted_score(
        (
            RULE40_SCORE.lookup(efficiency.rule_of_40),
            GROSS_MARGIN_SCORE.lookup(profile.gross_margin),
            LTV_CAC_SCORE.lookup(unit_economics.ltv_cac),
            CAC_PAYBACK_SCORE.lookup(unit_economics.cac_payback_months),
        ),
        EFFICIENCY_WEIGHTS,
    )

    w_retention, w_growth, w_efficiency = COMPOSITE_WEIGHTS
    composite = retention * w_retention + growth * w_growth + efficiency_score * w_efficiency

    return ScoringOutput(
        retention=retention,
        growth=growth,
        efficiency=efficiency_score,
        composite=composite,
    )
