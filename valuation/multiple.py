# =============================================================================
# ARR VALUATION ENGINE - MULTIPLE BUILD-UP
# =============================================================================
# EV/ARR multiple built as an ordered waterfall from a private M&A anchor.
#
# WATERFALL (order is fixed, every step is recorded):
# 0. Anchor by business model x stage
# 1. Growth vs stage median          (additive)
# 2. Rule of 40                      (additive)
# 3. NRR band                        (additive)
# 4. GRR                             (additive)
# 5. Gross margin                    (additive)
# 6. LTV:CAC                         (additive)
# 7. Recurring revenue mix           (additive)
# 8. Size premium                    (multiplicative)
# 9. Technology / market modifiers   (multiplicative, one combined step)
# Final multiple clamped to [0.8, 50].
#
# SCENARIOS:
# Bear = Base * 0.58, Bull = Base * 1.50
# EV = ARR * Multiple, Equity = EV - (Debt - Cash)
# =============================================================================

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .efficiency import EfficiencyOutput
from .profile import InputProfile
from .tables import (
    BASE_ANCHORS, STAGE_GROWTH_MEDIAN, GROWTH_MULT_PER_100PTS,
    RULE40_MULT_PER_10PTS, RULE40_TARGET,
    NRR_BANDS, NRR_ANCHOR_BAND, PRIVATE_MARKET_DISCOUNT, NrrBand,
    GRR_ADJUSTMENT, GROSS_MARGIN_ADJUSTMENT, LTV_CAC_ADJUSTMENT,
    REVENUE_MIX_ADJUSTMENT, SIZE_MULTIPLIER, MODIFIER_MULTIPLIERS,
    MULTIPLE_FLOOR, MULTIPLE_CEILING, BEAR_FACTOR, BULL_FACTOR,
)
from .unit_economics import UnitEconomicsOutput


@dataclass(frozen=True)
class AdjustmentStep:
    """One line of the multiple waterfall."""
    label: str
    delta: float       # multiple points added by this step
    cumulative: float  # running multiple after this step


@dataclass(frozen=True)
class ScenarioValue:
    """Valuation under one scenario."""
    name: str
    multiple: float            # EV / ARR
    enterprise_value: float    # $
    equity_value: float        # $


@dataclass(frozen=True)
class MultipleOutput:
    """Output structure for multiple build-up calculator."""
    anchor: float
    growth_reference: float
    steps: Tuple[AdjustmentStep, ...]
    size_multiplier: float
    modifier_multiplier: float
    active_modifiers: Tuple[str, ...]
    pre_clamp_multiple: float
    clamped: bool

    bear: ScenarioValue
    base: ScenarioValue
    bull: ScenarioValue
    net_debt: float  # $, negative = net cash

    # Cross-check multiples (None when denominator <= 0)
    ebitda: float
    gross_profit: float
    ev_ebitda: Optional[float]
    ev_gross_profit: Optional[float]
    ev_net_new_arr: Optional[float]

    @property
    def base_multiple(self) -> float:
        return self.base.multiple


def find_nrr_band(nrr: float) -> NrrBand:
    """Band containing nrr, using half-open [lo, hi) intervals."""
    if nrr < NRR_BANDS[0].lo:
        return NRR_BANDS[0]
    for band in NRR_BANDS:
        if band.lo <= nrr < band.hi:
            return band
    return NRR_BANDS[-1]


def calculate_nrr_adjustment(nrr: float) -> float:
    """Public NRR band premium scaled to private-market multiples."""
    band = find_nrr_band(nrr)
    anchor_band = NRR_BANDS[NRR_ANCHOR_BAND]
    return (band.public_multiple - anchor_band.public_multiple) * PRIVATE_MARKET_DISCOUNT


def calculate_growth_adjustment(arr_growth: float, growth_reference: float) -> float:
    return ((arr_growth - growth_reference) / 100) * GROWTH_MULT_PER_100PTS


def calculate_rule40_adjustment(rule_of_40: float) -> float:
    return ((rule_of_40 - RULE40_TARGET) / 10) * RULE40_MULT_PER_10PTS


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def safe_ratio(numerator: float, denominator: float) -> Optional[float]:
    """numerator / denominator, or None when denominator <= 0."""
    if denominator > 0:
        return numerator / denominator
    return None


def build_scenario(name: str, multiple: float, arr: float, net_debt: float) -> ScenarioValue:
    enterprise_value = arr * multiple
    return ScenarioValue(
        name=name,
        multiple=multiple,
        enterprise_value=enterprise_value,
        equity_value=enterprise_value - net_debt,
    )


def multiple_engine(
    profile: InputProfile,
    unit_economics: UnitEconomicsOutput,
    efficiency: EfficiencyOutput
) -> MultipleOutput:
    """
    Build the base EV/ARR multiple and derive bear/base/bull values.

    Args:
        profile: Input profile
        unit_economics: Unit economics output (LTV:CAC)
        efficiency: Efficiency output (Rule of 40, net new ARR)

    Returns:
        MultipleOutput with the audit trail and scenario values
    """
    stage = profile.stage.value
    model = profile.business_model.value
    growth_reference = STAGE_GROWTH_MEDIAN[stage]
    anchor = BASE_ANCHORS[model][stage]

    steps: List[AdjustmentStep] = []
    total = anchor
    steps.append(AdjustmentStep(f"{stage} {model} base (private M&A anchor)", anchor, total))

    # 1-7. Additive adjustments
    additive = [
        (
            f"Growth {profile.arr_growth:.1f}% vs {growth_reference:.0f}% stage median",
            calculate_growth_adjustment(profile.arr_growth, growth_reference),
        ),
        (
            f"Rule of 40: {efficiency.rule_of_40:.0f}",
            calculate_rule40_adjustment(efficiency.rule_of_40),
        ),
        (
            f"NRR {profile.nrr:.1f}% (band {find_nrr_band(profile.nrr).label})",
            calculate_nrr_adjustment(profile.nrr),
        ),
        (f"GRR {profile.grr:.1f}%", GRR_ADJUSTMENT.lookup(profile.grr)),
        (f"Gross margin {profile.gross_margin:.1f}%", GROSS_MARGIN_ADJUSTMENT.lookup(profile.gross_margin)),
        (f"LTV:CAC {unit_economics.ltv_cac:.1f}x", LTV_CAC_ADJUSTMENT.lookup(unit_economics.ltv_cac)),
        (f"Recurring mix {profile.revenue_mix:.1f}%", REVENUE_MIX_ADJUSTMENT.lookup(profile.revenue_mix)),
    ]
    for label, delta in additive:
        total += delta
        steps.append(AdjustmentStep(label, delta, total))

    # 8. Size premium
    size_multiplier = SIZE_MULTIPLIER.lookup(profile.arr_m)
    pre_size = total
    total *= size_multiplier
    steps.append(AdjustmentStep(
        f"Size premium ${profile.arr_m:g}M ARR (x{size_multiplier:.2f})",
        total - pre_size,
        total,
    ))

    # 9. Technology / market modifiers
    pre_modifiers = total
    active: List[str] = []
    modifier_multiplier = 1.0
    for name, factor in MODIFIER_MULTIPLIERS:
        if getattr(profile, name):
            total *= factor
            modifier_multiplier *= factor
            active.append(name)
    if active:
        steps.append(AdjustmentStep(
            "Technology/market modifiers: " + ", ".join(active),
            total - pre_modifiers,
            total,
        ))

    pre_clamp = total
    base_multiple = clamp(total, MULTIPLE_FLOOR, MULTIPLE_CEILING)

    arr = profile.arr
    net_debt = profile.debt_m * 1e6 - profile.cash_m * 1e6
    ebitda = arr * (profile.ebitda_margin / 100)
    gross_profit = arr * (profile.gross_margin / 100)
    base = build_scenario("base", base_multiple, arr, net_debt)

    return MultipleOutput(
        anchor=anchor,
        growth_reference=growth_reference,
        steps=tuple(steps),
        size_multiplier=size_multiplier,
        modifier_multiplier=modifier_multiplier,
        active_modifiers=tuple(active),
        pre_clamp_multiple=pre_clamp,
        clamped=base_multiple != pre_clamp,
        bear=build_scenario("bear", base_multiple * BEAR_FACTOR, arr, net_debt),
        base=base,
        bull=build_scenario("bull", base_multiple * BULL_FACTOR, arr, net_debt),
        net_debt=net_debt,
        ebitda=ebitda,
        gross_profit=gross_profit,
        ev_ebitda=safe_ratio(base.enterprise_value, ebitda),
        ev_gross_profit=safe_ratio(base.enterprise_value, gross_profit),
        ev_net_new_arr=safe_ratio(base.enterprise_value, efficiency.net_new_arr),
    )
