# =============================================================================
# ARR VALUATION ENGINE - DILIGENCE FLAGS
# =============================================================================
# Severity-ranked red flags a buyer would raise at the current inputs.
#
# SEVERITIES: HIGH > MEDIUM > LOW. A single CLEAR flag when nothing fires.
# =============================================================================

from dataclasses import dataclass
from typing import List, Tuple

from .arr_bridge import ArrBridgeOutput
from .efficiency import EfficiencyOutput
from .profile import InputProfile
from .tables import (
    GRR_COVENANT_FLOOR, LTV_CAC_VIABILITY_FLOOR, LOGO_CHURN_CEILING,
    BURN_MULTIPLE_WATCH, RULE40_FLOOR, GROSS_MARGIN_FLOOR,
    MAGIC_NUMBER_FLOOR, RECURRING_MIX_FLOOR,
)
from .unit_economics import UnitEconomicsOutput

HIGH = "HIGH"
MEDIUM = "MEDIUM"
LOW = "LOW"
CLEAR = "CLEAR"


@dataclass(frozen=True)
class DiligenceFlag:
    severity: str
    code: str
    message: str


def diligence_flags(
    profile: InputProfile,
    unit_economics: UnitEconomicsOutput,
    efficiency: EfficiencyOutput,
    bridge: ArrBridgeOutput
) -> Tuple[DiligenceFlag, ...]:
    """Evaluate every flag rule in severity order."""
    flags: List[DiligenceFlag] = []

    if profile.nrr < 100:
        flags.append(DiligenceFlag(
            HIGH, "nrr_below_100",
            f"NRR of {profile.nrr:.1f}% means the installed base is shrinking before new sales",
        ))
    if profile.grr < GRR_COVENANT_FLOOR:
        flags.append(DiligenceFlag(
            HIGH, "grr_below_covenant",
            f"GRR of {profile.grr:.1f}% is below the {GRR_COVENANT_FLOOR:.0f}% lender covenant floor",
        ))
    if unit_economics.ltv_cac < LTV_CAC_VIABILITY_FLOOR:
        flags.append(DiligenceFlag(
            HIGH, "ltv_cac_below_floor",
            f"LTV:CAC of {unit_economics.ltv_cac:.1f}x is below the {LTV_CAC_VIABILITY_FLOOR:.0f}x viability floor",
        ))
    if profile.logo_churn > LOGO_CHURN_CEILING:
        flags.append(DiligenceFlag(
            HIGH, "logo_churn_high",
            f"Annual logo churn of {profile.logo_churn:.1f}% implies a "
            f"{unit_economics.lifetime_years:.1f}yr average customer lifetime",
        ))
    if efficiency.burn_multiple > BURN_MULTIPLE_WATCH:
        flags.append(DiligenceFlag(
            MEDIUM, "burn_multiple_high",
            f"Burn Multiple of {efficiency.burn_multiple:.1f}x: "
            f"${efficiency.burn_multiple:.1f} burned per $1 of net new ARR",
        ))
    if efficiency.rule_of_40 < RULE40_FLOOR:
        flags.append(DiligenceFlag(
            MEDIUM, "rule_of_40_low",
            f"Rule of 40 score of {efficiency.rule_of_40:.0f} is below {RULE40_FLOOR:.0f}",
        ))
    if profile.gross_margin < GROSS_MARGIN_FLOOR:
        flags.append(DiligenceFlag(
            MEDIUM, "gross_margin_low",
            f"Gross margin of {profile.gross_margin:.1f}% suggests services-heavy delivery",
        ))
    if not bridge.nrr_reconciled:
        flags.append(DiligenceFlag(
            MEDIUM, "nrr_bridge_gap",
            f"ARR bridge implies NRR of {bridge.nrr_derived:.1f}% but stated NRR is "
            f"{bridge.nrr_stated:.1f}% (gap {abs(bridge.nrr_gap):.1f} pts)",
        ))
    if efficiency.magic_number_defined and efficiency.magic_number < MAGIC_NUMBER_FLOOR:
        flags.append(DiligenceFlag(
            MEDIUM, "magic_number_low",
            f"Magic Number of {efficiency.magic_number:.2f}: "
            f"${efficiency.magic_number * 100:.0f} of GM-adjusted ARR per $100 of S&M",
        ))
    if profile.revenue_mix < RECURRING_MIX_FLOOR:
        flags.append(DiligenceFlag(
            LOW, "recurring_mix_low",
            f"Recurring revenue mix of {profile.revenue_mix:.1f}% leaves "
            f"{100 - profile.revenue_mix:.1f}% non-recurring",
        ))

    if not flags:
        flags.append(DiligenceFlag(CLEAR, "clear", "No material diligence flags at current inputs"))

    return tuple(flags)
