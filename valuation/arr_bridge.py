# =============================================================================
# ARR VALUATION ENGINE - ARR BRIDGE
# =============================================================================
# Opening -> closing ARR waterfall built from first principles.
#
# FLOW:
# Closing = Opening + New logo + Expansion - Contraction - Churn
# Churn = Opening * (100 - GRR)
# Derived NRR = (Opening - Churn - Contraction + Expansion) / Opening
#
# The derived NRR is a consistency check against the stated NRR; a gap
# beyond the tolerance marks the bridge as unreconciled.
# =============================================================================

from dataclasses import dataclass
from typing import Optional, Tuple

from .profile import InputProfile
from .tables import NRR_RECONCILIATION_TOLERANCE


@dataclass(frozen=True)
class ArrBridgeOutput:
    """Output structure for ARR bridge calculator."""
    opening_arr: float
    new_logo_arr: float
    expansion_arr: float
    contraction_arr: float
    churn_arr: float
    closing_arr: float

    nrr_derived: Optional[float]  # None when opening ARR is 0
    nrr_stated: float
    nrr_gap: Optional[float]      # derived - stated
    nrr_reconciled: bool
    tolerance: float

    warnings: Tuple[str, ...] = ()


def calculate_derived_nrr(
    opening_arr: float,
    churn_arr: float,
    contraction_arr: float,
    expansion_arr: float
) -> Optional[float]:
    """NRR implied by the bridge components, in percent."""
    if opening_arr == 0:
        return None
    return ((opening_arr - churn_arr - contraction_arr + expansion_arr) / opening_arr) * 100


def arr_bridge_engine(
    profile: InputProfile,
    tolerance: float = NRR_RECONCILIATION_TOLERANCE
) -> ArrBridgeOutput:
    arr = profile.arr
    new_logo = arr * (profile.new_logo_growth_pct / 100)
    expansion = arr * (profile.expansion_pct / 100)
    contraction = arr * (profile.contraction_pct / 100)
    churn = arr * (100 - profile.grr) / 100
    closing = arr + new_logo + expansion - contraction - churn

    nrr_derived = calculate_derived_nrr(arr, churn, contraction, expansion)
    warnings = []
    if nrr_derived is None:
        nrr_gap = None
        reconciled = True
        warnings.append("Opening ARR is 0; derived NRR is undefined")
    else:
        nrr_gap = nrr_derived - profile.nrr
        reconciled = abs(nrr_gap) <= tolerance

    return ArrBridgeOutput(
        opening_arr=arr,
        new_logo_arr=new_logo,
        expansion_arr=expansion,
        contraction_arr=contraction,
        churn_arr=churn,
        closing_arr=closing,
        nrr_derived=nrr_derived,
        nrr_stated=profile.nrr,
        nrr_gap=nrr_gap,
        nrr_reconciled=reconciled,
        tolerance=tolerance,
        warnings=tuple(warnings),
    )
