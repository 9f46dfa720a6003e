# =============================================================================
# ARR VALUATION ENGINE - UNIT ECONOMICS
# =============================================================================
# Customer lifetime value and acquisition payback.
#
# FORMULAS:
# Lifetime (yrs) = 100 / logo churn  (50 when churn is 0)
# LTV = ARPA * GM * Lifetime
# LTV:CAC = LTV / CAC  (999 when CAC is 0)
# CAC payback (months) = CAC / (monthly gross profit per customer)
# =============================================================================

from dataclasses import dataclass

from .profile import InputProfile
from .tables import LIFETIME_CEILING_YEARS, RATIO_SENTINEL


@dataclass(frozen=True)
class UnitEconomicsOutput:
    """Output structure for unit economics calculator."""
    lifetime_years: float
    gp_per_customer_year: float  # $ gross profit per customer per year
    ltv: float
    ltv_cac: float
    cac_payback_months: float


def calculate_lifetime_years(logo_churn: float) -> float:
    """Average customer lifetime in years."""
    if logo_churn > 0:
        return 100 / logo_churn
    return LIFETIME_CEILING_YEARS


def calculate_ltv_cac(ltv: float, cac: float) -> float:
    """LTV:CAC ratio; sentinel when CAC is not positive."""
    if cac > 0:
        return ltv / cac
    return RATIO_SENTINEL


def calculate_cac_payback(cac: float, gp_per_customer_year: float) -> float:
    """Months of gross profit needed to recover CAC."""
    if cac > 0 and gp_per_customer_year > 0:
        return cac / (gp_per_customer_year / 12)
    return RATIO_SENTINEL


def unit_economics_engine(profile: InputProfile) -> UnitEconomicsOutput:
    lifetime = calculate_lifetime_years(profile.logo_churn)
    gp_per_customer = profile.arpa * (profile.gross_margin / 100)
    ltv = gp_per_customer * lifetime

    return UnitEconomicsOutput(
        lifetime_years=lifetime,
        gp_per_customer_year=gp_per_customer,
        ltv=ltv,
        ltv_cac=calculate_ltv_cac(ltv, profile.cac),
        cac_payback_months=calculate_cac_payback(profile.cac, gp_per_customer),
    )
