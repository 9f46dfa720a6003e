# =============================================================================
# ARR VALUATION ENGINE - COHORT RETENTION
# =============================================================================
# Revenue curves for annual customer cohorts, each starting at $1 of ARR.
#
# FORMULAS:
# Logo survival(y) = (1 - churn)^y
# Expansion per retained customer = NRR / (1 - churn)
# Net revenue(y) = survival(y) * expansion^y
#
# A curve above 1.0 means the base compounds on its own; below 1.0 it
# decays and needs continuous new-logo replacement.
# =============================================================================

from dataclasses import dataclass
from typing import List, Tuple

from .profile import InputProfile
from .tables import COHORT_COUNT, COHORT_YEARS


@dataclass(frozen=True)
class Cohort:
    """Net revenue curve for one vintage (years 0..7)."""
    cohort_id: int
    label: str
    nrr: float
    curve: Tuple[float, ...]


@dataclass(frozen=True)
class CohortOutput:
    """Output structure for cohort calculator."""
    cohorts: Tuple[Cohort, ...]
    logo_retention: float       # annual, fraction
    expansion_per_customer: float  # annual, fraction; 0 when no logos survive

    warnings: Tuple[str, ...] = ()


def calculate_cohort_curve(
    nrr: float,
    logo_churn: float,
    years: int = COHORT_YEARS
) -> Tuple[float, ...]:
    """
    Net revenue retained by a cohort for years 0..years.

    Year 0 is exactly 1.0. With 100% logo churn nothing survives past year 0.
    """
    logo_retention = 1 - logo_churn / 100
    curve: List[float] = [1.0]
    if logo_retention == 0:
        curve.extend([0.0] * years)
        return tuple(curve)

    expansion = (nrr / 100) / logo_retention
    for y in range(1, years + 1):
        try:
            curve.append(logo_retention ** y * expansion ** y)
        except OverflowError:
            curve.append(float("inf"))
    return tuple(curve)


def cohort_nrr_for(profile: InputProfile, cohort_id: int) -> float:
    """NRR for a vintage: per-cohort override when given, else stated NRR."""
    if cohort_id < len(profile.cohort_nrr):
        return profile.cohort_nrr[cohort_id]
    return profile.nrr


def cohort_engine(profile: InputProfile) -> CohortOutput:
    warnings: List[str] = []
    if profile.logo_churn < 0 or profile.logo_churn > 100:
        warnings.append(f"Logo churn {profile.logo_churn}% outside [0, 100]; cohort curves extrapolated")

    cohorts = []
    for cohort_id in range(COHORT_COUNT):
        nrr = cohort_nrr_for(profile, cohort_id)
        cohorts.append(Cohort(
            cohort_id=cohort_id,
            label=f"Cohort {cohort_id + 1}",
            nrr=nrr,
            curve=calculate_cohort_curve(nrr, profile.logo_churn),
        ))

    logo_retention = 1 - profile.logo_churn / 100
    expansion = (profile.nrr / 100) / logo_retention if logo_retention != 0 else 0.0

    return CohortOutput(
        cohorts=tuple(cohorts),
        logo_retention=logo_retention,
        expansion_per_customer=expansion,
        warnings=tuple(warnings),
    )
