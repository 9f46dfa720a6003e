# =============================================================================
# ARR VALUATION ENGINE - LOOKUP TABLES
# =============================================================================
# Fixed reference data used by the calculators. Everything here is immutable:
# tuples for ordered tables, MappingProxyType for keyed tables.
#
# LADDERS:
# A ladder is an ordered tuple of (bound, value) steps plus a default.
# "at_least" ladders match the first step with x >= bound,
# "at_most" ladders match the first step with x <= bound.
# =============================================================================

from dataclasses import dataclass
from types import MappingProxyType
from typing import Tuple


@dataclass(frozen=True)
class Ladder:
    """Piecewise-constant lookup over descending (or ascending) bounds."""
    steps: Tuple[Tuple[float, float], ...]
    default: float
    at_least: bool = True  # False: match x <= bound

    def lookup(self, x: float) -> float:
        for bound, value in self.steps:
            if (x >= bound) if self.at_least else (x <= bound):
                return value
        return self.default


@dataclass(frozen=True)
class NrrBand:
    """NRR band with its public-market EV/ARR median."""
    lo: float
    hi: float
    public_multiple: float
    label: str


# -----------------------------------------------------------------------------
# Multiple build-up
# -----------------------------------------------------------------------------

# Private M&A anchored EV/ARR medians by business model and stage
BASE_ANCHORS = MappingProxyType({
    "B2B_SMB":  MappingProxyType({"SEED": 2.8, "EARLY": 3.8, "GROWTH": 5.0, "SCALE": 6.5, "MATURE": 3.8}),
    "B2B_MID":  MappingProxyType({"SEED": 3.2, "EARLY": 4.3, "GROWTH": 6.0, "SCALE": 8.0, "MATURE": 4.8}),
    "B2B_ENT":  MappingProxyType({"SEED": 3.8, "EARLY": 5.2, "GROWTH": 7.0, "SCALE": 9.5, "MATURE": 5.8}),
    "B2C":      MappingProxyType({"SEED": 2.2, "EARLY": 3.2, "GROWTH": 4.5, "SCALE": 6.0, "MATURE": 3.0}),
    "VERT":     MappingProxyType({"SEED": 3.3, "EARLY": 4.8, "GROWTH": 6.5, "SCALE": 9.0, "MATURE": 5.3}),
    "TECH_SVC": MappingProxyType({"SEED": 1.4, "EARLY": 2.3, "GROWTH": 3.3, "SCALE": 4.8, "MATURE": 2.3}),
})

# Median ARR growth (%) by stage
STAGE_GROWTH_MEDIAN = MappingProxyType({
    "SEED": 150.0,
    "EARLY": 90.0,
    "GROWTH": 55.0,
    "SCALE": 35.0,
    "MATURE": 18.0,
})

GROWTH_MULT_PER_100PTS = 8.0   # +0.8x per 10 growth points
RULE40_MULT_PER_10PTS = 2.2
RULE40_TARGET = 40.0

NRR_BANDS: Tuple[NrrBand, ...] = (
    NrrBand(0.0, 90.0, 1.2, "<90%"),
    NrrBand(90.0, 100.0, 3.5, "90-100%"),
    NrrBand(100.0, 110.0, 6.0, "100-110%"),
    NrrBand(110.0, 120.0, 9.0, "110-120%"),
    NrrBand(120.0, float("inf"), 11.7, ">120%"),
)
NRR_ANCHOR_BAND = 2            # 100-110% carries zero adjustment
PRIVATE_MARKET_DISCOUNT = 0.60  # private ~ 60% of public multiple

GRR_ADJUSTMENT = Ladder(((95.0, 0.5), (88.0, 0.0), (85.0, -0.5)), -1.2)
GROSS_MARGIN_ADJUSTMENT = Ladder(((80.0, 0.8), (70.0, 0.0), (65.0, -0.3), (55.0, -0.9)), -2.2)
LTV_CAC_ADJUSTMENT = Ladder(((6.0, 0.6), (3.5, 0.0), (2.5, -0.3), (1.5, -0.8)), -1.8)
REVENUE_MIX_ADJUSTMENT = Ladder(((92.0, 0.3), (72.0, 0.0), (60.0, -0.6)), -1.2)

# Size multiplier by ARR in $M
SIZE_MULTIPLIER = Ladder(((100.0, 1.32), (50.0, 1.22), (25.0, 1.12), (10.0, 1.05), (3.0, 1.0)), 0.72)

# Applied in this order
MODIFIER_MULTIPLIERS: Tuple[Tuple[str, float], ...] = (
    ("ai_native", 1.20),
    ("vertical_focus", 1.08),
    ("network_effects", 1.10),
    ("usage_based_pricing", 1.04),
    ("public_benchmark", 1.36),
)

MULTIPLE_FLOOR = 0.8
MULTIPLE_CEILING = 50.0

BEAR_FACTOR = 0.58  # no-process, single buyer
BULL_FACTOR = 1.50  # competitive strategic process

# -----------------------------------------------------------------------------
# Unit economics / efficiency
# -----------------------------------------------------------------------------

LIFETIME_CEILING_YEARS = 50.0
RATIO_SENTINEL = 999.0

# Gap (NRR points) between bridge-derived and stated NRR before flagging
NRR_RECONCILIATION_TOLERANCE = 3.0

# -----------------------------------------------------------------------------
# DCF
# -----------------------------------------------------------------------------

MIN_PROJECTION_YEARS = 5
TAX_RATE = 0.25
CAPEX_PCT = 0.02
DA_PCT = 0.03
SBC_PCT = 0.08
WC_PCT = 0.02
EBITDA_MARGIN_CAP = 35.0
SM_EFFICIENCY_DECAY = 0.96
GA_LEVERAGE_DECAY = 0.97
GROWTH_ENDURANCE = 0.65
GROWTH_FLOOR = 3.0
TERMINAL_EBITDA_MULTIPLE = 18.0

# -----------------------------------------------------------------------------
# Cohorts
# -----------------------------------------------------------------------------

COHORT_COUNT = 5
COHORT_YEARS = 7  # curve covers years 0..7

# -----------------------------------------------------------------------------
# Quality scoring
# -----------------------------------------------------------------------------

NRR_SCORE = Ladder(((120.0, 100.0), (110.0, 82.0), (100.0, 60.0), (90.0, 35.0)), 12.0)
GRR_SCORE = Ladder(((95.0, 100.0), (90.0, 78.0), (85.0, 55.0), (78.0, 30.0)), 10.0)
LOGO_CHURN_SCORE = Ladder(((3.0, 100.0), (7.0, 78.0), (12.0, 55.0), (18.0, 28.0)), 10.0, at_least=False)
# Bounds are fractions of the stage growth median
GROWTH_VS_MEDIAN_SCORE = Ladder(((1.4, 100.0), (1.0, 78.0), (0.65, 52.0), (0.35, 28.0)), 10.0)
MAGIC_NUMBER_SCORE = Ladder(((1.5, 100.0), (1.0, 80.0), (0.7, 60.0), (0.4, 35.0)), 10.0)
BURN_MULTIPLE_SCORE = Ladder(((0.5, 95.0), (1.0, 80.0), (1.5, 62.0), (2.0, 40.0)), 15.0, at_least=False)
NOT_BURNING_SCORE = 100.0
RULE40_SCORE = Ladder(((60.0, 100.0), (40.0, 80.0), (20.0, 55.0), (0.0, 32.0)), 10.0)
GROSS_MARGIN_SCORE = Ladder(((80.0, 100.0), (72.0, 80.0), (62.0, 55.0)), 18.0)
LTV_CAC_SCORE = Ladder(((6.0, 100.0), (3.6, 78.0), (2.5, 55.0), (1.5, 28.0)), 10.0)
CAC_PAYBACK_SCORE = Ladder(((12.0, 100.0), (18.0, 76.0), (24.0, 52.0), (36.0, 28.0)), 10.0, at_least=False)

RETENTION_WEIGHTS = (0.40, 0.35, 0.25)          # NRR, GRR, logo churn
GROWTH_WEIGHTS = (0.40, 0.30, 0.30)             # growth, magic number, burn
EFFICIENCY_WEIGHTS = (0.35, 0.30, 0.20, 0.15)   # rule40, GM, LTV:CAC, payback
COMPOSITE_WEIGHTS = (0.35, 0.35, 0.30)          # retention, growth, efficiency

# -----------------------------------------------------------------------------
# Diligence flags
# -----------------------------------------------------------------------------

GRR_COVENANT_FLOOR = 85.0
LTV_CAC_VIABILITY_FLOOR = 2.0
LOGO_CHURN_CEILING = 15.0
BURN_MULTIPLE_WATCH = 2.5
RULE40_FLOOR = 10.0
GROSS_MARGIN_FLOOR = 60.0
MAGIC_NUMBER_FLOOR = 0.5
RECURRING_MIX_FLOOR = 70.0
