# =============================================================================
# ARR VALUATION ENGINE - VALUATION PACKAGE
# =============================================================================
# This package contains all calculators for the valuation engine.
#
# Modules:
# - profile: Input profile, YAML loading and validation
# - tables: Fixed lookup tables and constants
# - unit_economics: LTV, LTV:CAC, CAC payback
# - efficiency: Rule of 40, Magic Number, burn multiple
# - arr_bridge: Opening to closing ARR, NRR reconciliation
# - multiple: EV/ARR multiple build-up and scenarios
# - dcf: Multi-year DCF projection
# - cohort: Cohort retention curves
# - scoring: Quality scores
# - flags: Diligence red flags
# - engine: Orchestrator (compute_valuation)
# - sensitivity: Sensitivity grids and reverse valuation
# - validation_report: Self-consistency checks on results
# =============================================================================

__version__ = "0.1.0"
