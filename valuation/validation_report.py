# =============================================================================
# ARR VALUATION ENGINE - VALIDATION REPORT GENERATOR
# =============================================================================
# Self-consistency checks on a ValuationResult, grouped by calculator.
# =============================================================================

from dataclasses import dataclass, field
from typing import Dict, List
from datetime import datetime

from .engine import ValuationResult
from .tables import MULTIPLE_FLOOR, MULTIPLE_CEILING, MIN_PROJECTION_YEARS, GROWTH_FLOOR


@dataclass
class CheckResult:
    """Result of a single check."""
    name: str
    passed: bool
    message: str = ""


@dataclass
class ValidationReport:
    """Complete validation report."""
    timestamp: str = ""
    profile_id: str = ""

    checks: Dict[str, List[CheckResult]] = field(default_factory=dict)

    # Summary
    total_passed: int = 0
    total_failed: int = 0
    overall_passed: bool = False

    warnings: List[str] = field(default_factory=list)


def validate_multiple(result: ValuationResult, tolerance: float = 1e-9) -> List[CheckResult]:
    """Waterfall reconciliation, clamp bounds and scenario ordering."""
    results = []
    steps = result.multiple.steps

    breaks = []
    for previous, step in zip(steps, steps[1:]):
        expected = previous.cumulative + step.delta
        if abs(expected - step.cumulative) > tolerance * max(1.0, abs(expected)):
            breaks.append(step.label)
    reconciles = not breaks and abs(steps[-1].cumulative - result.multiple.pre_clamp_multiple) <= tolerance
    results.append(CheckResult(
        "waterfall_reconciles", reconciles,
        "" if reconciles else f"Running total breaks at: {breaks}"
    ))

    base = result.base_multiple
    in_bounds = MULTIPLE_FLOOR <= base <= MULTIPLE_CEILING
    results.append(CheckResult(
        "multiple_within_bounds", in_bounds,
        "" if in_bounds else f"Base multiple {base} outside [{MULTIPLE_FLOOR}, {MULTIPLE_CEILING}]"
    ))

    ordered = result.bear_multiple < base < result.bull_multiple
    results.append(CheckResult(
        "scenario_ordering", ordered,
        "" if ordered else (
            f"Bear ({result.bear_multiple:.2f}) < Base ({base:.2f}) < "
            f"Bull ({result.bull_multiple:.2f}) is not satisfied"
        )
    ))

    return results


def validate_dcf(result: ValuationResult) -> List[CheckResult]:
    """Schedule shape, growth floor and terminal value."""
    results = []
    rows = result.dcf.rows

    years = [row.year for row in rows]
    contiguous = years == list(range(1, len(rows) + 1)) and len(rows) >= MIN_PROJECTION_YEARS
    results.append(CheckResult(
        "contiguous_years", contiguous,
        "" if contiguous else f"Projection years {years}"
    ))

    low_growth = [row.year for row in rows[1:] if row.growth < GROWTH_FLOOR]
    results.append(CheckResult(
        "growth_floor", not low_growth,
        "" if not low_growth else f"Growth below {GROWTH_FLOOR}% in years {low_growth}"
    ))

    results.append(CheckResult(
        "terminal_value_defined", result.dcf.terminal_value_defined,
        "" if result.dcf.terminal_value_defined else "WACC <= terminal growth"
    ))

    return results


def validate_cohorts(result: ValuationResult) -> List[CheckResult]:
    bad = [c.label for c in result.cohorts if c.curve[0] != 1.0]
    return [CheckResult(
        "year_zero_unit", not bad,
        "" if not bad else f"Year-0 value differs from 1.0 for {bad}"
    )]


def validate_arr_bridge(result: ValuationResult) -> List[CheckResult]:
    bridge = result.arr_bridge
    message = ""
    if not bridge.nrr_reconciled:
        message = (
            f"Derived NRR {bridge.nrr_derived:.1f}% vs stated {bridge.nrr_stated:.1f}% "
            f"(tolerance {bridge.tolerance:.1f} pts)"
        )
    return [CheckResult("nrr_reconciled", bridge.nrr_reconciled, message)]


def generate_validation_report(
    profile_id: str,
    result: ValuationResult
) -> ValidationReport:
    """
    Generate validation report for one valuation.

    Args:
        profile_id: Profile identifier
        result: Engine output

    Returns:
        ValidationReport with all check results
    """
    report = ValidationReport(
        timestamp=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        profile_id=profile_id
    )

    report.checks["Multiple Build-Up"] = validate_multiple(result)
    report.checks["DCF Projection"] = validate_dcf(result)
    report.checks["Cohort Retention"] = validate_cohorts(result)
    report.checks["ARR Bridge"] = validate_arr_bridge(result)
    report.warnings.extend(result.warnings)

    all_checks = []
    for checks in report.checks.values():
        all_checks.extend(checks)

    report.total_passed = sum(1 for c in all_checks if c.passed)
    report.total_failed = sum(1 for c in all_checks if not c.passed)
    report.overall_passed = report.total_failed == 0

    return report


def format_report(report: ValidationReport) -> str:
    """Format validation report as text."""
    lines = [
        "=" * 60,
        "VALIDATION REPORT",
        "=" * 60,
        f"Date: {report.timestamp}",
        f"Profile: {report.profile_id}",
        "",
        "CHECKS",
        "-" * 40
    ]

    for calculator, checks in report.checks.items():
        passed = sum(1 for c in checks if c.passed)
        total = len(checks)
        status = "PASSED" if passed == total else "FAILED"
        lines.append(f"{calculator}: {passed}/{total} {status}")
        for check in checks:
            if not check.passed:
                lines.append(f"  - {check.name}: {check.message}")

    if report.warnings:
        lines.extend([
            "",
            "WARNINGS",
            "-" * 40
        ])
        lines.extend(f"  - {warning}" for warning in report.warnings)

    lines.extend([
        "",
        "=" * 60,
        f"OVERALL: {'PASSED' if report.overall_passed else 'FAILED'}",
        f"Total: {report.total_passed} passed, {report.total_failed} failed",
        "=" * 60
    ])

    return "\n".join(lines)


# =============================================================================
# END OF VALIDATION REPORT GENERATOR
# =============================================================================
