# =============================================================================
# ARR VALUATION ENGINE - MAIN ENTRY POINT
# =============================================================================
# Command-line interface for running the valuation engine.
#
# Usage:
#   python main.py run --profile base
#   python main.py run --all
#   python main.py validate --profile base
#   python main.py sensitivity --grid growth-nrr
#   python main.py reverse --profile base
#   python main.py levers --profile base
# =============================================================================

import argparse
import logging
from pathlib import Path
from typing import Dict

import pandas as pd

from valuation.engine import ValuationResult, compute_valuation
from valuation.profile import load_profile, validate_profile
from valuation.sensitivity import (
    PRESET_GRIDS, reverse_valuation, run_preset_grid, value_creation_levers
)
from valuation.validation_report import generate_validation_report, format_report
from ui.dashboard_data import build_snapshot, compare_results

logger = logging.getLogger(__name__)


def _load_checked(profile_id: str, profiles_dir: Path):
    """Load a profile and print its validation errors (never blocking)."""
    profile = load_profile(profile_id, profiles_dir)
    errors = validate_profile(profile)
    if errors:
        print("\nPROFILE WARNINGS:")
        for error in errors:
            print(f"  - {error}")
    return profile


def run_single_profile(profile_id: str, profiles_dir: Path) -> ValuationResult:
    """Value a single profile and print summary."""
    print(f"\nValuing profile: {profile_id}")
    print("-" * 40)

    profile = _load_checked(profile_id, profiles_dir)
    result = compute_valuation(profile)
    snapshot = build_snapshot(result)

    if result.warnings:
        print("\nWARNINGS:")
        for warning in result.warnings:
            print(f"  - {warning}")

    print("\nMULTIPLE BUILD-UP:")
    print(snapshot.waterfall.to_string(index=False, float_format=lambda v: f"{v:+.2f}"))

    print("\nSCENARIOS:")
    print(snapshot.scenarios.to_string(float_format=lambda v: f"{v:,.2f}"))

    print("\nDCF SCHEDULE:")
    columns = ["arr", "growth", "revenue", "ebitda", "free_cash_flow", "pv_fcf"]
    print(snapshot.dcf_schedule[columns].to_string(float_format=lambda v: f"{v:,.0f}"))
    if result.dcf.terminal_value is not None:
        print(f"  Terminal value (Gordon): USD {result.dcf.terminal_value:,.0f}")
    print(f"  Terminal value (18x EBITDA): USD {result.dcf.terminal_value_ebitda:,.0f}")

    print("\nSCORES:")
    print(snapshot.scores.to_string(index=False, float_format=lambda v: f"{v:.1f}"))

    print("\nDILIGENCE FLAGS:")
    for flag in result.flags:
        print(f"  [{flag.severity}] {flag.message}")

    return result


def run_all(profiles_dir: Path) -> Dict[str, ValuationResult]:
    """Value every profile in the directory and compare."""
    profile_ids = ["base"] + sorted(
        path.stem for path in profiles_dir.glob("*.yaml") if path.stem != "base"
    )

    print("\n" + "=" * 60)
    print("VALUING ALL PROFILES")
    print("=" * 60)

    results = {}
    for profile_id in profile_ids:
        results[profile_id] = compute_valuation(load_profile(profile_id, profiles_dir))
        logger.info("Valued profile %s", profile_id)

    with pd.option_context("display.width", 120):
        print(compare_results(results).to_string(float_format=lambda v: f"{v:,.2f}"))

    return results


def run_validation(profile_id: str, profiles_dir: Path):
    """Run self-consistency checks and print report."""
    result = compute_valuation(_load_checked(profile_id, profiles_dir))
    report = generate_validation_report(profile_id, result)
    print(format_report(report))


def run_sensitivity(profile_id: str, grid: str, profiles_dir: Path):
    """Print one preset sensitivity grid."""
    profile = _load_checked(profile_id, profiles_dir)
    spec = PRESET_GRIDS[grid]
    print(f"\nSENSITIVITY: {spec.metric} by {spec.row_field} (rows) x {spec.col_field} (columns)")
    print(run_preset_grid(profile, grid).to_string(float_format=lambda v: f"{v:.1f}"))


def run_reverse(profile_id: str, profiles_dir: Path):
    """Print ARR required for a range of target EVs."""
    result = compute_valuation(_load_checked(profile_id, profiles_dir))
    print(f"\nREVERSE VALUATION at {result.base_multiple:.2f}x ARR")
    print(reverse_valuation(result).to_string(index=False, float_format=lambda v: f"{v:,.0f}"))


def run_levers(profile_id: str, profiles_dir: Path):
    """Print value creation levers ranked by multiple impact."""
    profile = _load_checked(profile_id, profiles_dir)
    result = compute_valuation(profile)
    print(f"\nVALUE CREATION LEVERS from {result.base_multiple:.2f}x ARR")
    levers = value_creation_levers(profile, result)
    print(levers.to_string(index=False, float_format=lambda v: f"{v:+.2f}x"))


def main():
    parser = argparse.ArgumentParser(description="ARR Valuation Engine")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Value profile(s)")
    run_parser.add_argument("--profile", "-p", help="Profile ID to value")
    run_parser.add_argument("--all", "-a", action="store_true", help="Value all profiles")
    run_parser.add_argument("--dir", "-d", default="profiles", help="Profiles directory")

    # Validate command
    val_parser = subparsers.add_parser("validate", help="Run self-consistency checks")
    val_parser.add_argument("--profile", "-p", default="base", help="Profile ID")
    val_parser.add_argument("--dir", "-d", default="profiles", help="Profiles directory")

    # Sensitivity command
    sens_parser = subparsers.add_parser("sensitivity", help="Print a sensitivity grid")
    sens_parser.add_argument("--profile", "-p", default="base", help="Profile ID")
    sens_parser.add_argument("--grid", "-g", choices=sorted(PRESET_GRIDS), default="growth-nrr")
    sens_parser.add_argument("--dir", "-d", default="profiles", help="Profiles directory")

    # Reverse valuation command
    rev_parser = subparsers.add_parser("reverse", help="ARR required for target EVs")
    rev_parser.add_argument("--profile", "-p", default="base", help="Profile ID")
    rev_parser.add_argument("--dir", "-d", default="profiles", help="Profiles directory")

    # Levers command
    lev_parser = subparsers.add_parser("levers", help="Rank value creation levers")
    lev_parser.add_argument("--profile", "-p", default="base", help="Profile ID")
    lev_parser.add_argument("--dir", "-d", default="profiles", help="Profiles directory")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    profiles_dir = Path(args.dir if hasattr(args, "dir") else "profiles")

    if args.command == "run":
        if args.all:
            run_all(profiles_dir)
        else:
            run_single_profile(args.profile or "base", profiles_dir)
    elif args.command == "validate":
        run_validation(args.profile, profiles_dir)
    elif args.command == "sensitivity":
        run_sensitivity(args.profile, args.grid, profiles_dir)
    elif args.command == "reverse":
        run_reverse(args.profile, profiles_dir)
    elif args.command == "levers":
        run_levers(args.profile, profiles_dir)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
