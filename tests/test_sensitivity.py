# =============================================================================
# ARR VALUATION ENGINE - SENSITIVITY, REVERSE VALUATION AND LEVER TESTS
# =============================================================================

import pytest
import sys
import os
from dataclasses import replace

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from valuation.engine import compute_valuation
from valuation.sensitivity import (
    PRESET_GRIDS, build_sensitivity_grid, run_preset_grid, reverse_valuation,
    build_levers, value_creation_levers
)


class TestSensitivityGrid:
    """Tests for two-way grids."""

    def test_grid_shape_and_labels(self, base_profile):
        df = build_sensitivity_grid(base_profile, "arr_growth", [40, 55, 70], "nrr", [100, 108])
        assert df.shape == (3, 2)
        assert list(df.index) == [40, 55, 70]
        assert list(df.columns) == [100, 108]
        assert df.index.name == "arr_growth"
        assert df.columns.name == "nrr"

    def test_reference_cell(self, base_profile):
        """Cell at the profile's own values equals the base multiple."""
        df = build_sensitivity_grid(base_profile, "arr_growth", [40], "nrr", [108])
        assert df.loc[40, 108] == pytest.approx(3.948)

    def test_multiple_rises_with_growth(self, base_profile):
        df = build_sensitivity_grid(base_profile, "arr_growth", [20, 40, 80], "nrr", [108])
        column = list(df[108])
        assert column == sorted(column)

    def test_profile_not_modified(self, base_profile):
        build_sensitivity_grid(base_profile, "wacc", [8, 20], "terminal_growth", [2], "dcf_enterprise_value")
        assert base_profile.wacc == 12.0
        assert base_profile.terminal_growth == 3.0

    def test_unknown_field(self, base_profile):
        with pytest.raises(ValueError):
            build_sensitivity_grid(base_profile, "valuation", [1], "nrr", [100])

    def test_unknown_metric(self, base_profile):
        with pytest.raises(ValueError):
            build_sensitivity_grid(base_profile, "arr_growth", [40], "nrr", [100], "irr")

    def test_preset(self, base_profile):
        spec = PRESET_GRIDS["wacc-terminal"]
        df = run_preset_grid(base_profile, "wacc-terminal")
        assert df.shape == (len(spec.row_values), len(spec.col_values))

    def test_unknown_preset(self, base_profile):
        with pytest.raises(ValueError):
            run_preset_grid(base_profile, "churn")


class TestReverseValuation:
    """Tests for ARR required to justify a target EV."""

    def test_implied_arr(self, base_result):
        df = reverse_valuation(base_result, [25e6, 50e6])
        assert df.loc[0, "implied_arr"] == pytest.approx(25e6 / 3.948)
        assert df.loc[1, "arr_gap"] == pytest.approx(50e6 / 3.948 - 12e6)

    def test_sufficiency(self, base_result):
        df = reverse_valuation(base_result, [25e6, 50e6])
        assert list(df["sufficient"]) == [True, False]

    def test_default_targets(self, base_result):
        df = reverse_valuation(base_result)
        assert len(df) == 6
        assert list(df.columns) == ["target_ev", "implied_arr", "arr_gap", "sufficient"]


class TestValueCreationLevers:
    """Tests for levers ranked by multiple impact."""

    def test_reference_deltas(self, base_profile, base_result):
        """Rule of 40 lever: EBITDA margin 0 removes the -2.64x adjustment."""
        levers = {lever.code: lever for lever in build_levers(base_profile, base_result)}
        assert levers["rule_of_40"].delta == pytest.approx(2.64 * 1.05)
        assert levers["nrr"].delta == pytest.approx(1.8 * 1.05)
        assert levers["arr_scale"].delta == pytest.approx(3.76 * (1.12 - 1.05))

    def test_met_levers_have_zero_delta(self, base_profile, base_result):
        """Churn 7% and gross margin 76% already meet their targets."""
        levers = {lever.code: lever for lever in build_levers(base_profile, base_result)}
        assert levers["logo_churn"].delta == 0.0
        assert levers["gross_margin"].delta == 0.0
        assert levers["logo_churn"].priority == "LOW"

    def test_ranked_by_delta(self, base_profile, base_result):
        df = value_creation_levers(base_profile, base_result)
        assert list(df["code"]) == ["rule_of_40", "nrr", "arr_scale", "logo_churn", "gross_margin"]
        assert list(df.columns) == ["code", "action", "delta", "priority"]

    def test_priorities(self, base_profile, base_result):
        levers = {lever.code: lever.priority for lever in build_levers(base_profile, base_result)}
        assert levers == {
            "nrr": "MED",
            "rule_of_40": "MED",
            "arr_scale": "MED",
            "logo_churn": "LOW",
            "gross_margin": "LOW",
        }

    def test_distressed_priorities(self, distressed_profile):
        result = compute_valuation(distressed_profile)
        levers = {lever.code: lever.priority for lever in build_levers(distressed_profile, result)}
        assert set(levers.values()) == {"HIGH"}

    def test_scale_lever_done(self, base_profile):
        profile = replace(base_profile, arr_m=40.0)
        levers = {lever.code: lever for lever in build_levers(profile, compute_valuation(profile))}
        assert levers["arr_scale"].priority == "DONE"
        assert levers["arr_scale"].delta == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
