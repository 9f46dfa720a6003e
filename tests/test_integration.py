# =============================================================================
# ARR VALUATION ENGINE - INTEGRATION TESTS
# =============================================================================
# Tests for the full engine run and cross-calculator behavior.
# =============================================================================

import pytest
import sys
import os
from dataclasses import fields, replace

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from valuation.engine import ValuationResult, compute_valuation
from valuation.profile import InputProfile, BusinessModel, Stage, load_profile


class TestFullPipeline:
    """Tests for full engine execution."""

    def test_reference_headline_values(self, base_result):
        assert base_result.arr == pytest.approx(12e6)
        assert base_result.base_multiple == pytest.approx(3.948)
        assert base_result.bear_multiple == pytest.approx(2.28984)
        assert base_result.bull_multiple == pytest.approx(5.922)
        assert base_result.scores.composite == pytest.approx(70.73)
        assert base_result.dcf_rows[0].free_cash_flow == pytest.approx(2.84928e6)

    def test_scenarios_in_order(self, base_result):
        assert [s.name for s in base_result.scenarios] == ["bear", "base", "bull", "dcf"]

    def test_dcf_scenario(self, base_result):
        dcf = base_result.scenario("dcf")
        assert dcf.enterprise_value == pytest.approx(base_result.dcf.enterprise_value)
        assert dcf.multiple == pytest.approx(base_result.dcf.enterprise_value / 12e6)
        assert dcf.equity_value == pytest.approx(base_result.dcf.enterprise_value + 16e6)

    def test_unknown_scenario(self, base_result):
        with pytest.raises(KeyError):
            base_result.scenario("upside")

    def test_no_warnings_for_reference(self, base_result):
        assert base_result.warnings == ()

    def test_result_holds_no_profile(self, base_result):
        """Result is self-contained; nothing refers back to the input."""
        for f in fields(ValuationResult):
            assert not isinstance(getattr(base_result, f.name), InputProfile)

    def test_shipped_profiles_value(self, profiles_dir):
        for profile_id in ("base", "early_smb", "scale_leader"):
            result = compute_valuation(load_profile(profile_id, profiles_dir))
            assert 0.8 <= result.base_multiple <= 50.0


class TestDeterminism:
    """Tests for repeatable output."""

    def test_same_profile_same_result(self, base_profile):
        assert compute_valuation(base_profile) == compute_valuation(base_profile)

    def test_equal_profiles_equal_results(self):
        a = InputProfile(stage=Stage.SCALE, arr_m=40.0)
        b = InputProfile(stage=Stage.SCALE, arr_m=40.0)
        assert compute_valuation(a) == compute_valuation(b)

    def test_input_not_modified(self, base_profile):
        before = replace(base_profile)
        compute_valuation(base_profile)
        assert base_profile == before


class TestMonotonicity:
    """Tests for directional behavior."""

    def test_growth_raises_multiple(self, base_profile):
        low = compute_valuation(replace(base_profile, arr_growth=30.0))
        high = compute_valuation(replace(base_profile, arr_growth=60.0))
        assert high.base_multiple > low.base_multiple

    def test_wacc_lowers_dcf(self, base_profile):
        low = compute_valuation(replace(base_profile, wacc=10.0))
        high = compute_valuation(replace(base_profile, wacc=16.0))
        assert high.dcf.enterprise_value < low.dcf.enterprise_value

    def test_tolerance_passthrough(self, base_profile):
        result = compute_valuation(base_profile, nrr_tolerance=10.0)
        assert result.arr_bridge.nrr_reconciled
        assert result.flags[0].code == "clear"


class TestExtremeInputs:
    """The engine never raises on numeric input."""

    @pytest.mark.parametrize("overrides", [
        {"arr_m": 0.0},
        {"arr_m": -5.0},
        {"logo_churn": 0.0},
        {"logo_churn": 100.0},
        {"logo_churn": 150.0},
        {"cac": 0.0, "arpa": 0.0},
        {"sm_pct": 0.0},
        {"nrr": -20.0},
        {"nrr": 400.0, "grr": 100.0},
        {"arr_growth": -100.0},
        {"arr_growth": 5000.0},
        {"wacc": -100.0},
        {"wacc": 3.0, "terminal_growth": 3.0},
        {"horizon_years": 0},
        {"horizon_years": 30},
        {"gross_margin": -50.0, "ebitda_margin": -400.0},
    ])
    def test_no_exception(self, base_profile, overrides):
        result = compute_valuation(replace(base_profile, **overrides))
        assert 0.8 <= result.base_multiple <= 50.0
        assert result.bear_multiple < result.base_multiple < result.bull_multiple
        assert len(result.dcf_rows) >= 5
        assert len(result.cohorts) == 5

    def test_zero_arr_warns(self, base_profile):
        result = compute_valuation(replace(base_profile, arr_m=0.0))
        assert result.scenario("dcf").multiple == 0.0
        assert any("ARR" in w for w in result.warnings)

    def test_undefined_terminal_value_warns(self, base_profile):
        result = compute_valuation(replace(base_profile, wacc=2.0))
        assert result.dcf.terminal_value is None
        assert len(result.warnings) == 1

    def test_every_business_model_and_stage(self):
        for model in BusinessModel:
            for stage in Stage:
                result = compute_valuation(InputProfile(business_model=model, stage=stage))
                assert result.multiple.anchor > 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
