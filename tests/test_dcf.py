# =============================================================================
# ARR VALUATION ENGINE - DCF PROJECTION TESTS
# =============================================================================

import pytest
import sys
import os
from dataclasses import replace

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from valuation.dcf import (
    calculate_discount_factor, discount, calculate_terminal_value_gordon,
    calculate_terminal_value_multiple, decay_growth, dcf_engine
)


class TestDiscountFactor:
    """Tests for discount factor calculation."""

    def test_discount_factor_year_1(self):
        """Year 1 at 12% should be 1.12."""
        assert calculate_discount_factor(12.0, 1) == pytest.approx(1.12)

    def test_discount_factor_year_5(self):
        assert calculate_discount_factor(12.0, 5) == pytest.approx(1.12 ** 5)

    def test_discount_zero_factor(self):
        """Zero factor (WACC = -100%) gives PV 0 instead of raising."""
        assert discount(1000.0, 0.0) == 0.0

    def test_overflow_returns_infinity(self):
        assert calculate_discount_factor(1e300, 5) == float("inf")


class TestTerminalValue:
    """Tests for terminal value calculations."""

    def test_gordon_growth(self):
        """TV = FCF * (1+g) / (r-g)."""
        tv = calculate_terminal_value_gordon(1000, 10.0, 2.0)
        assert tv == pytest.approx(1000 * 1.02 / 0.08)

    def test_gordon_invalid_rates(self):
        """Should raise if r <= g."""
        with pytest.raises(ValueError):
            calculate_terminal_value_gordon(1000, 2.0, 3.0)
        with pytest.raises(ValueError):
            calculate_terminal_value_gordon(1000, 3.0, 3.0)

    def test_exit_multiple(self):
        assert calculate_terminal_value_multiple(1000, 18.0) == 18000


class TestGrowthDecay:
    """Tests for growth endurance."""

    def test_decay(self):
        assert decay_growth(40.0) == pytest.approx(26.0)

    def test_floor(self):
        assert decay_growth(4.0) == 3.0
        assert decay_growth(-20.0) == 3.0


class TestDcfEngine:
    """Tests for the projected schedule."""

    def test_growth_column(self, base_profile):
        output = dcf_engine(base_profile)
        growth = [row.growth for row in output.rows]
        assert growth == pytest.approx([40.0, 26.0, 16.9, 10.985, 7.14025])

    def test_year_one_values(self, base_profile):
        row = dcf_engine(base_profile).rows[0]
        assert row.year == 1
        assert row.revenue == pytest.approx(16.8e6)
        assert row.ebitda == pytest.approx(2.46624e6)
        assert row.free_cash_flow == pytest.approx(2.84928e6)
        assert row.discount_factor == pytest.approx(1.12)
        assert row.pv_fcf == pytest.approx(2.544e6)

    def test_arr_compounds(self, base_profile):
        rows = dcf_engine(base_profile).rows
        assert rows[1].arr == pytest.approx(16.8e6 * 1.26)

    def test_target_margin_track_is_capped(self, base_profile):
        profile = replace(base_profile, ebitda_margin=30.0)
        rows = dcf_engine(profile).rows
        assert rows[0].target_ebitda_margin == pytest.approx(33.5)
        assert all(row.target_ebitda_margin == 35.0 for row in rows[1:])

    def test_terminal_value_and_ev(self, base_profile):
        output = dcf_engine(base_profile)
        final_fcf = output.rows[-1].free_cash_flow
        assert output.terminal_value == pytest.approx(final_fcf * 1.03 / 0.09)
        assert output.pv_terminal == pytest.approx(output.terminal_value / 1.12 ** 5)
        assert output.sum_pv_fcf == pytest.approx(sum(row.pv_fcf for row in output.rows))
        assert output.enterprise_value == pytest.approx(output.sum_pv_fcf + output.pv_terminal)
        assert output.terminal_value_ebitda == pytest.approx(output.rows[-1].ebitda * 18)

    def test_minimum_five_years(self, base_profile):
        """Short horizons still project five years; TV uses the horizon."""
        output = dcf_engine(replace(base_profile, horizon_years=3))
        assert len(output.rows) == 5
        assert output.pv_terminal == pytest.approx(output.terminal_value / 1.12 ** 3)

    def test_long_horizon(self, base_profile):
        output = dcf_engine(replace(base_profile, horizon_years=8))
        assert [row.year for row in output.rows] == list(range(1, 9))
        assert output.rows[-1].growth == 3.0

    def test_wacc_below_terminal_growth(self, base_profile):
        """TV undefined: EV is the sum of PV(FCF) only, with a warning."""
        output = dcf_engine(replace(base_profile, wacc=3.0, terminal_growth=4.0))
        assert output.terminal_value is None
        assert not output.terminal_value_defined
        assert output.pv_terminal == 0.0
        assert output.enterprise_value == pytest.approx(output.sum_pv_fcf)
        assert len(output.warnings) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
