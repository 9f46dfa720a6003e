# =============================================================================
# ARR VALUATION ENGINE - EFFICIENCY METRICS
# =============================================================================
# Growth efficiency of the go-to-market engine.
#
# FORMULAS:
# Rule of 40 = ARR growth % + EBITDA margin %
# Magic Number = (Net new ARR * GM) / S&M spend
# Burn Multiple = Net burn / Net new ARR
# Sales efficiency = Net new ARR / S&M spend
#
# SENTINELS:
# Magic Number, Burn Multiple and sales efficiency report 0.0 when not
# applicable. The *_defined flags tell a computed value from the sentinel.
# =============================================================================

from dataclasses import dataclass

from .profile import InputProfile


@dataclass(frozen=True)
class EfficiencyOutput:
    """Output structure for efficiency calculator."""
    rule_of_40: float
    net_new_arr: float   # $
    sm_spend: float      # $
    magic_number: float
    net_burn: float      # $, 0 when profitable
    burn_multiple: float
    sales_efficiency: float

    magic_number_defined: bool = True
    burn_multiple_defined: bool = True  # False: not burning (or no net new ARR)
    sales_efficiency_defined: bool = True


def calculate_rule_of_40(arr_growth: float, ebitda_margin: float) -> float:
    return arr_growth + ebitda_margin


def calculate_net_burn(arr: float, ebitda_margin: float) -> float:
    """Annual cash burn implied by a negative EBITDA margin (0 if profitable)."""
    return max(0.0, -arr * (ebitda_margin / 100))


def efficiency_engine(profile: InputProfile) -> EfficiencyOutput:
    arr = profile.arr
    net_new_arr = arr * (profile.arr_growth / 100)
    sm_spend = arr * (profile.sm_pct / 100)
    net_burn = calculate_net_burn(arr, profile.ebitda_margin)

    has_sm = sm_spend > 0
    burning = net_new_arr > 0 and net_burn > 0

    magic_number = (net_new_arr * (profile.gross_margin / 100)) / sm_spend if has_sm else 0.0
    sales_efficiency = net_new_arr / sm_spend if has_sm else 0.0
    burn_multiple = net_burn / net_new_arr if burning else 0.0

    return EfficiencyOutput(
        rule_of_40=calculate_rule_of_40(profile.arr_growth, profile.ebitda_margin),
        net_new_arr=net_new_arr,
        sm_spend=sm_spend,
        magic_number=magic_number,
        net_burn=net_burn,
        burn_multiple=burn_multiple,
        sales_efficiency=sales_efficiency,
        magic_number_defined=has_sm,
        burn_multiple_defined=burning,
        sales_efficiency_defined=has_sm,
    )
