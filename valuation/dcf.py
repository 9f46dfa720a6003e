# =============================================================================
# ARR VALUATION ENGINE - DCF PROJECTION
# =============================================================================
# Year-by-year income statement to free cash flow, discounted at WACC.
#
# FLOW (per year i):
# ARR[i] = ARR[i-1] * (1 + g[i])
# Revenue -> COGS -> Gross profit -> OpEx (R&D, S&M, G&A) -> EBITDA
# EBIT = EBITDA - D&A, NOPAT = EBIT * (1 - tax)
# FCF = NOPAT + D&A - Capex - Delta WC + SBC
# g[i+1] = max(3%, g[i] * 0.65)
#
# TERMINAL:
# Gordon Growth: TV = FCF_final * (1+g) / (WACC - g)  (primary)
# Exit multiple: TV = EBITDA_final * 18               (cross-check only)
# EV = Sum PV(FCF) + PV(TV)
# =============================================================================

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .profile import InputProfile
from .tables import (
    MIN_PROJECTION_YEARS, TAX_RATE, CAPEX_PCT, DA_PCT, SBC_PCT, WC_PCT,
    EBITDA_MARGIN_CAP, SM_EFFICIENCY_DECAY, GA_LEVERAGE_DECAY,
    GROWTH_ENDURANCE, GROWTH_FLOOR, TERMINAL_EBITDA_MULTIPLE,
)


@dataclass(frozen=True)
class DcfYearRow:
    """One projected year."""
    year: int
    arr: float
    growth: float                # % applied this year
    revenue: float
    gross_profit: float
    ebitda: float
    ebitda_margin: float         # % actual
    ebit: float
    nopat: float
    free_cash_flow: float
    pv_fcf: float
    discount_factor: float       # (1 + WACC)^year
    target_ebitda_margin: float  # % expanded track, capped at 35


@dataclass(frozen=True)
class DcfOutput:
    """Output structure for DCF projection calculator."""
    rows: Tuple[DcfYearRow, ...]
    sum_pv_fcf: float
    terminal_value: Optional[float]  # None when WACC <= terminal growth
    terminal_value_ebitda: float     # exit-multiple cross-check
    pv_terminal: float
    enterprise_value: float
    terminal_value_defined: bool
    terminal_share: Optional[float]  # PV(TV) / EV, None when EV <= 0

    warnings: Tuple[str, ...] = ()


def calculate_discount_factor(annual_rate_pct: float, periods: int) -> float:
    """
    Calculate the compounding factor used as discount divisor.

    Formula: discount_factor = (1 + rate)^periods
    """
    try:
        return (1 + annual_rate_pct / 100) ** periods
    except (OverflowError, ZeroDivisionError):
        return float("inf")


def discount(value: float, discount_factor: float) -> float:
    if discount_factor == 0:
        return 0.0
    return value / discount_factor


def calculate_terminal_value_gordon(
    final_fcf: float,
    discount_rate_pct: float,
    terminal_growth_pct: float
) -> float:
    """
    Calculate terminal value using Gordon Growth model.

    Formula: TV = FCF * (1 + g) / (r - g)
    """
    if discount_rate_pct <= terminal_growth_pct:
        raise ValueError("Discount rate must be greater than terminal growth rate")

    return final_fcf * (1 + terminal_growth_pct / 100) / ((discount_rate_pct - terminal_growth_pct) / 100)


def calculate_terminal_value_multiple(
    final_ebitda: float,
    multiple: float
) -> float:
    """
    Calculate terminal value using exit multiple.

    Formula: TV = EBITDA * Multiple
    """
    return final_ebitda * multiple


def decay_growth(growth: float) -> float:
    """Next year's growth under the growth-endurance decay."""
    return max(GROWTH_FLOOR, growth * GROWTH_ENDURANCE)


def project_year(
    year: int,
    arr: float,
    growth: float,
    target_margin: float,
    profile: InputProfile
) -> DcfYearRow:
    """Build one year of the schedule from the already-grown ARR."""
    revenue = arr
    cogs = revenue * (1 - profile.gross_margin / 100)
    gross_profit = revenue - cogs

    rnd = revenue * (profile.rnd_pct / 100)
    sm = revenue * (profile.sm_pct / 100) * SM_EFFICIENCY_DECAY ** year
    ga = revenue * (profile.ga_pct / 100) * GA_LEVERAGE_DECAY ** year
    ebitda = gross_profit - (rnd + sm + ga)

    da = revenue * DA_PCT
    ebit = ebitda - da
    nopat = ebit * (1 - TAX_RATE)
    capex = revenue * CAPEX_PCT
    sbc = revenue * SBC_PCT
    delta_wc = revenue * WC_PCT * (growth / 100)
    fcf = nopat + da - capex - delta_wc + sbc

    discount_factor = calculate_discount_factor(profile.wacc, year)

    return DcfYearRow(
        year=year,
        arr=arr,
        growth=growth,
        revenue=revenue,
        gross_profit=gross_profit,
        ebitda=ebitda,
        ebitda_margin=(ebitda / revenue * 100) if revenue != 0 else 0.0,
        ebit=ebit,
        nopat=nopat,
        free_cash_flow=fcf,
        pv_fcf=discount(fcf, discount_factor),
        discount_factor=discount_factor,
        target_ebitda_margin=target_margin,
    )


def dcf_engine(profile: InputProfile) -> DcfOutput:
    """
    Main DCF projection.

    Projects max(5, horizon_years) years. The terminal value is discounted
    over horizon_years.

    Returns:
        DcfOutput with the year schedule and enterprise value
    """
    warnings: List[str] = []
    rows: List[DcfYearRow] = []

    arr = profile.arr
    growth = profile.arr_growth
    target_margin = profile.ebitda_margin
    sum_pv = 0.0

    for year in range(1, max(MIN_PROJECTION_YEARS, profile.horizon_years) + 1):
        arr *= (1 + growth / 100)
        target_margin = min(EBITDA_MARGIN_CAP, target_margin + profile.margin_expansion_per_year)
        row = project_year(year, arr, growth, target_margin, profile)
        rows.append(row)
        sum_pv += row.pv_fcf
        growth = decay_growth(growth)

    if any(row.discount_factor == 0 for row in rows):
        warnings.append(f"WACC of {profile.wacc}% gives a zero discount factor; PV set to 0")

    final = rows[-1]
    terminal_value_ebitda = calculate_terminal_value_multiple(final.ebitda, TERMINAL_EBITDA_MULTIPLE)

    try:
        terminal_value = calculate_terminal_value_gordon(
            final.free_cash_flow, profile.wacc, profile.terminal_growth
        )
    except ValueError:
        terminal_value = None
        warnings.append(
            f"WACC ({profile.wacc}%) <= terminal growth ({profile.terminal_growth}%): "
            f"Gordon terminal value undefined, DCF EV excludes terminal value"
        )

    if terminal_value is None:
        pv_terminal = 0.0
    else:
        pv_terminal = discount(
            terminal_value, calculate_discount_factor(profile.wacc, profile.horizon_years)
        )

    enterprise_value = sum_pv + pv_terminal

    return DcfOutput(
        rows=tuple(rows),
        sum_pv_fcf=sum_pv,
        terminal_value=terminal_value,
        terminal_value_ebitda=terminal_value_ebitda,
        pv_terminal=pv_terminal,
        enterprise_value=enterprise_value,
        terminal_value_defined=terminal_value is not None,
        terminal_share=(pv_terminal / enterprise_value) if enterprise_value > 0 else None,
        warnings=tuple(warnings),
    )
