# =============================================================================
# ARR VALUATION ENGINE - PYTEST CONFIGURATION
# =============================================================================
# Shared fixtures and configuration for all tests.
# =============================================================================

import pytest
import sys
import os
from pathlib import Path

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@pytest.fixture
def project_root():
    """Get project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def profiles_dir(project_root):
    """Get profiles directory."""
    return project_root / "profiles"


@pytest.fixture
def base_profile():
    """Reference profile: B2B_ENT / GROWTH, $12M ARR, 40% growth."""
    from valuation.profile import InputProfile
    return InputProfile()


@pytest.fixture
def base_result(base_profile):
    """Run the engine on the reference profile."""
    from valuation.engine import compute_valuation
    return compute_valuation(base_profile)


@pytest.fixture
def reconciled_profile(base_profile):
    """Reference profile whose stated NRR matches its ARR bridge (100%)."""
    from dataclasses import replace
    return replace(base_profile, nrr=100.0)


@pytest.fixture
def distressed_profile():
    """Early SMB profile that trips most diligence flags."""
    from valuation.profile import InputProfile, BusinessModel, Stage
    return InputProfile(
        business_model=BusinessModel.B2B_SMB,
        stage=Stage.EARLY,
        arr_m=2.5,
        arr_growth=30.0,
        revenue_mix=60.0,
        nrr=85.0,
        grr=80.0,
        logo_churn=25.0,
        gross_margin=55.0,
        ebitda_margin=-90.0,
        sm_pct=60.0,
        arpa=6000.0,
        cac=15000.0,
    )
