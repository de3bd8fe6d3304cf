"""
Pytest fixtures for child care subsidy model tests.

Rate tables are inlined here rather than taken from the package defaults,
so a change to the shipped tables can't silently move expected values.
"""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from ccs_model.rates import (
    AgeGroup,
    CareType,
    CCSRates,
    RateConfiguration,
    RegionalFeeTable,
    TaxRates,
)
from ccs_model.subsidy import SessionSubsidyResult


# =============================================================================
# RATE FIXTURES
# =============================================================================

TEST_CCS_RATES = {
    "financial_year": "2025-26",
    "effective_date": "2025-07-01",
    "source": "test fixture",
    "standard_subsidy": {
        "max_percent": 90,
        "income_threshold": 85279,
        "income_increment": 5000,
        "reduction_per_increment": 1,
        "min_percent": 0,
    },
    "higher_subsidy": {
        "additional_points": 30,
        "max_percent": 95,
    },
    "hourly_rate_caps": [
        {"care_type": "centre_based_day_care", "age_group": "below_school_age", "rate_per_hour": 14.63},
        {"care_type": "centre_based_day_care", "age_group": "school_age", "rate_per_hour": 12.81},
        {"care_type": "family_day_care", "age_group": "all", "rate_per_hour": 12.43},
        {"care_type": "outside_school_hours", "age_group": "school_age", "rate_per_hour": 12.81},
        {"care_type": "in_home_care", "age_group": "all", "rate_per_hour": 35.40},
    ],
    "annual_subsidy_cap": {
        "income_threshold": 85279,
        "cap_per_child": 11003,
    },
    "withholding_percent": 5,
    "three_day_guarantee": {
        "effective_date": "2026-01-05",
        "min_hours_per_fortnight": 72,
    },
}

TEST_TAX_RATES = {
    "financial_year": "2025-26",
    "source": "test fixture",
    "brackets": [
        {"min": 0, "max": 18200, "base_tax": 0, "rate": 0.0},
        {"min": 18201, "max": 45000, "base_tax": 0, "rate": 0.16},
        {"min": 45001, "max": 135000, "base_tax": 4288, "rate": 0.30},
        {"min": 135001, "max": 190000, "base_tax": 31288, "rate": 0.37},
        {"min": 190001, "max": None, "base_tax": 51638, "rate": 0.45},
    ],
    "medicare_levy": {
        "rate": 0.02,
        "low_income_threshold": 26000,
        "phase_in_rate": 0.10,
        "shade_in_threshold": 32500,
    },
    "low_income_offset": {
        "max_offset": 700,
        "full_offset_to": 37500,
        "phase_out_1_rate": 0.05,
        "phase_out_1_to": 45000,
        "phase_out_2_rate": 0.015,
        "phase_out_2_to": 66667,
    },
}

# Subset of states
TEST_STATE_AVERAGES = {
    "last_updated": "2025-07-01",
    "source": "test fixture",
    "states": [
        {"state": "NSW", "state_name": "New South Wales",
         "average_daily_fee": {"centre_based_day_care": 158, "family_day_care": 128, "outside_school_hours": 50}},
        {"state": "VIC", "state_name": "Victoria",
         "average_daily_fee": {"centre_based_day_care": 148, "family_day_care": 122, "outside_school_hours": 48}},
        {"state": "ACT", "state_name": "Australian Capital Territory",
         "average_daily_fee": {"centre_based_day_care": 175, "family_day_care": 140, "outside_school_hours": 55}},
    ],
}


@pytest.fixture
def ccs_rates():
    """FY 2025-26 CCS rates."""
    return CCSRates.from_dict(TEST_CCS_RATES)


@pytest.fixture
def tax_rates():
    """FY 2025-26 tax rates (revised Stage 3)."""
    return TaxRates.from_dict(TEST_TAX_RATES)


@pytest.fixture
def rate_config(ccs_rates, tax_rates):
    """Combined rate configuration."""
    return RateConfiguration(ccs=ccs_rates, tax=tax_rates)


@pytest.fixture
def regional_fees():
    """NSW, VIC and ACT average daily fees."""
    return RegionalFeeTable.from_dict(TEST_STATE_AVERAGES)


# =============================================================================
# SESSION FIXTURES
# =============================================================================

@pytest.fixture
def mock_session():
    """$100/day session with $80 subsidy (80% under the cap)."""
    return SessionSubsidyResult(
        daily_fee=100.0,
        hourly_fee=10.0,
        hourly_rate_cap=14.63,
        effective_hourly_rate=10.0,
        fee_above_cap_per_hour=0.0,
        subsidy_per_hour=8.0,
        subsidy_per_session=80.0,
        out_of_pocket_per_session=20.0,
        subsidy_percent=80.0,
    )


@pytest.fixture
def cbdc_under_6():
    """Centre-based day care, below school age."""
    return CareType.CENTRE_BASED_DAY_CARE, AgeGroup.BELOW_SCHOOL_AGE
