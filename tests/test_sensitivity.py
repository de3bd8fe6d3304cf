"""
Tests for the income sensitivity module.

With a $100/day, 10-hour session (always under the cap) at 3 days a week,
the annual gap is (100 - percent) x $156, so each lost percentage point
adds exactly $156 a year.
"""

import math

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from ccs_model.errors import InvalidArgumentError
from ccs_model.rates import AgeGroup, CareType
from ccs_model.sensitivity import (
    SensitivityParams,
    calculate_income_sensitivity,
    sweep_incomes,
)


def make_params(**overrides):
    values = dict(
        user_income=95_000,
        daily_fee=100,
        hours_per_day=10,
        days_per_week=3,
        care_type=CareType.CENTRE_BASED_DAY_CARE,
        age_group=AgeGroup.BELOW_SCHOOL_AGE,
    )
    values.update(overrides)
    return SensitivityParams(**values)


@pytest.fixture
def result(ccs_rates):
    return calculate_income_sensitivity(make_params(), ccs_rates)


class TestSweep:
    """Test the income grid."""

    def test_default_bounds(self):
        incomes = sweep_incomes(40_000, 600_000, 5_000)

        assert len(incomes) == 113
        assert incomes[0] == 40_000
        assert incomes[-1] == 600_000

    def test_max_not_on_grid(self):
        incomes = sweep_incomes(100_000, 111_000, 2_500)
        assert list(incomes) == [100_000, 102_500, 105_000, 107_500, 110_000]

    def test_inexact_increment_keeps_max(self):
        incomes = sweep_incomes(0.0, 0.3, 0.1)

        assert len(incomes) == 4
        assert incomes[-1] == 0.3

    def test_single_point(self):
        assert list(sweep_incomes(50_000, 50_000, 5_000)) == [50_000]

    @pytest.mark.parametrize("increment", [0, -5_000])
    def test_non_positive_increment_raises(self, increment):
        with pytest.raises(InvalidArgumentError):
            sweep_incomes(40_000, 600_000, increment)

    def test_inverted_bounds_raise(self):
        with pytest.raises(InvalidArgumentError):
            sweep_incomes(600_000, 40_000, 5_000)


class TestIncomeSensitivity:
    """Test rows and insights."""

    def test_rows(self, result):
        assert len(result.rows) == 113
        assert result.rows[0].income == 40_000
        assert result.rows[0].subsidy_percent == 90

    def test_user_row(self, result):
        row = result.user_row

        assert result.user_row_index == 11
        assert row.income == 95_000
        assert row.subsidy_percent == 88
        assert row.weekly_out_of_pocket == pytest.approx(36)
        assert row.annual_out_of_pocket == pytest.approx(1_872)

    def test_user_row_nearest(self, ccs_rates):
        result = calculate_income_sensitivity(make_params(user_income=97_600), ccs_rates)
        assert result.user_row.income == 100_000

    def test_user_row_tie_keeps_lower(self, ccs_rates):
        result = calculate_income_sensitivity(make_params(user_income=97_500), ccs_rates)
        assert result.user_row.income == 95_000

    def test_zero_subsidy_income(self, result):
        """First swept income more than 89 increments above $85,279."""
        assert result.zero_subsidy_income == 535_000

    def test_zero_subsidy_idempotent(self, ccs_rates):
        first = calculate_income_sensitivity(make_params(), ccs_rates)
        second = calculate_income_sensitivity(make_params(), ccs_rates)
        assert first.zero_subsidy_income == second.zero_subsidy_income
        assert first == second

    def test_no_zero_subsidy_in_range(self, ccs_rates):
        params = make_params(income_min=40_000, income_max=200_000)
        assert calculate_income_sensitivity(params, ccs_rates).zero_subsidy_income is None

    def test_highest_marginal_range(self, result):
        """Every taper step costs $156; the first one found wins."""
        step = result.highest_marginal_range

        assert step.income_from == 85_000
        assert step.income_to == 90_000
        assert step.cost_increase == pytest.approx(156)

    def test_lowest_marginal_range_ignores_flat_steps(self, result):
        """Steps below the threshold cost $0 and are not a 'sweet spot'."""
        step = result.lowest_marginal_range

        assert step.cost_increase == pytest.approx(156)
        assert step.income_from == 85_000

    def test_steps_after_zero_ignored(self, ccs_rates):
        params = make_params(income_min=540_000, income_max=600_000)
        result = calculate_income_sensitivity(params, ccs_rates)

        assert result.highest_marginal_range is None
        assert result.lowest_marginal_range is None

    def test_to_dataframe(self, result):
        df = result.to_dataframe()

        assert len(df) == 113
        assert math.isnan(df.loc[0, "cost_increase"])
        assert df.loc[1, "cost_increase"] == 0
        assert df.loc[10, "cost_increase"] == pytest.approx(156)
        assert df["is_user_row"].sum() == 1
        assert bool(df.loc[11, "is_user_row"])
