"""
Income Sensitivity Module

Sweeps combined family income across a range with the childcare
arrangement held fixed, showing how the subsidy percentage and the
family's annual gap fee change as income rises.

Also identifies:
- The swept income nearest the family's actual income
- The lowest swept income at which the subsidy reaches zero
- The income step with the largest and the smallest (positive) increase
  in annual out-of-pocket cost, while the subsidy is still above zero
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from .errors import InvalidArgumentError
from .money import round_cents
from .rates import AgeGroup, CareType, CCSRates
from .subsidy import (
    DEFAULT_WEEKS_PER_YEAR,
    calculate_annual_cost,
    calculate_session_subsidy,
    calculate_subsidy_percentage,
)

logger = logging.getLogger(__name__)

DEFAULT_INCOME_MIN = 40_000
DEFAULT_INCOME_MAX = 600_000
DEFAULT_INCOME_INCREMENT = 5_000


@dataclass(frozen=True)
class SensitivityParams:
    """Fixed childcare arrangement and the sweep bounds."""
    user_income: float
    daily_fee: float
    hours_per_day: float
    days_per_week: int
    care_type: CareType
    age_group: AgeGroup
    income_min: float = DEFAULT_INCOME_MIN
    income_max: float = DEFAULT_INCOME_MAX
    increment: float = DEFAULT_INCOME_INCREMENT
    weeks_per_year: int = DEFAULT_WEEKS_PER_YEAR


@dataclass(frozen=True)
class SensitivityRow:
    """Subsidy and cost at one swept income."""
    income: float
    subsidy_percent: float
    weekly_out_of_pocket: float
    annual_out_of_pocket: float
    annual_subsidy: float


@dataclass(frozen=True)
class MarginalRange:
    """One income step and the change in annual out-of-pocket cost across it."""
    income_from: float
    income_to: float
    cost_increase: float


@dataclass(frozen=True)
class IncomeSensitivityResult:
    """
    Income sweep results.

    Attributes:
        rows: One row per swept income, ascending
        user_row_index: Index of the row nearest the family's income
        zero_subsidy_income: Lowest swept income with 0% subsidy, or None
        highest_marginal_range: Step with the largest cost increase
        lowest_marginal_range: Step with the smallest positive cost increase
    """
    rows: List[SensitivityRow]
    user_row_index: int
    zero_subsidy_income: Optional[float]
    highest_marginal_range: Optional[MarginalRange]
    lowest_marginal_range: Optional[MarginalRange]

    @property
    def user_row(self) -> SensitivityRow:
        return self.rows[self.user_row_index]

    def to_dataframe(self) -> pd.DataFrame:
        """Convert rows to a DataFrame with the per-step cost increase."""
        df = pd.DataFrame([
            {
                "income": r.income,
                "subsidy_percent": r.subsidy_percent,
                "weekly_out_of_pocket": r.weekly_out_of_pocket,
                "annual_out_of_pocket": r.annual_out_of_pocket,
                "annual_subsidy": r.annual_subsidy,
            }
            for r in self.rows
        ])
        df["cost_increase"] = df["annual_out_of_pocket"].diff().round(2)
        df["is_user_row"] = df.index == self.user_row_index
        return df


def sweep_incomes(income_min: float, income_max: float, increment: float) -> np.ndarray:
    """
    Incomes from income_min to income_max inclusive, in fixed steps.

    Raises:
        InvalidArgumentError: If increment <= 0 or income_min > income_max
    """
    if increment <= 0:
        raise InvalidArgumentError(f"increment must be positive, got {increment}")
    if income_min > income_max:
        raise InvalidArgumentError(f"income_min {income_min} is above income_max {income_max}")

    # Tolerance keeps income_max on the grid when the division is inexact (0.3 / 0.1)
    steps = int(np.floor((income_max - income_min) / increment + 1e-9)) + 1
    return np.minimum(income_min + increment * np.arange(steps), income_max)


def _marginal_ranges(rows: List[SensitivityRow]):
    highest = None
    lowest = None

    for previous, row in zip(rows, rows[1:]):
        # Once the subsidy has hit zero the cost no longer moves with income
        if previous.subsidy_percent <= 0:
            continue

        increase = round_cents(row.annual_out_of_pocket - previous.annual_out_of_pocket)
        step = MarginalRange(income_from=previous.income, income_to=row.income, cost_increase=increase)

        if highest is None or increase > highest.cost_increase:
            highest = step
        if increase > 0 and (lowest is None or increase < lowest.cost_increase):
            lowest = step

    return highest, lowest


def calculate_income_sensitivity(params: SensitivityParams, ccs_rates: CCSRates) -> IncomeSensitivityResult:
    """
    Sweep combined income and summarise how the family's costs respond.

    Args:
        params: Childcare arrangement, the family's income and sweep bounds
        ccs_rates: CCS parameters

    Returns:
        IncomeSensitivityResult

    Raises:
        InvalidArgumentError: On invalid sweep bounds, hours, fee or days
        ConfigurationError: If no rate cap covers the care type and age group
    """
    incomes = sweep_incomes(params.income_min, params.income_max, params.increment)

    rows = []
    zero_income = None
    user_index = 0
    nearest = float("inf")

    for i, value in enumerate(incomes):
        income = float(value)
        percent = calculate_subsidy_percentage(income, ccs_rates).percent
        session = calculate_session_subsidy(
            params.daily_fee, params.hours_per_day, percent, params.care_type, params.age_group, ccs_rates
        )
        annual = calculate_annual_cost(
            session, params.days_per_week, ccs_rates.withholding_percent, params.weeks_per_year
        )

        rows.append(SensitivityRow(
            income=income,
            subsidy_percent=percent,
            weekly_out_of_pocket=annual.out_of_pocket_per_week,
            annual_out_of_pocket=annual.out_of_pocket_per_year,
            annual_subsidy=annual.subsidy_per_year,
        ))

        if percent == 0 and zero_income is None:
            zero_income = income

        distance = abs(income - params.user_income)
        if distance < nearest:
            nearest = distance
            user_index = i

    highest, lowest = _marginal_ranges(rows)

    logger.debug(
        f"Income sweep: {len(rows)} rows, zero subsidy at "
        f"{'none' if zero_income is None else f'${zero_income:,.0f}'}"
    )

    return IncomeSensitivityResult(
        rows=rows,
        user_row_index=user_index,
        zero_subsidy_income=zero_income,
        highest_marginal_range=highest,
        lowest_marginal_range=lowest,
    )
