"""
Back-to-Work Module

Compares a parent's current situation with working 1 to 5 days a week at
a proportion of a full-time-equivalent (FTE) salary.

For each scenario:
- Gross income = days/5 x FTE salary
- Family income (and so the subsidy percentage) rises with it
- Care days needed = max(current care days, working days)
- Work-related costs scale with working days

Net benefit = extra take-home pay - extra childcare gap fees - work costs.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

import pandas as pd

from .money import round_cents
from .rates import AgeGroup, CareType, CCSRates, TaxRates
from .subsidy import (
    AnnualCostResult,
    SessionSubsidyResult,
    calculate_annual_cost,
    calculate_session_subsidy,
    calculate_subsidy_percentage,
)
from .tax import IncomeTaxResult, calculate_income_tax

logger = logging.getLogger(__name__)

WORK_HOURS_PER_DAY = 8
WEEKS_PER_YEAR = 52
MAX_WORKING_DAYS = 5
BREAK_EVEN_SEARCH_CEILING = 1_000_000


@dataclass(frozen=True)
class BackToWorkParams:
    """
    Inputs for the back-to-work comparison.

    Attributes:
        combined_income: Current combined family income
        current_income: Returning parent's current individual income
        partner_income: Income of the other parent, held fixed across scenarios
        proposed_fte_income: Full-time-equivalent salary on offer
        work_costs_per_week: Work-related costs at five days a week
        current_days_in_care: Care days used today (clamped to 1-5)
        daily_fee: Daily childcare fee
        hours_per_day: Hours per care session
        care_type: Type of care
        age_group: Rate-cap age group of the child
        work_hours_per_day: Hours worked per working day
    """
    combined_income: float
    current_income: float
    partner_income: float
    proposed_fte_income: float
    work_costs_per_week: float
    current_days_in_care: int
    daily_fee: float
    hours_per_day: float
    care_type: CareType
    age_group: AgeGroup
    work_hours_per_day: float = WORK_HOURS_PER_DAY


@dataclass(frozen=True)
class CurrentSituation:
    """Baseline: the family as it is today."""
    gross_income: float
    tax: IncomeTaxResult
    net_income: float
    combined_income: float
    subsidy_percent: float
    care_days: int
    annual_childcare_cost: float


@dataclass(frozen=True)
class BackToWorkScenario:
    """One working-days option."""
    days_working: int
    gross_income: float
    tax: IncomeTaxResult
    net_income: float
    combined_income: float
    subsidy_percent: float
    care_days: int
    session: SessionSubsidyResult
    annual_childcare: AnnualCostResult
    annual_work_costs: float
    net_benefit: float
    effective_hourly_rate: Optional[float]  # None when no hours are worked
    is_worth_it: bool


@dataclass(frozen=True)
class BackToWorkResult:
    """Baseline, five scenarios and the best option."""
    current: CurrentSituation
    scenarios: List[BackToWorkScenario]
    best_scenario: Optional[BackToWorkScenario]
    break_even_fte_income: Optional[float]

    def to_dataframe(self) -> pd.DataFrame:
        """Convert scenarios to a pandas DataFrame for display."""
        rows = []
        for s in self.scenarios:
            rows.append({
                "days_working": s.days_working,
                "gross_income": s.gross_income,
                "total_tax": s.tax.total_tax,
                "net_income": s.net_income,
                "combined_income": s.combined_income,
                "subsidy_percent": s.subsidy_percent,
                "care_days": s.care_days,
                "annual_childcare_cost": s.annual_childcare.out_of_pocket_per_year,
                "annual_work_costs": s.annual_work_costs,
                "net_benefit": s.net_benefit,
                "effective_hourly_rate": s.effective_hourly_rate,
                "is_worth_it": s.is_worth_it,
            })
        return pd.DataFrame(rows)


def _current_situation(params: BackToWorkParams, ccs_rates: CCSRates, tax_rates: TaxRates) -> CurrentSituation:
    care_days = max(1, min(MAX_WORKING_DAYS, params.current_days_in_care))
    tax = calculate_income_tax(params.current_income, tax_rates)
    percent = calculate_subsidy_percentage(params.combined_income, ccs_rates).percent
    session = calculate_session_subsidy(
        params.daily_fee, params.hours_per_day, percent, params.care_type, params.age_group, ccs_rates
    )
    annual = calculate_annual_cost(session, care_days, ccs_rates.withholding_percent, WEEKS_PER_YEAR)

    return CurrentSituation(
        gross_income=round_cents(params.current_income),
        tax=tax,
        net_income=tax.net_income,
        combined_income=round_cents(params.combined_income),
        subsidy_percent=percent,
        care_days=care_days,
        annual_childcare_cost=annual.out_of_pocket_per_year,
    )


def _build_scenario(
    days: int,
    fte_income: float,
    params: BackToWorkParams,
    current: CurrentSituation,
    ccs_rates: CCSRates,
    tax_rates: TaxRates,
) -> BackToWorkScenario:
    gross_income = round_cents(days / MAX_WORKING_DAYS * fte_income)
    combined_income = round_cents(params.partner_income + gross_income)
    tax = calculate_income_tax(gross_income, tax_rates)
    percent = calculate_subsidy_percentage(combined_income, ccs_rates).percent

    care_days = max(current.care_days, days)
    session = calculate_session_subsidy(
        params.daily_fee, params.hours_per_day, percent, params.care_type, params.age_group, ccs_rates
    )
    annual = calculate_annual_cost(session, care_days, ccs_rates.withholding_percent, WEEKS_PER_YEAR)
    work_costs = round_cents(params.work_costs_per_week * (days / MAX_WORKING_DAYS) * WEEKS_PER_YEAR)

    extra_net_income = tax.net_income - current.net_income
    extra_childcare = annual.out_of_pocket_per_year - current.annual_childcare_cost
    net_benefit = round_cents(extra_net_income - extra_childcare - work_costs)

    hours_worked = days * params.work_hours_per_day * WEEKS_PER_YEAR
    hourly = round_cents(net_benefit / hours_worked) if hours_worked > 0 else None

    return BackToWorkScenario(
        days_working=days,
        gross_income=gross_income,
        tax=tax,
        net_income=tax.net_income,
        combined_income=combined_income,
        subsidy_percent=percent,
        care_days=care_days,
        session=session,
        annual_childcare=annual,
        annual_work_costs=work_costs,
        net_benefit=net_benefit,
        effective_hourly_rate=hourly,
        is_worth_it=net_benefit > 0,
    )


def _build_scenarios(
    fte_income: float,
    params: BackToWorkParams,
    current: CurrentSituation,
    ccs_rates: CCSRates,
    tax_rates: TaxRates,
) -> List[BackToWorkScenario]:
    return [
        _build_scenario(days, fte_income, params, current, ccs_rates, tax_rates)
        for days in range(1, MAX_WORKING_DAYS + 1)
    ]


def select_best_scenario(scenarios: List[BackToWorkScenario]) -> Optional[BackToWorkScenario]:
    """
    Highest net benefit among scenarios with a positive net benefit.

    Ties keep the earliest (fewest working days) scenario.
    """
    best = None
    for scenario in scenarios:
        if scenario.net_benefit <= 0:
            continue
        if best is None or scenario.net_benefit > best.net_benefit:
            best = scenario
    return best


def taper_step_salaries(params: BackToWorkParams, ccs_rates: CCSRates, ceiling: float) -> List[int]:
    """
    Whole-dollar FTE salaries at which some scenario's subsidy percentage can change.

    Between two consecutive salaries in the returned list every scenario
    keeps the same subsidy percentage, so each scenario's net benefit only
    rises with salary there. Across a step it can fall by a full point
    of subsidy.

    Returns:
        Sorted salaries, starting at 0 and ending at ceiling
    """
    standard = ccs_rates.standard
    steps = 0
    if standard.reduction_per_increment > 0:
        steps = math.ceil((standard.max_percent - standard.min_percent) / standard.reduction_per_increment)

    salaries = {0, int(ceiling)}
    for days in range(1, MAX_WORKING_DAYS + 1):
        for k in range(steps + 1):
            boundary = standard.income_threshold + k * standard.income_increment
            salary = (boundary - params.partner_income) * MAX_WORKING_DAYS / days
            if 0 < salary < ceiling:
                salaries.add(int(math.floor(salary)))
    return sorted(salaries)


def find_break_even_fte_income(
    params: BackToWorkParams,
    ccs_rates: CCSRates,
    tax_rates: TaxRates,
    ceiling: float = BREAK_EVEN_SEARCH_CEILING,
) -> Optional[float]:
    """
    Lowest whole-dollar FTE salary at which any scenario has a positive net benefit.

    Net benefit is not monotonic in salary: each taper step the family
    income crosses costs a subsidy point, which can turn a worthwhile
    salary into a losing one a few dollars higher. The search walks the
    salary bands between taper steps in ascending order and bisects
    inside the first band whose top salary is worth it.

    Returns:
        Break-even FTE salary, or None if no salary up to ceiling is worth it
    """
    current = _current_situation(params, ccs_rates, tax_rates)

    def worth_it(fte_income: float) -> bool:
        scenarios = _build_scenarios(fte_income, params, current, ccs_rates, tax_rates)
        return select_best_scenario(scenarios) is not None

    if worth_it(0):
        return 0.0

    salaries = taper_step_salaries(params, ccs_rates, ceiling)
    for low, high in zip(salaries, salaries[1:]):
        # low is known not to be worth it
        if not worth_it(high):
            continue
        while high - low > 1:
            mid = (low + high) // 2
            if worth_it(mid):
                high = mid
            else:
                low = mid
        return float(high)
    return None


def calculate_back_to_work(
    params: BackToWorkParams,
    ccs_rates: CCSRates,
    tax_rates: TaxRates,
) -> BackToWorkResult:
    """
    Compare the current situation with working 1-5 days a week.

    Args:
        params: Family, salary and childcare details
        ccs_rates: CCS parameters
        tax_rates: Tax parameters

    Returns:
        BackToWorkResult with exactly five scenarios

    Raises:
        InvalidArgumentError: If hours_per_day <= 0 or daily_fee < 0
        ConfigurationError: If no rate cap covers the care type and age group
    """
    current = _current_situation(params, ccs_rates, tax_rates)
    scenarios = _build_scenarios(params.proposed_fte_income, params, current, ccs_rates, tax_rates)
    best = select_best_scenario(scenarios)
    break_even = find_break_even_fte_income(params, ccs_rates, tax_rates)

    if best is not None:
        logger.debug(f"Best back-to-work option: {best.days_working} days, net ${best.net_benefit:,.2f}")
    else:
        logger.debug("No back-to-work scenario has a positive net benefit")

    return BackToWorkResult(
        current=current,
        scenarios=scenarios,
        best_scenario=best,
        break_even_fte_income=break_even,
    )
