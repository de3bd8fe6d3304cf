"""
Child Care Subsidy Module

Core subsidy rules:
- Income taper: maximum percentage at or below the threshold, then one
  reduction step for every income increment *or part thereof* above it
- Higher rate for younger children in multi-child families
- Per-session subsidy limited by the hourly rate cap for the care type
- Fortnightly, weekly and annual totals, with and without withholding
- Annual per-child subsidy cap assessment for higher-income families

Fees above the hourly rate cap are always paid in full by the family,
regardless of subsidy percentage.
"""

import logging
import math
from dataclasses import dataclass

from .errors import ConfigurationError, InvalidArgumentError
from .money import round_cents
from .rates import AgeGroup, CareType, CCSRates

logger = logging.getLogger(__name__)

MAX_DAYS_PER_WEEK = 5
DEFAULT_WEEKS_PER_YEAR = 52


# =============================================================================
# SUBSIDY PERCENTAGE
# =============================================================================

@dataclass(frozen=True)
class SubsidyPercentageResult:
    """
    Standard subsidy percentage and how the taper produced it.

    Attributes:
        percent: Subsidy percentage (0 to max_percent)
        income_above_threshold: Combined income above the taper threshold
        brackets_above: Taper increments above threshold (rounded up)
        percent_reduction: Percentage points lost to the taper
    """
    percent: float
    income_above_threshold: float
    brackets_above: int
    percent_reduction: float


@dataclass(frozen=True)
class HigherSubsidyResult:
    """Higher subsidy rate for second and younger children."""
    higher_percent: float
    standard_percent: float
    additional_points: float
    was_capped: bool  # True when standard + additional_points exceeded the cap


def calculate_subsidy_percentage(income: float, rates: CCSRates) -> SubsidyPercentageResult:
    """
    Standard subsidy percentage for a combined family income.

    Crossing into a new increment by a single dollar costs a full
    reduction step: $85,280 gets 89%, not 90%.

    Args:
        income: Combined family income
        rates: CCS parameters

    Returns:
        SubsidyPercentageResult
    """
    standard = rates.standard

    if income <= standard.income_threshold:
        return SubsidyPercentageResult(
            percent=standard.max_percent,
            income_above_threshold=0.0,
            brackets_above=0,
            percent_reduction=0.0,
        )

    income_above = income - standard.income_threshold
    brackets_above = math.ceil(income_above / standard.income_increment)
    reduction = brackets_above * standard.reduction_per_increment
    percent = max(standard.min_percent, standard.max_percent - reduction)

    return SubsidyPercentageResult(
        percent=percent,
        income_above_threshold=round_cents(income_above),
        brackets_above=brackets_above,
        percent_reduction=reduction,
    )


def calculate_higher_subsidy_percentage(standard_percent: float, rates: CCSRates) -> HigherSubsidyResult:
    """
    Higher subsidy percentage: min(cap, standard + additional points).

    Args:
        standard_percent: Standard percentage (the eldest child's rate)
        rates: CCS parameters

    Returns:
        HigherSubsidyResult
    """
    higher = rates.higher
    uncapped = standard_percent + higher.additional_points

    return HigherSubsidyResult(
        higher_percent=min(higher.max_percent, uncapped),
        standard_percent=standard_percent,
        additional_points=higher.additional_points,
        was_capped=uncapped > higher.max_percent,
    )


# =============================================================================
# HOURLY RATE CAPS
# =============================================================================

def get_hourly_rate_cap(care_type: CareType, age_group: AgeGroup, rates: CCSRates) -> float:
    """
    Hourly rate cap for a care type and age group.

    An exact age-group entry wins over an 'all' entry for the same care type.

    Raises:
        ConfigurationError: If no entry covers the combination
    """
    wildcard = None
    for cap in rates.hourly_rate_caps:
        if cap.care_type is not care_type:
            continue
        if cap.age_group is age_group:
            return cap.rate_per_hour
        if cap.age_group is AgeGroup.ALL and wildcard is None:
            wildcard = cap.rate_per_hour

    if wildcard is None:
        raise ConfigurationError(
            f"No hourly rate cap found for care type '{care_type.value}' "
            f"and age group '{age_group.value}'"
        )
    return wildcard


# =============================================================================
# PER-SESSION AND ANNUAL COSTS
# =============================================================================

@dataclass(frozen=True)
class SessionSubsidyResult:
    """
    Subsidy for one day (session) of care.

    Dollar fields are rounded to cents; hourly_rate_cap and subsidy_percent
    are reported as configured.
    """
    daily_fee: float
    hourly_fee: float
    hourly_rate_cap: float
    effective_hourly_rate: float
    fee_above_cap_per_hour: float
    subsidy_per_hour: float
    subsidy_per_session: float
    out_of_pocket_per_session: float
    subsidy_percent: float


@dataclass(frozen=True)
class AnnualCostResult:
    """
    Fortnightly, weekly and annual cost totals for one child.

    out_of_pocket_* figures are the gap fee after year-end reconciliation.
    net_out_of_pocket_* figures add the withheld subsidy, which is what a
    family actually pays during the year.
    """
    # Fortnight
    gross_fee_per_fortnight: float
    subsidy_per_fortnight: float
    withholding_per_fortnight: float
    out_of_pocket_per_fortnight: float
    net_out_of_pocket_per_fortnight: float

    # Week
    gross_fee_per_week: float
    subsidy_per_week: float
    out_of_pocket_per_week: float
    net_out_of_pocket_per_week: float

    # Year
    gross_fee_per_year: float
    subsidy_per_year: float
    withholding_per_year: float
    out_of_pocket_per_year: float
    net_out_of_pocket_per_year: float


def calculate_session_subsidy(
    daily_fee: float,
    hours_per_day: float,
    subsidy_percent: float,
    care_type: CareType,
    age_group: AgeGroup,
    rates: CCSRates,
) -> SessionSubsidyResult:
    """
    Subsidy and gap fee for one session.

    Args:
        daily_fee: Fee charged for the day
        hours_per_day: Hours of care in the session (must be > 0)
        subsidy_percent: Subsidy percentage to apply (0-100)
        care_type: Care type, for the rate cap
        age_group: Child's age group, for the rate cap
        rates: CCS parameters

    Returns:
        SessionSubsidyResult

    Raises:
        InvalidArgumentError: If hours_per_day <= 0 or daily_fee < 0
        ConfigurationError: If no rate cap covers the care type and age group
    """
    if hours_per_day <= 0:
        raise InvalidArgumentError("hours_per_day must be greater than 0")
    if daily_fee < 0:
        raise InvalidArgumentError("daily_fee cannot be negative")

    hourly_fee = daily_fee / hours_per_day
    rate_cap = get_hourly_rate_cap(care_type, age_group, rates)
    effective_rate = min(hourly_fee, rate_cap)
    above_cap = max(0.0, hourly_fee - rate_cap)

    subsidy_per_hour = effective_rate * (subsidy_percent / 100)
    subsidy_per_session = subsidy_per_hour * hours_per_day
    out_of_pocket = daily_fee - subsidy_per_session

    return SessionSubsidyResult(
        daily_fee=round_cents(daily_fee),
        hourly_fee=round_cents(hourly_fee),
        hourly_rate_cap=rate_cap,
        effective_hourly_rate=round_cents(effective_rate),
        fee_above_cap_per_hour=round_cents(above_cap),
        subsidy_per_hour=round_cents(subsidy_per_hour),
        subsidy_per_session=round_cents(subsidy_per_session),
        out_of_pocket_per_session=round_cents(out_of_pocket),
        subsidy_percent=subsidy_percent,
    )


def calculate_annual_cost(
    session: SessionSubsidyResult,
    days_per_week: int,
    withholding_percent: float = 5.0,
    weeks_per_year: int = DEFAULT_WEEKS_PER_YEAR,
) -> AnnualCostResult:
    """
    Scale a session result to fortnight, week and year.

    Withholding is a percentage of the subsidy (not the fee). It is added
    to the gap fee for the during-year figures and refunded at
    reconciliation.

    Args:
        session: Per-session result (already rounded to cents)
        days_per_week: Care days per week, 1 to 5
        withholding_percent: Percentage of subsidy withheld each fortnight
        weeks_per_year: Weeks of care per year

    Returns:
        AnnualCostResult

    Raises:
        InvalidArgumentError: If days_per_week is outside 1-5
    """
    if days_per_week < 1 or days_per_week > MAX_DAYS_PER_WEEK:
        raise InvalidArgumentError(f"days_per_week must be between 1 and {MAX_DAYS_PER_WEEK}")

    withholding_rate = withholding_percent / 100
    fee = session.daily_fee
    subsidy = session.subsidy_per_session

    sessions_per_fortnight = days_per_week * 2
    fortnight_fee = fee * sessions_per_fortnight
    fortnight_subsidy = subsidy * sessions_per_fortnight
    fortnight_withholding = fortnight_subsidy * withholding_rate
    fortnight_gap = fortnight_fee - fortnight_subsidy

    week_fee = fee * days_per_week
    week_subsidy = subsidy * days_per_week
    week_gap = week_fee - week_subsidy

    year_fee = fee * days_per_week * weeks_per_year
    year_subsidy = subsidy * days_per_week * weeks_per_year
    year_withholding = year_subsidy * withholding_rate
    year_gap = year_fee - year_subsidy

    return AnnualCostResult(
        gross_fee_per_fortnight=round_cents(fortnight_fee),
        subsidy_per_fortnight=round_cents(fortnight_subsidy),
        withholding_per_fortnight=round_cents(fortnight_withholding),
        out_of_pocket_per_fortnight=round_cents(fortnight_gap),
        net_out_of_pocket_per_fortnight=round_cents(fortnight_gap + fortnight_withholding),
        gross_fee_per_week=round_cents(week_fee),
        subsidy_per_week=round_cents(week_subsidy),
        out_of_pocket_per_week=round_cents(week_gap),
        net_out_of_pocket_per_week=round_cents(week_gap + fortnight_withholding / 2),
        gross_fee_per_year=round_cents(year_fee),
        subsidy_per_year=round_cents(year_subsidy),
        withholding_per_year=round_cents(year_withholding),
        out_of_pocket_per_year=round_cents(year_gap),
        net_out_of_pocket_per_year=round_cents(year_gap + year_withholding),
    )


# =============================================================================
# ANNUAL SUBSIDY CAP
# =============================================================================

@dataclass(frozen=True)
class AnnualCapAssessment:
    """
    Whether the per-child annual subsidy cap binds for one child.

    Reported alongside the annual figures; the headline totals are not
    reduced by it.
    """
    applies: bool  # Combined income above the cap's income threshold
    cap_per_child: float
    uncapped_subsidy: float
    capped_subsidy: float
    excess_subsidy: float  # Subsidy above the cap, paid by the family instead

    @property
    def is_binding(self) -> bool:
        return self.excess_subsidy > 0


def assess_annual_subsidy_cap(
    annual: AnnualCostResult,
    combined_income: float,
    rates: CCSRates,
) -> AnnualCapAssessment:
    """
    Compare one child's annual subsidy with the per-child annual cap.

    Args:
        annual: Annual cost result for the child
        combined_income: Combined family income
        rates: CCS parameters

    Returns:
        AnnualCapAssessment
    """
    cap = rates.annual_cap
    subsidy = annual.subsidy_per_year
    applies = combined_income > cap.income_threshold

    if not applies:
        return AnnualCapAssessment(
            applies=False,
            cap_per_child=cap.cap_per_child,
            uncapped_subsidy=subsidy,
            capped_subsidy=subsidy,
            excess_subsidy=0.0,
        )

    excess = round_cents(max(0.0, subsidy - cap.cap_per_child))
    if excess > 0:
        logger.debug(f"Annual cap ${cap.cap_per_child:,.0f} binds: ${excess:,.2f} above cap")

    return AnnualCapAssessment(
        applies=True,
        cap_per_child=cap.cap_per_child,
        uncapped_subsidy=subsidy,
        capped_subsidy=round_cents(min(subsidy, cap.cap_per_child)),
        excess_subsidy=excess,
    )
