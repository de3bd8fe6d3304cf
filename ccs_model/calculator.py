"""
Calculation Orchestrator

Runs the full pipeline for one family, in order:
1. Resolve inputs against the regional fee table
2. Standard subsidy percentage from combined income
3. Higher rate when the family is eligible
4. Session and annual costs for the youngest child (higher rate when eligible)
5. Companion session and annual costs at the standard rate for the eldest child
6. Combined totals across all children
7. Back-to-work comparison, when requested
8. Income sensitivity sweep

Each step receives the rate configuration explicitly; nothing is read from
module-level state, so one configuration can serve any number of callers.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .back_to_work import BackToWorkParams, BackToWorkResult, calculate_back_to_work
from .inputs import RawInputs, ResolvedInputs, resolve_inputs
from .money import round_cents
from .rates import RateConfiguration, RegionalFeeTable
from .sensitivity import IncomeSensitivityResult, SensitivityParams, calculate_income_sensitivity
from .subsidy import (
    DEFAULT_WEEKS_PER_YEAR,
    AnnualCapAssessment,
    AnnualCostResult,
    HigherSubsidyResult,
    SessionSubsidyResult,
    SubsidyPercentageResult,
    assess_annual_subsidy_cap,
    calculate_annual_cost,
    calculate_higher_subsidy_percentage,
    calculate_session_subsidy,
    calculate_subsidy_percentage,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CombinedTotals:
    """
    Totals across every child in care.

    With the higher rate, the youngest child is costed at the higher
    percentage and each other child at the standard percentage.
    """
    weekly_out_of_pocket: float
    annual_out_of_pocket: float  # After reconciliation
    annual_subsidy: float
    annual_net_out_of_pocket: float  # Paid during the year, including withholding


@dataclass(frozen=True)
class CalculationResult:
    """
    Everything calculated for one family.

    Attributes:
        resolved: Concrete inputs used
        rates_version: Financial year of the rate configuration
        withholding_percent: Percentage of subsidy withheld each fortnight
        three_day_guarantee_hours: Minimum subsidised hours per fortnight, when set
        subsidy_percentage: Standard subsidy percentage breakdown
        higher_subsidy: Higher-rate result, when eligible
        session: Per-session result for the youngest child
        annual: Annual costs for the youngest child
        eldest_child_session: Per-session result at the standard rate, when the higher rate applies
        eldest_child_annual: Annual costs at the standard rate, when the higher rate applies
        annual_cap: Per-child annual cap assessment for the youngest child
        eldest_child_annual_cap: Annual cap assessment at the standard rate
        totals: Combined totals across all children
        back_to_work: Back-to-work comparison, when requested
        sensitivity: Income sweep
    """
    resolved: ResolvedInputs
    rates_version: str
    withholding_percent: float
    three_day_guarantee_hours: Optional[float]
    subsidy_percentage: SubsidyPercentageResult
    higher_subsidy: Optional[HigherSubsidyResult]
    session: SessionSubsidyResult
    annual: AnnualCostResult
    eldest_child_session: Optional[SessionSubsidyResult]
    eldest_child_annual: Optional[AnnualCostResult]
    annual_cap: AnnualCapAssessment
    eldest_child_annual_cap: Optional[AnnualCapAssessment]
    totals: CombinedTotals
    back_to_work: Optional[BackToWorkResult]
    sensitivity: IncomeSensitivityResult

    @property
    def primary_percent(self) -> float:
        """Subsidy percentage applied to the youngest child."""
        if self.higher_subsidy is not None:
            return self.higher_subsidy.higher_percent
        return self.subsidy_percentage.percent


def combine_totals(
    annual: AnnualCostResult,
    eldest_annual: Optional[AnnualCostResult],
    children: int,
) -> CombinedTotals:
    """
    Family totals: primary + (children - 1) x eldest when the higher rate
    applies, otherwise the primary child's figures alone.
    """
    if eldest_annual is None:
        return CombinedTotals(
            weekly_out_of_pocket=annual.out_of_pocket_per_week,
            annual_out_of_pocket=annual.out_of_pocket_per_year,
            annual_subsidy=annual.subsidy_per_year,
            annual_net_out_of_pocket=annual.net_out_of_pocket_per_year,
        )

    others = children - 1
    return CombinedTotals(
        weekly_out_of_pocket=round_cents(
            annual.out_of_pocket_per_week + eldest_annual.out_of_pocket_per_week * others
        ),
        annual_out_of_pocket=round_cents(
            annual.out_of_pocket_per_year + eldest_annual.out_of_pocket_per_year * others
        ),
        annual_subsidy=round_cents(
            annual.subsidy_per_year + eldest_annual.subsidy_per_year * others
        ),
        annual_net_out_of_pocket=round_cents(
            annual.net_out_of_pocket_per_year + eldest_annual.net_out_of_pocket_per_year * others
        ),
    )


def run_calculations(
    raw: RawInputs,
    config: RateConfiguration,
    regional_fees: RegionalFeeTable,
    weeks_per_year: int = DEFAULT_WEEKS_PER_YEAR,
) -> CalculationResult:
    """
    Run every calculation for one family.

    Args:
        raw: Family selections
        config: Subsidy and tax rates
        regional_fees: Average daily fees by state and care type
        weeks_per_year: Weeks of care per year for the annual figures

    Returns:
        CalculationResult

    Raises:
        ConfigurationError: If a rate cap or regional average is missing
        InvalidArgumentError: If a resolved value is outside its domain
    """
    ccs = config.ccs
    resolved = resolve_inputs(raw, regional_fees)
    logger.debug(
        f"Resolved inputs: income ${resolved.combined_income:,.0f}, "
        f"{resolved.care_type.value} in {resolved.state.value}, "
        f"${resolved.daily_fee:,.2f}/day x {resolved.days_per_week} days, {resolved.hours_per_day}h"
    )

    percentage = calculate_subsidy_percentage(resolved.combined_income, ccs)
    higher = None
    if resolved.eligible_for_higher_rate:
        higher = calculate_higher_subsidy_percentage(percentage.percent, ccs)
    primary_percent = higher.higher_percent if higher is not None else percentage.percent
    logger.debug(f"Subsidy percentage: standard {percentage.percent}%, applied {primary_percent}%")

    session = calculate_session_subsidy(
        resolved.daily_fee, resolved.hours_per_day, primary_percent,
        resolved.care_type, resolved.age_group, ccs,
    )
    annual = calculate_annual_cost(session, resolved.days_per_week, ccs.withholding_percent, weeks_per_year)
    annual_cap = assess_annual_subsidy_cap(annual, resolved.combined_income, ccs)

    eldest_session = None
    eldest_annual = None
    eldest_cap = None
    if higher is not None:
        eldest_session = calculate_session_subsidy(
            resolved.daily_fee, resolved.hours_per_day, percentage.percent,
            resolved.care_type, resolved.age_group, ccs,
        )
        eldest_annual = calculate_annual_cost(
            eldest_session, resolved.days_per_week, ccs.withholding_percent, weeks_per_year
        )
        eldest_cap = assess_annual_subsidy_cap(eldest_annual, resolved.combined_income, ccs)

    totals = combine_totals(annual, eldest_annual, resolved.children)
    logger.debug(f"Combined totals for {resolved.children} children: {totals}")

    back_to_work = None
    if resolved.back_to_work is not None:
        details = resolved.back_to_work
        back_to_work = calculate_back_to_work(
            BackToWorkParams(
                combined_income=resolved.combined_income,
                current_income=details.current_income,
                partner_income=resolved.partner_income,
                proposed_fte_income=details.proposed_income,
                work_costs_per_week=details.work_costs_per_week,
                current_days_in_care=resolved.days_per_week,
                daily_fee=resolved.daily_fee,
                hours_per_day=resolved.hours_per_day,
                care_type=resolved.care_type,
                age_group=resolved.age_group,
            ),
            ccs,
            config.tax,
        )

    sensitivity = calculate_income_sensitivity(
        SensitivityParams(
            user_income=resolved.combined_income,
            daily_fee=resolved.daily_fee,
            hours_per_day=resolved.hours_per_day,
            days_per_week=resolved.days_per_week,
            care_type=resolved.care_type,
            age_group=resolved.age_group,
            weeks_per_year=weeks_per_year,
        ),
        ccs,
    )

    logger.info(
        f"CCS {config.version}: {primary_percent}% subsidy, "
        f"${totals.annual_out_of_pocket:,.2f}/year out of pocket for {resolved.children} "
        f"{'child' if resolved.children == 1 else 'children'}"
    )

    return CalculationResult(
        resolved=resolved,
        rates_version=config.version,
        withholding_percent=ccs.withholding_percent,
        three_day_guarantee_hours=ccs.three_day_guarantee_hours,
        subsidy_percentage=percentage,
        higher_subsidy=higher,
        session=session,
        annual=annual,
        eldest_child_session=eldest_session,
        eldest_child_annual=eldest_annual,
        annual_cap=annual_cap,
        eldest_child_annual_cap=eldest_cap,
        totals=totals,
        back_to_work=back_to_work,
        sensitivity=sensitivity,
    )
