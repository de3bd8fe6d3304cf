"""
Input Resolution Module

Turns a family's selections (RawInputs) into fully concrete values
(ResolvedInputs) that every calculator consumes:
- Income: an exact figure, or the midpoint of a selected income range
- Daily fee: the provider's fee, or the state/territory average
- Hours per day: entered hours, or the default for the care type
- Rate-cap age group and higher-rate eligibility from the youngest child's age
- Partner income = combined income - the returning parent's current income

Income and fee are tagged variants so the precedence rules are applied
once, when the variant is built, rather than re-checked downstream.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

from .errors import InvalidArgumentError
from .rates import AgeGroup, CareType, RegionalFeeTable, State

logger = logging.getLogger(__name__)


class IncomeRange(Enum):
    """Combined income ranges offered when a family doesn't enter an exact figure."""
    UNDER_85279 = "under_85279"
    FROM_85280_TO_120000 = "85280_120000"
    FROM_120001_TO_160000 = "120001_160000"
    FROM_160001_TO_220000 = "160001_220000"
    FROM_220001_TO_350000 = "220001_350000"
    OVER_350000 = "over_350000"


class ChildAge(Enum):
    """Age bracket of the youngest child in care."""
    UNDER_6 = "under_6"
    SIX_TO_13 = "6_to_13"


INCOME_RANGE_MIDPOINTS = {
    IncomeRange.UNDER_85279: 60_000.0,
    IncomeRange.FROM_85280_TO_120000: 102_640.0,
    IncomeRange.FROM_120001_TO_160000: 140_000.0,
    IncomeRange.FROM_160001_TO_220000: 190_000.0,
    IncomeRange.FROM_220001_TO_350000: 285_000.0,
    IncomeRange.OVER_350000: 400_000.0,  # Well above the zero-subsidy income
}

INCOME_RANGE_LABELS = {
    IncomeRange.UNDER_85279: "Under $85,279",
    IncomeRange.FROM_85280_TO_120000: "$85,280 - $120,000",
    IncomeRange.FROM_120001_TO_160000: "$120,001 - $160,000",
    IncomeRange.FROM_160001_TO_220000: "$160,001 - $220,000",
    IncomeRange.FROM_220001_TO_350000: "$220,001 - $350,000",
    IncomeRange.OVER_350000: "Over $350,000",
}

DEFAULT_HOURS_PER_DAY = {
    CareType.CENTRE_BASED_DAY_CARE: 10.0,
    CareType.FAMILY_DAY_CARE: 9.0,
    CareType.OUTSIDE_SCHOOL_HOURS: 4.0,
    CareType.IN_HOME_CARE: 10.0,
}


# =============================================================================
# TAGGED INPUT VARIANTS
# =============================================================================

@dataclass(frozen=True)
class ExactIncome:
    """A combined family income entered as a number."""
    amount: float

    def __post_init__(self):
        if self.amount < 0:
            raise InvalidArgumentError(f"Exact income cannot be negative: {self.amount}")


@dataclass(frozen=True)
class IncomeBracket:
    """A combined family income given as a range; resolves to its midpoint."""
    income_range: IncomeRange


@dataclass(frozen=True)
class ExactFee:
    """The provider's daily fee."""
    amount: float

    def __post_init__(self):
        if self.amount < 0:
            raise InvalidArgumentError(f"Daily fee cannot be negative: {self.amount}")


@dataclass(frozen=True)
class RegionalAverageFee:
    """
    Price care at the state/territory average.

    entered_fee is kept for care types with no regional average (in-home
    care), which fall back to whatever the family entered.
    """
    entered_fee: Optional[float] = None


IncomeInput = Union[ExactIncome, IncomeBracket]
FeeInput = Union[ExactFee, RegionalAverageFee]


def income_from_form(exact_income: Optional[float], income_range: Optional[IncomeRange]) -> IncomeInput:
    """
    Choose the authoritative income representation.

    A non-negative exact income always wins; otherwise the range is used.

    Raises:
        InvalidArgumentError: If neither a usable exact income nor a range is given
    """
    if exact_income is not None and exact_income >= 0:
        return ExactIncome(float(exact_income))
    if income_range is None:
        raise InvalidArgumentError("Either a non-negative income or an income range is required")
    return IncomeBracket(income_range)


def fee_from_form(fee_per_day: Optional[float], use_average: bool) -> FeeInput:
    """
    Choose between the entered fee and the regional average.

    The entered fee wins unless use_average is set or the fee is absent
    or not positive.
    """
    if not use_average and fee_per_day is not None and fee_per_day > 0:
        return ExactFee(float(fee_per_day))
    return RegionalAverageFee(entered_fee=fee_per_day)


# =============================================================================
# RAW AND RESOLVED INPUTS
# =============================================================================

@dataclass(frozen=True)
class BackToWorkInputs:
    """Optional return-to-work details for the parent considering more work."""
    current_income: float = 0.0  # Returning parent's current individual income
    proposed_income: float = 0.0  # Full-time-equivalent salary on offer
    work_costs_per_week: float = 0.0  # Transport, meals, uniforms at 5 days/week


@dataclass(frozen=True)
class RawInputs:
    """
    A family's selections, as entered.

    Attributes:
        children: Number of children in approved care
        youngest_age: Age bracket of the youngest child
        income: Exact combined income or an income range
        care_type: Type of care
        state: State or territory (for regional average fees)
        days_per_week: Care days per week (1-5)
        hours_per_day: Hours per session; None uses the care-type default
        fee: Entered daily fee or the regional average
        back_to_work: Return-to-work details, when that analysis is wanted
    """
    children: int
    youngest_age: ChildAge
    income: IncomeInput
    care_type: CareType
    state: State
    days_per_week: int
    hours_per_day: Optional[float] = None
    fee: FeeInput = RegionalAverageFee()
    back_to_work: Optional[BackToWorkInputs] = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "RawInputs":
        """
        Decode loosely typed form or query-string values.

        Blank strings count as absent, negative numbers are clamped to zero
        (a negative income falls back to the income range), days per week
        is clamped into 1-5 and the child count to at least 1.

        Expected keys: children, youngest_age, income, income_range,
        care_type, state, days_per_week, hours_per_day, fee_per_day,
        use_average, back_to_work, current_income, proposed_income,
        work_costs_per_week. All are optional.

        Raises:
            InvalidArgumentError: On an unknown care type, state, age or range code
        """
        children = _parse_number(form.get("children"))
        days = _parse_number(form.get("days_per_week"))

        exact_income = _parse_number(form.get("income"))
        if exact_income is not None and exact_income < 0:
            exact_income = None
        income_range = _parse_enum(IncomeRange, form.get("income_range"), IncomeRange.UNDER_85279)

        back_to_work = None
        if _parse_bool(form.get("back_to_work")):
            back_to_work = BackToWorkInputs(
                current_income=_non_negative(form.get("current_income")),
                proposed_income=_non_negative(form.get("proposed_income")),
                work_costs_per_week=_non_negative(form.get("work_costs_per_week")),
            )

        fee_per_day = _parse_number(form.get("fee_per_day"))
        if fee_per_day is not None:
            fee_per_day = max(0.0, fee_per_day)

        return cls(
            children=max(1, int(children)) if children is not None else 1,
            youngest_age=_parse_enum(ChildAge, form.get("youngest_age"), ChildAge.UNDER_6),
            income=income_from_form(exact_income, income_range),
            care_type=_parse_enum(CareType, form.get("care_type"), CareType.CENTRE_BASED_DAY_CARE),
            state=_parse_enum(State, form.get("state"), State.NSW),
            days_per_week=min(5, max(1, int(days))) if days is not None else 3,
            hours_per_day=_parse_number(form.get("hours_per_day")),
            fee=fee_from_form(fee_per_day, _parse_bool(form.get("use_average"))),
            back_to_work=back_to_work,
        )


@dataclass(frozen=True)
class ResolvedInputs:
    """Concrete inputs with every lookup performed exactly once."""
    children: int
    youngest_age: ChildAge
    age_group: AgeGroup
    eligible_for_higher_rate: bool
    combined_income: float
    care_type: CareType
    state: State
    days_per_week: int
    hours_per_day: float
    daily_fee: float
    uses_regional_average: bool
    partner_income: float
    back_to_work: Optional[BackToWorkInputs] = None

    @property
    def includes_back_to_work(self) -> bool:
        return self.back_to_work is not None


# =============================================================================
# RESOLUTION
# =============================================================================

def resolve_income(income: IncomeInput) -> float:
    """Combined income: the exact figure, or the range midpoint."""
    if isinstance(income, ExactIncome):
        return income.amount
    return INCOME_RANGE_MIDPOINTS[income.income_range]


def resolve_age_group(youngest_age: ChildAge) -> AgeGroup:
    """Rate-cap age group for the youngest child."""
    if youngest_age is ChildAge.UNDER_6:
        return AgeGroup.BELOW_SCHOOL_AGE
    return AgeGroup.SCHOOL_AGE


def resolve_daily_fee(
    fee: FeeInput,
    state: State,
    care_type: CareType,
    regional_fees: RegionalFeeTable,
) -> float:
    """
    Daily fee used in the calculation.

    Raises:
        ConfigurationError: If the regional average is needed but missing
    """
    if isinstance(fee, ExactFee):
        return fee.amount

    if not care_type.has_regional_average:
        amount = fee.entered_fee if fee.entered_fee is not None else 0.0
        if amount == 0:
            logger.warning(f"No daily fee entered for {care_type.value}; pricing care at $0")
        return amount

    return regional_fees.average_daily_fee(state, care_type)


def resolve_hours_per_day(hours_per_day: Optional[float], care_type: CareType) -> float:
    """Entered hours, or the care-type default when absent or not positive."""
    if hours_per_day is not None and hours_per_day > 0:
        return hours_per_day
    return DEFAULT_HOURS_PER_DAY[care_type]


def is_eligible_for_higher_rate(children: int, youngest_age: ChildAge) -> bool:
    """Higher rate needs two or more children and the youngest under 6."""
    return children >= 2 and youngest_age is ChildAge.UNDER_6


def resolve_inputs(raw: RawInputs, regional_fees: RegionalFeeTable) -> ResolvedInputs:
    """
    Resolve a family's selections against the regional fee table.

    Args:
        raw: Family selections
        regional_fees: Average daily fees by state and care type

    Returns:
        ResolvedInputs

    Raises:
        ConfigurationError: If a needed regional average is missing
    """
    combined_income = resolve_income(raw.income)
    current_income = raw.back_to_work.current_income if raw.back_to_work else 0.0

    return ResolvedInputs(
        children=raw.children,
        youngest_age=raw.youngest_age,
        age_group=resolve_age_group(raw.youngest_age),
        eligible_for_higher_rate=is_eligible_for_higher_rate(raw.children, raw.youngest_age),
        combined_income=combined_income,
        care_type=raw.care_type,
        state=raw.state,
        days_per_week=raw.days_per_week,
        hours_per_day=resolve_hours_per_day(raw.hours_per_day, raw.care_type),
        daily_fee=resolve_daily_fee(raw.fee, raw.state, raw.care_type, regional_fees),
        uses_regional_average=isinstance(raw.fee, RegionalAverageFee) and raw.care_type.has_regional_average,
        partner_income=max(0.0, combined_income - current_income),
        back_to_work=raw.back_to_work,
    )


# =============================================================================
# FORM PARSING HELPERS
# =============================================================================

_TRUE_STRINGS = {"1", "true", "yes", "on"}


def _parse_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", "").lstrip("$")
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # NaN and infinities are treated as absent
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def _non_negative(value: Any) -> float:
    number = _parse_number(value)
    return max(0.0, number) if number is not None else 0.0


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_STRINGS


def _parse_enum(enum_cls, value: Any, default):
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip())
    except ValueError:
        raise InvalidArgumentError(f"Unknown {enum_cls.__name__} code: {value!r}") from None
