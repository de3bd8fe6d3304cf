"""
Rate Configuration Module

Versioned, read-only constants used by every calculation:
- Child Care Subsidy (CCS) income taper and higher rate for younger children
- Hourly rate caps by care type and age group
- Annual per-child subsidy cap and fortnightly withholding
- Individual income tax brackets, Medicare levy and Low Income Tax Offset
- Regional (state/territory) average daily fees

Tables are frozen dataclasses built from plain mappings. They are
constructed once per rate version and shared read-only between
calculations; nothing in the engine writes to them.

Sources:
- Services Australia: https://www.servicesaustralia.gov.au/child-care-subsidy
- Department of Education: https://www.education.gov.au/early-childhood/child-care-subsidy
- ATO: https://www.ato.gov.au/tax-rates-and-codes/tax-rates-australian-residents
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class CareType(Enum):
    """Approved childcare service types."""
    CENTRE_BASED_DAY_CARE = "centre_based_day_care"  # CBDC, most common
    FAMILY_DAY_CARE = "family_day_care"  # FDC
    OUTSIDE_SCHOOL_HOURS = "outside_school_hours"  # OSHC, before/after school
    IN_HOME_CARE = "in_home_care"  # IHC, priced per family

    @property
    def has_regional_average(self) -> bool:
        """In-home care is priced per family, so no per-child average exists."""
        return self is not CareType.IN_HOME_CARE


class AgeGroup(Enum):
    """Age groups used to key hourly rate caps."""
    BELOW_SCHOOL_AGE = "below_school_age"
    SCHOOL_AGE = "school_age"
    ALL = "all"  # Wildcard for care types that don't differentiate by age


class State(Enum):
    """Australian states and territories."""
    ACT = "ACT"
    NSW = "NSW"
    NT = "NT"
    QLD = "QLD"
    SA = "SA"
    TAS = "TAS"
    VIC = "VIC"
    WA = "WA"


# =============================================================================
# FY 2025-26 PARAMETERS
# =============================================================================

CCS_RATES_2025_26 = {
    "financial_year": "2025-26",
    "effective_date": "2025-07-01",
    "source": "Services Australia / Department of Education",
    "standard_subsidy": {
        "max_percent": 90,
        "income_threshold": 85_279,  # At or below: maximum rate
        "income_increment": 5_000,
        "reduction_per_increment": 1,  # 1 point per $5,000 (or part) above
        "min_percent": 0,
    },
    "higher_subsidy": {
        # Younger children in multi-child families (from 10 July 2023)
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
        "income_threshold": 85_279,  # Above this, per-child cap applies
        "cap_per_child": 11_003,
    },
    "withholding_percent": 5,  # Held back each fortnight until reconciliation
    "three_day_guarantee": {
        "effective_date": "2026-01-05",
        "min_hours_per_fortnight": 72,
    },
}

# Revised Stage 3 brackets (effective 1 July 2024)
TAX_RATES_2025_26 = {
    "financial_year": "2025-26",
    "source": "Australian Taxation Office",
    "brackets": [
        {"min": 0, "max": 18_200, "base_tax": 0, "rate": 0.0},
        {"min": 18_201, "max": 45_000, "base_tax": 0, "rate": 0.16},
        {"min": 45_001, "max": 135_000, "base_tax": 4_288, "rate": 0.30},
        {"min": 135_001, "max": 190_000, "base_tax": 31_288, "rate": 0.37},
        {"min": 190_001, "max": None, "base_tax": 51_638, "rate": 0.45},
    ],
    "medicare_levy": {
        "rate": 0.02,
        "low_income_threshold": 26_000,
        "phase_in_rate": 0.10,  # 10c per dollar above threshold
        "shade_in_threshold": 32_500,
    },
    "low_income_offset": {
        "max_offset": 700,
        "full_offset_to": 37_500,
        "phase_out_1_rate": 0.05,
        "phase_out_1_to": 45_000,
        "phase_out_2_rate": 0.015,
        "phase_out_2_to": 66_667,
    },
}

# Average daily fee by state ($/day; OSHC is per session)
STATE_AVERAGES_2025_26 = {
    "last_updated": "2025-07-01",
    "source": "Department of Education quarterly data",
    "states": [
        {"state": "ACT", "state_name": "Australian Capital Territory",
         "average_daily_fee": {"centre_based_day_care": 175, "family_day_care": 140, "outside_school_hours": 55}},
        {"state": "NSW", "state_name": "New South Wales",
         "average_daily_fee": {"centre_based_day_care": 158, "family_day_care": 128, "outside_school_hours": 50}},
        {"state": "VIC", "state_name": "Victoria",
         "average_daily_fee": {"centre_based_day_care": 148, "family_day_care": 122, "outside_school_hours": 48}},
        {"state": "QLD", "state_name": "Queensland",
         "average_daily_fee": {"centre_based_day_care": 142, "family_day_care": 118, "outside_school_hours": 45}},
        {"state": "WA", "state_name": "Western Australia",
         "average_daily_fee": {"centre_based_day_care": 135, "family_day_care": 115, "outside_school_hours": 44}},
        {"state": "SA", "state_name": "South Australia",
         "average_daily_fee": {"centre_based_day_care": 130, "family_day_care": 112, "outside_school_hours": 43}},
        {"state": "TAS", "state_name": "Tasmania",
         "average_daily_fee": {"centre_based_day_care": 122, "family_day_care": 108, "outside_school_hours": 40}},
        {"state": "NT", "state_name": "Northern Territory",
         "average_daily_fee": {"centre_based_day_care": 110, "family_day_care": 100, "outside_school_hours": 38}},
    ],
}


# =============================================================================
# PARSING HELPERS
# =============================================================================

def _require(data: Mapping[str, Any], key: str, context: str) -> Any:
    """Fetch a required key, raising ConfigurationError if it is absent."""
    try:
        value = data[key]
    except (KeyError, TypeError):
        raise ConfigurationError(f"Missing required key '{key}' in {context}") from None
    if value is None:
        raise ConfigurationError(f"Required key '{key}' in {context} is null")
    return value


def _number(data: Mapping[str, Any], key: str, context: str) -> float:
    value = _require(data, key, context)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Key '{key}' in {context} is not numeric: {value!r}") from None


def _enum(enum_cls, value: Any, context: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ConfigurationError(f"Unknown {enum_cls.__name__} {value!r} in {context}") from None


# =============================================================================
# CHILD CARE SUBSIDY TABLES
# =============================================================================

@dataclass(frozen=True)
class StandardSubsidyRates:
    """
    Standard CCS income taper.

    Attributes:
        max_percent: Subsidy percentage at or below the income threshold
        income_threshold: Combined income at or below which max_percent applies
        reduction_per_increment: Percentage points lost per income increment
        min_percent: Floor for the tapered percentage
        income_increment: Size of each taper step in dollars
    """
    max_percent: float
    income_threshold: float
    reduction_per_increment: float
    min_percent: float = 0.0
    income_increment: float = 5_000.0


@dataclass(frozen=True)
class HigherSubsidyRates:
    """Boost for younger children: min(max_percent, standard + additional_points)."""
    additional_points: float
    max_percent: float


@dataclass(frozen=True)
class HourlyRateCap:
    """Maximum hourly fee eligible for subsidy for one (care type, age group)."""
    care_type: CareType
    age_group: AgeGroup
    rate_per_hour: float


@dataclass(frozen=True)
class AnnualSubsidyCap:
    """Per-child dollar ceiling on subsidy for families above income_threshold."""
    income_threshold: float
    cap_per_child: float


@dataclass(frozen=True)
class CCSRates:
    """One published version of the Child Care Subsidy parameters."""
    financial_year: str
    effective_date: str
    source: str
    standard: StandardSubsidyRates
    higher: HigherSubsidyRates
    hourly_rate_caps: Tuple[HourlyRateCap, ...]
    annual_cap: AnnualSubsidyCap
    withholding_percent: float
    three_day_guarantee_hours: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CCSRates":
        """Build CCS rates from a mapping shaped like CCS_RATES_2025_26."""
        context = "CCS rates"
        standard = _require(data, "standard_subsidy", context)
        higher = _require(data, "higher_subsidy", context)
        annual_cap = _require(data, "annual_subsidy_cap", context)

        caps = []
        for i, entry in enumerate(_require(data, "hourly_rate_caps", context)):
            cap_context = f"hourly_rate_caps[{i}]"
            caps.append(HourlyRateCap(
                care_type=_enum(CareType, _require(entry, "care_type", cap_context), cap_context),
                age_group=_enum(AgeGroup, _require(entry, "age_group", cap_context), cap_context),
                rate_per_hour=_number(entry, "rate_per_hour", cap_context),
            ))

        guarantee = data.get("three_day_guarantee") or {}
        guarantee_hours = guarantee.get("min_hours_per_fortnight")

        return cls(
            financial_year=str(_require(data, "financial_year", context)),
            effective_date=str(data.get("effective_date", "")),
            source=str(data.get("source", "")),
            standard=StandardSubsidyRates(
                max_percent=_number(standard, "max_percent", "standard_subsidy"),
                income_threshold=_number(standard, "income_threshold", "standard_subsidy"),
                reduction_per_increment=_number(standard, "reduction_per_increment", "standard_subsidy"),
                min_percent=float(standard.get("min_percent", 0)),
                income_increment=float(standard.get("income_increment", 5_000)),
            ),
            higher=HigherSubsidyRates(
                additional_points=_number(higher, "additional_points", "higher_subsidy"),
                max_percent=_number(higher, "max_percent", "higher_subsidy"),
            ),
            hourly_rate_caps=tuple(caps),
            annual_cap=AnnualSubsidyCap(
                income_threshold=_number(annual_cap, "income_threshold", "annual_subsidy_cap"),
                cap_per_child=_number(annual_cap, "cap_per_child", "annual_subsidy_cap"),
            ),
            withholding_percent=_number(data, "withholding_percent", context),
            three_day_guarantee_hours=float(guarantee_hours) if guarantee_hours is not None else None,
        )


# =============================================================================
# INCOME TAX TABLES
# =============================================================================

@dataclass(frozen=True)
class TaxBracket:
    """
    One progressive tax bracket.

    Tax for income in the bracket is base_tax + (income - (min_income - 1)) * rate.
    """
    min_income: float
    max_income: Optional[float]  # None for the open top bracket
    base_tax: float
    rate: float


@dataclass(frozen=True)
class MedicareLevyRates:
    rate: float
    low_income_threshold: float
    phase_in_rate: float
    shade_in_threshold: float


@dataclass(frozen=True)
class LowIncomeOffsetRates:
    """Low Income Tax Offset: full to full_offset_to, then two phase-out bands."""
    max_offset: float
    full_offset_to: float
    phase_out_1_rate: float
    phase_out_1_to: float
    phase_out_2_rate: float
    phase_out_2_to: float


@dataclass(frozen=True)
class TaxRates:
    """One financial year of resident individual income tax parameters."""
    financial_year: str
    source: str
    brackets: Tuple[TaxBracket, ...]
    medicare_levy: MedicareLevyRates
    low_income_offset: LowIncomeOffsetRates

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TaxRates":
        """Build tax rates from a mapping shaped like TAX_RATES_2025_26."""
        context = "tax rates"
        brackets = []
        for i, entry in enumerate(_require(data, "brackets", context)):
            bracket_context = f"brackets[{i}]"
            max_income = entry.get("max") if isinstance(entry, Mapping) else None
            brackets.append(TaxBracket(
                min_income=_number(entry, "min", bracket_context),
                max_income=float(max_income) if max_income is not None else None,
                base_tax=_number(entry, "base_tax", bracket_context),
                rate=_number(entry, "rate", bracket_context),
            ))
        if not brackets:
            raise ConfigurationError("Tax rates define no brackets")

        medicare = _require(data, "medicare_levy", context)
        lito = _require(data, "low_income_offset", context)

        return cls(
            financial_year=str(_require(data, "financial_year", context)),
            source=str(data.get("source", "")),
            brackets=tuple(brackets),
            medicare_levy=MedicareLevyRates(
                rate=_number(medicare, "rate", "medicare_levy"),
                low_income_threshold=_number(medicare, "low_income_threshold", "medicare_levy"),
                phase_in_rate=_number(medicare, "phase_in_rate", "medicare_levy"),
                shade_in_threshold=_number(medicare, "shade_in_threshold", "medicare_levy"),
            ),
            low_income_offset=LowIncomeOffsetRates(
                max_offset=_number(lito, "max_offset", "low_income_offset"),
                full_offset_to=_number(lito, "full_offset_to", "low_income_offset"),
                phase_out_1_rate=_number(lito, "phase_out_1_rate", "low_income_offset"),
                phase_out_1_to=_number(lito, "phase_out_1_to", "low_income_offset"),
                phase_out_2_rate=_number(lito, "phase_out_2_rate", "low_income_offset"),
                phase_out_2_to=_number(lito, "phase_out_2_to", "low_income_offset"),
            ),
        )


@dataclass(frozen=True)
class RateConfiguration:
    """Subsidy and tax tables for one rate version, passed into every entry point."""
    ccs: CCSRates
    tax: TaxRates

    @property
    def version(self) -> str:
        return self.ccs.financial_year

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RateConfiguration":
        """Build from a mapping with 'ccs' and 'tax' sections."""
        return cls(
            ccs=CCSRates.from_dict(_require(data, "ccs", "rate configuration")),
            tax=TaxRates.from_dict(_require(data, "tax", "rate configuration")),
        )


# =============================================================================
# REGIONAL AVERAGE FEES
# =============================================================================

@dataclass(frozen=True)
class RegionalFees:
    """Average daily fees for one state or territory."""
    state: State
    state_name: str
    average_daily_fee: Mapping[CareType, float]


@dataclass(frozen=True)
class RegionalFeeTable:
    """
    Average daily fee by (state, care type).

    Used when a family opts to price care at the regional average rather
    than entering their provider's fee. In-home care has no entry.
    """
    entries: Tuple[RegionalFees, ...]
    last_updated: str = ""
    source: str = ""

    def average_daily_fee(self, state: State, care_type: CareType) -> float:
        """
        Look up the average daily fee.

        Raises:
            ConfigurationError: If the state or care type has no entry
        """
        for entry in self.entries:
            if entry.state is state:
                fee = entry.average_daily_fee.get(care_type)
                if fee is None:
                    raise ConfigurationError(
                        f"No average daily fee found for '{care_type.value}' in '{state.value}'"
                    )
                return fee
        raise ConfigurationError(f"No state average data found for '{state.value}'")

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        last_updated: str = "",
        source: str = "",
    ) -> "RegionalFeeTable":
        """Build from per-state records shaped like STATE_AVERAGES_2025_26['states']."""
        entries = []
        for i, record in enumerate(records):
            context = f"regional fees[{i}]"
            fees: Dict[CareType, float] = {}
            for care_code, fee in _require(record, "average_daily_fee", context).items():
                if fee is None:
                    continue
                fees[_enum(CareType, care_code, context)] = float(fee)
            entries.append(RegionalFees(
                state=_enum(State, _require(record, "state", context), context),
                state_name=str(record.get("state_name", "")),
                average_daily_fee=MappingProxyType(fees),
            ))
        return cls(entries=tuple(entries), last_updated=last_updated, source=source)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RegionalFeeTable":
        return cls.from_records(
            _require(data, "states", "regional fee table"),
            last_updated=str(data.get("last_updated", "")),
            source=str(data.get("source", "")),
        )


# =============================================================================
# LOADERS
# =============================================================================

def load_default_configuration(validate: bool = True) -> RateConfiguration:
    """Build the bundled FY 2025-26 rate configuration."""
    config = RateConfiguration(
        ccs=CCSRates.from_dict(CCS_RATES_2025_26),
        tax=TaxRates.from_dict(TAX_RATES_2025_26),
    )
    if validate:
        _raise_on_failed_checks(config)
    return config


def load_default_regional_fees() -> RegionalFeeTable:
    """Build the bundled FY 2025-26 state average fee table."""
    return RegionalFeeTable.from_dict(STATE_AVERAGES_2025_26)


def load_rate_configuration(path: Union[str, Path], validate: bool = True) -> RateConfiguration:
    """
    Load a rate configuration from a JSON file with 'ccs' and 'tax' sections.

    Args:
        path: JSON file path
        validate: Run validate_rate_configuration() and raise on any failure

    Returns:
        RateConfiguration

    Raises:
        ConfigurationError: If a required key is missing or a check fails
    """
    path = Path(path)
    with path.open(encoding="utf-8") as f:
        data = json.load(f)

    config = RateConfiguration.from_dict(data)
    logger.info(f"Loaded rate configuration {config.version} from {path}")

    if validate:
        _raise_on_failed_checks(config)
    return config


def load_regional_fees(path: Union[str, Path]) -> RegionalFeeTable:
    """Load a regional average fee table from a JSON file."""
    path = Path(path)
    with path.open(encoding="utf-8") as f:
        data = json.load(f)

    table = RegionalFeeTable.from_dict(data)
    logger.info(f"Loaded regional fees for {len(table.entries)} states from {path}")
    return table


def _raise_on_failed_checks(config: RateConfiguration) -> None:
    from .validation import validate_rate_configuration

    failures = [r for r in validate_rate_configuration(config) if not r.passed]
    if failures:
        for failure in failures:
            logger.warning(str(failure))
        messages = "; ".join(f.message for f in failures)
        raise ConfigurationError(f"Rate configuration {config.version} failed validation: {messages}")
