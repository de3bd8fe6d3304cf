"""
Australian Child Care Subsidy Model

Estimates a family's Child Care Subsidy (CCS), out-of-pocket childcare
costs and the net financial outcome of returning to work, from family
composition, income and childcare usage.
"""

from .errors import CalculationError, ConfigurationError, InvalidArgumentError
from .rates import (
    AgeGroup,
    CareType,
    State,
    CCSRates,
    TaxRates,
    RateConfiguration,
    RegionalFeeTable,
    load_default_configuration,
    load_default_regional_fees,
    load_rate_configuration,
    load_regional_fees,
)
from .validation import ValidationResult, validate_rate_configuration
from .inputs import (
    ChildAge,
    IncomeRange,
    ExactIncome,
    IncomeBracket,
    ExactFee,
    RegionalAverageFee,
    BackToWorkInputs,
    RawInputs,
    ResolvedInputs,
    resolve_inputs,
)
from .tax import IncomeTaxResult, calculate_income_tax, calculate_net_income
from .subsidy import (
    calculate_subsidy_percentage,
    calculate_higher_subsidy_percentage,
    get_hourly_rate_cap,
    calculate_session_subsidy,
    calculate_annual_cost,
    assess_annual_subsidy_cap,
)
from .back_to_work import BackToWorkParams, BackToWorkResult, calculate_back_to_work
from .sensitivity import SensitivityParams, IncomeSensitivityResult, calculate_income_sensitivity
from .calculator import CalculationResult, run_calculations
from .reporting import CalculationReport

__version__ = "1.0.0"
__all__ = [
    "CalculationError",
    "ConfigurationError",
    "InvalidArgumentError",
    "AgeGroup",
    "CareType",
    "State",
    "CCSRates",
    "TaxRates",
    "RateConfiguration",
    "RegionalFeeTable",
    "load_default_configuration",
    "load_default_regional_fees",
    "load_rate_configuration",
    "load_regional_fees",
    "ValidationResult",
    "validate_rate_configuration",
    "ChildAge",
    "IncomeRange",
    "ExactIncome",
    "IncomeBracket",
    "ExactFee",
    "RegionalAverageFee",
    "BackToWorkInputs",
    "RawInputs",
    "ResolvedInputs",
    "resolve_inputs",
    "IncomeTaxResult",
    "calculate_income_tax",
    "calculate_net_income",
    "calculate_subsidy_percentage",
    "calculate_higher_subsidy_percentage",
    "get_hourly_rate_cap",
    "calculate_session_subsidy",
    "calculate_annual_cost",
    "assess_annual_subsidy_cap",
    "BackToWorkParams",
    "BackToWorkResult",
    "calculate_back_to_work",
    "SensitivityParams",
    "IncomeSensitivityResult",
    "calculate_income_sensitivity",
    "CalculationResult",
    "run_calculations",
    "CalculationReport",
]
