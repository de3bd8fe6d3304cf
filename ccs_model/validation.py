"""
Rate configuration validation.

Checks a RateConfiguration for internal consistency before it is used:
- Tax brackets are ordered, contiguous and end in an open top bracket
- Subsidy percentages and withholding are within [0, 100]
- Every care type has at least one hourly rate cap

Loaders call these checks and raise ConfigurationError on any failure,
so a bad rate table is rejected at load time rather than producing
wrong dollar figures later.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .rates import CareType, CCSRates, RateConfiguration, TaxRates

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check."""
    passed: bool
    message: str
    details: Optional[dict] = None

    def __str__(self) -> str:
        status = "✓ PASS" if self.passed else "✗ FAIL"
        return f"{status}: {self.message}"


class RateValidator:
    """
    Consistency checks for subsidy and tax rate tables.

    Each check returns a single ValidationResult; issues found within one
    check are collected into details['issues'].
    """

    @staticmethod
    def validate_tax_brackets(tax: TaxRates) -> ValidationResult:
        """
        Validate progressive tax brackets.

        Checks:
        - At least one bracket
        - Each bracket starts one dollar after the previous one ends
        - Only the last bracket is open-ended
        - Marginal rates between 0 and 1
        """
        issues = []
        brackets = tax.brackets

        if not brackets:
            return ValidationResult(passed=False, message=f"Tax rates {tax.financial_year} have no brackets")

        for i, bracket in enumerate(brackets):
            if not 0 <= bracket.rate <= 1:
                issues.append(f"Bracket {i} rate {bracket.rate} outside [0, 1]")
            if bracket.max_income is not None and bracket.max_income < bracket.min_income:
                issues.append(f"Bracket {i} max {bracket.max_income:,.0f} below min {bracket.min_income:,.0f}")
            if bracket.max_income is None and i != len(brackets) - 1:
                issues.append(f"Bracket {i} is open-ended but is not the top bracket")

        for i in range(1, len(brackets)):
            previous, current = brackets[i - 1], brackets[i]
            if previous.max_income is not None and current.min_income != previous.max_income + 1:
                issues.append(
                    f"Bracket {i} starts at {current.min_income:,.0f}, "
                    f"expected {previous.max_income + 1:,.0f}"
                )

        if brackets[-1].max_income is not None:
            issues.append("Top bracket must be open-ended (max = null)")

        if issues:
            return ValidationResult(
                passed=False,
                message=f"Tax brackets invalid for {tax.financial_year}",
                details={'issues': issues},
            )
        return ValidationResult(passed=True, message=f"Tax brackets for {tax.financial_year} passed validation")

    @staticmethod
    def validate_subsidy_percentages(ccs: CCSRates) -> ValidationResult:
        """Validate taper, higher-rate and withholding percentages."""
        issues = []
        standard = ccs.standard

        for name, value in [
            ("max_percent", standard.max_percent),
            ("min_percent", standard.min_percent),
            ("higher max_percent", ccs.higher.max_percent),
            ("withholding_percent", ccs.withholding_percent),
        ]:
            if not 0 <= value <= 100:
                issues.append(f"{name} {value} outside [0, 100]")

        if standard.min_percent > standard.max_percent:
            issues.append(f"min_percent {standard.min_percent} above max_percent {standard.max_percent}")
        if ccs.higher.max_percent < standard.max_percent:
            issues.append(
                f"higher max_percent {ccs.higher.max_percent} below standard max {standard.max_percent}"
            )
        if standard.income_increment <= 0:
            issues.append(f"income_increment must be positive, got {standard.income_increment}")
        if standard.reduction_per_increment < 0:
            issues.append(f"reduction_per_increment must be >= 0, got {standard.reduction_per_increment}")

        if issues:
            return ValidationResult(
                passed=False,
                message=f"Subsidy percentages invalid for {ccs.financial_year}",
                details={'issues': issues},
            )
        return ValidationResult(passed=True, message=f"Subsidy percentages for {ccs.financial_year} passed validation")

    @staticmethod
    def validate_rate_caps(ccs: CCSRates) -> ValidationResult:
        """Every care type needs at least one positive hourly rate cap."""
        issues = []
        covered = {cap.care_type for cap in ccs.hourly_rate_caps}

        for care_type in CareType:
            if care_type not in covered:
                issues.append(f"No hourly rate cap for {care_type.value}")

        for cap in ccs.hourly_rate_caps:
            if cap.rate_per_hour <= 0:
                issues.append(
                    f"Rate cap for {cap.care_type.value}/{cap.age_group.value} must be positive"
                )

        if issues:
            return ValidationResult(
                passed=False,
                message=f"Hourly rate caps invalid for {ccs.financial_year}",
                details={'issues': issues},
            )
        return ValidationResult(passed=True, message=f"Hourly rate caps for {ccs.financial_year} passed validation")


def validate_rate_configuration(config: RateConfiguration) -> List[ValidationResult]:
    """
    Run every consistency check on a rate configuration.

    Args:
        config: Subsidy and tax tables for one rate version

    Returns:
        One ValidationResult per check, in a fixed order
    """
    results = [
        RateValidator.validate_tax_brackets(config.tax),
        RateValidator.validate_subsidy_percentages(config.ccs),
        RateValidator.validate_rate_caps(config.ccs),
    ]
    for result in results:
        logger.debug(str(result))
    return results
