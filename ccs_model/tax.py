"""
Income Tax Module

Resident individual income tax for one financial year:
- Progressive brackets (base tax + marginal rate above the bracket floor)
- Medicare levy with a shade-in band above the low-income threshold
- Low Income Tax Offset (LITO) with two phase-out bands

The offset can reduce income tax to zero but never below it, so total
tax is never negative. Every income value, including zero and negative,
produces a result; nothing in this module raises for income.
"""

import logging
from dataclasses import dataclass

from .errors import ConfigurationError
from .money import round_cents, round_rate
from .rates import LowIncomeOffsetRates, MedicareLevyRates, TaxBracket, TaxRates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BaseTaxResult:
    """Tax from the bracket schedule alone, before levy and offsets."""
    tax: float
    bracket: TaxBracket
    marginal_rate: float


@dataclass(frozen=True)
class IncomeTaxResult:
    """
    Full income tax breakdown for one individual.

    Attributes:
        gross_income: Taxable income the result was computed for
        income_tax: Bracket tax before offsets
        medicare_levy: Medicare levy
        low_income_offset: LITO entitlement (may exceed income_tax)
        tax_after_offset: max(0, income_tax - low_income_offset)
        total_tax: tax_after_offset + medicare_levy
        net_income: gross_income - total_tax
        effective_rate: total_tax / gross_income, 4 decimal places
        marginal_rate: Rate of the bracket the income falls in
        bracket: Bracket the income falls in
    """
    gross_income: float
    income_tax: float
    medicare_levy: float
    low_income_offset: float
    tax_after_offset: float
    total_tax: float
    net_income: float
    effective_rate: float
    marginal_rate: float
    bracket: TaxBracket


def _find_bracket(income: float, brackets) -> TaxBracket:
    # First bracket whose ceiling is not below income; the open top bracket catches the rest
    for bracket in brackets:
        if bracket.max_income is None or income <= bracket.max_income:
            return bracket
    raise ConfigurationError("Tax brackets have no open-ended top bracket")


def calculate_base_income_tax(income: float, brackets) -> BaseTaxResult:
    """
    Bracket tax for a taxable income.

    Tax is bracket.base_tax + (income - (bracket.min_income - 1)) * bracket.rate,
    so the first dollar of a bracket is taxed at that bracket's rate.

    Args:
        income: Taxable income
        brackets: Ordered TaxBracket sequence ending in an open bracket

    Returns:
        BaseTaxResult with tax rounded to cents
    """
    if income <= 0:
        return BaseTaxResult(tax=0.0, bracket=brackets[0], marginal_rate=brackets[0].rate)

    bracket = _find_bracket(income, brackets)
    tax = bracket.base_tax + (income - (bracket.min_income - 1)) * bracket.rate
    return BaseTaxResult(tax=round_cents(max(0.0, tax)), bracket=bracket, marginal_rate=bracket.rate)


def calculate_medicare_levy(income: float, medicare: MedicareLevyRates) -> float:
    """
    Medicare levy.

    Zero up to the low-income threshold, phase_in_rate of the excess up to
    the shade-in threshold, then the flat rate on the whole income.
    """
    if income <= medicare.low_income_threshold:
        return 0.0
    if income <= medicare.shade_in_threshold:
        return round_cents((income - medicare.low_income_threshold) * medicare.phase_in_rate)
    return round_cents(income * medicare.rate)


def calculate_low_income_offset(income: float, lito: LowIncomeOffsetRates) -> float:
    """
    Low Income Tax Offset.

    Full offset up to full_offset_to, reduced at phase_out_1_rate up to
    phase_out_1_to, then at phase_out_2_rate up to phase_out_2_to, and zero
    above that.
    """
    if income <= lito.full_offset_to:
        return round_cents(lito.max_offset)

    if income <= lito.phase_out_1_to:
        offset = lito.max_offset - (income - lito.full_offset_to) * lito.phase_out_1_rate
        return round_cents(max(0.0, offset))

    if income <= lito.phase_out_2_to:
        # Offset remaining at the end of the first band
        remaining = lito.max_offset - (lito.phase_out_1_to - lito.full_offset_to) * lito.phase_out_1_rate
        offset = remaining - (income - lito.phase_out_1_to) * lito.phase_out_2_rate
        return round_cents(max(0.0, offset))

    return 0.0


def calculate_income_tax(income: float, rates: TaxRates) -> IncomeTaxResult:
    """
    Compute income tax, Medicare levy and LITO for an individual.

    Args:
        income: Annual taxable income (non-positive gives an all-zero result)
        rates: Tax parameters for the financial year

    Returns:
        IncomeTaxResult with currency fields rounded to cents
    """
    if income <= 0:
        bottom = rates.brackets[0]
        return IncomeTaxResult(
            gross_income=0.0,
            income_tax=0.0,
            medicare_levy=0.0,
            low_income_offset=0.0,
            tax_after_offset=0.0,
            total_tax=0.0,
            net_income=0.0,
            effective_rate=0.0,
            marginal_rate=bottom.rate,
            bracket=bottom,
        )

    base = calculate_base_income_tax(income, rates.brackets)
    levy = calculate_medicare_levy(income, rates.medicare_levy)
    offset = calculate_low_income_offset(income, rates.low_income_offset)

    tax_after_offset = round_cents(max(0.0, base.tax - offset))
    total_tax = round_cents(tax_after_offset + levy)
    net_income = round_cents(income - total_tax)

    logger.debug(
        f"Tax on ${income:,.2f}: bracket {base.marginal_rate:.0%}, "
        f"tax ${base.tax:,.2f}, levy ${levy:,.2f}, offset ${offset:,.2f}"
    )

    return IncomeTaxResult(
        gross_income=round_cents(income),
        income_tax=base.tax,
        medicare_levy=levy,
        low_income_offset=offset,
        tax_after_offset=tax_after_offset,
        total_tax=total_tax,
        net_income=net_income,
        effective_rate=round_rate(total_tax / income),
        marginal_rate=base.marginal_rate,
        bracket=base.bracket,
    )


def calculate_net_income(income: float, rates: TaxRates) -> float:
    """Net (after-tax) income for an individual."""
    return calculate_income_tax(income, rates).net_income
