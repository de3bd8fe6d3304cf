"""
Tests for rate configuration validation.
"""

import dataclasses

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from ccs_model.rates import TaxBracket, load_default_configuration
from ccs_model.validation import RateValidator, ValidationResult, validate_rate_configuration


class TestValidationResult:

    def test_str(self):
        assert str(ValidationResult(passed=True, message="ok")) == "✓ PASS: ok"
        assert str(ValidationResult(passed=False, message="bad")) == "✗ FAIL: bad"


class TestRateValidator:
    """Test individual checks."""

    def test_defaults_pass(self, rate_config):
        results = validate_rate_configuration(rate_config)

        assert len(results) == 3
        assert all(r.passed for r in results)

    def test_bundled_defaults_pass(self):
        config = load_default_configuration(validate=False)
        assert all(r.passed for r in validate_rate_configuration(config))

    def test_gap_between_brackets(self, tax_rates):
        brackets = list(tax_rates.brackets)
        brackets[2] = dataclasses.replace(brackets[2], min_income=46_000)
        tax = dataclasses.replace(tax_rates, brackets=tuple(brackets))

        result = RateValidator.validate_tax_brackets(tax)

        assert not result.passed
        assert any("Bracket 2" in issue for issue in result.details['issues'])

    def test_closed_top_bracket(self, tax_rates):
        brackets = list(tax_rates.brackets)
        brackets[-1] = dataclasses.replace(brackets[-1], max_income=1_000_000)
        tax = dataclasses.replace(tax_rates, brackets=tuple(brackets))

        assert not RateValidator.validate_tax_brackets(tax).passed

    def test_open_bracket_not_last(self, tax_rates):
        brackets = list(tax_rates.brackets)
        brackets[1] = dataclasses.replace(brackets[1], max_income=None)
        tax = dataclasses.replace(tax_rates, brackets=tuple(brackets))

        result = RateValidator.validate_tax_brackets(tax)
        assert any("open-ended" in issue for issue in result.details['issues'])

    def test_rate_above_one(self, tax_rates):
        brackets = (TaxBracket(min_income=0, max_income=None, base_tax=0, rate=45),)
        tax = dataclasses.replace(tax_rates, brackets=brackets)

        assert not RateValidator.validate_tax_brackets(tax).passed

    def test_empty_brackets(self, tax_rates):
        tax = dataclasses.replace(tax_rates, brackets=())
        assert not RateValidator.validate_tax_brackets(tax).passed

    @pytest.mark.parametrize("field,value", [
        ("max_percent", 120),
        ("min_percent", -1),
        ("income_increment", 0),
        ("reduction_per_increment", -1),
    ])
    def test_bad_standard_subsidy(self, ccs_rates, field, value):
        standard = dataclasses.replace(ccs_rates.standard, **{field: value})
        ccs = dataclasses.replace(ccs_rates, standard=standard)

        assert not RateValidator.validate_subsidy_percentages(ccs).passed

    def test_higher_max_below_standard(self, ccs_rates):
        ccs = dataclasses.replace(ccs_rates, higher=dataclasses.replace(ccs_rates.higher, max_percent=85))
        assert not RateValidator.validate_subsidy_percentages(ccs).passed

    def test_bad_withholding(self, ccs_rates):
        ccs = dataclasses.replace(ccs_rates, withholding_percent=101)
        assert not RateValidator.validate_subsidy_percentages(ccs).passed

    def test_missing_care_type_cap(self, ccs_rates):
        caps = tuple(c for c in ccs_rates.hourly_rate_caps if c.care_type.value != "family_day_care")
        ccs = dataclasses.replace(ccs_rates, hourly_rate_caps=caps)

        result = RateValidator.validate_rate_caps(ccs)

        assert not result.passed
        assert result.details['issues'] == ["No hourly rate cap for family_day_care"]

    def test_non_positive_cap(self, ccs_rates):
        caps = list(ccs_rates.hourly_rate_caps)
        caps[0] = dataclasses.replace(caps[0], rate_per_hour=0)
        ccs = dataclasses.replace(ccs_rates, hourly_rate_caps=tuple(caps))

        assert not RateValidator.validate_rate_caps(ccs).passed
