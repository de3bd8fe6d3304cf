"""
Tests for rate tables and loaders.

Tests cover:
- Bundled FY 2025-26 tables
- Parsing from mappings, including missing and malformed keys
- Loading rate configurations and regional fees from JSON files
- Regional average fee lookups
"""

import copy
import json
import logging

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from ccs_model.errors import CalculationError, ConfigurationError
from ccs_model.rates import (
    CCS_RATES_2025_26,
    STATE_AVERAGES_2025_26,
    TAX_RATES_2025_26,
    AgeGroup,
    CareType,
    CCSRates,
    RateConfiguration,
    RegionalFeeTable,
    State,
    TaxBracket,
    TaxRates,
    load_default_configuration,
    load_default_regional_fees,
    load_rate_configuration,
    load_regional_fees,
)


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestDefaults:
    """Test the bundled tables."""

    def test_default_configuration(self):
        config = load_default_configuration()

        assert config.version == "2025-26"
        assert config.ccs.standard.max_percent == 90
        assert config.ccs.standard.income_threshold == 85_279
        assert config.ccs.higher.additional_points == 30
        assert config.ccs.withholding_percent == 5
        assert config.ccs.three_day_guarantee_hours == 72
        assert len(config.tax.brackets) == 5
        assert config.tax.brackets[-1].max_income is None

    def test_default_regional_fees_cover_every_state(self):
        fees = load_default_regional_fees()

        for state in State:
            assert fees.average_daily_fee(state, CareType.CENTRE_BASED_DAY_CARE) > 0

    def test_has_regional_average(self):
        assert CareType.CENTRE_BASED_DAY_CARE.has_regional_average
        assert not CareType.IN_HOME_CARE.has_regional_average


class TestParsing:
    """Test building rate objects from mappings."""

    def test_ccs_rates(self):
        ccs = CCSRates.from_dict(CCS_RATES_2025_26)

        assert ccs.financial_year == "2025-26"
        assert ccs.annual_cap.cap_per_child == 11_003
        assert ccs.hourly_rate_caps[2].care_type is CareType.FAMILY_DAY_CARE
        assert ccs.hourly_rate_caps[2].age_group is AgeGroup.ALL

    def test_tax_brackets(self):
        tax = TaxRates.from_dict(TAX_RATES_2025_26)

        assert tax.brackets[2] == TaxBracket(min_income=45_001, max_income=135_000, base_tax=4_288, rate=0.30)
        assert tax.medicare_levy.rate == 0.02

    def test_missing_key_named(self):
        data = copy.deepcopy(CCS_RATES_2025_26)
        del data["withholding_percent"]

        with pytest.raises(ConfigurationError, match="withholding_percent"):
            CCSRates.from_dict(data)

    def test_missing_nested_key_named(self):
        data = copy.deepcopy(TAX_RATES_2025_26)
        del data["medicare_levy"]["shade_in_threshold"]

        with pytest.raises(ConfigurationError, match="shade_in_threshold"):
            TaxRates.from_dict(data)

    def test_non_numeric_value(self):
        data = copy.deepcopy(CCS_RATES_2025_26)
        data["standard_subsidy"]["max_percent"] = "ninety"

        with pytest.raises(ConfigurationError, match="max_percent"):
            CCSRates.from_dict(data)

    def test_unknown_care_type(self):
        data = copy.deepcopy(CCS_RATES_2025_26)
        data["hourly_rate_caps"][0]["care_type"] = "nanny"

        with pytest.raises(ConfigurationError, match="nanny"):
            CCSRates.from_dict(data)

    def test_empty_brackets(self):
        data = copy.deepcopy(TAX_RATES_2025_26)
        data["brackets"] = []

        with pytest.raises(ConfigurationError):
            TaxRates.from_dict(data)

    def test_configuration_error_is_calculation_error(self):
        assert issubclass(ConfigurationError, CalculationError)
        assert issubclass(ConfigurationError, LookupError)


class TestLoaders:
    """Test JSON loaders."""

    def test_load_rate_configuration(self, tmp_path, caplog):
        path = write_json(tmp_path / "rates.json", {"ccs": CCS_RATES_2025_26, "tax": TAX_RATES_2025_26})

        with caplog.at_level(logging.INFO, logger="ccs_model.rates"):
            config = load_rate_configuration(path)

        assert config == RateConfiguration(
            ccs=CCSRates.from_dict(CCS_RATES_2025_26),
            tax=TaxRates.from_dict(TAX_RATES_2025_26),
        )
        assert "2025-26" in caplog.text

    def test_missing_section(self, tmp_path):
        path = write_json(tmp_path / "rates.json", {"ccs": CCS_RATES_2025_26})

        with pytest.raises(ConfigurationError, match="tax"):
            load_rate_configuration(path)

    def test_failed_validation_raises(self, tmp_path):
        ccs = copy.deepcopy(CCS_RATES_2025_26)
        ccs["hourly_rate_caps"] = [c for c in ccs["hourly_rate_caps"] if c["care_type"] != "in_home_care"]
        path = write_json(tmp_path / "rates.json", {"ccs": ccs, "tax": TAX_RATES_2025_26})

        with pytest.raises(ConfigurationError, match="failed validation"):
            load_rate_configuration(path)

    def test_validation_can_be_skipped(self, tmp_path):
        ccs = copy.deepcopy(CCS_RATES_2025_26)
        ccs["withholding_percent"] = 150
        path = write_json(tmp_path / "rates.json", {"ccs": ccs, "tax": TAX_RATES_2025_26})

        config = load_rate_configuration(path, validate=False)
        assert config.ccs.withholding_percent == 150

    def test_load_regional_fees(self, tmp_path):
        path = write_json(tmp_path / "fees.json", STATE_AVERAGES_2025_26)
        table = load_regional_fees(path)

        assert len(table.entries) == 8
        assert table.average_daily_fee(State.QLD, CareType.FAMILY_DAY_CARE) == 118


class TestRegionalFeeTable:
    """Test average fee lookups."""

    def test_lookup(self, regional_fees):
        assert regional_fees.average_daily_fee(State.ACT, CareType.CENTRE_BASED_DAY_CARE) == 175

    def test_missing_state(self, regional_fees):
        with pytest.raises(ConfigurationError, match="No state average data found for 'WA'"):
            regional_fees.average_daily_fee(State.WA, CareType.CENTRE_BASED_DAY_CARE)

    def test_missing_care_type(self, regional_fees):
        with pytest.raises(ConfigurationError, match="in_home_care"):
            regional_fees.average_daily_fee(State.NSW, CareType.IN_HOME_CARE)

    def test_null_fee_skipped(self):
        table = RegionalFeeTable.from_records([
            {"state": "NT", "average_daily_fee": {"centre_based_day_care": 110, "family_day_care": None}},
        ])

        assert table.average_daily_fee(State.NT, CareType.CENTRE_BASED_DAY_CARE) == 110
        with pytest.raises(ConfigurationError):
            table.average_daily_fee(State.NT, CareType.FAMILY_DAY_CARE)

    def test_unknown_state_code(self):
        with pytest.raises(ConfigurationError, match="XX"):
            RegionalFeeTable.from_records([{"state": "XX", "average_daily_fee": {}}])
