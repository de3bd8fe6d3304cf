"""
Tests for text reports, charts and the command-line estimator.
"""

import dataclasses

import matplotlib
matplotlib.use("Agg")

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

import estimate
from ccs_model.calculator import run_calculations
from ccs_model.inputs import BackToWorkInputs, ChildAge, ExactFee, ExactIncome, RawInputs
from ccs_model.rates import CareType, State
from ccs_model.reporting import CalculationReport


def make_raw(**overrides):
    values = dict(
        children=1,
        youngest_age=ChildAge.UNDER_6,
        income=ExactIncome(95_000),
        care_type=CareType.CENTRE_BASED_DAY_CARE,
        state=State.NSW,
        days_per_week=3,
        hours_per_day=10,
        fee=ExactFee(140),
    )
    values.update(overrides)
    return RawInputs(**values)


@pytest.fixture
def report(rate_config, regional_fees):
    return CalculationReport(run_calculations(make_raw(), rate_config, regional_fees))


@pytest.fixture
def family_report(rate_config, regional_fees):
    raw = make_raw(
        children=2,
        back_to_work=BackToWorkInputs(current_income=0, proposed_income=80_000, work_costs_per_week=50),
    )
    return CalculationReport(run_calculations(raw, rate_config, regional_fees))


class TestTextReport:
    """Test generate_text_report()."""

    def test_sections(self, report):
        text = report.generate_text_report()

        assert "CHILD CARE SUBSIDY ESTIMATE (FY 2025-26)" in text
        assert "YOUR FAMILY" in text
        assert "SUBSIDY RATE" in text
        assert "COSTS BY PERIOD" in text
        assert "INCOME SENSITIVITY" in text
        assert "NOTES" in text

    def test_figures(self, report):
        text = report.generate_text_report()

        assert "$95,000" in text
        assert "88%" in text
        assert "$123.20" in text
        assert "$16.80" in text
        assert "your fee" in text
        assert "5% subsidy withheld" in text

    def test_three_day_guarantee_note(self, report):
        assert "At least 72 hours a fortnight are subsidised" in report.generate_text_report()

    def test_no_guarantee_note_when_unset(self, rate_config, regional_fees):
        ccs = dataclasses.replace(rate_config.ccs, three_day_guarantee_hours=None)
        config = dataclasses.replace(rate_config, ccs=ccs)
        text = CalculationReport(run_calculations(make_raw(), config, regional_fees)).generate_text_report()

        assert "three-day guarantee" not in text

    def test_single_child_has_no_family_totals(self, report):
        text = report.generate_text_report()

        assert "CHILDREN" not in text
        assert "RETURNING TO WORK" not in text

    def test_family_sections(self, family_report):
        text = family_report.generate_text_report()

        assert "ALL 2 CHILDREN" in text
        assert "Higher rate (youngest)" in text
        assert "RETURNING TO WORK" in text
        assert "Break-even full-time salary" in text


class TestCharts:
    """Test chart generation without a display."""

    def test_income_sensitivity_chart(self, report, tmp_path):
        path = tmp_path / "sensitivity.png"
        fig = report.plot_income_sensitivity(save_path=str(path), show=False)

        assert fig is not None
        assert path.exists()

    def test_back_to_work_chart(self, family_report):
        fig = family_report.plot_back_to_work(show=False)
        assert len(fig.axes[0].patches) == 5

    def test_back_to_work_chart_requires_comparison(self, report):
        with pytest.raises(ValueError):
            report.plot_back_to_work(show=False)


class TestCommandLine:
    """Test scripts/estimate.py."""

    def test_report_printed(self, capsys):
        code = estimate.main(["--income", "95000", "--fee", "140", "--hours", "10"])

        assert code == 0
        out = capsys.readouterr().out
        assert "CHILD CARE SUBSIDY ESTIMATE" in out
        assert "$123.20" in out

    def test_back_to_work_option(self, capsys):
        code = estimate.main([
            "--income", "100000", "--children", "2", "--back-to-work",
            "--proposed-income", "80000", "--work-costs", "50",
        ])

        assert code == 0
        assert "RETURNING TO WORK" in capsys.readouterr().out

    def test_form_mapping(self):
        args = estimate.build_parser().parse_args(["--state", "VIC", "--days", "4", "--use-average"])
        raw = RawInputs.from_form(estimate.form_from_args(args))

        assert raw.state is State.VIC
        assert raw.days_per_week == 4
        assert raw.back_to_work is None

    def test_unknown_state_fails(self, capsys):
        assert estimate.main(["--state", "XX"]) == 1
        assert "Error" in capsys.readouterr().err

    def test_missing_rate_cap_fails(self, capsys):
        assert estimate.main(["--care-type", "outside_school_hours"]) == 1

    def test_chart_saved(self, tmp_path, capsys):
        path = tmp_path / "chart.png"
        assert estimate.main(["--income", "150000", "--chart", str(path)]) == 0
        assert path.exists()
