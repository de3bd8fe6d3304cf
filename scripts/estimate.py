#!/usr/bin/env python3
"""
Estimate Child Care Subsidy and out-of-pocket costs from the command line.

Usage:
    python scripts/estimate.py --income 95000 --days 3 --fee 140 --hours 10
    python scripts/estimate.py --income-range 120001_160000 --state VIC --use-average
    python scripts/estimate.py --income 100000 --children 2 --back-to-work \\
        --current-income 0 --proposed-income 80000 --work-costs 50

Options --rates and --regional-fees load JSON tables for another rate
version; otherwise the bundled FY 2025-26 tables are used.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ccs_model import (
    CalculationError,
    CalculationReport,
    RawInputs,
    load_default_configuration,
    load_default_regional_fees,
    load_rate_configuration,
    load_regional_fees,
    run_calculations,
)
from ccs_model.subsidy import DEFAULT_WEEKS_PER_YEAR


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Australian Child Care Subsidy estimator")
    p.add_argument("--children", type=int, default=1, help="Children in approved care")
    p.add_argument("--youngest-age", choices=["under_6", "6_to_13"], default="under_6",
                   help="Age bracket of the youngest child")
    p.add_argument("--income", type=float, default=None, help="Combined family income (AUD/year)")
    p.add_argument("--income-range", default="under_85279",
                   help="Income range code, used when --income is not given")
    p.add_argument("--care-type", default="centre_based_day_care",
                   choices=["centre_based_day_care", "family_day_care", "outside_school_hours", "in_home_care"])
    p.add_argument("--state", default="NSW", help="State or territory code, e.g. NSW, VIC")
    p.add_argument("--days", type=int, default=3, help="Care days per week (1-5)")
    p.add_argument("--hours", type=float, default=None, help="Hours per day (default depends on care type)")
    p.add_argument("--fee", type=float, default=None, help="Daily fee (AUD)")
    p.add_argument("--use-average", action="store_true", help="Use the state average daily fee")
    p.add_argument("--weeks", type=int, default=DEFAULT_WEEKS_PER_YEAR, help="Weeks of care per year")

    p.add_argument("--back-to-work", action="store_true", help="Compare working 1-5 days a week")
    p.add_argument("--current-income", type=float, default=0.0,
                   help="Returning parent's current individual income")
    p.add_argument("--proposed-income", type=float, default=0.0, help="Full-time-equivalent salary on offer")
    p.add_argument("--work-costs", type=float, default=0.0, help="Work-related costs per week at 5 days")

    p.add_argument("--rates", type=str, default=None, help="JSON rate configuration file")
    p.add_argument("--regional-fees", type=str, default=None, help="JSON regional average fee file")
    p.add_argument("--chart", type=str, default=None, help="Save an income sensitivity chart to this path")
    p.add_argument("-v", "--verbose", action="store_true", help="Log calculation steps")
    return p


def form_from_args(args: argparse.Namespace) -> dict:
    """Map parsed arguments onto the form keys RawInputs.from_form() expects."""
    return {
        "children": args.children,
        "youngest_age": args.youngest_age,
        "income": args.income,
        "income_range": args.income_range,
        "care_type": args.care_type,
        "state": args.state,
        "days_per_week": args.days,
        "hours_per_day": args.hours,
        "fee_per_day": args.fee,
        "use_average": args.use_average,
        "back_to_work": args.back_to_work,
        "current_income": args.current_income,
        "proposed_income": args.proposed_income,
        "work_costs_per_week": args.work_costs,
    }


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    try:
        config = load_rate_configuration(args.rates) if args.rates else load_default_configuration()
        regional_fees = load_regional_fees(args.regional_fees) if args.regional_fees else load_default_regional_fees()
        raw = RawInputs.from_form(form_from_args(args))
        result = run_calculations(raw, config, regional_fees, weeks_per_year=args.weeks)
    except CalculationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    report = CalculationReport(result)
    print(report.generate_text_report())

    if args.chart:
        report.plot_income_sensitivity(save_path=args.chart, show=False)
        print(f"Chart saved to {args.chart}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
