"""
Reporting and Visualization Module

Generates plain-text summaries and charts for a family's subsidy
calculation.
"""

from typing import Optional

import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import numpy as np

from .calculator import CalculationResult
from .inputs import DEFAULT_HOURS_PER_DAY
from .money import format_dollars, format_dollars_and_cents


CARE_TYPE_NAMES = {
    "centre_based_day_care": "Centre-based day care",
    "family_day_care": "Family day care",
    "outside_school_hours": "Outside school hours care",
    "in_home_care": "In-home care",
}


class CalculationReport:
    """
    Generate reports for one family's subsidy calculation.
    """

    def __init__(self, result: CalculationResult):
        self.result = result
        self.resolved = result.resolved

    def generate_text_report(self) -> str:
        """Generate a detailed text report."""
        r = self.result
        resolved = self.resolved
        lines = []

        # Header
        lines.append("=" * 70)
        lines.append(f"CHILD CARE SUBSIDY ESTIMATE (FY {r.rates_version})")
        lines.append("=" * 70)
        lines.append("")

        # Family
        lines.append("YOUR FAMILY")
        lines.append("-" * 40)
        lines.append(f"Combined income:        {format_dollars(resolved.combined_income):>14}")
        lines.append(f"Children in care:       {resolved.children:>14}")
        lines.append(f"Care type:              {CARE_TYPE_NAMES[resolved.care_type.value]}")
        fee_source = "state average" if resolved.uses_regional_average else "your fee"
        lines.append(
            f"Daily fee:              {format_dollars_and_cents(resolved.daily_fee):>14} ({fee_source}, "
            f"{resolved.state.value})"
        )
        hours_note = ""
        if resolved.hours_per_day == DEFAULT_HOURS_PER_DAY[resolved.care_type]:
            hours_note = " (typical session)"
        lines.append(f"Hours per day:          {resolved.hours_per_day:>14g}{hours_note}")
        lines.append(f"Days per week:          {resolved.days_per_week:>14}")
        lines.append("")

        # Subsidy
        lines.append("SUBSIDY RATE")
        lines.append("-" * 40)
        pct = r.subsidy_percentage
        lines.append(f"Standard rate:          {pct.percent:>13g}%")
        if pct.brackets_above:
            lines.append(
                f"  {pct.brackets_above} taper steps above the income threshold "
                f"(-{pct.percent_reduction:g} points)"
            )
        if r.higher_subsidy is not None:
            higher = r.higher_subsidy
            lines.append(f"Higher rate (youngest): {higher.higher_percent:>13g}%")
            if higher.was_capped:
                lines.append(f"  Capped: {higher.standard_percent:g}% + {higher.additional_points:g} "
                             f"points exceeds the maximum")
        lines.append("")

        # Per-day costs
        s = r.session
        lines.append("PER DAY")
        lines.append("-" * 40)
        lines.append(f"Hourly fee:             {format_dollars_and_cents(s.hourly_fee):>14}")
        lines.append(f"Hourly rate cap:        {format_dollars_and_cents(s.hourly_rate_cap):>14}")
        if s.fee_above_cap_per_hour > 0:
            lines.append(f"Above cap (per hour):   {format_dollars_and_cents(s.fee_above_cap_per_hour):>14}")
        lines.append(f"Subsidy:                {format_dollars_and_cents(s.subsidy_per_session):>14}")
        lines.append(f"You pay:                {format_dollars_and_cents(s.out_of_pocket_per_session):>14}")
        lines.append("")

        # Period table
        a = r.annual
        lines.append("COSTS BY PERIOD")
        lines.append("-" * 70)
        lines.append(f"{'Period':<12} {'Fee':>12} {'Subsidy':>12} {'Gap fee':>12} {'Paid in year':>14}")
        lines.append("-" * 70)
        lines.append(
            f"{'Week':<12} {format_dollars(a.gross_fee_per_week):>12} {format_dollars(a.subsidy_per_week):>12} "
            f"{format_dollars(a.out_of_pocket_per_week):>12} {format_dollars(a.net_out_of_pocket_per_week):>14}"
        )
        lines.append(
            f"{'Fortnight':<12} {format_dollars(a.gross_fee_per_fortnight):>12} "
            f"{format_dollars(a.subsidy_per_fortnight):>12} {format_dollars(a.out_of_pocket_per_fortnight):>12} "
            f"{format_dollars(a.net_out_of_pocket_per_fortnight):>14}"
        )
        lines.append(
            f"{'Year':<12} {format_dollars(a.gross_fee_per_year):>12} {format_dollars(a.subsidy_per_year):>12} "
            f"{format_dollars(a.out_of_pocket_per_year):>12} {format_dollars(a.net_out_of_pocket_per_year):>14}"
        )
        lines.append("")

        if r.annual_cap.is_binding:
            lines.append(
                f"Note: subsidy exceeds the {format_dollars(r.annual_cap.cap_per_child)} annual cap per child "
                f"by {format_dollars(r.annual_cap.excess_subsidy)}"
            )
            lines.append("")

        # All children
        if resolved.children > 1:
            t = r.totals
            lines.append(f"ALL {resolved.children} CHILDREN")
            lines.append("-" * 40)
            lines.append(f"Weekly out of pocket:   {format_dollars(t.weekly_out_of_pocket):>14}")
            lines.append(f"Annual out of pocket:   {format_dollars(t.annual_out_of_pocket):>14}")
            lines.append(f"Annual subsidy:         {format_dollars(t.annual_subsidy):>14}")
            lines.append("")

        if r.back_to_work is not None:
            lines.extend(self._back_to_work_lines())

        lines.extend(self._sensitivity_lines())

        # Notes
        lines.append("NOTES")
        lines.append("-" * 40)
        lines.append("- Gap fee is what you pay after year-end reconciliation")
        lines.append(f"- Paid in year includes the {r.withholding_percent:g}% subsidy withheld each fortnight")
        if r.three_day_guarantee_hours is not None:
            lines.append(
                f"- At least {r.three_day_guarantee_hours:g} hours a fortnight are subsidised "
                f"regardless of activity (three-day guarantee)"
            )
        lines.append("- Estimates only; entitlement is assessed by Services Australia")
        lines.append("")

        return "\n".join(lines)

    def _back_to_work_lines(self):
        btw = self.result.back_to_work
        lines = ["RETURNING TO WORK", "-" * 70]
        lines.append(
            f"Current: {format_dollars(btw.current.net_income)} take-home, "
            f"{btw.current.subsidy_percent:g}% subsidy, "
            f"{format_dollars(btw.current.annual_childcare_cost)} childcare/year"
        )
        lines.append("")
        lines.append(f"{'Days':>4} {'Gross':>10} {'Take-home':>10} {'CCS':>5} "
                     f"{'Childcare':>10} {'Work costs':>10} {'Benefit':>10} {'Per hour':>9}")
        lines.append("-" * 70)
        for s in btw.scenarios:
            hourly = format_dollars_and_cents(s.effective_hourly_rate) if s.effective_hourly_rate is not None else "-"
            lines.append(
                f"{s.days_working:>4} {format_dollars(s.gross_income):>10} {format_dollars(s.net_income):>10} "
                f"{s.subsidy_percent:>4g}% {format_dollars(s.annual_childcare.out_of_pocket_per_year):>10} "
                f"{format_dollars(s.annual_work_costs):>10} {format_dollars(s.net_benefit):>10} {hourly:>9}"
            )
        lines.append("-" * 70)
        if btw.best_scenario is not None:
            best = btw.best_scenario
            lines.append(f"Best option: {best.days_working} days, {format_dollars(best.net_benefit)} better off per year")
        else:
            lines.append("No option leaves the family better off")
        if btw.break_even_fte_income is not None:
            lines.append(f"Break-even full-time salary: {format_dollars(btw.break_even_fte_income)}")
        lines.append("")
        return lines

    def _sensitivity_lines(self):
        sens = self.result.sensitivity
        lines = ["INCOME SENSITIVITY", "-" * 40]
        user_row = sens.user_row
        lines.append(
            f"Nearest modelled income {format_dollars(user_row.income)}: {user_row.subsidy_percent:g}% subsidy, "
            f"{format_dollars(user_row.annual_out_of_pocket)}/year"
        )
        if sens.zero_subsidy_income is not None:
            lines.append(f"Subsidy reaches 0% at:  {format_dollars(sens.zero_subsidy_income):>14}")
        if sens.highest_marginal_range is not None:
            step = sens.highest_marginal_range
            lines.append(
                f"Steepest step: {format_dollars(step.income_from)} to {format_dollars(step.income_to)} "
                f"(+{format_dollars(step.cost_increase)}/year)"
            )
        if sens.lowest_marginal_range is not None:
            step = sens.lowest_marginal_range
            lines.append(
                f"Gentlest step: {format_dollars(step.income_from)} to {format_dollars(step.income_to)} "
                f"(+{format_dollars(step.cost_increase)}/year)"
            )
        lines.append("")
        return lines

    def plot_income_sensitivity(self,
                                save_path: Optional[str] = None,
                                show: bool = True) -> plt.Figure:
        """
        Plot subsidy percentage and annual cost across the income sweep.
        """
        rows = self.result.sensitivity.rows
        incomes = np.array([row.income for row in rows])
        percents = np.array([row.subsidy_percent for row in rows])
        costs = np.array([row.annual_out_of_pocket for row in rows])

        fig, ax1 = plt.subplots(figsize=(12, 6))
        fig.suptitle("How Your Childcare Costs Change With Income", fontsize=14, fontweight='bold')

        ax1.plot(incomes, costs, 'r-', linewidth=2, label='Annual out of pocket')
        ax1.set_xlabel('Combined family income')
        ax1.set_ylabel('Annual out of pocket')
        ax1.xaxis.set_major_formatter(mticker.StrMethodFormatter('${x:,.0f}'))
        ax1.yaxis.set_major_formatter(mticker.StrMethodFormatter('${x:,.0f}'))
        ax1.grid(True, alpha=0.3)

        ax2 = ax1.twinx()
        ax2.step(incomes, percents, 'b--', where='post', linewidth=1.5, label='Subsidy %')
        ax2.set_ylabel('Subsidy (%)', color='blue')
        ax2.set_ylim(0, 100)

        ax1.axvline(x=self.resolved.combined_income, color='black', linestyle=':', linewidth=1,
                    label='Your income')

        lines1, labels1 = ax1.get_legend_handles_labels()
        lines2, labels2 = ax2.get_legend_handles_labels()
        ax1.legend(lines1 + lines2, labels1 + labels2, loc='best')

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')

        if show:
            plt.show()

        return fig

    def plot_back_to_work(self,
                          save_path: Optional[str] = None,
                          show: bool = True) -> plt.Figure:
        """
        Bar chart of net benefit for each working-days scenario.
        """
        btw = self.result.back_to_work
        if btw is None:
            raise ValueError("Calculation has no back-to-work comparison to plot")

        days = np.array([s.days_working for s in btw.scenarios])
        benefits = np.array([s.net_benefit for s in btw.scenarios])
        colors = ['green' if b > 0 else 'red' for b in benefits]

        fig, ax = plt.subplots(figsize=(10, 6))
        ax.bar(days, benefits, color=colors, alpha=0.7)
        ax.axhline(y=0, color='black', linestyle='-', linewidth=0.5)
        ax.set_xlabel('Days working per week')
        ax.set_ylabel('Net benefit per year')
        ax.set_title('Is Returning to Work Worth It?')
        ax.set_xticks(days)
        ax.yaxis.set_major_formatter(mticker.StrMethodFormatter('${x:,.0f}'))
        ax.grid(True, alpha=0.3, axis='y')

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')

        if show:
            plt.show()

        return fig

