"""
Performance summary for one projection.

Return measures are taken on (initial property value + initial investment).
The annualized return is measured at the determination point: the trigger
month if the trigger fired, otherwise the last projected month. At the
trigger month the value is the pre-payoff snapshot (property value plus
asset value before the payoff sale), not the post-sale row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import pandas as pd

from core.config import ProjectionConfig
from core.utils import annualize


@dataclass(frozen=True)
class PerformanceSummary:
    initial_total: float
    final_total_value: float
    final_property_value: float
    final_asset_value: float
    total_roi: float
    annualized_return: float
    determination_month: int
    determination_total_value: float
    years_elapsed: float

    # breakdown
    property_appreciation_gain: float
    net_asset_contribution: float  # final asset value - investment
    interest_savings: float

    # baseline at a flat reference return over the same years
    baseline_annual_return: float
    baseline_final_value: float
    excess_over_baseline: float

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to a display-friendly table."""
        rows = [
            {"Metric": "Final Total Value", "Value": f"${self.final_total_value:,.0f}"},
            {"Metric": "Final Property Value", "Value": f"${self.final_property_value:,.0f}"},
            {"Metric": "Final Asset Value", "Value": f"${self.final_asset_value:,.0f}"},
            {"Metric": "Total ROI", "Value": f"{self.total_roi:.1%}"},
            {"Metric": "Annualized Return", "Value": f"{self.annualized_return:.2%}"},
            {"Metric": "Value at Determination", "Value": f"${self.determination_total_value:,.0f}"},
            {"Metric": "Measured Over", "Value": f"{self.years_elapsed:.1f} years"},
            {"Metric": "Property Appreciation Gain", "Value": f"${self.property_appreciation_gain:,.0f}"},
            {"Metric": "Net Asset Contribution", "Value": f"${self.net_asset_contribution:,.0f}"},
            {"Metric": "Interest Savings (est.)", "Value": f"${self.interest_savings:,.0f}"},
            {
                "Metric": f"Baseline @ {self.baseline_annual_return:.0%}",
                "Value": f"${self.baseline_final_value:,.0f}",
            },
            {"Metric": "Excess Over Baseline", "Value": f"${self.excess_over_baseline:,.0f}"},
        ]
        return pd.DataFrame(rows)


def compute_performance_summary(
    schedule: List,
    *,
    property_value: float,
    investment_amount: float,
    trigger_month: Optional[int] = None,
    interest_savings: float = 0.0,
    config: ProjectionConfig = ProjectionConfig(),
) -> PerformanceSummary:
    """
    Summarize a monthly schedule.

    Parameters
    ----------
    schedule : list of MonthlyProjectionEntry
        Full projection, month 1 first.
    property_value, investment_amount : float
        Starting positions; their sum is the ROI denominator.
    trigger_month : int, optional
        Month the payoff trigger fired, if it did.
    interest_savings : float
        Estimated interest saved by early payoff (from the trigger outcome).
    """
    if not schedule:
        raise ValueError("Cannot summarize an empty schedule")

    initial_total = float(property_value) + float(investment_amount)
    last = schedule[-1]
    total_roi = (last.total_value - initial_total) / initial_total if initial_total > 0 else 0.0

    if trigger_month is not None and 1 <= trigger_month <= len(schedule):
        det = schedule[trigger_month - 1]
    else:
        det = last
    det_total = det.total_value
    if det.asset_value_at_trigger is not None:
        det_total = det.property_value + det.asset_value_at_trigger
    years = det.month / 12.0
    det_roi = (det_total - initial_total) / initial_total if initial_total > 0 else 0.0
    annualized = annualize(det_roi, years)

    baseline_final = initial_total * (1.0 + config.baseline_annual_return) ** years

    return PerformanceSummary(
        initial_total=initial_total,
        final_total_value=last.total_value,
        final_property_value=last.property_value,
        final_asset_value=last.asset_value,
        total_roi=total_roi,
        annualized_return=annualized,
        determination_month=det.month,
        determination_total_value=det_total,
        years_elapsed=years,
        property_appreciation_gain=last.property_appreciation,
        net_asset_contribution=last.asset_value - float(investment_amount),
        interest_savings=float(interest_savings),
        baseline_annual_return=config.baseline_annual_return,
        baseline_final_value=baseline_final,
        excess_over_baseline=det_total - baseline_final,
    )
