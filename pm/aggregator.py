"""
Aggregate a monthly projection into display-ready outputs.

  build_chart_series  : fixed 240-point series for the stacked value chart
  summarize_trigger   : when (and whether) the asset retired the loan
  compare_scenarios   : side-by-side table for several named growth presets
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from core.config import ProjectionConfig
from core.schema import CHART_COLUMNS
from core.utils import add_months


@dataclass(frozen=True)
class ChartPoint:
    month: int
    date: date
    debt: float
    base_equity: float
    appreciation: float
    asset_value: float
    total_value: float


def build_chart_series(schedule: List, chart_months: int = 240) -> List[ChartPoint]:
    """
    Exactly ``chart_months`` points from a monthly schedule.

    Longer schedules are cut; shorter ones are extended with debt 0, full
    property equity and the last known appreciation and asset values.
    project() always runs at least config.min_horizon_months, so with the
    default config (240) the extension only applies to a lowered horizon
    floor or a schedule built by hand.
    """
    if not schedule:
        return []

    points: List[ChartPoint] = []
    for e in schedule[:chart_months]:
        points.append(
            ChartPoint(
                month=e.month,
                date=e.date,
                debt=e.debt_balance,
                base_equity=e.base_equity,
                appreciation=e.property_appreciation,
                asset_value=e.asset_value,
                total_value=e.total_value,
            )
        )

    last = schedule[-1]
    property_value = last.base_equity + last.debt_balance
    for m in range(len(points) + 1, chart_months + 1):
        points.append(
            ChartPoint(
                month=m,
                date=add_months(last.date, m - last.month),
                debt=0.0,
                base_equity=property_value,
                appreciation=last.property_appreciation,
                asset_value=last.asset_value,
                total_value=property_value + last.property_appreciation + last.asset_value,
            )
        )
    return points


def chart_to_frame(points: List[ChartPoint]) -> pd.DataFrame:
    if not points:
        return pd.DataFrame(columns=list(CHART_COLUMNS))
    return pd.DataFrame([asdict(p) for p in points])[list(CHART_COLUMNS)]


@dataclass(frozen=True)
class TriggerOutcome:
    fired: bool
    trigger_month: Optional[int] = None
    trigger_date: Optional[date] = None
    asset_value_at_trigger: Optional[float] = None
    debt_at_trigger: Optional[float] = None
    units_at_trigger: Optional[float] = None
    units_retained: Optional[float] = None
    months_remaining_in_term: int = 0
    estimated_interest_saved: float = 0.0

    @property
    def years_to_payoff(self) -> Optional[float]:
        return self.trigger_month / 12.0 if self.trigger_month is not None else None


def summarize_trigger(event, terms, config: ProjectionConfig = ProjectionConfig()) -> TriggerOutcome:
    """
    Trigger outcome for reporting.

    Interest saved is a rough estimate: interest_saved_factor (70%) of each
    payment skipped over the rest of the term.
    """
    if event is None:
        return TriggerOutcome(fired=False)

    remaining = max(terms.term_months - event.month, 0)
    saved = config.interest_saved_factor * terms.payment * remaining
    return TriggerOutcome(
        fired=True,
        trigger_month=event.month,
        trigger_date=event.date,
        asset_value_at_trigger=event.asset_value_at_trigger,
        debt_at_trigger=event.debt_at_trigger,
        units_at_trigger=event.units_at_trigger,
        units_retained=event.units_retained,
        months_remaining_in_term=remaining,
        estimated_interest_saved=saved,
    )


def compare_scenarios(results: Dict[str, object]) -> Dict[str, object]:
    """
    Tabulate several projections side by side.

    Parameters
    ----------
    results : dict
        Scenario name -> ProjectionResult.

    Returns
    -------
    Dict with:
      "summary_table":       one row per scenario
      "best_scenario":       highest final total value
      "worst_scenario":      lowest final total value
      "average_payoff_months": mean trigger month over scenarios that paid off (None if none did)
      "payoff_success_rate": share of scenarios whose trigger fired
    """
    rows = []
    for name, res in results.items():
        outcome = res.trigger_outcome
        perf = res.performance_summary
        rows.append({
            "Scenario": name,
            "Paid Off": outcome.fired,
            "Payoff Month": outcome.trigger_month,
            "Years to Payoff": outcome.years_to_payoff,
            "Final Total Value": perf.final_total_value,
            "Final Asset Value": perf.final_asset_value,
            "Total ROI": perf.total_roi,
            "Annualized Return": perf.annualized_return,
        })

    table = pd.DataFrame(rows)
    if table.empty:
        return {
            "summary_table": table,
            "best_scenario": None,
            "worst_scenario": None,
            "average_payoff_months": None,
            "payoff_success_rate": 0.0,
        }

    payoff_months = table.loc[table["Paid Off"], "Payoff Month"].dropna().values
    return {
        "summary_table": table,
        "best_scenario": str(table.loc[table["Final Total Value"].idxmax(), "Scenario"]),
        "worst_scenario": str(table.loc[table["Final Total Value"].idxmin(), "Scenario"]),
        "average_payoff_months": float(np.mean(payoff_months)) if len(payoff_months) else None,
        "payoff_success_rate": float(table["Paid Off"].mean()),
    }
