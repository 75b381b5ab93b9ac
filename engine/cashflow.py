"""
Monthly projection walk: debt, property and asset stepped together.

Per month, in order:
  1. Spot price compounds by the month's growth factor (drop-clamped).
  2. Debt is the scheduled balance, or 0 once the trigger has fired.
  3. While the loan is active (not paid off, scheduled balance above 0),
     units are sold to cover any housing shortfall.
  4. The payoff trigger is evaluated on the post-shortfall asset value.
     If it fires, the row reports the post-payoff state (debt 0).
  5. Property appreciation accrues on the original property value.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import List, Optional, Tuple

import pandas as pd

from behaviors.base import PerformanceTimelineEntry
from core.config import ProjectionConfig
from core.schema import SCHEDULE_COLUMNS, ProjectionInput

from .amortization import AmortizationRow
from .trigger import PayoffTrigger, PayoffTriggerEvaluator, TriggerEvent
from .valuation import (
    AssetPosition,
    monthly_housing_cost,
    monthly_shortfall,
    next_spot_price,
    plan_shortfall_sale,
    property_appreciation,
)


@dataclass(frozen=True)
class MonthlyProjectionEntry:
    month: int
    date: date
    debt_balance: float
    base_equity: float  # property value at start less debt
    property_appreciation: float
    property_value: float
    payment: float
    housing_cost: float
    shortfall: float
    net_cash_flow: float  # income less housing cost
    units_sold: float  # shortfall sale
    payoff_units_sold: float
    units_held: float
    spot_price: float
    growth_rate: float  # monthly_growth_factor - 1
    asset_value: float
    total_value: float  # property value + asset value
    trigger_met: bool
    trigger_state: str
    asset_value_at_trigger: Optional[float] = None
    debt_at_trigger: Optional[float] = None


def project_months(
    inputs: ProjectionInput,
    amortization: List[AmortizationRow],
    timeline: List[PerformanceTimelineEntry],
    config: ProjectionConfig = ProjectionConfig(),
) -> Tuple[List[MonthlyProjectionEntry], Optional[TriggerEvent]]:
    """
    Step the projection across the horizon.

    amortization and timeline must cover the same months (1..horizon).

    Returns
    -------
    (entries, trigger_event)
        trigger_event is None when the trigger never fires.
    """
    if len(amortization) != len(timeline):
        raise ValueError(
            f"Schedule length mismatch: {len(amortization)} amortization rows "
            f"vs {len(timeline)} timeline entries"
        )

    prop = inputs.property
    income = inputs.property_income
    asset = inputs.asset_investment
    trig = inputs.payoff_trigger

    position = AssetPosition.open(asset.investment_amount, asset.current_unit_price)
    evaluator = PayoffTriggerEvaluator(PayoffTrigger(kind=trig.kind, threshold=trig.threshold))
    price = position.initial_unit_price

    entries: List[MonthlyProjectionEntry] = []
    for row, perf in zip(amortization, timeline):
        price = next_spot_price(price, perf.monthly_growth_factor, config.max_monthly_price_drop)

        active = not evaluator.fired and row.debt_balance > 0.0
        debt = row.debt_balance if active else 0.0
        payment = row.payment if active else 0.0

        housing = monthly_housing_cost(
            payment, income.monthly_taxes, income.monthly_insurance, income.monthly_hoa
        )
        shortfall = 0.0
        units_sold = 0.0
        if active:
            shortfall = monthly_shortfall(housing, income.monthly_income)
            sale = plan_shortfall_sale(shortfall, price, position.units_held)
            units_sold = position.sell(sale.units_sold)

        event = evaluator.evaluate(
            month=row.month, when=row.date, position=position, spot_price=price, debt=debt
        )
        payoff_units = 0.0
        if event is not None:
            debt = 0.0
            payoff_units = event.units_sold

        appreciation = property_appreciation(prop.current_value, prop.appreciation_rate, row.month)
        property_value = prop.current_value + appreciation
        asset_value = position.value_at(price)

        entries.append(
            MonthlyProjectionEntry(
                month=row.month,
                date=row.date,
                debt_balance=debt,
                base_equity=prop.current_value - debt,
                property_appreciation=appreciation,
                property_value=property_value,
                payment=payment,
                housing_cost=housing,
                shortfall=shortfall,
                net_cash_flow=income.monthly_income - housing,
                units_sold=units_sold,
                payoff_units_sold=payoff_units,
                units_held=position.units_held,
                spot_price=price,
                growth_rate=perf.monthly_growth_factor - 1.0,
                asset_value=asset_value,
                total_value=property_value + asset_value,
                trigger_met=evaluator.fired,
                trigger_state=evaluator.state.value,
                asset_value_at_trigger=event.asset_value_at_trigger if event else None,
                debt_at_trigger=event.debt_at_trigger if event else None,
            )
        )

    return entries, evaluator.event


def entries_to_frame(entries: List[MonthlyProjectionEntry]) -> pd.DataFrame:
    df = pd.DataFrame([asdict(e) for e in entries])
    if df.empty:
        return pd.DataFrame(columns=list(SCHEDULE_COLUMNS))
    extra = [c for c in df.columns if c not in SCHEDULE_COLUMNS]
    return df[list(SCHEDULE_COLUMNS) + extra]
