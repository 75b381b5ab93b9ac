"""
Payoff trigger: one-way state machine that retires the loan from the asset.

  ACTIVE ──(condition met and asset >= debt)──> TRIGGERED_PAYOFF ──(next month)──> PAID_OFF

Conditions:
  percentage_of_debt : asset / debt * 100 >= threshold
  retained_floor     : asset - debt      >= threshold

When the trigger fires, debt / spot_price units are sold, the debt is
zeroed for the rest of the projection and the pre-sale figures are kept
as the at-trigger snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from core.schema import PERCENTAGE_OF_DEBT, RETAINED_FLOOR

from .valuation import AssetPosition

logger = logging.getLogger(__name__)


class TriggerState(str, Enum):
    ACTIVE = "active"
    TRIGGERED_PAYOFF = "triggered_payoff"
    PAID_OFF = "paid_off"


@dataclass(frozen=True)
class PayoffTrigger:
    kind: str
    threshold: float

    def condition_met(self, asset_value: float, debt: float) -> bool:
        if self.kind == PERCENTAGE_OF_DEBT:
            return asset_value / debt * 100.0 >= self.threshold
        if self.kind == RETAINED_FLOOR:
            return asset_value - debt >= self.threshold
        raise ValueError(f"Unknown trigger kind: {self.kind!r}")

    def is_satisfied(self, asset_value: float, debt: float) -> bool:
        """Configured condition AND enough asset to cover the debt. No debt, no trigger."""
        if debt <= 0:
            return False
        return self.condition_met(asset_value, debt) and asset_value >= debt


@dataclass(frozen=True)
class TriggerEvent:
    """Snapshot taken the month the trigger fires (pre-sale figures)."""
    month: int
    date: date
    asset_value_at_trigger: float
    debt_at_trigger: float
    spot_price: float
    units_at_trigger: float
    units_sold: float
    units_retained: float


class PayoffTriggerEvaluator:
    """
    Holds the trigger state for one projection run.

    Call evaluate() once per month, after any shortfall sale.
    """

    def __init__(self, trigger: PayoffTrigger):
        self.trigger = trigger
        self.state = TriggerState.ACTIVE
        self.event: Optional[TriggerEvent] = None

    @property
    def fired(self) -> bool:
        return self.state is not TriggerState.ACTIVE

    def evaluate(
        self,
        *,
        month: int,
        when: date,
        position: AssetPosition,
        spot_price: float,
        debt: float,
    ) -> Optional[TriggerEvent]:
        """
        Advance the state machine one month.

        Returns the TriggerEvent in the month the trigger fires, else None.
        Sells the payoff units from ``position`` in place.
        """
        if self.state is TriggerState.TRIGGERED_PAYOFF:
            self.state = TriggerState.PAID_OFF
            return None
        if self.state is TriggerState.PAID_OFF or spot_price <= 0:
            return None

        asset_value = position.value_at(spot_price)
        if not self.trigger.is_satisfied(asset_value, debt):
            return None

        units_before = position.units_held
        sold = position.sell(debt / spot_price)
        self.state = TriggerState.TRIGGERED_PAYOFF
        self.event = TriggerEvent(
            month=month,
            date=when,
            asset_value_at_trigger=asset_value,
            debt_at_trigger=debt,
            spot_price=spot_price,
            units_at_trigger=units_before,
            units_sold=sold,
            units_retained=position.units_held,
        )
        logger.info(
            "Payoff trigger fired in month %d: asset %.2f vs debt %.2f, sold %.6f units",
            month, asset_value, debt, sold,
        )
        return self.event
