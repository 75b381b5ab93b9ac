"""
Asset valuation and shortfall liquidation.

Units are bought once at the start (investment / spot price) and only ever
sold afterwards: to cover a monthly housing shortfall while the loan is
active, and once in bulk when the payoff trigger fires.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.utils import annual_to_monthly_rate


@dataclass
class AssetPosition:
    units_held: float
    initial_unit_price: float
    initial_investment: float

    @classmethod
    def open(cls, investment: float, unit_price: float) -> "AssetPosition":
        if unit_price <= 0:
            raise ValueError(f"unit_price must be positive, got {unit_price}")
        return cls(
            units_held=float(investment) / float(unit_price),
            initial_unit_price=float(unit_price),
            initial_investment=float(investment),
        )

    def value_at(self, spot_price: float) -> float:
        return self.units_held * spot_price

    def sell(self, units: float) -> float:
        """Sell up to ``units``; returns the units actually sold."""
        sold = min(max(units, 0.0), self.units_held)
        self.units_held = max(self.units_held - sold, 0.0)
        return sold


@dataclass(frozen=True)
class ShortfallSale:
    units_sold: float
    proceeds: float
    units_remaining: float


def plan_shortfall_sale(shortfall: float, spot_price: float, units_held: float) -> ShortfallSale:
    """
    Units needed to cover ``shortfall`` at ``spot_price``, capped at the holding.

    A non-positive shortfall or price sells nothing. When the holding is
    too small the sale covers what it can; that is not an error.
    """
    if shortfall <= 0 or spot_price <= 0 or units_held <= 0:
        return ShortfallSale(0.0, 0.0, max(units_held, 0.0))
    units = min(shortfall / spot_price, units_held)
    return ShortfallSale(units, units * spot_price, units_held - units)


def next_spot_price(previous: float, growth_factor: float, max_monthly_drop: float = 0.20) -> float:
    """Compound the price one month, never falling more than ``max_monthly_drop`` in a month."""
    floor = previous * (1.0 - max_monthly_drop)
    return max(previous * growth_factor, floor)


def monthly_housing_cost(payment: float, taxes: float, insurance: float, hoa: float) -> float:
    return payment + taxes + insurance + hoa


def monthly_shortfall(housing_cost: float, income: float) -> float:
    return max(0.0, housing_cost - income)


def property_appreciation(current_value: float, annual_rate: float, month: int) -> float:
    """Cumulative appreciation at month ``month`` (0 at month 1)."""
    g = annual_to_monthly_rate(annual_rate)
    return current_value * (1.0 + g) ** (max(month, 1) - 1) - current_value
