"""
Input schema for one projection run.

The engine consumes a single ``ProjectionInput`` record. Field names are
snake_case in Python; camelCase keys (``currentValue``, ``monthlyHOA``, ...)
are accepted as aliases so that records posted by the form layer parse
unchanged.

The loan is a tagged variant: ``kind`` selects between a fixed cash-out
refinance and a revolving equity line. Anything reading loan terms matches
on ``kind`` (see ``engine.amortization.loan_terms_from_input``).
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CASH_OUT_REFINANCE = "cash_out_refinance"
REVOLVING_LINE = "revolving_line"
LOAN_KINDS: Tuple[str, ...] = (CASH_OUT_REFINANCE, REVOLVING_LINE)

PERCENTAGE_OF_DEBT = "percentage_of_debt"
RETAINED_FLOOR = "retained_floor"
TRIGGER_KINDS: Tuple[str, ...] = (PERCENTAGE_OF_DEBT, RETAINED_FLOOR)

# Column order of the monthly schedule DataFrame (ProjectionResult.schedule_frame()).
SCHEDULE_COLUMNS: Tuple[str, ...] = (
    "month",
    "date",
    "debt_balance",
    "base_equity",
    "property_appreciation",
    "property_value",
    "payment",
    "housing_cost",
    "shortfall",
    "net_cash_flow",
    "units_sold",
    "payoff_units_sold",
    "units_held",
    "spot_price",
    "growth_rate",
    "asset_value",
    "total_value",
    "trigger_met",
    "trigger_state",
)

# Column order of the 240-month chart DataFrame (ProjectionResult.chart_frame()).
CHART_COLUMNS: Tuple[str, ...] = (
    "month",
    "date",
    "debt",
    "base_equity",
    "appreciation",
    "asset_value",
    "total_value",
)


class _InputModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        allow_inf_nan=False,
    )


class PropertyInput(_InputModel):
    current_value: float
    appreciation_rate: float  # annual, decimal (0.03 = 3%)


class CashOutRefinance(_InputModel):
    """New fixed-term loan that replaces the existing mortgage and extracts equity."""

    kind: Literal["cash_out_refinance"] = CASH_OUT_REFINANCE
    new_loan_amount: float
    new_rate: float  # annual, decimal
    new_term_years: float

    @property
    def principal(self) -> float:
        return self.new_loan_amount

    @property
    def annual_rate(self) -> float:
        return self.new_rate

    @property
    def years(self) -> float:
        return self.new_term_years


class RevolvingLine(_InputModel):
    """Revolving credit line secured by the property's equity."""

    kind: Literal["revolving_line"] = REVOLVING_LINE
    balance: float
    rate: float  # annual, decimal
    term_years: float

    @property
    def principal(self) -> float:
        return self.balance

    @property
    def annual_rate(self) -> float:
        return self.rate

    @property
    def years(self) -> float:
        return self.term_years


LoanScenario = Annotated[Union[CashOutRefinance, RevolvingLine], Field(discriminator="kind")]


class PropertyIncome(_InputModel):
    monthly_income: float
    monthly_taxes: float = 0.0
    monthly_insurance: float = 0.0
    monthly_hoa: float = Field(default=0.0, alias="monthlyHOA")

    @property
    def monthly_carrying_cost(self) -> float:
        """Taxes + insurance + HOA (everything except the loan payment)."""
        return self.monthly_taxes + self.monthly_insurance + self.monthly_hoa


class PerformanceSettings(_InputModel):
    initial_annual_rate: float  # cycle-1 target growth, decimal
    final_annual_rate: Optional[float] = None  # last-cycle target; enables linear decay
    use_cyclical_shaping: bool = True
    max_drawdown_percent: float = 70.0  # peak-to-trough, percent
    start_date: date


class AssetInvestment(_InputModel):
    investment_amount: float
    current_unit_price: float
    performance_settings: PerformanceSettings


class PayoffTriggerSettings(_InputModel):
    kind: Literal["percentage_of_debt", "retained_floor"]
    threshold: float


class ProjectionInput(_InputModel):
    """One fully-formed projection request."""

    property: PropertyInput
    loan: LoanScenario
    property_income: PropertyIncome
    asset_investment: AssetInvestment
    payoff_trigger: PayoffTriggerSettings
