"""
Financing guidance: equity headroom, affordability and risk flags.

Answers the questions a borrower asks before tapping equity:
  Q1: "How much can I take out?"      → max tappable equity at 80% LTV
  Q2: "Can I afford the payment?"     → payment vs income (DTI bands)
  Q3: "Does the plan actually work?"  → payoff reached, asset depleted, cash-flow drag
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd

from core.schema import ProjectionInput
from engine.amortization import loan_terms_from_input

MAX_LTV = 0.80
TARGET_DTI = 0.36

# (upper DTI bound, likelihood), checked in order
DTI_BANDS = (
    (0.28, "excellent"),
    (0.36, "good"),
    (0.43, "marginal"),
)


@dataclass(frozen=True)
class EquityData:
    total_equity: float
    max_tappable_equity: float
    current_ltv: float
    max_ltv: float


def calculate_equity_data(property_value: float, mortgage_balance: float, max_ltv: float = MAX_LTV) -> EquityData:
    if property_value <= 0:
        raise ValueError(f"property_value must be positive, got {property_value}")
    return EquityData(
        total_equity=property_value - mortgage_balance,
        max_tappable_equity=max(0.0, property_value * max_ltv - mortgage_balance),
        current_ltv=mortgage_balance / property_value,
        max_ltv=max_ltv,
    )


def required_income(monthly_payment: float, existing_debts: float = 0.0, max_dti: float = TARGET_DTI) -> float:
    return (monthly_payment + existing_debts) / max_dti


def approval_likelihood(dti: float) -> str:
    for bound, label in DTI_BANDS:
        if dti <= bound:
            return label
    return "poor"


@dataclass
class GuidanceReport:
    """Structured financing guidance."""
    loan_kind: str
    loan_amount: float
    equity: EquityData
    estimated_payment: float
    required_income: float
    current_dti: Optional[float]
    approval_likelihood: str
    recommendations: List[str] = field(default_factory=list)
    flags: List[str] = field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to a display-friendly table."""
        rows = [
            {"Metric": "Loan Type", "Value": self.loan_kind.replace("_", " ").title()},
            {"Metric": "Loan Amount", "Value": f"${self.loan_amount:,.0f}"},
            {"Metric": "Total Equity", "Value": f"${self.equity.total_equity:,.0f}"},
            {"Metric": "Current LTV", "Value": f"{self.equity.current_ltv:.1%}"},
            {
                "Metric": f"Max Tappable Equity ({self.equity.max_ltv:.0%} LTV)",
                "Value": f"${self.equity.max_tappable_equity:,.0f}",
            },
            {"Metric": "Estimated Payment", "Value": f"${self.estimated_payment:,.2f}"},
            {"Metric": f"Required Income ({TARGET_DTI:.0%} DTI)", "Value": f"${self.required_income:,.0f}"},
            {
                "Metric": "Debt-to-Income",
                "Value": f"{self.current_dti:.1%}" if self.current_dti is not None else "n/a",
            },
            {"Metric": "Approval Likelihood", "Value": self.approval_likelihood},
        ]
        for i, flag in enumerate(self.flags, 1):
            rows.append({"Metric": f"Flag {i}", "Value": flag})
        return pd.DataFrame(rows)


def generate_guidance_report(
    inputs: ProjectionInput,
    result=None,
    *,
    monthly_gross_income: Optional[float] = None,
    mortgage_balance: float = 0.0,
) -> GuidanceReport:
    """
    Build financing guidance for one projection input.

    Parameters
    ----------
    inputs : ProjectionInput
        Validated projection input.
    result : ProjectionResult, optional
        When given, outcome flags are derived from the projection.
    monthly_gross_income : float, optional
        Borrower gross income used for the DTI check. Without it the
        likelihood stays at "good" and no DTI is reported.
    mortgage_balance : float
        Existing mortgage balance, for the equity headroom figures.
    """
    terms = loan_terms_from_input(inputs)
    payment = terms.payment
    equity = calculate_equity_data(inputs.property.current_value, mortgage_balance)

    recommendations: List[str] = []
    dti = None
    likelihood = "good"
    if monthly_gross_income:
        dti = payment / monthly_gross_income
        likelihood = approval_likelihood(dti)
        if likelihood == "marginal":
            recommendations.append("Consider increasing income or reducing loan amount")
        elif likelihood == "poor":
            recommendations.append("Loan approval unlikely with current income")
            recommendations.append("Consider significant income increase or smaller loan amount")

    if inputs.property.current_value < terms.principal * 1.25:
        recommendations.append("Consider lower loan-to-value ratio for better rates")

    flags: List[str] = []
    if result is not None:
        schedule = result.monthly_schedule
        if not result.trigger_outcome.fired:
            flags.append(f"NO PAYOFF: trigger never met within {len(schedule)} months")
        if schedule and schedule[-1].units_held <= 1e-12:
            flags.append("ASSET DEPLETED: shortfall sales exhausted the holding")
        drag = [e for e in schedule if e.payment > 0 and e.net_cash_flow < 0]
        if drag:
            flags.append(
                f"NEGATIVE CASH FLOW: housing cost exceeds income in {len(drag)} months "
                f"(worst ${min(e.net_cash_flow for e in drag):,.0f}/mo)"
            )

    return GuidanceReport(
        loan_kind=terms.kind,
        loan_amount=terms.principal,
        equity=equity,
        estimated_payment=payment,
        required_income=required_income(payment),
        current_dti=dti,
        approval_likelihood=likelihood,
        recommendations=recommendations,
        flags=flags,
    )
