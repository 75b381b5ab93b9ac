"""
Amortization scheduling for the equity loan.

Both loan variants amortize as fully-amortizing level-payment loans:
monthly rate = annual / 12, payment = PMT(principal, r, n). The balance at
month m is the present value of the n - (m - 1) payments still due, so
month 1 reports the full principal and the balance reaches 0 after the
last payment.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List

from core.config import ProjectionConfig
from core.schema import CASH_OUT_REFINANCE, REVOLVING_LINE, ProjectionInput
from core.utils import clamp_to_zero, schedule_dates


def level_payment(balance: float, monthly_rate: float, n_months: int) -> float:
    """Standard fully-amortizing level payment (PMT) with near-zero rate guard."""
    if n_months <= 0:
        return float(balance)
    if abs(monthly_rate) < 1e-12:
        return float(balance) / n_months
    growth = (1 + monthly_rate) ** n_months
    return float(balance) * (monthly_rate * growth) / (growth - 1)


@dataclass(frozen=True)
class LoanTerms:
    kind: str
    principal: float
    annual_rate: float
    term_months: int
    start_date: date

    @property
    def monthly_rate(self) -> float:
        return self.annual_rate / 12.0

    @property
    def payment(self) -> float:
        return level_payment(self.principal, self.monthly_rate, self.term_months)


def loan_terms_from_input(inputs: ProjectionInput) -> LoanTerms:
    """Normalize either loan variant into LoanTerms. Unknown kinds raise ValueError."""
    loan = inputs.loan
    start = inputs.asset_investment.performance_settings.start_date
    if loan.kind == CASH_OUT_REFINANCE:
        principal, rate, years = loan.new_loan_amount, loan.new_rate, loan.new_term_years
    elif loan.kind == REVOLVING_LINE:
        principal, rate, years = loan.balance, loan.rate, loan.term_years
    else:
        raise ValueError(f"Unknown loan kind: {loan.kind!r}")
    return LoanTerms(
        kind=loan.kind,
        principal=float(principal),
        annual_rate=float(rate),
        term_months=int(round(float(years) * 12)),
        start_date=start,
    )


def remaining_balance(terms: LoanTerms, month: int, config: ProjectionConfig = ProjectionConfig()) -> float:
    """
    Balance outstanding at the start of projection month ``month`` (1-based).

    Zero-rate loans reduce in a straight line. Beyond the term the balance
    is 0; residue within config.balance_epsilon is clamped to 0.
    """
    n = terms.term_months
    if month < 1:
        month = 1
    payments_left = n - (month - 1)
    if payments_left <= 0 or terms.principal <= 0:
        return 0.0

    r = terms.monthly_rate
    if abs(r) < 1e-12:
        balance = terms.principal * payments_left / n
    else:
        balance = terms.payment * (1 - (1 + r) ** -payments_left) / r
    return clamp_to_zero(max(balance, 0.0), config.balance_epsilon)


@dataclass(frozen=True)
class AmortizationRow:
    month: int
    date: date
    debt_balance: float  # outstanding at the start of the month
    payment: float
    principal_portion: float
    interest_portion: float


def build_amortization_schedule(
    terms: LoanTerms,
    total_months: int,
    config: ProjectionConfig = ProjectionConfig(),
) -> List[AmortizationRow]:
    """
    Monthly rows 1..total_months. Months past the term carry zero balance
    and zero payment.
    """
    rows: List[AmortizationRow] = []
    payment = terms.payment
    dates = schedule_dates(terms.start_date, total_months)
    for m in range(1, total_months + 1):
        bal = remaining_balance(terms, m, config)
        if m > terms.term_months or bal <= 0:
            rows.append(AmortizationRow(m, dates[m - 1], 0.0, 0.0, 0.0, 0.0))
            continue
        interest = bal * terms.monthly_rate
        principal = min(payment - interest, bal)
        rows.append(
            AmortizationRow(
                month=m,
                date=dates[m - 1],
                debt_balance=bal,
                payment=payment,
                principal_portion=principal,
                interest_portion=interest,
            )
        )
    return rows


def total_interest(terms: LoanTerms) -> float:
    """Lifetime interest if the loan runs to term."""
    if terms.term_months <= 0:
        return 0.0
    return terms.payment * terms.term_months - terms.principal


def interest_saved(balance: float, annual_rate: float, remaining_months: int) -> float:
    """Interest avoided by retiring ``balance`` now instead of amortizing it over ``remaining_months``."""
    if balance <= 0 or remaining_months <= 0:
        return 0.0
    pmt = level_payment(balance, annual_rate / 12.0, remaining_months)
    return max(pmt * remaining_months - balance, 0.0)
