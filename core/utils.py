from __future__ import annotations

from datetime import date
from typing import List

from dateutil.relativedelta import relativedelta


def add_months(start: date, months: int) -> date:
    """Calendar month arithmetic; day clamps to month end (Jan 31 + 1 -> Feb 28/29)."""
    return start + relativedelta(months=months)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end`` (day of month ignored)."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def schedule_dates(start: date, n_months: int) -> List[date]:
    """Dates of projection months 1..n; month 1 falls on ``start``."""
    return [add_months(start, k) for k in range(n_months)]


def clamp_to_zero(value: float, epsilon: float) -> float:
    """Snap floating residue within ``epsilon`` of zero to exactly 0.0."""
    return 0.0 if abs(value) < epsilon else float(value)


def annual_to_monthly_rate(annual_rate: float) -> float:
    """Geometric monthly equivalent: (1 + r)^(1/12) - 1."""
    return (1.0 + annual_rate) ** (1.0 / 12.0) - 1.0


def annualize(total_return: float, years: float) -> float:
    """CAGR for a cumulative return over ``years``; -1.0 when the position is wiped out."""
    if years <= 0:
        return 0.0
    growth = 1.0 + total_return
    if growth <= 0:
        return -1.0
    return growth ** (1.0 / years) - 1.0
