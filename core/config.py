"""
Projection configuration.

Engine constants live here so that every numeric guard and reporting
convention is visible in one place and can be overridden per run.
Scenario presets feed the dashboard and ``engine.runner.run_scenarios``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class ProjectionConfig:
    # horizon / reporting
    min_horizon_months: int = 240  # schedule always covers at least 20 years
    chart_months: int = 240

    # numeric guards
    max_monthly_price_drop: float = 0.20  # new price >= previous * (1 - drop)
    balance_epsilon: float = 0.01  # balances below this clamp to exactly 0

    # performance model
    min_cycle_rate: float = 0.01  # floor on the per-cycle target growth rate
    # smoothed per-phase multipliers: (summer, fall, winter, spring)
    phase_multipliers: Tuple[float, float, float, float] = (1.05, 0.98, 1.00, 1.02)

    # summary reporting
    interest_saved_factor: float = 0.70  # share of each skipped payment counted as interest
    baseline_annual_return: float = 0.07  # flat reference return for the baseline comparison


# Named growth presets (decimal rates, drawdown in percent).
SCENARIO_PRESETS: Dict[str, Dict[str, object]] = {
    "Conservative": {
        "initial_annual_rate": 0.10, "final_annual_rate": 0.05, "max_drawdown_percent": 75.0,
        "description": "Modest growth that fades across cycles",
    },
    "Moderate": {
        "initial_annual_rate": 0.25, "final_annual_rate": 0.10, "max_drawdown_percent": 70.0,
        "description": "Strong early cycles, diminishing returns",
    },
    "Aggressive": {
        "initial_annual_rate": 0.50, "final_annual_rate": 0.20, "max_drawdown_percent": 65.0,
        "description": "High growth with shallower bear markets",
    },
    "Flat Compounding": {
        "initial_annual_rate": 0.15, "final_annual_rate": None, "max_drawdown_percent": 70.0,
        "use_cyclical_shaping": False,
        "description": "Steady compounding, no cycle shaping",
    },
}
