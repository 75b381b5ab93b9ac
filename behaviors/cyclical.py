"""
CyclicalPerformanceModel: four-phase growth shaping for the volatile asset.

Each 48-month cycle (anchored to the event calendar in cycle_calendar.py)
is split into summer / fall / winter / spring. Two factor sets exist:

  Steep factors (phase_factors):
    net_gain = (1 + rate)^4 / (1 - drawdown)
    summer  = net_gain^(0.65 / 18)   per month
    fall    = (1 - drawdown)^(1 / 12) per month
    winter  = 1.0
    spring  = net_gain^(0.35 / 6)    per month
  Over the nominal 18/12/6/6 months these compound to exactly (1 + rate)^4,
  with the whole drawdown realised in the fall.

  Smoothed factors (used for the projection):
    factor = baseline * phase_multiplier   (1.05 / 0.98 / 1.00 / 1.02)
  where baseline is chosen so a full 48-month cycle still compounds to
  (1 + rate)^4. Spring keeps its multiplier over positions 36..47.

With shaping off every month grows at the flat (1 + rate)^(1/12).

The per-cycle target rate decays linearly from initial_rate (cycle 1) to
final_rate (last cycle touched by the horizon) when final_rate is given,
and is floored at min_cycle_rate.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Tuple

import numpy as np

from core.config import ProjectionConfig
from core.utils import schedule_dates

from .base import CyclePhase, PerformanceModel, PerformanceTimelineEntry
from .cycle_calendar import CYCLE_MONTHS, PHASE_LENGTHS, PHASE_SPANS, cycle_position, phase_for_position

SUMMER_GROWTH_SHARE = 0.65
SPRING_GROWTH_SHARE = 0.35


@dataclass(frozen=True)
class PhaseFactors:
    summer: float
    fall: float
    winter: float
    spring: float
    net_gain: float
    cumulative_decline: float  # fall ** 12, e.g. 0.30 for a 70% drawdown


def phase_factors(annual_rate: float, max_drawdown_pct: float) -> PhaseFactors:
    """
    Steep per-month factors for one cycle.

    Parameters
    ----------
    annual_rate : float
        Target annual growth for the cycle, decimal (0.20 = 20%).
    max_drawdown_pct : float
        Peak-to-trough decline in percent (70 = 70%). Must be in (0, 100).
    """
    if not 0.0 < max_drawdown_pct < 100.0:
        raise ValueError(f"max_drawdown_pct must be in (0, 100), got {max_drawdown_pct}")
    drawdown = max_drawdown_pct / 100.0
    fall_months = dict(PHASE_LENGTHS)[CyclePhase.FALL]
    summer_months = dict(PHASE_LENGTHS)[CyclePhase.SUMMER]
    spring_months = dict(PHASE_LENGTHS)[CyclePhase.SPRING]

    net_gain = (1.0 + annual_rate) ** 4 / (1.0 - drawdown)
    fall = (1.0 - drawdown) ** (1.0 / fall_months)
    return PhaseFactors(
        summer=net_gain ** (SUMMER_GROWTH_SHARE / summer_months),
        fall=fall,
        winter=1.0,
        spring=net_gain ** (SPRING_GROWTH_SHARE / spring_months),
        net_gain=net_gain,
        cumulative_decline=fall ** fall_months,
    )


def _multiplier_by_position(multipliers: Tuple[float, float, float, float]) -> np.ndarray:
    """Length-48 array: smoothed multiplier for each cycle position."""
    out = []
    for (phase, span), mult in zip(PHASE_SPANS, multipliers):
        out.extend([mult] * span)
    return np.asarray(out, dtype=float)


@dataclass(frozen=True)
class CyclicalPerformanceModel(PerformanceModel):
    """
    Deterministic growth timeline for the asset.

    Usage:
        model = CyclicalPerformanceModel(initial_rate=0.25, final_rate=0.10)
        timeline = model.forecast(date(2025, 1, 1), 240)
        factors = [t.monthly_growth_factor for t in timeline]
    """

    initial_rate: float
    final_rate: Optional[float] = None
    max_drawdown_pct: float = 70.0
    use_cyclical_shaping: bool = True
    config: ProjectionConfig = ProjectionConfig()

    def cycle_rates(self, total_cycles: int) -> np.ndarray:
        """Target annual rate for cycles 1..total_cycles."""
        total_cycles = max(int(total_cycles), 1)
        if self.final_rate is None or total_cycles == 1:
            rates = np.full(total_cycles, float(self.initial_rate))
        else:
            rates = np.linspace(float(self.initial_rate), float(self.final_rate), total_cycles)
        return np.maximum(rates, self.config.min_cycle_rate)

    def _cycle_arrays(self, start_date: date, horizon_months: int):
        start_pos = cycle_position(start_date)
        elapsed = start_pos + np.arange(horizon_months)
        positions = elapsed % CYCLE_MONTHS
        cycle_idx = elapsed // CYCLE_MONTHS + 1
        return start_pos, positions, cycle_idx

    def forecast(self, start_date: date, horizon_months: int) -> List[PerformanceTimelineEntry]:
        """
        One timeline entry per projection month.

        Month 1 always carries a factor of 1.0 so the projection starts at
        the quoted spot price.
        """
        if horizon_months <= 0:
            return []

        _, positions, cycle_idx = self._cycle_arrays(start_date, horizon_months)
        rates_by_cycle = self.cycle_rates(int(cycle_idx[-1]))
        rates = rates_by_cycle[cycle_idx - 1]

        flat = (1.0 + rates) ** (1.0 / 12.0)
        if self.use_cyclical_shaping:
            mult = _multiplier_by_position(self.config.phase_multipliers)
            # geometric mean multiplier over a full cycle; dividing it out keeps
            # each cycle's compounded growth at (1 + rate)^4
            norm = np.exp(np.log(mult).mean())
            factors = (flat / norm) * mult[positions]
        else:
            factors = flat
        factors = factors.astype(float)
        factors[0] = 1.0

        dates = schedule_dates(start_date, horizon_months)
        timeline = []
        for k in range(horizon_months):
            phase, _, _ = phase_for_position(int(positions[k]))
            timeline.append(
                PerformanceTimelineEntry(
                    month=k + 1,
                    date=dates[k],
                    cycle_position=int(positions[k]),
                    phase=phase,
                    monthly_growth_factor=float(factors[k]),
                    cycle_index=int(cycle_idx[k]),
                    cycle_annual_rate=float(rates[k]),
                )
            )
        return timeline

    def describe(self, start_date: date, horizon_months: int) -> Dict[str, object]:
        """Diagnostics for display: cycles spanned, start phase, factor tables."""
        start_pos, _, cycle_idx = self._cycle_arrays(start_date, max(horizon_months, 1))
        total_cycles = int(cycle_idx[-1])
        rates = self.cycle_rates(total_cycles)
        start_phase, month_in_phase, phase_length = phase_for_position(start_pos)

        steep = {}
        for c, rate in enumerate(rates, start=1):
            pf = phase_factors(float(rate), self.max_drawdown_pct)
            steep[c] = {
                "annual_rate": float(rate),
                "summer": pf.summer,
                "fall": pf.fall,
                "winter": pf.winter,
                "spring": pf.spring,
                "cycle_growth": (1.0 + float(rate)) ** 4,
            }

        return {
            "total_cycles": total_cycles,
            "start_position": start_pos,
            "start_phase": start_phase.value,
            "start_month_in_phase": month_in_phase,
            "start_phase_length": phase_length,
            "use_cyclical_shaping": self.use_cyclical_shaping,
            "phase_multipliers": dict(
                zip([p.value for p, _ in PHASE_LENGTHS], self.config.phase_multipliers)
            ),
            "cycle_rates": [float(r) for r in rates],
            "phase_factors": steep,
        }
