"""
Base classes for asset performance models.
Just the interface and the timeline record, no implementations.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from enum import Enum
from typing import List

import pandas as pd


class CyclePhase(str, Enum):
    SUMMER = "summer"  # expansion
    FALL = "fall"  # decline
    WINTER = "winter"  # bottoming
    SPRING = "spring"  # recovery


@dataclass(frozen=True)
class PerformanceTimelineEntry:
    """
    Growth assumption for one projection month.

    monthly_growth_factor multiplies the previous month's spot price
    (1.0 = flat). cycle_index is 1-based over the projection horizon.
    """

    month: int
    date: date
    cycle_position: int  # 0..47, months since the last recurring event
    phase: CyclePhase
    monthly_growth_factor: float
    cycle_index: int
    cycle_annual_rate: float


class PerformanceModel:
    """Interface for generating monthly growth factors for the asset."""

    def forecast(self, start_date: date, horizon_months: int) -> List[PerformanceTimelineEntry]:
        raise NotImplementedError


def timeline_to_frame(timeline: List[PerformanceTimelineEntry]) -> pd.DataFrame:
    rows = []
    for entry in timeline:
        row = asdict(entry)
        row["phase"] = entry.phase.value
        rows.append(row)
    return pd.DataFrame(rows)
