"""
Recurring-event calendar for the asset's four-year cycle.

The cycle is anchored to supply-halving dates. Known dates are fixed;
later ones are projected on a four-year cadence. Each 48-month cycle is
split into four phases:

  summer (18 months) -> fall (12) -> winter (6) -> spring (6)

Spring nominally lasts 6 months but runs on in the calendar until the
next event, so positions 36..47 all map to spring.

Positions are counted in whole calendar months since the most recent event.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Tuple

from dateutil.relativedelta import relativedelta

from core.utils import months_between

from .base import CyclePhase

CYCLE_MONTHS = 48

EVENT_DATES: Tuple[date, ...] = (
    date(2012, 11, 28),
    date(2016, 7, 9),
    date(2020, 5, 11),
    date(2024, 4, 20),
    # projected
    date(2028, 4, 20),
    date(2032, 4, 20),
    date(2036, 4, 20),
    date(2040, 4, 20),
)

# (phase, nominal length in months), in cycle order
PHASE_LENGTHS: Tuple[Tuple[CyclePhase, int], ...] = (
    (CyclePhase.SUMMER, 18),
    (CyclePhase.FALL, 12),
    (CyclePhase.WINTER, 6),
    (CyclePhase.SPRING, 6),
)

# (phase, calendar span in months); spans sum to CYCLE_MONTHS
PHASE_SPANS: Tuple[Tuple[CyclePhase, int], ...] = (
    (CyclePhase.SUMMER, 18),
    (CyclePhase.FALL, 12),
    (CyclePhase.WINTER, 6),
    (CyclePhase.SPRING, 12),
)


@dataclass(frozen=True)
class CycleInfo:
    as_of: date
    last_event: date
    next_event: date
    cycle_position: int
    phase: CyclePhase
    month_in_phase: int  # 1-based
    phase_length: int
    months_to_next_event: int


def last_event_date(as_of: date) -> date:
    """Most recent event on or before ``as_of``; the first table entry if none."""
    last = EVENT_DATES[0]
    for event in EVENT_DATES:
        if event <= as_of:
            last = event
        else:
            break
    return last


def next_event_date(as_of: date) -> date:
    """First event strictly after ``as_of``, projecting 4-year steps past the table."""
    for event in EVENT_DATES:
        if event > as_of:
            return event
    nxt = EVENT_DATES[-1]
    while nxt <= as_of:
        nxt = nxt + relativedelta(years=4)
    return nxt


def cycle_position(as_of: date) -> int:
    """Months since the last event, folded into 0..47."""
    return max(0, months_between(last_event_date(as_of), as_of)) % CYCLE_MONTHS


def phase_for_position(position: int) -> Tuple[CyclePhase, int, int]:
    """
    Map a cycle position to ``(phase, month_in_phase, phase_length)``.

    Positions outside 0..47 are folded back into the cycle first.
    month_in_phase is 1-based; phase_length is the calendar span.
    """
    pos = position % CYCLE_MONTHS
    offset = 0
    for phase, length in PHASE_SPANS:
        if pos < offset + length:
            return phase, pos - offset + 1, length
        offset += length
    # unreachable: the phase spans sum to CYCLE_MONTHS
    raise ValueError(f"Invalid cycle position: {position}")


def cycle_info(as_of: date) -> CycleInfo:
    pos = cycle_position(as_of)
    phase, month_in_phase, length = phase_for_position(pos)
    nxt = next_event_date(as_of)
    return CycleInfo(
        as_of=as_of,
        last_event=last_event_date(as_of),
        next_event=nxt,
        cycle_position=pos,
        phase=phase,
        month_in_phase=month_in_phase,
        phase_length=length,
        months_to_next_event=months_between(as_of, nxt),
    )
