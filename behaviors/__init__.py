"""
Asset performance models: turn growth assumptions into a monthly growth timeline.
"""

from .base import CyclePhase, PerformanceTimelineEntry, PerformanceModel, timeline_to_frame
from .cycle_calendar import cycle_info, cycle_position, phase_for_position
from .cyclical import CyclicalPerformanceModel, PhaseFactors, phase_factors

__all__ = [
    "CyclePhase",
    "PerformanceTimelineEntry",
    "PerformanceModel",
    "timeline_to_frame",
    "cycle_info",
    "cycle_position",
    "phase_for_position",
    "CyclicalPerformanceModel",
    "PhaseFactors",
    "phase_factors",
]
