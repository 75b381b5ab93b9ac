"""
Projection outputs: chart series, trigger outcome, performance summary, guidance.
"""

from .metrics import PerformanceSummary, compute_performance_summary
from .aggregator import build_chart_series, summarize_trigger, compare_scenarios
from .decisions import GuidanceReport, generate_guidance_report

__all__ = [
    "PerformanceSummary",
    "compute_performance_summary",
    "build_chart_series",
    "summarize_trigger",
    "compare_scenarios",
    "GuidanceReport",
    "generate_guidance_report",
]
