"""
Core package: input schema, configuration and date helpers.
No business logic lives here.
"""

from .schema import (
    CASH_OUT_REFINANCE,
    REVOLVING_LINE,
    PERCENTAGE_OF_DEBT,
    RETAINED_FLOOR,
    SCHEDULE_COLUMNS,
    CHART_COLUMNS,
    ProjectionInput,
)
from .config import ProjectionConfig, SCENARIO_PRESETS
from .utils import add_months, months_between, schedule_dates

__all__ = [
    "CASH_OUT_REFINANCE",
    "REVOLVING_LINE",
    "PERCENTAGE_OF_DEBT",
    "RETAINED_FLOOR",
    "SCHEDULE_COLUMNS",
    "CHART_COLUMNS",
    "ProjectionInput",
    "ProjectionConfig",
    "SCENARIO_PRESETS",
    "add_months",
    "months_between",
    "schedule_dates",
]
