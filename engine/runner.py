"""
Projection runner: validates input, builds the amortization schedule and
asset timeline, walks the months and assembles the result.

Three entry points:
  1. project(inputs)        : typed, already-validated input -> ProjectionResult
  2. run_projection(raw)    : raw record -> ProjectionRun (validation first; never raises for bad input)
  3. run_scenarios(inputs)  : the same input under several growth presets, compared side by side

Every run is deterministic: no clock reads, no randomness. The spot price
and start date are inputs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

import pandas as pd

from behaviors.base import PerformanceTimelineEntry, timeline_to_frame
from behaviors.cyclical import CyclicalPerformanceModel
from core.config import SCENARIO_PRESETS, ProjectionConfig
from core.schema import ProjectionInput
from data_prep.validators import ValidationResult, check_business_rules, parse_inputs
from pm.aggregator import (
    ChartPoint,
    TriggerOutcome,
    build_chart_series,
    chart_to_frame,
    compare_scenarios,
    summarize_trigger,
)
from pm.metrics import PerformanceSummary, compute_performance_summary

from .amortization import LoanTerms, build_amortization_schedule, loan_terms_from_input
from .cashflow import MonthlyProjectionEntry, entries_to_frame, project_months

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectionResult:
    monthly_schedule: List[MonthlyProjectionEntry]
    chart_series: List[ChartPoint]
    trigger_outcome: TriggerOutcome
    performance_summary: PerformanceSummary
    timeline: List[PerformanceTimelineEntry]
    loan_terms: LoanTerms

    @property
    def horizon_months(self) -> int:
        return len(self.monthly_schedule)

    def schedule_frame(self) -> pd.DataFrame:
        return entries_to_frame(self.monthly_schedule)

    def chart_frame(self) -> pd.DataFrame:
        return chart_to_frame(self.chart_series)

    def timeline_frame(self) -> pd.DataFrame:
        return timeline_to_frame(self.timeline)


@dataclass(frozen=True)
class ProjectionRun:
    """Outcome of run_projection: a result, or the reasons there is none."""
    result: Optional[ProjectionResult]
    validation: ValidationResult

    @property
    def ok(self) -> bool:
        return self.result is not None


def build_performance_model(inputs: ProjectionInput, config: ProjectionConfig) -> CyclicalPerformanceModel:
    perf = inputs.asset_investment.performance_settings
    return CyclicalPerformanceModel(
        initial_rate=perf.initial_annual_rate,
        final_rate=perf.final_annual_rate,
        max_drawdown_pct=perf.max_drawdown_percent,
        use_cyclical_shaping=perf.use_cyclical_shaping,
        config=config,
    )


def project(inputs: ProjectionInput, config: Optional[ProjectionConfig] = None) -> ProjectionResult:
    """
    Run one projection on a validated input.

    Parameters
    ----------
    inputs : ProjectionInput
        Parsed input. Value-level rules are re-checked; a failing input
        raises ValueError instead of producing a partial result.
    config : ProjectionConfig, optional
        Engine constants; defaults to ProjectionConfig().

    Returns
    -------
    ProjectionResult covering max(min_horizon_months, loan term) months.
    """
    config = config or ProjectionConfig()
    if not isinstance(inputs, ProjectionInput):
        raise ValueError(f"project() expects a ProjectionInput, got {type(inputs).__name__}")
    check = check_business_rules(inputs, ValidationResult())
    if not check.is_valid:
        raise ValueError(f"Invalid projection input:\n{check.summary()}")

    terms = loan_terms_from_input(inputs)
    horizon = max(config.min_horizon_months, terms.term_months)
    logger.debug(
        "Projecting %d months: %s %.2f @ %.4f over %d months",
        horizon, terms.kind, terms.principal, terms.annual_rate, terms.term_months,
    )

    amortization = build_amortization_schedule(terms, horizon, config)
    timeline = build_performance_model(inputs, config).forecast(terms.start_date, horizon)
    schedule, event = project_months(inputs, amortization, timeline, config)

    outcome = summarize_trigger(event, terms, config)
    summary = compute_performance_summary(
        schedule,
        property_value=inputs.property.current_value,
        investment_amount=inputs.asset_investment.investment_amount,
        trigger_month=outcome.trigger_month,
        interest_savings=outcome.estimated_interest_saved,
        config=config,
    )
    logger.debug(
        "Projection done: trigger=%s, final total %.2f",
        outcome.trigger_month, summary.final_total_value,
    )

    return ProjectionResult(
        monthly_schedule=schedule,
        chart_series=build_chart_series(schedule, config.chart_months),
        trigger_outcome=outcome,
        performance_summary=summary,
        timeline=timeline,
        loan_terms=terms,
    )


def run_projection(
    raw: Union[ProjectionInput, Mapping[str, Any]],
    config: Optional[ProjectionConfig] = None,
) -> ProjectionRun:
    """Validate ``raw`` and project it. Invalid input returns the errors and no result."""
    inputs, validation = parse_inputs(raw)
    if inputs is not None:
        validation = check_business_rules(inputs, validation)
    if inputs is None or not validation.is_valid:
        logger.debug("Projection skipped: %d validation errors", len(validation.errors))
        return ProjectionRun(result=None, validation=validation)
    return ProjectionRun(result=project(inputs, config), validation=validation)


def with_performance(inputs: ProjectionInput, **overrides) -> ProjectionInput:
    """Copy of ``inputs`` with performance settings replaced (unknown keys ignored)."""
    perf = inputs.asset_investment.performance_settings
    known = {k: v for k, v in overrides.items() if k in type(perf).model_fields}
    asset = inputs.asset_investment.model_copy(update={"performance_settings": perf.model_copy(update=known)})
    return inputs.model_copy(update={"asset_investment": asset})


def run_scenarios(
    inputs: ProjectionInput,
    presets: Optional[Dict[str, Dict[str, object]]] = None,
    config: Optional[ProjectionConfig] = None,
) -> Dict[str, object]:
    """
    Project ``inputs`` once per growth preset and compare.

    Returns
    -------
    compare_scenarios() output plus "results": {name: ProjectionResult}.
    """
    presets = SCENARIO_PRESETS if presets is None else presets
    if not presets:
        raise ValueError("No scenario presets given.")

    results: Dict[str, ProjectionResult] = {}
    for name, preset in presets.items():
        results[name] = project(with_performance(inputs, **preset), config)

    comparison = compare_scenarios(results)
    comparison["results"] = results
    return comparison
