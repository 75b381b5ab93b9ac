"""
Projection engine: amortization, asset valuation, payoff trigger and the monthly walk.
"""

from .runner import ProjectionResult, ProjectionRun, project, run_projection, run_scenarios

__all__ = ["ProjectionResult", "ProjectionRun", "project", "run_projection", "run_scenarios"]
