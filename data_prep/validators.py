"""
Input validation for projection requests before they enter the engine.

Catches problems early:
- Missing or ill-typed fields (including an unknown loan kind)
- Non-positive values, balances and prices
- Trigger thresholds outside plausible bounds
- Rates and drawdowns that parse but look implausible (warnings)

Never raises for bad input; everything is collected into a ValidationResult.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from core.schema import PERCENTAGE_OF_DEBT, ProjectionInput

MAX_PERCENTAGE_THRESHOLD = 1000.0
MAX_TERM_YEARS = 50.0
DRAWDOWN_WARN_RANGE = (10.0, 90.0)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a projection input."""
    errors: List[FieldError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, field_name: str, message: str) -> None:
        self.errors.append(FieldError(field_name, message))

    def fields(self) -> List[str]:
        return [e.field for e in self.errors]

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def _loc_to_field(loc: Tuple[Any, ...]) -> str:
    return ".".join(str(p) for p in loc) if loc else "__root__"


def parse_inputs(raw: Union[ProjectionInput, Mapping[str, Any]]) -> Tuple[Optional[ProjectionInput], ValidationResult]:
    """Parse a raw record into ProjectionInput; parse failures become field errors."""
    result = ValidationResult()
    if isinstance(raw, ProjectionInput):
        return raw, result
    try:
        return ProjectionInput.model_validate(raw), result
    except ValidationError as exc:
        for err in exc.errors():
            result.add_error(_loc_to_field(err.get("loc", ())), err.get("msg", "invalid value"))
        return None, result


def check_business_rules(inputs: ProjectionInput, result: ValidationResult) -> ValidationResult:
    """Apply value-level rules to an already-parsed input."""
    prop = inputs.property
    asset = inputs.asset_investment
    perf = asset.performance_settings
    trig = inputs.payoff_trigger
    income = inputs.property_income

    # --- Property ---
    if prop.current_value <= 0:
        result.add_error("property.current_value", "Property value must be greater than zero")
    if prop.appreciation_rate <= -1.0:
        result.add_error("property.appreciation_rate", "Appreciation rate must be greater than -100%")
    elif prop.appreciation_rate > 1.0:
        result.warnings.append(
            f"Property appreciation rate {prop.appreciation_rate:.2f} looks like a percentage; rates are decimals."
        )

    # --- Loan ---
    loan = inputs.loan
    term_months = int(round(loan.years * 12))
    if loan.principal <= 0:
        result.add_error("loan", "Loan amount must be greater than zero")
    if loan.annual_rate < 0:
        result.add_error("loan", "Interest rate cannot be negative")
    elif loan.annual_rate > 1.0:
        result.warnings.append(
            f"Loan rate {loan.annual_rate:.2f} looks like a percentage; rates are decimals."
        )
    if term_months <= 0:
        result.add_error("loan", "Loan term must be at least one month")
    elif term_months > MAX_TERM_YEARS * 12:
        result.warnings.append(f"Loan term of {term_months / 12:.0f} years exceeds {MAX_TERM_YEARS:.0f} years.")

    # --- Income / costs ---
    for name in ("monthly_taxes", "monthly_insurance", "monthly_hoa"):
        if getattr(income, name) < 0:
            result.add_error(f"property_income.{name}", "Monthly cost cannot be negative")

    # --- Asset ---
    if asset.investment_amount <= 0:
        result.add_error("asset_investment.investment_amount", "Investment amount must be greater than zero")
    if asset.current_unit_price <= 0:
        result.add_error("asset_investment.current_unit_price", "Unit price must be greater than zero")

    dd = perf.max_drawdown_percent
    if not 0.0 < dd < 100.0:
        result.add_error(
            "asset_investment.performance_settings.max_drawdown_percent",
            "Max drawdown must be between 0 and 100 percent",
        )
    elif not DRAWDOWN_WARN_RANGE[0] <= dd <= DRAWDOWN_WARN_RANGE[1]:
        result.warnings.append(f"Max drawdown of {dd:.0f}% is outside the usual 10-90% range.")
    for name in ("initial_annual_rate", "final_annual_rate"):
        rate = getattr(perf, name)
        if rate is not None and rate > 1.0:
            result.warnings.append(f"Asset {name} {rate:.2f} looks like a percentage; rates are decimals.")

    # --- Trigger ---
    if trig.threshold <= 0:
        result.add_error("payoff_trigger.threshold", "Trigger threshold must be greater than zero")
    elif trig.kind == PERCENTAGE_OF_DEBT and trig.threshold > MAX_PERCENTAGE_THRESHOLD:
        result.add_error(
            "payoff_trigger.threshold",
            f"Percentage trigger cannot exceed {MAX_PERCENTAGE_THRESHOLD:.0f}%",
        )

    return result


def validate_inputs(raw: Union[ProjectionInput, Mapping[str, Any]]) -> ValidationResult:
    """
    Run all validation checks on a projection input.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    inputs, result = parse_inputs(raw)
    if inputs is None:
        return result  # can't check values without a parsed record
    return check_business_rules(inputs, result)
