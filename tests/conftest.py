import copy
import sys
from datetime import date
from pathlib import Path

import pytest

# Make project root importable
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.schema import ProjectionInput  # noqa: E402
from engine.amortization import LoanTerms  # noqa: E402

SAMPLE_RAW = {
    "property": {"currentValue": 200000.0, "appreciationRate": 0.03},
    "loan": {
        "kind": "cash_out_refinance",
        "newLoanAmount": 190000.0,
        "newRate": 0.06,
        "newTermYears": 30,
    },
    "propertyIncome": {
        "monthlyIncome": 2000.0,
        "monthlyTaxes": 200.0,
        "monthlyInsurance": 100.0,
        "monthlyHOA": 0.0,
    },
    "assetInvestment": {
        "investmentAmount": 40000.0,
        "currentUnitPrice": 50000.0,
        "performanceSettings": {
            "initialAnnualRate": 0.20,
            "finalAnnualRate": None,
            "useCyclicalShaping": True,
            "maxDrawdownPercent": 70.0,
            "startDate": "2025-01-01",
        },
    },
    "payoffTrigger": {"kind": "percentage_of_debt", "threshold": 200.0},
}


@pytest.fixture
def sample_raw():
    """Fresh camelCase input record; safe to mutate."""
    return copy.deepcopy(SAMPLE_RAW)


@pytest.fixture
def sample_inputs(sample_raw):
    return ProjectionInput.model_validate(sample_raw)


@pytest.fixture
def thirty_year_terms():
    return LoanTerms(
        kind="cash_out_refinance",
        principal=190000.0,
        annual_rate=0.06,
        term_months=360,
        start_date=date(2025, 1, 1),
    )
