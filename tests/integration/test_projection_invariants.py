from datetime import date

import pandas as pd
import pytest

from core.config import ProjectionConfig
from core.schema import ProjectionInput
from core.utils import annualize
from engine.runner import project, run_projection


def test_sample_projection_runs(sample_raw):
    run = run_projection(sample_raw)
    assert run.ok, run.validation.summary()
    result = run.result
    assert result.horizon_months == 360
    assert len(result.chart_series) == 240
    assert len(result.timeline) == 360
    assert list(result.schedule_frame()["month"]) == list(range(1, 361))


def test_month_one_valuation(sample_inputs):
    first = project(sample_inputs).monthly_schedule[0]
    assert first.units_held == 40000.0 / 50000.0
    assert first.asset_value == pytest.approx(40000.0)
    assert first.spot_price == 50000.0
    assert first.property_appreciation == 0.0
    assert first.debt_balance == pytest.approx(190000.0)
    assert first.date == date(2025, 1, 1)


def test_debt_and_units_invariants(sample_inputs):
    result = project(sample_inputs)
    sched = result.monthly_schedule
    outcome = result.trigger_outcome
    assert outcome.fired
    assert 24 < outcome.trigger_month < 240

    for prev, cur in zip(sched, sched[1:]):
        assert cur.debt_balance <= prev.debt_balance + 1e-9
        assert cur.units_held <= prev.units_held + 1e-12
        assert cur.units_held >= 0.0
        assert cur.property_appreciation > prev.property_appreciation
        assert cur.trigger_met or not prev.trigger_met

    for e in sched[outcome.trigger_month - 1:]:
        assert e.debt_balance == 0.0
        assert e.payment == 0.0
        assert e.trigger_met


def test_trigger_row_reports_post_payoff_state(sample_inputs):
    result = project(sample_inputs)
    outcome = result.trigger_outcome
    row = result.monthly_schedule[outcome.trigger_month - 1]

    assert row.trigger_state == "triggered_payoff"
    assert row.payoff_units_sold > 0
    assert row.asset_value_at_trigger == pytest.approx(outcome.asset_value_at_trigger)
    assert row.debt_at_trigger == pytest.approx(outcome.debt_at_trigger)
    assert row.asset_value < outcome.asset_value_at_trigger
    assert outcome.units_retained == pytest.approx(row.units_held)
    assert outcome.asset_value_at_trigger >= 2.0 * outcome.debt_at_trigger

    nxt = result.monthly_schedule[outcome.trigger_month]
    assert nxt.trigger_state == "paid_off"


def test_summary_uses_trigger_month(sample_inputs):
    result = project(sample_inputs)
    perf = result.performance_summary
    outcome = result.trigger_outcome
    assert perf.determination_month == outcome.trigger_month
    assert perf.years_elapsed == pytest.approx(outcome.trigger_month / 12.0)
    assert perf.final_total_value == pytest.approx(result.monthly_schedule[-1].total_value)
    expected_saved = 0.70 * result.loan_terms.payment * (360 - outcome.trigger_month)
    assert outcome.estimated_interest_saved == pytest.approx(expected_saved)
    assert perf.interest_savings == pytest.approx(expected_saved)


def test_identical_input_identical_output(sample_raw):
    a = run_projection(sample_raw).result
    b = run_projection(sample_raw).result
    pd.testing.assert_frame_equal(a.schedule_frame(), b.schedule_frame())
    assert a.performance_summary == b.performance_summary


def test_invalid_input_never_computes(sample_raw):
    sample_raw["assetInvestment"]["currentUnitPrice"] = 0
    run = run_projection(sample_raw)
    assert run.result is None
    assert not run.ok
    assert run.validation.fields() == ["asset_investment.current_unit_price"]


def test_project_rejects_invalid_typed_input(sample_inputs):
    bad_prop = sample_inputs.property.model_copy(update={"current_value": 0.0})
    bad = sample_inputs.model_copy(update={"property": bad_prop})
    with pytest.raises(ValueError, match="Invalid projection input"):
        project(bad)


def test_project_rejects_raw_dict(sample_raw):
    with pytest.raises(ValueError):
        project(sample_raw)


def test_short_revolving_line_extends_to_horizon(sample_raw):
    sample_raw["loan"] = {"kind": "revolving_line", "balance": 60000, "rate": 0.09, "termYears": 10}
    sample_raw["payoffTrigger"] = {"kind": "percentage_of_debt", "threshold": 1000}
    result = run_projection(sample_raw).result
    sched = result.monthly_schedule
    assert len(sched) == 240
    assert len(result.chart_series) == 240
    if not result.trigger_outcome.fired:
        assert sched[119].debt_balance > 0
    assert all(e.debt_balance == 0.0 and e.payment == 0.0 for e in sched[120:])


def test_shortfall_sales_drain_units(sample_raw):
    sample_raw["propertyIncome"]["monthlyIncome"] = 0.0
    sample_raw["payoffTrigger"]["threshold"] = 1000
    result = run_projection(sample_raw).result
    first = result.monthly_schedule[0]
    assert first.shortfall == pytest.approx(first.payment + 300.0)
    assert first.units_sold == pytest.approx(first.shortfall / first.spot_price)
    assert first.net_cash_flow == pytest.approx(-first.shortfall)
    units = [e.units_held for e in result.monthly_schedule]
    assert all(u >= 0.0 for u in units)
    assert units[11] < units[0]


def test_chart_extends_short_schedule(sample_raw):
    sample_raw["loan"] = {"kind": "revolving_line", "balance": 60000, "rate": 0.09, "termYears": 10}
    cfg = ProjectionConfig(min_horizon_months=120)
    result = project(ProjectionInput.model_validate(sample_raw), cfg)
    assert result.horizon_months == 120

    chart = result.chart_frame()
    assert len(chart) == 240
    assert list(chart.columns) == ["month", "date", "debt", "base_equity", "appreciation", "asset_value", "total_value"]
    tail = chart.iloc[120:]
    last = result.monthly_schedule[-1]
    assert (tail["debt"] == 0.0).all()
    assert tail["base_equity"].tolist() == pytest.approx([200000.0] * 120)
    assert (tail["asset_value"] == last.asset_value).all()
    assert chart.iloc[-1]["month"] == 240


def test_no_liquidation_after_scheduled_maturity(sample_raw):
    sample_raw["loan"] = {"kind": "revolving_line", "balance": 60000, "rate": 0.09, "termYears": 10}
    sample_raw["propertyIncome"]["monthlyIncome"] = 100.0
    sample_raw["assetInvestment"]["investmentAmount"] = 150000.0
    sample_raw["payoffTrigger"] = {"kind": "retained_floor", "threshold": 1e9}
    result = run_projection(sample_raw).result
    sched = result.monthly_schedule
    assert not result.trigger_outcome.fired
    assert len(sched) == 240

    last_loan_month = sched[119]
    assert last_loan_month.debt_balance > 0
    assert last_loan_month.units_sold > 0

    for e in sched[120:]:
        assert e.debt_balance == 0.0
        assert e.payment == 0.0
        assert e.shortfall == 0.0
        assert e.units_sold == 0.0
        assert e.units_held == last_loan_month.units_held
        assert e.housing_cost == pytest.approx(300.0)
        assert e.net_cash_flow == pytest.approx(-200.0)


def test_projection_starting_late_in_cycle(sample_raw):
    # 42 calendar months after the 2024 event
    sample_raw["assetInvestment"]["performanceSettings"]["startDate"] = "2027-10-01"
    run = run_projection(sample_raw)
    assert run.ok, run.validation.summary()
    result = run.result
    assert [t.cycle_position for t in result.timeline[:7]] == [42, 43, 44, 45, 46, 47, 0]
    assert all(t.phase.value == "spring" for t in result.timeline[:6])
    frame = result.schedule_frame()
    assert frame[["asset_value", "total_value", "spot_price"]].notna().all().all()
    assert (frame["spot_price"] > 0).all()


def test_summary_reports_pre_payoff_value(sample_inputs):
    result = project(sample_inputs)
    outcome = result.trigger_outcome
    perf = result.performance_summary
    row = result.monthly_schedule[outcome.trigger_month - 1]

    expected = row.property_value + outcome.asset_value_at_trigger
    assert perf.determination_total_value == pytest.approx(expected)
    assert perf.determination_total_value > row.total_value
    initial = 200000.0 + 40000.0
    assert perf.annualized_return == pytest.approx(annualize((expected - initial) / initial, perf.years_elapsed))
    assert perf.excess_over_baseline == pytest.approx(expected - perf.baseline_final_value)


def test_non_finite_input_never_computes(sample_raw):
    sample_raw["property"]["currentValue"] = float("nan")
    run = run_projection(sample_raw)
    assert run.result is None
    assert not run.validation.is_valid
