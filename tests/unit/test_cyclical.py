import math
from datetime import date

import pytest

from behaviors.base import CyclePhase
from behaviors.cyclical import CyclicalPerformanceModel, phase_factors
from core.utils import add_months


def test_decline_phase_for_70pct_drawdown():
    pf = phase_factors(0.20, 70.0)
    assert pf.fall - 1.0 == pytest.approx(-0.095, abs=0.001)
    assert pf.cumulative_decline == pytest.approx(0.30)
    assert pf.winter == 1.0


def test_steep_factors_compound_to_cycle_target():
    pf = phase_factors(0.20, 70.0)
    cycle = pf.summer ** 18 * pf.fall ** 12 * pf.winter ** 6 * pf.spring ** 6
    assert cycle == pytest.approx(1.2 ** 4, rel=1e-9)
    assert pf.net_gain == pytest.approx(1.2 ** 4 / 0.3)


def test_phase_factors_rejects_bad_drawdown():
    with pytest.raises(ValueError):
        phase_factors(0.2, 0.0)
    with pytest.raises(ValueError):
        phase_factors(0.2, 100.0)


def test_forecast_shape_and_first_month():
    start = date(2025, 1, 1)
    timeline = CyclicalPerformanceModel(initial_rate=0.20).forecast(start, 240)
    assert len(timeline) == 240
    assert timeline[0].monthly_growth_factor == 1.0
    assert [t.month for t in timeline[:3]] == [1, 2, 3]
    assert timeline[0].date == start
    assert timeline[24].date == add_months(start, 24)
    assert timeline[0].cycle_position == 9
    assert timeline[0].phase is CyclePhase.SUMMER


def test_forecast_empty_horizon():
    assert CyclicalPerformanceModel(initial_rate=0.20).forecast(date(2025, 1, 1), 0) == []


def test_flat_compounding_without_shaping():
    model = CyclicalPerformanceModel(initial_rate=0.20, use_cyclical_shaping=False)
    timeline = model.forecast(date(2025, 1, 1), 60)
    monthly = 1.2 ** (1.0 / 12.0)
    assert all(t.monthly_growth_factor == pytest.approx(monthly) for t in timeline[1:])


def test_smoothed_cycle_compounds_to_target():
    # start on an event date so months 2..49 cover every cycle position once
    model = CyclicalPerformanceModel(initial_rate=0.20)
    timeline = model.forecast(date(2024, 4, 20), 49)
    growth = math.prod(t.monthly_growth_factor for t in timeline[1:49])
    assert growth == pytest.approx(1.2 ** 4, rel=1e-9)


def test_smoothed_summer_outgrows_fall():
    timeline = CyclicalPerformanceModel(initial_rate=0.20).forecast(date(2024, 4, 20), 48)
    summer = [t.monthly_growth_factor for t in timeline[1:] if t.phase is CyclePhase.SUMMER]
    fall = [t.monthly_growth_factor for t in timeline if t.phase is CyclePhase.FALL]
    assert min(summer) > max(fall)


def test_linear_rate_decay_across_cycles():
    model = CyclicalPerformanceModel(initial_rate=0.25, final_rate=0.10)
    timeline = model.forecast(date(2025, 1, 1), 240)
    assert timeline[0].cycle_index == 1
    assert timeline[-1].cycle_index == 6
    assert timeline[0].cycle_annual_rate == pytest.approx(0.25)
    assert timeline[-1].cycle_annual_rate == pytest.approx(0.10)
    rates = [t.cycle_annual_rate for t in timeline]
    assert all(r2 <= r1 + 1e-12 for r1, r2 in zip(rates, rates[1:]))


def test_cycle_rate_floor():
    model = CyclicalPerformanceModel(initial_rate=0.0, final_rate=-0.5)
    rates = model.cycle_rates(4)
    assert all(r == pytest.approx(0.01) for r in rates)


def test_describe():
    model = CyclicalPerformanceModel(initial_rate=0.25, final_rate=0.10)
    info = model.describe(date(2025, 1, 1), 240)
    assert info["total_cycles"] == 6
    assert info["start_position"] == 9
    assert info["start_phase"] == "summer"
    assert info["cycle_rates"][0] == pytest.approx(0.25)
    assert set(info["phase_factors"]) == {1, 2, 3, 4, 5, 6}
    assert info["phase_multipliers"]["fall"] == 0.98


def test_forecast_is_deterministic():
    model = CyclicalPerformanceModel(initial_rate=0.3, final_rate=0.1)
    assert model.forecast(date(2025, 3, 15), 120) == model.forecast(date(2025, 3, 15), 120)


def test_forecast_from_late_cycle_start():
    # position 42: inside the stretch of spring that runs up to the next event
    model = CyclicalPerformanceModel(initial_rate=0.20)
    timeline = model.forecast(date(2027, 10, 1), 12)
    assert [t.cycle_position for t in timeline] == list(range(42, 48)) + list(range(0, 6))
    assert all(t.phase is CyclePhase.SPRING for t in timeline[:6])
    assert all(t.phase is CyclePhase.SUMMER for t in timeline[6:])
    spring = {round(t.monthly_growth_factor, 12) for t in timeline[1:6]}
    assert len(spring) == 1
    assert timeline[6].monthly_growth_factor > timeline[1].monthly_growth_factor


def test_multiplier_covers_every_position():
    model = CyclicalPerformanceModel(initial_rate=0.20)
    timeline = model.forecast(date(2024, 4, 20), 97)
    assert sorted({t.cycle_position for t in timeline}) == list(range(48))
    assert all(math.isfinite(t.monthly_growth_factor) for t in timeline)
