from types import SimpleNamespace

import pytest

from core.utils import annualize
from pm.metrics import compute_performance_summary


def _row(month, property_value, asset_value, appreciation, asset_value_at_trigger=None):
    return SimpleNamespace(
        month=month,
        property_value=property_value,
        asset_value=asset_value,
        property_appreciation=appreciation,
        total_value=property_value + asset_value,
        asset_value_at_trigger=asset_value_at_trigger,
    )


def _schedule():
    # 24 months; values grow linearly for simplicity
    return [_row(m, 100000.0 + 500.0 * (m - 1), 20000.0 + 1000.0 * (m - 1), 500.0 * (m - 1)) for m in range(1, 25)]


def test_summary_at_schedule_end():
    s = compute_performance_summary(_schedule(), property_value=100000.0, investment_amount=20000.0)
    assert s.initial_total == 120000.0
    assert s.final_total_value == pytest.approx(111500.0 + 43000.0)
    assert s.total_roi == pytest.approx((154500.0 - 120000.0) / 120000.0)
    assert s.determination_month == 24
    assert s.years_elapsed == pytest.approx(2.0)
    assert s.annualized_return == pytest.approx((154500.0 / 120000.0) ** 0.5 - 1.0)
    assert s.property_appreciation_gain == pytest.approx(11500.0)
    assert s.net_asset_contribution == pytest.approx(23000.0)
    assert s.baseline_final_value == pytest.approx(120000.0 * 1.07 ** 2)


def test_summary_at_trigger_month():
    s = compute_performance_summary(
        _schedule(), property_value=100000.0, investment_amount=20000.0, trigger_month=12, interest_savings=5000.0
    )
    assert s.determination_month == 12
    assert s.years_elapsed == pytest.approx(1.0)
    at_trigger = 105500.0 + 31000.0
    assert s.annualized_return == pytest.approx(at_trigger / 120000.0 - 1.0)
    assert s.interest_savings == 5000.0
    # final figures still come from the end of the schedule
    assert s.final_total_value == pytest.approx(154500.0)
    assert len(s.to_dataframe()) == 12


def test_empty_schedule_raises():
    with pytest.raises(ValueError):
        compute_performance_summary([], property_value=1.0, investment_amount=1.0)


def test_annualize_edges():
    assert annualize(0.21, 2.0) == pytest.approx(0.1)
    assert annualize(-1.5, 2.0) == -1.0
    assert annualize(0.5, 0.0) == 0.0


def test_trigger_month_uses_pre_payoff_value():
    schedule = _schedule()
    # month 12 row after paying off 25k of debt from a 31k asset position
    schedule[11] = _row(12, 105500.0, 6000.0, 5500.0, asset_value_at_trigger=31000.0)
    s = compute_performance_summary(
        schedule, property_value=100000.0, investment_amount=20000.0, trigger_month=12
    )
    assert s.determination_total_value == pytest.approx(136500.0)
    assert s.annualized_return == pytest.approx(136500.0 / 120000.0 - 1.0)
    assert s.excess_over_baseline == pytest.approx(136500.0 - 120000.0 * 1.07)
