from datetime import date

from behaviors.base import CyclePhase
from behaviors.cycle_calendar import (
    cycle_info,
    cycle_position,
    last_event_date,
    next_event_date,
    phase_for_position,
)


def test_last_and_next_event():
    as_of = date(2025, 1, 1)
    assert last_event_date(as_of) == date(2024, 4, 20)
    assert next_event_date(as_of) == date(2028, 4, 20)


def test_event_on_the_day_counts_as_last():
    assert last_event_date(date(2020, 5, 11)) == date(2020, 5, 11)
    assert next_event_date(date(2020, 5, 11)) == date(2024, 4, 20)


def test_next_event_projects_past_table():
    assert next_event_date(date(2041, 1, 1)) == date(2044, 4, 20)


def test_before_first_event_uses_first_entry():
    assert last_event_date(date(2010, 1, 1)) == date(2012, 11, 28)
    assert cycle_position(date(2010, 1, 1)) == 0


def test_cycle_position_counts_calendar_months():
    assert cycle_position(date(2025, 1, 1)) == 9
    assert cycle_position(date(2024, 4, 20)) == 0


def test_phase_boundaries():
    assert phase_for_position(0) == (CyclePhase.SUMMER, 1, 18)
    assert phase_for_position(17) == (CyclePhase.SUMMER, 18, 18)
    assert phase_for_position(18) == (CyclePhase.FALL, 1, 12)
    assert phase_for_position(29) == (CyclePhase.FALL, 12, 12)
    assert phase_for_position(30) == (CyclePhase.WINTER, 1, 6)
    assert phase_for_position(35) == (CyclePhase.WINTER, 6, 6)
    assert phase_for_position(36) == (CyclePhase.SPRING, 1, 12)
    assert phase_for_position(47) == (CyclePhase.SPRING, 12, 12)


def test_late_cycle_positions_are_spring():
    for pos in range(36, 48):
        phase, month_in_phase, length = phase_for_position(pos)
        assert phase is CyclePhase.SPRING
        assert month_in_phase == pos - 35
        assert length == 12


def test_cycle_info_late_in_cycle():
    # 43 calendar months after the 2024 event
    info = cycle_info(date(2027, 11, 25))
    assert info.cycle_position == 43
    assert info.phase is CyclePhase.SPRING
    assert info.month_in_phase == 8
    assert info.phase_length == 12


def test_phase_wraps_after_full_cycle():
    assert phase_for_position(48) == (CyclePhase.SUMMER, 1, 18)


def test_cycle_info():
    info = cycle_info(date(2022, 6, 1))
    assert info.last_event == date(2020, 5, 11)
    assert info.next_event == date(2024, 4, 20)
    assert info.cycle_position == 25
    assert info.phase is CyclePhase.FALL
    assert info.month_in_phase == 8
    assert info.months_to_next_event == 22
