import pytest
from datetime import date, timedelta

from yugen.training.phases import (
    phase_for, monday_of, week_number_for, next_monday_on_or_after, phase_outlook,
    PHASE_BASE, PHASE_BUILD, PHASE_PEAK, PHASE_TAPER, PHASE_RACE_WEEK, PHASE_RECOVERY,
)

PLAN_START = date(2024, 1, 1)  # Monday
RACE = date(2024, 6, 15)  # Saturday


def test_monday_of():
    assert monday_of(date(2024, 6, 15)) == date(2024, 6, 10)
    assert monday_of(date(2024, 6, 10)) == date(2024, 6, 10)
    assert monday_of(date(2024, 6, 16)) == date(2024, 6, 10)


def test_next_monday_on_or_after():
    assert next_monday_on_or_after(date(2024, 6, 16)) == date(2024, 6, 17)
    assert next_monday_on_or_after(date(2024, 6, 17)) == date(2024, 6, 17)
    assert next_monday_on_or_after(date(2024, 6, 12)) == date(2024, 6, 17)


def test_cycle_without_race():
    expected = [PHASE_BASE, PHASE_BASE, PHASE_BUILD, PHASE_BUILD, PHASE_BUILD,
                PHASE_BASE, PHASE_BUILD, PHASE_BUILD, PHASE_BUILD, PHASE_BASE]
    actual = [phase_for(None, PLAN_START + timedelta(weeks=i), PLAN_START) for i in range(10)]
    assert actual == expected


def test_dates_are_normalized_to_monday():
    # Thursday of week 3 and a mid-week plan start behave like their Mondays
    assert phase_for(None, date(2024, 1, 18), date(2024, 1, 3)) == PHASE_BUILD
    assert phase_for(None, date(2024, 1, 10), date(2024, 1, 3)) == PHASE_BASE


def test_target_before_plan_start_is_base():
    assert phase_for(None, date(2023, 12, 4), PLAN_START) == PHASE_BASE


def test_race_week_taper_peak():
    assert phase_for(RACE, date(2024, 6, 10), PLAN_START) == PHASE_RACE_WEEK
    assert phase_for(RACE, date(2024, 6, 3), PLAN_START) == PHASE_TAPER
    assert phase_for(RACE, date(2024, 5, 27), PLAN_START) == PHASE_PEAK


def test_weeks_before_peak_count_back_from_peak():
    # peak Monday is 2024-05-27; the week right before it starts a new block
    assert phase_for(RACE, date(2024, 5, 20), PLAN_START) == PHASE_BASE
    assert phase_for(RACE, date(2024, 5, 13), PLAN_START) == PHASE_BUILD
    assert phase_for(RACE, date(2024, 5, 6), PLAN_START) == PHASE_BUILD
    assert phase_for(RACE, date(2024, 4, 29), PLAN_START) == PHASE_BUILD
    assert phase_for(RACE, date(2024, 4, 22), PLAN_START) == PHASE_BASE


def test_initial_base_period_wins_before_race_block():
    plan_start = date(2024, 5, 6)
    assert phase_for(RACE, date(2024, 5, 6), plan_start) == PHASE_BASE
    assert phase_for(RACE, date(2024, 5, 13), plan_start) == PHASE_BASE


@pytest.mark.parametrize("week_monday,expected", [
    (date(2024, 6, 17), PHASE_RECOVERY),
    (date(2024, 6, 24), PHASE_RECOVERY),
    (date(2024, 7, 1), PHASE_BASE),
    (date(2024, 7, 8), PHASE_BASE),
])
def test_post_race_recovery_then_base(week_monday, expected):
    assert phase_for(RACE, week_monday, PLAN_START) == expected


def test_long_after_race_falls_back_to_cycle():
    target = date(2024, 7, 15)
    assert phase_for(RACE, target, PLAN_START) == phase_for(None, target, PLAN_START)


def test_week_number():
    assert week_number_for(PLAN_START, PLAN_START) == 1
    assert week_number_for(date(2024, 1, 14), PLAN_START) == 2
    assert week_number_for(date(2024, 3, 4), date(2024, 1, 3)) == 10
    assert week_number_for(date(2023, 12, 25), PLAN_START) == 1


def test_phase_outlook():
    outlook = phase_outlook(RACE, PLAN_START, date(2024, 5, 29), weeks=4)
    assert [w["phase"] for w in outlook] == [PHASE_PEAK, PHASE_TAPER, PHASE_RACE_WEEK, PHASE_RECOVERY]
    assert outlook[0]["week_start"] == "2024-05-27"
    assert outlook[2]["is_race_week"] is True
    assert outlook[1]["week_number"] == week_number_for(date(2024, 6, 3), PLAN_START)
