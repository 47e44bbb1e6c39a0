import pytest
from datetime import date

from yugen.training import phases
from yugen.training.templates import (
    generate_template_week, normalize_frequency, TRAINING_DAYS, LONG_RUN, RACE_DAY, STRIDES, SPEED_WORK,
)
from yugen.training.validation import validate_plan, check_frequency, check_volume

from tests.conftest import USER_ID

MONDAY = date(2024, 6, 10)


def test_training_days_match_frequency():
    for days, weekdays in TRAINING_DAYS.items():
        assert len(weekdays) == days
        assert all(1 <= d <= 7 for d in weekdays)


@pytest.mark.parametrize("value,expected", [(0, 3), (8, 3), ("x", 3), (None, 3), (5, 5), ("2", 2)])
def test_normalize_frequency(value, expected):
    assert normalize_frequency(value) == expected


def test_base_week_hits_volume_with_long_run():
    week = generate_template_week(USER_ID, MONDAY, 4, 30, phases.PHASE_BASE, week_number=3)

    assert [s.day_of_week for s in week] == [1, 3, 5, 6]
    assert [s.session_type for s in week][-1] == LONG_RUN
    assert [s.distance for s in week] == [6.7, 6.7, 6.7, 10.0]
    assert [s.time for s in week] == [40, 40, 40, 60]
    assert all(s.week_number == 3 and s.phase == phases.PHASE_BASE for s in week)
    assert all(s.date.isoweekday() == s.day_of_week for s in week)
    assert all(s.notes for s in week)


def test_build_week_uses_quality_sessions():
    week = generate_template_week(USER_ID, MONDAY, 6, 40, phases.PHASE_BUILD, week_number=5)
    types = {s.day_of_week: s.session_type for s in week}
    assert types[2] == SPEED_WORK
    assert types[6] == LONG_RUN
    assert abs(sum(s.distance for s in week) - 40) < 0.5


def test_race_week_skips_rest_days_and_scales_down():
    week = generate_template_week(USER_ID, MONDAY, 7, 30, phases.PHASE_RACE_WEEK, week_number=24)
    types = {s.day_of_week: s.session_type for s in week}

    assert 4 not in types and 6 not in types
    assert types[2] == STRIDES
    assert types[7] == RACE_DAY
    assert abs(sum(s.distance for s in week) - 15) < 0.5


def test_miles_use_ten_minutes_per_unit():
    week = generate_template_week(USER_ID, MONDAY, 3, 15, phases.PHASE_RECOVERY, week_number=2, units="mi")
    # Recovery: all easy, volume x 0.6
    assert [s.distance for s in week] == [3.0, 3.0, 3.0]
    assert [s.time for s in week] == [30, 30, 30]


def test_invalid_frequency_defaults_to_three_days():
    week = generate_template_week(USER_ID, MONDAY, 0, 0, phases.PHASE_BASE, week_number=1)
    assert [s.day_of_week for s in week] == [1, 3, 5]
    assert all(s.distance > 0 for s in week)


def test_validation_is_warning_only(make_session):
    week = [make_session(MONDAY, distance=3.0), make_session(date(2024, 6, 12), session_type="Rest Day",
                                                            distance=None, time=None)]
    result = validate_plan(week, expected_frequency=4, target_volume=30, phase=phases.PHASE_BUILD)

    assert not result.ok
    assert any("training days" in w for w in result.warnings)
    assert any("below 85%" in w for w in result.warnings)
    assert any("No long run" in w for w in result.warnings)


def test_frequency_tolerance(make_session):
    week = [make_session(date(2024, 6, 10 + i)) for i in range(3)]
    assert check_frequency(week, 4) is None
    assert check_frequency(week, 5) is not None


def test_volume_threshold(make_session):
    week = [make_session(MONDAY, distance=18.0), make_session(date(2024, 6, 13), distance=8.5)]
    assert check_volume(week, 30) is None
    assert check_volume(week, 32) is not None


def test_template_week_passes_validation():
    week = generate_template_week(USER_ID, MONDAY, 5, 35, phases.PHASE_BUILD, week_number=6)
    assert validate_plan(week, 5, 35, phases.PHASE_BUILD).ok
