import pytest
from datetime import date

from yugen.coach.profile import (
    extract_training_frequency, parse_weekly_volume, UserProfile, get_user_profile, list_profile_ids,
)

from tests.conftest import USER_ID, profile_row


@pytest.mark.parametrize("text,expected", [
    ("4 days per week", 4),
    ("3-4 days", 3),
    ("about 10 runs a month, four days a week", 4),
    ("10 days", 3),
    ("every day", 7),
    ("I run daily", 7),
    ("twice a week", 2),
    ("five times", 5),
    ("not sure yet", 3),
    ("", 3),
    (None, 3),
    (5, 5),
    (9, 3),
])
def test_extract_training_frequency(text, expected):
    assert extract_training_frequency(text) == expected


@pytest.mark.parametrize("text,expected", [
    ("30 km", 30.0),
    ("25-30 km", 25.0),
    ("about 12.5 miles", 12.5),
    ("0 km", 20.0),
    ("lots", 20.0),
    ("", 20.0),
    (None, 20.0),
    (15, 15.0),
])
def test_parse_weekly_volume(text, expected):
    assert parse_weekly_volume(text) == expected


def test_from_row_uses_created_at_monday():
    profile = UserProfile.from_row(profile_row())

    assert profile.plan_start_monday == date(2024, 1, 1)
    assert profile.frequency == 4
    assert profile.weekly_volume == 30.0
    assert profile.units == "km"
    assert profile.race_date is None


def test_from_row_multi_digit_frequency_text():
    profile = UserProfile.from_row(profile_row(current_frequency="12 sessions over 3 weeks, four a week"))
    assert profile.frequency == 4


def test_plan_start_date_wins_over_created_at():
    profile = UserProfile.from_row(profile_row(plan_start_date="2024-03-07"))
    assert profile.plan_start_monday == date(2024, 3, 4)


@pytest.mark.parametrize("raw,expected", [
    ("2024-06-15", date(2024, 6, 15)),
    ("2024-06-15T00:00:00Z", date(2024, 6, 15)),
    ("None", None),
    ("not-a-date", None),
    ("", None),
])
def test_race_date_parsing(raw, expected):
    assert UserProfile.from_row(profile_row(race_date=raw)).race_date == expected


@pytest.mark.parametrize("raw,expected", [("mi", "mi"), ("Miles", "mi"), ("KM", "km"), (None, "km"), ("kilometers", "km")])
def test_units_normalized(raw, expected):
    assert UserProfile.from_row(profile_row(units=raw)).units == expected


def test_get_user_profile(mock_db):
    profile = get_user_profile(mock_db, USER_ID)
    assert profile.user_id == USER_ID
    assert profile.coach_id == "dathan"
    assert get_user_profile(mock_db, "nobody") is None


def test_list_profile_ids(mock_db):
    mock_db.data["profiles"].append(profile_row(id="user-456"))
    assert list_profile_ids(mock_db) == [USER_ID, "user-456"]
