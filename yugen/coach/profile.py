"""
User profile as the plan engine sees it.

Onboarding answers are free text ("4 days a week", "about 30km"), so the
numeric targets are parsed here.
"""
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from yugen.training.models import parse_date
from yugen.training.phases import monday_of

logger = logging.getLogger(__name__)

DEFAULT_FREQUENCY = 3
DEFAULT_WEEKLY_VOLUME = 20.0

FREQUENCY_PHRASES = [
    (r"\bevery\s*day\b|\bdaily\b|\bseven\b", 7),
    (r"\bsix\b", 6),
    (r"\bfive\b", 5),
    (r"\bfour\b", 4),
    (r"\bthree\b", 3),
    (r"\btwo\b|\btwice\b", 2),
    (r"\bone\b|\bonce\b", 1),
]


def extract_training_frequency(text) -> int:
    """Days per week from free text: first whole number if it is 1-7, else number words, else 3."""
    if text is None:
        return DEFAULT_FREQUENCY
    if isinstance(text, int):
        return text if 1 <= text <= 7 else DEFAULT_FREQUENCY
    lowered = str(text).lower()
    match = re.search(r"\d+", lowered)
    if match and 1 <= int(match.group(0)) <= 7:
        return int(match.group(0))
    for pattern, days in FREQUENCY_PHRASES:
        if re.search(pattern, lowered):
            return days
    return DEFAULT_FREQUENCY


def parse_weekly_volume(text) -> float:
    """First number in the mileage answer, e.g. '25-30 km' -> 25.0."""
    if text is None:
        return DEFAULT_WEEKLY_VOLUME
    if isinstance(text, (int, float)):
        return float(text) if text > 0 else DEFAULT_WEEKLY_VOLUME
    match = re.search(r"\d+(?:\.\d+)?", str(text))
    if not match:
        return DEFAULT_WEEKLY_VOLUME
    value = float(match.group(0))
    return value if value > 0 else DEFAULT_WEEKLY_VOLUME


@dataclass
class UserProfile:
    user_id: str
    plan_start_date: date
    goal_type: str = ""
    race_date: Optional[date] = None
    experience_level: str = ""
    frequency: int = DEFAULT_FREQUENCY
    weekly_volume: float = DEFAULT_WEEKLY_VOLUME
    units: str = "km"
    nickname: str = ""
    injury_history: str = ""
    schedule_constraints: str = ""
    coach_id: Optional[str] = None

    @property
    def plan_start_monday(self) -> date:
        return monday_of(self.plan_start_date)

    @classmethod
    def from_row(cls, row: dict, today: Optional[date] = None) -> "UserProfile":
        start = parse_date(row.get("plan_start_date")) or parse_date(row.get("created_at")) or today or date.today()
        units = (row.get("units") or "km").lower()
        return cls(
            user_id=row.get("id"),
            plan_start_date=start,
            goal_type=row.get("goal_type") or "",
            race_date=parse_date(row.get("race_date")),
            experience_level=row.get("experience_level") or "",
            frequency=extract_training_frequency(row.get("current_frequency")),
            weekly_volume=parse_weekly_volume(row.get("current_mileage")),
            units="mi" if units.startswith("mi") else "km",
            nickname=row.get("nickname") or "",
            injury_history=row.get("injury_history") or "",
            schedule_constraints=row.get("schedule_constraints") or "",
            coach_id=row.get("coach_id"),
        )


def get_user_profile(client, user_id: str, today: Optional[date] = None) -> Optional[UserProfile]:
    """
    Load a user's profile.

    Returns:
        UserProfile or None if the user has no profile row.

    Raises:
        Exception: store errors propagate to the caller.
    """
    res = client.table("profiles").select("*").eq("id", user_id).execute()
    if not res.data:
        logger.warning(f"No profile found for user {user_id}")
        return None
    return UserProfile.from_row(res.data[0], today=today)


def list_profile_ids(client) -> list:
    res = client.table("profiles").select("id").execute()
    return [row["id"] for row in (res.data or []) if row.get("id")]
