"""
Deterministic weekly plan used when the LLM generator cannot produce one.

Driven only by training frequency, weekly volume and phase.
"""
import logging
from datetime import date, timedelta
from typing import List

from yugen.training.models import TrainingSession
from yugen.training import phases

logger = logging.getLogger(__name__)

DEFAULT_FREQUENCY = 3
DEFAULT_SESSION_DISTANCE = 5.0

EASY_RUN = "Easy Run"
EASY_STRIDES = "Easy Run + Strides"
STRIDES = "Strides"
SPEED_WORK = "Speed Work"
TEMPO_RUN = "Tempo Run"
LONG_RUN = "Long Run"
RACE_PACE_RUN = "Race Pace Run"
RACE_DAY = "Race Day"
REST = "Rest"

# ISO weekday numbers (Mon=1 .. Sun=7) to train on for each frequency.
TRAINING_DAYS = {
    1: [3],
    2: [2, 5],
    3: [1, 3, 5],
    4: [1, 3, 5, 6],
    5: [1, 2, 4, 5, 6],
    6: [1, 2, 3, 4, 5, 6],
    7: [1, 2, 3, 4, 5, 6, 7],
}

# Workout per weekday in each phase; unlisted days are easy runs.
PHASE_DAY_TYPES = {
    phases.PHASE_BASE: {2: EASY_STRIDES, 4: TEMPO_RUN, 6: LONG_RUN},
    phases.PHASE_BUILD: {2: SPEED_WORK, 4: TEMPO_RUN, 6: LONG_RUN},
    phases.PHASE_PEAK: {2: SPEED_WORK, 4: TEMPO_RUN, 6: RACE_PACE_RUN},
    phases.PHASE_TAPER: {2: SPEED_WORK, 4: EASY_STRIDES, 6: EASY_RUN},
    phases.PHASE_RACE_WEEK: {2: STRIDES, 4: REST, 6: REST, 7: RACE_DAY},
    phases.PHASE_RECOVERY: {},
}

LONG_RUN_MULTIPLIERS = {
    phases.PHASE_BASE: 1.5,
    phases.PHASE_BUILD: 1.8,
    phases.PHASE_PEAK: 2.0,
}

TYPE_MULTIPLIERS = {
    EASY_RUN: 1.0,
    EASY_STRIDES: 1.0,
    STRIDES: 1.0,
    SPEED_WORK: 0.8,
    TEMPO_RUN: 0.9,
    RACE_PACE_RUN: 1.2,
    RACE_DAY: 3.0,
}

PHASE_VOLUME_FACTORS = {
    phases.PHASE_TAPER: 0.7,
    phases.PHASE_RACE_WEEK: 0.5,
    phases.PHASE_RECOVERY: 0.6,
}

MINUTES_PER_UNIT = {"km": 6, "mi": 10}

SESSION_NOTES = {
    EASY_RUN: "Keep this run at a conversational pace. You should be able to speak in full sentences.",
    EASY_STRIDES: "Run at an easy pace, then finish with 4-6 strides of 20 seconds at a fast but relaxed pace.",
    STRIDES: "Easy running with 4-6 strides of 20 seconds at a fast but controlled pace. Keep it light.",
    SPEED_WORK: "Warm up for 10 minutes, then do 6-8 x 400m at a hard effort with 90 seconds recovery. Cool down for 10 minutes.",
    TEMPO_RUN: "Warm up for 10 minutes, then run 20 minutes at a comfortably hard pace. Cool down for 10 minutes.",
    LONG_RUN: "Run at an easy, steady pace. Focus on time on feet rather than speed and stay hydrated.",
    RACE_PACE_RUN: "Warm up, then run the middle portion at your goal race pace. Practice race-day fueling.",
    RACE_DAY: "Race day! Trust your training, start conservatively and enjoy it.",
}


def normalize_frequency(days_per_week) -> int:
    try:
        days = int(days_per_week)
    except (TypeError, ValueError):
        return DEFAULT_FREQUENCY
    if days < 1 or days > 7:
        return DEFAULT_FREQUENCY
    return days


def session_type_for(phase: str, iso_weekday: int) -> str:
    return PHASE_DAY_TYPES.get(phase, {}).get(iso_weekday, EASY_RUN)


def distance_multiplier(session_type: str, phase: str) -> float:
    if session_type == LONG_RUN:
        return LONG_RUN_MULTIPLIERS.get(phase, 1.3)
    return TYPE_MULTIPLIERS.get(session_type, 1.0)


def generate_template_week(user_id: str, week_monday: date, days_per_week, weekly_volume, phase: str,
                           week_number: int, units: str = "km") -> List[TrainingSession]:
    """
    Build a week of sessions from the fixed day/type table.

    Distances are weighted by session type and scaled so the week adds up to
    the weekly volume times the phase factor (e.g. 0.7 in a taper week).
    """
    days = normalize_frequency(days_per_week)
    try:
        volume = float(weekly_volume) if weekly_volume else 0.0
    except (TypeError, ValueError):
        volume = 0.0
    units = units if units in MINUTES_PER_UNIT else "km"

    slots = []
    for weekday in TRAINING_DAYS[days]:
        session_type = session_type_for(phase, weekday)
        if session_type == REST:
            continue
        slots.append((weekday, session_type, distance_multiplier(session_type, phase)))

    if not slots:
        return []

    total_weight = sum(weight for _, _, weight in slots)
    if volume > 0:
        unit_distance = volume * PHASE_VOLUME_FACTORS.get(phase, 1.0) / total_weight
    else:
        unit_distance = DEFAULT_SESSION_DISTANCE * PHASE_VOLUME_FACTORS.get(phase, 1.0)

    sessions = []
    for weekday, session_type, weight in slots:
        distance = round(unit_distance * weight, 1)
        sessions.append(TrainingSession(
            user_id=user_id,
            date=week_monday + timedelta(days=weekday - 1),
            week_number=week_number,
            day_of_week=weekday,
            session_type=session_type,
            distance=distance,
            time=round(distance * MINUTES_PER_UNIT[units]),
            notes=SESSION_NOTES.get(session_type, SESSION_NOTES[EASY_RUN]),
            phase=phase,
        ))

    logger.info(f"Template plan for {user_id}: {len(sessions)} sessions, phase {phase}, week {week_number}")
    return sessions
