"""
Training phase calculation.

Maps (race date, plan start, target week) to one of the phase labels below.
Without a race the plan cycles Base, Base, then Build x3 + Base repeating.
Approaching a race the weeks run ... Build, Peak, Taper, Race Week, and the
four weeks after a race are Recovery x2 then Base x2.
"""
from datetime import date, timedelta
from typing import Optional, List, Dict

PHASE_BASE = "Base"
PHASE_BUILD = "Build"
PHASE_PEAK = "Peak"
PHASE_TAPER = "Taper"
PHASE_RACE_WEEK = "Race Week"
PHASE_RECOVERY = "Recovery"

PHASES = (PHASE_BASE, PHASE_BUILD, PHASE_PEAK, PHASE_TAPER, PHASE_RACE_WEEK, PHASE_RECOVERY)

# Length of the initial base block, counted from the plan-start Monday.
BASE_PERIOD_DAYS = 14
BUILD_CYCLE_WEEKS = 4


def monday_of(day: date) -> date:
    """Monday on or before `day`."""
    return day - timedelta(days=day.weekday())


def sunday_of(day: date) -> date:
    return monday_of(day) + timedelta(days=6)


def next_monday_on_or_after(day: date) -> date:
    return day + timedelta(days=(7 - day.weekday()) % 7)


def whole_weeks_between(start: date, end: date) -> int:
    """Whole weeks from start to end, 0 if end is not after start."""
    if end <= start:
        return 0
    return (end - start).days // 7


def week_number_for(target_week_monday: date, plan_start_monday: date) -> int:
    """1-based week index of the target week relative to the plan start."""
    return whole_weeks_between(monday_of(plan_start_monday), monday_of(target_week_monday)) + 1


def _in_base_period(target: date, plan_start: date) -> bool:
    return plan_start <= target < plan_start + timedelta(days=BASE_PERIOD_DAYS)


def _cyclic_phase(target: date, plan_start: date) -> str:
    if _in_base_period(target, plan_start):
        return PHASE_BASE
    weeks = whole_weeks_between(plan_start, target) - 2
    if weeks < 0:
        return PHASE_BASE
    return PHASE_BUILD if weeks % BUILD_CYCLE_WEEKS < 3 else PHASE_BASE


def phase_for(race_date: Optional[date], target_week_monday: date, plan_start_monday: date) -> str:
    """
    Compute the training phase for a week.

    Args:
        race_date: Goal race day, or None when the user has no race.
        target_week_monday: Any day in the week being planned.
        plan_start_monday: Any day in the user's first plan week.

    Returns:
        str: One of PHASES.
    """
    target = monday_of(target_week_monday)
    plan_start = monday_of(plan_start_monday)

    if race_date:
        race_monday = monday_of(race_date)

        # Post-race weeks count from race day itself
        if target > race_date:
            days_past = (target - race_date).days
            if days_past <= 13:
                return PHASE_RECOVERY
            if days_past <= 27:
                return PHASE_BASE
            return _cyclic_phase(target, plan_start)

        if target == race_monday:
            return PHASE_RACE_WEEK
        taper_monday = race_monday - timedelta(weeks=1)
        peak_monday = race_monday - timedelta(weeks=2)
        if target == taper_monday:
            return PHASE_TAPER
        if target == peak_monday:
            return PHASE_PEAK

        if _in_base_period(target, plan_start):
            return PHASE_BASE
        weeks_to_peak = whole_weeks_between(target, peak_monday - timedelta(days=1))
        return PHASE_BASE if weeks_to_peak % BUILD_CYCLE_WEEKS == 0 else PHASE_BUILD

    return _cyclic_phase(target, plan_start)


def phase_outlook(race_date: Optional[date], plan_start_monday: date, from_day: date, weeks: int = 12) -> List[Dict]:
    """Phase and week number for each of the next `weeks` weeks starting with the week of `from_day`."""
    start = monday_of(from_day)
    outlook = []
    for offset in range(max(weeks, 0)):
        week_monday = start + timedelta(weeks=offset)
        outlook.append({
            "week_start": week_monday.isoformat(),
            "week_end": (week_monday + timedelta(days=6)).isoformat(),
            "week_number": week_number_for(week_monday, plan_start_monday),
            "phase": phase_for(race_date, week_monday, plan_start_monday),
            "is_race_week": bool(race_date) and monday_of(race_date) == week_monday,
        })
    return outlook
