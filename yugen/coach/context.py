"""
Context gathered for weekly plan generation.

Everything here is best effort: a missing chat summary or stats failure
degrades the prompt, it never blocks the refresh.
"""
import logging
from collections import Counter
from datetime import date, timedelta
from typing import Dict, List, Optional

from yugen.training.models import SessionStatus, TrainingFeedback
from yugen.training.repository import SessionRepository
from yugen.utils import prompts

logger = logging.getLogger(__name__)

MISSED_STATUSES = {SessionStatus.SKIPPED.value, SessionStatus.MISSED.value}


def get_completion_stats(repository: SessionRepository, user_id: str, today: date, window_days: int = 30) -> Dict:
    """
    Completion rate, average completed distance and the most skipped types
    over the trailing window ending today (sessions dated before today only).
    """
    stats = {"total": 0, "completed": 0, "completion_rate": 0.0,
             "avg_distance_completed": 0.0, "common_skipped_types": []}
    try:
        sessions = repository.fetch_sessions(user_id, today - timedelta(days=window_days), today - timedelta(days=1))
    except Exception as e:
        logger.warning(f"Could not load completion stats for {user_id}: {e}")
        return stats

    sessions = [s for s in sessions if not s.is_rest]
    if not sessions:
        return stats

    completed = [s for s in sessions if s.status == SessionStatus.COMPLETED.value]
    distances = [s.distance for s in completed if s.distance]
    skipped = Counter(s.session_type for s in sessions if s.status in MISSED_STATUSES)

    stats["total"] = len(sessions)
    stats["completed"] = len(completed)
    stats["completion_rate"] = len(completed) / len(sessions)
    stats["avg_distance_completed"] = sum(distances) / len(distances) if distances else 0.0
    stats["common_skipped_types"] = [t for t, _ in skipped.most_common(3)]
    return stats


def get_chat_summaries(client, user_id: str, limit: int = 5) -> List[str]:
    try:
        res = client.table("chat_summaries") \
            .select("summary, created_at") \
            .eq("user_id", user_id) \
            .order("created_at", desc=True) \
            .limit(limit) \
            .execute()
        return [row["summary"] for row in (res.data or []) if row.get("summary")]
    except Exception as e:
        logger.warning(f"Could not load chat summaries for {user_id}: {e}")
        return []


def get_latest_feedback(client, user_id: str) -> Optional[TrainingFeedback]:
    try:
        res = client.table("user_training_feedback") \
            .select("*") \
            .eq("user_id", user_id) \
            .order("week_start_date", desc=True) \
            .limit(1) \
            .execute()
    except Exception as e:
        logger.warning(f"Could not load training feedback for {user_id}: {e}")
        return None
    if not res.data:
        return None
    return TrainingFeedback.from_row(res.data[0])


def format_feedback_section(feedback: Optional[TrainingFeedback], extra_summary: Optional[str] = None) -> str:
    lines = []
    if feedback:
        if feedback.prefers:
            lines.append(f"- Prefers: {', '.join(feedback.prefers)}")
        if feedback.struggling_with:
            lines.append(f"- Struggling with: {', '.join(feedback.struggling_with)}")
        if feedback.feedback_summary:
            lines.append(f"- Summary: {feedback.feedback_summary}")
    if extra_summary:
        lines.append(f"- This week: {extra_summary}")
    return "\n".join(lines) if lines else "- No recent feedback"


def build_weekly_plan_prompt(profile, week_monday: date, week_number: int, phase: str, stats: Dict,
                             chat_summaries: List[str], feedback: Optional[TrainingFeedback],
                             feedback_summary: Optional[str] = None, location_hint: Optional[str] = None,
                             window_days: int = 30) -> str:
    skipped = stats.get("common_skipped_types") or []
    skipped_line = f"Most commonly skipped: {', '.join(skipped)}" if skipped else "No pattern of skipped workouts"
    location_line = f"- Location: {location_hint} (suggest a suitable route per session)\n" if location_hint else ""

    return prompts.WEEKLY_PLAN_PROMPT.format(
        name=profile.nickname or "Runner",
        monday=week_monday.isoformat(),
        sunday=(week_monday + timedelta(days=6)).isoformat(),
        week_number=week_number,
        phase=phase,
        coach_personality=prompts.COACH_PERSONALITIES.get(profile.coach_id or "", prompts.DEFAULT_COACH_PERSONALITY),
        phase_description=prompts.PHASE_DESCRIPTIONS.get(phase, prompts.DEFAULT_PHASE_DESCRIPTION),
        frequency=profile.frequency,
        weekly_volume=profile.weekly_volume,
        units=profile.units,
        chat_summaries="\n".join(f"- {s}" for s in chat_summaries) or "- No recent conversations",
        feedback_section=format_feedback_section(feedback, feedback_summary),
        window_days=window_days,
        completion_rate=round(stats.get("completion_rate", 0.0) * 100),
        avg_distance=f"{stats.get('avg_distance_completed', 0.0):.1f}",
        skipped_line=skipped_line,
        goal=profile.goal_type or "General fitness",
        race_date=profile.race_date.isoformat() if profile.race_date else "None",
        experience=profile.experience_level or "Unknown",
        injury_history=profile.injury_history or "None",
        schedule_constraints=profile.schedule_constraints or "None",
        location_line=location_line,
    )
