"""
Weekly training feedback: what the runner said and did, condensed for the planner.

One row per (user_id, week_start_date) in `user_training_feedback`. Automated
runs add to a row, they never wipe what is already there.
"""
import logging
import re
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional

from yugen.coach.generators import extract_weekly_feedback
from yugen.training.models import TrainingFeedback, SessionStatus
from yugen.training.repository import SessionRepository

logger = logging.getLogger(__name__)

FEEDBACK_TABLE = "user_training_feedback"

PREFERS_RE = re.compile(r"Prefers:\s*\n([\s\S]*?)(?=\n\s*Struggling With:|$)", re.IGNORECASE)
STRUGGLING_RE = re.compile(r"Struggling With:\s*\n([\s\S]*?)(?=\n\s*Feedback Summary:|$)", re.IGNORECASE)
SUMMARY_RE = re.compile(r"Feedback Summary:\s*\n?([\s\S]*?)$", re.IGNORECASE)


def _section_items(match) -> List[str]:
    if not match:
        return []
    items = [re.sub(r"^[-*]\s*", "", line).strip() for line in match.group(1).strip().split("\n")]
    return [item for item in items if item and item.lower() not in ("none", "n/a")]


def parse_feedback_response(text: str) -> Dict:
    """Split the extraction reply into prefers / struggling_with / feedback_summary."""
    summary_match = SUMMARY_RE.search(text or "")
    return {
        "prefers": _section_items(PREFERS_RE.search(text or "")),
        "struggling_with": _section_items(STRUGGLING_RE.search(text or "")),
        "feedback_summary": summary_match.group(1).strip() if summary_match else "",
    }


def _merge_items(existing: List[str], new: List[str]) -> List[str]:
    merged = list(existing)
    seen = {item.lower() for item in existing}
    for item in new:
        if item.lower() not in seen:
            merged.append(item)
            seen.add(item.lower())
    return merged


def merge_feedback(existing: Optional[TrainingFeedback], new: TrainingFeedback) -> TrainingFeedback:
    """Union the lists, append the summary text, and merge raw data keys."""
    if not existing:
        return new
    summary = existing.feedback_summary
    if new.feedback_summary and new.feedback_summary not in summary:
        summary = f"{summary}\n\n{new.feedback_summary}" if summary else new.feedback_summary
    raw_data = dict(existing.raw_data)
    raw_data.update(new.raw_data)
    return TrainingFeedback(
        user_id=existing.user_id,
        week_start_date=existing.week_start_date,
        prefers=_merge_items(existing.prefers, new.prefers),
        struggling_with=_merge_items(existing.struggling_with, new.struggling_with),
        feedback_summary=summary,
        raw_data=raw_data,
    )


def get_feedback_for_week(client, user_id: str, week_start: date) -> Optional[TrainingFeedback]:
    res = client.table(FEEDBACK_TABLE) \
        .select("*") \
        .eq("user_id", user_id) \
        .eq("week_start_date", week_start.isoformat()) \
        .execute()
    return TrainingFeedback.from_row(res.data[0]) if res.data else None


def save_feedback(client, feedback: TrainingFeedback) -> TrainingFeedback:
    """Upsert by (user_id, week_start_date), merging with any stored row."""
    merged = merge_feedback(get_feedback_for_week(client, feedback.user_id, feedback.week_start_date), feedback)
    client.table(FEEDBACK_TABLE) \
        .upsert(merged.to_row(), on_conflict="user_id,week_start_date") \
        .execute()
    logger.info(f"Saved training feedback for {feedback.user_id}, week {feedback.week_start_date}")
    return merged


def get_week_chat_messages(client, user_id: str, week_start: date) -> List[Dict]:
    week_end = week_start + timedelta(days=7)
    res = client.table("coach_messages") \
        .select("created_at, message, sender") \
        .eq("user_id", user_id) \
        .gte("created_at", week_start.isoformat()) \
        .lt("created_at", week_end.isoformat()) \
        .order("created_at") \
        .execute()
    return res.data or []


def process_weekly_feedback(client, user_id: str, week_start: date, extractor: Optional[Callable] = None,
                            repository: Optional[SessionRepository] = None) -> Optional[TrainingFeedback]:
    """
    Gather a week's chat and workout signal and store the extracted feedback.

    Args:
        client: Supabase (or mock) client.
        user_id: The user's ID.
        week_start: Monday of the week to summarize.
        extractor: Callable(chat, notes, skipped, week_start) -> reply text. Defaults to the LLM.
        repository: Session store, defaults to a SessionRepository over `client`.

    Returns:
        TrainingFeedback as stored, or None when there was nothing to summarize
        or the extraction produced nothing usable.
    """
    extractor = extractor or extract_weekly_feedback
    repository = repository or SessionRepository(client)
    week_end = week_start + timedelta(days=6)

    messages = get_week_chat_messages(client, user_id, week_start)
    sessions = repository.fetch_sessions(user_id, week_start, week_end)

    chat_lines = [m["message"] for m in messages if m.get("sender") == "user" and m.get("message")]
    workout_notes = [
        f"{s.date.isoformat()} {s.session_type}: {s.post_session_notes}"
        for s in sessions
        if s.status == SessionStatus.COMPLETED.value and s.post_session_notes.strip()
    ]
    skipped = [
        f"{s.date.isoformat()} {s.session_type} ({s.status})"
        for s in sessions
        if s.status in (SessionStatus.SKIPPED.value, SessionStatus.MISSED.value)
    ]

    if not chat_lines and not workout_notes and not skipped:
        logger.info(f"No feedback data for {user_id}, week {week_start}")
        return None

    try:
        reply = extractor(chat_lines, workout_notes, skipped, week_start)
    except Exception as e:
        logger.warning(f"Feedback extraction failed for {user_id}, week {week_start}: {e}")
        return None

    parsed = parse_feedback_response(reply)
    if not parsed["feedback_summary"] and not parsed["prefers"] and not parsed["struggling_with"]:
        logger.warning(f"Feedback extraction for {user_id} returned nothing usable")
        return None

    feedback = TrainingFeedback(
        user_id=user_id,
        week_start_date=week_start,
        prefers=parsed["prefers"],
        struggling_with=parsed["struggling_with"],
        feedback_summary=parsed["feedback_summary"],
        raw_data={"chat_messages": chat_lines, "workout_notes": workout_notes, "skipped_workouts": skipped},
    )
    return save_feedback(client, feedback)
