"""
Weekly plan refresh.

One entry point (`refresh_week`) shared by the scheduled batch job and the
on-demand HTTP endpoint. The Supabase client is passed in by the caller.
"""
import logging
from datetime import date, timedelta
from typing import Callable, List, Optional

from yugen.coach import context as plan_context
from yugen.coach.feedback_service import process_weekly_feedback
from yugen.coach.generators import propose_week_sessions
from yugen.coach.profile import get_user_profile
from yugen.config import Config
from yugen.training import phases
from yugen.training.models import TrainingSession, parse_date
from yugen.training.reconciliation import reconcile, apply_reconciliation
from yugen.training.repository import SessionRepository, RepositoryError
from yugen.training.templates import generate_template_week
from yugen.training.validation import validate_plan
from yugen.utils.locks import user_lock

logger = logging.getLogger(__name__)


def sessions_from_proposals(proposals, user_id: str, plan_start_monday: date, phase: str) -> List[TrainingSession]:
    """Turn validated proposals into sessions; day, week number and phase are derived, not trusted."""
    sessions = []
    for p in proposals:
        day_of_week = p.date.isoweekday()
        if p.day_of_week and p.day_of_week != day_of_week:
            logger.debug(f"Proposal for {p.date} claimed day {p.day_of_week}, using {day_of_week}")
        sessions.append(TrainingSession(
            user_id=user_id,
            date=p.date,
            week_number=phases.week_number_for(p.date, plan_start_monday),
            day_of_week=day_of_week,
            session_type=p.session_type,
            distance=p.distance,
            time=p.time,
            notes=p.notes,
            phase=phase,
            suggested_location=p.suggested_location,
        ))
    return sessions


def refresh_week(client, user_id: str, target_week_monday: date, feedback_summary: Optional[str] = None,
                 location_hint: Optional[str] = None, today: Optional[date] = None,
                 generator: Optional[Callable] = None, repository: Optional[SessionRepository] = None) -> dict:
    """
    Regenerate one user's week and reconcile it with what is stored.

    Args:
        client: Supabase (or mock) client.
        user_id: The user's ID.
        target_week_monday: Any day in the week to refresh.
        feedback_summary: Fresh feedback text to include in the prompt.
        location_hint: City/area for route suggestions.
        today: Reference date for the interaction boundary, defaults to date.today().
        generator: Callable(prompt) -> list of ProposedSession. Defaults to the LLM.
        repository: Session store, defaults to a SessionRepository over `client`.

    Returns:
        dict: {"success": bool, ...}. On failure "error" explains why.
    """
    today = today or date.today()
    repository = repository or SessionRepository(client)
    if generator is None:
        def generator(prompt):
            return propose_week_sessions(prompt, timeout=Config.LLM_TIMEOUT_SECONDS, today=today)

    week_monday = phases.monday_of(target_week_monday)
    week_sunday = phases.sunday_of(week_monday)

    with user_lock(user_id):
        try:
            profile = get_user_profile(client, user_id, today=today)
        except Exception as e:
            logger.error(f"Error loading profile for {user_id}: {e}", exc_info=True)
            return {"success": False, "error": f"Could not load profile: {e}"}
        if not profile:
            return {"success": False, "error": "Profile not found"}

        phase = phases.phase_for(profile.race_date, week_monday, profile.plan_start_monday)
        week_number = phases.week_number_for(week_monday, profile.plan_start_monday)
        logger.info(f"Refreshing week {week_monday} for {user_id}: week {week_number}, phase {phase}")

        window_days = Config.COMPLETION_STATS_WINDOW_DAYS
        stats = plan_context.get_completion_stats(repository, user_id, today, window_days)
        prompt = plan_context.build_weekly_plan_prompt(
            profile, week_monday, week_number, phase, stats,
            chat_summaries=plan_context.get_chat_summaries(client, user_id),
            feedback=plan_context.get_latest_feedback(client, user_id),
            feedback_summary=feedback_summary,
            location_hint=location_hint,
            window_days=window_days,
        )

        used_fallback = False
        candidates = []
        try:
            candidates = sessions_from_proposals(generator(prompt), user_id, profile.plan_start_monday, phase)
            candidates = [c for c in candidates if week_monday <= c.date <= week_sunday]
        except Exception as e:
            logger.warning(f"Plan generator failed for {user_id}: {e}")
        if not candidates:
            logger.warning(f"Falling back to template plan for {user_id}, week {week_monday}")
            used_fallback = True
            candidates = generate_template_week(
                user_id, week_monday, profile.frequency, profile.weekly_volume,
                phase, week_number, profile.units,
            )

        validation = validate_plan(candidates, profile.frequency, profile.weekly_volume, phase)
        for warning in validation.warnings:
            logger.warning(f"Plan validation for {user_id} week {week_monday}: {warning}")

        try:
            plan = reconcile(repository, user_id, week_monday, week_sunday, candidates, today)
            inserted = apply_reconciliation(repository, user_id, plan)
        except RepositoryError as e:
            logger.error(f"Refresh failed for {user_id}, week {week_monday}: {e}")
            return {"success": False, "error": str(e), "phase": phase, "week_start": week_monday.isoformat()}

        return {
            "success": True,
            "week_start": week_monday.isoformat(),
            "week_number": week_number,
            "phase": phase,
            "inserted": inserted,
            "preserved_existing": plan.has_interacted_sessions,
            "used_fallback": used_fallback,
            "warnings": validation.warnings,
        }


def check_needs_refresh(repository: SessionRepository, user_id: str, today: date) -> bool:
    """Sundays always refresh; otherwise only users with nothing planned from today on."""
    if today.isoweekday() == 7:
        return True
    return not repository.has_sessions_from(user_id, today)


def request_weekly_plan_update(client, user_id: str, client_local_date=None, location_hint: Optional[str] = None,
                               today: Optional[date] = None, generator: Optional[Callable] = None) -> dict:
    """
    On-demand refresh of the week containing the user's local date.

    Feedback for the previous Monday-Sunday is processed first; a failure
    there is logged and the refresh continues without it.
    """
    local_day = parse_date(client_local_date) or today or date.today()
    week_monday = phases.monday_of(local_day)
    feedback_week = week_monday - timedelta(weeks=1)

    feedback_summary = None
    try:
        feedback = process_weekly_feedback(client, user_id, feedback_week)
        if feedback:
            feedback_summary = feedback.feedback_summary
    except Exception as e:
        logger.warning(f"Feedback processing failed for {user_id}, continuing: {e}")

    result = refresh_week(
        client, user_id, week_monday,
        feedback_summary=feedback_summary,
        location_hint=location_hint,
        today=local_day,
        generator=generator,
    )
    result["feedback_processed"] = feedback_summary is not None
    return result
