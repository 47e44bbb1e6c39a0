# yugen/scheduler_jobs.py

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from typing import Callable, Optional

from yugen.coach.feedback_service import process_weekly_feedback
from yugen.coach.plan_service import refresh_week, check_needs_refresh
from yugen.coach.profile import list_profile_ids
from yugen.config import Config
from yugen.training.phases import next_monday_on_or_after
from yugen.training.repository import SessionRepository

logger = logging.getLogger(__name__)

PROCESSED = "processed"
FAILED = "failed"
SKIPPED = "skipped"


def refresh_user_plan(client, user_id: str, today: date, generator: Optional[Callable] = None) -> str:
    """
    Batch step for one user: feedback for the week just finished, then the
    upcoming week's plan. Returns PROCESSED, FAILED or SKIPPED.
    """
    repository = SessionRepository(client)
    if not check_needs_refresh(repository, user_id, today):
        logger.info(f"User {user_id} has upcoming sessions, skipping refresh")
        return SKIPPED

    target_monday = next_monday_on_or_after(today)
    feedback_week = target_monday - timedelta(weeks=1)

    feedback_summary = None
    try:
        feedback = process_weekly_feedback(client, user_id, feedback_week, repository=repository)
        if feedback:
            feedback_summary = feedback.feedback_summary
    except Exception as e:
        logger.warning(f"Feedback processing failed for {user_id}, refreshing without it: {e}")

    result = refresh_week(
        client, user_id, target_monday,
        feedback_summary=feedback_summary,
        today=today,
        generator=generator,
        repository=repository,
    )
    if result.get("success"):
        logger.info(f"Refreshed plan for {user_id}: week {result['week_start']} ({result['phase']})")
        return PROCESSED
    logger.error(f"Plan refresh failed for {user_id}: {result.get('error')}")
    return FAILED


def refresh_all_user_plans(client, today: Optional[date] = None, max_workers: Optional[int] = None,
                           generator: Optional[Callable] = None) -> dict:
    """
    Refresh every user's plan that needs it.

    Each user is isolated: an exception for one is logged and counted, the
    rest carry on.

    Returns:
        dict: {"processed": n, "failed": n, "skipped": n}
    """
    today = today or date.today()
    max_workers = max_workers or Config.REFRESH_MAX_WORKERS
    summary = {PROCESSED: 0, FAILED: 0, SKIPPED: 0}

    try:
        user_ids = list_profile_ids(client)
    except Exception as e:
        logger.error(f"Error fetching users for weekly plan refresh: {e}", exc_info=True)
        raise

    logger.info(f"Weekly plan refresh for {len(user_ids)} users (today={today}, workers={max_workers})")

    def run_one(user_id):
        try:
            return refresh_user_plan(client, user_id, today, generator=generator)
        except Exception as e:
            logger.error(f"Error refreshing plan for user {user_id}: {e}", exc_info=True)
            return FAILED

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(run_one, user_ids))
    else:
        outcomes = [run_one(user_id) for user_id in user_ids]

    for outcome in outcomes:
        summary[outcome] += 1

    logger.info(f"Weekly plan refresh done: {summary}")
    return summary


def scheduled_weekly_plan_refresh():
    """Scheduled task entry point: builds its own client from Config."""
    from yugen.supabase_client import create_supabase_client
    return refresh_all_user_plans(create_supabase_client(Config))
