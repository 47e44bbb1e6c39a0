"""
LLM boundary for plan generation and chat adjustments.

Output is untrusted: it is parsed against the schemas in yugen.coach.schemas
and any failure (transport, timeout, bad JSON, bad shape) is a GenerationError.
"""
import logging
from datetime import timedelta
from typing import List, Optional

from pydantic import ValidationError

from yugen.coach.schemas import ProposedSession, WeekProposal, AdjustmentProposal
from yugen.config import Config
from yugen.utils.llm_utils import generate_chat_response, extract_json, LLMError
from yugen.utils import prompts

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """The generator produced nothing usable."""


def parse_week_proposal(text: str) -> List[ProposedSession]:
    try:
        return WeekProposal.model_validate(extract_json(text)).sessions
    except (ValueError, ValidationError) as e:
        raise GenerationError(f"unusable plan proposal: {e}") from e


def parse_adjustment_proposal(text: str) -> AdjustmentProposal:
    try:
        payload = extract_json(text)
        if isinstance(payload, list) and len(payload) == 1:
            payload = payload[0]
        return AdjustmentProposal.model_validate(payload)
    except (ValueError, ValidationError) as e:
        raise GenerationError(f"unusable adjustment proposal: {e}") from e


def propose_week_sessions(prompt: str, timeout: Optional[float] = None, today=None) -> List[ProposedSession]:
    """
    Ask the LLM for a week of sessions.

    Raises:
        GenerationError: on any failure. Callers fall back to the template plan.
    """
    try:
        response_text = generate_chat_response(
            [{"role": "user", "content": prompt}],
            model_name=Config.PLAN_MODEL,
            mode="json",
            timeout=timeout,
            today=today,
        )
    except LLMError as e:
        raise GenerationError(str(e)) from e
    sessions = parse_week_proposal(response_text)
    logger.info(f"Generator proposed {len(sessions)} sessions")
    return sessions


def format_plan_for_adjustment(sessions, units: str = "km") -> str:
    lines = []
    for s in sessions:
        label = s.date.strftime("%A, %b %d")
        distance = f"{s.distance:g}{units}" if s.distance is not None else "-"
        time = f"{s.time:g} minutes" if s.time is not None else "-"
        lines.append(f"Week {s.week_number}, {label} ({s.date.isoformat()}): {s.session_type} - {distance}, {time}, Notes: {s.notes}")
    return "\n".join(lines)


def propose_adjustment(message: str, profile, sessions, timeout: Optional[float] = None,
                       today=None) -> Optional[AdjustmentProposal]:
    """Ask the LLM for one concrete change to the current plan. None when nothing usable comes back."""
    if not sessions:
        logger.info("No sessions to adjust")
        return None

    system_prompt = prompts.ADJUSTMENT_PROMPT.format(
        experience=profile.experience_level or "recreational",
        goal=profile.goal_type or "general fitness",
        plan_text=format_plan_for_adjustment(sessions, profile.units),
        units=profile.units,
    )
    try:
        response_text = generate_chat_response(
            [{"role": "user", "content": message}],
            system_prompt=system_prompt,
            timeout=timeout,
            today=today,
        )
        return parse_adjustment_proposal(response_text)
    except (LLMError, GenerationError) as e:
        logger.warning(f"Adjustment proposal failed: {e}")
        return None


def extract_weekly_feedback(chat_messages: List[str], workout_notes: List[str], skipped_workouts: List[str],
                            week_start, timeout: Optional[float] = None) -> str:
    """
    Ask the LLM to summarize a week of chat and workout notes.

    Raises:
        GenerationError: provider failure.
    """
    prompt = prompts.FEEDBACK_EXTRACTION_PROMPT.format(
        week_start=week_start.isoformat(),
        week_end=(week_start + timedelta(days=6)).isoformat(),
        chat_messages="\n".join(f"- {m}" for m in chat_messages) or "- None",
        workout_notes="\n".join(f"- {n}" for n in workout_notes) or "- None",
        skipped_workouts="\n".join(f"- {w}" for w in skipped_workouts) or "- None",
    )
    try:
        return generate_chat_response([{"role": "user", "content": prompt}], mode="coach", timeout=timeout)
    except LLMError as e:
        raise GenerationError(str(e)) from e
