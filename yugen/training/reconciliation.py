"""
Reconcile a regenerated week against what is already stored.

The decision is made in full before anything is written: `reconcile` only
reads, `apply_reconciliation` deletes then inserts.
"""
import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from typing import List, Optional, Tuple

from yugen.training.models import TrainingSession, SessionStatus
from yugen.training.repository import SessionRepository

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationPlan:
    week_monday: date
    week_sunday: date
    # Inclusive range to clear, None when nothing in the week may be cleared.
    to_delete: Optional[Tuple[date, date]]
    to_insert: List[TrainingSession] = field(default_factory=list)
    # Interacted sessions inside the delete range that must survive it.
    keep_ids: List[str] = field(default_factory=list)
    discarded: List[Tuple[TrainingSession, str]] = field(default_factory=list)
    has_interacted_sessions: bool = False


def reconcile(repository: SessionRepository, user_id: str, week_monday: date, week_sunday: date,
              proposed: List[TrainingSession], today: date) -> ReconciliationPlan:
    """
    Decide what to clear and what to insert for one user's target week.

    Without interacted sessions the whole week is cleared. Otherwise only
    today onward is cleared, interacted sessions in that range are kept,
    and proposals never land on a date that still holds a stored session.
    """
    existing = repository.fetch_sessions(user_id, week_monday, week_sunday)
    interacted = [s for s in existing if s.is_interacted]
    has_interacted = bool(interacted)

    if has_interacted:
        delete_from = max(today, week_monday)
    else:
        delete_from = week_monday
    to_delete = (delete_from, week_sunday) if delete_from <= week_sunday else None

    keep_ids = [
        s.id for s in interacted
        if to_delete and to_delete[0] <= s.date <= to_delete[1]
    ]
    # Dates that will still hold a stored session after the delete.
    occupied = {
        s.date for s in existing
        if not to_delete or s.date < to_delete[0] or s.id in keep_ids
    }
    interacted_dates = {s.date for s in interacted}

    plan = ReconciliationPlan(
        week_monday=week_monday,
        week_sunday=week_sunday,
        to_delete=to_delete,
        keep_ids=keep_ids,
        has_interacted_sessions=has_interacted,
    )

    for candidate in proposed:
        if candidate.date < week_monday:
            plan.discarded.append((candidate, "before target week"))
            continue
        if candidate.date > week_sunday:
            plan.discarded.append((candidate, "after target week"))
            continue
        if has_interacted and candidate.date < today and candidate.date in interacted_dates:
            plan.discarded.append((candidate, "date holds an interacted session"))
            continue
        if candidate.date in occupied:
            plan.discarded.append((candidate, "date holds a preserved session"))
            continue
        plan.to_insert.append(replace(
            candidate,
            user_id=user_id,
            id=str(uuid.uuid4()),
            status=SessionStatus.NOT_COMPLETED.value,
            post_session_notes="",
        ))

    for candidate, reason in plan.discarded:
        logger.debug(f"Discarded proposed {candidate.session_type} on {candidate.date} for {user_id}: {reason}")
    logger.info(
        f"Reconciled week {week_monday} for {user_id}: delete={to_delete}, "
        f"insert={len(plan.to_insert)}, keep={len(keep_ids)}, discarded={len(plan.discarded)}"
    )
    return plan


def apply_reconciliation(repository: SessionRepository, user_id: str, plan: ReconciliationPlan) -> int:
    """
    Delete then insert. A failed delete stops before any insert.

    Raises:
        RepositoryError: from either step.
    """
    if plan.to_delete:
        repository.delete_sessions(user_id, plan.to_delete[0], plan.to_delete[1], keep_ids=plan.keep_ids)
    return repository.insert_sessions(user_id, plan.to_insert)
