"""
Chat-driven single workout adjustments.

A conversation is either idle or holding one pending adjustment that waits
for the user's yes/no. Messages are classified with keyword and regex
matching, the concrete change comes from the LLM, and a confirmed change is
written through the SessionRepository.
"""
import logging
import re
from datetime import date, datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from yugen.coach.generators import propose_adjustment
from yugen.training.models import PendingAdjustment, TrainingSession
from yugen.training.repository import SessionRepository, RepositoryError
from yugen.utils import prompts

logger = logging.getLogger(__name__)


class MessageIntent(Enum):
    CONFIRM = "confirm"
    REJECT = "reject"
    ADJUST = "adjust"
    NONE = "none"


class ConversationState(Enum):
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"


CONFIRM_TERMS = [
    "yes", "yeah", "yep", "yup", "sure", "ok", "okay", "confirm", "approved",
    "sounds good", "do it", "go ahead", "make the change", "update it",
]

REJECT_TERMS = [
    "no", "nope", "don't", "dont", "cancel", "stop", "reject", "negative",
    "hold off", "wait", "don't change", "dont change",
]

PLAN_CHANGE_PHRASES = [
    "adjust plan", "adjust the plan", "adjust my plan",
    "change plan", "change the plan", "change my plan",
    "modify plan", "modify the plan", "modify my plan",
    "update plan", "update the plan", "update my plan",
]
REASON_KEYWORDS = ["sore", "pain", "injured", "injury", "tired", "difficult", "hard", "easier", "too much"]

WORKOUT_TYPES = ["run", "running", "workout", "session", "tempo", "interval", "intervals",
                 "long run", "easy run", "recovery"]
CHANGE_VERBS = ["change", "modify", "adjust", "update", "reduce", "make shorter", "make easier", "skip"]

SIMPLE_CHANGE_COMMANDS = [
    "change it", "modify it", "adjust it", "update it", "make it shorter", "make it easier",
    "lets change", "let's change", "yes change", "please change",
]

DATE_CHANGE_PATTERNS = [
    r"\bmove (\w+) to (\w+)",
    r"\bmove (\w+) from (\w+) to (\w+)",
    r"\bchange (\w+) to (\w+)",
    r"\breschedule (\w+) to (\w+)",
    r"\bcan('t| not) do (\w+) on (\w+)",
    r"\bhave .+ on (\w+).* can we change",
]
MONTH_PATTERN = (r"\b(january|february|march|april|may|june|july|august|september|october|november|december"
                 r"|jan|feb|mar|apr|jun|jul|aug|sep|sept|oct|nov|dec)\b")
DAY_PATTERN = r"\b(today|tomorrow|monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b"


def _terms_regex(terms: List[str]):
    alternation = "|".join(re.escape(t) for t in sorted(terms, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternation})\b")


_CONFIRM_RE = _terms_regex(CONFIRM_TERMS)
_REJECT_RE = _terms_regex(REJECT_TERMS)
_PLAN_CHANGE_RE = _terms_regex(PLAN_CHANGE_PHRASES)
_REASON_RE = _terms_regex(REASON_KEYWORDS)
_WORKOUT_RE = _terms_regex(WORKOUT_TYPES)
_CHANGE_VERB_RE = _terms_regex(CHANGE_VERBS)
_SIMPLE_COMMAND_RE = _terms_regex(SIMPLE_CHANGE_COMMANDS)


def _normalize(text: str) -> str:
    return (text or "").lower().replace("’", "'").strip()


def is_confirmation(text: str) -> bool:
    return bool(_CONFIRM_RE.search(_normalize(text)))


def is_rejection(text: str) -> bool:
    return bool(_REJECT_RE.search(_normalize(text)))


def is_adjustment_request(text: str) -> bool:
    """True if the message asks to change a workout or move it to another day."""
    message = _normalize(text)

    explicit = bool(_PLAN_CHANGE_RE.search(message)) and bool(_REASON_RE.search(message))
    workout_change = bool(_WORKOUT_RE.search(message)) and bool(_CHANGE_VERB_RE.search(message))
    simple_command = bool(_SIMPLE_COMMAND_RE.search(message))
    date_change = (
        any(re.search(p, message) for p in DATE_CHANGE_PATTERNS)
        or (bool(re.search(MONTH_PATTERN, message)) and "move" in message)
        or (bool(re.search(DAY_PATTERN, message)) and ("move" in message or "change" in message))
    )
    return explicit or workout_change or simple_command or date_change


def classify_message(text: str, awaiting_confirmation: bool = False) -> MessageIntent:
    """
    Classify a chat message.

    While a change is pending, yes/no answers win. Otherwise a change request
    is looked for first, since words like "ok" or "no" inside a request mean
    nothing without a pending change.
    """
    if awaiting_confirmation:
        if is_confirmation(text):
            return MessageIntent.CONFIRM
        if is_rejection(text):
            return MessageIntent.REJECT
        if is_adjustment_request(text):
            return MessageIntent.ADJUST
        return MessageIntent.NONE

    if is_adjustment_request(text):
        return MessageIntent.ADJUST
    if is_confirmation(text):
        return MessageIntent.CONFIRM
    if is_rejection(text):
        return MessageIntent.REJECT
    return MessageIntent.NONE


def _date_label(day: date) -> str:
    return f"{day.strftime('%A')}, {day.strftime('%B')} {day.day}"


def _with_year(day: date, year: int) -> date:
    try:
        return day.replace(year=year)
    except ValueError:
        # Feb 29 into a non-leap year
        return day.replace(year=year, day=28)


def confirmation_prompt(pending: PendingAdjustment, units: str = "km") -> str:
    move_clause = f" and move it to {_date_label(pending.new_date)}" if pending.new_date and pending.new_date != pending.date else ""
    return prompts.ADJUSTMENT_CONFIRMATION_TEMPLATE.format(
        session_type=pending.session_type,
        date_label=_date_label(pending.date),
        distance=f"{pending.new_distance:g}",
        units=units,
        time=f"{pending.new_time:g}",
        move_clause=move_clause,
        notes=pending.new_notes,
    )


def find_adjustment_target(repository: SessionRepository, user_id: str, pending: PendingAdjustment,
                           today: date) -> Optional[TrainingSession]:
    """
    Locate the stored session a pending adjustment refers to.

    A date from an earlier year (a stale conversation) is matched on month
    and day only, falling back to any session of that type in the week.
    When several sessions match, the first by date is used.
    """
    if pending.date.year < today.year:
        candidates = repository.find_sessions(user_id, pending.week, pending.session_type)
        same_day = [s for s in candidates if s.date.month == pending.date.month and s.date.day == pending.date.day]
        matches = same_day or candidates
    else:
        matches = repository.find_sessions(user_id, pending.week, pending.session_type, on_date=pending.date)

    if not matches:
        return None
    if len(matches) > 1:
        logger.warning(
            f"Ambiguous adjustment target for {user_id}: {len(matches)} x {pending.session_type} "
            f"in week {pending.week}, using {matches[0].date}"
        )
    return matches[0]


def apply_adjustment(repository: SessionRepository, user_id: str, pending: PendingAdjustment,
                     today: date) -> Tuple[bool, str]:
    """Write a confirmed adjustment. Returns (success, message for the user)."""
    try:
        target = find_adjustment_target(repository, user_id, pending, today)
        if not target:
            logger.info(f"No session found for adjustment {pending.to_dict()} ({user_id})")
            return False, prompts.ADJUSTMENT_NOT_FOUND_MESSAGE.format(session_type=pending.session_type)

        updates = {
            "notes": pending.new_notes,
            "distance": pending.new_distance,
            "time": pending.new_time,
            "modified": True,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        move_clause = ""
        if pending.new_date and pending.new_date != target.date:
            new_date = pending.new_date
            if new_date.year < today.year:
                new_date = _with_year(new_date, today.year)
            updates["date"] = new_date.isoformat()
            updates["day_of_week"] = new_date.isoweekday()
            move_clause = f" and moved it to {_date_label(new_date)}"

        repository.update_session(target.id, updates)
        logger.info(f"Applied adjustment to session {target.id} for {user_id}")
        return True, prompts.ADJUSTMENT_SUCCESS_MESSAGE.format(session_type=pending.session_type, move_clause=move_clause)
    except RepositoryError as e:
        logger.error(f"Failed to apply adjustment for {user_id}: {e}")
        return False, prompts.ADJUSTMENT_FAILURE_MESSAGE


class AdjustmentConversation:
    """
    Adjustment state for one chat.

    `pending` is the only state; callers persist it between messages
    (see load_pending_adjustment / save_pending_adjustment).
    """

    def __init__(self, repository: SessionRepository, pending: Optional[PendingAdjustment] = None,
                 proposer: Optional[Callable] = None, today: Optional[date] = None):
        self.repository = repository
        self.pending = pending
        self.proposer = proposer or propose_adjustment
        self.today = today or date.today()

    @property
    def state(self) -> ConversationState:
        return ConversationState.AWAITING_CONFIRMATION if self.pending else ConversationState.IDLE

    def handle_message(self, text: str, user_id: str, profile, current_week_sessions: List[TrainingSession]) -> Dict:
        """
        Returns:
            dict: {"handled": bool, "response_message": str (when handled)}
        """
        intent = classify_message(text, awaiting_confirmation=self.pending is not None)
        logger.debug(f"Chat message for {user_id} classified as {intent.value} in state {self.state.value}")

        if self.pending is not None and intent == MessageIntent.CONFIRM:
            pending, self.pending = self.pending, None
            _, message = apply_adjustment(self.repository, user_id, pending, self.today)
            return {"handled": True, "response_message": message}

        if self.pending is not None and intent == MessageIntent.REJECT:
            self.pending = None
            return {"handled": True, "response_message": prompts.ADJUSTMENT_REJECTED_MESSAGE}

        if intent == MessageIntent.ADJUST:
            proposal = self.proposer(text, profile, current_week_sessions, today=self.today)
            if not proposal:
                message = prompts.ADJUSTMENT_CLARIFY_MESSAGE
                if self.pending is not None:
                    # The earlier change stays pending; say so.
                    message += prompts.ADJUSTMENT_STILL_PENDING_NOTE.format(
                        session_type=self.pending.session_type,
                        date_label=_date_label(self.pending.date),
                    )
                return {"handled": True, "response_message": message}
            self.pending = PendingAdjustment(
                week=proposal.week,
                date=proposal.date,
                session_type=proposal.session_type,
                new_notes=proposal.new_notes,
                new_distance=proposal.new_distance,
                new_time=proposal.new_time,
                new_date=proposal.new_date,
            )
            units = getattr(profile, "units", "km")
            return {"handled": True, "response_message": confirmation_prompt(self.pending, units)}

        return {"handled": False}


def load_pending_adjustment(client, chat_id: str, user_id: str) -> Optional[PendingAdjustment]:
    res = client.table("chats").select("id, user_id, pending_adjustment") \
        .eq("id", chat_id).eq("user_id", user_id).execute()
    if not res.data:
        return None
    data = res.data[0].get("pending_adjustment")
    if not data:
        return None
    try:
        return PendingAdjustment.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Discarding unreadable pending adjustment on chat {chat_id}: {e}")
        return None


def save_pending_adjustment(client, chat_id: str, user_id: str, pending: Optional[PendingAdjustment]) -> None:
    client.table("chats").update({
        "pending_adjustment": pending.to_dict() if pending else None
    }).eq("id", chat_id).eq("user_id", user_id).execute()


def chat_exists(client, chat_id: str, user_id: str) -> bool:
    res = client.table("chats").select("id").eq("id", chat_id).eq("user_id", user_id).execute()
    return bool(res.data)
