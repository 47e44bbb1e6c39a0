"""
Training plan data types.

Rows in the `training_plans` table map to TrainingSession. Dates are kept as
`datetime.date` inside the app and serialized to YYYY-MM-DD at the store edge.
"""
import uuid
from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from enum import Enum
from typing import Optional, List, Dict, Any


class SessionStatus(str, Enum):
    NOT_COMPLETED = "not_completed"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    MISSED = "missed"
    PARTIALLY_COMPLETED = "partially_completed"
    PLANNED = "planned"


REST_TYPES = {"rest", "rest day"}


def is_rest_type(session_type: Optional[str]) -> bool:
    return (session_type or "").strip().lower() in REST_TYPES


def parse_date(value) -> Optional[date]:
    """Accept date, datetime or an ISO string ('2024-06-10', '2024-06-10T08:00:00Z')."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if text.lower() in ("none", "null"):
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _to_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class TrainingSession:
    user_id: str
    date: date
    week_number: int
    day_of_week: int
    session_type: str
    distance: Optional[float] = None
    time: Optional[float] = None
    notes: str = ""
    post_session_notes: str = ""
    status: str = SessionStatus.NOT_COMPLETED.value
    phase: Optional[str] = None
    modified: bool = False
    suggested_location: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def is_rest(self) -> bool:
        return is_rest_type(self.session_type)

    @property
    def is_interacted(self) -> bool:
        """A session the user has touched: any non-default status or post-session notes."""
        status = self.status or SessionStatus.NOT_COMPLETED.value
        return status != SessionStatus.NOT_COMPLETED.value or bool((self.post_session_notes or "").strip())

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TrainingSession":
        session_date = parse_date(row.get("date"))
        return cls(
            id=str(row.get("id") or uuid.uuid4()),
            user_id=row.get("user_id"),
            date=session_date,
            week_number=int(row.get("week_number") or 1),
            day_of_week=int(row.get("day_of_week") or (session_date.isoweekday() if session_date else 1)),
            session_type=row.get("session_type") or "",
            distance=_to_float(row.get("distance")),
            time=_to_float(row.get("time")),
            notes=row.get("notes") or "",
            post_session_notes=row.get("post_session_notes") or "",
            status=row.get("status") or SessionStatus.NOT_COMPLETED.value,
            phase=row.get("phase"),
            modified=bool(row.get("modified", False)),
            suggested_location=row.get("suggested_location"),
        )

    def to_row(self) -> Dict[str, Any]:
        row = asdict(self)
        row["date"] = self.date.isoformat()
        return row


@dataclass
class PendingAdjustment:
    """A single-workout change proposed in chat and waiting for the user's yes/no."""
    week: int
    date: date
    session_type: str
    new_notes: str
    new_distance: float
    new_time: float
    new_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week": self.week,
            "date": self.date.isoformat(),
            "session_type": self.session_type,
            "new_notes": self.new_notes,
            "new_distance": self.new_distance,
            "new_time": self.new_time,
            "new_date": self.new_date.isoformat() if self.new_date else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PendingAdjustment":
        return cls(
            week=int(data["week"]),
            date=parse_date(data["date"]),
            session_type=data["session_type"],
            new_notes=data.get("new_notes") or "",
            new_distance=float(data["new_distance"]),
            new_time=float(data["new_time"]),
            new_date=parse_date(data.get("new_date")),
        )


@dataclass
class TrainingFeedback:
    user_id: str
    week_start_date: date
    prefers: List[str] = field(default_factory=list)
    struggling_with: List[str] = field(default_factory=list)
    feedback_summary: str = ""
    raw_data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TrainingFeedback":
        return cls(
            user_id=row.get("user_id"),
            week_start_date=parse_date(row.get("week_start_date")),
            prefers=list(row.get("prefers") or []),
            struggling_with=list(row.get("struggling_with") or []),
            feedback_summary=row.get("feedback_summary") or "",
            raw_data=row.get("raw_data") or {},
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "week_start_date": self.week_start_date.isoformat(),
            "prefers": list(self.prefers),
            "struggling_with": list(self.struggling_with),
            "feedback_summary": self.feedback_summary,
            "raw_data": self.raw_data,
        }
