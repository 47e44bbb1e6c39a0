"""
Soft checks on a candidate week. Nothing here rejects a plan; callers log the warnings.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from yugen.training.models import TrainingSession
from yugen.training import phases

logger = logging.getLogger(__name__)

FREQUENCY_TOLERANCE = 1
VOLUME_WARNING_RATIO = 0.85


@dataclass
class PlanValidation:
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings


def training_session_count(sessions: List[TrainingSession]) -> int:
    return sum(1 for s in sessions if not s.is_rest)


def total_distance(sessions: List[TrainingSession]) -> float:
    return sum(s.distance or 0.0 for s in sessions if not s.is_rest)


def check_frequency(sessions: List[TrainingSession], expected: int) -> Optional[str]:
    actual = training_session_count(sessions)
    if abs(actual - expected) > FREQUENCY_TOLERANCE:
        return f"Plan has {actual} training days, expected {expected} (+/-{FREQUENCY_TOLERANCE})"
    return None


def check_volume(sessions: List[TrainingSession], target_volume: Optional[float]) -> Optional[str]:
    if not target_volume or target_volume <= 0:
        return None
    planned = total_distance(sessions)
    if planned < target_volume * VOLUME_WARNING_RATIO:
        return f"Planned volume {planned:.1f} is below {int(VOLUME_WARNING_RATIO * 100)}% of target {target_volume:.1f}"
    return None


def check_long_run(sessions: List[TrainingSession], phase: str) -> Optional[str]:
    if phase not in (phases.PHASE_BASE, phases.PHASE_BUILD):
        return None
    if not any("long" in (s.session_type or "").lower() for s in sessions):
        return f"No long run in a {phase} week"
    return None


def check_session_fields(sessions: List[TrainingSession]) -> List[str]:
    problems = []
    for s in sessions:
        if s.is_rest:
            continue
        if s.distance is None or s.distance <= 0:
            problems.append(f"{s.session_type} on {s.date} has no positive distance")
        if s.time is None or s.time <= 0:
            problems.append(f"{s.session_type} on {s.date} has no positive duration")
    return problems


def validate_plan(sessions: List[TrainingSession], expected_frequency: int,
                  target_volume: Optional[float], phase: str) -> PlanValidation:
    result = PlanValidation()
    for warning in (
        check_frequency(sessions, expected_frequency),
        check_volume(sessions, target_volume),
        check_long_run(sessions, phase),
    ):
        if warning:
            result.warnings.append(warning)
    result.warnings.extend(check_session_fields(sessions))
    return result
