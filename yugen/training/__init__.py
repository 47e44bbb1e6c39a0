# Training plan engine
# Phase calculation, session storage and week reconciliation

from .phases import phase_for, monday_of, week_number_for
from .models import TrainingSession, SessionStatus, PendingAdjustment, TrainingFeedback
from .repository import SessionRepository, RepositoryError
from .reconciliation import reconcile, apply_reconciliation, ReconciliationPlan

__all__ = [
    'phase_for', 'monday_of', 'week_number_for',
    'TrainingSession', 'SessionStatus', 'PendingAdjustment', 'TrainingFeedback',
    'SessionRepository', 'RepositoryError',
    'reconcile', 'apply_reconciliation', 'ReconciliationPlan',
]
