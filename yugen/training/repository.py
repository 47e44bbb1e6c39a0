"""
Session store adapter over the Supabase `training_plans` table.

Every call is scoped by user and an inclusive date range. Failures from the
client are re-raised as RepositoryError so callers can tell a store problem
apart from an empty result.
"""
import logging
from datetime import date, datetime, timezone
from typing import List, Optional, Iterable, Dict, Any

from yugen.training.models import TrainingSession

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """A read or write against the session store failed."""


class SessionRepository:
    TABLE = "training_plans"

    def __init__(self, client):
        self.client = client

    def fetch_sessions(self, user_id: str, start: date, end: date) -> List[TrainingSession]:
        try:
            res = self.client.table(self.TABLE) \
                .select("*") \
                .eq("user_id", user_id) \
                .gte("date", start.isoformat()) \
                .lte("date", end.isoformat()) \
                .order("date") \
                .execute()
        except Exception as e:
            logger.error(f"Error fetching sessions for {user_id} {start}..{end}: {e}")
            raise RepositoryError(f"fetch failed: {e}") from e
        return [TrainingSession.from_row(row) for row in (res.data or [])]

    def delete_sessions(self, user_id: str, start: date, end: date, keep_ids: Iterable[str] = ()) -> int:
        """Delete the user's sessions dated start..end, except those in keep_ids. Returns rows removed."""
        keep_ids = [str(i) for i in keep_ids]
        try:
            query = self.client.table(self.TABLE) \
                .delete() \
                .eq("user_id", user_id) \
                .gte("date", start.isoformat()) \
                .lte("date", end.isoformat())
            if keep_ids:
                query = query.not_.in_("id", keep_ids)
            res = query.execute()
        except Exception as e:
            logger.error(f"Error deleting sessions for {user_id} {start}..{end}: {e}")
            raise RepositoryError(f"delete failed: {e}") from e
        removed = len(res.data or [])
        logger.info(f"Deleted {removed} sessions for {user_id} between {start} and {end}")
        return removed

    def insert_sessions(self, user_id: str, sessions: List[TrainingSession]) -> int:
        if not sessions:
            return 0
        rows = []
        for session in sessions:
            row = session.to_row()
            row["user_id"] = user_id
            rows.append(row)
        try:
            self.client.table(self.TABLE).insert(rows).execute()
        except Exception as e:
            logger.error(f"Error inserting {len(rows)} sessions for {user_id}: {e}")
            raise RepositoryError(f"insert failed: {e}") from e
        logger.info(f"Inserted {len(rows)} sessions for {user_id}")
        return len(rows)

    def find_sessions(self, user_id: str, week_number: int, session_type: str,
                      on_date: Optional[date] = None) -> List[TrainingSession]:
        """Sessions in a plan week with the given type, optionally pinned to one date."""
        try:
            query = self.client.table(self.TABLE) \
                .select("*") \
                .eq("user_id", user_id) \
                .eq("week_number", week_number) \
                .eq("session_type", session_type)
            if on_date is not None:
                query = query.eq("date", on_date.isoformat())
            res = query.order("date").execute()
        except Exception as e:
            logger.error(f"Error looking up {session_type} in week {week_number} for {user_id}: {e}")
            raise RepositoryError(f"lookup failed: {e}") from e
        return [TrainingSession.from_row(row) for row in (res.data or [])]

    def update_session(self, session_id: str, updates: Dict[str, Any]) -> None:
        updates = dict(updates)
        updates.setdefault("updated_at", datetime.now(timezone.utc).isoformat())
        if isinstance(updates.get("date"), date):
            updates["date"] = updates["date"].isoformat()
        try:
            self.client.table(self.TABLE).update(updates).eq("id", session_id).execute()
        except Exception as e:
            logger.error(f"Error updating session {session_id}: {e}")
            raise RepositoryError(f"update failed: {e}") from e

    def has_sessions_from(self, user_id: str, start: date) -> bool:
        try:
            res = self.client.table(self.TABLE) \
                .select("id") \
                .eq("user_id", user_id) \
                .gte("date", start.isoformat()) \
                .limit(1) \
                .execute()
        except Exception as e:
            logger.error(f"Error checking upcoming sessions for {user_id}: {e}")
            raise RepositoryError(f"fetch failed: {e}") from e
        return bool(res.data)
