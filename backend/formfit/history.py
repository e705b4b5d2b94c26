"""
Session history store.

Durable list of finished-session summaries: append, list, delete, clear,
plus aggregate stats. Only the `history_limit` most recent sessions are
kept.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from formfit.config import get_settings
from formfit.models.workout_session import WorkoutSession

logger = logging.getLogger(__name__)


class SessionHistoryStore:
    """History operations over one database session."""

    def __init__(self, db: AsyncSession, limit: Optional[int] = None):
        self.db = db
        self.limit = limit if limit is not None else get_settings().history_limit

    async def append(self, summary: Dict[str, Any], date: Optional[datetime] = None) -> WorkoutSession:
        """
        Store a session summary under a new id.

        Args:
            summary: exercise_id, exercise_name, duration, reps,
                avg_form_score, feedback_summary
            date: Client timestamp (now if omitted)
        """
        session = WorkoutSession(
            exercise_id=summary["exercise_id"],
            exercise_name=summary["exercise_name"],
            duration=summary.get("duration", 0.0),
            reps=summary.get("reps", 0),
            avg_form_score=summary.get("avg_form_score", 0.0),
        )
        session.feedback_summary = summary.get("feedback_summary")
        if date is not None:
            session.date = date

        self.db.add(session)
        await self.db.flush()
        await self._trim()
        await self.db.commit()
        await self.db.refresh(session)

        logger.info(f"Saved workout session {session.id}: {session.exercise_id}, {session.reps} reps")
        return session

    async def _trim(self) -> None:
        """Keep only the most recent `limit` sessions."""
        stale_ids = (
            select(WorkoutSession.id)
            .order_by(desc(WorkoutSession.date), desc(WorkoutSession.created_at))
            .offset(self.limit)
        )
        result = await self.db.execute(stale_ids)
        ids = list(result.scalars().all())
        if ids:
            await self.db.execute(delete(WorkoutSession).where(WorkoutSession.id.in_(ids)))
            logger.debug(f"Trimmed {len(ids)} old workout sessions")

    async def list(self, exercise_id: Optional[str] = None) -> List[WorkoutSession]:
        """Sessions newest first, optionally for one exercise."""
        query = select(WorkoutSession)
        if exercise_id:
            query = query.where(WorkoutSession.exercise_id == exercise_id)
        query = query.order_by(desc(WorkoutSession.date), desc(WorkoutSession.created_at))

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get(self, session_id: str) -> Optional[WorkoutSession]:
        result = await self.db.execute(
            select(WorkoutSession).where(WorkoutSession.id == session_id)
        )
        return result.scalar_one_or_none()

    async def delete(self, session_id: str) -> bool:
        """Delete one session; False if it did not exist."""
        session = await self.get(session_id)
        if session is None:
            return False

        await self.db.delete(session)
        await self.db.commit()
        return True

    async def clear(self) -> int:
        """Delete every session; returns how many were removed."""
        count = (await self.db.execute(select(func.count(WorkoutSession.id)))).scalar() or 0
        await self.db.execute(delete(WorkoutSession))
        await self.db.commit()
        logger.info(f"Cleared {count} workout sessions")
        return count

    async def stats(self) -> Dict[str, Any]:
        """Totals across the stored history."""
        sessions = await self.list()

        if not sessions:
            return {
                "total_workouts": 0,
                "total_reps": 0,
                "avg_form_score": 0,
                "favorite_exercise": None,
            }

        total_reps = sum(s.reps for s in sessions)
        avg_form_score = round(sum(s.avg_form_score for s in sessions) / len(sessions))

        # Most common exercise; ties go to the most recently used one
        exercise_counts = Counter(s.exercise_name for s in sessions)
        favorite_exercise = exercise_counts.most_common(1)[0][0]

        return {
            "total_workouts": len(sessions),
            "total_reps": total_reps,
            "avg_form_score": avg_form_score,
            "favorite_exercise": favorite_exercise,
        }
