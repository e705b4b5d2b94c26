"""Workout session history model."""

import json
import uuid
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from formfit.models.base import Base, TimestampMixin, utcnow


class WorkoutSession(Base, TimestampMixin):
    """
    Summary of one finished exercise session.

    Keyed by a generated uuid; `date` is the client-side time the session
    was recorded.
    """

    __tablename__ = "workout_sessions"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    exercise_id: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True
    )
    exercise_name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True
    )
    duration: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)  # seconds
    reps: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    avg_form_score: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    # Feedback counts (stored as JSON string for SQLite compatibility)
    _feedback_summary: Mapped[Optional[str]] = mapped_column("feedback_summary", Text, nullable=True)

    @property
    def feedback_summary(self) -> Dict[str, int]:
        if self._feedback_summary:
            return json.loads(self._feedback_summary)
        return {"good": 0, "warning": 0, "error": 0}

    @feedback_summary.setter
    def feedback_summary(self, value: Optional[Dict[str, int]]):
        if value is not None:
            self._feedback_summary = json.dumps(value)
        else:
            self._feedback_summary = None

    def __repr__(self) -> str:
        return (
            f"<WorkoutSession(id={self.id}, exercise={self.exercise_id}, "
            f"reps={self.reps}, score={self.avg_form_score:.1f})>"
        )
