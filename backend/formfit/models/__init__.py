"""Database models."""

from formfit.models.base import Base, TimestampMixin
from formfit.models.workout_session import WorkoutSession

__all__ = [
    "Base",
    "TimestampMixin",
    "WorkoutSession",
]
