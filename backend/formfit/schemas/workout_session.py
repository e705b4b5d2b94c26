"""Workout session history schemas."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

FEEDBACK_KEYS = ("good", "warning", "error")


class WorkoutSessionCreate(BaseModel):
    """Schema for saving a finished session summary."""
    exercise_id: str = Field(..., min_length=1, max_length=50)
    exercise_name: str = Field(..., min_length=1, max_length=255)
    date: Optional[datetime] = None  # Defaults to now
    duration: float = Field(0.0, ge=0)  # seconds
    reps: int = Field(0, ge=0)
    avg_form_score: float = Field(0.0, ge=0, le=100)
    feedback_summary: Dict[str, int] = Field(
        default_factory=lambda: {key: 0 for key in FEEDBACK_KEYS}
    )

    @field_validator("feedback_summary")
    @classmethod
    def validate_feedback_summary(cls, v: Dict[str, int]) -> Dict[str, int]:
        unknown = set(v) - set(FEEDBACK_KEYS)
        if unknown:
            raise ValueError(f"feedback_summary keys must be among: {list(FEEDBACK_KEYS)}")
        if any(count < 0 for count in v.values()):
            raise ValueError("feedback_summary counts must be non-negative")
        return {key: v.get(key, 0) for key in FEEDBACK_KEYS}


class WorkoutSessionResponse(BaseModel):
    """Schema for a stored session."""
    id: str
    exercise_id: str
    exercise_name: str
    date: datetime
    duration: float
    reps: int
    avg_form_score: float
    feedback_summary: Dict[str, int]

    class Config:
        from_attributes = True


class WorkoutSessionListResponse(BaseModel):
    """Sessions, newest first."""
    items: List[WorkoutSessionResponse]
    total: int


class HistoryStatsResponse(BaseModel):
    """Aggregate stats across the stored history."""
    total_workouts: int
    total_reps: int
    avg_form_score: int
    favorite_exercise: Optional[str] = None


class ClearHistoryResponse(BaseModel):
    deleted: int
