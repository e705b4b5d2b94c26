"""Pydantic schemas for API request/response models."""

from formfit.schemas.workout_session import (
    WorkoutSessionCreate,
    WorkoutSessionResponse,
    WorkoutSessionListResponse,
    HistoryStatsResponse,
    ClearHistoryResponse,
)
from formfit.schemas.live import (
    LandmarkIn,
    FrameMessage,
)

__all__ = [
    "WorkoutSessionCreate",
    "WorkoutSessionResponse",
    "WorkoutSessionListResponse",
    "HistoryStatsResponse",
    "ClearHistoryResponse",
    "LandmarkIn",
    "FrameMessage",
]
