"""Workout session history endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from formfit.database import get_db
from formfit.history import SessionHistoryStore
from formfit.schemas.workout_session import (
    ClearHistoryResponse,
    HistoryStatsResponse,
    WorkoutSessionCreate,
    WorkoutSessionListResponse,
    WorkoutSessionResponse,
)

router = APIRouter()


@router.post("", response_model=WorkoutSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    data: WorkoutSessionCreate,
    db: AsyncSession = Depends(get_db)
):
    """Save a finished session summary."""
    store = SessionHistoryStore(db)
    session = await store.append(data.model_dump(exclude={"date"}), date=data.date)
    return WorkoutSessionResponse.model_validate(session)


@router.get("", response_model=WorkoutSessionListResponse)
async def list_sessions(
    exercise_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """List stored sessions, newest first."""
    sessions = await SessionHistoryStore(db).list(exercise_id=exercise_id)

    return WorkoutSessionListResponse(
        items=[WorkoutSessionResponse.model_validate(s) for s in sessions],
        total=len(sessions)
    )


@router.get("/stats", response_model=HistoryStatsResponse)
async def get_stats(db: AsyncSession = Depends(get_db)):
    """Totals across the stored history."""
    stats = await SessionHistoryStore(db).stats()
    return HistoryStatsResponse(**stats)


@router.get("/{session_id}", response_model=WorkoutSessionResponse)
async def get_session(
    session_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Get a single stored session."""
    session = await SessionHistoryStore(db).get(session_id)

    if not session:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Workout session not found"
        )

    return WorkoutSessionResponse.model_validate(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Delete a stored session."""
    deleted = await SessionHistoryStore(db).delete(session_id)

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Workout session not found"
        )


@router.delete("", response_model=ClearHistoryResponse)
async def clear_sessions(db: AsyncSession = Depends(get_db)):
    """Delete the whole history."""
    deleted = await SessionHistoryStore(db).clear()
    return ClearHistoryResponse(deleted=deleted)
