"""API routes."""

from fastapi import APIRouter

from formfit.api import history, live

api_router = APIRouter()

api_router.include_router(history.router, prefix="/history", tags=["History"])
api_router.include_router(live.router, prefix="/live", tags=["Live"])
