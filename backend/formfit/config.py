"""Application configuration."""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "FormFit Rep Engine"
    debug: bool = False
    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Database (SQLite for local dev)
    database_url: str = "sqlite+aiosqlite:///./formfit.db"

    # Visibility + posture gating
    min_visibility: float = 0.4  # Average visibility across the key joints
    horizontal_body_max_delta_y: float = 0.3  # |shoulderY - hipY| for push-up posture
    start_top_streak: int = 3  # Consecutive "top" frames needed to start

    # Push-up rep validity
    pushup_min_valid_frames: int = 6
    pushup_min_angle_range: float = 40.0  # Minimum elbow range-of-motion
    pushup_bottom_angle_margin: float = 10.0  # How close to the bottom angle we require

    # Squat rep validity
    squat_min_valid_frames: int = 6
    squat_min_angle_range: float = 35.0
    squat_bottom_angle_margin: float = 5.0

    # Optional statistical template for push-up scoring
    pushup_template_path: Optional[str] = None

    # Session history
    history_limit: int = 50  # Keep only the most recent sessions

    # Debug ring buffer of processed frames
    debug_frame_buffer_size: int = 50

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
