"""Shared fixtures: synthetic landmark frames with exact joint angles."""

import math
import os
import tempfile

# Point the app at a throwaway database before anything imports formfit
_DB_DIR = tempfile.mkdtemp(prefix="formfit-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'formfit-test.db')}"

from typing import Dict, Iterable, Optional, Tuple

import pytest

from formfit.config import Settings
from formfit.cv.landmarks import NUM_LANDMARKS, Landmark, LandmarkFrame, PoseLandmark as PL

Point = Tuple[float, float]


def build_frame(points: Dict[int, Point], t: float, visibility: float = 0.9) -> LandmarkFrame:
    """Frame with the given points; every other landmark is missing."""
    landmarks = [None] * NUM_LANDMARKS
    for index, (x, y) in points.items():
        landmarks[index] = Landmark(x=x, y=y, z=0.0, visibility=visibility)
    return LandmarkFrame(timestamp=t, landmarks=landmarks)


def _both_sides(left: Iterable[int], right: Iterable[int], coords: Iterable[Point]) -> Dict[int, Point]:
    points = {}
    for l_index, r_index, xy in zip(left, right, coords):
        points[l_index] = xy
        points[r_index] = xy
    return points


def make_pushup_frame(
    elbow_angle: float,
    t: float,
    hip_angle: float = 175.0,
    visibility: float = 0.9,
    shoulder_y: float = 0.5,
    hip_y: Optional[float] = None,
) -> LandmarkFrame:
    """
    Side-on push-up pose with the requested elbow and hip angles.

    Shoulder-elbow and shoulder-hip run horizontally, so the wrist and the
    ankle are rotated off that line by exactly the requested angle.
    """
    hip_y = shoulder_y if hip_y is None else hip_y
    theta = math.radians(elbow_angle)
    phi = math.radians(hip_angle)

    shoulder = (0.5, shoulder_y)
    elbow = (0.6, shoulder_y)
    wrist = (elbow[0] - 0.1 * math.cos(theta), elbow[1] + 0.1 * math.sin(theta))
    hip = (0.7, hip_y)
    ankle = (hip[0] - 0.2 * math.cos(phi), hip[1] + 0.2 * math.sin(phi))

    points = _both_sides(
        (PL.LEFT_SHOULDER, PL.LEFT_ELBOW, PL.LEFT_WRIST, PL.LEFT_HIP, PL.LEFT_ANKLE),
        (PL.RIGHT_SHOULDER, PL.RIGHT_ELBOW, PL.RIGHT_WRIST, PL.RIGHT_HIP, PL.RIGHT_ANKLE),
        (shoulder, elbow, wrist, hip, ankle),
    )
    points[PL.NOSE] = (0.4, shoulder_y)
    return build_frame(points, t, visibility)


def make_squat_frame(knee_angle: float, t: float, visibility: float = 0.9) -> LandmarkFrame:
    """Side-on standing pose: thigh vertical, shin rotated by the knee angle."""
    theta = math.radians(knee_angle)

    shoulder = (0.5, 0.3)
    hip = (0.5, 0.5)
    knee = (0.5, 0.7)
    ankle = (knee[0] + 0.2 * math.sin(theta), knee[1] - 0.2 * math.cos(theta))

    points = _both_sides(
        (PL.LEFT_SHOULDER, PL.LEFT_HIP, PL.LEFT_KNEE, PL.LEFT_ANKLE),
        (PL.RIGHT_SHOULDER, PL.RIGHT_HIP, PL.RIGHT_KNEE, PL.RIGHT_ANKLE),
        (shoulder, hip, knee, ankle),
    )
    points[PL.NOSE] = (0.5, 0.2)
    return build_frame(points, t, visibility)


def make_wrist_frame(wrist_y: float, t: float, visibility: float = 0.9) -> LandmarkFrame:
    points = {
        PL.LEFT_WRIST: (0.3, wrist_y),
        PL.RIGHT_WRIST: (0.7, wrist_y),
        PL.NOSE: (0.5, 0.2),
    }
    return build_frame(points, t, visibility)


# One full push-up: start debounce, down past 90, back up past 160
PUSHUP_REP_ELBOW = [170, 168, 169, 162, 150, 130, 110, 95, 88, 85, 88, 92, 100, 115, 130, 145, 158, 165, 168, 170]

# Down to 140 and straight back up: never reaches the bottom
PUSHUP_ABORT_ELBOW = [170, 168, 169, 161, 150, 140, 145, 155, 165]

SQUAT_REP_KNEE = [170, 172, 171, 162, 140, 120, 98, 95, 96, 108, 130, 150, 168]


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def fixed_clock():
    """Wall clock frozen at 1_700_000_000 s."""
    return lambda: 1_700_000_000.0
