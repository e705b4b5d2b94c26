"""
Per-frame feature extraction.

Reduces a LandmarkFrame to a handful of named scalar signals (joint
angles and vertical positions). Angles are only produced when the average
visibility of the exercise family's key joints passes the gate; vertical
positions are always filled from whatever points are present so that
consumers degrade gracefully on partial frames.
"""

import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np

from formfit.config import get_settings
from formfit.cv.landmarks import Landmark, LandmarkFrame, PoseLandmark as PL


class ExerciseFamily(Enum):
    """Joint subsets used for gating and angle extraction."""
    PUSHUP = "pushup"
    SQUAT = "squat"


KEY_JOINTS: Dict[ExerciseFamily, Tuple[int, ...]] = {
    ExerciseFamily.PUSHUP: (
        PL.LEFT_SHOULDER, PL.LEFT_ELBOW, PL.LEFT_WRIST,
        PL.RIGHT_SHOULDER, PL.RIGHT_ELBOW, PL.RIGHT_WRIST,
        PL.LEFT_HIP, PL.LEFT_ANKLE, PL.RIGHT_HIP, PL.RIGHT_ANKLE,
    ),
    ExerciseFamily.SQUAT: (
        PL.LEFT_HIP, PL.RIGHT_HIP,
        PL.LEFT_KNEE, PL.RIGHT_KNEE,
        PL.LEFT_ANKLE, PL.RIGHT_ANKLE,
    ),
}


@dataclass(frozen=True)
class FrameFeatures:
    """Derived, nullable signals for one frame."""
    t: float  # seconds
    elbow_angle: Optional[float] = None
    hip_angle: Optional[float] = None
    knee_angle: Optional[float] = None
    head_y: Optional[float] = None
    shoulder_y: Optional[float] = None
    hip_y: Optional[float] = None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)


def angle_degrees(
    point_a: Optional[Landmark],
    point_b: Optional[Landmark],
    point_c: Optional[Landmark],
) -> Optional[float]:
    """
    Angle at point_b formed by points a, b, c, in degrees (2D).

    Returns None if any point is missing or either arm of the angle has
    zero length.
    """
    if point_a is None or point_b is None or point_c is None:
        return None

    a = np.array([point_a.x, point_a.y], dtype=float)
    b = np.array([point_b.x, point_b.y], dtype=float)
    c = np.array([point_c.x, point_c.y], dtype=float)

    ba = a - b
    bc = c - b

    mag_ba = np.linalg.norm(ba)
    mag_bc = np.linalg.norm(bc)
    if mag_ba == 0 or mag_bc == 0 or not (np.isfinite(mag_ba) and np.isfinite(mag_bc)):
        return None

    cos_angle = np.dot(ba, bc) / (mag_ba * mag_bc)
    cos_angle = np.clip(cos_angle, -1.0, 1.0)
    angle = float(np.degrees(np.arccos(cos_angle)))

    if math.isnan(angle):
        return None
    return angle


def mean_of_sides(left: Optional[float], right: Optional[float]) -> Optional[float]:
    """Average both sides, or take whichever side resolved."""
    if left is None and right is None:
        return None
    if left is None:
        return right
    if right is None:
        return left
    return (left + right) / 2


def _y(landmark: Optional[Landmark]) -> Optional[float]:
    return landmark.y if landmark is not None else None


class FeatureExtractor:
    """
    Extracts FrameFeatures for one exercise family.

    Usage:
        extractor = FeatureExtractor(ExerciseFamily.PUSHUP)
        features = extractor.extract(frame)
    """

    def __init__(
        self,
        family: ExerciseFamily = ExerciseFamily.PUSHUP,
        min_visibility: Optional[float] = None,
    ):
        self.family = family
        self.key_joints = KEY_JOINTS[family]
        self.min_visibility = (
            min_visibility if min_visibility is not None else get_settings().min_visibility
        )

    def extract(self, frame: LandmarkFrame, t: Optional[float] = None) -> FrameFeatures:
        """
        Reduce a frame to features.

        Args:
            frame: Landmark frame from the estimator
            t: Timestamp in seconds (defaults to the frame's own timestamp)
        """
        t = frame.timestamp if t is None else t

        shoulder_y = mean_of_sides(_y(frame.get(PL.LEFT_SHOULDER)), _y(frame.get(PL.RIGHT_SHOULDER)))
        hip_y = mean_of_sides(_y(frame.get(PL.LEFT_HIP)), _y(frame.get(PL.RIGHT_HIP)))
        head_y = _y(frame.get(PL.NOSE))

        avg_visibility = frame.mean_visibility(self.key_joints)
        if avg_visibility < self.min_visibility:
            # Keep positional info, but no angles so state machines skip this frame
            return FrameFeatures(t=t, head_y=head_y, shoulder_y=shoulder_y, hip_y=hip_y)

        if self.family == ExerciseFamily.SQUAT:
            knee_angle = mean_of_sides(
                angle_degrees(frame.get(PL.LEFT_HIP), frame.get(PL.LEFT_KNEE), frame.get(PL.LEFT_ANKLE)),
                angle_degrees(frame.get(PL.RIGHT_HIP), frame.get(PL.RIGHT_KNEE), frame.get(PL.RIGHT_ANKLE)),
            )
            return FrameFeatures(
                t=t,
                knee_angle=knee_angle,
                head_y=head_y,
                shoulder_y=shoulder_y,
                hip_y=hip_y,
            )

        elbow_angle = mean_of_sides(
            angle_degrees(frame.get(PL.LEFT_SHOULDER), frame.get(PL.LEFT_ELBOW), frame.get(PL.LEFT_WRIST)),
            angle_degrees(frame.get(PL.RIGHT_SHOULDER), frame.get(PL.RIGHT_ELBOW), frame.get(PL.RIGHT_WRIST)),
        )
        hip_angle = mean_of_sides(
            angle_degrees(frame.get(PL.LEFT_SHOULDER), frame.get(PL.LEFT_HIP), frame.get(PL.LEFT_ANKLE)),
            angle_degrees(frame.get(PL.RIGHT_SHOULDER), frame.get(PL.RIGHT_HIP), frame.get(PL.RIGHT_ANKLE)),
        )
        return FrameFeatures(
            t=t,
            elbow_angle=elbow_angle,
            hip_angle=hip_angle,
            head_y=head_y,
            shoulder_y=shoulder_y,
            hip_y=hip_y,
        )
