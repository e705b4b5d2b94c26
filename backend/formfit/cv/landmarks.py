"""
Landmark frames produced by the external pose estimator.

A frame is one timestamped skeleton estimate: 33 MediaPipe Pose points,
each with normalized position (y increases downward) and a visibility
confidence. Individual points may be missing; accessors return None
instead of raising.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Optional


class PoseLandmark(IntEnum):
    """MediaPipe Pose landmark indices."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


NUM_LANDMARKS = len(PoseLandmark)


@dataclass(frozen=True)
class Landmark:
    """Single landmark with 3D position and visibility."""
    x: float  # Normalized x coordinate (0-1)
    y: float  # Normalized y coordinate (0-1, grows downward)
    z: float = 0.0  # Depth relative to hips
    visibility: float = 0.0  # Estimator confidence (0-1)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z, "visibility": self.visibility}


@dataclass
class LandmarkFrame:
    """
    Complete pose estimate for a single frame.

    Landmarks are indexed by PoseLandmark; a None entry (or a short list)
    means the estimator did not return that point.
    """
    timestamp: float
    landmarks: List[Optional[Landmark]] = field(default_factory=list)

    @classmethod
    def from_mediapipe_tasks(cls, result, timestamp: float) -> "LandmarkFrame":
        """Create a frame from a MediaPipe Tasks PoseLandmarker result."""
        if not result.pose_landmarks or len(result.pose_landmarks) == 0:
            return cls(timestamp=timestamp, landmarks=[])

        # Use first detected pose
        pose_landmarks = result.pose_landmarks[0]

        landmarks = []
        for landmark in pose_landmarks:
            vis = landmark.visibility if getattr(landmark, "visibility", None) is not None else 0.0
            landmarks.append(Landmark(x=landmark.x, y=landmark.y, z=landmark.z, visibility=vis))

        return cls(timestamp=timestamp, landmarks=landmarks)

    @classmethod
    def from_dicts(
        cls,
        points: Iterable[Optional[Dict[str, Any]]],
        timestamp: float,
    ) -> "LandmarkFrame":
        """Create a frame from JSON-style dicts; missing keys default to zero."""
        landmarks: List[Optional[Landmark]] = []
        for point in points:
            if point is None:
                landmarks.append(None)
                continue
            landmarks.append(Landmark(
                x=float(point.get("x", 0.0)),
                y=float(point.get("y", 0.0)),
                z=float(point.get("z", 0.0) or 0.0),
                visibility=float(point.get("visibility", 0.0) or 0.0),
            ))
        return cls(timestamp=timestamp, landmarks=landmarks)

    @property
    def is_valid(self) -> bool:
        """Check if a pose was detected at all."""
        return any(lm is not None for lm in self.landmarks)

    def get(self, index: int) -> Optional[Landmark]:
        """Safely get landmark by index."""
        if 0 <= index < len(self.landmarks):
            return self.landmarks[index]
        return None

    def visibility_of(self, index: int) -> float:
        landmark = self.get(index)
        return landmark.visibility if landmark is not None else 0.0

    def mean_visibility(self, indices: Iterable[int]) -> float:
        """
        Average visibility over the given points.

        Points the estimator did not return are skipped; if none are
        present the result is 0.
        """
        present = [self.get(i) for i in indices]
        present = [lm for lm in present if lm is not None]
        if not present:
            return 0.0
        return sum(lm.visibility for lm in present) / len(present)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary for debugging exports."""
        return {
            "timestamp": self.timestamp,
            "landmarks": [lm.to_dict() if lm is not None else None for lm in self.landmarks],
        }
