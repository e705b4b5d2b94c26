"""Live websocket message schemas."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from formfit.cv.landmarks import NUM_LANDMARKS, LandmarkFrame


class LandmarkIn(BaseModel):
    """One normalized landmark as sent by the pose estimator."""
    x: float
    y: float
    z: float = 0.0
    visibility: float = Field(0.0, ge=0.0, le=1.0)


class FrameMessage(BaseModel):
    """
    A pose frame from the client.

    `landmarks` is indexed by PoseLandmark; a missing point is sent as null.
    `timestamp` is the frame time in seconds.
    """
    type: Literal["frame"] = "frame"
    timestamp: float
    landmarks: List[Optional[LandmarkIn]] = Field(..., max_length=NUM_LANDMARKS)

    def to_frame(self) -> LandmarkFrame:
        points = [lm.model_dump() if lm is not None else None for lm in self.landmarks]
        return LandmarkFrame.from_dicts(points, self.timestamp)
