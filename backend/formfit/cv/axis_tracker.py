"""
Wrist height as a continuous game-control axis.

Stateless per-frame mapping: y is clamped to [0, 1] and inverted so that
raising the hand increases the value. No smoothing or hysteresis;
consumers damp the signal themselves if they need to.
"""

import time
from typing import Callable, Optional

import numpy as np

from formfit.config import get_settings
from formfit.cv.events import AxisUpdate, EventEmitter, Limb
from formfit.cv.landmarks import LandmarkFrame, PoseLandmark

WRIST_BY_LIMB = {
    Limb.LEFT: PoseLandmark.LEFT_WRIST,
    Limb.RIGHT: PoseLandmark.RIGHT_WRIST,
}


def axis_value(wrist_y: float) -> float:
    """MediaPipe y is 0 at the top of the frame: bottom=0, top=1."""
    return 1.0 - float(np.clip(wrist_y, 0.0, 1.0))


class AxisTracker:
    """Maps one wrist's vertical position to an AxisUpdate per frame."""

    def __init__(
        self,
        limb: Limb,
        emitter: Optional[EventEmitter] = None,
        min_visibility: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.limb = limb
        self.wrist_index = WRIST_BY_LIMB[limb]
        self.emitter = emitter
        self.min_visibility = (
            min_visibility if min_visibility is not None else get_settings().min_visibility
        )
        self.clock = clock

    def update(self, frame: LandmarkFrame) -> Optional[AxisUpdate]:
        """
        Emit the axis value for this frame.

        Returns None (nothing emitted) when the wrist is missing or below
        the visibility gate.
        """
        wrist = frame.get(self.wrist_index)
        if wrist is None or wrist.visibility < self.min_visibility:
            return None
        if not np.isfinite(wrist.y):
            return None

        event = AxisUpdate(
            limb=self.limb,
            value=axis_value(wrist.y),
            timestamp_ms=int(self.clock() * 1000),
        )
        if self.emitter is not None:
            self.emitter.emit(event)
        return event
