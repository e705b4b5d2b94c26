"""Session-scoped log of completed repetitions."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from formfit.cv.features import FrameFeatures

# Score buckets for the feedback summary
GOOD_SCORE = 80.0
WARNING_SCORE = 50.0


@dataclass(frozen=True)
class CompletedRepetition:
    """An accepted repetition. Immutable once created."""
    features: Tuple[FrameFeatures, ...]
    correctness: float  # 0-100

    @property
    def duration_seconds(self) -> float:
        if not self.features:
            return 0.0
        return self.features[-1].t - self.features[0].t


@dataclass
class ExerciseSession:
    """
    Ordered log of CompletedRepetitions plus a running count.

    Lives from pipeline start until teardown or an external reset; nothing
    here is persisted.
    """
    repetitions: List[CompletedRepetition] = field(default_factory=list)
    # Open capture segment; closed segments are folded into closed_duration
    segment_start: Optional[float] = None
    segment_end: Optional[float] = None
    closed_duration: float = 0.0

    @property
    def count(self) -> int:
        return len(self.repetitions)

    @property
    def duration_seconds(self) -> float:
        """Active time summed over every capture segment."""
        return self.closed_duration + self._open_segment_duration()

    def _open_segment_duration(self) -> float:
        if self.segment_start is None or self.segment_end is None:
            return 0.0
        return max(0.0, self.segment_end - self.segment_start)

    @property
    def average_score(self) -> float:
        if not self.repetitions:
            return 0.0
        return float(np.mean([r.correctness for r in self.repetitions]))

    def mark_frame(self, timestamp: float) -> None:
        """Record that a frame was processed at this time."""
        if self.segment_start is None:
            self.segment_start = timestamp
        self.segment_end = timestamp

    def close_segment(self) -> None:
        """
        Capture stopped. The next frame starts a new segment, so a source
        that restarts its clock never shrinks the total.
        """
        self.closed_duration += self._open_segment_duration()
        self.segment_start = None
        self.segment_end = None

    def append(self, repetition: CompletedRepetition) -> int:
        """Append a repetition and return the new total count."""
        self.repetitions.append(repetition)
        return self.count

    def feedback_summary(self) -> Dict[str, int]:
        good = sum(1 for r in self.repetitions if r.correctness >= GOOD_SCORE)
        warning = sum(
            1 for r in self.repetitions if WARNING_SCORE <= r.correctness < GOOD_SCORE
        )
        return {
            "good": good,
            "warning": warning,
            "error": self.count - good - warning,
        }

    def summary(self, exercise_id: str, exercise_name: str) -> Dict[str, Any]:
        """Build the session summary handed to the history store."""
        return {
            "exercise_id": exercise_id,
            "exercise_name": exercise_name,
            "duration": self.duration_seconds,
            "reps": self.count,
            "avg_form_score": round(self.average_score, 2),
            "feedback_summary": self.feedback_summary(),
        }

    def clear(self) -> None:
        self.repetitions.clear()
        self.segment_start = None
        self.segment_end = None
        self.closed_duration = 0.0
