"""
Shared machinery for the repetition state machines.

Each instance exclusively owns its phase, its start-debounce streak and
the buffer of frames belonging to the repetition in progress. Frames
must arrive in order; nothing here is thread-safe or meant to be shared.
"""

import logging
import time
from enum import Enum
from typing import Callable, List, Optional

from formfit.config import Settings, get_settings
from formfit.cv.events import EventEmitter, ExerciseKind, RepetitionCompleted
from formfit.cv.features import FrameFeatures
from formfit.cv.rep_validator import FailureReason, RepValidator
from formfit.cv.session import CompletedRepetition, ExerciseSession

logger = logging.getLogger(__name__)

# Degrees past a threshold before leaving a phase
HYSTERESIS_DEGREES = 5.0


class RepetitionStateMachine:
    """
    Base class: buffer bookkeeping and repetition close-out.

    Subclasses define the phase enum, the thresholds and update().
    """

    exercise_kind: ExerciseKind
    initial_state: Enum

    def __init__(
        self,
        validator: RepValidator,
        session: Optional[ExerciseSession] = None,
        emitter: Optional[EventEmitter] = None,
        clock: Callable[[], float] = time.time,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.validator = validator
        self.session = session if session is not None else ExerciseSession()
        self.emitter = emitter
        self.clock = clock

        self.state = self.initial_state
        self._buffer: List[FrameFeatures] = []
        self._top_streak = 0

    @property
    def buffer(self) -> List[FrameFeatures]:
        """Frames of the repetition in progress (a copy)."""
        return list(self._buffer)

    @property
    def top_streak(self) -> int:
        return self._top_streak

    def update(self, features: FrameFeatures) -> Optional[RepetitionCompleted]:
        """
        Advance the machine by one frame.

        Returns:
            The emitted RepetitionCompleted event if a repetition was
            accepted on this frame, None otherwise
        """
        raise NotImplementedError

    def reset(self) -> None:
        """Discard any partial repetition and wait for a new start."""
        if self._buffer:
            logger.debug(
                f"{self.exercise_kind.value}: discarding {len(self._buffer)} buffered frames"
            )
        self._set_state(self.initial_state)
        self._buffer = []
        self._top_streak = 0

    def _score(self, features: List[FrameFeatures]) -> float:
        raise NotImplementedError

    def _set_state(self, new_state: Enum) -> None:
        if new_state != self.state:
            logger.debug(f"{self.exercise_kind.value}: {self.state.name} -> {new_state.name}")
            self.state = new_state

    def _debounce_start(self, qualifies: bool, features: FrameFeatures, start_state: Enum) -> None:
        """Require several consecutive qualifying frames before starting."""
        if not qualifies:
            self._top_streak = 0
            return

        self._top_streak += 1
        if self._top_streak >= self.settings.start_top_streak:
            self._set_state(start_state)
            self._buffer = [features]

    def _restart_from(self, features: FrameFeatures, state: Enum) -> None:
        """Back at the top: keep only the current frame in the buffer."""
        self._set_state(state)
        self._buffer = [features]

    def _close_repetition(self, features: FrameFeatures, top_state: Enum) -> Optional[RepetitionCompleted]:
        """Validate the closed buffer, record and emit if accepted, then reseed."""
        rep_features = self._buffer
        result = self.validator.validate(rep_features)
        event = None

        if result.is_valid:
            score = self._score(rep_features)
            total = self.session.append(
                CompletedRepetition(features=tuple(rep_features), correctness=score)
            )
            event = RepetitionCompleted(
                exercise_kind=self.exercise_kind,
                score=score,
                total_count=total,
                timestamp_ms=int(self.clock() * 1000),
            )
            logger.info(
                f"{self.exercise_kind.value} completed. Score: {score:.1f}, Total reps: {total}"
            )
            if self.emitter is not None:
                self.emitter.emit(event)
        else:
            reasons = ", ".join(FailureReason.get_description(r) for r in result.failure_reasons)
            logger.info(f"{self.exercise_kind.value} rejected as invalid rep: {reasons}")
            logger.debug(f"Rejected rep metrics: {result.metrics}")

        # Ready for next rep
        self._restart_from(features, top_state)
        return event
