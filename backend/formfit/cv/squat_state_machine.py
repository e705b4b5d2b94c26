"""
Squat repetition state machine.

    WAITING_FOR_START -> STANDING -> GOING_DOWN -> AT_BOTTOM -> GOING_UP -> STANDING

Same shape as the push-up machine, driven by the knee angle alone and
without a posture requirement. Every accepted squat scores a flat 100:
there is no graded squat scoring model.
"""

import logging
import time
from enum import Enum, auto
from typing import Callable, List, Optional

from formfit.config import Settings
from formfit.cv.events import EventEmitter, ExerciseKind, RepetitionCompleted
from formfit.cv.features import FrameFeatures
from formfit.cv.rep_state_machine import HYSTERESIS_DEGREES, RepetitionStateMachine
from formfit.cv.rep_validator import SquatRepValidator
from formfit.cv.session import ExerciseSession

logger = logging.getLogger(__name__)


class SquatState(Enum):
    """State machine states for squat detection."""
    WAITING_FOR_START = auto()
    STANDING = auto()
    GOING_DOWN = auto()
    AT_BOTTOM = auto()
    GOING_UP = auto()


class SquatStateMachine(RepetitionStateMachine):
    """Squat state machine driven by the knee angle."""

    KNEE_TOP_ANGLE = 165.0       # Standing-ish
    KNEE_BOTTOM_ANGLE = 100.0    # Deep-ish squat
    ACCEPTED_SCORE = 100.0

    exercise_kind = ExerciseKind.SQUAT
    initial_state = SquatState.WAITING_FOR_START

    def __init__(
        self,
        session: Optional[ExerciseSession] = None,
        emitter: Optional[EventEmitter] = None,
        clock: Callable[[], float] = time.time,
        settings: Optional[Settings] = None,
    ):
        super().__init__(
            validator=SquatRepValidator(bottom_angle=self.KNEE_BOTTOM_ANGLE, settings=settings),
            session=session,
            emitter=emitter,
            clock=clock,
            settings=settings,
        )

    def update(self, features: FrameFeatures) -> Optional[RepetitionCompleted]:
        knee_angle = features.knee_angle
        if knee_angle is None:
            if self.state == SquatState.WAITING_FOR_START:
                self._top_streak = 0
            return None

        at_top = knee_angle >= self.KNEE_TOP_ANGLE
        at_bottom = knee_angle <= self.KNEE_BOTTOM_ANGLE

        if self.state == SquatState.WAITING_FOR_START:
            self._debounce_start(at_top, features, SquatState.STANDING)

        elif self.state == SquatState.STANDING:
            self._buffer.append(features)
            if not at_top and knee_angle < self.KNEE_TOP_ANGLE - HYSTERESIS_DEGREES:
                self._set_state(SquatState.GOING_DOWN)

        elif self.state == SquatState.GOING_DOWN:
            self._buffer.append(features)
            if at_bottom:
                self._set_state(SquatState.AT_BOTTOM)
            elif at_top:
                logger.debug("Squat aborted before reaching the bottom")
                self._restart_from(features, SquatState.STANDING)

        elif self.state == SquatState.AT_BOTTOM:
            self._buffer.append(features)
            if not at_bottom and knee_angle > self.KNEE_BOTTOM_ANGLE + HYSTERESIS_DEGREES:
                self._set_state(SquatState.GOING_UP)

        elif self.state == SquatState.GOING_UP:
            self._buffer.append(features)
            if at_top:
                return self._close_repetition(features, SquatState.STANDING)

        return None

    def _score(self, features: List[FrameFeatures]) -> float:
        return self.ACCEPTED_SCORE
