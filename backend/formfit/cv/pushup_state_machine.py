"""
Push-up repetition state machine.

    WAITING_FOR_START -> AT_TOP -> GOING_DOWN -> AT_BOTTOM -> GOING_UP -> AT_TOP

Guards, evaluated every frame in order:
1. Elbow or hip angle missing: no transition (start streak resets while waiting).
2. Body not roughly horizontal: abandon any partial repetition.
3. "At top" = elbow >= 160 and hip >= 150; "at bottom" = elbow <= 90.
"""

import logging
import time
from enum import Enum, auto
from typing import Callable, List, Optional

from formfit.config import Settings
from formfit.cv.events import EventEmitter, ExerciseKind, RepetitionCompleted
from formfit.cv.features import FrameFeatures
from formfit.cv.rep_scorer import PushupTemplate, create_scorer
from formfit.cv.rep_state_machine import HYSTERESIS_DEGREES, RepetitionStateMachine
from formfit.cv.rep_validator import PushupRepValidator
from formfit.cv.session import ExerciseSession

logger = logging.getLogger(__name__)


class PushupState(Enum):
    """State machine states for push-up detection."""
    WAITING_FOR_START = auto()
    AT_TOP = auto()
    GOING_DOWN = auto()
    AT_BOTTOM = auto()
    GOING_UP = auto()


class PushupStateMachine(RepetitionStateMachine):
    """
    Push-up state machine driven by elbow + hip angles.

    A repetition is closed each time GOING_UP reaches the top again; the
    buffer is validated, scored (template or rule-based) and, if accepted,
    logged to the session and emitted.
    """

    # Angle thresholds (degrees)
    ELBOW_TOP_ANGLE = 160.0      # Arms mostly straight
    ELBOW_BOTTOM_ANGLE = 90.0    # Arms clearly bent
    HIP_STRAIGHT_ANGLE = 150.0   # Body roughly straight at top

    exercise_kind = ExerciseKind.PUSHUP
    initial_state = PushupState.WAITING_FOR_START

    def __init__(
        self,
        session: Optional[ExerciseSession] = None,
        emitter: Optional[EventEmitter] = None,
        template: Optional[PushupTemplate] = None,
        clock: Callable[[], float] = time.time,
        settings: Optional[Settings] = None,
    ):
        super().__init__(
            validator=PushupRepValidator(bottom_angle=self.ELBOW_BOTTOM_ANGLE, settings=settings),
            session=session,
            emitter=emitter,
            clock=clock,
            settings=settings,
        )
        self.scorer = create_scorer(template)
        logger.info(f"PushupStateMachine initialized with {type(self.scorer).__name__}")

    def is_at_top(self, features: FrameFeatures) -> bool:
        return (
            features.elbow_angle >= self.ELBOW_TOP_ANGLE
            and features.hip_angle >= self.HIP_STRAIGHT_ANGLE
        )

    def is_at_bottom(self, features: FrameFeatures) -> bool:
        return features.elbow_angle <= self.ELBOW_BOTTOM_ANGLE

    def update(self, features: FrameFeatures) -> Optional[RepetitionCompleted]:
        elbow_angle = features.elbow_angle

        # No joint angles: skip the frame
        if elbow_angle is None or features.hip_angle is None:
            if self.state == PushupState.WAITING_FOR_START:
                self._top_streak = 0
            return None

        if features.shoulder_y is None or features.hip_y is None:
            if self.state == PushupState.WAITING_FOR_START:
                self._top_streak = 0
            return None

        # Push-up posture: shoulders and hips at roughly the same height
        body_delta_y = abs(features.shoulder_y - features.hip_y)
        if body_delta_y > self.settings.horizontal_body_max_delta_y:
            if self.state != PushupState.WAITING_FOR_START:
                logger.info(
                    f"Body left horizontal posture (dy={body_delta_y:.2f}); abandoning push-up"
                )
                self.reset()
            else:
                self._top_streak = 0
            return None

        at_top = self.is_at_top(features)
        at_bottom = self.is_at_bottom(features)

        if self.state == PushupState.WAITING_FOR_START:
            self._debounce_start(at_top, features, PushupState.AT_TOP)

        elif self.state == PushupState.AT_TOP:
            self._buffer.append(features)
            if not at_top and elbow_angle < self.ELBOW_TOP_ANGLE - HYSTERESIS_DEGREES:
                self._set_state(PushupState.GOING_DOWN)

        elif self.state == PushupState.GOING_DOWN:
            self._buffer.append(features)
            if at_bottom:
                self._set_state(PushupState.AT_BOTTOM)
            elif at_top:
                # Aborted, back to top without a real rep
                logger.debug("Push-up aborted before reaching the bottom")
                self._restart_from(features, PushupState.AT_TOP)

        elif self.state == PushupState.AT_BOTTOM:
            self._buffer.append(features)
            if not at_bottom and elbow_angle > self.ELBOW_BOTTOM_ANGLE + HYSTERESIS_DEGREES:
                self._set_state(PushupState.GOING_UP)

        elif self.state == PushupState.GOING_UP:
            self._buffer.append(features)
            if at_top:
                return self._close_repetition(features, PushupState.AT_TOP)

        return None

    def _score(self, features: List[FrameFeatures]) -> float:
        return self.scorer.score(features)
