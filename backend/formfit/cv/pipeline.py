"""
Exercise-mode pipeline: one Landmark Frame in, zero or more events out.

    LandmarkFrame -> FeatureExtractor -> {Push-up | Squat} state machine -> EventEmitter
    LandmarkFrame -> AxisTracker -> EventEmitter

Exactly one mode is active per pipeline. Construct one pipeline per
session and drop it on teardown; stop() discards any partial repetition
so nothing is resumed across a capture stop/start.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional

from formfit.config import Settings, get_settings
from formfit.cv.axis_tracker import AxisTracker
from formfit.cv.events import Event, EventEmitter, Limb
from formfit.cv.features import ExerciseFamily, FeatureExtractor, FrameFeatures
from formfit.cv.landmarks import LandmarkFrame
from formfit.cv.pushup_state_machine import PushupStateMachine
from formfit.cv.rep_scorer import PushupTemplate
from formfit.cv.rep_state_machine import RepetitionStateMachine
from formfit.cv.session import ExerciseSession
from formfit.cv.squat_state_machine import SquatStateMachine

logger = logging.getLogger(__name__)


class ExerciseMode(Enum):
    """Pipeline modes."""
    PUSHUPS = "PUSHUPS"
    SQUATS = "SQUATS"
    RIGHT_HAND_Y = "RIGHT_HAND_Y"
    LEFT_HAND_Y = "LEFT_HAND_Y"

    @classmethod
    def parse(cls, value: str) -> "ExerciseMode":
        """Accept mode names in any case, with '-' or '_'."""
        normalized = value.strip().upper().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            valid = [m.value for m in cls]
            raise ValueError(f"Unknown exercise mode '{value}', expected one of {valid}") from None

    @property
    def is_axis(self) -> bool:
        return self in (ExerciseMode.RIGHT_HAND_Y, ExerciseMode.LEFT_HAND_Y)


EXERCISE_NAMES = {
    ExerciseMode.PUSHUPS: "Push-ups",
    ExerciseMode.SQUATS: "Squats",
    ExerciseMode.RIGHT_HAND_Y: "Right hand control",
    ExerciseMode.LEFT_HAND_Y: "Left hand control",
}


@dataclass
class DebugFrame:
    """One processed frame kept for offline inspection."""
    t: float
    state: Optional[str]
    features: Optional[FrameFeatures]
    frame: LandmarkFrame

    def to_dict(self) -> Dict[str, Any]:
        return {
            "t": self.t,
            "state": self.state,
            "features": self.features.to_dict() if self.features is not None else None,
            "landmarks": self.frame.to_dict()["landmarks"],
        }


class ExercisePipeline:
    """
    Frame-synchronous pipeline for a single exercise mode.

    Usage:
        pipeline = create_pipeline("pushups")
        pipeline.emitter.subscribe("repetition_completed", on_rep)
        for frame in frames:
            pipeline.process_frame(frame)
        pipeline.stop()
    """

    def __init__(
        self,
        mode: ExerciseMode,
        emitter: Optional[EventEmitter] = None,
        template: Optional[PushupTemplate] = None,
        clock: Callable[[], float] = time.time,
        settings: Optional[Settings] = None,
    ):
        self.mode = mode
        self.settings = settings or get_settings()
        self.emitter = emitter if emitter is not None else EventEmitter()
        self.session = ExerciseSession()

        self.extractor: Optional[FeatureExtractor] = None
        self.state_machine: Optional[RepetitionStateMachine] = None
        self.axis_tracker: Optional[AxisTracker] = None

        if mode == ExerciseMode.PUSHUPS:
            self.extractor = FeatureExtractor(ExerciseFamily.PUSHUP, self.settings.min_visibility)
            self.state_machine = PushupStateMachine(
                session=self.session,
                emitter=self.emitter,
                template=template,
                clock=clock,
                settings=self.settings,
            )
        elif mode == ExerciseMode.SQUATS:
            self.extractor = FeatureExtractor(ExerciseFamily.SQUAT, self.settings.min_visibility)
            self.state_machine = SquatStateMachine(
                session=self.session,
                emitter=self.emitter,
                clock=clock,
                settings=self.settings,
            )
        else:
            limb = Limb.LEFT if mode == ExerciseMode.LEFT_HAND_Y else Limb.RIGHT
            self.axis_tracker = AxisTracker(
                limb,
                emitter=self.emitter,
                min_visibility=self.settings.min_visibility,
                clock=clock,
            )

        self._last_timestamp: Optional[float] = None
        self._debug_frames: Deque[DebugFrame] = deque(maxlen=self.settings.debug_frame_buffer_size)

        logger.info(f"ExercisePipeline initialized: mode={mode.value}")

    @property
    def state(self) -> Optional[Enum]:
        """Current phase of the state machine (None in axis modes)."""
        return self.state_machine.state if self.state_machine is not None else None

    @property
    def rep_count(self) -> int:
        return self.session.count

    def process_frame(self, frame: Optional[LandmarkFrame]) -> List[Event]:
        """
        Process one frame.

        A missing frame or a frame without any detected pose is a no-op,
        as is a frame that is not newer than the last one processed.

        Returns:
            Events emitted for this frame (at most one)
        """
        if frame is None or not frame.is_valid:
            return []

        if self._last_timestamp is not None and frame.timestamp <= self._last_timestamp:
            logger.debug(
                f"Dropping out-of-order frame t={frame.timestamp:.3f} "
                f"(last={self._last_timestamp:.3f})"
            )
            return []
        self._last_timestamp = frame.timestamp
        self.session.mark_frame(frame.timestamp)

        if self.axis_tracker is not None:
            event = self.axis_tracker.update(frame)
            self._debug_frames.append(DebugFrame(frame.timestamp, None, None, frame))
        else:
            features = self.extractor.extract(frame)
            event = self.state_machine.update(features)
            self._debug_frames.append(
                DebugFrame(frame.timestamp, self.state_machine.state.name, features, frame)
            )

        return [event] if event is not None else []

    def stop(self) -> None:
        """
        Capture source stopped: drop the partial repetition and return to
        WAITING_FOR_START. The session log is kept.
        """
        if self.state_machine is not None:
            self.state_machine.reset()
        self._last_timestamp = None
        self.session.close_segment()
        logger.info(f"Pipeline stopped: mode={self.mode.value}, reps={self.rep_count}")

    def reset(self) -> None:
        """Stop and start a fresh session."""
        self.stop()
        self.session.clear()
        self._debug_frames.clear()

    def summary(self) -> Dict[str, Any]:
        """Session summary for the history store."""
        return self.session.summary(self.mode.value, EXERCISE_NAMES[self.mode])

    def export_debug_frames(self) -> Dict[str, Any]:
        """Last processed frames with state, features and landmarks."""
        frames = [f.to_dict() for f in self._debug_frames]
        return {"frameCount": len(frames), "frames": frames}


def create_pipeline(
    mode,
    emitter: Optional[EventEmitter] = None,
    template: Optional[PushupTemplate] = None,
    clock: Callable[[], float] = time.time,
    settings: Optional[Settings] = None,
) -> ExercisePipeline:
    """
    Factory function to create an ExercisePipeline.

    Args:
        mode: ExerciseMode or its name ("pushups", "squats", "right_hand_y", "left_hand_y")
        emitter: Event emitter shared with consumers (a new one if omitted)
        template: Optional push-up reference profile for template scoring
        clock: Wall clock used for event timestamps

    Returns:
        ExercisePipeline instance
    """
    if not isinstance(mode, ExerciseMode):
        mode = ExerciseMode.parse(mode)
    return ExercisePipeline(mode, emitter=emitter, template=template, clock=clock, settings=settings)
