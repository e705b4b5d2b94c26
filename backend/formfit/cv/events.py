"""
Domain events and the emitter that publishes them.

Emission is fire-and-forget: no acknowledgement, no backpressure. A
subscriber that raises is logged and skipped so it cannot break the
frame being processed or starve the other subscribers.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Union

logger = logging.getLogger(__name__)


class ExerciseKind(Enum):
    """Exercise families that produce repetition events."""
    PUSHUP = "pushup"
    SQUAT = "squat"


class Limb(Enum):
    """Hand driving the axis signal."""
    LEFT = "LEFT"
    RIGHT = "RIGHT"


@dataclass(frozen=True)
class RepetitionCompleted:
    """A validated repetition."""
    exercise_kind: ExerciseKind
    score: float  # 0-100
    total_count: int  # >= 1
    timestamp_ms: int

    name = "repetition_completed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "exerciseKind": self.exercise_kind.value,
            "score": self.score,
            "totalCount": self.total_count,
            "timestampMs": self.timestamp_ms,
        }


@dataclass(frozen=True)
class AxisUpdate:
    """Continuous control-axis sample from one wrist."""
    limb: Limb
    value: float  # 0.0-1.0, larger = higher
    timestamp_ms: int

    name = "axis_update"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "limb": self.limb.value,
            "value": self.value,
            "timestampMs": self.timestamp_ms,
        }


Event = Union[RepetitionCompleted, AxisUpdate]
EventCallback = Callable[[Event], None]

EVENT_NAMES = (RepetitionCompleted.name, AxisUpdate.name)


class EventEmitter:
    """
    Subscriber list keyed by event name.

    Consumers subscribe to either event kind independently:

        emitter = EventEmitter()
        unsubscribe = emitter.subscribe("repetition_completed", on_rep)
        ...
        unsubscribe()
    """

    def __init__(self):
        self._subscribers: Dict[str, List[EventCallback]] = {name: [] for name in EVENT_NAMES}

    def subscribe(self, event_name: str, callback: EventCallback) -> Callable[[], None]:
        """Register a callback; returns a function that removes it."""
        if event_name not in self._subscribers:
            raise ValueError(f"Unknown event '{event_name}', expected one of {EVENT_NAMES}")

        self._subscribers[event_name].append(callback)

        def unsubscribe():
            callbacks = self._subscribers[event_name]
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def subscriber_count(self, event_name: str) -> int:
        return len(self._subscribers.get(event_name, []))

    def emit(self, event: Event) -> None:
        """Deliver an event to every subscriber of its kind."""
        for callback in list(self._subscribers[event.name]):
            try:
                callback(event)
            except Exception:
                logger.exception(f"Subscriber {callback!r} failed handling {event.name}")
