"""
Rule-based repetition validation.

Each closed repetition buffer is classified as:
- VALID: Meets every range-of-motion criterion
- NO_REP: Fails one or more criteria (with explicit reasons)

Rejected buffers are never surfaced to event consumers; the failure
reasons and metrics exist for diagnostics only.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from formfit.config import Settings, get_settings
from formfit.cv.features import FrameFeatures


class RepClassification:
    """Repetition classification."""
    VALID = "valid"
    NO_REP = "no_rep"

    @classmethod
    def all(cls) -> List[str]:
        return [cls.VALID, cls.NO_REP]


class FailureReason:
    """
    Explicit failure reasons for rejected repetitions.
    Each reason maps to a specific check.
    """
    TOO_FEW_FRAMES = "too_few_frames"
    INSUFFICIENT_RANGE = "insufficient_range_of_motion"
    NOT_DEEP_ENOUGH = "not_deep_enough"

    @classmethod
    def all(cls) -> List[str]:
        return [cls.TOO_FEW_FRAMES, cls.INSUFFICIENT_RANGE, cls.NOT_DEEP_ENOUGH]

    @classmethod
    def get_description(cls, reason: str) -> str:
        """Get human-readable description of failure reason."""
        descriptions = {
            cls.TOO_FEW_FRAMES: "Too few usable frames were captured for this repetition",
            cls.INSUFFICIENT_RANGE: "Joint did not move through enough range of motion",
            cls.NOT_DEEP_ENOUGH: "Bottom position was never reached",
        }
        return descriptions.get(reason, reason)


@dataclass
class ValidationResult:
    """
    Result of validating a single repetition buffer.

    Contains classification and detailed metrics for explainability.
    """
    classification: str  # RepClassification value
    failure_reasons: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return self.classification == RepClassification.VALID

    @property
    def is_no_rep(self) -> bool:
        return self.classification == RepClassification.NO_REP


def signal_values(features: Sequence[FrameFeatures], signal: str) -> List[float]:
    """Non-null values of one feature signal across a buffer."""
    values = (getattr(f, signal) for f in features)
    return [v for v in values if v is not None]


class BiomechanicalCheck:
    """Base class for checks run over one angle signal of a buffer."""

    name: str = "base_check"
    failure_reason: str = ""

    def __init__(self, signal: str):
        self.signal = signal

    def check(
        self,
        values: List[float],
        settings: Settings,
    ) -> Tuple[bool, Dict[str, Any]]:
        """
        Perform the check.

        Args:
            values: Non-null samples of the checked signal, in frame order
            settings: Application settings with thresholds

        Returns:
            Tuple of (passed, metrics)
        """
        raise NotImplementedError


class MinValidFramesCheck(BiomechanicalCheck):
    """Require a reasonable number of usable frames."""

    name = "min_valid_frames"
    failure_reason = FailureReason.TOO_FEW_FRAMES

    def __init__(self, signal: str, threshold_setting: str):
        super().__init__(signal)
        self.threshold_setting = threshold_setting

    def check(self, values, settings):
        threshold = getattr(settings, self.threshold_setting)
        return len(values) >= threshold, {
            "valid_frames": len(values),
            "threshold": threshold,
        }


class RangeOfMotionCheck(BiomechanicalCheck):
    """Require a clear range of motion between the extremes."""

    name = "range_of_motion"
    failure_reason = FailureReason.INSUFFICIENT_RANGE

    def __init__(self, signal: str, threshold_setting: str):
        super().__init__(signal)
        self.threshold_setting = threshold_setting

    def check(self, values, settings):
        threshold = getattr(settings, self.threshold_setting)
        if not values:
            return False, {"error": f"no_{self.signal}_data", "threshold": threshold}

        angle_range = float(np.max(values) - np.min(values))
        return angle_range >= threshold, {
            "angle_range": angle_range,
            "threshold": threshold,
        }


class BottomDepthCheck(BiomechanicalCheck):
    """Require the minimum angle to come within a margin of the bottom threshold."""

    name = "bottom_depth"
    failure_reason = FailureReason.NOT_DEEP_ENOUGH

    def __init__(self, signal: str, bottom_angle: float, margin_setting: str):
        super().__init__(signal)
        self.bottom_angle = bottom_angle
        self.margin_setting = margin_setting

    def check(self, values, settings):
        limit = self.bottom_angle + getattr(settings, self.margin_setting)
        if not values:
            return False, {"error": f"no_{self.signal}_data", "threshold": limit}

        min_angle = float(np.min(values))
        return min_angle <= limit, {
            "min_angle": min_angle,
            "threshold": limit,
        }


class RepValidator:
    """
    Rule-based validation engine for one angle signal.

    Every check runs so that a rejection carries all of its reasons;
    acceptance is binary.
    """

    signal: str = ""

    def __init__(self, checks: List[BiomechanicalCheck], settings: Optional[Settings] = None):
        self.checks = checks
        self.settings = settings or get_settings()

    def validate(self, features: Sequence[FrameFeatures]) -> ValidationResult:
        """
        Validate a closed repetition buffer.

        Args:
            features: Buffered frames from the top/standing phase back to it

        Returns:
            ValidationResult with classification and metrics
        """
        failure_reasons = []
        all_metrics: Dict[str, Any] = {"buffer_frames": len(features)}

        for check in self.checks:
            values = signal_values(features, check.signal)
            passed, metrics = check.check(values, self.settings)
            all_metrics[check.name] = metrics
            if not passed:
                failure_reasons.append(check.failure_reason)

        if features:
            all_metrics["tempo_ms"] = (features[-1].t - features[0].t) * 1000

        classification = RepClassification.NO_REP if failure_reasons else RepClassification.VALID
        return ValidationResult(
            classification=classification,
            failure_reasons=failure_reasons,
            metrics=all_metrics,
        )


class PushupRepValidator(RepValidator):
    """
    Push-up acceptance, on the elbow angle:
    - at least `pushup_min_valid_frames` frames with an elbow angle
    - elbow range >= `pushup_min_angle_range`
    - minimum elbow angle within `pushup_bottom_angle_margin` of the bottom threshold
    """

    signal = "elbow_angle"

    def __init__(self, bottom_angle: float = 90.0, settings: Optional[Settings] = None):
        super().__init__(
            [
                MinValidFramesCheck(self.signal, "pushup_min_valid_frames"),
                RangeOfMotionCheck(self.signal, "pushup_min_angle_range"),
                BottomDepthCheck(self.signal, bottom_angle, "pushup_bottom_angle_margin"),
            ],
            settings=settings,
        )


class SquatRepValidator(RepValidator):
    """Squat acceptance, same shape as push-ups but on the knee angle."""

    signal = "knee_angle"

    def __init__(self, bottom_angle: float = 100.0, settings: Optional[Settings] = None):
        super().__init__(
            [
                MinValidFramesCheck(self.signal, "squat_min_valid_frames"),
                RangeOfMotionCheck(self.signal, "squat_min_angle_range"),
                BottomDepthCheck(self.signal, bottom_angle, "squat_bottom_angle_margin"),
            ],
            settings=settings,
        )
