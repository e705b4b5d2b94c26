"""
Push-up correctness scoring (0-100).

Two strategies:
1. RuleBasedScorer (default): range-of-motion + body-straightness points
2. TemplateScorer: mean absolute z-score of the resampled elbow/hip
   curves against a statistical reference profile

The template is optional. When it is absent, create_scorer() always
picks the rule-based path.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from formfit.cv.features import FrameFeatures
from formfit.cv.rep_validator import signal_values

logger = logging.getLogger(__name__)


class ProfileStats(BaseModel):
    """Per-phase mean / standard deviation of one signal."""
    mean: List[float]
    std: List[float]


class PushupTemplate(BaseModel):
    """
    Statistical reference profile for a push-up.

    JSON layout:
        {"phaseCount": 20,
         "elbow": {"mean": [...], "std": [...]},
         "hip": {"mean": [...], "std": [...]},
         "headY": {"mean": [...], "std": [...]}}

    headY is accepted for compatibility but never scored (camera-position bias).
    """
    model_config = ConfigDict(populate_by_name=True)

    phase_count: int = Field(..., alias="phaseCount", ge=1)
    elbow: ProfileStats
    hip: ProfileStats
    head_y: Optional[ProfileStats] = Field(None, alias="headY")

    @model_validator(mode="after")
    def check_profile_lengths(self) -> "PushupTemplate":
        for name, stats in (("elbow", self.elbow), ("hip", self.hip)):
            if len(stats.mean) < self.phase_count or len(stats.std) < self.phase_count:
                raise ValueError(
                    f"{name} profile needs {self.phase_count} mean/std values, "
                    f"got {len(stats.mean)}/{len(stats.std)}"
                )
        return self


def resample_rep(
    features: Sequence[FrameFeatures],
    phase_count: int,
) -> List[Tuple[float, float]]:
    """
    Resample a repetition onto `phase_count` normalized phase positions.

    Each phase i/(phase_count-1) of the repetition's duration takes the
    frame with the nearest timestamp. Missing angles read as 0.

    Returns:
        List of (elbow_angle, hip_angle) per phase
    """
    if not features or phase_count < 1:
        return []

    t0 = features[0].t
    t1 = features[-1].t
    duration = (t1 - t0) or 1.0
    times = np.array([f.t for f in features], dtype=float)

    result = []
    for i in range(phase_count):
        target_phase = i / (phase_count - 1) if phase_count > 1 else 0.0
        target_t = t0 + target_phase * duration

        # Nearest neighbour; argmin keeps the first frame on ties
        best = features[int(np.argmin(np.abs(times - target_t)))]
        result.append((
            best.elbow_angle if best.elbow_angle is not None else 0.0,
            best.hip_angle if best.hip_angle is not None else 0.0,
        ))

    return result


class RuleBasedScorer:
    """
    Simple and forgiving rule-based scoring.

    - Range of motion: clamp(elbow_range / 80, 0, 1) * 70 points
    - Body straightness: clamp((max_hip - 140) / 40, 0, 1) * 30 points
    """

    RANGE_FULL_CREDIT = 80.0
    RANGE_POINTS = 70.0
    HIP_BASELINE = 140.0
    HIP_FULL_CREDIT_SPAN = 40.0
    HIP_POINTS = 30.0

    def score(self, features: Sequence[FrameFeatures]) -> float:
        elbow_angles = signal_values(features, "elbow_angle")
        hip_angles = signal_values(features, "hip_angle")

        if not elbow_angles or not hip_angles:
            return 0.0

        elbow_range = float(np.max(elbow_angles) - np.min(elbow_angles))
        max_hip = float(np.max(hip_angles))

        range_points = float(np.clip(elbow_range / self.RANGE_FULL_CREDIT, 0, 1)) * self.RANGE_POINTS
        hip_points = float(
            np.clip((max_hip - self.HIP_BASELINE) / self.HIP_FULL_CREDIT_SPAN, 0, 1)
        ) * self.HIP_POINTS

        return float(np.clip(range_points + hip_points, 0, 100))


class TemplateScorer:
    """
    Very forgiving template comparison.

    A full standard deviation of departure costs only 10 points:
    score = clamp(100 - 10 * avg_z, 0, 100).
    """

    Z_PENALTY = 10.0

    def __init__(self, template: PushupTemplate):
        self.template = template

    def score(self, features: Sequence[FrameFeatures]) -> float:
        phase_count = self.template.phase_count
        rep_phases = resample_rep(features, phase_count)
        if len(rep_phases) != phase_count:
            return 0.0

        z_scores = []
        for i, (elbow, hip) in enumerate(rep_phases):
            std_elbow = self.template.elbow.std[i] or 1.0
            std_hip = self.template.hip.std[i] or 1.0
            z_scores.append(abs(elbow - self.template.elbow.mean[i]) / std_elbow)
            z_scores.append(abs(hip - self.template.hip.mean[i]) / std_hip)

        avg_z = float(np.mean(z_scores))
        return float(np.clip(100.0 - self.Z_PENALTY * avg_z, 0, 100))


def create_scorer(template: Optional[PushupTemplate] = None):
    """Template scoring when a profile is supplied, rule-based otherwise."""
    if template is not None:
        return TemplateScorer(template)
    return RuleBasedScorer()


def load_template(path: Optional[str]) -> Optional[PushupTemplate]:
    """
    Load a push-up template from a JSON file.

    Returns None (rule-based scoring) when no path is configured, the
    file does not exist, or its content is not a valid template.
    """
    if not path:
        return None

    template_path = Path(path)
    if not template_path.is_file():
        logger.warning(f"No push-up template at {template_path}; using rule-based scoring only")
        return None

    try:
        template = PushupTemplate.model_validate_json(template_path.read_text())
    except (OSError, ValidationError) as e:
        logger.warning(f"Invalid push-up template {template_path}: {e}; using rule-based scoring only")
        return None

    logger.info(f"Loaded push-up template with {template.phase_count} phases from {template_path}")
    return template
