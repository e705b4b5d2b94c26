"""
Real-time exercise repetition engine.

PIPELINE COMPONENTS:
1. LandmarkFrame: One timestamped 33-point skeleton estimate
2. FeatureExtractor: Joint angles + vertical positions, visibility gated
3. PushupStateMachine / SquatStateMachine: Debounced, hysteretic phase tracking
4. RepValidator: Rule-based acceptance of a closed repetition buffer
5. RuleBasedScorer / TemplateScorer: Push-up correctness (0-100)
6. AxisTracker: Wrist height as a continuous [0, 1] control axis
7. EventEmitter: Fire-and-forget delivery to subscribers
8. ExercisePipeline: One active exercise mode per session

Usage:
    from formfit.cv import create_pipeline

    pipeline = create_pipeline("pushups")
    pipeline.emitter.subscribe("repetition_completed", print)
    for frame in frames:
        pipeline.process_frame(frame)
"""

from formfit.cv.landmarks import Landmark, LandmarkFrame, PoseLandmark
from formfit.cv.features import ExerciseFamily, FeatureExtractor, FrameFeatures, angle_degrees
from formfit.cv.events import (
    AxisUpdate,
    EventEmitter,
    ExerciseKind,
    Limb,
    RepetitionCompleted,
)
from formfit.cv.session import CompletedRepetition, ExerciseSession
from formfit.cv.rep_validator import (
    FailureReason,
    PushupRepValidator,
    RepClassification,
    SquatRepValidator,
    ValidationResult,
)
from formfit.cv.rep_scorer import (
    PushupTemplate,
    RuleBasedScorer,
    TemplateScorer,
    create_scorer,
    load_template,
    resample_rep,
)
from formfit.cv.pushup_state_machine import PushupState, PushupStateMachine
from formfit.cv.squat_state_machine import SquatState, SquatStateMachine
from formfit.cv.axis_tracker import AxisTracker
from formfit.cv.pipeline import ExerciseMode, ExercisePipeline, create_pipeline

__all__ = [
    # Input frames
    "Landmark",
    "LandmarkFrame",
    "PoseLandmark",

    # Feature extraction
    "ExerciseFamily",
    "FeatureExtractor",
    "FrameFeatures",
    "angle_degrees",

    # Events
    "AxisUpdate",
    "EventEmitter",
    "ExerciseKind",
    "Limb",
    "RepetitionCompleted",

    # Session log
    "CompletedRepetition",
    "ExerciseSession",

    # Validation
    "FailureReason",
    "PushupRepValidator",
    "RepClassification",
    "SquatRepValidator",
    "ValidationResult",

    # Scoring
    "PushupTemplate",
    "RuleBasedScorer",
    "TemplateScorer",
    "create_scorer",
    "load_template",
    "resample_rep",

    # State machines
    "PushupState",
    "PushupStateMachine",
    "SquatState",
    "SquatStateMachine",

    # Axis mode
    "AxisTracker",

    # Main pipeline
    "ExerciseMode",
    "ExercisePipeline",
    "create_pipeline",
]
