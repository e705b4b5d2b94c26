"""Tests for repetition validation."""

from formfit.config import Settings
from formfit.cv.features import FrameFeatures
from formfit.cv.rep_validator import (
    FailureReason,
    PushupRepValidator,
    RepClassification,
    SquatRepValidator,
)


def _elbow_buffer(angles):
    return [FrameFeatures(t=i * 0.1, elbow_angle=a, hip_angle=175.0) for i, a in enumerate(angles)]


def _knee_buffer(angles):
    return [FrameFeatures(t=i * 0.1, knee_angle=a) for i, a in enumerate(angles)]


class TestPushupRepValidator:

    def test_full_rep_is_valid(self):
        validator = PushupRepValidator(settings=Settings())
        result = validator.validate(_elbow_buffer([165, 150, 120, 95, 88, 110, 140, 162]))

        assert result.is_valid
        assert result.classification == RepClassification.VALID
        assert result.failure_reasons == []
        assert result.metrics["range_of_motion"]["angle_range"] == 77.0
        assert result.metrics["bottom_depth"]["min_angle"] == 88.0

    def test_too_few_frames(self):
        result = PushupRepValidator(settings=Settings()).validate(_elbow_buffer([165, 120, 85, 120, 165]))

        assert result.is_no_rep
        assert result.failure_reasons == [FailureReason.TOO_FEW_FRAMES]

    def test_range_below_forty_is_rejected(self):
        # 39 degrees of travel, bottom within the margin
        result = PushupRepValidator(bottom_angle=90.0, settings=Settings()).validate(
            _elbow_buffer([138, 130, 120, 110, 100, 99, 110, 125])
        )

        assert result.is_no_rep
        assert FailureReason.INSUFFICIENT_RANGE in result.failure_reasons
        assert FailureReason.NOT_DEEP_ENOUGH not in result.failure_reasons

    def test_shallow_bottom_is_rejected(self):
        # Minimum 105 is more than 10 degrees above the 90 degree bottom
        result = PushupRepValidator(settings=Settings()).validate(
            _elbow_buffer([165, 150, 130, 110, 105, 120, 150, 165])
        )

        assert result.is_no_rep
        assert result.failure_reasons == [FailureReason.NOT_DEEP_ENOUGH]

    def test_null_angles_are_not_counted(self):
        features = _elbow_buffer([165, 150, 120, 95, 88, 110, 140, 162])
        features[2:5] = [FrameFeatures(t=f.t) for f in features[2:5]]

        result = PushupRepValidator(settings=Settings()).validate(features)
        assert result.metrics["min_valid_frames"]["valid_frames"] == 5
        assert FailureReason.TOO_FEW_FRAMES in result.failure_reasons

    def test_empty_buffer_reports_every_reason(self):
        result = PushupRepValidator(settings=Settings()).validate([])
        assert sorted(result.failure_reasons) == sorted(FailureReason.all())

    def test_thresholds_come_from_settings(self):
        settings = Settings(pushup_min_valid_frames=3)
        result = PushupRepValidator(settings=settings).validate(_elbow_buffer([165, 85, 165]))
        assert result.is_valid


class TestSquatRepValidator:

    def test_full_squat_is_valid(self):
        result = SquatRepValidator(settings=Settings()).validate(
            _knee_buffer([170, 150, 120, 98, 104, 130, 168])
        )
        assert result.is_valid

    def test_bottom_margin_is_five_degrees(self):
        # 106 is just outside 100 + 5
        result = SquatRepValidator(settings=Settings()).validate(
            _knee_buffer([170, 150, 120, 106, 110, 130, 168])
        )
        assert result.failure_reasons == [FailureReason.NOT_DEEP_ENOUGH]

    def test_squat_range_threshold(self):
        result = SquatRepValidator(settings=Settings()).validate(
            _knee_buffer([134, 120, 110, 100, 100, 110, 125])
        )
        assert result.failure_reasons == [FailureReason.INSUFFICIENT_RANGE]


def test_failure_descriptions():
    for reason in FailureReason.all():
        assert FailureReason.get_description(reason) != reason
    assert FailureReason.get_description("unknown") == "unknown"
