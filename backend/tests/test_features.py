"""Tests for per-frame feature extraction."""

import pytest

from formfit.cv.features import ExerciseFamily, FeatureExtractor, angle_degrees, mean_of_sides
from formfit.cv.landmarks import Landmark, LandmarkFrame, PoseLandmark as PL

from conftest import build_frame, make_pushup_frame, make_squat_frame


class TestAngleDegrees:

    def test_right_angle(self):
        a = Landmark(x=0.0, y=1.0)
        b = Landmark(x=0.0, y=0.0)
        c = Landmark(x=1.0, y=0.0)
        assert angle_degrees(a, b, c) == pytest.approx(90.0)

    def test_straight_line(self):
        a = Landmark(x=0.0, y=0.0)
        b = Landmark(x=0.5, y=0.0)
        c = Landmark(x=1.0, y=0.0)
        assert angle_degrees(a, b, c) == pytest.approx(180.0)

    def test_zero_length_arm_is_none(self):
        a = Landmark(x=0.5, y=0.5)
        b = Landmark(x=0.5, y=0.5)
        c = Landmark(x=1.0, y=0.0)
        assert angle_degrees(a, b, c) is None

    def test_missing_point_is_none(self):
        b = Landmark(x=0.5, y=0.5)
        c = Landmark(x=1.0, y=0.0)
        assert angle_degrees(None, b, c) is None

    def test_ignores_depth(self):
        a = Landmark(x=0.0, y=1.0, z=5.0)
        b = Landmark(x=0.0, y=0.0, z=-3.0)
        c = Landmark(x=1.0, y=0.0, z=0.0)
        assert angle_degrees(a, b, c) == pytest.approx(90.0)


def test_mean_of_sides():
    assert mean_of_sides(100.0, 120.0) == 110.0
    assert mean_of_sides(None, 120.0) == 120.0
    assert mean_of_sides(100.0, None) == 100.0
    assert mean_of_sides(None, None) is None


class TestPushupExtraction:

    def test_angles_match_the_pose(self):
        extractor = FeatureExtractor(ExerciseFamily.PUSHUP, min_visibility=0.4)
        features = extractor.extract(make_pushup_frame(120.0, t=1.5, hip_angle=170.0))

        assert features.t == 1.5
        assert features.elbow_angle == pytest.approx(120.0)
        assert features.hip_angle == pytest.approx(170.0)
        assert features.knee_angle is None
        assert features.shoulder_y == pytest.approx(0.5)
        assert features.hip_y == pytest.approx(0.5)
        assert features.head_y == pytest.approx(0.5)

    def test_low_visibility_keeps_positions_only(self):
        extractor = FeatureExtractor(ExerciseFamily.PUSHUP, min_visibility=0.4)
        features = extractor.extract(make_pushup_frame(120.0, t=0.0, visibility=0.3))

        assert features.elbow_angle is None
        assert features.hip_angle is None
        assert features.shoulder_y == pytest.approx(0.5)
        assert features.hip_y == pytest.approx(0.5)

    def test_explicit_timestamp_overrides_frame(self):
        extractor = FeatureExtractor(ExerciseFamily.PUSHUP, min_visibility=0.4)
        features = extractor.extract(make_pushup_frame(120.0, t=1.0), t=9.0)
        assert features.t == 9.0

    def test_one_side_missing_uses_the_other(self):
        frame = make_pushup_frame(120.0, t=0.0)
        for index in (PL.LEFT_SHOULDER, PL.LEFT_ELBOW, PL.LEFT_WRIST):
            frame.landmarks[index] = None

        features = FeatureExtractor(ExerciseFamily.PUSHUP, min_visibility=0.4).extract(frame)
        assert features.elbow_angle == pytest.approx(120.0)

    def test_empty_frame(self):
        features = FeatureExtractor(ExerciseFamily.PUSHUP, min_visibility=0.4).extract(
            LandmarkFrame(timestamp=2.0)
        )
        assert features.t == 2.0
        assert features.elbow_angle is None
        assert features.shoulder_y is None
        assert features.head_y is None


class TestSquatExtraction:

    def test_knee_angle(self):
        extractor = FeatureExtractor(ExerciseFamily.SQUAT, min_visibility=0.4)
        features = extractor.extract(make_squat_frame(110.0, t=0.0))

        assert features.knee_angle == pytest.approx(110.0)
        assert features.elbow_angle is None
        assert features.hip_angle is None

    def test_gate_uses_leg_joints_only(self):
        frame = build_frame(
            {
                PL.LEFT_HIP: (0.5, 0.5), PL.LEFT_KNEE: (0.5, 0.7), PL.LEFT_ANKLE: (0.5, 0.9),
                PL.RIGHT_HIP: (0.5, 0.5), PL.RIGHT_KNEE: (0.5, 0.7), PL.RIGHT_ANKLE: (0.5, 0.9),
            },
            t=0.0,
            visibility=0.5,
        )
        features = FeatureExtractor(ExerciseFamily.SQUAT, min_visibility=0.4).extract(frame)
        assert features.knee_angle == pytest.approx(180.0)
