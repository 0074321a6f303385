# File: tests/wall_chains/test_thickness_detector.py

"""Tests for concrete core detection from face-pair spacing."""

from icf_layout.config.constants import ConcreteCore
from icf_layout.wall_chains import (
    DetectionConfidence,
    detect_core_thickness,
    pair_spacings,
)

from conftest import make_segments


def face_rectangle(inset):
    """6000 x 4000 rectangle drawn as outer and inner wall faces."""
    w, h = 6000, 4000
    return make_segments([
        (0, 0, w, 0),
        (w, 0, w, h),
        (w, h, 0, h),
        (0, h, 0, 0),
        (inset, inset, w - inset, inset),
        (w - inset, inset, w - inset, h - inset),
        (w - inset, h - inset, inset, h - inset),
        (inset, h - inset, inset, inset),
    ])


def horizontal_pairs(spacings, length=3000):
    """Parallel wall-face pairs stacked far apart, one per spacing."""
    coords = []
    for i, d in enumerate(spacings):
        y = i * 2000
        coords.append((0, y, length, y))
        coords.append((0, y + d, length, y + d))
    return coords


class TestPairSpacings:
    """Tests for parallel pair measurement."""

    def test_face_rectangle_pairs(self):
        assert pair_spacings(face_rectangle(282)) == [282.0] * 4

    def test_non_overlapping_runs_are_ignored(self):
        segments = make_segments([(0, 0, 1000, 0), (2000, 300, 3000, 300)])
        assert pair_spacings(segments) == []

    def test_oblique_lines_are_ignored(self):
        segments = make_segments([(0, 0, 3000, 0), (0, 300, 3000, 700)])
        assert pair_spacings(segments) == []


class TestDetectCoreThickness:
    """Tests for choosing the core from spacings."""

    def test_150_core(self):
        result = detect_core_thickness(face_rectangle(282))
        assert result.core == ConcreteCore.CORE_150
        assert result.confidence == DetectionConfidence.HIGH
        assert result.samples_by_core[ConcreteCore.CORE_150] == 4
        assert abs(result.wall_thickness_mm - 4 * 1200.0 / 17) < 1e-9

    def test_220_core(self):
        result = detect_core_thickness(face_rectangle(353))
        assert result.core == ConcreteCore.CORE_220
        assert result.confidence == DetectionConfidence.HIGH

    def test_mixed_spacings_lower_confidence(self):
        segments = make_segments(horizontal_pairs([282, 282, 282, 320, 320]))
        result = detect_core_thickness(segments)
        assert result.core == ConcreteCore.CORE_150
        assert result.confidence == DetectionConfidence.MEDIUM

    def test_few_samples_fall_back_to_median(self):
        segments = make_segments(horizontal_pairs([285, 285]))
        result = detect_core_thickness(segments)
        assert result.core == ConcreteCore.CORE_150
        assert result.confidence == DetectionConfidence.LOW
        assert abs(result.median_mm - 285.0) < 1e-9

    def test_median_away_from_both_cores(self):
        result = detect_core_thickness(make_segments(horizontal_pairs([250, 250])))
        assert result.core is None
        assert result.confidence == DetectionConfidence.LOW

    def test_centerline_drawing_has_no_pairs(self, rectangle_segments):
        result = detect_core_thickness(rectangle_segments)
        assert not result.detected
        assert result.confidence == DetectionConfidence.NONE
        assert result.wall_thickness_mm is None

    def test_to_dict(self):
        data = detect_core_thickness(face_rectangle(353)).to_dict()
        assert data["core"] == 220
        assert data["confidence"] == "high"
        assert data["pairs"] == 4
        assert data["samples_by_core"] == {150: 0, 220: 4}
