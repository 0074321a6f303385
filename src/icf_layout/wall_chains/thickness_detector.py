# File: src/icf_layout/wall_chains/thickness_detector.py

"""Concrete core detection from drawings that show both wall faces.

When a plan is drawn with the two faces of each wall instead of its
centerline, the spacing of parallel, side-by-side line pairs is the total
wall thickness: 4 TOOTH (about 282 mm) for the 150 mm core and 5 TOOTH
(about 353 mm) for the 220 mm core.
"""

import math
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from ..config.constants import ConcreteCore, wall_thickness_mm
from ..geometry.primitives import WallSegment, angles_colinear

logger = logging.getLogger(__name__)

PARALLEL_ANGLE_TOL_RAD = math.radians(5.0)

# Pair spacings outside this window are not wall faces
MIN_SPACING_MM = 200.0
MAX_SPACING_MM = 400.0

# A spacing within this distance of a nominal thickness counts for it
SPACING_MATCH_MM = 10.0

# Median fallback accepts a wider band
MEDIAN_MATCH_MM = 20.0

MIN_SAMPLES = 3
HIGH_CONFIDENCE_SHARE = 0.7


class DetectionConfidence(Enum):
    """How strongly the spacings support the detected core."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


@dataclass
class ThicknessDetection:
    """Outcome of core detection.

    Attributes:
        core: Detected core option (None when nothing matched).
        confidence: Strength of the evidence.
        spacings_mm: Sorted pair spacings inside the accepted window.
        samples_by_core: Spacings matching each nominal thickness.
        median_mm: Median spacing (None without spacings).
    """

    core: Optional[ConcreteCore]
    confidence: DetectionConfidence
    spacings_mm: List[float]
    samples_by_core: Dict[ConcreteCore, int]
    median_mm: Optional[float] = None

    @property
    def detected(self) -> bool:
        return self.core is not None

    @property
    def wall_thickness_mm(self) -> Optional[float]:
        return wall_thickness_mm(self.core) if self.core is not None else None

    def to_dict(self) -> Dict:
        return {
            "detected": self.detected,
            "core": self.core.value if self.core is not None else None,
            "wall_thickness_mm": self.wall_thickness_mm,
            "confidence": self.confidence.value,
            "pairs": len(self.spacings_mm),
            "samples_by_core": {c.value: n for c, n in self.samples_by_core.items()},
            "median_mm": self.median_mm,
        }


def _overlap_along(a: WallSegment, b: WallSegment) -> bool:
    """True when the projections of two segments onto ``a``'s axis overlap."""
    length = a.length
    if length < 1.0:
        return False
    ux = (a.end.x - a.start.x) / length
    uy = (a.end.y - a.start.y) / length
    a0, a1 = sorted((a.start.x * ux + a.start.y * uy, a.end.x * ux + a.end.y * uy))
    b0, b1 = sorted((b.start.x * ux + b.start.y * uy, b.end.x * ux + b.end.y * uy))
    return not (a1 < b0 or b1 < a0)


def _spacing(a: WallSegment, b: WallSegment) -> float:
    """Perpendicular distance from ``b``'s start to ``a``'s line."""
    length = a.length
    ux = (a.end.x - a.start.x) / length
    uy = (a.end.y - a.start.y) / length
    vx = b.start.x - a.start.x
    vy = b.start.y - a.start.y
    return abs(vx * -uy + vy * ux)


def pair_spacings(segments: List[WallSegment]) -> List[float]:
    """Spacings of parallel, side-by-side segment pairs within the wall window."""
    spacings = []
    for i, a in enumerate(segments):
        if a.length < 1.0:
            continue
        for b in segments[i + 1:]:
            if not angles_colinear(a.angle, b.angle, PARALLEL_ANGLE_TOL_RAD):
                continue
            if not _overlap_along(a, b):
                continue
            d = _spacing(a, b)
            if MIN_SPACING_MM < d < MAX_SPACING_MM:
                spacings.append(d)
    return sorted(spacings)


def detect_core_thickness(segments: List[WallSegment]) -> ThicknessDetection:
    """Detect the concrete core from the spacing of parallel line pairs.

    The nominal thickness with more matching spacings wins when it has at
    least three; otherwise the median spacing decides with low confidence.

    Args:
        segments: Raw drawing segments.

    Returns:
        ThicknessDetection (``core`` is None when nothing matched).
    """
    spacings = pair_spacings(segments) if len(segments) >= 2 else []
    nominal = {core: wall_thickness_mm(core) for core in ConcreteCore}
    samples = {
        core: sum(1 for d in spacings if abs(d - t) < SPACING_MATCH_MM)
        for core, t in nominal.items()
    }

    if not spacings:
        logger.debug("Core detection: no parallel pairs in %d segments", len(segments))
        return ThicknessDetection(None, DetectionConfidence.NONE, [], samples)

    median = spacings[len(spacings) // 2]
    ranked = sorted(ConcreteCore, key=lambda c: samples[c], reverse=True)
    best, runner_up = ranked[0], ranked[1]

    if samples[best] > samples[runner_up] and samples[best] >= MIN_SAMPLES:
        share = samples[best] / len(spacings)
        confidence = (
            DetectionConfidence.HIGH if share >= HIGH_CONFIDENCE_SHARE
            else DetectionConfidence.MEDIUM
        )
        core: Optional[ConcreteCore] = best
    else:
        confidence = DetectionConfidence.LOW
        core = None
        for candidate, t in nominal.items():
            if abs(median - t) < MEDIAN_MATCH_MM:
                core = candidate
                break

    logger.info(
        "Core detection: %s (%s), %d pairs, median %.1f mm",
        core.value if core is not None else "none", confidence.value, len(spacings), median,
    )
    return ThicknessDetection(core, confidence, spacings, samples, median)
