# File: src/icf_layout/geometry/primitives.py

"""Planar primitives and angle helpers.

All coordinates are millimetres in the drawing plane. Direction angles of
wall runs are normalized to [0, pi) because a run has no preferred sign.
"""

import math
from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class Point2D:
    """A point in the floor plan (mm)."""

    x: float
    y: float

    def distance_to(self, other: "Point2D") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def offset(self, dx: float, dy: float) -> "Point2D":
        """Point translated by (dx, dy)."""
        return Point2D(self.x + dx, self.y + dy)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def to_dict(self) -> Dict[str, float]:
        """Serialize to JSON-compatible dictionary."""
        return {"x": round(self.x, 3), "y": round(self.y, 3)}


@dataclass(frozen=True)
class WallSegment:
    """Raw input edge from the floor plan.

    Attributes:
        id: Source identifier.
        start: First endpoint.
        end: Second endpoint.
        layer: Source layer tag from the drawing.
    """

    id: str
    start: Point2D
    end: Point2D
    layer: str = ""

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def angle(self) -> float:
        """Direction angle normalized to [0, pi)."""
        return segment_angle(self.start, self.end)

    def with_points(self, start: Point2D, end: Point2D) -> "WallSegment":
        """Copy of this segment with new endpoints."""
        return WallSegment(id=self.id, start=start, end=end, layer=self.layer)

    def to_dict(self) -> Dict:
        """Serialize to JSON-compatible dictionary."""
        return {
            "id": self.id,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "layer": self.layer,
        }

    @classmethod
    def from_coords(
        cls,
        seg_id: str,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        layer: str = "",
    ) -> "WallSegment":
        """Build a segment from raw coordinates."""
        return cls(id=seg_id, start=Point2D(x1, y1), end=Point2D(x2, y2), layer=layer)


# =============================================================================
# Angle Utilities
# =============================================================================


def normalize_angle(angle: float) -> float:
    """Normalize a direction angle to [0, pi)."""
    a = math.fmod(angle, math.pi)
    if a < 0:
        a += math.pi
    # fmod can return pi - epsilon rounding to pi
    if a >= math.pi:
        a -= math.pi
    return a


def normalize_angle_full(angle: float) -> float:
    """Normalize an angle to [0, 2*pi)."""
    a = math.fmod(angle, 2 * math.pi)
    if a < 0:
        a += 2 * math.pi
    if a >= 2 * math.pi:
        a -= 2 * math.pi
    return a


def segment_angle(start: Point2D, end: Point2D) -> float:
    """Normalized direction angle of the run from start to end."""
    return normalize_angle(math.atan2(end.y - start.y, end.x - start.x))


def angles_colinear(a1: float, a2: float, tol_rad: float) -> bool:
    """Check if two direction angles describe the same line direction.

    Both angles are treated as undirected: a difference of ~0 or ~pi is
    colinear.
    """
    diff = abs(normalize_angle(a1) - normalize_angle(a2))
    if diff > math.pi / 2:
        diff = math.pi - diff
    return diff <= tol_rad


def direction(start: Point2D, end: Point2D) -> Tuple[float, float]:
    """Unit direction vector from start to end, (0, 0) for degenerate input."""
    dx = end.x - start.x
    dy = end.y - start.y
    length = math.hypot(dx, dy)
    if length < 1e-12:
        return (0.0, 0.0)
    return (dx / length, dy / length)


def positive_perpendicular(dir_x: float, dir_y: float) -> Tuple[float, float]:
    """Perpendicular rotated 90 degrees clockwise from the direction."""
    return (dir_y, -dir_x)


def cross(ax: float, ay: float, bx: float, by: float) -> float:
    """2D cross product (z component)."""
    return ax * by - ay * bx


def lerp(a: Point2D, b: Point2D, t: float) -> Point2D:
    """Point at parameter t along a->b."""
    return Point2D(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)
