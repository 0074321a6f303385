# File: src/icf_layout/geometry/polygon.py

"""Polygon measurements and point classification.

Polygons are open vertex lists (the closing edge is implied). Signed area
is positive for counter-clockwise winding.
"""

import math
from enum import Enum
from typing import List, Sequence

from shapely.geometry import MultiPoint

from .primitives import Point2D


class PointLocation(Enum):
    """Result of a point-in-polygon test with an edge tolerance band."""

    INSIDE = "inside"
    OUTSIDE = "outside"
    ON_EDGE = "on-edge"


def signed_area(polygon: Sequence[Point2D]) -> float:
    """Shoelace area; positive when the polygon winds counter-clockwise."""
    n = len(polygon)
    if n < 3:
        return 0.0
    total = 0.0
    for i in range(n):
        a = polygon[i]
        b = polygon[(i + 1) % n]
        total += a.x * b.y - b.x * a.y
    return total / 2.0


def ensure_ccw(polygon: Sequence[Point2D]) -> List[Point2D]:
    """Return the polygon with counter-clockwise winding."""
    pts = list(polygon)
    if signed_area(pts) < 0:
        pts.reverse()
    return pts


def polygon_perimeter(polygon: Sequence[Point2D]) -> float:
    n = len(polygon)
    if n < 2:
        return 0.0
    return sum(polygon[i].distance_to(polygon[(i + 1) % n]) for i in range(n))


def polygon_centroid(polygon: Sequence[Point2D]) -> Point2D:
    """Area centroid, falling back to the vertex average for degenerate input."""
    n = len(polygon)
    if n == 0:
        return Point2D(0.0, 0.0)
    area = signed_area(polygon)
    if abs(area) < 1e-9:
        return Point2D(
            sum(p.x for p in polygon) / n,
            sum(p.y for p in polygon) / n,
        )
    cx = 0.0
    cy = 0.0
    for i in range(n):
        a = polygon[i]
        b = polygon[(i + 1) % n]
        f = a.x * b.y - b.x * a.y
        cx += (a.x + b.x) * f
        cy += (a.y + b.y) * f
    return Point2D(cx / (6.0 * area), cy / (6.0 * area))


def distance_to_segment(p: Point2D, a: Point2D, b: Point2D) -> float:
    """Distance from a point to a closed segment."""
    dx = b.x - a.x
    dy = b.y - a.y
    len_sq = dx * dx + dy * dy
    if len_sq < 1e-12:
        return p.distance_to(a)
    t = ((p.x - a.x) * dx + (p.y - a.y) * dy) / len_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(p.x - (a.x + t * dx), p.y - (a.y + t * dy))


def point_in_polygon(
    point: Point2D,
    polygon: Sequence[Point2D],
    edge_tolerance: float = 1.0,
) -> PointLocation:
    """Ray-casting point-in-polygon with an on-edge band.

    Points within ``edge_tolerance`` of any polygon edge are reported as
    ON_EDGE so callers can retry with a larger sample offset instead of
    trusting a coin-flip result on a noisy boundary.

    Args:
        point: Query point.
        polygon: Polygon vertices (either winding).
        edge_tolerance: Width of the on-edge band in mm.

    Returns:
        INSIDE, OUTSIDE or ON_EDGE.
    """
    n = len(polygon)
    if n < 3:
        return PointLocation.OUTSIDE

    for i in range(n):
        if distance_to_segment(point, polygon[i], polygon[(i + 1) % n]) <= edge_tolerance:
            return PointLocation.ON_EDGE

    inside = False
    j = n - 1
    for i in range(n):
        pi = polygon[i]
        pj = polygon[j]
        if (pi.y > point.y) != (pj.y > point.y):
            x_cross = (pj.x - pi.x) * (point.y - pi.y) / (pj.y - pi.y) + pi.x
            if point.x < x_cross:
                inside = not inside
        j = i
    return PointLocation.INSIDE if inside else PointLocation.OUTSIDE


def convex_hull(points: Sequence[Point2D]) -> List[Point2D]:
    """Convex hull of a point set, counter-clockwise, without repeated closing vertex.

    Returns an empty list when the points do not span an area.
    """
    if len(points) < 3:
        return []
    hull = MultiPoint([p.as_tuple() for p in points]).convex_hull
    if hull.geom_type != "Polygon":
        return []
    coords = list(hull.exterior.coords)[:-1]
    return ensure_ccw([Point2D(float(x), float(y)) for x, y in coords])
