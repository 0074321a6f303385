# File: src/icf_layout/geometry/intersections.py

"""Segment intersection detection and splitting.

Finds true interior crossings (X) and T-touches (an endpoint of one segment
landing on the interior of another) and splits the affected segments so the
graph builder sees the real topology even when the drawing never shared
endpoints at those points.
"""

import logging
from typing import Dict, List, Optional, Tuple

from .primitives import Point2D, WallSegment

logger = logging.getLogger(__name__)


def crossing_point(
    s1: WallSegment,
    s2: WallSegment,
    tolerance: float = 1.0,
) -> Optional[Point2D]:
    """Interior crossing point of two segments.

    The intersection must lie strictly inside both segments: parameters
    within ``tolerance / max_length`` of either end are rejected, so shared
    endpoints and T-touches are not reported as crossings.

    Returns:
        Crossing point, or None for parallel, disjoint or end-touching pairs.
    """
    x1, y1, x2, y2 = s1.start.x, s1.start.y, s1.end.x, s1.end.y
    x3, y3, x4, y4 = s2.start.x, s2.start.y, s2.end.x, s2.end.y

    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if abs(denom) < 1e-10:
        return None

    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    u = -((x1 - x2) * (y1 - y3) - (y1 - y2) * (x1 - x3)) / denom

    eps = tolerance / max(s1.length, s2.length, 1.0)
    if eps < t < 1 - eps and eps < u < 1 - eps:
        return Point2D(x1 + t * (x2 - x1), y1 + t * (y2 - y1))
    return None


def point_on_segment_interior(
    point: Point2D,
    segment: WallSegment,
    tolerance: float,
) -> Optional[Point2D]:
    """Projection of a point onto a segment's interior.

    Returns the projected point when it falls strictly inside the segment
    (not within ``tolerance`` of either end) and the point is within
    ``tolerance`` of the segment line; otherwise None.
    """
    dx = segment.end.x - segment.start.x
    dy = segment.end.y - segment.start.y
    length = segment.length
    if length < tolerance:
        return None

    t = ((point.x - segment.start.x) * dx + (point.y - segment.start.y) * dy) / (length * length)
    eps = tolerance / length
    if t <= eps or t >= 1 - eps:
        return None

    proj = Point2D(segment.start.x + t * dx, segment.start.y + t * dy)
    if point.distance_to(proj) <= tolerance:
        return proj
    return None


def _parameter(segment: WallSegment, point: Point2D) -> float:
    dx = segment.end.x - segment.start.x
    dy = segment.end.y - segment.start.y
    len_sq = dx * dx + dy * dy
    if len_sq <= 0:
        return 0.0
    return ((point.x - segment.start.x) * dx + (point.y - segment.start.y) * dy) / len_sq


def split_segments_at_intersections(
    segments: List[WallSegment],
    tolerance: float,
) -> List[WallSegment]:
    """Split segments at X crossings and T touches.

    Args:
        segments: Input segments.
        tolerance: Distance tolerance in mm; pieces shorter than this are dropped.

    Returns:
        New segment list. Split pieces get ids ``"{id}~{k}"``.
    """
    split_points: Dict[int, List[Point2D]] = {}

    crossings = 0
    for i in range(len(segments)):
        for j in range(i + 1, len(segments)):
            pt = crossing_point(segments[i], segments[j], tolerance)
            if pt is not None:
                split_points.setdefault(i, []).append(pt)
                split_points.setdefault(j, []).append(pt)
                crossings += 1

    touches = 0
    for i, seg in enumerate(segments):
        for j, other in enumerate(segments):
            if i == j:
                continue
            for endpoint in (seg.start, seg.end):
                proj = point_on_segment_interior(endpoint, other, tolerance)
                if proj is None:
                    continue
                existing = split_points.setdefault(j, [])
                if any(p.distance_to(proj) < tolerance for p in existing):
                    continue
                existing.append(proj)
                touches += 1

    if not split_points:
        return list(segments)

    logger.debug(
        "Splitting %d segments at %d crossings and %d T-touches",
        len(split_points), crossings, touches,
    )

    result: List[WallSegment] = []
    for i, seg in enumerate(segments):
        points = split_points.get(i)
        if not points:
            result.append(seg)
            continue

        ordered: List[Tuple[float, Point2D]] = sorted(
            ((_parameter(seg, p), p) for p in points), key=lambda item: item[0]
        )

        prev = seg.start
        sub_idx = 0
        for _, pt in ordered:
            if prev.distance_to(pt) > tolerance:
                result.append(WallSegment(f"{seg.id}~{sub_idx}", prev, pt, seg.layer))
                sub_idx += 1
            prev = pt
        if prev.distance_to(seg.end) > tolerance:
            result.append(WallSegment(f"{seg.id}~{sub_idx}", prev, seg.end, seg.layer))

    return result
