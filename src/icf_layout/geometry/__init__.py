# File: src/icf_layout/geometry/__init__.py

"""Geometry kernel for the layout engine.

Pure numeric helpers shared by every stage: points and segments, angle
normalization and colinearity, endpoint snapping, polygon measurements,
point classification with an on-edge band, and intersection splitting.

Usage:
    from icf_layout.geometry import Point2D, SnapIndex, point_in_polygon

    index = SnapIndex(tolerance=25.0)
    cluster = index.add(Point2D(0.0, 0.0))
"""

from .primitives import (
    Point2D,
    WallSegment,
    normalize_angle,
    normalize_angle_full,
    segment_angle,
    angles_colinear,
    direction,
    positive_perpendicular,
    cross,
    lerp,
)

from .snapping import SnapIndex, snap_points

from .polygon import (
    PointLocation,
    signed_area,
    ensure_ccw,
    polygon_perimeter,
    polygon_centroid,
    distance_to_segment,
    point_in_polygon,
    convex_hull,
)

from .intersections import (
    crossing_point,
    point_on_segment_interior,
    split_segments_at_intersections,
)

__all__ = [
    # Primitives
    "Point2D",
    "WallSegment",
    "normalize_angle",
    "normalize_angle_full",
    "segment_angle",
    "angles_colinear",
    "direction",
    "positive_perpendicular",
    "cross",
    "lerp",
    # Snapping
    "SnapIndex",
    "snap_points",
    # Polygons
    "PointLocation",
    "signed_area",
    "ensure_ccw",
    "polygon_perimeter",
    "polygon_centroid",
    "distance_to_segment",
    "point_in_polygon",
    "convex_hull",
    # Intersections
    "crossing_point",
    "point_on_segment_interior",
    "split_segments_at_intersections",
]
