# File: src/icf_layout/wall_chains/segment_cleanup.py

"""Segment-level cleanup stages of the chain builder.

Each stage is a pure function from a segment list to a new segment list:

1. Noise filter: drop segments shorter than the noise floor
2. Endpoint snap: cluster coincident endpoints (optionally square near-axis runs)
3. Duplicate removal: rounded, order-independent endpoint key
4. Overlap merge: union colinear axis-aligned segments on a shared grid line
5. Jog simplification: drop short drafting steps between colinear runs
6. Gap bridging: join colinear free endpoints closer than the gap tolerance

All measurements are in millimetres.
"""

import math
import logging
from typing import Dict, List, Set, Tuple

from ..geometry.primitives import Point2D, WallSegment, angles_colinear, segment_angle
from ..geometry.snapping import SnapIndex
from .chain_types import DetectedGap

logger = logging.getLogger(__name__)

# Segments shorter than this after snapping are degenerate
_DEGENERATE_MM = 1e-6


# =============================================================================
# Noise / Snap / Dedup
# =============================================================================


def filter_noise(segments: List[WallSegment], noise_min_mm: float) -> List[WallSegment]:
    """Drop segments shorter than the noise floor (degenerate ones included)."""
    return [
        s for s in segments
        if s.length >= noise_min_mm and s.length > _DEGENERATE_MM
    ]


def _find(parent: Dict[int, int], i: int) -> int:
    while parent.setdefault(i, i) != i:
        parent[i] = parent[parent[i]]
        i = parent[i]
    return i


def _union(parent: Dict[int, int], a: int, b: int) -> None:
    ra, rb = _find(parent, a), _find(parent, b)
    if ra != rb:
        parent[max(ra, rb)] = min(ra, rb)


def _shared_coordinate(values: List[float]) -> float:
    if all(v == values[0] for v in values):
        return values[0]
    return sum(values) / len(values)


def square_clusters(
    positions: Dict[int, Point2D],
    pairs: List[Tuple[int, int]],
    angle_tol_rad: float,
    max_shift_mm: float,
) -> Dict[int, Point2D]:
    """Move clusters joined by near-axis segments onto shared axis lines.

    Clusters linked by a near-horizontal segment share one y value, and
    clusters linked by a near-vertical segment share one x value (the mean
    of the group). A cluster keeps its own coordinate when the shared value
    would move it further than ``max_shift_mm``. Already squared input maps
    to itself.
    """
    limit = math.sin(angle_tol_rad)
    same_y: Dict[int, int] = {}
    same_x: Dict[int, int] = {}
    for cs, ce in pairs:
        a, b = positions[cs], positions[ce]
        dx = b.x - a.x
        dy = b.y - a.y
        length = math.hypot(dx, dy)
        if length <= _DEGENERATE_MM:
            continue
        if abs(dy) <= limit * length and abs(dy) <= max_shift_mm:
            _union(same_y, cs, ce)
        elif abs(dx) <= limit * length and abs(dx) <= max_shift_mm:
            _union(same_x, cs, ce)

    def shared(parent: Dict[int, int], coord) -> Dict[int, float]:
        groups: Dict[int, List[int]] = {}
        for cid in list(parent):
            groups.setdefault(_find(parent, cid), []).append(cid)
        values: Dict[int, float] = {}
        for members in groups.values():
            value = _shared_coordinate([coord(positions[m]) for m in sorted(members)])
            for m in members:
                values[m] = value
        return values

    ys = shared(same_y, lambda p: p.y)
    xs = shared(same_x, lambda p: p.x)

    squared: Dict[int, Point2D] = {}
    for cid, p in positions.items():
        x = xs.get(cid, p.x)
        y = ys.get(cid, p.y)
        if abs(x - p.x) > max_shift_mm:
            x = p.x
        if abs(y - p.y) > max_shift_mm:
            y = p.y
        squared[cid] = Point2D(x, y)
    return squared


def snap_endpoints(
    segments: List[WallSegment],
    snap_tol_mm: float,
    snap_orthogonal: bool = False,
    angle_tol_rad: float = 0.0,
) -> List[WallSegment]:
    """Cluster coincident endpoints and rewrite segments to cluster centroids.

    Args:
        segments: Input segments.
        snap_tol_mm: Cluster merge distance.
        snap_orthogonal: Square near-axis runs after snapping.
        angle_tol_rad: Angle band for squaring.

    Returns:
        Segments with snapped endpoints; segments that collapse are dropped.
    """
    index = SnapIndex(snap_tol_mm)
    assignment = [(index.add(s.start), index.add(s.end)) for s in segments]
    positions = {cid: index.position(cid) for pair in assignment for cid in pair}
    if snap_orthogonal:
        positions = square_clusters(positions, assignment, angle_tol_rad, snap_tol_mm)

    snapped = []
    for seg, (cs, ce) in zip(segments, assignment):
        if cs == ce:
            continue
        out = seg.with_points(positions[cs], positions[ce])
        if out.length > _DEGENERATE_MM:
            snapped.append(out)
    return snapped


def _segment_key(seg: WallSegment) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    a = (int(round(seg.start.x)), int(round(seg.start.y)))
    b = (int(round(seg.end.x)), int(round(seg.end.y)))
    return (a, b) if a <= b else (b, a)


def dedup_segments(segments: List[WallSegment]) -> List[WallSegment]:
    """Remove exact duplicates (same endpoints in either order, rounded to 1 mm)."""
    seen: Set = set()
    out = []
    for seg in segments:
        key = _segment_key(seg)
        if key in seen:
            continue
        seen.add(key)
        out.append(seg)
    return out


# =============================================================================
# Axis-Aligned Overlap Merge
# =============================================================================


def _merge_line_group(
    group: List[WallSegment], horizontal: bool, line_tol_mm: float
) -> List[WallSegment]:
    """Union overlapping intervals of segments sharing a grid line."""
    intervals = []
    for seg in group:
        if horizontal:
            fixed = (seg.start.y + seg.end.y) / 2
            lo, hi = sorted((seg.start.x, seg.end.x))
        else:
            fixed = (seg.start.x + seg.end.x) / 2
            lo, hi = sorted((seg.start.y, seg.end.y))
        intervals.append([lo, hi, fixed, [seg]])

    intervals.sort(key=lambda it: (it[0], it[1]))

    merged: List[list] = []
    for it in intervals:
        if merged:
            last = merged[-1]
            same_line = abs(last[2] - it[2]) <= line_tol_mm
            if same_line and it[0] <= last[1] + line_tol_mm:
                last[1] = max(last[1], it[1])
                last[3].extend(it[3])
                continue
        merged.append(it)

    out = []
    for lo, hi, fixed, segs in merged:
        if len(segs) == 1:
            out.append(segs[0])
            continue
        seg_id = "+".join(s.id for s in segs)
        if horizontal:
            start, end = Point2D(lo, fixed), Point2D(hi, fixed)
        else:
            start, end = Point2D(fixed, lo), Point2D(fixed, hi)
        out.append(WallSegment(seg_id, start, end, segs[0].layer))
    return out


def merge_axis_aligned_overlaps(
    segments: List[WallSegment],
    angle_tol_rad: float,
    line_tol_mm: float,
) -> List[WallSegment]:
    """Union colinear, overlapping horizontal/vertical segments.

    Segments are grouped by ``round(fixed coordinate / line_tol_mm)`` and
    intervals on the same line are merged when they overlap or touch
    within ``line_tol_mm``. Oblique segments pass through unchanged.
    """
    limit = math.sin(angle_tol_rad)
    horizontals: Dict[int, List[WallSegment]] = {}
    verticals: Dict[int, List[WallSegment]] = {}
    others: List[WallSegment] = []

    for seg in segments:
        dx = seg.end.x - seg.start.x
        dy = seg.end.y - seg.start.y
        a = math.atan2(dy, dx)
        if abs(dy) <= line_tol_mm and abs(math.sin(a)) <= limit:
            key = int(round(seg.start.y / line_tol_mm))
            horizontals.setdefault(key, []).append(seg)
        elif abs(dx) <= line_tol_mm and abs(math.cos(a)) <= limit:
            key = int(round(seg.start.x / line_tol_mm))
            verticals.setdefault(key, []).append(seg)
        else:
            others.append(seg)

    out: List[WallSegment] = []
    for key in sorted(horizontals):
        out.extend(_merge_line_group(horizontals[key], True, line_tol_mm))
    for key in sorted(verticals):
        out.extend(_merge_line_group(verticals[key], False, line_tol_mm))
    out.extend(others)
    return out


# =============================================================================
# Jog Simplification
# =============================================================================


def _touching(seg: WallSegment, point: Point2D, tol: float) -> bool:
    return seg.start.distance_to(point) < tol or seg.end.distance_to(point) < tol


def _move_endpoint_near(seg: WallSegment, point: Point2D, target: Point2D) -> WallSegment:
    """Move whichever endpoint of seg is closest to point onto target."""
    if seg.start.distance_to(point) <= seg.end.distance_to(point):
        return seg.with_points(target, seg.end)
    return seg.with_points(seg.start, target)


def simplify_jogs(
    segments: List[WallSegment],
    jog_max_mm: float,
    angle_tol_rad: float,
) -> Tuple[List[WallSegment], int]:
    """Remove short steps bridging two colinear runs and join the runs.

    A segment no longer than ``jog_max_mm`` that touches exactly one other
    segment at each end (within half the jog length), where those two
    neighbours are colinear, is removed; both neighbours' touching ends
    are moved to the jog's midpoint so the run stays connected.

    Returns:
        (segments, removed_count). The loop removes at most one jog per
        pass and is capped at the input size.
    """
    result = list(segments)
    if jog_max_mm <= 0:
        return result, 0

    touch_tol = jog_max_mm * 0.5
    removed = 0
    max_passes = len(result)

    changed = True
    while changed and removed < max_passes:
        changed = False
        for i, seg in enumerate(result):
            if seg.length > jog_max_mm:
                continue
            at_start = [j for j, o in enumerate(result) if j != i and _touching(o, seg.start, touch_tol)]
            at_end = [j for j, o in enumerate(result) if j != i and _touching(o, seg.end, touch_tol)]
            if len(at_start) != 1 or len(at_end) != 1 or at_start[0] == at_end[0]:
                continue
            a_idx, b_idx = at_start[0], at_end[0]
            seg_a, seg_b = result[a_idx], result[b_idx]
            if not angles_colinear(seg_a.angle, seg_b.angle, angle_tol_rad):
                continue

            mid = Point2D((seg.start.x + seg.end.x) / 2, (seg.start.y + seg.end.y) / 2)
            result[a_idx] = _move_endpoint_near(seg_a, seg.start, mid)
            result[b_idx] = _move_endpoint_near(seg_b, seg.end, mid)
            del result[i]
            removed += 1
            changed = True
            logger.debug("Removed jog %s (%.1f mm)", seg.id, seg.length)
            break

    return result, removed


# =============================================================================
# Gap Bridging
# =============================================================================


def _faces_away(index: SnapIndex, seg_ends: Tuple[int, int], free_end: int, target: Point2D) -> bool:
    """True when ``target`` lies beyond the free end of a segment."""
    other = seg_ends[1] if seg_ends[0] == free_end else seg_ends[0]
    tip = index.position(free_end)
    base = index.position(other)
    return (tip.x - base.x) * (target.x - tip.x) + (tip.y - base.y) * (target.y - tip.y) > 0


def bridge_gaps(
    segments: List[WallSegment],
    gap_tol_mm: float,
    angle_tol_rad: float,
    snap_tol_mm: float,
    candidate_min_mm: float,
    candidate_max_mm: float,
    detect_candidates: bool = True,
) -> Tuple[List[WallSegment], List[DetectedGap]]:
    """Join colinear free endpoints and record opening-sized gaps.

    Free endpoints are endpoint clusters touched by exactly one segment.
    A pair is considered when the bridge direction is colinear with both
    endpoints' own segments and points away from each of them. Gaps up to ``gap_tol_mm`` get a synthetic
    bridge segment; gaps in [candidate_min_mm, candidate_max_mm] are
    recorded as DetectedGap for opening-candidate detection.

    Returns:
        (segments with bridges appended, detected gaps)
    """
    index = SnapIndex(snap_tol_mm)
    ends = [(index.add(s.start), index.add(s.end)) for s in segments]

    incident: Dict[int, List[int]] = {}
    for seg_idx, (cs, ce) in enumerate(ends):
        incident.setdefault(cs, []).append(seg_idx)
        incident.setdefault(ce, []).append(seg_idx)

    free = sorted(cid for cid, segs in incident.items() if len(segs) == 1)
    if len(free) < 2:
        return list(segments), []

    search_tol = max(gap_tol_mm, candidate_max_mm if detect_candidates else 0.0)
    bridges: List[WallSegment] = []
    gaps: List[DetectedGap] = []

    for i, ca in enumerate(free):
        pa = index.position(ca)
        seg_a = segments[incident[ca][0]]
        for cb in free[i + 1:]:
            pb = index.position(cb)
            gap = pa.distance_to(pb)
            if gap > search_tol or gap <= 0:
                continue
            seg_b = segments[incident[cb][0]]
            if seg_a is seg_b:
                continue
            bridge_angle = segment_angle(pa, pb)
            if not angles_colinear(seg_a.angle, bridge_angle, angle_tol_rad):
                continue
            if not angles_colinear(seg_b.angle, bridge_angle, angle_tol_rad):
                continue
            # The gap must extend both runs, not lie across one of them
            if not _faces_away(index, ends[incident[ca][0]], ca, pb):
                continue
            if not _faces_away(index, ends[incident[cb][0]], cb, pa):
                continue

            bridged = gap <= gap_tol_mm
            if bridged:
                bridges.append(WallSegment(f"gap-{ca}-{cb}", pa, pb, seg_a.layer))
            if detect_candidates and candidate_min_mm <= gap <= candidate_max_mm:
                gaps.append(DetectedGap(pa, pb, gap, bridge_angle, bridged))

    if bridges:
        logger.debug("Bridged %d gaps", len(bridges))

    # Free endpoints are rewritten to their cluster centroid so bridges connect exactly
    rewritten = [
        seg.with_points(index.position(cs), index.position(ce))
        for seg, (cs, ce) in zip(segments, ends)
        if cs != ce
    ]
    return dedup_segments(rewritten + bridges), gaps
