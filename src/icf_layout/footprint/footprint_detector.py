# File: src/icf_layout/footprint/footprint_detector.py

"""Outer footprint selection and side classification entry point.

The outer footprint is chosen among the faces of the chain graph. The faces
containing the most other face centroids (then the largest) are evaluated
with a trial classification of every chain:

    score = contains * 1e6 + perimeter_length * 10
            + perimeter_count * 5000 + area / 1e6 - outside_count * 5e5

The best-scoring face that passes the sanity thresholds is accepted.
If none does, the convex hull of all chain endpoints is used instead.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..geometry.polygon import (
    PointLocation,
    convex_hull,
    point_in_polygon,
    polygon_centroid,
    signed_area,
)
from ..geometry.primitives import Point2D
from ..wall_chains.chain_types import WallChain
from .footprint_types import (
    ChainSideInfo,
    FootprintResult,
    FootprintStats,
    FootprintStatus,
    PolygonStatus,
    SideClassification,
)
from .half_edge import build_half_edge_graph, extract_faces
from .side_classifier import (
    DEFAULT_OFFSETS_MM,
    apply_consistency_pass,
    apply_manual_flips,
    classify_chains,
)

logger = logging.getLogger(__name__)

# Score weights
CONTAINS_WEIGHT = 1e6
PERIMETER_LENGTH_WEIGHT = 10.0
PERIMETER_COUNT_WEIGHT = 5000.0
AREA_DIVISOR = 1e6
OUTSIDE_PENALTY = 5e5

# Penalty on containment when a face does not contain its own centroid
SELF_CONTAINMENT_PENALTY = 999

# Sanity thresholds (fractions of all chains)
MAX_OUTSIDE_FRACTION = 0.3
MIN_PERIMETER_FRACTION = 0.25
RELAXED_MAX_OUTSIDE_FRACTION = 0.5
RELAXED_MIN_PERIMETER_FRACTION = 0.1
CLEAR_WINNER_RATIO = 1.5


@dataclass
class FootprintCandidate:
    """Trial evaluation of one face as the outer footprint."""

    polygon: List[Point2D]
    area: float
    contains: int
    perimeter_count: int = 0
    perimeter_length_mm: float = 0.0
    outside_count: int = 0
    score: float = 0.0

    def fractions(self, total_chains: int):
        total = max(1, total_chains)
        return self.outside_count / total, self.perimeter_count / total


# =============================================================================
# Candidate Scoring
# =============================================================================


def containment_counts(faces: List[List[Point2D]]) -> List[int]:
    """How many other face centroids each face contains."""
    centroids = [polygon_centroid(f) for f in faces]
    counts = []
    for i, face in enumerate(faces):
        count = 0
        for j, centroid in enumerate(centroids):
            if i != j and point_in_polygon(centroid, face) == PointLocation.INSIDE:
                count += 1
        if point_in_polygon(centroids[i], face) != PointLocation.INSIDE:
            count -= SELF_CONTAINMENT_PENALTY
        counts.append(count)
    return counts


def evaluate_candidate(
    candidate: FootprintCandidate,
    chains: List[WallChain],
    offsets: Sequence[float],
) -> FootprintCandidate:
    """Fill in the trial classification counts and score of a candidate."""
    lengths = {c.id: c.length_mm for c in chains}
    sides = classify_chains(chains, candidate.polygon, offsets)
    for chain_id, info in sides.items():
        if info.classification.is_exterior:
            candidate.perimeter_count += 1
            candidate.perimeter_length_mm += lengths[chain_id]
        if info.outside_footprint:
            candidate.outside_count += 1
    candidate.score = (
        candidate.contains * CONTAINS_WEIGHT
        + candidate.perimeter_length_mm * PERIMETER_LENGTH_WEIGHT
        + candidate.perimeter_count * PERIMETER_COUNT_WEIGHT
        + candidate.area / AREA_DIVISOR
        - candidate.outside_count * OUTSIDE_PENALTY
    )
    return candidate


def select_outer_face(
    faces: List[List[Point2D]],
    chains: List[WallChain],
    max_candidates: int = 5,
    offsets: Sequence[float] = DEFAULT_OFFSETS_MM,
) -> Tuple[Optional[FootprintCandidate], int]:
    """Pick the outer footprint among faces.

    Returns:
        (accepted candidate or None, number of candidates evaluated)
    """
    if not faces:
        return None, 0

    contains = containment_counts(faces)
    ranked = sorted(
        (
            FootprintCandidate(polygon=f, area=abs(signed_area(f)), contains=c)
            for f, c in zip(faces, contains)
        ),
        key=lambda cand: (-cand.contains, -cand.area),
    )[:max_candidates]

    evaluated = [evaluate_candidate(c, chains, offsets) for c in ranked]
    evaluated.sort(key=lambda cand: -cand.score)

    for cand in evaluated:
        outside_frac, perimeter_frac = cand.fractions(len(chains))
        logger.debug(
            "Candidate: area=%.2f m2 contains=%d score=%.1f outside=%.2f perimeter=%.2f",
            cand.area / 1e6, cand.contains, cand.score, outside_frac, perimeter_frac,
        )
        if outside_frac < MAX_OUTSIDE_FRACTION and perimeter_frac >= MIN_PERIMETER_FRACTION:
            return cand, len(evaluated)

    best = evaluated[0]
    runner_up = evaluated[1].score if len(evaluated) > 1 else None
    clear = runner_up is None or (best.score > 0 and best.score >= CLEAR_WINNER_RATIO * runner_up)
    if clear:
        outside_frac, perimeter_frac = best.fractions(len(chains))
        if (
            outside_frac < RELAXED_MAX_OUTSIDE_FRACTION
            and perimeter_frac >= RELAXED_MIN_PERIMETER_FRACTION
        ):
            logger.debug("Accepted clear high scorer under relaxed thresholds")
            return best, len(evaluated)

    return None, len(evaluated)


# =============================================================================
# Public API
# =============================================================================


def _summarize(result: FootprintResult, chains: List[WallChain]):
    stats = result.stats
    stats.total_chains = len(chains)
    for chain in chains:
        info = result.chain_sides[chain.id]
        if info.classification.is_exterior:
            stats.exterior_chains += 1
        elif info.classification == SideClassification.BOTH_INTERIOR:
            stats.interior_partitions += 1
        else:
            stats.unresolved += 1
            result.unresolved_chain_ids.append(chain.id)
        if info.outside_footprint:
            stats.outside_footprint += 1


def detect_footprint(
    chains: List[WallChain],
    node_tolerance_mm: float = 20.0,
    max_candidates: int = 5,
    offsets: Sequence[float] = DEFAULT_OFFSETS_MM,
    flipped_chain_ids: Iterable[str] = (),
) -> FootprintResult:
    """Detect the outer footprint and classify every chain's exterior side.

    Args:
        chains: Consolidated chains.
        node_tolerance_mm: Endpoint clustering tolerance for the face graph.
        max_candidates: Faces evaluated as outer footprint.
        offsets: Escalating perpendicular sample distances.
        flipped_chain_ids: Chains whose exterior side the user swapped.

    Returns:
        FootprintResult with polygon, per-chain sides and diagnostics.
    """
    if not chains:
        logger.info("Footprint: no walls")
        return FootprintResult(status=FootprintStatus.NO_WALLS)

    graph = build_half_edge_graph(chains, node_tolerance_mm)
    faces = extract_faces(graph)
    selected, evaluated = select_outer_face(faces, chains, max_candidates, offsets)

    if selected is not None:
        polygon = selected.polygon
        polygon_status = PolygonStatus.RESOLVED
        status = FootprintStatus.OK
    else:
        endpoints = [p for c in chains for p in (c.start, c.end)]
        polygon = convex_hull(endpoints)
        if polygon:
            polygon_status = PolygonStatus.FALLBACK_HULL
            status = FootprintStatus.FALLBACK
            logger.warning(
                "No face qualified as outer footprint (%d faces); using convex hull", len(faces)
            )
        else:
            polygon_status = PolygonStatus.NONE
            status = FootprintStatus.UNRESOLVED
            logger.warning("No footprint polygon could be formed")

    sides: Dict[str, ChainSideInfo] = classify_chains(chains, polygon, offsets)
    consistency_flips = apply_consistency_pass(chains, sides, polygon, offsets) if polygon else 0
    override_flips = apply_manual_flips(chains, sides, flipped_chain_ids)

    result = FootprintResult(
        status=status,
        polygon_status=polygon_status,
        outer_polygon=polygon,
        outer_area=abs(signed_area(polygon)),
        faces_found=len(faces),
        chain_sides=sides,
        stats=FootprintStats(
            candidates_evaluated=evaluated,
            selected_score=selected.score if selected is not None else 0.0,
            flipped_by_consistency=consistency_flips,
            flipped_by_override=override_flips,
        ),
    )
    _summarize(result, chains)

    logger.info(
        "Footprint %s (%s): %.2f m2, %d exterior, %d partitions, %d unresolved",
        status.value, polygon_status.value, result.outer_area / 1e6,
        result.stats.exterior_chains, result.stats.interior_partitions, result.stats.unresolved,
    )
    return result
