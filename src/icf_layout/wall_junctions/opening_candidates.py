# File: src/icf_layout/wall_junctions/opening_candidates.py

"""Opening-candidate detection from colinear gaps.

Each opening-sized gap recorded during gap bridging is matched to the
nearest chain that is colinear with it and whose line passes within
100 mm of the gap centre. The candidate position is measured along that
chain from its start.
"""

from typing import List

from ..geometry.primitives import angles_colinear
from ..wall_chains.chain_types import DetectedGap, WallChain
from .junction_types import OpeningCandidate

# Gap centre must lie within this distance of the chain line
MAX_LINE_DISTANCE_MM = 100.0


def candidate_label(index: int) -> str:
    """Display label for the n-th candidate (0-based): C1, C2, ..."""
    return f"C{index + 1}"


def detect_opening_candidates(
    chains: List[WallChain],
    gaps: List[DetectedGap],
    angle_tol_rad: float,
) -> List[OpeningCandidate]:
    """Match detected gaps to chains.

    Args:
        chains: Consolidated chains.
        gaps: Opening-sized gaps from the chain builder.
        angle_tol_rad: Colinearity tolerance.

    Returns:
        One candidate per gap that matched a chain, in gap order.
    """
    candidates: List[OpeningCandidate] = []

    for gap in gaps:
        center = gap.center
        best = None
        best_dist = MAX_LINE_DISTANCE_MM

        for chain in chains:
            if chain.length_mm <= 0:
                continue
            if not angles_colinear(gap.angle, chain.angle, angle_tol_rad):
                continue
            dx, dy = chain.direction
            t = (center.x - chain.start.x) * dx + (center.y - chain.start.y) * dy
            if t < -gap.width_mm or t > chain.length_mm + gap.width_mm:
                continue
            dist = center.distance_to(chain.point_at(t))
            if dist < best_dist:
                best, best_dist = chain, dist

        if best is None:
            continue

        dx, dy = best.direction
        t_start = (gap.start.x - best.start.x) * dx + (gap.start.y - best.start.y) * dy
        t_end = (gap.end.x - best.start.x) * dx + (gap.end.y - best.start.y) * dy
        candidates.append(
            OpeningCandidate(
                id=f"candidate-{len(candidates)}",
                chain_id=best.id,
                start_dist_mm=max(0.0, min(t_start, t_end)),
                width_mm=gap.width_mm,
                center=center,
                angle=best.angle,
                label=candidate_label(len(candidates)),
                bridged=gap.bridged,
            )
        )

    return candidates
