# File: src/icf_layout/footprint/side_classifier.py

"""Per-chain exterior/interior side classification.

Each chain is sampled at interior fractions of its length. At every sample
both perpendicular sample points are tested against the outer polygon, starting
at the smallest offset and escalating while either point lands on the
polygon edge. Each sample casts one vote; the majority (at least half the
samples) decides, otherwise the most-voted non-ambiguous category wins with
partitions preferred over outside chains.
"""

import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..geometry.polygon import PointLocation, point_in_polygon
from ..geometry.primitives import Point2D
from ..utils.logging_config import get_logger
from ..wall_chains.chain_types import WallChain
from .footprint_types import (
    REASON_BOUNDARY_AMBIGUOUS,
    REASON_MAJORITY,
    REASON_MIXED_VOTES,
    REASON_NO_POLYGON,
    REASON_OUTSIDE_FOOTPRINT,
    REASON_PLURALITY,
    REASON_ZERO_LENGTH,
    ChainSideInfo,
    SideClassification,
    SideVote,
)

logger = get_logger(__name__)

DEFAULT_OFFSETS_MM: Tuple[float, ...] = (150.0, 300.0, 600.0)

MIN_SAMPLES = 3
MAX_SAMPLES = 15

# Chains shorter than this cannot be sampled
ZERO_LENGTH_MM = 1.0

# Tie-break order among non-ambiguous categories with equal vote counts
_PLURALITY_PRIORITY = (
    SideVote.BOTH_INTERIOR,
    SideVote.BOTH_OUTSIDE,
)


def sample_count(length_mm: float) -> int:
    """Samples along a chain: one per metre plus one, clamped to [3, 15]."""
    n = int(math.ceil(length_mm / 1000.0)) + 1
    return max(MIN_SAMPLES, min(MAX_SAMPLES, n))


def sample_vote(
    point: Point2D,
    perp: Tuple[float, float],
    polygon: Sequence[Point2D],
    offsets: Sequence[float] = DEFAULT_OFFSETS_MM,
) -> SideVote:
    """Vote for one sample by probing both perpendicular sides."""
    px, py = perp
    for offset in offsets:
        pos = point_in_polygon(point.offset(px * offset, py * offset), polygon)
        neg = point_in_polygon(point.offset(-px * offset, -py * offset), polygon)
        if pos == PointLocation.ON_EDGE or neg == PointLocation.ON_EDGE:
            continue
        if pos == PointLocation.OUTSIDE and neg == PointLocation.INSIDE:
            return SideVote.POSITIVE_EXTERIOR
        if pos == PointLocation.INSIDE and neg == PointLocation.OUTSIDE:
            return SideVote.NEGATIVE_EXTERIOR
        if pos == PointLocation.INSIDE:
            return SideVote.BOTH_INTERIOR
        return SideVote.BOTH_OUTSIDE
    return SideVote.AMBIGUOUS


def collect_votes(
    chain: WallChain,
    polygon: Sequence[Point2D],
    offsets: Sequence[float] = DEFAULT_OFFSETS_MM,
) -> Dict[SideVote, int]:
    """Vote counts over all samples of a chain."""
    votes = {v: 0 for v in SideVote}
    n = sample_count(chain.length_mm)
    perp = chain.positive_perp
    for i in range(n):
        t = (i + 1) / (n + 1)
        votes[sample_vote(chain.point_at(t * chain.length_mm), perp, polygon, offsets)] += 1
    return votes


def outward_normal_angle(chain: WallChain, positive: bool) -> float:
    px, py = chain.positive_perp
    if not positive:
        px, py = -px, -py
    return math.atan2(py, px)


def _decide(votes: Dict[SideVote, int]) -> Tuple[Optional[SideVote], str]:
    """Winning vote category and reason; None when unresolved."""
    total = sum(votes.values())
    majority = [
        v for v in SideVote
        if v != SideVote.AMBIGUOUS and votes[v] > 0 and votes[v] * 2 >= total
    ]
    if len(majority) == 1:
        return majority[0], REASON_MAJORITY

    decisive = {v: c for v, c in votes.items() if v != SideVote.AMBIGUOUS and c > 0}
    if not decisive:
        return None, REASON_BOUNDARY_AMBIGUOUS

    top = max(decisive.values())
    leaders = [v for v, c in decisive.items() if c == top]
    if len(leaders) == 1:
        return leaders[0], REASON_PLURALITY
    for vote in _PLURALITY_PRIORITY:
        if vote in leaders:
            return vote, REASON_PLURALITY
    return None, REASON_MIXED_VOTES


def classify_chain(
    chain: WallChain,
    polygon: Sequence[Point2D],
    offsets: Sequence[float] = DEFAULT_OFFSETS_MM,
) -> ChainSideInfo:
    """Classify one chain against an outer polygon."""
    if chain.length_mm < ZERO_LENGTH_MM:
        return ChainSideInfo(chain.id, SideClassification.UNRESOLVED, reason=REASON_ZERO_LENGTH)
    if len(polygon) < 3:
        return ChainSideInfo(chain.id, SideClassification.UNRESOLVED, reason=REASON_NO_POLYGON)

    votes = collect_votes(chain, polygon, offsets)
    winner, reason = _decide(votes)
    logger.trace(
        "Votes for %s: %s -> %s (%s)",
        chain.id, {v.value: c for v, c in votes.items() if c},
        winner.value if winner else None, reason,
    )
    info = ChainSideInfo(
        chain_id=chain.id,
        classification=SideClassification.UNRESOLVED,
        reason=reason,
        votes={v.value: c for v, c in votes.items()},
    )

    if winner == SideVote.POSITIVE_EXTERIOR:
        info.classification = SideClassification.EXTERIOR_POSITIVE_PERP
        info.outside_is_positive_perp = True
        info.outward_normal_angle = outward_normal_angle(chain, True)
    elif winner == SideVote.NEGATIVE_EXTERIOR:
        info.classification = SideClassification.EXTERIOR_NEGATIVE_PERP
        info.outside_is_positive_perp = False
        info.outward_normal_angle = outward_normal_angle(chain, False)
    elif winner == SideVote.BOTH_INTERIOR:
        info.classification = SideClassification.BOTH_INTERIOR
    elif winner == SideVote.BOTH_OUTSIDE:
        info.outside_footprint = True
        info.reason = REASON_OUTSIDE_FOOTPRINT

    return info


def classify_chains(
    chains: Iterable[WallChain],
    polygon: Sequence[Point2D],
    offsets: Sequence[float] = DEFAULT_OFFSETS_MM,
) -> Dict[str, ChainSideInfo]:
    return {chain.id: classify_chain(chain, polygon, offsets) for chain in chains}


# =============================================================================
# Corrections
# =============================================================================


def _flip(info: ChainSideInfo, chain: WallChain):
    info.outside_is_positive_perp = not info.outside_is_positive_perp
    info.classification = info.classification.flipped()
    if info.classification.is_exterior:
        info.outward_normal_angle = outward_normal_angle(chain, info.outside_is_positive_perp)


def apply_consistency_pass(
    chains: List[WallChain],
    sides: Dict[str, ChainSideInfo],
    polygon: Sequence[Point2D],
    offsets: Sequence[float] = DEFAULT_OFFSETS_MM,
) -> int:
    """Re-test perimeter chains at their midpoint and flip reversed ones.

    Returns:
        Number of chains flipped.
    """
    flipped = 0
    for chain in chains:
        info = sides.get(chain.id)
        if info is None or not info.classification.is_exterior:
            continue
        px, py = chain.positive_perp
        if not info.outside_is_positive_perp:
            px, py = -px, -py
        mid = chain.point_at(chain.length_mm / 2)
        for offset in offsets:
            location = point_in_polygon(mid.offset(px * offset, py * offset), polygon)
            if location == PointLocation.ON_EDGE:
                continue
            if location == PointLocation.INSIDE:
                _flip(info, chain)
                info.flipped_by_consistency = True
                flipped += 1
                logger.debug("Consistency pass flipped %s", chain.id)
            break
    return flipped


def apply_manual_flips(
    chains: List[WallChain],
    sides: Dict[str, ChainSideInfo],
    flipped_chain_ids: Iterable[str],
) -> int:
    """Swap the exterior side of user-flipped chains.

    Returns:
        Number of chains flipped.
    """
    wanted = set(flipped_chain_ids)
    if not wanted:
        return 0
    flipped = 0
    for chain in chains:
        info = sides.get(chain.id)
        if chain.id not in wanted or info is None:
            continue
        _flip(info, chain)
        info.flipped_by_override = True
        flipped += 1
    unknown = wanted - set(sides)
    if unknown:
        logger.warning("Ignoring flips for unknown chains: %s", ", ".join(sorted(unknown)))
    return flipped
