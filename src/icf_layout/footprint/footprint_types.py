# File: src/icf_layout/footprint/footprint_types.py

"""Data models for footprint detection and side classification.

Key Types:
    FootprintStatus: Overall outcome of footprint detection
    PolygonStatus: How the outer polygon was obtained
    SideClassification: Which perpendicular side of a chain is exterior
    SideVote: One sample's verdict
    ChainSideInfo: Per-chain classification with vote diagnostics
    FootprintResult: Complete detector output

The positive perpendicular of a chain is 90 degrees clockwise from its
direction, i.e. ``(dy, -dx)``.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from enum import Enum

from ..geometry.primitives import Point2D


# =============================================================================
# Enumerations
# =============================================================================


class FootprintStatus(Enum):
    """Overall footprint detection outcome."""

    OK = "ok"
    FALLBACK = "fallback"
    UNRESOLVED = "unresolved"
    NO_WALLS = "no-walls"


class PolygonStatus(Enum):
    """Provenance of the outer polygon."""

    RESOLVED = "resolved"
    """Chosen from the faces of the chain graph."""

    FALLBACK_HULL = "fallback-hull"
    """Convex hull of all chain endpoints."""

    NONE = "none"
    """No polygon could be formed."""


class SideClassification(Enum):
    """Exterior side of a chain."""

    EXTERIOR_NEGATIVE_PERP = "exterior-negative-perp"
    EXTERIOR_POSITIVE_PERP = "exterior-positive-perp"
    BOTH_INTERIOR = "both-interior"
    UNRESOLVED = "unresolved"

    @property
    def is_exterior(self) -> bool:
        return self in (
            SideClassification.EXTERIOR_NEGATIVE_PERP,
            SideClassification.EXTERIOR_POSITIVE_PERP,
        )

    def flipped(self) -> "SideClassification":
        """Swap the exterior side; non-exterior classifications are unchanged."""
        if self == SideClassification.EXTERIOR_POSITIVE_PERP:
            return SideClassification.EXTERIOR_NEGATIVE_PERP
        if self == SideClassification.EXTERIOR_NEGATIVE_PERP:
            return SideClassification.EXTERIOR_POSITIVE_PERP
        return self


class SideVote(Enum):
    """Verdict of a single sample along a chain."""

    POSITIVE_EXTERIOR = "positive-ext"
    NEGATIVE_EXTERIOR = "negative-ext"
    BOTH_INTERIOR = "both-interior"
    BOTH_OUTSIDE = "both-outside"
    AMBIGUOUS = "ambiguous"


# Classification reasons
REASON_ZERO_LENGTH = "zero-length"
REASON_NO_POLYGON = "no-polygon"
REASON_BOUNDARY_AMBIGUOUS = "boundary-ambiguous"
REASON_MIXED_VOTES = "mixed-votes"
REASON_MAJORITY = "majority"
REASON_PLURALITY = "plurality"
REASON_OUTSIDE_FOOTPRINT = "outside-footprint"


# =============================================================================
# Data Models
# =============================================================================


@dataclass
class ChainSideInfo:
    """Side classification of one chain.

    Attributes:
        chain_id: Classified chain.
        classification: Exterior side, partition or unresolved.
        outside_is_positive_perp: True when the positive perpendicular faces
            the exterior. Defaults to True for partitions and unresolved chains.
        outward_normal_angle: Angle of the exterior normal, None unless the
            chain is on the perimeter.
        reason: Short tag describing how the classification was reached.
        votes: Vote counts keyed by ``SideVote`` value.
        flipped_by_consistency: Set when the midpoint re-test reversed the side.
        flipped_by_override: Set when a manual flip was applied.
        outside_footprint: Set when the chain lies wholly outside the polygon.
    """

    chain_id: str
    classification: SideClassification
    outside_is_positive_perp: bool = True
    outward_normal_angle: Optional[float] = None
    reason: str = ""
    votes: Dict[str, int] = field(default_factory=lambda: {v.value: 0 for v in SideVote})
    flipped_by_consistency: bool = False
    flipped_by_override: bool = False
    outside_footprint: bool = False

    def to_dict(self) -> Dict:
        return {
            "chain_id": self.chain_id,
            "classification": self.classification.value,
            "outside_is_positive_perp": self.outside_is_positive_perp,
            "outward_normal_angle": (
                None if self.outward_normal_angle is None
                else round(self.outward_normal_angle, 6)
            ),
            "reason": self.reason,
            "votes": dict(self.votes),
            "flipped_by_consistency": self.flipped_by_consistency,
            "flipped_by_override": self.flipped_by_override,
            "outside_footprint": self.outside_footprint,
        }


@dataclass
class FootprintStats:
    """Classification counters for one footprint run."""

    total_chains: int = 0
    exterior_chains: int = 0
    interior_partitions: int = 0
    unresolved: int = 0
    outside_footprint: int = 0
    flipped_by_consistency: int = 0
    flipped_by_override: int = 0
    candidates_evaluated: int = 0
    selected_score: float = 0.0

    def to_dict(self) -> Dict:
        return {
            "total_chains": self.total_chains,
            "exterior_chains": self.exterior_chains,
            "interior_partitions": self.interior_partitions,
            "unresolved": self.unresolved,
            "outside_footprint": self.outside_footprint,
            "flipped_by_consistency": self.flipped_by_consistency,
            "flipped_by_override": self.flipped_by_override,
            "candidates_evaluated": self.candidates_evaluated,
            "selected_score": round(self.selected_score, 3),
        }


@dataclass
class FootprintResult:
    """Complete footprint detection output.

    Attributes:
        status: Overall outcome.
        polygon_status: How the outer polygon was obtained.
        outer_polygon: Outer footprint vertices, counter-clockwise.
        outer_area: Area of the outer polygon (mm^2).
        faces_found: Number of bounded faces extracted from the chain graph.
        chain_sides: Per-chain classification keyed by chain id.
        stats: Classification counters.
        unresolved_chain_ids: Chains left unresolved, in chain order.
    """

    status: FootprintStatus
    polygon_status: PolygonStatus = PolygonStatus.NONE
    outer_polygon: List[Point2D] = field(default_factory=list)
    outer_area: float = 0.0
    faces_found: int = 0
    chain_sides: Dict[str, ChainSideInfo] = field(default_factory=dict)
    stats: FootprintStats = field(default_factory=FootprintStats)
    unresolved_chain_ids: List[str] = field(default_factory=list)

    def side_of(self, chain_id: str) -> Optional[ChainSideInfo]:
        return self.chain_sides.get(chain_id)

    def to_dict(self) -> Dict:
        """Serialize to JSON-compatible dictionary."""
        return {
            "status": self.status.value,
            "polygon_status": self.polygon_status.value,
            "outer_polygon": [p.to_dict() for p in self.outer_polygon],
            "outer_area": round(self.outer_area, 3),
            "faces_found": self.faces_found,
            "chain_sides": [s.to_dict() for s in self.chain_sides.values()],
            "stats": self.stats.to_dict(),
            "unresolved_chain_ids": list(self.unresolved_chain_ids),
        }
