# File: src/icf_layout/footprint/__init__.py

"""Building footprint and chain side classification module.

Extracts faces from the chain graph, selects the outer footprint polygon
(falling back to the convex hull of all endpoints), and decides for every
chain which perpendicular side faces the exterior.

Usage:
    from icf_layout.footprint import detect_footprint

    footprint = detect_footprint(chains_result.chains)
    for side in footprint.chain_sides.values():
        print(side.chain_id, side.classification.value)
"""

from .footprint_types import (
    FootprintStatus,
    PolygonStatus,
    SideClassification,
    SideVote,
    ChainSideInfo,
    FootprintStats,
    FootprintResult,
)

from .half_edge import HalfEdge, HalfEdgeGraph, build_half_edge_graph, extract_faces

from .side_classifier import (
    sample_count,
    sample_vote,
    collect_votes,
    classify_chain,
    classify_chains,
    apply_consistency_pass,
    apply_manual_flips,
)

from .footprint_detector import (
    FootprintCandidate,
    containment_counts,
    select_outer_face,
    detect_footprint,
)

__all__ = [
    # Main entry point
    "detect_footprint",
    # Types
    "FootprintStatus",
    "PolygonStatus",
    "SideClassification",
    "SideVote",
    "ChainSideInfo",
    "FootprintStats",
    "FootprintResult",
    "FootprintCandidate",
    # Faces
    "HalfEdge",
    "HalfEdgeGraph",
    "build_half_edge_graph",
    "extract_faces",
    "containment_counts",
    "select_outer_face",
    # Side voting
    "sample_count",
    "sample_vote",
    "collect_votes",
    "classify_chain",
    "classify_chains",
    "apply_consistency_pass",
    "apply_manual_flips",
]
