# File: src/icf_layout/wall_junctions/__init__.py

"""Junction topology module.

Classifies chain-end nodes into free ends, L-corners, T-junctions and
X-junctions, assigns L and T roles, and turns gaps found by the chain
builder into opening candidates.

Usage:
    from icf_layout.wall_junctions import classify_junctions

    topology = classify_junctions(chains_result)
    print(topology.junction_counts)
"""

from .junction_types import (
    JunctionType,
    JunctionNode,
    LJunctionInfo,
    TJunctionInfo,
    OpeningCandidate,
    TopologyResult,
)

from .junction_classifier import (
    classify_junctions,
    classify_node,
    assign_l_roles,
    assign_t_roles,
)

from .opening_candidates import detect_opening_candidates, candidate_label

__all__ = [
    # Main entry point
    "classify_junctions",
    # Types
    "JunctionType",
    "JunctionNode",
    "LJunctionInfo",
    "TJunctionInfo",
    "OpeningCandidate",
    "TopologyResult",
    # Classifier
    "classify_node",
    "assign_l_roles",
    "assign_t_roles",
    # Candidates
    "detect_opening_candidates",
    "candidate_label",
]
