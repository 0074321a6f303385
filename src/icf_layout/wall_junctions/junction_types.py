# File: src/icf_layout/wall_junctions/junction_types.py

"""Data models for junction topology.

Defines the types produced by the topology classifier. Junction types are
derived only from node degree and incident angles; they are never assigned
from outside.

Key Types:
    JunctionType: Classification of a chain-end node
    JunctionNode: A classified node with its incident chains
    LJunctionInfo: Primary/secondary arms of an L-corner
    TJunctionInfo: Main run and branch of a T-junction
    OpeningCandidate: A gap in a run that is probably a door or window
    TopologyResult: Complete classifier output

All measurements are in millimetres; angles in radians.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from enum import Enum

from ..geometry.primitives import Point2D


# =============================================================================
# Enumerations
# =============================================================================


class JunctionType(Enum):
    """Classification of a chain-end node."""

    END = "end"
    """Degree 1: a free wall end."""

    INLINE = "inline"
    """Degree 2, colinear: a pass-through that reduction should have removed."""

    L_CORNER = "L"
    """Degree 2 at an angle."""

    T_JUNCTION = "T"
    """Degree 3: two colinear chains (main run) plus a branch."""

    X_JUNCTION = "X"
    """Degree 4 or more."""


# =============================================================================
# Data Models
# =============================================================================


@dataclass
class JunctionNode:
    """A classified junction node.

    Attributes:
        id: Node identifier (shared with the chain builder's node).
        position: Node position.
        junction_type: Classified type.
        chain_ids: Incident chain ids.
        angles: Outward angle of each incident chain (radians).
    """

    id: str
    position: Point2D
    junction_type: JunctionType
    chain_ids: List[str] = field(default_factory=list)
    angles: List[float] = field(default_factory=list)

    @property
    def degree(self) -> int:
        return len(self.chain_ids)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "position": self.position.to_dict(),
            "type": self.junction_type.value,
            "chain_ids": list(self.chain_ids),
            "angles": [round(a, 6) for a in self.angles],
        }


@dataclass
class LJunctionInfo:
    """Roles at an L-corner.

    The primary arm receives the full module on even rows; the secondary
    arm receives the corner-cut module. Odd rows swap.

    Attributes:
        node_id: Junction node.
        position: Corner vertex.
        primary_chain_id: Primary (LEAD) arm.
        secondary_chain_id: Secondary (SEAT) arm.
        primary_angle: Outward angle of the primary arm.
        secondary_angle: Outward angle of the secondary arm.
        cross: Cross product of the sorted arms' outward unit vectors.
    """

    node_id: str
    position: Point2D
    primary_chain_id: str
    secondary_chain_id: str
    primary_angle: float
    secondary_angle: float
    cross: float

    def role_of(self, chain_id: str) -> Optional[str]:
        if chain_id == self.primary_chain_id:
            return "primary"
        if chain_id == self.secondary_chain_id:
            return "secondary"
        return None

    def other_arm(self, chain_id: str) -> Optional[str]:
        if chain_id == self.primary_chain_id:
            return self.secondary_chain_id
        if chain_id == self.secondary_chain_id:
            return self.primary_chain_id
        return None

    def to_dict(self) -> Dict:
        return {
            "node_id": self.node_id,
            "position": self.position.to_dict(),
            "primary_chain_id": self.primary_chain_id,
            "secondary_chain_id": self.secondary_chain_id,
            "primary_angle": round(self.primary_angle, 6),
            "secondary_angle": round(self.secondary_angle, 6),
        }


@dataclass
class TJunctionInfo:
    """Roles at a T-junction.

    Attributes:
        node_id: Junction node.
        position: Junction point.
        main_chain_ids: The two colinear chains forming the continuous run.
        branch_chain_id: The chain ending against the run.
        main_angle: Outward angle of the first main chain.
        branch_angle: Outward angle of the branch.
    """

    node_id: str
    position: Point2D
    main_chain_ids: Tuple[str, str]
    branch_chain_id: str
    main_angle: float
    branch_angle: float

    def to_dict(self) -> Dict:
        return {
            "node_id": self.node_id,
            "position": self.position.to_dict(),
            "main_chain_ids": list(self.main_chain_ids),
            "branch_chain_id": self.branch_chain_id,
            "main_angle": round(self.main_angle, 6),
            "branch_angle": round(self.branch_angle, 6),
        }


@dataclass
class OpeningCandidate:
    """A colinear gap in a wall run, likely a door or window.

    Attributes:
        id: Candidate identifier ("candidate-<n>").
        chain_id: Chain whose line the gap lies on.
        start_dist_mm: Gap start measured along the chain from its start.
        width_mm: Gap width.
        center: Gap midpoint.
        angle: Chain direction angle.
        label: Short display label ("C1", "C2", ...).
        bridged: True if the builder closed the gap with a bridge segment.
    """

    id: str
    chain_id: str
    start_dist_mm: float
    width_mm: float
    center: Point2D
    angle: float
    label: str
    bridged: bool = False

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "chain_id": self.chain_id,
            "start_dist_mm": round(self.start_dist_mm, 3),
            "width_mm": round(self.width_mm, 3),
            "center": self.center.to_dict(),
            "angle": round(self.angle, 6),
            "label": self.label,
            "bridged": self.bridged,
        }


@dataclass
class TopologyResult:
    """Complete topology classification.

    Attributes:
        nodes: Classified nodes keyed by node id.
        l_junctions: L-corner role records.
        t_junctions: T-junction role records (only where a main pair was found).
        x_junction_ids: Nodes of degree 4+.
        candidates: Opening candidates detected from gaps.
    """

    nodes: Dict[str, JunctionNode] = field(default_factory=dict)
    l_junctions: List[LJunctionInfo] = field(default_factory=list)
    t_junctions: List[TJunctionInfo] = field(default_factory=list)
    x_junction_ids: List[str] = field(default_factory=list)
    candidates: List[OpeningCandidate] = field(default_factory=list)

    @property
    def junction_counts(self) -> Dict[str, int]:
        counts = {t.value: 0 for t in JunctionType}
        for node in self.nodes.values():
            counts[node.junction_type.value] += 1
        return counts

    def l_junction_at(self, node_id: str) -> Optional[LJunctionInfo]:
        for info in self.l_junctions:
            if info.node_id == node_id:
                return info
        return None

    def t_junction_at(self, node_id: str) -> Optional[TJunctionInfo]:
        for info in self.t_junctions:
            if info.node_id == node_id:
                return info
        return None

    def to_dict(self) -> Dict:
        """Serialize to JSON-compatible dictionary."""
        return {
            "junction_counts": self.junction_counts,
            "nodes": [n.to_dict() for n in self.nodes.values()],
            "l_junctions": [j.to_dict() for j in self.l_junctions],
            "t_junctions": [j.to_dict() for j in self.t_junctions],
            "x_junction_ids": list(self.x_junction_ids),
            "candidates": [c.to_dict() for c in self.candidates],
        }
