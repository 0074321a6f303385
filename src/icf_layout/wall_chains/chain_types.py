# File: src/icf_layout/wall_chains/chain_types.py

"""Data models for wall chain consolidation.

Key Types:
    WallChain: A consolidated straight wall run
    ChainNode: A graph node where chain ends meet (unclassified)
    DetectedGap: A gap between two free chain ends, kept for opening detection
    ChainStats: Diagnostics for one chain-building run
    PresetEvaluation: Score of one tolerance preset during auto-tuning
    ChainsResult: Complete chain-building output

All measurements are in millimetres.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..config.settings import ChainOptions, ChainPreset
from ..geometry.primitives import Point2D, WallSegment


# =============================================================================
# Data Models
# =============================================================================


@dataclass
class WallChain:
    """A consolidated straight wall run.

    Attributes:
        id: Chain identifier ("chain-<n>").
        segments: Contributing input segments, in merge order.
        length_mm: Distance between the two endpoints.
        angle: Direction angle normalized to [0, pi).
        start: Start endpoint (coincides with the start node).
        end: End endpoint (coincides with the end node).
        start_node_id: Junction node at the start.
        end_node_id: Junction node at the end.
    """

    id: str
    segments: List[WallSegment]
    length_mm: float
    angle: float
    start: Point2D
    end: Point2D
    start_node_id: str
    end_node_id: str

    @property
    def direction(self) -> Tuple[float, float]:
        """Unit vector from start to end."""
        if self.length_mm < 1e-12:
            return (0.0, 0.0)
        return (
            (self.end.x - self.start.x) / self.length_mm,
            (self.end.y - self.start.y) / self.length_mm,
        )

    @property
    def positive_perp(self) -> Tuple[float, float]:
        """Perpendicular 90 degrees clockwise from the run direction."""
        dx, dy = self.direction
        return (dy, -dx)

    def point_at(self, distance_mm: float) -> Point2D:
        """Point at a distance from the start along the run."""
        dx, dy = self.direction
        return Point2D(self.start.x + dx * distance_mm, self.start.y + dy * distance_mm)

    def node_end(self, node_id: str) -> Optional[str]:
        """Which end ("start" or "end") touches a node, if any."""
        if self.start_node_id == node_id:
            return "start"
        if self.end_node_id == node_id:
            return "end"
        return None

    def outward_angle(self, end: str) -> float:
        """Angle (radians, unnormalized) pointing away from the given end."""
        if end == "start":
            return math.atan2(self.end.y - self.start.y, self.end.x - self.start.x)
        return math.atan2(self.start.y - self.end.y, self.start.x - self.end.x)

    def to_dict(self) -> Dict:
        """Serialize to JSON-compatible dictionary."""
        return {
            "id": self.id,
            "segment_ids": [s.id for s in self.segments],
            "length_mm": round(self.length_mm, 3),
            "angle": round(self.angle, 6),
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "start_node_id": self.start_node_id,
            "end_node_id": self.end_node_id,
        }


@dataclass
class ChainNode:
    """A point where chain ends meet.

    Attributes:
        id: Node identifier ("node-<n>").
        position: Node position (cluster centroid).
        chain_ids: Incident chains, one entry per incident chain end.
        angles: Outward direction of each incident chain (radians).
        ends: Which chain end ("start"/"end") touches this node.
    """

    id: str
    position: Point2D
    chain_ids: List[str] = field(default_factory=list)
    angles: List[float] = field(default_factory=list)
    ends: List[str] = field(default_factory=list)

    @property
    def degree(self) -> int:
        return len(self.chain_ids)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "position": self.position.to_dict(),
            "chain_ids": list(self.chain_ids),
            "angles": [round(a, 6) for a in self.angles],
        }


@dataclass
class DetectedGap:
    """A colinear gap between two free endpoints.

    Attributes:
        start: First free endpoint.
        end: Second free endpoint.
        width_mm: Gap width.
        angle: Normalized direction of the gap.
        bridged: True if the gap was closed by a synthetic bridge segment.
    """

    start: Point2D
    end: Point2D
    width_mm: float
    angle: float
    bridged: bool = False

    @property
    def center(self) -> Point2D:
        return Point2D((self.start.x + self.end.x) / 2, (self.start.y + self.end.y) / 2)


@dataclass
class ChainStats:
    """Diagnostics for one chain-building run."""

    original_segments: int = 0
    after_noise: int = 0
    after_snap: int = 0
    after_dedup: int = 0
    after_merge: int = 0
    after_jogs: int = 0
    bridges_added: int = 0
    after_split: int = 0
    chains: int = 0
    reduction_pct: float = 0.0
    reduction_iterations: int = 0
    reduction_capped: bool = False
    total_length_mm: float = 0.0
    min_length_mm: float = 0.0
    max_length_mm: float = 0.0
    avg_length_mm: float = 0.0
    waste_pct: float = 0.0
    waste_per_row_mm: float = 0.0
    supplied_length_mm: float = 0.0
    gaps_detected: int = 0

    def to_dict(self) -> Dict:
        return {
            "original_segments": self.original_segments,
            "after_noise": self.after_noise,
            "after_snap": self.after_snap,
            "after_dedup": self.after_dedup,
            "after_merge": self.after_merge,
            "after_jogs": self.after_jogs,
            "bridges_added": self.bridges_added,
            "after_split": self.after_split,
            "chains": self.chains,
            "reduction_pct": round(self.reduction_pct, 3),
            "reduction_iterations": self.reduction_iterations,
            "reduction_capped": self.reduction_capped,
            "total_length_mm": round(self.total_length_mm, 3),
            "min_length_mm": round(self.min_length_mm, 3),
            "max_length_mm": round(self.max_length_mm, 3),
            "avg_length_mm": round(self.avg_length_mm, 3),
            "waste_pct": round(self.waste_pct, 6),
            "waste_per_row_mm": round(self.waste_per_row_mm, 3),
            "supplied_length_mm": round(self.supplied_length_mm, 3),
            "gaps_detected": self.gaps_detected,
        }


@dataclass
class PresetEvaluation:
    """Auto-tuning score for one preset."""

    preset: ChainPreset
    chain_count: int
    waste_pct: float
    score: float

    def to_dict(self) -> Dict:
        return {
            "preset": self.preset.value,
            "chain_count": self.chain_count,
            "waste_pct": round(self.waste_pct, 6),
            "score": round(self.score, 6),
        }


@dataclass
class ChainsResult:
    """Complete chain-building output.

    Attributes:
        chains: Consolidated chains.
        nodes: Junction nodes keyed by node id.
        detected_gaps: Colinear free-end gaps (opening-candidate sources).
        stats: Run diagnostics.
        options: Tolerances the run used.
        evaluations: Per-preset scores when auto-tuned (empty otherwise).
    """

    chains: List[WallChain] = field(default_factory=list)
    nodes: Dict[str, ChainNode] = field(default_factory=dict)
    detected_gaps: List[DetectedGap] = field(default_factory=list)
    stats: ChainStats = field(default_factory=ChainStats)
    options: ChainOptions = field(default_factory=ChainOptions)
    evaluations: List[PresetEvaluation] = field(default_factory=list)

    @property
    def preset(self) -> ChainPreset:
        return self.options.preset

    def get_chain(self, chain_id: str) -> Optional[WallChain]:
        for chain in self.chains:
            if chain.id == chain_id:
                return chain
        return None

    def to_dict(self) -> Dict:
        """Serialize to JSON-compatible dictionary."""
        return {
            "preset": self.options.preset.value,
            "options": self.options.to_dict(),
            "chains": [c.to_dict() for c in self.chains],
            "nodes": [n.to_dict() for n in self.nodes.values()],
            "stats": self.stats.to_dict(),
            "evaluations": [e.to_dict() for e in self.evaluations],
        }
