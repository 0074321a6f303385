# File: src/icf_layout/footprint/half_edge.py

"""Half-edge planar graph over chains and face extraction.

Every chain contributes two directed half-edges that are each other's
twin. Nodes and half-edges live in flat lists and reference each other by
integer index. At each node the outgoing half-edges are sorted by angle,
and the successor of an incoming half-edge is the first outgoing half-edge
clockwise from the reverse of the incoming direction. Walking successors
traces face boundaries.
"""

import math
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..geometry.polygon import ensure_ccw, signed_area
from ..geometry.primitives import Point2D, normalize_angle_full
from ..geometry.snapping import SnapIndex
from ..wall_chains.chain_types import WallChain

logger = logging.getLogger(__name__)

# Faces with less area than this (mm^2) are discarded as slivers
MIN_FACE_AREA_MM2 = 1.0


@dataclass
class HalfEdge:
    """A directed chain traversal.

    Attributes:
        origin: Index of the node it leaves.
        target: Index of the node it enters.
        chain_id: Chain it traverses.
        angle: Direction angle in [0, 2*pi).
        twin: Index of the opposite half-edge.
        next: Index of the successor on the same face (-1 until linked).
    """

    origin: int
    target: int
    chain_id: str
    angle: float
    twin: int = -1
    next: int = -1


@dataclass
class HalfEdgeGraph:
    """Flat node and half-edge storage."""

    positions: List[Point2D] = field(default_factory=list)
    half_edges: List[HalfEdge] = field(default_factory=list)
    outgoing: List[List[int]] = field(default_factory=list)

    def _ensure_node(self, node: int, position: Point2D):
        while len(self.positions) <= node:
            self.positions.append(position)
            self.outgoing.append([])

    def add_chain(self, chain_id: str, a: int, b: int, pa: Point2D, pb: Point2D):
        self._ensure_node(a, pa)
        self._ensure_node(b, pb)
        forward = len(self.half_edges)
        angle = normalize_angle_full(math.atan2(pb.y - pa.y, pb.x - pa.x))
        self.half_edges.append(HalfEdge(a, b, chain_id, angle, twin=forward + 1))
        self.half_edges.append(
            HalfEdge(b, a, chain_id, normalize_angle_full(angle + math.pi), twin=forward)
        )
        self.outgoing[a].append(forward)
        self.outgoing[b].append(forward + 1)


def build_half_edge_graph(chains: List[WallChain], tolerance: float) -> HalfEdgeGraph:
    """Build the half-edge graph and link successors.

    Chain endpoints are clustered with a SnapIndex; chains whose ends fall
    into the same cluster are skipped.
    """
    index = SnapIndex(tolerance)
    graph = HalfEdgeGraph()

    for chain in chains:
        a = index.add(chain.start)
        b = index.add(chain.end)
        if a == b:
            continue
        graph.add_chain(chain.id, a, b, chain.start, chain.end)

    for node in range(len(graph.positions)):
        graph.positions[node] = index.position(node)
        graph.outgoing[node].sort(key=lambda h: graph.half_edges[h].angle)

    for h, edge in enumerate(graph.half_edges):
        edge.next = _successor(graph, h)

    return graph


def _successor(graph: HalfEdgeGraph, h: int) -> int:
    """First outgoing half-edge clockwise from the reverse of ``h``."""
    edge = graph.half_edges[h]
    options = graph.outgoing[edge.target]
    if len(options) == 1:
        return options[0]

    reverse = graph.half_edges[edge.twin].angle
    best: Optional[int] = None
    best_diff = math.inf
    for candidate in options:
        if candidate == edge.twin:
            continue
        diff = reverse - graph.half_edges[candidate].angle
        if diff <= 0:
            diff += 2 * math.pi
        if diff < best_diff:
            best, best_diff = candidate, diff
    return best if best is not None else edge.twin


def extract_faces(graph: HalfEdgeGraph) -> List[List[Point2D]]:
    """Walk every unvisited half-edge and collect bounded faces.

    Each walk is capped at ``len(half_edges) + 16`` steps. Faces with fewer
    than three vertices or negligible area are dropped; identical vertex
    cycles found from both sides are kept once. Returned faces are CCW.
    """
    visited = [False] * len(graph.half_edges)
    guard = len(graph.half_edges) + 16
    faces: List[List[Point2D]] = []
    seen = set()

    for start in range(len(graph.half_edges)):
        if visited[start]:
            continue
        cycle: List[int] = []
        h = start
        steps = 0
        while not visited[h] and steps < guard:
            visited[h] = True
            cycle.append(graph.half_edges[h].origin)
            h = graph.half_edges[h].next
            steps += 1

        if steps >= guard:
            logger.warning("Face walk from half-edge %d hit the step limit", start)
        if len(cycle) < 3:
            continue

        key = frozenset(cycle)
        if key in seen:
            continue

        polygon = [graph.positions[n] for n in cycle]
        if abs(signed_area(polygon)) < MIN_FACE_AREA_MM2:
            continue
        seen.add(key)
        faces.append(ensure_ccw(polygon))

    logger.debug("Extracted %d faces from %d half-edges", len(faces), len(graph.half_edges))
    return faces
