# File: src/icf_layout/wall_chains/chain_graph.py

"""Wall graph construction and colinear reduction.

Nodes are endpoint clusters addressed by integer id; edges carry the
segments they were built from. The graph is a networkx MultiGraph so two
distinct runs between the same pair of nodes stay separate edges. Merging
two edges is edge removal plus insertion, never pointer rewriting.

Edge data:
    a, b: Node ids in run order (start node, end node).
    segments: Contributing WallSegment list in run order.
"""

from typing import Dict, List, Tuple

import networkx as nx

from ..geometry.primitives import Point2D, WallSegment, angles_colinear, segment_angle
from ..geometry.snapping import SnapIndex
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


def build_wall_graph(segments: List[WallSegment], node_tol_mm: float) -> nx.MultiGraph:
    """Build the wall graph from segments.

    Args:
        segments: Cleaned, split segments.
        node_tol_mm: Endpoint clustering distance.

    Returns:
        MultiGraph with ``pos`` (Point2D) on nodes and ``a``/``b``/``segments``
        on edges. Self-loops are skipped.
    """
    index = SnapIndex(node_tol_mm)
    ends = [(index.add(s.start), index.add(s.end)) for s in segments]

    graph = nx.MultiGraph()
    for seg, (a, b) in zip(segments, ends):
        if a == b:
            continue
        graph.add_edge(a, b, a=a, b=b, segments=[seg])

    for node in graph.nodes:
        graph.nodes[node]["pos"] = index.position(node)

    return graph


def edge_angle(graph: nx.MultiGraph, data: Dict) -> float:
    """Normalized direction angle of an edge from its node positions."""
    return segment_angle(graph.nodes[data["a"]]["pos"], graph.nodes[data["b"]]["pos"])


def edge_length(graph: nx.MultiGraph, data: Dict) -> float:
    pa: Point2D = graph.nodes[data["a"]]["pos"]
    pb: Point2D = graph.nodes[data["b"]]["pos"]
    return pa.distance_to(pb)


def _oriented_segments(data: Dict, from_node: int) -> List[WallSegment]:
    """Edge segments ordered from ``from_node`` to the other node."""
    if data["a"] == from_node:
        return list(data["segments"])
    return list(reversed(data["segments"]))


def _mergeable_pair(
    graph: nx.MultiGraph, node: int, angle_tol_rad: float
) -> Tuple[Tuple, Tuple]:
    """The two incident edges of a node if they can merge through it, else ()."""
    if graph.degree(node) != 2:
        return ()
    incident = list(graph.edges(node, keys=True, data=True))
    if len(incident) != 2:
        return ()
    (u1, v1, k1, d1), (u2, v2, k2, d2) = incident
    far1 = v1 if u1 == node else u1
    far2 = v2 if u2 == node else u2
    if far1 == node or far2 == node or far1 == far2:
        return ()
    if not angles_colinear(edge_angle(graph, d1), edge_angle(graph, d2), angle_tol_rad):
        return ()
    return ((u1, v1, k1, d1, far1), (u2, v2, k2, d2, far2))


def reduce_colinear(
    graph: nx.MultiGraph,
    angle_tol_rad: float,
    max_iterations: int = 0,
) -> Tuple[int, bool]:
    """Merge colinear edge pairs through degree-2 nodes, in place.

    Repeats until no node qualifies or the iteration cap is reached.
    One iteration is one merge.

    Args:
        graph: Wall graph (mutated).
        angle_tol_rad: Colinearity tolerance.
        max_iterations: Merge cap; 0 derives it from the graph size.

    Returns:
        (iterations performed, True if the cap stopped the loop)
    """
    cap = max_iterations or (2 * graph.number_of_nodes() + 16)
    iterations = 0

    while True:
        merged_any = False
        for node in sorted(graph.nodes):
            if node not in graph:
                continue
            pair = _mergeable_pair(graph, node, angle_tol_rad)
            if not pair:
                continue
            if iterations >= cap:
                logger.warning(
                    "Colinear reduction stopped at iteration cap (%d); result may keep pass-through nodes",
                    cap,
                )
                return iterations, True
            (u1, v1, k1, d1, far1), (u2, v2, k2, d2, far2) = pair

            # far1 -> node -> far2
            segs = list(reversed(_oriented_segments(d1, node))) + _oriented_segments(d2, node)
            graph.remove_edge(u1, v1, key=k1)
            graph.remove_edge(u2, v2, key=k2)
            graph.remove_node(node)
            graph.add_edge(far1, far2, a=far1, b=far2, segments=segs)

            iterations += 1
            merged_any = True
            logger.trace("Merged through node %d -> edge %d-%d", node, far1, far2)

        if not merged_any:
            return iterations, False
