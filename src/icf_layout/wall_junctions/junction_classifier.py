# File: src/icf_layout/wall_junctions/junction_classifier.py

"""Junction classification from node degree and incident angles.

Consumes the nodes the chain builder produced (the graph is not rebuilt):

- degree 1: free end
- degree 2: inline when the two arms are colinear, otherwise an L-corner
- degree 3: T-junction when two arms are colinear (the first such pair is
  the main run), otherwise X-junction
- degree 4+: X-junction

L-corner roles come from the signed cross product of the two outward
directions after sorting the arms by angle, so they do not depend on
chain order.
"""

import math
import logging
from typing import List

from ..geometry.primitives import angles_colinear, cross, normalize_angle_full
from ..wall_chains.chain_types import ChainNode, ChainsResult
from .junction_types import (
    JunctionNode,
    JunctionType,
    LJunctionInfo,
    TJunctionInfo,
    TopologyResult,
)
from .opening_candidates import detect_opening_candidates

logger = logging.getLogger(__name__)


def _has_colinear_pair(angles: List[float], angle_tol_rad: float) -> bool:
    return any(
        angles_colinear(angles[i], angles[j], angle_tol_rad)
        for i in range(len(angles))
        for j in range(i + 1, len(angles))
    )


def classify_node(node: ChainNode, angle_tol_rad: float) -> JunctionType:
    """Junction type of a node from its degree and arm angles."""
    degree = node.degree
    if degree <= 1:
        return JunctionType.END
    if degree == 2:
        if angles_colinear(node.angles[0], node.angles[1], angle_tol_rad):
            return JunctionType.INLINE
        return JunctionType.L_CORNER
    if degree == 3 and _has_colinear_pair(node.angles, angle_tol_rad):
        return JunctionType.T_JUNCTION
    return JunctionType.X_JUNCTION


def assign_l_roles(node: ChainNode) -> LJunctionInfo:
    """Primary/secondary arms of an L-corner.

    Arms are sorted by outward angle in [0, 2*pi); if the cross product of
    (first, second) outward unit vectors is positive, the first arm is
    primary, otherwise the second.
    """
    arms = sorted(
        zip(node.angles, node.chain_ids),
        key=lambda arm: (normalize_angle_full(arm[0]), arm[1]),
    )
    (a1, c1), (a2, c2) = arms
    z = cross(math.cos(a1), math.sin(a1), math.cos(a2), math.sin(a2))
    if z > 0:
        primary, secondary = (a1, c1), (a2, c2)
    else:
        primary, secondary = (a2, c2), (a1, c1)
    return LJunctionInfo(
        node_id=node.id,
        position=node.position,
        primary_chain_id=primary[1],
        secondary_chain_id=secondary[1],
        primary_angle=primary[0],
        secondary_angle=secondary[0],
        cross=z,
    )


def assign_t_roles(node: ChainNode, angle_tol_rad: float):
    """Main pair and branch of a degree-3 node, or None when no arms are colinear."""
    for i, j in ((0, 1), (0, 2), (1, 2)):
        if angles_colinear(node.angles[i], node.angles[j], angle_tol_rad):
            branch = 3 - i - j
            return TJunctionInfo(
                node_id=node.id,
                position=node.position,
                main_chain_ids=(node.chain_ids[i], node.chain_ids[j]),
                branch_chain_id=node.chain_ids[branch],
                main_angle=node.angles[i],
                branch_angle=node.angles[branch],
            )
    return None


def classify_junctions(
    chains_result: ChainsResult,
    angle_tol_rad: float = None,
) -> TopologyResult:
    """Classify every chain-builder node and assign junction roles.

    Args:
        chains_result: Output of the chain builder.
        angle_tol_rad: Colinearity tolerance (defaults to the builder's).

    Returns:
        TopologyResult with classified nodes, role records and opening
        candidates.
    """
    if angle_tol_rad is None:
        angle_tol_rad = chains_result.options.angle_tol_rad

    result = TopologyResult()
    inline_nodes: List[str] = []

    for node_id in sorted(chains_result.nodes, key=lambda k: int(k.split("-")[-1])):
        node = chains_result.nodes[node_id]
        jtype = classify_node(node, angle_tol_rad)
        result.nodes[node_id] = JunctionNode(
            id=node.id,
            position=node.position,
            junction_type=jtype,
            chain_ids=list(node.chain_ids),
            angles=list(node.angles),
        )

        if jtype == JunctionType.L_CORNER:
            result.l_junctions.append(assign_l_roles(node))
        elif jtype == JunctionType.T_JUNCTION:
            result.t_junctions.append(assign_t_roles(node, angle_tol_rad))
        elif jtype == JunctionType.X_JUNCTION:
            if node.degree == 3:
                logger.debug("Node %s has degree 3 but no colinear pair; typed X", node.id)
            result.x_junction_ids.append(node.id)
        elif jtype == JunctionType.INLINE:
            inline_nodes.append(node.id)

    if inline_nodes:
        logger.warning(
            "%d pass-through nodes survived colinear reduction: %s",
            len(inline_nodes), ", ".join(inline_nodes),
        )

    if chains_result.detected_gaps:
        result.candidates = detect_opening_candidates(
            chains_result.chains, chains_result.detected_gaps, angle_tol_rad
        )

    counts = result.junction_counts
    logger.info(
        "Junctions: %d L, %d T, %d X, %d free ends, %d candidates",
        counts["L"], counts["T"], counts["X"], counts["end"], len(result.candidates),
    )
    return result
