# File: src/icf_layout/wall_chains/chain_builder.py

"""Wall chain consolidation pipeline.

Turns raw floor-plan segments into straight chains and junction nodes:

1. Noise filter
2. Endpoint snap (+ optional squaring of near-axis runs)
3. Duplicate removal
4. Axis-aligned overlap merge
5. Jog simplification
6. Gap bridging (also records opening-sized gaps)
7. Intersection splitting (X crossings and T touches)
8. Graph build
9. Iterative colinear degree-2 reduction

The surviving graph edges are the chains; surviving nodes are junctions.
``build_wall_chains_auto_tuned`` runs the pipeline once per tolerance
preset and keeps the best-scoring result.

All measurements are in millimetres.
"""

import math
import logging
from typing import Dict, List, Optional

import networkx as nx

from ..config.constants import PANEL_WIDTH
from ..config.settings import AUTO_TUNE_ORDER, ChainOptions, ChainPreset
from ..geometry.intersections import split_segments_at_intersections
from ..geometry.primitives import WallSegment, segment_angle
from .chain_graph import build_wall_graph, reduce_colinear
from .chain_types import (
    ChainNode,
    ChainsResult,
    ChainStats,
    PresetEvaluation,
    WallChain,
)
from .segment_cleanup import (
    bridge_gaps,
    dedup_segments,
    filter_noise,
    merge_axis_aligned_overlaps,
    simplify_jogs,
    snap_endpoints,
)

logger = logging.getLogger(__name__)

# Weight of the chain/segment ratio in the auto-tune score
CHAIN_RATIO_WEIGHT = 0.3

# Auto-tune warning threshold on the selected preset's waste (fraction)
HIGH_WASTE_THRESHOLD = 0.15


# =============================================================================
# Waste
# =============================================================================


def chain_module_usage(length_mm: float, module_mm: float = PANEL_WIDTH):
    """Modules supplied for a chain and the unused remainder.

    Returns:
        (modules, waste_mm) where waste is ``module - remainder`` when the
        chain is not an exact multiple of the module width.
    """
    if length_mm <= 0:
        return 0, 0.0
    remainder = math.fmod(length_mm, module_mm)
    if remainder < 1e-6 or module_mm - remainder < 1e-6:
        return int(round(length_mm / module_mm)), 0.0
    return int(math.floor(length_mm / module_mm)) + 1, module_mm - remainder


def calculate_waste(chains: List[WallChain], module_mm: float = PANEL_WIDTH):
    """Per-row module waste over a chain set.

    Waste per chain is the unused part of its last module. The fraction
    is total waste divided by total supplied module length.

    Returns:
        (waste_fraction, waste_per_row_mm, supplied_mm)
    """
    waste = 0.0
    supplied = 0.0
    for chain in chains:
        modules, chain_waste = chain_module_usage(chain.length_mm, module_mm)
        waste += chain_waste
        supplied += modules * module_mm
    if supplied <= 0:
        return 0.0, 0.0, 0.0
    return waste / supplied, waste, supplied


# =============================================================================
# Graph -> Chains
# =============================================================================


def _chains_from_graph(graph: nx.MultiGraph):
    """Convert a reduced wall graph into chains and nodes."""
    chains: List[WallChain] = []
    nodes: Dict[str, ChainNode] = {}

    def node_id(n: int) -> str:
        return f"node-{n}"

    for n in sorted(graph.nodes):
        if graph.degree(n) > 0:
            nodes[node_id(n)] = ChainNode(id=node_id(n), position=graph.nodes[n]["pos"])

    edges = sorted(
        graph.edges(keys=True, data=True),
        key=lambda e: (e[3]["a"], e[3]["b"], e[3]["segments"][0].id),
    )
    for i, (_, _, _, data) in enumerate(edges):
        start = graph.nodes[data["a"]]["pos"]
        end = graph.nodes[data["b"]]["pos"]
        chain = WallChain(
            id=f"chain-{i}",
            segments=list(data["segments"]),
            length_mm=start.distance_to(end),
            angle=segment_angle(start, end),
            start=start,
            end=end,
            start_node_id=node_id(data["a"]),
            end_node_id=node_id(data["b"]),
        )
        chains.append(chain)

        for end_name, nid in (("start", chain.start_node_id), ("end", chain.end_node_id)):
            node = nodes[nid]
            node.chain_ids.append(chain.id)
            node.angles.append(chain.outward_angle(end_name))
            node.ends.append(end_name)

    return chains, nodes


# =============================================================================
# Public API
# =============================================================================


def build_wall_chains(
    segments: List[WallSegment],
    options: Optional[ChainOptions] = None,
) -> ChainsResult:
    """Consolidate raw segments into chains under one tolerance profile.

    Args:
        segments: Raw floor-plan segments.
        options: Tolerance profile (defaults to the normal preset).

    Returns:
        ChainsResult with chains, nodes, detected gaps and stats.

    Raises:
        LayoutConfigError: If the options are invalid.
    """
    if options is None:
        options = ChainOptions.for_preset(ChainPreset.NORMAL)
    options.validate()

    angle_tol = options.angle_tol_rad
    stats = ChainStats(original_segments=len(segments))

    # 1) Noise filter
    current = filter_noise(segments, options.noise_min_mm)
    stats.after_noise = len(current)

    # 2) Snap endpoints
    current = snap_endpoints(
        current, options.snap_tol_mm, options.snap_orthogonal, angle_tol
    )
    stats.after_snap = len(current)

    # 3) Dedup
    current = dedup_segments(current)
    stats.after_dedup = len(current)

    # 4) Overlap merge
    current = merge_axis_aligned_overlaps(current, angle_tol, max(1.0, options.snap_tol_mm))
    stats.after_merge = len(current)

    # 5) Jogs
    current, _ = simplify_jogs(current, options.jog_max_mm, angle_tol)
    stats.after_jogs = len(current)

    # 6) Gap bridging
    before_bridge = len(current)
    current, gaps = bridge_gaps(
        current,
        options.gap_tol_mm,
        angle_tol,
        options.snap_tol_mm,
        options.candidate_min_width_mm,
        options.candidate_max_width_mm,
        options.detect_candidates,
    )
    stats.bridges_added = max(0, len(current) - before_bridge)
    stats.gaps_detected = len(gaps)

    # 7) Split at intersections
    current = split_segments_at_intersections(current, options.snap_tol_mm)
    stats.after_split = len(current)

    # 8) Graph build + 9) reduction
    graph = build_wall_graph(current, options.snap_tol_mm)
    iterations, capped = reduce_colinear(graph, angle_tol)
    stats.reduction_iterations = iterations
    stats.reduction_capped = capped

    chains, nodes = _chains_from_graph(graph)

    lengths = [c.length_mm for c in chains]
    stats.chains = len(chains)
    stats.total_length_mm = sum(lengths)
    stats.min_length_mm = min(lengths) if lengths else 0.0
    stats.max_length_mm = max(lengths) if lengths else 0.0
    stats.avg_length_mm = stats.total_length_mm / len(lengths) if lengths else 0.0
    if stats.original_segments > 0:
        stats.reduction_pct = (1 - len(chains) / stats.original_segments) * 100
    stats.waste_pct, stats.waste_per_row_mm, stats.supplied_length_mm = calculate_waste(chains)

    logger.info(
        "Chains (%s): %d segments -> %d chains (%.0f%% reduction), %.2f m, waste %.1f%%",
        options.preset.value,
        stats.original_segments,
        stats.chains,
        stats.reduction_pct,
        stats.total_length_mm / 1000.0,
        stats.waste_pct * 100,
    )
    logger.debug(
        "Stage counts: noise=%d snap=%d dedup=%d merge=%d jogs=%d split=%d, reduction iterations=%d",
        stats.after_noise, stats.after_snap, stats.after_dedup,
        stats.after_merge, stats.after_jogs, stats.after_split, iterations,
    )

    return ChainsResult(
        chains=chains,
        nodes=nodes,
        detected_gaps=gaps,
        stats=stats,
        options=options,
    )


def preset_score(result: ChainsResult) -> float:
    """Auto-tune score: waste fraction + 0.3 x chains / original segments (lower is better)."""
    ratio = result.stats.chains / max(1, result.stats.original_segments)
    return result.stats.waste_pct + CHAIN_RATIO_WEIGHT * ratio


def build_wall_chains_auto_tuned(segments: List[WallSegment]) -> ChainsResult:
    """Run the pipeline under every preset and keep the best-scoring result.

    Ties keep the earlier preset (conservative, normal, aggressive).
    Empty input returns an empty result under the normal preset.

    Args:
        segments: Raw floor-plan segments.

    Returns:
        Winning ChainsResult with ``evaluations`` for all presets.
    """
    if not segments:
        result = build_wall_chains(segments, ChainOptions.for_preset(ChainPreset.NORMAL))
        result.evaluations = [PresetEvaluation(ChainPreset.NORMAL, 0, 0.0, 0.0)]
        return result

    best: Optional[ChainsResult] = None
    best_score = math.inf
    evaluations: List[PresetEvaluation] = []

    for preset in AUTO_TUNE_ORDER:
        result = build_wall_chains(segments, ChainOptions.for_preset(preset))
        score = preset_score(result)
        evaluations.append(
            PresetEvaluation(preset, result.stats.chains, result.stats.waste_pct, score)
        )
        logger.debug(
            "Preset %s: chains=%d waste=%.1f%% score=%.3f",
            preset.value, result.stats.chains, result.stats.waste_pct * 100, score,
        )
        if score < best_score:
            best, best_score = result, score

    best.evaluations = evaluations
    logger.info(
        "Auto-tune selected %s (score %.3f, %d chains)",
        best.preset.value, best_score, best.stats.chains,
    )

    if best.stats.waste_pct > HIGH_WASTE_THRESHOLD:
        logger.warning(
            "Best preset %s still wastes %.1f%% of supplied modules; consider cleaning the drawing",
            best.preset.value, best.stats.waste_pct * 100,
        )
    if best.stats.chains >= best.stats.original_segments:
        logger.warning(
            "No chain consolidation occurred; segments may not share endpoints within tolerance"
        )

    return best
