# File: src/icf_layout/wall_chains/__init__.py

"""Wall chain consolidation module.

Cleans fragmented, noisy floor-plan segments and reduces them to straight
chains joined at junction nodes, optionally auto-tuning the tolerance
profile across three presets.

Usage:
    from icf_layout.wall_chains import build_wall_chains_auto_tuned

    result = build_wall_chains_auto_tuned(segments)
    print(result.preset, len(result.chains), result.stats.waste_pct)
"""

from .chain_types import (
    WallChain,
    ChainNode,
    DetectedGap,
    ChainStats,
    PresetEvaluation,
    ChainsResult,
)

from .segment_cleanup import (
    filter_noise,
    snap_endpoints,
    square_clusters,
    dedup_segments,
    merge_axis_aligned_overlaps,
    simplify_jogs,
    bridge_gaps,
)

from .chain_graph import build_wall_graph, reduce_colinear

from .chain_builder import (
    build_wall_chains,
    build_wall_chains_auto_tuned,
    calculate_waste,
    chain_module_usage,
    preset_score,
)

from .thickness_detector import (
    DetectionConfidence,
    ThicknessDetection,
    detect_core_thickness,
    pair_spacings,
)

__all__ = [
    # Main entry points
    "build_wall_chains",
    "build_wall_chains_auto_tuned",
    # Types
    "WallChain",
    "ChainNode",
    "DetectedGap",
    "ChainStats",
    "PresetEvaluation",
    "ChainsResult",
    # Stages
    "filter_noise",
    "snap_endpoints",
    "square_clusters",
    "dedup_segments",
    "merge_axis_aligned_overlaps",
    "simplify_jogs",
    "bridge_gaps",
    "build_wall_graph",
    "reduce_colinear",
    # Waste / scoring
    "calculate_waste",
    "chain_module_usage",
    "preset_score",
    # Core detection
    "detect_core_thickness",
    "pair_spacings",
    "ThicknessDetection",
    "DetectionConfidence",
]
