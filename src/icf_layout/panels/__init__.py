# File: src/icf_layout/panels/__init__.py

"""Panel layout module.

Lays out ICF modules and closure pieces along every chain and row, with
junction-aware end caps and opening subtraction, and computes the
interior L-corner cut offsets.

Usage:
    from icf_layout.panels import layout_panels, optimize_interior_corners

    layout = layout_panels(chains, topology, footprint, openings, config)
    adjustments = optimize_interior_corners(chains, topology.l_junctions, layout)
"""

from .panel_types import (
    PanelKind,
    PanelSide,
    PanelFace,
    CutEnd,
    ClosureReason,
    CornerRole,
    OpeningKind,
    ClassifiedPanel,
    FullPanel,
    CornerCutPanel,
    EndCutPanel,
    ClosurePlacement,
    CornerAdjustment,
    LayoutOverrides,
    OpeningData,
    PanelLayoutStats,
    PanelLayoutResult,
    is_valid_width,
)

from .openings import (
    affected_rows,
    remaining_intervals,
    openings_by_chain,
    validate_openings,
    opening_edge_closures,
)

from .panel_layout import (
    EndRole,
    EndContext,
    end_context,
    cap_pieces,
    face_side,
    fill_pieces,
    plan_interval,
    layout_panels,
)

from .corner_optimizer import (
    CornerArm,
    PanelScore,
    interior_node,
    score_panel,
    optimize_corner,
    optimize_interior_corners,
)

__all__ = [
    # Main entry points
    "layout_panels",
    "optimize_interior_corners",
    # Types
    "PanelKind",
    "PanelSide",
    "PanelFace",
    "CutEnd",
    "ClosureReason",
    "CornerRole",
    "OpeningKind",
    "ClassifiedPanel",
    "FullPanel",
    "CornerCutPanel",
    "EndCutPanel",
    "ClosurePlacement",
    "CornerAdjustment",
    "LayoutOverrides",
    "OpeningData",
    "PanelLayoutStats",
    "PanelLayoutResult",
    "is_valid_width",
    # Openings
    "affected_rows",
    "remaining_intervals",
    "openings_by_chain",
    "validate_openings",
    "opening_edge_closures",
    # Layout internals
    "EndRole",
    "EndContext",
    "end_context",
    "cap_pieces",
    "face_side",
    "fill_pieces",
    "plan_interval",
    # Corner optimizer
    "CornerArm",
    "PanelScore",
    "interior_node",
    "score_panel",
    "optimize_corner",
]
