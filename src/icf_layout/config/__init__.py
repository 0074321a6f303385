# File: src/icf_layout/config/__init__.py

"""
Configuration package for the ICF layout engine.
Provides a unified interface to:
- Module dimensions and concrete-core options
- Chain builder tolerance presets
- Layout run configuration
"""

from .constants import (
    PANEL_WIDTH,
    PANEL_HEIGHT,
    TOOTH,
    MIN_CUT_MM,
    STAGGER_OFFSET_MM,
    MIN_CHAIN_LENGTH_MM,
    CORNER_CUT_TOOTH,
    CORNER_CUT_MM,
    PHASE_OFFSET_SMALL,
    PHASE_OFFSET_LARGE,
    CANDIDATE_MIN_WIDTH_MM,
    CANDIDATE_MAX_WIDTH_MM,
    CLOSURE_UNIT_LENGTH_M,
    GRID_COVERAGE_M,
    WEBS_PER_PANEL,
    ConcreteCore,
    wall_thickness_mm,
    closure_width_mm,
    rows_for_height,
)

from .settings import (
    ChainPreset,
    ChainOptions,
    CornerMode,
    TOLERANCE_PRESETS,
    AUTO_TUNE_ORDER,
    GridSettings,
    LayoutConfig,
)


def get_system_info() -> dict:
    """
    Returns an overview of the module constants and tolerance presets.
    Useful for debugging and validation.
    """
    return {
        "panel_width_mm": PANEL_WIDTH,
        "panel_height_mm": PANEL_HEIGHT,
        "tooth_mm": TOOTH,
        "corner_cut_mm": CORNER_CUT_MM,
        "wall_thickness_mm": {
            core.value: wall_thickness_mm(core) for core in ConcreteCore
        },
        "presets": {
            preset.value: dict(values)
            for preset, values in TOLERANCE_PRESETS.items()
        },
    }


__all__ = [
    "PANEL_WIDTH",
    "PANEL_HEIGHT",
    "TOOTH",
    "MIN_CUT_MM",
    "STAGGER_OFFSET_MM",
    "MIN_CHAIN_LENGTH_MM",
    "CORNER_CUT_TOOTH",
    "CORNER_CUT_MM",
    "PHASE_OFFSET_SMALL",
    "PHASE_OFFSET_LARGE",
    "CANDIDATE_MIN_WIDTH_MM",
    "CANDIDATE_MAX_WIDTH_MM",
    "CLOSURE_UNIT_LENGTH_M",
    "GRID_COVERAGE_M",
    "WEBS_PER_PANEL",
    "ConcreteCore",
    "wall_thickness_mm",
    "closure_width_mm",
    "rows_for_height",
    "ChainPreset",
    "ChainOptions",
    "CornerMode",
    "TOLERANCE_PRESETS",
    "AUTO_TUNE_ORDER",
    "GridSettings",
    "LayoutConfig",
    "get_system_info",
]
