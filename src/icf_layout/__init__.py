# File: src/icf_layout/__init__.py

"""ICF wall layout engine.

Turns raw floor-plan wall centerlines into consolidated chains, classified
junctions, exterior/interior sides, a per-row layout of ICF modules and
closure pieces, interior corner-cut parameters, and a materials summary.

Usage:
    from icf_layout import run_layout, WallSegment

    segments = [WallSegment.from_coords("w1", 0, 0, 6000, 0), ...]
    result = run_layout(segments)
    print(result.layout.panels_by_kind)
"""

from .errors import LayoutError, LayoutConfigError
from .config import (
    ChainOptions,
    ChainPreset,
    ConcreteCore,
    CornerMode,
    GridSettings,
    LayoutConfig,
)
from .geometry import Point2D, WallSegment
from .panels import LayoutOverrides, OpeningData
from .pipeline import LayoutResult, build_chains, run_layout
from .wall_chains import ThicknessDetection, detect_core_thickness

__version__ = "0.1.0"

__all__ = [
    "run_layout",
    "build_chains",
    "LayoutResult",
    "LayoutError",
    "LayoutConfigError",
    "ChainOptions",
    "ChainPreset",
    "ConcreteCore",
    "CornerMode",
    "GridSettings",
    "LayoutConfig",
    "Point2D",
    "WallSegment",
    "LayoutOverrides",
    "OpeningData",
    "ThicknessDetection",
    "detect_core_thickness",
]
