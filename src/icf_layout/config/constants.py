# File: src/icf_layout/config/constants.py

"""
Module dimensions and concrete-core options for the ICF layout engine.

All lengths are in millimetres. The fundamental unit ("TOOTH") is the module
width divided by 17; every cut and phase offset is expressed in multiples of it.
"""

import math
from enum import Enum
from typing import Dict

# Module (panel) dimensions
PANEL_WIDTH: float = 1200.0
PANEL_HEIGHT: float = 400.0

# Fundamental unit: module width / 17
TOOTH: float = PANEL_WIDTH / 17.0

# Smallest interval that still receives a panel
MIN_CUT_MM: float = 100.0

# Running-bond stagger applied at free chain starts on odd rows
STAGGER_OFFSET_MM: float = 600.0

# Chains shorter than this are not laid out
MIN_CHAIN_LENGTH_MM: float = 50.0

# Interior corner cut: exactly 4 fundamental units
CORNER_CUT_TOOTH: int = 4
CORNER_CUT_MM: float = CORNER_CUT_TOOTH * TOOTH

# Phase offset options for interior corner cuts (in TOOTH units)
PHASE_OFFSET_SMALL: float = 1.5
PHASE_OFFSET_LARGE: float = 2.5

# Opening-gap candidate width range
CANDIDATE_MIN_WIDTH_MM: float = 450.0
CANDIDATE_MAX_WIDTH_MM: float = 4000.0

# Closure ("topo") linear length per unit, used for quantity reporting
CLOSURE_UNIT_LENGTH_M: float = 0.4


class ConcreteCore(Enum):
    """Concrete core thickness options.

    The value is the core thickness in millimetres. Each option maps to a
    total wall thickness expressed in whole fundamental units.
    """
    CORE_150 = 150
    CORE_220 = 220


# Wall thickness (panel face to panel face) in TOOTH units per core
_WALL_THICKNESS_TOOTH: Dict[ConcreteCore, int] = {
    ConcreteCore.CORE_150: 4,
    ConcreteCore.CORE_220: 5,
}

# Stabilization grid length per unit (metres of wall covered)
GRID_COVERAGE_M: float = 3.0

# Web count per panel keyed by rebar spacing (cm)
WEBS_PER_PANEL: Dict[int, int] = {10: 4, 15: 3, 20: 2}


def wall_thickness_mm(core: ConcreteCore) -> float:
    """Total wall thickness for a concrete core option.

    Args:
        core: Concrete core option

    Returns:
        Wall thickness in millimetres (4 TOOTH for 150 mm, 5 TOOTH for 220 mm)
    """
    return _WALL_THICKNESS_TOOTH[core] * TOOTH


def closure_width_mm(core: ConcreteCore) -> float:
    """Width of a closure piece, which spans the concrete core."""
    return float(core.value)


def rows_for_height(wall_height_mm: float) -> int:
    """Number of module rows needed to reach a wall height."""
    if wall_height_mm <= 0:
        return 0
    return int(math.ceil(wall_height_mm / PANEL_HEIGHT - 1e-9))
