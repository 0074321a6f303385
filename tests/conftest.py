# File: tests/conftest.py

"""Shared fixtures for layout engine tests.

Provides floor plans as raw wall segments: a closed rectangle, a
rectangle with an interior partition, open L, T and X configurations,
and a fragmented, noisy rectangle as a drafting program would export it.
"""

import os
import sys
from typing import List, Sequence, Tuple

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from icf_layout.config.settings import LayoutConfig  # noqa: E402
from icf_layout.geometry.primitives import WallSegment  # noqa: E402


# =============================================================================
# Helpers
# =============================================================================


def make_segments(coords: Sequence[Tuple[float, float, float, float]], prefix: str = "w") -> List[WallSegment]:
    """Build segments ``w0, w1, ...`` from (x1, y1, x2, y2) tuples."""
    return [
        WallSegment.from_coords(f"{prefix}{i}", x1, y1, x2, y2)
        for i, (x1, y1, x2, y2) in enumerate(coords)
    ]


def chain_on_line(chains, y=None, x=None, tol=1.0):
    """First chain lying on a horizontal (y=) or vertical (x=) line."""
    for chain in chains:
        if y is not None and abs(chain.start.y - y) < tol and abs(chain.end.y - y) < tol:
            return chain
        if x is not None and abs(chain.start.x - x) < tol and abs(chain.end.x - x) < tol:
            return chain
    return None


# =============================================================================
# Floor plans
# =============================================================================


@pytest.fixture
def rectangle_segments():
    """Closed 6000 x 4000 mm rectangle, one segment per side."""
    return make_segments([
        (0, 0, 6000, 0),
        (6000, 0, 6000, 4000),
        (6000, 4000, 0, 4000),
        (0, 4000, 0, 0),
    ])


@pytest.fixture
def partitioned_segments(rectangle_segments):
    """The rectangle split into two rooms by a wall at x = 3000."""
    return rectangle_segments + make_segments([(3000, 0, 3000, 4000)], prefix="p")


@pytest.fixture
def l_segments():
    """Open L-corner at the origin: 4000 mm east arm, 3000 mm north arm."""
    return make_segments([
        (0, 0, 4000, 0),
        (0, 0, 0, 3000),
    ])


@pytest.fixture
def t_segments():
    """T-junction: 6000 mm main run with a 3000 mm branch at its midpoint."""
    return make_segments([
        (0, 0, 6000, 0),
        (3000, 0, 3000, 3000),
    ])


@pytest.fixture
def x_segments():
    """Two 4000 mm walls crossing at (2000, 0)."""
    return make_segments([
        (0, 0, 4000, 0),
        (2000, -2000, 2000, 2000),
    ])


@pytest.fixture
def straight_segments():
    """A single 3000 mm free-standing wall."""
    return make_segments([(0, 0, 3000, 0)])


@pytest.fixture
def fragmented_rectangle_segments():
    """The 6000 x 4000 rectangle drawn in pieces with drafting noise.

    Sides are split into colinear fragments, endpoints drift by a few
    millimetres, one fragment is duplicated and a 30 mm sliver is left over.
    """
    return make_segments([
        (0, 0, 2500, 0),
        (2500, 0, 6000, 0),
        (2500, 0, 6000, 0),
        (6003, 2, 6000, 2000),
        (6000, 2000, 5998, 4000),
        (6000, 4000, 3000, 4003),
        (3000, 4003, 0, 4000),
        (2, 3998, 0, 0),
        (1000, 1000, 1030, 1000),
    ])


@pytest.fixture
def short_config():
    """Two-row wall (800 mm) to keep layouts small."""
    return LayoutConfig(wall_height_mm=800.0)
