# File: src/icf_layout/config/settings.py
"""
Tolerance presets and layout configuration.

The chain builder runs under a tolerance profile (snap, gap, angle, noise,
jog). Three named presets cover drafting quality from clean to messy, and
the auto-tuner picks between them. LayoutConfig carries everything else the
panel layout and quantity summary need.

Example:
    >>> options = ChainOptions.for_preset("aggressive")
    >>> options.snap_tol_mm
    40.0
    >>> config = LayoutConfig(wall_height_mm=2800.0, core=ConcreteCore.CORE_220)
    >>> config.validate()
    []
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from enum import Enum

from ..errors import LayoutConfigError
from .constants import (
    CANDIDATE_MAX_WIDTH_MM,
    CANDIDATE_MIN_WIDTH_MM,
    WEBS_PER_PANEL,
    ConcreteCore,
    rows_for_height,
)


class ChainPreset(Enum):
    """Named tolerance presets for chain building.

    Attributes:
        CONSERVATIVE: Tight tolerances for clean drawings
        NORMAL: Default tolerances
        AGGRESSIVE: Loose tolerances for fragmented, noisy drawings
        CUSTOM: Caller supplied values
    """
    CONSERVATIVE = "conservative"
    NORMAL = "normal"
    AGGRESSIVE = "aggressive"
    CUSTOM = "custom"


class CornerMode(Enum):
    """How L-corners are finished.

    Attributes:
        OVERLAP_CUT: Alternating full and corner-cut modules only
        TOPO: Also seal the corner with a closure piece on odd rows
    """
    OVERLAP_CUT = "overlap-cut"
    TOPO = "topo"


# Order matters: auto-tuning keeps the earlier preset on score ties
AUTO_TUNE_ORDER = (ChainPreset.CONSERVATIVE, ChainPreset.NORMAL, ChainPreset.AGGRESSIVE)


@dataclass
class ChainOptions:
    """Tolerance profile for the chain builder.

    Attributes:
        snap_tol_mm: Endpoint clustering distance
        gap_tol_mm: Largest gap bridged between free endpoints
        angle_tol_deg: Colinearity tolerance in degrees
        noise_min_mm: Segments shorter than this are dropped
        jog_max_mm: Longest segment treated as a drafting jog
        snap_orthogonal: Snap near-axis segments to exact horizontal/vertical
        detect_candidates: Record larger gaps as opening candidates
        candidate_min_width_mm: Smallest gap reported as an opening candidate
        candidate_max_width_mm: Largest gap reported as an opening candidate
        preset: Preset these values came from
    """
    snap_tol_mm: float = 25.0
    gap_tol_mm: float = 50.0
    angle_tol_deg: float = 5.0
    noise_min_mm: float = 80.0
    jog_max_mm: float = 150.0
    snap_orthogonal: bool = True
    detect_candidates: bool = True
    candidate_min_width_mm: float = CANDIDATE_MIN_WIDTH_MM
    candidate_max_width_mm: float = CANDIDATE_MAX_WIDTH_MM
    preset: ChainPreset = field(default_factory=lambda: ChainPreset.CUSTOM)

    def __post_init__(self):
        """Convert preset string to enum if needed."""
        if isinstance(self.preset, str):
            self.preset = ChainPreset(self.preset)

    @property
    def angle_tol_rad(self) -> float:
        """Colinearity tolerance in radians."""
        return math.radians(self.angle_tol_deg)

    def validate(self) -> List[str]:
        """Validate tolerance values.

        Returns:
            List of validation error messages (empty if valid)

        Raises:
            LayoutConfigError: If any validation fails
        """
        errors = []

        if self.snap_tol_mm <= 0:
            errors.append("snap_tol_mm must be positive")
        if self.gap_tol_mm < 0:
            errors.append("gap_tol_mm cannot be negative")
        if not 0 < self.angle_tol_deg < 45:
            errors.append(
                f"angle_tol_deg ({self.angle_tol_deg}) must be in (0, 45)"
            )
        if self.noise_min_mm < 0:
            errors.append("noise_min_mm cannot be negative")
        if self.jog_max_mm < 0:
            errors.append("jog_max_mm cannot be negative")
        if self.candidate_min_width_mm > self.candidate_max_width_mm:
            errors.append(
                f"candidate_min_width_mm ({self.candidate_min_width_mm}) cannot "
                f"exceed candidate_max_width_mm ({self.candidate_max_width_mm})"
            )

        if errors:
            raise LayoutConfigError("ChainOptions", errors)

        return errors

    def to_dict(self) -> dict:
        """Convert options to dictionary for JSON serialization."""
        return {
            "snap_tol_mm": self.snap_tol_mm,
            "gap_tol_mm": self.gap_tol_mm,
            "angle_tol_deg": self.angle_tol_deg,
            "noise_min_mm": self.noise_min_mm,
            "jog_max_mm": self.jog_max_mm,
            "snap_orthogonal": self.snap_orthogonal,
            "detect_candidates": self.detect_candidates,
            "candidate_min_width_mm": self.candidate_min_width_mm,
            "candidate_max_width_mm": self.candidate_max_width_mm,
            "preset": self.preset.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ChainOptions":
        """Create options from dictionary.

        A ``preset`` key selects the preset's values as defaults; explicit
        keys override them.
        """
        base = cls.for_preset(data["preset"]) if data.get("preset") else cls()
        return cls(
            snap_tol_mm=data.get("snap_tol_mm", base.snap_tol_mm),
            gap_tol_mm=data.get("gap_tol_mm", base.gap_tol_mm),
            angle_tol_deg=data.get("angle_tol_deg", base.angle_tol_deg),
            noise_min_mm=data.get("noise_min_mm", base.noise_min_mm),
            jog_max_mm=data.get("jog_max_mm", base.jog_max_mm),
            snap_orthogonal=data.get("snap_orthogonal", base.snap_orthogonal),
            detect_candidates=data.get("detect_candidates", base.detect_candidates),
            candidate_min_width_mm=data.get(
                "candidate_min_width_mm", base.candidate_min_width_mm
            ),
            candidate_max_width_mm=data.get(
                "candidate_max_width_mm", base.candidate_max_width_mm
            ),
            preset=base.preset,
        )

    @classmethod
    def for_preset(cls, preset) -> "ChainOptions":
        """Create options from a named preset.

        Args:
            preset: ChainPreset or its string value

        Returns:
            ChainOptions with the preset's tolerances

        Raises:
            LayoutConfigError: If the preset name is unknown
        """
        try:
            key = preset if isinstance(preset, ChainPreset) else ChainPreset(preset)
        except ValueError:
            raise LayoutConfigError(
                "ChainOptions", [f"unknown preset '{preset}'"]
            ) from None
        if key not in TOLERANCE_PRESETS:
            raise LayoutConfigError(
                "ChainOptions", [f"preset '{key.value}' has no tolerance table"]
            )
        values = TOLERANCE_PRESETS[key]
        return cls(preset=key, **values)


# snap, gap, angle, noise, jog per preset
TOLERANCE_PRESETS: Dict[ChainPreset, Dict[str, float]] = {
    ChainPreset.CONSERVATIVE: {
        "snap_tol_mm": 10.0,
        "gap_tol_mm": 20.0,
        "angle_tol_deg": 3.0,
        "noise_min_mm": 80.0,
        "jog_max_mm": 80.0,
    },
    ChainPreset.NORMAL: {
        "snap_tol_mm": 25.0,
        "gap_tol_mm": 50.0,
        "angle_tol_deg": 5.0,
        "noise_min_mm": 80.0,
        "jog_max_mm": 150.0,
    },
    ChainPreset.AGGRESSIVE: {
        "snap_tol_mm": 40.0,
        "gap_tol_mm": 100.0,
        "angle_tol_deg": 10.0,
        "noise_min_mm": 60.0,
        "jog_max_mm": 300.0,
    },
}


@dataclass
class GridSettings:
    """Which rows receive stabilization grids.

    Attributes:
        base: First row
        mid: Middle row (only when there are more than two rows)
        top: Last row (only when there is more than one row)
    """
    base: bool = True
    mid: bool = False
    top: bool = True

    def rows(self, number_of_rows: int) -> List[int]:
        """Row indices that receive grids, ascending and unique."""
        selected = set()
        if number_of_rows <= 0:
            return []
        if self.base:
            selected.add(0)
        if self.mid and number_of_rows > 2:
            selected.add(number_of_rows // 2)
        if self.top and number_of_rows > 1:
            selected.add(number_of_rows - 1)
        return sorted(selected)


@dataclass
class LayoutConfig:
    """Configuration for a full layout run.

    Attributes:
        wall_height_mm: Wall height; sets the number of module rows
        core: Concrete core thickness option
        visible_rows: Limit on laid-out rows (None lays out every row)
        rebar_spacing_cm: Rebar spacing, sets webs per panel (10, 15 or 20)
        grids: Stabilization grid row selection
        node_tolerance_mm: Distance within which a chain end matches a node
        footprint_candidates: Number of faces evaluated as outer footprint
        side_offsets_mm: Escalating perpendicular sample distances
        corner_mode: L-corner finishing (closure pieces in topo mode)

    Example:
        >>> config = LayoutConfig(wall_height_mm=2400.0)
        >>> config.rows
        6
    """
    wall_height_mm: float = 2800.0
    core: ConcreteCore = field(default_factory=lambda: ConcreteCore.CORE_150)
    visible_rows: Optional[int] = None
    rebar_spacing_cm: int = 15
    grids: GridSettings = field(default_factory=GridSettings)
    node_tolerance_mm: float = 20.0
    footprint_candidates: int = 5
    side_offsets_mm: tuple = (150.0, 300.0, 600.0)
    corner_mode: CornerMode = field(default_factory=lambda: CornerMode.OVERLAP_CUT)

    def __post_init__(self):
        """Convert core and corner mode values to enums and grid dict to GridSettings."""
        if isinstance(self.core, int):
            self.core = ConcreteCore(self.core)
        if isinstance(self.grids, dict):
            self.grids = GridSettings(**self.grids)
        if isinstance(self.corner_mode, str):
            self.corner_mode = CornerMode(self.corner_mode)
        self.side_offsets_mm = tuple(self.side_offsets_mm)

    @property
    def rows(self) -> int:
        """Total module rows for the wall height."""
        return rows_for_height(self.wall_height_mm)

    @property
    def layout_rows(self) -> int:
        """Rows actually laid out (visible rows clamp the total)."""
        if self.visible_rows is None:
            return self.rows
        return max(0, min(self.visible_rows, self.rows))

    def validate(self) -> List[str]:
        """Validate configuration parameters.

        Returns:
            List of validation error messages (empty if valid)

        Raises:
            LayoutConfigError: If any validation fails
        """
        errors = []

        if self.wall_height_mm <= 0:
            errors.append("wall_height_mm must be positive")
        if self.visible_rows is not None and self.visible_rows < 0:
            errors.append("visible_rows cannot be negative")
        if self.rebar_spacing_cm not in WEBS_PER_PANEL:
            errors.append(
                f"rebar_spacing_cm ({self.rebar_spacing_cm}) must be one of "
                f"{sorted(WEBS_PER_PANEL)}"
            )
        if self.node_tolerance_mm <= 0:
            errors.append("node_tolerance_mm must be positive")
        if self.footprint_candidates < 1:
            errors.append("footprint_candidates must be at least 1")
        if not self.side_offsets_mm:
            errors.append("side_offsets_mm cannot be empty")
        elif any(o <= 0 for o in self.side_offsets_mm):
            errors.append("side_offsets_mm values must be positive")
        elif list(self.side_offsets_mm) != sorted(self.side_offsets_mm):
            errors.append("side_offsets_mm must be ascending")

        if errors:
            raise LayoutConfigError("LayoutConfig", errors)

        return errors

    def to_dict(self) -> dict:
        """Convert config to dictionary for JSON serialization."""
        return {
            "wall_height_mm": self.wall_height_mm,
            "core": self.core.value,
            "visible_rows": self.visible_rows,
            "rebar_spacing_cm": self.rebar_spacing_cm,
            "grids": {
                "base": self.grids.base,
                "mid": self.grids.mid,
                "top": self.grids.top,
            },
            "node_tolerance_mm": self.node_tolerance_mm,
            "footprint_candidates": self.footprint_candidates,
            "side_offsets_mm": list(self.side_offsets_mm),
            "corner_mode": self.corner_mode.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LayoutConfig":
        """Create config from dictionary.

        Args:
            data: Dictionary with config parameters

        Returns:
            LayoutConfig instance
        """
        return cls(
            wall_height_mm=data.get("wall_height_mm", 2800.0),
            core=ConcreteCore(data.get("core", 150)),
            visible_rows=data.get("visible_rows"),
            rebar_spacing_cm=data.get("rebar_spacing_cm", 15),
            grids=GridSettings(**data.get("grids", {})),
            node_tolerance_mm=data.get("node_tolerance_mm", 20.0),
            footprint_candidates=data.get("footprint_candidates", 5),
            side_offsets_mm=tuple(data.get("side_offsets_mm", (150.0, 300.0, 600.0))),
            corner_mode=CornerMode(data.get("corner_mode", CornerMode.OVERLAP_CUT.value)),
        )
