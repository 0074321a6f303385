# File: src/icf_layout/panels/panel_types.py

"""Data models for panel layout.

Panels are a small class family keyed by ``kind``: each kind carries only
the fields that belong to it. Closure pieces are separate records.

Key Types:
    PanelKind: full / corner-cut / end-cut / topo-closure
    PanelSide: exterior or interior face
    PanelFace: positive or negative perpendicular of the chain
    ClassifiedPanel: Common panel fields
    FullPanel, CornerCutPanel, EndCutPanel: Panel variants
    ClosurePlacement: A closure piece ("topo")
    CornerAdjustment: Interior corner-cut parameters for one panel
    LayoutOverrides: Manual chain flips and locked panels
    OpeningData: A door or window on a chain
    PanelLayoutStats / PanelLayoutResult: Layout output

All measurements are in millimetres along the chain from its start.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional
from enum import Enum

from ..config.constants import PANEL_WIDTH


# =============================================================================
# Enumerations
# =============================================================================


class PanelKind(Enum):
    """Panel variants."""

    FULL = "full"
    """Uncut module."""

    CORNER_CUT = "corner-cut"
    """Module cut at an L-corner or T branch end."""

    END_CUT = "end-cut"
    """Module shortened to fill a remainder or stagger."""

    TOPO_CLOSURE = "topo-closure"
    """Closure piece; reported through ClosurePlacement records."""


class PanelSide(Enum):
    """Which side of the wall a panel faces."""

    EXTERIOR = "exterior"
    INTERIOR = "interior"


class PanelFace(Enum):
    """Perpendicular face of a chain (positive = 90 degrees clockwise)."""

    POSITIVE = "positive"
    NEGATIVE = "negative"


class CutEnd(Enum):
    """Chain end a cut or cap is attached to."""

    START = "start"
    END = "end"


class ClosureReason(Enum):
    """Why a closure piece was placed."""

    TEE_JUNCTION = "tee-junction"
    CROSS_JUNCTION = "x-junction"
    CORNER = "corner"
    FREE_END = "free-end"
    OPENING = "opening"


class CornerRole(Enum):
    """Role of an interior corner panel."""

    LEAD = "LEAD"
    SEAT = "SEAT"


class OpeningKind(Enum):
    DOOR = "door"
    WINDOW = "window"


# =============================================================================
# Panels
# =============================================================================


@dataclass
class ClassifiedPanel:
    """Fields common to every panel.

    Attributes:
        panel_id: Stable id ``"{chain_id}:{row}:{side}:{slot}"``.
        chain_id: Chain the panel belongs to.
        row: Module row (0 = bottom).
        side: Exterior or interior.
        face: Perpendicular face of the chain the panel sits on.
        start_mm: Start along the chain.
        end_mm: End along the chain.
        slot: Position counter within (chain, row, side).
    """

    panel_id: str
    chain_id: str
    row: int
    side: PanelSide
    face: PanelFace
    start_mm: float
    end_mm: float
    slot: int

    kind = PanelKind.FULL

    @property
    def length_mm(self) -> float:
        return self.end_mm - self.start_mm

    @property
    def center_mm(self) -> float:
        return (self.start_mm + self.end_mm) / 2

    def to_dict(self) -> Dict:
        return {
            "panel_id": self.panel_id,
            "kind": self.kind.value,
            "chain_id": self.chain_id,
            "row": self.row,
            "side": self.side.value,
            "face": self.face.value,
            "start_mm": round(self.start_mm, 3),
            "end_mm": round(self.end_mm, 3),
            "slot": self.slot,
        }


@dataclass
class FullPanel(ClassifiedPanel):
    """An uncut module."""

    kind = PanelKind.FULL


@dataclass
class CornerCutPanel(ClassifiedPanel):
    """A module cut at a corner or branch junction.

    Attributes:
        junction_id: Junction node the cut faces.
        cut_end: Chain end at that junction.
        cut_mm: Cut depth.
    """

    junction_id: str = ""
    cut_end: CutEnd = CutEnd.START
    cut_mm: float = 0.0

    kind = PanelKind.CORNER_CUT

    def to_dict(self) -> Dict:
        data = super().to_dict()
        data.update(
            junction_id=self.junction_id,
            cut_end=self.cut_end.value,
            cut_mm=round(self.cut_mm, 3),
        )
        return data


@dataclass
class EndCutPanel(ClassifiedPanel):
    """A module shortened by ``cut_mm``."""

    cut_mm: float = 0.0

    kind = PanelKind.END_CUT

    def to_dict(self) -> Dict:
        data = super().to_dict()
        data["cut_mm"] = round(self.cut_mm, 3)
        return data


@dataclass
class ClosurePlacement:
    """A closure piece ("topo") sealing the wall between its faces.

    Attributes:
        closure_id: ``"{chain_id}:{row}:topo:{n}"``.
        chain_id: Chain the closure sits on.
        row: Module row.
        position_mm: Centre of the closure along the chain.
        width_mm: Closure width (core thickness).
        reason: Why the closure was placed.
        junction_id: Junction node (None for opening closures).
    """

    closure_id: str
    chain_id: str
    row: int
    position_mm: float
    width_mm: float
    reason: ClosureReason
    junction_id: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "closure_id": self.closure_id,
            "chain_id": self.chain_id,
            "row": self.row,
            "position_mm": round(self.position_mm, 3),
            "width_mm": round(self.width_mm, 3),
            "reason": self.reason.value,
            "junction_id": self.junction_id,
        }


@dataclass
class CornerAdjustment:
    """Interior L-corner cut parameters for one panel.

    Panel offsets are never changed; this record only tells fabrication
    where the 4-unit cut is taken and with which phase offset.
    """

    panel_id: str
    junction_id: str
    role: CornerRole
    cut_mm: float
    cut_end: CutEnd
    offset_tooth: float
    offset_mm: float
    reference_panel_id: Optional[str] = None
    gap_error: float = 0.0
    overlap_penalty: float = 0.0
    step_penalty: float = 0.0
    h1_score: Optional[float] = None
    h2_score: Optional[float] = None
    chosen_hypothesis: str = "H1"
    reason: str = ""

    def to_dict(self) -> Dict:
        def rounded(value):
            return None if value is None else round(value, 3)

        return {
            "panel_id": self.panel_id,
            "junction_id": self.junction_id,
            "role": self.role.value,
            "cut_mm": round(self.cut_mm, 3),
            "cut_end": self.cut_end.value,
            "offset_tooth": self.offset_tooth,
            "offset_mm": round(self.offset_mm, 3),
            "reference_panel_id": self.reference_panel_id,
            "gap_error": round(self.gap_error, 3),
            "overlap_penalty": round(self.overlap_penalty, 3),
            "step_penalty": round(self.step_penalty, 3),
            "h1_score": rounded(self.h1_score),
            "h2_score": rounded(self.h2_score),
            "chosen_hypothesis": self.chosen_hypothesis,
            "reason": self.reason,
        }


# =============================================================================
# Inputs
# =============================================================================


@dataclass(frozen=True)
class LayoutOverrides:
    """User overrides, read-only during a run.

    Attributes:
        flipped_chain_ids: Chains whose exterior side is swapped.
        locked_panel_ids: Panels the corner optimizer must leave alone.
    """

    flipped_chain_ids: FrozenSet[str] = frozenset()
    locked_panel_ids: FrozenSet[str] = frozenset()

    @classmethod
    def create(
        cls,
        flipped_chain_ids: Iterable[str] = (),
        locked_panel_ids: Iterable[str] = (),
    ) -> "LayoutOverrides":
        return cls(frozenset(flipped_chain_ids), frozenset(locked_panel_ids))

    def to_dict(self) -> Dict:
        return {
            "flipped_chain_ids": sorted(self.flipped_chain_ids),
            "locked_panel_ids": sorted(self.locked_panel_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "LayoutOverrides":
        return cls.create(
            data.get("flipped_chain_ids", ()),
            data.get("locked_panel_ids", ()),
        )


@dataclass
class OpeningData:
    """A door or window cut out of a chain.

    Attributes:
        id: Opening identifier.
        chain_id: Host chain.
        offset_mm: Start of the opening along the chain.
        width_mm: Opening width.
        sill_mm: Height of the opening bottom above the floor.
        height_mm: Opening height.
        kind: Door or window.
    """

    id: str
    chain_id: str
    offset_mm: float
    width_mm: float
    sill_mm: float = 0.0
    height_mm: float = 2100.0
    kind: OpeningKind = OpeningKind.DOOR

    def __post_init__(self):
        if isinstance(self.kind, str):
            self.kind = OpeningKind(self.kind)

    @property
    def end_mm(self) -> float:
        return self.offset_mm + self.width_mm

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "chain_id": self.chain_id,
            "offset_mm": self.offset_mm,
            "width_mm": self.width_mm,
            "sill_mm": self.sill_mm,
            "height_mm": self.height_mm,
            "kind": self.kind.value,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "OpeningData":
        return cls(
            id=data["id"],
            chain_id=data["chain_id"],
            offset_mm=float(data["offset_mm"]),
            width_mm=float(data["width_mm"]),
            sill_mm=float(data.get("sill_mm", 0.0)),
            height_mm=float(data.get("height_mm", 2100.0)),
            kind=data.get("kind", "door"),
        )


# =============================================================================
# Output
# =============================================================================


@dataclass
class PanelLayoutStats:
    """Counters for one layout run."""

    chains_laid_out: int = 0
    chains_skipped: int = 0
    rows: int = 0
    l_junctions: int = 0
    t_junctions: int = 0
    corner_templates_applied: int = 0
    closures_placed: int = 0

    def to_dict(self) -> Dict:
        return {
            "chains_laid_out": self.chains_laid_out,
            "chains_skipped": self.chains_skipped,
            "rows": self.rows,
            "l_junctions": self.l_junctions,
            "t_junctions": self.t_junctions,
            "corner_templates_applied": self.corner_templates_applied,
            "closures_placed": self.closures_placed,
        }


@dataclass
class PanelLayoutResult:
    """Complete panel layout.

    Attributes:
        panels: Panels ordered by chain, row, side and start.
        closures: Junction and free-end closures.
        opening_closures: Closures at opening edges.
        stats: Layout counters.
    """

    panels: List[ClassifiedPanel] = field(default_factory=list)
    closures: List[ClosurePlacement] = field(default_factory=list)
    opening_closures: List[ClosurePlacement] = field(default_factory=list)
    stats: PanelLayoutStats = field(default_factory=PanelLayoutStats)

    @property
    def panels_by_kind(self) -> Dict[str, int]:
        counts = {k.value: 0 for k in PanelKind}
        for panel in self.panels:
            counts[panel.kind.value] += 1
        counts[PanelKind.TOPO_CLOSURE.value] = len(self.closures)
        return counts

    def panels_for(self, chain_id: str, row: int) -> List[ClassifiedPanel]:
        return [p for p in self.panels if p.chain_id == chain_id and p.row == row]

    def get_panel(self, panel_id: str) -> Optional[ClassifiedPanel]:
        for panel in self.panels:
            if panel.panel_id == panel_id:
                return panel
        return None

    def to_dict(self) -> Dict:
        """Serialize to JSON-compatible dictionary."""
        return {
            "panels": [p.to_dict() for p in self.panels],
            "closures": [c.to_dict() for c in self.closures],
            "opening_closures": [c.to_dict() for c in self.opening_closures],
            "panels_by_kind": self.panels_by_kind,
            "stats": self.stats.to_dict(),
        }


def is_valid_width(panel: ClassifiedPanel, tolerance: float = 1e-6) -> bool:
    """True when a panel is no wider than one module."""
    return 0 < panel.length_mm <= PANEL_WIDTH + tolerance
