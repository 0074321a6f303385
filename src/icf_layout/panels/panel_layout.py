# File: src/icf_layout/panels/panel_layout.py

"""Per-chain, per-row panel layout.

For every chain, row and free interval (after openings are subtracted),
both faces of the wall receive the same sequence of modules:

1. End caps at interval edges that coincide with a chain end:
   - L-corner: one module flush to the vertex; full or corner-cut
     alternating by row and arm role
   - T branch: one module; corner-cut on even rows, full on odd rows
   - Free end: a closure-width reservation, plus a half-module stagger
     at the chain start on odd rows
   - T main run and X-junction: nothing reserved
2. Fill of the middle: whole modules from both ends toward the centre,
   with the single remainder piece placed between the two groups.

Closure reservations are planned before module caps, so a free-end
closure never overlaps a module on short walls. Closures are placed once
per interval, from the exterior face pass: free ends on every row, and on
odd rows one closure flush to each T-junction, X-junction and (in topo
corner mode) L-corner node.
"""

import math
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..config.constants import (
    MIN_CHAIN_LENGTH_MM,
    MIN_CUT_MM,
    PANEL_WIDTH,
    STAGGER_OFFSET_MM,
    TOOTH,
    closure_width_mm,
)
from ..config.settings import CornerMode, LayoutConfig
from ..footprint.footprint_types import ChainSideInfo, FootprintResult, SideClassification
from ..wall_chains.chain_types import WallChain
from ..wall_junctions.junction_types import JunctionType, TopologyResult
from .openings import (
    opening_edge_closures,
    openings_by_chain,
    remaining_intervals,
    validate_openings,
)
from .panel_types import (
    ClassifiedPanel,
    ClosurePlacement,
    ClosureReason,
    CornerCutPanel,
    CutEnd,
    EndCutPanel,
    FullPanel,
    OpeningData,
    PanelFace,
    PanelKind,
    PanelLayoutResult,
    PanelLayoutStats,
    PanelSide,
)

logger = logging.getLogger(__name__)

# Interval edges within this distance of a chain end are treated as that end
END_MATCH_TOL_MM = 1.0

# Fill remainders below this are dropped
MIN_REMAINDER_MM = 1.0

_EPS = 1e-6


class EndRole:
    """Junction role of a chain end."""

    NONE = "none"
    FREE = "free"
    L_PRIMARY = "l-primary"
    L_SECONDARY = "l-secondary"
    T_BRANCH = "t-branch"
    T_MAIN = "t-main"
    X = "x"


L_ROLES = (EndRole.L_PRIMARY, EndRole.L_SECONDARY)


@dataclass
class EndContext:
    """What a chain end touches.

    ``owner`` marks the one chain at a node that emits the node's closure
    (primary L arm, first main run of a T, first chain of an X).
    """

    role: str
    node_id: str
    owner: bool = False


@dataclass
class _CapPiece:
    width: float
    kind: Optional[PanelKind]  # None reserves space for a closure
    junction_id: str = ""


# =============================================================================
# Junction context
# =============================================================================


def end_context(chain: WallChain, end: CutEnd, topology: TopologyResult) -> EndContext:
    """Junction role of one chain end."""
    node_id = chain.start_node_id if end == CutEnd.START else chain.end_node_id
    node = topology.nodes.get(node_id)
    if node is None:
        return EndContext(EndRole.NONE, node_id)

    if node.junction_type == JunctionType.END:
        return EndContext(EndRole.FREE, node_id)
    if node.junction_type == JunctionType.L_CORNER:
        info = topology.l_junction_at(node_id)
        if info is not None and info.role_of(chain.id) == "primary":
            return EndContext(EndRole.L_PRIMARY, node_id, owner=True)
        if info is not None and info.role_of(chain.id) == "secondary":
            return EndContext(EndRole.L_SECONDARY, node_id)
    if node.junction_type == JunctionType.T_JUNCTION:
        info = topology.t_junction_at(node_id)
        if info is not None:
            if info.branch_chain_id == chain.id:
                return EndContext(EndRole.T_BRANCH, node_id)
            if chain.id in info.main_chain_ids:
                return EndContext(
                    EndRole.T_MAIN, node_id, owner=info.main_chain_ids[0] == chain.id
                )
    if node.junction_type == JunctionType.X_JUNCTION:
        return EndContext(EndRole.X, node_id, owner=node.chain_ids[0] == chain.id)
    return EndContext(EndRole.NONE, node_id)


def cap_pieces(ctx: EndContext, end: CutEnd, row: int, closure_mm: float) -> List[_CapPiece]:
    """Reserved pieces at a chain end, listed from the end inward."""
    even = row % 2 == 0
    if ctx.role in L_ROLES:
        primary_full = even == (ctx.role == EndRole.L_PRIMARY)
        kind = PanelKind.FULL if primary_full else PanelKind.CORNER_CUT
        return [_CapPiece(PANEL_WIDTH, kind, ctx.node_id)]
    if ctx.role == EndRole.T_BRANCH:
        kind = PanelKind.CORNER_CUT if even else PanelKind.FULL
        return [_CapPiece(PANEL_WIDTH, kind, ctx.node_id)]
    if ctx.role == EndRole.FREE:
        pieces = [_CapPiece(closure_mm, None, ctx.node_id)]
        if not even and end == CutEnd.START:
            pieces.append(_CapPiece(STAGGER_OFFSET_MM, PanelKind.END_CUT, ctx.node_id))
        return pieces
    return []


def face_side(face: PanelFace, side_info: Optional[ChainSideInfo]) -> PanelSide:
    """Exterior/interior label of a chain face."""
    if side_info is None:
        outside_positive = True
    elif side_info.classification == SideClassification.BOTH_INTERIOR:
        return PanelSide.INTERIOR
    else:
        outside_positive = side_info.outside_is_positive_perp
    if (face == PanelFace.POSITIVE) == outside_positive:
        return PanelSide.EXTERIOR
    return PanelSide.INTERIOR


# =============================================================================
# Interval planning
# =============================================================================


@dataclass
class _Piece:
    """A planned panel along the chain, before ids are assigned."""

    start: float
    end: float
    kind: PanelKind
    cut_mm: float = 0.0
    junction_id: str = ""
    cut_end: CutEnd = CutEnd.START


def _cap_piece_to_plan(cap: _CapPiece, start: float, width: float, end: CutEnd) -> _Piece:
    kind = cap.kind
    if kind == PanelKind.FULL and width < PANEL_WIDTH - _EPS:
        kind = PanelKind.END_CUT
    if kind == PanelKind.CORNER_CUT:
        return _Piece(start, start + width, kind, TOOTH, cap.junction_id, end)
    if kind == PanelKind.END_CUT:
        return _Piece(start, start + width, kind, PANEL_WIDTH - width, cap.junction_id, end)
    return _Piece(start, start + width, kind, 0.0, cap.junction_id, end)


def fill_pieces(start: float, end: float) -> List[_Piece]:
    """Whole modules from both ends with the remainder between the groups."""
    middle = end - start
    if middle < MIN_REMAINDER_MM:
        return []
    n = int(math.floor((middle + _EPS) / PANEL_WIDTH))
    remainder = max(0.0, middle - n * PANEL_WIDTH)
    n_left = n // 2

    pieces: List[_Piece] = []
    cursor = start
    for _ in range(n_left):
        pieces.append(_Piece(cursor, cursor + PANEL_WIDTH, PanelKind.FULL))
        cursor += PANEL_WIDTH
    if remainder >= MIN_REMAINDER_MM:
        pieces.append(
            _Piece(cursor, cursor + remainder, PanelKind.END_CUT, PANEL_WIDTH - remainder)
        )
        cursor += remainder
    for _ in range(n - n_left):
        pieces.append(_Piece(cursor, cursor + PANEL_WIDTH, PanelKind.FULL))
        cursor += PANEL_WIDTH
    return pieces


@dataclass
class IntervalPlan:
    """Panels and closure reservations for one interval.

    Attributes:
        pieces: Planned panels in chain order.
        reserved: Closure spans (start, end, chain end) left free of panels.
    """

    pieces: List[_Piece]
    reserved: List[Tuple[float, float, CutEnd]]


def _split_reservations(caps: Sequence[_CapPiece]) -> Tuple[float, List[_CapPiece]]:
    """Leading closure reservation width and the module caps behind it."""
    n = 0
    width = 0.0
    while n < len(caps) and caps[n].kind is None:
        width += caps[n].width
        n += 1
    return width, list(caps[n:])


def plan_interval(
    start: float,
    end: float,
    left_caps: Sequence[_CapPiece],
    right_caps: Sequence[_CapPiece],
) -> IntervalPlan:
    """Panels for one interval: closure reservations, caps, then the middle fill.

    Closure reservations at both ends are taken first; when the interval
    cannot hold both, they share it in proportion. Module caps are shrunk
    to what is left; a shrunk full cap becomes an end-cut.
    """
    available = end - start
    left_reserve, left_modules = _split_reservations(left_caps)
    right_reserve, right_modules = _split_reservations(right_caps)
    requested = left_reserve + right_reserve
    if requested > available > 0:
        left_reserve = available * left_reserve / requested
        right_reserve = available - left_reserve

    reserved: List[Tuple[float, float, CutEnd]] = []
    cursor_left = start
    cursor_right = end
    if left_reserve > _EPS:
        reserved.append((start, start + left_reserve, CutEnd.START))
        cursor_left += left_reserve
    if right_reserve > _EPS:
        reserved.append((end - right_reserve, end, CutEnd.END))
        cursor_right -= right_reserve

    left_plan: List[_Piece] = []
    right_plan: List[_Piece] = []

    for cap in left_modules:
        width = min(cap.width, cursor_right - cursor_left)
        if width <= _EPS:
            break
        left_plan.append(_cap_piece_to_plan(cap, cursor_left, width, CutEnd.START))
        cursor_left += width

    for cap in right_modules:
        width = min(cap.width, cursor_right - cursor_left)
        if width <= _EPS:
            break
        right_plan.append(_cap_piece_to_plan(cap, cursor_right - width, width, CutEnd.END))
        cursor_right -= width

    right_plan.reverse()
    pieces = left_plan + fill_pieces(cursor_left, cursor_right) + right_plan
    return IntervalPlan(pieces, reserved)


# =============================================================================
# Public API
# =============================================================================


def _make_panel(
    piece: _Piece,
    chain_id: str,
    row: int,
    side: PanelSide,
    face: PanelFace,
    slot: int,
) -> ClassifiedPanel:
    panel_id = f"{chain_id}:{row}:{side.value}:{slot}"
    common = dict(
        panel_id=panel_id,
        chain_id=chain_id,
        row=row,
        side=side,
        face=face,
        start_mm=piece.start,
        end_mm=piece.end,
        slot=slot,
    )
    if piece.kind == PanelKind.CORNER_CUT:
        return CornerCutPanel(
            **common, junction_id=piece.junction_id, cut_end=piece.cut_end, cut_mm=piece.cut_mm
        )
    if piece.kind == PanelKind.END_CUT:
        return EndCutPanel(**common, cut_mm=piece.cut_mm)
    return FullPanel(**common)


def _closure_face(sides: Dict[PanelFace, PanelSide]) -> PanelFace:
    for face in (PanelFace.POSITIVE, PanelFace.NEGATIVE):
        if sides[face] == PanelSide.EXTERIOR:
            return face
    return PanelFace.POSITIVE


def layout_panels(
    chains: List[WallChain],
    topology: TopologyResult,
    footprint: Optional[FootprintResult] = None,
    openings: Sequence[OpeningData] = (),
    config: Optional[LayoutConfig] = None,
) -> PanelLayoutResult:
    """Lay out panels and closures for every chain and row.

    Args:
        chains: Consolidated chains.
        topology: Classified junctions with L/T roles.
        footprint: Side classification (all chains treated as unresolved if None).
        openings: Doors and windows.
        config: Layout configuration (defaults if None).

    Returns:
        PanelLayoutResult with panels, closures and counters.
    """
    if config is None:
        config = LayoutConfig()
    rows = config.layout_rows
    closure_mm = closure_width_mm(config.core)
    openings = validate_openings(chains, openings)
    by_chain = openings_by_chain(openings)

    result = PanelLayoutResult(
        stats=PanelLayoutStats(
            rows=rows,
            l_junctions=len(topology.l_junctions),
            t_junctions=len(topology.t_junctions),
        )
    )

    for chain in chains:
        if chain.length_mm < MIN_CHAIN_LENGTH_MM:
            result.stats.chains_skipped += 1
            logger.debug("Skipping %s (%.1f mm)", chain.id, chain.length_mm)
            continue
        result.stats.chains_laid_out += 1

        side_info = footprint.side_of(chain.id) if footprint is not None else None
        sides = {face: face_side(face, side_info) for face in PanelFace}
        closure_face = _closure_face(sides)
        start_ctx = end_context(chain, CutEnd.START, topology)
        end_ctx = end_context(chain, CutEnd.END, topology)
        chain_openings = by_chain.get(chain.id, [])

        for row in range(rows):
            intervals = remaining_intervals(chain.length_mm, chain_openings, row)
            slots: Dict[PanelSide, int] = {}
            closure_count = 0

            for face in (PanelFace.POSITIVE, PanelFace.NEGATIVE):
                side = sides[face]
                for start, end in intervals:
                    if end - start < MIN_CUT_MM:
                        continue
                    at_start = abs(start) <= END_MATCH_TOL_MM
                    at_end = abs(end - chain.length_mm) <= END_MATCH_TOL_MM
                    left = cap_pieces(start_ctx, CutEnd.START, row, closure_mm) if at_start else []
                    right = cap_pieces(end_ctx, CutEnd.END, row, closure_mm) if at_end else []

                    plan = plan_interval(start, end, left, right)
                    for piece in plan.pieces:
                        slot = slots.get(side, 0)
                        slots[side] = slot + 1
                        result.panels.append(_make_panel(piece, chain.id, row, side, face, slot))

                    if face != closure_face:
                        continue

                    placed: List[ClosurePlacement] = []
                    for lo, hi, cut_end in plan.reserved:
                        ctx = start_ctx if cut_end == CutEnd.START else end_ctx
                        placed.append(ClosurePlacement(
                            closure_id="",
                            chain_id=chain.id,
                            row=row,
                            position_mm=(lo + hi) / 2,
                            width_mm=hi - lo,
                            reason=ClosureReason.FREE_END,
                            junction_id=ctx.node_id,
                        ))

                    for ctx, matched, position in (
                        (start_ctx, at_start, 0.0),
                        (end_ctx, at_end, chain.length_mm),
                    ):
                        if not matched:
                            continue
                        if ctx.role in L_ROLES:
                            result.stats.corner_templates_applied += 1
                        closure = _node_closure(
                            ctx, row, position, chain.id, closure_mm, config.corner_mode
                        )
                        if closure is not None:
                            placed.append(closure)

                    for closure in sorted(placed, key=lambda c: c.position_mm):
                        closure.closure_id = f"{chain.id}:{row}:topo:{closure_count}"
                        closure_count += 1
                        result.closures.append(closure)

    result.opening_closures = opening_edge_closures(chains, openings, closure_mm, rows)
    result.stats.closures_placed = len(result.closures)

    logger.info(
        "Panel layout: %d panels, %d closures over %d rows (%d chains, %d skipped)",
        len(result.panels), len(result.closures), rows,
        result.stats.chains_laid_out, result.stats.chains_skipped,
    )
    logger.debug("Panels by kind: %s", result.panels_by_kind)
    return result


# Closure reason per node role; emitted by the node's owner on odd rows
_NODE_CLOSURES = {
    EndRole.T_MAIN: ClosureReason.TEE_JUNCTION,
    EndRole.X: ClosureReason.CROSS_JUNCTION,
    EndRole.L_PRIMARY: ClosureReason.CORNER,
}


def _node_closure(
    ctx: EndContext,
    row: int,
    end_position: float,
    chain_id: str,
    closure_mm: float,
    corner_mode: CornerMode,
) -> Optional[ClosurePlacement]:
    """Closure flush to a junction node on a row, if that end receives one."""
    reason = _NODE_CLOSURES.get(ctx.role)
    if reason is None or not ctx.owner or row % 2 == 0:
        return None
    if reason == ClosureReason.CORNER and corner_mode != CornerMode.TOPO:
        return None
    return ClosurePlacement(
        closure_id="",
        chain_id=chain_id,
        row=row,
        position_mm=end_position,
        width_mm=closure_mm,
        reason=reason,
        junction_id=ctx.node_id,
    )
