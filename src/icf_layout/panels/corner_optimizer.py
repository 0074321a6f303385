# File: src/icf_layout/panels/corner_optimizer.py

"""Interior L-corner cut offsets.

At every L-corner the two interior panels adjacent to the vertex receive a
4-unit cut, taken at a phase offset of 1.5 or 2.5 units from the panel's
near edge. Two hypotheses are scored against the exterior panels of the
opposite arms:

    H1: LEAD (primary arm) 2.5, SEAT (secondary arm) 1.5
    H2: LEAD 1.5, SEAT 2.5

Lower total error wins. Panel positions and sides are never changed; the
result is a map of adjustment records keyed by panel id.
"""

import math
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..config.constants import (
    CORNER_CUT_MM,
    PHASE_OFFSET_LARGE,
    PHASE_OFFSET_SMALL,
    TOOTH,
    ConcreteCore,
    wall_thickness_mm,
)
from ..geometry.primitives import Point2D, cross
from ..wall_chains.chain_types import WallChain
from ..wall_junctions.junction_types import LJunctionInfo
from .panel_types import (
    ClassifiedPanel,
    CornerAdjustment,
    CornerRole,
    CutEnd,
    PanelFace,
    PanelLayoutResult,
    PanelSide,
)

logger = logging.getLogger(__name__)

# Panels whose near edge is within this distance of the vertex are corner panels
ADJACENT_TOL_MM = 2 * TOOTH

# Hypotheses closer than this are decided by proximity to the interior node
NEAR_TIE_THRESHOLD = 15.0

OVERLAP_PENALTY = 50.0
OVERLAP_WEIGHT = 100.0
STEP_WEIGHT = 10.0

REASON_SCORED = "scored"
REASON_NEAR_TIE = "near-tie-closer"
REASON_NEAR_TIE_LEAD = "near-tie-lead"
REASON_NO_REFERENCE = "no-reference"


@dataclass
class CornerArm:
    """One arm of an L-corner as seen from the vertex."""

    chain: WallChain
    end: CutEnd
    outward: Tuple[float, float]
    normal: Tuple[float, float]
    face: PanelFace

    def near_edge(self, panel: ClassifiedPanel) -> float:
        return panel.start_mm if self.end == CutEnd.START else panel.end_mm

    def is_adjacent(self, panel: ClassifiedPanel) -> bool:
        if self.end == CutEnd.START:
            return panel.start_mm < ADJACENT_TOL_MM
        return self.chain.length_mm - panel.end_mm < ADJACENT_TOL_MM


@dataclass
class PanelScore:
    gap: float
    overlap: float
    total: float


def _arm(chain: WallChain, node_id: str, other: WallChain) -> Optional[CornerArm]:
    end_name = chain.node_end(node_id)
    if end_name is None:
        return None
    end = CutEnd(end_name)
    dx, dy = chain.direction
    outward = (dx, dy) if end == CutEnd.START else (-dx, -dy)

    other_end = other.node_end(node_id)
    ox, oy = other.direction
    other_out = (ox, oy) if other_end == "start" else (-ox, -oy)

    px, py = chain.positive_perp
    if px * other_out[0] + py * other_out[1] >= 0:
        return CornerArm(chain, end, outward, (px, py), PanelFace.POSITIVE)
    return CornerArm(chain, end, outward, (-px, -py), PanelFace.NEGATIVE)


def _adjacent_panel(
    panels: Iterable[ClassifiedPanel],
    arm: CornerArm,
    face: PanelFace,
) -> Optional[ClassifiedPanel]:
    """The panel on a face closest to the vertex, if it touches the vertex."""
    best = None
    best_dist = math.inf
    for panel in panels:
        if panel.face != face or not arm.is_adjacent(panel):
            continue
        dist = (
            panel.start_mm if arm.end == CutEnd.START
            else arm.chain.length_mm - panel.end_mm
        )
        if dist < best_dist:
            best, best_dist = panel, dist
    return best


def interior_node(vertex: Point2D, a: CornerArm, b: CornerArm, half_thickness: float) -> Point2D:
    """Intersection of the two corner-face lines."""
    ax = vertex.x + a.normal[0] * half_thickness
    ay = vertex.y + a.normal[1] * half_thickness
    bx = vertex.x + b.normal[0] * half_thickness
    by = vertex.y + b.normal[1] * half_thickness
    denom = cross(a.outward[0], a.outward[1], b.outward[0], b.outward[1])
    if abs(denom) < 1e-9:
        return Point2D(ax, ay)
    t = cross(bx - ax, by - ay, b.outward[0], b.outward[1]) / denom
    return Point2D(ax + a.outward[0] * t, ay + a.outward[1] * t)


def score_panel(
    panel: ClassifiedPanel,
    arm: CornerArm,
    node: Point2D,
    offset_tooth: float,
    has_reference: bool,
) -> PanelScore:
    """Gap and overlap error of a cut at the given phase offset."""
    shift = CORNER_CUT_MM + offset_tooth * TOOTH
    near = arm.near_edge(panel)
    cut_at = near + shift if arm.end == CutEnd.START else near - shift
    cut_point = arm.chain.point_at(cut_at)

    gap = 0.0
    if has_reference:
        dx, dy = arm.chain.direction
        px, py = arm.chain.positive_perp
        to_x = node.x - cut_point.x
        to_y = node.y - cut_point.y
        gap = abs(to_x * px + to_y * py)
        along = abs(to_x * dx + to_y * dy)
        if along < CORNER_CUT_MM and offset_tooth == PHASE_OFFSET_SMALL:
            gap += TOOTH

    overlap = 0.0
    if gap > 1.5 * TOOTH and offset_tooth == PHASE_OFFSET_SMALL:
        overlap = OVERLAP_PENALTY
    if offset_tooth == PHASE_OFFSET_LARGE and gap < TOOTH:
        gap = max(0.0, gap - TOOTH / 2)

    return PanelScore(gap=gap, overlap=overlap, total=gap + OVERLAP_WEIGHT * overlap)


def _face_point(arm: CornerArm, position_mm: float, half_thickness: float) -> Point2D:
    p = arm.chain.point_at(position_mm)
    return p.offset(arm.normal[0] * half_thickness, arm.normal[1] * half_thickness)


def optimize_corner(
    info: LJunctionInfo,
    lead_arm: CornerArm,
    seat_arm: CornerArm,
    lead_panel: ClassifiedPanel,
    seat_panel: ClassifiedPanel,
    lead_ref: Optional[ClassifiedPanel],
    seat_ref: Optional[ClassifiedPanel],
    half_thickness: float,
) -> List[CornerAdjustment]:
    """Choose phase offsets for one corner on one row."""
    vertex = info.position
    node = interior_node(vertex, lead_arm, seat_arm, half_thickness)

    def record(panel, arm, role, offset, ref, score, step, h1, h2, hypothesis, reason):
        return CornerAdjustment(
            panel_id=panel.panel_id,
            junction_id=info.node_id,
            role=role,
            cut_mm=CORNER_CUT_MM,
            cut_end=arm.end,
            offset_tooth=offset,
            offset_mm=offset * TOOTH,
            reference_panel_id=ref.panel_id if ref is not None else None,
            gap_error=score.gap if score else 0.0,
            overlap_penalty=score.overlap if score else 0.0,
            step_penalty=step,
            h1_score=h1,
            h2_score=h2,
            chosen_hypothesis=hypothesis,
            reason=reason,
        )

    if lead_ref is None and seat_ref is None:
        return [
            record(lead_panel, lead_arm, CornerRole.LEAD, PHASE_OFFSET_LARGE, None,
                   None, 0.0, None, None, "H1", REASON_NO_REFERENCE),
            record(seat_panel, seat_arm, CornerRole.SEAT, PHASE_OFFSET_SMALL, None,
                   None, 0.0, None, None, "H1", REASON_NO_REFERENCE),
        ]

    def hypothesis(lead_offset, seat_offset):
        a = score_panel(lead_panel, lead_arm, node, lead_offset, lead_ref is not None)
        b = score_panel(seat_panel, seat_arm, node, seat_offset, seat_ref is not None)
        step = abs(a.gap - b.gap)
        return a, b, step, a.total + b.total + STEP_WEIGHT * step

    h1_lead, h1_seat, h1_step, h1 = hypothesis(PHASE_OFFSET_LARGE, PHASE_OFFSET_SMALL)
    h2_lead, h2_seat, h2_step, h2 = hypothesis(PHASE_OFFSET_SMALL, PHASE_OFFSET_LARGE)

    use_h1 = h1 <= h2
    reason = REASON_SCORED
    if abs(h1 - h2) < NEAR_TIE_THRESHOLD:
        lead_dist = _face_point(lead_arm, lead_panel.center_mm, half_thickness).distance_to(node)
        seat_dist = _face_point(seat_arm, seat_panel.center_mm, half_thickness).distance_to(node)
        if abs(lead_dist - seat_dist) < 1e-6:
            use_h1 = True
            reason = REASON_NEAR_TIE_LEAD
        else:
            use_h1 = lead_dist < seat_dist
            reason = REASON_NEAR_TIE

    if use_h1:
        lead_score, seat_score, step, chosen = h1_lead, h1_seat, h1_step, "H1"
        lead_offset, seat_offset = PHASE_OFFSET_LARGE, PHASE_OFFSET_SMALL
    else:
        lead_score, seat_score, step, chosen = h2_lead, h2_seat, h2_step, "H2"
        lead_offset, seat_offset = PHASE_OFFSET_SMALL, PHASE_OFFSET_LARGE

    return [
        record(lead_panel, lead_arm, CornerRole.LEAD, lead_offset, lead_ref,
               lead_score, step, h1, h2, chosen, reason),
        record(seat_panel, seat_arm, CornerRole.SEAT, seat_offset, seat_ref,
               seat_score, step, h1, h2, chosen, reason),
    ]


def optimize_interior_corners(
    chains: List[WallChain],
    l_junctions: List[LJunctionInfo],
    layout: PanelLayoutResult,
    core: ConcreteCore = ConcreteCore.CORE_150,
    locked_panel_ids: Iterable[str] = (),
) -> Dict[str, CornerAdjustment]:
    """Corner-cut parameters for interior panels at every L-corner and row.

    Args:
        chains: Consolidated chains.
        l_junctions: L-corner role records.
        layout: Panel layout to annotate (not modified).
        core: Concrete core option; sets the wall thickness.
        locked_panel_ids: Panels to leave without adjustment.

    Returns:
        Adjustments keyed by panel id.
    """
    adjustments: Dict[str, CornerAdjustment] = {}
    if not l_junctions or not layout.panels:
        return adjustments

    locked = set(locked_panel_ids)
    half_thickness = wall_thickness_mm(core) / 2
    chain_map = {c.id: c for c in chains}
    by_chain_row: Dict[Tuple[str, int], List[ClassifiedPanel]] = {}
    for panel in layout.panels:
        by_chain_row.setdefault((panel.chain_id, panel.row), []).append(panel)
    rows = sorted({p.row for p in layout.panels})
    skipped = 0

    for info in l_junctions:
        lead_chain = chain_map.get(info.primary_chain_id)
        seat_chain = chain_map.get(info.secondary_chain_id)
        if lead_chain is None or seat_chain is None:
            continue
        lead_arm = _arm(lead_chain, info.node_id, seat_chain)
        seat_arm = _arm(seat_chain, info.node_id, lead_chain)
        if lead_arm is None or seat_arm is None:
            continue

        for row in rows:
            lead_panels = by_chain_row.get((lead_chain.id, row), [])
            seat_panels = by_chain_row.get((seat_chain.id, row), [])
            lead_panel = _adjacent_panel(lead_panels, lead_arm, lead_arm.face)
            seat_panel = _adjacent_panel(seat_panels, seat_arm, seat_arm.face)

            if lead_panel is None or seat_panel is None:
                skipped += 1
                continue
            if lead_panel.side != PanelSide.INTERIOR or seat_panel.side != PanelSide.INTERIOR:
                skipped += 1
                continue
            if lead_panel.panel_id in locked or seat_panel.panel_id in locked:
                logger.debug("Corner %s row %d has locked panels; skipped", info.node_id, row)
                skipped += 1
                continue

            lead_ref = _exterior_reference(seat_panels, seat_arm)
            seat_ref = _exterior_reference(lead_panels, lead_arm)

            for adjustment in optimize_corner(
                info, lead_arm, seat_arm, lead_panel, seat_panel,
                lead_ref, seat_ref, half_thickness,
            ):
                adjustments[adjustment.panel_id] = adjustment

    logger.info(
        "Corner optimizer: %d interior panels adjusted at %d L-corners (%d corner rows skipped)",
        len(adjustments), len(l_junctions), skipped,
    )
    return adjustments


def _exterior_reference(panels: List[ClassifiedPanel], arm: CornerArm) -> Optional[ClassifiedPanel]:
    """Exterior panel of an arm adjacent to the vertex."""
    exterior = [p for p in panels if p.side == PanelSide.EXTERIOR]
    for face in (PanelFace.POSITIVE, PanelFace.NEGATIVE):
        panel = _adjacent_panel(exterior, arm, face)
        if panel is not None:
            return panel
    return None
