# File: tests/panels/test_corner_optimizer.py

"""Tests for interior L-corner cut offsets."""

from icf_layout.config.constants import (
    CORNER_CUT_MM,
    PHASE_OFFSET_LARGE,
    PHASE_OFFSET_SMALL,
    TOOTH,
    ConcreteCore,
    wall_thickness_mm,
)
from icf_layout.config.settings import ChainOptions
from icf_layout.footprint import detect_footprint
from icf_layout.panels import (
    CornerRole,
    CutEnd,
    FullPanel,
    PanelSide,
    interior_node,
    layout_panels,
    optimize_corner,
    optimize_interior_corners,
)
from icf_layout.panels.corner_optimizer import (
    REASON_NEAR_TIE,
    REASON_NEAR_TIE_LEAD,
    REASON_NO_REFERENCE,
    REASON_SCORED,
    _arm,
)
from icf_layout.wall_chains import build_wall_chains
from icf_layout.wall_junctions import classify_junctions


NORMAL = ChainOptions.for_preset("normal")


def corner_run(segments, config, locked=()):
    chains = build_wall_chains(segments, NORMAL)
    topology = classify_junctions(chains)
    footprint = detect_footprint(chains.chains)
    layout = layout_panels(chains.chains, topology, footprint, (), config)
    adjustments = optimize_interior_corners(
        chains.chains, topology.l_junctions, layout, locked_panel_ids=locked
    )
    return chains, topology, layout, adjustments


def vertex_panel(arm, panel_id, row=0, setback_mm=0.0, side=PanelSide.INTERIOR):
    """Full panel on an arm's corner face, ``setback_mm`` away from the vertex."""
    if arm.end == CutEnd.START:
        start = setback_mm
    else:
        start = arm.chain.length_mm - 1200.0 - setback_mm
    return FullPanel(panel_id, arm.chain.id, row, side, arm.face, start, start + 1200.0, 0)


def corner_arms(segments):
    chains = build_wall_chains(segments, NORMAL)
    info = classify_junctions(chains).l_junctions[0]
    lead = chains.get_chain(info.primary_chain_id)
    seat = chains.get_chain(info.secondary_chain_id)
    return info, _arm(lead, info.node_id, seat), _arm(seat, info.node_id, lead)


def decide(segments, lead_setback, seat_setback, references=True):
    """Run one corner decision and return its records keyed by role."""
    info, lead_arm, seat_arm = corner_arms(segments)
    lead_ref = seat_ref = None
    if references:
        lead_ref = vertex_panel(seat_arm, "lead-ref", side=PanelSide.EXTERIOR)
        seat_ref = vertex_panel(lead_arm, "seat-ref", side=PanelSide.EXTERIOR)
    records = optimize_corner(
        info, lead_arm, seat_arm,
        vertex_panel(lead_arm, "lead", setback_mm=lead_setback),
        vertex_panel(seat_arm, "seat", setback_mm=seat_setback),
        lead_ref, seat_ref, wall_thickness_mm(ConcreteCore.CORE_150) / 2,
    )
    return {r.role: r for r in records}


class TestThickness:
    """Tests for the wall thickness table."""

    def test_core_options(self):
        assert abs(wall_thickness_mm(ConcreteCore.CORE_150) - 4 * TOOTH) < 1e-9
        assert abs(wall_thickness_mm(ConcreteCore.CORE_220) - 5 * TOOTH) < 1e-9
        assert abs(CORNER_CUT_MM - 4 * 1200.0 / 17) < 1e-9


class TestCornerGeometry:
    """Tests for corner arms and the interior node."""

    def test_arms_face_each_other(self, l_segments):
        chains = build_wall_chains(l_segments, NORMAL)
        info = classify_junctions(chains).l_junctions[0]
        lead = chains.get_chain(info.primary_chain_id)
        seat = chains.get_chain(info.secondary_chain_id)
        lead_arm = _arm(lead, info.node_id, seat)
        seat_arm = _arm(seat, info.node_id, lead)
        # East arm's corner face looks north, north arm's looks east
        assert abs(lead_arm.normal[1] - 1.0) < 1e-9
        assert abs(seat_arm.normal[0] - 1.0) < 1e-9

    def test_interior_node(self, l_segments):
        chains = build_wall_chains(l_segments, NORMAL)
        info = classify_junctions(chains).l_junctions[0]
        lead = chains.get_chain(info.primary_chain_id)
        seat = chains.get_chain(info.secondary_chain_id)
        node = interior_node(info.position, _arm(lead, info.node_id, seat), _arm(seat, info.node_id, lead), 100.0)
        assert abs(node.x - 100.0) < 1e-6
        assert abs(node.y - 100.0) < 1e-6


class TestOptimizeCorner:
    """Tests for a single corner decision."""

    def test_no_reference_defaults_to_lead_large(self, l_segments):
        chains = build_wall_chains(l_segments, NORMAL)
        info = classify_junctions(chains).l_junctions[0]
        lead = chains.get_chain(info.primary_chain_id)
        seat = chains.get_chain(info.secondary_chain_id)
        lead_arm = _arm(lead, info.node_id, seat)
        seat_arm = _arm(seat, info.node_id, lead)

        records = optimize_corner(
            info, lead_arm, seat_arm,
            vertex_panel(lead_arm, "lead"), vertex_panel(seat_arm, "seat"),
            None, None, wall_thickness_mm(ConcreteCore.CORE_150) / 2,
        )
        by_role = {r.role: r for r in records}
        assert by_role[CornerRole.LEAD].offset_tooth == PHASE_OFFSET_LARGE
        assert by_role[CornerRole.SEAT].offset_tooth == PHASE_OFFSET_SMALL
        assert all(r.reason == REASON_NO_REFERENCE for r in records)
        assert all(r.chosen_hypothesis == "H1" for r in records)
        assert all(r.h1_score is None for r in records)

    def test_setback_panel_loses_the_large_offset(self, l_segments):
        """A seat panel set back from the vertex scores better with 1.5."""
        by_role = decide(l_segments, 0.0, 100.0)
        lead, seat = by_role[CornerRole.LEAD], by_role[CornerRole.SEAT]
        assert lead.reason == REASON_SCORED
        assert lead.chosen_hypothesis == "H1"
        assert lead.offset_tooth == PHASE_OFFSET_LARGE
        assert seat.offset_tooth == PHASE_OFFSET_SMALL
        assert abs(lead.h1_score - (4 * TOOTH + 5000.0)) < 1e-6
        assert abs(lead.h2_score - (15 * TOOTH + 5000.0)) < 1e-6
        assert lead.reference_panel_id == "lead-ref"
        assert seat.reference_panel_id == "seat-ref"

    def test_setback_lead_scores_second_hypothesis(self, l_segments):
        by_role = decide(l_segments, 100.0, 0.0)
        assert all(r.reason == REASON_SCORED for r in by_role.values())
        assert all(r.chosen_hypothesis == "H2" for r in by_role.values())
        assert by_role[CornerRole.LEAD].offset_tooth == PHASE_OFFSET_SMALL
        assert by_role[CornerRole.SEAT].offset_tooth == PHASE_OFFSET_LARGE

    def test_near_tie_gives_closer_seat_the_large_offset(self, l_segments):
        by_role = decide(l_segments, 120.0, 60.0)
        lead, seat = by_role[CornerRole.LEAD], by_role[CornerRole.SEAT]
        assert abs(lead.h1_score - lead.h2_score) < 15.0
        assert lead.reason == REASON_NEAR_TIE
        assert lead.chosen_hypothesis == "H2"
        assert seat.offset_tooth == PHASE_OFFSET_LARGE
        assert lead.offset_tooth == PHASE_OFFSET_SMALL

    def test_near_tie_gives_closer_lead_the_large_offset(self, l_segments):
        by_role = decide(l_segments, 60.0, 120.0)
        assert all(r.reason == REASON_NEAR_TIE for r in by_role.values())
        assert by_role[CornerRole.LEAD].chosen_hypothesis == "H1"
        assert by_role[CornerRole.LEAD].offset_tooth == PHASE_OFFSET_LARGE

    def test_equal_distances_favour_lead(self, l_segments):
        by_role = decide(l_segments, 0.0, 0.0)
        assert all(r.reason == REASON_NEAR_TIE_LEAD for r in by_role.values())
        assert by_role[CornerRole.LEAD].offset_tooth == PHASE_OFFSET_LARGE
        assert by_role[CornerRole.SEAT].offset_tooth == PHASE_OFFSET_SMALL


class TestOptimizeInteriorCorners:
    """Tests for corner offsets over a full layout."""

    def test_every_corner_row_adjusted(self, rectangle_segments, short_config):
        _, _, layout, adjustments = corner_run(rectangle_segments, short_config)
        # 4 corners x 2 rows x (LEAD + SEAT)
        assert len(adjustments) == 16
        for panel_id, adj in adjustments.items():
            assert layout.get_panel(panel_id).side == PanelSide.INTERIOR
            assert adj.offset_tooth in (PHASE_OFFSET_SMALL, PHASE_OFFSET_LARGE)
            assert abs(adj.offset_mm - adj.offset_tooth * TOOTH) < 1e-9
            assert abs(adj.cut_mm - CORNER_CUT_MM) < 1e-9
            assert adj.reference_panel_id is not None

    def test_lead_and_seat_take_different_offsets(self, rectangle_segments, short_config):
        _, _, layout, adjustments = corner_run(rectangle_segments, short_config)
        groups = {}
        for panel_id, adj in adjustments.items():
            key = (adj.junction_id, layout.get_panel(panel_id).row)
            groups.setdefault(key, []).append(adj)
        assert len(groups) == 8
        for records in groups.values():
            assert {r.role for r in records} == {CornerRole.LEAD, CornerRole.SEAT}
            assert {r.offset_tooth for r in records} == {PHASE_OFFSET_SMALL, PHASE_OFFSET_LARGE}
            assert len({r.chosen_hypothesis for r in records}) == 1

    def test_panels_are_not_moved(self, rectangle_segments, short_config):
        chains = build_wall_chains(rectangle_segments, NORMAL)
        topology = classify_junctions(chains)
        layout = layout_panels(
            chains.chains, topology, detect_footprint(chains.chains), (), short_config
        )
        before = layout.to_dict()
        adjustments = optimize_interior_corners(chains.chains, topology.l_junctions, layout)
        assert adjustments
        assert layout.to_dict() == before

    def test_locked_panel_skips_corner_row(self, rectangle_segments, short_config):
        _, _, _, adjustments = corner_run(rectangle_segments, short_config)
        locked = sorted(adjustments)[0]
        _, _, _, again = corner_run(rectangle_segments, short_config, locked=[locked])
        assert locked not in again
        assert len(again) == 14

    def test_open_plan_without_interior_faces(self, straight_segments, short_config):
        _, topology, _, adjustments = corner_run(straight_segments, short_config)
        assert topology.l_junctions == []
        assert adjustments == {}

    def test_to_dict(self, rectangle_segments, short_config):
        _, _, _, adjustments = corner_run(rectangle_segments, short_config)
        data = next(iter(adjustments.values())).to_dict()
        assert data["role"] in ("LEAD", "SEAT")
        assert data["cut_end"] in ("start", "end")
