# File: tests/wall_junctions/test_topology_classifier.py

"""Tests for junction classification, L/T roles and opening candidates.

Covers:
- Node types from degree and arm angles
- L-corner primary/secondary roles independent of drawing order
- T-junction main run and branch
- Opening candidates from opening-sized gaps
"""

import math

from icf_layout.config.settings import ChainOptions
from icf_layout.geometry.primitives import Point2D
from icf_layout.wall_chains import build_wall_chains
from icf_layout.wall_chains.chain_types import ChainNode
from icf_layout.wall_junctions import (
    JunctionType,
    classify_junctions,
    classify_node,
)
from icf_layout.wall_junctions.opening_candidates import candidate_label

from conftest import chain_on_line, make_segments


NORMAL = ChainOptions.for_preset("normal")
TOL = math.radians(5)


def topology_for(segments):
    chains = build_wall_chains(segments, NORMAL)
    return chains, classify_junctions(chains)


# =============================================================================
# Node Classification
# =============================================================================


class TestClassifyNode:
    """Tests for single-node classification."""

    def test_free_end(self):
        node = ChainNode("node-0", Point2D(0, 0), ["chain-0"], [0.0])
        assert classify_node(node, TOL) == JunctionType.END

    def test_inline(self):
        node = ChainNode("node-0", Point2D(0, 0), ["chain-0", "chain-1"], [0.0, math.pi])
        assert classify_node(node, TOL) == JunctionType.INLINE

    def test_corner(self):
        node = ChainNode("node-0", Point2D(0, 0), ["chain-0", "chain-1"], [0.0, math.pi / 2])
        assert classify_node(node, TOL) == JunctionType.L_CORNER

    def test_oblique_corner(self):
        node = ChainNode("node-0", Point2D(0, 0), ["chain-0", "chain-1"], [0.0, math.radians(135)])
        assert classify_node(node, TOL) == JunctionType.L_CORNER

    def test_degree_three_and_four(self):
        tee = ChainNode("n", Point2D(0, 0), ["a", "b", "c"], [0.0, math.pi, math.pi / 2])
        cross = ChainNode("n", Point2D(0, 0), ["a", "b", "c", "d"], [0.0, math.pi / 2, math.pi, -math.pi / 2])
        assert classify_node(tee, TOL) == JunctionType.T_JUNCTION
        assert classify_node(cross, TOL) == JunctionType.X_JUNCTION

    def test_degree_three_without_main_run(self):
        """Three arms at 120 degrees have no main run and are not a T."""
        node = ChainNode(
            "n", Point2D(0, 0), ["a", "b", "c"],
            [0.0, math.radians(120), math.radians(240)],
        )
        assert classify_node(node, TOL) == JunctionType.X_JUNCTION


# =============================================================================
# Floor Plans
# =============================================================================


class TestRectangle:
    """Tests for a closed rectangle."""

    def test_four_corners(self, rectangle_segments):
        _, topology = topology_for(rectangle_segments)
        counts = topology.junction_counts
        assert counts["L"] == 4
        assert counts["end"] == 0
        assert counts["T"] == 0
        assert len(topology.l_junctions) == 4

    def test_roles_use_both_arms(self, rectangle_segments):
        chains, topology = topology_for(rectangle_segments)
        for info in topology.l_junctions:
            assert info.primary_chain_id != info.secondary_chain_id
            assert info.role_of(info.primary_chain_id) == "primary"
            assert info.role_of(info.secondary_chain_id) == "secondary"
            assert info.other_arm(info.primary_chain_id) == info.secondary_chain_id


class TestLCornerRoles:
    """Tests for L-corner role assignment."""

    def test_primary_is_counter_clockwise_first_arm(self, l_segments):
        chains, topology = topology_for(l_segments)
        assert len(topology.l_junctions) == 1
        info = topology.l_junctions[0]
        east = chain_on_line(chains.chains, y=0)
        north = chain_on_line(chains.chains, x=0)
        assert info.primary_chain_id == east.id
        assert info.secondary_chain_id == north.id

    def test_roles_ignore_drawing_order(self):
        forward = make_segments([(0, 0, 4000, 0), (0, 0, 0, 3000)])
        reversed_ = make_segments([(0, 3000, 0, 0), (4000, 0, 0, 0)])
        roles = []
        for segments in (forward, reversed_):
            chains, topology = topology_for(segments)
            info = topology.l_junctions[0]
            primary = chains.get_chain(info.primary_chain_id)
            roles.append(round(primary.length_mm))
        assert roles == [4000, 4000]

    def test_free_ends_counted(self, l_segments):
        _, topology = topology_for(l_segments)
        assert topology.junction_counts["end"] == 2


class TestTeeAndCross:
    """Tests for T and X junctions."""

    def test_tee_main_and_branch(self, t_segments):
        chains, topology = topology_for(t_segments)
        assert topology.junction_counts["T"] == 1
        assert topology.junction_counts["end"] == 3
        info = topology.t_junctions[0]
        branch = chains.get_chain(info.branch_chain_id)
        assert abs(branch.start.x - 3000) < 1e-6 and abs(branch.end.x - 3000) < 1e-6
        for chain_id in info.main_chain_ids:
            main = chains.get_chain(chain_id)
            assert abs(main.start.y) < 1e-6 and abs(main.end.y) < 1e-6
        assert topology.t_junction_at(info.node_id) is info

    def test_cross(self, x_segments):
        _, topology = topology_for(x_segments)
        counts = topology.junction_counts
        assert counts["X"] == 1
        assert counts["end"] == 4
        assert len(topology.x_junction_ids) == 1
        assert topology.l_junctions == []

    def test_partition_tees(self, partitioned_segments):
        chains, topology = topology_for(partitioned_segments)
        assert topology.junction_counts["T"] == 2
        assert topology.junction_counts["L"] == 4
        partition = chain_on_line(chains.chains, x=3000)
        assert all(t.branch_chain_id == partition.id for t in topology.t_junctions)

    def test_three_way_star_is_not_counted_as_tee(self):
        segments = make_segments([
            (0, 0, 3000, 0),
            (0, 0, -1500, 2598),
            (0, 0, -1500, -2598),
        ])
        _, topology = topology_for(segments)
        counts = topology.junction_counts
        assert counts["T"] == 0
        assert counts["X"] == 1
        assert counts["end"] == 3
        assert topology.t_junctions == []
        assert len(topology.x_junction_ids) == 1


# =============================================================================
# Opening Candidates
# =============================================================================


class TestOpeningCandidates:
    """Tests for opening candidates detected from colinear gaps."""

    def test_gap_becomes_candidate(self):
        chains, topology = topology_for(make_segments([(0, 0, 2000, 0), (2900, 0, 6000, 0)]))
        assert len(topology.candidates) == 1
        candidate = topology.candidates[0]
        assert candidate.id == "candidate-0"
        assert candidate.label == "C1"
        assert abs(candidate.width_mm - 900) < 1e-6
        assert candidate.bridged is False
        assert candidate.chain_id in {c.id for c in chains.chains}
        assert abs(candidate.center.x - 2450) < 1e-6

    def test_bridged_gap_is_not_a_candidate(self):
        _, topology = topology_for(make_segments([(0, 0, 2980, 0), (3020, 0, 6000, 0)]))
        assert topology.candidates == []

    def test_labels(self):
        assert candidate_label(0) == "C1"
        assert candidate_label(11) == "C12"

    def test_to_dict_counts(self, t_segments):
        _, topology = topology_for(t_segments)
        data = topology.to_dict()
        assert data["junction_counts"]["T"] == 1
        assert len(data["nodes"]) == 4
