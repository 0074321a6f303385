# File: tests/footprint/test_footprint_detector.py

"""Tests for outer footprint detection and exterior side classification."""

import math

from icf_layout.config.settings import ChainOptions
from icf_layout.footprint import (
    FootprintStatus,
    PolygonStatus,
    SideClassification,
    SideVote,
    build_half_edge_graph,
    detect_footprint,
    extract_faces,
    sample_count,
    sample_vote,
)
from icf_layout.footprint.footprint_types import (
    REASON_BOUNDARY_AMBIGUOUS,
    REASON_MIXED_VOTES,
    REASON_NO_POLYGON,
)
from icf_layout.footprint.side_classifier import _decide
from icf_layout.geometry.primitives import Point2D
from icf_layout.wall_chains import build_wall_chains

from conftest import chain_on_line


NORMAL = ChainOptions.for_preset("normal")
SQUARE = [Point2D(0, 0), Point2D(1000, 0), Point2D(1000, 1000), Point2D(0, 1000)]


def chains_for(segments):
    return build_wall_chains(segments, NORMAL).chains


def votes(**counts):
    result = {v: 0 for v in SideVote}
    for name, count in counts.items():
        result[SideVote[name]] = count
    return result


# =============================================================================
# Faces
# =============================================================================


class TestFaces:
    """Tests for half-edge face extraction."""

    def test_rectangle_has_one_face(self, rectangle_segments):
        graph = build_half_edge_graph(chains_for(rectangle_segments), 20.0)
        faces = extract_faces(graph)
        assert len(faces) == 1
        assert len(faces[0]) == 4

    def test_partition_gives_two_rooms_and_boundary(self, partitioned_segments):
        graph = build_half_edge_graph(chains_for(partitioned_segments), 20.0)
        faces = extract_faces(graph)
        assert sorted(len(f) for f in faces) == [4, 4, 6]

    def test_open_plan_has_no_faces(self, l_segments):
        graph = build_half_edge_graph(chains_for(l_segments), 20.0)
        assert extract_faces(graph) == []


# =============================================================================
# Voting
# =============================================================================


class TestVoting:
    """Tests for per-sample votes and the decision rule."""

    def test_sample_count_bounds(self):
        assert sample_count(500) == 3
        assert sample_count(5000) == 6
        assert sample_count(40000) == 15

    def test_boundary_sample_votes_positive(self):
        vote = sample_vote(Point2D(500, 0), (0.0, -1.0), SQUARE)
        assert vote == SideVote.POSITIVE_EXTERIOR

    def test_boundary_sample_votes_negative(self):
        vote = sample_vote(Point2D(500, 0), (0.0, 1.0), SQUARE)
        assert vote == SideVote.NEGATIVE_EXTERIOR

    def test_interior_sample(self):
        vote = sample_vote(Point2D(500, 500), (0.0, 1.0), SQUARE, offsets=(100.0,))
        assert vote == SideVote.BOTH_INTERIOR

    def test_outside_sample(self):
        vote = sample_vote(Point2D(500, 3000), (0.0, 1.0), SQUARE)
        assert vote == SideVote.BOTH_OUTSIDE

    def test_edge_sample_escalates(self):
        # First positive sample lands on the top edge, the second clears it
        vote = sample_vote(Point2D(500, 850), (0.0, 1.0), SQUARE, offsets=(150.0, 300.0))
        assert vote == SideVote.POSITIVE_EXTERIOR

    def test_majority(self):
        winner, _ = _decide(votes(POSITIVE_EXTERIOR=4, AMBIGUOUS=1))
        assert winner == SideVote.POSITIVE_EXTERIOR

    def test_split_decision_is_mixed(self):
        winner, reason = _decide(votes(POSITIVE_EXTERIOR=2, NEGATIVE_EXTERIOR=2))
        assert winner is None
        assert reason == REASON_MIXED_VOTES

    def test_plurality_prefers_partition(self):
        winner, _ = _decide(votes(BOTH_INTERIOR=2, POSITIVE_EXTERIOR=2, AMBIGUOUS=2))
        assert winner == SideVote.BOTH_INTERIOR

    def test_all_ambiguous(self):
        winner, reason = _decide(votes(AMBIGUOUS=5))
        assert winner is None
        assert reason == REASON_BOUNDARY_AMBIGUOUS


# =============================================================================
# Detection
# =============================================================================


class TestDetectFootprint:
    """Tests for the full footprint detection."""

    def test_rectangle_all_exterior(self, rectangle_segments):
        chains = chains_for(rectangle_segments)
        result = detect_footprint(chains)
        assert result.status == FootprintStatus.OK
        assert result.polygon_status == PolygonStatus.RESOLVED
        assert abs(result.outer_area - 24e6) < 1.0
        assert result.stats.exterior_chains == 4
        assert result.unresolved_chain_ids == []

    def test_outward_normals_point_away(self, rectangle_segments):
        chains = chains_for(rectangle_segments)
        result = detect_footprint(chains)
        bottom = chain_on_line(chains, y=0)
        right = chain_on_line(chains, x=6000)
        assert abs(result.side_of(bottom.id).outward_normal_angle + math.pi / 2) < 1e-6
        assert abs(result.side_of(right.id).outward_normal_angle) < 1e-6

    def test_side_matches_positive_perp(self, rectangle_segments):
        chains = chains_for(rectangle_segments)
        result = detect_footprint(chains)
        for chain in chains:
            info = result.side_of(chain.id)
            px, py = chain.positive_perp
            mid = chain.point_at(chain.length_mm / 2)
            sample = mid.offset(px * 500, py * 500)
            outside = not (0 < sample.x < 6000 and 0 < sample.y < 4000)
            assert info.outside_is_positive_perp is outside

    def test_partition_is_interior(self, partitioned_segments):
        chains = chains_for(partitioned_segments)
        result = detect_footprint(chains)
        partition = chain_on_line(chains, x=3000)
        assert result.status == FootprintStatus.OK
        assert result.side_of(partition.id).classification == SideClassification.BOTH_INTERIOR
        assert result.stats.exterior_chains == 6
        assert result.stats.interior_partitions == 1

    def test_manual_flip(self, rectangle_segments):
        chains = chains_for(rectangle_segments)
        baseline = detect_footprint(chains)
        bottom = chain_on_line(chains, y=0)
        flipped = detect_footprint(chains, flipped_chain_ids=[bottom.id, "chain-99"])
        before = baseline.side_of(bottom.id)
        after = flipped.side_of(bottom.id)
        assert after.outside_is_positive_perp is (not before.outside_is_positive_perp)
        assert after.flipped_by_override is True
        assert flipped.stats.flipped_by_override == 1

    def test_open_plan_uses_hull(self, l_segments):
        result = detect_footprint(chains_for(l_segments))
        assert result.status == FootprintStatus.FALLBACK
        assert result.polygon_status == PolygonStatus.FALLBACK_HULL
        assert len(result.outer_polygon) == 3

    def test_single_wall_is_unresolved(self, straight_segments):
        chains = chains_for(straight_segments)
        result = detect_footprint(chains)
        assert result.status == FootprintStatus.UNRESOLVED
        assert result.polygon_status == PolygonStatus.NONE
        info = result.side_of(chains[0].id)
        assert info.classification == SideClassification.UNRESOLVED
        assert info.reason == REASON_NO_POLYGON
        assert result.unresolved_chain_ids == [chains[0].id]

    def test_no_walls(self):
        result = detect_footprint([])
        assert result.status == FootprintStatus.NO_WALLS
        assert result.chain_sides == {}

    def test_to_dict(self, partitioned_segments):
        data = detect_footprint(chains_for(partitioned_segments)).to_dict()
        assert data["status"] == "ok"
        assert len(data["chain_sides"]) == 7
