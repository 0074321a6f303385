# File: tests/wall_chains/test_chain_builder.py

"""Tests for wall chain consolidation and preset auto-tuning."""

import pytest

from icf_layout.config.settings import ChainOptions, ChainPreset
from icf_layout.errors import LayoutConfigError
from icf_layout.geometry.primitives import Point2D, WallSegment
from icf_layout.wall_chains import (
    build_wall_chains,
    build_wall_chains_auto_tuned,
)
from icf_layout.wall_chains.chain_builder import (
    calculate_waste,
    chain_module_usage,
    preset_score,
)
from icf_layout.wall_chains.segment_cleanup import (
    dedup_segments,
    filter_noise,
    merge_axis_aligned_overlaps,
    simplify_jogs,
    snap_endpoints,
    square_clusters,
)

from conftest import make_segments


NORMAL = ChainOptions.for_preset("normal")


# =============================================================================
# Cleanup Stages
# =============================================================================


class TestCleanupStages:
    """Tests for the individual segment cleanup stages."""

    def test_noise_filter(self):
        segments = make_segments([(0, 0, 50, 0), (0, 0, 1000, 0), (5, 5, 5, 5)])
        kept = filter_noise(segments, 80.0)
        assert [s.id for s in kept] == ["w1"]

    def test_snap_joins_drifting_endpoints(self):
        segments = make_segments([(0, 0, 1000, 0), (1004, 3, 1000, 2000)])
        snapped = snap_endpoints(segments, 25.0)
        assert snapped[0].end == snapped[1].start

    def test_snap_squares_near_axis_runs(self):
        segments = make_segments([(0, 0, 3000, 8)])
        snapped = snap_endpoints(segments, 25.0, snap_orthogonal=True, angle_tol_rad=0.1)
        assert snapped[0].end.y == snapped[0].start.y

    def test_squaring_shares_one_axis_value(self):
        positions = {0: Point2D(0, 0), 1: Point2D(1000, 3), 2: Point2D(2000, -3), 3: Point2D(3000, 6)}
        squared = square_clusters(positions, [(0, 1), (1, 2), (2, 3)], 0.1, 25.0)
        assert {p.y for p in squared.values()} == {1.5}
        assert [squared[i].x for i in range(4)] == [0, 1000, 2000, 3000]

    def test_squared_input_is_unchanged(self):
        positions = {0: Point2D(0, 0), 1: Point2D(6000, 0), 2: Point2D(6000, 4000), 3: Point2D(0, 4000)}
        pairs = [(0, 1), (1, 2), (2, 3), (3, 0)]
        assert square_clusters(positions, pairs, 0.1, 25.0) == positions

    def test_squaring_respects_shift_limit(self):
        positions = {0: Point2D(0, 0), 1: Point2D(3000, 40)}
        assert square_clusters(positions, [(0, 1)], 0.1, 25.0) == positions

    def test_snapped_output_snaps_to_itself(self, fragmented_rectangle_segments):
        once = snap_endpoints(fragmented_rectangle_segments, 25.0, snap_orthogonal=True, angle_tol_rad=0.1)
        twice = snap_endpoints(once, 25.0, snap_orthogonal=True, angle_tol_rad=0.1)
        assert len(twice) == len(once)
        for a, b in zip(once, twice):
            assert a.start.distance_to(b.start) < 1e-6
            assert a.end.distance_to(b.end) < 1e-6

    def test_dedup_ignores_direction(self):
        segments = make_segments([(0, 0, 1000, 0), (1000, 0, 0, 0), (0, 0, 1000, 0.2)])
        assert len(dedup_segments(segments)) == 1

    def test_overlap_merge_unions_intervals(self):
        segments = make_segments([(0, 0, 2000, 0), (1500, 0, 4000, 0), (6000, 0, 7000, 0)])
        merged = merge_axis_aligned_overlaps(segments, NORMAL.angle_tol_rad, 25.0)
        lengths = sorted(s.length for s in merged)
        assert lengths == [1000.0, 4000.0]
        assert any(s.id == "w0+w1" for s in merged)

    def test_jog_is_removed(self):
        segments = make_segments([
            (0, 0, 2000, 0),
            (2000, 0, 2000, 40),
            (2000, 40, 5000, 40),
        ])
        result, removed = simplify_jogs(segments, 60.0, NORMAL.angle_tol_rad)
        assert removed == 1
        assert len(result) == 2
        assert result[0].end == result[1].start


# =============================================================================
# Chain Building
# =============================================================================


class TestBuildWallChains:
    """Tests for the full chain-building pipeline under one preset."""

    def test_rectangle_gives_four_chains(self, rectangle_segments):
        result = build_wall_chains(rectangle_segments, NORMAL)
        assert len(result.chains) == 4
        assert len(result.nodes) == 4
        assert sorted(round(c.length_mm) for c in result.chains) == [4000, 4000, 6000, 6000]
        assert all(node.degree == 2 for node in result.nodes.values())

    def test_fragmented_rectangle_consolidates(self, fragmented_rectangle_segments):
        result = build_wall_chains(fragmented_rectangle_segments, NORMAL)
        assert len(result.chains) == 4
        assert abs(result.stats.total_length_mm - 20000) < 50
        assert result.stats.original_segments == 9
        assert result.stats.after_noise == 8

    def test_chain_ends_coincide_with_nodes(self, partitioned_segments):
        result = build_wall_chains(partitioned_segments, NORMAL)
        for chain in result.chains:
            assert chain.start == result.nodes[chain.start_node_id].position
            assert chain.end == result.nodes[chain.end_node_id].position

    def test_partition_splits_perimeter(self, partitioned_segments):
        result = build_wall_chains(partitioned_segments, NORMAL)
        assert len(result.chains) == 7
        degrees = sorted(n.degree for n in result.nodes.values())
        assert degrees == [2, 2, 2, 2, 3, 3]

    def test_small_gap_is_bridged(self):
        segments = make_segments([(0, 0, 2980, 0), (3020, 0, 6000, 0)])
        result = build_wall_chains(segments, NORMAL)
        assert len(result.chains) == 1
        assert abs(result.chains[0].length_mm - 6000) < 1e-6
        assert result.stats.bridges_added == 1

    def test_gap_beyond_tolerance_is_kept(self):
        segments = make_segments([(0, 0, 2980, 0), (3020, 0, 6000, 0)])
        result = build_wall_chains(segments, ChainOptions.for_preset("conservative"))
        assert len(result.chains) == 2

    def test_opening_sized_gap_is_recorded(self):
        segments = make_segments([(0, 0, 2000, 0), (2900, 0, 6000, 0)])
        result = build_wall_chains(segments, NORMAL)
        assert len(result.chains) == 2
        assert len(result.detected_gaps) == 1
        gap = result.detected_gaps[0]
        assert abs(gap.width_mm - 900) < 1e-6
        assert gap.bridged is False

    def test_crossing_walls_split(self, x_segments):
        result = build_wall_chains(x_segments, NORMAL)
        assert len(result.chains) == 4
        assert max(n.degree for n in result.nodes.values()) == 4

    def test_rebuild_is_idempotent(self, fragmented_rectangle_segments):
        first = build_wall_chains(fragmented_rectangle_segments, NORMAL)
        again = build_wall_chains(
            [WallSegment(c.id, c.start, c.end) for c in first.chains], NORMAL
        )
        assert len(again.chains) == len(first.chains)
        assert sorted(round(c.length_mm, 3) for c in again.chains) == sorted(
            round(c.length_mm, 3) for c in first.chains
        )

    def test_deterministic_ids(self, partitioned_segments):
        a = build_wall_chains(partitioned_segments, NORMAL)
        b = build_wall_chains(partitioned_segments, NORMAL)
        assert [c.to_dict() for c in a.chains] == [c.to_dict() for c in b.chains]

    def test_empty_input(self):
        result = build_wall_chains([], NORMAL)
        assert result.chains == []
        assert result.stats.waste_pct == 0.0

    def test_invalid_options_raise(self, rectangle_segments):
        with pytest.raises(LayoutConfigError) as excinfo:
            build_wall_chains(rectangle_segments, ChainOptions(snap_tol_mm=0.0))
        assert "snap_tol_mm must be positive" in excinfo.value.errors
        assert isinstance(excinfo.value, ValueError)

    def test_unknown_preset_raises(self):
        with pytest.raises(LayoutConfigError):
            ChainOptions.for_preset("sloppy")


# =============================================================================
# Waste and Auto-Tuning
# =============================================================================


class TestWaste:
    """Tests for module waste accounting."""

    def test_exact_multiple_has_no_waste(self):
        assert chain_module_usage(2400.0) == (2, 0.0)

    def test_remainder_waste(self):
        modules, waste = chain_module_usage(2500.0)
        assert modules == 3
        assert abs(waste - 1100.0) < 1e-6

    def test_rectangle_waste_fraction(self, rectangle_segments):
        result = build_wall_chains(rectangle_segments, NORMAL)
        fraction, waste_mm, supplied_mm = calculate_waste(result.chains)
        assert abs(waste_mm - 1600.0) < 1e-6
        assert abs(supplied_mm - 21600.0) < 1e-6
        assert abs(fraction - 1600.0 / 21600.0) < 1e-9
        assert abs(result.stats.waste_pct - fraction) < 1e-12


class TestAutoTune:
    """Tests for preset auto-tuning."""

    def test_evaluates_every_preset_in_order(self, fragmented_rectangle_segments):
        result = build_wall_chains_auto_tuned(fragmented_rectangle_segments)
        assert [e.preset for e in result.evaluations] == [
            ChainPreset.CONSERVATIVE, ChainPreset.NORMAL, ChainPreset.AGGRESSIVE,
        ]

    def test_selects_lowest_score(self, fragmented_rectangle_segments):
        result = build_wall_chains_auto_tuned(fragmented_rectangle_segments)
        best = min(e.score for e in result.evaluations)
        assert abs(preset_score(result) - best) < 1e-12

    def test_ties_keep_conservative(self, rectangle_segments):
        result = build_wall_chains_auto_tuned(rectangle_segments)
        scores = {e.preset: e.score for e in result.evaluations}
        assert scores[ChainPreset.CONSERVATIVE] == scores[ChainPreset.NORMAL]
        assert result.preset == ChainPreset.CONSERVATIVE

    def test_empty_input_uses_normal(self):
        result = build_wall_chains_auto_tuned([])
        assert result.preset == ChainPreset.NORMAL
        assert result.chains == []
