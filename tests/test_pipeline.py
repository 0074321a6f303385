# File: tests/test_pipeline.py

"""End-to-end tests for a layout run."""

import json
import logging

import pytest

from icf_layout import (
    ChainOptions,
    ChainPreset,
    ConcreteCore,
    CornerMode,
    LayoutConfig,
    LayoutConfigError,
    LayoutOverrides,
    run_layout,
)
from icf_layout.footprint import FootprintStatus
from icf_layout.utils.logging_config import LayoutLogger, get_logger

from conftest import chain_on_line, make_segments


class TestRunLayout:
    """Tests for run_layout."""

    def test_rectangle(self, rectangle_segments, short_config):
        result = run_layout(rectangle_segments, config=short_config)
        assert len(result.chains.chains) == 4
        assert result.topology.junction_counts["L"] == 4
        assert result.footprint.status == FootprintStatus.OK
        assert result.layout.stats.rows == 2
        assert len(result.corner_adjustments) == 16
        assert result.materials.panels == 36

    def test_default_config(self, rectangle_segments):
        result = run_layout(rectangle_segments)
        assert result.config.rows == 7
        assert result.materials.rows == 7

    def test_auto_tune_is_default(self, fragmented_rectangle_segments, short_config):
        result = run_layout(fragmented_rectangle_segments, config=short_config)
        assert len(result.chains.evaluations) == 3
        assert len(result.chains.chains) == 4

    def test_named_preset(self, rectangle_segments, short_config):
        result = run_layout(rectangle_segments, config=short_config, preset="aggressive")
        assert result.chains.preset == ChainPreset.AGGRESSIVE
        assert result.chains.evaluations == []

    def test_explicit_options(self, rectangle_segments, short_config):
        options = ChainOptions(snap_tol_mm=5.0, gap_tol_mm=10.0)
        result = run_layout(rectangle_segments, config=short_config, preset=options)
        assert result.chains.options is options

    def test_openings_as_dicts(self, rectangle_segments, short_config):
        baseline = run_layout(rectangle_segments, config=short_config)
        wall = chain_on_line(baseline.chains.chains, y=0)
        result = run_layout(
            rectangle_segments,
            openings=[{"id": "d1", "chain_id": wall.id, "offset_mm": 2000, "width_mm": 1000}],
            config=short_config,
        )
        assert len(result.layout.opening_closures) == 4
        assert result.materials.closures_by_reason["opening"] == 4
        assert baseline.materials.closures_by_reason["opening"] == 0

    def test_overrides_as_dict(self, rectangle_segments, short_config):
        baseline = run_layout(rectangle_segments, config=short_config)
        wall = chain_on_line(baseline.chains.chains, y=0)
        result = run_layout(
            rectangle_segments,
            overrides={"flipped_chain_ids": [wall.id]},
            config=short_config,
        )
        assert isinstance(result.overrides, LayoutOverrides)
        assert result.footprint.stats.flipped_by_override == 1
        assert result.footprint.side_of(wall.id).outside_is_positive_perp is (
            not baseline.footprint.side_of(wall.id).outside_is_positive_perp
        )

    def test_locked_panels(self, rectangle_segments, short_config):
        baseline = run_layout(rectangle_segments, config=short_config)
        locked = sorted(baseline.corner_adjustments)[0]
        result = run_layout(
            rectangle_segments,
            overrides=LayoutOverrides.create(locked_panel_ids=[locked]),
            config=short_config,
        )
        assert locked not in result.corner_adjustments

    def test_empty_plan(self, short_config):
        result = run_layout([], config=short_config)
        assert result.chains.chains == []
        assert result.footprint.status == FootprintStatus.NO_WALLS
        assert result.layout.panels == []
        assert result.materials.panels == 0
        assert result.materials.connectors_total == 0

    def test_repeat_runs_match(self, partitioned_segments, short_config):
        first = run_layout(partitioned_segments, config=short_config).to_dict()
        second = run_layout(partitioned_segments, config=short_config).to_dict()
        assert first == second

    def test_result_is_json_serializable(self, partitioned_segments, short_config):
        result = run_layout(partitioned_segments, config=short_config)
        text = json.dumps(result.to_dict())
        data = json.loads(text)
        assert data["config"]["core"] == 150
        assert data["chains"]["preset"] in ("conservative", "normal", "aggressive")
        assert data["materials"]["panels"] == result.materials.panels

    def test_core_detected_from_face_drawing(self, short_config):
        faces = make_segments([
            (0, 0, 6000, 0), (6000, 0, 6000, 4000), (6000, 4000, 0, 4000), (0, 4000, 0, 0),
            (353, 353, 5647, 353), (5647, 353, 5647, 3647),
            (5647, 3647, 353, 3647), (353, 3647, 353, 353),
        ])
        result = run_layout(faces, config=short_config, detect_core=True)
        assert result.config.core == ConcreteCore.CORE_220
        assert short_config.core == ConcreteCore.CORE_150
        assert result.to_dict()["thickness"]["core"] == 220

    def test_core_detection_is_opt_in(self, rectangle_segments, short_config):
        result = run_layout(rectangle_segments, config=short_config)
        assert result.thickness is None
        assert result.to_dict()["thickness"] is None


class TestConfiguration:
    """Tests for configuration validation."""

    def test_bad_height(self, rectangle_segments):
        with pytest.raises(LayoutConfigError) as excinfo:
            run_layout(rectangle_segments, config=LayoutConfig(wall_height_mm=0.0))
        assert "wall_height_mm must be positive" in excinfo.value.errors

    def test_bad_rebar_spacing(self):
        with pytest.raises(LayoutConfigError):
            LayoutConfig(rebar_spacing_cm=12).validate()

    def test_offsets_must_ascend(self):
        with pytest.raises(LayoutConfigError) as excinfo:
            LayoutConfig(side_offsets_mm=(300.0, 150.0)).validate()
        assert excinfo.value.to_dict()["code"] == "invalid_configuration"

    def test_round_trip(self):
        config = LayoutConfig(wall_height_mm=2400.0, core=220, visible_rows=3)
        again = LayoutConfig.from_dict(config.to_dict())
        assert again == config
        assert again.layout_rows == 3

    def test_corner_mode_round_trip(self):
        config = LayoutConfig(corner_mode="topo")
        assert config.corner_mode == CornerMode.TOPO
        assert config.to_dict()["corner_mode"] == "topo"
        assert LayoutConfig.from_dict(config.to_dict()) == config
        assert LayoutConfig.from_dict({}).corner_mode == CornerMode.OVERLAP_CUT

    def test_options_from_preset_dict(self):
        options = ChainOptions.from_dict({"preset": "aggressive", "gap_tol_mm": 80.0})
        assert options.snap_tol_mm == 40.0
        assert options.gap_tol_mm == 80.0
        assert options.preset == ChainPreset.AGGRESSIVE


class TestLogging:
    """Tests for the logging helpers."""

    def test_trace_level(self, caplog):
        logger = get_logger("icf_layout.test")
        with caplog.at_level(LayoutLogger.TRACE_LEVEL, logger="icf_layout.test"):
            logger.trace("vote %d", 3)
        assert "vote 3" in caplog.text

    def test_configure_console(self):
        package_logger = logging.getLogger("icf_layout")
        try:
            assert LayoutLogger.configure(debug_mode=True) is None
            assert package_logger.level == logging.DEBUG
            assert len(package_logger.handlers) == 1
        finally:
            package_logger.handlers.clear()
            package_logger.setLevel(logging.NOTSET)
