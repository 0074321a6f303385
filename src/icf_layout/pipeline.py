# File: src/icf_layout/pipeline.py

"""End-to-end layout run.

Stages run in a fixed order, each consuming the previous stage's records:

    segments -> chains -> junction topology -> footprint/sides
             -> panel layout -> interior corner offsets -> materials

Every run recomputes everything from its inputs.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Union

from .config.settings import ChainOptions, ChainPreset, LayoutConfig
from .footprint.footprint_detector import detect_footprint
from .footprint.footprint_types import FootprintResult
from .geometry.primitives import WallSegment
from .materials.quantity_summary import MaterialsSummary, calculate_quantities
from .panels.corner_optimizer import optimize_interior_corners
from .panels.panel_layout import layout_panels
from .panels.panel_types import (
    CornerAdjustment,
    LayoutOverrides,
    OpeningData,
    PanelLayoutResult,
)
from .wall_chains.chain_builder import build_wall_chains, build_wall_chains_auto_tuned
from .wall_chains.chain_types import ChainsResult
from .wall_chains.thickness_detector import ThicknessDetection, detect_core_thickness
from .wall_junctions.junction_classifier import classify_junctions
from .wall_junctions.junction_types import TopologyResult

logger = logging.getLogger(__name__)

AUTO_PRESET = "auto"


@dataclass
class LayoutResult:
    """Output of every stage of one layout run."""

    config: LayoutConfig
    overrides: LayoutOverrides
    chains: ChainsResult
    topology: TopologyResult
    footprint: FootprintResult
    layout: PanelLayoutResult
    corner_adjustments: Dict[str, CornerAdjustment] = field(default_factory=dict)
    materials: Optional[MaterialsSummary] = None
    thickness: Optional[ThicknessDetection] = None

    def to_dict(self) -> Dict:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "config": self.config.to_dict(),
            "overrides": self.overrides.to_dict(),
            "chains": self.chains.to_dict(),
            "topology": self.topology.to_dict(),
            "footprint": self.footprint.to_dict(),
            "layout": self.layout.to_dict(),
            "corner_adjustments": {
                panel_id: adj.to_dict()
                for panel_id, adj in sorted(self.corner_adjustments.items())
            },
            "materials": self.materials.to_dict() if self.materials else None,
            "thickness": self.thickness.to_dict() if self.thickness else None,
        }


def _coerce_openings(openings: Iterable[Union[OpeningData, Dict]]) -> List[OpeningData]:
    return [o if isinstance(o, OpeningData) else OpeningData.from_dict(o) for o in openings]


def _coerce_overrides(overrides: Union[LayoutOverrides, Dict, None]) -> LayoutOverrides:
    if overrides is None:
        return LayoutOverrides()
    if isinstance(overrides, LayoutOverrides):
        return overrides
    return LayoutOverrides.from_dict(overrides)


def build_chains(
    segments: List[WallSegment],
    preset: Union[str, ChainPreset, ChainOptions] = AUTO_PRESET,
) -> ChainsResult:
    """Run the chain builder under a preset name, explicit options, or auto-tuning."""
    if isinstance(preset, ChainOptions):
        return build_wall_chains(segments, preset)
    if preset == AUTO_PRESET:
        return build_wall_chains_auto_tuned(segments)
    return build_wall_chains(segments, ChainOptions.for_preset(preset))


def run_layout(
    segments: List[WallSegment],
    openings: Iterable[Union[OpeningData, Dict]] = (),
    overrides: Union[LayoutOverrides, Dict, None] = None,
    config: Optional[LayoutConfig] = None,
    preset: Union[str, ChainPreset, ChainOptions] = AUTO_PRESET,
    detect_core: bool = False,
) -> LayoutResult:
    """Lay out ICF modules for a floor plan.

    Args:
        segments: Raw wall centerline segments.
        openings: Doors and windows (records or dicts).
        overrides: Manual chain flips and locked panels.
        config: Layout configuration (defaults if None).
        preset: "auto", a preset name, or explicit ChainOptions.
        detect_core: Detect the concrete core from face-pair spacing in
            the raw segments; a detected core replaces ``config.core``.

    Returns:
        LayoutResult with the records of every stage.

    Raises:
        LayoutConfigError: If the configuration or tolerances are invalid.
    """
    if config is None:
        config = LayoutConfig()
    config.validate()
    overrides = _coerce_overrides(overrides)
    openings = _coerce_openings(openings)

    thickness = None
    if detect_core:
        thickness = detect_core_thickness(segments)
        if thickness.detected and thickness.core != config.core:
            logger.info(
                "Using detected core %d mm (%s confidence) instead of %d mm",
                thickness.core.value, thickness.confidence.value, config.core.value,
            )
            config = replace(config, core=thickness.core)

    logger.info(
        "Layout run: %d segments, %d openings, %d rows, core %d mm",
        len(segments), len(openings), config.layout_rows, config.core.value,
    )

    chains = build_chains(segments, preset)
    topology = classify_junctions(chains)
    footprint = detect_footprint(
        chains.chains,
        node_tolerance_mm=config.node_tolerance_mm,
        max_candidates=config.footprint_candidates,
        offsets=config.side_offsets_mm,
        flipped_chain_ids=overrides.flipped_chain_ids,
    )
    layout = layout_panels(chains.chains, topology, footprint, openings, config)
    adjustments = optimize_interior_corners(
        chains.chains,
        topology.l_junctions,
        layout,
        core=config.core,
        locked_panel_ids=overrides.locked_panel_ids,
    )
    materials = calculate_quantities(chains.chains, layout, topology, config)

    return LayoutResult(
        config=config,
        overrides=overrides,
        chains=chains,
        topology=topology,
        footprint=footprint,
        layout=layout,
        corner_adjustments=adjustments,
        materials=materials,
        thickness=thickness,
    )
