# File: src/icf_layout/materials/quantity_summary.py

"""Materials quantity summary.

Aggregates counts from the chains, panel layout and junction topology into
the quantities a bill of materials needs. Modules are counted once per
position along the wall (the positive face), since one module carries
both faces.

Connector ("tarugo") rules:
    base = 2 per module
    per row: -1 per L-corner, +1 per T-junction, +2 per X-junction
    injection = 1 per metre of wall per row
"""

import math
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..config.constants import (
    CLOSURE_UNIT_LENGTH_M,
    GRID_COVERAGE_M,
    WEBS_PER_PANEL,
)
from ..config.settings import LayoutConfig
from ..panels.panel_types import (
    ClosureReason,
    PanelFace,
    PanelKind,
    PanelLayoutResult,
)
from ..wall_chains.chain_builder import calculate_waste
from ..wall_chains.chain_types import WallChain
from ..wall_junctions.junction_types import TopologyResult

logger = logging.getLogger(__name__)

# Connector adjustment per junction and row
CONNECTOR_ADJUSTMENT = {"L": -1, "T": 1, "X": 2}


@dataclass
class MaterialsSummary:
    """Quantities for one layout.

    Attributes:
        rows: Module rows laid out.
        total_wall_length_mm: Sum of chain lengths.
        panels: Module count.
        panels_per_row: Module count keyed by row.
        connectors_base: 2 per module.
        connectors_adjustment: Junction adjustments over all rows.
        connectors_total: Base plus adjustments, never negative.
        connectors_injection: Injection connectors.
        closures_units: Closure pieces.
        closures_by_reason: Closure pieces keyed by reason.
        closures_m: Closure linear metres.
        grids_per_row: Stabilization grids on each grid row.
        grid_rows: Rows receiving grids.
        grids_total: Grids over all grid rows.
        webs_per_panel: Webs per module for the rebar spacing.
        webs_total: Webs over all modules.
        cuts_count: Corner-cut and end-cut modules.
        cuts_length_mm: Material removed by those cuts.
        waste_pct: Module waste fraction of the chain set.
    """

    rows: int = 0
    total_wall_length_mm: float = 0.0
    panels: int = 0
    panels_per_row: Dict[int, int] = field(default_factory=dict)
    connectors_base: int = 0
    connectors_adjustment: int = 0
    connectors_total: int = 0
    connectors_injection: int = 0
    closures_units: int = 0
    closures_by_reason: Dict[str, int] = field(default_factory=dict)
    closures_m: float = 0.0
    grids_per_row: int = 0
    grid_rows: List[int] = field(default_factory=list)
    grids_total: int = 0
    webs_per_panel: int = 0
    webs_total: int = 0
    cuts_count: int = 0
    cuts_length_mm: float = 0.0
    waste_pct: float = 0.0

    def to_dict(self) -> Dict:
        return {
            "rows": self.rows,
            "total_wall_length_mm": round(self.total_wall_length_mm, 3),
            "panels": self.panels,
            "panels_per_row": {str(k): v for k, v in sorted(self.panels_per_row.items())},
            "connectors": {
                "base": self.connectors_base,
                "adjustment": self.connectors_adjustment,
                "total": self.connectors_total,
                "injection": self.connectors_injection,
            },
            "closures": {
                "units": self.closures_units,
                "by_reason": dict(self.closures_by_reason),
                "meters": round(self.closures_m, 3),
            },
            "grids": {
                "per_row": self.grids_per_row,
                "rows": list(self.grid_rows),
                "total": self.grids_total,
            },
            "webs": {
                "per_panel": self.webs_per_panel,
                "total": self.webs_total,
            },
            "cuts": {
                "count": self.cuts_count,
                "length_mm": round(self.cuts_length_mm, 3),
            },
            "waste_pct": round(self.waste_pct, 6),
        }


def calculate_quantities(
    chains: List[WallChain],
    layout: PanelLayoutResult,
    topology: TopologyResult,
    config: Optional[LayoutConfig] = None,
) -> MaterialsSummary:
    """Build the materials summary for a layout."""
    if config is None:
        config = LayoutConfig()
    rows = layout.stats.rows
    summary = MaterialsSummary(rows=rows)
    summary.total_wall_length_mm = sum(c.length_mm for c in chains)

    modules = [p for p in layout.panels if p.face == PanelFace.POSITIVE]
    summary.panels = len(modules)
    for panel in modules:
        summary.panels_per_row[panel.row] = summary.panels_per_row.get(panel.row, 0) + 1

    # Connectors
    counts = topology.junction_counts
    per_row = sum(CONNECTOR_ADJUSTMENT[t] * counts.get(t, 0) for t in CONNECTOR_ADJUSTMENT)
    summary.connectors_base = 2 * summary.panels
    summary.connectors_adjustment = per_row * rows
    summary.connectors_total = max(0, summary.connectors_base + summary.connectors_adjustment)
    summary.connectors_injection = int(
        math.ceil(summary.total_wall_length_mm / 1000.0 * rows - 1e-9)
    )

    # Closures
    by_reason = {r.value: 0 for r in ClosureReason}
    for closure in list(layout.closures) + list(layout.opening_closures):
        by_reason[closure.reason.value] += 1
    summary.closures_by_reason = by_reason
    summary.closures_units = sum(by_reason.values())
    summary.closures_m = summary.closures_units * CLOSURE_UNIT_LENGTH_M

    # Stabilization grids
    summary.grid_rows = config.grids.rows(rows)
    summary.grids_per_row = int(
        math.ceil(summary.total_wall_length_mm / 1000.0 / GRID_COVERAGE_M - 1e-9)
    )
    summary.grids_total = summary.grids_per_row * len(summary.grid_rows)

    # Webs
    summary.webs_per_panel = WEBS_PER_PANEL[config.rebar_spacing_cm]
    summary.webs_total = summary.webs_per_panel * summary.panels

    # Cuts
    for panel in modules:
        if panel.kind in (PanelKind.CORNER_CUT, PanelKind.END_CUT):
            summary.cuts_count += 1
            summary.cuts_length_mm += panel.cut_mm

    summary.waste_pct, _, _ = calculate_waste(chains)

    logger.info(
        "Materials: %d modules, %d connectors, %d closures (%.1f m), %d grids, %d webs",
        summary.panels, summary.connectors_total, summary.closures_units,
        summary.closures_m, summary.grids_total, summary.webs_total,
    )
    return summary
