# File: src/icf_layout/materials/__init__.py

"""Materials quantity module.

Usage:
    from icf_layout.materials import calculate_quantities

    summary = calculate_quantities(chains, layout, topology, config)
    print(summary.panels, summary.connectors_total)
"""

from .quantity_summary import (
    CONNECTOR_ADJUSTMENT,
    MaterialsSummary,
    calculate_quantities,
)

__all__ = [
    "calculate_quantities",
    "MaterialsSummary",
    "CONNECTOR_ADJUSTMENT",
]
