# File: src/icf_layout/panels/openings.py

"""Opening subtraction per chain and row.

An opening removes its span from every row it reaches. The rows it
affects run from ``floor(sill / H)`` up to but excluding
``ceil((sill + height) / H)``.
"""

import math
import logging
from typing import Dict, List, Sequence, Tuple

from ..config.constants import PANEL_HEIGHT
from ..wall_chains.chain_types import WallChain
from .panel_types import ClosurePlacement, ClosureReason, OpeningData

logger = logging.getLogger(__name__)

Interval = Tuple[float, float]


def affected_rows(opening: OpeningData, row_height: float = PANEL_HEIGHT) -> range:
    """Rows whose modules intersect the opening."""
    start = int(math.floor(opening.sill_mm / row_height + 1e-9))
    end = int(math.ceil((opening.sill_mm + opening.height_mm) / row_height - 1e-9))
    return range(start, max(start, end))


def openings_by_chain(openings: Sequence[OpeningData]) -> Dict[str, List[OpeningData]]:
    grouped: Dict[str, List[OpeningData]] = {}
    for opening in openings:
        grouped.setdefault(opening.chain_id, []).append(opening)
    return grouped


def remaining_intervals(
    chain_length_mm: float,
    openings: Sequence[OpeningData],
    row: int,
) -> List[Interval]:
    """Intervals of a chain left after subtracting the openings on a row.

    Opening spans are clipped to the chain, merged where they overlap, and
    subtracted from ``[0, chain_length]``.

    Args:
        chain_length_mm: Chain length.
        openings: Openings on this chain.
        row: Row index.

    Returns:
        Sorted, disjoint ``(start, end)`` intervals.
    """
    spans = []
    for opening in openings:
        if row not in affected_rows(opening):
            continue
        start = max(0.0, opening.offset_mm)
        end = min(chain_length_mm, opening.end_mm)
        if end > start:
            spans.append((start, end))

    if not spans:
        return [(0.0, chain_length_mm)]

    spans.sort()
    merged: List[List[float]] = []
    for start, end in spans:
        if merged and start <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])

    intervals: List[Interval] = []
    cursor = 0.0
    for start, end in merged:
        if start > cursor:
            intervals.append((cursor, start))
        cursor = end
    if cursor < chain_length_mm:
        intervals.append((cursor, chain_length_mm))
    return intervals


def validate_openings(
    chains: Sequence[WallChain],
    openings: Sequence[OpeningData],
) -> List[OpeningData]:
    """Drop openings on unknown chains and warn about spans past the chain end."""
    lengths = {c.id: c.length_mm for c in chains}
    valid = []
    for opening in openings:
        length = lengths.get(opening.chain_id)
        if length is None:
            logger.warning("Opening %s references unknown chain %s", opening.id, opening.chain_id)
            continue
        if opening.width_mm <= 0 or opening.height_mm <= 0:
            logger.warning("Opening %s has no extent; ignored", opening.id)
            continue
        if opening.offset_mm < 0 or opening.end_mm > length + 1e-6:
            logger.warning(
                "Opening %s (%.0f-%.0f mm) exceeds chain %s (%.0f mm); clipped",
                opening.id, opening.offset_mm, opening.end_mm, opening.chain_id, length,
            )
        valid.append(opening)
    return valid


def opening_edge_closures(
    chains: Sequence[WallChain],
    openings: Sequence[OpeningData],
    closure_width_mm: float,
    layout_rows: int,
) -> List[ClosurePlacement]:
    """Closures sealing both jambs of every opening on each affected row.

    Each closure is inset into the opening span so its outer face is flush
    with the jamb; narrow openings split their span between the two jambs.
    """
    lengths = {c.id: c.length_mm for c in chains}
    closures: List[ClosurePlacement] = []
    counters: Dict[Tuple[str, int], int] = {}

    for opening in openings:
        length = lengths.get(opening.chain_id)
        if length is None:
            continue
        lo = max(0.0, opening.offset_mm)
        hi = min(length, opening.end_mm)
        width = min(closure_width_mm, (hi - lo) / 2)
        if width <= 0:
            continue
        jambs = [(p, inward) for p, inward in ((lo, 1.0), (hi, -1.0)) if 0.0 < p < length]
        for row in affected_rows(opening):
            if row >= layout_rows:
                break
            for jamb, inward in jambs:
                key = (opening.chain_id, row)
                n = counters.get(key, 0)
                counters[key] = n + 1
                closures.append(
                    ClosurePlacement(
                        closure_id=f"{opening.chain_id}:{row}:opening:{n}",
                        chain_id=opening.chain_id,
                        row=row,
                        position_mm=jamb + inward * width / 2,
                        width_mm=width,
                        reason=ClosureReason.OPENING,
                    )
                )
    return closures
