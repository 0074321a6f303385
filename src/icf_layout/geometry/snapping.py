# File: src/icf_layout/geometry/snapping.py

"""Endpoint clustering with a spatial hash.

A SnapIndex is built once per pipeline stage and queried for every
endpoint. Points are bucketed into square cells of the snap tolerance;
a query only inspects the 3x3 block of cells around the point, so snapping
n points is O(n) amortized. Each cluster's position is the running centroid
of the points merged into it.

Lifecycle: construct with a tolerance, call ``snap()`` for each point in a
deterministic order, then read cluster positions. The index is owned by
the caller and never shared between runs.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .primitives import Point2D


@dataclass
class _Cluster:
    sum_x: float
    sum_y: float
    count: int
    cell: Tuple[int, int]

    @property
    def x(self) -> float:
        return self.sum_x / self.count

    @property
    def y(self) -> float:
        return self.sum_y / self.count


class SnapIndex:
    """Grid-bucketed nearest-cluster index.

    Attributes:
        tolerance: Merge distance in mm.
        cell_size: Hash cell edge length, max(1, tolerance).
    """

    def __init__(self, tolerance: float):
        self.tolerance = tolerance
        self.cell_size = max(1.0, tolerance)
        self._clusters: List[_Cluster] = []
        self._cells: Dict[Tuple[int, int], List[int]] = {}

    def __len__(self) -> int:
        return len(self._clusters)

    def _cell_of(self, x: float, y: float) -> Tuple[int, int]:
        return (
            int(math.floor(x / self.cell_size)),
            int(math.floor(y / self.cell_size)),
        )

    def _nearest(self, x: float, y: float) -> int:
        """Index of the nearest cluster within tolerance, or -1."""
        cx, cy = self._cell_of(x, y)
        best = -1
        best_d2 = self.tolerance * self.tolerance
        for gx in (cx - 1, cx, cx + 1):
            for gy in (cy - 1, cy, cy + 1):
                for idx in self._cells.get((gx, gy), ()):
                    cluster = self._clusters[idx]
                    d2 = (cluster.x - x) ** 2 + (cluster.y - y) ** 2
                    if d2 <= best_d2 and (best < 0 or d2 < best_d2 or idx < best):
                        best = idx
                        best_d2 = d2
        return best

    def add(self, point: Point2D) -> int:
        """Merge a point into the index.

        Returns:
            Cluster id the point was merged into.
        """
        idx = self._nearest(point.x, point.y)
        if idx < 0:
            cell = self._cell_of(point.x, point.y)
            self._clusters.append(_Cluster(point.x, point.y, 1, cell))
            idx = len(self._clusters) - 1
            self._cells.setdefault(cell, []).append(idx)
            return idx

        cluster = self._clusters[idx]
        cluster.sum_x += point.x
        cluster.sum_y += point.y
        cluster.count += 1

        # Centroid may drift into a neighbouring cell
        new_cell = self._cell_of(cluster.x, cluster.y)
        if new_cell != cluster.cell:
            self._cells[cluster.cell].remove(idx)
            self._cells.setdefault(new_cell, []).append(idx)
            cluster.cell = new_cell
        return idx

    def position(self, cluster_id: int) -> Point2D:
        """Current centroid of a cluster."""
        cluster = self._clusters[cluster_id]
        return Point2D(cluster.x, cluster.y)

    def snap(self, point: Point2D) -> Point2D:
        """Position of the cluster a point belongs to, without merging it."""
        idx = self._nearest(point.x, point.y)
        if idx < 0:
            return point
        return self.position(idx)


def snap_points(points: List[Point2D], tolerance: float) -> List[Point2D]:
    """Cluster points and replace each with its final cluster centroid.

    Args:
        points: Points in deterministic order.
        tolerance: Merge distance in mm.

    Returns:
        One snapped point per input point, in input order.
    """
    index = SnapIndex(tolerance)
    assignment = [index.add(p) for p in points]
    return [index.position(cid) for cid in assignment]
