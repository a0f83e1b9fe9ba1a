"""Planar projection of 3-D LiDAR points.

A point keeps its elevation; every footprint computation works on
the (x, y) projection only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

PlanarXY = Tuple[float, float]


@dataclass(frozen=True)
class PointXYZ:
    """A single LiDAR return with a stable external identifier."""

    x: float
    y: float
    z: float
    point_id: int = 0

    @property
    def planar(self) -> PlanarXY:
        """(x, y) projection of the point."""
        return (self.x, self.y)


def planar_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance between two points in the horizontal plane."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def planar_centroid(points: Sequence[PointXYZ]) -> PlanarXY:
    """Mean (x, y) of a non-empty point sequence."""
    xy = np.array([p.planar for p in points], dtype=np.float64)
    cx, cy = xy.mean(axis=0)
    return (float(cx), float(cy))


def points_from_array(
    xyz: np.ndarray,
    point_ids: Optional[np.ndarray] = None,
) -> List[PointXYZ]:
    """Convert an (N, 3+) array into PointXYZ objects.

    Parameters
    ----------
    xyz : (N, 3+) array, first 3 columns are XYZ
    point_ids : optional (N,) identifiers; defaults to the row index

    Returns
    -------
    List of PointXYZ in row order
    """
    if point_ids is None:
        point_ids = np.arange(len(xyz))
    elif len(point_ids) != len(xyz):
        raise ValueError(
            f"Got {len(xyz)} points but {len(point_ids)} point ids"
        )
    return [
        PointXYZ(float(row[0]), float(row[1]), float(row[2]), int(pid))
        for row, pid in zip(xyz, point_ids)
    ]
