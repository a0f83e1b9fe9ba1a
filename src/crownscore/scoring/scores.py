"""Tree-crown plausibility scores.

Four independent measures of how tree-like a segment is:

- size: point count against a density / height driven threshold
- orientation: how close the highest point sits to the footprint centre
- regularity: hull area against the disc reaching the 95th-percentile vertex
- circularity: major / minor principal extent of the hull (1 for a disc)

The aggregate is the plain mean of the four, computed after all of them.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Dict, Sequence

import numpy as np

from crownscore.pointcloud.projection import planar_centroid
from crownscore.scoring.ellipse import principal_extents

if TYPE_CHECKING:
    from crownscore.pointcloud.segment import TreeSegment

logger = logging.getLogger(__name__)

REGULARITY_PERCENTILE = 0.95


@dataclass
class SegmentScores:
    """Sub-scores of one segment. All default to 0."""

    size: float = 0.0
    orientation: float = 0.0
    regularity: float = 0.0
    circularity: float = 0.0

    @property
    def aggregate(self) -> float:
        return (self.size + self.orientation + self.regularity + self.circularity) / 4.0

    def as_dict(self) -> Dict[str, float]:
        result = asdict(self)
        result["aggregate"] = self.aggregate
        return result


def has_hull(segment: "TreeSegment") -> bool:
    """Precondition shared by the hull-based scores."""
    return segment.area != 0 and segment.count > 2 and len(segment.hull_vertices) > 2


def _apex_distances(segment: "TreeSegment") -> np.ndarray:
    """Planar distances from the highest point to every hull vertex."""
    apex = segment.highest_point()
    verts = np.asarray(segment.hull_vertices, dtype=np.float64)
    return np.hypot(verts[:, 0] - apex.x, verts[:, 1] - apex.y)


def percentile_radius(distances: Sequence[float], percentile: float = REGULARITY_PERCENTILE) -> float:
    """Value at 1-indexed rank ``ceil(percentile * n)`` of the sorted distances."""
    ordered = sorted(distances)
    if not ordered:
        return 0.0
    # round() first so 0.95 * 20 does not become rank 20 through float noise
    rank = math.ceil(round(percentile * len(ordered), 9))
    rank = min(max(rank, 1), len(ordered))
    return float(ordered[rank - 1])


def size_score(segment: "TreeSegment", k: int) -> float:
    """Point count against ``k * D * ln(H)``."""
    n = segment.count
    if n == 0:
        return 0.0

    if segment.area != 0:
        density = n / segment.area
    elif segment.pair_distance != 0:
        density = n / segment.pair_distance
    else:
        return 0.0

    height = segment.highest_point().z
    if height <= 0:
        logger.debug("Size score skipped: non-positive apex elevation %.3f", height)
        return 0.0

    threshold = k * density * math.log(height)
    if threshold <= 0:
        return 0.0
    if n > threshold:
        return 1.0
    return n / threshold


def orientation_score(segment: "TreeSegment") -> float:
    """Eccentricity of the highest point relative to the point centroid."""
    if not has_hull(segment):
        return 0.0

    apex = segment.highest_point()
    dist_mg = math.hypot(*np.subtract(apex.planar, planar_centroid(segment.points)))
    dist_gch = float(np.mean(_apex_distances(segment)))
    if dist_gch == 0:
        return 0.0

    if dist_mg <= dist_gch / 2.0:
        return 1.0 - 2.0 * dist_mg / dist_gch
    return 0.0


def regularity_score(segment: "TreeSegment") -> float:
    """Hull area over the area of the 95th-percentile apex disc."""
    if not has_hull(segment):
        return 0.0

    radius = percentile_radius(_apex_distances(segment))
    if radius == 0:
        return 0.0
    return segment.area / (math.pi * radius * radius)


def circularity_score(segment: "TreeSegment") -> float:
    """Major over minor principal extent of the hull."""
    if not has_hull(segment):
        return 0.0

    extents = principal_extents(segment.hull_vertices)
    major, minor = max(extents), min(extents)
    if minor == 0:
        return 0.0
    return major / minor


def score_segment(segment: "TreeSegment", k: int) -> SegmentScores:
    """Compute all four sub-scores for a segment."""
    return SegmentScores(
        size=size_score(segment, k),
        orientation=orientation_score(segment),
        regularity=regularity_score(segment),
        circularity=circularity_score(segment),
    )
