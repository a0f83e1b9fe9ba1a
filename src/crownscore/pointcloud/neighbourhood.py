"""Planar neighbour-profile filtering.

Collaborator-facing helper for region-growing clustering, which lives
outside this package: it decides which of a seed's nearest neighbours
are close enough to join the seed's TreeSegment. Nothing in the scoring
pipeline calls it; it operates before points reach ``build_segments``.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from crownscore.pointcloud.projection import PointXYZ


def filter_planar_profile(profile: Sequence[PointXYZ]) -> List[PointXYZ]:
    """Keep the reference point and its neighbours up to the first outlier.

    The threshold is the mean plus twice the standard deviation of the
    planar distances from ``profile[0]`` to the other points.

    Parameters
    ----------
    profile : reference point first, then neighbours by increasing distance

    Returns
    -------
    The reference followed by the leading neighbours within the threshold
    """
    if len(profile) <= 1:
        return list(profile[:1])

    ref = profile[0]
    xy = np.array([p.planar for p in profile[1:]], dtype=np.float64)
    dist = np.hypot(xy[:, 0] - ref.x, xy[:, 1] - ref.y)
    threshold = dist.mean() + 2.0 * dist.std()

    kept = [ref]
    for point, d in zip(profile[1:], dist):
        if d > threshold:
            break
        kept.append(point)
    return kept
