"""Segment id bookkeeping across a whole point cloud.

Keeps one integer slot per LiDAR point. A slot holds the id of the
first accepted segment that claimed the point, or 0 if none did.
"""

from __future__ import annotations

import logging

import numpy as np

from crownscore.pointcloud.segment import UNASSIGNED, TreeSegment

logger = logging.getLogger(__name__)


class SegmentRegistry:
    """Hands out segment ids and maps point ids back to them."""

    def __init__(self, n_points: int):
        self.segment_ids = np.full(n_points, UNASSIGNED, dtype=np.int64)
        self.next_index = 1

    def register(self, segment: TreeSegment) -> int:
        """Assign the next id to ``segment`` and return it.

        Raises ValueError if a point id has no slot in the registry.
        """
        bad = [p.point_id for p in segment.points if not 0 <= p.point_id < len(self.segment_ids)]
        if bad:
            raise ValueError(
                f"Point ids outside [0, {len(self.segment_ids)}): {sorted(set(bad))[:10]}"
            )
        index = self.next_index
        self.next_index = segment.assign_segment_id(self.segment_ids, self.next_index)
        logger.debug("Registered segment %d (%d points)", index, segment.count)
        return index

    def members(self, segment_id: int) -> np.ndarray:
        """Point ids currently mapped to ``segment_id``."""
        return np.flatnonzero(self.segment_ids == segment_id)

    @property
    def n_registered(self) -> int:
        return self.next_index - 1

    @property
    def n_unassigned(self) -> int:
        return int(np.sum(self.segment_ids == UNASSIGNED))
