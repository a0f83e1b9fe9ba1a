"""Incrementally grown tree segment.

A ``TreeSegment`` owns the points of one candidate tree crown, its
convex footprint boundary and the metrics derived from that boundary
(area, last area change, two-point distance). The boundary is only
rebuilt when a new point falls outside it.
"""

from __future__ import annotations

import logging
import math
from typing import List, MutableSequence, Optional, Tuple

from shapely.geometry.base import BaseGeometry

from crownscore.pointcloud.boundary import EMPTY_BOUNDARY, Boundary, convex_boundary
from crownscore.pointcloud.projection import PlanarXY, PointXYZ, planar_distance
from crownscore.scoring.scores import SegmentScores, score_segment

logger = logging.getLogger(__name__)

# Slot value in a global id array meaning "not claimed by any segment"
UNASSIGNED = 0


class TreeSegment:
    """Points, convex boundary and cached metrics of one candidate tree."""

    def __init__(self, seed: Optional[PointXYZ] = None):
        self.points: List[PointXYZ] = []
        self.boundary: Boundary = EMPTY_BOUNDARY
        self.apex: Optional[PlanarXY] = None
        self.area = 0.0
        self.area_delta = 0.0
        self.pair_distance = 0.0
        self.hull_vertices: Tuple[PlanarXY, ...] = ()
        self.scores = SegmentScores()
        self._highest: Optional[PointXYZ] = None

        if seed is not None:
            self.add_point(seed)

    def __len__(self) -> int:
        return len(self.points)

    def __repr__(self) -> str:
        return f"TreeSegment(count={self.count}, area={self.area:.3f})"

    @property
    def count(self) -> int:
        return len(self.points)

    @property
    def boundary_polygon(self) -> BaseGeometry:
        """Boundary as a shapely geometry (Polygon once 3+ points spread out)."""
        return self.boundary.geometry

    # ── Growth ──────────────────────────────────────────────────────────────

    def add_point(self, point: PointXYZ) -> None:
        """Admit a point, rebuilding the boundary only if it lies outside."""
        self.points.append(point)
        if self.apex is None:
            self.apex = point.planar
        if self._highest is not None and point.z > self._highest.z:
            self._highest = point

        xy = point.planar
        if not self.boundary.covers(xy):
            self.boundary = self.boundary.extended(xy)
            self.recompute_area()

        if self.count == 2:
            self.update_pair_distance()

    def test_area_change(self, point: PointXYZ) -> float:
        """Absolute area change admitting ``point`` would cause. Does not mutate."""
        xy = point.planar
        if self.boundary.covers(xy):
            return 0.0
        return abs(self.boundary.extended(xy).area - self.area)

    def nearest_distance(self, point: PointXYZ) -> float:
        """Smallest planar distance from ``point`` to any point of the segment."""
        if not self.points:
            return math.inf
        xy = point.planar
        return min(planar_distance(xy, p.planar) for p in self.points)

    def rebuild(self) -> None:
        """Recompute boundary and metrics from every point (e.g. after a merge)."""
        previous = self.area
        self.boundary = convex_boundary(p.planar for p in self.points)
        self._highest = None
        self.area = 0.0
        self.area_delta = 0.0
        self.pair_distance = 0.0
        self.hull_vertices = ()
        if self.count >= 3:
            self.area = self.boundary.area
            self.area_delta = abs(self.area - previous)
            self.hull_vertices = self.boundary.vertices
        elif self.count == 2:
            self.update_pair_distance()

    # ── Metric cache ────────────────────────────────────────────────────────

    def recompute_area(self) -> None:
        """Refresh area, area delta and hull snapshot after a boundary change."""
        if self.count <= 2:
            return
        previous = self.area
        self.area = self.boundary.area
        self.area_delta = abs(self.area - previous)
        self.hull_vertices = self.boundary.vertices
        self.pair_distance = 0.0

    def update_pair_distance(self) -> None:
        if self.count != 2:
            return
        self.pair_distance = planar_distance(self.points[0].planar, self.points[1].planar)

    def highest_point(self) -> Optional[PointXYZ]:
        """Point of maximum elevation; the earliest one wins ties."""
        if self._highest is None and self.points:
            self._highest = max(self.points, key=lambda p: p.z)
        return self._highest

    def lowest_point(self) -> Optional[PointXYZ]:
        """Point of minimum elevation; the earliest one wins ties."""
        if not self.points:
            return None
        return min(self.points, key=lambda p: p.z)

    # ── Scoring / registration ──────────────────────────────────────────────

    def get_score(self, k: int) -> float:
        """Compute the four sub-scores and return their mean.

        Parameters
        ----------
        k : neighbour count used by the density threshold

        Returns
        -------
        Aggregate score; the sub-scores are kept on ``self.scores``.
        """
        self.scores = score_segment(self, k)
        logger.debug(
            "Scored segment of %d points: size=%.3f orientation=%.3f "
            "regularity=%.3f circularity=%.3f -> %.3f",
            self.count,
            self.scores.size,
            self.scores.orientation,
            self.scores.regularity,
            self.scores.circularity,
            self.scores.aggregate,
        )
        return self.scores.aggregate

    def assign_segment_id(self, global_ids: MutableSequence[int], next_index: int) -> int:
        """Claim unassigned point slots with ``next_index``.

        Points already claimed by an earlier segment keep that claim.

        Returns
        -------
        The index to hand to the next segment.
        """
        for point in self.points:
            if global_ids[point.point_id] == UNASSIGNED:
                global_ids[point.point_id] = next_index
        return next_index + 1
