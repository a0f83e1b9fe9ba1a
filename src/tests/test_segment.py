"""Tests for incremental boundary maintenance and the metric cache."""

from __future__ import annotations

import math

import numpy as np
import pytest
from shapely.geometry import Polygon

from crownscore.pointcloud.boundary import convex_boundary
from crownscore.pointcloud.projection import PointXYZ
from crownscore.pointcloud.segment import TreeSegment


def test_empty_segment():
    seg = TreeSegment()
    assert seg.count == 0
    assert seg.area == 0
    assert seg.pair_distance == 0
    assert seg.boundary.is_empty
    assert seg.highest_point() is None
    assert seg.lowest_point() is None


def test_single_point_boundary_is_that_point():
    seg = TreeSegment(PointXYZ(3.0, 4.0, 12.0, 7))
    assert seg.count == 1
    assert seg.area == 0
    assert seg.pair_distance == 0
    assert seg.boundary.vertices == ((3.0, 4.0),)
    assert seg.apex == (3.0, 4.0)


def test_two_points_use_pair_distance():
    seg = TreeSegment(PointXYZ(0.0, 0.0, 10.0, 0))
    seg.add_point(PointXYZ(3.0, 4.0, 8.0, 1))
    assert seg.area == 0
    assert seg.area_delta == 0
    assert seg.pair_distance == pytest.approx(5.0)
    assert not seg.boundary.is_polygon
    assert seg.hull_vertices == ()


def test_duplicate_second_point_has_zero_pair_distance():
    seg = TreeSegment(PointXYZ(1.0, 1.0, 10.0, 0))
    seg.add_point(PointXYZ(1.0, 1.0, 9.0, 1))
    assert seg.count == 2
    assert seg.pair_distance == 0


def test_triangle_area_and_delta():
    seg = TreeSegment(PointXYZ(0.0, 0.0, 10.0, 0))
    seg.add_point(PointXYZ(2.0, 0.0, 9.0, 1))
    seg.add_point(PointXYZ(0.0, 2.0, 9.0, 2))
    assert seg.area == pytest.approx(2.0)
    assert seg.area_delta == pytest.approx(2.0)
    assert seg.pair_distance == 0

    seg.add_point(PointXYZ(2.0, 2.0, 9.0, 3))
    assert seg.area == pytest.approx(4.0)
    assert seg.area_delta == pytest.approx(2.0)


def test_boundary_is_closed_and_counter_clockwise(square_segment):
    verts = square_segment.boundary.vertices
    assert verts[0] == verts[-1]
    assert len(verts) == 5
    assert Polygon(verts).exterior.is_ccw
    # apex at the centre is no longer a vertex
    assert (0.5, 0.5) not in verts


def test_interior_point_leaves_boundary_untouched(square_segment):
    boundary = square_segment.boundary
    area, delta = square_segment.area, square_segment.area_delta

    square_segment.add_point(PointXYZ(0.25, 0.75, 3.0, 10))
    square_segment.add_point(PointXYZ(1.0, 0.5, 3.0, 11))  # on an edge

    assert square_segment.boundary is boundary
    assert square_segment.area == area
    assert square_segment.area_delta == delta
    assert square_segment.count == 7


def test_area_is_monotonic_and_boundary_covers_all_points():
    rng = np.random.default_rng(7)
    xyz = rng.normal(0.0, 3.0, size=(80, 3))
    seg = TreeSegment()
    previous = 0.0
    for i, (x, y, z) in enumerate(xyz):
        seg.add_point(PointXYZ(x, y, z, i))
        assert seg.area >= previous
        previous = seg.area

    assert seg.count == len(xyz)
    assert all(seg.boundary.covers(p.planar) for p in seg.points)
    expected = convex_boundary(map(tuple, xyz[:, :2])).area
    assert seg.area == pytest.approx(expected)


def test_test_area_change_does_not_mutate(square_segment):
    before = (square_segment.boundary, square_segment.area, square_segment.count)

    assert square_segment.test_area_change(PointXYZ(0.5, 0.5, 1.0, 20)) == 0
    change = square_segment.test_area_change(PointXYZ(2.0, 0.5, 1.0, 21))

    # triangle (1,0) (2,0.5) (1,1) is added
    assert change == pytest.approx(0.5)
    assert (square_segment.boundary, square_segment.area, square_segment.count) == before


def test_collinear_points_have_zero_area():
    seg = TreeSegment()
    for i in range(4):
        seg.add_point(PointXYZ(float(i), float(i), 5.0, i))
    assert seg.area == 0
    assert not seg.boundary.is_polygon
    assert len(seg.boundary.vertices) == 2


def test_highest_point_ties_keep_first():
    seg = TreeSegment(PointXYZ(0.0, 0.0, 10.0, 0))
    seg.add_point(PointXYZ(1.0, 0.0, 12.0, 1))
    seg.add_point(PointXYZ(0.0, 1.0, 12.0, 2))
    seg.add_point(PointXYZ(1.0, 1.0, 3.0, 3))
    seg.add_point(PointXYZ(2.0, 1.0, 3.0, 4))
    assert seg.highest_point().point_id == 1
    assert seg.lowest_point().point_id == 3
    # apex stays the first point, not the highest one
    assert seg.apex == (0.0, 0.0)


def test_highest_point_follows_later_insertions():
    seg = TreeSegment(PointXYZ(0.0, 0.0, 10.0, 0))
    assert seg.highest_point().point_id == 0
    seg.add_point(PointXYZ(1.0, 0.0, 15.0, 1))
    assert seg.highest_point().point_id == 1


def test_nearest_distance():
    seg = TreeSegment(PointXYZ(0.0, 0.0, 10.0, 0))
    assert TreeSegment().nearest_distance(PointXYZ(0.0, 0.0, 0.0)) == math.inf
    seg.add_point(PointXYZ(4.0, 0.0, 10.0, 1))
    assert seg.nearest_distance(PointXYZ(3.0, 0.0, 50.0)) == pytest.approx(1.0)


def test_rebuild_matches_incremental_growth(crown_points):
    grown = TreeSegment()
    for p in crown_points:
        grown.add_point(p)

    merged = TreeSegment()
    merged.points = list(crown_points)
    merged.rebuild()

    assert merged.area == pytest.approx(grown.area)
    assert set(merged.hull_vertices) == set(grown.hull_vertices)
    assert merged.highest_point() == grown.highest_point()


def test_assign_segment_id_first_claim_wins():
    global_ids = [0] * 6
    first = TreeSegment(PointXYZ(0.0, 0.0, 10.0, 0))
    first.add_point(PointXYZ(1.0, 0.0, 9.0, 1))
    first.add_point(PointXYZ(1.0, 1.0, 9.0, 2))
    second = TreeSegment(PointXYZ(5.0, 5.0, 10.0, 3))
    second.add_point(PointXYZ(1.0, 1.0, 9.0, 2))  # shared id
    second.add_point(PointXYZ(6.0, 5.0, 9.0, 4))

    next_index = first.assign_segment_id(global_ids, 1)
    assert next_index == 2
    next_index = second.assign_segment_id(global_ids, next_index)
    assert next_index == 3

    assert global_ids == [1, 1, 1, 2, 2, 0]


def test_rebuild_after_shrinking_resets_metrics():
    seg = TreeSegment(PointXYZ(0.0, 0.0, 10.0, 0))
    seg.add_point(PointXYZ(2.0, 0.0, 9.0, 1))
    seg.add_point(PointXYZ(0.0, 2.0, 9.0, 2))
    assert seg.area == pytest.approx(2.0)

    seg.points = seg.points[:2]
    seg.rebuild()
    assert seg.area == 0
    assert seg.area_delta == 0
    assert seg.hull_vertices == ()
    assert seg.pair_distance == pytest.approx(2.0)

    seg.points = seg.points[:1]
    seg.rebuild()
    assert seg.area == 0
    assert seg.pair_distance == 0
    assert seg.boundary.vertices == ((0.0, 0.0),)
    assert seg.get_score(5) == 0.0
