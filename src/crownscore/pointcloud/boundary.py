"""Convex boundary of a cluster footprint.

A ``Boundary`` is an immutable value: extending it with an exterior
point returns a new boundary and leaves the old one untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Tuple

from shapely.geometry import LineString, MultiPoint, Point, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient

from crownscore.pointcloud.projection import PlanarXY


@dataclass(frozen=True)
class Boundary:
    """Ordered convex boundary vertices plus the matching shapely geometry.

    For a real polygon the vertex sequence is closed (first == last) and
    counter-clockwise. A single point or a segment keeps its 1 or 2 vertices.
    """

    vertices: Tuple[PlanarXY, ...] = ()
    geometry: BaseGeometry = field(default_factory=Polygon, compare=False, repr=False)

    @classmethod
    def from_geometry(cls, geometry: BaseGeometry) -> "Boundary":
        if geometry.is_empty:
            return cls()
        if isinstance(geometry, Polygon):
            geometry = orient(geometry, sign=1.0)
            coords = geometry.exterior.coords
        elif isinstance(geometry, (LineString, Point)):
            coords = geometry.coords
        else:
            raise ValueError(f"Unexpected hull geometry: {geometry.geom_type}")
        vertices = tuple((float(x), float(y)) for x, y, *_ in coords)
        return cls(vertices=vertices, geometry=geometry)

    @property
    def is_empty(self) -> bool:
        return not self.vertices

    @property
    def is_polygon(self) -> bool:
        """True once the boundary encloses a 2-D region."""
        return isinstance(self.geometry, Polygon) and not self.geometry.is_empty

    @property
    def area(self) -> float:
        return float(self.geometry.area)

    @property
    def distinct_vertices(self) -> Tuple[PlanarXY, ...]:
        """Vertices without the closing repeat."""
        if len(self.vertices) > 1 and self.vertices[0] == self.vertices[-1]:
            return self.vertices[:-1]
        return self.vertices

    def covers(self, xy: PlanarXY) -> bool:
        """Whether ``xy`` lies inside or on the boundary."""
        if self.is_empty:
            return False
        return bool(self.geometry.covers(Point(xy)))

    def extended(self, xy: PlanarXY) -> "Boundary":
        """Boundary of the current vertices plus ``xy``."""
        return convex_boundary(self.distinct_vertices + (xy,))


EMPTY_BOUNDARY = Boundary()


def convex_boundary(points: Iterable[PlanarXY]) -> Boundary:
    """Convex hull of planar points as a Boundary."""
    points = list(points)
    if not points:
        return EMPTY_BOUNDARY
    return Boundary.from_geometry(MultiPoint(points).convex_hull)
