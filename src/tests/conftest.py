"""Shared test fixtures for the crownscore test suite."""

from __future__ import annotations

import tempfile
from pathlib import Path

import numpy as np
import pytest

from crownscore.pointcloud.projection import PointXYZ
from crownscore.pointcloud.segment import TreeSegment


def _ring(n: int, cx: float, cy: float, rx: float, ry: float, z: float, start_id: int):
    angles = np.linspace(0.0, 2.0 * np.pi, n, endpoint=False)
    return [
        PointXYZ(cx + rx * np.cos(a), cy + ry * np.sin(a), z, start_id + i)
        for i, a in enumerate(angles)
    ]


@pytest.fixture
def crown_points() -> list:
    """A regular crown: apex at the centre, 11 points on a 2 m circle."""
    apex = PointXYZ(0.0, 0.0, 20.0, 0)
    return [apex] + _ring(11, 0.0, 0.0, 2.0, 2.0, 15.0, start_id=1)


@pytest.fixture
def elongated_points() -> list:
    """Same count, but a 10 x 1 m ellipse with the apex near one end."""
    apex = PointXYZ(0.0, 0.0, 20.0, 0)
    return [apex] + _ring(11, 9.0, 0.0, 10.0, 1.0, 15.0, start_id=1)


@pytest.fixture
def square_segment() -> TreeSegment:
    """Unit square corners around a raised centre point."""
    seg = TreeSegment(PointXYZ(0.5, 0.5, 10.0, 0))
    for i, (x, y) in enumerate([(0, 0), (0, 1), (1, 1), (1, 0)], start=1):
        seg.add_point(PointXYZ(float(x), float(y), 5.0, i))
    return seg


@pytest.fixture
def labeled_cloud():
    """Two labeled crowns plus noise: (xyz, labels, point_ids)."""
    rng = np.random.default_rng(42)

    def crown(cx, cy, n):
        pts = np.zeros((n, 3))
        r = 2.5 * np.sqrt(rng.uniform(0, 1, n))
        theta = rng.uniform(0, 2 * np.pi, n)
        pts[:, 0] = cx + r * np.cos(theta)
        pts[:, 1] = cy + r * np.sin(theta)
        pts[:, 2] = 18.0 - r  # highest at the centre
        pts[0] = [cx, cy, 20.0]  # apex first
        return pts

    tree_a = crown(0.0, 0.0, 60)
    tree_b = crown(15.0, 5.0, 40)
    noise = np.column_stack([
        rng.uniform(-10, 25, 10),
        rng.uniform(-10, 15, 10),
        rng.uniform(0, 2, 10),
    ])

    xyz = np.vstack([tree_a, tree_b, noise])
    labels = np.concatenate([np.full(60, 1), np.full(40, 2), np.full(10, -1)])
    point_ids = np.arange(len(xyz))
    return xyz, labels, point_ids


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def labeled_csv(tmp_dir: Path, labeled_cloud) -> Path:
    """Write the labeled cloud to a CSV file."""
    xyz, labels, point_ids = labeled_cloud
    csv_path = tmp_dir / "points.csv"
    lines = ["x,y,z,cluster,point_id"]
    lines += [
        f"{x},{y},{z},{label},{pid}"
        for (x, y, z), label, pid in zip(xyz, labels, point_ids)
    ]
    csv_path.write_text("\n".join(lines) + "\n")
    return csv_path
