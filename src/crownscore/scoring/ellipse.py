"""Principal-axis extents of a boundary footprint.

Fits the footprint's principal axes from the 2x2 covariance of its
vertices (closed form, no general eigen-solver) and measures how far
the vertices spread along each axis.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np

_EPS = 1e-12


def principal_axes(cov: np.ndarray) -> Tuple[np.ndarray, Tuple[float, float]]:
    """Eigen-decomposition of a symmetric 2x2 matrix from trace and determinant.

    Returns
    -------
    (axes, (lambda_major, lambda_minor)) where ``axes`` is a 2x2 array whose
    columns are the unit eigenvectors, major first.
    """
    a, b, c = float(cov[0, 0]), float(cov[0, 1]), float(cov[1, 1])
    half_trace = 0.5 * (a + c)
    det = a * c - b * b
    spread = math.sqrt(max(half_trace * half_trace - det, 0.0))
    lam_major = half_trace + spread
    lam_minor = half_trace - spread

    if abs(b) < _EPS:
        major = np.array([1.0, 0.0]) if a >= c else np.array([0.0, 1.0])
    else:
        major = np.array([lam_major - c, b])
        major /= np.linalg.norm(major)
    minor = np.array([-major[1], major[0]])

    return np.column_stack([major, minor]), (lam_major, lam_minor)


def principal_extents(vertices: Sequence[Sequence[float]]) -> Tuple[float, float]:
    """Spread of the vertices along their two principal axes.

    Each value is ``max(projection) - min(projection)``, i.e. a full axis
    length. Only the ratio of the two is used downstream.

    Parameters
    ----------
    vertices : (N, 2) planar vertices; repeated vertices are ignored

    Returns
    -------
    (extent_major_axis, extent_minor_axis)
    """
    data = np.unique(np.asarray(vertices, dtype=np.float64).reshape(-1, 2), axis=0)
    if len(data) < 2:
        raise ValueError(
            f"Principal extents need at least 2 distinct vertices, got {len(data)}"
        )

    centered = data - data.mean(axis=0)
    cov = centered.T @ centered / len(data)
    axes, _ = principal_axes(cov)

    projected = data @ axes
    extents = projected.max(axis=0) - projected.min(axis=0)
    return float(extents[0]), float(extents[1])
