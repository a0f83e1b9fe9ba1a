"""Labeled point CSV reader.

Reads points that an external clustering step has already labeled:
one row per LiDAR return with x, y, z and its cluster label.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"x", "y", "z", "cluster"}


def read_labeled_points(csv_path: str | Path) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Read a labeled point CSV.

    Parameters
    ----------
    csv_path : path with columns x, y, z, cluster and optionally point_id

    Returns
    -------
    (xyz (N, 3) float array, labels (N,) int array, point_ids (N,) int array)
    """
    csv_path = Path(csv_path)
    logger.info("Reading labeled points: %s", csv_path.name)

    df = pd.read_csv(csv_path)
    df.columns = [c.strip().lower().replace(" ", "_") for c in df.columns]

    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(
            f"Point CSV missing required columns: {sorted(missing)}. "
            f"Available columns: {list(df.columns)}"
        )

    df = df.dropna(subset=sorted(REQUIRED_COLUMNS))
    xyz = df[["x", "y", "z"]].to_numpy(dtype=np.float64)
    labels = df["cluster"].to_numpy(dtype=np.int64)
    if "point_id" in df.columns:
        point_ids = df["point_id"].to_numpy(dtype=np.int64)
        if (point_ids < 0).any():
            raise ValueError(
                f"Point CSV has {int((point_ids < 0).sum())} negative point_id values"
            )
    else:
        point_ids = np.arange(len(df), dtype=np.int64)

    logger.debug("Loaded %d points in %d clusters", len(df), len(np.unique(labels)))
    return xyz, labels, point_ids
