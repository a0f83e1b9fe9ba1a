"""Segment building and scoring over a labeled point cloud.

Takes points already partitioned by an external clustering step,
grows one TreeSegment per cluster label, scores each segment and
accepts or rejects it as a tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import numpy as np

from crownscore.pointcloud.projection import points_from_array
from crownscore.pointcloud.registry import SegmentRegistry
from crownscore.pointcloud.segment import TreeSegment
from crownscore.scoring.scores import SegmentScores

logger = logging.getLogger(__name__)


@dataclass
class ScoredSegment:
    """Scoring outcome for one cluster label."""

    label: int
    segment: TreeSegment
    scores: SegmentScores
    accepted: bool
    segment_id: int = 0  # 0 when rejected

    @property
    def aggregate(self) -> float:
        return self.scores.aggregate

    @property
    def boundary_wkt(self) -> str:
        return self.segment.boundary_polygon.wkt


def build_segments(
    points: np.ndarray,
    labels: np.ndarray,
    point_ids: Optional[np.ndarray] = None,
    *,
    noise_label: int = -1,
    should_abort: Optional[Callable[[], bool]] = None,
) -> Dict[int, TreeSegment]:
    """Grow one TreeSegment per cluster label.

    Points are admitted in array order. ``should_abort`` is polled before
    every insertion; once it returns True the segments built so far are
    returned as they are.

    Parameters
    ----------
    points : (N, 3+) array, first 3 columns are XYZ
    labels : (N,) cluster label per point
    point_ids : (N,) external point identifiers, defaults to the row index
    noise_label : label of unclustered points, skipped
    should_abort : optional cooperative cancellation check

    Returns
    -------
    Dict mapping cluster label → TreeSegment
    """
    labels = np.asarray(labels)
    if len(labels) != len(points):
        raise ValueError(
            f"Got {len(points)} points but {len(labels)} labels"
        )

    segments: Dict[int, TreeSegment] = {}
    for point, label in zip(points_from_array(points, point_ids), labels):
        if should_abort is not None and should_abort():
            logger.warning(
                "Segment building aborted after %d points",
                sum(s.count for s in segments.values()),
            )
            break
        label = int(label)
        if label == noise_label:
            continue
        segments.setdefault(label, TreeSegment()).add_point(point)

    logger.info("Built %d segments from %d points", len(segments), len(points))
    return segments


def score_segments(
    segments: Dict[int, TreeSegment],
    *,
    k: int = 10,
    min_points: int = 5,
    min_score: float = 0.5,
    registry: Optional[SegmentRegistry] = None,
) -> List[ScoredSegment]:
    """Score every segment and accept the plausible trees.

    A segment is accepted when it has at least ``min_points`` points and an
    aggregate score of at least ``min_score``. Accepted segments are
    registered in ``registry`` (if given) in label order.
    """
    results: List[ScoredSegment] = []
    for label in sorted(segments):
        segment = segments[label]
        segment.get_score(k)
        accepted = segment.count >= min_points and segment.scores.aggregate >= min_score

        segment_id = 0
        if accepted and registry is not None:
            segment_id = registry.register(segment)

        results.append(ScoredSegment(
            label=label,
            segment=segment,
            scores=segment.scores,
            accepted=accepted,
            segment_id=segment_id,
        ))

    n_accepted = sum(r.accepted for r in results)
    logger.info(
        "Scoring result: %d accepted, %d rejected",
        n_accepted, len(results) - n_accepted,
    )
    return results
