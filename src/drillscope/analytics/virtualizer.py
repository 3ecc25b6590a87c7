"""Stride downsampling for large drill levels."""

import logging
import math
from typing import Sequence

__all__ = ['sample_stride', 'virtualize']

logger = logging.getLogger(__name__)


def sample_stride(length: int, max_points: int) -> int:
    """Stride that brings ``length`` items down to at most ``max_points``."""
    if max_points < 1:
        raise ValueError(f"max_points must be >= 1, got {max_points}")
    return max(1, math.ceil(length / max_points))


def virtualize(nodes: Sequence, performance) -> list:
    """Keep every ``step``-th node when the data exceeds ``max_data_points``.

    Only active when ``performance.virtualize_data_points`` is set and the
    input is longer than ``performance.max_data_points``. Otherwise the input
    is returned unchanged.

    Stride sampling does not preserve aggregates: sum and average of the
    result generally differ from those of the input.

    Examples
    --------
    >>> perf = InternalPerformanceConfig(virtualize_data_points=True,
    ...                                  max_data_points=10, animation_duration_ms=0)
    >>> [n.value for n in virtualize(nodes_0_to_94, perf)]
    [0.0, 10.0, 20.0, 30.0, 40.0, 50.0, 60.0, 70.0, 80.0, 90.0]
    """
    nodes = list(nodes)
    if not performance.virtualize_data_points or len(nodes) <= performance.max_data_points:
        return nodes

    step = sample_stride(len(nodes), performance.max_data_points)
    sampled = nodes[::step]
    logger.debug("Virtualized %d points to %d (step %d)", len(nodes), len(sampled), step)
    return sampled
