"""Sources of child nodes for a drill level.

A provider answers one question: given the drill ``path`` just entered, the
name of the level being entered and the node that was drilled into, which
nodes make up the new level?

``parent`` is the node that was clicked; it is None only when the caller
cannot supply one.
"""

import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol, Sequence

import numpy as np

from drillscope.analytics.nodes import DrillDownNode, normalize_records
from drillscope.fetch.retry import ResilientFetcher

__all__ = ['DataProvider', 'NestedChildrenProvider', 'ProportionalSplitProvider', 'QueryProvider']

logger = logging.getLogger(__name__)


class DataProvider(Protocol):
    def children(self, path: tuple, level_name: str,
                 parent: Optional[DrillDownNode]) -> list[DrillDownNode]:
        ...


class ProportionalSplitProvider:
    """Split the parent's value over a fixed set of weighted children.

    Child ``i`` gets ``floor(parent.value * weights[i] * f)`` where ``f`` is
    drawn uniformly from ``[1 - jitter, 1 + jitter)``. The generator is
    seeded from the drill path, so the same path always yields the same
    children. Parents without a positive value are treated as worth
    ``default_value``.

    Parameters
    ----------
    weights : sequence of float
        One weight per child.
    jitter : float
        Relative spread of the random factor (0.2 gives 0.8 - 1.2).
    default_value : float
        Stand-in for a missing parent value.
    seed : int
        Mixed with the path into the generator seed.
    clock : callable, optional
        Returns the reference datetime for child timestamps.

    Examples
    --------
    >>> provider = ProportionalSplitProvider()
    >>> kids = provider.children(("North",), "region", parent)
    >>> [k.name for k in kids]
    ['Region 1', 'Region 2', 'Region 3', 'Region 4', 'Region 5']
    """

    def __init__(self, weights: Sequence[float] = (0.3, 0.25, 0.2, 0.15, 0.1),
                 jitter: float = 0.2, default_value: float = 100.0, seed: int = 0,
                 clock: Optional[Callable[[], datetime]] = None):
        self.weights = tuple(weights)
        self.jitter = jitter
        self.default_value = default_value
        self.seed = seed
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _rng(self, path: tuple) -> np.random.Generator:
        digest = hashlib.sha256("\x1f".join(path).encode("utf-8")).digest()
        return np.random.default_rng([self.seed, int.from_bytes(digest[:8], "big")])

    def children(self, path: tuple, level_name: str,
                 parent: Optional[DrillDownNode]) -> list[DrillDownNode]:
        base = parent.value if parent is not None and parent.value > 0 else self.default_value
        factors = self._rng(tuple(path)).uniform(1 - self.jitter, 1 + self.jitter, size=len(self.weights))
        values = np.floor(base * np.asarray(self.weights) * factors)

        now = self._clock()
        label = level_name[:1].upper() + level_name[1:]
        return [
            DrillDownNode(
                id=f"{level_name}_{i}",
                name=f"{label} {i + 1}",
                value=float(v),
                category=level_name,
                timestamp=now - timedelta(days=i),
            )
            for i, v in enumerate(values)
        ]


class NestedChildrenProvider:
    """Use the children already attached to the parent node.

    Parameters
    ----------
    fallback : DataProvider, optional
        Consulted when the parent has no children. Without one, such a
        level is empty.
    """

    def __init__(self, fallback: Optional[DataProvider] = None):
        self.fallback = fallback

    def children(self, path: tuple, level_name: str,
                 parent: Optional[DrillDownNode]) -> list[DrillDownNode]:
        if parent is not None and parent.children:
            return list(parent.children)
        if self.fallback is not None:
            return self.fallback.children(path, level_name, parent)
        logger.debug("No children for %s at level %s", "/".join(path), level_name)
        return []


class QueryProvider:
    """Ask a live aggregation query for the next level.

    Parameters
    ----------
    query : callable
        ``query(path, level_name) -> list[dict]`` raw records.
    fetcher : ResilientFetcher, optional
        Retry policy around each query.
    data_key, x_axis_key : str
        Normalization keys for the returned records.
    """

    def __init__(self, query: Callable[[tuple, str], list], fetcher: Optional[ResilientFetcher] = None,
                 data_key: str = "value", x_axis_key: str = "name"):
        self.query = query
        self.fetcher = fetcher or ResilientFetcher()
        self.data_key = data_key
        self.x_axis_key = x_axis_key

    def children(self, path: tuple, level_name: str,
                 parent: Optional[DrillDownNode]) -> list[DrillDownNode]:
        path = tuple(path)
        records = self.fetcher.execute(lambda: self.query(path, level_name))
        nodes = normalize_records(records, self.data_key, self.x_axis_key, id_prefix=level_name)
        logger.info("Level %s for %s: %d nodes", level_name, "/".join(path) or "<root>", len(nodes))
        return nodes
