"""Chart controller: drill state, filtering and downsampling for one chart.

Data flow for every state change::

    navigator.state.data -> FilterEngine -> virtualize -> processed_data

``processed_data`` is only ever replaced at these recomputation points,
under the controller lock.
"""

import logging
import threading
from typing import Callable, Iterable, NamedTuple, Optional, Sequence

import pandas as pd

from drillscope.analytics.aggregation import aggregate_by_period
from drillscope.analytics.commands import DrillInto, NavigateToBreadcrumb, Reset
from drillscope.analytics.filters import FilterEngine
from drillscope.analytics.navigator import DrillDownNavigator, DrillDownState
from drillscope.analytics.nodes import DrillDownNode, node_to_record
from drillscope.analytics.providers import DataProvider
from drillscope.analytics.virtualizer import virtualize
from drillscope.contracts import ContractViolation, assert_processed_subset
from drillscope.schemas.charts import build_render_payload
from drillscope.schemas.internal import InternalFilterConfig, InternalPerformanceConfig

__all__ = ['ChartSummary', 'ChartController']

logger = logging.getLogger(__name__)


class ChartSummary(NamedTuple):
    count: int
    sum: float
    average: float


def _merge_section(model, changes, model_cls):
    if changes is None:
        return model
    if isinstance(changes, model_cls):
        return changes
    return model_cls(**{**model.model_dump(), **dict(changes)})


class ChartController:
    """Owns the displayed data of one drill-down chart.

    Parameters
    ----------
    chart : ChartConfig
        Chart variant; supplies data/axis keys, drill levels and
        interactivity.
    performance : InternalPerformanceConfig
        Downsampling settings.
    filters : InternalFilterConfig
        Value-range, outlier and aggregation settings.
    records : iterable, optional
        Root dataset.
    enable_filters : bool
        When False the filter step passes data through.
    provider : DataProvider, optional
        Child-node source for drill levels.
    name : str
        Label used in logs.

    Examples
    --------
    >>> controller = ChartController.from_config(config, records=rows)
    >>> controller.drill_into("item_0")
    True
    >>> controller.summary()
    ChartSummary(count=5, sum=97.0, average=19.4)
    >>> controller.render_payload()["kind"]
    'line'
    """

    def __init__(self, chart, performance: InternalPerformanceConfig, filters: InternalFilterConfig,
                 records: Iterable = (), enable_filters: bool = True,
                 provider: Optional[DataProvider] = None, name: str = "chart"):
        self.chart = chart
        self.performance = performance
        self.name = name
        self.filter_engine = FilterEngine(filters, enabled=enable_filters)

        self._lock = threading.RLock()
        self._listeners: list[Callable[["ChartController"], None]] = []
        self._processed: tuple = ()
        self._loaded_from = None
        self._loading = False
        self._error: Optional[Exception] = None

        self.navigator = DrillDownNavigator(
            records,
            levels=chart.drill_down_levels,
            interactive=chart.interactive,
            provider=provider,
            data_key=chart.data_key,
            x_axis_key=chart.x_axis_key,
        )
        self._recompute()
        logger.info("%s: %s chart with %d root nodes, %d drill levels",
                    name, chart.kind, len(self.navigator.root), len(chart.drill_down_levels))

    @classmethod
    def from_config(cls, config, records: Iterable = (), provider: Optional[DataProvider] = None,
                    name: Optional[str] = None) -> "ChartController":
        """Build from an ``InternalConfig``."""
        return cls(
            config.chart,
            config.performance,
            config.filters,
            records=records,
            enable_filters=config.enable_filters,
            provider=provider,
            name=name or config.source or "chart",
        )

    # -- state -------------------------------------------------------------

    @property
    def state(self) -> DrillDownState:
        return self.navigator.state

    @property
    def processed_data(self) -> tuple:
        return self._processed

    @property
    def filters(self) -> InternalFilterConfig:
        return self.filter_engine.filters

    @property
    def enable_filters(self) -> bool:
        return self.filter_engine.enabled

    @enable_filters.setter
    def enable_filters(self, enabled: bool):
        with self._lock:
            self.filter_engine.enabled = enabled
            self._recompute()
        self._notify()

    @property
    def loading(self) -> bool:
        """True while a navigation command is loading its level."""
        return self._loading

    @property
    def error(self) -> Optional[Exception]:
        """Error of the last failed navigation, None after a successful one."""
        return self._error

    @property
    def current_level_name(self) -> str:
        return self.navigator.current_level_name

    @property
    def can_drill_down(self) -> bool:
        return self.navigator.can_drill_down

    def subscribe(self, listener: Callable[["ChartController"], None]) -> Callable[[], None]:
        """Call ``listener(controller)`` after every recomputation."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                logger.exception("%s: listener failed", self.name)

    def _recompute(self):
        with self._lock:
            data = self.navigator.state.data
            processed = virtualize(self.filter_engine.apply(data), self.performance)
            assert_processed_subset(processed, data)
            self._processed = tuple(processed)
            logger.debug("%s: level %d shows %d of %d nodes",
                         self.name, self.navigator.state.level, len(processed), len(data))

    # -- inputs ------------------------------------------------------------

    def load_root(self, records: Iterable) -> None:
        """Replace the root dataset; navigation restarts at the overview."""
        with self._lock:
            self.navigator.set_root(records)
            self._recompute()
        self._notify()

    def set_filters(self, filters=None, **changes) -> None:
        """Replace filter settings, wholesale or by field.

        Examples
        --------
        >>> controller.set_filters(show_outliers=False)
        >>> controller.set_filters({"value_range_percent": (10, 90)})
        """
        with self._lock:
            current = self.filter_engine.filters
            updated = _merge_section(current, filters, InternalFilterConfig)
            if changes:
                updated = _merge_section(updated, changes, InternalFilterConfig)
            self.filter_engine.filters = updated
            self._recompute()
        self._notify()

    def set_performance(self, performance=None, **changes) -> None:
        """Replace downsampling settings, wholesale or by field."""
        with self._lock:
            updated = _merge_section(self.performance, performance, InternalPerformanceConfig)
            if changes:
                updated = _merge_section(updated, changes, InternalPerformanceConfig)
            self.performance = updated
            self._recompute()
        self._notify()

    # -- navigation --------------------------------------------------------

    def dispatch(self, command) -> bool:
        """Forward a navigation command; recompute when the state changed.

        The navigator may load the entered level through a provider. That
        load runs without the controller lock. A failed load leaves the
        drill state as it was: the error is logged, kept in :attr:`error`
        and listeners are notified. A later successful navigation clears it.
        """
        if not isinstance(command, (DrillInto, NavigateToBreadcrumb, Reset)):
            raise TypeError(f"Unknown navigation command: {type(command).__name__}")

        with self._lock:
            self._loading = True
        try:
            changed = self.navigator.dispatch(command)
        except ContractViolation:
            with self._lock:
                self._loading = False
            raise
        except Exception as e:
            logger.error("%s: %s failed: %s", self.name, type(command).__name__, e)
            with self._lock:
                self._loading = False
                self._error = e
            self._notify()
            return False

        with self._lock:
            self._loading = False
            cleared = self._error is not None
            self._error = None
            if changed:
                self._recompute()
        if changed or cleared:
            self._notify()
        return changed

    def drill_into(self, node) -> bool:
        node_id = node.id if isinstance(node, DrillDownNode) else str(node)
        return self.dispatch(DrillInto(node_id=node_id))

    def navigate_to_breadcrumb(self, path: Sequence[str]) -> bool:
        return self.dispatch(NavigateToBreadcrumb(path=tuple(path)))

    def reset(self) -> bool:
        return self.dispatch(Reset())

    # -- outputs -----------------------------------------------------------

    def summary(self) -> ChartSummary:
        """Count, sum and average of the displayed data.

        Computed over ``processed_data``: when downsampling is active the
        figures describe the sampled points, not the full level.
        """
        processed = self._processed
        total = float(sum(n.value for n in processed))
        count = len(processed)
        return ChartSummary(count, total, total / count if count else 0.0)

    def records(self) -> list:
        """Displayed nodes as flat dicts."""
        return [node_to_record(n, self.chart.data_key, self.chart.x_axis_key) for n in self._processed]

    def render_payload(self) -> dict:
        """Everything a renderer needs to draw the current view."""
        with self._lock:
            state = self.navigator.state
            payload = build_render_payload(self.chart, self.records(), self.performance.animation_duration_ms)
            payload["drill"] = {
                "level": state.level,
                "level_name": self.current_level_name,
                "path": list(state.path),
                "breadcrumbs": [{"name": b.name, "path": list(b.path)} for b in state.breadcrumbs],
                "can_drill_down": self.can_drill_down,
            }
            payload["status"] = {
                "loading": self._loading,
                "error": str(self._error) if self._error is not None else None,
            }
            return payload

    def to_frame(self) -> pd.DataFrame:
        """Displayed data plus drill context, one row per node."""
        with self._lock:
            state = self.navigator.state
            if self._processed:
                frame = pd.DataFrame.from_records(self.records())
            else:
                frame = pd.DataFrame(columns=["id", "name", "value", "category", "timestamp"])
            frame["level"] = state.level
            frame["level_name"] = self.current_level_name
            frame["path"] = "/".join(state.path)
            return frame

    def aggregate(self) -> pd.DataFrame:
        """Time-bucket aggregation of the displayed data."""
        filters = self.filter_engine.filters
        return aggregate_by_period(self._processed, filters.group_by, filters.aggregation)

    # -- retrieval ---------------------------------------------------------

    def attach(self, retriever) -> Callable[[], None]:
        """Load every successful retrieval of ``retriever`` as the root dataset.

        Returns a callable that detaches the controller again.
        """
        return retriever.subscribe(self._on_retrieval)

    def _on_retrieval(self, state):
        if state.loading or state.error is not None or state.data is None:
            return
        with self._lock:
            if state.data is self._loaded_from:
                return
            self._loaded_from = state.data
        logger.info("%s: loading %d retrieved records%s", self.name, len(state.data),
                    " (cached)" if state.from_cache else "")
        self.load_root(state.data)
