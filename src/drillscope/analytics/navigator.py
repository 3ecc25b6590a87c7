"""Hierarchical drill-down state machine.

States are levels ``0..N-1`` where ``N`` is the number of configured drill
levels. Drilling moves one level down through a node of the current level;
breadcrumb navigation moves back up to any prefix of the current path.
"""

import logging
import threading
from typing import Iterable, NamedTuple, Optional, Sequence, Union

from drillscope.analytics.commands import DrillInto, NavigateToBreadcrumb, Reset
from drillscope.analytics.nodes import DrillDownNode, find_node, normalize_records
from drillscope.analytics.providers import (
    DataProvider,
    NestedChildrenProvider,
    ProportionalSplitProvider,
)
from drillscope.contracts import assert_drill_state
from drillscope.contracts.drilldown import OVERVIEW
from drillscope.fetch.errors import ValidationError

__all__ = ['Breadcrumb', 'DrillDownState', 'DrillDownNavigator']

logger = logging.getLogger(__name__)


class Breadcrumb(NamedTuple):
    name: str
    path: tuple = ()


class DrillDownState(NamedTuple):
    """Where the user is in the hierarchy and what that level shows."""
    level: int
    path: tuple
    data: tuple
    breadcrumbs: tuple


class DrillDownNavigator:
    """Drill-down navigation over a root dataset.

    Parameters
    ----------
    records : iterable
        Root records (dicts or DrillDownNodes).
    levels : sequence of str
        Drill level names, e.g. ``["region", "country", "city"]``.
    interactive : bool
        Drilling is only allowed on interactive charts.
    provider : DataProvider, optional
        Supplies the nodes of each entered level. Defaults to the parent's
        own children, falling back to a proportional split.
    data_key, x_axis_key : str
        Normalization keys for root records.

    Examples
    --------
    >>> nav = DrillDownNavigator(rows, levels=["region", "country"], interactive=True)
    >>> nav.dispatch(DrillInto(node_id="item_0"))
    True
    >>> nav.state.level, nav.state.path
    (1, ('North',))
    >>> nav.dispatch(Reset())
    True
    """

    def __init__(self, records: Iterable = (), levels: Sequence[str] = (),
                 interactive: bool = False, provider: Optional[DataProvider] = None,
                 data_key: str = "value", x_axis_key: str = "name"):
        self.levels = tuple(levels)
        self.interactive = interactive
        self.provider = provider or NestedChildrenProvider(fallback=ProportionalSplitProvider())
        self.data_key = data_key
        self.x_axis_key = x_axis_key

        self._lock = threading.RLock()
        # nodes drilled through, one per level below the root
        self._parents: list[DrillDownNode] = []
        self._root: tuple = ()
        self._state: Optional[DrillDownState] = None
        self.set_root(records)

    @property
    def state(self) -> DrillDownState:
        return self._state

    @property
    def root(self) -> tuple:
        return self._root

    def set_root(self, records: Iterable) -> DrillDownState:
        """Replace the root dataset and return to the overview."""
        nodes = tuple(normalize_records(records, self.data_key, self.x_axis_key))
        with self._lock:
            self._root = nodes
            self._parents = []
            self._commit(DrillDownState(0, (), nodes, (Breadcrumb(OVERVIEW, ()),)))
            logger.debug("Root dataset set: %d nodes", len(nodes))
            return self._state

    @property
    def can_drill_down(self) -> bool:
        return self.interactive and self._state.level < len(self.levels) - 1

    @property
    def current_level_name(self) -> str:
        level = self._state.level
        if level < len(self.levels):
            return self.levels[level]
        return OVERVIEW

    def drill_into(self, node: Union[DrillDownNode, str]) -> bool:
        """Enter the next level through ``node``.

        A no-op (returns False) when the chart is not interactive, the last
        level is already shown or ``node`` is an unknown id. The provider is
        called without holding the lock; if the state changed meanwhile the
        loaded level is dropped and False is returned. Provider errors
        propagate and leave the state unchanged.
        """
        with self._lock:
            state = self._state
            if isinstance(node, str):
                found = find_node(state.data, node)
                if found is None:
                    logger.debug("Drill ignored: no node %r at level %d", node, state.level)
                    return False
                node = found

            if not self.can_drill_down:
                logger.debug("Drill ignored at level %d (interactive=%s, levels=%d)",
                             state.level, self.interactive, len(self.levels))
                return False

            level = state.level + 1
            path = state.path + (node.name,)
            level_name = self.levels[level]

        data = tuple(self.provider.children(path, level_name, node))

        with self._lock:
            if self._state is not state:
                logger.debug("Drill into %s dropped: state changed while loading", "/".join(path))
                return False
            self._parents.append(node)
            self._commit(DrillDownState(
                level=level,
                path=path,
                data=data,
                breadcrumbs=state.breadcrumbs + (Breadcrumb(node.name, path),),
            ))
        logger.info("Drilled into %s (%s): %d nodes", "/".join(path), level_name, len(data))
        return True

    def navigate_to_breadcrumb(self, target_path: Sequence[str]) -> bool:
        """Move back up to ``target_path``, a prefix of the current path.

        Any other target is ignored (returns False). Like :meth:`drill_into`,
        the level is reloaded outside the lock and dropped if the state
        changed in the meantime.
        """
        target = tuple(target_path)
        with self._lock:
            try:
                self._check_prefix(target)
            except ValidationError as e:
                logger.debug("Breadcrumb ignored: %s", e)
                return False

            state = self._state
            if target == state.path:
                return False

            level = len(target)
            parent = self._parents[level - 1] if level else None
            root = self._root

        if level == 0:
            data = root
        else:
            data = tuple(self.provider.children(target, self.levels[level], parent))

        with self._lock:
            if self._state is not state:
                logger.debug("Breadcrumb %s dropped: state changed while loading", "/".join(target))
                return False
            del self._parents[level:]
            self._commit(DrillDownState(
                level=level,
                path=target,
                data=data,
                breadcrumbs=state.breadcrumbs[:level + 1],
            ))
        logger.info("Navigated to %s", "/".join(target) or OVERVIEW)
        return True

    def reset(self) -> bool:
        return self.navigate_to_breadcrumb(())

    def dispatch(self, command) -> bool:
        """Apply a navigation command. Returns True when the state changed."""
        if isinstance(command, DrillInto):
            return self.drill_into(command.node_id)
        elif isinstance(command, NavigateToBreadcrumb):
            return self.navigate_to_breadcrumb(command.path)
        elif isinstance(command, Reset):
            return self.reset()
        raise TypeError(f"Unknown navigation command: {type(command).__name__}")

    def _check_prefix(self, target: tuple):
        path = self._state.path
        if len(target) > len(path) or path[:len(target)] != target:
            raise ValidationError(f"{'/'.join(target)!r} is not a prefix of {'/'.join(path)!r}")

    def _commit(self, state: DrillDownState):
        assert_drill_state(state, len(self.levels))
        self._state = state
