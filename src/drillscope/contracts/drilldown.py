"""Drill-down state contract.

Every DrillDownState produced by the navigator must satisfy:
- level == len(path) == len(breadcrumbs) - 1
- breadcrumbs[0] is the "Overview" crumb with an empty path
- each breadcrumb path is the path prefix of its depth
- level stays below the number of configured drill levels (when any)
"""

from drillscope.contracts.base import require

OVERVIEW = "Overview"


def assert_drill_state(state, num_levels: int) -> None:
    """Validate navigator state invariants.

    Parameters
    ----------
    state : DrillDownState
        State to validate.
    num_levels : int
        Number of configured drill levels (0 when drilling is disabled).

    Raises
    ------
    ContractViolation
        If any invariant does not hold.
    """
    require(state.level >= 0, f"Drill contract: negative level {state.level}")
    require(
        state.level == len(state.path),
        f"Drill contract: level {state.level} != path length {len(state.path)}",
    )
    require(
        len(state.breadcrumbs) == state.level + 1,
        f"Drill contract: {len(state.breadcrumbs)} breadcrumbs at level {state.level}",
    )

    root = state.breadcrumbs[0]
    require(
        root.name == OVERVIEW and tuple(root.path) == (),
        "Drill contract: first breadcrumb must be Overview with empty path",
    )

    for depth, crumb in enumerate(state.breadcrumbs):
        require(
            tuple(crumb.path) == tuple(state.path[:depth]),
            f"Drill contract: breadcrumb {depth} path {crumb.path} is not a prefix of {state.path}",
        )

    if num_levels > 0:
        require(
            state.level <= num_levels - 1,
            f"Drill contract: level {state.level} beyond last drill level {num_levels - 1}",
        )
