"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
"""

from drillscope.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce an engine contract.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.

    message : str
        Error message explaining the contract violation (for debugging).

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require(state.level == len(state.path), "Drill contract: level/path mismatch")
    """
    if not condition:
        raise ContractViolation(message)
