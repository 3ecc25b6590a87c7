"""Processed-data contract.

Filtering and virtualization only remove nodes. The displayed sequence
must therefore be an order-preserving subsequence of the current level's
data.
"""

from drillscope.contracts.base import require


def assert_processed_subset(processed, source) -> None:
    """Validate that ``processed`` is an ordered subsequence of ``source``.

    Raises
    ------
    ContractViolation
        If processed grew or contains nodes that are not in source order.
    """
    require(
        len(processed) <= len(source),
        f"Processing contract: {len(processed)} processed nodes from {len(source)} inputs",
    )

    remaining = iter(source)
    for node in processed:
        # identity check: filters must pass nodes through, never copy them
        require(
            any(node is candidate for candidate in remaining),
            f"Processing contract: node {node.id!r} out of order or not from current data",
        )
