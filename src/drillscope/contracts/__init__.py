"""Engine contracts: fail-fast enforcement of state invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate navigation and processing correctness
- Fetch errors describe retrieval failures
"""

from drillscope.contracts.failure import ContractViolation
from drillscope.contracts.base import require
from drillscope.contracts.drilldown import assert_drill_state
from drillscope.contracts.processing import assert_processed_subset

__all__ = [
    "ContractViolation",
    "require",
    "assert_drill_state",
    "assert_processed_subset",
]
