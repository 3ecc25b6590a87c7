"""Centralized failure policy for contract violations.

Contracts fail fast, loud, and once. All violations raise the same
exception type, allowing callers to handle engine bugs uniformly.
"""


class ContractViolation(RuntimeError):
    """Raised when an engine contract is violated.

    This indicates a bug in navigation or processing logic, not bad user
    input and not a failed retrieval. It means a stage did not produce the
    invariants it promised.

    Key distinction:
    - pydantic.ValidationError: User/config error
    - fetch.errors.FetchError: Retrieval failure (retryable or terminal)
    - ContractViolation: Engine bug (programmer error)
    """
    pass
