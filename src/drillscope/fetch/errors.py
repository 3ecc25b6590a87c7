"""Retrieval error taxonomy and retryability classification.

Upstream data sources raise whatever their transport raises. Errors are
retryable when their type says so (``RetryableError``, ``ConnectionError``,
``TimeoutError``) or when their message mentions a network failure, a
timeout, rate limiting or a 5xx status. A message carrying any other 4xx
status is a client error and stays terminal even when it also mentions a
timeout or the network. Everything else is terminal.
"""

import re

__all__ = [
    'FetchError',
    'RetryableError',
    'NetworkError',
    'FetchTimeoutError',
    'RateLimitError',
    'ValidationError',
    'CancellationSignal',
    'is_retryable',
    'classify_error',
]


class FetchError(Exception):
    """Base class for retrieval failures."""


class RetryableError(FetchError):
    """A transient failure worth retrying."""


class NetworkError(RetryableError):
    """Connection dropped, refused or unreachable."""


class FetchTimeoutError(RetryableError):
    """The source did not answer in time."""


class RateLimitError(RetryableError):
    """The source asked us to slow down (HTTP 429)."""


class ValidationError(FetchError):
    """A request or navigation step that is not allowed.

    Navigation treats this as a silent no-op; it never escapes the
    navigator.
    """


class CancellationSignal(Exception):
    """Raised inside a superseded retrieval to unwind it.

    Not a FetchError: it never reaches consumers and is never retried.
    """


_TYPED_ERRORS = (RateLimitError, FetchTimeoutError, NetworkError, RetryableError, ValidationError)
_STATUS_5XX = re.compile(r"\b5\d{2}\b")
_STATUS_4XX = re.compile(r"\b4\d{2}\b")
_RATE_LIMIT_MARKERS = ("429", "rate limit", "too many requests")
_TIMEOUT_MARKERS = ("timeout", "timed out")
_NETWORK_MARKERS = ("network", "econnreset", "econnrefused", "enotfound", "connection")


def classify_error(error: BaseException) -> type:
    """Map an arbitrary exception onto the retrieval taxonomy.

    Parameters
    ----------
    error : BaseException
        Exception raised by a data source.

    Returns
    -------
    type
        One of NetworkError, FetchTimeoutError, RateLimitError,
        CancellationSignal, ValidationError or FetchError (terminal).

    Examples
    --------
    >>> classify_error(RuntimeError("HTTP 503 Service Unavailable"))
    <class 'drillscope.fetch.errors.NetworkError'>
    >>> classify_error(ValueError("HTTP 404 Not Found"))
    <class 'drillscope.fetch.errors.FetchError'>
    """
    if isinstance(error, CancellationSignal):
        return CancellationSignal
    for known in _TYPED_ERRORS:
        if isinstance(error, known):
            return known
    if isinstance(error, TimeoutError):
        return FetchTimeoutError
    if isinstance(error, ConnectionError):
        return NetworkError

    message = str(error).lower()
    if any(marker in message for marker in _RATE_LIMIT_MARKERS):
        return RateLimitError
    if _STATUS_4XX.search(message):
        return FetchError
    if any(marker in message for marker in _TIMEOUT_MARKERS):
        return FetchTimeoutError
    if any(marker in message for marker in _NETWORK_MARKERS) or _STATUS_5XX.search(message):
        return NetworkError
    return FetchError


def is_retryable(error: BaseException) -> bool:
    """Return True when a retry has a chance of succeeding."""
    if isinstance(error, RetryableError):
        return True
    return issubclass(classify_error(error), RetryableError)
