"""Data retrieval modules.

- cache: TTL-keyed in-memory store
- retry: Capped exponential backoff
- errors: Error taxonomy and retryability
- cancellation: Cooperative cancellation token
- supersession: One in-flight retrieval per consumer
- polling: Periodic re-invocation
- retrieval: Per-consumer facade combining the above
"""

from drillscope.fetch.cache import FetchCache, CacheEntry
from drillscope.fetch.cancellation import CancellationToken
from drillscope.fetch.errors import (
    FetchError,
    RetryableError,
    NetworkError,
    FetchTimeoutError,
    RateLimitError,
    ValidationError,
    CancellationSignal,
    is_retryable,
    classify_error,
)
from drillscope.fetch.retry import ResilientFetcher
from drillscope.fetch.supersession import RequestSupersession, RetrievalHandle
from drillscope.fetch.polling import PollingScheduler
from drillscope.fetch.retrieval import DataQuery, FetchRequest, RetrievalState, DataRetriever

__all__ = [
    "FetchCache",
    "CacheEntry",
    "CancellationToken",
    "FetchError",
    "RetryableError",
    "NetworkError",
    "FetchTimeoutError",
    "RateLimitError",
    "ValidationError",
    "CancellationSignal",
    "is_retryable",
    "classify_error",
    "ResilientFetcher",
    "RequestSupersession",
    "RetrievalHandle",
    "PollingScheduler",
    "DataQuery",
    "FetchRequest",
    "RetrievalState",
    "DataRetriever",
]
