"""Per-consumer retrieval: cache, retry, supersession and polling together.

A DataRetriever belongs to exactly one consumer (one chart, one dashboard
panel). It owns its supersession discipline and its poller; its cache is
injected so that sharing a key namespace between consumers is always an
explicit decision of the caller.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, NamedTuple, Optional

from pydantic import Field

from drillscope.schemas.base import DrillscopeBaseModel
from drillscope.fetch.cache import FetchCache
from drillscope.fetch.cancellation import CancellationToken
from drillscope.fetch.polling import PollingScheduler
from drillscope.fetch.retry import ResilientFetcher
from drillscope.fetch.supersession import RequestSupersession, RetrievalHandle

__all__ = ['DataQuery', 'FetchRequest', 'RetrievalState', 'DataRetriever']

logger = logging.getLogger(__name__)


class DataQuery(DrillscopeBaseModel):
    """Logical query handed to the upstream data source."""
    source: str
    time_range: Optional[tuple[datetime, datetime]] = None
    path: tuple[str, ...] = ()

    def cache_key(self) -> str:
        """Stable key derived from every query field."""
        if self.time_range is None:
            window = "*"
        else:
            window = f"{self.time_range[0].isoformat()}..{self.time_range[1].isoformat()}"
        return f"{self.source}|{window}|{'/'.join(self.path)}"


class FetchRequest(DrillscopeBaseModel):
    """How a query should be retrieved."""
    source: str
    cache_key: Optional[str] = None
    ttl_seconds: float = Field(300.0, gt=0)
    max_retries: int = Field(3, ge=1)
    poll_interval_ms: Optional[int] = Field(None, ge=1)


class RetrievalState(NamedTuple):
    """Snapshot of a consumer's retrieval status."""
    loading: bool = False
    error: Optional[Exception] = None
    data: Optional[list] = None
    updated_at: Optional[datetime] = None
    from_cache: bool = False


class DataRetriever:
    """Cached, retried, superseding retrieval for one consumer.

    **Cache:** a hit short-circuits the network entirely; there is no
    stale-while-revalidate. Successful results are stored under the
    request's ``cache_key``. Without an injected cache, a private cache is
    created on first use with the request's TTL.

    **Retry:** every network retrieval goes through the ResilientFetcher.

    **Supersession:** a new :meth:`fetch` cancels the in-flight one; late
    results of cancelled retrievals never reach :attr:`state`.

    **Polling:** :meth:`enable_polling` re-runs the last query periodically.
    A request's ``poll_interval_ms`` is applied when :meth:`fetch` is called
    with a new query or request; :meth:`refresh` and poll ticks never touch
    the schedule. After :meth:`disable_polling`, no request turns polling
    back on until :meth:`enable_polling` is called.

    Parameters
    ----------
    source : callable
        ``source(query: DataQuery) -> list[dict]``.
    cache : FetchCache, optional
        Cache for this consumer.
    fetcher : ResilientFetcher, optional
        Retry policy. Defaults to ``ResilientFetcher()``.
    name : str
        Consumer label for logs and thread names.
    fetch_config : InternalFetchConfig, optional
        Supplies TTL, attempt budget and polling interval of the request
        built when :meth:`fetch` is called without one.

    Examples
    --------
    >>> retriever = DataRetriever(api.query, cache=FetchCache(300), name="revenue")
    >>> retriever.subscribe(lambda state: print(state.loading, state.error))
    >>> retriever.fetch(DataQuery(source="revenue"))
    >>> retriever.wait(timeout=10)
    """

    def __init__(self, source: Callable[[DataQuery], Any], cache: Optional[FetchCache] = None,
                 fetcher: Optional[ResilientFetcher] = None, name: str = "consumer",
                 fetch_config=None):
        self.source = source
        self.cache = cache
        self.fetcher = fetcher or ResilientFetcher()
        self.name = name
        self.fetch_config = fetch_config

        self._lock = threading.RLock()
        self._state = RetrievalState()
        self._listeners: list[Callable[[RetrievalState], None]] = []
        self._last: Optional[tuple[DataQuery, FetchRequest]] = None
        self._polling_disabled = False

        self.supersession = RequestSupersession(name)
        self.poller = PollingScheduler(self.refresh, name=name)

    @classmethod
    def from_config(cls, source: Callable[[DataQuery], Any], fetch_config,
                    name: str = "consumer", **fetcher_kwargs) -> "DataRetriever":
        """Build from an ``InternalFetchConfig``.

        The cache TTL, the retry policy and the default request all come
        from ``fetch_config``. ``fetcher_kwargs`` (sleeper, clock, rng) are
        passed to :meth:`ResilientFetcher.from_config`.
        """
        return cls(
            source,
            cache=FetchCache(fetch_config.ttl_seconds, name=f"{name}-cache"),
            fetcher=ResilientFetcher.from_config(fetch_config, **fetcher_kwargs),
            name=name,
            fetch_config=fetch_config,
        )

    @property
    def state(self) -> RetrievalState:
        return self._state

    @property
    def polling_disabled(self) -> bool:
        return self._polling_disabled

    def subscribe(self, listener: Callable[[RetrievalState], None]) -> Callable[[], None]:
        """Register a state listener. Returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, **changes):
        with self._lock:
            self._state = self._state._replace(**changes)
            state = self._state
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(state)
            except Exception:
                logger.exception("%s: state listener failed", self.name)

    def _cache_for(self, request: FetchRequest) -> Optional[FetchCache]:
        if request.cache_key is None:
            return None
        with self._lock:
            if self.cache is None:
                self.cache = FetchCache(request.ttl_seconds, name=f"{self.name}-cache")
            return self.cache

    def default_request(self, query: DataQuery) -> FetchRequest:
        """Request used when :meth:`fetch` is called without one."""
        cfg = self.fetch_config
        if cfg is None:
            return FetchRequest(source=query.source, cache_key=query.cache_key())
        return FetchRequest(
            source=query.source,
            cache_key=query.cache_key(),
            ttl_seconds=cfg.ttl_seconds,
            max_retries=cfg.max_retries,
            poll_interval_ms=cfg.poll_interval_ms,
        )

    def fetch(self, query: DataQuery, request: Optional[FetchRequest] = None) -> Optional[RetrievalHandle]:
        """Retrieve ``query``, from cache when possible.

        Returns
        -------
        RetrievalHandle or None
            The background retrieval, or None when served from cache.
        """
        if request is None:
            request = self.default_request(query)

        with self._lock:
            is_new = self._last != (query, request)
            self._last = (query, request)
            schedule = (is_new and request.poll_interval_ms is not None
                        and not self._polling_disabled)

        if schedule:
            self.poller.set_interval(request.poll_interval_ms)

        return self._issue(query, request)

    def _issue(self, query: DataQuery, request: FetchRequest) -> Optional[RetrievalHandle]:
        cache = self._cache_for(request)
        if cache is not None:
            cached = cache.get(request.cache_key)
            if cached is not None:
                logger.debug("%s: cache hit %s", self.name, request.cache_key)
                # a cache hit is the newest answer; drop whatever is in flight
                self.supersession.cancel()
                self._set_state(loading=False, error=None, data=cached,
                                updated_at=datetime.now(timezone.utc), from_cache=True)
                return None

        # cancel first so a late result cannot overwrite the loading flag
        self.supersession.cancel()
        self._set_state(loading=True, error=None)

        def work(token: CancellationToken):
            return self.fetcher.execute(
                lambda: self.source(query),
                max_retries=request.max_retries,
                token=token,
            )

        def on_result(records):
            data = list(records or [])
            if cache is not None:
                cache.set(request.cache_key, data)
            self._set_state(loading=False, error=None, data=data,
                            updated_at=datetime.now(timezone.utc), from_cache=False)
            logger.info("%s: retrieved %d records", self.name, len(data))

        def on_error(error):
            logger.error("%s: retrieval failed: %s", self.name, error)
            self._set_state(loading=False, error=error)

        return self.supersession.issue(work, on_result, on_error)

    def refresh(self, force: bool = False) -> Optional[RetrievalHandle]:
        """Re-issue the last query. ``force`` drops its cache entry first.

        The polling schedule is left as it is.
        """
        with self._lock:
            last = self._last
        if last is None:
            logger.debug("%s: nothing to refresh", self.name)
            return None

        query, request = last
        if force and request.cache_key is not None and self.cache is not None:
            self.cache.delete(request.cache_key)
        return self._issue(query, request)

    def enable_polling(self, interval_ms: int) -> None:
        with self._lock:
            self._polling_disabled = False
        self.poller.set_interval(interval_ms)

    def disable_polling(self) -> None:
        """Stop polling until :meth:`enable_polling` is called again."""
        with self._lock:
            self._polling_disabled = True
        self.poller.stop()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for the current retrieval, if any. Returns True when idle."""
        handle = self.supersession.current
        if handle is None:
            return True
        return handle.join(timeout)

    def close(self) -> None:
        """Stop polling, cancel the in-flight retrieval, drop listeners."""
        self.poller.stop()
        self.supersession.cancel()
        with self._lock:
            self._listeners.clear()
        logger.debug("%s: retriever closed", self.name)
