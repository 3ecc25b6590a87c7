"""At-most-one in-flight retrieval per consumer.

Issuing a retrieval cancels the one before it. A superseded retrieval may
still finish (cancellation is cooperative), but its result and its errors
are dropped: only the latest non-cancelled retrieval ever reaches the
consumer.
"""

import itertools
import logging
import threading
from typing import Any, Callable, Optional

from drillscope.fetch.cancellation import CancellationToken
from drillscope.fetch.errors import CancellationSignal

__all__ = ['RetrievalHandle', 'RequestSupersession']

logger = logging.getLogger(__name__)


class RetrievalHandle:
    """A single issued retrieval: its token and its worker thread."""

    def __init__(self, token: CancellationToken):
        self.token = token
        self.thread: Optional[threading.Thread] = None
        self._done = threading.Event()
        self.delivered = False

    def cancel(self) -> None:
        self.token.cancel()

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker to finish. Returns True if it did."""
        return self._done.wait(timeout)

    def __repr__(self):
        return f"RetrievalHandle({self.token.label!r}, done={self.done}, delivered={self.delivered})"


class RequestSupersession:
    """Cancellation discipline for one logical consumer.

    Parameters
    ----------
    name : str
        Consumer label, used for thread names and logs.

    Examples
    --------
    >>> sup = RequestSupersession("revenue-chart")
    >>> h1 = sup.issue(lambda tok: slow_query(tok), on_result=apply)
    >>> h2 = sup.issue(lambda tok: fast_query(tok), on_result=apply)
    >>> h1.cancelled
    True
    """

    def __init__(self, name: str = "consumer"):
        self.name = name
        self._lock = threading.RLock()
        self._current: Optional[RetrievalHandle] = None
        self._seq = itertools.count(1)

    @property
    def current(self) -> Optional[RetrievalHandle]:
        return self._current

    @property
    def in_flight(self) -> bool:
        handle = self._current
        return handle is not None and not handle.done and not handle.cancelled

    def is_current(self, handle: RetrievalHandle) -> bool:
        with self._lock:
            return handle is self._current and not handle.cancelled

    def issue(self, work: Callable[[CancellationToken], Any],
              on_result: Callable[[Any], None],
              on_error: Optional[Callable[[Exception], None]] = None) -> RetrievalHandle:
        """Cancel the in-flight retrieval (if any) and start ``work``.

        Parameters
        ----------
        work : callable
            ``work(token) -> result``; runs on a daemon thread.
        on_result : callable
            Called with the result, only if this retrieval is still current.
        on_error : callable, optional
            Called with the error, only if this retrieval is still current.
            Cancellation is never reported.

        Returns
        -------
        RetrievalHandle
        """
        with self._lock:
            previous = self._current
            if previous is not None and not previous.done:
                logger.debug("%s: superseding %s", self.name, previous.token.label)
                previous.cancel()

            handle = RetrievalHandle(CancellationToken(f"{self.name}#{next(self._seq)}"))
            self._current = handle

        handle.thread = threading.Thread(
            target=self._run,
            args=(handle, work, on_result, on_error),
            name=f"Retrieval-{handle.token.label}",
            daemon=True,
        )
        handle.thread.start()
        return handle

    def cancel(self) -> None:
        """Cancel the in-flight retrieval without starting a new one."""
        with self._lock:
            if self._current is not None:
                self._current.cancel()

    def _run(self, handle, work, on_result, on_error):
        try:
            try:
                result = work(handle.token)
            except CancellationSignal:
                logger.debug("%s: %s unwound after cancellation", self.name, handle.token.label)
                return
            except Exception as e:
                with self._lock:
                    if not self.is_current(handle):
                        logger.debug("%s: dropping error from superseded %s: %s",
                                     self.name, handle.token.label, e)
                        return
                    if on_error is None:
                        logger.error("%s: retrieval failed: %s", self.name, e)
                        return
                    on_error(e)
                return

            with self._lock:
                if not self.is_current(handle):
                    logger.debug("%s: discarding result of superseded %s",
                                 self.name, handle.token.label)
                    return
                on_result(result)
                handle.delivered = True
        except Exception:
            logger.exception("%s: result handler failed", self.name)
        finally:
            handle._done.set()
