"""Periodic re-invocation of a retrieval.

A PollingScheduler owns at most one timer thread. Changing the interval
stops and joins the old thread before the new one starts, so a consumer is
never polled by two timers at once.
"""

import logging
import threading
from typing import Callable, Optional

__all__ = ['PollingScheduler']

logger = logging.getLogger(__name__)


class _PollingThread(threading.Thread):
    """Calls ``trigger`` every ``interval`` seconds until stopped."""

    def __init__(self, trigger: Callable[[], None], interval: float, name: str,
                 on_tick: Callable[[], None]):
        super().__init__(daemon=True, name=name)
        self.trigger = trigger
        self.interval = interval
        self._on_tick = on_tick
        self._stop_event = threading.Event()

    def stop(self):
        self._stop_event.set()

    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run(self):
        logger.debug("%s polling every %.3f s", self.name, self.interval)
        # wait() returns True as soon as stop() is called
        while not self._stop_event.wait(self.interval):
            try:
                self.trigger()
            except Exception:
                logger.exception("%s: poll failed", self.name)
            self._on_tick()
        logger.debug("Stopped %s", self.name)


class PollingScheduler:
    """Optional periodic re-invocation of a retrieval for one consumer.

    Parameters
    ----------
    trigger : callable
        Zero-argument callable re-issuing the retrieval.
    name : str
        Consumer label used for the thread name.

    Examples
    --------
    >>> poller = PollingScheduler(retriever.refresh, name="revenue-chart")
    >>> poller.start(30_000)      # every 30 s
    >>> poller.set_interval(5_000)  # replaces the timer
    >>> poller.stop()
    """

    def __init__(self, trigger: Callable[[], None], name: str = "consumer"):
        self.trigger = trigger
        self.name = name
        self._lock = threading.Lock()
        self._tick_lock = threading.Lock()
        self._thread: Optional[_PollingThread] = None
        self._interval_ms: Optional[int] = None
        self.tick_count = 0

    @property
    def enabled(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and not thread.stopped()

    @property
    def interval_ms(self) -> Optional[int]:
        return self._interval_ms

    def _count_tick(self):
        with self._tick_lock:
            self.tick_count += 1

    def start(self, interval_ms: int) -> None:
        """Enable polling; equivalent to :meth:`set_interval`."""
        self.set_interval(interval_ms)

    def set_interval(self, interval_ms: int) -> None:
        """Poll every ``interval_ms``, replacing any running timer."""
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")

        with self._lock:
            if self._thread is not None and self._interval_ms == interval_ms and self.enabled:
                return
            self._stop_locked()
            self._interval_ms = interval_ms
            self._thread = _PollingThread(
                self.trigger,
                interval_ms / 1000.0,
                name=f"Poller-{self.name}",
                on_tick=self._count_tick,
            )
            self._thread.start()
        logger.info("%s: polling enabled every %d ms", self.name, interval_ms)

    def stop(self) -> None:
        """Disable polling. Safe to call more than once."""
        with self._lock:
            was_enabled = self._thread is not None
            self._stop_locked()
            self._interval_ms = None
        if was_enabled:
            logger.info("%s: polling disabled", self.name)

    def _stop_locked(self):
        thread = self._thread
        self._thread = None
        if thread is None:
            return
        thread.stop()
        if thread is not threading.current_thread():
            thread.join(timeout=5)
            if thread.is_alive():
                logger.warning("%s did not stop cleanly", thread.name)
