"""Retry with capped exponential backoff around a single retrieval."""

import logging
import time
from typing import Callable, Optional, TypeVar

import numpy as np

from drillscope.fetch.cancellation import CancellationToken
from drillscope.fetch.errors import CancellationSignal, is_retryable

__all__ = ['ResilientFetcher']

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResilientFetcher:
    """Runs an operation, retrying transient failures with backoff.

    Attempt ``k`` (0-based) that fails with a retryable error is followed by
    a wait of ``base_delay_ms * 2**k`` milliseconds, capped at
    ``max_delay_ms``. With ``jitter > 0`` a random extra of up to
    ``jitter`` times that delay is added, and the sum is capped again.
    Non-retryable errors are raised immediately and do not consume the
    remaining attempts. When attempts run out, the last error is raised.

    The only bound on total time is ``max_retries`` times the backoff, plus
    the optional ``deadline_ms``: a retry whose wait would end past the
    deadline is not scheduled and the last error is raised instead.

    Parameters
    ----------
    max_retries : int
        Total attempts per call (default 3). Must be >= 1.
    base_delay_ms : int
        First backoff delay in milliseconds (default 1000).
    max_delay_ms : int
        Backoff cap in milliseconds (default 30000).
    deadline_ms : int, optional
        Overall time budget per call in milliseconds.
    jitter : float
        Fraction in [0, 1] of random extra delay (default 0, no jitter).
    rng : numpy.random.Generator, optional
        Source of the jitter. Defaults to ``np.random.default_rng()``.
    sleeper : callable, optional
        Function taking seconds. Replaces the real wait in tests.
    clock : callable, optional
        Returns seconds; used for the deadline. Defaults to ``time.monotonic``.

    Examples
    --------
    >>> fetcher = ResilientFetcher(max_retries=3, base_delay_ms=200, jitter=0.1)
    >>> rows = fetcher.execute(lambda: source(query))
    """

    def __init__(self, max_retries: int = 3, base_delay_ms: int = 1000,
                 max_delay_ms: int = 30000, deadline_ms: Optional[int] = None,
                 jitter: float = 0.0, rng: Optional[np.random.Generator] = None,
                 sleeper: Optional[Callable[[float], None]] = None,
                 clock: Optional[Callable[[], float]] = None):
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}")
        if not 0.0 <= jitter <= 1.0:
            raise ValueError(f"jitter must be within [0, 1], got {jitter}")

        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self.deadline_ms = deadline_ms
        self.jitter = jitter
        self._rng = rng if rng is not None else np.random.default_rng()
        self._sleep = sleeper
        self._clock = clock or time.monotonic
        self.last_attempts = 0

    @classmethod
    def from_config(cls, fetch_config, **kwargs) -> "ResilientFetcher":
        """Build from an ``InternalFetchConfig`` (or ``FetchConfig``)."""
        return cls(
            max_retries=fetch_config.max_retries,
            base_delay_ms=fetch_config.base_delay_ms,
            max_delay_ms=fetch_config.max_delay_ms,
            deadline_ms=fetch_config.deadline_ms,
            jitter=fetch_config.jitter,
            **kwargs,
        )

    def backoff_ms(self, attempt: int, base_delay_ms: Optional[int] = None) -> float:
        """Delay after failed attempt ``attempt`` (0-based), capped."""
        base = self.base_delay_ms if base_delay_ms is None else base_delay_ms
        delay = min(base * (2 ** attempt), self.max_delay_ms)
        if self.jitter:
            delay = min(delay + delay * self.jitter * float(self._rng.random()), self.max_delay_ms)
        return delay

    def execute(self, operation: Callable[[], T], max_retries: Optional[int] = None,
                base_delay_ms: Optional[int] = None,
                token: Optional[CancellationToken] = None) -> T:
        """Run ``operation`` until it succeeds or the retry budget is spent.

        Parameters
        ----------
        operation : callable
            Zero-argument callable performing one retrieval attempt.
        max_retries : int, optional
            Overrides the instance attempt budget for this call.
        base_delay_ms : int, optional
            Overrides the instance base delay for this call.
        token : CancellationToken, optional
            Checked before each attempt; makes backoff waits interruptible.

        Returns
        -------
        T
            The first successful result.

        Raises
        ------
        CancellationSignal
            If ``token`` is cancelled before or between attempts.
        Exception
            The last error from ``operation`` when it is terminal or the
            budget is exhausted.
        """
        attempts = self.max_retries if max_retries is None else max_retries
        if attempts < 1:
            raise ValueError(f"max_retries must be >= 1, got {attempts}")

        started = self._clock()
        last_error = None

        for attempt in range(attempts):
            if token is not None:
                token.raise_if_cancelled()

            self.last_attempts = attempt + 1
            try:
                return operation()
            except CancellationSignal:
                raise
            except Exception as e:
                last_error = e

                if not is_retryable(e):
                    logger.debug("Terminal error on attempt %d: %s", attempt + 1, e)
                    raise

                if attempt == attempts - 1:
                    break

                delay_ms = self.backoff_ms(attempt, base_delay_ms)
                if self.deadline_ms is not None:
                    elapsed_ms = (self._clock() - started) * 1000.0
                    if elapsed_ms + delay_ms > self.deadline_ms:
                        logger.warning(
                            "Retry deadline of %d ms reached after %d attempts",
                            self.deadline_ms, attempt + 1,
                        )
                        break

                logger.warning(
                    "Retrying (attempt %d/%d): %s. Next retry in %d ms",
                    attempt + 1, attempts, e, delay_ms,
                )
                self._wait(delay_ms / 1000.0, token)

        logger.error("Retrieval failed after %d attempts: %s", self.last_attempts, last_error)
        raise last_error

    def _wait(self, seconds: float, token: Optional[CancellationToken]):
        """Backoff wait; interruptible when a token is given."""
        if self._sleep is not None:
            self._sleep(seconds)
        elif token is not None:
            token.wait(seconds)
        else:
            time.sleep(seconds)

        if token is not None:
            token.raise_if_cancelled()
