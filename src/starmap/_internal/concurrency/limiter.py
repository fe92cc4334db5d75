"""Fixed-bound concurrency limiter for provider fetches.

A counting gate built on ``threading.Condition``: at most ``limit`` holders
at any moment. Waiters wake on release, on timeout, or when an optional
cancel event is set, so a cancelled sync stops queueing new work promptly.

The limiter also tracks the peak number of simultaneous holders, which the
sync engine logs after each fetch round.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Iterator

_LOG = logging.getLogger(__name__)

# Upper bound on a single wait so cancel events are observed promptly.
_WAIT_SLICE_S = 0.05


class ConcurrencyLimiter:
    """Counting semaphore with observability counters.

    Thread-safe: all state is guarded by one condition variable.

    Attributes:
        limit: Maximum number of slots held simultaneously.
    """

    def __init__(self, limit: int = 5) -> None:
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        self.limit = int(limit)
        self._condition = threading.Condition(threading.Lock())
        self._inflight = 0
        self._peak_inflight = 0
        self._total_acquired = 0

    def acquire(
        self,
        timeout_s: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> bool:
        """Acquire a slot.

        Blocks until a slot is free, the timeout expires, or ``cancel_event``
        is set.

        Args:
            timeout_s: Maximum seconds to wait. None waits indefinitely.
            cancel_event: Optional event that aborts the wait when set.

        Returns:
            True if a slot was acquired, False on timeout or cancellation.
        """
        deadline = None if timeout_s is None else time.monotonic() + timeout_s

        with self._condition:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    _LOG.debug("Acquire aborted by cancellation: inflight=%d", self._inflight)
                    return False

                if self._inflight < self.limit:
                    self._inflight += 1
                    self._total_acquired += 1
                    self._peak_inflight = max(self._peak_inflight, self._inflight)
                    _LOG.debug("Acquired slot: inflight=%d, limit=%d", self._inflight, self.limit)
                    return True

                wait_for = _WAIT_SLICE_S
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        _LOG.warning(
                            "Acquire timeout: inflight=%d, limit=%d", self._inflight, self.limit
                        )
                        return False
                    wait_for = min(remaining, wait_for)

                self._condition.wait(timeout=wait_for)

    def release(self) -> None:
        """Release a previously acquired slot and wake waiters."""
        with self._condition:
            if self._inflight == 0:
                _LOG.warning("Release called with no slot held")
                return
            self._inflight -= 1
            _LOG.debug("Released slot: inflight=%d, limit=%d", self._inflight, self.limit)
            self._condition.notify_all()

    @contextmanager
    def slot(self, cancel_event: threading.Event | None = None) -> Iterator[bool]:
        """Hold a slot for the duration of the block.

        Yields whether the slot was acquired; the slot is released on exit
        regardless of how the block ends.
        """
        acquired = self.acquire(cancel_event=cancel_event)
        try:
            yield acquired
        finally:
            if acquired:
                self.release()

    @property
    def inflight(self) -> int:
        with self._condition:
            return self._inflight

    def get_stats(self) -> dict[str, int]:
        """Return limit, inflight, peak_inflight and total_acquired."""
        with self._condition:
            return {
                "limit": self.limit,
                "inflight": self._inflight,
                "peak_inflight": self._peak_inflight,
                "total_acquired": self._total_acquired,
            }


__all__ = ["ConcurrencyLimiter"]
