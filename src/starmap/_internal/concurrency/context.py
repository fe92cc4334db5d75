"""Deadline and cancellation carrier for fetch work.

A :class:`FetchContext` plays the role of a request context: it holds an
optional absolute deadline and a cancel event shared with every context
derived from it. Deriving a child narrows the deadline without affecting
the parent or sibling contexts, so each provider fetch gets an independent
timeout while one cancel call still reaches all of them.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from starmap.core.exceptions import FetchCancelledError


class FetchContext:
    def __init__(
        self,
        *,
        deadline: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.deadline = deadline
        self.cancel_event = cancel_event or threading.Event()

    @classmethod
    def background(cls) -> "FetchContext":
        """Root context with no deadline."""
        return cls()

    @classmethod
    def with_timeout(cls, timeout: float) -> "FetchContext":
        return cls(deadline=time.monotonic() + timeout)

    def derive(self, timeout: Optional[float] = None) -> "FetchContext":
        """Child context sharing cancellation, with its own (never later) deadline."""
        deadline = self.deadline
        if timeout is not None:
            child_deadline = time.monotonic() + timeout
            deadline = child_deadline if deadline is None else min(deadline, child_deadline)
        return FetchContext(deadline=deadline, cancel_event=self.cancel_event)

    def cancel(self) -> None:
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, None when unbounded."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        """Raise FetchCancelledError if cancelled or past the deadline."""
        if self.cancelled:
            raise FetchCancelledError("context cancelled", context={"reason": "cancelled"})
        if self.expired:
            raise FetchCancelledError("context deadline exceeded", context={"reason": "deadline"})


__all__ = ["FetchContext"]
