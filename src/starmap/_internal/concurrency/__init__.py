"""Concurrency primitives used by the sync engine."""

from starmap._internal.concurrency.context import FetchContext
from starmap._internal.concurrency.limiter import ConcurrencyLimiter

__all__ = ["ConcurrencyLimiter", "FetchContext"]
