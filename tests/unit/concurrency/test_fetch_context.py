"""Tests for FetchContext deadlines and cancellation."""

import time

import pytest

from starmap._internal.concurrency import FetchContext
from starmap.core.exceptions import FetchCancelledError


def test_background_context_is_unbounded():
    ctx = FetchContext.background()
    assert ctx.remaining() is None
    assert not ctx.expired
    ctx.raise_if_cancelled()


def test_derive_narrows_but_never_extends():
    parent = FetchContext.with_timeout(10)
    short = parent.derive(0.5)
    long = parent.derive(60)
    assert short.remaining() <= 0.5
    assert long.remaining() <= 10
    assert parent.remaining() > 5


def test_cancel_reaches_derived_contexts():
    parent = FetchContext.background()
    child = parent.derive(5)
    parent.cancel()
    assert child.cancelled
    with pytest.raises(FetchCancelledError) as exc_info:
        child.raise_if_cancelled()
    assert exc_info.value.context["reason"] == "cancelled"


def test_sibling_deadlines_are_independent():
    parent = FetchContext.background()
    expired = parent.derive(0)
    fresh = parent.derive(30)
    time.sleep(0.01)
    assert expired.expired
    assert not fresh.expired
    assert not parent.expired


def test_expired_context_raises_deadline():
    ctx = FetchContext.with_timeout(0)
    time.sleep(0.01)
    assert ctx.remaining() == 0.0
    with pytest.raises(FetchCancelledError) as exc_info:
        ctx.raise_if_cancelled()
    assert exc_info.value.context["reason"] == "deadline"
