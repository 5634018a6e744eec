"""Assertion helpers shared across test modules."""

from __future__ import annotations

from contextlib import contextmanager


@contextmanager
def not_raises(exception: type[BaseException]):
    """Fail the test if ``exception`` escapes the block."""
    try:
        yield
    except exception as exc:  # pragma: no cover
        raise AssertionError(f"Did raise {exception}: {exc}") from exc
