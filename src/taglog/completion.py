"""Completion signals returned by log calls.

A completion is a ``concurrent.futures.Future`` that resolves to ``None``.
Block on it with ``.result()`` or await it with ``asyncio.wrap_future``.
"""
from __future__ import annotations

import threading
from collections.abc import Iterable
from concurrent.futures import Future

__all__ = ['completed', 'failed', 'join']


def completed() -> Future:
    """An already resolved completion."""
    future: Future = Future()
    future.set_result(None)
    return future


def failed(error: BaseException) -> Future:
    """An already failed completion."""
    future: Future = Future()
    future.set_exception(error)
    return future


def join(futures: Iterable[Future | None]) -> Future:
    """One completion that resolves once every given completion has.

    Entries that are not Futures (``None`` included) count as done. The
    joined completion fails with the first failure in the given order;
    the others are still waited for.
    """
    pending = [f for f in futures if isinstance(f, Future)]
    if not pending:
        return completed()

    joined: Future = Future()
    lock = threading.Lock()
    remaining = [len(pending)]

    def on_done(_: Future) -> None:
        with lock:
            remaining[0] -= 1
            if remaining[0]:
                return
        for future in pending:
            if future.cancelled():
                joined.cancel()
                return
            error = future.exception()
            if error is not None:
                joined.set_exception(error)
                return
        joined.set_result(None)

    for future in pending:
        future.add_done_callback(on_done)
    return joined
