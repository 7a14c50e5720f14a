"""Destination resolution and sink writes.

A sink is anything with a callable ``write``. Configuration values resolve
to sinks as follows:

- ``'stdout'`` / ``'stderr'``: the process standard streams
- any other string or path: a file opened for append, created if absent
- an object with ``write``: passed through unchanged
"""
from __future__ import annotations

import io
import os
import sys
from collections.abc import Iterable
from concurrent.futures import Future
from pathlib import Path
from typing import Any

from loguru import logger as _loguru

from taglog.completion import completed, failed
from taglog.exceptions import ConfigError, WriteFailure

_STREAM_NAMES = ('stdout', 'stderr')

__all__ = ['is_interactive', 'is_sink', 'resolve_destination', 'resolve_destinations', 'write_text']


def is_sink(value: Any) -> bool:
    """Check if value has a callable write operation.
    """
    return callable(getattr(value, 'write', None))


def _is_path(value: Any) -> bool:
    if isinstance(value, str):
        return value not in _STREAM_NAMES
    return not is_sink(value) and isinstance(value, os.PathLike)


def _check_destination(destination: Any) -> None:
    if isinstance(destination, str) or is_sink(destination) or _is_path(destination):
        return
    raise ConfigError(
        f"One of the destinations has unexpected type '{type(destination).__name__}'. "
        "Expected 'stdout', 'stderr', a file path, or an object with a write method."
    )


def resolve_destination(destination: str | os.PathLike | Any) -> Any:
    """Resolve one configured destination to a sink.

    Objects with a write method pass through even when they are also
    path-like. Raises ConfigError for unsupported types. Failing to open a
    file raises OSError.
    """
    _check_destination(destination)
    if isinstance(destination, str) and destination in _STREAM_NAMES:
        return getattr(sys, destination)
    if not _is_path(destination):
        return destination
    path = Path(destination).expanduser()
    handle = path.open('a', encoding='utf-8')
    _loguru.debug('Opened log file {} for append', path)
    return handle


def resolve_destinations(destinations: Iterable[str | os.PathLike | Any]) -> tuple[Any, ...]:
    """Resolve configured destinations in order, position 0 is the primary sink.

    Every element is type-checked before any file is opened, and files
    opened before a failing open are closed again.
    """
    if isinstance(destinations, str) or is_sink(destinations) or isinstance(destinations, os.PathLike):
        raise ConfigError('destinations must be a sequence, not a single destination.')
    destinations = list(destinations)
    for dest in destinations:
        _check_destination(dest)
    resolved = []
    try:
        for dest in destinations:
            resolved.append(resolve_destination(dest))
    except OSError:
        for dest, sink in zip(destinations, resolved):
            if _is_path(dest):
                sink.close()
        raise
    return tuple(resolved)


def is_interactive(sink: Any) -> bool:
    """No need to de-duplicate output that does not reach a terminal.
    """
    isatty = getattr(sink, 'isatty', None)
    if not callable(isatty):
        return False
    try:
        return bool(isatty())
    except (ValueError, OSError):
        return False


def _is_binary(sink: Any) -> bool:
    if isinstance(sink, (io.RawIOBase, io.BufferedIOBase)):
        return True
    mode = getattr(sink, 'mode', '')
    return isinstance(mode, str) and 'b' in mode


def _as_write_failure(sink: Any, error: BaseException) -> WriteFailure:
    _loguru.warning('Write to {!r} failed: {}', sink, error)
    failure = WriteFailure(sink, error)
    failure.__cause__ = error
    return failure


def write_text(sink: Any, text: str) -> Future:
    """Write one formatted line and return its completion.

    Binary sinks receive UTF-8 bytes. Sinks whose write returns a Future
    complete when that Future does. Failures become WriteFailure on the
    returned completion, nothing is retried.
    """
    data = text.encode('utf-8') if _is_binary(sink) else text
    try:
        result = sink.write(data)
        flush = getattr(sink, 'flush', None)
        if callable(flush):
            flush()
    except Exception as exc:
        return failed(_as_write_failure(sink, exc))
    if not isinstance(result, Future):
        return completed()

    done: Future = Future()

    def on_done(future: Future) -> None:
        if future.cancelled():
            done.cancel()
        elif future.exception() is not None:
            done.set_exception(_as_write_failure(sink, future.exception()))
        else:
            done.set_result(None)

    result.add_done_callback(on_done)
    return done
