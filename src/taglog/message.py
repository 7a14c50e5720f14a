"""Message value object and console-style argument formatting.

Formatting mirrors the usual console ``printf`` subset:

>>> format_args('hello %s', 'world')
'hello world'
>>> format_args('%d%% of %s', 42, 'total')
'42% of total'
>>> format_args('100%')
'100%'
>>> format_args('%s', 'a', 'b')
'a b'
"""
from __future__ import annotations

import json
import math
import re
import traceback
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from taglog.levels import Level

__all__ = [
    'Message',
    'build_message',
    'format_args',
    'merge_tags',
    'normalize_tags',
    'render_error',
    'render_stack',
]

_FORMAT_RE = re.compile(r'%[sdifjoOc%]')


@dataclass(frozen=True)
class Message:
    """One log call, shared read-only by every log function."""
    level: Level
    tags: tuple[str, ...]
    text: str
    stack: str | None = None
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def iso_date(self) -> str:
        """ISO-8601 UTC timestamp with millisecond precision and ``Z`` suffix."""
        return (self.date.astimezone(timezone.utc)
                .isoformat(timespec='milliseconds')
                .replace('+00:00', 'Z'))


def render_error(error: BaseException) -> str:
    """Default string rendering of an exception, ``Type: message``.
    """
    name = type(error).__name__
    text = str(error)
    return f'{name}: {text}' if text else name


def render_stack(error: BaseException) -> str:
    """Trace string of an exception, starting with its type name.
    """
    frames = ''.join(traceback.format_tb(error.__traceback__))
    return (render_error(error) + '\n' + frames).rstrip()


def _inspect(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, BaseException):
        return render_error(value)
    return repr(value)


def _format_number(value: float) -> str:
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _to_number(value: Any) -> int | float | None:
    if isinstance(value, bool):
        return float(int(value))
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        # Digit strings stay exact past float precision
        try:
            return int(value)
        except ValueError:
            pass
    if isinstance(value, (float, str)):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _format_token(token: str, value: Any) -> str:
    if token == '%s':
        return _inspect(value)
    if token in {'%d', '%f'}:
        number = _to_number(value)
        if number is None:
            return 'NaN'
        if isinstance(number, int):
            return str(number)
        return _format_number(number)
    if token == '%i':
        number = _to_number(value)
        if number is None or isinstance(number, float) and not math.isfinite(number):
            return 'NaN'
        return str(int(number))
    if token == '%j':
        try:
            return json.dumps(value, separators=(',', ':'), ensure_ascii=False, default=str)
        except ValueError:
            return '[Circular]'
    if token == '%c':
        return ''
    return repr(value)


def format_args(primary: Any, *args: Any) -> str:
    """Render ``primary`` with ``args`` like a console formatter.

    A lone argument is rendered as is, so ``%`` literals in it are never
    taken for placeholders. Arguments left over after the template are
    appended separated by spaces.

    ``%s`` renders ``None`` as ``'None'``. ``%d``, ``%i`` and ``%f`` render
    ``'NaN'`` for anything that is not a number or a numeric string, the
    empty string included.
    """
    if not args:
        return _inspect(primary)
    if not isinstance(primary, str):
        return ' '.join(_inspect(value) for value in (primary, *args))

    remaining = list(args)

    def replace(match: re.Match) -> str:
        token = match.group()
        if token == '%%':
            return '%'
        if not remaining:
            return token
        return _format_token(token, remaining.pop(0))

    text = _FORMAT_RE.sub(replace, primary)
    return ' '.join([text, *(_inspect(value) for value in remaining)])


def normalize_tags(tags: str | Iterable[str] | None) -> list[str]:
    """A single tag, an iterable of tags, or None, as a list.
    """
    if tags is None:
        return []
    if isinstance(tags, str):
        return [tags]
    return list(tags)


def merge_tags(logger_tags: Iterable[str], call_tags: str | Iterable[str] | None) -> tuple[str, ...]:
    """Logger tags followed by call tags, order kept, duplicates kept.
    """
    return (*logger_tags, *normalize_tags(call_tags))


def build_message(level: Level, tags: Sequence[str], primary: Any,
                  args: Sequence[Any] = (), *,
                  error: BaseException | None = None) -> Message:
    """Build the Message for one log call.

    When ``primary`` is an exception, its trace becomes the stack. ``error``
    supplies a stack for calls whose primary argument is plain text.
    """
    text = format_args(primary, *args)
    if isinstance(primary, BaseException):
        error = primary
    stack = render_stack(error) if error is not None else None
    return Message(level=Level(level), tags=tuple(tags), text=text, stack=stack)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
