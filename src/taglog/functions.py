"""Log functions - pluggable strategies that format a Message and write it.

A log function has the signature::

    fn(message: Message, should_log: bool, destinations: Sequence) -> Future | None

Built-ins are registered by name in ``LOG_FUNCTIONS``. Custom functions are
either passed as values or registered under a name first:

    >>> @register_log_function('upper')  # doctest: +SKIP
    ... def upper(message, should_log, destinations):
    ...     ...
"""
from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import Future
from typing import Any

from taglog.completion import completed, join
from taglog.exceptions import ConfigError
from taglog.levels import Level, is_at_least_as_verbose
from taglog.message import Message
from taglog.sinks import is_interactive, write_text

__all__ = [
    'LOG_FUNCTIONS',
    'LogFunction',
    'default_json',
    'default_text',
    'format_json',
    'format_text',
    'register_log_function',
    'resolve_log_function',
    'resolve_log_functions',
    'write_to_default_destination',
]

LogFunction = Callable[[Message, bool, Sequence[Any]], 'Future | None']


def write_to_default_destination(text: str, level: str, should_log: bool,
                                 destinations: Sequence[Any]) -> Future:
    """Write ``text`` to destinations[0] and/or destinations[1].

    WARN and ERROR also go to destinations[1] when it exists and is not
    destinations[0]. destinations[0] is skipped only when both are
    terminals and destinations[1] already showed the line.
    """
    if not should_log or not destinations:
        return completed()
    dest0 = destinations[0]
    dest1 = destinations[1] if len(destinations) > 1 else None
    write_to_dest1 = (not is_at_least_as_verbose(level, Level.INFO)
                      and dest1 is not None and dest1 is not dest0)
    both_interactive = is_interactive(dest0) and is_interactive(dest1)
    write_to_dest0 = not (write_to_dest1 and both_interactive)

    writes = []
    if write_to_dest1:
        writes.append(write_text(dest1, text))
    if write_to_dest0:
        writes.append(write_text(dest0, text))
    return join(writes)


def format_text(message: Message) -> str:
    """One text line: ``{iso} {LEVEL} [{tags}] - {text}[ STACK: {stack}]``.

    Text streams translate the trailing newline to the platform terminator.
    """
    level = f'{message.level.value:<5}'[:5]
    tags = ', '.join(message.tags)
    text = f'{message.text} STACK: {message.stack}' if message.stack else message.text
    return f'{message.iso_date} {level} [{tags}] - {text}\n'


def format_json(message: Message) -> str:
    """One JSON line, field order isoDate, level, tags, text, stack.

    Line breaks inside strings are escaped, so there is always exactly one
    physical line per message.
    """
    record: dict[str, Any] = {
        'isoDate': message.iso_date,
        'level': message.level.value,
        'tags': list(message.tags),
        'text': message.text,
    }
    if message.stack is not None:
        record['stack'] = message.stack
    return json.dumps(record, separators=(',', ':'), ensure_ascii=False) + '\n'


def default_text(message: Message, should_log: bool, destinations: Sequence[Any]) -> Future:
    if not should_log:
        return completed()
    return write_to_default_destination(format_text(message), message.level, should_log, destinations)


def default_json(message: Message, should_log: bool, destinations: Sequence[Any]) -> Future:
    if not should_log:
        return completed()
    return write_to_default_destination(format_json(message), message.level, should_log, destinations)


LOG_FUNCTIONS: dict[str, LogFunction] = {
    'defaultText': default_text,
    'defaultJson': default_json,
}


def register_log_function(name: str, fn: LogFunction | None = None, *, replace: bool = False):
    """Register ``fn`` under ``name``, usable as a decorator.

    Raises ConfigError when the name is taken and ``replace`` is false.
    """
    def decorator(func: LogFunction) -> LogFunction:
        if not callable(func):
            raise ConfigError(f'Log function {name!r} must be callable.')
        if name in LOG_FUNCTIONS and not replace:
            raise ConfigError(f'A log function named {name!r} is already registered.')
        LOG_FUNCTIONS[name] = func
        return func

    if fn is not None:
        return decorator(fn)
    return decorator


def resolve_log_function(value: str | LogFunction) -> LogFunction:
    """Resolve a registered name or pass a callable through.
    """
    if isinstance(value, str):
        try:
            return LOG_FUNCTIONS[value]
        except KeyError:
            raise ConfigError(
                f'LogFunction value {value!r} is invalid. Must be one of {sorted(LOG_FUNCTIONS)} '
                'or a callable. Register custom functions with register_log_function().'
            ) from None
    if callable(value):
        return value
    raise ConfigError(f"The log function has unexpected type '{type(value).__name__}'.")


def resolve_log_functions(values: str | LogFunction | Iterable[str | LogFunction]) -> tuple[LogFunction, ...]:
    """Resolve one or more log functions, a single value is accepted too.
    """
    if isinstance(values, str) or callable(values):
        values = [values]
    functions = tuple(resolve_log_function(value) for value in values)
    if not functions:
        raise ConfigError('At least one log function is required.')
    return functions
