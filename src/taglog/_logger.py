"""Logger facade and the factory that hands out tag-scoped loggers.
"""
from __future__ import annotations

import sys
from collections.abc import Iterable
from concurrent.futures import Future
from typing import Any

from taglog.completion import join
from taglog.config import LoggerOptions, ResolvedOptions, resolve_options
from taglog.exceptions import ConfigError
from taglog.functions import resolve_log_functions
from taglog.levels import LEVEL_NAMES, Level, check_level, is_at_least_as_verbose
from taglog.message import build_message, merge_tags, normalize_tags
from taglog.sinks import resolve_destinations

__all__ = ['ALWAYS_TAG', 'Logger', 'LoggerFactory']

# Messages carrying this tag bypass level filtering
ALWAYS_TAG = 'always'

Tags = str | Iterable[str] | None


def _is_level_token(value: Any) -> bool:
    return isinstance(value, Level) or (isinstance(value, str) and value in LEVEL_NAMES)


class Logger:
    """Leveled, tagged logger writing through its log functions.

    Every logging method returns a completion (``concurrent.futures.Future``)
    resolved once all writes for the call have finished. A failed write
    fails the completion with WriteFailure, it never raises at the call.

    Options passed here always apply. Use LoggerFactory to resolve options
    once and share them between tag-scoped loggers.
    """

    def __init__(self, options: LoggerOptions | ResolvedOptions | dict | None = None,
                 tags: Tags = None):
        resolved = resolve_options(options)
        self._level = resolved.level
        self._destinations = resolved.destinations
        self._log_functions = resolved.log_functions
        self.tags = list(resolved.tags) if tags is None else normalize_tags(tags)

    def __repr__(self) -> str:
        return f'Logger(level={self._level.value!r}, tags={self.tags!r})'

    @property
    def level(self) -> Level:
        return self._level

    @level.setter
    def level(self, value: str) -> None:
        if not isinstance(value, str):
            raise ConfigError(f'Level must be a string, got {type(value).__name__}.')
        self._level = check_level(value.upper())

    @property
    def destinations(self) -> tuple[Any, ...]:
        return self._destinations

    @destinations.setter
    def destinations(self, value: Iterable[Any]) -> None:
        self._destinations = resolve_destinations(value)

    @property
    def log_functions(self) -> tuple:
        return self._log_functions

    @log_functions.setter
    def log_functions(self, value: Any) -> None:
        self._log_functions = resolve_log_functions(value)

    def get_options(self) -> ResolvedOptions:
        """Snapshot of the resolved level, destinations, log functions, and a copy of the tags."""
        return ResolvedOptions(self._level, self._destinations, self._log_functions, tuple(self.tags))

    def bind(self, *tags: str) -> Logger:
        """Return a new logger sharing these options with ``tags`` appended."""
        return Logger(self.get_options(), [*self.tags, *tags])

    def error(self, primary: Any, *args: Any) -> Future:
        return self.dispatch(Level.ERROR, None, primary, args)

    def error2(self, tags: Tags, primary: Any, *args: Any) -> Future:
        return self.dispatch(Level.ERROR, tags, primary, args)

    def exception(self, primary: Any, *args: Any) -> Future:
        """Log at ERROR with the stack of the exception being handled."""
        return self.dispatch(Level.ERROR, None, primary, args, error=sys.exception())

    def warn(self, primary: Any, *args: Any) -> Future:
        return self.dispatch(Level.WARN, None, primary, args)

    def warn2(self, tags: Tags, primary: Any, *args: Any) -> Future:
        return self.dispatch(Level.WARN, tags, primary, args)

    def info(self, primary: Any, *args: Any) -> Future:
        return self.dispatch(Level.INFO, None, primary, args)

    def info2(self, tags: Tags, primary: Any, *args: Any) -> Future:
        return self.dispatch(Level.INFO, tags, primary, args)

    def debug(self, primary: Any, *args: Any) -> Future:
        return self.dispatch(Level.DEBUG, None, primary, args)

    def debug2(self, tags: Tags, primary: Any, *args: Any) -> Future:
        return self.dispatch(Level.DEBUG, tags, primary, args)

    # Aliases
    warning = warn
    warning2 = warn2

    def log(self, first: Any, *args: Any) -> Future:
        """``log(level, primary, *args)`` or ``log(primary, *args)`` at INFO.
        """
        if _is_level_token(first) and args:
            return self.dispatch(first, None, args[0], args[1:])
        return self.dispatch(Level.INFO, None, first, args)

    def log2(self, first: Any, second: Any, *args: Any) -> Future:
        """``log2(level, tags, primary, *args)`` or ``log2(tags, primary, *args)`` at INFO.
        """
        if _is_level_token(first) and args:
            return self.dispatch(first, second, args[0], args[1:])
        return self.dispatch(Level.INFO, first, second, args)

    def dispatch(self, level: str, tags: Tags, primary: Any, args: Iterable[Any] = (), *,
                 error: BaseException | None = None) -> Future:
        """Filter, build the message, and hand it to every log function.

        The message is built even when filtered out; guard expensive
        arguments with the ``is_*_or_verboser`` checks.
        """
        if not isinstance(level, str):
            raise ConfigError(f'Level must be a string, got {type(level).__name__}.')
        level = check_level(level.upper())
        logger_level = self._level
        destinations = self._destinations
        log_functions = self._log_functions
        merged = merge_tags(self.tags, tags)

        should_log = is_at_least_as_verbose(logger_level, level) or ALWAYS_TAG in merged
        message = build_message(level, merged, primary, tuple(args), error=error)
        return join([fn(message, should_log, destinations) for fn in log_functions])

    def is_error_or_verboser(self) -> bool:
        return is_at_least_as_verbose(self._level, Level.ERROR)

    def is_warn_or_verboser(self) -> bool:
        return is_at_least_as_verbose(self._level, Level.WARN)

    def is_info_or_verboser(self) -> bool:
        return is_at_least_as_verbose(self._level, Level.INFO)

    def is_debug_or_verboser(self) -> bool:
        return is_at_least_as_verbose(self._level, Level.DEBUG)


class LoggerFactory:
    """Resolves options once and creates loggers that share them.

    Loggers differ only by their tags:

    >>> factory = LoggerFactory({'level': 'INFO'})  # doctest: +SKIP
    >>> db_log = factory.get_logger('database')  # doctest: +SKIP
    >>> db_log.info('connected to %s', 'primary')  # doctest: +SKIP
    """

    def __init__(self, options: LoggerOptions | ResolvedOptions | dict | None = None,
                 **overrides: Any):
        self.options = resolve_options(options, **overrides)

    def __repr__(self) -> str:
        return f'LoggerFactory(level={self.options.level.value!r})'

    def get_logger(self, *tags: str) -> Logger:
        """Return a logger with ``tags`` and the shared options."""
        return Logger(self.options, tags)
