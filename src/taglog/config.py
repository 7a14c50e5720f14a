"""Logger options and their environment defaults.

Environment:
    TAGLOG_LEVEL           default level (DEBUG)
    TAGLOG_DESTINATIONS    comma separated destinations (stdout,stderr)
    TAGLOG_LOG_FUNCTIONS   comma separated log function names (defaultText)
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from taglog.exceptions import ConfigError
from taglog.functions import LogFunction, resolve_log_functions
from taglog.levels import Level, check_level
from taglog.sinks import is_sink, resolve_destinations

__all__ = ['LoggerOptions', 'ResolvedOptions', 'resolve_options']


def _split(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(',') if part.strip())


# Keys accepted from a pre-parsed configuration object
_OPTION_KEYS = {
    'level': 'level',
    'destinations': 'destinations',
    'logFunctions': 'log_functions',
    'logFunction': 'log_functions',
    'log_functions': 'log_functions',
}


# Environment is read when options are created, not at import
def _default_level() -> str:
    return os.getenv('TAGLOG_LEVEL', 'DEBUG').upper()


def _default_destinations() -> tuple[str, ...]:
    return _split(os.getenv('TAGLOG_DESTINATIONS', 'stdout,stderr'))


def _default_log_functions() -> tuple[str, ...]:
    return _split(os.getenv('TAGLOG_LOG_FUNCTIONS', 'defaultText'))


@dataclass(frozen=True)
class LoggerOptions:
    """Unresolved options, defaults come from the environment."""
    level: str = field(default_factory=_default_level)
    destinations: tuple = field(default_factory=_default_destinations)
    log_functions: tuple = field(default_factory=_default_log_functions)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> LoggerOptions:
        """Build options from a configuration object.

        Accepts ``level``, ``destinations`` and one of ``logFunctions``,
        ``logFunction`` or ``log_functions``. Absent keys keep defaults.
        """
        return cls(**_normalize(mapping))


def _normalize(mapping: Mapping[str, Any]) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    for key, value in mapping.items():
        if key not in _OPTION_KEYS:
            raise ConfigError(f'Unknown logger option {key!r}, expected one of {sorted(_OPTION_KEYS)}.')
        name = _OPTION_KEYS[key]
        if name in kwargs:
            raise ConfigError(f'Logger option {name!r} is given more than once.')
        if name == 'log_functions' and (isinstance(value, str) or callable(value)):
            value = (value,)
        elif name == 'destinations' and (isinstance(value, (str, os.PathLike)) or is_sink(value)):
            raise ConfigError('destinations must be a sequence, not a single destination.')
        elif name != 'level':
            try:
                value = tuple(value)
            except TypeError:
                raise ConfigError(f"Logger option {name!r} has unexpected type '{type(value).__name__}'.") from None
        kwargs[name] = value
    return kwargs


@dataclass(frozen=True)
class ResolvedOptions:
    """Validated level, opened sinks and log functions.

    ``tags`` is only filled in by ``Logger.get_options``.
    """
    level: Level
    destinations: tuple[Any, ...]
    log_functions: tuple[LogFunction, ...]
    tags: tuple[str, ...] = ()


def resolve_options(options: LoggerOptions | ResolvedOptions | Mapping[str, Any] | None = None,
                    **overrides: Any) -> ResolvedOptions:
    """Resolve options once: validate the level, open destinations, look up log functions.

    Keyword overrides (same keys as a configuration object) replace the
    matching fields. Raises ConfigError or OSError, nothing is partially
    applied.
    """
    if isinstance(options, ResolvedOptions) and not overrides:
        return options
    if options is None:
        options = LoggerOptions()
    elif isinstance(options, Mapping):
        options = LoggerOptions.from_mapping(options)
    elif isinstance(options, ResolvedOptions):
        options = LoggerOptions(options.level, options.destinations, options.log_functions)
    elif not isinstance(options, LoggerOptions):
        raise ConfigError(f"Logger options have unexpected type '{type(options).__name__}'.")
    if overrides:
        options = replace(options, **_normalize(overrides))

    if not isinstance(options.level, str):
        raise ConfigError(f'Level must be a string, got {type(options.level).__name__}.')
    checked = check_level(options.level.upper())
    functions = resolve_log_functions(options.log_functions)
    sinks = resolve_destinations(options.destinations)
    return ResolvedOptions(level=checked, destinations=sinks, log_functions=functions)
