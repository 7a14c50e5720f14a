"""Ordered severity levels.

>>> is_at_least_as_verbose('info', Level.WARN)
True
>>> is_at_least_as_verbose('WARN', 'DEBUG')
False
"""
from __future__ import annotations

from enum import StrEnum

from taglog.exceptions import ConfigError

__all__ = ['Level', 'LEVEL_NAMES', 'check_level', 'is_at_least_as_verbose']


class Level(StrEnum):
    """Levels ordered from least to most verbose."""
    OFF = 'OFF'
    ERROR = 'ERROR'
    WARN = 'WARN'
    INFO = 'INFO'
    DEBUG = 'DEBUG'


LEVEL_NAMES: tuple[str, ...] = tuple(level.value for level in Level)


def _position(level: Level) -> int:
    return LEVEL_NAMES.index(level.value)


def check_level(level: str) -> Level:
    """Return the Level for ``level`` or raise ConfigError.

    The token is matched as given, callers uppercase first where
    case-insensitivity is wanted.
    """
    if not isinstance(level, str) or level not in LEVEL_NAMES:
        raise ConfigError(
            f"Value {level!r} for argument level not supported, must be one of: {list(LEVEL_NAMES)}."
        )
    return Level(level)


def is_at_least_as_verbose(first: str, second: str) -> bool:
    """True iff ``first`` (case-insensitive) is as verbose as ``second`` or more.
    """
    if not isinstance(first, str):
        raise ConfigError(f'Level must be a string, got {type(first).__name__}.')
    return _position(check_level(first.upper())) >= _position(check_level(second))


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
