"""Loguru bridge - internal implementation detail.

Two directions:

- ``forward_to_loguru`` is a log function that hands passing messages to
  loguru, so loguru sinks (rotation, colors, ...) can receive taglog output.
- ``InterceptHandler`` routes stdlib ``logging`` records into a taglog
  Logger, so ``logging.getLogger('web').info(...)`` keeps working.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from loguru import logger as _loguru

from taglog.completion import completed
from taglog.functions import register_log_function
from taglog.levels import Level
from taglog.message import Message

if TYPE_CHECKING:
    from concurrent.futures import Future

    from taglog._logger import Logger

__all__ = ['InterceptHandler', 'forward_to_loguru', 'intercept_stdlib']

# taglog level -> loguru level name
_LOGURU_LEVELS = {
    Level.ERROR: 'ERROR',
    Level.WARN: 'WARNING',
    Level.INFO: 'INFO',
    Level.DEBUG: 'DEBUG',
}


def forward_to_loguru(message: Message, should_log: bool, destinations: Sequence[Any]) -> Future:
    """Log function forwarding to loguru, destinations are not used.
    """
    if not should_log:
        return completed()
    level = _LOGURU_LEVELS.get(message.level, 'INFO')
    text = f'{message.text} STACK: {message.stack}' if message.stack else message.text
    _loguru.bind(tags=list(message.tags)).log(level, '{}', text)
    return completed()


register_log_function('loguru', forward_to_loguru, replace=True)


def _taglog_level(levelno: int) -> Level:
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARN
    if levelno >= logging.INFO:
        return Level.INFO
    return Level.DEBUG


class InterceptHandler(logging.Handler):
    """Handler that forwards stdlib logging records to a taglog Logger.

    The stdlib logger name is added as a tag, ``exc_info`` becomes the stack.
    """

    def __init__(self, logger: Logger, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.logger = logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            text = record.getMessage()
        except (TypeError, ValueError):
            # Arguments do not fit the format string
            text = f'{record.msg} {record.args}'
        error = record.exc_info[1] if record.exc_info else None
        self.logger.dispatch(_taglog_level(record.levelno), [record.name], '%s', [text], error=error)


def intercept_stdlib(logger: Logger, logger_names: list[str] | None = None) -> InterceptHandler:
    """Route stdlib logging into ``logger``.

    Args:
        logger: taglog Logger receiving the records.
        logger_names: Specific logger names to intercept. If None,
                      intercepts the root logger (all loggers).
    """
    handler = InterceptHandler(logger)
    if not logger_names:
        logging.basicConfig(handlers=[handler], level=0, force=True)
        return handler

    for name in logger_names:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [handler]
        stdlib_logger.propagate = False
        stdlib_logger.setLevel(logging.DEBUG)  # Let taglog handle filtering
    return handler
