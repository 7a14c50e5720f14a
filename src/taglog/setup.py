"""Logging configuration - the composition root.

Resolve options once, then hand tag-scoped loggers to the modules that need
them:

    factory = configure_logging({'level': 'INFO', 'destinations': ['app.log', 'stderr']})
    log = factory.get_logger('billing')
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from functools import wraps
from typing import Any

from taglog._backend import intercept_stdlib
from taglog._logger import Logger, LoggerFactory
from taglog.config import LoggerOptions

__all__ = ['configure_logging', 'log_exception']


def configure_logging(
    options: LoggerOptions | Mapping[str, Any] | None = None,
    *,
    intercept: bool | list[str] | None = None,
    **overrides: Any,
) -> LoggerFactory:
    """Resolve logging options and return the factory for tag-scoped loggers.

    Args:
        options: LoggerOptions or a configuration object with ``level``,
                 ``destinations`` and ``logFunctions``. Environment defaults
                 fill anything absent.
        intercept: Route stdlib logging into taglog. True intercepts the root
                   logger, a list intercepts the named loggers only.
        **overrides: Option values taking precedence over ``options``.

    Returns
        LoggerFactory sharing the resolved options.
    """
    factory = LoggerFactory(options, **overrides)
    if intercept:
        names = None if intercept is True else list(intercept)
        intercept_stdlib(factory.get_logger(), names)
    return factory


def log_exception(logger: Logger) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator that logs exceptions with their stack and re-raises them.
    """
    def wrapper(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped_fn(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except Exception as exc:
                logger.error(exc)
                raise
        return wrapped_fn
    return wrapper
