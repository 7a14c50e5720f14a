"""Leveled, tagged, timestamped logging.

Public API - users should only import from this module.

Usage:
    import taglog

    # Resolve options once at the composition root
    factory = taglog.configure_logging({'level': 'INFO', 'destinations': ['stdout', 'stderr']})

    # Tag-scoped loggers share the resolved options
    log = factory.get_logger('billing')
    log.info('charged %s', customer)
    log.error2(['always'], err)    # 'always' bypasses level filtering

    # JSON lines instead of text
    factory = taglog.configure_logging(logFunctions=['defaultJson'])

    # Custom log functions
    @taglog.register_log_function('metrics')
    def count(message, should_log, destinations):
        ...

Every logging call returns a concurrent.futures.Future resolved once all
writes have finished.

Unlike the "last created logger wins" behavior of some loggers, options
given to Logger() or LoggerFactory() always apply; share configuration by
passing the factory around.
"""
from loguru import logger as _loguru

from taglog._backend import InterceptHandler, forward_to_loguru, intercept_stdlib
from taglog._logger import ALWAYS_TAG, Logger, LoggerFactory
from taglog.completion import completed, join
from taglog.config import LoggerOptions, ResolvedOptions, resolve_options
from taglog.exceptions import ConfigError, WriteFailure
from taglog.functions import LOG_FUNCTIONS, default_json, default_text
from taglog.functions import register_log_function, write_to_default_destination
from taglog.levels import Level, is_at_least_as_verbose
from taglog.loggers import StreamLogger
from taglog.message import Message, build_message
from taglog.setup import configure_logging, log_exception
from taglog.sinks import is_interactive, resolve_destinations

# Sink diagnostics stay quiet unless enabled with loguru.logger.enable('taglog.sinks')
_loguru.disable('taglog.sinks')

__all__ = [
    # Configuration
    'configure_logging',
    'LoggerOptions',
    'ResolvedOptions',
    'resolve_options',
    # Logger access
    'Logger',
    'LoggerFactory',
    'ALWAYS_TAG',
    # Levels and messages
    'Level',
    'is_at_least_as_verbose',
    'Message',
    'build_message',
    # Log functions
    'LOG_FUNCTIONS',
    'default_text',
    'default_json',
    'forward_to_loguru',
    'register_log_function',
    'write_to_default_destination',
    # Destinations
    'resolve_destinations',
    'is_interactive',
    # Completions
    'completed',
    'join',
    # Errors
    'ConfigError',
    'WriteFailure',
    # Utilities
    'InterceptHandler',
    'intercept_stdlib',
    'StreamLogger',
    'log_exception',
]
