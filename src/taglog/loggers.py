"""Stream loggers for capturing output."""
from __future__ import annotations

import io
from typing import TYPE_CHECKING

from taglog.levels import Level, check_level

if TYPE_CHECKING:
    from taglog._logger import Logger

__all__ = ['StreamLogger']


class StreamLogger:
    """Write-only file-like object logging each written line.

    Placeholders isatty and fileno mimic a python stream, so it can stand in
    for stdout or stderr:

    >>> with contextlib.redirect_stdout(StreamLogger(log)):  # doctest: +SKIP
    ...     print('captured at INFO')
    """

    def __init__(self, logger: Logger, level: str = Level.INFO) -> None:
        self.logger = logger
        self.level = check_level(level.upper())

    def write(self, buf: str) -> int:
        """Write buffer lines to logger, blank lines are dropped."""
        for line in buf.rstrip().splitlines():
            msg = line.rstrip()
            if msg:
                self.logger.log(self.level, msg)
        return len(buf)

    def flush(self) -> None:
        """Nothing is buffered."""

    def isatty(self) -> bool:
        """Return False as this is not a TTY.
        """
        return False

    def fileno(self) -> int:
        """Raise UnsupportedOperation as this is not a real file.
        """
        raise io.UnsupportedOperation('fileno')
