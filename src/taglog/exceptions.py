"""Exception types raised by taglog."""

__all__ = ['ConfigError', 'WriteFailure']


class ConfigError(ValueError):
    """Invalid level, destination, log function, or option."""


class WriteFailure(OSError):
    """A sink write failed after the logger was constructed.

    The sink is kept on ``sink``; the original exception is the ``__cause__``.
    """

    def __init__(self, sink, error: BaseException) -> None:
        super().__init__(f'write to {sink!r} failed: {error}')
        self.sink = sink
        self.error = error
