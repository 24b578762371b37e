"""Kernel logging: stdlib loggers plus an optional host log sink."""

import logging
from enum import IntEnum
from typing import Callable, Optional


class LogLevel(IntEnum):
    """Host log levels. Lower value = more severe; OFF silences the sink."""
    OFF = 0
    FATAL = 1
    ERROR = 2
    WARN = 3
    INFO = 4
    DEBUG = 5
    TRACE = 6


LogSink = Callable[[LogLevel, str], None]

_STDLIB_LEVELS: dict[LogLevel, int] = {
    LogLevel.FATAL: logging.CRITICAL,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.TRACE: logging.DEBUG,
}


class KernelLogger:
    """Routes kernel notices to a stdlib logger and, when configured, a sink.

    The sink only sees messages at or above ``level`` in severity. A sink
    that raises is reported on the stdlib logger; it never propagates into
    the scheduling path.
    """

    def __init__(
        self,
        name: str,
        level: LogLevel = LogLevel.WARN,
        sink: Optional[LogSink] = None,
    ):
        self._logger = logging.getLogger(name)
        self.level = level
        self.sink = sink

    def log(self, level: LogLevel, message: str) -> None:
        if level == LogLevel.OFF:
            return
        self._logger.log(_STDLIB_LEVELS[level], message)
        if self.sink is None or level > self.level:
            return
        try:
            self.sink(level, message)
        except Exception:
            self._logger.exception("Log sink failed on %s message", level.name)

    def error(self, message: str) -> None:
        self.log(LogLevel.ERROR, message)

    def warn(self, message: str) -> None:
        self.log(LogLevel.WARN, message)

    def info(self, message: str) -> None:
        self.log(LogLevel.INFO, message)

    def debug(self, message: str) -> None:
        self.log(LogLevel.DEBUG, message)

    def trace(self, message: str) -> None:
        self.log(LogLevel.TRACE, message)


def stdlib_level(level: LogLevel) -> int:
    """The ``logging`` level matching a host level (OFF maps above CRITICAL)."""
    if level == LogLevel.OFF:
        return logging.CRITICAL + 1
    return _STDLIB_LEVELS[level]
