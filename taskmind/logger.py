"""Levelled, colourised logging to a text stream, plus a process-wide logger."""

import sys
import threading
from datetime import datetime
from enum import IntEnum
from typing import Optional, TextIO

_RESET = "\033[0m"
_GRAY = "\033[37m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[31m"
_WHITE = "\033[97m"
_BG_RED = "\033[41m"

_COLORS = {
    "DEBUG: ": _GRAY,
    "INFO: ": _GREEN,
    "WARN: ": _YELLOW,
    "ERROR: ": _RED,
    "FATAL: ": _BG_RED + _WHITE,
}


class Level(IntEnum):
    """Severity of a log message; higher is more severe."""

    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    FATAL = 4

    def __str__(self) -> str:
        return self.name.lower()


def colorize(prefix: str, msg: str) -> str:
    """Wrap ``prefix + msg`` in the terminal colour that belongs to the prefix."""
    return _COLORS.get(prefix, _RESET) + prefix + msg + _RESET


class Logger:
    """Writes timestamped, coloured lines at or above a minimum level."""

    def __init__(self, stream: Optional[TextIO] = None, level=Level.DEBUG):
        self._stream = stream
        self._lock = threading.Lock()
        self._level = Level.DEBUG
        self.set_level(level)

    @property
    def level(self) -> Level:
        with self._lock:
            return self._level

    def set_level(self, level) -> None:
        """Change the minimum level; raise ValueError for an unknown level."""
        try:
            new_level = Level(level)
        except ValueError:
            raise ValueError(f"invalid log level: {level!r}") from None
        with self._lock:
            self._level = new_level

    def _write(self, level: Level, msg, args: tuple) -> None:
        text = str(msg) % args if args else str(msg)
        line = datetime.now().strftime("%Y/%m/%d %H:%M:%S.%f ")
        line += colorize(f"{level.name}: ", text)
        if not line.endswith("\n"):
            line += "\n"
        stream = self._stream if self._stream is not None else sys.stderr
        with self._lock:
            stream.write(line)
            flush = getattr(stream, "flush", None)
            if flush is not None:
                flush()

    def _log(self, level: Level, msg, args: tuple) -> None:
        if level >= self.level:
            self._write(level, msg, args)

    def debug(self, msg, *args) -> None:
        self._log(Level.DEBUG, msg, args)

    def info(self, msg, *args) -> None:
        self._log(Level.INFO, msg, args)

    def warn(self, msg, *args) -> None:
        self._log(Level.WARN, msg, args)

    def error(self, msg, *args) -> None:
        self._log(Level.ERROR, msg, args)

    def fatal(self, msg, *args) -> None:
        """Write the message whatever the level, then exit with status 1."""
        self._write(Level.FATAL, msg, args)
        raise SystemExit(1)


_global_lock = threading.Lock()
_global_logger = Logger(None, Level.DEBUG)


def get_logger() -> Logger:
    """Return the process-wide logger."""
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Replace the process-wide logger."""
    global _global_logger
    with _global_lock:
        _global_logger = logger


def set_level(level) -> None:
    _global_logger.set_level(level)


def debug(msg, *args) -> None:
    _global_logger.debug(msg, *args)


def info(msg, *args) -> None:
    _global_logger.info(msg, *args)


def warn(msg, *args) -> None:
    _global_logger.warn(msg, *args)


def error(msg, *args) -> None:
    _global_logger.error(msg, *args)


def fatal(msg, *args) -> None:
    _global_logger.fatal(msg, *args)