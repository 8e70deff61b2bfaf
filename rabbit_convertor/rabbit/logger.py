"""
Renderer loggers.

The renderer reports through its own small logger interface so the caller
decides where messages go: ``stderr`` prints them, ``host`` hands them to the
Python :mod:`logging` tree of whatever program embeds the renderer.
"""
import logging
import sys
from enum import IntEnum
from typing import Dict, Optional, Type


class Severity(IntEnum):
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    FATAL = 4
    UNKNOWN = 5


LEVEL_NAMES: Dict[str, Severity] = {
    "debug": Severity.DEBUG,
    "info": Severity.INFO,
    "warning": Severity.WARNING,
    "error": Severity.ERROR,
    "fatal": Severity.FATAL,
    "unknown": Severity.UNKNOWN,
}


class Logger:
    """Base renderer logger with a severity threshold."""

    def __init__(self, level: Severity = Severity.INFO):
        self.level = level

    def log(self, severity: Severity, message: str, prog_name: Optional[str] = None):
        if severity < self.level:
            return
        self.do_log(severity, prog_name, str(message))

    def do_log(self, severity: Severity, prog_name: Optional[str], message: str):
        raise NotImplementedError

    def debug(self, message, prog_name=None):
        self.log(Severity.DEBUG, message, prog_name)

    def info(self, message, prog_name=None):
        self.log(Severity.INFO, message, prog_name)

    def warning(self, message, prog_name=None):
        self.log(Severity.WARNING, message, prog_name)

    def error(self, message, prog_name=None):
        self.log(Severity.ERROR, message, prog_name)

    def fatal(self, message, prog_name=None):
        self.log(Severity.FATAL, message, prog_name)


class StderrLogger(Logger):
    def do_log(self, severity, prog_name, message):
        sys.stderr.write(f"[{severity.name}] {prog_name or 'Rabbit'}: {message}\n")


class HostLogger(Logger):
    """Forward renderer messages to the host's ``logging`` tree."""

    LOG_METHOD = {
        Severity.DEBUG: logging.DEBUG,
        Severity.INFO: logging.INFO,
        Severity.WARNING: logging.WARNING,
        Severity.ERROR: logging.ERROR,
        Severity.FATAL: logging.ERROR,
        Severity.UNKNOWN: logging.ERROR,
    }

    def __init__(self, level: Severity = Severity.INFO, logger_name: str = "rabbit_convertor.rabbit"):
        super().__init__(level)
        self._logger = logging.getLogger(logger_name)

    def do_log(self, severity, prog_name, message):
        method = self.LOG_METHOD[severity]
        topic = f"{prog_name or 'Rabbit'}:"
        # one record per line; some renderer messages span several lines
        for line in message.splitlines() or [""]:
            self._logger.log(method, "%s %s", topic, line)


LOGGERS: Dict[str, Type[Logger]] = {
    "stderr": StderrLogger,
    "host": HostLogger,
}


def create_logger(name: str, level_name: str) -> Logger:
    """Build the logger registered under *name* at *level_name*."""
    return LOGGERS[name](LEVEL_NAMES[level_name])
