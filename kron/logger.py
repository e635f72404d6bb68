"""
This module provides logging for kron.

The scheduler core logs through a ``LoggerAdapter``, a minimal interface with a level check and a log call, so that
applications can route kron's messages anywhere. By default messages go to the standard ``logging`` module, under the
``kron`` logger, with ``TRACE`` registered as an extra level below ``DEBUG``.

For applications without logging set up of their own, ``setup_logging`` configures console and rotating file handlers
from a list of handler configurations.
"""

import logging
import os
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any

from kron.configuration.models import LogConsoleHandlerConfig, LogFileHandlerConfig, LogHandlerConfig

__all__ = [
    "TRACE",
    "KronLogger",
    "LoggerAdapter",
    "LoggerLevel",
    "RobustFileHandler",
    "StdlibLoggerAdapter",
    "setup_logging",
]


TRACE = 5
logging.addLevelName(TRACE, "TRACE")


class LoggerLevel(Enum):
    """
    Levels kron logs at.
    """

    TRACE = TRACE
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR


class LoggerAdapter(ABC):
    """
    Destination for kron's log messages.
    """

    @abstractmethod
    def is_level_enabled(self, level: LoggerLevel) -> bool:
        pass

    @abstractmethod
    def log(self, level: LoggerLevel, message: str) -> None:
        pass


class StdlibLoggerAdapter(LoggerAdapter):
    """
    Log to a logger from the standard ``logging`` module.

    Args:
        logger: Logger to forward to. Defaults to the ``kron`` logger.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("kron")

    def is_level_enabled(self, level: LoggerLevel) -> bool:
        return self._logger.isEnabledFor(level.value)

    def log(self, level: LoggerLevel, message: str) -> None:
        self._logger.log(level.value, message)


class KronLogger:
    """
    The logger used inside kron. Messages take ``%``-style arguments, which are only formatted if the level is
    enabled in the adapter.
    """

    def __init__(self, adapter: LoggerAdapter | None = None) -> None:
        self.adapter = adapter or StdlibLoggerAdapter()

    def _log(self, level: LoggerLevel, message: str, args: tuple[Any, ...]) -> None:
        if self.adapter.is_level_enabled(level):
            self.adapter.log(level, message % args if args else message)

    def trace(self, message: str, *args: Any) -> None:
        self._log(LoggerLevel.TRACE, message, args)

    def debug(self, message: str, *args: Any) -> None:
        self._log(LoggerLevel.DEBUG, message, args)

    def info(self, message: str, *args: Any) -> None:
        self._log(LoggerLevel.INFO, message, args)

    def warn(self, message: str, *args: Any) -> None:
        self._log(LoggerLevel.WARN, message, args)

    def error(self, message: str, *args: Any) -> None:
        self._log(LoggerLevel.ERROR, message, args)


class RobustFileHandler(TimedRotatingFileHandler):
    """
    A TimedRotatingFileHandler that creates missing log directories, and fails early if the directory is not
    writable, so callers can fall back to console logging.
    """

    def __init__(
        self,
        filename: Path,
        create_dirs: bool = True,
        when: str = "h",
        interval: int = 1,
        backupCount: int = 0,
        encoding: str | None = None,
        delay: bool = False,
        utc: bool = False,
    ) -> None:
        self.create_dirs = create_dirs

        if self.create_dirs:
            directory = filename.parent
            directory.mkdir(parents=True, exist_ok=True)
            if not os.access(directory, os.W_OK):
                raise PermissionError(f"Cannot write to directory: {directory}")

        super().__init__(
            filename,
            when=when,
            interval=interval,
            backupCount=backupCount,
            encoding=encoding,
            delay=delay,
            utc=utc,
        )


def _resolve_log_level(level: str) -> int:
    return {"TRACE": TRACE, "DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40, "CRITICAL": 50}[level.upper()]


def setup_logging(handlers: Sequence[LogHandlerConfig], level_override: str | None = None) -> None:
    """
    Configure the root logger with the given handlers, replacing any existing handlers.

    Args:
        handlers: Console and file handlers to install.
        level_override: If set, use this level for every handler instead of the configured ones.
    """
    root = logging.getLogger()
    if level_override:
        root.setLevel(_resolve_log_level(level_override))
    elif handlers:
        root.setLevel(min(_resolve_log_level(h.level.value) for h in handlers))

    fmt = logging.Formatter(
        "%(asctime)s.%(msecs)03d UTC [%(levelname)-8s] %(process)d %(threadName)s - %(message)s",
        "%Y-%m-%d %H:%M:%S",
    )
    # Set logging to UTC
    fmt.converter = time.gmtime

    for handler in list(root.handlers):
        root.removeHandler(handler)

    for handler_config in handlers:
        level_for_handler = _resolve_log_level(level_override or handler_config.level.value)

        match handler_config:
            case LogConsoleHandlerConfig():
                sh = logging.StreamHandler()
                sh.setFormatter(fmt)
                sh.setLevel(level_for_handler)
                root.addHandler(sh)

            case LogFileHandlerConfig() as file_handler:
                try:
                    fh = RobustFileHandler(
                        filename=file_handler.path,
                        when="midnight",
                        utc=True,
                        backupCount=file_handler.retention,
                        create_dirs=True,
                    )
                    fh.setLevel(level_for_handler)
                    fh.setFormatter(fmt)
                    root.addHandler(fh)
                except OSError as e:
                    if not any(type(h) is logging.StreamHandler for h in root.handlers):
                        sh = logging.StreamHandler()
                        sh.setFormatter(fmt)
                        sh.setLevel(level_for_handler)
                        root.addHandler(sh)
                    logging.getLogger("kron").warning(
                        f"Could not create or write to log file {file_handler.path}: {e}. Defaulted to console logging."
                    )
