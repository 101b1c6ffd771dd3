"""Logging setup and the structured logger used across payctl."""

import logging
import sys
from enum import Enum
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

# Libraries that log every request at INFO
CHATTY_LOGGERS = ("httpx", "httpcore", "asyncio")


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def for_cli(cls, verbose: int, quiet: bool, default: "LogLevel") -> "LogLevel":
        """Resolve ``-v``/``-vv``/``-q`` against the configured level."""
        if verbose >= 2:
            return cls.DEBUG
        if verbose == 1:
            return cls.INFO
        if quiet:
            return cls.ERROR
        return default


def _build_handler(rich_output: bool) -> logging.Handler:
    if rich_output:
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        return handler

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-7s %(name)s: %(message)s", datefmt="%H:%M:%S")
    )
    return handler


def setup_logging(
    level: LogLevel = LogLevel.WARNING,
    rich_output: bool = True,
) -> logging.Logger:
    """Route log records to stderr.

    Logs go to stderr so that ``-o json`` output on stdout stays parseable.

    Args:
        level: The logging level
        rich_output: Whether to use Rich for formatted output

    Returns:
        The ``payctl`` package logger
    """
    log_level = logging.getLevelName(level.value.upper())

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(_build_handler(rich_output))
    root_logger.setLevel(log_level)

    package_logger = logging.getLogger("payctl")
    package_logger.setLevel(log_level)

    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    return package_logger


def get_logger(name: str) -> "StructuredLogger":
    """Get a logger for a module, usually called with ``__name__``."""
    return StructuredLogger(name)


def _render_value(value: Any) -> str:
    text = str(value)
    return repr(text) if " " in text else text


class StructuredLogger:
    """Logger that appends ``key=value`` fields to each message.

    Fields passed to :meth:`bind` are carried by the returned logger, fields
    passed to a log call apply to that record only.
    """

    def __init__(self, name: str, fields: dict[str, Any] | None = None):
        if not name.startswith("payctl"):
            name = f"payctl.{name}"
        self._logger = logging.getLogger(name)
        self._fields = dict(fields or {})

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **fields: Any) -> "StructuredLogger":
        return StructuredLogger(self.name, {**self._fields, **fields})

    def _log(self, level: int, message: str, fields: dict[str, Any], exc_info: bool = False) -> None:
        if not self._logger.isEnabledFor(level):
            return
        merged = {**self._fields, **fields}
        if merged:
            rendered = " ".join(f"{key}={_render_value(value)}" for key, value in merged.items())
            message = f"{message} [{rendered}]"
        self._logger.log(level, message, exc_info=exc_info)

    def debug(self, message: str, /, **fields: Any) -> None:
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, /, **fields: Any) -> None:
        self._log(logging.INFO, message, fields)

    def warning(self, message: str, /, **fields: Any) -> None:
        self._log(logging.WARNING, message, fields)

    def error(self, message: str, /, **fields: Any) -> None:
        self._log(logging.ERROR, message, fields)

    def exception(self, message: str, /, **fields: Any) -> None:
        """Log at ERROR with the active exception's traceback."""
        self._log(logging.ERROR, message, fields, exc_info=True)
