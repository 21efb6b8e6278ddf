from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Console logging for processxls.

One stdout handler hangs off the ``processxls`` package logger; every module
logs through ``logging.getLogger(__name__)`` and inherits it. Lines read
``<LABEL> <message>`` where LABEL is one of DEBUG, INFO, WARN, ERROR,
SUMMARY. SUMMARY is its own level so the final run line survives when the
logger is quietened to warnings.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "set_debug",
    "log_summary",
    "reset_logging",
]

LOGGER_NAME = "processxls"
SUMMARY_LEVEL = 25  # INFO < SUMMARY < WARNING

_LABELS: dict[int, str] = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    SUMMARY_LEVEL: "SUMMARY",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
}

_configured: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """``INFO message`` style lines; unknown levels fall back to their name."""

    def format(self, record: logging.LogRecord) -> str:
        label = _LABELS.get(record.levelno, record.levelname)
        text = f"{label} {record.getMessage()}"
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


def setup_logging(stream: TextIO | None = None) -> logging.Logger:
    """Attach the labeled stdout handler to the package logger (once).

    Later calls return the same logger untouched; use ``reset_logging`` to
    configure again (tests swap stdout between cases).
    """
    global _configured
    if _configured is not None:
        return _configured

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(LabeledFormatter())
    handler.setLevel(logging.INFO)

    pkg_logger = logging.getLogger(LOGGER_NAME)
    pkg_logger.handlers = [handler]
    pkg_logger.setLevel(logging.INFO)
    pkg_logger.propagate = False  # the root logger may carry its own handlers

    _configured = pkg_logger
    return pkg_logger


def get_logger() -> logging.Logger:
    return _configured or setup_logging()


def set_debug() -> None:
    """Lower the package logger and its handlers to DEBUG."""
    pkg_logger = get_logger()
    pkg_logger.setLevel(logging.DEBUG)
    for h in pkg_logger.handlers:
        h.setLevel(logging.DEBUG)
    pkg_logger.debug("debug logging on")


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Forget the configured logger so the next setup starts fresh."""
    global _configured
    _configured = None
