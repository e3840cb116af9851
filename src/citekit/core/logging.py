"""Logging configuration and helpers for logging model output safely."""

import json
import logging
import os
import re
import sys
from typing import Any, TextIO

from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger(__name__)

# ESC [ ... letter, ESC ] ... BEL/ST, ESC ( x
ANSI_ESCAPE_PATTERN = re.compile(
    r"\x1b(?:\[[0-9;?]*[a-zA-Z]|\][^\x07\x1b]*(?:\x07|\x1b\\)|[()][0-9A-Za-z])"
)

SANITIZE_MAX_LENGTH = 1000
TRUNCATION_MARKER = "... [TRUNCATED]"


# Attributes every LogRecord has; anything else arrived through `extra=`
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}

_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Handler added by the last setup_logging call
_installed_handler: logging.Handler | None = None


class JsonFormatter(logging.Formatter):
    """One JSON object per record; ``extra=`` fields go at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name, value in vars(record).items():
            if name not in _RECORD_ATTRIBUTES and name not in payload:
                payload[name] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _console_handler(log_format: str, stream: TextIO) -> logging.Handler:
    if log_format.lower() == "json":
        handler: logging.Handler = logging.StreamHandler(stream)
        handler.setFormatter(JsonFormatter(datefmt="%Y-%m-%dT%H:%M:%S"))
        return handler
    if stream.isatty() and os.environ.get("TERM"):
        # markup off: messages carry model text with square brackets
        return RichHandler(console=Console(file=stream), show_path=False, markup=False)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt=_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "text",
    stream: TextIO | None = None,
) -> logging.Handler:
    """Send citekit's log records to the console.

    Only the ``citekit`` logger is configured: handlers an application
    installed elsewhere are left alone, and a repeated call replaces the
    handler added by the previous one. Records still propagate to the
    root logger.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        log_format: "text" (rich console on a terminal) or "json"
        stream: Output stream, stderr by default

    Returns:
        The installed handler
    """
    global _installed_handler

    level = getattr(logging, log_level.upper())
    package_logger = logging.getLogger("citekit")
    if _installed_handler is not None:
        package_logger.removeHandler(_installed_handler)

    handler = _console_handler(log_format, stream or sys.stderr)
    handler.setLevel(level)
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    _installed_handler = handler

    logger.debug(f"LOGGING_CONFIGURED level={log_level} format={log_format}")
    return handler


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences."""
    return ANSI_ESCAPE_PATTERN.sub("", text)


def sanitize_for_log(value: Any, max_length: int = SANITIZE_MAX_LENGTH) -> str:
    """Make untrusted text safe to embed in a single log line.

    Model output can contain newlines and terminal escape codes that would
    forge extra log entries. Newlines and tabs are rendered as literal
    ``\\n`` / ``\\t``, ANSI sequences are removed and the result is capped
    at ``max_length`` characters.

    Args:
        value: String or JSON-serializable value
        max_length: Maximum output length before truncation

    Returns:
        Single-line, escape-free string
    """
    if isinstance(value, str):
        text = value
    else:
        try:
            text = json.dumps(value, default=str)
        except (TypeError, ValueError):
            text = str(value)

    text = text.replace("\r\n", "\\n").replace("\n", "\\n").replace("\t", "\\t")
    text = strip_ansi(text)

    if len(text) > max_length:
        return text[:max_length] + TRUNCATION_MARKER
    return text
