"""
Uplinx Logging — colorized or structured logging for the CLI.

The SDK itself only emits records through ``logging.getLogger(__name__)``;
applications decide where they go. ``setup_logging()`` is what the ``uplinx``
command uses.

Features:
- Color formatter for dev mode (auto-detects TTY)
- JSON structured formatter for log aggregation (UPLINX_LOG_FORMAT=json)
- Suppresses noisy transport loggers (httpx, httpcore)
- Configurable via UPLINX_LOG_LEVEL, UPLINX_LOG_COLOR, UPLINX_LOG_FORMAT

Structured log extra fields (pass via logger.info(..., extra={...})):
    method, path, status, code, duration_ms, chat_session_id
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone


# ANSI escapes keyed by level name.
LEVEL_STYLES = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[1;31m",
}
DIM = "\033[2m"
RESET = "\033[0m"

TEXT_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


class ColorFormatter(logging.Formatter):
    """Text lines for a terminal; tints the level and dims the logger name."""

    def __init__(self, use_color: bool = True):
        super().__init__(fmt=TEXT_FORMAT, datefmt="%H:%M:%S")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().format(record)

        plain = record.levelname, record.name
        style = LEVEL_STYLES.get(record.levelname, "")
        record.levelname = f"{style}{record.levelname}{RESET}"
        record.name = f"{DIM}{record.name}{RESET}"
        try:
            return super().format(record)
        finally:
            # later handlers must see the untinted record
            record.levelname, record.name = plain


# Structured log fields forwarded from logger.info(..., extra={...})
_STRUCTURED_FIELDS = (
    "method",
    "path",
    "status",
    "code",
    "duration_ms",
    "chat_session_id",
)


class StructuredFormatter(logging.Formatter):
    """JSON log formatter.

    Each log line is a single JSON object. Extra fields passed via
    logger.debug("msg", extra={"path": "/engines", "duration_ms": 42})
    are included at the top level for easy querying.

    Enable with: UPLINX_LOG_FORMAT=json
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        for key in _STRUCTURED_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _should_use_color() -> bool:
    """Auto-detect color support."""
    env_val = os.getenv("UPLINX_LOG_COLOR", "auto").lower()
    if env_val == "true":
        return True
    if env_val == "false":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


def setup_logging() -> None:
    """Configure logging for a command-line session.

    Env vars:
        UPLINX_LOG_LEVEL  — DEBUG / INFO / WARNING / ERROR (default: INFO)
        UPLINX_LOG_COLOR  — true / false / auto (default: auto, TTY detection)
        UPLINX_LOG_FORMAT — text / json (default: text)
    """
    level_name = os.getenv("UPLINX_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    log_format = os.getenv("UPLINX_LOG_FORMAT", "text").lower()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    if log_format == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = ColorFormatter(use_color=_should_use_color())

    # stderr keeps streamed tokens on stdout clean
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # These flood the console with connection details
    for noisy_logger in [
        "httpx",
        "httpcore",
        "httpcore.http11",
        "httpcore.connection",
    ]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    logger = logging.getLogger("uplinx")
    logger.debug("Logging configured (level=%s, format=%s)", level_name, log_format)
