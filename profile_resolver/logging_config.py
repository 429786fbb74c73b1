"""
Centralized logging configuration for profile-resolver.

Provides one logging format for the library and its command line tool:
Format: 2026-01-06T14:05:52Z [source] LEVEL message

Environment Variables:
    LOG_LEVEL: Set to "DEBUG", "TRACE", or "INFO" (default)
               - INFO: Normal operation logs
               - DEBUG: Per-call lookup summaries and cache activity
               - TRACE: Very verbose low-level diagnostics (request payloads, etc.)

Usage:
    from profile_resolver.logging_config import configure_logging, get_logger

    configure_logging(source="cli")
    logger = get_logger(__name__)
    logger.info("Resolving names")
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime

# Custom TRACE level for very verbose diagnostics
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


class ISO8601Formatter(logging.Formatter):
    """Custom formatter producing ISO8601 timestamps in UTC.

    Output format: 2026-01-06T14:05:52Z [source] LEVEL message
    """

    def __init__(self, source: str = "resolver"):
        """Initialize formatter with a source identifier.

        Args:
            source: Identifier shown in brackets (e.g., "cli", "resolver")
        """
        self.source = source
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record with ISO8601 UTC timestamp."""
        timestamp = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        message = record.getMessage()

        if record.exc_info:
            exception_text = self.formatException(record.exc_info)
            message = f"{message}\n{exception_text}"

        return f"{timestamp} [{self.source}] {record.levelname} {message}"


def resolve_level(level_name: str | None = None, debug: bool | None = None) -> int:
    """Map a level name (or LOG_LEVEL) to a logging level number."""
    name = (level_name or os.getenv("LOG_LEVEL", "")).upper()
    if name == "TRACE":
        return TRACE
    if name == "DEBUG" or debug:
        return logging.DEBUG
    if name in ("WARNING", "ERROR", "CRITICAL"):
        return logging.getLevelName(name)  # type: ignore[no-any-return]
    return logging.INFO


def configure_logging(
    source: str = "resolver",
    level: int | None = None,
    debug: bool | None = None,
) -> logging.Logger:
    """Configure logging for a process using the resolver.

    Args:
        source: Source identifier for log messages (e.g., "cli")
        level: Logging level (defaults to INFO, or DEBUG/TRACE from LOG_LEVEL env var)
        debug: Enable debug mode (overrides level to DEBUG)

    Returns:
        Configured root logger
    """
    if level is None:
        level = resolve_level(debug=debug)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers to avoid duplicates
    root_logger.handlers.clear()

    # Logs go to stderr so command output on stdout stays parseable
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(ISO8601Formatter(source=source))
    root_logger.addHandler(handler)

    # Suppress noisy third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given module name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
