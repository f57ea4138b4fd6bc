from __future__ import annotations

import logging
import sys

"""Logging initialization with labeled prefixes.

Every line goes to stdout as `<LABEL> <message>` with one of the labels
INFO|WARN|ERROR|SUMMARY (DEBUG with --debug). Modules log through
`logging.getLogger(__name__)`; because the application logger is the package
logger `seo_dedupe`, those module loggers inherit its handler.

With verbose disabled, informational lines are filtered out but the SUMMARY
line and anything at WARN or above still reach the console.
"""

__all__ = [
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
    "set_verbose",
]

APP_LOGGER_NAME = "seo_dedupe"

# Custom SUMMARY level (between INFO=20 and WARNING=30)
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Formatter that prefixes every message with its level label."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        return f"{level_label} {record.getMessage()}"


class QuietFilter(logging.Filter):
    """Drop informational records; keep SUMMARY and WARN+."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno == SUMMARY_LEVEL or record.levelno >= logging.WARNING


def setup_logging(verbose: bool = True, debug: bool = False) -> logging.Logger:
    """Setup the application logger (idempotent).

    A second call reuses the existing logger but re-applies the verbosity,
    so the CLI can configure logging before the config file is read.

    Args:
        verbose: Emit INFO lines (False keeps only SUMMARY / WARN / ERROR)
        debug: Lower the threshold to DEBUG

    Returns:
        Configured logger instance for the application
    """
    global _logger

    if _logger is None:
        logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

        logger = logging.getLogger(APP_LOGGER_NAME)

        # Clear any existing handlers to avoid duplication
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(LabeledFormatter())
        logger.addHandler(handler)

        # Prevent propagation to root logger to avoid duplicate output
        logger.propagate = False
        _logger = logger

    level = logging.DEBUG if debug else logging.INFO
    _logger.setLevel(level)
    for handler in _logger.handlers:
        handler.setLevel(level)
    set_verbose(verbose)
    return _logger


def set_verbose(verbose: bool) -> None:
    """Toggle informational output without touching WARN/ERROR/SUMMARY."""
    logger = get_logger()
    for handler in logger.handlers:
        for f in [f for f in handler.filters if isinstance(f, QuietFilter)]:
            handler.removeFilter(f)
        if not verbose:
            handler.addFilter(QuietFilter())


def get_logger() -> logging.Logger:
    """Get the configured application logger."""
    if _logger is None:
        return setup_logging()
    return _logger


def log_summary(message: str) -> None:
    """Log a message at SUMMARY level."""
    logger = get_logger()
    logger.log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Reset the global logger state. Mainly for testing purposes."""
    global _logger
    if _logger is not None:
        for handler in _logger.handlers[:]:
            _logger.removeHandler(handler)
        _logger.propagate = True
        _logger.setLevel(logging.NOTSET)
    _logger = None
