"""
Module: logger.py
Description: Structured logging configuration for discord-embeds.

Configures structlog for key=value events rendered as JSON (or as
human-readable console lines) on stderr. Output is filtered at the level
from settings so a library consumer only sees warnings by default.

Key Components:
- Timestamp and log level processors
- configure_logging() for re-configuring at runtime
- get_logger() helper function

Dependencies: structlog, logging, datetime
"""

import logging
import sys
from datetime import datetime, timezone

import structlog
from structlog.typing import FilteringBoundLogger

from discord_embeds.config.settings import settings


def _add_timestamp(logger, method_name, event_dict):
    """
    Add ISO 8601 timestamp to log entries.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with timestamp
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    """Add the upper-cased log level to the event dictionary."""
    event_dict["level"] = method_name.upper()
    return event_dict


def configure_logging(level: str = settings.log_level, log_format: str = settings.log_format) -> None:
    """
    Configure structlog for the whole package.

    Called once at import with the values from settings. Applications that
    want a different level or renderer can call it again.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for machine-readable output, "console" for humans
    """
    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            _add_timestamp,
            _add_log_level,
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        # Drop events below the configured level before any processing
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        cache_logger_on_first_use=True,
    )


configure_logging()


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.warning("Webhook rate limited", remaining=0, reset_after=1.5)
        {"remaining": 0, "reset_after": 1.5, "event": "Webhook rate limited", "timestamp": "...", "level": "WARNING"}
    """
    return structlog.get_logger(name)
