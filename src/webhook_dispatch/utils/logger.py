"""
Module: logger.py
Description: Structured logging configuration for webhook dispatch.

Configures structlog for JSON output so delivery attempts, retries and
callback failures can be searched by url and attempt in CloudWatch Logs.

Key Components:
- JSON output for CloudWatch compatibility
- Timestamp and log level processors
- configure_logging() for level filtering
- get_logger() helper function

Dependencies: structlog, logging, datetime
Author: Webhook Dispatch Team
"""

import logging
import structlog
from datetime import datetime, timezone

from webhook_dispatch.config.settings import settings


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
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    """Add the upper-cased log level to the event dictionary."""
    event_dict["level"] = method_name.upper()
    return event_dict


def configure_logging(level: str = "INFO") -> None:
    """
    Configure structlog for JSON output at the given level.

    Events below the level are dropped by the filtering bound logger
    before any processor runs.

    Args:
        level: Standard logging level name (DEBUG, INFO, WARNING, ...)
    """
    structlog.configure(
        processors=[
            _add_timestamp,
            _add_log_level,
            structlog.processors.format_exc_info,
            # Render as JSON for CloudWatch compatibility
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.WriteLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Webhook delivered", url="https://example.com/hook", attempt=1)
        {"event": "Webhook delivered", "url": "https://example.com/hook", "attempt": 1, "timestamp": "...", "level": "INFO"}
    """
    return structlog.get_logger(name)


configure_logging(settings.log_level)
