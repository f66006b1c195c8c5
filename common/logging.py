"""
Structured logging configuration using structlog.

Configures JSON output with timestamps and log levels.
All logging uses event-style: logger.info("event_name", key=value)

The gateway binds a per-request trace_id with structlog.contextvars;
merge_contextvars copies it onto every event logged while the request runs.
"""

import logging
import sys
from typing import Optional

import structlog


def configure_logging(log_level: str = "INFO") -> None:
    """
    Configure structlog with JSON output, timestamps, and log levels.
    
    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
    
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,  # trace_id bound by the gateway
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Get a configured structlog logger.
    
    Args:
        name: Logger name (usually __name__)
        
    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)
