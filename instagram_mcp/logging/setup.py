"""Structlog configuration for instagram_mcp."""

import logging
import sys

import structlog

from instagram_mcp.config import InstagramConfig, LogFormat


def configure_logging(config: InstagramConfig | None = None) -> None:
    """
    Configure structlog with appropriate processors and output format.

    Everything is written to stderr; stdout carries the MCP stream.

    Args:
        config: InstagramConfig instance, uses defaults if None
    """
    if config is None:
        config = InstagramConfig()

    # Set up standard library logging
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )

    # Quiet chatty libraries
    for name in ("asyncio", "mcp", "httpx"):
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    # Common processors
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    # Add format-specific processors
    if config.log_format == LogFormat.JSON:
        processors.extend([
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ])
    else:
        processors.extend([
            structlog.dev.set_exc_info,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """
    Get a structlog logger.

    The logger is a lazy proxy: it picks up the configuration in force at
    its first log call, so components may be built before
    configure_logging runs.

    Args:
        name: Optional logger name for context

    Returns:
        Configured structlog BoundLogger
    """
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()
