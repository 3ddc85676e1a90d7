"""
Structured Logging Module

This module provides structured JSON logging with tool call ID support.
Every log event emitted while a tool call is in progress carries the
``tool_call_id`` of that call, so retries, rate-limit waits and the final
outcome of one invocation can be correlated.

Pattern: Structured logging for observability
Pattern: Singleton configuration (configure once at startup)
"""

import contextvars
import logging
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator, Optional, TextIO

import structlog
from structlog.types import EventDict, Processor


_configured: bool = False


# =============================================================================
# Tool Call ID Context
# =============================================================================

_tool_call_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "tool_call_id", default=None
)


def set_tool_call_id(tool_call_id: str) -> None:
    """Set the tool call ID for the current context."""
    _tool_call_id_var.set(tool_call_id)


def get_tool_call_id() -> Optional[str]:
    """
    Get the current tool call ID.

    Returns:
        Tool call ID if set, None otherwise
    """
    return _tool_call_id_var.get()


def clear_tool_call_id() -> None:
    """Clear the tool call ID for the current context."""
    _tool_call_id_var.set(None)


@contextmanager
def tool_call_context(tool_call_id: str) -> Generator[None, None, None]:
    """
    Context manager binding a tool call ID to all log events inside it.

    Args:
        tool_call_id: Unique identifier of the invocation

    Example:
        >>> with tool_call_context("call-12345"):
        ...     logger.info("executing tool")
    """
    token = _tool_call_id_var.set(tool_call_id)
    try:
        yield
    finally:
        _tool_call_id_var.reset(token)


# =============================================================================
# Custom Processors
# =============================================================================


def add_tool_call_id(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add the tool call ID to the log event if one is bound."""
    tool_call_id = get_tool_call_id()
    if tool_call_id is not None:
        event_dict.setdefault("tool_call_id", tool_call_id)
    return event_dict


def add_timestamp(
    logger: logging.Logger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add ISO 8601 timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def rename_level(
    logger: logging.Logger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Rename log_level to level for cleaner output."""
    if "log_level" in event_dict:
        event_dict["level"] = event_dict.pop("log_level")
    return event_dict


# =============================================================================
# Singleton Configuration
# =============================================================================


def configure_logging(
    level: str = "INFO",
    stream: Optional[TextIO] = None,
    force: bool = False,
) -> None:
    """
    Configure structlog for the application.

    Subsequent calls are no-ops unless force=True.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        stream: Output stream (default: sys.stdout)
        force: Force reconfiguration (for testing only)
    """
    global _configured

    if _configured and not force:
        return

    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        add_timestamp,
        add_tool_call_id,
        rename_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_level_to_int(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=False,
    )

    _configured = True


def reset_logging() -> None:
    """
    Reset logging configuration state.

    WARNING: This should only be used in tests.
    """
    global _configured
    _configured = False


# =============================================================================
# Logger Factory
# =============================================================================


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a configured structured logger.

    Auto-configures from Settings.log_level on the first call if
    configure_logging() has not run yet.

    Args:
        name: Logger name (typically module name)

    Returns:
        structlog BoundLogger with the logger name bound

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("tool registered", tool="search")
    """
    if not _configured:
        from tool_invoker.core.config import get_settings

        configure_logging(level=get_settings().log_level)

    return structlog.get_logger().bind(logger=name)


def _level_to_int(level: str) -> int:
    """Convert level string to logging int."""
    levels = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return levels.get(level.upper(), logging.INFO)
