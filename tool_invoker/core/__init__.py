"""
Core module for the tool invoker.

This module contains configuration and the exception hierarchy.
"""

from tool_invoker.core.config import Settings, get_settings
from tool_invoker.core.exceptions import (
    CancellationError,
    ContractViolationError,
    ErrorCode,
    RateLimitExceededError,
    ToolExecutionError,
    ToolInvokerException,
    ToolNotFoundError,
    ToolNotImplementedError,
    ToolValidationError,
    TransportError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "ErrorCode",
    "ToolInvokerException",
    "ToolValidationError",
    "TransportError",
    "RateLimitExceededError",
    "CancellationError",
    "ContractViolationError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolNotImplementedError",
]
