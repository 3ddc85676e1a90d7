"""
Custom exceptions for the tool invocation subsystem.

This module provides the exception hierarchy used across the package.
All exceptions inherit from ToolInvokerException and carry an error code
so that failures can be reported consistently in Tool Results and logs.

Taxonomy:
- ToolValidationError: parameters do not conform to the tool's schema
- TransportError: non-2xx response or network failure (retried, then terminal)
- RateLimitExceededError: rate-limit waits exhausted their own budget
- CancellationError: user-initiated cancellation (terminal, never retried)
- ContractViolationError: a collaborator misbehaved outside its contract
- ToolExecutionError: the generic error stored by the orchestrator

Pattern: Specific exceptions, always captured with 'as e'
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from tool_invoker.models.validation import ValidationError


# =============================================================================
# Error Codes
# =============================================================================


class ErrorCode(str, Enum):
    """
    Machine-readable error codes.

    These codes appear in ``ErrorDetails.code`` of failed Tool Results
    and in structured log events.
    """

    TOOL_INVOKER_ERROR = "TOOL_INVOKER_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    CANCELLED = "CANCELLED"
    CONTRACT_VIOLATION = "CONTRACT_VIOLATION"
    TOOL_EXECUTION_ERROR = "TOOL_EXECUTION_ERROR"
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"


# =============================================================================
# Base Exception
# =============================================================================


class ToolInvokerException(Exception):
    """
    Base exception for all tool invocation errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code from ErrorCode enum.
    """

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.TOOL_INVOKER_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            **kwargs: Additional attributes to set on the exception.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code

        for key, value in kwargs.items():
            setattr(self, key, value)


# =============================================================================
# Validation
# =============================================================================


class ToolValidationError(ToolInvokerException):
    """
    Raised by ``Schema.parse`` when data does not conform.

    Attributes:
        validation_error: The structured ValidationError value.
    """

    def __init__(
        self,
        validation_error: "ValidationError",
        error_code: str = ErrorCode.VALIDATION_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(validation_error.message, error_code, **kwargs)
        self.validation_error = validation_error


# =============================================================================
# Transport
# =============================================================================


class TransportError(ToolInvokerException):
    """
    Exception for failed network exchanges.

    Raised for error statuses other than rate limiting, and for
    network-level failures (connection refused, timeouts).

    Attributes:
        status_code: HTTP status code of the response, if one was received.
        url: The request URL.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        error_code: str = ErrorCode.TRANSPORT_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.status_code = status_code
        self.url = url


class RateLimitExceededError(ToolInvokerException):
    """
    Raised when a call has waited out more rate-limit responses than allowed.

    Attributes:
        waits: Number of rate-limit waits already performed.
    """

    def __init__(
        self,
        message: str,
        waits: int,
        error_code: str = ErrorCode.RATE_LIMIT_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.waits = waits


# =============================================================================
# Cancellation
# =============================================================================


class CancellationError(ToolInvokerException):
    """
    Raised at the point where a cancellation token is observed as cancelled.

    Cancellation is always terminal: it is never retried and never
    recorded as a transport failure.

    Attributes:
        reason: Why the operation was cancelled.
    """

    def __init__(
        self,
        reason: str = "Operation cancelled",
        error_code: str = ErrorCode.CANCELLED,
        **kwargs: Any,
    ) -> None:
        super().__init__(reason, error_code, **kwargs)
        self.reason = reason


# =============================================================================
# Collaborator Contract Violations
# =============================================================================


class ContractViolationError(ToolInvokerException):
    """Raised when a schema or transport collaborator breaks its contract."""

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.CONTRACT_VIOLATION,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)


# =============================================================================
# Tool Execution
# =============================================================================


class ToolExecutionError(ToolInvokerException):
    """
    Generic execution failure stored by the orchestrator.

    Every failure the orchestrator observes (failed Tool Result, raised
    exception) is normalized into this type before it is committed
    to state.

    Attributes:
        tool_name: Name of the tool that failed.
        tool_call_id: ID of the tool call (for correlation).
        details: Structured details from the failed result, if any.
    """

    def __init__(
        self,
        message: str,
        tool_name: str,
        tool_call_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        error_code: str = ErrorCode.TOOL_EXECUTION_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.tool_name = tool_name
        self.tool_call_id = tool_call_id
        self.details = details or {}


class ToolNotFoundError(ToolInvokerException):
    """Raised when a requested tool is not found in the registry."""

    def __init__(
        self,
        tool_name: str,
        error_code: str = ErrorCode.TOOL_NOT_FOUND,
        **kwargs: Any,
    ) -> None:
        super().__init__(f"Tool not found: {tool_name}", error_code, **kwargs)
        self.tool_name = tool_name


class ToolNotImplementedError(ToolInvokerException):
    """Raised by the placeholder execution of a factory-created definition."""

    def __init__(
        self,
        tool_name: str,
        error_code: str = ErrorCode.NOT_IMPLEMENTED,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"Tool execution not implemented: {tool_name}", error_code, **kwargs
        )
        self.tool_name = tool_name
