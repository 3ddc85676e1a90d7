"""
Tool Invoker

Validates caller-supplied parameters against a tool's schema, executes the
tool, and normalizes its outcome. Networked tools get retry with linear
backoff, rate-limit honoring and single-flight cancellation.
"""

from tool_invoker.clients import CancellationToken, HttpxTransport, Transport
from tool_invoker.core import (
    CancellationError,
    ErrorCode,
    RateLimitExceededError,
    ToolExecutionError,
    ToolInvokerException,
    TransportError,
)
from tool_invoker.models import (
    ExecutionContext,
    ExecutionMetadata,
    ErrorDetails,
    ToolFailure,
    ToolResult,
    ToolSuccess,
    ValidationError,
)
from tool_invoker.schema import PydanticSchema, SafeParseResult, Schema
from tool_invoker.tools import (
    APIConfig,
    ExecutionOrchestrator,
    NetworkedToolAdapter,
    RequestSpec,
    ToolDescriptor,
    ToolRegistry,
)

__version__ = "1.0.0"

__all__ = [
    "CancellationToken",
    "HttpxTransport",
    "Transport",
    "CancellationError",
    "ErrorCode",
    "RateLimitExceededError",
    "ToolExecutionError",
    "ToolInvokerException",
    "TransportError",
    "ExecutionContext",
    "ExecutionMetadata",
    "ErrorDetails",
    "ToolFailure",
    "ToolResult",
    "ToolSuccess",
    "ValidationError",
    "PydanticSchema",
    "SafeParseResult",
    "Schema",
    "APIConfig",
    "ExecutionOrchestrator",
    "NetworkedToolAdapter",
    "RequestSpec",
    "ToolDescriptor",
    "ToolRegistry",
]
