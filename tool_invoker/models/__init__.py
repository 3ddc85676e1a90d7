"""
Models Package

Domain models for tool execution and validation value objects.
"""

from tool_invoker.models.domain import (
    CATEGORY_CAPABILITIES,
    Capability,
    ErrorDetails,
    ExecutionContext,
    ExecutionMetadata,
    ToolCategory,
    ToolFailure,
    ToolResult,
    ToolSuccess,
    capabilities_for,
    new_tool_call_id,
    tool_result_adapter,
)
from tool_invoker.models.validation import (
    GENERAL_ERROR_KEY,
    FieldIssue,
    ValidationError,
)

__all__ = [
    "CATEGORY_CAPABILITIES",
    "Capability",
    "ErrorDetails",
    "ExecutionContext",
    "ExecutionMetadata",
    "ToolCategory",
    "ToolFailure",
    "ToolResult",
    "ToolSuccess",
    "capabilities_for",
    "new_tool_call_id",
    "tool_result_adapter",
    "GENERAL_ERROR_KEY",
    "FieldIssue",
    "ValidationError",
]
