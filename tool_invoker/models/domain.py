"""
Domain Models

This module contains the domain models of the tool invocation subsystem:
tool categories and their capabilities, the per-invocation execution
context, and the tagged Tool Result outcome.

Pattern: Domain models as value objects
Pattern: Tagged union (discriminated on ``kind``) for Tool Results, so a
result can never carry both a success payload and an error.
"""

import time
import uuid
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from tool_invoker.clients.cancellation import CancellationToken


# =============================================================================
# Tool Categories and Capabilities
# =============================================================================


class ToolCategory(str, Enum):
    """Closed set of tool kinds."""

    GENERIC = "generic"
    API = "api"
    SEARCH = "search"
    INTERACTIVE = "interactive"


class Capability(str, Enum):
    """Behaviours a caller (or renderer) can rely on for a tool kind."""

    NETWORK = "network"
    RETRYABLE = "retryable"
    CANCELLABLE = "cancellable"
    SELECTABLE_RESULTS = "selectable_results"
    USER_INPUT = "user_input"


CATEGORY_CAPABILITIES: dict[ToolCategory, frozenset[Capability]] = {
    ToolCategory.GENERIC: frozenset(),
    ToolCategory.API: frozenset(
        {Capability.NETWORK, Capability.RETRYABLE, Capability.CANCELLABLE}
    ),
    ToolCategory.SEARCH: frozenset(
        {
            Capability.NETWORK,
            Capability.RETRYABLE,
            Capability.CANCELLABLE,
            Capability.SELECTABLE_RESULTS,
        }
    ),
    ToolCategory.INTERACTIVE: frozenset({Capability.USER_INPUT}),
}


def capabilities_for(category: ToolCategory) -> frozenset[Capability]:
    """Look up the capabilities of a tool category."""
    return CATEGORY_CAPABILITIES[ToolCategory(category)]


# =============================================================================
# Execution Context
# =============================================================================


def new_tool_call_id() -> str:
    """Generate a unique tool call identifier."""
    return f"call-{uuid.uuid4().hex}"


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class ExecutionContext(BaseModel):
    """
    Per-invocation context handed to a tool's execution function.

    Created fresh for every execution and never reused.

    Attributes:
        tool_call_id: Unique identifier of this invocation.
        cancellation: Token the execution should observe, if any.
        timeout_ms: Timeout budget; enforcement is up to the transport.
    """

    tool_call_id: str = Field(default_factory=new_tool_call_id, min_length=1)
    cancellation: Optional[CancellationToken] = None
    timeout_ms: Optional[float] = Field(default=None, gt=0)

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def timeout_seconds(self) -> Optional[float]:
        """Timeout budget in seconds, or None."""
        return self.timeout_ms / 1000 if self.timeout_ms is not None else None


# =============================================================================
# Tool Results
# =============================================================================


class ExecutionMetadata(BaseModel):
    """
    Metadata about one execution.

    Attributes:
        duration_ms: Wall time of the execution in milliseconds.
        completed_at: Completion time in epoch milliseconds.
        tool_call_id: Invocation the result belongs to.
    """

    duration_ms: Optional[float] = Field(default=None, ge=0)
    completed_at: Optional[int] = None
    tool_call_id: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="allow")


class ErrorDetails(BaseModel):
    """Structured detail attached to a failed Tool Result."""

    code: Optional[str] = Field(default=None, description="Machine-readable code")
    details: dict[str, Any] = Field(default_factory=dict, description="Technical details")
    suggestions: list[str] = Field(default_factory=list, description="Suggested actions")

    model_config = ConfigDict(frozen=True)


class ToolSuccess(BaseModel):
    """Successful Tool Result."""

    kind: Literal["success"] = "success"
    data: Any = None
    metadata: ExecutionMetadata = Field(default_factory=ExecutionMetadata)

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def is_error(self) -> bool:
        return False


class ToolFailure(BaseModel):
    """Failed Tool Result."""

    kind: Literal["failure"] = "failure"
    error: str = Field(..., min_length=1, description="Error message")
    error_details: Optional[ErrorDetails] = None
    metadata: ExecutionMetadata = Field(default_factory=ExecutionMetadata)

    model_config = ConfigDict(frozen=True)

    @property
    def is_error(self) -> bool:
        return True


ToolResult = Annotated[Union[ToolSuccess, ToolFailure], Field(discriminator="kind")]
"""Outcome of one tool execution: exactly one of ToolSuccess / ToolFailure."""

tool_result_adapter: TypeAdapter[ToolResult] = TypeAdapter(ToolResult)
