"""
Tool Descriptor

The immutable description of a tool: name, description, parameter schema,
optional result schema, availability, category, metadata and the execution
function.

The execution function receives the parsed parameters and a fresh
ExecutionContext and returns a Tool Result. It may be a coroutine function
or a plain function; plain functions run in the default executor so they
never block the event loop.

Pattern: Value object (frozen pydantic model)
Pattern: Async-first with sync handler support
"""

import asyncio
import inspect
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from tool_invoker.core.exceptions import ContractViolationError, ToolNotImplementedError
from tool_invoker.models.domain import (
    Capability,
    ExecutionContext,
    ToolCategory,
    ToolFailure,
    ToolResult,
    ToolSuccess,
    capabilities_for,
)
from tool_invoker.schema.contracts import Schema


class ToolDescriptor(BaseModel):
    """
    Immutable record describing one tool.

    Attributes:
        name: Unique tool identifier within a registry.
        description: Human-readable description of what the tool does.
        parameters: Schema validating the tool's parameters.
        return_type: Optional schema of the result (documentation only).
        is_available: Whether the tool is currently offered to callers.
        category: Tool kind, used for capability lookup.
        metadata: Free-form additional metadata.
        execute: ``(params, context) -> ToolResult`` (sync or async).

    Example:
        >>> async def run(params, context):
        ...     return ToolSuccess(data=params["query"].upper())
        >>> tool = ToolDescriptor(
        ...     name="shout",
        ...     description="Upper-case the query",
        ...     parameters=SimpleSchema(),
        ...     execute=run,
        ... )
    """

    name: str = Field(..., min_length=1, description="Unique tool identifier")
    description: str = Field(..., description="Tool description")
    parameters: Schema = Field(..., description="Parameter schema")
    return_type: Optional[Schema] = Field(default=None, description="Result schema")
    is_available: bool = Field(default=True, description="Availability flag")
    category: ToolCategory = Field(default=ToolCategory.GENERIC)
    metadata: dict[str, Any] = Field(default_factory=dict)
    execute: Callable[..., Any] = Field(..., description="Tool execution callable")

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def capabilities(self) -> frozenset[Capability]:
        """Capabilities implied by the tool's category."""
        return capabilities_for(self.category)

    def has_capability(self, capability: Capability) -> bool:
        return capability in self.capabilities

    async def run(self, params: Any, context: ExecutionContext) -> ToolResult:
        """
        Invoke the execution function and check its return value.

        Raises:
            ContractViolationError: If the function returns something other
                than a ToolSuccess or ToolFailure.
        """
        if inspect.iscoroutinefunction(self.execute):
            outcome = await self.execute(params, context)
        else:
            loop = asyncio.get_running_loop()
            outcome = await loop.run_in_executor(None, self.execute, params, context)
            if inspect.isawaitable(outcome):
                outcome = await outcome

        if not isinstance(outcome, (ToolSuccess, ToolFailure)):
            raise ContractViolationError(
                f"Tool {self.name} returned {type(outcome).__name__}, expected a ToolResult"
            )
        return outcome


# =============================================================================
# Tool Factory
# =============================================================================


def create_tool_definition(
    name: str,
    schema: Schema,
    description: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
    category: ToolCategory = ToolCategory.GENERIC,
) -> ToolDescriptor:
    """
    Create a descriptor without an implementation.

    The placeholder execution raises ToolNotImplementedError; use
    ``tool.model_copy(update={"execute": fn})`` to attach one.

    Args:
        name: Tool name.
        schema: Parameter schema.
        description: Description (default: "Tool: <name>").
        metadata: Additional metadata.
        category: Tool kind.
    """

    async def not_implemented(params: Any, context: ExecutionContext) -> ToolResult:
        raise ToolNotImplementedError(name)

    return ToolDescriptor(
        name=name,
        description=description or f"Tool: {name}",
        parameters=schema,
        metadata=metadata or {},
        category=category,
        execute=not_implemented,
    )
