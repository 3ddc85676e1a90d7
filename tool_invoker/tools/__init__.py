"""
Tools Package

Tool descriptors, the registry, the execution orchestrator and the
networked tool adapter.
"""

from tool_invoker.tools.descriptor import ToolDescriptor, create_tool_definition
from tool_invoker.tools.networked import (
    APIConfig,
    NetworkedToolAdapter,
    RequestSpec,
    build_url,
    parse_retry_after,
)
from tool_invoker.tools.orchestrator import (
    ExecutionOrchestrator,
    ExecutionState,
    ExecutionStatus,
)
from tool_invoker.tools.registry import (
    ToolRegistry,
    get_tool_registry,
    reset_tool_registry,
)

__all__ = [
    "ToolDescriptor",
    "create_tool_definition",
    "APIConfig",
    "NetworkedToolAdapter",
    "RequestSpec",
    "build_url",
    "parse_retry_after",
    "ExecutionOrchestrator",
    "ExecutionState",
    "ExecutionStatus",
    "ToolRegistry",
    "get_tool_registry",
    "reset_tool_registry",
]
