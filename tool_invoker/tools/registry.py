"""
Tool Registry

This module implements the registry through which callers discover tools
by name. Descriptors are registered once at setup and looked up by name
when an orchestrator is created for them.

Pattern: Service Registry (tool inventory)
Pattern: Singleton for global registry access
"""

from __future__ import annotations

from typing import Optional

from tool_invoker.core.exceptions import ToolNotFoundError
from tool_invoker.models.domain import Capability, ToolCategory
from tool_invoker.observability.logging import get_logger
from tool_invoker.tools.descriptor import ToolDescriptor

logger = get_logger(__name__)


class ToolRegistry:
    """
    Registry for managing available tools.

    Names are unique: registering a descriptor under an existing name
    replaces the previous one.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register(search_tool)
        >>> tool = registry.get("search")
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._tools: dict[str, ToolDescriptor] = {}

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def register(self, tool: ToolDescriptor) -> None:
        """
        Register a tool under its name.

        Args:
            tool: The ToolDescriptor to register.
        """
        if tool.name in self._tools:
            logger.info("tool replaced", tool=tool.name)
        self._tools[tool.name] = tool
        logger.debug("tool registered", tool=tool.name, category=tool.category.value)

    def get(self, name: str) -> ToolDescriptor:
        """
        Get a registered tool by name.

        Raises:
            ToolNotFoundError: If the tool is not registered.
        """
        if name not in self._tools:
            raise ToolNotFoundError(name)
        return self._tools[name]

    def list(self) -> list[ToolDescriptor]:
        """List all registered tools in registration order."""
        return list(self._tools.values())

    def list_available(self) -> list[ToolDescriptor]:
        """List the tools whose availability flag is set."""
        return [tool for tool in self._tools.values() if tool.is_available]

    def by_category(self, category: ToolCategory) -> list[ToolDescriptor]:
        """List the tools of one category."""
        return [tool for tool in self._tools.values() if tool.category == category]

    def with_capability(self, capability: Capability) -> list[ToolDescriptor]:
        """List the tools whose category provides ``capability``."""
        return [tool for tool in self._tools.values() if tool.has_capability(capability)]

    def has(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._tools

    def unregister(self, name: str) -> None:
        """
        Remove a tool from the registry.

        Does not raise an error if the tool doesn't exist.
        """
        self._tools.pop(name, None)
        logger.debug("tool unregistered", tool=name)


# =============================================================================
# Singleton Access
# =============================================================================

_registry: Optional[ToolRegistry] = None


def get_tool_registry() -> ToolRegistry:
    """Get the global tool registry instance."""
    global _registry
    if _registry is None:
        _registry = ToolRegistry()
    return _registry


def reset_tool_registry() -> None:
    """
    Reset the global tool registry.

    Primarily used for testing to ensure a clean state.
    """
    global _registry
    _registry = None
