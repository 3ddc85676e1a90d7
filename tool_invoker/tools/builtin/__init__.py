"""
Built-in Tools Package

Ready-made networked tools built on NetworkedToolAdapter.
"""

from tool_invoker.tools.builtin.search import (
    SearchParams,
    SearchResultItem,
    create_search_tool,
)

__all__ = [
    "SearchParams",
    "SearchResultItem",
    "create_search_tool",
]
