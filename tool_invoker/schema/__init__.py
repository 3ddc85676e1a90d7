"""
Schema Package

The Schema contract consumed by the orchestrator and the concrete
collaborators that satisfy it.
"""

from tool_invoker.schema.adapters import (
    CallableSchema,
    PydanticSchema,
    SimpleSchema,
    as_schema,
    create_validation_error,
    from_pydantic_error,
    to_field_errors,
)
from tool_invoker.schema.contracts import SafeParseResult, Schema

__all__ = [
    "Schema",
    "SafeParseResult",
    "PydanticSchema",
    "CallableSchema",
    "SimpleSchema",
    "as_schema",
    "create_validation_error",
    "from_pydantic_error",
    "to_field_errors",
]
