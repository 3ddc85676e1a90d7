"""
Schema Contract

The parameter-validation algorithm is supplied by an external schema
collaborator. Any object exposing ``parse`` and ``safe_parse`` with the
semantics below can describe a tool's parameters:

- parse(data) returns the typed value or raises ToolValidationError
- safe_parse(data) never raises for non-conforming data; it reports the
  outcome as a SafeParseResult

The orchestrator calls safe_parse first to collect field errors, then
parse for the authoritative value passed to execution.
"""

from typing import Any, Optional, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ConfigDict, model_validator

from tool_invoker.models.validation import ValidationError

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class SafeParseResult(BaseModel):
    """
    Outcome of Schema.safe_parse.

    Attributes:
        success: Whether the data conforms.
        data: The typed value when successful.
        error: The structured failure when not successful.
    """

    success: bool
    data: Any = None
    error: Optional[ValidationError] = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @model_validator(mode="after")
    def check_variant(self) -> "SafeParseResult":
        """A failed parse must carry an error, a successful one must not."""
        if not self.success and self.error is None:
            raise ValueError("Unsuccessful SafeParseResult requires an error")
        if self.success and self.error is not None:
            raise ValueError("Successful SafeParseResult cannot carry an error")
        return self

    @classmethod
    def ok(cls, data: Any) -> "SafeParseResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ValidationError) -> "SafeParseResult":
        return cls(success=False, error=error)


@runtime_checkable
class Schema(Protocol[T_co]):
    """Structural type for schema collaborators."""

    def parse(self, data: Any) -> T_co:
        """Validate and transform ``data``; raise ToolValidationError if invalid."""
        ...

    def safe_parse(self, data: Any) -> SafeParseResult:
        """Validate ``data`` and report the outcome without raising."""
        ...
