"""
Validation Models

Value objects describing why a parameter draft was rejected by a schema.

A ValidationError always holds at least one FieldIssue. Its ``message``
is a human-readable summary derived from the issue list, so callers that
only want a single line of text never need to walk the issues.

Note: Named ValidationError to match the schema contract. Modules that also
use pydantic import pydantic's class as PydanticValidationError.
"""

from typing import Optional

from pydantic import BaseModel, Field

GENERAL_ERROR_KEY = "_general"
"""Field-error key used for failures that cannot be tied to a single field."""


class FieldIssue(BaseModel):
    """
    A single validation problem.

    Attributes:
        path: Path to the offending value, one segment per nesting level.
        message: What is wrong with the value.
        field: Optional display name of the field, preferred over the path.
    """

    path: list[str] = Field(default_factory=list, description="Path to the field")
    message: str = Field(..., description="Error message")
    field: Optional[str] = Field(default=None, description="Field name")

    model_config = {"frozen": True}

    @property
    def key(self) -> str:
        """Key used in field-error maps: field, else dotted path."""
        return self.field or ".".join(self.path) or GENERAL_ERROR_KEY


class ValidationError(BaseModel):
    """
    Structured validation failure reported by a schema.

    Attributes:
        errors: Non-empty list of field issues.
        message: Human-readable summary of all issues.

    Example:
        >>> err = ValidationError.from_issues(
        ...     [FieldIssue(path=["query"], message="Field required")]
        ... )
        >>> err.message
        'query: Field required'
    """

    errors: list[FieldIssue] = Field(..., min_length=1, description="Field issues")
    message: str = Field(..., description="Summary message")

    model_config = {"frozen": True}

    @classmethod
    def from_issues(cls, issues: list[FieldIssue]) -> "ValidationError":
        """Build a ValidationError whose message summarises the issues."""
        summary = "; ".join(f"{issue.key}: {issue.message}" for issue in issues)
        return cls(errors=issues, message=summary)

    def to_field_errors(self) -> dict[str, str]:
        """
        Flatten into one message per offending field.

        When several issues share a key, the last one wins.
        """
        return {issue.key: issue.message for issue in self.errors}
