"""
Schema Adapters

Concrete schema collaborators satisfying the Schema contract:

- PydanticSchema: validation delegated to pydantic (models, dataclasses,
  TypedDicts, any type pydantic.TypeAdapter understands)
- CallableSchema: wraps a plain validator function that raises on bad input
- SimpleSchema: accepts any value unchanged

Plus helpers to build ValidationErrors and flatten them into field maps.
"""

from typing import Any, Callable, Generic, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from tool_invoker.core.exceptions import ToolValidationError
from tool_invoker.models.validation import FieldIssue, ValidationError
from tool_invoker.schema.contracts import SafeParseResult

T = TypeVar("T")

UNKNOWN_PATH = ["unknown"]


# =============================================================================
# Helpers
# =============================================================================


def create_validation_error(message: str, path: str) -> ValidationError:
    """
    Create a single-issue ValidationError for a dotted path.

    Example:
        >>> err = create_validation_error("Must be positive", "filters.limit")
        >>> err.errors[0].path
        ['filters', 'limit']
    """
    return ValidationError(
        errors=[FieldIssue(path=path.split("."), message=message, field=path)],
        message=message,
    )


def to_field_errors(error: ValidationError) -> dict[str, str]:
    """Flatten a ValidationError into ``{field_or_dotted_path: message}``."""
    return error.to_field_errors()


def from_pydantic_error(error: PydanticValidationError) -> ValidationError:
    """Convert a pydantic ValidationError into the contract's ValidationError."""
    issues = []
    for item in error.errors():
        path = [str(segment) for segment in item.get("loc", ())]
        issues.append(
            FieldIssue(
                path=path,
                message=item.get("msg", "Invalid value"),
                field=path[0] if len(path) == 1 else None,
            )
        )
    if not issues:
        issues.append(FieldIssue(path=[], message=str(error)))
    return ValidationError.from_issues(issues)


# =============================================================================
# PydanticSchema
# =============================================================================


class PydanticSchema(Generic[T]):
    """
    Schema backed by pydantic validation.

    Example:
        >>> class SearchParams(BaseModel):
        ...     query: str
        >>> schema = PydanticSchema(SearchParams)
        >>> schema.parse({"query": "python"}).query
        'python'
    """

    def __init__(self, type_: type[T]) -> None:
        self.type_ = type_
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)

    def __repr__(self) -> str:
        return f"PydanticSchema({getattr(self.type_, '__name__', self.type_)!r})"

    def parse(self, data: Any) -> T:
        try:
            return self._adapter.validate_python(data)
        except PydanticValidationError as e:
            raise ToolValidationError(from_pydantic_error(e)) from e

    def safe_parse(self, data: Any) -> SafeParseResult:
        try:
            return SafeParseResult.ok(self._adapter.validate_python(data))
        except PydanticValidationError as e:
            return SafeParseResult.fail(from_pydantic_error(e))

    def json_schema(self) -> dict[str, Any]:
        """JSON Schema of the parameters, as sent to LLM tool APIs."""
        return self._adapter.json_schema()


# =============================================================================
# CallableSchema
# =============================================================================


class CallableSchema(Generic[T]):
    """
    Schema around a validator function.

    The validator returns the typed value or raises. Raised errors without
    structure are reported as a single issue at path ``["unknown"]``.
    """

    def __init__(self, validator: Callable[[Any], T]) -> None:
        self.validator = validator

    def parse(self, data: Any) -> T:
        try:
            return self.validator(data)
        except ToolValidationError:
            raise
        except Exception as e:
            raise ToolValidationError(self._unstructured(e)) from e

    def safe_parse(self, data: Any) -> SafeParseResult:
        try:
            return SafeParseResult.ok(self.validator(data))
        except ToolValidationError as e:
            return SafeParseResult.fail(e.validation_error)
        except Exception as e:
            return SafeParseResult.fail(self._unstructured(e))

    @staticmethod
    def _unstructured(error: Exception) -> ValidationError:
        message = str(error) or type(error).__name__
        return ValidationError(
            errors=[FieldIssue(path=list(UNKNOWN_PATH), message=message)],
            message=message,
        )


# =============================================================================
# SimpleSchema
# =============================================================================


class SimpleSchema(Generic[T]):
    """Schema that accepts any value unchanged."""

    def parse(self, data: Any) -> T:
        return data

    def safe_parse(self, data: Any) -> SafeParseResult:
        return SafeParseResult.ok(data)


def as_schema(value: Any) -> Any:
    """
    Coerce ``value`` into a schema collaborator.

    - objects already exposing parse/safe_parse are returned unchanged
    - pydantic model classes are wrapped in PydanticSchema
    - other callables are treated as validator functions (CallableSchema)

    Raises:
        TypeError: If ``value`` is none of the above.
    """
    if hasattr(value, "parse") and hasattr(value, "safe_parse"):
        return value
    if isinstance(value, type) and issubclass(value, BaseModel):
        return PydanticSchema(value)
    if callable(value):
        return CallableSchema(value)
    raise TypeError(f"Expected a schema or validator callable, got {type(value).__name__}")
