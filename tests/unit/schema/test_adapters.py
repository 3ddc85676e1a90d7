"""
Tests for schema collaborators and validation helpers.

Test Categories:
1. Helpers (create_validation_error, to_field_errors, from_pydantic_error)
2. PydanticSchema
3. CallableSchema
4. SimpleSchema
5. as_schema coercion
6. SafeParseResult invariants
"""

from typing import Any

import pytest
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from tool_invoker.core.exceptions import ToolValidationError
from tool_invoker.models.validation import FieldIssue, ValidationError
from tool_invoker.schema import (
    CallableSchema,
    PydanticSchema,
    SafeParseResult,
    Schema,
    SimpleSchema,
    as_schema,
    create_validation_error,
    to_field_errors,
)


class Filters(BaseModel):
    page: int = 1


class SearchParams(BaseModel):
    query: str = Field(..., min_length=1)
    limit: int = Field(default=10, ge=1)
    filters: Filters = Field(default_factory=Filters)


# =============================================================================
# Helpers
# =============================================================================


class TestHelpers:
    """Tests for validation helpers."""

    def test_create_validation_error_splits_path(self) -> None:
        error = create_validation_error("Must be positive", "filters.limit")

        assert error.message == "Must be positive"
        assert error.errors[0].path == ["filters", "limit"]
        assert error.errors[0].field == "filters.limit"

    def test_to_field_errors(self) -> None:
        error = create_validation_error("Required", "query")

        assert to_field_errors(error) == {"query": "Required"}


# =============================================================================
# PydanticSchema
# =============================================================================


class TestPydanticSchema:
    """Tests for the pydantic-backed schema."""

    def test_satisfies_schema_protocol(self) -> None:
        assert isinstance(PydanticSchema(SearchParams), Schema)

    def test_parse_returns_typed_value(self) -> None:
        params = PydanticSchema(SearchParams).parse({"query": "python", "limit": "5"})

        assert isinstance(params, SearchParams)
        assert params.limit == 5

    def test_parse_raises_tool_validation_error(self) -> None:
        with pytest.raises(ToolValidationError) as exc_info:
            PydanticSchema(SearchParams).parse({"limit": 0})

        field_errors = to_field_errors(exc_info.value.validation_error)
        assert set(field_errors) == {"query", "limit"}

    def test_safe_parse_success(self) -> None:
        outcome = PydanticSchema(SearchParams).safe_parse({"query": "python"})

        assert outcome.success is True
        assert outcome.error is None
        assert outcome.data.query == "python"

    def test_safe_parse_reports_nested_paths(self) -> None:
        outcome = PydanticSchema(SearchParams).safe_parse(
            {"query": "python", "filters": {"page": "first"}}
        )

        assert outcome.success is False
        assert list(to_field_errors(outcome.error)) == ["filters.page"]

    def test_works_with_plain_types(self) -> None:
        schema = PydanticSchema(dict[str, int])

        assert schema.parse({"a": "1"}) == {"a": 1}
        assert schema.safe_parse({"a": "x"}).success is False

    def test_json_schema(self) -> None:
        json_schema = PydanticSchema(SearchParams).json_schema()

        assert json_schema["required"] == ["query"]
        assert "limit" in json_schema["properties"]


# =============================================================================
# CallableSchema
# =============================================================================


def positive_number(data: Any) -> int:
    value = int(data["n"])
    if value <= 0:
        raise ValueError("n must be positive")
    return value


class TestCallableSchema:
    """Tests for validator-function schemas."""

    def test_parse_returns_validator_value(self) -> None:
        assert CallableSchema(positive_number).parse({"n": "3"}) == 3

    def test_unstructured_error_reported_at_unknown_path(self) -> None:
        outcome = CallableSchema(positive_number).safe_parse({"n": -1})

        assert outcome.success is False
        assert outcome.error.errors == [FieldIssue(path=["unknown"], message="n must be positive")]
        assert to_field_errors(outcome.error) == {"unknown": "n must be positive"}

    def test_empty_error_message_uses_exception_type(self) -> None:
        def validator(data: Any) -> Any:
            raise RuntimeError()

        outcome = CallableSchema(validator).safe_parse({})

        assert outcome.error.message == "RuntimeError"

    def test_structured_error_passes_through(self) -> None:
        def validator(data: Any) -> Any:
            raise ToolValidationError(create_validation_error("Required", "query"))

        outcome = CallableSchema(validator).safe_parse({})

        assert to_field_errors(outcome.error) == {"query": "Required"}

    def test_parse_wraps_unstructured_error(self) -> None:
        with pytest.raises(ToolValidationError) as exc_info:
            CallableSchema(positive_number).parse({"n": 0})

        assert isinstance(exc_info.value.__cause__, ValueError)


# =============================================================================
# SimpleSchema
# =============================================================================


class TestSimpleSchema:
    """Tests for the accept-anything schema."""

    @pytest.mark.parametrize("data", [{}, {"anything": [1, 2]}, None, "text"])
    def test_accepts_everything_unchanged(self, data: Any) -> None:
        schema = SimpleSchema()

        assert schema.parse(data) == data
        assert schema.safe_parse(data) == SafeParseResult.ok(data)


# =============================================================================
# as_schema
# =============================================================================


class TestAsSchema:
    """Tests for schema coercion."""

    def test_schema_passes_through(self) -> None:
        schema = SimpleSchema()

        assert as_schema(schema) is schema

    def test_model_class_becomes_pydantic_schema(self) -> None:
        schema = as_schema(SearchParams)

        assert isinstance(schema, PydanticSchema)
        assert schema.parse({"query": "x"}).query == "x"

    def test_function_becomes_callable_schema(self) -> None:
        assert isinstance(as_schema(positive_number), CallableSchema)

    def test_rejects_other_values(self) -> None:
        with pytest.raises(TypeError):
            as_schema(42)


# =============================================================================
# SafeParseResult
# =============================================================================


class TestSafeParseResult:
    """Tests for SafeParseResult variant invariants."""

    def test_failure_requires_error(self) -> None:
        with pytest.raises(PydanticValidationError):
            SafeParseResult(success=False)

    def test_success_cannot_carry_error(self) -> None:
        error = ValidationError.from_issues([FieldIssue(path=["q"], message="bad")])

        with pytest.raises(PydanticValidationError):
            SafeParseResult(success=True, error=error)
