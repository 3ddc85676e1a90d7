"""
Tests for domain models: categories, execution context and Tool Results.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from tool_invoker.clients.cancellation import CancellationToken
from tool_invoker.models.domain import (
    Capability,
    ErrorDetails,
    ExecutionContext,
    ExecutionMetadata,
    ToolCategory,
    ToolFailure,
    ToolSuccess,
    capabilities_for,
    new_tool_call_id,
    now_ms,
    tool_result_adapter,
)


# =============================================================================
# Categories and Capabilities
# =============================================================================


class TestCapabilities:
    """Tests for the category -> capability lookup."""

    def test_generic_tools_have_no_capabilities(self) -> None:
        assert capabilities_for(ToolCategory.GENERIC) == frozenset()

    def test_api_tools_are_networked_retryable_and_cancellable(self) -> None:
        caps = capabilities_for(ToolCategory.API)

        assert Capability.NETWORK in caps
        assert Capability.RETRYABLE in caps
        assert Capability.CANCELLABLE in caps

    def test_search_tools_extend_api_with_selectable_results(self) -> None:
        caps = capabilities_for(ToolCategory.SEARCH)

        assert capabilities_for(ToolCategory.API) < caps
        assert Capability.SELECTABLE_RESULTS in caps

    def test_interactive_tools_take_user_input(self) -> None:
        assert capabilities_for(ToolCategory.INTERACTIVE) == {Capability.USER_INPUT}

    def test_lookup_accepts_category_value(self) -> None:
        assert capabilities_for("search") == capabilities_for(ToolCategory.SEARCH)


# =============================================================================
# ExecutionContext
# =============================================================================


class TestExecutionContext:
    """Tests for ExecutionContext."""

    def test_generates_unique_ids(self) -> None:
        first = ExecutionContext()
        second = ExecutionContext()

        assert first.tool_call_id.startswith("call-")
        assert first.tool_call_id != second.tool_call_id

    def test_new_tool_call_id_is_unique(self) -> None:
        ids = {new_tool_call_id() for _ in range(100)}

        assert len(ids) == 100

    def test_carries_cancellation_token(self) -> None:
        token = CancellationToken()

        context = ExecutionContext(tool_call_id="call-1", cancellation=token)

        assert context.cancellation is token

    def test_timeout_seconds(self) -> None:
        assert ExecutionContext(timeout_ms=2500).timeout_seconds == 2.5
        assert ExecutionContext().timeout_seconds is None

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(PydanticValidationError):
            ExecutionContext(timeout_ms=0)

    def test_is_immutable(self) -> None:
        context = ExecutionContext(tool_call_id="call-1")

        with pytest.raises(PydanticValidationError):
            context.tool_call_id = "call-2"


# =============================================================================
# Tool Results
# =============================================================================


class TestToolResult:
    """Tests for the tagged ToolSuccess / ToolFailure union."""

    def test_success_is_not_error(self) -> None:
        result = ToolSuccess(data={"temperature": 21})

        assert result.kind == "success"
        assert result.is_error is False
        assert result.data == {"temperature": 21}

    def test_failure_is_error(self) -> None:
        result = ToolFailure(
            error="API error: 503 Service Unavailable",
            error_details=ErrorDetails(code="TRANSPORT_ERROR", suggestions=["Try again later"]),
        )

        assert result.kind == "failure"
        assert result.is_error is True
        assert result.error_details.suggestions == ["Try again later"]

    def test_failure_requires_message(self) -> None:
        with pytest.raises(PydanticValidationError):
            ToolFailure(error="")

    def test_adapter_discriminates_on_kind(self) -> None:
        success = tool_result_adapter.validate_python({"kind": "success", "data": [1, 2]})
        failure = tool_result_adapter.validate_python({"kind": "failure", "error": "boom"})

        assert isinstance(success, ToolSuccess)
        assert isinstance(failure, ToolFailure)

    def test_adapter_rejects_unknown_kind(self) -> None:
        with pytest.raises(PydanticValidationError):
            tool_result_adapter.validate_python({"kind": "partial", "data": 1})

    def test_metadata_fields(self) -> None:
        metadata = ExecutionMetadata(duration_ms=12.5, completed_at=now_ms(), tool_call_id="call-1")

        result = ToolSuccess(data=None, metadata=metadata)

        assert result.metadata.tool_call_id == "call-1"
        assert result.metadata.completed_at > 0

    def test_metadata_accepts_extra_keys(self) -> None:
        metadata = ExecutionMetadata(duration_ms=1.0, attempts=3)

        assert metadata.model_dump()["attempts"] == 3
