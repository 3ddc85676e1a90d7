"""
Execution Orchestrator

This module binds one ToolDescriptor to a caller-editable parameter draft
and drives a single validate -> execute -> settle lifecycle per call:

    IDLE -> VALIDATING -> EXECUTING -> SUCCEEDED | FAILED
      ^          |                          |
      +----------+ (invalid draft)          +--> IDLE on next execute/reset

Nothing raises past the public operations: validation failures are
reported as field errors, execution failures are normalized into
ToolExecutionError (or CancellationError) and committed to state.

Every call to execute() or reset() starts a new generation. A settling
execution only writes result, error and the executing flag if its
generation is still current, so a superseded or reset execution cannot
overwrite newer state.

Pattern: Command Executor (executes tool calls as commands)
Pattern: Observer (state listeners and lifecycle callbacks)
"""

import time
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from tool_invoker.clients.cancellation import CancellationToken
from tool_invoker.core.exceptions import (
    CancellationError,
    ErrorCode,
    ToolExecutionError,
    ToolInvokerException,
)
from tool_invoker.models.domain import ExecutionContext, ToolFailure, new_tool_call_id
from tool_invoker.models.validation import GENERAL_ERROR_KEY
from tool_invoker.observability.logging import get_logger, tool_call_context
from tool_invoker.observability.metrics import record_execution, record_validation_failure
from tool_invoker.schema.adapters import to_field_errors
from tool_invoker.tools.descriptor import ToolDescriptor

logger = get_logger(__name__)

P = TypeVar("P")
R = TypeVar("R")

StateListener = Callable[["ExecutionState"], None]


# =============================================================================
# State
# =============================================================================


class ExecutionStatus(str, Enum):
    """Lifecycle states of an orchestrator."""

    IDLE = "idle"
    VALIDATING = "validating"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ExecutionState(BaseModel):
    """
    Snapshot of an orchestrator's state, handed to listeners.

    Attributes:
        status: Current lifecycle state.
        params: Current parameter draft.
        result: Result of the last successful execution.
        is_executing: True from execution start until settlement.
        error: Error of the last failed execution.
        validation_errors: Field errors of the last validation.
    """

    status: ExecutionStatus = ExecutionStatus.IDLE
    params: dict[str, Any] = Field(default_factory=dict)
    result: Any = None
    is_executing: bool = False
    error: Optional[Exception] = None
    validation_errors: Optional[dict[str, str]] = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


# =============================================================================
# ExecutionOrchestrator
# =============================================================================


class ExecutionOrchestrator(Generic[P, R]):
    """
    One-at-a-time execution lifecycle for a single tool.

    Attributes:
        tool: The ToolDescriptor being executed.

    Example:
        >>> orchestrator = ExecutionOrchestrator(search_tool, {"limit": 5})
        >>> orchestrator.update_param("query", "python")
        >>> results = await orchestrator.execute()
        >>> orchestrator.error is None
        True
    """

    def __init__(
        self,
        tool: ToolDescriptor,
        initial_params: Optional[dict[str, Any]] = None,
        on_execution_start: Optional[Callable[[P], None]] = None,
        on_execution_complete: Optional[Callable[[R], None]] = None,
        on_execution_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            tool: The tool to execute.
            initial_params: Initial parameter draft, restored by reset().
            on_execution_start: Called with the parsed parameters.
            on_execution_complete: Called with the result on success.
            on_execution_error: Called with the normalized error on failure.
        """
        self.tool = tool
        self._initial_params: dict[str, Any] = dict(initial_params or {})
        self._on_execution_start = on_execution_start
        self._on_execution_complete = on_execution_complete
        self._on_execution_error = on_execution_error

        self._params: dict[str, Any] = dict(self._initial_params)
        self._result: Optional[R] = None
        self._error: Optional[Exception] = None
        self._validation_errors: Optional[dict[str, str]] = None
        self._is_executing = False
        self._status = ExecutionStatus.IDLE
        self._generation = 0
        self._listeners: list[StateListener] = []

    # =========================================================================
    # State Accessors
    # =========================================================================

    @property
    def params(self) -> dict[str, Any]:
        return dict(self._params)

    @property
    def result(self) -> Optional[R]:
        return self._result

    @property
    def error(self) -> Optional[Exception]:
        return self._error

    @property
    def validation_errors(self) -> Optional[dict[str, str]]:
        return dict(self._validation_errors) if self._validation_errors is not None else None

    @property
    def is_executing(self) -> bool:
        return self._is_executing

    @property
    def status(self) -> ExecutionStatus:
        return self._status

    @property
    def state(self) -> ExecutionState:
        """Immutable snapshot of the current state."""
        return ExecutionState(
            status=self._status,
            params=dict(self._params),
            result=self._result,
            is_executing=self._is_executing,
            error=self._error,
            validation_errors=self.validation_errors,
        )

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called with a snapshot after every state change.

        Returns:
            A function that unsubscribes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.state
        for listener in list(self._listeners):
            listener(snapshot)

    # =========================================================================
    # Parameter Draft
    # =========================================================================

    def update_param(self, key: str, value: Any) -> None:
        """Merge one field into the parameter draft."""
        self._params = {**self._params, key: value}
        self._notify()

    def set_params(self, params: dict[str, Any]) -> None:
        """Replace the whole parameter draft."""
        self._params = dict(params)
        self._notify()

    # =========================================================================
    # Validation
    # =========================================================================

    def validate_params(self) -> bool:
        """
        Validate the current draft against the tool's parameter schema.

        Populates validation_errors with one message per offending field.
        A schema that raises (or answers outside its contract) is reported
        as a single ``_general`` error.

        Returns:
            True if the draft is valid, False otherwise.
        """
        self._validation_errors = None
        try:
            outcome = self.tool.parameters.safe_parse(dict(self._params))
            if outcome.success:
                return True
            if outcome.error is None:
                self._validation_errors = {GENERAL_ERROR_KEY: "Invalid parameters"}
            else:
                self._validation_errors = to_field_errors(outcome.error)
        except Exception as e:
            logger.warning("schema raised during validation", tool=self.tool.name, error=str(e))
            self._validation_errors = {
                GENERAL_ERROR_KEY: str(e) or "Unknown validation error"
            }
        finally:
            self._notify()

        logger.debug(
            "parameter validation failed",
            tool=self.tool.name,
            fields=sorted(self._validation_errors),
        )
        record_validation_failure(self.tool.name)
        return False

    # =========================================================================
    # Execution
    # =========================================================================

    async def execute(
        self,
        *,
        tool_call_id: Optional[str] = None,
        cancellation: Optional[CancellationToken] = None,
        timeout_ms: Optional[float] = None,
    ) -> Optional[R]:
        """
        Validate the draft and execute the tool once.

        Args:
            tool_call_id: Correlation ID (generated when omitted).
            cancellation: Token the execution observes.
            timeout_ms: Timeout budget passed through the context.

        Returns:
            The result data on success, None on validation failure or
            execution failure (see ``error``).
        """
        self._generation += 1
        generation = self._generation

        self._result = None
        self._error = None
        self._status = ExecutionStatus.VALIDATING
        self._notify()

        if not self.validate_params():
            self._status = ExecutionStatus.IDLE
            self._notify()
            return None

        call_id = tool_call_id or new_tool_call_id()
        with tool_call_context(call_id):
            return await self._run(call_id, cancellation, timeout_ms, generation)

    async def _run(
        self,
        call_id: str,
        cancellation: Optional[CancellationToken],
        timeout_ms: Optional[float],
        generation: int,
    ) -> Optional[R]:
        self._is_executing = True
        self._status = ExecutionStatus.EXECUTING
        self._notify()

        started = time.monotonic()
        outcome = "failure"
        try:
            context = ExecutionContext(
                tool_call_id=call_id, cancellation=cancellation, timeout_ms=timeout_ms
            )
            valid_params = self.tool.parameters.parse(dict(self._params))

            if self._on_execution_start is not None:
                self._on_execution_start(valid_params)
            logger.info("tool execution started", tool=self.tool.name)

            tool_result = await self.tool.run(valid_params, context)
            if isinstance(tool_result, ToolFailure):
                raise self._failure_to_error(tool_result, call_id)

            data = tool_result.data
            if generation != self._generation:
                logger.debug("superseded result discarded", tool=self.tool.name)
                outcome = "superseded"
                return None

            self._result = data
            self._status = ExecutionStatus.SUCCEEDED
            outcome = "success"
            logger.info("tool execution succeeded", tool=self.tool.name)
            if self._on_execution_complete is not None:
                try:
                    self._on_execution_complete(data)
                except Exception:
                    logger.exception("execution complete callback failed", tool=self.tool.name)
            return data
        except Exception as e:
            error = self._normalize_error(e, call_id)
            outcome = "cancelled" if isinstance(error, CancellationError) else "failure"
            if generation != self._generation:
                logger.debug("superseded error discarded", tool=self.tool.name, error=str(error))
                return None

            self._result = None
            self._error = error
            self._status = ExecutionStatus.FAILED
            if outcome == "cancelled":
                logger.info("tool execution cancelled", tool=self.tool.name, reason=str(error))
            else:
                logger.warning("tool execution failed", tool=self.tool.name, error=str(error))
            if self._on_execution_error is not None:
                try:
                    self._on_execution_error(error)
                except Exception:
                    logger.exception("execution error callback failed", tool=self.tool.name)
            return None
        finally:
            record_execution(self.tool.name, outcome, time.monotonic() - started)
            if generation == self._generation:
                self._is_executing = False
                self._notify()

    def _failure_to_error(
        self, failure: ToolFailure, tool_call_id: str
    ) -> ToolInvokerException:
        details = failure.error_details
        code = details.code if details is not None and details.code else None
        if code == ErrorCode.CANCELLED.value:
            return CancellationError(failure.error)
        return ToolExecutionError(
            failure.error,
            tool_name=self.tool.name,
            tool_call_id=tool_call_id,
            details=details.model_dump() if details is not None else None,
            error_code=code or ErrorCode.TOOL_EXECUTION_ERROR,
        )

    def _normalize_error(self, error: Exception, tool_call_id: str) -> Exception:
        if isinstance(error, (ToolExecutionError, CancellationError)):
            return error
        if isinstance(error, ToolInvokerException):
            normalized = ToolExecutionError(
                error.message,
                tool_name=self.tool.name,
                tool_call_id=tool_call_id,
                error_code=error.error_code,
            )
        else:
            normalized = ToolExecutionError(
                str(error) or type(error).__name__,
                tool_name=self.tool.name,
                tool_call_id=tool_call_id,
            )
        normalized.__cause__ = error
        return normalized

    # =========================================================================
    # Reset
    # =========================================================================

    def reset(self) -> None:
        """
        Restore the initial draft and clear result, error, validation
        errors and the executing flag, from any state.

        An in-flight execution keeps running but can no longer write to
        state; cancelling it is the caller's responsibility.
        """
        self._generation += 1
        self._params = dict(self._initial_params)
        self._result = None
        self._error = None
        self._validation_errors = None
        self._is_executing = False
        self._status = ExecutionStatus.IDLE
        self._notify()
