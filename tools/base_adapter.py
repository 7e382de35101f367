"""
Base class for tool adapters backed by an external HTTP service.

An adapter turns a ``ToolInvocation`` into exactly one outbound request and
normalizes the answer into a ``ToolResult``. Every failure after construction
is converted to an error result at this boundary so that the calling agent
loop keeps running.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union

import httpx
from pydantic import ValidationError as PydanticValidationError

from agents.agent_models import ToolExecutionStatus, ToolResult, ToolResultStatus
from src.errors import ToolAdapterError, ValidationError
from src.models import ServiceKind, ToolErrorKind
from tools.tool_models import ToolInvocation, ToolSchema

logger = logging.getLogger(__name__)


class ServiceAdapter:
    """
    Shared invocation pipeline for all service adapters.

    Subclasses set ``tool_name`` and ``target_service``, provide ``schema``
    and implement ``_execute``, which receives validated parameters and the
    effective timeout and returns ``(payload, metadata)``.
    """

    tool_name: str = ""
    target_service: ServiceKind

    def __init__(self, config: Any, transport: Optional[httpx.BaseTransport] = None):
        self._config = config
        self._transport = transport
        self._state = ToolExecutionStatus.IDLE
        self._last_outcome: Optional[ToolExecutionStatus] = None

    @property
    def config(self) -> Any:
        return self._config

    @property
    def schema(self) -> ToolSchema:
        raise NotImplementedError

    @property
    def state(self) -> ToolExecutionStatus:
        return self._state

    @property
    def last_outcome(self) -> Optional[ToolExecutionStatus]:
        """Terminal state (succeeded or failed) of the most recent invocation."""
        return self._last_outcome

    def _set_state(self, state: ToolExecutionStatus) -> None:
        logger.debug(f"{self.tool_name}: {self._state.value} -> {state.value}")
        self._state = state

    def build_invocation(self, parameters: Dict[str, Any], timeout: Optional[float] = None) -> ToolInvocation:
        return ToolInvocation(
            target_service=self.target_service,
            request_payload=dict(parameters),
            timeout=timeout,
        )

    def invoke(
        self,
        invocation: Union[ToolInvocation, Dict[str, Any]],
        timeout: Optional[float] = None,
    ) -> ToolResult:
        """
        Run one invocation against the external service.

        Args:
            invocation: A ToolInvocation, or a plain parameter mapping
            timeout: Timeout override used when a parameter mapping is passed

        Returns:
            ToolResult with status ``ok`` and a normalized payload, or status
            ``error`` with the error kind and message. Never raises.
        """
        start_time = datetime.now(timezone.utc)
        invocation_id = getattr(invocation, "invocation_id", None)
        self._set_state(ToolExecutionStatus.INVOKING)

        try:
            if not isinstance(invocation, ToolInvocation):
                try:
                    invocation = self.build_invocation(invocation, timeout)
                except PydanticValidationError as e:
                    raise ValidationError(f"Invalid invocation for tool '{self.tool_name}': {e}") from e
            invocation_id = invocation.invocation_id

            logger.info(f"{self.tool_name} execution started: {invocation_id}")

            if invocation.target_service != self.target_service:
                raise ValidationError(
                    f"Invocation targets '{invocation.target_service.value}' but "
                    f"{self.tool_name} serves '{self.target_service.value}'"
                )

            # Work on a copy so the caller's payload is never modified
            parameters = self._apply_defaults(dict(invocation.request_payload))
            logger.debug(f"Parameters: {sorted(parameters)}")

            validation_errors = self.schema.validate_parameters(parameters)
            if validation_errors:
                raise ValidationError(
                    f"Parameter validation failed for tool '{self.tool_name}': {validation_errors}"
                )

            effective_timeout = invocation.timeout or self._config.timeout_seconds
            payload, metadata = self._execute(parameters, effective_timeout)

            execution_time_ms = _elapsed_ms(start_time)
            self._last_outcome = ToolExecutionStatus.SUCCEEDED
            self._set_state(ToolExecutionStatus.SUCCEEDED)
            logger.info(f"{self.tool_name} execution completed successfully in {execution_time_ms:.1f}ms")

            return ToolResult(
                tool_name=self.tool_name,
                target_service=self.target_service,
                status=ToolResultStatus.OK,
                payload=payload,
                execution_time_ms=execution_time_ms,
                metadata={"execution_id": invocation_id, "timeout_seconds": effective_timeout, **metadata},
            )

        except ToolAdapterError as e:
            logger.error(f"{self.tool_name} execution failed ({e.kind.value}): {e.message}")
            metadata = {"execution_id": invocation_id, "error_type": type(e).__name__}
            if e.status_code is not None:
                metadata["http_status"] = e.status_code
            return self._failed(e.kind, e.message, start_time, metadata)

        except Exception as e:
            error_msg = f"Unexpected error in {self.tool_name}: {e}"
            logger.error(error_msg, exc_info=True)
            metadata = {"execution_id": invocation_id, "error_type": "unexpected_error", "exception_type": type(e).__name__}
            return self._failed(ToolErrorKind.INTERNAL, error_msg, start_time, metadata)

        finally:
            self._set_state(ToolExecutionStatus.IDLE)

    async def ainvoke(
        self,
        invocation: Union[ToolInvocation, Dict[str, Any]],
        timeout: Optional[float] = None,
    ) -> ToolResult:
        """Run ``invoke`` in a worker thread so async callers are not blocked."""
        return await asyncio.to_thread(self.invoke, invocation, timeout)

    def _failed(
        self,
        kind: ToolErrorKind,
        message: str,
        start_time: datetime,
        metadata: Dict[str, Any],
    ) -> ToolResult:
        self._last_outcome = ToolExecutionStatus.FAILED
        self._set_state(ToolExecutionStatus.FAILED)
        return ToolResult(
            tool_name=self.tool_name,
            target_service=self.target_service,
            status=ToolResultStatus.ERROR,
            payload=None,
            error_kind=kind,
            error_message=message,
            execution_time_ms=_elapsed_ms(start_time),
            metadata=metadata,
        )

    def _apply_defaults(self, parameters: Dict[str, Any]) -> Dict[str, Any]:
        for param in self.schema.parameters:
            if param.default_value is not None and parameters.get(param.name) is None:
                parameters[param.name] = param.default_value
        return parameters

    def _execute(self, parameters: Dict[str, Any], timeout: float) -> Tuple[Any, Dict[str, Any]]:
        raise NotImplementedError


def _elapsed_ms(start_time: datetime) -> float:
    return (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
