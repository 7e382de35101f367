"""
Task Agent - Sequential Tool Runner

Runs an agent's planned tool steps one after another through the tool
registry. A failing step never aborts the task: its error result is recorded
and the loop moves on, so later steps that do not depend on it still run.

Step parameters can reuse earlier outputs with ``{"$ref": "<step>.<path>"}``,
e.g. ``{"$ref": "0.completion"}`` or ``{"$ref": "1.matches.0.content"}``.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional

from agents.agent_models import (
    AgentInput,
    AgentMetadata,
    AgentOutput,
    AgentResult,
    ToolResult,
    ToolResultStatus,
    ToolStep,
)
from src.models import TaskStepSummary, ToolErrorKind
from tools.tool_registry import ToolRegistry, tool_registry

logger = logging.getLogger(__name__)

REF_KEY = "$ref"


class StepReferenceError(Exception):
    """A ``$ref`` parameter could not be resolved from earlier results."""


def resolve_references(value: Any, results: List[ToolResult]) -> Any:
    """
    Replace ``{"$ref": ...}`` markers in ``value`` with data from earlier results.

    Raises:
        StepReferenceError: If the reference is malformed, points forward,
            targets a failed step or names a missing field
    """
    if isinstance(value, dict):
        if set(value.keys()) == {REF_KEY}:
            return _lookup(str(value[REF_KEY]), results)
        return {key: resolve_references(item, results) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_references(item, results) for item in value]
    return value


def _lookup(reference: str, results: List[ToolResult]) -> Any:
    head, _, path = reference.partition(".")
    try:
        step_index = int(head)
    except ValueError:
        raise StepReferenceError(f"Reference '{reference}' must start with a step index") from None

    if step_index < 0 or step_index >= len(results):
        raise StepReferenceError(f"Reference '{reference}' points to step {step_index}, which has not run")

    source = results[step_index]
    if source.status != ToolResultStatus.OK:
        raise StepReferenceError(f"Reference '{reference}' points to step {step_index}, which failed")

    current: Any = source.payload_dict()
    for part in path.split(".") if path else []:
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            raise StepReferenceError(f"Reference '{reference}' has no field '{part}'")
    return current


def _error_result(step: ToolStep, kind: ToolErrorKind, message: str) -> ToolResult:
    return ToolResult(
        tool_name=step.tool_name,
        status=ToolResultStatus.ERROR,
        error_kind=kind,
        error_message=message,
        execution_time_ms=0.0,
        metadata={"error_type": kind.value},
    )


async def run_step(step: ToolStep, previous: List[ToolResult], registry: ToolRegistry) -> ToolResult:
    """Execute one step; always returns a ToolResult."""
    try:
        parameters = resolve_references(step.parameters, previous)
    except StepReferenceError as e:
        logger.warning(f"Step '{step.tool_name}' skipped: {e}")
        return _error_result(step, ToolErrorKind.VALIDATION, str(e))

    if registry.get_tool(step.tool_name) is None:
        message = f"Tool '{step.tool_name}' not found. Available tools: {registry.list_tools()}"
        logger.warning(message)
        return _error_result(step, ToolErrorKind.VALIDATION, message)

    return await registry.execute_tool(step.tool_name, parameters, step.timeout)


async def run_task(agent_input: AgentInput, registry: Optional[ToolRegistry] = None) -> AgentResult:
    """
    Execute every planned tool step of an agent task in order.

    Args:
        agent_input: Task query, planned steps and agent metadata
        registry: Tool registry to resolve tools from (defaults to the global one)

    Returns:
        AgentResult with one ToolResult per step, in step order
    """
    registry = registry or tool_registry
    start_time = datetime.now(timezone.utc)
    execution_id = agent_input.metadata.execution_id

    logger.info(f"Task agent execution started: {execution_id}")
    logger.info(f"Query: {agent_input.query} ({len(agent_input.steps)} steps)")

    results: List[ToolResult] = []
    summaries: List[TaskStepSummary] = []

    for index, step in enumerate(agent_input.steps):
        logger.info(f"Step {index}: {step.tool_name}" + (f" - {step.description}" if step.description else ""))
        result = await run_step(step, results, registry)
        results.append(result)
        summaries.append(TaskStepSummary(
            step_index=index,
            tool_name=step.tool_name,
            status=result.status.value,
            error_kind=result.error_kind,
            error_message=result.error_message,
        ))
        if result.status != ToolResultStatus.OK:
            logger.warning(f"Step {index} ({step.tool_name}) failed, continuing: {result.error_message}")

    failed = [s for s in summaries if s.status != ToolResultStatus.OK.value]
    succeeded = len(summaries) - len(failed)
    duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000

    response_text = f"Completed {succeeded} of {len(summaries)} tool steps"
    if failed:
        response_text += f"; failed steps: {', '.join(str(s.step_index) for s in failed)}"

    logger.info(f"Task agent execution finished: {execution_id} ({response_text})")

    return AgentResult(
        input_metadata=agent_input.metadata,
        output=AgentOutput(
            response_text=response_text,
            tool_calls_made=[step.tool_name for step in agent_input.steps],
            tool_results=results,
            step_summaries=summaries,
            execution_metadata={
                "execution_id": execution_id,
                "steps_total": len(summaries),
                "steps_succeeded": succeeded,
                "steps_failed": len(failed),
            },
        ),
        execution_duration_ms=duration_ms,
        success=not failed,
        error_details="; ".join(f"step {s.step_index}: {s.error_message}" for s in failed) or None,
    )


def new_agent_input(query: str, steps: List[ToolStep], session_id: Optional[str] = None) -> AgentInput:
    """Build an AgentInput with fresh identifiers."""
    return AgentInput(
        query=query,
        steps=steps,
        metadata=AgentMetadata(
            agent_id=f"task-agent-{uuid.uuid4().hex[:8]}",
            session_id=session_id,
            execution_id=str(uuid.uuid4()),
        ),
    )
