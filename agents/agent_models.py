"""
Agent Data Models for Tool-Driven Task Execution

This module defines the Pydantic models shared between tool adapters, the
tool registry and the agent task loop. ``ToolResult`` is the contract every
adapter returns, whether the external call succeeded or not.

Key Design Principles:
- A tool invocation always yields a ToolResult
- Errors are values, so the agent loop can keep going
- Rich metadata for observability and debugging
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum

from src.models import ServiceKind, TaskStepSummary, ToolErrorKind


class ToolResultStatus(str, Enum):
    """Outcome of a single tool invocation."""
    OK = "ok"
    ERROR = "error"


class ToolExecutionStatus(str, Enum):
    """Lifecycle state of a tool adapter: Idle -> Invoking -> Succeeded|Failed -> Idle."""
    IDLE = "idle"
    INVOKING = "invoking"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ToolResult(BaseModel):
    """
    Standardized result structure from tool execution.

    ``payload`` holds the service-specific normalized output on success;
    ``error_kind`` and ``error_message`` describe the failure otherwise.
    """
    tool_name: str = Field(..., description="Name of the tool that was executed")
    target_service: Optional[ServiceKind] = Field(None, description="Service family the tool called")
    status: ToolResultStatus = Field(..., description="Execution status")
    payload: Optional[Any] = Field(None, description="Normalized result data from the service")
    error_kind: Optional[ToolErrorKind] = Field(None, description="Error classification if execution failed")
    error_message: Optional[str] = Field(None, description="Error details if execution failed")
    execution_time_ms: Optional[float] = Field(None, description="Tool execution time in milliseconds")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional tool-specific metadata")

    @property
    def ok(self) -> bool:
        return self.status == ToolResultStatus.OK

    def payload_dict(self) -> Dict[str, Any]:
        """Payload as plain data, for reference resolution and JSON output."""
        if self.payload is None:
            return {}
        if isinstance(self.payload, BaseModel):
            return self.payload.model_dump()
        if isinstance(self.payload, dict):
            return self.payload
        return {"value": self.payload}


class ToolStep(BaseModel):
    """One planned tool call inside an agent task."""
    tool_name: str = Field(..., description="Registered tool to execute")
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Parameters, may contain $ref values")
    timeout: Optional[float] = Field(None, gt=0, description="Per-step timeout override in seconds")
    description: Optional[str] = Field(None, description="What this step is for, used in logs")


class AgentMetadata(BaseModel):
    """Identifiers and timing for one agent task run."""
    agent_id: str = Field(..., description="Unique identifier for this agent instance")
    session_id: Optional[str] = Field(None, description="Conversation or workflow session identifier")
    execution_id: str = Field(..., description="Unique identifier for this execution")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)


class AgentInput(BaseModel):
    """Task description plus the ordered tool steps the agent should run."""
    query: str = Field(..., description="User query or task description for the agent")
    steps: List[ToolStep] = Field(default_factory=list, description="Tool steps to execute in order")
    metadata: AgentMetadata = Field(..., description="Agent metadata for tracking")


class AgentOutput(BaseModel):
    """Collected results from an agent task run."""
    response_text: str = Field(..., description="Summary of what the task produced")
    tool_calls_made: List[str] = Field(default_factory=list, description="Names of tools that were called")
    tool_results: List[ToolResult] = Field(default_factory=list, description="Results from tool executions, in step order")
    step_summaries: List[TaskStepSummary] = Field(default_factory=list, description="Compact per-step status")
    execution_metadata: Dict[str, Any] = Field(default_factory=dict, description="Execution statistics and debugging info")


class AgentResult(BaseModel):
    """Complete result package from agent execution including both output and metadata."""
    input_metadata: AgentMetadata = Field(..., description="Metadata from the input request")
    output: AgentOutput = Field(..., description="Agent's response and results")
    execution_duration_ms: float = Field(..., description="Total execution time in milliseconds")
    success: bool = Field(..., description="Whether every step completed successfully")
    error_details: Optional[str] = Field(None, description="Error information if any step failed")
