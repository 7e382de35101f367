from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from agents.agent_models import ToolStep


class InvokeToolRequest(BaseModel):
    """Request model for invoking a single tool."""
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Named tool parameters")
    timeout: Optional[float] = Field(None, gt=0, description="Optional timeout override in seconds")


class TaskRequest(BaseModel):
    """Request model for running a sequence of tool steps."""
    query: str = Field(..., description="What the task is meant to achieve")
    steps: List[ToolStep] = Field(..., min_length=1, description="Tool steps to run in order")
    session_id: Optional[str] = Field(None, description="Optional session identifier for log correlation")


class ToolListResponse(BaseModel):
    tools: List[Dict[str, Any]]
    total: int
