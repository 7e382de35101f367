# Shared enums and small Pydantic models used across the tool adapter framework.

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ServiceKind(str, Enum):
    """External service families a tool adapter can target."""
    GATEWAY = "gateway"
    EVALUATOR = "evaluator"
    VECTOR_STORE = "vector_store"


class ToolErrorKind(str, Enum):
    """Classification of a failed tool invocation."""
    AUTHENTICATION = "authentication"
    TRANSPORT = "transport"
    VALIDATION = "validation"
    SERVICE = "service"
    INTERNAL = "internal"


class ChatMessage(BaseModel):
    role: str = Field(min_length=1, description="Message role, e.g. 'system', 'user' or 'assistant'")
    content: str = Field(description="Message text")


class UsageMetrics(BaseModel):
    prompt_tokens: int = Field(0, ge=0, description="Tokens consumed by the prompt")
    completion_tokens: int = Field(0, ge=0, description="Tokens produced by the completion")
    total_tokens: int = Field(0, ge=0, description="Total tokens billed for the request")


class DocumentMatch(BaseModel):
    id: str = Field(description="Point identifier in the vector store")
    score: float = Field(description="Similarity score reported by the vector store")
    content: Optional[str] = Field(None, description="Document text taken from the point payload")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Remaining payload fields")


class CriterionEvaluation(BaseModel):
    evaluator: str = Field(description="Evaluator that produced this result")
    criteria: Optional[str] = Field(None, description="Criterion the output was judged against")
    score: float = Field(..., ge=0.0, le=1.0, description="Normalized score in [0, 1]")
    pass_: bool = Field(..., description="Whether the score meets the pass threshold")
    explanation: Optional[str] = Field(None, description="Evaluator explanation, if provided")
    service_pass: Optional[bool] = Field(None, description="Pass flag as reported by the platform")


class TaskStepSummary(BaseModel):
    step_index: int
    tool_name: str
    status: str
    error_kind: Optional[ToolErrorKind] = None
    error_message: Optional[str] = None
