"""
Agent Framework for Tool-Driven Tasks

This package holds the models shared by agents and tools, plus a sequential
task runner (``agents.task_agent``) that drives tool adapters on behalf of an
agent and keeps going when a tool reports an error.

Core Components:
- ToolResult: the value every tool invocation produces
- Agent models: task input, per-step summaries and results
- Task agent: runs planned tool steps through the tool registry
"""

from .agent_models import (
    AgentInput,
    AgentMetadata,
    AgentOutput,
    AgentResult,
    ToolExecutionStatus,
    ToolResult,
    ToolResultStatus,
    ToolStep,
)

__all__ = [
    "AgentInput",
    "AgentMetadata",
    "AgentOutput",
    "AgentResult",
    "ToolExecutionStatus",
    "ToolResult",
    "ToolResultStatus",
    "ToolStep",
]
