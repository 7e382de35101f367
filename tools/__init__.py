"""
Tool Adapters for External Agent Services

This package exposes external services to agents through one adapter
contract: validated named parameters in, a normalized ToolResult out.

Key Components:
- Tool models: parameter schemas, invocations and normalized payloads
- Gateway tool: LLM completions through an observability gateway
- Evaluator tool: scoring outputs on an evaluation platform
- Vector search tool: similarity search in a vector database
- Tool registry: discovery and execution by name
"""

from .tool_models import (
    ToolInvocation,
    ToolParameter,
    ToolParameterType,
    ToolSchema,
)

from .base_adapter import ServiceAdapter
from .gateway_tool import GatewayTool
from .evaluator_tool import EvaluatorTool
from .vector_search_tool import VectorSearchTool
from .tool_registry import tool_registry, ToolRegistry

__all__ = [
    "ToolInvocation",
    "ToolParameter",
    "ToolParameterType",
    "ToolSchema",
    "ServiceAdapter",
    "GatewayTool",
    "EvaluatorTool",
    "VectorSearchTool",
    "ToolRegistry",
    "tool_registry",
]
