"""
Agent Type Definitions and Tool Adapter Protocol

This module defines the type aliases and protocols that form the contracts
between agents and tool adapters. Any object satisfying ``ToolAdapter`` can be
registered with the tool registry, whether or not it talks HTTP.
"""

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Protocol, Union, runtime_checkable
from typing_extensions import TypeAlias

from .agent_models import AgentInput, AgentResult, ToolExecutionStatus, ToolResult

if TYPE_CHECKING:
    from tools.tool_models import ToolInvocation, ToolSchema


TaskAgentFunction: TypeAlias = Callable[[AgentInput], Awaitable[AgentResult]]
"""
Type alias for agent functions.

- Input: AgentInput containing the task and its planned tool steps
- Output: Awaitable[AgentResult] with every tool result and execution details
"""


@runtime_checkable
class ToolAdapter(Protocol):
    """
    Protocol defining the interface that all tool adapters implement.

    ``invoke`` must return a ToolResult for every call; failures are reported
    through the result's status and error kind instead of exceptions.
    """

    tool_name: str

    @property
    def schema(self) -> "ToolSchema":
        """Return the parameter schema of this tool."""
        ...

    @property
    def state(self) -> ToolExecutionStatus:
        """Return the adapter's current lifecycle state."""
        ...

    def invoke(
        self,
        invocation: Union["ToolInvocation", Dict[str, Any]],
        timeout: Optional[float] = None,
    ) -> ToolResult:
        ...

    async def ainvoke(
        self,
        invocation: Union["ToolInvocation", Dict[str, Any]],
        timeout: Optional[float] = None,
    ) -> ToolResult:
        ...
