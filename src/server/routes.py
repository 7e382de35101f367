import logging

from fastapi import APIRouter, Depends, HTTPException

from agents.agent_models import AgentResult, ToolResult
from agents.task_agent import new_agent_input, run_task
from src.server.schemas import InvokeToolRequest, TaskRequest, ToolListResponse
from tools.tool_registry import ToolRegistry, tool_registry

logger = logging.getLogger(__name__)
router = APIRouter()


def get_registry() -> ToolRegistry:
    """Dependency returning the tool registry used by the routes."""
    return tool_registry


@router.get("/")
async def root():
    """Root endpoint to check if the API is running."""
    return {"message": "Agent Tool Adapters API is running"}


@router.get("/tools", response_model=ToolListResponse)
async def list_tools(registry: ToolRegistry = Depends(get_registry)):
    """List every registered tool with its parameter schema."""
    infos = [registry.get_tool_info(name) for name in registry.list_tools()]
    return ToolListResponse(tools=infos, total=len(infos))


@router.get("/tools/{tool_name}")
async def get_tool(tool_name: str, registry: ToolRegistry = Depends(get_registry)):
    info = registry.get_tool_info(tool_name)
    if info is None:
        raise HTTPException(status_code=404, detail=f"Tool '{tool_name}' not found")
    return info


@router.post("/tools/{tool_name}/invoke", response_model=ToolResult)
async def invoke_tool(tool_name: str, request: InvokeToolRequest, registry: ToolRegistry = Depends(get_registry)):
    """
    Invoke one tool.

    Tool failures are returned as a ToolResult with status 'error' and HTTP 200;
    only an unknown tool name is an HTTP error.
    """
    if registry.get_tool(tool_name) is None:
        raise HTTPException(status_code=404, detail=f"Tool '{tool_name}' not found")

    logger.info(f"Invoking tool {tool_name} via API")
    return await registry.execute_tool(tool_name, request.parameters, request.timeout)


@router.post("/tasks", response_model=AgentResult)
async def run_tool_task(request: TaskRequest, registry: ToolRegistry = Depends(get_registry)):
    """Run a sequence of tool steps; failing steps are reported, not raised."""
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="Query cannot be empty")

    agent_input = new_agent_input(request.query, request.steps, request.session_id)
    logger.info(f"Running task {agent_input.metadata.execution_id} with {len(request.steps)} steps")
    return await run_task(agent_input, registry)
