"""
Tool Registry for Agent Tool Adapters

This module provides a centralized registry for managing and discovering the
tool adapters available to agents. Core adapters are built from application
settings on first access; adapters for services without credentials are
skipped so the rest stay usable.

Key Features:
- Centralized adapter management
- Schema validation and documentation
- Tool discovery and categorization
- Runtime tool registration
"""

import logging
from typing import Any, Dict, List, Optional

from agents.agent_models import ToolResult
from agents.agent_types import ToolAdapter
from src.errors import ConfigurationError
from tools.tool_models import ToolSchema

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Central registry for managing tool adapters available to agents.

    It maintains adapters and their schemas, validates parameters, and
    provides introspection capabilities.
    """

    def __init__(self, auto_register: bool = True):
        """
        Initialize the tool registry.

        Args:
            auto_register: Build the core adapters from settings on first access
        """
        self._tools: Dict[str, ToolAdapter] = {}
        self._schemas: Dict[str, ToolSchema] = {}
        self._categories: Dict[str, List[str]] = {}
        self._core_tools_registered = not auto_register

        logger.info("Tool registry initialized - core tools will be registered on first access")

    def _ensure_core_tools_registered(self) -> None:
        """Register the core adapters whose services are configured."""
        if self._core_tools_registered:
            return
        self._core_tools_registered = True

        # Import here to avoid circular imports
        from tools.evaluator_tool import EvaluatorTool
        from tools.gateway_tool import GatewayTool
        from tools.vector_search_tool import VectorSearchTool

        registered = []
        for adapter_cls in (GatewayTool, EvaluatorTool, VectorSearchTool):
            if adapter_cls.tool_name in self._tools:
                continue
            try:
                adapter = adapter_cls()
            except ConfigurationError as e:
                logger.warning(f"Skipping {adapter_cls.tool_name}: {e}")
                continue
            self.register_tool(adapter_cls.tool_name, adapter)
            registered.append(adapter_cls.tool_name)

        logger.info(f"Core tools registered: {', '.join(registered) or 'none'}")

    def register_tool(self, name: str, adapter: ToolAdapter) -> None:
        """
        Register a new tool adapter with the registry.

        Args:
            name: Unique identifier for the tool
            adapter: Adapter instance implementing the tool

        Raises:
            TypeError: If the object does not implement the ToolAdapter protocol
            ValueError: If tool name already exists or schema is invalid
        """
        if not isinstance(adapter, ToolAdapter):
            raise TypeError(f"Tool '{name}' must implement the ToolAdapter protocol")

        if name in self._tools:
            raise ValueError(f"Tool '{name}' is already registered")

        schema = adapter.schema
        if not schema.tool_name:
            raise ValueError("Tool schema must have a tool_name")

        if schema.tool_name != name:
            logger.warning(f"Tool name mismatch: registry='{name}', schema='{schema.tool_name}'")

        self._tools[name] = adapter
        self._schemas[name] = schema

        category = schema.category
        if category not in self._categories:
            self._categories[category] = []
        self._categories[category].append(name)

        logger.info(f"Registered tool: {name} (category: {category})")

    def unregister_tool(self, name: str) -> bool:
        """
        Unregister a tool from the registry.

        Returns:
            True if tool was removed, False if not found
        """
        if name not in self._tools:
            return False

        category = self._schemas[name].category

        del self._tools[name]
        del self._schemas[name]

        if category in self._categories:
            self._categories[category] = [t for t in self._categories[category] if t != name]
            if not self._categories[category]:
                del self._categories[category]

        logger.info(f"Unregistered tool: {name}")
        return True

    def get_tool(self, name: str) -> Optional[ToolAdapter]:
        self._ensure_core_tools_registered()
        return self._tools.get(name)

    def get_schema(self, name: str) -> Optional[ToolSchema]:
        self._ensure_core_tools_registered()
        return self._schemas.get(name)

    def list_tools(self) -> List[str]:
        self._ensure_core_tools_registered()
        return list(self._tools.keys())

    def list_categories(self) -> List[str]:
        self._ensure_core_tools_registered()
        return list(self._categories.keys())

    def get_tools_by_category(self, category: str) -> List[str]:
        self._ensure_core_tools_registered()
        return list(self._categories.get(category, []))

    def search_tools(self, query: str) -> List[str]:
        """
        Search for tools by name, description, or tags.

        Args:
            query: Search query string

        Returns:
            List of matching tool names
        """
        self._ensure_core_tools_registered()
        query_lower = query.lower()
        matches = []

        for name, schema in self._schemas.items():
            if query_lower in name.lower():
                matches.append(name)
                continue

            if (query_lower in schema.display_name.lower() or
                    query_lower in schema.description.lower()):
                matches.append(name)
                continue

            if any(query_lower in tag.lower() for tag in schema.tags):
                matches.append(name)

        return matches

    def invoke_tool(self, tool_name: str, parameters: Dict[str, Any], timeout: Optional[float] = None) -> ToolResult:
        """
        Execute a tool synchronously.

        Raises:
            ValueError: If the tool is not registered
        """
        return self._require(tool_name).invoke(parameters, timeout)

    async def execute_tool(
        self,
        tool_name: str,
        parameters: Dict[str, Any],
        timeout: Optional[float] = None
    ) -> ToolResult:
        """
        Execute a tool with given parameters.

        Parameter validation happens inside the adapter, so invalid parameters
        come back as a validation error result rather than an exception.

        Args:
            tool_name: Name of the tool to execute
            parameters: Parameters to pass to the tool
            timeout: Optional timeout override in seconds

        Returns:
            ToolResult containing execution results

        Raises:
            ValueError: If tool is not found
        """
        adapter = self._require(tool_name)

        logger.debug(f"Executing tool '{tool_name}'")
        result = await adapter.ainvoke(parameters, timeout)
        logger.debug(f"Tool '{tool_name}' execution completed with status: {result.status.value}")

        return result

    def _require(self, tool_name: str) -> ToolAdapter:
        self._ensure_core_tools_registered()
        adapter = self._tools.get(tool_name)
        if adapter is None:
            available_tools = list(self._tools.keys())
            raise ValueError(f"Tool '{tool_name}' not found. Available tools: {available_tools}")
        return adapter

    def validate_parameters(self, tool_name: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate tool parameters against the tool's schema.

        Returns:
            Dictionary of validation errors (empty if valid)
        """
        self._ensure_core_tools_registered()

        schema = self._schemas.get(tool_name)
        if not schema:
            return {"schema": f"No schema found for tool '{tool_name}'"}

        return schema.validate_parameters(parameters)

    def get_tool_info(self, name: str) -> Optional[Dict[str, Any]]:
        """
        Get comprehensive information about a tool.

        Returns:
            Dictionary with tool information, None if not found
        """
        schema = self.get_schema(name)
        if not schema:
            return None

        adapter = self._tools[name]
        return {
            "name": schema.tool_name,
            "display_name": schema.display_name,
            "description": " ".join(schema.description.split()),
            "version": schema.version,
            "category": schema.category,
            "target_service": schema.target_service.value,
            "state": adapter.state.value,
            "parameter_count": len(schema.parameters),
            "required_parameters": [p.name for p in schema.parameters if p.required],
            "optional_parameters": [p.name for p in schema.parameters if not p.required],
            "required_one_of": schema.required_one_of,
            "tags": schema.tags,
            "parameter_schema": schema.get_parameter_schema()
        }

    def get_registry_stats(self) -> Dict[str, Any]:
        self._ensure_core_tools_registered()
        return {
            "total_tools": len(self._tools),
            "categories": len(self._categories),
            "tools_by_category": {cat: len(tools) for cat, tools in self._categories.items()},
            "all_tools": list(self._tools.keys())
        }


# Global tool registry instance
tool_registry = ToolRegistry()


def get_available_tools() -> List[str]:
    return tool_registry.list_tools()


def find_tools_for_task(task_description: str) -> List[str]:
    """
    Find tools suitable for a given task description.

    Args:
        task_description: Description of the task

    Returns:
        List of tool names that might be suitable
    """
    return tool_registry.search_tools(task_description)
