"""
Tool Data Models for the Standardized Tool Adapter Interface

This module defines the Pydantic models that keep every tool adapter on the
same contract: parameter schemas, the invocation request, and the normalized
payloads each external service is reduced to.

Key Design Principles:
- One schema format for every adapter
- Parameter validation happens before any network call
- Service responses are normalized into typed payloads
"""

import uuid
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from enum import Enum

from src.models import (
    CriterionEvaluation,
    DocumentMatch,
    ServiceKind,
    UsageMetrics,
)


class ToolParameterType(str, Enum):
    """Enumeration of supported tool parameter types."""
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


_JSON_SCHEMA_TYPES = {
    ToolParameterType.STRING: "string",
    ToolParameterType.INTEGER: "integer",
    ToolParameterType.FLOAT: "number",
    ToolParameterType.BOOLEAN: "boolean",
    ToolParameterType.ARRAY: "array",
    ToolParameterType.OBJECT: "object",
}


class ToolParameter(BaseModel):
    """
    Definition of a tool parameter including type, validation, and documentation.

    Adapters declare their inputs with these so that invocations can be
    validated uniformly and schemas can be exposed to agents.
    """
    name: str = Field(..., description="Parameter name")
    type: ToolParameterType = Field(..., description="Parameter data type")
    description: str = Field(..., description="Human-readable description of the parameter")
    required: bool = Field(True, description="Whether this parameter is required")
    default_value: Optional[Any] = Field(None, description="Default value if parameter is optional")
    allowed_values: Optional[List[Any]] = Field(None, description="List of allowed values (enum-style)")
    min_value: Optional[Union[int, float]] = Field(None, description="Minimum value for numeric types")
    max_value: Optional[Union[int, float]] = Field(None, description="Maximum value for numeric types")
    min_length: Optional[int] = Field(None, description="Minimum length for string/array types")
    max_length: Optional[int] = Field(None, description="Maximum length for string/array types")

    def validate_value(self, value: Any) -> Optional[str]:
        """Return an error message if ``value`` violates this parameter, else None."""
        type_error = _check_type(self.type, value)
        if type_error:
            return type_error

        if self.allowed_values and value not in self.allowed_values:
            return f"Value must be one of {self.allowed_values}, got '{value}'"

        if self.type in (ToolParameterType.INTEGER, ToolParameterType.FLOAT):
            if self.min_value is not None and value < self.min_value:
                return f"Value {value} is below the minimum of {self.min_value}"
            if self.max_value is not None and value > self.max_value:
                return f"Value {value} is above the maximum of {self.max_value}"

        if self.type in (ToolParameterType.STRING, ToolParameterType.ARRAY):
            if self.min_length is not None and len(value) < self.min_length:
                return f"Length {len(value)} is below the minimum of {self.min_length}"
            if self.max_length is not None and len(value) > self.max_length:
                return f"Length {len(value)} is above the maximum of {self.max_length}"

        return None


def _check_type(param_type: ToolParameterType, value: Any) -> Optional[str]:
    if param_type == ToolParameterType.STRING:
        ok = isinstance(value, str)
    elif param_type == ToolParameterType.INTEGER:
        ok = isinstance(value, int) and not isinstance(value, bool)
    elif param_type == ToolParameterType.FLOAT:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    elif param_type == ToolParameterType.BOOLEAN:
        ok = isinstance(value, bool)
    elif param_type == ToolParameterType.ARRAY:
        ok = isinstance(value, (list, tuple))
    else:
        ok = isinstance(value, dict)

    if ok:
        return None
    return f"Expected {param_type.value}, got {type(value).__name__}"


class ToolSchema(BaseModel):
    """
    Complete schema definition for a tool including metadata and parameters.

    This model serves as the contract that defines what a tool does and how
    to interact with it, enabling tool discovery and validation.
    """
    tool_name: str = Field(..., description="Unique identifier for the tool")
    display_name: str = Field(..., description="Human-readable name for the tool")
    description: str = Field(..., description="Detailed description of tool functionality")
    version: str = Field("1.0.0", description="Tool version for compatibility tracking")
    category: str = Field("general", description="Tool category (e.g., 'llm', 'evaluation', 'search')")
    target_service: ServiceKind = Field(..., description="External service family the tool calls")
    parameters: List[ToolParameter] = Field(default_factory=list, description="List of tool parameters")
    required_one_of: List[List[str]] = Field(
        default_factory=list,
        description="Groups of parameters where exactly one member must be supplied",
    )
    output_schema: Dict[str, Any] = Field(default_factory=dict, description="JSON schema for tool output")
    examples: List[Dict[str, Any]] = Field(default_factory=list, description="Example usage scenarios")
    tags: List[str] = Field(default_factory=list, description="Tags for tool discovery and categorization")

    def get_parameter(self, name: str) -> Optional[ToolParameter]:
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    def get_parameter_schema(self) -> Dict[str, Any]:
        """Generate JSON schema for tool parameters."""
        schema = {
            "type": "object",
            "properties": {},
            "required": []
        }

        for param in self.parameters:
            param_schema = {"type": _JSON_SCHEMA_TYPES[param.type], "description": param.description}

            if param.allowed_values:
                param_schema["enum"] = param.allowed_values
            if param.min_value is not None:
                param_schema["minimum"] = param.min_value
            if param.max_value is not None:
                param_schema["maximum"] = param.max_value
            if param.min_length is not None:
                key = "minItems" if param.type == ToolParameterType.ARRAY else "minLength"
                param_schema[key] = param.min_length
            if param.max_length is not None:
                key = "maxItems" if param.type == ToolParameterType.ARRAY else "maxLength"
                param_schema[key] = param.max_length
            if param.default_value is not None:
                param_schema["default"] = param.default_value

            schema["properties"][param.name] = param_schema

            if param.required:
                schema["required"].append(param.name)

        if self.required_one_of:
            schema["allOf"] = [
                {"oneOf": [{"required": [name]} for name in group]}
                for group in self.required_one_of
            ]

        return schema

    def validate_parameters(self, parameters: Dict[str, Any]) -> Dict[str, str]:
        """
        Validate parameters against this schema.

        Args:
            parameters: Parameters supplied by the caller

        Returns:
            Dictionary of parameter name to error message (empty if valid)
        """
        errors: Dict[str, str] = {}

        for param in self.parameters:
            if param.name not in parameters or parameters[param.name] is None:
                if param.required:
                    errors[param.name] = f"Required parameter '{param.name}' is missing"
                continue
            param_error = param.validate_value(parameters[param.name])
            if param_error:
                errors[param.name] = param_error

        for group in self.required_one_of:
            supplied = [name for name in group if parameters.get(name) is not None]
            if len(supplied) != 1:
                key = "|".join(group)
                if not supplied:
                    errors[key] = f"One of {group} is required"
                else:
                    errors[key] = f"Only one of {group} may be supplied, got {supplied}"

        return errors


class ToolInvocation(BaseModel):
    """
    A single request to a tool adapter.

    ``request_payload`` carries the service-specific named parameters;
    ``timeout`` overrides the adapter's configured default when set.
    """
    model_config = ConfigDict(frozen=True)

    target_service: ServiceKind = Field(..., description="Service family the request is meant for")
    request_payload: Dict[str, Any] = Field(default_factory=dict, description="Named tool parameters")
    timeout: Optional[float] = Field(None, gt=0, description="Request timeout in seconds")
    invocation_id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Identifier for logs")


# Normalized payloads, one per service family
class GatewayToolOutput(BaseModel):
    """Completion returned through the LLM gateway."""
    completion: str = Field(..., description="Text of the first completion choice")
    model: Optional[str] = Field(None, description="Model that served the request")
    finish_reason: Optional[str] = Field(None, description="Why generation stopped")
    usage: UsageMetrics = Field(default_factory=UsageMetrics, description="Token usage metrics")
    trace_id: Optional[str] = Field(None, description="Gateway trace identifier")
    cache_status: Optional[str] = Field(None, description="Gateway cache status header, if present")


class EvaluatorToolOutput(BaseModel):
    """Aggregated verdict from the evaluation platform."""
    score: float = Field(..., ge=0.0, le=1.0, description="Lowest normalized score across criteria")
    pass_: bool = Field(..., description="True when every criterion passed")
    explanation: Optional[str] = Field(None, description="Explanations joined across criteria")
    threshold: float = Field(..., ge=0.0, le=1.0, description="Pass threshold that was applied")
    results: List[CriterionEvaluation] = Field(default_factory=list, description="Per-criterion results")


class VectorSearchToolOutput(BaseModel):
    """Ranked documents returned from the vector store."""
    collection: str = Field(..., description="Collection that was searched")
    matches: List[DocumentMatch] = Field(default_factory=list, description="Matches ordered by descending score")
