"""
LLM Gateway Tool

Sends chat completion requests through an OpenAI-compatible LLM gateway that
adds routing, caching and observability (Portkey-style ``x-portkey-*``
headers). The tool returns the completion text together with token usage so
agents can account for cost per call.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError as PydanticValidationError

from src.config import GatewayConfig
from src.errors import ServiceError, ValidationError
from src.models import ChatMessage, ServiceKind, UsageMetrics
from src.utils.http_client import ServiceHTTPClient
from tools.base_adapter import ServiceAdapter
from tools.tool_models import (
    GatewayToolOutput,
    ToolParameter,
    ToolParameterType,
    ToolSchema,
)

logger = logging.getLogger(__name__)

HEADER_PREFIX = "x-portkey-"


GATEWAY_TOOL_SCHEMA = ToolSchema(
    tool_name="gateway_tool",
    display_name="LLM Gateway Completion",
    description="""
    Generates text with a large language model routed through the LLM gateway.

    The gateway records every request for observability, can serve cached
    responses and exposes token usage. Supply either a single prompt or a full
    chat message list.
    """,
    version="1.0.0",
    category="llm",
    target_service=ServiceKind.GATEWAY,
    parameters=[
        ToolParameter(
            name="prompt",
            type=ToolParameterType.STRING,
            description="User prompt, sent as a single user message",
            required=False,
            min_length=1
        ),
        ToolParameter(
            name="messages",
            type=ToolParameterType.ARRAY,
            description="Chat messages as objects with 'role' and 'content'",
            required=False,
            min_length=1
        ),
        ToolParameter(
            name="model",
            type=ToolParameterType.STRING,
            description="Model name; defaults to the configured gateway model",
            required=False
        ),
        ToolParameter(
            name="system_prompt",
            type=ToolParameterType.STRING,
            description="Optional system message prepended to the conversation",
            required=False
        ),
        ToolParameter(
            name="temperature",
            type=ToolParameterType.FLOAT,
            description="Sampling temperature",
            required=False,
            min_value=0.0,
            max_value=2.0
        ),
        ToolParameter(
            name="max_tokens",
            type=ToolParameterType.INTEGER,
            description="Upper bound on generated tokens",
            required=False,
            min_value=1
        ),
        ToolParameter(
            name="trace_id",
            type=ToolParameterType.STRING,
            description="Trace identifier used to group gateway logs",
            required=False
        ),
        ToolParameter(
            name="metadata",
            type=ToolParameterType.OBJECT,
            description="Key/value metadata attached to the gateway log entry",
            required=False
        )
    ],
    required_one_of=[["prompt", "messages"]],
    output_schema={
        "type": "object",
        "properties": {
            "completion": {"type": "string", "description": "Generated text"},
            "model": {"type": "string"},
            "finish_reason": {"type": "string"},
            "usage": {
                "type": "object",
                "properties": {
                    "prompt_tokens": {"type": "integer"},
                    "completion_tokens": {"type": "integer"},
                    "total_tokens": {"type": "integer"}
                }
            },
            "trace_id": {"type": "string"},
            "cache_status": {"type": "string"}
        },
        "required": ["completion", "usage"]
    },
    examples=[
        {
            "description": "Single prompt with trace metadata",
            "input": {
                "prompt": "Summarize the quarterly report in two sentences.",
                "trace_id": "crew-run-42",
                "metadata": {"agent": "researcher"}
            }
        }
    ],
    tags=["llm", "completion", "gateway", "observability"]
)


def get_gateway_tool_schema() -> ToolSchema:
    return GATEWAY_TOOL_SCHEMA


class GatewayTool(ServiceAdapter):
    """Tool adapter for chat completions through the LLM gateway."""

    tool_name = "gateway_tool"
    target_service = ServiceKind.GATEWAY

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
        **overrides: Any,
    ):
        super().__init__(config or GatewayConfig.resolve(**overrides), transport)
        self._client = ServiceHTTPClient(
            self.config.base_url,
            headers=self._auth_headers(),
            transport=transport,
            service_name="LLM gateway",
        )
        logger.info(f"Gateway tool configured for {self.config.base_url} (default model: {self.config.default_model})")

    @property
    def schema(self) -> ToolSchema:
        return GATEWAY_TOOL_SCHEMA

    def _auth_headers(self) -> Dict[str, str]:
        headers = {f"{HEADER_PREFIX}api-key": self.config.api_key}
        if self.config.virtual_key:
            headers[f"{HEADER_PREFIX}virtual-key"] = self.config.virtual_key
        if self.config.provider:
            headers[f"{HEADER_PREFIX}provider"] = self.config.provider
        if self.config.config_id:
            headers[f"{HEADER_PREFIX}config"] = self.config.config_id
        return headers

    def _execute(self, parameters: Dict[str, Any], timeout: float) -> Tuple[GatewayToolOutput, Dict[str, Any]]:
        messages = _build_messages(parameters)
        body: Dict[str, Any] = {
            "model": parameters.get("model") or self.config.default_model,
            "messages": messages,
        }
        if parameters.get("temperature") is not None:
            body["temperature"] = parameters["temperature"]
        if parameters.get("max_tokens") is not None:
            body["max_tokens"] = parameters["max_tokens"]

        extra_headers = {}
        if parameters.get("trace_id"):
            extra_headers[f"{HEADER_PREFIX}trace-id"] = parameters["trace_id"]
        if parameters.get("metadata"):
            extra_headers[f"{HEADER_PREFIX}metadata"] = json.dumps(parameters["metadata"])

        logger.info(f"Requesting completion from model {body['model']} ({len(messages)} messages)")
        data, response = self._client.post_json("chat/completions", body, timeout, extra_headers)

        output = _normalize_completion(data)
        output.trace_id = response.headers.get(f"{HEADER_PREFIX}trace-id") or parameters.get("trace_id")
        output.cache_status = response.headers.get(f"{HEADER_PREFIX}cache-status")

        logger.debug(f"Completion usage: {output.usage.total_tokens} tokens")
        return output, {
            "http_status": response.status_code,
            "request_id": data.get("id"),
            "message_count": len(messages),
        }


def _build_messages(parameters: Dict[str, Any]) -> List[Dict[str, str]]:
    if parameters.get("messages") is not None:
        messages = []
        for index, message in enumerate(parameters["messages"]):
            try:
                chat_message = ChatMessage.model_validate(message)
            except PydanticValidationError as e:
                raise ValidationError(f"messages[{index}] must be an object with 'role' and string 'content'") from e
            messages.append(chat_message.model_dump())
    else:
        messages = [{"role": "user", "content": parameters["prompt"]}]

    if parameters.get("system_prompt"):
        messages.insert(0, {"role": "system", "content": parameters["system_prompt"]})
    return messages


def _normalize_completion(data: Dict[str, Any]) -> GatewayToolOutput:
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        raise ServiceError("LLM gateway response contained no completion choices")

    first = choices[0]
    if not isinstance(first, dict):
        raise ServiceError("LLM gateway returned a malformed completion choice")
    message = first.get("message") or {}
    if not isinstance(message, dict):
        raise ServiceError("LLM gateway returned a malformed completion choice")
    content = message.get("content")
    if isinstance(content, list):
        # Multi-part content: keep the text parts
        content = "".join(str(part.get("text") or "") for part in content if isinstance(part, dict))
    if content is None:
        content = first.get("text") or ""

    usage = data.get("usage") or {}
    if not isinstance(usage, dict):
        raise ServiceError("LLM gateway returned a malformed usage block")

    try:
        prompt_tokens = _token_count(usage, "prompt_tokens", 0)
        completion_tokens = _token_count(usage, "completion_tokens", 0)
        return GatewayToolOutput(
            completion=content,
            model=data.get("model"),
            finish_reason=first.get("finish_reason"),
            usage=UsageMetrics(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=_token_count(usage, "total_tokens", prompt_tokens + completion_tokens),
            ),
        )
    except PydanticValidationError as e:
        raise ServiceError(f"LLM gateway returned a malformed completion: {e}") from e


def _token_count(usage: Dict[str, Any], key: str, default: int) -> int:
    value = usage.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ServiceError(f"LLM gateway usage field '{key}' is not a number")
    return int(value)
