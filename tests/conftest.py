from __future__ import annotations

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from src.config import EvaluatorConfig, GatewayConfig, VectorStoreConfig
from tools.evaluator_tool import EvaluatorTool
from tools.gateway_tool import GatewayTool
from tools.tool_registry import ToolRegistry
from tools.vector_search_tool import VectorSearchTool


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)


def json_handler(body: Any, status_code: int = 200, headers: Dict[str, str] | None = None):
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=body, headers=headers)
    return _handler


def completion_body(text: str = "Paris is the capital of France.") -> Dict[str, Any]:
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "model": "gpt-4o-mini-2024-07-18",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": text}, "finish_reason": "stop"}
        ],
        "usage": {"prompt_tokens": 12, "completion_tokens": 8, "total_tokens": 20},
    }


def evaluation_body(*entries: Dict[str, Any]) -> Dict[str, Any]:
    results = []
    for entry in entries:
        results.append({
            "evaluator_id": entry.get("evaluator_id", "lynx-large-2024-07-23"),
            "criteria": entry.get("criteria", "patronus:hallucination"),
            "status": entry.get("status", "success"),
            "error_message": entry.get("error_message"),
            "evaluation_result": {
                "pass": entry.get("pass", True),
                "score_raw": entry.get("score_raw", 0.9),
                "explanation": entry.get("explanation", "Grounded in context."),
            },
        })
    return {"results": results}


@pytest.fixture
def gateway_config() -> GatewayConfig:
    return GatewayConfig(
        base_url="https://gateway.test/v1",
        api_key="pk-test",
        virtual_key="vk-openai",
        default_model="gpt-4o-mini",
        timeout_seconds=5.0,
    )


@pytest.fixture
def evaluator_config() -> EvaluatorConfig:
    return EvaluatorConfig(
        base_url="https://evaluator.test",
        api_key="ev-test",
        pass_threshold=0.5,
        timeout_seconds=5.0,
    )


@pytest.fixture
def vector_config() -> VectorStoreConfig:
    return VectorStoreConfig(
        url="https://vectors.test:6333",
        api_key="qd-test",
        default_collection="knowledge_base",
        default_limit=3,
        timeout_seconds=5.0,
    )


@pytest.fixture
def gateway_transport() -> RecordingTransport:
    return RecordingTransport(json_handler(completion_body(), headers={"x-portkey-cache-status": "MISS"}))


@pytest.fixture
def evaluator_transport() -> RecordingTransport:
    return RecordingTransport(json_handler(evaluation_body({"score_raw": 0.92})))


@pytest.fixture
def mocked_registry(gateway_config, evaluator_config, gateway_transport, evaluator_transport) -> ToolRegistry:
    registry = ToolRegistry(auto_register=False)
    registry.register_tool("gateway_tool", GatewayTool(gateway_config, transport=gateway_transport))
    registry.register_tool("evaluator_tool", EvaluatorTool(evaluator_config, transport=evaluator_transport))
    return registry


@pytest.fixture
def vector_tool_factory(vector_config):
    def _make(handler, embed_fn=None, config=None) -> tuple:
        transport = RecordingTransport(handler)
        tool = VectorSearchTool(config or vector_config, transport=transport, embed_fn=embed_fn)
        return tool, transport
    return _make
