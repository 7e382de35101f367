"""
Vector Search Tool - Similarity Search over an External Vector Database

Runs a nearest-neighbour search against a Qdrant-style REST API and returns
the matched documents ranked by similarity. Text queries are embedded first;
callers that already hold an embedding can pass it directly.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx

from src.config import VectorStoreConfig
from src.errors import ServiceError, ValidationError
from src.models import DocumentMatch, ServiceKind
from src.utils.embeddings import EmbedFunction, build_query_embedder
from src.utils.http_client import ServiceHTTPClient
from tools.base_adapter import ServiceAdapter
from tools.tool_models import (
    ToolParameter,
    ToolParameterType,
    ToolSchema,
    VectorSearchToolOutput,
)

logger = logging.getLogger(__name__)


def get_vector_search_tool_schema(default_limit: int = 3) -> ToolSchema:
    """
    Get the schema definition for the vector search tool.

    Args:
        default_limit: Result limit applied when the caller omits ``limit``

    Returns:
        ToolSchema containing complete tool definition and parameter specifications
    """
    return ToolSchema(
        tool_name="vector_search_tool",
        display_name="Vector Database Search",
        description="""
        Semantic similarity search over a vector database collection.

        Best used for: finding passages related to a question, grounding answers
        in stored documents, and retrieving context for evaluation.
        """,
        version="1.0.0",
        category="search",
        target_service=ServiceKind.VECTOR_STORE,
        parameters=[
            ToolParameter(
                name="query",
                type=ToolParameterType.STRING,
                description="Natural-language query, embedded before searching",
                required=False,
                min_length=1
            ),
            ToolParameter(
                name="query_vector",
                type=ToolParameterType.ARRAY,
                description="Pre-computed query embedding",
                required=False,
                min_length=1
            ),
            ToolParameter(
                name="collection",
                type=ToolParameterType.STRING,
                description="Collection to search; defaults to the configured collection",
                required=False,
                min_length=1
            ),
            ToolParameter(
                name="limit",
                type=ToolParameterType.INTEGER,
                description="Maximum number of documents to return",
                required=False,
                default_value=default_limit,
                min_value=1,
                max_value=100
            ),
            ToolParameter(
                name="score_threshold",
                type=ToolParameterType.FLOAT,
                description="Drop matches scoring below this value",
                required=False
            ),
            ToolParameter(
                name="filter",
                type=ToolParameterType.OBJECT,
                description="Payload filter passed through to the vector database",
                required=False
            )
        ],
        required_one_of=[["query", "query_vector"]],
        output_schema={
            "type": "object",
            "properties": {
                "collection": {"type": "string"},
                "matches": {
                    "type": "array",
                    "description": "Documents ordered by descending similarity",
                    "items": {
                        "type": "object",
                        "properties": {
                            "id": {"type": "string"},
                            "score": {"type": "number"},
                            "content": {"type": "string"},
                            "metadata": {"type": "object"}
                        }
                    }
                }
            },
            "required": ["collection", "matches"]
        },
        tags=["retrieval", "search", "vectors", "documents", "similarity"],
        examples=[
            {
                "description": "Text search in a named collection",
                "input": {
                    "query": "How is customer churn defined?",
                    "collection": "knowledge_base",
                    "limit": 5
                },
                "expected_output": "Up to five passages with similarity scores"
            }
        ]
    )


class VectorSearchTool(ServiceAdapter):
    """Tool adapter for similarity search in the vector database."""

    tool_name = "vector_search_tool"
    target_service = ServiceKind.VECTOR_STORE

    def __init__(
        self,
        config: Optional[VectorStoreConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
        embed_fn: Optional[EmbedFunction] = None,
        **overrides: Any,
    ):
        super().__init__(config or VectorStoreConfig.resolve(**overrides), transport)
        self._schema = get_vector_search_tool_schema(self.config.default_limit)
        if embed_fn is None and self.config.embedding_api_key:
            embed_fn = build_query_embedder(self.config)
        self._embed_fn = embed_fn
        headers = {"Accept": "application/json"}
        if self.config.api_key:
            headers["api-key"] = self.config.api_key
        self._client = ServiceHTTPClient(
            self.config.url,
            headers=headers,
            transport=transport,
            service_name="vector database",
        )

    @property
    def schema(self) -> ToolSchema:
        return self._schema

    def _execute(self, parameters: Dict[str, Any], timeout: float) -> Tuple[VectorSearchToolOutput, Dict[str, Any]]:
        collection = parameters.get("collection") or self.config.default_collection
        if not collection:
            raise ValidationError("'collection' parameter is required (no default collection configured)")
        collection_path = _collection_path(collection)

        embedded = parameters.get("query_vector") is None
        vector = self._embed(parameters["query"]) if embedded else _as_vector(parameters["query_vector"])

        body: Dict[str, Any] = {
            "vector": vector,
            "limit": parameters["limit"],
            "with_payload": True,
        }
        if parameters.get("score_threshold") is not None:
            body["score_threshold"] = parameters["score_threshold"]
        if parameters.get("filter"):
            body["filter"] = parameters["filter"]

        logger.info(f"Searching collection '{collection}' (limit {body['limit']}, dim {len(vector)})")
        try:
            data, response = self._client.post_json(f"{collection_path}/points/search", body, timeout)
        except ServiceError as e:
            if e.status_code == 404:
                raise ServiceError(f"Collection '{collection}' was not found", status_code=404) from e
            raise

        matches = normalize_matches(data, self.config.content_field)
        logger.info(f"Vector search returned {len(matches)} matches")

        return VectorSearchToolOutput(collection=collection, matches=matches), {
            "http_status": response.status_code,
            "collection": collection,
            "match_count": len(matches),
            "query_embedded": embedded,
            "search_time_s": data.get("time"),
        }

    def _embed(self, text: str) -> List[float]:
        if self._embed_fn is None:
            raise ValidationError(
                "Text queries need an embedding API key (EMBEDDING_API_KEY); "
                "pass query_vector or configure embeddings"
            )
        return _as_vector(self._embed_fn(text))


def _collection_path(collection: str) -> str:
    if collection in (".", "..") or any(c in collection for c in "/\\?#"):
        raise ValidationError(f"Invalid collection name '{collection}'")
    return f"collections/{quote(collection, safe='')}"


def _as_vector(values: Any) -> List[float]:
    vector = list(values)
    if not vector or not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in vector):
        raise ValidationError("'query_vector' must be a non-empty list of numbers")
    return [float(v) for v in vector]


def normalize_matches(data: Dict[str, Any], content_field: str = "text") -> List[DocumentMatch]:
    """
    Convert search hits into DocumentMatch objects ordered by descending score.

    Raises:
        ServiceError: If the body does not carry a list of well-formed hits
    """
    hits = data.get("result")
    if isinstance(hits, dict):
        # Query API wraps hits as {"points": [...]}
        hits = hits.get("points")
    if not isinstance(hits, list):
        raise ServiceError("Vector database response did not contain a result list")

    matches = []
    for hit in hits:
        if not isinstance(hit, dict) or hit.get("id") is None:
            raise ServiceError("Vector database returned a malformed hit")
        raw_payload = hit.get("payload") or {}
        score = hit.get("score") or 0.0
        if not isinstance(raw_payload, dict):
            raise ServiceError(f"Vector database hit {hit['id']} has a non-object payload")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise ServiceError(f"Vector database hit {hit['id']} has a non-numeric score")
        payload = dict(raw_payload)
        content = payload.pop(content_field, None)
        matches.append(DocumentMatch(
            id=str(hit["id"]),
            score=float(score),
            content=content if content is None else str(content),
            metadata=payload,
        ))

    matches.sort(key=lambda m: m.score, reverse=True)
    return matches
