"""Query embedding for text searches against the vector store."""

import logging
from typing import Callable, List

import openai
from llama_index.embeddings.openai import OpenAIEmbedding

from src.config import VectorStoreConfig
from src.errors import AuthenticationError, ConfigurationError, ServiceError, TransportError

logger = logging.getLogger(__name__)

EmbedFunction = Callable[[str], List[float]]


def build_query_embedder(config: VectorStoreConfig) -> EmbedFunction:
    """
    Create the default text-to-vector function for a vector search adapter.

    Uses LlamaIndex's OpenAI embedding client. ``embedding_api_base`` lets the
    call go through an OpenAI-compatible proxy such as the LLM gateway.
    Client errors are re-raised as adapter error types.

    Raises:
        ConfigurationError: If no embedding API key is configured
    """
    if not config.embedding_api_key:
        raise ConfigurationError(
            "Text queries need an embedding API key (EMBEDDING_API_KEY); "
            "pass query_vector or configure embeddings"
        )

    kwargs = {
        "model": config.embedding_model_name,
        "api_key": config.embedding_api_key,
        "timeout": config.timeout_seconds,
    }
    if config.embedding_api_base:
        kwargs["api_base"] = config.embedding_api_base

    embed_model = OpenAIEmbedding(**kwargs)
    logger.info(f"Configured query embedder with model: {config.embedding_model_name}")

    def embed(text: str) -> List[float]:
        try:
            return embed_model.get_query_embedding(text)
        except (openai.APITimeoutError, openai.APIConnectionError) as e:
            raise TransportError(f"Embedding request failed: {e}") from e
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            raise AuthenticationError(f"Embedding service rejected credentials: {e}", status_code=e.status_code) from e
        except openai.APIError as e:
            raise ServiceError(f"Embedding service error: {e}") from e

    return embed
