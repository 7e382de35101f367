# Configuration settings for the tool adapters and the services they call.

from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()

# Project root directory - this file lives in <root>/src/
ROOT_DIR = Path(__file__).resolve().parent.parent


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ROOT_DIR / ".env", env_file_encoding='utf-8', extra='ignore')

    # LLM gateway (OpenAI-compatible proxy with observability headers)
    gateway_base_url: str = "https://api.portkey.ai/v1"
    gateway_api_key: Optional[str] = None
    gateway_virtual_key: Optional[str] = None
    gateway_provider: Optional[str] = None
    gateway_config_id: Optional[str] = None
    gateway_default_model: str = "gpt-4o-mini"

    # Evaluation platform
    evaluator_base_url: str = "https://api.patronus.ai"
    evaluator_api_key: Optional[str] = None
    evaluator_pass_threshold: float = 0.5
    evaluator_capture: str = "all"  # all, fails-only, none

    # Vector database
    vector_store_url: Optional[str] = None
    vector_store_api_key: Optional[str] = None
    vector_store_default_collection: Optional[str] = None
    vector_store_default_limit: int = 3
    vector_store_content_field: str = "text"

    # Embeddings for text queries against the vector store
    embedding_model_name: str = "text-embedding-3-small"
    embedding_api_base: Optional[str] = None
    embedding_api_key: Optional[str] = None

    # Per-invocation timeout applied when the caller does not pass one
    tool_timeout_seconds: float = 30.0

    log_level: str = "INFO"

    # API server
    api_host: str = "0.0.0.0"
    api_port: int = 8000


settings = AppSettings()


def _pick(overrides: Dict[str, Any], key: str, fallback: Any) -> Any:
    value = overrides.get(key)
    return fallback if value is None else value


class GatewayConfig(BaseModel):
    """Immutable connection settings for the LLM gateway adapter."""
    model_config = ConfigDict(frozen=True)

    base_url: str
    api_key: str = Field(repr=False)
    virtual_key: Optional[str] = Field(None, repr=False)
    provider: Optional[str] = None
    config_id: Optional[str] = None
    default_model: str = "gpt-4o-mini"
    timeout_seconds: float = Field(30.0, gt=0)

    @classmethod
    def resolve(cls, app_settings: Optional[AppSettings] = None, **overrides: Any) -> "GatewayConfig":
        """Build from constructor overrides, falling back to application settings."""
        s = app_settings or settings
        api_key = _pick(overrides, "api_key", s.gateway_api_key)
        base_url = _pick(overrides, "base_url", s.gateway_base_url)
        if not api_key:
            raise ConfigurationError("LLM gateway API key is not configured (GATEWAY_API_KEY)")
        if not base_url:
            raise ConfigurationError("LLM gateway base URL is not configured (GATEWAY_BASE_URL)")
        return cls(
            base_url=base_url.rstrip("/"),
            api_key=api_key,
            virtual_key=_pick(overrides, "virtual_key", s.gateway_virtual_key),
            provider=_pick(overrides, "provider", s.gateway_provider),
            config_id=_pick(overrides, "config_id", s.gateway_config_id),
            default_model=_pick(overrides, "default_model", s.gateway_default_model),
            timeout_seconds=_pick(overrides, "timeout_seconds", s.tool_timeout_seconds),
        )


class EvaluatorConfig(BaseModel):
    """Immutable connection settings for the evaluation platform adapter."""
    model_config = ConfigDict(frozen=True)

    base_url: str
    api_key: str = Field(repr=False)
    pass_threshold: float = Field(0.5, ge=0.0, le=1.0)
    capture: str = "all"
    timeout_seconds: float = Field(30.0, gt=0)

    @classmethod
    def resolve(cls, app_settings: Optional[AppSettings] = None, **overrides: Any) -> "EvaluatorConfig":
        s = app_settings or settings
        api_key = _pick(overrides, "api_key", s.evaluator_api_key)
        base_url = _pick(overrides, "base_url", s.evaluator_base_url)
        if not api_key:
            raise ConfigurationError("Evaluation platform API key is not configured (EVALUATOR_API_KEY)")
        if not base_url:
            raise ConfigurationError("Evaluation platform base URL is not configured (EVALUATOR_BASE_URL)")
        return cls(
            base_url=base_url.rstrip("/"),
            api_key=api_key,
            pass_threshold=_pick(overrides, "pass_threshold", s.evaluator_pass_threshold),
            capture=_pick(overrides, "capture", s.evaluator_capture),
            timeout_seconds=_pick(overrides, "timeout_seconds", s.tool_timeout_seconds),
        )


class VectorStoreConfig(BaseModel):
    """Immutable connection settings for the vector search adapter."""
    model_config = ConfigDict(frozen=True)

    url: str
    api_key: Optional[str] = Field(None, repr=False)
    default_collection: Optional[str] = None
    default_limit: int = Field(3, ge=1, le=100)
    content_field: str = "text"
    embedding_model_name: str = "text-embedding-3-small"
    embedding_api_base: Optional[str] = None
    embedding_api_key: Optional[str] = Field(None, repr=False)
    timeout_seconds: float = Field(30.0, gt=0)

    @classmethod
    def resolve(cls, app_settings: Optional[AppSettings] = None, **overrides: Any) -> "VectorStoreConfig":
        s = app_settings or settings
        url = _pick(overrides, "url", s.vector_store_url)
        if not url:
            raise ConfigurationError("Vector store URL is not configured (VECTOR_STORE_URL)")
        return cls(
            url=url.rstrip("/"),
            api_key=_pick(overrides, "api_key", s.vector_store_api_key),
            default_collection=_pick(overrides, "default_collection", s.vector_store_default_collection),
            default_limit=_pick(overrides, "default_limit", s.vector_store_default_limit),
            content_field=_pick(overrides, "content_field", s.vector_store_content_field),
            embedding_model_name=_pick(overrides, "embedding_model_name", s.embedding_model_name),
            embedding_api_base=_pick(overrides, "embedding_api_base", s.embedding_api_base),
            embedding_api_key=_pick(overrides, "embedding_api_key", s.embedding_api_key),
            timeout_seconds=_pick(overrides, "timeout_seconds", s.tool_timeout_seconds),
        )
