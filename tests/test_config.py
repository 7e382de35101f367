import pytest
from pydantic import ValidationError as PydanticValidationError

import src.config as config_module
from src.config import AppSettings, EvaluatorConfig, GatewayConfig, VectorStoreConfig
from src.errors import ConfigurationError
from tools.gateway_tool import GatewayTool


def _settings(**values):
    return AppSettings(_env_file=None, **values)


def test_gateway_config_requires_api_key():
    with pytest.raises(ConfigurationError, match="GATEWAY_API_KEY"):
        GatewayConfig.resolve(_settings(gateway_api_key=None))


def test_evaluator_config_requires_api_key():
    with pytest.raises(ConfigurationError, match="EVALUATOR_API_KEY"):
        EvaluatorConfig.resolve(_settings(evaluator_api_key=None))


def test_vector_store_config_requires_url():
    with pytest.raises(ConfigurationError, match="VECTOR_STORE_URL"):
        VectorStoreConfig.resolve(_settings(vector_store_url=None))


def test_overrides_win_over_settings():
    app_settings = _settings(gateway_api_key="pk-env", gateway_default_model="gpt-4o", tool_timeout_seconds=12)

    config = GatewayConfig.resolve(app_settings, base_url="https://proxy.test/v1/", default_model="mistral-large")

    assert config.api_key == "pk-env"
    assert config.base_url == "https://proxy.test/v1"
    assert config.default_model == "mistral-large"
    assert config.timeout_seconds == 12


def test_vector_config_picks_up_embedding_settings():
    config = VectorStoreConfig.resolve(_settings(
        vector_store_url="http://localhost:6333/",
        vector_store_default_collection="docs",
        embedding_api_key="sk-embed",
    ))

    assert config.url == "http://localhost:6333"
    assert config.default_collection == "docs"
    assert config.embedding_api_key == "sk-embed"


def test_configs_are_immutable_and_hide_secrets():
    config = EvaluatorConfig(base_url="https://evaluator.test", api_key="ev-secret")

    with pytest.raises(PydanticValidationError):
        config.api_key = "other"
    assert "ev-secret" not in repr(config)


def test_invalid_threshold_is_rejected():
    with pytest.raises(PydanticValidationError):
        EvaluatorConfig(base_url="https://evaluator.test", api_key="k", pass_threshold=2)


def test_adapter_construction_fails_without_configuration(monkeypatch):
    monkeypatch.setattr(config_module.settings, "gateway_api_key", None)

    with pytest.raises(ConfigurationError):
        GatewayTool()
    assert GatewayTool(api_key="pk-direct").config.api_key == "pk-direct"
