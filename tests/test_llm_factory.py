from __future__ import annotations

from typing import Any

import pytest

from browser_agent.clients.llm_providers import (
    LLMProvider,
    ModelConfig,
    create_model,
    create_model_from_environment,
    resolve_model_config,
)
from browser_agent.core.errors import ConfigurationError, ConfigurationErrorKind

_ENV_VARS = (
    "LLM_PROVIDER",
    "LLM_MODEL",
    "LLM_TEMPERATURE",
    "LLM_MAX_RETRIES",
    "LLM_MAX_TOKENS",
    "GOOGLE_API_KEY",
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
    "AZURE_OPENAI_API_KEY",
    "AZURE_OPENAI_ENDPOINT",
    "AZURE_OPENAI_DEPLOYMENT_NAME",
    "AZURE_OPENAI_API_VERSION",
)


class FakeModel:
    def __init__(self, *, client_args: dict[str, Any] | None = None, **model_config: Any) -> None:
        self.client_args = client_args or {}
        self.config = model_config

    def get_config(self) -> dict[str, Any]:
        return self.config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_models(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("strands.models.gemini.GeminiModel", FakeModel)
    monkeypatch.setattr("strands.models.anthropic.AnthropicModel", FakeModel)
    monkeypatch.setattr("strands.models.openai.OpenAIModel", FakeModel)


_AZURE_ENV = {
    "AZURE_OPENAI_API_KEY": "azure-key",
    "AZURE_OPENAI_ENDPOINT": "https://example.openai.azure.com",
    "AZURE_OPENAI_DEPLOYMENT_NAME": "gpt4o-prod",
}


@pytest.mark.parametrize(
    ("provider", "environ"),
    [
        ("google-gemini", {"GOOGLE_API_KEY": "g-key"}),
        ("anthropic", {"ANTHROPIC_API_KEY": "a-key"}),
        ("openai", {"OPENAI_API_KEY": "o-key"}),
        ("azure-openai", _AZURE_ENV),
    ],
)
def test_create_model_for_every_provider(
    fake_models: None, provider: str, environ: dict[str, str]
) -> None:
    model = create_model(ModelConfig(provider=provider), environ)

    assert isinstance(model, FakeModel)
    assert model.client_args["api_key"] == next(
        value for name, value in environ.items() if name.endswith("_API_KEY")
    )
    assert model.get_config()["params"]["temperature"] == 0.0


def test_create_model_rejects_unknown_provider(fake_models: None) -> None:
    with pytest.raises(ConfigurationError, match="Unsupported LLM provider 'mistral'") as info:
        create_model(ModelConfig(provider="mistral", api_key="k"), {})

    assert info.value.kind is ConfigurationErrorKind.UNSUPPORTED_PROVIDER


@pytest.mark.parametrize(
    ("provider", "env_var"),
    [
        ("google-gemini", "GOOGLE_API_KEY"),
        ("anthropic", "ANTHROPIC_API_KEY"),
        ("openai", "OPENAI_API_KEY"),
        ("azure-openai", "AZURE_OPENAI_API_KEY"),
    ],
)
def test_missing_credential_names_env_var(provider: str, env_var: str) -> None:
    with pytest.raises(ConfigurationError, match=env_var) as info:
        create_model(ModelConfig(provider=provider), {})

    assert info.value.kind is ConfigurationErrorKind.MISSING_CREDENTIAL
    assert info.value.env_var == env_var


def test_empty_credential_is_treated_as_missing() -> None:
    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
        create_model(ModelConfig(provider="openai", api_key=""), {"OPENAI_API_KEY": ""})


def test_azure_requires_endpoint() -> None:
    environ = {k: v for k, v in _AZURE_ENV.items() if k != "AZURE_OPENAI_ENDPOINT"}

    with pytest.raises(ConfigurationError, match="AZURE_OPENAI_ENDPOINT") as info:
        create_model(ModelConfig(provider="azure-openai"), environ)

    assert info.value.kind is ConfigurationErrorKind.MISSING_ENDPOINT


def test_azure_requires_deployment_name() -> None:
    environ = {k: v for k, v in _AZURE_ENV.items() if k != "AZURE_OPENAI_DEPLOYMENT_NAME"}

    with pytest.raises(ConfigurationError, match="AZURE_OPENAI_DEPLOYMENT_NAME") as info:
        create_model(ModelConfig(provider="azure-openai"), environ)

    assert info.value.kind is ConfigurationErrorKind.MISSING_DEPLOYMENT_NAME


def test_azure_builds_deployment_base_url(fake_models: None) -> None:
    model = create_model(
        ModelConfig(
            provider=LLMProvider.AZURE_OPENAI,
            api_key="azure-key",
            azure_endpoint="https://example.openai.azure.com",
            azure_deployment_name="gpt4o-prod",
        ),
        {},
    )

    assert model.client_args["base_url"] == (
        "https://example.openai.azure.com/openai/deployments/gpt4o-prod"
    )
    assert model.client_args["default_query"] == {"api-version": "2024-02-15-preview"}
    assert model.client_args["default_headers"] == {"api-key": "azure-key"}
    assert model.get_config()["model_id"] == "gpt-4o"


def test_azure_endpoint_trailing_slash_is_dropped(fake_models: None) -> None:
    environ = dict(_AZURE_ENV, AZURE_OPENAI_ENDPOINT="https://example.openai.azure.com/")

    model = create_model(ModelConfig(provider="azure-openai"), environ)

    assert model.client_args["base_url"] == (
        "https://example.openai.azure.com/openai/deployments/gpt4o-prod"
    )


def test_azure_api_version_from_env(fake_models: None) -> None:
    environ = dict(_AZURE_ENV, AZURE_OPENAI_API_VERSION="2024-10-21")

    model = create_model(ModelConfig(provider="azure-openai"), environ)

    assert model.client_args["default_query"] == {"api-version": "2024-10-21"}


def test_default_model_substitution(fake_models: None) -> None:
    model = create_model(ModelConfig(provider="anthropic", api_key="a-key"), {})

    assert model.get_config()["model_id"] == "claude-3-5-sonnet-20241022"
    assert model.get_config()["max_tokens"] == 4096


def test_explicit_api_key_wins_over_env(
    fake_models: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "env-key")

    model = create_model(ModelConfig(provider="google-gemini", api_key="explicit-key"))

    assert model.client_args["api_key"] == "explicit-key"


def test_env_api_key_used_when_not_explicit(
    fake_models: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "env-key")

    model = create_model(ModelConfig(provider="google-gemini"))

    assert model.client_args["api_key"] == "env-key"
    assert model.get_config()["model_id"] == "gemini-2.5-flash"


def test_retries_and_temperature_are_passed_through(fake_models: None) -> None:
    config = ModelConfig(provider="openai", api_key="o-key", temperature=0.7, max_retries=5)

    model = create_model(config, {})

    assert model.client_args["max_retries"] == 5
    assert model.get_config()["params"] == {"temperature": 0.7}


def test_gemini_retry_attempts_include_first_request(fake_models: None) -> None:
    model = create_model(ModelConfig(provider="google-gemini", api_key="g", max_retries=3), {})

    assert model.client_args["http_options"] == {"retry_options": {"attempts": 4}}


def test_resolve_does_not_mutate_input() -> None:
    config = ModelConfig(provider="OpenAI ", api_key="o-key")

    resolved = resolve_model_config(config, {})

    assert resolved.provider is LLMProvider.OPENAI
    assert resolved.model_id == "gpt-4o"
    assert config.model_id is None
    assert config.provider == "OpenAI "


def test_from_environment_defaults_to_gemini_and_requires_key() -> None:
    with pytest.raises(ConfigurationError, match="GOOGLE_API_KEY") as info:
        create_model_from_environment({})

    assert info.value.kind is ConfigurationErrorKind.MISSING_CREDENTIAL


def test_from_environment_reads_llm_settings(fake_models: None) -> None:
    model = create_model_from_environment(
        {
            "LLM_PROVIDER": "openai",
            "LLM_MODEL": "gpt-4.1-mini",
            "LLM_TEMPERATURE": "0.25",
            "LLM_MAX_RETRIES": "4",
            "OPENAI_API_KEY": "o-key",
        }
    )

    assert model.get_config()["model_id"] == "gpt-4.1-mini"
    assert model.get_config()["params"] == {"temperature": 0.25}
    assert model.client_args["max_retries"] == 4


def test_from_environment_picks_up_azure_settings(fake_models: None) -> None:
    model = create_model_from_environment(dict(_AZURE_ENV, LLM_PROVIDER="azure-openai"))

    assert model.client_args["base_url"].endswith("/openai/deployments/gpt4o-prod")


def test_from_environment_rejects_malformed_temperature() -> None:
    with pytest.raises(ConfigurationError, match="LLM_TEMPERATURE") as info:
        create_model_from_environment({"LLM_TEMPERATURE": "abc", "GOOGLE_API_KEY": "g"})

    assert info.value.kind is ConfigurationErrorKind.MALFORMED_VALUE


def test_from_environment_rejects_malformed_retries() -> None:
    with pytest.raises(ConfigurationError, match="LLM_MAX_RETRIES") as info:
        create_model_from_environment({"LLM_MAX_RETRIES": "2.5", "GOOGLE_API_KEY": "g"})

    assert info.value.kind is ConfigurationErrorKind.MALFORMED_VALUE


def test_real_openai_model_keeps_azure_client_args() -> None:
    model = create_model(
        ModelConfig(
            provider="azure-openai",
            api_key="azure-key",
            azure_endpoint="https://example.openai.azure.com",
            azure_deployment_name="gpt4o-prod",
        ),
        {},
    )

    assert model.get_config()["model_id"] == "gpt-4o"
    assert model.client_args["base_url"] == (  # type: ignore[attr-defined]
        "https://example.openai.azure.com/openai/deployments/gpt4o-prod"
    )
