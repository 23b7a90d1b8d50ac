"""Base types and protocols for LLM providers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from browser_agent.core.errors import ConfigurationError, ConfigurationErrorKind


class LLMProvider(str, Enum):
    """Supported LLM provider types."""

    GOOGLE_GEMINI = "google-gemini"
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    AZURE_OPENAI = "azure-openai"

    @classmethod
    def from_string(cls, value: str) -> LLMProvider:
        """Convert string to LLMProvider enum.

        Args:
            value: Provider name (case-insensitive).

        Returns:
            LLMProvider enum value.

        Raises:
            ConfigurationError: If provider is not supported.
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).lower().strip()
        for provider in cls:
            if provider.value == normalized:
                return provider
        supported = ", ".join(p.value for p in cls)
        raise ConfigurationError(
            ConfigurationErrorKind.UNSUPPORTED_PROVIDER,
            f"Unsupported LLM provider '{value}'. Supported: {supported}",
            field="provider",
            env_var="LLM_PROVIDER",
        )


@dataclass(frozen=True)
class ModelConfig:
    """Configuration for an LLM model.

    Optional fields left as ``None`` are resolved from the environment and
    then from built-in defaults when the model is created.

    Attributes:
        provider: The LLM provider, or its name.
        model_id: The specific model identifier.
        temperature: Sampling temperature passed to the model.
        max_retries: Retry count handed to the provider SDK client.
        api_key: API key for authentication.
        max_tokens: Optional maximum tokens in response.
        azure_endpoint: Azure OpenAI resource endpoint.
        azure_deployment_name: Azure OpenAI deployment to target.
        azure_api_version: Azure OpenAI REST API version.
    """

    provider: LLMProvider | str
    model_id: str | None = None
    temperature: float = 0.0
    max_retries: int = 2
    api_key: str | None = None
    max_tokens: int | None = None
    azure_endpoint: str | None = None
    azure_deployment_name: str | None = None
    azure_api_version: str | None = None


@runtime_checkable
class StrandsModel(Protocol):
    """Protocol for Strands-compatible LLM models.

    Every strands model exposes its effective configuration; requests are
    issued by ``strands.Agent`` through the model's streaming interface.
    """

    def get_config(self) -> Any:
        """Return the model configuration."""
        ...


# Default model IDs per provider
DEFAULT_MODEL_IDS: dict[LLMProvider, str] = {
    LLMProvider.GOOGLE_GEMINI: "gemini-2.5-flash",
    LLMProvider.ANTHROPIC: "claude-3-5-sonnet-20241022",
    LLMProvider.OPENAI: "gpt-4o",
    LLMProvider.AZURE_OPENAI: "gpt-4o",
}

# Environment variables holding each provider's credential
API_KEY_ENV_VARS: dict[LLMProvider, str] = {
    LLMProvider.GOOGLE_GEMINI: "GOOGLE_API_KEY",
    LLMProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    LLMProvider.OPENAI: "OPENAI_API_KEY",
    LLMProvider.AZURE_OPENAI: "AZURE_OPENAI_API_KEY",
}

AZURE_ENDPOINT_ENV_VAR = "AZURE_OPENAI_ENDPOINT"
AZURE_DEPLOYMENT_NAME_ENV_VAR = "AZURE_OPENAI_DEPLOYMENT_NAME"
AZURE_API_VERSION_ENV_VAR = "AZURE_OPENAI_API_VERSION"
DEFAULT_AZURE_API_VERSION = "2024-02-15-preview"

# Anthropic's API rejects requests without max_tokens
DEFAULT_ANTHROPIC_MAX_TOKENS = 4096
