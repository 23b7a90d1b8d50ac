"""Factory for creating LLM model instances."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import replace
from typing import Any

from browser_agent.clients.llm_providers.base import (
    API_KEY_ENV_VARS,
    AZURE_API_VERSION_ENV_VAR,
    AZURE_DEPLOYMENT_NAME_ENV_VAR,
    AZURE_ENDPOINT_ENV_VAR,
    DEFAULT_ANTHROPIC_MAX_TOKENS,
    DEFAULT_AZURE_API_VERSION,
    DEFAULT_MODEL_IDS,
    LLMProvider,
    ModelConfig,
    StrandsModel,
)
from browser_agent.core.config import Settings, load_settings
from browser_agent.core.errors import ConfigurationError, ConfigurationErrorKind

logger = logging.getLogger(__name__)

_PROVIDER_LABELS: dict[LLMProvider, str] = {
    LLMProvider.GOOGLE_GEMINI: "Google",
    LLMProvider.ANTHROPIC: "Anthropic",
    LLMProvider.OPENAI: "OpenAI",
    LLMProvider.AZURE_OPENAI: "Azure OpenAI",
}


def create_model(
    config: ModelConfig,
    environ: Mapping[str, str] | None = None,
) -> StrandsModel:
    """Create a Strands-compatible model instance.

    Args:
        config: Model configuration; unset optional fields are resolved.
        environ: Environment used for resolution (defaults to ``os.environ``).

    Returns:
        A Strands-compatible model instance. No network I/O happens here.

    Raises:
        ConfigurationError: If the provider is not supported or a required
            field cannot be resolved.
        ImportError: If required provider package is not installed.
    """
    resolved = resolve_model_config(config, environ)
    builder = _BUILDERS[resolved.provider]
    logger.debug(
        "Creating %s model '%s'", resolved.provider.value, resolved.model_id
    )
    return builder(resolved)


def resolve_model_config(
    config: ModelConfig,
    environ: Mapping[str, str] | None = None,
) -> ModelConfig:
    """Fill unset fields: explicit value, then environment, then default.

    This is the only place the factory reads the environment. The returned
    config has a parsed provider, a model id and a validated credential;
    Azure configs also carry endpoint, deployment name and API version.
    """
    env = os.environ if environ is None else environ
    provider = LLMProvider.from_string(config.provider)

    api_key_env = API_KEY_ENV_VARS[provider]
    api_key = config.api_key or env.get(api_key_env) or None
    if not api_key:
        raise ConfigurationError(
            ConfigurationErrorKind.MISSING_CREDENTIAL,
            f"{_PROVIDER_LABELS[provider]} API Key is required. "
            f"Set {api_key_env} in environment variables.",
            field="api_key",
            env_var=api_key_env,
        )

    resolved = replace(
        config,
        provider=provider,
        model_id=config.model_id or DEFAULT_MODEL_IDS[provider],
        api_key=api_key,
    )
    if provider != LLMProvider.AZURE_OPENAI:
        return resolved

    endpoint = config.azure_endpoint or env.get(AZURE_ENDPOINT_ENV_VAR) or None
    if not endpoint:
        raise ConfigurationError(
            ConfigurationErrorKind.MISSING_ENDPOINT,
            "Azure OpenAI Endpoint is required. "
            f"Set {AZURE_ENDPOINT_ENV_VAR} in environment variables.",
            field="azure_endpoint",
            env_var=AZURE_ENDPOINT_ENV_VAR,
        )
    deployment_name = (
        config.azure_deployment_name or env.get(AZURE_DEPLOYMENT_NAME_ENV_VAR) or None
    )
    if not deployment_name:
        raise ConfigurationError(
            ConfigurationErrorKind.MISSING_DEPLOYMENT_NAME,
            "Azure OpenAI Deployment Name is required. "
            f"Set {AZURE_DEPLOYMENT_NAME_ENV_VAR} in environment variables.",
            field="azure_deployment_name",
            env_var=AZURE_DEPLOYMENT_NAME_ENV_VAR,
        )
    api_version = (
        config.azure_api_version
        or env.get(AZURE_API_VERSION_ENV_VAR)
        or DEFAULT_AZURE_API_VERSION
    )
    return replace(
        resolved,
        azure_endpoint=endpoint,
        azure_deployment_name=deployment_name,
        azure_api_version=api_version,
    )


def azure_base_url(endpoint: str, deployment_name: str) -> str:
    return f"{endpoint.rstrip('/')}/openai/deployments/{deployment_name}"


def _create_gemini_model(config: ModelConfig) -> StrandsModel:
    """Create a Gemini model instance."""
    try:
        from strands.models.gemini import GeminiModel
    except ImportError as e:
        raise ImportError(
            "Gemini support requires 'strands-agents[gemini]'. "
            "Install with: pip install 'strands-agents[gemini]'"
        ) from e

    params: dict[str, Any] = {"temperature": config.temperature}
    if config.max_tokens is not None:
        params["max_output_tokens"] = config.max_tokens

    # google-genai counts the first request as an attempt
    model_kwargs: dict[str, Any] = {
        "client_args": {
            "api_key": config.api_key,
            "http_options": {"retry_options": {"attempts": config.max_retries + 1}},
        },
        "model_id": config.model_id,
        "params": params,
    }
    return GeminiModel(**model_kwargs)


def _create_anthropic_model(config: ModelConfig) -> StrandsModel:
    """Create an Anthropic (Claude) model instance."""
    try:
        from strands.models.anthropic import AnthropicModel
    except ImportError as e:
        raise ImportError(
            "Anthropic support requires 'strands-agents[anthropic]'. "
            "Install with: pip install 'strands-agents[anthropic]'"
        ) from e

    model_kwargs: dict[str, Any] = {
        "client_args": {"api_key": config.api_key, "max_retries": config.max_retries},
        "model_id": config.model_id,
        "max_tokens": config.max_tokens or DEFAULT_ANTHROPIC_MAX_TOKENS,
        "params": {"temperature": config.temperature},
    }
    return AnthropicModel(**model_kwargs)


def _openai_params(config: ModelConfig) -> dict[str, Any]:
    params: dict[str, Any] = {"temperature": config.temperature}
    if config.max_tokens is not None:
        params["max_tokens"] = config.max_tokens
    return params


def _create_openai_model(config: ModelConfig) -> StrandsModel:
    """Create an OpenAI model instance."""
    try:
        from strands.models.openai import OpenAIModel
    except ImportError as e:
        raise ImportError(
            "OpenAI support requires 'strands-agents[openai]'. "
            "Install with: pip install 'strands-agents[openai]'"
        ) from e

    model_kwargs: dict[str, Any] = {
        "client_args": {"api_key": config.api_key, "max_retries": config.max_retries},
        "model_id": config.model_id,
        "params": _openai_params(config),
    }
    return OpenAIModel(**model_kwargs)


def _create_azure_openai_model(config: ModelConfig) -> StrandsModel:
    """Create an Azure OpenAI model instance.

    Requests go to the deployment path of the Azure resource; the API version
    and key are fixed query/header values on every call.
    """
    try:
        from strands.models.openai import OpenAIModel
    except ImportError as e:
        raise ImportError(
            "Azure OpenAI support requires 'strands-agents[openai]'. "
            "Install with: pip install 'strands-agents[openai]'"
        ) from e

    base_url = azure_base_url(str(config.azure_endpoint), str(config.azure_deployment_name))
    model_kwargs: dict[str, Any] = {
        "client_args": {
            "api_key": config.api_key,
            "max_retries": config.max_retries,
            "base_url": base_url,
            "default_query": {"api-version": config.azure_api_version},
            "default_headers": {"api-key": config.api_key},
        },
        "model_id": config.model_id,
        "params": _openai_params(config),
    }
    return OpenAIModel(**model_kwargs)


_BUILDERS: dict[LLMProvider, Callable[[ModelConfig], StrandsModel]] = {
    LLMProvider.GOOGLE_GEMINI: _create_gemini_model,
    LLMProvider.ANTHROPIC: _create_anthropic_model,
    LLMProvider.OPENAI: _create_openai_model,
    LLMProvider.AZURE_OPENAI: _create_azure_openai_model,
}


def get_provider_config(settings: Settings) -> ModelConfig:
    """Build ModelConfig from application settings.

    The credential is left unset so ``create_model`` resolves it from the
    provider's own environment variable.

    Args:
        settings: Application settings.

    Returns:
        An unresolved ModelConfig.
    """
    return ModelConfig(
        provider=settings.llm_provider,
        model_id=settings.llm_model_id,
        temperature=settings.llm_temperature,
        max_retries=settings.llm_max_retries,
        max_tokens=settings.llm_max_tokens,
        azure_endpoint=settings.azure_endpoint,
        azure_deployment_name=settings.azure_deployment_name,
        azure_api_version=settings.azure_api_version,
    )


def create_model_from_environment(environ: Mapping[str, str] | None = None) -> StrandsModel:
    """Create a model from ``LLM_*`` and provider environment variables.

    Raises:
        ConfigurationError: On malformed numeric values or an invalid
            resulting configuration.
    """
    settings = load_settings(environ)
    return create_model(get_provider_config(settings), environ)
