"""LLM Provider abstraction for multi-provider support.

This module provides a unified interface for different LLM providers:
- Gemini (Google)
- Anthropic (Claude)
- OpenAI (GPT-4o)
- Azure OpenAI

Usage:
    from browser_agent.clients.llm_providers import create_model, ModelConfig

    model = create_model(
        ModelConfig(provider="google-gemini", api_key="your-api-key")
    )
"""

from browser_agent.clients.llm_providers.base import LLMProvider, ModelConfig
from browser_agent.clients.llm_providers.factory import (
    create_model,
    create_model_from_environment,
    get_provider_config,
    resolve_model_config,
)

__all__ = [
    "LLMProvider",
    "ModelConfig",
    "create_model",
    "create_model_from_environment",
    "get_provider_config",
    "resolve_model_config",
]
