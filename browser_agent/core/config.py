from __future__ import annotations

import math
import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass

from browser_agent.core.errors import ConfigurationError, ConfigurationErrorKind

DEFAULT_LLM_PROVIDER = "google-gemini"
DEFAULT_LLM_TEMPERATURE = 0.0
DEFAULT_LLM_MAX_RETRIES = 2
DEFAULT_MCP_SERVER_COMMAND = "npx"
DEFAULT_MCP_SERVER_ARGS = "-y @playwright/mcp@latest"
DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful web automation assistant. "
    "Use the browser tools to complete the user's request."
)


def _get_str_env(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name, "").strip()
    return value or None


def _get_int_env(environ: Mapping[str, str], name: str, default: int) -> int:
    value = environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_list_env(environ: Mapping[str, str], name: str) -> list[str]:
    value = environ.get(name, "")
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _malformed(name: str, value: str, expected: str) -> ConfigurationError:
    return ConfigurationError(
        ConfigurationErrorKind.MALFORMED_VALUE,
        f"{name} must be {expected}, got {value!r}",
        field=name,
        env_var=name,
    )


def _parse_float_env(environ: Mapping[str, str], name: str, default: float) -> float:
    value = environ.get(name, "").strip()
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError as exc:
        raise _malformed(name, value, "a number") from exc
    if not math.isfinite(parsed):
        raise _malformed(name, value, "a finite number")
    return parsed


def _parse_count_env(environ: Mapping[str, str], name: str) -> int | None:
    value = environ.get(name, "").strip()
    if not value:
        return None
    try:
        parsed = int(value)
    except ValueError as exc:
        raise _malformed(name, value, "an integer") from exc
    if parsed < 0:
        raise _malformed(name, value, "a non-negative integer")
    return parsed


@dataclass(frozen=True)
class Settings:
    port: int
    log_level: str
    llm_provider: str
    llm_model_id: str | None
    llm_temperature: float
    llm_max_retries: int
    llm_max_tokens: int | None
    azure_endpoint: str | None
    azure_deployment_name: str | None
    azure_api_version: str | None
    mcp_server_command: str
    mcp_server_args: list[str]
    mcp_startup_timeout_seconds: int
    mcp_tool_allowlist: list[str]
    agent_system_prompt: str


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read every process setting from the environment.

    The ``LLM_*`` numeric values are validated strictly and raise
    ``ConfigurationError`` when malformed; the service settings fall back to
    their defaults.
    """
    env = os.environ if environ is None else environ
    max_retries = _parse_count_env(env, "LLM_MAX_RETRIES")
    return Settings(
        port=_get_int_env(env, "PORT", 8000),
        log_level=env.get("LOG_LEVEL", "info"),
        llm_provider=_get_str_env(env, "LLM_PROVIDER") or DEFAULT_LLM_PROVIDER,
        llm_model_id=_get_str_env(env, "LLM_MODEL"),
        llm_temperature=_parse_float_env(env, "LLM_TEMPERATURE", DEFAULT_LLM_TEMPERATURE),
        llm_max_retries=DEFAULT_LLM_MAX_RETRIES if max_retries is None else max_retries,
        llm_max_tokens=_parse_count_env(env, "LLM_MAX_TOKENS"),
        azure_endpoint=_get_str_env(env, "AZURE_OPENAI_ENDPOINT"),
        azure_deployment_name=_get_str_env(env, "AZURE_OPENAI_DEPLOYMENT_NAME"),
        azure_api_version=_get_str_env(env, "AZURE_OPENAI_API_VERSION"),
        mcp_server_command=_get_str_env(env, "MCP_SERVER_COMMAND") or DEFAULT_MCP_SERVER_COMMAND,
        mcp_server_args=shlex.split(env.get("MCP_SERVER_ARGS") or DEFAULT_MCP_SERVER_ARGS),
        mcp_startup_timeout_seconds=_get_int_env(env, "MCP_STARTUP_TIMEOUT_SECONDS", 30),
        mcp_tool_allowlist=_get_list_env(env, "MCP_TOOL_ALLOWLIST"),
        agent_system_prompt=env.get("AGENT_SYSTEM_PROMPT") or DEFAULT_SYSTEM_PROMPT,
    )
