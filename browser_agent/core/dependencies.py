from __future__ import annotations

import logging
import threading
from functools import lru_cache

from browser_agent.clients.llm_providers import create_model, get_provider_config
from browser_agent.clients.mcp_tools import McpToolServer
from browser_agent.clients.strands_agent import StrandsTaskEngine, TaskEngine
from browser_agent.core.config import Settings, load_settings
from browser_agent.core.errors import ConfigurationError
from browser_agent.services.task import TaskService

logger = logging.getLogger(__name__)

# Process-backed singletons, each created at most once under _lock
_lock = threading.RLock()
_tool_server: McpToolServer | None = None
_task_engine: TaskEngine | None = None
_task_engine_ready = False


@lru_cache
def get_settings() -> Settings:
    return load_settings()


def get_tool_server() -> McpToolServer:
    global _tool_server
    with _lock:
        if _tool_server is None:
            server = McpToolServer.from_settings(get_settings())
            server.start()
            _tool_server = server
        return _tool_server


def get_task_engine() -> TaskEngine | None:
    global _task_engine, _task_engine_ready
    with _lock:
        if not _task_engine_ready:
            _task_engine = _build_task_engine(get_settings())
            _task_engine_ready = True
        return _task_engine


def _build_task_engine(settings: Settings) -> TaskEngine | None:
    try:
        model = create_model(get_provider_config(settings))
    except ConfigurationError as exc:
        logger.warning("Task engine disabled: %s", exc)
        return None
    tools = get_tool_server().list_tools(settings.mcp_tool_allowlist)
    return StrandsTaskEngine(model, tools, settings.agent_system_prompt)


@lru_cache
def get_task_service() -> TaskService:
    return TaskService(get_task_engine())


def shutdown_tool_server() -> None:
    global _tool_server, _task_engine, _task_engine_ready
    with _lock:
        server, _tool_server = _tool_server, None
        _task_engine, _task_engine_ready = None, False
        get_task_service.cache_clear()
        if server is not None:
            server.stop()
