from __future__ import annotations

import json
import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from strands import Agent

from browser_agent.clients.llm_providers.base import StrandsModel
from browser_agent.clients.mcp_tools import McpToolWrapper, serialize_content

logger = logging.getLogger(__name__)


@dataclass
class TaskResult:
    output: str
    messages: list[dict[str, Any]] = field(default_factory=list)


class TaskEngine(Protocol):
    def run(self, instruction: str) -> TaskResult:
        raise NotImplementedError


class StrandsTaskEngine:
    """Runs instructions through a strands agent bound to the browser tools.

    A new agent is built for every run so transcripts stay separate; runs are
    serialized because all tools drive the same browser.
    """

    def __init__(
        self,
        model: StrandsModel,
        tools: Sequence[McpToolWrapper],
        system_prompt: str,
    ) -> None:
        self._model = model
        self._tools = [wrapper.to_agent_tool() for wrapper in tools]
        self._system_prompt = system_prompt
        self._lock = threading.Lock()

    @property
    def tool_names(self) -> list[str]:
        return [agent_tool.tool_name for agent_tool in self._tools]

    def run(self, instruction: str) -> TaskResult:
        with self._lock:
            agent = Agent(
                model=self._model,
                tools=list(self._tools),
                system_prompt=self._system_prompt,
                callback_handler=None,
            )
            logger.info("Starting task with %d tools", len(self._tools))
            result = agent(instruction)
            messages = json.loads(serialize_content(agent.messages))
            return TaskResult(output=str(result).strip(), messages=messages)
