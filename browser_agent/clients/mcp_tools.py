from __future__ import annotations

import base64
import json
import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from mcp import StdioServerParameters
from mcp.client.stdio import stdio_client
from strands.tools.mcp import MCPClient
from strands.tools.tools import PythonAgentTool

from browser_agent.core.config import Settings

logger = logging.getLogger(__name__)


class ToolSession(Protocol):
    """The subset of ``MCPClient`` the wrappers rely on."""

    def list_tools_sync(self, pagination_token: str | None = None) -> Any: ...

    def call_tool_sync(
        self, tool_use_id: str, name: str, arguments: dict[str, Any] | None = None
    ) -> Any: ...


class McpToolServer:
    """Tool-provider process spoken to over MCP stdio."""

    def __init__(
        self,
        command: str,
        args: list[str],
        startup_timeout: int = 30,
        session: ToolSession | None = None,
    ) -> None:
        self._command = command
        self._args = list(args)
        self._started = False
        self._owns_session = session is None
        if session is None:
            params = StdioServerParameters(command=command, args=self._args)
            session = MCPClient(lambda: stdio_client(params), startup_timeout=startup_timeout)
        self._session = session

    @classmethod
    def from_settings(cls, settings: Settings) -> McpToolServer:
        return cls(
            settings.mcp_server_command,
            settings.mcp_server_args,
            startup_timeout=settings.mcp_startup_timeout_seconds,
        )

    @property
    def command_line(self) -> str:
        return " ".join([self._command, *self._args])

    def start(self) -> None:
        if self._started:
            return
        if self._owns_session:
            logger.info("Launching tool server: %s", self.command_line)
            self._session.start()  # type: ignore[attr-defined]
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._started = False
        if self._owns_session:
            logger.info("Stopping tool server")
            self._session.stop(None, None, None)  # type: ignore[attr-defined]

    def __enter__(self) -> McpToolServer:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[no-untyped-def]
        self.stop()

    def list_tools(self, allowlist: Iterable[str] | None = None) -> list[McpToolWrapper]:
        """Discover the server's tools and wrap each one.

        Args:
            allowlist: Tool names to keep. Empty or ``None`` keeps every tool.
        """
        wanted = set(allowlist or [])
        wrappers: list[McpToolWrapper] = []
        token: str | None = None
        while True:
            page = self._session.list_tools_sync(pagination_token=token)
            for agent_tool in page:
                # wire names; mcp 2.x renamed the inputSchema attribute
                fields = agent_tool.mcp_tool.model_dump(by_alias=True)
                name = fields["name"]
                if wanted and name not in wanted:
                    continue
                wrappers.append(
                    McpToolWrapper(
                        name=name,
                        description=fields.get("description") or "",
                        input_schema=dict(fields.get("inputSchema") or {}),
                        server=self,
                    )
                )
            token = getattr(page, "pagination_token", None)
            if not token:
                break

        missing = wanted - {wrapper.name for wrapper in wrappers}
        if missing:
            logger.warning("Allowlisted tools not offered by server: %s", ", ".join(sorted(missing)))
        logger.info("Discovered %d tools", len(wrappers))
        return wrappers

    def call_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        tool_use_id = f"{name}-{uuid.uuid4().hex[:12]}"
        logger.debug("Calling tool %s", name)
        return dict(self._session.call_tool_sync(tool_use_id, name, arguments))


@dataclass
class McpToolWrapper:
    """Adapts one discovered tool to a uniform invocation interface."""

    name: str
    description: str
    input_schema: dict[str, Any]
    server: McpToolServer = field(repr=False)

    def invoke(self, arguments: dict[str, Any] | None = None) -> str:
        result = self.server.call_tool(self.name, arguments or {})
        return serialize_content(result.get("content", []))

    def to_agent_tool(self) -> PythonAgentTool:
        tool_spec = {
            "name": self.name,
            "description": self.description,
            "inputSchema": {"json": self.input_schema},
        }

        def _run(tool_use: dict[str, Any], **_: Any) -> dict[str, Any]:
            result = self.server.call_tool(self.name, tool_use.get("input") or {})
            return {
                "toolUseId": tool_use["toolUseId"],
                "status": result.get("status", "success"),
                "content": [{"text": serialize_content(result.get("content", []))}],
            }

        return PythonAgentTool(self.name, tool_spec, _run)  # type: ignore[arg-type]


def serialize_content(content: Any) -> str:
    """Render a tool result's content list as JSON text."""
    return json.dumps(content, default=_json_default, ensure_ascii=False)


def _json_default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(value).decode("ascii")
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
