"""Run one browser instruction from the command line."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace

from dotenv import load_dotenv

from browser_agent.clients.llm_providers import (
    LLMProvider,
    create_model,
    get_provider_config,
    resolve_model_config,
)
from browser_agent.clients.mcp_tools import McpToolServer
from browser_agent.clients.strands_agent import StrandsTaskEngine
from browser_agent.core.config import load_settings
from browser_agent.core.errors import ConfigurationError
from browser_agent.core.logging import configure_logging

DEFAULT_INSTRUCTION = (
    "Search Google for 'Neuro SAN' and tell me the title of the first result."
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="browser-agent",
        description="Drive a Playwright MCP browser with an LLM agent.",
    )
    parser.add_argument("instruction", nargs="?", default=DEFAULT_INSTRUCTION,
                        help="Task for the agent (default: a sample Google search)")
    parser.add_argument("-p", "--provider", default="",
                        help="google-gemini, anthropic, openai or azure-openai "
                             "(overrides LLM_PROVIDER)")
    parser.add_argument("-m", "--model", default="",
                        help="Model name (overrides LLM_MODEL; defaults per provider)")
    parser.add_argument("--json", action="store_true",
                        help="Print the result and transcript as JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv()

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    configure_logging("debug" if args.verbose else settings.log_level)

    config = get_provider_config(settings)
    if args.provider:
        config = replace(config, provider=args.provider)
    if args.model:
        config = replace(config, model_id=args.model)

    try:
        config = resolve_model_config(config)
        model = create_model(config)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    print(f"Using LLM Provider: {LLMProvider.from_string(config.provider).value}")
    print(f"Using Model: {config.model_id}")

    try:
        with McpToolServer.from_settings(settings) as server:
            tools = server.list_tools(settings.mcp_tool_allowlist)
            engine = StrandsTaskEngine(model, tools, settings.agent_system_prompt)
            print(f"Starting task: {args.instruction}")
            result = engine.run(args.instruction)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Browser task failed")
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({"output": result.output, "messages": result.messages}, indent=2))
    else:
        print(f"\nFinal Result: {result.output}")
        print("\nTranscript:")
        print(json.dumps(result.messages, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
