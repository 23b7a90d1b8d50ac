from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from browser_agent.api import health, tasks
from browser_agent.core.dependencies import get_settings, shutdown_tool_server
from browser_agent.core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "Starting browser-agent on port %s (provider=%s)", settings.port, settings.llm_provider
    )
    yield
    shutdown_tool_server()


app = FastAPI(title="browser-agent", version="1.0.0", lifespan=lifespan)
app.include_router(health.router)
app.include_router(tasks.router)


def serve() -> None:
    import uvicorn

    # .env only fills variables that are not already set
    load_dotenv()
    settings = get_settings()
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())
