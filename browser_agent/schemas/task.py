from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TaskRequest(BaseModel):
    instruction: str = Field(min_length=1)


class TaskResponse(BaseModel):
    status: str = "ok"
    instruction: str
    output: str | None = None
    messages: list[dict[str, Any]] = Field(default_factory=list)
    error: str | None = None
