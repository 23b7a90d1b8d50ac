from __future__ import annotations

import logging

from browser_agent.clients.strands_agent import TaskEngine
from browser_agent.schemas.task import TaskRequest, TaskResponse


class TaskService:
    def __init__(self, task_engine: TaskEngine | None) -> None:
        self._logger = logging.getLogger(__name__)
        self._task_engine = task_engine

    def run(self, request: TaskRequest) -> TaskResponse:
        instruction = request.instruction.strip()
        if self._task_engine is None:
            return TaskResponse(
                status="unavailable",
                instruction=instruction,
                error="task engine not configured",
            )

        try:
            result = self._task_engine.run(instruction)
        except Exception as exc:  # noqa: BLE001
            self._logger.exception("Browser task failed")
            return TaskResponse(status="error", instruction=instruction, error=str(exc))
        return TaskResponse(
            instruction=instruction,
            output=result.output,
            messages=result.messages,
        )
