from __future__ import annotations

from fastapi import APIRouter, Depends

from browser_agent.core.dependencies import get_task_service
from browser_agent.schemas.task import TaskRequest, TaskResponse
from browser_agent.services.task import TaskService

router = APIRouter()


@router.post("/tasks", response_model=TaskResponse)
def run_task(
    request: TaskRequest,
    service: TaskService = Depends(get_task_service),  # noqa: B008
) -> TaskResponse:
    """Run one browser instruction through the agent and return its transcript."""
    return service.run(request)
