"""
Task router - API endpoints for tasks.

Handlers are plain ``def``: the file I/O underneath is blocking, so FastAPI
runs them in its thread pool. Bodies are taken as raw JSON and validated by
the service, which owns the order of checks (id, existence, then fields).
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, status

from tasktrack.core.dependencies import get_task_service
from tasktrack.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("")
def list_tasks(service: TaskService = Depends(get_task_service)) -> List[Dict[str, Any]]:
    """List all tasks ordered by id."""
    return [task.to_record() for task in service.list_tasks()]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_task(
    payload: Any = Body(None),
    service: TaskService = Depends(get_task_service),
) -> Dict[str, Any]:
    """Create a new task. Body: ``{title, description?}``."""
    return service.create_task(payload).to_record()


@router.put("/{task_id}")
def update_task(
    task_id: str,
    payload: Any = Body(None),
    service: TaskService = Depends(get_task_service),
) -> Dict[str, Any]:
    """Apply a partial update to a task."""
    return service.update_task(task_id, payload).to_record()


@router.delete("/{task_id}")
def delete_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
) -> Dict[str, Any]:
    """Delete a task and return it."""
    return service.delete_task(task_id).to_record()
