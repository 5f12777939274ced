"""
Task Endpoints

Task CRUD, completion toggling and the filtered task board.
"""
from fastapi import APIRouter, Depends, Response, status

from src.api.dependencies import get_task_service
from src.api.models.requests import CompletionUpdate, TaskCreate, TaskUpdate
from src.core.views import TaskFilter
from src.services.tasks import TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.get("")
async def list_tasks(
    filter: TaskFilter = TaskFilter.ALL,
    service: TaskService = Depends(get_task_service)
):
    """
    Task board.

    Incomplete before completed, then by due date with undated last.
    Each entry carries its due category and badge label.
    """
    views = await service.list_view(filter)
    return [view.model_dump(mode="json") for view in views]


@router.get("/stats")
async def task_stats(service: TaskService = Depends(get_task_service)):
    stats = await service.stats()
    return stats.model_dump(mode="json")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(body: TaskCreate, service: TaskService = Depends(get_task_service)):
    task = await service.create(body.sent_fields())
    return task.model_dump(mode="json")


@router.get("/{task_id}")
async def get_task(task_id: str, service: TaskService = Depends(get_task_service)):
    task = await service.get(task_id)
    return task.model_dump(mode="json")


@router.patch("/{task_id}")
async def update_task(task_id: str, body: TaskUpdate, service: TaskService = Depends(get_task_service)):
    task = await service.update(task_id, body.sent_fields())
    return task.model_dump(mode="json")


@router.post("/{task_id}/toggle")
async def toggle_task(task_id: str, service: TaskService = Depends(get_task_service)):
    """Flip completion; completed_at is stamped or cleared with it."""
    task = await service.toggle_completion(task_id)
    return task.model_dump(mode="json")


@router.put("/{task_id}/completion")
async def set_task_completion(
    task_id: str,
    body: CompletionUpdate,
    service: TaskService = Depends(get_task_service)
):
    task = await service.set_completion(task_id, body.is_completed)
    return task.model_dump(mode="json")


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, service: TaskService = Depends(get_task_service)):
    await service.delete(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
