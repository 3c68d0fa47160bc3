from fastapi import APIRouter, Depends
from typing import Dict, List

from app.config import Settings
from app.core.dependencies import get_current_user, get_settings, get_store
from app.core.schemas import MessageResponse
from app.database.document_store import DocumentStore
from app.modules.auth.schemas import Identity
from app.modules.tasks.schemas import (
    GroupTaskCreate, TaskCreate, TaskCreatedResponse, TaskResponse, TaskStatusUpdate
)
from app.modules.tasks.service import TaskService

router = APIRouter(tags=["tasks"])


def get_task_service(
    store: DocumentStore = Depends(get_store),
    app_settings: Settings = Depends(get_settings),
) -> TaskService:
    return TaskService(store, app_settings)


@router.post("/task", response_model=TaskCreatedResponse, status_code=201)
async def create_task(
    task_data: TaskCreate,
    current_user: Identity = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """Create a personal task"""
    return service.create_task(task_data, current_user)


@router.get("/tasks", response_model=List[TaskResponse])
async def list_tasks(
    current_user: Identity = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """List tasks owned by the caller"""
    return service.list_tasks(current_user)


@router.put("/task/{task_id}", response_model=MessageResponse)
async def update_task_status(
    task_id: str,
    update_data: TaskStatusUpdate,
    current_user: Identity = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """Change a task's status"""
    return service.update_task_status(task_id, update_data, current_user)


@router.delete("/task/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    current_user: Identity = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """Delete a task (owner only)"""
    return service.delete_task(task_id, current_user)


@router.post("/group/{group_id}/task", response_model=TaskCreatedResponse, status_code=201)
async def create_group_task(
    group_id: str,
    task_data: GroupTaskCreate,
    current_user: Identity = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """Create a task in a group and assign it to a member (group creator only)"""
    return service.create_group_task(group_id, task_data, current_user)


@router.get("/group/{group_id}/tasks", response_model=Dict[str, List[TaskResponse]])
async def list_group_tasks(
    group_id: str,
    current_user: Identity = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """The caller's tasks in a group, keyed by status (members only)"""
    return service.list_group_tasks(group_id, current_user)
