import logging
from typing import Any, Dict, List

from app.config import Settings, settings as default_settings
from app.core.dependencies import check_group_creator, check_group_member, is_group_member
from app.core.exceptions import Forbidden, NotFound, ValidationError
from app.core.schemas import MessageResponse
from app.database.document_store import DocumentStore, SERVER_TIMESTAMP
from app.modules.auth.schemas import Identity
from app.modules.groups.service import GroupService
from app.modules.tasks.models import TASKS
from app.modules.tasks.schemas import (
    GroupTaskCreate, TaskCreate, TaskCreatedResponse, TaskResponse, TaskStatusUpdate
)

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, store: DocumentStore, settings: Settings = default_settings):
        self.store = store
        self.settings = settings
        self.groups = GroupService(store, settings)

    def _check_status(self, status: str):
        allowed = self.settings.get_allowed_task_statuses()
        if allowed and status not in allowed:
            raise ValidationError(f"Invalid status '{status}'. Allowed: {', '.join(allowed)}")

    def _get_task(self, task_id: str) -> Dict[str, Any]:
        task = self.store.get(TASKS, task_id)
        if task is None:
            raise NotFound("Task not found")
        return task

    def _task_fields(self, task_data: TaskCreate) -> Dict[str, Any]:
        return {
            "name": task_data.name,
            "description": task_data.description,
            "time": task_data.time,
            "status": task_data.status,
            "category": task_data.category,
            "created_at": SERVER_TIMESTAMP,
        }

    def create_task(self, task_data: TaskCreate, identity: Identity) -> TaskCreatedResponse:
        """Personal task: owner and creator are both the caller"""
        self._check_status(task_data.status)
        task_id = self.store.set(TASKS, {
            **self._task_fields(task_data),
            "user_id": identity.uid,
            "creator_id": identity.uid,
        })
        logger.info(f"User {identity.uid} created task {task_id}")
        return TaskCreatedResponse(message="Task added successfully", task_id=task_id)

    def create_group_task(self, group_id: str, task_data: GroupTaskCreate, identity: Identity) -> TaskCreatedResponse:
        """Group task: created by the group creator, owned by the assigned user"""
        group = self.groups.get_group(group_id)
        check_group_creator(group, identity, "Only the group creator can create tasks")
        if self.settings.validate_task_assignee_membership and not is_group_member(group, task_data.assigned_user):
            raise ValidationError("Assigned user is not a member of this group")
        self._check_status(task_data.status)

        task_id = self.store.set(TASKS, {
            **self._task_fields(task_data),
            "user_id": task_data.assigned_user,
            "creator_id": group["creator_id"],
            "group_id": group_id,
        })
        logger.info(f"User {identity.uid} created task {task_id} in group {group_id} for {task_data.assigned_user}")
        return TaskCreatedResponse(message="Task created successfully", task_id=task_id)

    def update_task_status(self, task_id: str, update_data: TaskStatusUpdate, identity: Identity) -> MessageResponse:
        task = self._get_task(task_id)
        if task.get("user_id") != identity.uid:
            if self.settings.enforce_task_update_ownership:
                logger.info(f"Denied status update of task {task_id} by {identity.uid}: not the owner")
                raise Forbidden("You do not have permission to update this task")
            logger.warning(f"User {identity.uid} updating task {task_id} owned by {task.get('user_id')} (ownership not enforced)")
        self._check_status(update_data.status)

        self.store.update(TASKS, task_id, {
            "status": update_data.status,
            "updated_at": SERVER_TIMESTAMP,
        })
        return MessageResponse(message="Task status updated successfully")

    def delete_task(self, task_id: str, identity: Identity) -> MessageResponse:
        task = self._get_task(task_id)
        if task.get("user_id") != identity.uid:
            logger.info(f"Denied deletion of task {task_id} by {identity.uid}: not the owner")
            raise Forbidden("You do not have permission to delete this task")
        self.store.delete(TASKS, task_id)
        logger.info(f"User {identity.uid} deleted task {task_id}")
        return MessageResponse(message="Task deleted successfully")

    def list_tasks(self, identity: Identity) -> List[TaskResponse]:
        """Every task the caller owns, personal or group"""
        return [TaskResponse(**task) for task in self.store.query(TASKS, "user_id", identity.uid)]

    def list_group_tasks(self, group_id: str, identity: Identity) -> Dict[str, List[TaskResponse]]:
        """The caller's tasks in one group, bucketed by status"""
        group = self.groups.get_group(group_id)
        check_group_member(group, identity)

        buckets: Dict[str, List[TaskResponse]] = {}
        for task in self.store.query(TASKS, "group_id", group_id):
            if task.get("user_id") != identity.uid:
                continue
            buckets.setdefault(task["status"], []).append(TaskResponse(**task))
        if not buckets:
            raise NotFound("No tasks found for this user in the group")
        return buckets
