from pydantic import Field
from typing import Optional
from datetime import datetime

from app.core.schemas import ApiModel


class TaskCreate(ApiModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    time: Optional[str] = None
    status: str = Field(..., min_length=1)
    category: Optional[str] = None


class GroupTaskCreate(TaskCreate):
    assigned_user: str = Field(..., min_length=1)


class TaskStatusUpdate(ApiModel):
    status: str = Field(..., min_length=1)


class TaskCreatedResponse(ApiModel):
    message: str
    task_id: str


class TaskResponse(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    time: Optional[str] = None
    status: str
    category: Optional[str] = None
    user_id: str
    creator_id: str
    group_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
