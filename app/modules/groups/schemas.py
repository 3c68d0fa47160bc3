from pydantic import Field
from typing import Optional, List
from datetime import datetime

from app.core.schemas import ApiModel, NormalizedEmail


class GroupCreate(ApiModel):
    group_name: str = Field(..., min_length=1)
    users: List[str] = Field(..., min_length=1)


class GroupCreatedResponse(ApiModel):
    message: str
    group_id: str


class GroupResponse(ApiModel):
    id: str
    group_name: str
    creator_id: str
    users: List[str]
    created_at: Optional[datetime] = None


class GroupMemberAdd(ApiModel):
    email: NormalizedEmail


class GroupCreatorUpdate(ApiModel):
    creator_id: str = Field(..., min_length=1)
