from fastapi import APIRouter, Depends
from typing import List

from app.config import Settings
from app.core.dependencies import get_current_user, get_settings, get_store
from app.core.schemas import MessageResponse
from app.database.document_store import DocumentStore
from app.modules.auth.schemas import Identity
from app.modules.groups.schemas import (
    GroupCreate, GroupCreatedResponse, GroupResponse, GroupMemberAdd, GroupCreatorUpdate
)
from app.modules.groups.service import GroupService

router = APIRouter(tags=["groups"])


def get_group_service(
    store: DocumentStore = Depends(get_store),
    app_settings: Settings = Depends(get_settings),
) -> GroupService:
    return GroupService(store, app_settings)


@router.post("/group", response_model=GroupCreatedResponse, status_code=201)
async def create_group(
    group_data: GroupCreate,
    current_user: Identity = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    """Create a new group; the caller becomes its creator"""
    return service.create_group(group_data, current_user)


@router.get("/groups", response_model=List[GroupResponse])
async def list_groups(
    current_user: Identity = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    """List groups the caller is a member of"""
    return service.list_groups(current_user)


@router.post("/groups/{group_id}/add-user", response_model=MessageResponse)
async def add_user_to_group(
    group_id: str,
    member_data: GroupMemberAdd,
    current_user: Identity = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    """Add a user, by email, to the group (group creator only)"""
    return service.add_member(group_id, member_data.email, current_user)


@router.patch("/groups/{group_id}", response_model=MessageResponse)
async def update_group_creator(
    group_id: str,
    creator_data: GroupCreatorUpdate,
    current_user: Identity = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    """Reassign the group creator (current creator only)"""
    return service.update_creator(group_id, creator_data.creator_id, current_user)
