from fastapi import APIRouter, Depends
from typing import List

from app.core.dependencies import get_current_user, get_store
from app.database.document_store import DocumentStore
from app.modules.auth.schemas import Identity
from app.modules.users.schemas import UserResponse
from app.modules.users.service import UserService

router = APIRouter(tags=["users"])


def get_user_service(store: DocumentStore = Depends(get_store)) -> UserService:
    return UserService(store)


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    current_user: Identity = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """List every registered user (any authenticated caller)"""
    return service.list_users()
