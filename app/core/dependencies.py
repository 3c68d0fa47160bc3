"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Any, Dict, Optional
import logging

from app.config import Settings, settings
from app.core.exceptions import Forbidden, MissingCredential, StoreError
from app.database.document_store import DocumentStore
from app.modules.auth.identity import IdentityProvider
from app.modules.auth.schemas import Identity
from app.modules.auth.service import AuthService

logger = logging.getLogger(__name__)

# auto_error=False so a missing header surfaces as MissingCredential (401)
security = HTTPBearer(auto_error=False)


def get_settings() -> Settings:
    return settings


def _get_backends(request: Request):
    backends = getattr(request.app.state, "backends", None)
    if backends is None:
        raise StoreError("Storage backend is not initialized")
    return backends


def get_store(request: Request) -> DocumentStore:
    return _get_backends(request).store


def get_identity_provider(request: Request) -> IdentityProvider:
    return _get_backends(request).identity_provider


def get_auth_service(
    store: DocumentStore = Depends(get_store),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
    app_settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(store, identity_provider, app_settings)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Identity:
    """Extract current user identity from the bearer token"""
    if credentials is None or not credentials.credentials:
        raise MissingCredential()
    return auth_service.authenticate(credentials.credentials)


def is_group_member(group: Dict[str, Any], user_id: str) -> bool:
    return user_id in (group.get("users") or [])


def check_group_creator(group: Dict[str, Any], identity: Identity, detail: str) -> Identity:
    """Allow only the group's creator"""
    if group.get("creator_id") != identity.uid:
        logger.info(f"Denied user {identity.uid} on group {group.get('id')}: not the creator")
        raise Forbidden(detail)
    return identity


def check_group_member(group: Dict[str, Any], identity: Identity) -> Identity:
    """Allow any member of the group"""
    if not is_group_member(group, identity.uid):
        logger.info(f"Denied user {identity.uid} on group {group.get('id')}: not a member")
        raise Forbidden("You must be a member of this group")
    return identity
