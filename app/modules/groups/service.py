import logging
from typing import Any, Callable, Dict, List

from app.config import Settings, settings as default_settings
from app.core.dependencies import check_group_creator, is_group_member
from app.core.exceptions import Conflict, NotFound, StoreError, ValidationError
from app.core.schemas import MessageResponse
from app.database.document_store import ARRAY_CONTAINS, DocumentStore, SERVER_TIMESTAMP
from app.modules.auth.schemas import Identity
from app.modules.groups.models import GROUPS
from app.modules.groups.schemas import GroupCreate, GroupCreatedResponse, GroupResponse
from app.modules.users.service import UserService

logger = logging.getLogger(__name__)


class GroupService:
    def __init__(self, store: DocumentStore, settings: Settings = default_settings):
        self.store = store
        self.settings = settings

    def get_group(self, group_id: str) -> Dict[str, Any]:
        """Raw group document; NotFound when absent"""
        group = self.store.get(GROUPS, group_id)
        if group is None:
            raise NotFound("Group not found")
        return group

    def create_group(self, group_data: GroupCreate, identity: Identity) -> GroupCreatedResponse:
        """Create a group owned by the caller; the creator is always the first member"""
        members = [identity.uid]
        for user_id in group_data.users:
            if user_id not in members:
                members.append(user_id)

        group_id = self.store.set(GROUPS, {
            "group_name": group_data.group_name,
            "creator_id": identity.uid,
            "users": members,
            "version": 0,
            "created_at": SERVER_TIMESTAMP,
        })
        logger.info(f"User {identity.uid} created group {group_id} with {len(members)} member(s)")
        return GroupCreatedResponse(message="Group created successfully", group_id=group_id)

    def list_groups(self, identity: Identity) -> List[GroupResponse]:
        """Groups the caller belongs to"""
        groups = self.store.query(GROUPS, "users", identity.uid, op=ARRAY_CONTAINS)
        return [GroupResponse(**group) for group in groups]

    def add_member(self, group_id: str, email: str, identity: Identity) -> MessageResponse:
        """Add the user registered under ``email``; only the creator may do this"""
        group = self.get_group(group_id)
        check_group_creator(group, identity, "You do not have permission to add users to this group")

        user = UserService(self.store).get_user_by_email(email)
        if user is None:
            raise NotFound("User not found")
        user_id = user["id"]

        def append_member(current: Dict[str, Any]) -> Dict[str, Any]:
            check_group_creator(current, identity, "You do not have permission to add users to this group")
            if is_group_member(current, user_id):
                raise Conflict("User is already in the group")
            return {"users": list(current.get("users") or []) + [user_id]}

        self._update_with_retry(group_id, append_member)
        logger.info(f"User {user_id} added to group {group_id} by {identity.uid}")
        return MessageResponse(message="User added successfully")

    def update_creator(self, group_id: str, creator_id: str, identity: Identity) -> MessageResponse:
        """Hand the creator role to another member; only the current creator may do this"""

        def reassign(current: Dict[str, Any]) -> Dict[str, Any]:
            check_group_creator(current, identity, "Only the group creator can reassign the creator")
            if not is_group_member(current, creator_id):
                raise ValidationError("The new creator must be a member of the group")
            return {"creator_id": creator_id}

        self._update_with_retry(group_id, reassign)
        logger.info(f"Group {group_id} creator changed from {identity.uid} to {creator_id}")
        return MessageResponse(message="Group creator updated")

    def _update_with_retry(self, group_id: str, mutate: Callable[[Dict[str, Any]], Dict[str, Any]]) -> Dict[str, Any]:
        """Read-check-write loop guarded by the group's version field.

        ``mutate`` receives the freshly read group, may raise to abort, and
        returns the fields to write.
        """
        attempts = max(1, self.settings.membership_update_retries)
        for attempt in range(1, attempts + 1):
            group = self.get_group(group_id)
            fields = mutate(group)
            version = group.get("version", 0)
            written = self.store.update(
                GROUPS,
                group_id,
                {**fields, "version": version + 1},
                if_match={"version": version},
            )
            if written:
                return {**group, **fields, "version": version + 1}
            logger.warning(f"Concurrent write on group {group_id}, retrying ({attempt}/{attempts})")
        raise StoreError("Group was modified concurrently, please retry")
