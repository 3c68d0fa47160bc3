from typing import List, Optional

from app.database.document_store import DocumentStore
from app.modules.users.models import USERS
from app.modules.users.schemas import UserResponse


class UserService:
    def __init__(self, store: DocumentStore):
        self.store = store

    def list_users(self) -> List[UserResponse]:
        """All registered profiles, password hash stripped"""
        return [UserResponse(**self._redact(doc)) for doc in self.store.list(USERS)]

    def get_user_by_email(self, email: str) -> Optional[dict]:
        """Raw profile document for ``email``, or None"""
        matches = self.store.query(USERS, "email", email.lower())
        return matches[0] if matches else None

    @staticmethod
    def _redact(doc: dict) -> dict:
        return {k: v for k, v in doc.items() if k != "password"}
