"""
Identity provider: the system of record for credentials.

Registration creates a record here and mirrors a profile document into the
``users`` collection; login resolves the email here before checking the
password hash stored on the profile.
"""
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from supabase import Client

from app.core.exceptions import DuplicateEmail, StoreError

logger = logging.getLogger(__name__)


class IdentityNotFound(Exception):
    """No identity is registered for the given email."""


@dataclass(frozen=True)
class IdentityRecord:
    id: str
    email: str
    display_name: Optional[str] = None


class IdentityProvider(ABC):
    @abstractmethod
    def get_user_by_email(self, email: str) -> IdentityRecord:
        """Return the identity for ``email`` or raise IdentityNotFound."""

    @abstractmethod
    def create_user(self, email: str, password_hash: str, display_name: str) -> IdentityRecord:
        """Create an identity; DuplicateEmail when the email is taken."""

    @abstractmethod
    def delete_user(self, user_id: str) -> None:
        """Remove an identity. Used to undo a registration that failed halfway."""


class SupabaseIdentityProvider(IdentityProvider):
    """Supabase Auth admin API. Needs a client built with the service_role key."""

    page_size = 200

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_by_email(self, email: str) -> IdentityRecord:
        wanted = email.lower()
        page = 1
        try:
            while True:
                users = self.supabase.auth.admin.list_users(page=page, per_page=self.page_size)
                for user in users:
                    if (user.email or "").lower() == wanted:
                        metadata = user.user_metadata or {}
                        return IdentityRecord(id=user.id, email=user.email, display_name=metadata.get("display_name"))
                if len(users) < self.page_size:
                    break
                page += 1
        except Exception as e:
            logger.error(f"Identity lookup failed: {e}")
            raise StoreError("Failed to verify email", error=str(e)) from e
        raise IdentityNotFound(email)

    def create_user(self, email: str, password_hash: str, display_name: str) -> IdentityRecord:
        try:
            response = self.supabase.auth.admin.create_user({
                "email": email,
                "password": password_hash,
                "email_confirm": True,
                "user_metadata": {"display_name": display_name},
            })
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise DuplicateEmail() from e
            logger.error(f"Identity creation failed: {e}")
            raise StoreError("Failed to register user", error=error_message) from e
        if not response.user:
            raise StoreError("Failed to register user")
        return IdentityRecord(id=response.user.id, email=response.user.email or email, display_name=display_name)

    def delete_user(self, user_id: str) -> None:
        try:
            self.supabase.auth.admin.delete_user(user_id)
        except Exception as e:
            logger.error(f"Identity deletion failed for {user_id}: {e}")
            raise StoreError("Failed to delete user", error=str(e)) from e


class InMemoryIdentityProvider(IdentityProvider):
    def __init__(self):
        self._lock = threading.Lock()
        self._by_email: Dict[str, IdentityRecord] = {}

    def get_user_by_email(self, email: str) -> IdentityRecord:
        with self._lock:
            record = self._by_email.get(email.lower())
        if record is None:
            raise IdentityNotFound(email)
        return record

    def create_user(self, email: str, password_hash: str, display_name: str) -> IdentityRecord:
        with self._lock:
            if email.lower() in self._by_email:
                raise DuplicateEmail()
            record = IdentityRecord(id=uuid.uuid4().hex, email=email, display_name=display_name)
            self._by_email[email.lower()] = record
        return record

    def delete_user(self, user_id: str) -> None:
        with self._lock:
            self._by_email = {k: r for k, r in self._by_email.items() if r.id != user_id}
