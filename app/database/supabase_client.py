import logging
from typing import Optional

from supabase import create_client, Client

from app.config import Settings
from app.database.document_store import DocumentStore, SupabaseDocumentStore
from app.database.memory_store import InMemoryDocumentStore
from app.modules.auth.identity import IdentityProvider, SupabaseIdentityProvider, InMemoryIdentityProvider

logger = logging.getLogger(__name__)


class SupabaseClient:
    """Owns the Supabase clients for one application instance."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client: Optional[Client] = None
        self._service_client: Optional[Client] = None

    def get_client(self) -> Client:
        if self._client is None:
            self._client = create_client(self.settings.supabase_url, self.settings.supabase_key)
        return self._client

    def get_service_client(self) -> Client:
        """Client with service_role key; required for the auth admin API."""
        if self._service_client is None and self.settings.supabase_service_role_key:
            self._service_client = create_client(
                self.settings.supabase_url, self.settings.supabase_service_role_key
            )
        return self._service_client or self.get_client()

    def close(self):
        self._client = None
        self._service_client = None


class Backends:
    """Store and identity provider built at startup and released at shutdown."""

    def __init__(self, store: DocumentStore, identity_provider: IdentityProvider, supabase: Optional[SupabaseClient] = None):
        self.store = store
        self.identity_provider = identity_provider
        self.supabase = supabase

    def close(self):
        self.store.close()
        if self.supabase is not None:
            self.supabase.close()


def create_backends(settings: Settings) -> Backends:
    if settings.store_backend == "memory":
        logger.warning("Using in-memory store; data is lost on shutdown")
        return Backends(InMemoryDocumentStore(), InMemoryIdentityProvider())
    if settings.store_backend != "supabase":
        raise ValueError(f"Unknown store backend: {settings.store_backend}")
    supabase = SupabaseClient(settings)
    store = SupabaseDocumentStore(supabase.get_client())
    identity_provider = SupabaseIdentityProvider(supabase.get_service_client())
    return Backends(store, identity_provider, supabase)


