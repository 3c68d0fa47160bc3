"""
Document store interface and its Supabase-backed implementation.

Documents live in collections and are addressed by id. Each collection maps
to one Supabase table with an ``id`` text primary key; the remaining columns
are the document fields.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import Client

from app.core.exceptions import StoreError

logger = logging.getLogger(__name__)

EQUALS = "=="
ARRAY_CONTAINS = "array_contains"


class _ServerTimestamp:
    """Placeholder resolved to the current UTC time when the write is performed."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def resolve_sentinels(fields: Dict[str, Any]) -> Dict[str, Any]:
    now = datetime.now(timezone.utc).isoformat()
    return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in fields.items()}


class DocumentStore(ABC):
    """Collection/document CRUD used by every service."""

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def set(self, collection: str, fields: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        """Create or replace a document. Generates the id when none is given."""
        raise NotImplementedError

    @abstractmethod
    def update(
        self,
        collection: str,
        doc_id: str,
        fields: Dict[str, Any],
        if_match: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Partially update a document.

        When ``if_match`` is given the write only happens if every listed field
        still holds the given value. Returns False when nothing was written.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def query(self, collection: str, field: str, value: Any, op: str = EQUALS) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def list(self, collection: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def close(self) -> None:
        pass


class SupabaseDocumentStore(DocumentStore):
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _execute(self, query, action: str):
        try:
            return query.execute()
        except Exception as e:
            logger.error(f"Store error while trying to {action}: {e}")
            raise StoreError(f"Failed to {action}", error=str(e)) from e

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        result = self._execute(
            self.supabase.table(collection)
                .select("*")
                .eq("id", doc_id)
                .limit(1),
            f"read {collection}/{doc_id}",
        )
        return result.data[0] if result.data else None

    def set(self, collection: str, fields: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        doc_id = doc_id or str(uuid.uuid4())
        row = {"id": doc_id, **resolve_sentinels(fields)}
        self._execute(self.supabase.table(collection).upsert(row), f"write {collection}/{doc_id}")
        return doc_id

    def update(
        self,
        collection: str,
        doc_id: str,
        fields: Dict[str, Any],
        if_match: Optional[Dict[str, Any]] = None,
    ) -> bool:
        query = self.supabase.table(collection)\
            .update(resolve_sentinels(fields))\
            .eq("id", doc_id)
        for field, expected in (if_match or {}).items():
            query = query.eq(field, expected)
        result = self._execute(query, f"update {collection}/{doc_id}")
        return bool(result.data)

    def delete(self, collection: str, doc_id: str) -> None:
        self._execute(
            self.supabase.table(collection).delete().eq("id", doc_id),
            f"delete {collection}/{doc_id}",
        )

    def query(self, collection: str, field: str, value: Any, op: str = EQUALS) -> List[Dict[str, Any]]:
        query = self.supabase.table(collection).select("*")
        if op == EQUALS:
            query = query.eq(field, value)
        elif op == ARRAY_CONTAINS:
            query = query.contains(field, [value])
        else:
            raise ValueError(f"Unsupported query operator: {op}")
        result = self._execute(query, f"query {collection}")
        return result.data or []

    def list(self, collection: str) -> List[Dict[str, Any]]:
        result = self._execute(self.supabase.table(collection).select("*"), f"list {collection}")
        return result.data or []
