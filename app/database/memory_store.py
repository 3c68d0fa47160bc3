"""In-process document store for local development and tests."""
import copy
import logging
import threading
import uuid
from typing import Any, Dict, List, Optional

from app.database.document_store import DocumentStore, EQUALS, ARRAY_CONTAINS, resolve_sentinels

logger = logging.getLogger(__name__)


class InMemoryDocumentStore(DocumentStore):
    def __init__(self):
        self._lock = threading.Lock()
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(name, {})

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._collection(collection).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def set(self, collection: str, fields: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        doc_id = doc_id or str(uuid.uuid4())
        with self._lock:
            self._collection(collection)[doc_id] = {"id": doc_id, **copy.deepcopy(resolve_sentinels(fields))}
        return doc_id

    def update(
        self,
        collection: str,
        doc_id: str,
        fields: Dict[str, Any],
        if_match: Optional[Dict[str, Any]] = None,
    ) -> bool:
        with self._lock:
            doc = self._collection(collection).get(doc_id)
            if doc is None:
                return False
            for field, expected in (if_match or {}).items():
                if doc.get(field) != expected:
                    return False
            doc.update(copy.deepcopy(resolve_sentinels(fields)))
            return True

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self._collection(collection).pop(doc_id, None)

    def query(self, collection: str, field: str, value: Any, op: str = EQUALS) -> List[Dict[str, Any]]:
        if op == EQUALS:
            match = lambda doc: doc.get(field) == value
        elif op == ARRAY_CONTAINS:
            match = lambda doc: value in (doc.get(field) or [])
        else:
            raise ValueError(f"Unsupported query operator: {op}")
        with self._lock:
            return [copy.deepcopy(d) for d in self._collection(collection).values() if match(d)]

    def list(self, collection: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(d) for d in self._collection(collection).values()]

    def close(self) -> None:
        with self._lock:
            self._collections.clear()
        logger.debug("In-memory store cleared")
