"""In-memory document store for local runs and tests."""

from collections import Counter, defaultdict
from copy import deepcopy
from threading import Lock
from typing import Any, Dict, List, Mapping, Optional

from repositories.interfaces import DocumentStore, precondition_holds
from utils.error_handling import NotFoundError, PreconditionFailedError


class InMemoryDocumentStore(DocumentStore):
    """Thread-safe dict-backed store. Conditional updates are serialised by a lock."""

    def __init__(self) -> None:
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)
        self._lock = Lock()
        self.calls: Counter = Counter()

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def get_by_id(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        self.calls["get_by_id"] += 1
        with self._lock:
            item = self._collections[collection].get(doc_id)
            return deepcopy(item) if item is not None else None

    def put(self, collection: str, item: Dict[str, Any]) -> None:
        self.calls["put"] += 1
        with self._lock:
            self._collections[collection][item["id"]] = deepcopy(item)

    def update(self, collection: str, doc_id: str, patch: Mapping[str, Any]) -> Dict[str, Any]:
        self.calls["update"] += 1
        with self._lock:
            item = self._collections[collection].get(doc_id)
            if item is None:
                raise NotFoundError(f"{collection}/{doc_id} not found")
            item.update(deepcopy(dict(patch)))
            return deepcopy(item)

    def conditional_update(
        self,
        collection: str,
        doc_id: str,
        patch: Mapping[str, Any],
        precondition: Mapping[str, Any],
    ) -> Dict[str, Any]:
        self.calls["conditional_update"] += 1
        with self._lock:
            item = self._collections[collection].get(doc_id)
            if item is None or not precondition_holds(item, precondition):
                raise PreconditionFailedError(collection, doc_id)
            item.update(deepcopy(dict(patch)))
            return deepcopy(item)

    def query(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        self.calls["query"] += 1
        with self._lock:
            return [
                deepcopy(item)
                for item in self._collections[collection].values()
                if item.get(field) == value
            ]

    def list_all(self, collection: str) -> List[Dict[str, Any]]:
        self.calls["list_all"] += 1
        with self._lock:
            return [deepcopy(item) for item in self._collections[collection].values()]
