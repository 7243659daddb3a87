"""Document store interface (repository pattern).

Stores must be swappable: DynamoDB in deployed stacks, in-memory locally.
Records are plain dicts; services convert them to models.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class AbsentOr:
    """Precondition value: the field is missing or equals value."""

    value: Any


def precondition_holds(item: Mapping[str, Any], precondition: Mapping[str, Any]) -> bool:
    for field, expected in precondition.items():
        if isinstance(expected, AbsentOr):
            if field in item and item[field] != expected.value:
                return False
        elif item.get(field) != expected:
            return False
    return True


class DocumentStore(ABC):
    """Collection/id keyed document persistence."""

    @abstractmethod
    def get_by_id(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return a document, or None if it does not exist.

        Raises:
            StoreUnavailableError: On timeouts or connection failures.
        """
        ...

    @abstractmethod
    def put(self, collection: str, item: Dict[str, Any]) -> None:
        """Insert or replace a document keyed by item["id"]."""
        ...

    @abstractmethod
    def update(self, collection: str, doc_id: str, patch: Mapping[str, Any]) -> Dict[str, Any]:
        """Set the given fields on an existing document and return it.

        Raises:
            NotFoundError: If the document does not exist.
        """
        ...

    @abstractmethod
    def conditional_update(
        self,
        collection: str,
        doc_id: str,
        patch: Mapping[str, Any],
        precondition: Mapping[str, Any],
    ) -> Dict[str, Any]:
        """Apply patch only if every precondition field equals its expected value.

        An AbsentOr(value) expectation also accepts a missing field.
        The check and the write are atomic with respect to other writers.

        Raises:
            PreconditionFailedError: If the document is missing or a field differs.
        """
        ...

    @abstractmethod
    def query(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        """Return documents whose field equals value."""
        ...

    @abstractmethod
    def list_all(self, collection: str) -> List[Dict[str, Any]]:
        """Return every document in a collection."""
        ...
