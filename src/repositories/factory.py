"""Pick a document store backend from runtime settings."""

from repositories.interfaces import DocumentStore
from utils.logging_config import get_logger
from utils.settings import RuntimeSettings

logger = get_logger(__name__)

# Process-wide memory store so handlers share state within a warm Lambda / local run.
_memory_store = None


def build_store(settings: RuntimeSettings) -> DocumentStore:
    """Return the store configured by STORE_BACKEND."""
    global _memory_store
    if settings.store_backend == "memory":
        if _memory_store is None:
            from repositories.memory_repo import InMemoryDocumentStore

            logger.warning("Using in-memory document store; data is not persisted")
            _memory_store = InMemoryDocumentStore()
        return _memory_store

    from repositories.dynamodb_repo import DynamoDbDocumentStore

    return DynamoDbDocumentStore(
        table_name_for=settings.table_name,
        region=settings.aws_region,
        connect_timeout=settings.store_connect_timeout_seconds,
        read_timeout=settings.store_read_timeout_seconds,
        max_attempts=settings.store_max_attempts,
    )


def reset_memory_store() -> None:
    """Drop the shared in-memory store (tests)."""
    global _memory_store
    _memory_store = None
