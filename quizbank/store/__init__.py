"""Document store clients."""

from quizbank.store.base import (
    SERVER_TIMESTAMP,
    CollectionSnapshot,
    DocumentSnapshot,
    DocumentStore,
    auto_id,
)
from quizbank.store.config import (
    DEFAULT_CHUNK_SIZE,
    MAX_COMMIT_WRITES,
    QUESTIONS_COLLECTION,
    question_collection_path,
)
from quizbank.store.memory import InMemoryDocumentStore
from quizbank.store.sql_store import SqlDocumentStore

__all__ = [
    "SERVER_TIMESTAMP",
    "CollectionSnapshot",
    "DocumentSnapshot",
    "DocumentStore",
    "InMemoryDocumentStore",
    "SqlDocumentStore",
    "auto_id",
    # Config exports
    "DEFAULT_CHUNK_SIZE",
    "MAX_COMMIT_WRITES",
    "QUESTIONS_COLLECTION",
    "question_collection_path",
]
