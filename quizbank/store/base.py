"""
Document store client interface.

A store holds schemaless documents grouped by collection path. Writers
commit batches atomically; readers subscribe to a collection and receive a
full snapshot on subscribe and after every change.
"""

from __future__ import annotations

import secrets
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from quizbank.errors import CommitError, SubscriptionError
from quizbank.store.config import AUTO_ID_ALPHABET, AUTO_ID_LENGTH, MAX_COMMIT_WRITES


class _ServerTimestamp:
    """Sentinel replaced by the store's commit time."""

    _instance: _ServerTimestamp | None = None

    def __new__(cls) -> _ServerTimestamp:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()

SnapshotCallback = Callable[["CollectionSnapshot"], None]
ErrorCallback = Callable[[SubscriptionError], None]
Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class DocumentSnapshot:
    """One document as read from the store."""

    id: str
    data: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return dict(self.data)


@dataclass(frozen=True)
class CollectionSnapshot(Sequence[DocumentSnapshot]):
    """Every document of a collection at one point in time."""

    path: str
    docs: tuple[DocumentSnapshot, ...] = field(default_factory=tuple)
    read_at: datetime | None = None

    def __getitem__(self, index):  # type: ignore[override]
        return self.docs[index]

    def __len__(self) -> int:
        return len(self.docs)

    def __iter__(self) -> Iterator[DocumentSnapshot]:
        return iter(self.docs)


def auto_id() -> str:
    """Generate a random 20-character document id."""
    return "".join(secrets.choice(AUTO_ID_ALPHABET) for _ in range(AUTO_ID_LENGTH))


def resolve_server_timestamps(data: dict[str, Any], commit_time: Any) -> dict[str, Any]:
    """Replace SERVER_TIMESTAMP field values with the commit time."""
    return {key: (commit_time if value is SERVER_TIMESTAMP else value) for key, value in data.items()}


def check_batch_size(writes: Sequence[tuple[str, dict[str, Any]]]) -> None:
    """Reject batches over the atomic write ceiling."""
    if len(writes) > MAX_COMMIT_WRITES:
        raise CommitError(
            f"Batch of {len(writes)} writes exceeds the limit of {MAX_COMMIT_WRITES} per commit"
        )


class DocumentStore(ABC):
    """Client for a remote (or local) document store."""

    def new_document_id(self, path: str) -> str:
        """Allocate an id for a new document in ``path``."""
        return auto_id()

    @abstractmethod
    def commit_batch(self, path: str, writes: Sequence[tuple[str, dict[str, Any]]]) -> None:
        """
        Atomically set every (document_id, data) pair in ``path``.

        Raises:
            CommitError: If nothing could be committed
        """

    @abstractmethod
    def get_collection(self, path: str) -> CollectionSnapshot:
        """Read the current state of a collection."""

    @abstractmethod
    def subscribe_collection(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Unsubscribe:
        """
        Listen to a collection.

        ``on_snapshot`` receives the full collection once right away and again
        after every change. The returned function releases the listener.
        """
