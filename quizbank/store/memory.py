"""
In-memory document store.

Thread-safe and synchronous: a commit applies under the store lock and then
notifies every listener of the affected collection before returning. A
listener that raises is logged and skipped; the commit stands. Used by
tests and local demos.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from loguru import logger

from quizbank.store.base import (
    CollectionSnapshot,
    DocumentSnapshot,
    DocumentStore,
    ErrorCallback,
    SnapshotCallback,
    Unsubscribe,
    check_batch_size,
    resolve_server_timestamps,
)


class InMemoryDocumentStore(DocumentStore):
    """Document store kept in process memory."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._listeners: dict[str, dict[int, SnapshotCallback]] = {}
        self._next_token = 0
        self.commit_count = 0

    def commit_batch(self, path: str, writes: Sequence[tuple[str, dict[str, Any]]]) -> None:
        check_batch_size(writes)
        commit_time = datetime.now(UTC)

        with self._lock:
            collection = self._collections.setdefault(path, {})
            for doc_id, data in writes:
                collection[doc_id] = resolve_server_timestamps(data, commit_time)
            self.commit_count += 1
            logger.debug("Committed {} writes to {}", len(writes), path)
            self._notify(path)

    def delete_document(self, path: str, doc_id: str) -> bool:
        """Remove a document; returns False if it did not exist."""
        with self._lock:
            removed = self._collections.get(path, {}).pop(doc_id, None) is not None
            if removed:
                self._notify(path)
        return removed

    def get_collection(self, path: str) -> CollectionSnapshot:
        with self._lock:
            docs = tuple(
                DocumentSnapshot(id=doc_id, data=dict(data))
                for doc_id, data in self._collections.get(path, {}).items()
            )
        return CollectionSnapshot(path=path, docs=docs, read_at=datetime.now(UTC))

    def subscribe_collection(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Unsubscribe:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            on_snapshot(self.get_collection(path))
            self._listeners.setdefault(path, {})[token] = on_snapshot

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.get(path, {}).pop(token, None)

        return unsubscribe

    def listener_count(self, path: str) -> int:
        """Number of active listeners on a collection."""
        with self._lock:
            return len(self._listeners.get(path, {}))

    def _notify(self, path: str) -> None:
        # Caller holds the lock, so snapshots reach listeners in commit order.
        listeners = list(self._listeners.get(path, {}).values())
        if not listeners:
            return
        snapshot = self.get_collection(path)
        for callback in listeners:
            try:
                callback(snapshot)
            except Exception as exc:
                logger.warning("Snapshot listener for {} failed: {}", path, exc)
