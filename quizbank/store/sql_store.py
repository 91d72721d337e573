"""
SQL-backed document store.

Keeps every document of every collection in one ``documents`` table with a
JSON payload. Commits run in a single transaction, so a batch is
all-or-nothing. Subscriptions are served by a watcher thread per listener
that polls the collection and emits a full snapshot whenever its contents
change; commits made through the same store wake watchers immediately.

Works with any SQLAlchemy URL (SQLite for local use, PostgreSQL in shared
deployments).
"""

from __future__ import annotations

import threading
from collections.abc import Generator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from loguru import logger
from sqlalchemy import JSON, DateTime, Integer, Text, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from quizbank.errors import CommitError, SubscriptionError
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

DEFAULT_POLL_INTERVAL = 2.0


class Base(DeclarativeBase):
    """Declarative base for store tables."""


class StoredDocument(Base):
    """One document in one collection."""

    __tablename__ = "documents"

    collection_path: Mapped[str] = mapped_column(Text, primary_key=True)
    document_id: Mapped[str] = mapped_column(Text, primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


@dataclass(eq=False)
class _CollectionWatcher:
    """Polls one collection on behalf of one listener."""

    store: SqlDocumentStore
    path: str
    on_snapshot: SnapshotCallback
    on_error: ErrorCallback | None
    poll_interval: float
    fingerprint: tuple[tuple[str, int], ...] | None = None

    _stop_event: threading.Event = field(default_factory=threading.Event, repr=False)
    _wake_event: threading.Event = field(default_factory=threading.Event, repr=False)
    _thread: threading.Thread | None = field(default=None, repr=False)

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self._watch_loop,
            name=f"quizbank-watch-{self.path}",
            daemon=True,
        )
        self._thread.start()

    def wake(self) -> None:
        self._wake_event.set()

    def stop(self) -> None:
        self._stop_event.set()
        self._wake_event.set()
        if (
            self._thread
            and self._thread.is_alive()
            and self._thread is not threading.current_thread()
        ):
            self._thread.join(timeout=5.0)

    def _watch_loop(self) -> None:
        while not self._stop_event.is_set():
            self._wake_event.wait(timeout=self.poll_interval)
            self._wake_event.clear()
            if self._stop_event.is_set():
                break

            try:
                snapshot, fingerprint = self.store._read_collection(self.path)
            except SQLAlchemyError as exc:
                self._fail(exc)
                break

            if fingerprint == self.fingerprint:
                continue
            self.fingerprint = fingerprint
            self._deliver(snapshot)

    def _deliver(self, snapshot: CollectionSnapshot) -> None:
        try:
            self.on_snapshot(snapshot)
        except Exception as exc:
            logger.warning("Snapshot listener for {} failed: {}", self.path, exc)

    def _fail(self, exc: BaseException) -> None:
        error = SubscriptionError(f"Lost change stream for {self.path}: {exc}")
        logger.error("{}", error)
        self.store._forget(self)
        if self.on_error:
            try:
                self.on_error(error)
            except Exception as callback_exc:
                logger.warning("Subscription error callback failed: {}", callback_exc)


class SqlDocumentStore(DocumentStore):
    """Document store persisted through SQLAlchemy."""

    def __init__(
        self,
        database_url: str | None = None,
        engine: Engine | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """
        Initialize the store and create its table if needed.

        Args:
            database_url: SQLAlchemy URL (ignored when ``engine`` is given)
            engine: Pre-built engine
            poll_interval: Seconds between change checks per subscription
        """
        if engine is None:
            if not database_url:
                raise ValueError("SqlDocumentStore needs a database_url or an engine")
            connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
            engine = create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)

        self.engine = engine
        self.poll_interval = poll_interval
        self._session_factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
        self._lock = threading.Lock()
        self._watchers: dict[str, list[_CollectionWatcher]] = {}

        Base.metadata.create_all(bind=engine)
        logger.debug("SQL document store ready: {}", engine.url.render_as_string(hide_password=True))

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Provide a transactional scope around a series of operations."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:  # Intentionally broad - rollback on any error before re-raising
            session.rollback()
            raise
        finally:
            session.close()

    # =========================================================================
    # WRITES
    # =========================================================================

    def commit_batch(self, path: str, writes: Sequence[tuple[str, dict[str, Any]]]) -> None:
        check_batch_size(writes)
        commit_time = datetime.now(UTC)
        stamp = commit_time.isoformat()

        try:
            with self.session_scope() as session:
                for doc_id, data in writes:
                    payload = resolve_server_timestamps(data, stamp)
                    existing = session.get(StoredDocument, (path, doc_id))
                    if existing is None:
                        session.add(
                            StoredDocument(
                                collection_path=path,
                                document_id=doc_id,
                                data=payload,
                                version=1,
                                created_at=commit_time,
                                updated_at=commit_time,
                            )
                        )
                    else:
                        existing.data = payload
                        existing.version += 1
                        existing.updated_at = commit_time
        except SQLAlchemyError as exc:
            raise CommitError(f"Commit of {len(writes)} writes to {path} failed: {exc}") from exc

        logger.debug("Committed {} writes to {}", len(writes), path)
        self._wake(path)

    def delete_document(self, path: str, doc_id: str) -> bool:
        """Remove a document; returns False if it did not exist."""
        with self.session_scope() as session:
            existing = session.get(StoredDocument, (path, doc_id))
            if existing is None:
                return False
            session.delete(existing)

        self._wake(path)
        return True

    # =========================================================================
    # READS
    # =========================================================================

    def get_collection(self, path: str) -> CollectionSnapshot:
        snapshot, _ = self._read_collection(path)
        return snapshot

    def subscribe_collection(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Unsubscribe:
        try:
            snapshot, fingerprint = self._read_collection(path)
        except SQLAlchemyError as exc:
            raise SubscriptionError(f"Cannot open change stream for {path}: {exc}") from exc

        watcher = _CollectionWatcher(
            store=self,
            path=path,
            on_snapshot=on_snapshot,
            on_error=on_error,
            poll_interval=self.poll_interval,
            fingerprint=fingerprint,
        )
        on_snapshot(snapshot)

        with self._lock:
            self._watchers.setdefault(path, []).append(watcher)
        watcher.start()

        def unsubscribe() -> None:
            self._forget(watcher)
            watcher.stop()

        return unsubscribe

    def watcher_count(self, path: str) -> int:
        """Number of live watchers on a collection."""
        with self._lock:
            return len(self._watchers.get(path, []))

    def close(self) -> None:
        """Stop every watcher and dispose of the engine."""
        with self._lock:
            watchers = [w for group in self._watchers.values() for w in group]
            self._watchers.clear()
        for watcher in watchers:
            watcher.stop()
        self.engine.dispose()

    def _read_collection(self, path: str) -> tuple[CollectionSnapshot, tuple[tuple[str, int], ...]]:
        with self.session_scope() as session:
            rows = session.scalars(
                select(StoredDocument)
                .where(StoredDocument.collection_path == path)
                .order_by(StoredDocument.created_at, StoredDocument.document_id)
            ).all()
            docs = tuple(DocumentSnapshot(id=row.document_id, data=dict(row.data)) for row in rows)
            fingerprint = tuple(sorted((row.document_id, row.version) for row in rows))

        return CollectionSnapshot(path=path, docs=docs, read_at=datetime.now(UTC)), fingerprint

    def _wake(self, path: str) -> None:
        with self._lock:
            watchers = list(self._watchers.get(path, []))
        for watcher in watchers:
            watcher.wake()

    def _forget(self, watcher: _CollectionWatcher) -> None:
        with self._lock:
            group = self._watchers.get(watcher.path, [])
            if watcher in group:
                group.remove(watcher)
