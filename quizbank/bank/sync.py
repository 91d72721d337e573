"""
Live question bank sync.

Subscribes to the question collection and keeps a materialized view
(id -> Question) current. Every change notification rebuilds the whole view
from the full collection snapshot; there is no incremental patching, so the
view a consumer sees is always a complete, consistent copy of the store.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator, Mapping

from loguru import logger

from quizbank.errors import SubscriptionError
from quizbank.models import Question
from quizbank.store.base import CollectionSnapshot, DocumentStore, Unsubscribe

UpdateCallback = Callable[["QuestionBankView"], None]


class QuestionBankView(Mapping[str, Question]):
    """Read-only mapping from question id to Question."""

    def __init__(self, questions: Mapping[str, Question] | None = None) -> None:
        self._questions: dict[str, Question] = dict(questions or {})

    def __getitem__(self, question_id: str) -> Question:
        return self._questions[question_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._questions)

    def __len__(self) -> int:
        return len(self._questions)

    def __repr__(self) -> str:
        return f"QuestionBankView({len(self._questions)} questions)"

    def subjects(self) -> list[str]:
        """Sorted distinct non-empty subjects."""
        return sorted({q.subject for q in self._questions.values() if q.subject})

    def difficulties(self) -> list[str]:
        """Sorted distinct non-empty difficulties."""
        return sorted({q.difficulty for q in self._questions.values() if q.difficulty})

    def filter(self, subject: str, difficulty: str) -> list[Question]:
        """Questions matching subject and difficulty exactly."""
        return [
            q for q in self._questions.values() if q.subject == subject and q.difficulty == difficulty
        ]

    @classmethod
    def from_snapshot(cls, snapshot: CollectionSnapshot) -> QuestionBankView:
        """Materialize a view from a full collection snapshot."""
        questions: dict[str, Question] = {}
        for doc in snapshot:
            try:
                questions[doc.id] = Question.from_document(doc.id, doc.data)
            except ValueError as exc:
                logger.warning("Skipping malformed question document: {}", exc)
        return cls(questions)


class QuestionBankSync:
    """
    Maintains the live question bank view for one collection.

    Usage:
        sync = QuestionBankSync(store, collection_path)
        unsubscribe = sync.subscribe(lambda view: render(view))
        # ... app runs ...
        unsubscribe()
    """

    def __init__(
        self,
        store: DocumentStore,
        collection_path: str,
        on_error: Callable[[SubscriptionError], None] | None = None,
    ) -> None:
        """
        Initialize sync.

        Args:
            store: Document store client
            collection_path: Tenant-scoped question collection path
            on_error: Optional callback when the change stream fails
        """
        self.store = store
        self.collection_path = collection_path
        self.on_error = on_error
        self.update_count = 0
        self._lock = threading.Lock()
        self._view = QuestionBankView()
        self.last_error: SubscriptionError | None = None

    @property
    def view(self) -> QuestionBankView:
        """Latest materialized view (empty until the first snapshot)."""
        with self._lock:
            return self._view

    def subjects(self) -> list[str]:
        return self.view.subjects()

    def difficulties(self) -> list[str]:
        return self.view.difficulties()

    def subscribe(self, on_update: UpdateCallback) -> Unsubscribe:
        """
        Open the live subscription.

        Args:
            on_update: Called with the rebuilt view after every change

        Returns:
            Function that releases the subscription; call it exactly once
        """

        def handle_snapshot(snapshot: CollectionSnapshot) -> None:
            view = QuestionBankView.from_snapshot(snapshot)
            with self._lock:
                self._view = view
                self.update_count += 1
            logger.debug("Question bank rebuilt: {} questions", len(view))
            on_update(view)

        def handle_error(error: SubscriptionError) -> None:
            self.last_error = error
            logger.error("Question bank subscription failed: {}", error)
            if self.on_error:
                self.on_error(error)

        logger.info("Subscribing to question bank at {}", self.collection_path)
        release = self.store.subscribe_collection(
            self.collection_path, handle_snapshot, on_error=handle_error
        )
        released = threading.Event()

        def unsubscribe() -> None:
            if released.is_set():
                logger.warning("Question bank subscription already released")
                return
            released.set()
            release()
            logger.info("Unsubscribed from question bank at {}", self.collection_path)

        return unsubscribe
