"""
Unit tests for the store primitives and the in-memory document store.
"""

import threading
from datetime import datetime

import pytest

from quizbank.errors import CommitError
from quizbank.store import SERVER_TIMESTAMP, InMemoryDocumentStore, auto_id, question_collection_path
from quizbank.store.base import resolve_server_timestamps
from quizbank.store.config import AUTO_ID_ALPHABET


class TestStorePrimitives:
    """Tests for ids, paths and timestamp resolution."""

    def test_auto_id_shape(self):
        ids = {auto_id() for _ in range(100)}

        assert len(ids) == 100
        assert all(len(i) == 20 and set(i) <= set(AUTO_ID_ALPHABET) for i in ids)

    def test_collection_path(self):
        assert question_collection_path("demo") == "artifacts/demo/public/data/exams_questions"

    @pytest.mark.parametrize("tenant", ["", "a/b"])
    def test_invalid_tenant(self, tenant):
        with pytest.raises(ValueError):
            question_collection_path(tenant)

    def test_resolve_server_timestamps(self):
        now = object()
        resolved = resolve_server_timestamps({"a": SERVER_TIMESTAMP, "b": 1}, now)

        assert resolved == {"a": now, "b": 1}


class TestInMemoryDocumentStore:
    """Tests for InMemoryDocumentStore."""

    def test_commit_and_read(self, memory_store):
        memory_store.commit_batch("c", [("d1", {"x": 1}), ("d2", {"x": 2})])

        snapshot = memory_store.get_collection("c")
        assert snapshot.path == "c"
        assert {d.id: d.data["x"] for d in snapshot} == {"d1": 1, "d2": 2}
        assert memory_store.commit_count == 1

    def test_server_timestamp_resolved_once_per_commit(self, memory_store):
        memory_store.commit_batch("c", [("d1", {"t": SERVER_TIMESTAMP}), ("d2", {"t": SERVER_TIMESTAMP})])

        stamps = [d.data["t"] for d in memory_store.get_collection("c")]
        assert isinstance(stamps[0], datetime)
        assert stamps[0] == stamps[1]

    def test_batch_over_limit_rejected(self, memory_store):
        writes = [(str(i), {}) for i in range(501)]

        with pytest.raises(CommitError):
            memory_store.commit_batch("c", writes)
        assert len(memory_store.get_collection("c")) == 0

    def test_batch_at_limit_accepted(self, memory_store):
        memory_store.commit_batch("c", [(str(i), {}) for i in range(500)])

        assert len(memory_store.get_collection("c")) == 500

    def test_subscribe_delivers_initial_and_changes(self, memory_store):
        sizes = []
        unsubscribe = memory_store.subscribe_collection("c", lambda s: sizes.append(len(s)))

        memory_store.commit_batch("c", [("d1", {})])
        memory_store.delete_document("c", "d1")
        unsubscribe()
        memory_store.commit_batch("c", [("d2", {})])

        assert sizes == [0, 1, 0]

    def test_delete_missing_document(self, memory_store):
        assert memory_store.delete_document("c", "nope") is False

    def test_snapshot_data_is_a_copy(self, memory_store):
        memory_store.commit_batch("c", [("d1", {"x": 1})])
        memory_store.get_collection("c")[0].data["x"] = 99

        assert memory_store.get_collection("c")[0].data["x"] == 1

    def test_new_document_ids_unique(self):
        store = InMemoryDocumentStore()

        assert store.new_document_id("c") != store.new_document_id("c")

    def test_raising_listener_keeps_commit_and_other_listeners(self, memory_store):
        def broken(snapshot):
            if len(snapshot):
                raise RuntimeError("listener bug")

        sizes = []
        memory_store.subscribe_collection("c", broken)
        memory_store.subscribe_collection("c", lambda s: sizes.append(len(s)))

        memory_store.commit_batch("c", [("d1", {})])

        assert len(memory_store.get_collection("c")) == 1
        assert sizes == [0, 1]

    def test_concurrent_commits_delivered_in_order(self, memory_store):
        """Snapshot sizes only ever grow, so the last one seen is the final state."""
        sizes = []
        memory_store.subscribe_collection("c", lambda s: sizes.append(len(s)))

        def writer(prefix):
            for i in range(50):
                memory_store.commit_batch("c", [(f"{prefix}{i}", {})])

        threads = [threading.Thread(target=writer, args=(p,)) for p in "abcd"]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sizes == sorted(sizes)
        assert sizes[-1] == 200

    def test_initial_snapshot_failure_leaves_no_listener(self, memory_store):
        def broken(snapshot):
            raise RuntimeError("listener bug")

        with pytest.raises(RuntimeError):
            memory_store.subscribe_collection("c", broken)

        assert memory_store.listener_count("c") == 0
