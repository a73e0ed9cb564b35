"""
Unit Tests for the In-Memory Catalog Store

Tests for snapshots, live subscriptions and administrative writes.
"""

import json

import pytest

from studybrick_toolkit.catalog import (
    QUESTIONS,
    RESOURCES,
    CatalogError,
    InMemoryCatalogStore,
    load_catalog,
)


class TestSubscriptions:
    """Tests for live snapshot delivery."""

    def test_when_subscribed_then_current_snapshot_delivered(self, question_record):
        """A new subscriber receives the current snapshot immediately."""
        store = InMemoryCatalogStore({QUESTIONS: [question_record("q1")]})
        received = []

        store.subscribe(QUESTIONS, received.append)

        assert [[r["id"] for r in snap] for snap in received] == [["q1"]]

    def test_when_record_added_then_full_snapshot_pushed(self, question_record):
        """Every write pushes a complete snapshot, in write order."""
        store = InMemoryCatalogStore()
        received = []
        store.subscribe(QUESTIONS, received.append)

        store.add(QUESTIONS, question_record("q1"))
        store.add(QUESTIONS, question_record("q2"))

        assert [[r["id"] for r in snap] for snap in received] == [[], ["q1"], ["q1", "q2"]]

    def test_when_unsubscribed_then_no_more_pushes(self, question_record):
        store = InMemoryCatalogStore()
        received = []
        subscription = store.subscribe(QUESTIONS, received.append)

        subscription.unsubscribe()
        subscription.unsubscribe()
        store.add(QUESTIONS, question_record("q1"))

        assert received == [[]]
        assert not subscription.active

    def test_when_other_collection_written_then_not_pushed(self):
        store = InMemoryCatalogStore()
        received = []
        store.subscribe(QUESTIONS, received.append)

        store.add(RESOURCES, {"title": "Notes", "subject": "physics"})

        assert received == [[]]

    def test_when_listener_raises_then_error_callback_called(self, question_record):
        """A failing listener is reported through its error callback."""
        store = InMemoryCatalogStore()
        errors = []

        def explode(snapshot):
            if snapshot:
                raise RuntimeError("boom")

        store.subscribe(QUESTIONS, explode, errors.append)
        store.add(QUESTIONS, question_record("q1"))

        assert len(errors) == 1
        assert str(errors[0]) == "boom"

    def test_when_snapshot_mutated_then_store_unchanged(self, question_record):
        """Snapshots are copies."""
        store = InMemoryCatalogStore({QUESTIONS: [question_record("q1")]})

        store.snapshot(QUESTIONS)[0]["content"] = "changed"

        assert store.get(QUESTIONS, "q1")["content"] == "Question q1"


class TestAdministrativeWrites:
    """Tests for add/update/assign/delete."""

    def test_when_added_without_id_then_id_generated(self):
        store = InMemoryCatalogStore()

        record_id = store.add(QUESTIONS, {"subject": "maths", "content": "1+1?"})

        assert record_id
        assert store.get(QUESTIONS, record_id)["id"] == record_id

    def test_when_generated_id_taken_then_next_one_used(self):
        """Loaded ids never collide with generated ones."""
        store = InMemoryCatalogStore({QUESTIONS: [{"id": "questions-1", "content": "x"}]})

        record_id = store.add(QUESTIONS, {"content": "y"})

        assert record_id != "questions-1"
        assert len(store.snapshot(QUESTIONS)) == 2

    def test_when_duplicate_id_then_raises(self, question_record):
        store = InMemoryCatalogStore({QUESTIONS: [question_record("q1")]})

        with pytest.raises(CatalogError):
            store.add(QUESTIONS, question_record("q1"))

    def test_when_assigned_then_reference_set_and_cleared(self, question_record):
        store = InMemoryCatalogStore({QUESTIONS: [question_record("q1")]})

        store.assign(QUESTIONS, "q1", "user-1")
        assert store.get(QUESTIONS, "q1")["assignedTo"] == "user-1"

        store.assign(QUESTIONS, "q1", "")
        assert store.get(QUESTIONS, "q1")["assignedTo"] is None

    def test_when_updating_missing_record_then_raises(self):
        with pytest.raises(CatalogError):
            InMemoryCatalogStore().update(QUESTIONS, "nope", {"content": "x"})

    def test_when_deleted_then_gone(self, question_record):
        store = InMemoryCatalogStore({QUESTIONS: [question_record("q1")]})

        assert store.delete(QUESTIONS, "q1")
        assert not store.delete(QUESTIONS, "q1")
        assert store.snapshot(QUESTIONS) == []


class TestLoadCatalog:
    """Tests for building a store from a JSON file."""

    def test_when_file_valid_then_collections_loaded(self, tmp_path, question_record):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({QUESTIONS: [question_record("q1")], RESOURCES: []}))

        store = load_catalog(path)

        assert [r["id"] for r in store.snapshot(QUESTIONS)] == ["q1"]

    def test_when_file_missing_then_catalog_error(self, tmp_path):
        with pytest.raises(CatalogError):
            load_catalog(tmp_path / "missing.json")

    def test_when_file_not_json_then_catalog_error(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("{not json")

        with pytest.raises(CatalogError):
            load_catalog(path)
