"""
Unit Tests for DraftRepository

Tests for named draft persistence on the local device.
"""

import pytest

from studybrick_toolkit.core.models import PaperMetadata, SelectionEntry
from studybrick_toolkit.drafts import DraftError, DraftRepository, draft_slug


class TestDraftSlug:
    def test_when_name_has_symbols_then_slugged(self):
        assert draft_slug("Mock Test #1") == "mock-test-1"

    def test_when_name_has_no_usable_characters_then_raises(self):
        with pytest.raises(DraftError):
            draft_slug("###")


class TestDraftRepository:
    """Tests for load/save/create/discard/list."""

    def test_when_draft_missing_then_empty_draft_with_defaults(self, data_dir):
        repository = DraftRepository(data_dir, default_metadata=PaperMetadata("Acme", "Mock Test 1"))

        draft = repository.load("default")

        assert draft.is_empty
        assert draft.metadata == PaperMetadata("Acme", "Mock Test 1")
        assert not repository.exists("default")

    def test_when_saved_then_reload_reconstructs_draft(self, repository, make_question):
        """Order, option text and metadata survive a save and reload."""
        draft = repository.load("default").with_entries((
            SelectionEntry(make_question("b", options=("$\\alpha$", "beta"), correct_answer=0)),
            SelectionEntry(make_question("a")),
        )).with_metadata(PaperMetadata("Acme", "Unit 3"))

        repository.save(draft)
        restored = repository.load("default")

        assert restored.question_ids == ("b", "a")
        assert restored.entries[0].question.options == ("$\\alpha$", "beta")
        assert restored.metadata == PaperMetadata("Acme", "Unit 3")

    def test_when_file_corrupt_then_empty_draft(self, repository):
        """An unreadable draft starts over instead of blocking."""
        path = repository.path_for("default")
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")

        assert repository.load("default").is_empty

    def test_when_created_twice_then_raises(self, repository):
        repository.create("Unit 3")

        with pytest.raises(DraftError, match="already exists"):
            repository.create("Unit 3")

    def test_when_drafts_saved_then_listed_by_name(self, repository):
        repository.create("Unit 3")
        repository.create("Mock Test")

        assert repository.list_names() == ["Mock Test", "Unit 3"]

    def test_when_discarded_then_gone(self, repository):
        repository.create("Unit 3")

        assert repository.discard("Unit 3")
        assert not repository.discard("Unit 3")
        assert repository.list_names() == []

    def test_when_write_fails_then_draft_error(self, repository, monkeypatch):
        def fail(path, data):
            raise OSError("disk full")

        monkeypatch.setattr("studybrick_toolkit.drafts.repository.locked_write_json", fail)

        with pytest.raises(DraftError, match="disk full"):
            repository.save(repository.load("default"))
