"""Tests for the form store.

Tests cover:
- StoredForm factory and timestamps
- SQLite CRUD operations
- Ordering and paging of form listings
"""

from pathlib import Path

import pytest

from .models import StoredForm
from .sqlite import SQLiteFormStore

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def store(tmp_path: Path):
    """Create an initialized store in a temporary directory."""
    form_store = SQLiteFormStore(tmp_path / "nested" / "forms.db")
    form_store.initialize()
    yield form_store
    form_store.close()


def _form(name: str = "Contact") -> StoredForm:
    return StoredForm.create(
        name=name,
        description=f"{name} form",
        schema={"type": "object", "properties": {"email": {"type": "string"}}},
        ui_schema={"type": "VerticalLayout", "elements": []},
    )


# =============================================================================
# Model Tests
# =============================================================================


class TestStoredForm:
    """Tests for the StoredForm model."""

    @pytest.mark.unit
    def test_create_generates_id(self):
        """Factory assigns unique IDs."""
        assert _form().id != _form().id

    @pytest.mark.unit
    def test_touch_moves_updated_at(self):
        """touch() refreshes updated_at only."""
        form = _form()
        created = form.created_at
        before = form.updated_at
        form.touch()
        assert form.updated_at >= before
        assert form.created_at == created


# =============================================================================
# SQLite Tests
# =============================================================================


class TestSQLiteFormStore:
    """Tests for SQLiteFormStore."""

    @pytest.mark.unit
    def test_requires_initialize(self, tmp_path):
        """Operations before initialize() fail loudly."""
        with pytest.raises(RuntimeError):
            SQLiteFormStore(tmp_path / "forms.db").get("x")

    @pytest.mark.unit
    def test_initialize_creates_parent_directory(self, tmp_path, store):
        """The database directory is created on demand."""
        assert (tmp_path / "nested" / "forms.db").exists()

    @pytest.mark.unit
    def test_save_and_get(self, store):
        """Saved forms come back unchanged."""
        form = store.save(_form())
        loaded = store.get(form.id)
        assert loaded == form

    @pytest.mark.unit
    def test_get_missing(self, store):
        """Unknown IDs return None."""
        assert store.get("missing") is None

    @pytest.mark.unit
    def test_save_is_upsert(self, store):
        """Saving an existing ID replaces it."""
        form = store.save(_form())
        form.name = "Renamed"
        form.schema = {"type": "object", "properties": {}}
        store.save(form)

        forms = store.list_forms()
        assert len(forms) == 1
        assert forms[0].name == "Renamed"
        assert forms[0].schema == {"type": "object", "properties": {}}
        assert forms[0].created_at == form.created_at

    @pytest.mark.unit
    def test_resave_returns_stored_created_at(self, store):
        """A fresh copy saved under an existing ID reports the first created_at."""
        first = store.save(_form())
        again = _form("Again")
        again.id = first.id
        again.created_at = again.created_at.replace(year=again.created_at.year + 1)

        saved = store.save(again)
        assert saved.created_at == first.created_at
        assert store.get(first.id).created_at == first.created_at

    @pytest.mark.unit
    def test_documents_are_opaque(self, store):
        """Arbitrary JSON values are stored as given."""
        form = StoredForm.create(
            name="Odd",
            schema={"anything": [1, 2.5, None, {"nested": True}]},
            ui_schema={},
        )
        store.save(form)
        assert store.get(form.id).schema == {"anything": [1, 2.5, None, {"nested": True}]}

    @pytest.mark.unit
    def test_list_most_recent_first(self, store):
        """Listings are ordered by last save."""
        first = store.save(_form("First"))
        store.save(_form("Second"))
        store.save(first)
        assert [form.name for form in store.list_forms()] == ["First", "Second"]

    @pytest.mark.unit
    def test_list_paging(self, store):
        """limit and offset page through forms."""
        for i in range(5):
            store.save(_form(f"Form {i}"))
        assert len(store.list_forms(limit=2)) == 2
        assert [form.name for form in store.list_forms(limit=2, offset=4)] == ["Form 0"]

    @pytest.mark.unit
    def test_delete(self, store):
        """Delete reports whether a form was removed."""
        form = store.save(_form())
        assert store.delete(form.id) is True
        assert store.delete(form.id) is False
        assert store.get(form.id) is None

    @pytest.mark.unit
    def test_in_memory_store(self):
        """':memory:' gives a throwaway store."""
        form_store = SQLiteFormStore(":memory:")
        form_store.initialize()
        try:
            form = form_store.save(_form())
            assert form_store.get(form.id) is not None
        finally:
            form_store.close()

    @pytest.mark.unit
    def test_persists_across_connections(self, tmp_path):
        """Forms survive closing and reopening the database."""
        path = tmp_path / "forms.db"
        first = SQLiteFormStore(path)
        first.initialize()
        form = first.save(_form())
        first.close()

        second = SQLiteFormStore(path)
        second.initialize()
        try:
            assert second.get(form.id).name == "Contact"
        finally:
            second.close()
