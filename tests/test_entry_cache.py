import pytest

from searchsync.database import DatabaseManager
from searchsync.models import Entry, Link
from searchsync.resolver import ReferenceResolver


def make_entry(entry_id, fields, content_type_id="post"):
    return Entry(id=entry_id, content_type_id=content_type_id, sys={"id": entry_id, "type": "Entry"}, fields=fields)


@pytest.fixture
def db(tmp_path):
    with DatabaseManager(str(tmp_path / "cache.db")) as manager:
        manager.initialize_database()
        yield manager


def test_store_and_list_entries(db):
    entries = [
        make_entry("b", {"author": {"en": Link(target_id="a")}}),
        make_entry("a", {"name": {"en": "Ada"}}, content_type_id="person"),
    ]
    assert db.store_entries(entries) == 2

    cached = db.list_entries()
    assert [entry.id for entry in cached] == ["a", "b"]
    assert cached[1].fields["author"]["en"] == Link(target_id="a")
    assert [entry.id for entry in db.list_entries("person")] == ["a"]
    assert db.get_entry("b").fields == entries[0].fields
    assert db.get_entry("b").content_type_id == "post"
    assert db.get_entry("missing") is None


def test_unchanged_entries_are_not_rewritten(db):
    entry = make_entry("a", {"title": {"en": "One"}})
    db.store_entries([entry])

    assert db.store_entries([entry]) == 0
    assert db.store_entries([make_entry("a", {"title": {"en": "Two"}})]) == 1
    assert db.get_entry("a").fields["title"]["en"] == "Two"


def test_remove_entries(db):
    db.store_entries([make_entry("a", {}), make_entry("b", {})])

    assert db.remove_entries(["a", "unknown"]) == 1
    assert [entry.id for entry in db.list_entries()] == ["b"]

    db.clear_entries()
    assert db.list_entries() == []


def test_delta_links_resolve_against_cache(db):
    # Initial sync: author and post. Delta: only the post changed.
    db.store_entries([
        make_entry("author", {"name": {"en": "Ada"}}, content_type_id="person"),
        make_entry("post", {"title": {"en": "Old"}, "author": {"en": Link(target_id="author")}}),
    ])
    db.store_entries([
        make_entry("post", {"title": {"en": "New"}, "author": {"en": Link(target_id="author")}}),
    ])

    resolved = {entry.id: entry for entry in ReferenceResolver().resolve_references(db.list_entries())}

    assert resolved["post"].fields["en"]["title"] == "New"
    assert resolved["post"].fields["en"]["author"].fields == {"en": {"name": "Ada"}}


def test_index_pending_marker(db):
    assert db.index_write_pending() is False

    db.mark_index_pending()
    db.mark_index_pending(["b", "a"])

    assert db.index_write_pending() is True
    assert db.get_pending_deletes() == ["a", "b"]

    db.clear_index_pending()
    assert db.index_write_pending() is False
    assert db.get_pending_deletes() == []


def test_requires_connection():
    with pytest.raises(RuntimeError):
        DatabaseManager(":memory:").list_entries()
