"""
Tests for the knowledge store and its persistence.
"""

import pytest
from rdflib import Literal, URIRef

from conftest import A, SAMPLE_TURTLE
from graphweaver.store import CountListener, KnowledgeStore, load_store, remove_store, save_store
from graphweaver.utils.errors import StoreError

TRIPLE = (
    URIRef("https://example.org/x"),
    URIRef("https://schema.org/name"),
    Literal("X"),
)


class FailingListener:
    """Listener that raises on every notification."""

    def on_add(self, triple):
        raise RuntimeError("listener down")

    def on_remove(self, triple):
        raise RuntimeError("listener down")


class TestKnowledgeStore:
    """Test the rdflib-backed store."""

    def test_insert_counts_new_triples(self):
        """Test that only new triples are counted."""
        store = KnowledgeStore()

        assert store.insert(SAMPLE_TURTLE) == 11
        assert store.insert(SAMPLE_TURTLE) == 0
        assert len(store) == 11

    def test_insert_invalid_turtle(self):
        """Test that unparseable input raises and leaves the store unchanged."""
        store = KnowledgeStore()

        with pytest.raises(StoreError):
            store.insert("<a> <b> .")

        assert len(store) == 0

    def test_relative_iris_resolved_against_base(self):
        """Test that relative IRIs become absolute."""
        store = KnowledgeStore(base_iri="https://kg.test/")
        store.insert('<thing> <https://schema.org/name> "Thing" .')

        subjects = {str(s) for s, _, _ in store}
        assert subjects == {"https://kg.test/thing"}

    def test_add_and_remove(self):
        """Test single triple mutations."""
        store = KnowledgeStore()

        assert store.add(TRIPLE) is True
        assert store.add(TRIPLE) is False
        assert TRIPLE in store
        assert store.remove(TRIPLE) is True
        assert store.remove(TRIPLE) is False

    def test_count_listener(self):
        """Test that listeners see each successful mutation once."""
        counter = CountListener()
        store = KnowledgeStore(listeners=[counter])

        store.add(TRIPLE)
        store.add(TRIPLE)
        store.remove(TRIPLE)

        assert counter.added == 1
        assert counter.removed == 1

    def test_listener_fault_isolation(self):
        """Test that a failing listener affects neither the store nor other listeners."""
        counter = CountListener()
        store = KnowledgeStore(listeners=[FailingListener(), counter])

        store.insert(SAMPLE_TURTLE)
        store.remove(TRIPLE)
        store.add(TRIPLE)

        assert TRIPLE in store
        assert counter.added == len(store)

    def test_remove_listener(self):
        """Test that removed listeners stop receiving notifications."""
        counter = CountListener()
        store = KnowledgeStore(listeners=[counter])
        store.remove_listener(counter)

        store.add(TRIPLE)

        assert counter.added == 0

    def test_export_all_round_trips(self, sample_store):
        """Test that exported Turtle parses back to the same triples."""
        copy = KnowledgeStore()
        copy.insert(sample_store.export_all())

        assert set(copy) == set(sample_store)


class TestPersistence:
    """Test Turtle file persistence."""

    def test_missing_file_gives_empty_store(self, tmp_path):
        """Test loading a store that was never saved."""
        store = load_store(tmp_path / "missing.ttl")

        assert len(store) == 0

    def test_save_and_load(self, sample_store, tmp_path):
        """Test a save/load round trip through a nested path."""
        path = tmp_path / "data" / "db.ttl"

        save_store(sample_store, path)
        loaded = load_store(path)

        assert set(loaded) == set(sample_store)
        assert any(str(s) == A for s, _, _ in loaded)

    def test_listeners_see_loaded_triples(self, sample_store, tmp_path):
        """Test that listeners are registered before loading."""
        path = tmp_path / "db.ttl"
        save_store(sample_store, path)
        counter = CountListener()

        load_store(path, listeners=[counter])

        assert counter.added == len(sample_store)

    def test_remove_store(self, sample_store, tmp_path):
        """Test deleting a persisted store, twice."""
        path = tmp_path / "db.ttl"
        save_store(sample_store, path)

        remove_store(path)
        remove_store(path)

        assert not path.exists()
