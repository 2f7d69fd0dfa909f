"""
Knowledge store components.

This package provides the rdflib-backed store the pipeline merges into,
its mutation listeners, and Turtle file persistence.
"""

from graphweaver.store.knowledge_store import (
    CountListener,
    KnowledgeStore,
    StoreListener,
    parse_turtle,
)
from graphweaver.store.persist import load_store, remove_store, save_store

__all__ = [
    "CountListener",
    "KnowledgeStore",
    "StoreListener",
    "parse_turtle",
    "load_store",
    "remove_store",
    "save_store",
]
