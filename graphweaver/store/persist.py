"""
Turtle file persistence for the knowledge store.
"""

from pathlib import Path
from typing import List, Optional, Union

from graphweaver.store.knowledge_store import DEFAULT_BASE_IRI, KnowledgeStore, StoreListener
from graphweaver.utils.errors import StoreError
from graphweaver.utils.logging import get_logger

logger = get_logger(__name__)


def load_store(
    path: Union[str, Path],
    listeners: Optional[List[StoreListener]] = None,
    base_iri: str = DEFAULT_BASE_IRI,
) -> KnowledgeStore:
    """
    Create a store from a Turtle file.

    Listeners are registered before the file is read, so they observe every
    loaded triple. A missing file yields an empty store.
    """
    path = Path(path)
    store = KnowledgeStore(listeners=listeners, base_iri=base_iri)

    if not path.exists():
        logger.info(f"No existing {path.name} found, starting with fresh data")
        return store

    try:
        data = path.read_text(encoding="utf-8")
    except OSError as e:
        raise StoreError(f"Failed to read store file: {e}", {"path": str(path)}) from e

    store.insert(data)
    logger.info(f"Loaded {len(store)} triples from {path}")
    return store


def save_store(store: KnowledgeStore, path: Union[str, Path]) -> None:
    """Write the store to a Turtle file, creating parent directories."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(store.export_all(), encoding="utf-8")
    except OSError as e:
        raise StoreError(f"Failed to write store file: {e}", {"path": str(path)}) from e

    logger.info(f"Saved {len(store)} triples to {path}")


def remove_store(path: Union[str, Path]) -> None:
    """Delete a persisted store file if it exists."""
    Path(path).unlink(missing_ok=True)
