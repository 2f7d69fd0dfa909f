"""
In-memory knowledge store backed by an rdflib graph.

The store is the append-only merge target of the pipeline. Listeners can be
registered to observe every successful mutation, e.g. to keep a search index
in sync with the graph.
"""

from typing import Iterator, List, Optional, Protocol, Tuple

from rdflib import Graph
from rdflib.term import Node

from graphweaver.utils.errors import StoreError
from graphweaver.utils.logging import get_logger

logger = get_logger(__name__)

Triple = Tuple[Node, Node, Node]

DEFAULT_BASE_IRI = "https://example.org/graph/"


class StoreListener(Protocol):
    """Observer notified after triples are added to or removed from a store."""

    def on_add(self, triple: Triple) -> None:
        ...

    def on_remove(self, triple: Triple) -> None:
        ...


class CountListener:
    """Counts mutations seen by a store."""

    def __init__(self) -> None:
        self.added = 0
        self.removed = 0

    def on_add(self, triple: Triple) -> None:
        self.added += 1

    def on_remove(self, triple: Triple) -> None:
        self.removed += 1


def parse_turtle(text: str, base_iri: str = DEFAULT_BASE_IRI) -> Graph:
    """Parse Turtle text into a fresh rdflib graph."""
    graph = Graph()
    graph.parse(data=text, format="turtle", publicID=base_iri)
    return graph


class KnowledgeStore:
    """
    Persistent triple store collaborator.

    Wraps an rdflib ``Graph`` and notifies registered listeners synchronously
    after each triple actually added or removed. A failing listener is logged
    and skipped; it never aborts the mutation or the remaining listeners.
    """

    def __init__(
        self,
        graph: Optional[Graph] = None,
        listeners: Optional[List[StoreListener]] = None,
        base_iri: str = DEFAULT_BASE_IRI,
    ) -> None:
        self._graph = graph if graph is not None else Graph()
        self._listeners: List[StoreListener] = list(listeners or [])
        self.base_iri = base_iri

    @property
    def graph(self) -> Graph:
        """Underlying rdflib graph, for read-only querying."""
        return self._graph

    def __len__(self) -> int:
        return len(self._graph)

    def __iter__(self) -> Iterator[Triple]:
        return iter(self._graph)

    def __contains__(self, triple: Triple) -> bool:
        return triple in self._graph

    # =========================================================================
    # Listeners
    # =========================================================================

    def add_listener(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StoreListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, method: str, triple: Triple) -> None:
        for index, listener in enumerate(self._listeners):
            try:
                getattr(listener, method)(triple)
            except Exception:
                logger.exception(
                    f"Error in listener {index} during {method}",
                    extra={"listener": type(listener).__name__, "triple": str(triple)},
                )

    # =========================================================================
    # Mutations
    # =========================================================================

    def add(self, triple: Triple) -> bool:
        """Add a single triple; returns False when it was already present."""
        if triple in self._graph:
            return False
        self._graph.add(triple)
        self._notify("on_add", triple)
        return True

    def remove(self, triple: Triple) -> bool:
        """Remove a single triple; returns False when it was absent."""
        if triple not in self._graph:
            return False
        self._graph.remove(triple)
        self._notify("on_remove", triple)
        return True

    def insert(self, graph_text: str) -> int:
        """
        Merge Turtle text into the store.

        Args:
            graph_text: Turtle document

        Returns:
            Number of triples that were not already present

        Raises:
            StoreError: If the text cannot be parsed
        """
        try:
            incoming = parse_turtle(graph_text, self.base_iri)
        except Exception as e:
            raise StoreError(f"Failed to parse Turtle for insertion: {e}") from e

        for prefix, namespace in incoming.namespaces():
            if prefix:
                self._graph.bind(prefix, namespace, override=False)

        added = 0
        for triple in incoming:
            if self.add(triple):
                added += 1

        logger.debug(f"Inserted {added} triples", extra={"store_size": len(self._graph)})
        return added

    def export_all(self) -> str:
        """Serialize the whole store as Turtle."""
        return self._graph.serialize(format="turtle")
