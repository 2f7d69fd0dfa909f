"""
Base interface for candidate search.

A search service ranks existing subjects of the knowledge graph by relevance
to a query string. Implementations must echo the query text verbatim and
return hits sorted by descending score.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Tuple

from graphweaver.models import SearchHit, SearchRequest, SearchResponse
from graphweaver.store.knowledge_store import KnowledgeStore
from graphweaver.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_LIMIT = 10


def rank_hits(scores: Iterable[Tuple[str, float]], limit: int) -> Tuple[SearchHit, ...]:
    """Sort subject scores descending, ties by subject ascending, and cap."""
    ordered = sorted(scores, key=lambda item: (-item[1], item[0]))
    return tuple(SearchHit(subject=subject, score=score) for subject, score in ordered[:limit])


class SearchService(ABC):
    """Abstract base class for candidate search strategies."""

    @abstractmethod
    async def search(self, request: SearchRequest) -> SearchResponse:
        """
        Rank existing subjects against the request text.

        Args:
            request: Search request

        Returns:
            Response echoing the request text with hits, best first

        Raises:
            SearchError: If the underlying engine fails
        """
        pass

    @classmethod
    def from_store(cls, store: KnowledgeStore, **kwargs: Any) -> "SearchService":
        """Create a service reading from the given store."""
        return cls(store, **kwargs)

    def close(self) -> None:
        """Release anything the service holds on its store."""
        pass


class SearchServiceFactory:
    """Factory for creating search service instances."""

    _services: Dict[str, type[SearchService]] = {}

    @classmethod
    def register(cls, name: str, service_class: type[SearchService]) -> None:
        """
        Register a search strategy.

        Args:
            name: Name of the strategy (e.g., 'occurrence', 'index')
            service_class: Service implementation class
        """
        cls._services[name.lower()] = service_class
        logger.debug(f"Registered search service: {name}")

    @classmethod
    def create(cls, name: str, store: KnowledgeStore, **kwargs: Any) -> SearchService:
        """
        Create a search service bound to a store.

        Args:
            name: Name of the strategy to create
            store: Knowledge store to search
            **kwargs: Additional arguments for the service

        Returns:
            Search service instance

        Raises:
            ValueError: If strategy name not registered
        """
        name_lower = name.lower()
        if name_lower not in cls._services:
            available = ", ".join(cls._services.keys())
            raise ValueError(f"Unknown search strategy: {name}. Available: {available}")

        return cls._services[name_lower].from_store(store, **kwargs)

    @classmethod
    def list_available(cls) -> List[str]:
        """Get list of registered strategy names."""
        return list(cls._services.keys())
