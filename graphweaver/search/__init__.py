"""
Candidate search components.

This package provides the search interface, the occurrence-count and
BM25 index-ranked strategies, and a factory to pick one by name.
"""

from graphweaver.search.base import SearchService, SearchServiceFactory
from graphweaver.search.index import IndexSearchService, TripleIndex
from graphweaver.search.occurrence import OccurrenceSearchService

__all__ = [
    "SearchService",
    "SearchServiceFactory",
    "IndexSearchService",
    "OccurrenceSearchService",
    "TripleIndex",
]
