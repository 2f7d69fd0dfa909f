"""
Index-ranked search using BM25.

Each literal-valued triple of the store is indexed as one document. A query
scores every document sharing at least one token with it, and the scores of
documents belonging to the same subject are summed.
"""

import re
from typing import Any, Dict, List, Optional, Tuple

from rank_bm25 import BM25Plus
from rdflib import Literal, URIRef

from graphweaver.models import SearchRequest, SearchResponse
from graphweaver.search.base import DEFAULT_LIMIT, SearchService, SearchServiceFactory, rank_hits
from graphweaver.store.knowledge_store import KnowledgeStore, Triple
from graphweaver.utils.errors import SearchError
from graphweaver.utils.logging import get_logger

logger = get_logger(__name__)

_TOKEN_PATTERN = re.compile(r"\w+", re.UNICODE)

DocumentKey = Tuple[str, str, str]


def tokenize(text: str) -> List[str]:
    """Lowercase word tokens."""
    return _TOKEN_PATTERN.findall(text.lower())


class TripleIndex:
    """
    BM25 index over (subject, predicate, object) documents.

    Registered as a store listener, it mirrors every add and remove. The
    BM25 model is rebuilt lazily on the first query after a change.
    """

    def __init__(self) -> None:
        self._documents: Dict[DocumentKey, List[str]] = {}
        self._keys: List[DocumentKey] = []
        self._bm25: Optional[BM25Plus] = None
        self._dirty = True

    def __len__(self) -> int:
        return len(self._documents)

    @staticmethod
    def _key(triple: Triple) -> Optional[DocumentKey]:
        subject, predicate, obj = triple
        if not isinstance(subject, URIRef) or not isinstance(obj, Literal):
            return None
        return (str(subject), str(predicate), str(obj))

    def on_add(self, triple: Triple) -> None:
        key = self._key(triple)
        if key is None or key in self._documents:
            return
        self._documents[key] = tokenize(key[2])
        self._dirty = True

    def on_remove(self, triple: Triple) -> None:
        key = self._key(triple)
        if key is None or key not in self._documents:
            return
        del self._documents[key]
        self._dirty = True

    def _rebuild(self) -> None:
        self._keys = list(self._documents)
        corpus = [self._documents[key] for key in self._keys]
        self._bm25 = BM25Plus(corpus) if corpus else None
        self._dirty = False
        logger.debug(f"Rebuilt BM25 index with {len(corpus)} documents")

    def score(self, text: str) -> Dict[str, float]:
        """Return summed BM25 scores per subject for documents matching the text."""
        tokens = tokenize(text)
        if not tokens:
            return {}

        if self._dirty:
            self._rebuild()
        if self._bm25 is None:
            return {}

        query_tokens = set(tokens)
        matched = [
            doc_id
            for doc_id, key in enumerate(self._keys)
            if query_tokens.intersection(self._documents[key])
        ]
        if not matched:
            return {}

        scores = self._bm25.get_batch_scores(tokens, matched)

        totals: Dict[str, float] = {}
        for doc_id, score in zip(matched, scores):
            subject = self._keys[doc_id][0]
            totals[subject] = totals.get(subject, 0.0) + float(score)
        return totals


class IndexSearchService(SearchService):
    """Ranks subjects by summed BM25 relevance of their indexed triples."""

    def __init__(self, index: TripleIndex, limit: int = DEFAULT_LIMIT) -> None:
        self.index = index
        self.limit = limit
        self._store: Optional[KnowledgeStore] = None

    @classmethod
    def from_store(cls, store: KnowledgeStore, **kwargs: Any) -> "IndexSearchService":
        """Build an index from the store's triples and subscribe it to changes."""
        index = TripleIndex()
        for triple in store:
            index.on_add(triple)
        store.add_listener(index)
        service = cls(index, **kwargs)
        service._store = store
        return service

    def close(self) -> None:
        """Stop following the store's changes."""
        if self._store is not None:
            self._store.remove_listener(self.index)
            self._store = None

    async def search(self, request: SearchRequest) -> SearchResponse:
        try:
            totals = self.index.score(request.text)
        except Exception as e:
            raise SearchError(f"Index search failed: {e}", {"text": request.text}) from e

        hits = rank_hits(((s, max(score, 0.0)) for s, score in totals.items()), self.limit)
        return SearchResponse(text=request.text, hits=hits)


# Register with factory
SearchServiceFactory.register("index", IndexSearchService)
