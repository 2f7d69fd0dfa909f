"""
Occurrence-count search over the knowledge store.

Every triple whose object is a literal containing the query text
(case-insensitively) counts one occurrence for its subject. Subjects are
ranked by their number of occurrences.
"""

from graphweaver.models import SearchRequest, SearchResponse
from graphweaver.search.base import DEFAULT_LIMIT, SearchService, SearchServiceFactory, rank_hits
from graphweaver.store.knowledge_store import KnowledgeStore
from graphweaver.utils.errors import SearchError
from graphweaver.utils.logging import get_logger

logger = get_logger(__name__)

OCCURRENCE_QUERY = """
SELECT ?subject (COUNT(?object) AS ?frequency) WHERE {{
  ?subject ?predicate ?object .
  FILTER(isIRI(?subject) && isLiteral(?object))
  FILTER(CONTAINS(LCASE(STR(?object)), "{needle}"))
}}
GROUP BY ?subject
ORDER BY DESC(?frequency) ?subject
LIMIT {limit}
"""


def escape_sparql_string(value: str) -> str:
    """Escape a value for use inside a double-quoted SPARQL literal."""
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


class OccurrenceSearchService(SearchService):
    """Ranks subjects by the number of their literals containing the query."""

    def __init__(self, store: KnowledgeStore, limit: int = DEFAULT_LIMIT) -> None:
        self.store = store
        self.limit = limit

    async def search(self, request: SearchRequest) -> SearchResponse:
        if not request.text.strip():
            return SearchResponse(text=request.text)

        query = OCCURRENCE_QUERY.format(
            needle=escape_sparql_string(request.text.lower()),
            limit=self.limit,
        )

        try:
            rows = list(self.store.graph.query(query))
        except Exception as e:
            raise SearchError(f"Occurrence query failed: {e}", {"text": request.text}) from e

        scores = [(str(row.subject), float(row.frequency.toPython())) for row in rows]
        hits = rank_hits(scores, self.limit)

        logger.debug(
            f"Occurrence search matched {len(hits)} subjects",
            extra={"query": request.text},
        )
        return SearchResponse(text=request.text, hits=hits)


# Register with factory
SearchServiceFactory.register("occurrence", OccurrenceSearchService)
