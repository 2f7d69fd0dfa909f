"""
Entity resolution against the existing knowledge graph.

Each extracted variable is searched for and disambiguated independently;
a batch is resolved concurrently while keeping the input order.
"""

import asyncio
from typing import Dict, List, Optional, Sequence

from graphweaver.config import ResolverConfig
from graphweaver.linker.disambiguator import Disambiguator
from graphweaver.models import ExtractedVariable, ResolvedEntity, SearchRequest
from graphweaver.search.base import SearchService
from graphweaver.utils.logging import get_logger

logger = get_logger(__name__)


class EntityResolver:
    """Links extracted variables to canonical subjects."""

    def __init__(
        self,
        search: SearchService,
        disambiguator: Disambiguator,
        config: Optional[ResolverConfig] = None,
    ) -> None:
        self.search = search
        self.disambiguator = disambiguator
        self.config = config or ResolverConfig()
        self._semaphore = (
            asyncio.Semaphore(self.config.max_concurrency)
            if self.config.max_concurrency
            else None
        )

    def _query(self, variable: ExtractedVariable) -> SearchRequest:
        return SearchRequest(text=getattr(variable, self.config.query_field))

    async def resolve(self, variable: ExtractedVariable) -> ResolvedEntity:
        """Search for one variable and choose its subject."""
        request = self._query(variable)
        if self._semaphore is not None:
            async with self._semaphore:
                response = await self.search.search(request)
        else:
            response = await self.search.search(request)

        subject = await self.disambiguator.choose(response)
        logger.debug(
            f"Resolved {variable.id} to {subject}",
            extra={"candidates": len(response.hits)},
        )
        return ResolvedEntity(entity=variable, subject=subject)

    async def resolve_all(self, variables: Sequence[ExtractedVariable]) -> List[ResolvedEntity]:
        """
        Resolve a batch of variables concurrently.

        Args:
            variables: Variables in draft order

        Returns:
            One resolved entity per variable, in input order
        """
        if not variables:
            return []
        resolved = await asyncio.gather(*(self.resolve(variable) for variable in variables))
        logger.info(f"Resolved {len(resolved)} entities")
        return list(resolved)

    @staticmethod
    def to_map(resolved: Sequence[ResolvedEntity]) -> Dict[str, str]:
        """Build the placeholder-id to subject map."""
        return {link.entity.id: link.subject for link in resolved}
