"""
Ingestion pipeline for graphweaver.

This module orchestrates the complete flow from natural-language text to
triples merged into the knowledge store: draft generation with validation
and retries, entity resolution, placeholder substitution and insertion.
"""

import itertools
from typing import AsyncIterator, Optional

from graphweaver.config import Settings, get_settings
from graphweaver.generator.base import DraftGenerator, SchemaValidator
from graphweaver.generator.context import build_context
from graphweaver.generator.openai_generator import OpenAIDraftGenerator
from graphweaver.generator.retry import RetryCoordinator
from graphweaver.generator.substitute import substitute
from graphweaver.generator.validator import ShaclValidator
from graphweaver.linker.disambiguator import (
    Disambiguator,
    GreedyDisambiguator,
    PromptDisambiguator,
    genid,
)
from graphweaver.linker.resolver import EntityResolver
from graphweaver.models import EventType, PipelineEvent, PipelineResult
from graphweaver.search.base import SearchServiceFactory
from graphweaver.store.knowledge_store import KnowledgeStore
from graphweaver.store.persist import load_store
from graphweaver.utils.logging import LogContext, get_logger, log_performance

logger = get_logger(__name__)


class Pipeline:
    """
    Text-to-graph ingestion pipeline.

    Nothing is merged into the store unless every stage succeeds.
    """

    def __init__(
        self,
        retry: RetryCoordinator,
        resolver: EntityResolver,
        store: KnowledgeStore,
    ) -> None:
        self.retry = retry
        self.resolver = resolver
        self.store = store

    def close(self) -> None:
        """Detach the search service from the store."""
        self.resolver.search.close()

    @log_performance
    async def run(
        self,
        text: str,
        shapes: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> PipelineResult:
        """
        Ingest text into the knowledge store.

        Args:
            text: Natural-language input
            shapes: Optional SHACL shapes in Turtle
            timestamp: Current time handed to the generator

        Returns:
            The merged Turtle and the intermediate artifacts

        Raises:
            GenerationExhaustedError: If no draft validated
            NoCandidateError: If an entity could not be resolved or minted
            UnresolvedPlaceholderError: If the draft uses an undeclared placeholder
            CollaboratorError: On generator, validator, search or store failure
        """
        with LogContext(input_chars=len(text)):
            context = build_context(text, timestamp=timestamp)
            draft = await self.retry.generate(context, shapes)

            resolved = await self.resolver.resolve_all(draft.variables)
            final = substitute(draft.content, EntityResolver.to_map(resolved))

            added = self.store.insert(final)
            logger.info(
                f"Merged {added} new triples into the store",
                extra={"entities": len(resolved), "store_size": len(self.store)},
            )

            return PipelineResult(
                turtle=final,
                draft=draft,
                resolved=tuple(resolved),
                triples_added=added,
            )

    async def stream(
        self,
        text: str,
        shapes: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> AsyncIterator[PipelineEvent]:
        """
        Ingest text while yielding progress events.

        Emits ``connected``, one ``progress`` event per stage, ``result`` with
        the exported store and ``complete``. A failure ends the stream with a
        single ``error`` event instead.
        """
        counter = itertools.count()

        def event(kind: EventType, data: str) -> PipelineEvent:
            return PipelineEvent(id=next(counter), event=kind, data=data)

        yield event("connected", "Connected")
        try:
            yield event("progress", "Generating graph")
            context = build_context(text, timestamp=timestamp)
            draft = await self.retry.generate(context, shapes)

            yield event("progress", "Resolving entities")
            resolved = await self.resolver.resolve_all(draft.variables)
            final = substitute(draft.content, EntityResolver.to_map(resolved))

            yield event("progress", "Saving graph")
            self.store.insert(final)

            yield event("result", self.store.export_all())
            yield event("complete", "Done")
        except Exception as e:
            logger.error(f"Ingestion failed: {e}")
            yield event("error", str(e))


def create_pipeline(
    settings: Optional[Settings] = None,
    store: Optional[KnowledgeStore] = None,
    interactive: bool = False,
    generator: Optional[DraftGenerator] = None,
    validator: Optional[SchemaValidator] = None,
) -> Pipeline:
    """
    Create a pipeline with the shipped collaborators.

    Args:
        settings: Settings to read, the global settings by default
        store: Store to merge into, loaded from the configured path by default
        interactive: Ask on the terminal instead of picking the top candidate
        generator: Draft generator override
        validator: Validator override

    Returns:
        Configured pipeline
    """
    settings = settings or get_settings()
    if store is None:
        store = load_store(settings.store_path)

    search_config = settings.search_config()
    search = SearchServiceFactory.create(search_config.strategy, store, limit=search_config.limit)

    mint_config = settings.mint_config()
    mint = genid(mint_config.base) if mint_config.enabled else None
    disambiguator: Disambiguator = (
        PromptDisambiguator(mint) if interactive else GreedyDisambiguator(mint)
    )

    retry = RetryCoordinator(
        generator or OpenAIDraftGenerator(settings.generator_config()),
        validator or ShaclValidator(base_iri=store.base_iri),
        settings.retry_config(),
    )
    resolver = EntityResolver(search, disambiguator, settings.resolver_config())

    logger.info(
        "Created pipeline",
        extra={"strategy": search_config.strategy, "interactive": interactive},
    )
    return Pipeline(retry, resolver, store)
