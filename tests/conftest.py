"""
Shared fixtures for graphweaver tests.
"""

from typing import List, Optional, Sequence

import pytest

from graphweaver.config import RetryConfig
from graphweaver.generator.base import DraftGenerator, SchemaValidator
from graphweaver.generator.retry import RetryCoordinator
from graphweaver.linker import EntityResolver, GreedyDisambiguator
from graphweaver.models import DraftGraph, ExtractedVariable, GenerationContext
from graphweaver.pipeline import Pipeline
from graphweaver.search import OccurrenceSearchService
from graphweaver.store.knowledge_store import KnowledgeStore

SAMPLE_TURTLE = """
@prefix ex: <https://example.org/people/> .
@prefix schema: <https://schema.org/> .

ex:a schema:name "Alice" ;
    schema:alternateName "alice a", "Alice B", "ALICE C" ;
    schema:description "Everyone knows alice" .

ex:b schema:name "Alice Smith" ;
    schema:alternateName "alice s", "Smith, Alice" .

ex:c schema:disambiguatingDescription "not that alice" ;
    schema:knows ex:a .

ex:d schema:name "Bob" .
"""

A = "https://example.org/people/a"
B = "https://example.org/people/b"
C = "https://example.org/people/c"
D = "https://example.org/people/d"

NEW = "https://kg.test/.well-known/genid/new"

READ_DRAFT = DraftGraph(
    content=(
        "@prefix schema: <https://schema.org/> .\n"
        "<PLACEHOLDER_ENTITY_1> a schema:ReadAction ;\n"
        "    schema:agent <PLACEHOLDER_ENTITY_2> .\n"
        '<PLACEHOLDER_ENTITY_2> a schema:Person ; schema:name "Alice" .\n'
    ),
    variables=(
        ExtractedVariable(
            id="PLACEHOLDER_ENTITY_1",
            type="schema:ReadAction",
            name="Alice reading",
            text="read a book yesterday",
        ),
        ExtractedVariable(
            id="PLACEHOLDER_ENTITY_2",
            type="schema:Person",
            name="Alice",
            text="Alice",
        ),
    ),
)


def make_pipeline(store, drafts, errors, mint=lambda: NEW, max_attempts=3):
    retry = RetryCoordinator(
        ScriptedGenerator(drafts),
        ScriptedValidator(errors),
        RetryConfig(max_attempts=max_attempts),
    )
    resolver = EntityResolver(OccurrenceSearchService(store), GreedyDisambiguator(mint))
    return Pipeline(retry, resolver, store)


class ScriptedGenerator(DraftGenerator):
    """Returns the given drafts in order and records every context it saw."""

    def __init__(self, drafts: Sequence[DraftGraph]) -> None:
        self.drafts = list(drafts)
        self.contexts: List[GenerationContext] = []

    async def generate(self, context: GenerationContext) -> DraftGraph:
        self.contexts.append(context)
        return self.drafts[min(len(self.contexts), len(self.drafts)) - 1]


class ScriptedValidator(SchemaValidator):
    """Returns the given validation errors in order (None means valid)."""

    def __init__(self, errors: Sequence[Optional[str]]) -> None:
        self.errors = list(errors)
        self.calls: List[str] = []

    async def validate(self, graph_text: str, shapes_text: Optional[str] = None) -> Optional[str]:
        self.calls.append(graph_text)
        return self.errors[min(len(self.calls), len(self.errors)) - 1]


@pytest.fixture
def sample_store():
    """Store with three subjects mentioning 'alice' 5, 3 and 1 times."""
    store = KnowledgeStore()
    store.insert(SAMPLE_TURTLE)
    return store


@pytest.fixture
def person_draft():
    """Valid draft describing one person with one placeholder."""
    return DraftGraph(
        content=(
            "@prefix schema: <https://schema.org/> .\n"
            '<PLACEHOLDER_ENTITY_1> a schema:Person ; schema:name "Alice" .\n'
        ),
        variables=(
            ExtractedVariable(
                id="PLACEHOLDER_ENTITY_1",
                type="schema:Person",
                name="Alice",
                text="Alice",
            ),
        ),
    )


@pytest.fixture
def broken_draft():
    """Draft whose Turtle does not parse."""
    return DraftGraph(content="<PLACEHOLDER_ENTITY_1> a schema:Person", variables=())
