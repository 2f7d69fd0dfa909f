"""
Entity linking components.

This package resolves extracted variables to subjects of the existing
knowledge graph, minting new identifiers for unseen entities.
"""

from graphweaver.linker.disambiguator import (
    Disambiguator,
    GreedyDisambiguator,
    PromptDisambiguator,
    genid,
)
from graphweaver.linker.resolver import EntityResolver

__all__ = [
    "Disambiguator",
    "GreedyDisambiguator",
    "PromptDisambiguator",
    "genid",
    "EntityResolver",
]
