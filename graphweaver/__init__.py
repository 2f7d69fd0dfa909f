"""
graphweaver: turn natural-language text into RDF merged into a knowledge graph.

Text is drafted into Turtle by a language model, validated (optionally
against SHACL shapes), linked to existing entities and appended to the store.
"""

__version__ = "0.1.0"
