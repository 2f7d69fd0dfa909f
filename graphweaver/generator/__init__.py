"""
Draft generation components.

This package turns text into a validated Turtle draft with placeholder
entities, and substitutes resolved subjects into accepted drafts.
"""

from graphweaver.generator.base import DraftGenerator, SchemaValidator
from graphweaver.generator.context import DEFAULT_PREFIXES, build_context, trim_fence
from graphweaver.generator.openai_generator import OpenAIDraftGenerator
from graphweaver.generator.retry import RetryCoordinator
from graphweaver.generator.substitute import embedded_placeholders, find_placeholders, substitute
from graphweaver.generator.validator import ShaclValidator

__all__ = [
    "DraftGenerator",
    "SchemaValidator",
    "DEFAULT_PREFIXES",
    "build_context",
    "trim_fence",
    "OpenAIDraftGenerator",
    "RetryCoordinator",
    "embedded_placeholders",
    "find_placeholders",
    "substitute",
    "ShaclValidator",
]
