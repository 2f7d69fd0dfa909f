"""
Base interfaces for draft generation and validation.
"""

from abc import ABC, abstractmethod
from typing import Optional

from graphweaver.models import DraftGraph, GenerationContext


class DraftGenerator(ABC):
    """Produces a draft graph from a generation context."""

    @abstractmethod
    async def generate(self, context: GenerationContext) -> DraftGraph:
        """
        Generate one draft.

        Args:
            context: Conversation so far, including feedback from failed attempts

        Returns:
            Draft Turtle with placeholders and its extracted variables

        Raises:
            GenerationError: If the underlying service fails
        """
        pass


class SchemaValidator(ABC):
    """Checks a Turtle document for syntax and shape conformance."""

    @abstractmethod
    async def validate(self, graph_text: str, shapes_text: Optional[str] = None) -> Optional[str]:
        """
        Validate Turtle text.

        Args:
            graph_text: Turtle document to check
            shapes_text: Optional SHACL shapes in Turtle

        Returns:
            None when the document conforms, otherwise a human-readable error

        Raises:
            ValidatorError: If validation itself cannot be carried out
        """
        pass
