"""
SHACL validation of Turtle drafts with pyshacl.
"""

import asyncio
from typing import Optional

import pyshacl
from rdflib import Graph

from graphweaver.generator.base import SchemaValidator
from graphweaver.store.knowledge_store import DEFAULT_BASE_IRI, parse_turtle
from graphweaver.utils.errors import ValidatorError
from graphweaver.utils.logging import get_logger

logger = get_logger(__name__)


class ShaclValidator(SchemaValidator):
    """
    Validates Turtle syntax and, when shapes are given, SHACL conformance.

    A draft that does not parse is reported as invalid with the parser's
    message. Shapes that do not parse are the caller's problem and raise
    ``ValidatorError``.
    """

    def __init__(self, base_iri: str = DEFAULT_BASE_IRI, inference: str = "none") -> None:
        self.base_iri = base_iri
        self.inference = inference

    async def validate(self, graph_text: str, shapes_text: Optional[str] = None) -> Optional[str]:
        try:
            data_graph = parse_turtle(graph_text, self.base_iri)
        except Exception as e:
            logger.debug(f"Draft failed to parse: {e}")
            return str(e)

        if not shapes_text:
            return None

        try:
            shapes_graph = parse_turtle(shapes_text, self.base_iri)
        except Exception as e:
            raise ValidatorError(f"Failed to parse SHACL shapes: {e}") from e

        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._run_shacl, data_graph, shapes_graph)

    def _run_shacl(self, data_graph: Graph, shapes_graph: Graph) -> Optional[str]:
        try:
            conforms, _, results_text = pyshacl.validate(
                data_graph,
                shacl_graph=shapes_graph,
                inference=self.inference,
                abort_on_first=False,
            )
        except Exception as e:
            raise ValidatorError(f"SHACL validation failed to run: {e}") from e

        if conforms:
            return None
        return results_text
