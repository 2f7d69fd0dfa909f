"""
Disambiguation policies.

A disambiguator picks exactly one subject from a ranked search response. When
the response has no hits it either mints a fresh identifier or refuses.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Optional
from uuid import uuid4

from rich.console import Console
from rich.prompt import Prompt

from graphweaver.models import SearchResponse
from graphweaver.utils.errors import NoCandidateError
from graphweaver.utils.logging import get_logger

logger = get_logger(__name__)

MintFunction = Callable[[], str]

NEW_CHOICE = "n"


def genid(base: str = "https://example.org/.well-known/genid/") -> MintFunction:
    """Return a function minting unique IRIs under a genid namespace."""

    def mint() -> str:
        return f"{base}{uuid4()}"

    return mint


class Disambiguator(ABC):
    """Resolves the most likely subject from search results."""

    def __init__(self, mint: Optional[MintFunction] = None) -> None:
        self.mint = mint

    @abstractmethod
    async def choose(self, response: SearchResponse) -> str:
        """
        Choose a subject for the response.

        Raises:
            NoCandidateError: If there are no hits and no mint function
        """
        pass

    def _fallback(self, response: SearchResponse) -> str:
        if self.mint is None:
            raise NoCandidateError(response.text)

        subject = self.mint()
        logger.debug(f"Minted {subject} for '{response.text}'")
        return subject


class GreedyDisambiguator(Disambiguator):
    """Resolves the candidate with the highest score."""

    async def choose(self, response: SearchResponse) -> str:
        if not response.hits:
            return self._fallback(response)
        return response.hits[0].subject


class PromptDisambiguator(Disambiguator):
    """
    Asks an operator to pick a candidate on the terminal.

    Prompts are shown one at a time even when entities are resolved
    concurrently.
    """

    def __init__(
        self,
        mint: Optional[MintFunction] = None,
        console: Optional[Console] = None,
    ) -> None:
        super().__init__(mint)
        self.console = console or Console()
        self._lock: Optional[asyncio.Lock] = None

    async def choose(self, response: SearchResponse) -> str:
        if not response.hits:
            return self._fallback(response)

        # Created lazily so the lock belongs to the running loop
        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            loop = asyncio.get_event_loop()
            return await loop.run_in_executor(None, self._ask, response)

    def _ask(self, response: SearchResponse) -> str:
        self.console.print(f"[bold]Candidates for[/bold] '{response.text}':")
        for index, hit in enumerate(response.hits, 1):
            self.console.print(f"  {index}. {hit.subject} (score: {hit.score:.2f})")

        choices = [str(index) for index in range(1, len(response.hits) + 1)]
        if self.mint is not None:
            self.console.print(f"  {NEW_CHOICE}. new entity")
            choices.append(NEW_CHOICE)

        selected = Prompt.ask("Select", choices=choices, default="1", console=self.console)
        if selected == NEW_CHOICE:
            return self._fallback(response)
        return response.hits[int(selected) - 1].subject
