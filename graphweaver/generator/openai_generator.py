"""
Draft generation with OpenAI chat completions in JSON mode.
"""

import os
from typing import Optional

import openai
from pydantic import ValidationError

from graphweaver.config import GeneratorConfig
from graphweaver.generator.base import DraftGenerator
from graphweaver.generator.context import trim_fence
from graphweaver.models import DraftGraph, GenerationContext
from graphweaver.utils.errors import GenerationError, MissingConfigurationError
from graphweaver.utils.logging import get_logger

logger = get_logger(__name__)


class OpenAIDraftGenerator(DraftGenerator):
    """Asks a chat model for a ``{"turtle": ..., "variables": [...]}`` object."""

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        client: Optional[openai.AsyncOpenAI] = None,
    ) -> None:
        """
        Initialize the generator.

        Args:
            config: Model options
            client: Pre-built client, created lazily when omitted
        """
        self.config = config or GeneratorConfig()
        self._client = client

    def _ensure_client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            api_key = self.config.api_key or os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise MissingConfigurationError("OPENAI_API_KEY")
            try:
                self._client = openai.AsyncOpenAI(api_key=api_key, base_url=self.config.base_url)
            except openai.OpenAIError as e:
                raise GenerationError(f"Failed to initialize OpenAI client: {e}") from e
        return self._client

    async def generate(self, context: GenerationContext) -> DraftGraph:
        client = self._ensure_client()

        try:
            response = await client.chat.completions.create(
                model=self.config.model,
                messages=context.to_openai(),
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as e:
            raise GenerationError(
                f"Chat completion failed: {e}",
                {"model": self.config.model},
            ) from e

        if not response.choices or not response.choices[0].message.content:
            raise GenerationError("Chat completion returned no content", {"model": self.config.model})

        payload = trim_fence(response.choices[0].message.content)
        try:
            draft = DraftGraph.model_validate_json(payload)
        except ValidationError as e:
            raise GenerationError(
                f"Model output is not a valid draft object: {e}",
                {"model": self.config.model},
            ) from e

        logger.debug(
            f"Generated draft with {len(draft.variables)} variables",
            extra={"model": self.config.model},
        )
        return draft
