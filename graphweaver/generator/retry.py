"""
Bounded generate/validate/retry loop.

Each failed attempt is fed back to the generator as an assistant turn with
the rejected draft followed by a user turn with the validation error.
"""

from typing import Optional

from graphweaver.config import RetryConfig
from graphweaver.generator.base import DraftGenerator, SchemaValidator
from graphweaver.generator.substitute import embedded_placeholders
from graphweaver.models import DraftGraph, GenerationContext, ValidationOutcome
from graphweaver.utils.errors import GenerationExhaustedError
from graphweaver.utils.logging import get_logger, log_performance

logger = get_logger(__name__)


class RetryCoordinator:
    """Drives the generator until a draft validates or attempts run out."""

    def __init__(
        self,
        generator: DraftGenerator,
        validator: SchemaValidator,
        config: Optional[RetryConfig] = None,
    ) -> None:
        self.generator = generator
        self.validator = validator
        self.config = config or RetryConfig()

    @log_performance
    async def generate(
        self,
        context: GenerationContext,
        shapes: Optional[str] = None,
    ) -> DraftGraph:
        """
        Produce a validated draft.

        Args:
            context: Initial generation context
            shapes: Optional SHACL shapes the draft must conform to

        Returns:
            The first draft that passed validation

        Raises:
            GenerationExhaustedError: If every attempt failed validation
            CollaboratorError: Generator or validator failures, not retried
        """
        max_attempts = self.config.max_attempts
        last_error = ""
        last_draft: Optional[DraftGraph] = None

        for attempt in range(1, max_attempts + 1):
            logger.info(f"Generating draft (attempt {attempt}/{max_attempts})")
            draft = await self.generator.generate(context)
            message = await self.validator.validate(draft.content, shapes)
            if message is None:
                message = _placeholder_problem(draft.content)
            outcome = ValidationOutcome(message=message)

            if outcome.is_valid:
                logger.info(f"Draft accepted on attempt {attempt}")
                return draft

            logger.warning(
                f"Draft failed validation on attempt {attempt}",
                extra={"validation_error": outcome.message},
            )
            last_error, last_draft = outcome.message, draft
            if attempt < max_attempts:
                context = context.with_feedback(draft, outcome.message)

        raise GenerationExhaustedError(max_attempts, last_error, last_draft)


def _placeholder_problem(content: str) -> Optional[str]:
    embedded = embedded_placeholders(content)
    if not embedded:
        return None
    return (
        "Placeholder tokens must be written as whole IRIs like <PLACEHOLDER_ENTITY_1>, "
        f"found: {', '.join(embedded)}"
    )
