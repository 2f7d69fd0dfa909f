"""
Tests for the generate/validate/retry loop.
"""

from unittest.mock import AsyncMock

import pytest

from conftest import ScriptedGenerator, ScriptedValidator
from graphweaver.config import RetryConfig
from graphweaver.generator.context import build_context
from graphweaver.generator.retry import RetryCoordinator
from graphweaver.models import DraftGraph, Role
from graphweaver.utils.errors import GenerationError, GenerationExhaustedError, ValidatorError


class TestRetryCoordinator:
    """Test the retry coordinator."""

    @pytest.fixture
    def context(self):
        """Initial context without few-shot examples."""
        return build_context("Alice met Bob.", include_examples=False)

    @pytest.mark.asyncio
    async def test_first_valid_draft_is_returned(self, context, person_draft):
        """Test that a valid first draft ends the loop."""
        generator = ScriptedGenerator([person_draft])
        validator = ScriptedValidator([None])

        draft = await RetryCoordinator(generator, validator).generate(context)

        assert draft == person_draft
        assert len(generator.contexts) == 1

    @pytest.mark.asyncio
    async def test_stops_at_first_valid_attempt(self, context, broken_draft, person_draft):
        """Test that generation stops as soon as a draft validates."""
        generator = ScriptedGenerator([broken_draft, person_draft])
        validator = ScriptedValidator(["syntax error", None])

        draft = await RetryCoordinator(generator, validator, RetryConfig(max_attempts=3)).generate(
            context
        )

        assert draft == person_draft
        assert len(generator.contexts) == 2
        assert len(validator.calls) == 2

    @pytest.mark.asyncio
    async def test_exhaustion_after_exactly_max_attempts(self, context, broken_draft):
        """Test that persistent failure raises after the attempt budget."""
        generator = ScriptedGenerator([broken_draft])
        validator = ScriptedValidator(["still broken"])

        with pytest.raises(GenerationExhaustedError) as exc_info:
            await RetryCoordinator(generator, validator, RetryConfig(max_attempts=4)).generate(
                context
            )

        assert len(generator.contexts) == 4
        assert exc_info.value.attempts == 4
        assert exc_info.value.last_error == "still broken"
        assert exc_info.value.last_draft == broken_draft

    @pytest.mark.asyncio
    async def test_feedback_reaches_next_attempt(self, context, broken_draft, person_draft):
        """Test that the next context holds the rejected draft and error verbatim."""
        generator = ScriptedGenerator([broken_draft, person_draft])
        validator = ScriptedValidator(["Expected '.' at line 1", None])

        await RetryCoordinator(generator, validator).generate(context)

        first, second = generator.contexts
        assert second.messages[: len(first.messages)] == first.messages
        assistant, user = second.messages[-2:]
        assert assistant.role == Role.ASSISTANT
        assert assistant.content == broken_draft.to_message_content()
        assert user.role == Role.USER
        assert "Expected '.' at line 1" in user.content

    @pytest.mark.asyncio
    async def test_original_context_unchanged(self, context, broken_draft, person_draft):
        """Test that retries never mutate the caller's context."""
        before = context.messages
        generator = ScriptedGenerator([broken_draft, person_draft])

        await RetryCoordinator(generator, ScriptedValidator(["bad", None])).generate(context)

        assert context.messages == before

    @pytest.mark.asyncio
    async def test_shapes_are_passed_to_validator(self, context, person_draft):
        """Test that shapes reach every validation call."""
        validator = AsyncMock()
        validator.validate.return_value = None

        await RetryCoordinator(ScriptedGenerator([person_draft]), validator).generate(
            context, shapes="ex:Shape a sh:NodeShape ."
        )

        validator.validate.assert_awaited_once_with(
            person_draft.content, "ex:Shape a sh:NodeShape ."
        )

    @pytest.mark.asyncio
    async def test_empty_draft_can_be_valid(self, context):
        """Test that an empty draft is accepted when it validates."""
        empty = DraftGraph(content="")

        draft = await RetryCoordinator(ScriptedGenerator([empty]), ScriptedValidator([None])).generate(
            context
        )

        assert draft.variables == ()

    @pytest.mark.asyncio
    async def test_generator_error_is_not_retried(self, context):
        """Test that generator failures propagate immediately."""
        generator = AsyncMock()
        generator.generate.side_effect = GenerationError("rate limited")

        with pytest.raises(GenerationError):
            await RetryCoordinator(generator, ScriptedValidator([None])).generate(context)

        assert generator.generate.await_count == 1

    @pytest.mark.asyncio
    async def test_validator_error_is_not_retried(self, context, person_draft):
        """Test that validator failures propagate immediately."""
        generator = ScriptedGenerator([person_draft])
        validator = AsyncMock()
        validator.validate.side_effect = ValidatorError("shapes unreadable")

        with pytest.raises(ValidatorError):
            await RetryCoordinator(generator, validator).generate(context)

        assert len(generator.contexts) == 1

    @pytest.mark.asyncio
    async def test_embedded_placeholder_is_retried(self, context, person_draft):
        """Test that a schema-valid draft with a prefixed-name token is sent back."""
        embedded = DraftGraph(
            content=(
                "@prefix ex: <https://kg.test/> .\n"
                "@prefix schema: <https://schema.org/> .\n"
                'ex:PLACEHOLDER_ENTITY_1 a schema:Person ; schema:name "Alice" .\n'
            ),
            variables=person_draft.variables,
        )
        generator = ScriptedGenerator([embedded, person_draft])

        draft = await RetryCoordinator(generator, ScriptedValidator([None])).generate(context)

        assert draft == person_draft
        feedback = generator.contexts[1].messages[-1]
        assert feedback.role == Role.USER
        assert "ex:PLACEHOLDER_ENTITY_1" in feedback.content

    @pytest.mark.asyncio
    async def test_embedded_placeholder_exhausts(self, context):
        """Test that a persistently embedded token ends in exhaustion, not a store write."""
        embedded = DraftGraph(content="<#PLACEHOLDER_ENTITY_1> a <https://schema.org/Person> .")

        with pytest.raises(GenerationExhaustedError) as exc_info:
            await RetryCoordinator(
                ScriptedGenerator([embedded]), ScriptedValidator([None]), RetryConfig(max_attempts=2)
            ).generate(context)

        assert "<#PLACEHOLDER_ENTITY_1>" in exc_info.value.last_error
