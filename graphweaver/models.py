"""
Core data models for graphweaver.

This module defines the Pydantic models passed between the generator, the
validator, the search services and the pipeline. Every model is frozen: a
retry produces a new draft and a new context instead of mutating old ones.
"""

from enum import Enum
from typing import Dict, Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Generation Models
# =============================================================================


class ExtractedVariable(BaseModel):
    """A variable extracted from the input text, bound to a placeholder id."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="The variable ID like 'PLACEHOLDER_ENTITY_1'")
    type: str = Field(..., description="The variable type like 'schema:Person' or 'schema:Event'")
    name: str = Field(..., description="The name of the variable extracted from the input")
    text: str = Field(
        ...,
        description="The original text snippet from the input that led to this variable",
    )


class DraftGraph(BaseModel):
    """Turtle content with placeholder IDs, plus the variables it references."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content: str = Field(
        ...,
        alias="turtle",
        description="The generated Turtle RDF content with placeholder IDs",
    )
    variables: Tuple[ExtractedVariable, ...] = Field(
        default_factory=tuple,
        description="Variables extracted from the input text",
    )

    def to_message_content(self) -> str:
        """Serialize the draft the way the generator emitted it."""
        return self.model_dump_json(by_alias=True)


class ValidationOutcome(BaseModel):
    """Conformance result for one draft: valid when message is None."""

    model_config = ConfigDict(frozen=True)

    message: Optional[str] = Field(None, description="Violation or parse error detail")

    @property
    def is_valid(self) -> bool:
        return self.message is None

    @classmethod
    def valid(cls) -> "ValidationOutcome":
        return cls()

    @classmethod
    def invalid(cls, message: str) -> "ValidationOutcome":
        return cls(message=message)


class Role(str, Enum):
    """Conversation roles understood by chat models."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single entry in the generation conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(..., description="Author of the message")
    content: str = Field(..., description="Message text")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class GenerationContext(BaseModel):
    """Immutable conversation log passed to the generator on each attempt."""

    model_config = ConfigDict(frozen=True)

    messages: Tuple[Message, ...] = Field(default_factory=tuple)

    @classmethod
    def from_messages(cls, messages: Iterable[Message]) -> "GenerationContext":
        return cls(messages=tuple(messages))

    def append(self, *messages: Message) -> "GenerationContext":
        """Return a new context with messages appended."""
        return GenerationContext(messages=self.messages + tuple(messages))

    def with_feedback(self, draft: DraftGraph, error: str) -> "GenerationContext":
        """
        Return a new context carrying a failed attempt and its validation error.

        The raw draft is replayed as an assistant turn, followed by a user turn
        holding the validator's message verbatim.
        """
        feedback = "\n\n".join(
            [
                "The previous output failed validation.",
                f"Validation errors: {error}",
                "Please correct the errors and re-output the JSON object with valid Turtle.",
            ]
        )
        return self.append(
            Message(role=Role.ASSISTANT, content=draft.to_message_content()),
            Message(role=Role.USER, content=feedback),
        )

    def to_openai(self) -> List[Dict[str, str]]:
        return [message.to_dict() for message in self.messages]


# =============================================================================
# Search Models
# =============================================================================


class SearchRequest(BaseModel):
    """A request to search for candidates in the knowledge graph."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Query text, echoed verbatim in the response")


class SearchHit(BaseModel):
    """A candidate subject found in the knowledge graph."""

    model_config = ConfigDict(frozen=True)

    subject: str = Field(..., description="Subject IRI of the candidate")
    score: float = Field(..., ge=0.0, description="Relevance score")


class SearchResponse(BaseModel):
    """Ranked candidates for one query, highest score first."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="The query text as submitted")
    hits: Tuple[SearchHit, ...] = Field(default_factory=tuple)

    @field_validator("hits")
    @classmethod
    def validate_order(cls, v: Tuple[SearchHit, ...]) -> Tuple[SearchHit, ...]:
        """Ensure hits are sorted by descending score."""
        for previous, current in zip(v, v[1:]):
            if current.score > previous.score:
                raise ValueError("Search hits must be sorted by descending score")
        return v


# =============================================================================
# Resolution Models
# =============================================================================


class ResolvedEntity(BaseModel):
    """Binding of an extracted variable to a canonical subject IRI."""

    model_config = ConfigDict(frozen=True)

    entity: ExtractedVariable
    subject: str


# =============================================================================
# Pipeline Models
# =============================================================================


EventType = Literal["connected", "progress", "result", "complete", "error"]


class PipelineEvent(BaseModel):
    """A progress event emitted while ingesting text."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=0, description="Sequence number within one run")
    event: EventType
    data: str


class PipelineResult(BaseModel):
    """Outcome of one successful pipeline run."""

    model_config = ConfigDict(frozen=True)

    turtle: str = Field(..., description="Final Turtle merged into the store")
    draft: DraftGraph = Field(..., description="Accepted draft before substitution")
    resolved: Tuple[ResolvedEntity, ...] = Field(default_factory=tuple)
    triples_added: int = Field(0, ge=0, description="New triples merged into the store")
