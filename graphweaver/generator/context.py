"""
Prompt context for Turtle draft generation.

Renders the initial conversation handed to the generator: the system prompt
with the output contract, a handful of worked examples, the user's text and,
optionally, the current timestamp.
"""

import re
from typing import List, Optional, Sequence

from graphweaver.generator.substitute import PLACEHOLDER_PREFIX
from graphweaver.models import (
    DraftGraph,
    ExtractedVariable,
    GenerationContext,
    Message,
    Role,
)

DEFAULT_PREFIXES = (
    "rdf",
    "rdfs",
    "schema",
    "foaf",
    "xsd",
    "geo",
    "owl",
    "skos",
    "dc",
    "dcterms",
)

_FENCE_PATTERN = re.compile(r"```[a-zA-Z]*\n([\s\S]*?)```")
_FENCE_MARKER_PATTERN = re.compile(r"```[a-zA-Z]*|```")


def trim_fence(text: str) -> str:
    """Strip Markdown code fences around model output."""
    fenced = _FENCE_PATTERN.search(text)
    if fenced:
        return fenced.group(1).strip()
    return _FENCE_MARKER_PATTERN.sub("", text).strip()


def system_prompt(allowed_prefixes: Sequence[str] = DEFAULT_PREFIXES) -> str:
    return "\n".join(
        [
            "You are an expert episodic memory extractor for RDF knowledge graphs.",
            "Convert natural language into valid Turtle (TTL) using schema.org so that "
            "episodes (who/what/when/where) are faithfully captured.",
            f"Use only these prefixes: {', '.join(allowed_prefixes)}. "
            "Do not introduce any others; expand to full IRIs instead.",
            f"Name every entity and event node <{PLACEHOLDER_PREFIX}1>, <{PLACEHOLDER_PREFIX}2>, "
            "and so on. Never invent IRIs and avoid blank nodes.",
            "Prefer schema.org vocabulary: Actions (WatchAction, ReadAction, EatAction, ...) with "
            "schema:agent, schema:object, schema:location, schema:actionStatus and "
            "schema:startTime/endTime; Events; CreativeWorks; Places.",
            "Use typed literals with xsd for dates, times and numbers.",
            "Respond with a single JSON object with two keys: "
            '"turtle", the Turtle document, and "variables", one entry per placeholder '
            'with "id" (the placeholder), "type" (its class, e.g. schema:Person), '
            '"name" (its surface name) and "text" (the snippet of the input it came from).',
            "No prose, no code fences, no explanations.",
        ]
    )


def _example(text: str, turtle: str, variables: List[ExtractedVariable]) -> List[Message]:
    draft = DraftGraph(content=turtle, variables=tuple(variables))
    return [
        Message(role=Role.USER, content=text),
        Message(role=Role.ASSISTANT, content=draft.to_message_content()),
    ]


def few_shot_examples() -> List[Message]:
    """Worked input/output pairs shown before the user's text."""
    messages: List[Message] = []
    messages += _example(
        "Kevin Bacon finished watching Footloose on March 1st, 2014.",
        "\n".join(
            [
                "@prefix schema: <https://schema.org/> .",
                "@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .",
                "",
                "<PLACEHOLDER_ENTITY_1> a schema:WatchAction ;",
                "  schema:agent <PLACEHOLDER_ENTITY_2> ;",
                "  schema:object <PLACEHOLDER_ENTITY_3> ;",
                "  schema:actionStatus schema:CompletedActionStatus ;",
                '  schema:startTime "2014-03-01"^^xsd:date .',
                "",
                '<PLACEHOLDER_ENTITY_2> a schema:Person ; schema:name "Kevin Bacon" .',
                '<PLACEHOLDER_ENTITY_3> a schema:Movie ; schema:name "Footloose" .',
            ]
        ),
        [
            ExtractedVariable(
                id="PLACEHOLDER_ENTITY_1",
                type="schema:WatchAction",
                name="Kevin Bacon watching Footloose",
                text="finished watching Footloose on March 1st, 2014",
            ),
            ExtractedVariable(
                id="PLACEHOLDER_ENTITY_2",
                type="schema:Person",
                name="Kevin Bacon",
                text="Kevin Bacon",
            ),
            ExtractedVariable(
                id="PLACEHOLDER_ENTITY_3",
                type="schema:Movie",
                name="Footloose",
                text="Footloose",
            ),
        ],
    )
    messages += _example(
        "Maria ate dinner at Mama Mia's Pizza on May 5, 2024.",
        "\n".join(
            [
                "@prefix schema: <https://schema.org/> .",
                "@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .",
                "",
                "<PLACEHOLDER_ENTITY_1> a schema:EatAction ;",
                "  schema:agent <PLACEHOLDER_ENTITY_2> ;",
                "  schema:location <PLACEHOLDER_ENTITY_3> ;",
                '  schema:startTime "2024-05-05"^^xsd:date ;',
                "  schema:actionStatus schema:CompletedActionStatus .",
                "",
                '<PLACEHOLDER_ENTITY_2> a schema:Person ; schema:name "Maria" .',
                "<PLACEHOLDER_ENTITY_3> a schema:Restaurant ; schema:name \"Mama Mia's Pizza\" .",
            ]
        ),
        [
            ExtractedVariable(
                id="PLACEHOLDER_ENTITY_1",
                type="schema:EatAction",
                name="Maria eating dinner",
                text="ate dinner at Mama Mia's Pizza on May 5, 2024",
            ),
            ExtractedVariable(
                id="PLACEHOLDER_ENTITY_2",
                type="schema:Person",
                name="Maria",
                text="Maria",
            ),
            ExtractedVariable(
                id="PLACEHOLDER_ENTITY_3",
                type="schema:Restaurant",
                name="Mama Mia's Pizza",
                text="Mama Mia's Pizza",
            ),
        ],
    )
    messages += _example(
        "Support sent John an email on March 2, 2025.",
        "\n".join(
            [
                "@prefix schema: <https://schema.org/> .",
                "@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .",
                "",
                "<PLACEHOLDER_ENTITY_1> a schema:CommunicateAction ;",
                "  schema:agent <PLACEHOLDER_ENTITY_2> ;",
                "  schema:recipient <PLACEHOLDER_ENTITY_3> ;",
                '  schema:startTime "2025-03-02"^^xsd:date ;',
                "  schema:actionStatus schema:CompletedActionStatus .",
                "",
                '<PLACEHOLDER_ENTITY_2> a schema:Organization ; schema:name "Support" .',
                '<PLACEHOLDER_ENTITY_3> a schema:Person ; schema:name "John" .',
            ]
        ),
        [
            ExtractedVariable(
                id="PLACEHOLDER_ENTITY_1",
                type="schema:CommunicateAction",
                name="Support emailing John",
                text="sent John an email on March 2, 2025",
            ),
            ExtractedVariable(
                id="PLACEHOLDER_ENTITY_2",
                type="schema:Organization",
                name="Support",
                text="Support",
            ),
            ExtractedVariable(
                id="PLACEHOLDER_ENTITY_3",
                type="schema:Person",
                name="John",
                text="John",
            ),
        ],
    )
    return messages


def build_context(
    text: str,
    timestamp: Optional[str] = None,
    allowed_prefixes: Sequence[str] = DEFAULT_PREFIXES,
    include_examples: bool = True,
) -> GenerationContext:
    """
    Render the initial generation context.

    Args:
        text: Natural-language input
        timestamp: Current time, given to the model verbatim
        allowed_prefixes: Prefixes the model may declare
        include_examples: Whether to include the few-shot examples

    Returns:
        Context seeded with the system prompt and the input
    """
    messages = [Message(role=Role.SYSTEM, content=system_prompt(allowed_prefixes))]
    if include_examples:
        messages.extend(few_shot_examples())
    messages.append(Message(role=Role.USER, content=text))
    if timestamp is not None:
        messages.append(Message(role=Role.USER, content=f"Here is the timestamp: {timestamp}"))
    return GenerationContext.from_messages(messages)
