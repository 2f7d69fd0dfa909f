"""
Placeholder substitution for accepted drafts.

Drafts name every entity with a reserved token, ``PLACEHOLDER_ENTITY_<n>``,
written as a whole relative IRI (``<PLACEHOLDER_ENTITY_1>``) or on its own.
Both forms become ``<subject>``. A token glued to other IRI or prefixed-name
characters (``ex:PLACEHOLDER_ENTITY_1``, ``<#PLACEHOLDER_ENTITY_1>``) cannot
be replaced without producing a different term, so it is rejected.
"""

import re
from typing import Dict, List, Mapping

from graphweaver.utils.errors import MalformedPlaceholderError, UnresolvedPlaceholderError

PLACEHOLDER_PREFIX = "PLACEHOLDER_ENTITY_"

PLACEHOLDER_PATTERN = re.compile(rf"{PLACEHOLDER_PREFIX}\d+")

# Characters that continue an IRI or a prefixed name around a token
_NAME_CHARS = frozenset("_-:/#%?=&~+@<>")


def placeholder_id(index: int) -> str:
    """Return the placeholder token for the n-th entity."""
    return f"{PLACEHOLDER_PREFIX}{index}"


def _normalize(key: str) -> str:
    return key.strip().lstrip("<").rstrip(">")


def _continues_name(char: str) -> bool:
    return char.isalnum() or char in _NAME_CHARS


def _is_whole(content: str, match: "re.Match[str]") -> bool:
    start, end = match.span()
    before = content[start - 1] if start else ""
    after = content[end] if end < len(content) else ""
    if before == "<" and after == ">":
        return True
    return not _continues_name(before) and not _continues_name(after)


def _fragment(content: str, match: "re.Match[str]") -> str:
    start, end = match.span()
    head = re.search(r"\S*$", content[:start]).group(0)
    tail = re.match(r"\S*", content[end:]).group(0)
    return f"{head}{match.group(0)}{tail}"


def find_placeholders(content: str) -> List[str]:
    """Distinct placeholder tokens in order of first appearance."""
    seen: Dict[str, None] = {}
    for match in PLACEHOLDER_PATTERN.finditer(content):
        seen.setdefault(match.group(0), None)
    return list(seen)


def embedded_placeholders(content: str) -> List[str]:
    """Terms that contain a placeholder token without being one."""
    seen: Dict[str, None] = {}
    for match in PLACEHOLDER_PATTERN.finditer(content):
        if not _is_whole(content, match):
            seen.setdefault(_fragment(content, match), None)
    return list(seen)


def substitute(content: str, id_to_subject: Mapping[str, str]) -> str:
    """
    Replace every placeholder token with its resolved subject IRI.

    Args:
        content: Turtle text containing placeholder tokens
        id_to_subject: Placeholder id (with or without angle brackets) to IRI

    Returns:
        Turtle text without placeholder tokens

    Raises:
        MalformedPlaceholderError: If a token is part of a larger term
        UnresolvedPlaceholderError: If a token has no entry in the map
    """
    values = {_normalize(key): subject for key, subject in id_to_subject.items()}
    pieces: List[str] = []
    position = 0

    for match in PLACEHOLDER_PATTERN.finditer(content):
        token = match.group(0)
        if not _is_whole(content, match):
            raise MalformedPlaceholderError(token, _fragment(content, match))
        subject = values.get(token)
        if subject is None:
            raise UnresolvedPlaceholderError(token)

        start, end = match.span()
        if content[start - 1 : start] == "<" and content[end : end + 1] == ">":
            start, end = start - 1, end + 1
        pieces.append(content[position:start])
        pieces.append(f"<{subject}>")
        position = end

    pieces.append(content[position:])
    return "".join(pieces)
