"""
Deterministic rendering of sources, citations and scopes for user messages.

IMPORTANT:
- Truncation is NEVER silent. Content over a ceiling is cut to exactly
  ``limit`` characters and followed by a visible marker.
- This module contains NO model interaction and NO numbering decisions;
  source numbers are supplied by the caller.
"""

from __future__ import annotations

from typing import List, Mapping, Optional, Sequence

from skillsynth.app.synthesis.models import (
    Citation,
    ScopeDefinition,
    SkillScopeCandidate,
    Source,
)


SOURCE_SEPARATOR = "\n\n---\n\n"
NOT_SPECIFIED = "Not specified"


def truncation_marker(limit: int) -> str:
    return f"[Content truncated at {limit} characters for token limit management]"


def truncate_with_marker(text: str, limit: int) -> str:
    if limit <= 0:
        raise ValueError("limit must be positive")
    if len(text) <= limit:
        return text
    return f"{text[:limit]}\n\n{truncation_marker(limit)}"


def format_sources(
    sources: Sequence[Source],
    *,
    numbers: Mapping[str, int],
    max_chars: int,
) -> str:
    """
    Render sources as numbered blocks.

    ``numbers`` maps source id -> citation number shown to the model.
    """
    if not sources:
        return "None"

    blocks: List[str] = []

    for source in sources:
        lines = [
            f"### Source [{numbers[source.id]}]: {source.label}",
            f"Type: {source.type}",
        ]
        if source.url:
            lines.append(f"URL: {source.url}")
        lines.append(f"ID: {source.id}")

        header = "\n".join(lines)
        content = truncate_with_marker(source.content, max_chars)
        blocks.append(f"{header}\n\n{content}")

    return SOURCE_SEPARATOR.join(blocks)


def format_citations(citations: Sequence[Citation]) -> str:
    if not citations:
        return "None"

    lines = []
    for citation in sorted(citations, key=lambda c: c.number):
        line = f"[{citation.number}] {citation.label}"
        if citation.url:
            line = f"{line} - {citation.url}"
        lines.append(line)

    return "\n".join(lines)


def format_list(items: Sequence[str]) -> str:
    return ", ".join(items) if items else NOT_SPECIFIED


def format_scope(scope: Optional[ScopeDefinition]) -> str:
    if scope is None:
        return "No scope definition"

    return (
        f"Covers: {scope.covers}\n"
        f"Future Additions: {format_list(scope.future_additions)}\n"
        f"Not Included: {format_list(scope.not_included)}"
    )


def format_skill_scopes(candidates: Sequence[SkillScopeCandidate]) -> str:
    if not candidates:
        return "No existing skills"

    blocks = []
    for candidate in candidates:
        header = f"### {candidate.title}\nID: {candidate.id}"
        if candidate.scope_definition is None:
            blocks.append(f"{header}\nScope: Not defined")
        else:
            blocks.append(f"{header}\n{format_scope(candidate.scope_definition)}")

    return "\n\n".join(blocks)
