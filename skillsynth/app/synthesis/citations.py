"""
Citation numbering.

Citation numbers are displayed and permanently referenced downstream, so
they are assigned HERE and nowhere else.

INVARIANTS (enforced):
- A prior citation whose source remains cited keeps its number across
  update operations.
- Newly cited sources receive consecutive numbers above the prior maximum.
  Numbers are never reused and never inserted out of sequence.
- Only reformat renumbers, and it renumbers EVERY citation by first
  appearance in the regenerated content.

Model-proposed numbers are checked against the assignment. A mismatch is
a GenerationOutputError. A broken invariant after assignment is a
CitationInvariantViolation (a defect in this module).
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from skillsynth.app.errors import CitationInvariantViolation, GenerationOutputError
from skillsynth.app.synthesis.models import Citation, Source
from skillsynth.app.synthesis.output_schemas import CitationOutput


# [1] or [1, 3] style inline markers; never matches [0] or link text
CITATION_MARKER = re.compile(r"\[([1-9]\d*(?:\s*,\s*[1-9]\d*)*)\]")
_MARKER_SPLIT = re.compile(r"\s*,\s*")


# ----------------------------------------------------------------------
# Marker helpers
# ----------------------------------------------------------------------

def cited_numbers(content: str) -> List[int]:
    """
    Distinct citation numbers in order of first appearance.
    """
    seen: Dict[int, None] = {}
    for match in CITATION_MARKER.finditer(content):
        for raw in _MARKER_SPLIT.split(match.group(1)):
            seen.setdefault(int(raw), None)
    return list(seen)


def rewrite_citation_markers(content: str, mapping: Mapping[int, int]) -> str:
    """
    Replace marker numbers in a single pass (no chained substitution).
    Numbers absent from ``mapping`` are left unchanged.
    """
    if not mapping:
        return content

    def _replace(match: re.Match) -> str:
        numbers = [int(raw) for raw in _MARKER_SPLIT.split(match.group(1))]
        if not any(n in mapping for n in numbers):
            return match.group(0)
        return "[" + ", ".join(str(mapping.get(n, n)) for n in numbers) + "]"

    return CITATION_MARKER.sub(_replace, content)


# ----------------------------------------------------------------------
# Invariant checks
# ----------------------------------------------------------------------

def check_citation_ledger(citations: Sequence[Citation]) -> None:
    """
    Reject a citation list that reuses a number or cites one source under
    two numbers.
    """
    by_number: Dict[int, str] = {}
    by_source: Dict[str, int] = {}

    for citation in citations:
        if citation.number in by_number:
            raise CitationInvariantViolation(
                f"Citation number [{citation.number}] is assigned to both "
                f'"{by_number[citation.number]}" and "{citation.source_id}"'
            )
        if citation.source_id in by_source:
            raise CitationInvariantViolation(
                f'Source "{citation.source_id}" is cited as both '
                f"[{by_source[citation.source_id]}] and [{citation.number}]"
            )
        by_number[citation.number] = citation.source_id
        by_source[citation.source_id] = citation.number


def assert_stable_numbering(
    prior: Sequence[Citation],
    revised: Sequence[Citation],
) -> None:
    check_citation_ledger(revised)

    prior_numbers = {c.source_id: c.number for c in prior}
    prior_max = max(prior_numbers.values(), default=0)

    new_numbers = []
    for citation in revised:
        previous = prior_numbers.get(citation.source_id)
        if previous is None:
            new_numbers.append(citation.number)
        elif previous != citation.number:
            raise CitationInvariantViolation(
                f'Source "{citation.source_id}" was renumbered from '
                f"[{previous}] to [{citation.number}]"
            )

    expected = list(range(prior_max + 1, prior_max + 1 + len(new_numbers)))
    if sorted(new_numbers) != expected:
        raise CitationInvariantViolation(
            f"New citations {sorted(new_numbers)} do not continue "
            f"sequentially from [{prior_max}]"
        )


def assert_first_appearance_numbering(
    content: str,
    citations: Sequence[Citation],
) -> None:
    check_citation_ledger(citations)

    numbers = sorted(c.number for c in citations)
    if numbers != list(range(1, len(numbers) + 1)):
        raise CitationInvariantViolation(
            f"Renumbered citations have gaps: {numbers}"
        )

    known = {c.number for c in citations}
    appearance = [n for n in cited_numbers(content) if n in known]
    if appearance != list(range(1, len(appearance) + 1)):
        raise CitationInvariantViolation(
            f"Content markers are not in first-appearance order: {appearance}"
        )


# ----------------------------------------------------------------------
# Assignment
# ----------------------------------------------------------------------

class CitationPlan:
    """
    Provisional numbering shown to the model for one request.

    Prior citations keep their numbers. Every other source gets the next
    number above the prior maximum, in the order given.
    """

    def __init__(
        self,
        *,
        prior: Sequence[Citation],
        sources: Iterable[Source],
    ) -> None:
        check_citation_ledger(prior)

        self._prior = list(prior)
        self._prior_max = max((c.number for c in prior), default=0)
        self._sources: Dict[str, Source] = {}

        numbers = {c.source_id: c.number for c in prior}
        next_number = self._prior_max + 1

        for source in sources:
            self._sources.setdefault(source.id, source)
            if source.id not in numbers:
                numbers[source.id] = next_number
                next_number += 1

        self._numbers = numbers
        self._source_by_number = {n: sid for sid, n in numbers.items()}
        self._max_number = max(self._source_by_number, default=0)

    @property
    def numbers(self) -> Mapping[str, int]:
        return dict(self._numbers)

    @property
    def prior_max(self) -> int:
        return self._prior_max

    def resolve(
        self,
        *,
        content: str,
        model_citations: Sequence[CitationOutput],
        retain_prior: bool = False,
        raw_response: str | None = None,
    ) -> Tuple[str, List[Citation]]:
        """
        Turn the model's content and citation list into final citations.

        Returns the (possibly marker-rewritten) content and the citations
        sorted by number.
        """
        cited = self._cited_source_ids(content, model_citations, raw_response)

        prior_ids = {c.source_id for c in self._prior}
        if retain_prior:
            cited |= prior_ids

        kept = [c for c in self._prior if c.source_id in cited]

        new_ids = sorted(
            (sid for sid in cited if sid not in prior_ids),
            key=lambda sid: self._numbers[sid],
        )

        # Compact newly cited sources to prior_max+1, prior_max+2, ...
        mapping: Dict[int, int] = {}
        added: List[Citation] = []
        for offset, source_id in enumerate(new_ids, start=1):
            provisional = self._numbers[source_id]
            final = self._prior_max + offset
            if provisional != final:
                mapping[provisional] = final

            source = self._sources[source_id]
            added.append(
                Citation(
                    number=final,
                    source_id=source.id,
                    label=source.label,
                    url=source.url,
                )
            )

        content = rewrite_citation_markers(content, mapping)
        citations = sorted([*kept, *added], key=lambda c: c.number)

        assert_stable_numbering(self._prior, citations)
        return content, citations

    def _cited_source_ids(
        self,
        content: str,
        model_citations: Sequence[CitationOutput],
        raw_response: str | None,
    ) -> set:
        cited = set()

        for proposed in model_citations:
            assigned = self._numbers.get(proposed.source_id)
            if assigned is None:
                raise GenerationOutputError(
                    f'Citation references unknown source "{proposed.source_id}"',
                    raw_response=raw_response,
                )
            if proposed.id is not None and proposed.id != assigned:
                raise GenerationOutputError(
                    f'Citation [{proposed.id}] for source "{proposed.source_id}" '
                    f"contradicts assigned number [{assigned}]",
                    raw_response=raw_response,
                )
            cited.add(proposed.source_id)

        # Bracketed numbers above the assigned range are literal text ([2023], [429])
        for number in cited_numbers(content):
            if number > self._max_number:
                continue
            source_id = self._source_by_number.get(number)
            if source_id is None:
                raise GenerationOutputError(
                    f"Content cites [{number}] which is not an assigned "
                    "citation number",
                    raw_response=raw_response,
                )
            cited.add(source_id)

        return cited


def renumber_by_first_appearance(
    content: str,
    citations: Sequence[Citation],
) -> Tuple[str, List[Citation]]:
    """
    Renumber every citation 1..n by first appearance in ``content``.

    Citations that never appear in the content follow in their prior
    order. Markers are rewritten in one pass.
    """
    check_citation_ledger(citations)

    known = {c.number for c in citations}
    order = [n for n in cited_numbers(content) if n in known]
    order += sorted(known - set(order))

    mapping = {old: new for new, old in enumerate(order, start=1)}

    content = rewrite_citation_markers(content, mapping)
    renumbered = sorted(
        (c.model_copy(update={"number": mapping[c.number]}) for c in citations),
        key=lambda c: c.number,
    )

    assert_first_appearance_numbering(content, renumbered)
    return content, renumbered
