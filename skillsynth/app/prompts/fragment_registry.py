"""
Fragment Registry.

An immutable keyed store of reusable instruction fragments. The registry
is constructed once at process start and passed by reference into the
components that need it. There is no module-level registry.

IMPORTANT:
- get() fails with FragmentNotFoundError for an unknown id.
- get_many() preserves order and silently omits unknown ids. Callers that
  must report misses (the PromptBuilder) check membership themselves.
- Safe for unsynchronized concurrent reads.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from skillsynth.app.errors import ConfigurationError, FragmentNotFoundError
from skillsynth.app.prompts.fragment import Fragment, FragmentTier


class FragmentTokenCost(BaseModel):
    """Token cost of a single fragment within a composition."""

    fragment_id: str
    name: str
    tier: FragmentTier
    tokens: int

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class FragmentRegistry:
    """
    Read-only mapping of fragment id -> Fragment.
    """

    def __init__(self, fragments: Iterable[Fragment]) -> None:
        by_id = {}

        for fragment in fragments:
            if fragment.id in by_id:
                raise ConfigurationError(
                    f'Duplicate fragment id "{fragment.id}" in registry.'
                )
            by_id[fragment.id] = fragment

        self._fragments = MappingProxyType(by_id)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, fragment_id: str) -> Fragment:
        try:
            return self._fragments[fragment_id]
        except KeyError:
            raise FragmentNotFoundError(fragment_id) from None

    def find(self, fragment_id: str) -> Optional[Fragment]:
        return self._fragments.get(fragment_id)

    def get_many(self, fragment_ids: Sequence[str]) -> List[Fragment]:
        return [
            self._fragments[fragment_id]
            for fragment_id in fragment_ids
            if fragment_id in self._fragments
        ]

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._fragments)

    def __contains__(self, fragment_id: object) -> bool:
        return fragment_id in self._fragments

    def __iter__(self) -> Iterator[Fragment]:
        return iter(self._fragments.values())

    def __len__(self) -> int:
        return len(self._fragments)

    # ------------------------------------------------------------------
    # Token accounting
    # ------------------------------------------------------------------

    def token_breakdown(self, fragment_ids: Sequence[str]) -> List[FragmentTokenCost]:
        """
        Per-fragment token costs for the resolvable ids, in order.
        """
        return [
            FragmentTokenCost(
                fragment_id=fragment.id,
                name=fragment.name,
                tier=fragment.tier,
                tokens=fragment.token_estimate,
            )
            for fragment in self.get_many(fragment_ids)
        ]

    def total_tokens(self, fragment_ids: Sequence[str]) -> int:
        return sum(f.token_estimate for f in self.get_many(fragment_ids))
