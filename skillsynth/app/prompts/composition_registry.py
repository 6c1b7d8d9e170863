"""
Composition Registry.

Maps a task context key to its Composition. Populated once at process
start and read-only thereafter.

IMPORTANT:
- get() for an unknown context raises ConfigurationError enumerating all
  known keys. There is NO default or fallback composition.
- The registry does NOT resolve fragments. Fragment misses are reported by
  unresolved_fragment_ids() for startup auditing and handled at assembly
  time by the PromptBuilder.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from skillsynth.app.errors import ConfigurationError
from skillsynth.app.prompts.composition import Composition
from skillsynth.app.prompts.fragment_registry import FragmentRegistry


class CompositionRegistry:
    """
    Read-only mapping of context key -> Composition.
    """

    def __init__(self, compositions: Iterable[Composition]) -> None:
        by_context: Dict[str, Composition] = {}

        for composition in compositions:
            if composition.context in by_context:
                raise ConfigurationError(
                    f'Duplicate composition context "{composition.context}".'
                )
            by_context[composition.context] = composition

        self._compositions = MappingProxyType(by_context)

    def get(self, context: str) -> Composition:
        composition = self._compositions.get(context)

        if composition is None:
            available = ", ".join(sorted(self._compositions)) or "(none)"
            raise ConfigurationError(
                f'Unknown composition: "{context}". Available: {available}'
            )

        return composition

    def find(self, context: str) -> Optional[Composition]:
        return self._compositions.get(context)

    def contexts(self) -> Tuple[str, ...]:
        return tuple(self._compositions)

    def __contains__(self, context: object) -> bool:
        return context in self._compositions

    def __iter__(self) -> Iterator[Composition]:
        return iter(self._compositions.values())

    def __len__(self) -> int:
        return len(self._compositions)

    # ------------------------------------------------------------------
    # Startup audit
    # ------------------------------------------------------------------

    def unresolved_fragment_ids(
        self,
        fragments: FragmentRegistry,
    ) -> Dict[str, List[str]]:
        """
        Return {context: [missing fragment ids]} for compositions that
        reference fragments absent from ``fragments``.
        """
        unresolved: Dict[str, List[str]] = {}

        for composition in self._compositions.values():
            missing = [
                fragment_id
                for fragment_id in composition.fragment_ids
                if fragment_id not in fragments
            ]
            if missing:
                unresolved[composition.context] = missing

        return unresolved
