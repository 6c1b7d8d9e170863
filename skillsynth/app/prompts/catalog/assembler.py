"""
Default catalog assembler.

Builds the process-wide registries from the default fragment and
composition definitions.

This module:
- constructs immutable registries once
- wires the PromptBuilder to them

It does NOT:
- read configuration
- decide fragment-resolution strictness (see bootstrap)
"""

from typing import List, Optional

from skillsynth.app.prompts.builder import PromptBuilder
from skillsynth.app.prompts.composition_registry import CompositionRegistry
from skillsynth.app.prompts.fragment import Fragment
from skillsynth.app.prompts.fragment_registry import FragmentRegistry
from skillsynth.app.prompts.library_context import LibraryContextProvider

from skillsynth.app.prompts.catalog.compositions import default_compositions
from skillsynth.app.prompts.catalog.core_fragments import (
    ROLE_FRAGMENTS,
    TASK_FRAMING_FRAGMENTS,
)
from skillsynth.app.prompts.catalog.library_fragments import LIBRARY_FRAGMENTS
from skillsynth.app.prompts.catalog.skill_fragments import SKILL_FRAGMENTS


def default_fragments() -> List[Fragment]:
    return [
        *ROLE_FRAGMENTS,
        *TASK_FRAMING_FRAGMENTS,
        *SKILL_FRAGMENTS,
        *LIBRARY_FRAGMENTS,
    ]


def build_default_fragment_registry() -> FragmentRegistry:
    return FragmentRegistry(default_fragments())


def build_default_composition_registry() -> CompositionRegistry:
    return CompositionRegistry(default_compositions())


def build_default_prompt_builder(
    *,
    fragments: Optional[FragmentRegistry] = None,
    compositions: Optional[CompositionRegistry] = None,
    library_context: Optional[LibraryContextProvider] = None,
) -> PromptBuilder:
    """
    Assemble a PromptBuilder over the default catalog.

    Either registry may be substituted (e.g. fixture registries in tests).
    """
    if fragments is None:
        fragments = build_default_fragment_registry()
    if compositions is None:
        compositions = build_default_composition_registry()

    return PromptBuilder(
        fragments=fragments,
        compositions=compositions,
        library_context=library_context,
    )
