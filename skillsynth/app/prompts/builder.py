"""
Prompt Builder.

Turns (task context, scoping) into a BuiltPrompt: the assembled system
text, the composition's unfilled user template, and full provenance of the
fragments used.

ASSEMBLY ORDER (hard contract):
  1. Composition fragments, in composition order
  2. Expected Output Schema (structured output with a schema hint only)
  3. Library Context (when a library id is given)
  4. Customer Skill Context (when customer scoped)
  5. Additional Context (when non-empty)

IMPORTANT:
- An unknown context raises ConfigurationError.
- An unresolved fragment id is logged, recorded as a
  FragmentResolutionWarning, and skipped. It is NOT fatal.
- BuiltPrompts are created fresh per request and never cached.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, Field, ConfigDict

from skillsynth.app.errors import FragmentResolutionWarning
from skillsynth.app.prompts.composition import OutputFormat, TaskContext
from skillsynth.app.prompts.composition_registry import CompositionRegistry
from skillsynth.app.prompts.fragment_registry import (
    FragmentRegistry,
    FragmentTokenCost,
)
from skillsynth.app.prompts.library_context import (
    FragmentLibraryContextResolver,
    LibraryContextProvider,
)
from skillsynth.app.prompts.user_template import UserTemplate
from skillsynth.app.utils.hashing import compute_text_hash
from skillsynth.app.utils.tokens import estimate_tokens

logger = logging.getLogger(__name__)


BLOCK_SEPARATOR = "\n\n"

SCHEMA_HEADER = "## Expected Output Schema"
LIBRARY_HEADER = "## Library Context"
CUSTOMER_HEADER = "## Customer Skill Context"
ADDITIONAL_HEADER = "## Additional Context"

CUSTOMER_SKILL_CONTEXT = (
    "This skill is scoped to a single customer. Include only information that "
    "applies to this customer's deployment, contracts and history. Do not "
    "generalize customer-specific details into product-wide statements, and "
    "do not reference other customers."
)


# ----------------------------------------------------------------------
# Request scoping and result
# ----------------------------------------------------------------------

class PromptScoping(BaseModel):
    """
    Per-request scoping parameters.
    """

    library_id: Optional[str] = None
    is_customer_scoped: bool = False
    additional_context: Optional[str] = None

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class BuiltPrompt(BaseModel):
    """
    Instruction payload for exactly one model request.
    """

    system_text: str
    user_template: UserTemplate
    composition_id: str
    fragment_ids_used: Tuple[str, ...] = Field(
        ...,
        description="Fragment ids that produced a block, in order",
    )
    output_format: OutputFormat
    warnings: Tuple[FragmentResolutionWarning, ...] = ()

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @property
    def unresolved_fragment_ids(self) -> Tuple[str, ...]:
        return tuple(w.fragment_id for w in self.warnings)

    @property
    def prompt_hash(self) -> str:
        return compute_text_hash(self.system_text)

    @property
    def system_token_estimate(self) -> int:
        return estimate_tokens(self.system_text)


# ----------------------------------------------------------------------
# Builder
# ----------------------------------------------------------------------

class PromptBuilder:
    """
    Stateless assembler over injected, read-only registries.
    """

    def __init__(
        self,
        *,
        fragments: FragmentRegistry,
        compositions: CompositionRegistry,
        library_context: Optional[LibraryContextProvider] = None,
    ) -> None:
        self._fragments = fragments
        self._compositions = compositions
        self._library_context = library_context or LibraryContextProvider(
            resolver=FragmentLibraryContextResolver(fragments),
        )

    @property
    def fragments(self) -> FragmentRegistry:
        return self._fragments

    @property
    def compositions(self) -> CompositionRegistry:
        return self._compositions

    def build(
        self,
        context: Union[TaskContext, str],
        scoping: Optional[PromptScoping] = None,
    ) -> BuiltPrompt:
        scoping = scoping or PromptScoping()
        composition = self._compositions.get(_context_key(context))

        parts: List[str] = []
        used: List[str] = []
        warnings: List[FragmentResolutionWarning] = []

        # 1. Composition fragments
        for fragment_id in composition.fragment_ids:
            fragment = self._fragments.find(fragment_id)

            if fragment is None:
                message = (
                    f'Fragment "{fragment_id}" not found for composition '
                    f'"{composition.context}"'
                )
                logger.warning(
                    'Fragment "%s" not found for composition "%s", skipping',
                    fragment_id,
                    composition.context,
                )
                warnings.append(
                    FragmentResolutionWarning(
                        composition_id=composition.context,
                        fragment_id=fragment_id,
                        message=message,
                    )
                )
                continue

            if fragment.has_content:
                parts.append(f"## {fragment.name}\n\n{fragment.content}")
                used.append(fragment.id)

        # 2. Output schema
        if (
            composition.output_format == OutputFormat.STRUCTURED
            and composition.output_schema_hint
        ):
            parts.append(f"{SCHEMA_HEADER}\n\n{composition.output_schema_hint}")

        # 3. Library context
        if scoping.library_id:
            library_text = self._library_context.resolve(scoping.library_id)
            parts.append(f"{LIBRARY_HEADER}\n\n{library_text}")

        # 4. Customer context
        if scoping.is_customer_scoped:
            parts.append(f"{CUSTOMER_HEADER}\n\n{CUSTOMER_SKILL_CONTEXT}")

        # 5. Ad-hoc context
        if scoping.additional_context and scoping.additional_context.strip():
            parts.append(f"{ADDITIONAL_HEADER}\n\n{scoping.additional_context}")

        return BuiltPrompt(
            system_text=BLOCK_SEPARATOR.join(parts),
            user_template=composition.user_template,
            composition_id=composition.context,
            fragment_ids_used=tuple(used),
            output_format=composition.output_format,
            warnings=tuple(warnings),
        )

    def library_context(self, library_id: str) -> str:
        return self._library_context.resolve(library_id)

    def token_breakdown(
        self,
        context: Union[TaskContext, str],
    ) -> List[FragmentTokenCost]:
        composition = self._compositions.get(_context_key(context))
        return self._fragments.token_breakdown(composition.fragment_ids)


def _context_key(context: Union[TaskContext, str]) -> str:
    if isinstance(context, TaskContext):
        return context.value
    return context
