from typing import Optional, Sequence

from skillsynth.app.prompts.composition import Composition, OutputFormat
from skillsynth.app.prompts.composition_registry import CompositionRegistry
from skillsynth.app.prompts.fragment import Fragment, FragmentTier
from skillsynth.app.prompts.fragment_registry import FragmentRegistry
from skillsynth.app.prompts.user_template import UserTemplate


def make_fragment(
    fragment_id: str,
    *,
    content: Optional[str] = None,
    tier: FragmentTier = FragmentTier.EDITABLE,
) -> Fragment:
    return Fragment(
        id=fragment_id,
        name=f"Block {fragment_id}",
        tier=tier,
        content=content if content is not None else f"Instructions for {fragment_id}.",
    )


def make_composition(
    context: str,
    fragment_ids: Sequence[str],
    *,
    output_format: OutputFormat = OutputFormat.STRUCTURED,
    schema_hint: Optional[str] = '{"title": "string"}',
    template: str = "Sources:\n\n{{sources}}",
) -> Composition:
    return Composition(
        context=context,
        name=f"Composition {context}",
        fragment_ids=tuple(fragment_ids),
        output_format=output_format,
        output_schema_hint=schema_hint,
        user_template=UserTemplate(text=template),
    )


def fixture_fragment_registry() -> FragmentRegistry:
    return FragmentRegistry(
        [
            make_fragment("alpha"),
            make_fragment("beta"),
            make_fragment("gamma"),
        ]
    )


def fixture_composition_registry(*compositions: Composition) -> CompositionRegistry:
    return CompositionRegistry(
        compositions
        or [make_composition("ordered", ["alpha", "beta", "gamma"])]
    )
