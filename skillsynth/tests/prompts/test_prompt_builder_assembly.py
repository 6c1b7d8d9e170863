"""
Prompt Builder assembly contract.

Verifies that:
- composition fragments appear in composition order
- schema, library, customer and additional context follow in that order
- an unresolved fragment is skipped and recorded, never fatal
- an unknown context is always a ConfigurationError
"""

import pytest

from skillsynth.app.errors import ConfigurationError
from skillsynth.app.prompts.builder import (
    ADDITIONAL_HEADER,
    CUSTOMER_HEADER,
    LIBRARY_HEADER,
    SCHEMA_HEADER,
    PromptBuilder,
    PromptScoping,
)
from skillsynth.app.prompts.composition import OutputFormat
from skillsynth.app.prompts.fragment_registry import FragmentRegistry
from skillsynth.app.prompts.library_context import LibraryContextProvider
from skillsynth.app.utils.hashing import compute_text_hash

from skillsynth.tests.prompts.helpers import (
    fixture_composition_registry,
    fixture_fragment_registry,
    make_composition,
    make_fragment,
)


def _builder(*compositions, fragments=None) -> PromptBuilder:
    return PromptBuilder(
        fragments=fragments or fixture_fragment_registry(),
        compositions=fixture_composition_registry(*compositions),
    )


def test_blocks_follow_composition_order_then_fixed_trailer_order():
    builder = _builder(make_composition("ordered", ["gamma", "alpha", "beta"]))

    built = builder.build(
        "ordered",
        PromptScoping(
            library_id="knowledge",
            is_customer_scoped=True,
            additional_context="Prefer short answers.",
        ),
    )

    text = built.system_text
    positions = [
        text.index("## Block gamma"),
        text.index("## Block alpha"),
        text.index("## Block beta"),
        text.index(SCHEMA_HEADER),
        text.index(LIBRARY_HEADER),
        text.index(CUSTOMER_HEADER),
        text.index(ADDITIONAL_HEADER),
    ]
    assert positions == sorted(positions)
    assert text.endswith(f"{ADDITIONAL_HEADER}\n\nPrefer short answers.")
    assert built.fragment_ids_used == ("gamma", "alpha", "beta")


def test_fragment_block_format_and_separator():
    builder = _builder(make_composition("two", ["alpha", "beta"], schema_hint=None))

    built = builder.build("two")

    assert built.system_text == (
        "## Block alpha\n\nInstructions for alpha."
        "\n\n"
        "## Block beta\n\nInstructions for beta."
    )


def test_unknown_fragment_is_skipped_with_warning(caplog):
    builder = _builder(make_composition("partial", ["alpha", "ghost", "beta"]))

    with caplog.at_level("WARNING"):
        built = builder.build("partial")

    assert built.fragment_ids_used == ("alpha", "beta")
    assert built.system_text.count("## Block ") == 2
    assert built.unresolved_fragment_ids == ("ghost",)
    assert built.warnings[0].composition_id == "partial"
    assert "ghost" in caplog.text


def test_unknown_context_raises_configuration_error():
    builder = _builder()

    with pytest.raises(ConfigurationError):
        builder.build("does_not_exist")


def test_schema_block_only_for_structured_output():
    builder = _builder(
        make_composition("prose", ["alpha"], output_format=OutputFormat.PROSE),
        make_composition("structured", ["alpha"]),
    )

    assert SCHEMA_HEADER not in builder.build("prose").system_text
    assert (
        f'{SCHEMA_HEADER}\n\n{{"title": "string"}}'
        in builder.build("structured").system_text
    )


def test_blank_fragment_contributes_no_block():
    fragments = FragmentRegistry(
        [make_fragment("alpha"), make_fragment("empty", content="   \n")]
    )
    builder = _builder(
        make_composition("with_blank", ["alpha", "empty"], schema_hint=None),
        fragments=fragments,
    )

    built = builder.build("with_blank")

    assert built.fragment_ids_used == ("alpha",)
    assert "Block empty" not in built.system_text
    assert built.warnings == ()


def test_optional_trailers_are_omitted_when_not_requested():
    builder = _builder()

    text = builder.build("ordered", PromptScoping(additional_context="   ")).system_text

    assert LIBRARY_HEADER not in text
    assert CUSTOMER_HEADER not in text
    assert ADDITIONAL_HEADER not in text


def test_library_override_fragment_wins_over_static_default():
    fragments = FragmentRegistry(
        [
            make_fragment("alpha"),
            make_fragment("library_guidelines_knowledge", content="Override text."),
        ]
    )
    builder = _builder(make_composition("one", ["alpha"]), fragments=fragments)

    text = builder.build("one", PromptScoping(library_id="knowledge")).system_text

    assert f"{LIBRARY_HEADER}\n\nOverride text." in text


def test_library_falls_back_to_static_default():
    builder = _builder()

    text = builder.build("ordered", PromptScoping(library_id="views")).system_text

    assert "Views library" in text


def test_unknown_library_is_a_configuration_error():
    builder = PromptBuilder(
        fragments=fixture_fragment_registry(),
        compositions=fixture_composition_registry(),
        library_context=LibraryContextProvider(defaults={"knowledge": "K"}),
    )

    with pytest.raises(ConfigurationError):
        builder.build("ordered", PromptScoping(library_id="unknown"))


def test_built_prompt_carries_template_and_provenance():
    builder = _builder()

    built = builder.build("ordered")

    assert built.composition_id == "ordered"
    assert built.output_format == OutputFormat.STRUCTURED
    assert built.user_template.placeholders == frozenset({"sources"})
    assert built.prompt_hash == compute_text_hash(built.system_text)


def test_each_build_returns_a_fresh_prompt():
    builder = _builder()

    first = builder.build("ordered", PromptScoping(additional_context="one"))
    second = builder.build("ordered", PromptScoping(additional_context="two"))

    assert first is not second
    assert "one" in first.system_text and "one" not in second.system_text
