import anyio
import pytest

from skillsynth.app.synthesis.models import Source
from skillsynth.app.synthesis.modes import RefreshMode
from skillsynth.app.synthesis.orchestrator import SynthesisLimits
from skillsynth.app.synthesis.source_formatting import (
    format_sources,
    truncate_with_marker,
    truncation_marker,
)

from skillsynth.tests.synthesis.helpers import (
    creation_response,
    make_existing_document,
    make_orchestrator,
    make_source,
    revision_response,
)


def test_text_within_limit_is_unchanged():
    assert truncate_with_marker("abc", 3) == "abc"


def test_text_over_limit_is_cut_and_marked():
    truncated = truncate_with_marker("abcdef", 4)

    assert truncated == "abcd\n\n" + truncation_marker(4)
    assert truncation_marker(4) == (
        "[Content truncated at 4 characters for token limit management]"
    )


def test_non_positive_limit_is_rejected():
    with pytest.raises(ValueError):
        truncate_with_marker("abc", 0)


def test_format_sources_renders_header_lines():
    source = Source(
        id="doc-1",
        type="url",
        label="Auth Guide",
        url="https://example.com/auth",
        content="OAuth 2.0 required.",
    )

    rendered = format_sources([source], numbers={"doc-1": 5}, max_chars=100)

    assert rendered == (
        "### Source [5]: Auth Guide\n"
        "Type: url\n"
        "URL: https://example.com/auth\n"
        "ID: doc-1\n\n"
        "OAuth 2.0 required."
    )


def test_format_sources_with_no_sources():
    assert format_sources([], numbers={}, max_chars=100) == "None"


def test_long_source_is_truncated_in_user_message():
    async def run():
        response = creation_response(
            content="Long material summarized [1].",
            citations=[{"id": 1, "sourceId": "long"}],
        )
        orchestrator, client = make_orchestrator(response)

        await orchestrator.create(sources=[make_source("long", "a" * 9000)])

        user_message = client.last_user_message
        assert ("a" * 8000 + "\n\n" + truncation_marker(8000)) in user_message
        assert "a" * 8001 not in user_message

    anyio.run(run)


def test_source_limit_is_configurable():
    async def run():
        response = creation_response(
            content="Summarized [1].",
            citations=[{"id": 1, "sourceId": "s"}],
        )
        orchestrator, client = make_orchestrator(
            response,
            limits=SynthesisLimits(max_source_chars=100),
        )

        await orchestrator.create(sources=[make_source("s", "b" * 150)])

        assert truncation_marker(100) in client.last_user_message
        assert "b" * 101 not in client.last_user_message

    anyio.run(run)


def test_existing_content_is_truncated_for_updates():
    async def run():
        existing = make_existing_document(
            content="c" * 13000,
            citations=[(1, "x")],
        )
        response = revision_response(content="Rewritten [1].", citations=[])
        orchestrator, client = make_orchestrator(response)

        await orchestrator.update(
            existing=existing,
            new_sources=[make_source("z", "Keys must be rotated.")],
            refresh_mode=RefreshMode.ADDITIVE,
        )

        user_message = client.last_user_message
        assert ("c" * 12000 + "\n\n" + truncation_marker(12000)) in user_message
        assert "c" * 12001 not in user_message

    anyio.run(run)
