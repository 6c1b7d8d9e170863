"""
End-to-end skill creation through the default catalog.

Verifies that:
- one model call is made with the assembled creation prompt
- sources are numbered 1..n in request order
- citations and scope are validated and returned
- uncited sources are compacted out of the numbering
"""

import json

import anyio

from skillsynth.app.prompts.builder import LIBRARY_HEADER, SCHEMA_HEADER
from skillsynth.app.synthesis.modes import CreationMode, RefreshMode, SkillType
from skillsynth.app.synthesis.models import ScopeDefinition

from skillsynth.tests.synthesis.helpers import (
    creation_response,
    make_orchestrator,
    make_source,
)


SOURCES = [
    make_source("a", "All requests require OAuth 2.0 bearer tokens."),
    make_source("b", "The rate limit is 1000 requests per minute."),
]


def test_generated_creation_returns_cited_document():
    async def run():
        response = creation_response(
            content=(
                "## Authentication\n\nClients must use OAuth 2.0 [1].\n\n"
                "## Rate Limits\n\nRequests are limited to 1000 per minute [2]."
            ),
            citations=[
                {"id": 1, "sourceId": "a", "label": "Source a"},
                {"id": 2, "sourceId": "b", "label": "Source b"},
            ],
        )
        orchestrator, client = make_orchestrator(response)

        result = await orchestrator.create(sources=SOURCES, library_id="knowledge")

        document = result.document
        assert client.call_count == 1
        assert document.title == "API Access"
        assert [(c.number, c.source_id) for c in document.citations] == [
            (1, "a"),
            (2, "b"),
        ]
        assert document.scope_definition.covers.strip()
        assert "OAuth 2.0 [1]" in document.content
        assert document.attributes.creation_mode is CreationMode.GENERATED
        assert document.attributes.refresh_mode is RefreshMode.REGENERATIVE

    anyio.run(run)


def test_creation_prompt_contains_library_schema_and_numbered_sources():
    async def run():
        response = creation_response(
            content="Clients must use OAuth 2.0 [1].",
            citations=[{"id": 1, "sourceId": "a"}],
        )
        orchestrator, client = make_orchestrator(response)

        result = await orchestrator.create(sources=SOURCES, library_id="knowledge")

        system_text = client.last_system_text
        assert LIBRARY_HEADER in system_text
        assert "Knowledge skills answer product and technical questions" in system_text
        assert SCHEMA_HEADER in system_text

        user_message = client.last_user_message
        assert "Target library: knowledge" in user_message
        assert "### Source [1]: Source a" in user_message
        assert "### Source [2]: Source b" in user_message

        transparency = result.transparency
        assert transparency.composition_id == "skill_creation"
        assert transparency.system_text == system_text
        assert transparency.user_message == user_message
        assert transparency.model == "mock-model"
        assert transparency.token_usage.input == 1024
        assert transparency.token_usage.output == 256
        assert transparency.unresolved_fragment_ids == ()

    anyio.run(run)


def test_fenced_json_response_is_accepted():
    async def run():
        payload = creation_response(
            content="Clients must use OAuth 2.0 [1].",
            citations=[{"id": 1, "sourceId": "a"}],
        )
        raw = "Here is the skill:\n\n```json\n" + json.dumps(payload) + "\n```\n"
        orchestrator, _ = make_orchestrator(raw)

        result = await orchestrator.create(sources=SOURCES)

        assert result.document.citations[0].source_id == "a"
        assert result.transparency.raw_response == raw

    anyio.run(run)


def test_uncited_source_is_compacted_out_of_numbering():
    async def run():
        response = creation_response(
            content="Requests are limited to 1000 per minute [2].",
            citations=[{"id": 2, "sourceId": "b"}],
        )
        orchestrator, _ = make_orchestrator(response)

        result = await orchestrator.create(sources=SOURCES)

        document = result.document
        assert [(c.number, c.source_id) for c in document.citations] == [(1, "b")]
        assert document.content == "Requests are limited to 1000 per minute [1]."

    anyio.run(run)


def test_citation_labels_come_from_sources():
    async def run():
        response = creation_response(
            content="Clients must use OAuth 2.0 [1].",
            citations=[{"id": 1, "sourceId": "a", "label": "Made up"}],
        )
        orchestrator, _ = make_orchestrator(response)

        sources = [make_source("a", "OAuth 2.0 required.", label="Auth Guide")]
        result = await orchestrator.create(sources=sources)

        assert result.document.citations[0].label == "Auth Guide"

    anyio.run(run)


def test_bracketed_numbers_above_citation_range_are_kept_as_text():
    async def run():
        response = creation_response(
            content=(
                "Clients must use OAuth 2.0 [1]. Throttled calls return "
                "HTTP [429] after 1000 requests per minute [3]."
            ),
            citations=[
                {"id": 1, "sourceId": "a"},
                {"id": 3, "sourceId": "c"},
            ],
        )
        orchestrator, _ = make_orchestrator(response)

        result = await orchestrator.create(
            sources=[*SOURCES, make_source("c", "Throttled calls receive HTTP 429.")],
        )

        assert result.document.content == (
            "Clients must use OAuth 2.0 [1]. Throttled calls return "
            "HTTP [429] after 1000 requests per minute [2]."
        )
        assert [(c.number, c.source_id) for c in result.document.citations] == [
            (1, "a"),
            (2, "c"),
        ]

    anyio.run(run)


def test_intelligence_creation_uses_intelligence_composition():
    async def run():
        response = creation_response(
            content="Competitors price per seat [1].",
            citations=[{"id": 1, "sourceId": "a"}],
        )
        orchestrator, _ = make_orchestrator(response)

        result = await orchestrator.create(
            sources=SOURCES[:1],
            skill_type=SkillType.INTELLIGENCE,
        )

        assert result.transparency.composition_id == "skill_creation_intelligence"

    anyio.run(run)


def test_foundational_creation_pins_title_and_scope():
    async def run():
        scope = ScopeDefinition(
            covers="Public API access requirements",
            future_additions=["Webhooks"],
            not_included=["Pricing"],
        )
        response = creation_response(
            content="Clients must use OAuth 2.0 [1].",
            citations=[{"id": 1, "sourceId": "a"}],
            title="Model Chosen Title",
            covers="Something broader",
        )
        orchestrator, client = make_orchestrator(response)

        result = await orchestrator.create(
            sources=SOURCES,
            creation_mode=CreationMode.FOUNDATIONAL,
            title="Public API Access",
            scope_definition=scope,
        )

        assert result.document.title == "Public API Access"
        assert result.document.scope_definition == scope
        assert result.transparency.composition_id == "foundational_creation"
        assert result.document.attributes.creation_mode is CreationMode.FOUNDATIONAL
        assert result.document.attributes.refresh_mode is RefreshMode.ADDITIVE
        assert "Title: Public API Access" in client.last_user_message
        assert "Covers: Public API access requirements" in client.last_user_message
        assert "Future Additions: Webhooks" in client.last_user_message

    anyio.run(run)


def test_customer_and_additional_context_reach_system_text():
    async def run():
        response = creation_response(
            content="Clients must use OAuth 2.0 [1].",
            citations=[{"id": 1, "sourceId": "a"}],
        )
        orchestrator, client = make_orchestrator(response)

        await orchestrator.create(
            sources=SOURCES,
            is_customer_scoped=True,
            additional_context="Audience is partner engineers.",
        )

        assert "## Customer Skill Context" in client.last_system_text
        assert client.last_system_text.endswith("Audience is partner engineers.")

    anyio.run(run)
