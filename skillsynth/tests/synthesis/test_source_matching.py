import anyio
import pytest

from skillsynth.app.errors import GenerationOutputError
from skillsynth.app.prompts.builder import CUSTOMER_HEADER, LIBRARY_HEADER
from skillsynth.app.synthesis.models import Confidence, ScopeDefinition, SkillScopeCandidate

from skillsynth.tests.synthesis.helpers import make_orchestrator, make_source


CANDIDATES = [
    SkillScopeCandidate(
        id="auth",
        title="API Authentication",
        scope_definition=ScopeDefinition(covers="How clients authenticate"),
    ),
    SkillScopeCandidate(id="billing", title="Billing"),
]

SOURCE = make_source("ticket-7", "Customers ask how to rotate API keys.")


def _match(skill_id, confidence, title="Wrong Title"):
    return {
        "skillId": skill_id,
        "skillTitle": title,
        "confidence": confidence,
        "reason": f"Relevant to {skill_id}",
    }


def test_matches_are_ranked_by_confidence_with_candidate_titles():
    async def run():
        response = {
            "matches": [
                _match("billing", "low"),
                _match("auth", "high"),
            ],
            "createNew": {"recommended": False},
        }
        orchestrator, client = make_orchestrator(response)

        result = await orchestrator.match(source=SOURCE, candidates=CANDIDATES)

        assert [m.skill_id for m in result.matches] == ["auth", "billing"]
        assert [m.skill_title for m in result.matches] == [
            "API Authentication",
            "Billing",
        ]
        assert result.matches[0].confidence == Confidence.HIGH
        assert result.create_new.recommended is False
        assert result.source_id == "ticket-7"
        assert result.transparency.composition_id == "skill_matching"

        user_message = client.last_user_message
        assert "Source ID: ticket-7" in user_message
        assert "### API Authentication\nID: auth" in user_message
        assert "Scope: Not defined" in user_message

    anyio.run(run)


def test_equal_confidence_keeps_model_order():
    async def run():
        response = {
            "matches": [
                _match("billing", "medium"),
                _match("auth", "medium"),
            ],
        }
        orchestrator, _ = make_orchestrator(response)

        result = await orchestrator.match(source=SOURCE, candidates=CANDIDATES)

        assert [m.skill_id for m in result.matches] == ["billing", "auth"]

    anyio.run(run)


def test_match_prompt_carries_library_and_customer_context():
    async def run():
        orchestrator, client = make_orchestrator({"matches": [_match("auth", "high")]})

        await orchestrator.match(
            source=SOURCE,
            candidates=CANDIDATES,
            library_id="knowledge",
            is_customer_scoped=True,
        )

        system_text = client.last_system_text
        assert LIBRARY_HEADER in system_text
        assert "Knowledge skills answer product and technical questions" in system_text
        assert CUSTOMER_HEADER in system_text

    anyio.run(run)


def test_no_match_recommends_new_skill():
    async def run():
        response = {
            "matches": [],
            "createNew": {
                "recommended": True,
                "suggestedTitle": "API Key Rotation",
                "suggestedScope": {"covers": "Rotating API keys"},
            },
        }
        orchestrator, _ = make_orchestrator(response)

        result = await orchestrator.match(source=SOURCE, candidates=CANDIDATES)

        assert result.matches == []
        assert result.create_new.suggested_title == "API Key Rotation"
        assert result.create_new.suggested_scope.covers == "Rotating API keys"

    anyio.run(run)


def test_match_for_unknown_skill_is_rejected():
    async def run():
        response = {"matches": [_match("ghost", "high")]}
        orchestrator, _ = make_orchestrator(response)

        with pytest.raises(GenerationOutputError, match="unknown skill"):
            await orchestrator.match(source=SOURCE, candidates=CANDIDATES)

    anyio.run(run)


def test_invalid_confidence_is_rejected():
    async def run():
        response = {"matches": [_match("auth", "certain")]}
        orchestrator, _ = make_orchestrator(response)

        with pytest.raises(GenerationOutputError):
            await orchestrator.match(source=SOURCE, candidates=CANDIDATES)

    anyio.run(run)
