import anyio
import pytest

from skillsynth.app.errors import GenerationOutputError, ScopeValidationError
from skillsynth.app.synthesis.modes import RefreshMode
from skillsynth.app.synthesis.response_parser import validate_scope_definition

from skillsynth.tests.synthesis.helpers import (
    creation_response,
    make_existing_document,
    make_orchestrator,
    make_source,
    revision_response,
)


def test_valid_scope_is_accepted():
    scope = validate_scope_definition(
        {"covers": "Rate limits", "futureAdditions": ["Burst limits"]}
    )

    assert scope.covers == "Rate limits"
    assert scope.future_additions == ["Burst limits"]
    assert scope.not_included == []


@pytest.mark.parametrize(
    "raw",
    [
        None,
        {"covers": ""},
        {"covers": "   "},
        {"covers": "Rate limits", "notIncluded": [""]},
        {"futureAdditions": ["Burst limits"]},
        "Rate limits",
    ],
)
def test_invalid_scope_is_rejected(raw):
    with pytest.raises(ScopeValidationError):
        validate_scope_definition(raw)


def test_scope_error_is_a_generation_output_error():
    assert issubclass(ScopeValidationError, GenerationOutputError)


def test_creation_with_empty_covers_fails():
    async def run():
        response = creation_response(
            content="Clients must use OAuth 2.0 [1].",
            citations=[{"id": 1, "sourceId": "a"}],
            covers="",
        )
        orchestrator, client = make_orchestrator(response)

        with pytest.raises(ScopeValidationError) as excinfo:
            await orchestrator.create(sources=[make_source("a", "OAuth 2.0.")])

        assert client.call_count == 1
        assert excinfo.value.raw_response is not None

    anyio.run(run)


def test_creation_without_scope_fails():
    async def run():
        response = creation_response(
            content="Clients must use OAuth 2.0 [1].",
            citations=[{"id": 1, "sourceId": "a"}],
        )
        del response["scopeDefinition"]
        orchestrator, _ = make_orchestrator(response)

        with pytest.raises(ScopeValidationError, match="missing"):
            await orchestrator.create(sources=[make_source("a", "OAuth 2.0.")])

    anyio.run(run)


def test_regenerative_update_with_invalid_scope_fails():
    async def run():
        existing = make_existing_document(
            content="Clients must use OAuth 2.0 [1].",
            citations=[(1, "x")],
        )
        response = revision_response(
            content="Clients must use OAuth 2.0 [1].",
            citations=[],
            scope={"covers": " "},
        )
        orchestrator, _ = make_orchestrator(response)

        with pytest.raises(ScopeValidationError):
            await orchestrator.update(
                existing=existing,
                new_sources=[make_source("z", "Keys must be rotated.")],
                all_sources=[
                    make_source("x", "OAuth 2.0 required."),
                    make_source("z", "Keys must be rotated."),
                ],
                refresh_mode=RefreshMode.REGENERATIVE,
            )

    anyio.run(run)
