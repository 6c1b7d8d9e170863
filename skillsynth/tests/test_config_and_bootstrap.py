import anyio
import pytest
from pydantic import ValidationError

from skillsynth.app.bootstrap import (
    build_orchestrator,
    build_prompt_builder,
    build_text_client,
    new_budget_tracker,
)
from skillsynth.app.config import SynthesisConfig
from skillsynth.app.errors import ConfigurationError
from skillsynth.app.prompts.catalog.assembler import (
    build_default_composition_registry,
    build_default_fragment_registry,
)
from skillsynth.app.prompts.composition_registry import CompositionRegistry

from skillsynth.tests.synthesis.helpers import creation_response, make_source
from skillsynth.tests.synthesis.mock_text_client import MockTextClient


def _compositions_with_missing_fragment() -> CompositionRegistry:
    return CompositionRegistry(
        [
            c.model_copy(update={"fragment_ids": c.fragment_ids + ("ghost",)})
            if c.context == "skill_matching"
            else c
            for c in build_default_composition_registry()
        ]
    )


def test_defaults_disable_model_provider():
    config = SynthesisConfig()

    assert config.MODEL_PROVIDER == "disabled"
    assert config.MAX_SOURCE_CHARS == 8000
    assert config.MAX_EXISTING_CONTENT_CHARS == 12000
    assert config.MAX_MATCH_SOURCE_CHARS == 12000


def test_from_env_reads_settings(monkeypatch):
    monkeypatch.setenv("SKILLSYNTH_MODEL_PROVIDER", "azure_openai")
    monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://example.openai.azure.com")
    monkeypatch.setenv("AZURE_OPENAI_DEPLOYMENT", "gpt-4o")
    monkeypatch.setenv("AZURE_OPENAI_API_VERSION", "2024-06-01")
    monkeypatch.setenv("SKILLSYNTH_MAX_SOURCE_CHARS", "4000")
    monkeypatch.setenv("SKILLSYNTH_STRICT_FRAGMENT_RESOLUTION", "true")
    monkeypatch.setenv("SKILLSYNTH_LOG_LEVEL", "debug")

    config = SynthesisConfig.from_env()

    assert config.MODEL_PROVIDER == "azure_openai"
    assert config.AZURE_OPENAI_DEPLOYMENT == "gpt-4o"
    assert config.MAX_SOURCE_CHARS == 4000
    assert config.STRICT_FRAGMENT_RESOLUTION is True
    assert config.LOG_LEVEL == "DEBUG"


def test_azure_provider_requires_connection_settings():
    with pytest.raises(ValidationError, match="AZURE_OPENAI_ENDPOINT"):
        SynthesisConfig(MODEL_PROVIDER="azure_openai")


def test_unknown_provider_is_rejected():
    with pytest.raises(ValidationError, match="Unsupported MODEL_PROVIDER"):
        SynthesisConfig(MODEL_PROVIDER="local")


def test_unknown_log_level_is_rejected():
    with pytest.raises(ValidationError):
        SynthesisConfig(LOG_LEVEL="chatty")


def test_config_is_immutable():
    config = SynthesisConfig()

    with pytest.raises(ValidationError):
        config.MAX_SOURCE_CHARS = 10


def test_disabled_provider_has_no_client():
    assert build_text_client(SynthesisConfig()) is None

    with pytest.raises(ConfigurationError, match="disabled"):
        build_orchestrator(SynthesisConfig())


def test_orchestrator_uses_configured_limits():
    async def run():
        config = SynthesisConfig(MAX_SOURCE_CHARS=50)
        client = MockTextClient(
            response=creation_response(
                content="Summarized [1].",
                citations=[{"id": 1, "sourceId": "s"}],
            )
        )
        orchestrator = build_orchestrator(config, client=client)

        await orchestrator.create(sources=[make_source("s", "d" * 80)])

        assert "d" * 51 not in client.last_user_message
        assert "Content truncated at 50 characters" in client.last_user_message

    anyio.run(run)


def test_unresolved_fragments_are_logged_by_default(caplog):
    with caplog.at_level("WARNING"):
        builder = build_prompt_builder(
            SynthesisConfig(),
            fragments=build_default_fragment_registry(),
            compositions=_compositions_with_missing_fragment(),
        )

    assert "ghost" in caplog.text
    assert builder.build("skill_matching").unresolved_fragment_ids == ("ghost",)


def test_strict_resolution_rejects_unresolved_fragments():
    with pytest.raises(ConfigurationError, match="skill_matching -> ghost"):
        build_prompt_builder(
            SynthesisConfig(STRICT_FRAGMENT_RESOLUTION=True),
            compositions=_compositions_with_missing_fragment(),
        )


def test_budget_tracker_uses_configured_ceiling():
    tracker = new_budget_tracker(SynthesisConfig(TOKEN_BUDGET_CEILING=2000))

    assert tracker.ceiling == 2000
