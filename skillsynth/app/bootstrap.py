"""
Composition root for the skill-synthesis pipeline.

Builds the process-wide, read-only registries once and wires them,
together with a model client, into an orchestrator.

This module:
- configures logging (stderr only)
- audits compositions against the fragment registry
- constructs the Azure OpenAI client when enabled

It does NOT:
- hold module-level registries
- perform any synthesis
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from skillsynth.app.budget.token_budget import TokenBudgetTracker
from skillsynth.app.config import SynthesisConfig
from skillsynth.app.errors import ConfigurationError
from skillsynth.app.events import LoggingEventEmitter, SynthesisEventEmitter
from skillsynth.app.llm.text_client import AzureOpenAITextClient, TextGenerationClient
from skillsynth.app.prompts.builder import PromptBuilder
from skillsynth.app.prompts.catalog.assembler import (
    build_default_composition_registry,
    build_default_fragment_registry,
    build_default_prompt_builder,
)
from skillsynth.app.prompts.composition_registry import CompositionRegistry
from skillsynth.app.prompts.fragment_registry import FragmentRegistry
from skillsynth.app.synthesis.orchestrator import (
    SkillSynthesisOrchestrator,
    SynthesisLimits,
)

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def build_prompt_builder(
    config: SynthesisConfig,
    *,
    fragments: Optional[FragmentRegistry] = None,
    compositions: Optional[CompositionRegistry] = None,
) -> PromptBuilder:
    """
    Build the PromptBuilder and audit composition fragment references.

    Unresolved references are logged; with STRICT_FRAGMENT_RESOLUTION they
    abort startup.
    """
    if fragments is None:
        fragments = build_default_fragment_registry()
    if compositions is None:
        compositions = build_default_composition_registry()

    unresolved = compositions.unresolved_fragment_ids(fragments)

    for context, missing in unresolved.items():
        logger.warning(
            "Composition %s references unregistered fragments: %s",
            context,
            ", ".join(missing),
        )

    if unresolved and config.STRICT_FRAGMENT_RESOLUTION:
        raise ConfigurationError(
            "Compositions reference unregistered fragments: "
            + "; ".join(
                f"{context} -> {', '.join(missing)}"
                for context, missing in sorted(unresolved.items())
            )
        )

    return build_default_prompt_builder(
        fragments=fragments,
        compositions=compositions,
    )


def build_text_client(config: SynthesisConfig) -> Optional[TextGenerationClient]:
    if config.MODEL_PROVIDER == "disabled":
        return None

    return AzureOpenAITextClient(
        endpoint=config.AZURE_OPENAI_ENDPOINT,
        deployment=config.AZURE_OPENAI_DEPLOYMENT,
        api_version=config.AZURE_OPENAI_API_VERSION,
        timeout_seconds=config.MODEL_TIMEOUT_SECONDS,
        temperature=config.MODEL_TEMPERATURE,
        max_output_tokens=config.MODEL_MAX_OUTPUT_TOKENS,
    )


def build_orchestrator(
    config: SynthesisConfig,
    *,
    client: Optional[TextGenerationClient] = None,
    builder: Optional[PromptBuilder] = None,
    emitter: Optional[SynthesisEventEmitter] = None,
) -> SkillSynthesisOrchestrator:
    client = client or build_text_client(config)
    if client is None:
        raise ConfigurationError(
            "No text generation client available: MODEL_PROVIDER is disabled"
        )

    return SkillSynthesisOrchestrator(
        builder=builder or build_prompt_builder(config),
        client=client,
        limits=SynthesisLimits(
            max_source_chars=config.MAX_SOURCE_CHARS,
            max_existing_content_chars=config.MAX_EXISTING_CONTENT_CHARS,
            max_match_source_chars=config.MAX_MATCH_SOURCE_CHARS,
        ),
        emitter=emitter if emitter is not None else LoggingEventEmitter(),
    )


def new_budget_tracker(config: SynthesisConfig) -> TokenBudgetTracker:
    """A fresh tracker for one editing session."""
    return TokenBudgetTracker(ceiling=config.TOKEN_BUDGET_CEILING)
