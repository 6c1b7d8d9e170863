from typing import Any, Dict, List, Optional, Tuple

from skillsynth.app.prompts.catalog.assembler import build_default_prompt_builder
from skillsynth.app.synthesis.models import (
    Citation,
    ScopeDefinition,
    SkillAttributes,
    SkillDocument,
    Source,
)
from skillsynth.app.synthesis.orchestrator import (
    SkillSynthesisOrchestrator,
    SynthesisLimits,
)

from skillsynth.tests.synthesis.mock_text_client import MockTextClient


def make_source(source_id: str, content: str, *, label: Optional[str] = None) -> Source:
    return Source(
        id=source_id,
        type="document",
        label=label or f"Source {source_id}",
        content=content,
    )


def make_orchestrator(
    response: Any = None,
    *,
    emitter=None,
    limits: Optional[SynthesisLimits] = None,
    **client_kwargs: Any,
) -> Tuple[SkillSynthesisOrchestrator, MockTextClient]:
    client = MockTextClient(response=response, **client_kwargs)
    orchestrator = SkillSynthesisOrchestrator(
        builder=build_default_prompt_builder(),
        client=client,
        limits=limits,
        emitter=emitter,
    )
    return orchestrator, client


def make_existing_document(
    *,
    content: str,
    citations: List[Tuple[int, str]],
    scope: Optional[ScopeDefinition] = None,
    attributes: Optional[SkillAttributes] = None,
) -> SkillDocument:
    return SkillDocument(
        title="API Authentication",
        content=content,
        summary="How clients authenticate against the public API.",
        scope_definition=scope or ScopeDefinition(
            covers="Authentication requirements for the public API",
            future_additions=["Token rotation"],
            not_included=["Billing"],
        ),
        citations=[
            Citation(number=number, source_id=source_id, label=f"Source {source_id}")
            for number, source_id in citations
        ],
        attributes=attributes,
    )


def creation_response(
    *,
    content: str,
    citations: List[Dict[str, Any]],
    covers: str = "Authentication and rate limits for the public API",
    title: str = "API Access",
) -> Dict[str, Any]:
    return {
        "title": title,
        "content": content,
        "summary": "Access requirements for the public API.",
        "scopeDefinition": {
            "covers": covers,
            "futureAdditions": ["Webhook signing"],
            "notIncluded": ["Pricing"],
        },
        "citations": citations,
        "contradictions": [],
    }


def revision_response(
    *,
    content: str,
    citations: List[Dict[str, Any]],
    title: str = "API Authentication",
    sections_removed: Optional[List[str]] = None,
    scope: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    response = {
        "title": title,
        "content": content,
        "summary": "How clients authenticate against the public API.",
        "citations": citations,
        "contradictions": [],
        "changes": {
            "sectionsAdded": [],
            "sectionsUpdated": ["Details"],
            "sectionsRemoved": sections_removed or [],
            "changeSummary": "Integrated new source material.",
        },
        "extractedContent": [],
    }
    if scope is not None:
        response["scopeDefinition"] = scope
    return response


class RecordingEmitter:
    """Collects emitted events in order."""

    def __init__(self) -> None:
        self.events = []

    async def emit(self, event) -> None:
        self.events.append(event)

    @property
    def event_types(self) -> List[str]:
        return [event.event_type.value for event in self.events]
