"""
Skill-Synthesis Orchestrator.

Given an operation request (create, update, match, reformat) this module:
- checks mode preconditions BEFORE any model call
- selects the composition from the closed mode matrix
- builds the prompt and fills the user template
- performs exactly one model call
- parses and validates the structured response
- enforces citation invariants
- returns a complete replacement document (or ranked matches)

IMPORTANT:
- Stateless per call. Registries are injected and read-only.
- No retries. Every failure surfaces as a typed SynthesisError.
- No persistence. Prior documents are plain input; results are plain output.
- Concurrent updates of the SAME document must be serialized by the caller.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from skillsynth.app.errors import (
    GenerationOutputError,
    ModelInvocationError,
    PreconditionError,
    SynthesisError,
)
from skillsynth.app.events import (
    NullEventEmitter,
    SynthesisEvent,
    SynthesisEventEmitter,
    SynthesisEventType,
)
from skillsynth.app.llm.text_client import TextGenerationClient, TextGenerationResult
from skillsynth.app.prompts.builder import BuiltPrompt, PromptBuilder, PromptScoping
from skillsynth.app.prompts.composition import TaskContext
from skillsynth.app.utils.tokens import estimate_tokens

from skillsynth.app.synthesis.citations import CitationPlan, renumber_by_first_appearance
from skillsynth.app.synthesis.models import (
    CONFIDENCE_RANK,
    ScopeDefinition,
    SkillAttributes,
    SkillDocument,
    SkillScopeCandidate,
    Source,
)
from skillsynth.app.synthesis.modes import (
    CreationMode,
    RefreshMode,
    SkillType,
    creation_context,
    default_refresh_mode,
    default_skill_type,
    reformat_context,
    refresh_context,
    refresh_mode_from_attributes,
)
from skillsynth.app.synthesis.output_schemas import (
    CreationOutput,
    MatchingOutput,
    RevisionOutput,
)
from skillsynth.app.synthesis.response_parser import (
    parse_structured_output,
    validate_scope_definition,
)
from skillsynth.app.synthesis.result import (
    GenerationTransparency,
    MatchResult,
    SynthesisResult,
    TokenUsage,
)
from skillsynth.app.synthesis.source_formatting import (
    format_citations,
    format_list,
    format_scope,
    format_skill_scopes,
    format_sources,
    truncate_with_marker,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SynthesisLimits(BaseModel):
    """
    Character ceilings applied before content enters a user message.
    """

    max_source_chars: int = Field(8000, gt=0)
    max_existing_content_chars: int = Field(12000, gt=0)
    max_match_source_chars: int = Field(12000, gt=0)

    model_config = ConfigDict(frozen=True, extra="forbid")


class _ModelExchange(BaseModel):
    """One prompt/response round trip."""

    built: BuiltPrompt
    user_message: str
    response: TextGenerationResult

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def text(self) -> str:
        return self.response.text or ""

    def transparency(self) -> GenerationTransparency:
        return GenerationTransparency(
            system_text=self.built.system_text,
            user_message=self.user_message,
            raw_response=self.text,
            composition_id=self.built.composition_id,
            fragment_ids=self.built.fragment_ids_used,
            unresolved_fragment_ids=self.built.unresolved_fragment_ids,
            model=self.response.model_deployment,
            token_usage=TokenUsage(
                input=self.response.input_tokens,
                output=self.response.output_tokens,
            ),
            prompt_hash=self.built.prompt_hash,
        )


class SkillSynthesisOrchestrator:
    """
    Runs synthesis operations against an injected builder and model client.
    """

    def __init__(
        self,
        *,
        builder: PromptBuilder,
        client: TextGenerationClient,
        limits: Optional[SynthesisLimits] = None,
        emitter: Optional[SynthesisEventEmitter] = None,
    ) -> None:
        self._builder = builder
        self._client = client
        self._limits = limits or SynthesisLimits()
        self._emitter = emitter or NullEventEmitter()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def create(
        self,
        *,
        sources: Sequence[Source],
        library_id: Optional[str] = None,
        creation_mode: CreationMode = CreationMode.GENERATED,
        skill_type: Optional[SkillType] = None,
        title: Optional[str] = None,
        scope_definition: Optional[ScopeDefinition] = None,
        is_customer_scoped: bool = False,
        additional_context: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> SynthesisResult:
        """
        Create a new skill document.

        Foundational mode extracts content against a caller-supplied title
        and scope, both of which are required and pinned on the result.
        """
        return await self._observe(
            "create",
            request_id,
            partial(
                self._create,
                sources=list(sources),
                scoping=PromptScoping(
                    library_id=library_id,
                    is_customer_scoped=is_customer_scoped,
                    additional_context=additional_context,
                ),
                creation_mode=creation_mode,
                skill_type=skill_type or default_skill_type(creation_mode),
                title=title,
                scope_definition=scope_definition,
            ),
        )

    async def update(
        self,
        *,
        existing: SkillDocument,
        new_sources: Sequence[Source],
        refresh_mode: Optional[RefreshMode] = None,
        all_sources: Optional[Sequence[Source]] = None,
        library_id: Optional[str] = None,
        skill_type: SkillType = SkillType.KNOWLEDGE,
        is_customer_scoped: bool = False,
        additional_context: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> SynthesisResult:
        """
        Revise an existing document with new sources.

        Regenerative mode requires the complete incorporated source set.
        Additive mode pins title and scope and keeps every prior citation.
        Without an explicit mode the one stored on the skill attributes is used.
        """
        if refresh_mode is None:
            refresh_mode = refresh_mode_from_attributes(existing.attributes)
        return await self._observe(
            "update",
            request_id,
            partial(
                self._update,
                existing=existing,
                new_sources=list(new_sources),
                refresh_mode=refresh_mode,
                all_sources=None if all_sources is None else list(all_sources),
                scoping=PromptScoping(
                    library_id=library_id,
                    is_customer_scoped=is_customer_scoped,
                    additional_context=additional_context,
                ),
                skill_type=skill_type,
            ),
        )

    async def match(
        self,
        *,
        source: Source,
        candidates: Sequence[SkillScopeCandidate],
        library_id: Optional[str] = None,
        is_customer_scoped: bool = False,
        additional_context: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> MatchResult:
        return await self._observe(
            "match",
            request_id,
            partial(
                self._match,
                source=source,
                candidates=list(candidates),
                scoping=PromptScoping(
                    library_id=library_id,
                    is_customer_scoped=is_customer_scoped,
                    additional_context=additional_context,
                ),
            ),
        )

    async def reformat(
        self,
        *,
        existing: SkillDocument,
        all_sources: Sequence[Source],
        skill_type: SkillType = SkillType.KNOWLEDGE,
        library_id: Optional[str] = None,
        is_customer_scoped: bool = False,
        additional_context: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> SynthesisResult:
        """
        Restructure formatting only. Citations are renumbered 1..n by first
        appearance in the regenerated content.
        """
        return await self._observe(
            "reformat",
            request_id,
            partial(
                self._reformat,
                existing=existing,
                all_sources=list(all_sources),
                scoping=PromptScoping(
                    library_id=library_id,
                    is_customer_scoped=is_customer_scoped,
                    additional_context=additional_context,
                ),
                skill_type=skill_type,
            ),
        )

    # ------------------------------------------------------------------
    # Operation bodies
    # ------------------------------------------------------------------

    async def _create(
        self,
        request_id: str,
        *,
        sources: List[Source],
        scoping: PromptScoping,
        creation_mode: CreationMode,
        skill_type: SkillType,
        title: Optional[str],
        scope_definition: Optional[ScopeDefinition],
    ) -> SynthesisResult:
        if not sources:
            raise PreconditionError("At least one source is required to create a skill")
        _require_unique_ids(sources)

        foundational = creation_mode is CreationMode.FOUNDATIONAL
        if foundational and (not title or not title.strip() or scope_definition is None):
            raise PreconditionError(
                "Title and scope definition are required for foundational creation mode"
            )

        plan = CitationPlan(prior=[], sources=sources)

        values: Dict[str, str] = {
            "library": scoping.library_id or "unspecified",
            "sources": format_sources(
                sources,
                numbers=plan.numbers,
                max_chars=self._limits.max_source_chars,
            ),
        }
        if foundational:
            values.update(
                foundationalTitle=title,
                foundationalCovers=scope_definition.covers,
                foundationalFutureAdditions=format_list(scope_definition.future_additions),
                foundationalNotIncluded=format_list(scope_definition.not_included),
            )

        exchange = await self._invoke(
            request_id,
            "create",
            creation_context(creation_mode, skill_type),
            scoping,
            values,
        )

        output = parse_structured_output(exchange.text, CreationOutput)

        if foundational:
            final_title = title
            final_scope = scope_definition
        else:
            final_title = output.title
            final_scope = validate_scope_definition(
                output.scope_definition,
                raw_response=exchange.text,
            )

        content, citations = plan.resolve(
            content=output.content,
            model_citations=output.citations,
            raw_response=exchange.text,
        )

        document = SkillDocument(
            title=final_title,
            content=content,
            summary=output.summary,
            scope_definition=final_scope,
            citations=citations,
            contradictions=output.contradictions,
            attributes=_with_modes(
                output.attributes,
                SkillAttributes(
                    creation_mode=creation_mode,
                    refresh_mode=default_refresh_mode(creation_mode),
                ),
            ),
        )

        await self._validated(request_id, "create", document)

        return SynthesisResult(
            document=document,
            transparency=exchange.transparency(),
        )

    async def _update(
        self,
        request_id: str,
        *,
        existing: SkillDocument,
        new_sources: List[Source],
        refresh_mode: RefreshMode,
        all_sources: Optional[List[Source]],
        scoping: PromptScoping,
        skill_type: SkillType,
    ) -> SynthesisResult:
        if not new_sources:
            raise PreconditionError("At least one new source is required to update a skill")
        _require_unique_ids(new_sources)

        additive = refresh_mode is RefreshMode.ADDITIVE

        if not additive and not all_sources:
            raise PreconditionError("All sources are required for regenerative refresh mode")
        if additive and existing.scope_definition is None:
            raise PreconditionError(
                "Additive refresh mode requires the existing skill's scope definition"
            )

        new_ids = {s.id for s in new_sources}
        prior_sources = [s for s in (all_sources or []) if s.id not in new_ids]
        _require_unique_ids(prior_sources)

        # New sources are numbered first, then any uncited prior sources
        plan = CitationPlan(
            prior=existing.citations,
            sources=[*new_sources, *prior_sources],
        )

        values = self._existing_values(existing)
        values["newSources"] = format_sources(
            new_sources,
            numbers=plan.numbers,
            max_chars=self._limits.max_source_chars,
        )
        if not additive:
            values["allSources"] = format_sources(
                prior_sources,
                numbers=plan.numbers,
                max_chars=self._limits.max_source_chars,
            )

        exchange = await self._invoke(
            request_id,
            "update",
            refresh_context(refresh_mode, skill_type),
            scoping,
            values,
        )

        output = parse_structured_output(exchange.text, RevisionOutput)

        if additive:
            if output.changes.sections_removed:
                raise GenerationOutputError(
                    "Additive refresh must not remove sections: "
                    f"{', '.join(output.changes.sections_removed)}",
                    raw_response=exchange.text,
                )
            final_title = existing.title
            final_scope = existing.scope_definition
        else:
            final_title = output.title
            final_scope = self._revised_scope(existing, output, exchange.text)

        content, citations = plan.resolve(
            content=output.content,
            model_citations=output.citations,
            retain_prior=additive,
            raw_response=exchange.text,
        )

        document = SkillDocument(
            title=final_title,
            content=content,
            summary=output.summary,
            scope_definition=final_scope,
            citations=citations,
            contradictions=output.contradictions,
            attributes=_with_modes(
                output.attributes or existing.attributes,
                existing.attributes,
            ),
        )

        await self._validated(request_id, "update", document)

        return SynthesisResult(
            document=document,
            changes=output.changes,
            extracted_content=output.extracted_content,
            split_recommendation=output.split_recommendation,
            transparency=exchange.transparency(),
        )

    async def _reformat(
        self,
        request_id: str,
        *,
        existing: SkillDocument,
        all_sources: List[Source],
        scoping: PromptScoping,
        skill_type: SkillType,
    ) -> SynthesisResult:
        if not all_sources:
            raise PreconditionError("All sources are required to reformat a skill")
        _require_unique_ids(all_sources)

        plan = CitationPlan(prior=existing.citations, sources=all_sources)

        values = self._existing_values(existing)
        values["allSources"] = format_sources(
            all_sources,
            numbers=plan.numbers,
            max_chars=self._limits.max_source_chars,
        )

        exchange = await self._invoke(
            request_id,
            "reformat",
            reformat_context(skill_type),
            scoping,
            values,
        )

        output = parse_structured_output(exchange.text, RevisionOutput)
        final_scope = self._revised_scope(existing, output, exchange.text)

        content, citations = plan.resolve(
            content=output.content,
            model_citations=output.citations,
            raw_response=exchange.text,
        )
        content, citations = renumber_by_first_appearance(content, citations)

        document = SkillDocument(
            title=output.title,
            content=content,
            summary=output.summary,
            scope_definition=final_scope,
            citations=citations,
            contradictions=output.contradictions,
            attributes=_with_modes(
                output.attributes or existing.attributes,
                existing.attributes,
            ),
        )

        await self._validated(request_id, "reformat", document)

        return SynthesisResult(
            document=document,
            changes=output.changes,
            extracted_content=output.extracted_content,
            split_recommendation=output.split_recommendation,
            transparency=exchange.transparency(),
        )

    async def _match(
        self,
        request_id: str,
        *,
        source: Source,
        candidates: List[SkillScopeCandidate],
        scoping: PromptScoping,
    ) -> MatchResult:
        if not source.content.strip():
            raise PreconditionError(f'Source "{source.id}" has no content to match')
        _require_unique_ids(candidates)

        values = {
            "sourceId": source.id,
            "sourceType": source.type,
            "sourceLabel": source.label,
            "sourceContent": truncate_with_marker(
                source.content,
                self._limits.max_match_source_chars,
            ),
            "skillScopes": format_skill_scopes(candidates),
        }

        exchange = await self._invoke(
            request_id,
            "match",
            TaskContext.SKILL_MATCHING,
            scoping,
            values,
        )

        output = parse_structured_output(exchange.text, MatchingOutput)

        by_id = {c.id: c for c in candidates}
        matches = []
        for match in output.matches:
            candidate = by_id.get(match.skill_id)
            if candidate is None:
                raise GenerationOutputError(
                    f'Match references unknown skill "{match.skill_id}"',
                    raw_response=exchange.text,
                )
            matches.append(match.model_copy(update={"skill_title": candidate.title}))

        matches.sort(key=lambda m: CONFIDENCE_RANK[m.confidence])

        await self._emit(
            request_id,
            "match",
            SynthesisEventType.OUTPUT_VALIDATED,
            {"match_count": len(matches)},
        )

        return MatchResult(
            source_id=source.id,
            matches=matches,
            create_new=output.create_new,
            transparency=exchange.transparency(),
        )

    # ------------------------------------------------------------------
    # Model exchange
    # ------------------------------------------------------------------

    async def _invoke(
        self,
        request_id: str,
        operation: str,
        context: TaskContext,
        scoping: PromptScoping,
        values: Mapping[str, str],
    ) -> _ModelExchange:
        built = self._builder.build(context, scoping)

        for warning in built.warnings:
            await self._emit(
                request_id,
                operation,
                SynthesisEventType.FRAGMENT_UNRESOLVED,
                {
                    "composition_id": warning.composition_id,
                    "fragment_id": warning.fragment_id,
                },
            )

        user_message = built.user_template.fill(values)

        await self._emit(
            request_id,
            operation,
            SynthesisEventType.PROMPT_ASSEMBLED,
            {
                "composition_id": built.composition_id,
                "fragment_count": len(built.fragment_ids_used),
                "prompt_hash": built.prompt_hash,
                "system_tokens": built.system_token_estimate,
                "user_tokens": estimate_tokens(user_message),
            },
        )

        await self._emit(
            request_id,
            operation,
            SynthesisEventType.MODEL_INVOCATION_STARTED,
            {"composition_id": built.composition_id},
        )

        response = await self._client.generate(
            system_text=built.system_text,
            user_message=user_message,
            output_format=built.output_format,
            request_id=request_id,
        )

        await self._emit(
            request_id,
            operation,
            SynthesisEventType.MODEL_INVOCATION_COMPLETED,
            {
                "success": response.success,
                "failure_type": response.failure_type,
                "model": response.model_deployment,
            },
        )

        if not response.success or response.text is None:
            raise ModelInvocationError(
                f"Model call failed ({response.failure_type}): {response.raw_error}",
                failure_type=response.failure_type,
            )

        return _ModelExchange(
            built=built,
            user_message=user_message,
            response=response,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _existing_values(self, existing: SkillDocument) -> Dict[str, str]:
        return {
            "existingTitle": existing.title,
            "existingContent": truncate_with_marker(
                existing.content,
                self._limits.max_existing_content_chars,
            ),
            "scopeDefinition": format_scope(existing.scope_definition),
            "existingCitations": format_citations(existing.citations),
        }

    @staticmethod
    def _revised_scope(
        existing: SkillDocument,
        output: RevisionOutput,
        raw_response: str,
    ) -> Optional[ScopeDefinition]:
        if output.scope_definition is None:
            return existing.scope_definition
        return validate_scope_definition(
            output.scope_definition,
            raw_response=raw_response,
        )

    async def _validated(
        self,
        request_id: str,
        operation: str,
        document: SkillDocument,
    ) -> None:
        await self._emit(
            request_id,
            operation,
            SynthesisEventType.OUTPUT_VALIDATED,
            {
                "citation_count": len(document.citations),
                "contradiction_count": len(document.contradictions),
            },
        )

    async def _observe(
        self,
        operation: str,
        request_id: Optional[str],
        work: Callable[[str], Awaitable[T]],
    ) -> T:
        request_id = request_id or uuid4().hex

        await self._emit(request_id, operation, SynthesisEventType.SYNTHESIS_STARTED)

        try:
            result = await work(request_id)
        except SynthesisError as exc:
            logger.warning(
                "Synthesis %s failed (request %s): %s: %s",
                operation,
                request_id,
                type(exc).__name__,
                exc,
            )
            await self._emit(
                request_id,
                operation,
                SynthesisEventType.SYNTHESIS_FAILED,
                {"error": type(exc).__name__, "reason": str(exc)},
            )
            raise
        except Exception as exc:
            logger.exception(
                "Synthesis %s failed unexpectedly (request %s)",
                operation,
                request_id,
            )
            await self._emit(
                request_id,
                operation,
                SynthesisEventType.SYNTHESIS_FAILED,
                {"error": type(exc).__name__, "reason": str(exc)},
            )
            raise

        await self._emit(request_id, operation, SynthesisEventType.SYNTHESIS_COMPLETED)
        return result

    async def _emit(
        self,
        request_id: str,
        operation: str,
        event_type: SynthesisEventType,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        await self._emitter.emit(
            SynthesisEvent(
                request_id=request_id,
                operation=operation,
                event_type=event_type,
                details=details,
            )
        )


def _require_unique_ids(items: Sequence[Any]) -> None:
    seen = set()
    for item in items:
        if item.id in seen:
            raise PreconditionError(f'Duplicate id "{item.id}" in request')
        seen.add(item.id)


def _with_modes(
    attributes: Optional[SkillAttributes],
    modes: Optional[SkillAttributes],
) -> Optional[SkillAttributes]:
    """Attributes carrying the creation and refresh modes of ``modes``."""
    if modes is None:
        return attributes
    return (attributes or SkillAttributes()).model_copy(
        update={
            "creation_mode": modes.creation_mode,
            "refresh_mode": modes.refresh_mode,
        }
    )
