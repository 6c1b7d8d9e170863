"""
Default compositions.

One composition per TaskContext. Fragment order is authoritative: role,
task framing, content guidance, output-format fragments last.

Generated creation, regenerative update and format refresh come in a
knowledge and an intelligence variant that differ only in the content
structure fragments. Foundational compositions always use the knowledge
structure.
"""

from typing import List, Tuple

from skillsynth.app.prompts.composition import (
    Composition,
    OutputFormat,
    TaskContext,
)
from skillsynth.app.prompts.user_template import UserTemplate


# ----------------------------------------------------------------------
# Output schema hints
# ----------------------------------------------------------------------

_SCOPE_SCHEMA = """\
  "scopeDefinition": {
    "covers": "string, required, non-empty",
    "futureAdditions": ["string"],
    "notIncluded": ["string"]
  },"""

_CITATIONS_SCHEMA = """\
  "citations": [
    {"id": 1, "sourceId": "string", "label": "string", "url": "string or omitted"}
  ],
  "contradictions": [
    {
      "type": "string",
      "description": "string",
      "sourceA": {"id": "source id", "label": "string", "excerpt": "string"},
      "sourceB": {"id": "source id", "label": "string", "excerpt": "string"},
      "severity": "low | medium | high",
      "recommendation": "string"
    }
  ],"""

CREATION_SCHEMA_HINT = f"""\
```json
{{
  "title": "string",
  "content": "markdown string with inline [n] citations",
  "summary": "one or two sentences",
{_SCOPE_SCHEMA}
{_CITATIONS_SCHEMA}
  "attributes": {{"keywords": ["string"], "product": "string or omitted"}}
}}
```"""

REVISION_SCHEMA_HINT = f"""\
```json
{{
  "title": "string",
  "content": "complete revised markdown with inline [n] citations",
  "summary": "one or two sentences",
{_SCOPE_SCHEMA}
{_CITATIONS_SCHEMA}
  "changes": {{
    "sectionsAdded": ["heading"],
    "sectionsUpdated": ["heading"],
    "sectionsRemoved": ["heading"],
    "changeSummary": "string"
  }},
  "extractedContent": [{{"sourceId": "string", "extracted": "string"}}],
  "splitRecommendation": {{
    "shouldSplit": false,
    "reason": "string or omitted",
    "suggestedSkills": [{{"title": "string", "scope": "string"}}]
  }}
}}
```"""

MATCHING_SCHEMA_HINT = """\
```json
{
  "matches": [
    {
      "skillId": "string",
      "skillTitle": "string",
      "confidence": "high | medium | low",
      "reason": "string",
      "matchedCriteria": "string or omitted",
      "suggestedExcerpt": "string or omitted"
    }
  ],
  "createNew": {
    "recommended": false,
    "suggestedTitle": "string or omitted",
    "suggestedScope": {"covers": "string", "futureAdditions": ["string"]}
  }
}
```"""


# ----------------------------------------------------------------------
# User templates
# ----------------------------------------------------------------------

_EXISTING_SKILL_SECTION = """\
## Existing Skill

Title: {{existingTitle}}

Content:
{{existingContent}}

## Scope Definition

{{scopeDefinition}}

## Existing Citations

{{existingCitations}}"""

CREATION_TEMPLATE = UserTemplate(
    text="""\
Target library: {{library}}

## Source Materials

{{sources}}""",
)

FOUNDATIONAL_CREATION_TEMPLATE = UserTemplate(
    text="""\
Target library: {{library}}

## Foundational Scope (Pre-Defined)

Title: {{foundationalTitle}}
Covers: {{foundationalCovers}}
Future Additions: {{foundationalFutureAdditions}}
Not Included: {{foundationalNotIncluded}}

## Source Materials

{{sources}}""",
)

UPDATE_TEMPLATE = UserTemplate(
    text=_EXISTING_SKILL_SECTION + """

## All Incorporated Source Materials

{{allSources}}

## New Source Material

{{newSources}}""",
)

ADDITIVE_UPDATE_TEMPLATE = UserTemplate(
    text=_EXISTING_SKILL_SECTION + """

## New Source Material (Extract Scope-Relevant Content Only)

{{newSources}}""",
)

FORMAT_REFRESH_TEMPLATE = UserTemplate(
    text=_EXISTING_SKILL_SECTION + """

## All Incorporated Source Materials

{{allSources}}""",
)

MATCHING_TEMPLATE = UserTemplate(
    text="""\
## Source Material

Source ID: {{sourceId}}
Type: {{sourceType}}
Label: {{sourceLabel}}

Content:
{{sourceContent}}

## Existing Skills and Their Scopes

{{skillScopes}}""",
)


# ----------------------------------------------------------------------
# Fragment orderings
# ----------------------------------------------------------------------

def _content_structure(*, knowledge: bool) -> Tuple[str, ...]:
    if knowledge:
        return (
            "knowledge_content_structure",
            "skill_common_questions_requirement",
        )
    return ("intelligence_content_structure",)


def _creation_fragments(*, knowledge: bool) -> Tuple[str, ...]:
    return (
        "role_skill_creation",
        "task_framing_creation",
        "skill_principles",
        "source_fidelity",
        "citation_format",
        *_content_structure(knowledge=knowledge),
        "skill_citation_embedding",
        "skill_list_completeness",
        "scope_definition",
        "contradiction_detection",
        "json_output",
    )


def _update_fragments(*, knowledge: bool) -> Tuple[str, ...]:
    return (
        "role_skill_update",
        "task_framing_update",
        "source_fidelity",
        "citation_format",
        *_content_structure(knowledge=knowledge),
        "skill_citation_embedding",
        "skill_list_completeness",
        "skill_update_structure",
        "scope_definition",
        "contradiction_detection",
        "diff_output",
        "json_output",
    )


def _format_refresh_fragments(*, knowledge: bool) -> Tuple[str, ...]:
    return (
        "role_skill_format_refresh",
        "task_framing_format_refresh",
        "source_fidelity",
        "citation_format",
        *_content_structure(knowledge=knowledge),
        "skill_citation_embedding",
        "skill_list_completeness",
        "skill_refresh_structure",
        "scope_definition",
        "contradiction_detection",
        "diff_output",
        "json_output",
    )


FOUNDATIONAL_CREATION_FRAGMENTS: Tuple[str, ...] = (
    "role_skill_creation",
    "task_framing_foundational_creation",
    "skill_principles",
    "source_fidelity",
    "citation_format",
    "knowledge_content_structure",
    "skill_common_questions_requirement",
    "skill_citation_embedding",
    "skill_list_completeness",
    "contradiction_detection",
    "json_output",
)

FOUNDATIONAL_ADDITIVE_UPDATE_FRAGMENTS: Tuple[str, ...] = (
    "role_skill_update",
    "task_framing_foundational_update",
    "source_fidelity",
    "citation_format",
    "knowledge_content_structure",
    "skill_citation_embedding",
    "skill_list_completeness",
    "skill_update_structure",
    "contradiction_detection",
    "diff_output",
    "json_output",
)

MATCHING_FRAGMENTS: Tuple[str, ...] = (
    "role_skill_matching",
    "task_framing_matching",
    "skill_matching",
    "skill_principles",
    "json_output",
)


# ----------------------------------------------------------------------
# Compositions
# ----------------------------------------------------------------------

def default_compositions() -> List[Composition]:
    return [
        Composition(
            context=TaskContext.SKILL_CREATION.value,
            name="Skill Creation (Knowledge)",
            description="Synthesize a new knowledge skill from sources",
            fragment_ids=_creation_fragments(knowledge=True),
            output_format=OutputFormat.STRUCTURED,
            output_schema_hint=CREATION_SCHEMA_HINT,
            user_template=CREATION_TEMPLATE,
        ),
        Composition(
            context=TaskContext.SKILL_CREATION_INTELLIGENCE.value,
            name="Skill Creation (Intelligence)",
            description="Synthesize a new intelligence skill from sources",
            fragment_ids=_creation_fragments(knowledge=False),
            output_format=OutputFormat.STRUCTURED,
            output_schema_hint=CREATION_SCHEMA_HINT,
            user_template=CREATION_TEMPLATE,
        ),
        Composition(
            context=TaskContext.SKILL_UPDATE.value,
            name="Skill Update (Knowledge)",
            description="Regenerate a knowledge skill from its full source set",
            fragment_ids=_update_fragments(knowledge=True),
            output_format=OutputFormat.STRUCTURED,
            output_schema_hint=REVISION_SCHEMA_HINT,
            user_template=UPDATE_TEMPLATE,
        ),
        Composition(
            context=TaskContext.SKILL_UPDATE_INTELLIGENCE.value,
            name="Skill Update (Intelligence)",
            description="Regenerate an intelligence skill from its full source set",
            fragment_ids=_update_fragments(knowledge=False),
            output_format=OutputFormat.STRUCTURED,
            output_schema_hint=REVISION_SCHEMA_HINT,
            user_template=UPDATE_TEMPLATE,
        ),
        Composition(
            context=TaskContext.SKILL_MATCHING.value,
            name="Source to Skill Matching",
            description="Route one source to existing skills",
            fragment_ids=MATCHING_FRAGMENTS,
            output_format=OutputFormat.STRUCTURED,
            output_schema_hint=MATCHING_SCHEMA_HINT,
            user_template=MATCHING_TEMPLATE,
        ),
        Composition(
            context=TaskContext.SKILL_FORMAT_REFRESH.value,
            name="Skill Format Refresh (Knowledge)",
            description="Restructure a knowledge skill without changing facts",
            fragment_ids=_format_refresh_fragments(knowledge=True),
            output_format=OutputFormat.STRUCTURED,
            output_schema_hint=REVISION_SCHEMA_HINT,
            user_template=FORMAT_REFRESH_TEMPLATE,
        ),
        Composition(
            context=TaskContext.SKILL_FORMAT_REFRESH_INTELLIGENCE.value,
            name="Skill Format Refresh (Intelligence)",
            description="Restructure an intelligence skill without changing facts",
            fragment_ids=_format_refresh_fragments(knowledge=False),
            output_format=OutputFormat.STRUCTURED,
            output_schema_hint=REVISION_SCHEMA_HINT,
            user_template=FORMAT_REFRESH_TEMPLATE,
        ),
        Composition(
            context=TaskContext.FOUNDATIONAL_CREATION.value,
            name="Foundational Skill Creation",
            description="Extract scope-filtered content against a fixed scope",
            fragment_ids=FOUNDATIONAL_CREATION_FRAGMENTS,
            output_format=OutputFormat.STRUCTURED,
            output_schema_hint=CREATION_SCHEMA_HINT,
            user_template=FOUNDATIONAL_CREATION_TEMPLATE,
        ),
        Composition(
            context=TaskContext.FOUNDATIONAL_ADDITIVE_UPDATE.value,
            name="Foundational Additive Update",
            description="Append scope-relevant content from new sources only",
            fragment_ids=FOUNDATIONAL_ADDITIVE_UPDATE_FRAGMENTS,
            output_format=OutputFormat.STRUCTURED,
            output_schema_hint=REVISION_SCHEMA_HINT,
            user_template=ADDITIVE_UPDATE_TEMPLATE,
        ),
    ]
