"""
Skill output guidance fragments.

These fragments govern the content and shape of skill documents. Output
format fragments (citation_format, diff_output, json_output) are LOCKED
because the orchestrator parses what they describe.
"""

from typing import List

from skillsynth.app.prompts.fragment import Fragment, FragmentTier


SKILL_FRAGMENTS: List[Fragment] = [
    Fragment(
        id="skill_principles",
        name="Skill Principles",
        description="What makes a good skill document",
        tier=FragmentTier.EDITABLE,
        content=(
            "- One skill covers one coherent topic that a reader would look up "
            "as a unit.\n"
            "- Lead with the answer; put background after.\n"
            "- Prefer concrete values (limits, versions, settings) over "
            "general statements.\n"
            "- Write in neutral, present-tense language."
        ),
    ),
    Fragment(
        id="source_fidelity",
        name="Source Fidelity",
        description="Only state what sources support",
        tier=FragmentTier.CAUTION,
        content=(
            "Every statement must be supported by the supplied sources. Do not "
            "infer undocumented behavior, invent numbers, or fill gaps from "
            "general knowledge. If the sources are silent on something, leave "
            "it out."
        ),
    ),
    Fragment(
        id="citation_format",
        name="Citation Format",
        description="Inline numeric citation markers",
        tier=FragmentTier.LOCKED,
        content=(
            "Cite sources inline with their bracketed number as shown in the "
            "user message, for example [1] or [1, 3]. Never invent a number "
            "and never renumber an existing citation. Each citation in the "
            "citations list must use the number shown for its source."
        ),
    ),
    Fragment(
        id="knowledge_content_structure",
        name="Content Structure",
        description="Markdown structure for knowledge skills",
        tier=FragmentTier.EDITABLE,
        content=(
            "Structure the content in markdown:\n"
            "1. `## Overview`: two to four sentences.\n"
            "2. `## Details`: the facts, grouped under `###` subheadings.\n"
            "3. `## Common Questions`: see below.\n"
            "4. `## Sources`: one line per cited source, `[n] label`."
        ),
    ),
    Fragment(
        id="intelligence_content_structure",
        name="Content Structure",
        description="Markdown structure for intelligence skills",
        tier=FragmentTier.EDITABLE,
        content=(
            "Structure the content in markdown:\n"
            "1. `## Summary`: the key takeaways as short bullets.\n"
            "2. `## Signals`: observed patterns, each with when and where it "
            "was observed.\n"
            "3. `## Implications`: what the signals mean for the reader.\n"
            "4. `## Sources`: one line per cited source, `[n] label`."
        ),
    ),
    Fragment(
        id="skill_common_questions_requirement",
        name="Common Questions",
        description="Require a question/answer section",
        tier=FragmentTier.EDITABLE,
        content=(
            "Include a `## Common Questions` section with three to eight "
            "questions a customer or colleague would realistically ask, each "
            "answered in one or two cited sentences."
        ),
    ),
    Fragment(
        id="skill_citation_embedding",
        name="Citation Placement",
        description="Where citations go",
        tier=FragmentTier.CAUTION,
        content=(
            "Place the citation marker at the end of the sentence or list item "
            "it supports. A sentence combining facts from several sources "
            "carries all of their numbers."
        ),
    ),
    Fragment(
        id="skill_list_completeness",
        name="List Completeness",
        description="Do not truncate enumerations",
        tier=FragmentTier.EDITABLE,
        content=(
            "When a source enumerates items (supported platforms, plan tiers, "
            "steps, error codes), reproduce the complete list. Never shorten "
            "with \"etc.\" or \"and more\"."
        ),
    ),
    Fragment(
        id="skill_update_structure",
        name="Update Rules",
        description="How to revise an existing skill",
        tier=FragmentTier.CAUTION,
        content=(
            "Keep existing section headings unless a change is required by the "
            "new material. Integrate new facts into the section they belong to "
            "rather than appending a catch-all section. Record every added, "
            "updated or removed section in the changes report."
        ),
    ),
    Fragment(
        id="skill_refresh_structure",
        name="Reformat Rules",
        description="How to reformat without changing meaning",
        tier=FragmentTier.CAUTION,
        content=(
            "Reorganize content into the required structure. Preserve every "
            "cited fact and keep each fact attached to the same source. "
            "Citation numbers will be normalized after your response, so keep "
            "using the numbers shown."
        ),
    ),
    Fragment(
        id="scope_definition",
        name="Scope Definition",
        description="Describe the skill's boundary",
        tier=FragmentTier.CAUTION,
        content=(
            "Return a scopeDefinition with: `covers` (one or two sentences, "
            "never empty), `futureAdditions` (related topics that belong in "
            "this skill once sources exist), and `notIncluded` (adjacent "
            "topics that belong elsewhere)."
        ),
    ),
    Fragment(
        id="contradiction_detection",
        name="Contradictions",
        description="Report conflicting sources",
        tier=FragmentTier.CAUTION,
        content=(
            "If two sources disagree, do not pick a winner silently. Report "
            "each conflict in `contradictions` with both sides quoted, a "
            "severity (low, medium or high) and a recommendation for a human "
            "reviewer. In the content, state only what is not in dispute."
        ),
    ),
    Fragment(
        id="skill_matching",
        name="Matching Criteria",
        description="How to judge a source/skill match",
        tier=FragmentTier.EDITABLE,
        content=(
            "A source matches a skill when its main subject falls inside the "
            "skill's `covers` or `futureAdditions`. Anything listed under "
            "`notIncluded` is not a match. Use high confidence only when the "
            "fit is explicit, medium when it is partial, and low when it is "
            "tangential."
        ),
    ),
    Fragment(
        id="diff_output",
        name="Change Report",
        description="Describe what changed",
        tier=FragmentTier.LOCKED,
        content=(
            "Return a `changes` object listing section headings added, "
            "updated and removed, and a one-paragraph `changeSummary` a "
            "reviewer can read before approving the revision. Also return "
            "`extractedContent` with the text taken from each new source."
        ),
    ),
    Fragment(
        id="json_output",
        name="Output Format",
        description="Single JSON object only",
        tier=FragmentTier.LOCKED,
        content=(
            "Respond with exactly one JSON object that matches the expected "
            "output schema. Do not add commentary before or after it."
        ),
    ),
]
