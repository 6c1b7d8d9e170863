"""
Role and task-framing fragments.

Role fragments establish who the model is for an operation. Task-framing
fragments state what the single request must accomplish. Both are LOCKED:
they define the operation itself, and editing them changes what the
orchestrator's output parsing can rely on.
"""

from typing import List

from skillsynth.app.prompts.fragment import Fragment, FragmentTier


ROLE_FRAGMENTS: List[Fragment] = [
    Fragment(
        id="role_skill_creation",
        name="Role",
        description="Role for synthesizing a new skill from sources",
        tier=FragmentTier.LOCKED,
        content=(
            "You are a knowledge engineer who turns raw source material "
            "(tickets, chats, call transcripts, web pages and documents) into "
            "a single authoritative skill document. You write for support and "
            "field teams who need accurate answers quickly."
        ),
    ),
    Fragment(
        id="role_skill_update",
        name="Role",
        description="Role for revising an existing skill",
        tier=FragmentTier.LOCKED,
        content=(
            "You are the maintainer of an existing skill document. You revise "
            "it using newly supplied source material while preserving the "
            "document's established structure, citations and intent."
        ),
    ),
    Fragment(
        id="role_skill_matching",
        name="Role",
        description="Role for routing a source to existing skills",
        tier=FragmentTier.LOCKED,
        content=(
            "You are a librarian who decides which existing skill documents a "
            "new piece of source material belongs to, based strictly on each "
            "skill's declared scope."
        ),
    ),
    Fragment(
        id="role_skill_format_refresh",
        name="Role",
        description="Role for reformatting a skill without changing facts",
        tier=FragmentTier.LOCKED,
        content=(
            "You are an editor who restructures an existing skill document to "
            "the current format standard. You change organization and "
            "presentation only. Facts and citation meaning must not change."
        ),
    ),
]


TASK_FRAMING_FRAGMENTS: List[Fragment] = [
    Fragment(
        id="task_framing_creation",
        name="Task",
        description="Create a new skill from all supplied sources",
        tier=FragmentTier.LOCKED,
        content=(
            "Create one new skill document from the source materials in the "
            "user message. Decide an appropriate title and scope, synthesize "
            "the relevant facts, cite every claim, and report any "
            "contradictions between sources."
        ),
    ),
    Fragment(
        id="task_framing_update",
        name="Task",
        description="Regenerate an existing skill from its full source set",
        tier=FragmentTier.LOCKED,
        content=(
            "Update the existing skill using the new source material together "
            "with all previously incorporated sources. You may restructure the "
            "document where that improves it. Keep the existing citation "
            "numbers for sources that remain cited and use the numbers shown "
            "for new sources."
        ),
    ),
    Fragment(
        id="task_framing_matching",
        name="Task",
        description="Match one source to candidate skills",
        tier=FragmentTier.LOCKED,
        content=(
            "Determine which of the listed skills the source material should "
            "be incorporated into. A source may match several skills or none. "
            "If no skill's scope fits, recommend creating a new skill."
        ),
    ),
    Fragment(
        id="task_framing_format_refresh",
        name="Task",
        description="Reformat an existing skill",
        tier=FragmentTier.LOCKED,
        content=(
            "Rewrite the existing skill to follow the content structure below. "
            "Use the incorporated sources only to verify and preserve meaning. "
            "Do not add new facts and do not drop cited facts."
        ),
    ),
    Fragment(
        id="task_framing_foundational_creation",
        name="Task",
        description="Create a skill against a pre-defined scope",
        tier=FragmentTier.LOCKED,
        content=(
            "Create a foundational skill whose title and scope are already "
            "decided. Extract only content that falls inside the stated scope. "
            "Ignore source material listed as not included, and do not widen "
            "or rename the scope."
        ),
    ),
    Fragment(
        id="task_framing_foundational_update",
        name="Task",
        description="Append scope-relevant content from new sources",
        tier=FragmentTier.LOCKED,
        content=(
            "Extend the existing skill with content from the new source "
            "material that falls inside its fixed scope. Append or extend "
            "sections; do not rewrite or remove existing content. The title "
            "and scope are pinned and must be returned unchanged."
        ),
    ),
]
