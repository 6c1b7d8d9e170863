"""
Library guideline fragments.

These are the dynamic overrides read by FragmentLibraryContextResolver
(``library_guidelines_<library_id>``). They are not referenced by any
composition; the builder appends them as Library Context.
"""

from typing import List

from skillsynth.app.prompts.fragment import Fragment, FragmentTier


LIBRARY_FRAGMENTS: List[Fragment] = [
    Fragment(
        id="library_guidelines_knowledge",
        name="Knowledge Library Guidelines",
        tier=FragmentTier.CAUTION,
        content=(
            "Knowledge skills answer product and technical questions. Name "
            "the product area in the title, include exact limits and "
            "version numbers, and call out behaviour that differs by plan "
            "or deployment type."
        ),
    ),
    Fragment(
        id="library_guidelines_it",
        name="IT Library Guidelines",
        tier=FragmentTier.CAUTION,
        content=(
            "IT skills describe internal systems. Give numbered procedures, "
            "the access required for each step, and the team that owns the "
            "system. Never include credentials."
        ),
    ),
    Fragment(
        id="library_guidelines_gtm",
        name="GTM Library Guidelines",
        tier=FragmentTier.CAUTION,
        content=(
            "GTM skills support selling. Separate positioning from proof "
            "points, attribute competitive claims to their source, and date "
            "anything related to pricing or packaging."
        ),
    ),
    Fragment(
        id="library_guidelines_talent",
        name="Talent Library Guidelines",
        tier=FragmentTier.CAUTION,
        content=(
            "Talent skills describe hiring and people processes. Use "
            "inclusive language and never include personal data about "
            "candidates or employees."
        ),
    ),
    Fragment(
        id="library_guidelines_customers",
        name="Customers Library Guidelines",
        tier=FragmentTier.CAUTION,
        content=(
            "Customer skills capture one account's context. Record the "
            "deployment, key contacts by role, commitments made and open "
            "issues, each with its source."
        ),
    ),
]
