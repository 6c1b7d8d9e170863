"""
Library-context boundary.

Library-specific guidance is resolved in two steps:

1. A dynamic override from an injected LibraryContextResolver (by default,
   the ``library_guidelines_<library_id>`` fragment in the registry).
2. A static default text per known library.

An unknown library with neither override nor default is a configuration
defect and raises ConfigurationError.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping, Optional, Protocol

from skillsynth.app.errors import ConfigurationError
from skillsynth.app.prompts.fragment_registry import FragmentRegistry

logger = logging.getLogger(__name__)


LIBRARY_GUIDELINE_PREFIX = "library_guidelines_"


DEFAULT_LIBRARY_CONTEXT: Mapping[str, str] = MappingProxyType({
    "knowledge": (
        "This skill belongs to the Knowledge library: product and technical "
        "reference material used to answer customer questions. Favour precise "
        "facts, supported configurations, limits and version details."
    ),
    "it": (
        "This skill belongs to the IT library: internal systems, access "
        "procedures and troubleshooting runbooks. Favour step-by-step "
        "procedures and name the owning team for each system."
    ),
    "gtm": (
        "This skill belongs to the Go-To-Market library: positioning, pricing "
        "guidance, competitive notes and sales plays. Keep claims tied to "
        "sources and mark anything time-sensitive."
    ),
    "talent": (
        "This skill belongs to the Talent library: hiring process, role "
        "definitions, interview guidance and people policies. Use neutral, "
        "inclusive language."
    ),
    "customers": (
        "This skill belongs to the Customers library: account-specific "
        "context such as deployments, contacts, commitments and open issues. "
        "Never mix information between customers."
    ),
    "prompts": (
        "This item belongs to the Prompts library: reusable instruction text "
        "for other assistants. Preserve placeholders and formatting exactly."
    ),
    "personas": (
        "This item belongs to the Personas library: descriptions of buyer and "
        "user roles, their goals, objections and vocabulary."
    ),
    "templates": (
        "This item belongs to the Templates library: reusable document "
        "structures. Keep section headings stable and describe each section's "
        "purpose."
    ),
    "views": (
        "This item belongs to the Views library: saved perspectives over other "
        "libraries. Describe what the view includes and why."
    ),
})


class LibraryContextResolver(Protocol):
    """
    Dynamic override lookup for library guidance.

    Returns None when no override exists.
    """

    def resolve(self, library_id: str) -> Optional[str]:
        ...


class FragmentLibraryContextResolver:
    """
    Reads ``library_guidelines_<library_id>`` fragments as overrides.
    """

    def __init__(self, fragments: FragmentRegistry) -> None:
        self._fragments = fragments

    def resolve(self, library_id: str) -> Optional[str]:
        fragment = self._fragments.find(f"{LIBRARY_GUIDELINE_PREFIX}{library_id}")
        if fragment is None or not fragment.has_content:
            return None
        return fragment.content


class LibraryContextProvider:
    """
    Resolves library guidance with a required static fallback.
    """

    def __init__(
        self,
        *,
        resolver: Optional[LibraryContextResolver] = None,
        defaults: Mapping[str, str] = DEFAULT_LIBRARY_CONTEXT,
    ) -> None:
        self._resolver = resolver
        self._defaults = defaults

    def resolve(self, library_id: str) -> str:
        if self._resolver is not None:
            override = self._resolver.resolve(library_id)
            if override:
                return override

        default = self._defaults.get(library_id)
        if default is None:
            raise ConfigurationError(
                f'Unknown library: "{library_id}". '
                f"Known libraries: {', '.join(sorted(self._defaults))}"
            )

        logger.debug("No library override for %s, using static default", library_id)
        return default
